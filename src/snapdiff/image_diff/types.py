from __future__ import annotations

from typing import NamedTuple

import numpy as np
import numpy.typing as npt


class DecodedImage(NamedTuple):
    width: int
    height: int
    # uint8, shape (height, width, 4), straight (non-premultiplied) RGBA
    pixels: npt.NDArray[np.uint8]

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


class DiffOutput(NamedTuple):
    diff_pixel_count: int
    diff_image: DecodedImage
