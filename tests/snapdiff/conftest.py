from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path

import pytest
from PIL import Image

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)

Color = tuple[int, int, int, int]


@pytest.fixture
def write_png(tmp_path: Path) -> Callable[..., Path]:
    def _write(
        name: str,
        width: int,
        height: int,
        color: Color = RED,
        pixels: Mapping[tuple[int, int], Color] | None = None,
    ) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        img = Image.new("RGBA", (width, height), color)
        for xy, value in (pixels or {}).items():
            img.putpixel(xy, value)
        img.save(path, "PNG")
        return path

    return _write
