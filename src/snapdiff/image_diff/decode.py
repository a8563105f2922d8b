from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image

from snapdiff.errors import ArtifactWriteError, DecodeError

from .types import DecodedImage

logger = logging.getLogger(__name__)

# Pillow keeps 16-bit greyscale PNGs at full depth in these modes.
_WIDE_GREY_MODES = frozenset({"I", "I;16", "I;16B", "I;16L"})


def _to_rgba(img: Image.Image) -> np.ndarray:
    if img.mode in _WIDE_GREY_MODES:
        grey = (np.asarray(img).astype(np.uint32) >> 8).clip(0, 255).astype(np.uint8)
        alpha = np.full(grey.shape, 255, dtype=np.uint8)
        return np.dstack((grey, grey, grey, alpha))

    if img.mode == "RGBA":
        return np.array(img, dtype=np.uint8)

    rgba = img.convert("RGBA")
    try:
        return np.array(rgba, dtype=np.uint8)
    finally:
        rgba.close()


def decode_png(path: str | Path) -> DecodedImage:
    """Load a PNG file into an RGBA buffer, exactly as stored.

    No resizing, colour management or alpha premultiplication happens here.
    Raises ``DecodeError`` for a missing, unreadable, corrupt or non-PNG file.
    """
    path = Path(path)
    try:
        with Image.open(path) as img:
            if img.format != "PNG":
                raise DecodeError(path, f"expected PNG data, found {img.format or 'unknown'}")
            img.load()
            pixels = _to_rgba(img)
    except FileNotFoundError as e:
        raise DecodeError(path, "file does not exist") from e
    except Image.DecompressionBombError as e:
        raise DecodeError(path, str(e)) from e
    except (OSError, SyntaxError, ValueError) as e:
        # UnidentifiedImageError is an OSError; truncated or broken PNG
        # chunks surface as OSError or SyntaxError depending on the chunk.
        raise DecodeError(path, str(e) or type(e).__name__) from e

    height, width = pixels.shape[:2]
    logger.debug("Decoded %s (%dx%d)", path, width, height)
    return DecodedImage(width=width, height=height, pixels=pixels)


def encode_png(image: DecodedImage, path: str | Path) -> None:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with Image.fromarray(np.ascontiguousarray(image.pixels, dtype=np.uint8)) as img:
            img.save(path, "PNG")
    except OSError as e:
        logger.exception("Failed to write PNG", extra={"path": str(path)})
        raise ArtifactWriteError(path, str(e)) from e
