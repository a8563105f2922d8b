"""
Per-pixel comparison of two decoded images.

Pixels are compared in YIQ space after blending onto white, so transparent
and opaque renderings of the same colour match. Pixels that look like
anti-aliasing in either image are not counted as differences. The rendered
diff shows counted pixels in red, anti-aliasing in yellow and everything
else as a faded greyscale copy of the baseline.
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from .types import DecodedImage, DiffOutput

# Matching threshold on a 0-1 scale; smaller is more sensitive. Not exposed to
# callers: it decides pixel identity, not the pass/fail verdict.
PIXEL_TOLERANCE = 0.1

# Largest possible weighted YIQ distance between two colours.
MAX_YIQ_DELTA = 35215.0

DIFF_COLOR = (255, 0, 0)
AA_COLOR = (255, 255, 0)
FADE_ALPHA = 0.1

# Neighbour visiting order matters for tie-breaking: column-major, like the
# reference scan.
_NEIGHBOUR_DX = np.array([dx for dx in (-1, 0, 1) for dy in (-1, 0, 1) if dx or dy])
_NEIGHBOUR_DY = np.array([dy for dx in (-1, 0, 1) for dy in (-1, 0, 1) if dx or dy])


def _rgb2y(rgb: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    return rgb[..., 0] * 0.29889531 + rgb[..., 1] * 0.58662247 + rgb[..., 2] * 0.11448223


def _rgb2i(rgb: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    return rgb[..., 0] * 0.59597799 - rgb[..., 1] * 0.27417610 - rgb[..., 2] * 0.32180189


def _rgb2q(rgb: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    return rgb[..., 0] * 0.21147017 - rgb[..., 1] * 0.52261711 + rgb[..., 2] * 0.31114694


def _blend_on_white(pixels: npt.NDArray[np.uint8]) -> npt.NDArray[np.float64]:
    rgba = pixels.astype(np.float64)
    alpha = rgba[..., 3:4] / 255.0
    return 255.0 + (rgba[..., :3] - 255.0) * alpha


def _pack(pixels: npt.NDArray[np.uint8]) -> npt.NDArray[np.uint32]:
    return np.ascontiguousarray(pixels).view(np.uint32)[..., 0]


def _on_edge(
    xs: npt.NDArray[np.intp], ys: npt.NDArray[np.intp], width: int, height: int
) -> npt.NDArray[np.int32]:
    edge = (xs == 0) | (ys == 0) | (xs == width - 1) | (ys == height - 1)
    return edge.astype(np.int32)


def _neighbour(
    xs: npt.NDArray[np.intp], ys: npt.NDArray[np.intp], k: int, width: int, height: int
) -> tuple[npt.NDArray[np.bool_], npt.NDArray[np.intp], npt.NDArray[np.intp]]:
    nx = xs + _NEIGHBOUR_DX[k]
    ny = ys + _NEIGHBOUR_DY[k]
    valid = (nx >= 0) & (nx < width) & (ny >= 0) & (ny < height)
    return valid, np.clip(nx, 0, width - 1), np.clip(ny, 0, height - 1)


def _has_many_siblings(
    packed: npt.NDArray[np.uint32], xs: npt.NDArray[np.intp], ys: npt.NDArray[np.intp]
) -> npt.NDArray[np.bool_]:
    """True where more than two of the 3x3 neighbours repeat the centre pixel exactly."""
    height, width = packed.shape
    zeroes = _on_edge(xs, ys, width, height)
    centre = packed[ys, xs]
    for k in range(len(_NEIGHBOUR_DX)):
        valid, nx, ny = _neighbour(xs, ys, k, width, height)
        zeroes += valid & (packed[ny, nx] == centre)
    return zeroes > 2


def _antialiased(
    luma: npt.NDArray[np.float64],
    packed: npt.NDArray[np.uint32],
    other_packed: npt.NDArray[np.uint32],
    xs: npt.NDArray[np.intp],
    ys: npt.NDArray[np.intp],
) -> npt.NDArray[np.bool_]:
    """Detect anti-aliased pixels, after Vysniauskas (2009).

    A pixel is anti-aliased when its neighbourhood holds both a darker and a
    brighter neighbour, at most two identical ones, and the darkest or the
    brightest neighbour sits in a flat region of both images.
    """
    height, width = luma.shape
    zeroes = _on_edge(xs, ys, width, height)
    centre = luma[ys, xs]

    deltas = np.zeros((len(_NEIGHBOUR_DX), len(xs)), dtype=np.float64)
    for k in range(len(_NEIGHBOUR_DX)):
        valid, nx, ny = _neighbour(xs, ys, k, width, height)
        delta = np.where(valid, centre - luma[ny, nx], 0.0)
        zeroes += valid & (delta == 0)
        deltas[k] = delta

    columns = np.arange(len(xs))
    min_k = deltas.argmin(axis=0)
    max_k = deltas.argmax(axis=0)
    candidate = (zeroes <= 2) & (deltas[min_k, columns] < 0) & (deltas[max_k, columns] > 0)

    min_x = np.clip(xs + _NEIGHBOUR_DX[min_k], 0, width - 1)
    min_y = np.clip(ys + _NEIGHBOUR_DY[min_k], 0, height - 1)
    max_x = np.clip(xs + _NEIGHBOUR_DX[max_k], 0, width - 1)
    max_y = np.clip(ys + _NEIGHBOUR_DY[max_k], 0, height - 1)

    darkest_flat = _has_many_siblings(packed, min_x, min_y) & _has_many_siblings(
        other_packed, min_x, min_y
    )
    brightest_flat = _has_many_siblings(packed, max_x, max_y) & _has_many_siblings(
        other_packed, max_x, max_y
    )
    return candidate & (darkest_flat | brightest_flat)


def _faded_background(pixels: npt.NDArray[np.uint8]) -> npt.NDArray[np.uint8]:
    rgba = pixels.astype(np.float64)
    luma = _rgb2y(rgba[..., :3])
    faded = 255.0 + (luma - 255.0) * (FADE_ALPHA * rgba[..., 3] / 255.0)
    grey = np.clip(np.rint(faded), 0, 255).astype(np.uint8)
    out = np.empty(pixels.shape, dtype=np.uint8)
    out[..., 0] = grey
    out[..., 1] = grey
    out[..., 2] = grey
    out[..., 3] = 255
    return out


def diff_images(baseline: DecodedImage, actual: DecodedImage) -> DiffOutput:
    """Compare the overlapping top-left region of two images.

    Returns the exact number of differing pixels together with the rendered
    diff, whose size is always the intersection of both inputs.
    """
    width = min(baseline.width, actual.width)
    height = min(baseline.height, actual.height)
    before = np.ascontiguousarray(baseline.pixels[:height, :width])
    after = np.ascontiguousarray(actual.pixels[:height, :width])

    output = _faded_background(before)

    before_packed = _pack(before)
    after_packed = _pack(after)
    if np.array_equal(before_packed, after_packed):
        return DiffOutput(0, DecodedImage(width, height, output))

    before_rgb = _blend_on_white(before)
    after_rgb = _blend_on_white(after)
    before_y = _rgb2y(before_rgb)
    after_y = _rgb2y(after_rgb)
    dy = before_y - after_y
    di = _rgb2i(before_rgb) - _rgb2i(after_rgb)
    dq = _rgb2q(before_rgb) - _rgb2q(after_rgb)
    delta = 0.5053 * dy * dy + 0.299 * di * di + 0.1957 * dq * dq
    # Exactly equal pixels never count, whatever the float noise.
    delta[before_packed == after_packed] = 0.0

    max_delta = MAX_YIQ_DELTA * PIXEL_TOLERANCE * PIXEL_TOLERANCE
    ys, xs = np.nonzero(delta > max_delta)

    aa = _antialiased(before_y, before_packed, after_packed, xs, ys) | _antialiased(
        after_y, after_packed, before_packed, xs, ys
    )

    output[ys[aa], xs[aa], :3] = AA_COLOR
    output[ys[~aa], xs[~aa], :3] = DIFF_COLOR

    return DiffOutput(int(np.count_nonzero(~aa)), DecodedImage(width, height, output))
