"""Pure pixel filters for the preprocessing chain.

Every function takes a ``uint8`` numpy array and returns a freshly allocated
one; inputs are never modified. Grayscale buffers are ``(h, w)``, rasters are
``(h, w, 4)`` RGBA.
"""
from __future__ import annotations

from typing import NamedTuple

import cv2
import numpy as np


class ClipPoints(NamedTuple):
    low: int
    high: int


def _round_half_up(values: np.ndarray) -> np.ndarray:
    # half-up, unlike np.rint
    return np.floor(values + 0.5)


def _to_uint8(values: np.ndarray) -> np.ndarray:
    return np.clip(_round_half_up(values), 0, 255).astype(np.uint8)


def to_grayscale(bgr: np.ndarray) -> np.ndarray:
    """Luminance-weighted grayscale (0.299 R + 0.587 G + 0.114 B)."""
    if bgr.ndim == 2:
        return bgr.copy()
    code = cv2.COLOR_BGRA2GRAY if bgr.shape[2] == 4 else cv2.COLOR_BGR2GRAY
    return cv2.cvtColor(bgr, code)


def _blur_axis(buffer: np.ndarray, radius: int, axis: int) -> np.ndarray:
    pad_width = [(0, 0), (0, 0)]
    pad_width[axis] = (radius, radius)
    padded = np.pad(buffer.astype(np.int64), pad_width, mode="edge")
    lead = [(0, 0), (0, 0)]
    lead[axis] = (1, 0)
    prefix = np.pad(padded, lead, mode="constant").cumsum(axis=axis)

    diameter = 2 * radius + 1
    length = buffer.shape[axis]
    upper = np.take(prefix, np.arange(length) + diameter, axis=axis)
    lower = np.take(prefix, np.arange(length), axis=axis)
    return _to_uint8((upper - lower) / diameter)


def box_blur(gray: np.ndarray, radius: int) -> np.ndarray:
    """Two-pass separable mean filter with edge replication.

    Each pass slides a (2r+1) window over a prefix sum, so the cost does not
    depend on the radius. Radius 0 returns an unchanged copy.
    """
    if radius <= 0:
        return gray.copy()
    horizontal = _blur_axis(gray, radius, axis=1)
    return _blur_axis(horizontal, radius, axis=0)


def histogram(gray: np.ndarray) -> np.ndarray:
    return np.bincount(gray.ravel(), minlength=256)


def compute_clip_points(gray: np.ndarray, clip_percent: float) -> ClipPoints:
    """Intensities where the darkest / brightest ``clip_percent`` of pixels end.

    Falls back to the full range when the result is degenerate (flat image or
    a clip percentage that swallows the whole histogram).
    """
    counts = histogram(gray)
    clip_count = int(_round_half_up(np.float64(clip_percent) / 100 * gray.size))

    low = int(np.searchsorted(np.cumsum(counts), clip_count, side="left"))
    high = 255 - int(np.searchsorted(np.cumsum(counts[::-1]), clip_count, side="left"))

    if low >= high:
        return ClipPoints(0, 255)
    return ClipPoints(low, high)


def compute_median(gray: np.ndarray) -> int:
    if gray.size == 0:
        return 128
    cumulative = np.cumsum(histogram(gray))
    return int(np.searchsorted(cumulative, gray.size / 2, side="left"))


def contrast_stretch(gray: np.ndarray, low: int, high: int) -> np.ndarray:
    span = (high - low) or 1
    return _to_uint8((gray.astype(np.float64) - low) / span * 255)


def should_invert(gray: np.ndarray, *, auto_invert: bool, force_invert: bool, cutoff: int = 128) -> bool:
    """Dark-mode detection: a median below ``cutoff`` means light text on a dark background."""
    if auto_invert:
        return compute_median(gray) < cutoff
    return force_invert


def invert(gray: np.ndarray) -> np.ndarray:
    return 255 - gray


def global_threshold(gray: np.ndarray, threshold: float) -> np.ndarray:
    return np.where(gray >= threshold, 255, 0).astype(np.uint8)


def summed_area_table(gray: np.ndarray) -> np.ndarray:
    """Integral image with a leading zero row and column.

    ``sat[y + 1, x + 1]`` is the sum of every pixel at or above-left of (x, y).
    """
    padded = np.pad(gray.astype(np.int64), ((1, 0), (1, 0)), mode="constant")
    return padded.cumsum(axis=0).cumsum(axis=1)


def adaptive_threshold(gray: np.ndarray, radius: int, bias: float) -> np.ndarray:
    """Per-pixel threshold at the local window mean plus ``bias``.

    Windows are clamped to the image, with the divisor shrunk to the real
    window area near the edges. Four table lookups per pixel.
    """
    height, width = gray.shape
    sat = summed_area_table(gray)

    rows = np.arange(height)
    cols = np.arange(width)
    y0 = np.clip(rows - radius, 0, height - 1)[:, None]
    y1 = np.clip(rows + radius, 0, height - 1)[:, None]
    x0 = np.clip(cols - radius, 0, width - 1)[None, :]
    x1 = np.clip(cols + radius, 0, width - 1)[None, :]

    window_sum = sat[y1 + 1, x1 + 1] - sat[y0, x1 + 1] - sat[y1 + 1, x0] + sat[y0, x0]
    area = (x1 - x0 + 1) * (y1 - y0 + 1)
    local_threshold = window_sum / area + bias
    return np.where(gray >= local_threshold, 255, 0).astype(np.uint8)


def gray_to_rgba(gray: np.ndarray) -> np.ndarray:
    alpha = np.full_like(gray, 255)
    return np.dstack([gray, gray, gray, alpha])


def laplacian_sharpen(rgba: np.ndarray, strength: float) -> np.ndarray:
    """3x3 cross-shaped sharpening kernel with centre ``strength``.

    Arms weigh ``-(strength - 1) / 4`` so the kernel sums to one and flat
    regions keep their value. Border pixels are copied from the source.
    """
    height, width = rgba.shape[:2]
    out = rgba.copy()
    if height < 3 or width < 3:
        return out

    arm = -(strength - 1) / 4
    source = rgba[..., :3].astype(np.float64)
    centre = source[1:-1, 1:-1]
    neighbours = source[:-2, 1:-1] + source[2:, 1:-1] + source[1:-1, :-2] + source[1:-1, 2:]
    out[1:-1, 1:-1, :3] = _to_uint8(strength * centre + arm * neighbours)
    out[1:-1, 1:-1, 3] = 255
    return out


def pad(rgba: np.ndarray, padding: int) -> np.ndarray:
    """Surround the raster with ``padding`` pixels of opaque white."""
    if padding <= 0:
        return rgba.copy()
    return cv2.copyMakeBorder(
        rgba,
        padding,
        padding,
        padding,
        padding,
        cv2.BORDER_CONSTANT,
        value=(255, 255, 255, 255),
    )
