from __future__ import annotations

"""Validates uploaded screenshots before preprocessing."""
from dataclasses import dataclass


@dataclass
class ImageSafetyReport:
    ok: bool
    reason: str | None = None


class ImageSafetyService:
    MIN_SIZE = 64  # bytes; smaller than any real PNG/JPEG header plus pixels
    MAX_SIZE = 20 * 1024 * 1024

    def __init__(self, *, min_size: int = MIN_SIZE, max_size: int = MAX_SIZE) -> None:
        self._min_size = min_size
        self._max_size = max_size

    def validate(self, image_bytes: bytes) -> ImageSafetyReport:
        size = len(image_bytes)
        if size == 0:
            return ImageSafetyReport(False, "empty")
        if size < self._min_size:
            return ImageSafetyReport(False, "too_small")
        if size > self._max_size:
            return ImageSafetyReport(False, "too_large")
        return ImageSafetyReport(True, None)
