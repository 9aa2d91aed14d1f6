from __future__ import annotations

"""Errors raised by the image side of the pipeline. The text parser never raises."""
from typing import Optional


class EarningsOCRError(Exception):
    """Base class for earnings_ocr errors."""


class ImagePreprocessingError(EarningsOCRError):
    """The source image could not be turned into an OCR-ready raster."""

    def __init__(self, message: str, *, reason: str = "undecodable", cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.cause = cause


class OcrEngineError(EarningsOCRError):
    """The OCR engine is unavailable or did not answer in time."""
