from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from .parsed_record import ParsedRecord


class OcrResult(BaseModel):
    text: str
    confidence: float = Field(default=0.0, ge=0, le=100)
    preprocessed_image: Optional[bytes] = Field(default=None, repr=False)


class ExtractionResult(BaseModel):
    ocr: OcrResult
    record: ParsedRecord
