from __future__ import annotations

"""End-to-end screenshot → record pipeline."""
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from ..exceptions import ImagePreprocessingError, OcrEngineError
from ..models.ocr_result import ExtractionResult
from ..models.preprocess_config import PreprocessConfig
from .image_safety import ImageSafetyService
from .ocr import OCRService
from .parser import ParserService
from .preprocessing import PreprocessingService

LOGGER = logging.getLogger(__name__)


class ExtractionPipeline:
    """Validate → preprocess (thread pool) → OCR (single worker) → parse.

    Image problems surface as ``ImagePreprocessingError`` before OCR starts.
    """

    def __init__(
        self,
        ocr: OCRService,
        *,
        preprocessor: Optional[PreprocessingService] = None,
        parser: Optional[ParserService] = None,
        safety: Optional[ImageSafetyService] = None,
        workers: int = 2,
    ) -> None:
        self._ocr = ocr
        self._pre = preprocessor or PreprocessingService()
        self._parser = parser or ParserService()
        self._safety = safety or ImageSafetyService()
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="preprocess")

    async def run(
        self,
        image_bytes: bytes,
        config: Optional[PreprocessConfig] = None,
        *,
        preprocess: bool = True,
    ) -> ExtractionResult:
        report = self._safety.validate(image_bytes)
        if not report.ok:
            raise ImagePreprocessingError(f"Image rejected: {report.reason}", reason=report.reason or "rejected")

        prepared: Optional[bytes] = None
        if preprocess:
            loop = asyncio.get_running_loop()
            prepared = await loop.run_in_executor(self._executor, self._pre.preprocess, image_bytes, config)

        result = await self._ocr.recognize(prepared if prepared is not None else image_bytes)
        if result is None:
            raise OcrEngineError("OCR did not finish in time")
        if prepared is not None:
            result = result.model_copy(update={"preprocessed_image": prepared})

        record = self._parser.parse(result.text)
        LOGGER.info(
            "Extracted %s record (confidence %.1f, %d offers)",
            record.entry_type.value,
            result.confidence,
            len(record.offers),
        )
        return ExtractionResult(ocr=result, record=record)

    async def close(self) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._executor.shutdown, True)
        await self._ocr.close()
