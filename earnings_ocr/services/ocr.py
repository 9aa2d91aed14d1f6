from __future__ import annotations

"""Adapter around the external OCR engine (Tesseract via pytesseract)."""
import asyncio
import io
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

import pytesseract
from PIL import Image

from ..exceptions import OcrEngineError
from ..models.ocr_result import OcrResult

LOGGER = logging.getLogger(__name__)

OcrEngine = Callable[[bytes], OcrResult]


class TesseractEngine:
    """``(image_bytes) -> OcrResult`` backed by the Tesseract binary.

    The binary is looked up once, on the first call.
    """

    def __init__(self, lang: str = "eng", config: str = "--psm 6") -> None:
        self._lang = lang
        self._config = config
        self._version: Optional[str] = None

    def _ensure_ready(self) -> None:
        if self._version is not None:
            return
        try:
            self._version = str(pytesseract.get_tesseract_version())
        except pytesseract.TesseractNotFoundError as exc:
            raise OcrEngineError("Tesseract binary is not installed or not on PATH") from exc
        LOGGER.info("Using Tesseract %s (lang=%s)", self._version, self._lang)

    def __call__(self, image_bytes: bytes) -> OcrResult:
        self._ensure_ready()
        try:
            image = Image.open(io.BytesIO(image_bytes))
        except OSError as exc:
            raise OcrEngineError("Image handed to Tesseract could not be opened") from exc
        with image:
            image.load()
            try:
                text = pytesseract.image_to_string(image, lang=self._lang, config=self._config)
                data = pytesseract.image_to_data(
                    image, lang=self._lang, config=self._config, output_type=pytesseract.Output.DICT
                )
            except pytesseract.TesseractError as exc:
                raise OcrEngineError(f"Tesseract failed (lang={self._lang}): {exc.message}") from exc
        return OcrResult(text=text, confidence=self._mean_confidence(data.get("conf", [])))

    @staticmethod
    def _mean_confidence(raw_scores: List[object]) -> float:
        scores: List[float] = []
        for raw in raw_scores:
            try:
                score = float(raw)
            except (TypeError, ValueError):
                continue
            if score >= 0:
                scores.append(score)
        if not scores:
            return 0.0
        return min(100.0, sum(scores) / len(scores))


class OCRService:
    """Owns one lazily created engine and serializes recognition on a single worker thread."""

    def __init__(
        self,
        engine: Optional[OcrEngine] = None,
        *,
        lang: str = "eng",
        timeout: float = 18.0,
    ) -> None:
        self._engine = engine
        self._lang = lang
        self._timeout = timeout
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ocr")

    def _get_engine(self) -> OcrEngine:
        if self._engine is None:
            self._engine = TesseractEngine(lang=self._lang)
        return self._engine

    async def recognize(self, image_bytes: bytes, timeout: Optional[float] = None) -> Optional[OcrResult]:
        loop = asyncio.get_running_loop()
        limit = self._timeout if timeout is None else timeout
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(self._executor, self._perform_ocr, image_bytes),
                timeout=limit,
            )
        except asyncio.TimeoutError:
            LOGGER.warning("OCR timed out after %.2f seconds", limit)
            return None

    def _perform_ocr(self, image_bytes: bytes) -> OcrResult:
        result = self._get_engine()(image_bytes)
        return result.model_copy(update={"text": self._postprocess(result.text)})

    def _postprocess(self, text: str) -> str:
        lines = []
        for line in text.splitlines():
            cleaned = line.rstrip()
            if not cleaned.strip():
                continue
            lines.append(cleaned.replace("§", "$"))
        return "\n".join(lines)

    async def close(self) -> None:
        LOGGER.info("Shutting down OCR executor")
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._executor.shutdown, True)
