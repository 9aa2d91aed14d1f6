from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import Settings, load_settings
from .exceptions import ImagePreprocessingError, OcrEngineError
from .i18n import Translator
from .models.ocr_result import ExtractionResult
from .models.parsed_record import ParsedRecord
from .models.preprocess_config import BinarizeMode
from .services.extractors import format_minutes
from .services.ocr import OCRService
from .services.parser import ParserService, RecordSchema
from .services.pipeline import ExtractionPipeline
from .services.preprocessing import PreprocessingService

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="earnings-ocr",
        description="Extract structured earnings data from a delivery-app summary screenshot.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("image", nargs="?", type=Path, help="Screenshot to process")
    source.add_argument("--text", type=Path, help="Parse previously recognized OCR text instead of an image")
    parser.add_argument("--adaptive", action="store_true", help="Use adaptive instead of global binarization")
    parser.add_argument("--no-preprocess", action="store_true", help="Hand the raw image to the OCR engine")
    parser.add_argument("--save-preprocessed", type=Path, help="Write the preprocessed PNG to this path")
    parser.add_argument("--session", action="store_true", help="Tag daily summaries as sessions")
    parser.add_argument("--json", action="store_true", help="Print the record as JSON")
    return parser


def build_pipeline(settings: Settings, *, adaptive: bool = False, session: bool = False) -> ExtractionPipeline:
    defaults = settings.preprocess
    if adaptive:
        defaults = defaults.merged({"binarize_mode": BinarizeMode.ADAPTIVE})
    schema = RecordSchema.SESSION if session or settings.session_schema else RecordSchema.FULL
    return ExtractionPipeline(
        OCRService(lang=settings.ocr_lang, timeout=settings.ocr_timeout),
        preprocessor=PreprocessingService(defaults),
        parser=ParserService(schema),
        workers=settings.preprocess_workers,
    )


def render(record: ParsedRecord, translator: Translator) -> str:
    missing = translator.translate("missing_field")
    lines = [translator.translate("detected_type", entry_type=record.entry_type.value)]
    fields = record.week if record.week is not None else record.day
    if fields is None:
        return "\n".join(lines)
    for name, value in fields.model_dump(exclude={"offers"}).items():
        if name in {"active_time", "total_time"}:
            value = format_minutes(value) or None
        lines.append(f"  {name}: {missing if value is None else value}")
    if record.day is not None:
        if not record.offers:
            lines.append(f"  {translator.translate('no_offers')}")
        for offer in record.offers:
            amount = missing if offer.total_earnings is None else f"${offer.total_earnings:.2f}"
            lines.append(f"  - {offer.store}: {amount}")
    return "\n".join(lines)


async def _run_image(args: argparse.Namespace, settings: Settings) -> ExtractionResult:
    pipeline = build_pipeline(settings, adaptive=args.adaptive, session=args.session)
    try:
        result = await pipeline.run(args.image.read_bytes(), preprocess=not args.no_preprocess)
    finally:
        await pipeline.close()
    if args.save_preprocessed and result.ocr.preprocessed_image:
        args.save_preprocessed.write_bytes(result.ocr.preprocessed_image)
        LOGGER.info("Saved preprocessed image to %s", args.save_preprocessed)
    return result


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    translator = Translator(default_locale=settings.locale)

    confidence: Optional[float] = None
    if args.text:
        schema = RecordSchema.SESSION if args.session or settings.session_schema else RecordSchema.FULL
        record = ParserService(schema).parse(args.text.read_text(encoding="utf-8"))
    else:
        try:
            result = asyncio.run(_run_image(args, settings))
        except ImagePreprocessingError as exc:
            LOGGER.error("Preprocessing failed: %s", exc)
            key = "image_rejected" if exc.reason in {"empty", "too_small", "too_large"} else "preprocess_failed"
            print(translator.translate(key, reason=exc.reason), file=sys.stderr)
            return 1
        except OcrEngineError:
            LOGGER.exception("OCR failed")
            print(translator.translate("ocr_failed"), file=sys.stderr)
            return 1
        record = result.record
        confidence = result.ocr.confidence
        if not record.raw.strip():
            print(translator.translate("ocr_empty"), file=sys.stderr)

    if args.json:
        print(record.model_dump_json(indent=2))
        return 0
    print(render(record, translator))
    if confidence is not None:
        print(translator.translate("confidence", confidence=confidence))
    return 0


if __name__ == "__main__":
    sys.exit(main())
