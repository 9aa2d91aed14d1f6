from __future__ import annotations

"""User-facing messages for the command line front end."""
from dataclasses import dataclass, field
from typing import Dict


@dataclass
class Translator:
    default_locale: str = "en"
    _translations: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self._translations:
            return
        self._translations = {
            "en": {
                "preprocess_failed": "Could not process image. Try a different screenshot.",
                "image_rejected": "Image rejected ({reason}). Upload a PNG or JPEG screenshot.",
                "ocr_failed": "Text recognition failed. Check that Tesseract is installed and try again.",
                "ocr_empty": "No text was recognized in the image.",
                "detected_type": "Detected entry type: {entry_type}",
                "confidence": "OCR confidence: {confidence:.0f}%",
                "no_offers": "No offers found",
                "missing_field": "(enter manually)",
            },
            "es": {
                "preprocess_failed": "No se pudo procesar la imagen. Pruebe con otra captura.",
                "image_rejected": "Imagen rechazada ({reason}). Suba una captura PNG o JPEG.",
                "ocr_failed": "Falló el reconocimiento de texto. Verifique que Tesseract esté instalado.",
                "ocr_empty": "No se reconoció texto en la imagen.",
                "detected_type": "Tipo de entrada detectado: {entry_type}",
                "confidence": "Confianza OCR: {confidence:.0f}%",
                "no_offers": "No se encontraron ofertas",
                "missing_field": "(ingresar manualmente)",
            },
        }

    def translate(self, key: str, locale: str | None = None, **params: object) -> str:
        catalog = self._translations.get(locale or self.default_locale) or self._translations["en"]
        message = catalog.get(key, key)
        return message.format(**params) if params else message
