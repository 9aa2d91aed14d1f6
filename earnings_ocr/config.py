from __future__ import annotations

"""Configuration module for earnings OCR."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.preprocess_config import PreprocessConfig


class Settings(BaseSettings):
    """Environment-driven settings.

    Variables use the ``EARNINGS_OCR_`` prefix; preprocessing defaults are
    nested, e.g. ``EARNINGS_OCR_PREPROCESS__BINARIZE_MODE=adaptive``.
    """

    model_config = SettingsConfigDict(
        env_prefix="EARNINGS_OCR_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ocr_lang: str = "eng"
    ocr_timeout: float = Field(default=18.0, gt=0)
    preprocess_workers: int = Field(default=2, ge=1)
    locale: str = "en"
    log_level: str = "INFO"
    session_schema: bool = False
    preprocess: PreprocessConfig = Field(default_factory=PreprocessConfig)


@lru_cache()
def load_settings() -> Settings:
    return Settings()
