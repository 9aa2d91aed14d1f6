from __future__ import annotations

"""Image preprocessing chain that prepares screenshots for OCR."""
import logging
from typing import Any, Optional

import cv2
import numpy as np

from ..exceptions import ImagePreprocessingError
from ..models.preprocess_config import BinarizeMode, PreprocessConfig
from . import filters

LOGGER = logging.getLogger(__name__)


class PreprocessingService:
    """Runs upscale → grayscale → denoise → stretch → invert → binarize → sharpen → pad.

    The order is fixed; the config only tunes or disables individual stages.
    """

    def __init__(self, defaults: Optional[PreprocessConfig] = None) -> None:
        self._defaults = defaults or PreprocessConfig()

    def resolve_config(self, config: Optional[PreprocessConfig] = None, **overrides: Any) -> PreprocessConfig:
        return (config or self._defaults).merged(overrides)

    def decode(self, image_bytes: bytes) -> np.ndarray:
        if not image_bytes:
            raise ImagePreprocessingError("Source image is empty", reason="empty")
        buffer = np.frombuffer(image_bytes, dtype=np.uint8)
        try:
            image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
        except cv2.error as exc:
            raise ImagePreprocessingError("Source image could not be decoded", cause=exc) from exc
        if image is None:
            raise ImagePreprocessingError("Source image could not be decoded")
        return image

    def upscale(self, image: np.ndarray, scale_factor: float) -> np.ndarray:
        height, width = image.shape[:2]
        scaled_w = max(1, int(round(width * scale_factor)))
        scaled_h = max(1, int(round(height * scale_factor)))
        if (scaled_w, scaled_h) == (width, height):
            return image.copy()
        interpolation = cv2.INTER_CUBIC if scale_factor >= 1 else cv2.INTER_AREA
        return cv2.resize(image, (scaled_w, scaled_h), interpolation=interpolation)

    def binarize(self, gray: np.ndarray, config: PreprocessConfig) -> np.ndarray:
        if config.binarize_mode is BinarizeMode.GLOBAL:
            return filters.global_threshold(gray, config.binary_threshold)
        if config.binarize_mode is BinarizeMode.ADAPTIVE:
            return filters.adaptive_threshold(gray, config.adaptive_radius, config.adaptive_bias)
        return gray.copy()

    def preprocess_array(self, image: np.ndarray, config: Optional[PreprocessConfig] = None) -> np.ndarray:
        """Run the chain on a decoded BGR (or grayscale) image and return the RGBA raster."""
        config = config or self._defaults
        scaled = self.upscale(image, config.scale_factor)
        gray = filters.to_grayscale(scaled)
        denoised = filters.box_blur(gray, config.denoise_radius)

        low, high = filters.compute_clip_points(denoised, config.contrast_clip_percent)
        stretched = filters.contrast_stretch(denoised, low, high)
        LOGGER.debug("Contrast clip points low=%d high=%d", low, high)

        invert = filters.should_invert(
            stretched,
            auto_invert=config.auto_invert,
            force_invert=config.force_invert,
            cutoff=config.invert_cutoff,
        )
        oriented = filters.invert(stretched) if invert else stretched
        LOGGER.debug("Polarity %s", "inverted (dark mode)" if invert else "kept")

        binary = self.binarize(oriented, config)
        raster = filters.gray_to_rgba(binary)
        if config.sharpen:
            raster = filters.laplacian_sharpen(raster, config.sharpen_strength)
        return filters.pad(raster, config.padding_px)

    def encode(self, raster: np.ndarray) -> bytes:
        ok, encoded = cv2.imencode(".png", raster)
        if not ok:
            raise ImagePreprocessingError("Failed to encode preprocessed image", reason="encode_failed")
        return encoded.tobytes()

    def preprocess(self, image_bytes: bytes, config: Optional[PreprocessConfig] = None, **overrides: Any) -> bytes:
        """Decode ``image_bytes``, run the chain and return a lossless PNG."""
        resolved = self.resolve_config(config, **overrides)
        image = self.decode(image_bytes)
        LOGGER.debug("Preprocessing %dx%d image with %s", image.shape[1], image.shape[0], resolved)
        return self.encode(self.preprocess_array(image, resolved))
