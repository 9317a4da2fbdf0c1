"""Main compression pipeline: format dispatch, PNG and JPEG paths."""

import logging
import os
from pathlib import Path
from typing import Optional, Tuple

import numpy as np

from models.compression_result import CompressionResult
from models.quality_params import QualityParameters
from engines.color_space import rgb_to_ycbcr, ycbcr_to_rgb, ycbcr_to_rgb_rounded
from engines.chroma import blur_chroma, subsample_chroma
from engines.quantizer import quantize_ycbcr
from engines.tier_selector import select_quality_parameters, validate_quality
from engines.palette import build_indexed
from utils.constants import (
    JPEG_EXTENSIONS,
    JPEG_PREBLUR_MAX_QUALITY,
    JPEG_PREBLUR_SIGMA,
    JPEG_QUALITY_BASE,
    JPEG_QUALITY_SPAN,
    PNG_EXTENSIONS,
)
from utils.errors import EncodeError, ValidationError
from utils.image_io import (
    decode_image,
    encode_indexed_png,
    encode_truecolor,
    load_image,
    source_channels,
    write_output,
)
from utils.metrics import StageTimer, compute_psnr_ssim, size_reduction

logger = logging.getLogger("imgc.pipeline")


def output_format_for(path: str) -> str:
    """'png' or 'jpeg' from the output extension (case-insensitive)."""
    ext = Path(str(path)).suffix.lower()
    if ext in PNG_EXTENSIONS:
        return 'png'
    if ext in JPEG_EXTENSIONS:
        return 'jpeg'
    raise ValidationError(
        f"Unsupported output format {ext or '(none)'!r} for {path}. Use .png or .jpg/.jpeg"
    )


def jpeg_encoder_quality(quality: float) -> int:
    """Map quality [0, 1] onto the JPEG encoder's 50..95."""
    jq = JPEG_QUALITY_BASE + round(quality * JPEG_QUALITY_SPAN)
    return int(min(max(jq, 1), 100))


def as_rgb(image: np.ndarray) -> np.ndarray:
    """Coerce gray, gray+alpha or RGBA buffers to 3-channel uint8 RGB."""
    image = np.asarray(image)
    if image.ndim == 2:
        image = np.stack([image] * 3, axis=-1)
    if image.ndim != 3 or image.shape[2] not in (1, 2, 3, 4):
        raise ValidationError(f"Expected an (H, W, C) pixel buffer, got shape {image.shape}")
    if image.size == 0:
        raise ValidationError(f"Empty pixel buffer, got shape {image.shape}")
    if image.shape[2] in (1, 2):
        image = np.repeat(image[:, :, :1], 3, axis=2)
    elif image.shape[2] == 4:
        image = image[:, :, :3]
    if image.dtype != np.uint8:
        image = np.clip(image, 0, 255).astype(np.uint8)
    return image


def perceptual_png(image_rgb: np.ndarray, params: QualityParameters) -> np.ndarray:
    """Run the lossy stages and return the RGB buffer handed to the PNG encoder."""
    ycbcr = rgb_to_ycbcr(image_rgb)
    if params.blur_sigma > 0:
        ycbcr = blur_chroma(ycbcr, params.blur_sigma)
    ycbcr = subsample_chroma(ycbcr, params.subsample_factor)
    ycbcr = quantize_ycbcr(ycbcr, params)
    return ycbcr_to_rgb_rounded(ycbcr, params.rgb_round_multiple)


def prepare_jpeg(image_rgb: np.ndarray, quality: float) -> np.ndarray:
    """Light chroma pre-smoothing at low quality; otherwise pass-through."""
    if quality > JPEG_PREBLUR_MAX_QUALITY:
        return image_rgb.copy()
    ycbcr = blur_chroma(rgb_to_ycbcr(image_rgb), JPEG_PREBLUR_SIGMA)
    return ycbcr_to_rgb(ycbcr)


def _encode_png(
    pixels: np.ndarray,
    png_compression: int,
    timer: StageTimer
) -> Tuple[bytes, Optional[int], bool, bool]:
    indexed = build_indexed(pixels)
    if indexed is None:
        logger.info("More than 256 colors, writing PNG-24 (truecolor)")
        data = timer.measure('encode', encode_truecolor, pixels, 'png', png_compression=png_compression)
        return data, None, False, False

    palette_size = len(indexed.palette)
    logger.info("Writing PNG-8 (indexed, %d colors)", palette_size)
    try:
        data = timer.measure('encode', encode_indexed_png, indexed, png_compression=png_compression)
        return data, palette_size, True, False
    except EncodeError as exc:
        logger.warning("%s. Falling back to PNG-24.", exc)

    data = timer.measure('encode', encode_truecolor, pixels, 'png', png_compression=png_compression)
    return data, palette_size, False, True


def compress_image(
    image_rgb: np.ndarray,
    output_format: str,
    quality: float,
    png_compression: int = 9,
    timer: Optional[StageTimer] = None
) -> CompressionResult:
    """Compress a decoded buffer into `output_format` ('png' or 'jpeg') bytes."""
    quality = validate_quality(quality)
    if output_format not in ('png', 'jpeg'):
        raise ValidationError(f"Unknown output format: {output_format}")
    timer = timer or StageTimer()
    image_rgb = as_rgb(image_rgb)
    h, w = image_rgb.shape[:2]

    if output_format == 'jpeg':
        logger.info("Using standard JPEG encoder pipeline")
        if quality <= JPEG_PREBLUR_MAX_QUALITY:
            logger.info("Chroma pre-blur sigma: %g", JPEG_PREBLUR_SIGMA)
        pixels = timer.measure('perceptual', prepare_jpeg, image_rgb, quality)
        jq = jpeg_encoder_quality(quality)
        logger.info("Writing JPEG quality: %d", jq)
        data = timer.measure('encode', encode_truecolor, pixels, 'jpeg', jpeg_quality=jq)
        return CompressionResult(
            output_format='jpeg', width=w, height=h, data=data, pixels=pixels,
            jpeg_quality=jq, timings_ms=timer.timings_ms,
        )

    logger.info("Using custom PNG compression pipeline")
    params = select_quality_parameters(quality)
    for line in params.describe():
        logger.info(line)

    pixels = timer.measure('perceptual', perceptual_png, image_rgb, params)
    data, palette_size, indexed, fallback_used = _encode_png(pixels, png_compression, timer)
    return CompressionResult(
        output_format='png', width=w, height=h, data=data, pixels=pixels,
        params=params, palette_size=palette_size, indexed=indexed,
        fallback_used=fallback_used, timings_ms=timer.timings_ms,
    )


def compress_file(
    input_path: str,
    output_path: str,
    quality,
    png_compression: int = 9,
    report_metrics: bool = False
) -> CompressionResult:
    """Decode `input_path`, compress, and atomically write `output_path`."""
    quality = validate_quality(quality)
    output_format = output_format_for(output_path)

    timer = StageTimer()
    image_rgb = timer.measure('decode', load_image, input_path)
    h, w = image_rgb.shape[:2]
    logger.info("Loaded %dx%d (source channels: %s, working: 3)", w, h, source_channels(input_path))

    result = compress_image(image_rgb, output_format, quality, png_compression, timer=timer)
    timer.measure('write', write_output, output_path, result.data)

    result.input_size = os.path.getsize(input_path)
    logger.info("Input size: %d bytes", result.input_size)
    logger.info("Output size: %d bytes", result.output_size)
    logger.info("Reduction: %.1f%%", size_reduction(result.input_size, result.output_size))

    if report_metrics:
        metrics = compute_psnr_ssim(image_rgb, decode_image(result.data, source=str(output_path)))
        result.psnr_rgb = metrics['psnr_rgb']
        result.ssim_rgb = metrics['ssim_rgb']
        logger.info("PSNR (RGB): %.2f dB", result.psnr_rgb)
        if result.ssim_rgb is not None:
            logger.info("SSIM (RGB): %.4f", result.ssim_rgb)

    logger.info("Time: %.2f ms", timer.total_ms)
    logger.info("Compressed image saved to: %s", output_path)
    return result
