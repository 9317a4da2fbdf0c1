"""Uniform scalar quantization and ordered dithering."""

import numpy as np

from models.quality_params import QualityParameters
from utils.constants import BAYER_4X4


def round_half_away(values):
    """Round to nearest, ties away from zero."""
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def level_step(levels: int) -> float:
    """Spacing between adjacent levels on the 0-255 scale."""
    return 255.0 / (max(int(levels), 2) - 1)


def quantize(values, levels: int):
    """Snap values to one of `levels` evenly spaced points in [0, 255]."""
    step = level_step(levels)
    result = round_half_away(np.asarray(values, dtype=np.float64) / step) * step
    return float(result) if np.ndim(result) == 0 else result


def ordered_dither(luma: np.ndarray, levels: int) -> np.ndarray:
    """Perturb a luma plane with the 4x4 Bayer pattern before quantization."""
    h, w = luma.shape
    thresholds = np.tile(BAYER_4X4, ((h + 3) // 4, (w + 3) // 4))[:h, :w]
    offset = (thresholds - 0.5) * level_step(levels)
    return np.clip(luma + offset, 0.0, 255.0)


def round_to_even(luma: np.ndarray) -> np.ndarray:
    """Snap to the nearest multiple of 2 within [0, 255]."""
    return np.clip(round_half_away(luma / 2.0) * 2.0, 0.0, 255.0)


def quantize_ycbcr(ycbcr: np.ndarray, params: QualityParameters) -> np.ndarray:
    """Quantize Y with luma levels (optionally dithered) and Cb/Cr with chroma levels."""
    out = np.empty_like(ycbcr, dtype=np.float64)
    Y = ycbcr[:, :, 0]
    if params.use_dithering:
        Y = ordered_dither(Y, params.luma_levels)
    out[:, :, 0] = quantize(Y, params.luma_levels)
    out[:, :, 1] = quantize(ycbcr[:, :, 1], params.chroma_levels)
    out[:, :, 2] = quantize(ycbcr[:, :, 2], params.chroma_levels)

    if params.use_dithering:
        out[:, :, 0] = round_to_even(out[:, :, 0])
    return out
