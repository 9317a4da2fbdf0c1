"""Color space conversion (ITU-R BT.601, full range, no gamma)."""

import numpy as np

from engines.quantizer import round_half_away
from utils.errors import ValidationError


def rgb_to_ycbcr(rgb: np.ndarray) -> np.ndarray:
    """RGB to YCbCr using ITU-R BT.601."""
    rgb = rgb.astype(np.float64)
    R, G, B = rgb[:, :, 0], rgb[:, :, 1], rgb[:, :, 2]
    Y = 0.299 * R + 0.587 * G + 0.114 * B
    Cb = 128.0 - 0.168736 * R - 0.331264 * G + 0.5 * B
    Cr = 128.0 + 0.5 * R - 0.418688 * G - 0.081312 * B
    return np.stack([Y, Cb, Cr], axis=-1)


def _inverse_matrix(ycbcr: np.ndarray) -> np.ndarray:
    Y, Cb, Cr = ycbcr[:, :, 0], ycbcr[:, :, 1], ycbcr[:, :, 2]
    R = Y + 1.402 * (Cr - 128.0)
    G = Y - 0.344136 * (Cb - 128.0) - 0.714136 * (Cr - 128.0)
    B = Y + 1.772 * (Cb - 128.0)
    return np.stack([R, G, B], axis=-1)


def ycbcr_to_rgb(ycbcr: np.ndarray) -> np.ndarray:
    """YCbCr to RGB, rounded to nearest and clamped to uint8."""
    rgb = round_half_away(_inverse_matrix(ycbcr))
    return np.clip(rgb, 0, 255).astype(np.uint8)


def ycbcr_to_rgb_rounded(ycbcr: np.ndarray, multiple: int = 2) -> np.ndarray:
    """YCbCr to RGB with each channel snapped to a multiple of `multiple`."""
    if isinstance(multiple, bool) or not isinstance(multiple, (int, np.integer)) or multiple < 1:
        raise ValidationError(f"Rounding multiple must be a positive int, got {multiple!r}")
    rgb = round_half_away(_inverse_matrix(ycbcr) / multiple) * multiple
    return np.clip(rgb, 0, 255).astype(np.uint8)
