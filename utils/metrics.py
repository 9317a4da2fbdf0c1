"""Metrics: PSNR, SSIM, stage timing, size reduction."""

import time
import numpy as np
from skimage.metrics import peak_signal_noise_ratio, structural_similarity
from typing import Dict, Optional

# skimage's default SSIM window
_SSIM_MIN_SIDE = 7


def compute_psnr_ssim(original_rgb: np.ndarray, output_rgb: np.ndarray) -> Dict[str, Optional[float]]:
    """PSNR and SSIM of the delivered image against the decoded input."""
    if original_rgb.shape != output_rgb.shape:
        raise ValueError(f"Shape mismatch: {original_rgb.shape} vs {output_rgb.shape}")

    if np.array_equal(original_rgb, output_rgb):
        psnr_rgb = float('inf')
    else:
        psnr_rgb = float(peak_signal_noise_ratio(original_rgb, output_rgb, data_range=255))

    ssim_rgb = None
    if min(original_rgb.shape[:2]) >= _SSIM_MIN_SIDE:
        ssim_rgb = float(structural_similarity(
            original_rgb, output_rgb, channel_axis=2, data_range=255
        ))

    return {'psnr_rgb': psnr_rgb, 'ssim_rgb': ssim_rgb}


def size_reduction(input_size: int, output_size: int) -> float:
    """Percentage of bytes saved; negative when the output grew."""
    if input_size <= 0:
        return 0.0
    return (input_size - output_size) / input_size * 100.0


class StageTimer:
    """Wall-clock milliseconds per named pipeline stage."""

    def __init__(self):
        self.timings_ms: Dict[str, float] = {}

    def measure(self, stage: str, func, *args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        self.timings_ms[stage] = self.timings_ms.get(stage, 0.0) + (time.perf_counter() - start) * 1000.0
        return result

    @property
    def total_ms(self) -> float:
        return sum(self.timings_ms.values())
