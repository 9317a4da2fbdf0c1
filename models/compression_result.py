"""Compression result with metrics."""

from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np

from models.quality_params import QualityParameters


@dataclass
class CompressionResult:
    """Outcome of one compression call."""

    output_format: str
    width: int
    height: int
    data: bytes
    pixels: np.ndarray

    # PNG path
    params: Optional[QualityParameters] = None
    palette_size: Optional[int] = None
    indexed: bool = False
    fallback_used: bool = False

    # JPEG path
    jpeg_quality: Optional[int] = None

    # Runtime
    timings_ms: Dict[str, float] = field(default_factory=dict)

    # Reporting
    input_size: Optional[int] = None
    psnr_rgb: Optional[float] = None
    ssim_rgb: Optional[float] = None

    @property
    def output_size(self) -> int:
        return len(self.data)
