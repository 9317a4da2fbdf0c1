"""Shared utilities."""

from .errors import (
    CompressionError,
    ValidationError,
    DecodeError,
    EncodeError,
    OutputWriteError,
)
from .config import SETTINGS, CompressorSettings, configure_logging
from .metrics import compute_psnr_ssim, size_reduction, StageTimer
from .test_images import (
    generate_solid,
    generate_colored_checkerboard,
    generate_thin_stripes,
    generate_gradient,
    generate_photographic,
)
from .image_io import (
    decode_image,
    load_image,
    encode_truecolor,
    encode_indexed_png,
    write_output,
)

__all__ = [
    'CompressionError',
    'ValidationError',
    'DecodeError',
    'EncodeError',
    'OutputWriteError',
    'SETTINGS',
    'CompressorSettings',
    'configure_logging',
    'compute_psnr_ssim',
    'size_reduction',
    'StageTimer',
    'generate_solid',
    'generate_colored_checkerboard',
    'generate_thin_stripes',
    'generate_gradient',
    'generate_photographic',
    'decode_image',
    'load_image',
    'encode_truecolor',
    'encode_indexed_png',
    'write_output',
]
