"""Compression engines - pure computation over numpy buffers."""

from .color_space import rgb_to_ycbcr, ycbcr_to_rgb, ycbcr_to_rgb_rounded
from .quantizer import quantize, ordered_dither, round_to_even, quantize_ycbcr
from .chroma import gaussian_kernel, blur_chroma, subsample_chroma
from .tier_selector import validate_quality, select_quality_parameters
from .palette import pack_rgb, collect_colors, build_indexed
from .pipeline import (
    output_format_for,
    jpeg_encoder_quality,
    perceptual_png,
    prepare_jpeg,
    compress_image,
    compress_file,
)

__all__ = [
    'rgb_to_ycbcr',
    'ycbcr_to_rgb',
    'ycbcr_to_rgb_rounded',
    'quantize',
    'ordered_dither',
    'round_to_even',
    'quantize_ycbcr',
    'gaussian_kernel',
    'blur_chroma',
    'subsample_chroma',
    'validate_quality',
    'select_quality_parameters',
    'pack_rgb',
    'collect_colors',
    'build_indexed',
    'output_format_for',
    'jpeg_encoder_quality',
    'perceptual_png',
    'prepare_jpeg',
    'compress_image',
    'compress_file',
]
