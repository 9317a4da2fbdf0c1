"""Data models for compression parameters and results."""

from .quality_params import QualityParameters
from .palette import Palette, IndexedBuffer
from .compression_result import CompressionResult

__all__ = ['QualityParameters', 'Palette', 'IndexedBuffer', 'CompressionResult']
