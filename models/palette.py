"""Palette and palette-indexed image buffers."""

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from utils.constants import MAX_PALETTE_SIZE
from utils.errors import ValidationError


@dataclass(frozen=True)
class Palette:
    """Up to 256 unique RGB colours; entry i has index i."""

    colors: np.ndarray

    def __post_init__(self):
        if self.colors.ndim != 2 or self.colors.shape[1] != 3:
            raise ValidationError(f"Palette must have shape (N, 3), got {self.colors.shape}")
        if not (1 <= len(self.colors) <= MAX_PALETTE_SIZE):
            raise ValidationError(
                f"Palette must hold 1-{MAX_PALETTE_SIZE} colors, got {len(self.colors)}"
            )

    def __len__(self) -> int:
        return len(self.colors)

    def rgba(self) -> List[Tuple[int, int, int, int]]:
        return [(int(r), int(g), int(b), 255) for r, g, b in self.colors]

    def flat_rgb(self) -> List[int]:
        return [int(c) for c in self.colors.reshape(-1)]


@dataclass(frozen=True)
class IndexedBuffer:
    """Per-pixel palette indices, only meaningful with its palette."""

    indices: np.ndarray
    palette: Palette

    def expand(self) -> np.ndarray:
        """Index -> palette lookup back to an (H, W, 3) uint8 buffer."""
        return self.palette.colors[self.indices]
