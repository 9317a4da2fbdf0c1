"""Palette reduction: index the final RGB buffer when it has at most 256 colors."""

from typing import Optional, Set

import numpy as np

from models.palette import IndexedBuffer, Palette
from utils.constants import MAX_PALETTE_SIZE


def pack_rgb(rgb: np.ndarray) -> np.ndarray:
    """(H, W, 3) uint8 -> (H, W) uint32 of 0xRRGGBB."""
    rgb = rgb.astype(np.uint32)
    return (rgb[:, :, 0] << 16) | (rgb[:, :, 1] << 8) | rgb[:, :, 2]


def unpack_rgb(packed: np.ndarray) -> np.ndarray:
    packed = packed.astype(np.uint32)
    return np.stack([(packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF], axis=-1).astype(np.uint8)


def collect_colors(packed: np.ndarray, limit: int = MAX_PALETTE_SIZE) -> Set[int]:
    """Distinct packed colors, scanning row by row and stopping past `limit`."""
    seen: Set[int] = set()
    if packed.size == 0:
        return seen
    rows = packed.reshape(packed.shape[0], -1) if packed.ndim > 1 else packed.reshape(1, -1)
    for row in rows:
        seen.update(np.unique(row).tolist())
        if len(seen) > limit:
            break
    return seen


def build_indexed(rgb: np.ndarray, limit: int = MAX_PALETTE_SIZE) -> Optional[IndexedBuffer]:
    """IndexedBuffer with palette in ascending packed order, or None past `limit`."""
    packed = pack_rgb(rgb)
    colors = collect_colors(packed, limit)
    if not colors or len(colors) > limit:
        return None

    ordered = np.array(sorted(colors), dtype=np.uint32)
    indices = np.searchsorted(ordered, packed).astype(np.uint8)
    return IndexedBuffer(indices=indices, palette=Palette(colors=unpack_rgb(ordered)))
