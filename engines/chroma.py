"""Chroma-only filtering: separable Gaussian blur and block-average subsampling.

Both operate on the Cb and Cr planes of a YCbCr buffer; luma passes through
untouched. Inputs are never modified in place.
"""

import math

import cv2
import numpy as np

from utils.constants import MIN_BLUR_SIGMA


def gaussian_kernel(sigma: float) -> np.ndarray:
    """1-D kernel of radius ceil(2*sigma), normalized to sum 1."""
    radius = int(math.ceil(sigma * 2))
    i = np.arange(-radius, radius + 1, dtype=np.float64)
    kernel = np.exp(-(i * i) / (2.0 * sigma * sigma))
    return kernel / kernel.sum()


def blur_chroma(ycbcr: np.ndarray, sigma: float) -> np.ndarray:
    """Horizontal then vertical Gaussian on Cb and Cr, edges replicated."""
    out = ycbcr.astype(np.float64, copy=True)
    if sigma < MIN_BLUR_SIGMA:
        return out

    kernel = gaussian_kernel(sigma)
    for c in (1, 2):
        plane = np.ascontiguousarray(out[:, :, c])
        out[:, :, c] = cv2.sepFilter2D(
            plane, cv2.CV_64F, kernel, kernel, borderType=cv2.BORDER_REPLICATE
        )
    return out


def _block_starts(length: int, factor: int) -> np.ndarray:
    return np.arange(0, length, factor)


def subsample_chroma(ycbcr: np.ndarray, factor: int) -> np.ndarray:
    """Replace Cb/Cr in every factor x factor block with the block mean.

    Blocks clipped by the right or bottom edge average only the samples they
    actually cover.
    """
    out = ycbcr.astype(np.float64, copy=True)
    if factor <= 1:
        return out

    h, w = out.shape[:2]
    rows = _block_starts(h, factor)
    cols = _block_starts(w, factor)
    row_counts = np.diff(np.append(rows, h))
    col_counts = np.diff(np.append(cols, w))
    counts = np.outer(row_counts, col_counts)

    for c in (1, 2):
        sums = np.add.reduceat(np.add.reduceat(out[:, :, c], rows, axis=0), cols, axis=1)
        means = sums / counts
        out[:, :, c] = np.repeat(np.repeat(means, row_counts, axis=0), col_counts, axis=1)
    return out
