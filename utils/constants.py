"""Fixed policy constants shared by the engines."""

import numpy as np

# 4x4 ordered-dither thresholds, normalised to [0, 1)
BAYER_4X4 = np.array([
    [0, 8, 2, 10],
    [12, 4, 14, 6],
    [3, 11, 1, 9],
    [15, 7, 13, 5],
], dtype=np.float64) / 16.0

# Tier policy
TIER1_MIN_QUALITY = 0.7
TIER_EPSILON = 1e-6
FINE_RGB_ROUNDING_MIN_QUALITY = 0.4

# JPEG path
JPEG_PREBLUR_MAX_QUALITY = 0.6
JPEG_PREBLUR_SIGMA = 0.4
JPEG_QUALITY_BASE = 50
JPEG_QUALITY_SPAN = 45

# Palette reduction
MAX_PALETTE_SIZE = 256

# Blur below this sigma is skipped
MIN_BLUR_SIGMA = 0.1

PNG_EXTENSIONS = ('.png',)
JPEG_EXTENSIONS = ('.jpg', '.jpeg')
