"""Quality scalar -> QualityParameters via the two-tier piecewise-linear policy.

Tier 1 (quality >= 0.7) keeps luma almost intact and spends the loss on
chroma: fewer chroma levels, 2x chroma subsampling, a light chroma blur and
always-on ordered dithering. Tier 2 degrades everything together as quality
falls toward 0: luma down to 4 levels, chroma down to 2, subsampling up to 8x
and dithering switched off in the lower half.
"""

import math
import numbers

from models.quality_params import QualityParameters
from utils.constants import FINE_RGB_ROUNDING_MIN_QUALITY, TIER1_MIN_QUALITY, TIER_EPSILON
from utils.errors import ValidationError


def validate_quality(value) -> float:
    """Return `value` as a float in [0, 1] or raise ValidationError."""
    if isinstance(value, bool):
        raise ValidationError(f"Quality must be a number, got {value!r}")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise ValidationError(f"Quality must be a number, got {value!r}") from None
    elif not isinstance(value, numbers.Real):
        raise ValidationError(f"Quality must be a number, got {value!r}")

    quality = float(value)
    if not math.isfinite(quality) or not (0.0 <= quality <= 1.0):
        raise ValidationError(f"Quality must be a finite float in [0.0, 1.0], got {value!r}")
    return quality


def is_tier1(quality: float) -> bool:
    return quality >= TIER1_MIN_QUALITY - TIER_EPSILON


def select_quality_parameters(quality) -> QualityParameters:
    """Derive every lossy-processing parameter from `quality` alone."""
    quality = validate_quality(quality)
    inv = 1.0 - quality

    # built-in round (ties to even) here; pixel rounding uses round_half_away
    if is_tier1(quality):
        t = inv / 0.3
        tier = 1
        subsample_factor = 2
        luma_levels = 256 - round(t * 64.0)
        chroma_levels = 256 - round(t * 192.0)
        blur_sigma = t * 0.7
        use_dithering = True
    else:
        t = min(max((inv - 0.3) / 0.7, 0.0), 1.0)
        tier = 2
        luma_levels = max(4, 192 - round(t * 188.0))
        chroma_levels = max(2, 64 - round(t * 62.0))
        subsample_factor = 2 + round(t * 6.0)
        blur_sigma = 0.7 + t * 0.6
        use_dithering = t < 0.5

    rgb_round_multiple = 2 if quality > FINE_RGB_ROUNDING_MIN_QUALITY else 4

    return QualityParameters(
        quality=quality,
        tier=tier,
        luma_levels=int(luma_levels),
        chroma_levels=int(chroma_levels),
        subsample_factor=int(subsample_factor),
        blur_sigma=float(blur_sigma),
        use_dithering=bool(use_dithering),
        rgb_round_multiple=rgb_round_multiple,
    )
