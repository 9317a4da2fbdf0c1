"""Lossy-processing parameters derived from the quality scalar."""

from dataclasses import dataclass

from utils.errors import ValidationError


@dataclass(frozen=True)
class QualityParameters:
    """Concrete settings for one run of the PNG pipeline."""

    quality: float
    tier: int
    luma_levels: int
    chroma_levels: int
    subsample_factor: int
    blur_sigma: float
    use_dithering: bool
    rgb_round_multiple: int

    def __post_init__(self):
        if self.tier not in (1, 2):
            raise ValidationError(f"Tier must be 1 or 2, got {self.tier}")
        if self.luma_levels < 2 or self.chroma_levels < 2:
            raise ValidationError(
                f"Levels must be >= 2, got luma={self.luma_levels} chroma={self.chroma_levels}"
            )
        if self.subsample_factor < 1:
            raise ValidationError(f"Subsample factor must be >= 1, got {self.subsample_factor}")
        if self.blur_sigma < 0:
            raise ValidationError(f"Blur sigma must be >= 0, got {self.blur_sigma}")
        if self.rgb_round_multiple not in (2, 4):
            raise ValidationError(f"RGB rounding must be 2 or 4, got {self.rgb_round_multiple}")

    def describe(self) -> list:
        """Human-readable lines for the progress log."""
        label = "Tier 1 (perceptually lossless-ish)" if self.tier == 1 else "Tier 2 (visible compression)"
        return [
            f"Quality: {self.quality:g} -> {label}",
            f"Luma levels: {self.luma_levels}",
            f"Chroma levels: {self.chroma_levels}",
            f"Chroma subsample: {self.subsample_factor}x",
            f"Chroma blur sigma: {self.blur_sigma:.4g}",
            f"Ordered dithering: {'on' if self.use_dithering else 'off'}",
            f"RGB rounding multiple: {self.rgb_round_multiple}",
        ]
