"""Factory for creating HyperLogLog summaries.

Provides preset configurations for common accuracy/memory trade-offs and
use-case oriented constructors.
"""

from __future__ import annotations

from enum import Enum, auto

from hllcodec.hyperloglog import HyperLogLog, create_hyperloglog
from hllcodec.protocols import HyperLogLogConfig


class SketchPreset(Enum):
    """Named precision levels, from smallest payload to smallest error."""

    MINIMAL = auto()
    STANDARD = auto()
    HIGH_ACCURACY = auto()
    MAXIMUM = auto()


_PRESETS: dict[SketchPreset, HyperLogLogConfig] = {
    SketchPreset.MINIMAL: HyperLogLogConfig(precision=10),  # ~1KB, ±3.25%
    SketchPreset.STANDARD: HyperLogLogConfig(precision=12),  # ~4KB, ±1.63%
    SketchPreset.HIGH_ACCURACY: HyperLogLogConfig(precision=14),  # ~16KB, ±0.81%
    SketchPreset.MAXIMUM: HyperLogLogConfig(precision=16),  # ~64KB, ±0.41%
}


class SketchFactory:
    """Factory for creating HyperLogLog summaries.

    Example:
        factory = SketchFactory()

        # Create with preset
        hll = factory.create(preset=SketchPreset.STANDARD)

        # Create for a target error rate
        hll = factory.for_cardinality(error_rate=0.01)
    """

    def __init__(self, word_type: str = "uint8") -> None:
        self._word_type = word_type

    def create(
        self,
        preset: SketchPreset | None = None,
        config: HyperLogLogConfig | None = None,
        precision: int = 12,
    ) -> HyperLogLog:
        """Create a summary from a config, a preset, or a precision.

        Raises:
            ValueError: If ``config`` is not a HyperLogLogConfig
        """
        if config is None and preset is not None:
            base = _PRESETS[preset]
            config = HyperLogLogConfig(precision=base.precision, word_type=self._word_type)
        if config is not None:
            if isinstance(config, HyperLogLogConfig):
                return HyperLogLog(config)
            raise ValueError(f"Expected HyperLogLogConfig, got {type(config)}")
        return create_hyperloglog(precision=precision, word_type=self._word_type)

    def for_cardinality(self, error_rate: float = 0.01) -> HyperLogLog:
        """Create a summary sized for a target standard error rate."""
        return create_hyperloglog(target_error=error_rate, word_type=self._word_type)


_factory = SketchFactory()


def preset_config(preset: SketchPreset | str) -> HyperLogLogConfig:
    """Configuration behind a preset name ("minimal", "standard", ...)."""
    if isinstance(preset, str):
        preset = SketchPreset[preset.upper()]
    return _PRESETS[preset]


def create_sketch(
    preset: SketchPreset | str | None = None,
    precision: int = 12,
) -> HyperLogLog:
    """Create a summary without instantiating the factory.

    Example:
        hll = create_sketch("high_accuracy")
        hll = create_sketch(precision=14)
    """
    if isinstance(preset, str):
        preset = SketchPreset[preset.upper()]
    return _factory.create(preset=preset, precision=precision)
