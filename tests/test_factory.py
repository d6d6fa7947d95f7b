"""Tests for summary presets and the factory."""

import pytest

from hllcodec import HyperLogLog, HyperLogLogConfig, SketchFactory, SketchPreset, create_sketch
from hllcodec.factory import preset_config


class TestSketchFactory:
    """Tests for SketchFactory."""

    @pytest.mark.parametrize(
        "preset, precision",
        [
            (SketchPreset.MINIMAL, 10),
            (SketchPreset.STANDARD, 12),
            (SketchPreset.HIGH_ACCURACY, 14),
            (SketchPreset.MAXIMUM, 16),
        ],
    )
    def test_presets(self, preset, precision):
        hll = SketchFactory().create(preset=preset)
        assert isinstance(hll, HyperLogLog)
        assert hll.precision == precision

    def test_create_with_config(self):
        config = HyperLogLogConfig(precision=7)
        assert SketchFactory().create(config=config).precision == 7

    def test_config_wins_over_preset(self):
        config = HyperLogLogConfig(precision=7)
        hll = SketchFactory().create(preset=SketchPreset.MAXIMUM, config=config)
        assert hll.precision == 7

    def test_create_with_precision(self):
        assert SketchFactory().create(precision=9).precision == 9

    def test_rejects_foreign_config(self):
        with pytest.raises(ValueError, match="HyperLogLogConfig"):
            SketchFactory().create(config={"precision": 12})

    def test_word_type_applies_to_presets(self):
        hll = SketchFactory(word_type="uint32").create(preset=SketchPreset.MINIMAL)
        assert hll.store.word_type == "uint32"

    def test_for_cardinality(self):
        assert SketchFactory().for_cardinality(error_rate=0.01).precision == 14


class TestCreateSketch:
    """Tests for the module-level helpers."""

    def test_by_name(self):
        assert create_sketch("high_accuracy").precision == 14
        assert create_sketch("MINIMAL").precision == 10

    def test_default(self):
        assert create_sketch().precision == 12
        assert create_sketch(precision=5).precision == 5

    def test_unknown_name(self):
        with pytest.raises(KeyError):
            create_sketch("enormous")

    def test_preset_config(self):
        assert preset_config("standard") == HyperLogLogConfig(precision=12)
        assert preset_config(SketchPreset.MAXIMUM).precision == 16
