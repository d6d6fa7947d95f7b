"""Tests for the HyperLogLog summary.

This module tests:
    - Insertion idempotence and order independence
    - Estimation accuracy at small and large cardinalities
    - Merge algebra and precision checks
    - Copy, pickle and storage word types
"""

import copy
import dataclasses
import pickle
import random

import pytest

from hllcodec import (
    CardinalityEstimator,
    HyperLogLog,
    HyperLogLogConfig,
    MergeableSketch,
    PrecisionMismatchError,
    SketchMetrics,
    create_hyperloglog,
    union_all,
)


def build(precision, values, word_type="uint8"):
    hll = HyperLogLog.with_precision(precision, word_type)
    for value in values:
        hll.insert(value)
    return hll


# ============================================================================
# Insertion
# ============================================================================


class TestInsertion:
    """Tests for inserting values."""

    def test_reinsert_is_noop(self):
        hll = build(8, ["a", "b", "c"])
        before = hll.registers.copy()
        hll.insert("b")
        assert (hll.registers == before).all()

    def test_order_independent(self):
        values = [f"value_{i}" for i in range(500)]
        shuffled = values[:]
        random.Random(7).shuffle(shuffled)
        assert build(10, values) == build(10, shuffled)

    def test_insert_many_matches_insert(self):
        values = [f"val_{i}" for i in range(2000)]
        batch = HyperLogLog.with_precision(12)
        batch.insert_many(values)
        assert batch == build(12, values)

    def test_add_batch_skips_none(self):
        hll = HyperLogLog.with_precision(6)
        hll.add_batch(["test1", None, "test2", None])
        assert hll == build(6, ["test1", "test2"])
        assert hll.metrics().elements_added == 2

    def test_add_alias(self):
        hll = HyperLogLog.with_precision(6)
        hll.add("test1")
        assert hll == build(6, ["test1"])

    def test_mixed_value_types(self):
        hll = HyperLogLog.with_precision(10)
        hll.insert_many([1, "1", b"1", 1.0])
        assert hll.registers.any()


# ============================================================================
# Estimation
# ============================================================================


class TestEstimation:
    """Tests for cardinality estimates."""

    def test_empty_estimate(self):
        assert HyperLogLog.with_precision(12).estimate() == 0

    def test_duplicate_handling(self):
        hll = HyperLogLog.with_precision(12)
        for _ in range(1000):
            hll.insert("same_value")
        assert hll.estimate() == 1

    def test_three_distinct_values(self):
        hll = build(6, ["test1", "test2", "test3", "test2", "test2", "test2"])
        assert hll.estimate() == 3

    def test_merge_reaches_four(self):
        left = build(6, ["test1", "test2", "test3", "test2", "test2", "test2"])
        right = build(6, ["test3", "test4", "test4", "test4", "test4", "test1"])
        left.merge_inplace(right)
        assert left.estimate() == 4

    def test_smallest_precision(self):
        assert build(4, ["test1", "test2", "test3"]).estimate() == 3

    def test_estimate_rounds_cardinality(self):
        hll = build(6, ["test1", "test2", "test3"])
        assert hll.cardinality() == pytest.approx(3.07, abs=0.01)
        assert hll.estimate() == 3

    @pytest.mark.parametrize("count", [100, 1000, 10000])
    def test_moderate_cardinalities(self, count):
        hll = HyperLogLog.with_precision(12)
        hll.insert_many(f"value_{i}" for i in range(count))
        error_margin = max(count * hll.standard_error() * 5, 3)
        assert abs(hll.estimate() - count) < error_margin

    @pytest.mark.slow
    @pytest.mark.parametrize("precision", [10, 14])
    def test_relative_error_at_scale(self, precision):
        count = 200_000
        hll = HyperLogLog.with_precision(precision)
        hll.insert_many(range(count))
        relative_error = abs(hll.estimate() - count) / count
        assert relative_error < 5 * hll.standard_error()

    def test_clear_resets_estimate(self):
        hll = build(8, [f"x{i}" for i in range(100)])
        hll.clear()
        assert hll.estimate() == 0
        assert not hll.registers.any()
        assert hll.metrics().elements_added == 0

    def test_standard_error(self):
        assert HyperLogLog.with_precision(12).standard_error() == pytest.approx(0.01625)


# ============================================================================
# Merge
# ============================================================================


class TestMerge:
    """Tests for merging summaries."""

    @pytest.fixture
    def summaries(self):
        a = build(8, [f"a_{i}" for i in range(300)])
        b = build(8, [f"b_{i}" for i in range(200)])
        c = build(8, [f"a_{i}" for i in range(100, 400)])
        return a, b, c

    def test_commutative(self, summaries):
        a, b, _ = summaries
        assert a.merge(b) == b.merge(a)

    def test_associative(self, summaries):
        a, b, c = summaries
        assert a.merge(b).merge(c) == a.merge(b.merge(c))

    def test_idempotent(self, summaries):
        a, _, _ = summaries
        assert a.merge(a) == a

    def test_empty_is_identity(self, summaries):
        a, _, _ = summaries
        assert a.merge(HyperLogLog.with_precision(8)) == a

    def test_merge_does_not_touch_inputs(self, summaries):
        a, b, _ = summaries
        before = a.copy()
        a.merge(b)
        assert a == before

    def test_merge_equals_union_of_inputs(self):
        left = [f"l_{i}" for i in range(400)]
        right = [f"r_{i}" for i in range(400)]
        merged = build(10, left).merge(build(10, right))
        assert merged == build(10, left + right)

    def test_operators(self, summaries):
        a, b, _ = summaries
        merged = a | b
        assert merged == a.merge(b)
        a |= b
        assert a == merged

    def test_precision_mismatch(self):
        hll1 = HyperLogLog.with_precision(10)
        hll2 = HyperLogLog.with_precision(12)
        with pytest.raises(ValueError, match="different precision"):
            hll1.merge(hll2)
        with pytest.raises(PrecisionMismatchError) as exc_info:
            hll1.merge_inplace(hll2)
        assert (exc_info.value.left, exc_info.value.right) == (10, 12)

    def test_union_all(self, summaries):
        a, b, c = summaries
        assert union_all([a, b, c]) == a.merge(b).merge(c)

    def test_union_all_empty(self):
        with pytest.raises(ValueError, match="at least one"):
            union_all([])

    def test_elements_added_accumulate(self):
        a = build(6, ["x", "y"])
        b = build(6, ["z"])
        a.merge_inplace(b)
        assert a.metrics().elements_added == 3


# ============================================================================
# State
# ============================================================================


class TestState:
    """Tests for copying, equality, pickling and storage."""

    def test_copy_is_independent(self):
        hll = build(6, ["test1"])
        clone = hll.copy()
        clone.insert("test2")
        assert clone != hll
        assert copy.copy(hll) == hll
        assert copy.deepcopy(hll) == hll

    def test_equality_requires_same_precision(self):
        assert HyperLogLog.with_precision(6) != HyperLogLog.with_precision(7)

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(HyperLogLog.with_precision(6))

    def test_pickle_round_trip(self):
        hll = build(10, [f"p_{i}" for i in range(500)], word_type="uint32")
        restored = pickle.loads(pickle.dumps(hll))
        assert restored == hll
        assert restored.store.word_type == "uint32"

    def test_pickle_keeps_max_rho(self):
        registers = [0] * 16
        registers[4] = 61
        hll = HyperLogLog.from_registers(registers, 4)
        restored = pickle.loads(pickle.dumps(hll))
        assert restored.registers[4] == 61

    @pytest.mark.parametrize("word_type", ["uint16", "uint32", "uint64"])
    def test_word_types_agree(self, word_type):
        values = [f"w_{i}" for i in range(3000)]
        reference = build(12, values)
        other = build(12, values, word_type=word_type)
        assert other == reference
        assert other.estimate() == reference.estimate()
        assert other.to_text() == reference.to_text()
        assert other.memory_bytes() == reference.memory_bytes() == 4096

    def test_metrics(self):
        hll = build(6, ["test1", "test2", "test3", "test2"])
        metrics = hll.metrics()
        assert isinstance(metrics, SketchMetrics)
        assert metrics.elements_added == 4
        assert metrics.memory_bytes == 64
        assert metrics.fill_ratio == pytest.approx(3 / 64)
        assert metrics.to_dict()["elements_added"] == 4

    def test_protocols(self):
        hll = HyperLogLog()
        assert isinstance(hll, MergeableSketch)
        assert isinstance(hll, CardinalityEstimator)

    def test_repr(self):
        assert "precision=12" in repr(HyperLogLog())


class TestConfig:
    """Tests for HyperLogLogConfig and create_hyperloglog."""

    def test_defaults(self):
        config = HyperLogLogConfig()
        assert config.precision == 12
        assert config.num_registers == 4096
        assert config.max_register_value == 52

    def test_fields(self):
        fields = [f.name for f in dataclasses.fields(HyperLogLogConfig)]
        assert fields == ["precision", "word_type"]

    @pytest.mark.parametrize("precision", [3, 19, 12.0, True])
    def test_invalid_precision(self, precision):
        with pytest.raises(ValueError):
            HyperLogLogConfig(precision=precision)

    def test_invalid_word_type(self):
        with pytest.raises(ValueError, match="word_type"):
            HyperLogLogConfig(word_type="float32")

    def test_for_error_rate(self):
        assert HyperLogLogConfig.for_error_rate(0.01).precision == 14
        assert HyperLogLogConfig.for_error_rate(0.5).precision == 4
        assert HyperLogLogConfig.for_error_rate(0.0001).precision == 18

    @pytest.mark.parametrize("target", [0, 1, -0.1])
    def test_for_error_rate_bounds(self, target):
        with pytest.raises(ValueError):
            HyperLogLogConfig.for_error_rate(target)

    def test_create_hyperloglog(self):
        assert create_hyperloglog(precision=8).precision == 8
        assert create_hyperloglog(target_error=0.02).precision == 12
        assert create_hyperloglog(word_type="uint64").store.word_type == "uint64"
