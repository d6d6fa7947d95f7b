"""Tests for value hashing and bucket selection."""

import pytest
import xxhash

from hllcodec.hashing import HASH_SEED, hash64, rho, split_hash, value_to_bytes


class TestValueToBytes:
    """Tests for the canonical byte form of inserted values."""

    def test_bytes_used_as_is(self):
        assert value_to_bytes(b"\x00\xffabc") == b"\x00\xffabc"

    def test_bytearray_and_memoryview(self):
        assert value_to_bytes(bytearray(b"abc")) == b"abc"
        assert value_to_bytes(memoryview(b"abc")) == b"abc"

    def test_str_is_utf8(self):
        assert value_to_bytes("héllo") == "héllo".encode("utf-8")

    def test_int_is_little_endian_signed(self):
        assert value_to_bytes(1) == b"\x01" + b"\x00" * 7
        assert value_to_bytes(-1) == b"\xff" * 8

    def test_large_int_falls_back_to_str(self):
        assert value_to_bytes(2**64) == b"18446744073709551616"

    def test_other_values_use_str(self):
        assert value_to_bytes(1.5) == b"1.5"


class TestHash64:
    """Tests for the 64-bit value hash."""

    def test_matches_seeded_xxh64(self):
        assert hash64("test1") == xxhash.xxh64(b"test1", seed=HASH_SEED).intdigest()

    def test_str_and_bytes_agree(self):
        assert hash64("value") == hash64(b"value")

    def test_int_differs_from_its_text(self):
        assert hash64(42) != hash64("42")

    def test_range(self):
        for value in ("a", "b", 0, 1, b""):
            assert 0 <= hash64(value) < 2**64

    def test_deterministic(self):
        assert hash64("repeat") == hash64("repeat")


class TestRho:
    """Tests for the leading-zero run length."""

    def test_top_bit_set(self):
        assert rho(1 << 59, 60) == 1

    def test_lowest_bit_only(self):
        assert rho(1, 60) == 60

    def test_zero_word(self):
        # No set bit in the window: one past the window width.
        assert rho(0, 60) == 61

    @pytest.mark.parametrize("precision", [4, 6, 12, 18])
    def test_split_hash_zero(self, precision):
        assert split_hash(0, precision) == (0, 65 - precision)

    def test_split_hash_uses_low_bits_for_index(self):
        x = (1 << 63) | 0b0101
        assert split_hash(x, 4) == (5, 1)

    def test_scenario_values_hit_distinct_registers(self):
        indexes = {split_hash(hash64(f"test{i}"), 6)[0] for i in range(1, 5)}
        assert len(indexes) == 4
