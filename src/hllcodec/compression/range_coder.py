"""Integer binary arithmetic coder with carry-less renormalization.

The coder keeps a ``[low, high]`` interval of ``precision`` bits. Each symbol
narrows the interval to its share of the model's cumulative frequencies;
whenever the interval sits entirely in one half its leading bit is settled
and shifted out, and when it straddles the midpoint inside the middle half
the decision is deferred as a pending bit.
"""

from __future__ import annotations

from hllcodec.compression.base import (
    BitSink,
    BitSource,
    DecompressionError,
    FrequencyModel,
)

DEFAULT_PRECISION = 48


class _Bounds:
    __slots__ = ("mask", "half", "quarter", "three_quarters")

    def __init__(self, precision: int) -> None:
        if precision < 8:
            raise ValueError(f"coder precision must be at least 8, got {precision}")
        self.mask = (1 << precision) - 1
        self.half = 1 << (precision - 1)
        self.quarter = 1 << (precision - 2)
        self.three_quarters = self.half + self.quarter


class RangeEncoder:
    """Encode symbols against a frequency model into a bit sink."""

    __slots__ = ("_bounds", "_low", "_high", "_pending", "_sink")

    def __init__(self, sink: BitSink, precision: int = DEFAULT_PRECISION) -> None:
        self._bounds = _Bounds(precision)
        self._low = 0
        self._high = self._bounds.mask
        self._pending = 0
        self._sink = sink

    def _emit(self, bit: int) -> None:
        self._sink.write_bit(bit)
        if self._pending:
            self._sink.write_bits(bit ^ 1, self._pending)
            self._pending = 0

    def encode(self, symbol: int, model: FrequencyModel) -> None:
        bounds = self._bounds
        total = model.total
        symbol_low, symbol_high = model.interval(symbol)

        span = self._high - self._low + 1
        high = self._low + span * symbol_high // total - 1
        low = self._low + span * symbol_low // total

        while True:
            if high < bounds.half:
                self._emit(0)
            elif low >= bounds.half:
                self._emit(1)
            elif low >= bounds.quarter and high < bounds.three_quarters:
                self._pending += 1
                low -= bounds.quarter
                high -= bounds.quarter
            else:
                break
            low = (low << 1) & bounds.mask
            high = ((high << 1) & bounds.mask) | 1

        self._low = low
        self._high = high

    def finish(self) -> None:
        """Emit the bits that select a value inside the final interval."""
        self._pending += 1
        self._emit(0 if self._low < self._bounds.quarter else 1)


class RangeDecoder:
    """Decode symbols encoded by :class:`RangeEncoder`.

    The decoder looks ``precision`` bits ahead of the encoder, so it reads
    zero bits past the end of a complete payload. It only fails when the
    symbols decoded so far need more real input bits than the source holds.
    """

    __slots__ = ("_bounds", "_low", "_high", "_value", "_shifts", "_source")

    def __init__(self, source: BitSource, precision: int = DEFAULT_PRECISION) -> None:
        self._bounds = _Bounds(precision)
        self._low = 0
        self._high = self._bounds.mask
        self._source = source
        self._shifts = 0
        value = 0
        for _ in range(precision):
            value = (value << 1) | source.read_bit()
        self._value = value

    @property
    def required_bits(self) -> int:
        """Real input bits needed by the symbols decoded so far.

        The encoder writes one bit per renormalization shift plus two bits
        from :meth:`RangeEncoder.finish`.
        """
        return self._shifts + 2

    @property
    def exhausted(self) -> bool:
        return self.required_bits > self._source.available_bits

    def decode(self, model: FrequencyModel) -> int:
        """Decode one symbol.

        Raises:
            DecompressionError: If the decoded symbols need more input bits
                than the source holds.
        """
        bounds = self._bounds
        total = model.total
        low = self._low
        high = self._high
        value = self._value

        span = high - low + 1
        target = ((value - low + 1) * total - 1) // span
        symbol = model.symbol_for(target)
        symbol_low, symbol_high = model.interval(symbol)

        high = low + span * symbol_high // total - 1
        low = low + span * symbol_low // total

        while True:
            if high < bounds.half:
                pass
            elif low >= bounds.half:
                low -= bounds.half
                high -= bounds.half
                value -= bounds.half
            elif low >= bounds.quarter and high < bounds.three_quarters:
                low -= bounds.quarter
                high -= bounds.quarter
                value -= bounds.quarter
            else:
                break
            low <<= 1
            high = (high << 1) | 1
            value = (value << 1) | self._source.read_bit()
            self._shifts += 1

        self._low = low
        self._high = high
        self._value = value

        if self.exhausted:
            raise DecompressionError(
                f"symbol needs {self.required_bits} bits, "
                f"input holds {self._source.available_bits}"
            )
        return symbol
