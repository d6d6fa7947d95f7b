"""Adaptive order-0 frequency model for the range coder."""

from __future__ import annotations

import bisect

# With a 48-bit coder range, totals up to 2^16 keep every
# ``range * cumulative`` product inside 64 bits.
DEFAULT_MAX_TOTAL = 1 << 16


class AdaptiveFrequencyModel:
    """Symbol frequencies that start uniform and follow observed symbols.

    Every symbol starts with frequency 1. Each :meth:`update` adds 1 to the
    coded symbol; when the total would exceed ``max_total`` all frequencies
    are halved, rounding up so that no symbol becomes uncodable. The model
    uses integers only, so an encoder and a decoder on any platform stay in
    lockstep.

    Args:
        num_symbols: Alphabet size; symbols are ``0 .. num_symbols - 1``.
        max_total: Largest total frequency before rescaling.
    """

    __slots__ = ("_frequencies", "_cumulative", "_max_total")

    def __init__(self, num_symbols: int, max_total: int = DEFAULT_MAX_TOTAL) -> None:
        if num_symbols < 2:
            raise ValueError(f"num_symbols must be at least 2, got {num_symbols}")
        if max_total < num_symbols * 2:
            raise ValueError(
                f"max_total must be at least {num_symbols * 2}, got {max_total}"
            )
        self._frequencies = [1] * num_symbols
        self._cumulative = list(range(num_symbols + 1))
        self._max_total = max_total

    @property
    def num_symbols(self) -> int:
        return len(self._frequencies)

    @property
    def total(self) -> int:
        return self._cumulative[-1]

    @property
    def frequencies(self) -> tuple[int, ...]:
        return tuple(self._frequencies)

    def interval(self, symbol: int) -> tuple[int, int]:
        return self._cumulative[symbol], self._cumulative[symbol + 1]

    def symbol_for(self, target: int) -> int:
        return bisect.bisect_right(self._cumulative, target) - 1

    def update(self, symbol: int) -> None:
        self._frequencies[symbol] += 1
        cumulative = self._cumulative
        for i in range(symbol + 1, len(cumulative)):
            cumulative[i] += 1
        if cumulative[-1] > self._max_total:
            self._rescale()

    def _rescale(self) -> None:
        self._frequencies = [(f + 1) // 2 for f in self._frequencies]
        running = 0
        cumulative = [0]
        for frequency in self._frequencies:
            running += frequency
            cumulative.append(running)
        self._cumulative = cumulative
