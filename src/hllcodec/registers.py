"""Fixed-size register storage for HyperLogLog summaries.

A store holds ``M = 2^P`` single-byte counters. The counters may live in a
wider numpy word array (``uint16`` .. ``uint64``); whatever the word width,
every algorithm reads and writes them through :attr:`RegisterStore.registers`,
a ``uint8`` view over exactly ``M`` bytes.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from hllcodec.protocols import WORD_TYPES, validate_precision


class RegisterStore:
    """Zero-initialised byte registers with a fixed precision.

    Args:
        precision: Precision ``P`` (4-18); the store holds ``2^P`` registers.
        word_type: Name of the unsigned numpy word type backing the bytes.
    """

    __slots__ = ("_precision", "_words")

    def __init__(self, precision: int, word_type: str = "uint8") -> None:
        self._precision = validate_precision(precision)
        try:
            dtype = np.dtype(WORD_TYPES[word_type])
        except KeyError:
            raise ValueError(
                f"word_type must be one of {sorted(WORD_TYPES)}, got {word_type!r}"
            ) from None
        # 2^P is always a multiple of the widest supported word (8 bytes).
        self._words = np.zeros((1 << self._precision) // dtype.itemsize, dtype=dtype)

    @classmethod
    def from_registers(
        cls, precision: int, registers: Any, word_type: str = "uint8"
    ) -> "RegisterStore":
        """Build a store from an existing sequence of register values.

        Raises:
            ValueError: If the length is not ``2^precision`` or a value is
                outside ``[0, 65 - precision]``.
        """
        store = cls(precision, word_type)
        if isinstance(registers, (bytes, bytearray, memoryview)):
            values = np.frombuffer(registers, dtype=np.uint8)
        else:
            values = np.asarray(registers)
        if values.shape != (store.num_registers,):
            raise ValueError(
                f"expected {store.num_registers} registers for precision "
                f"{store.precision}, got shape {values.shape}"
            )
        if values.size and (values.min() < 0 or values.max() > store.max_rho):
            raise ValueError(
                f"register values must be within [0, {store.max_rho}] "
                f"for precision {store.precision}"
            )
        store.registers[:] = values.astype(np.uint8)
        return store

    @property
    def precision(self) -> int:
        return self._precision

    @property
    def num_registers(self) -> int:
        return 1 << self._precision

    @property
    def word_type(self) -> str:
        return self._words.dtype.name

    @property
    def max_rho(self) -> int:
        """Largest value insertion can write (all-zero upper hash bits)."""
        return 65 - self._precision

    @property
    def registers(self) -> np.ndarray:
        """Writable ``uint8`` view of exactly ``num_registers`` bytes."""
        return self._words.view(np.uint8)

    @property
    def nbytes(self) -> int:
        return self._words.nbytes

    def clear(self) -> None:
        self._words.fill(0)

    def copy(self) -> "RegisterStore":
        clone = RegisterStore.__new__(RegisterStore)
        clone._precision = self._precision
        clone._words = self._words.copy()
        return clone

    def count_zeros(self) -> int:
        return self.num_registers - int(np.count_nonzero(self.registers))

    def __len__(self) -> int:
        return self.num_registers

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegisterStore):
            return NotImplemented
        return self._precision == other._precision and np.array_equal(
            self.registers, other.registers
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"RegisterStore(precision={self._precision}, "
            f"word_type={self.word_type!r})"
        )


def merge_registers(dst: np.ndarray, src: np.ndarray) -> None:
    """Register-wise maximum of ``src`` into ``dst``, in place."""
    if dst.shape != src.shape:
        raise ValueError(
            f"register arrays differ in length: {dst.shape[0]} vs {src.shape[0]}"
        )
    np.maximum(dst, src, out=dst)
