"""Base classes, protocols, and types for the register codec.

This module defines the exceptions raised by decoding, the metrics reported
by encoding, and the structural interfaces the codec pieces follow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


# =============================================================================
# Exceptions
# =============================================================================


class CodecError(Exception):
    """Base exception for register codec and envelope errors."""

    def __init__(self, message: str, precision: int | None = None) -> None:
        self.precision = precision
        super().__init__(f"[p={precision}] {message}" if precision is not None else message)


class DecompressionError(CodecError):
    """Error while decoding a compressed register payload."""

    pass


class UnexpectedEndOfInput(DecompressionError):
    """The payload ran out of bits before every register was decoded.

    Raised for truncated payloads and for payloads produced at a different
    precision.
    """

    def __init__(
        self,
        decoded: int,
        expected: int,
        available_bits: int,
        precision: int | None = None,
        reason: str | None = None,
    ) -> None:
        self.decoded = decoded
        self.expected = expected
        self.available_bits = available_bits
        message = (
            f"input exhausted after {decoded} of {expected} registers"
            if reason is None
            else reason
        )
        super().__init__(f"{message} ({available_bits} bits available)", precision)


class InvalidEncoding(CodecError):
    """Text or document input is not a valid register encoding."""

    pass


class PrecisionMismatchError(ValueError):
    """Two summaries of different precision were combined."""

    def __init__(self, left: int, right: int) -> None:
        self.left = left
        self.right = right
        super().__init__(
            f"Cannot merge HyperLogLog with different precision: {left} vs {right}"
        )


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class CodecMetrics:
    """Metrics from an encode operation.

    Attributes:
        original_size: Size of the raw register bytes.
        compressed_size: Size of the encoded payload in bytes.
        compression_ratio: Ratio of original to compressed size.
        encode_time_ms: Time taken to encode in milliseconds.
        precision: Precision of the encoded registers.
    """

    original_size: int = 0
    compressed_size: int = 0
    compression_ratio: float = 0.0
    encode_time_ms: float = 0.0
    precision: int = 0

    def update_ratio(self) -> None:
        """Update compression ratio from sizes."""
        if self.compressed_size > 0:
            self.compression_ratio = self.original_size / self.compressed_size
        else:
            self.compression_ratio = 0.0

    @property
    def space_savings(self) -> float:
        """Calculate space savings percentage."""
        if self.original_size == 0:
            return 0.0
        return (1 - self.compressed_size / self.original_size) * 100

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "original_size": self.original_size,
            "compressed_size": self.compressed_size,
            "compression_ratio": round(self.compression_ratio, 2),
            "space_savings_percent": round(self.space_savings, 2),
            "encode_time_ms": round(self.encode_time_ms, 2),
            "precision": self.precision,
        }


# =============================================================================
# Protocols
# =============================================================================


@runtime_checkable
class FrequencyModel(Protocol):
    """Symbol probability model shared by an encoder and its decoder."""

    @property
    def total(self) -> int:
        """Sum of all symbol frequencies."""
        ...

    def interval(self, symbol: int) -> tuple[int, int]:
        """Cumulative ``(low, high)`` frequency bounds of ``symbol``."""
        ...

    def symbol_for(self, target: int) -> int:
        """Symbol whose cumulative interval contains ``target``."""
        ...

    def update(self, symbol: int) -> None:
        """Adapt the model after ``symbol`` was coded."""
        ...


@runtime_checkable
class BitSink(Protocol):
    """Destination for encoder output bits."""

    def write_bit(self, bit: int) -> None:
        ...

    def write_bits(self, bit: int, count: int) -> None:
        ...


@runtime_checkable
class BitSource(Protocol):
    """Source of decoder input bits."""

    @property
    def available_bits(self) -> int:
        ...

    def read_bit(self) -> int:
        ...
