"""Protocol definitions and configuration types for cardinality sketches.

This module defines the interfaces that the HyperLogLog summary implements,
plus the frozen configuration and metrics dataclasses shared across the
package.
"""

from __future__ import annotations

import math
from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Protocol, TypeVar, runtime_checkable

import numpy as np

S = TypeVar("S", bound="Sketch")

MIN_PRECISION = 4
MAX_PRECISION = 18

# Unsigned word types a register store may be backed by.
WORD_TYPES: dict[str, type[np.unsignedinteger]] = {
    "uint8": np.uint8,
    "uint16": np.uint16,
    "uint32": np.uint32,
    "uint64": np.uint64,
}


def validate_precision(precision: int) -> int:
    """Return ``precision`` if it is a supported value, else raise ValueError."""
    if isinstance(precision, bool) or not isinstance(precision, (int, np.integer)):
        raise ValueError(f"precision must be an integer, got {precision!r}")
    if not MIN_PRECISION <= precision <= MAX_PRECISION:
        raise ValueError(
            f"precision must be {MIN_PRECISION}-{MAX_PRECISION}, got {precision}"
        )
    return int(precision)


@runtime_checkable
class Sketch(Protocol):
    """A fixed-memory summary that values can be added to and reset."""

    @abstractmethod
    def add(self, value: Any) -> None:
        """Add a value to the sketch."""
        ...

    @abstractmethod
    def add_batch(self, values: Iterable[Any]) -> None:
        """Add multiple values efficiently."""
        ...

    @abstractmethod
    def memory_bytes(self) -> int:
        """Return memory usage in bytes."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Reset the sketch to initial state."""
        ...


@runtime_checkable
class MergeableSketch(Sketch, Protocol[S]):
    """Protocol for sketches that can be merged for distributed processing."""

    @abstractmethod
    def merge(self, other: S) -> S:
        """Merge another sketch into a new sketch.

        Raises:
            PrecisionMismatchError: If sketches have incompatible configurations
        """
        ...

    @abstractmethod
    def merge_inplace(self, other: S) -> None:
        """Merge another sketch into this sketch in-place."""
        ...


@runtime_checkable
class CardinalityEstimator(Protocol):
    """Protocol for structures that estimate distinct element count."""

    @abstractmethod
    def estimate(self) -> int:
        """Estimate the number of distinct elements."""
        ...

    @abstractmethod
    def cardinality(self) -> float:
        """Unrounded estimate of the number of distinct elements."""
        ...

    @abstractmethod
    def standard_error(self) -> float:
        """Return the standard error rate (e.g., 0.01 = 1% error)."""
        ...


@dataclass(frozen=True)
class SketchMetrics:
    """Metrics about a sketch's state and accuracy.

    Attributes:
        elements_added: Total insert calls since creation or the last clear
        memory_bytes: Current register memory usage
        estimated_error: Theoretical standard error
        fill_ratio: Fraction of registers that are non-zero
    """

    elements_added: int = 0
    memory_bytes: int = 0
    estimated_error: float = 0.0
    fill_ratio: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "elements_added": self.elements_added,
            "memory_bytes": self.memory_bytes,
            "estimated_error": self.estimated_error,
            "fill_ratio": self.fill_ratio,
        }


@dataclass(frozen=True)
class HyperLogLogConfig:
    """Configuration for the HyperLogLog cardinality estimator.

    Attributes:
        precision: Number of bits for register indexing (4-18).
                   Memory = 2^precision bytes.
        word_type: Unsigned numpy word type backing the register bytes
                   ("uint8", "uint16", "uint32" or "uint64"). Only the
                   storage layout changes; estimates and encodings do not.
    """

    precision: int = 12
    word_type: str = "uint8"

    def __post_init__(self) -> None:
        validate_precision(self.precision)
        if self.word_type not in WORD_TYPES:
            raise ValueError(
                f"word_type must be one of {sorted(WORD_TYPES)}, got {self.word_type!r}"
            )

    @property
    def num_registers(self) -> int:
        return 1 << self.precision

    @property
    def max_register_value(self) -> int:
        """Largest register value carried by the compressed encoding."""
        return 64 - self.precision

    @property
    def expected_error(self) -> float:
        """Expected standard error based on precision."""
        return 1.04 / math.sqrt(self.num_registers)

    @classmethod
    def for_error_rate(
        cls, target_error: float, word_type: str = "uint8"
    ) -> "HyperLogLogConfig":
        """Create config that achieves target error rate.

        Args:
            target_error: Desired standard error (e.g., 0.01 for 1%)
            word_type: Register storage word type

        Returns:
            HyperLogLogConfig with appropriate precision
        """
        if not 0 < target_error < 1:
            raise ValueError(f"target_error must be (0, 1), got {target_error}")

        # Error = 1.04 / sqrt(m), so m = (1.04 / error)^2
        required_registers = (1.04 / target_error) ** 2
        precision = max(
            MIN_PRECISION,
            min(MAX_PRECISION, int(math.ceil(math.log2(required_registers)))),
        )
        return cls(precision=precision, word_type=word_type)
