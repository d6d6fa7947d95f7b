"""Access to the HLL++ empirical reference tables.

The linear-counting thresholds, raw-estimate reference points and bias
corrections are the published calibration data of Heule, Nunkesser and Hall,
"HyperLogLog in Practice" (2013). They are read from the copy shipped with
``datasketch`` and indexed by ``precision - 4``.
"""

from __future__ import annotations

from datasketch.hyperloglog_const import _bias, _raw_estimate, _thresholds

from hllcodec.protocols import MIN_PRECISION, validate_precision


def threshold(precision: int) -> float:
    """Largest linear-counting estimate trusted at ``precision``."""
    return float(_thresholds[validate_precision(precision) - MIN_PRECISION])


def raw_estimates(precision: int) -> list[float]:
    """Sorted raw-estimate reference points for ``precision``."""
    return _raw_estimate[validate_precision(precision) - MIN_PRECISION]


def biases(precision: int) -> list[float]:
    """Bias corrections paired with :func:`raw_estimates`."""
    return _bias[validate_precision(precision) - MIN_PRECISION]
