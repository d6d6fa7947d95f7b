"""Approximate distinct counting with compact, mergeable HyperLogLog summaries.

Key pieces:
    - HyperLogLog: insertion, estimation (HLL++ bias correction), merge
    - RegisterCodec: adaptive arithmetic coding of the register array
    - to_text / to_bytes / from_text / from_bytes: wire representations

Usage:
    from hllcodec import HyperLogLog, HyperLogLogConfig

    hll = HyperLogLog(HyperLogLogConfig(precision=12))
    for value in data:
        hll.insert(value)
    distinct_count = hll.estimate()

    payload = hll.to_text()
    restored = HyperLogLog.from_text(payload, precision=12)
    assert restored == hll
"""

from hllcodec.protocols import (
    Sketch,
    MergeableSketch,
    CardinalityEstimator,
    SketchMetrics,
    HyperLogLogConfig,
)
from hllcodec.compression import (
    CodecError,
    DecompressionError,
    InvalidEncoding,
    PrecisionMismatchError,
    UnexpectedEndOfInput,
    RegisterCodec,
    compress_registers,
    decompress_registers,
)
from hllcodec.registers import RegisterStore
from hllcodec.hyperloglog import HyperLogLog, create_hyperloglog, union_all
from hllcodec.serialization import (
    WireFormat,
    dumps,
    loads,
    from_bytes,
    from_text,
    to_bytes,
    to_text,
)
from hllcodec.factory import SketchFactory, SketchPreset, create_sketch

__version__ = "0.1.0"

__all__ = [
    # Protocols and configuration
    "Sketch",
    "MergeableSketch",
    "CardinalityEstimator",
    "SketchMetrics",
    "HyperLogLogConfig",
    # Summary
    "HyperLogLog",
    "RegisterStore",
    "create_hyperloglog",
    "union_all",
    # Codec
    "RegisterCodec",
    "compress_registers",
    "decompress_registers",
    # Wire format
    "WireFormat",
    "dumps",
    "loads",
    "from_bytes",
    "from_text",
    "to_bytes",
    "to_text",
    # Errors
    "CodecError",
    "DecompressionError",
    "InvalidEncoding",
    "PrecisionMismatchError",
    "UnexpectedEndOfInput",
    # Factory
    "SketchFactory",
    "SketchPreset",
    "create_sketch",
]
