"""Entropy-coded compression of HyperLogLog registers.

Public API:
    RegisterCodec: registers <-> compressed bytes for one precision
    compress_registers / decompress_registers: one-shot helpers
    AdaptiveFrequencyModel: order-0 adaptive symbol model
    RangeEncoder / RangeDecoder: integer arithmetic coder
    CodecError, DecompressionError, UnexpectedEndOfInput, InvalidEncoding
"""

from hllcodec.compression.base import (
    CodecError,
    CodecMetrics,
    DecompressionError,
    InvalidEncoding,
    PrecisionMismatchError,
    UnexpectedEndOfInput,
)
from hllcodec.compression.bitio import BitReader, BitWriter
from hllcodec.compression.codec import (
    RegisterCodec,
    compress_registers,
    compression_symbols,
    decompress_registers,
)
from hllcodec.compression.model import AdaptiveFrequencyModel
from hllcodec.compression.range_coder import RangeDecoder, RangeEncoder

__all__ = [
    # Exceptions
    "CodecError",
    "DecompressionError",
    "InvalidEncoding",
    "PrecisionMismatchError",
    "UnexpectedEndOfInput",
    # Metrics
    "CodecMetrics",
    # Codec
    "RegisterCodec",
    "compress_registers",
    "compression_symbols",
    "decompress_registers",
    # Building blocks
    "AdaptiveFrequencyModel",
    "BitReader",
    "BitWriter",
    "RangeDecoder",
    "RangeEncoder",
]
