"""Compressed encoding of HyperLogLog register arrays.

Registers are coded in index order with an adaptive order-0 model over the
``65 - P`` register values ``0 .. 64 - P``. The output carries no header and
no end marker: a decoder must already know the precision, stops after
exactly ``2^P`` symbols, and accepts a payload only if it is the encoding of
those symbols.
"""

from __future__ import annotations

import logging
import time

import numpy as np

from hllcodec.compression.base import (
    CodecMetrics,
    DecompressionError,
    UnexpectedEndOfInput,
)
from hllcodec.compression.bitio import BitReader, BitWriter
from hllcodec.compression.model import AdaptiveFrequencyModel
from hllcodec.compression.range_coder import (
    DEFAULT_PRECISION,
    RangeDecoder,
    RangeEncoder,
)
from hllcodec.protocols import validate_precision

logger = logging.getLogger(__name__)


def compression_symbols(precision: int) -> int:
    """Alphabet size of the register codec at ``precision``."""
    return 64 + 1 - precision


class RegisterCodec:
    """Encode and decode the registers of one precision.

    Args:
        precision: Precision ``P`` of the registers (4-18).
        coder_precision: Bit width of the range coder interval.
    """

    def __init__(self, precision: int, coder_precision: int = DEFAULT_PRECISION) -> None:
        self._precision = validate_precision(precision)
        self._coder_precision = coder_precision

    @property
    def precision(self) -> int:
        return self._precision

    @property
    def num_registers(self) -> int:
        return 1 << self._precision

    @property
    def num_symbols(self) -> int:
        return compression_symbols(self._precision)

    def _new_model(self) -> AdaptiveFrequencyModel:
        return AdaptiveFrequencyModel(self.num_symbols)

    def _check_length(self, registers: np.ndarray) -> None:
        if len(registers) != self.num_registers:
            raise ValueError(
                f"expected {self.num_registers} registers for precision "
                f"{self._precision}, got {len(registers)}"
            )

    def _encode_symbols(self, symbols: list[int]) -> bytes:
        model = self._new_model()
        writer = BitWriter()
        encoder = RangeEncoder(writer, self._coder_precision)
        for symbol in symbols:
            encoder.encode(symbol, model)
            model.update(symbol)
        encoder.finish()
        return writer.getvalue()

    def encode(self, registers: np.ndarray) -> bytes:
        """Compress ``registers`` into a byte string.

        Values above ``64 - P`` are clamped to it; the alphabet has no symbol
        for them.
        """
        self._check_length(registers)
        payload = self._encode_symbols(
            np.minimum(registers, self.num_symbols - 1).tolist()
        )
        logger.debug(
            "Encoded %d registers (p=%d) into %d bytes",
            self.num_registers,
            self._precision,
            len(payload),
        )
        return payload

    def encode_with_metrics(self, registers: np.ndarray) -> tuple[bytes, CodecMetrics]:
        """Compress ``registers`` and report sizes and timing."""
        start = time.perf_counter()
        payload = self.encode(registers)
        metrics = CodecMetrics(
            original_size=self.num_registers,
            compressed_size=len(payload),
            encode_time_ms=(time.perf_counter() - start) * 1000,
            precision=self._precision,
        )
        metrics.update_ratio()
        return payload, metrics

    def decode_into(self, data: bytes | bytearray | memoryview, registers: np.ndarray) -> None:
        """Decode exactly ``2^P`` registers from ``data`` into ``registers``.

        ``data`` must be exactly what :meth:`encode` produced. Payloads that
        are cut short, carry extra bytes or were written at another precision
        are rejected, and ``registers`` is left untouched.

        Raises:
            UnexpectedEndOfInput: If ``data`` is not a complete payload of
                ``2^P`` registers.
        """
        self._check_length(registers)
        model = self._new_model()
        reader = BitReader(data)
        decoder = RangeDecoder(reader, self._coder_precision)

        values = [0] * self.num_registers
        index = 0
        try:
            for index in range(self.num_registers):
                symbol = decoder.decode(model)
                model.update(symbol)
                values[index] = symbol
        except DecompressionError as exc:
            raise UnexpectedEndOfInput(
                decoded=index,
                expected=self.num_registers,
                available_bits=reader.available_bits,
                precision=self._precision,
            ) from exc

        # Without a length field a cut payload can still yield 2^P symbols;
        # only the exact encoding of the decoded registers is accepted.
        if self._encode_symbols(values) != bytes(data):
            raise UnexpectedEndOfInput(
                decoded=self.num_registers,
                expected=self.num_registers,
                available_bits=reader.available_bits,
                precision=self._precision,
                reason="payload does not match the encoding of its decoded registers",
            )

        registers[:] = values
        logger.debug(
            "Decoded %d registers (p=%d) from %d bytes",
            self.num_registers,
            self._precision,
            reader.available_bits // 8,
        )

    def decode(self, data: bytes | bytearray | memoryview) -> np.ndarray:
        """Decode ``data`` into a new ``uint8`` register array."""
        registers = np.zeros(self.num_registers, dtype=np.uint8)
        self.decode_into(data, registers)
        return registers


def compress_registers(registers: np.ndarray, precision: int) -> bytes:
    """Compress a register array of the given precision."""
    return RegisterCodec(precision).encode(registers)


def decompress_registers(data: bytes | bytearray | memoryview, precision: int) -> np.ndarray:
    """Decompress a payload produced by :func:`compress_registers`."""
    return RegisterCodec(precision).decode(data)
