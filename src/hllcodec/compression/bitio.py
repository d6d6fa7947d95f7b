"""MSB-first bit I/O over in-memory buffers."""

from __future__ import annotations


class BitWriter:
    """Accumulate bits most-significant first into a byte buffer."""

    __slots__ = ("_buffer", "_current", "_filled")

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._current = 0
        self._filled = 0

    @property
    def bit_length(self) -> int:
        """Number of bits written so far."""
        return len(self._buffer) * 8 + self._filled

    def write_bit(self, bit: int) -> None:
        self._current = (self._current << 1) | (bit & 1)
        self._filled += 1
        if self._filled == 8:
            self._buffer.append(self._current)
            self._current = 0
            self._filled = 0

    def write_bits(self, bit: int, count: int) -> None:
        """Write ``count`` copies of ``bit``."""
        for _ in range(count):
            self.write_bit(bit)

    def getvalue(self) -> bytes:
        """Written bits, zero-padded to a whole number of bytes."""
        if self._filled:
            return bytes(self._buffer) + bytes([self._current << (8 - self._filled)])
        return bytes(self._buffer)


class BitReader:
    """Read bits most-significant first from a byte buffer.

    Reading past the end yields ``0`` bits. The caller decides how many of
    those it may consume (see :attr:`available_bits`).
    """

    __slots__ = ("_data", "_position")

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = bytes(data)
        self._position = 0

    @property
    def available_bits(self) -> int:
        return len(self._data) * 8

    @property
    def position(self) -> int:
        """Number of bits read so far, including zero bits past the end."""
        return self._position

    def read_bit(self) -> int:
        position = self._position
        self._position = position + 1
        byte_index = position >> 3
        if byte_index >= len(self._data):
            return 0
        return (self._data[byte_index] >> (7 - (position & 7))) & 1
