"""Wire representations of a HyperLogLog summary.

Two shapes carry the same compressed payload:

    - binary: the codec output, unadorned
    - text: the codec output as standard base64 without ``=`` padding

Neither shape says which precision produced it; the caller supplies it on
the way back in. Which shape a boundary uses is the caller's decision
(:class:`WireFormat`), never guessed from the content.

Usage:
    text = to_text(hll)
    restored = from_text(text, precision=hll.precision)
    assert restored == hll
"""

from __future__ import annotations

import base64
import binascii
import logging
from enum import Enum
from typing import Any, Mapping

from hllcodec.compression.base import InvalidEncoding
from hllcodec.compression.codec import RegisterCodec
from hllcodec.hyperloglog import HyperLogLog
from hllcodec.protocols import HyperLogLogConfig

logger = logging.getLogger(__name__)


class WireFormat(str, Enum):
    """Serialized shape of a summary."""

    TEXT = "text"
    BINARY = "binary"

    @classmethod
    def from_string(cls, value: str) -> "WireFormat":
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(
                f"wire format must be one of {[f.value for f in cls]}, got {value!r}"
            ) from None


def encode_base64(data: bytes) -> str:
    """Standard base64 of ``data`` without padding."""
    return base64.b64encode(data).decode("ascii").rstrip("=")


def decode_base64(text: str) -> bytes:
    """Inverse of :func:`encode_base64`.

    Raises:
        InvalidEncoding: If ``text`` is not canonical unpadded base64.
    """
    if "=" in text:
        raise InvalidEncoding("base64 padding is not allowed")
    if len(text) % 4 == 1:
        raise InvalidEncoding(f"invalid base64 length {len(text)}")
    try:
        data = base64.b64decode(text + "=" * (-len(text) % 4), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidEncoding(f"invalid base64: {exc}") from exc
    # Reject non-zero trailing bits so every payload has one text form.
    if encode_base64(data) != text:
        raise InvalidEncoding("invalid base64: non-canonical trailing bits")
    return data


def to_bytes(hll: HyperLogLog) -> bytes:
    """Binary shape: the compressed registers."""
    return RegisterCodec(hll.precision).encode(hll.registers)


def to_text(hll: HyperLogLog) -> str:
    """Text shape: the compressed registers as unpadded base64."""
    return encode_base64(to_bytes(hll))


def from_bytes(
    data: bytes | bytearray | memoryview, precision: int, word_type: str = "uint8"
) -> HyperLogLog:
    """Decode the binary shape into a fresh summary.

    Raises:
        UnexpectedEndOfInput: If ``data`` is too short for ``2^precision``
            registers.
    """
    hll = HyperLogLog(HyperLogLogConfig(precision=precision, word_type=word_type))
    RegisterCodec(precision).decode_into(data, hll.registers)
    return hll


def from_text(text: str, precision: int, word_type: str = "uint8") -> HyperLogLog:
    """Decode the text shape into a fresh summary.

    Raises:
        InvalidEncoding: If ``text`` is not valid unpadded base64.
        UnexpectedEndOfInput: If the decoded payload is too short.
    """
    if not isinstance(text, str):
        raise InvalidEncoding(f"expected str, got {type(text).__name__}")
    if not text.isascii():
        raise InvalidEncoding("invalid base64: non-ASCII characters")
    data = decode_base64(text)
    logger.debug("Decoded %d base64 characters into %d bytes", len(text), len(data))
    return from_bytes(data, precision, word_type)


def dumps(hll: HyperLogLog, fmt: WireFormat | str = WireFormat.TEXT) -> str | bytes:
    """Serialize ``hll`` in the shape the caller asks for."""
    if isinstance(fmt, str) and not isinstance(fmt, WireFormat):
        fmt = WireFormat.from_string(fmt)
    if fmt is WireFormat.TEXT:
        return to_text(hll)
    return to_bytes(hll)


def loads(
    payload: str | bytes | bytearray | memoryview,
    fmt: WireFormat | str,
    precision: int,
    word_type: str = "uint8",
) -> HyperLogLog:
    """Deserialize a payload in the shape named by ``fmt``."""
    if isinstance(fmt, str) and not isinstance(fmt, WireFormat):
        fmt = WireFormat.from_string(fmt)
    if fmt is WireFormat.TEXT:
        if not isinstance(payload, str):
            raise InvalidEncoding(f"text format expects str, got {type(payload).__name__}")
        return from_text(payload, precision, word_type)
    if isinstance(payload, str):
        raise InvalidEncoding("binary format expects bytes, got str")
    return from_bytes(payload, precision, word_type)


def to_document(hll: HyperLogLog) -> dict[str, Any]:
    """JSON-ready document carrying the precision next to the text shape."""
    return {"precision": hll.precision, "registers": to_text(hll)}


def from_document(document: Mapping[str, Any], word_type: str = "uint8") -> HyperLogLog:
    """Inverse of :func:`to_document`.

    Raises:
        InvalidEncoding: If a key is missing or has the wrong type.
    """
    try:
        precision = document["precision"]
        registers = document["registers"]
    except (KeyError, TypeError) as exc:
        raise InvalidEncoding(f"missing summary field: {exc}") from exc
    if isinstance(precision, bool) or not isinstance(precision, int):
        raise InvalidEncoding(f"precision must be an integer, got {precision!r}")
    try:
        HyperLogLogConfig(precision=precision)
    except ValueError as exc:
        raise InvalidEncoding(str(exc)) from exc
    return from_text(registers, precision, word_type)
