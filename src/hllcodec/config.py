"""Environment-driven settings and logging setup.

Settings are read from environment variables with a prefix:

    HLLCODEC_PRECISION=14
    HLLCODEC_WORD_TYPE=uint64
    HLLCODEC_WIRE_FORMAT=binary
    HLLCODEC_LOG_LEVEL=debug

Usage:
    >>> from hllcodec.config import load_settings, configure_logging
    >>> settings = load_settings()
    >>> configure_logging(settings.log_level)
    >>> hll = HyperLogLog(settings.hyperloglog_config())
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping

from hllcodec.protocols import WORD_TYPES, HyperLogLogConfig, validate_precision
from hllcodec.serialization import WireFormat

DEFAULT_PREFIX = "HLLCODEC"

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class HllCodecSettings:
    """Process-level defaults for building and shipping summaries.

    Attributes:
        precision: Default precision for new summaries.
        word_type: Default register storage word type.
        wire_format: Default serialized shape.
        log_level: Logging level name.
    """

    precision: int = 12
    word_type: str = "uint8"
    wire_format: WireFormat = WireFormat.TEXT
    log_level: str = "warning"

    def hyperloglog_config(self) -> HyperLogLogConfig:
        return HyperLogLogConfig(precision=self.precision, word_type=self.word_type)


def _setting_error(name: str, value: str, reason: str) -> ValueError:
    return ValueError(f"Invalid value for {name}={value!r}: {reason}")


def load_settings(
    environ: Mapping[str, str] | None = None,
    prefix: str = DEFAULT_PREFIX,
) -> HllCodecSettings:
    """Load settings from environment variables.

    Args:
        environ: Mapping to read instead of ``os.environ``.
        prefix: Variable name prefix.

    Raises:
        ValueError: If a variable holds an invalid value; the message names
            the variable.
    """
    env = os.environ if environ is None else environ
    defaults = HllCodecSettings()
    values: dict[str, object] = {}

    name = f"{prefix}_PRECISION"
    raw = env.get(name)
    if raw is not None:
        try:
            values["precision"] = validate_precision(int(raw.strip()))
        except ValueError as exc:
            raise _setting_error(name, raw, str(exc)) from exc

    name = f"{prefix}_WORD_TYPE"
    raw = env.get(name)
    if raw is not None:
        word_type = raw.strip().lower()
        if word_type not in WORD_TYPES:
            raise _setting_error(name, raw, f"expected one of {sorted(WORD_TYPES)}")
        values["word_type"] = word_type

    name = f"{prefix}_WIRE_FORMAT"
    raw = env.get(name)
    if raw is not None:
        try:
            values["wire_format"] = WireFormat.from_string(raw.strip())
        except ValueError as exc:
            raise _setting_error(name, raw, str(exc)) from exc

    name = f"{prefix}_LOG_LEVEL"
    raw = env.get(name)
    if raw is not None:
        level = raw.strip().lower()
        if level not in _LOG_LEVELS:
            raise _setting_error(name, raw, f"expected one of {sorted(_LOG_LEVELS)}")
        values["log_level"] = level

    return HllCodecSettings(
        precision=values.get("precision", defaults.precision),  # type: ignore[arg-type]
        word_type=values.get("word_type", defaults.word_type),  # type: ignore[arg-type]
        wire_format=values.get("wire_format", defaults.wire_format),  # type: ignore[arg-type]
        log_level=values.get("log_level", defaults.log_level),  # type: ignore[arg-type]
    )


def configure_logging(level: str | int = "warning") -> None:
    """Send ``hllcodec`` log records to stderr at ``level``.

    Only the package logger is touched; the root logger is left alone.
    """
    if isinstance(level, str):
        level = _LOG_LEVELS.get(level.lower(), logging.WARNING)

    package_logger = logging.getLogger("hllcodec")
    package_logger.setLevel(level)
    for handler in package_logger.handlers:
        if getattr(handler, "_hllcodec_handler", False):
            handler.setStream(sys.stderr)  # type: ignore[attr-defined]
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._hllcodec_handler = True  # type: ignore[attr-defined]
    package_logger.addHandler(handler)
