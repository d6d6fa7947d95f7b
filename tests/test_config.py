"""Tests for environment settings and logging setup."""

import logging

import pytest

from hllcodec.config import HllCodecSettings, configure_logging, load_settings
from hllcodec.protocols import HyperLogLogConfig
from hllcodec.serialization import WireFormat


@pytest.fixture
def clean_package_logger():
    package_logger = logging.getLogger("hllcodec")
    saved_handlers = package_logger.handlers[:]
    saved_level = package_logger.level
    package_logger.handlers.clear()
    yield package_logger
    package_logger.handlers[:] = saved_handlers
    package_logger.setLevel(saved_level)


class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults(self):
        settings = load_settings({})
        assert settings == HllCodecSettings()
        assert settings.precision == 12
        assert settings.word_type == "uint8"
        assert settings.wire_format is WireFormat.TEXT
        assert settings.log_level == "warning"

    def test_all_variables(self):
        settings = load_settings(
            {
                "HLLCODEC_PRECISION": "14",
                "HLLCODEC_WORD_TYPE": "UINT64",
                "HLLCODEC_WIRE_FORMAT": "binary",
                "HLLCODEC_LOG_LEVEL": "Debug",
            }
        )
        assert settings.precision == 14
        assert settings.word_type == "uint64"
        assert settings.wire_format is WireFormat.BINARY
        assert settings.log_level == "debug"

    def test_custom_prefix(self):
        settings = load_settings({"SKETCH_PRECISION": "8"}, prefix="SKETCH")
        assert settings.precision == 8

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("HLLCODEC_PRECISION", "10")
        assert load_settings().precision == 10

    @pytest.mark.parametrize(
        "name, value",
        [
            ("HLLCODEC_PRECISION", "abc"),
            ("HLLCODEC_PRECISION", "3"),
            ("HLLCODEC_WORD_TYPE", "int16"),
            ("HLLCODEC_WIRE_FORMAT", "xml"),
            ("HLLCODEC_LOG_LEVEL", "loud"),
        ],
    )
    def test_invalid_value_names_variable(self, name, value):
        with pytest.raises(ValueError, match=name):
            load_settings({name: value})

    def test_hyperloglog_config(self):
        settings = HllCodecSettings(precision=9, word_type="uint16")
        assert settings.hyperloglog_config() == HyperLogLogConfig(precision=9, word_type="uint16")


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_level(self, clean_package_logger):
        configure_logging("debug")
        assert clean_package_logger.level == logging.DEBUG
        configure_logging(logging.ERROR)
        assert clean_package_logger.level == logging.ERROR

    def test_single_handler(self, clean_package_logger):
        configure_logging("info")
        configure_logging("info")
        handlers = [
            h for h in clean_package_logger.handlers if getattr(h, "_hllcodec_handler", False)
        ]
        assert len(handlers) == 1

    def test_unknown_level_falls_back_to_warning(self, clean_package_logger):
        configure_logging("chatty")
        assert clean_package_logger.level == logging.WARNING

    def test_codec_logs_at_debug(self, clean_package_logger, caplog):
        from hllcodec import HyperLogLog

        with caplog.at_level(logging.DEBUG, logger="hllcodec"):
            HyperLogLog.with_precision(4).to_text()
        assert any("Encoded 16 registers" in r.getMessage() for r in caplog.records)
