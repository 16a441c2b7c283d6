import logging

import pytest

from pnmkit import config
from pnmkit.config import Config, configure_logging
from pnmkit.services import codec_service


def test_defaults():
    assert Config.DEFAULT_MAX_VALUE == 255
    assert Config.PNG_MODE in ("RGBA", "RGB")


def test_configure_logging_uses_explicit_level(monkeypatch):
    calls = []
    monkeypatch.setattr(config.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    configure_logging("debug")
    assert calls == [{"level": "DEBUG", "format": Config.LOG_FORMAT}]


def test_codec_logs_at_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="pnmkit")
    codec_service.decode(b"P2\n1 1\n255\n7\n")
    assert "Decoded P2 1x1" in caplog.text


def test_read_max_value():
    assert config._read_max_value("100") == 100


@pytest.mark.parametrize("raw, message", [("abc", "целым числом"), ("0", "1..255"), ("300", "1..255")])
def test_read_max_value_rejects_bad_env(raw, message):
    with pytest.raises(ValueError, match=message):
        config._read_max_value(raw)
