import json
import logging
import sys

import pytest

from powerclock.config import (
    ApplicationConfig,
    ClockConfig,
    Environment,
    LoggingConfig,
    configure_int_digits,
    configure_logging,
    get_config,
    set_config,
)


def test_defaults():
    config = ApplicationConfig()
    assert config.clock.interval == 0.001
    assert config.clock.modulus == 1
    assert config.clock.max_modulus == 500
    assert config.clock.bit_width is None


def test_environment_presets():
    dev = ApplicationConfig.for_environment(Environment.DEVELOPMENT)
    assert dev.debug and dev.web.live_reload
    assert dev.logging.level == "DEBUG"

    testing = ApplicationConfig.for_environment(Environment.TESTING)
    assert testing.logging.level == "WARNING"
    assert not testing.web.live_reload


def test_from_dict_overrides_sections():
    config = ApplicationConfig.from_dict({
        "environment": "production",
        "clock": {"modulus": 25, "bit_width": 64},
        "web": {"port": 8080},
    })
    assert config.environment is Environment.PRODUCTION
    assert config.clock.modulus == 25
    assert config.clock.bit_width == 64
    assert config.web.port == 8080


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ValueError, match="Unknown clock setting"):
        ApplicationConfig.from_dict({"clock": {"speed": 3}})


@pytest.mark.parametrize("clock", [
    {"modulus": 0},
    {"interval": 0},
    {"bit_width": 0},
    {"modulus": 600},
    {"int_max_str_digits": 100},
])
def test_from_dict_validates_clock(clock):
    with pytest.raises(ValueError):
        ApplicationConfig.from_dict({"clock": clock})


def test_from_environment(monkeypatch):
    monkeypatch.setenv("POWERCLOCK_ENV", "testing")
    monkeypatch.setenv("POWERCLOCK_PORT", "9000")
    monkeypatch.setenv("POWERCLOCK_MODULUS", "12")
    monkeypatch.setenv("POWERCLOCK_INTERVAL", "0.01")
    monkeypatch.setenv("POWERCLOCK_BIT_WIDTH", "32")
    monkeypatch.setenv("POWERCLOCK_LOG_LEVEL", "error")

    config = ApplicationConfig.from_environment()
    assert config.environment is Environment.TESTING
    assert config.web.port == 9000
    assert config.clock.modulus == 12
    assert config.clock.interval == 0.01
    assert config.clock.bit_width == 32
    assert config.logging.level == "ERROR"


def test_from_environment_rejects_bad_modulus(monkeypatch):
    monkeypatch.setenv("POWERCLOCK_MODULUS", "-3")
    with pytest.raises(ValueError):
        ApplicationConfig.from_environment()


def test_from_file(tmp_path):
    path = tmp_path / "powerclock.json"
    path.write_text(json.dumps({"environment": "testing", "clock": {"modulus": 3}}))
    config = ApplicationConfig.from_file(path)
    assert config.clock.modulus == 3


def test_from_file_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        ApplicationConfig.from_file(tmp_path / "missing.json")
    yaml_path = tmp_path / "config.yaml"
    yaml_path.write_text("clock: {}")
    with pytest.raises(ValueError):
        ApplicationConfig.from_file(yaml_path)


def test_to_dict_round_trips_environment():
    data = ApplicationConfig.for_environment(Environment.TESTING).to_dict()
    assert data["environment"] == "testing"
    assert data["clock"]["max_modulus"] == 500


def test_global_config():
    config = ApplicationConfig(clock=ClockConfig(modulus=4))
    set_config(config)
    assert get_config() is config


def test_configure_logging_with_file(tmp_path):
    log_file = tmp_path / "powerclock.log"
    configure_logging(LoggingConfig(level="INFO", file_path=str(log_file)))
    logging.getLogger("powerclock.test").info("hello file")
    for handler in logging.getLogger().handlers:
        handler.flush()
    assert "hello file" in log_file.read_text()
    configure_logging(LoggingConfig(level="WARNING"))


@pytest.mark.skipif(not hasattr(sys, "get_int_max_str_digits"), reason="no int digit limit")
def test_configure_int_digits():
    previous = sys.get_int_max_str_digits()
    try:
        configure_int_digits(ClockConfig(int_max_str_digits=0))
        assert len(str(2 ** 20000)) == 6021
    finally:
        sys.set_int_max_str_digits(previous)
