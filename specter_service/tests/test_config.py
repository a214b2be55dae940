"""Tests for environment-driven configuration and the .env loader."""
import logging

import pytest

from specter_service import config as cfg_mod
from specter_service import env as env_mod


@pytest.fixture(autouse=True)
def fresh_config():
    cfg_mod.reset_config()
    yield
    cfg_mod.reset_config()


def test_defaults_when_env_empty():
    """Test an empty environment yields the built-in defaults."""
    cfg = cfg_mod.load_config_from_env({})
    assert cfg.server_name == "specter-mcp"
    assert cfg.debug is False
    assert cfg.log_level == "info"
    assert cfg.default_timeout_ms == 60000
    assert cfg.max_concurrency == 1
    assert cfg.android_sdk_path is None
    assert cfg.appium_server_url == "http://127.0.0.1:4723"
    assert cfg.screenshot_quality == 50


def test_env_overrides():
    """Test recognized variables override defaults."""
    cfg = cfg_mod.load_config_from_env(
        {
            "DEBUG": "true",
            "LOG_LEVEL": "WARN",
            "SPECTER_TIMEOUT": "1500",
            "SPECTER_CONCURRENCY": "3",
            "ANDROID_HOME": "/opt/android",
            "SPECTER_IOS_DEVICE": "iPhone 15",
            "SPECTER_APPIUM_URL": "http://appium:4723",
            "SPECTER_SCREENSHOT_QUALITY": "80",
        }
    )
    assert cfg.debug is True
    assert cfg.log_level == "warn"
    assert cfg.default_timeout_ms == 1500
    assert cfg.max_concurrency == 3
    assert cfg.android_sdk_path == "/opt/android"
    assert cfg.default_ios_device == "iPhone 15"
    assert cfg.appium_server_url == "http://appium:4723"
    assert cfg.screenshot_quality == 80


def test_specter_prefixed_variables_win():
    """Test SPECTER_* and ANDROID_SDK_ROOT take precedence over their fallbacks."""
    cfg = cfg_mod.load_config_from_env(
        {
            "SPECTER_LOG_LEVEL": "debug",
            "LOG_LEVEL": "error",
            "ANDROID_SDK_ROOT": "/sdk/root",
            "ANDROID_HOME": "/sdk/home",
        }
    )
    assert cfg.log_level == "debug"
    assert cfg.android_sdk_path == "/sdk/root"


def test_invalid_values_fall_back(caplog):
    """Test bad numbers and levels keep defaults with a warning; quality is clamped."""
    with caplog.at_level(logging.WARNING, logger="specter_service.config"):
        cfg = cfg_mod.load_config_from_env(
            {
                "SPECTER_LOG_LEVEL": "verbose",
                "SPECTER_TIMEOUT": "soon",
                "SPECTER_SCREENSHOT_QUALITY": "500",
            }
        )
    assert "Ignoring unknown log level 'verbose'" in caplog.text
    assert "Ignoring non-integer config value 'soon'" in caplog.text
    assert cfg.log_level == "info"
    assert cfg.default_timeout_ms == 60000
    assert cfg.screenshot_quality == 100


def test_singleton_set_and_reset(monkeypatch):
    """Test get/set/reset of the process-wide config."""
    monkeypatch.setenv("SPECTER_DOTENV", "/nonexistent/.env")
    monkeypatch.setenv("SPECTER_TIMEOUT", "2000")
    monkeypatch.delenv("SPECTER_DEBUG", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    monkeypatch.setattr(env_mod, "_loaded_from", None)

    assert cfg_mod.get_config() is cfg_mod.get_config()
    assert cfg_mod.get_timeout() == 2000
    assert cfg_mod.get_timeout(10) == 10

    cfg_mod.set_config(debug=True)
    assert cfg_mod.is_debug() is True
    assert cfg_mod.get_config().default_timeout_ms == 2000

    cfg_mod.reset_config()
    assert cfg_mod.is_debug() is False


def test_validate_config_and_summary():
    """Test warnings for a missing SDK and the printable summary."""
    cfg = cfg_mod.load_config_from_env({})
    assert cfg_mod.validate_config(cfg) == ["ANDROID_SDK_ROOT not set - Android tools may not work"]
    assert cfg_mod.validate_config(cfg_mod.load_config_from_env({"ANDROID_HOME": "/sdk"})) == []
    summary = cfg_mod.config_summary(cfg)
    assert summary[0] == "Configuration:"
    assert "  Android SDK: not set" in summary


def test_configure_logging_is_idempotent():
    """Test logging setup adds one handler and honors the threshold."""
    logger = cfg_mod.configure_logging(cfg_mod.load_config_from_env({"SPECTER_LOG_LEVEL": "error"}))
    assert logger.level == logging.ERROR
    logger = cfg_mod.configure_logging(cfg_mod.load_config_from_env({"SPECTER_DEBUG": "true"}))
    assert logger.level == logging.DEBUG
    own = [h for h in logger.handlers if getattr(h, "_specter_handler", False)]
    assert len(own) == 1


def test_parse_dotenv():
    """Test comments, export prefixes and quotes."""
    text = "\n".join(
        [
            "# comment",
            "",
            "export SPECTER_TIMEOUT=1234",
            "SPECTER_IOS_DEVICE='iPhone 15'",
            'MAESTRO_PATH="/usr/local/bin/maestro"',
            "not a pair",
            "=novalue",
        ]
    )
    assert env_mod.parse_dotenv(text) == {
        "SPECTER_TIMEOUT": "1234",
        "SPECTER_IOS_DEVICE": "iPhone 15",
        "MAESTRO_PATH": "/usr/local/bin/maestro",
    }


def test_apply_env_respects_existing_keys():
    """Test existing variables win unless override is set."""
    environ = {"A": "old"}
    assert env_mod.apply_env({"A": "new", "B": "b"}, environ=environ) == {"B": "b"}
    assert environ == {"A": "old", "B": "b"}
    env_mod.apply_env({"A": "new"}, environ=environ, override=True)
    assert environ["A"] == "new"


def test_load_dotenv_file(tmp_path, monkeypatch):
    """Test loading a .env file into the process environment."""
    monkeypatch.setenv("SPECTER_ANDROID_DEVICE", "placeholder")
    monkeypatch.delenv("SPECTER_ANDROID_DEVICE")
    dotenv = tmp_path / ".env"
    dotenv.write_text("SPECTER_ANDROID_DEVICE=emulator-5554\n", encoding="utf-8")
    assert env_mod.load_dotenv(path=dotenv) == {"SPECTER_ANDROID_DEVICE": "emulator-5554"}
    assert env_mod.load_dotenv(path=tmp_path / "missing.env") == {}
    with pytest.raises(RuntimeError):
        env_mod.load_dotenv(path=tmp_path)
