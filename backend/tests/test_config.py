"""Tests for settings and logging configuration."""
import logging
from logging.handlers import RotatingFileHandler

import gateway.core
from gateway.core import Settings, configure_logging, get_settings, load_settings, reset_settings


def test_default_settings():
    settings = load_settings()
    assert settings.default_max_tokens == 64000
    assert settings.min_tool_max_tokens == 32000
    assert settings.log_file is None


def test_settings_from_environment(monkeypatch):
    """Test AG_* variables override defaults and are coerced to the field types."""
    monkeypatch.setenv("AG_DEFAULT_MAX_TOKENS", "4096")
    monkeypatch.setenv("AG_THINKING_BUDGET_HIGH", "50000")
    monkeypatch.setenv("AG_LOG_LEVEL", "DEBUG")
    reset_settings()

    settings = get_settings()
    assert settings.default_max_tokens == 4096
    assert settings.thinking_budget_for("high") == 50000
    assert settings.log_level == "DEBUG"


def test_settings_are_cached(monkeypatch):
    """Test settings are read once until reset."""
    first = get_settings()
    monkeypatch.setenv("AG_DEFAULT_MAX_TOKENS", "1")
    assert get_settings() is first
    reset_settings()
    assert get_settings().default_max_tokens == 1


def test_thinking_budget_for_unknown_effort():
    assert Settings().thinking_budget_for("extreme") == 8192
    assert Settings().thinking_budget_for(None) == 8192
    assert Settings().thinking_budget_for("LOW") == 1024


def test_core_package_exports():
    assert gateway.core.configure_logging is configure_logging
    assert "configure_logging" in gateway.core.__all__


def test_configure_logging_console_only():
    """Test only a console handler is installed without a log file."""
    handlers = configure_logging(Settings(log_level="WARNING"))
    try:
        assert len(handlers) == 1
        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        for handler in handlers:
            logging.getLogger().removeHandler(handler)


def test_configure_logging_rotating_file(tmp_path):
    """Test a rotating file handler is added when a log file is configured."""
    log_file = tmp_path / "logs" / "gateway.log"
    handlers = configure_logging(Settings(log_file=str(log_file)))
    try:
        file_handlers = [h for h in handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 10 * 1024 * 1024
        assert file_handlers[0].backupCount == 5

        logging.getLogger("gateway.test").info("hello file")
        file_handlers[0].flush()
        assert "hello file" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in handlers:
            logging.getLogger().removeHandler(handler)
            handler.close()
