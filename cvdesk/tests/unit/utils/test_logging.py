import logging

import pytest

from cvdesk.utils.logging import configure_logging, debug_forced_by_env


@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.delenv("CVDESK_LOG_LEVEL", raising=False)
    monkeypatch.delenv("CVDESK_DEBUG", raising=False)
    root = logging.getLogger()
    previous = root.level
    yield monkeypatch
    root.setLevel(previous)


def test_env_level_overrides_debug_flag(clean_env) -> None:
    clean_env.setenv("CVDESK_LOG_LEVEL", "warning")

    assert configure_logging(debug=True) == logging.WARNING
    assert logging.getLogger().level == logging.WARNING
    assert not debug_forced_by_env()


def test_numeric_env_level(clean_env) -> None:
    clean_env.setenv("CVDESK_LOG_LEVEL", "10")

    assert configure_logging() == logging.DEBUG
    assert debug_forced_by_env()


def test_debug_env_forces_debug(clean_env) -> None:
    clean_env.setenv("CVDESK_DEBUG", "yes")

    assert configure_logging(debug=False) == logging.DEBUG
    assert debug_forced_by_env()


def test_debug_flag_without_env(clean_env) -> None:
    assert configure_logging(debug=True) == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.INFO

    assert configure_logging(debug=False) == logging.INFO
    assert logging.getLogger().level == logging.INFO
    assert not debug_forced_by_env()
