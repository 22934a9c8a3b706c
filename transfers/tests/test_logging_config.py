import logging
import pytest
from transfers.utils.logging_config import configure_logging


@pytest.fixture(autouse=True)
def restore_root_level():
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


def test_level_from_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")

    assert configure_logging() == logging.DEBUG
    assert logging.getLogger().level == logging.DEBUG


def test_explicit_level_wins_over_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    assert configure_logging("warning") == logging.WARNING


def test_unknown_level_falls_back_to_info(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    assert configure_logging("chatty") == logging.INFO
    assert configure_logging("BASIC_FORMAT") == logging.INFO
