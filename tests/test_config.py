# tests/test_config.py

import logging

import pytest

from core.config import GradebookConfig, configure_logging, load_gradebook_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "GRADEBOOK_NOTIFICATION_TTI_SECONDS",
        "GRADEBOOK_NOTIFICATION_MAX_ENTRIES",
        "GRADEBOOK_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    assert load_gradebook_config() == GradebookConfig(
        notification_time_to_idle=10.0,
        notification_max_entries=None,
        log_level="WARNING",
    )


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("GRADEBOOK_NOTIFICATION_TTI_SECONDS", "30")
    monkeypatch.setenv("GRADEBOOK_NOTIFICATION_MAX_ENTRIES", "500")
    monkeypatch.setenv("GRADEBOOK_LOG_LEVEL", "debug")

    config = load_gradebook_config()

    assert config.notification_time_to_idle == 30.0
    assert config.notification_max_entries == 500
    assert config.log_level == "DEBUG"


def test_zero_max_entries_means_unbounded(monkeypatch):
    monkeypatch.setenv("GRADEBOOK_NOTIFICATION_MAX_ENTRIES", "0")
    assert load_gradebook_config().notification_max_entries is None


@pytest.mark.parametrize(
    "name, value",
    [
        ("GRADEBOOK_NOTIFICATION_TTI_SECONDS", "abc"),
        ("GRADEBOOK_NOTIFICATION_TTI_SECONDS", "0"),
        ("GRADEBOOK_NOTIFICATION_TTI_SECONDS", "7200"),
        ("GRADEBOOK_NOTIFICATION_MAX_ENTRIES", "-1"),
        ("GRADEBOOK_NOTIFICATION_MAX_ENTRIES", "ten"),
        ("GRADEBOOK_LOG_LEVEL", "LOUD"),
    ],
)
def test_invalid_values_raise(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError):
        load_gradebook_config()


def test_configure_logging():
    configure_logging(GradebookConfig(log_level="ERROR"))

    assert logging.getLogger("core").level == logging.ERROR
    assert logging.getLogger("models").level == logging.ERROR

    configure_logging(GradebookConfig())
