from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from taskboard_api.app.logging_setup import setup_logging


def _console_handlers() -> list[logging.Handler]:
    return [h for h in logging.getLogger().handlers if h.get_name() == "taskboard-console"]


@pytest.fixture
def clean_root() -> Iterator[None]:
    for handler in _console_handlers():
        logging.getLogger().removeHandler(handler)
    yield
    for handler in _console_handlers():
        logging.getLogger().removeHandler(handler)


def test_setup_logging_installs_one_handler(clean_root: None) -> None:
    setup_logging("INFO")
    setup_logging("DEBUG")

    handlers = _console_handlers()
    assert len(handlers) == 1
    assert handlers[0].level == logging.DEBUG
    assert logging.getLogger("taskboard_api").level == logging.DEBUG


def test_third_party_records_need_warning_level(clean_root: None) -> None:
    setup_logging("INFO")
    noise_filter = _console_handlers()[0].filters[0]

    def record(name: str, level: int) -> logging.LogRecord:
        return logging.LogRecord(name, level, __file__, 1, "message", None, None)

    assert noise_filter.filter(record("taskboard_api.app.repository", logging.INFO))
    assert not noise_filter.filter(record("httpx", logging.INFO))
    assert noise_filter.filter(record("httpx", logging.WARNING))


def test_unknown_level_name_falls_back_to_info(clean_root: None) -> None:
    setup_logging("chatty")

    assert _console_handlers()[0].level == logging.INFO
