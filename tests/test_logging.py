"""Tests for logging setup."""

import logging

from audio_clipper.logging import QUIET_LOGGERS, get_logger, setup_logging


def _service_handlers() -> list[logging.Handler]:
    return [h for h in logging.getLogger().handlers if h.get_name() == "audio_clipper"]


def test_setup_logging_installs_one_handler() -> None:
    setup_logging()
    setup_logging()

    assert len(_service_handlers()) == 1


def test_setup_logging_level_override() -> None:
    root = logging.getLogger()
    previous = root.level
    try:
        setup_logging("debug")
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)


def test_third_party_loggers_quieted() -> None:
    setup_logging()

    for name in QUIET_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING


def test_get_logger_binds_context() -> None:
    log = get_logger("audio_clipper.tests").bind(job_id="job-1")

    log.info("bound_logger_works")
