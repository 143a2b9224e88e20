"""Tests for centralized logging and the module log adapter."""

import logging
from io import StringIO

import pytest

from reliasim.logging import (
    ModuleLogAdapter,
    disable_debug_logging,
    enable_debug_logging,
    get_logger,
    get_module_logger,
    reset_logging,
    set_global_log_level,
    setup_root_logger,
)


@pytest.fixture(autouse=True)
def _reset_logging_each_test():
    """Reset logging state before and after each test to avoid cross-test bleed."""
    reset_logging()
    yield
    reset_logging()


def _capture(logger: logging.Logger) -> StringIO:
    capture = StringIO()
    handler = logging.StreamHandler(capture)
    handler.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.addHandler(handler)
    return capture


def test_effective_levels_enable_disable():
    """INFO by default, DEBUG after enable, back to INFO after disable."""
    logger = get_logger("reliasim.test")
    capture = _capture(logger)

    logger.info("info-1")
    logger.debug("debug-1")
    assert "info-1" in capture.getvalue()
    assert "debug-1" not in capture.getvalue()

    enable_debug_logging()
    logger.debug("debug-2")
    assert "debug-2" in capture.getvalue()

    disable_debug_logging()
    logger.debug("debug-3")
    assert "debug-3" not in capture.getvalue()


def test_global_level_propagates_to_children():
    logger1 = get_logger("reliasim.engine")
    assert logger1.getEffectiveLevel() == logging.INFO

    set_global_log_level(logging.WARNING)
    assert logger1.getEffectiveLevel() == logging.WARNING
    assert get_logger("reliasim.core").getEffectiveLevel() == logging.WARNING


def test_setup_root_logger_idempotent():
    setup_root_logger()
    setup_root_logger()
    assert len(logging.getLogger("reliasim").handlers) == 1


class _Owner:
    def __init__(self) -> None:
        self.configuration = ""

    def log_prefix(self) -> str:
        return f"Reliability(LV-T30[{self.configuration}])"


def test_module_logger_prefixes_messages():
    owner = _Owner()
    adapter = get_module_logger("reliasim.test_adapter", owner)
    assert isinstance(adapter, ModuleLogAdapter)
    capture = _capture(adapter.logger)

    adapter.info("Startup")
    owner.configuration = "upper_stage"
    adapter.info("rate %.1e", 0.001)

    lines = capture.getvalue().splitlines()
    assert lines == [
        "Reliability(LV-T30[]): Startup",
        "Reliability(LV-T30[upper_stage]): rate 1.0e-03",
    ]
