"""Tests for logging setup and the per-cycle context."""

import logging

import pytest
import structlog

from funding_matrix.logging import bound_cycle_context, setup_logging


def test_cycle_context_binds_and_restores() -> None:
    structlog.contextvars.clear_contextvars()
    with bound_cycle_context(lock_key="update-funding") as cycle_id:
        bound = structlog.contextvars.get_contextvars()
        assert bound["cycle_id"] == cycle_id
        assert bound["lock_key"] == "update-funding"
        assert len(cycle_id) == 12
    assert "cycle_id" not in structlog.contextvars.get_contextvars()


def test_cycle_ids_are_unique() -> None:
    with bound_cycle_context() as first:
        pass
    with bound_cycle_context() as second:
        pass
    assert first != second


@pytest.mark.parametrize("log_format", ["json", "console"])
def test_setup_logging_configures_root(log_format: str) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("debug", log_format=log_format)
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert logging.getLogger("aiohttp").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
        structlog.reset_defaults()
