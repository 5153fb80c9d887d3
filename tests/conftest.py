"""Pytest configuration and shared fixtures for t9s tests."""

import logging

import pytest

import t9s.io.logging_setup
from tests.harness import FakeBackend, make_executions, make_schedule


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

_ENV_VARS = (
    "TEMPORAL_ADDRESS",
    "TEMPORAL_NAMESPACE",
    "TEMPORAL_API_KEY",
    "TEMPORAL_TLS_CERT",
    "TEMPORAL_TLS_KEY",
    "T9S_POLL_INTERVAL",
    "T9S_LOG_LEVEL",
    "T9S_LOG_FILE",
    "T9S_SEED_HUE",
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep every test away from the user's settings file, logs and Temporal env."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("T9S_LOG_DIR", str(tmp_path / "logs"))
    return tmp_path


@pytest.fixture
def fresh_logging(monkeypatch):
    """Unconfigured logging runtime; restores the session loggers afterwards."""
    loggers = [logging.getLogger(name) for name in ("t9s", "py.warnings")]
    saved = [(list(lg.handlers), lg.level, lg.propagate) for lg in loggers]
    monkeypatch.setattr(t9s.io.logging_setup, "_RUNTIME", None)
    yield
    logging.captureWarnings(False)
    for lg, (handlers, level, propagate) in zip(loggers, saved):
        for handler in lg.handlers:
            if handler not in handlers:
                handler.close()
        lg.handlers[:] = handlers
        lg.setLevel(level)
        lg.propagate = propagate


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

@pytest.fixture
def backend():
    """FakeBackend with three executions and two schedules in ``default``."""
    return FakeBackend(
        executions=make_executions(3),
        schedules=[make_schedule("sched-1"), make_schedule("sched-2", paused=True)],
    )
