"""Test harness for t9s.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, press_and_settle, FakeBackend, make_execution, ...
"""

from tests.harness.app_runner import run_app
from tests.harness.backend import FakeBackend
from tests.harness.builders import (
    T0,
    execution_detail_state,
    executions_state,
    make_detail,
    make_event,
    make_execution,
    make_executions,
    make_schedule,
    run_actions,
    schedules_state,
)
from tests.harness.interactions import (
    press_and_settle,
    press_sequence,
    type_text,
    wait_until,
)

__all__ = [
    "run_app",
    "FakeBackend",
    "T0",
    "execution_detail_state",
    "executions_state",
    "make_detail",
    "make_event",
    "make_execution",
    "make_executions",
    "make_schedule",
    "run_actions",
    "schedules_state",
    "press_and_settle",
    "press_sequence",
    "type_text",
    "wait_until",
]
