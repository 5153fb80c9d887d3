"""Effect worker: one thread, one FIFO queue, one backend call per Effect.

The App submits Effects in emission order; ``run`` executes them strictly
sequentially and hands exactly one Action per Effect to ``emit``. In the TUI
``emit`` is ``App.post_message`` wrapped in an ActionArrived message, which is
thread-safe, so results re-enter the reducer through the normal message pump.

// [LAW:single-enforcer] Backend failures become Error actions here and only here.
// [LAW:dataflow-not-control-flow] Effect type -> handler table; no isinstance chains.
"""

from __future__ import annotations

import logging
import queue
from typing import Any, Callable

from t9s.backend.client import TemporalBackend
from t9s.backend.errors import BackendError
from t9s.core import actions, effects

logger = logging.getLogger(__name__)

Emit = Callable[[Any], None]


def _load_executions(backend: TemporalBackend, effect: effects.LoadExecutions):
    page = backend.list_executions(effect.namespace, effect.query, effect.page_size)
    return actions.ExecutionsLoaded(tuple(page.executions), page.next_page_token)


def _load_more_executions(backend: TemporalBackend, effect: effects.LoadMoreExecutions):
    page = backend.list_executions(
        effect.namespace, effect.query, effect.page_size, effect.page_token
    )
    return actions.MoreExecutionsLoaded(tuple(page.executions), page.next_page_token)


def _load_execution_detail(backend: TemporalBackend, effect: effects.LoadExecutionDetail):
    detail = backend.describe_execution(effect.namespace, effect.workflow_id, effect.run_id)
    return actions.ExecutionDetailLoaded(detail)


def _load_history(backend: TemporalBackend, effect: effects.LoadHistory):
    events = backend.get_history(effect.namespace, effect.workflow_id, effect.run_id)
    return actions.HistoryLoaded(effect.workflow_id, effect.run_id, tuple(events))


def _count_executions(backend: TemporalBackend, effect: effects.LoadExecutionCount):
    return actions.ExecutionCountLoaded(backend.count_executions(effect.namespace, effect.query))


def _load_namespaces(backend: TemporalBackend, effect: effects.LoadNamespaces):
    return actions.NamespacesLoaded(tuple(backend.list_namespaces()))


def _load_schedules(backend: TemporalBackend, effect: effects.LoadSchedules):
    return actions.SchedulesLoaded(tuple(backend.list_schedules(effect.namespace, effect.query)))


def _load_schedule_detail(backend: TemporalBackend, effect: effects.LoadScheduleDetail):
    return actions.ScheduleDetailLoaded(
        backend.describe_schedule(effect.namespace, effect.schedule_id)
    )


def _load_task_queue(backend: TemporalBackend, effect: effects.LoadTaskQueue):
    return actions.TaskQueueLoaded(backend.describe_task_queue(effect.namespace, effect.task_queue))


def _cancel_execution(backend: TemporalBackend, effect: effects.CancelExecution):
    backend.cancel_execution(effect.namespace, effect.workflow_id, effect.run_id)
    return actions.OperationSucceeded(f"cancel requested for {effect.workflow_id}")


def _terminate_execution(backend: TemporalBackend, effect: effects.TerminateExecution):
    backend.terminate_execution(effect.namespace, effect.workflow_id, effect.run_id, effect.reason)
    return actions.OperationSucceeded(f"terminated {effect.workflow_id}")


def _signal_execution(backend: TemporalBackend, effect: effects.SignalExecution):
    backend.signal_execution(
        effect.namespace,
        effect.workflow_id,
        effect.run_id,
        effect.signal_name,
        effect.payload,
    )
    return actions.OperationSucceeded(f"sent signal {effect.signal_name} to {effect.workflow_id}")


def _pause_schedule(backend: TemporalBackend, effect: effects.PauseSchedule):
    note = "paused via t9s" if effect.pause else "unpaused via t9s"
    backend.pause_schedule(effect.namespace, effect.schedule_id, effect.pause, note)
    verb = "paused" if effect.pause else "unpaused"
    return actions.OperationSucceeded(f"schedule {effect.schedule_id} {verb}")


def _trigger_schedule(backend: TemporalBackend, effect: effects.TriggerSchedule):
    backend.trigger_schedule(effect.namespace, effect.schedule_id)
    return actions.OperationSucceeded(f"schedule {effect.schedule_id} triggered")


def _delete_schedule(backend: TemporalBackend, effect: effects.DeleteSchedule):
    backend.delete_schedule(effect.namespace, effect.schedule_id)
    return actions.OperationSucceeded(f"schedule {effect.schedule_id} deleted")


# [LAW:one-source-of-truth] Effect type -> (failure verb, handler).
_HANDLERS: dict[type, tuple[str, Callable[[TemporalBackend, Any], Any]]] = {
    effects.LoadExecutions: ("load workflows", _load_executions),
    effects.LoadMoreExecutions: ("load workflows", _load_more_executions),
    effects.LoadExecutionDetail: ("load workflow detail", _load_execution_detail),
    effects.LoadHistory: ("load history", _load_history),
    effects.LoadExecutionCount: ("count workflows", _count_executions),
    effects.LoadNamespaces: ("load namespaces", _load_namespaces),
    effects.LoadSchedules: ("load schedules", _load_schedules),
    effects.LoadScheduleDetail: ("load schedule detail", _load_schedule_detail),
    effects.LoadTaskQueue: ("describe task queue", _load_task_queue),
    effects.CancelExecution: ("cancel workflow", _cancel_execution),
    effects.TerminateExecution: ("terminate workflow", _terminate_execution),
    effects.SignalExecution: ("signal workflow", _signal_execution),
    effects.PauseSchedule: ("update schedule", _pause_schedule),
    effects.TriggerSchedule: ("trigger schedule", _trigger_schedule),
    effects.DeleteSchedule: ("delete schedule", _delete_schedule),
}


class BackendWorker:
    """Serially executes Effects against a backend and emits result Actions."""

    def __init__(self, backend: TemporalBackend, emit: Emit | None = None):
        self._backend = backend
        self._emit: Emit = emit or (lambda action: None)
        self._queue: queue.Queue = queue.Queue()

    def submit(self, effect: Any) -> None:
        self._queue.put(effect)

    def stop(self) -> None:
        """Enqueue the sentinel; ``run`` returns after draining what precedes it."""
        self._queue.put(None)

    def run(self) -> None:
        """Blocking loop for a dedicated thread. Returns on the ``None`` sentinel."""
        logger.debug("worker started")
        while True:
            effect = self._queue.get()
            if effect is None:
                break
            self._emit(self.process(effect))
        logger.debug("worker stopped")

    def run_pending(self) -> list:
        """Process everything queued right now without blocking. Returns the Actions."""
        results = []
        while True:
            try:
                effect = self._queue.get_nowait()
            except queue.Empty:
                return results
            if effect is None:
                return results
            action = self.process(effect)
            self._emit(action)
            results.append(action)

    def process(self, effect: Any) -> Any:
        """Execute one Effect. Always returns exactly one Action."""
        entry = _HANDLERS.get(type(effect))
        if entry is None:
            logger.warning("worker ignoring unsupported effect %r", effect)
            return actions.Error(f"unsupported request: {type(effect).__name__}")
        verb, handler = entry
        logger.debug("worker request: %r", effect)
        try:
            return handler(self._backend, effect)
        except BackendError as e:
            logger.warning("failed to %s: %s", verb, e)
            return actions.Error(f"failed to {verb}: {e}")
        except Exception as e:
            logger.exception("unexpected error while trying to %s", verb)
            return actions.Error(f"failed to {verb}: {e}")
