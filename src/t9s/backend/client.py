"""The backend contract the worker calls.

Every method is namespace-scoped, blocking, and either returns domain
snapshots or raises a ``t9s.backend.errors.BackendError`` subclass.
"""

from __future__ import annotations

from typing import Any, Protocol

from t9s.core import domain


class TemporalBackend(Protocol):
    def list_namespaces(self) -> list[domain.Namespace]: ...

    def list_executions(
        self,
        namespace: str,
        query: str | None,
        page_size: int,
        page_token: str = "",
    ) -> domain.ExecutionPage: ...

    def describe_execution(
        self, namespace: str, workflow_id: str, run_id: str | None
    ) -> domain.ExecutionDetail: ...

    def get_history(
        self, namespace: str, workflow_id: str, run_id: str | None
    ) -> list[domain.HistoryEvent]: ...

    def count_executions(self, namespace: str, query: str | None) -> int: ...

    def cancel_execution(self, namespace: str, workflow_id: str, run_id: str | None) -> None: ...

    def terminate_execution(
        self, namespace: str, workflow_id: str, run_id: str | None, reason: str
    ) -> None: ...

    def signal_execution(
        self,
        namespace: str,
        workflow_id: str,
        run_id: str | None,
        signal_name: str,
        payload: Any = None,
    ) -> None: ...

    def list_schedules(self, namespace: str, query: str | None) -> list[domain.Schedule]: ...

    def describe_schedule(self, namespace: str, schedule_id: str) -> domain.Schedule: ...

    def pause_schedule(self, namespace: str, schedule_id: str, pause: bool, note: str) -> None: ...

    def trigger_schedule(self, namespace: str, schedule_id: str) -> None: ...

    def delete_schedule(self, namespace: str, schedule_id: str) -> None: ...

    def describe_task_queue(self, namespace: str, task_queue: str) -> domain.TaskQueueInfo: ...
