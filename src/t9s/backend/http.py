"""Temporal HTTP API client.

Talks to the JSON gateway served under ``/api/v1`` by the Temporal server and
UI server. Blocking; meant to be called from the worker thread only.

// [LAW:single-enforcer] Transport failures are classified in _request only.
"""

from __future__ import annotations

import json
import logging
import ssl
import urllib.error
import urllib.request
from typing import Any
from urllib.parse import quote, urlencode, urlparse

from t9s.backend import transform
from t9s.backend.errors import (
    BackendConfigError,
    BackendConnectionError,
    BackendNotFound,
    BackendParseError,
    BackendRequestFailed,
    BackendTimeout,
)
from t9s.core import domain

logger = logging.getLogger(__name__)

IDENTITY = "t9s"
API_PREFIX = "/api/v1"
_TIMEOUT_STATUSES = frozenset({408, 504})


def _segment(value: str) -> str:
    return quote(value, safe="")


def _expect_dict(raw: Any, what: str) -> dict:
    if not isinstance(raw, dict):
        raise BackendParseError(f"{what}: expected a JSON object, got {type(raw).__name__}")
    return raw


def _execution_ref(workflow_id: str, run_id: str | None) -> dict[str, str]:
    ref = {"workflowId": workflow_id}
    if run_id:
        ref["runId"] = run_id
    return ref


def _signal_input(payload: Any) -> Any:
    """Command-line payloads are JSON when they parse as JSON, plain strings otherwise."""
    if not isinstance(payload, str):
        return payload
    try:
        return json.loads(payload)
    except json.JSONDecodeError:
        return payload


def _ssl_context(scheme: str, tls_cert: str | None, tls_key: str | None) -> ssl.SSLContext | None:
    """Client context for https, carrying the mTLS certificate when one is configured."""
    if bool(tls_cert) != bool(tls_key):
        raise BackendConfigError("--tls-cert and --tls-key must be given together")
    if scheme != "https":
        if tls_cert:
            raise BackendConfigError("a TLS client certificate needs an https:// address")
        return None
    ctx = ssl.create_default_context()
    if tls_cert:
        try:
            ctx.load_cert_chain(tls_cert, tls_key)
        except OSError as e:  # ssl.SSLError included
            raise BackendConfigError(f"cannot load TLS client certificate {tls_cert!r}: {e}") from e
    return ctx


class HttpTemporalBackend:
    """TemporalBackend over the Temporal HTTP API using urllib."""

    def __init__(
        self,
        address: str,
        api_key: str | None = None,
        timeout: float = 10.0,
        tls_cert: str | None = None,
        tls_key: str | None = None,
    ):
        parsed = urlparse(address)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise BackendConfigError(f"invalid server address: {address!r}")
        self._base = address.rstrip("/")
        self._api_key = api_key or None
        self._timeout = timeout
        self._ssl_context = _ssl_context(parsed.scheme, tls_cert, tls_key)

    @property
    def address(self) -> str:
        return self._base

    # ─── Transport ───────────────────────────────────────────────────────────

    def _headers(self) -> dict[str, str]:
        headers = {
            "accept": "application/json",
            "content-type": "application/json",
            "user-agent": IDENTITY,
        }
        if self._api_key:
            headers["authorization"] = f"Bearer {self._api_key}"
        return headers

    def _url(self, path: str, params: dict[str, Any] | None = None) -> str:
        url = f"{self._base}{API_PREFIX}{path}"
        filtered = {k: v for k, v in (params or {}).items() if v not in (None, "")}
        if filtered:
            url += "?" + urlencode(filtered)
        return url

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        url = self._url(path, params)
        data = json.dumps(body).encode("utf-8") if body is not None else None
        request = urllib.request.Request(url, data=data, headers=self._headers(), method=method)
        logger.debug("%s %s", method, url)
        try:
            with urllib.request.urlopen(
                request, timeout=self._timeout, context=self._ssl_context
            ) as response:
                payload = response.read()
        except urllib.error.HTTPError as e:
            raise self._status_error(e) from e
        except urllib.error.URLError as e:
            if isinstance(e.reason, TimeoutError):
                raise BackendTimeout(f"{method} {path} timed out") from e
            raise BackendConnectionError(f"cannot reach {self._base}: {e.reason}") from e
        except TimeoutError as e:
            raise BackendTimeout(f"{method} {path} timed out") from e
        except OSError as e:
            raise BackendConnectionError(f"cannot reach {self._base}: {e}") from e

        if not payload.strip():
            return {}
        try:
            return json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise BackendParseError(f"{method} {path}: response is not JSON") from e

    @staticmethod
    def _status_error(error: urllib.error.HTTPError):
        message = f"HTTP {error.code}: {error.reason}"
        try:
            body = json.loads(error.read().decode("utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            body = None
        if isinstance(body, dict) and body.get("message"):
            message = str(body["message"])
        if error.code == 404:
            return BackendNotFound(message)
        if error.code in _TIMEOUT_STATUSES:
            return BackendTimeout(message)
        return BackendRequestFailed(message, status=error.code)

    def _get(self, path: str, params: dict[str, Any] | None = None) -> dict:
        return _expect_dict(self._request("GET", path, params), path)

    def _post(self, path: str, body: Any) -> dict:
        return _expect_dict(self._request("POST", path, body=body), path)

    # ─── Namespaces ──────────────────────────────────────────────────────────

    def list_namespaces(self) -> list[domain.Namespace]:
        raw = self._get("/namespaces")
        return [transform.namespace(item) for item in raw.get("namespaces") or []]

    # ─── Executions ──────────────────────────────────────────────────────────

    def _workflow_path(self, namespace: str, workflow_id: str = "") -> str:
        path = f"/namespaces/{_segment(namespace)}/workflows"
        return f"{path}/{_segment(workflow_id)}" if workflow_id else path

    def list_executions(
        self,
        namespace: str,
        query: str | None,
        page_size: int,
        page_token: str = "",
    ) -> domain.ExecutionPage:
        raw = self._get(
            self._workflow_path(namespace),
            {"query": query, "pageSize": page_size, "nextPageToken": page_token},
        )
        return transform.execution_page(raw)

    def describe_execution(
        self, namespace: str, workflow_id: str, run_id: str | None
    ) -> domain.ExecutionDetail:
        raw = self._get(self._workflow_path(namespace, workflow_id), {"execution.runId": run_id})
        return transform.execution_detail(raw)

    def get_history(
        self, namespace: str, workflow_id: str, run_id: str | None
    ) -> list[domain.HistoryEvent]:
        path = self._workflow_path(namespace, workflow_id) + "/history"
        events: list[domain.HistoryEvent] = []
        token = ""
        seen: set[str] = set()
        while True:
            raw = self._get(path, {"execution.runId": run_id, "nextPageToken": token})
            page, token = transform.history_page(raw)
            events.extend(page)
            if not token or token in seen:
                return events
            seen.add(token)

    def count_executions(self, namespace: str, query: str | None) -> int:
        raw = self._get(f"/namespaces/{_segment(namespace)}/workflow-count", {"query": query})
        return transform.execution_count(raw)

    def cancel_execution(self, namespace: str, workflow_id: str, run_id: str | None) -> None:
        self._post(
            self._workflow_path(namespace, workflow_id) + "/cancel",
            {"workflowExecution": _execution_ref(workflow_id, run_id), "identity": IDENTITY},
        )

    def terminate_execution(
        self, namespace: str, workflow_id: str, run_id: str | None, reason: str
    ) -> None:
        self._post(
            self._workflow_path(namespace, workflow_id) + "/terminate",
            {
                "workflowExecution": _execution_ref(workflow_id, run_id),
                "reason": reason,
                "identity": IDENTITY,
            },
        )

    def signal_execution(
        self,
        namespace: str,
        workflow_id: str,
        run_id: str | None,
        signal_name: str,
        payload: Any = None,
    ) -> None:
        body: dict[str, Any] = {
            "workflowExecution": _execution_ref(workflow_id, run_id),
            "signalName": signal_name,
            "identity": IDENTITY,
        }
        if payload is not None:
            body["input"] = {"payloads": [transform.encode_payload(_signal_input(payload))]}
        self._post(
            self._workflow_path(namespace, workflow_id) + f"/signal/{_segment(signal_name)}",
            body,
        )

    # ─── Schedules ───────────────────────────────────────────────────────────

    def _schedule_path(self, namespace: str, schedule_id: str = "") -> str:
        path = f"/namespaces/{_segment(namespace)}/schedules"
        return f"{path}/{_segment(schedule_id)}" if schedule_id else path

    def list_schedules(self, namespace: str, query: str | None) -> list[domain.Schedule]:
        raw = self._get(self._schedule_path(namespace), {"query": query})
        return [transform.schedule_from_listing(item) for item in raw.get("schedules") or []]

    def describe_schedule(self, namespace: str, schedule_id: str) -> domain.Schedule:
        raw = self._get(self._schedule_path(namespace, schedule_id))
        return transform.schedule_from_describe(schedule_id, raw)

    def _patch_schedule(self, namespace: str, schedule_id: str, patch: dict[str, Any]) -> None:
        self._post(
            self._schedule_path(namespace, schedule_id) + "/patch",
            {"patch": patch, "identity": IDENTITY},
        )

    def pause_schedule(self, namespace: str, schedule_id: str, pause: bool, note: str) -> None:
        self._patch_schedule(namespace, schedule_id, {"pause" if pause else "unpause": note})

    def trigger_schedule(self, namespace: str, schedule_id: str) -> None:
        self._patch_schedule(namespace, schedule_id, {"triggerImmediately": {}})

    def delete_schedule(self, namespace: str, schedule_id: str) -> None:
        self._request("DELETE", self._schedule_path(namespace, schedule_id), {"identity": IDENTITY})

    # ─── Task queues ─────────────────────────────────────────────────────────

    def describe_task_queue(self, namespace: str, task_queue: str) -> domain.TaskQueueInfo:
        raw = self._get(
            f"/namespaces/{_segment(namespace)}/task-queues/{_segment(task_queue)}",
            {"taskQueueType": "TASK_QUEUE_TYPE_WORKFLOW"},
        )
        return transform.task_queue(task_queue, raw)
