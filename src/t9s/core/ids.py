"""Closed identifier sets shared by the registry, actions and state."""

from enum import Enum


class KindId(Enum):
    EXECUTIONS = "executions"
    SCHEDULES = "schedules"


class OperationId(Enum):
    CANCEL = "cancel"
    TERMINATE = "terminate"
    PAUSE = "pause"
    TRIGGER = "trigger"
    DELETE = "delete"
