"""t9s: a k9s-style terminal dashboard for Temporal workflow executions and schedules."""

__version__ = "0.1.0"
