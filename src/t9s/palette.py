"""Color palette using golden-angle spacing in HSL space.

Semantic roles (error, warning, success, info, accent) snap to the nearest
golden-angle hue from a configurable seed, so every color shifts together
when the seed changes.

Status tables map domain enums to palette roles; renderers look styles up
here rather than choosing colors inline.
"""

import colorsys
import logging
import os

from t9s.core.domain import ExecutionStatus, ScheduleState

logger = logging.getLogger(__name__)

GOLDEN_ANGLE = 137.508

# Semantic target hues (degrees) for perceptually-stable roles
_SEMANTIC_TARGETS = {
    "error": 0.0,  # red
    "warning": 50.0,  # yellow-ish
    "success": 130.0,  # green
    "info": 190.0,  # cyan
    "accent": 30.0,  # orange
}


def _hsl_to_hex(h: float, s: float, lightness: float) -> str:
    """Convert HSL (h in 0-360, s/lightness in 0-1) to #RRGGBB hex string."""
    r, g, b = colorsys.hls_to_rgb(h / 360.0, lightness, s)
    return "#{:02X}{:02X}{:02X}".format(
        int(round(r * 255)),
        int(round(g * 255)),
        int(round(b * 255)),
    )


def _angular_distance(a: float, b: float) -> float:
    """Shortest angular distance between two hues in degrees."""
    d = abs(a - b) % 360
    return min(d, 360 - d)


class Palette:
    """Color palette with golden-angle spacing from a seed hue.

    Args:
        seed_hue: Starting hue in degrees (0-360). Default 190 (cyan).
        count: Number of hues to generate. Default 24.
    """

    def __init__(self, seed_hue: float = 190.0, count: int = 24):
        self._count = count
        self._hues = [(seed_hue + i * GOLDEN_ANGLE) % 360 for i in range(count)]
        self._fg_colors = [_hsl_to_hex(hue, 0.75, 0.70) for hue in self._hues]
        self._bg_colors = [_hsl_to_hex(hue, 0.60, 0.25) for hue in self._hues]

        self._semantic_indices: dict[str, int] = {}
        for role, target_hue in _SEMANTIC_TARGETS.items():
            self._semantic_indices[role] = min(
                range(count),
                key=lambda i: _angular_distance(self._hues[i], target_hue),
            )

    def fg(self, index: int) -> str:
        """Foreground hex color (#RRGGBB) at index (wraps)."""
        return self._fg_colors[index % self._count]

    def role(self, name: str) -> str:
        return self._fg_colors[self._semantic_indices[name]]

    def role_bg(self, name: str) -> str:
        return self._bg_colors[self._semantic_indices[name]]

    @property
    def error(self) -> str:
        return self.role("error")

    @property
    def warning(self) -> str:
        return self.role("warning")

    @property
    def success(self) -> str:
        return self.role("success")

    @property
    def info(self) -> str:
        return self.role("info")

    @property
    def accent(self) -> str:
        return self.role("accent")

    @property
    def selection_bg(self) -> str:
        return self.role_bg("info")

    @property
    def error_bg(self) -> str:
        return self.role_bg("error")


# [LAW:one-source-of-truth] Status -> palette role.
_EXECUTION_STATUS_ROLES: dict[ExecutionStatus, str] = {
    ExecutionStatus.RUNNING: "info",
    ExecutionStatus.COMPLETED: "success",
    ExecutionStatus.FAILED: "error",
    ExecutionStatus.CANCELED: "warning",
    ExecutionStatus.TERMINATED: "error",
    ExecutionStatus.TIMED_OUT: "warning",
    ExecutionStatus.CONTINUED_AS_NEW: "accent",
}

_SCHEDULE_STATE_ROLES: dict[ScheduleState, str] = {
    ScheduleState.ACTIVE: "success",
    ScheduleState.PAUSED: "warning",
}


def status_style(status: ExecutionStatus) -> str:
    role = _EXECUTION_STATUS_ROLES.get(status)
    return PALETTE.role(role) if role else "dim"


def schedule_state_style(state: ScheduleState) -> str:
    return PALETTE.role(_SCHEDULE_STATE_ROLES[state])


def _get_seed_hue() -> float:
    """Get seed hue from environment or default."""
    env = os.environ.get("T9S_SEED_HUE")
    if env is not None:
        try:
            return float(env)
        except ValueError:
            logger.warning("invalid T9S_SEED_HUE=%r, using default", env)
    return 190.0


def init_palette(seed_hue: float | None = None) -> None:
    """Initialize the global palette with a seed hue."""
    global PALETTE
    hue = seed_hue if seed_hue is not None else _get_seed_hue()
    PALETTE = Palette(seed_hue=hue)


# Module-level singleton; consumers read t9s.palette.PALETTE at call time.
PALETTE = Palette(seed_hue=_get_seed_hue())
