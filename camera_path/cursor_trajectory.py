"""
Cursor trajectory
=================
Random-access view of a recorded mouse log: interpolated position at any
time, short-window velocity, "stopped since" detection, and the dwell
classifier that pins the camera target while the user pauses.

Event timestamps are milliseconds in source-recording time, positions are
source pixels.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .config import CAMERA_CONFIG, CURSOR_STOP_CONFIG

logger = logging.getLogger(__name__)

DEFAULT_CURSOR_TYPE = "default"


@dataclass(frozen=True)
class MouseEvent:
    timestamp: float
    x: float
    y: float
    cursor_type: str = DEFAULT_CURSOR_TYPE

    @staticmethod
    def from_dict(d):
        return MouseEvent(
            timestamp=float(d["timestamp"]),
            x=float(d["x"]),
            y=float(d["y"]),
            cursor_type=d.get("cursorType") or DEFAULT_CURSOR_TYPE,
        )

    def to_dict(self):
        return {"timestamp": self.timestamp, "x": self.x, "y": self.y, "cursorType": self.cursor_type}


class CursorTrajectory:
    """
    Mouse log stored as numpy arrays sorted by timestamp (stable, so
    duplicate timestamps keep their recorded order). Before the first event
    and after the last one the nearest event's position holds.
    """

    def __init__(self, events):
        evs = [e if isinstance(e, MouseEvent) else MouseEvent.from_dict(e) for e in events or []]
        ts = np.array([e.timestamp for e in evs], dtype=np.float64)
        order = np.argsort(ts, kind="stable")
        self.t = ts[order]
        self.x = np.array([evs[i].x for i in order], dtype=np.float64)
        self.y = np.array([evs[i].y for i in order], dtype=np.float64)
        self.cursor_types = [evs[i].cursor_type for i in order]

    def __len__(self):
        return len(self.t)

    @property
    def empty(self):
        return len(self.t) == 0

    # ─── Position ───────────────────────────────────────────────────────

    def position_at(self, t_ms) -> Optional[Tuple[float, float]]:
        if self.empty:
            return None
        return float(np.interp(t_ms, self.t, self.x)), float(np.interp(t_ms, self.t, self.y))

    def positions_at(self, times_ms):
        """Vectorized ``position_at`` -> (xs, ys) arrays."""
        times_ms = np.asarray(times_ms, dtype=np.float64)
        return np.interp(times_ms, self.t, self.x), np.interp(times_ms, self.t, self.y)

    def normalized_at(self, t_ms, width, height):
        pos = self.position_at(t_ms)
        if pos is None:
            return None
        return pos[0] / width, pos[1] / height

    def cursor_type_at(self, t_ms):
        if self.empty:
            return DEFAULT_CURSOR_TYPE
        i = int(np.searchsorted(self.t, t_ms, side="right")) - 1
        return self.cursor_types[max(i, 0)]

    # ─── Motion ─────────────────────────────────────────────────────────

    def velocity_at(self, t_ms, width, height, lookback_ms=None):
        """Directional velocity (normalized units / s) over a backward window."""
        if self.empty:
            return 0.0, 0.0
        lookback_ms = lookback_ms or CAMERA_CONFIG["velocity_lookback_ms"]
        x0, y0 = self.position_at(t_ms - lookback_ms)
        x1, y1 = self.position_at(t_ms)
        dt = max(0.001, lookback_ms / 1000.0)
        return (x1 - x0) / width / dt, (y1 - y0) / height / dt

    def speed_at(self, t_ms, width, height, idle_px=None, lookback_ms=None):
        """
        Scalar speed (normalized units / s). Displacements under ``idle_px``
        over the window count as jitter and report zero.
        """
        if self.empty:
            return 0.0
        idle_px = CURSOR_STOP_CONFIG["idle_px"] if idle_px is None else idle_px
        lookback_ms = lookback_ms or CAMERA_CONFIG["velocity_lookback_ms"]
        x0, y0 = self.position_at(t_ms - lookback_ms)
        x1, y1 = self.position_at(t_ms)
        if math.hypot(x1 - x0, y1 - y0) <= idle_px:
            return 0.0
        dt = max(0.001, lookback_ms / 1000.0)
        return math.hypot((x1 - x0) / width, (y1 - y0) / height) / dt

    def stopped_since(self, t_ms, idle_px=None, max_lookback_ms=5000.0):
        """
        Earliest time from which the cursor has stayed within ``idle_px`` of
        where it is at ``t_ms``. Computed from the log alone so the answer
        does not depend on how playback reached ``t_ms``.
        """
        if self.empty:
            return t_ms
        idle_px = CURSOR_STOP_CONFIG["idle_px"] if idle_px is None else idle_px
        cx, cy = self.position_at(t_ms)
        lo = int(np.searchsorted(self.t, t_ms - max_lookback_ms, side="left"))
        hi = int(np.searchsorted(self.t, t_ms, side="right"))
        if hi <= lo:
            # No samples in the window: the held position is all we know
            return min(t_ms, self.t[0]) if hi == 0 else t_ms - max_lookback_ms
        dist = np.hypot(self.x[lo:hi] - cx, self.y[lo:hi] - cy)
        moving = np.nonzero(dist > idle_px)[0]
        if len(moving) == 0:
            return float(self.t[lo]) if lo > 0 else min(t_ms, float(self.t[0]))
        k = lo + int(moving[-1])
        return float(self.t[k + 1]) if k + 1 < hi else float(t_ms)

    # ─── Filtered positions ─────────────────────────────────────────────

    def window_average(self, t_ms, window_ms, samples=None):
        """Mean of evenly spaced samples over ``[t - window, t]``."""
        if self.empty:
            return None
        samples = samples or CAMERA_CONFIG["cinematic_samples"]
        times = t_ms - np.arange(samples, dtype=np.float64) * (window_ms / samples)
        xs, ys = self.positions_at(times)
        return float(xs.mean()), float(ys.mean())

    def smoothed_at(self, t_ms, window_ms=None, samples=None):
        """Exponentially weighted position over a trailing window (newest heaviest)."""
        if self.empty:
            return None
        window_ms = window_ms or CAMERA_CONFIG["smooth_cursor_window_ms"]
        samples = samples or CAMERA_CONFIG["cinematic_samples"]
        ages = np.arange(samples, dtype=np.float64) * (window_ms / samples)
        weights = np.exp(-ages / (window_ms / 3.0))
        xs, ys = self.positions_at(t_ms - ages)
        wsum = weights.sum()
        return float((xs * weights).sum() / wsum), float((ys * weights).sum() / wsum)


# ─── Dwell classification ───────────────────────────────────────────────────


@dataclass(frozen=True)
class DwellResult:
    frozen: bool
    target: Optional[Tuple[float, float]] = None  # normalized


def classify_dwell(trajectory, t_ms, width, height, scale, previous_target=None, idle_px=None):
    """
    Decide whether the camera target is pinned to a dwell position.

    Freeze: zoomed past ``min_zoom``, speed under the threshold, and still
    for at least ``dwell_ms``; the pinned target is the averaged position
    over the dwell window. Once frozen, only a speed above
    ``release_multiplier`` x threshold releases it.
    """
    cfg = CURSOR_STOP_CONFIG
    if trajectory.empty or scale < cfg["min_zoom"]:
        return DwellResult(False)

    speed = trajectory.speed_at(t_ms, width, height, idle_px=idle_px)
    threshold = cfg["velocity_threshold"]

    if speed < threshold:
        if previous_target is not None:
            return DwellResult(True, previous_target)
        still_for = t_ms - trajectory.stopped_since(t_ms, idle_px=idle_px)
        if still_for >= cfg["dwell_ms"]:
            ax, ay = trajectory.window_average(t_ms, cfg["dwell_ms"])
            return DwellResult(True, (ax / width, ay / height))
        return DwellResult(False)

    if previous_target is not None and speed < threshold * cfg["release_multiplier"]:
        return DwellResult(True, previous_target)
    return DwellResult(False)
