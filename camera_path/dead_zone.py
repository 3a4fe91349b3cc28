"""
Dead-zone follow
================
Where the camera wants to be for a given cursor, at a given zoom.

The dead zone is a box around the current center (a fraction of the
visible half-window) inside which cursor motion is ignored. Past its edge
the camera tracks so the cursor sits on the edge. A soft band from 1x to
1.5x the dead-zone half extent blends the two with smootherstep so the
camera never jumps when the cursor crosses the boundary.

Nothing here clamps: bounds are applied once per frame by the orchestrator.
"""

from dataclasses import dataclass

from .config import CAMERA_CONFIG, DEAD_ZONE_CONFIG
from .easing import smootherstep


@dataclass(frozen=True)
class OutputOverscan:
    """How far the output extends past the video on each side, as a ratio of the draw size."""

    left: float = 0.0
    right: float = 0.0
    top: float = 0.0
    bottom: float = 0.0

    @property
    def any(self):
        return self.left > 0 or self.right > 0 or self.top > 0 or self.bottom > 0

    @property
    def denom_x(self):
        return 1.0 + self.left + self.right

    @property
    def denom_y(self):
        return 1.0 + self.top + self.bottom

    @property
    def fill_scale(self):
        return max(self.denom_x, self.denom_y)

    # Video space <-> output space (normalized across content + padding)
    def to_output(self, x, y):
        return (self.left + x) / self.denom_x, (self.top + y) / self.denom_y

    def from_output(self, x, y):
        return x * self.denom_x - self.left, y * self.denom_y - self.top


NO_OVERSCAN = OutputOverscan()


def get_adaptive_dead_zone_ratio(zoom_scale, base_ratio_override=None):
    """Dead-zone ratio shrinking linearly between the start and end scales."""
    cfg = DEAD_ZONE_CONFIG
    max_ratio = CAMERA_CONFIG["dead_zone_ratio"] if base_ratio_override is None else base_ratio_override
    # A user-set ratio keeps more of itself than the default does
    shrink = cfg["shrink_factor"] if base_ratio_override is None else cfg["override_shrink_factor"]
    min_ratio = max(cfg["min_ratio"], max_ratio * shrink)
    start, end = cfg["shrink_start_scale"], cfg["shrink_end_scale"]
    if zoom_scale <= start:
        return max_ratio
    t = min(1.0, (zoom_scale - start) / (end - start))
    return max_ratio + (min_ratio - max_ratio) * t


def get_half_windows(zoom_scale, source_width, source_height, output_width=None, output_height=None):
    """
    Normalized half extents of the visible source window. With an output
    aspect different from the source, the fitted axis gets the correction
    (letterbox widens Y, pillarbox widens X).
    """
    if zoom_scale <= 1.001:
        return 0.5, 0.5

    rx = ry = 1.0
    if output_width and output_height:
        source_aspect = source_width / source_height
        output_aspect = output_width / output_height
        if output_aspect > source_aspect:
            ry = output_aspect / source_aspect
        elif output_aspect < source_aspect:
            rx = source_aspect / output_aspect

    return 0.5 * rx / zoom_scale, 0.5 * ry / zoom_scale


def _transition_factor(dist, dead_half, band_half):
    if dist <= dead_half:
        return 0.0
    if dist >= band_half:
        return 1.0
    return smootherstep((dist - dead_half) / (band_half - dead_half))


def calculate_follow_target(cursor, center, half_window_x, half_window_y, zoom_scale,
                            dead_zone_ratio=None):
    """Soft dead-zone follow target for ``cursor`` given the current ``center``."""
    ratio = get_adaptive_dead_zone_ratio(zoom_scale, dead_zone_ratio)
    band = DEAD_ZONE_CONFIG["transition_band"]

    def axis(c, p, hw):
        dead_half = hw * ratio
        d = c - p
        t = _transition_factor(abs(d), dead_half, dead_half * band)
        if t == 0.0:
            return p
        full_track = c - (-1.0 if d < 0 else 1.0) * dead_half
        return p + (full_track - p) * t

    return axis(cursor[0], center[0], half_window_x), axis(cursor[1], center[1], half_window_y)
