"""
Zoom block phases
=================
A block's camera motion runs through pre-block -> intro -> blend -> hold ->
outro. The intro pans from the entry anchor to a destination fixed at
block entry, eased with the same curve as the scale ramp so pan and zoom
land together; the blend window then hands over from that destination to
the live follow target.
"""

from enum import Enum

from .config import CAMERA_CONFIG
from .easing import clamp, clamp01, ease_zoom_progress, smootherstep
from .dead_zone import calculate_follow_target
from .zoom_blocks import MouseFollowAlgorithm, ZoomIntoCursorMode
from .zoom_transform import effective_ease_durations


class Phase(str, Enum):
    PRE_BLOCK = "pre-block"
    INTRO = "intro"
    BLEND = "blend"
    HOLD = "hold"
    OUTRO = "outro"


class PhaseInfo:
    """Where ``t`` falls inside a block, with the progress the phase needs."""

    __slots__ = ("phase", "elapsed", "intro_ms", "outro_ms", "progress")

    def __init__(self, phase, elapsed=0.0, intro_ms=0.0, outro_ms=0.0, progress=0.0):
        self.phase = phase
        self.elapsed = elapsed
        self.intro_ms = intro_ms
        self.outro_ms = outro_ms
        self.progress = progress

    def __repr__(self):
        return f"PhaseInfo({self.phase.value}, elapsed={self.elapsed:.1f}, progress={self.progress:.3f})"


def detect_phase(block, t_ms, blend_ms=None):
    if block is None:
        return PhaseInfo(Phase.PRE_BLOCK)

    blend_ms = CAMERA_CONFIG["intro_hold_blend_ms"] if blend_ms is None else blend_ms
    duration = block.duration
    intro, outro = effective_ease_durations(duration, block.intro_ms, block.outro_ms)
    elapsed = clamp(t_ms - block.start_time, 0.0, duration)
    in_outro = outro > 0 and elapsed > duration - outro

    if elapsed < intro:
        return PhaseInfo(Phase.INTRO, elapsed, intro, outro, elapsed / intro)
    if not in_outro and blend_ms > 0 and elapsed < intro + blend_ms:
        return PhaseInfo(Phase.BLEND, elapsed, intro, outro, (elapsed - intro) / blend_ms)
    if in_outro:
        return PhaseInfo(Phase.OUTRO, elapsed, intro, outro, (elapsed - (duration - outro)) / outro)
    return PhaseInfo(Phase.HOLD, elapsed, intro, outro, 1.0)


# ─── Follow targets ─────────────────────────────────────────────────────────


def lead_offset(velocity, half_window_x, half_window_y, zoom_scale, dead_band=0.001):
    """Push the target a third of the half-window ahead of the cursor's heading."""

    def sign(v):
        return 1.0 if v > dead_band else (-1.0 if v < -dead_band else 0.0)

    amount = clamp01((zoom_scale - 1.0) / 2.0)
    return (sign(velocity[0]) * half_window_x * 0.33 * amount,
            sign(velocity[1]) * half_window_y * 0.33 * amount)


def lead_prediction_seconds(intro_ms):
    return clamp(intro_ms / 1000.0 * 0.4, 0.05, 0.35)


def mouse_follow_target(algorithm, cursor, center, half_window_x, half_window_y, zoom_scale,
                        velocity=(0.0, 0.0), dead_zone_ratio=None):
    """
    Target for one of the mouse follow algorithms. ``smooth`` expects the
    caller to pass the smoothed cursor; it then follows it directly.
    """
    if algorithm in (MouseFollowAlgorithm.DIRECT, MouseFollowAlgorithm.SMOOTH):
        return cursor
    if algorithm == MouseFollowAlgorithm.THIRDS:
        ox, oy = lead_offset(velocity, half_window_x, half_window_y, zoom_scale)
        return cursor[0] + ox, cursor[1] + oy
    return calculate_follow_target(cursor, center, half_window_x, half_window_y, zoom_scale, dead_zone_ratio)


def intro_destination(block, anchor, smoothed_cursor, velocity, aim_half_x, aim_half_y, target_scale):
    """
    Destination of the intro pan, taken once on block entry from a smoothed
    cursor sample: where the follow algorithm would put the camera once it
    is fully zoomed in. Unclamped; the caller clamps it.
    """
    mode = block.zoom_into_cursor_mode
    if mode == ZoomIntoCursorMode.CENTER:
        return 0.5, 0.5

    cursor = smoothed_cursor
    if mode == ZoomIntoCursorMode.LEAD:
        ahead = lead_prediction_seconds(block.intro_ms)
        cursor = (cursor[0] + velocity[0] * ahead, cursor[1] + velocity[1] * ahead)
        target = mouse_follow_target(block.mouse_follow_algorithm, cursor, anchor, aim_half_x, aim_half_y,
                                     target_scale, velocity, block.dead_zone_ratio)
        ox, oy = lead_offset(velocity, aim_half_x, aim_half_y, target_scale)
        return target[0] + ox, target[1] + oy

    return mouse_follow_target(block.mouse_follow_algorithm, cursor, anchor, aim_half_x, aim_half_y,
                               target_scale, velocity, block.dead_zone_ratio)


# ─── Phase centers ──────────────────────────────────────────────────────────


def intro_center(anchor, destination, style, progress):
    e = ease_zoom_progress(style, progress)
    return (anchor[0] + (destination[0] - anchor[0]) * e,
            anchor[1] + (destination[1] - anchor[1]) * e)


def blend_center(destination, live_target, weight):
    w = smootherstep(weight)
    return (destination[0] + (live_target[0] - destination[0]) * w,
            destination[1] + (live_target[1] - destination[1]) * w)
