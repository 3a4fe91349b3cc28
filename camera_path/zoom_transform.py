"""
Zoom transform
==============
Deterministic zoom scale ramp for a block, the pan/scale transform the
renderer applies, and the motion-blur mix derived from camera velocity.

The scale ramp has no physics: intro eases with the block's transition
style, hold returns the target, outro always uses ease-out-expo (a crane
settling). Intro and outro shrink proportionally when they would overlap.
"""

import math
from dataclasses import dataclass

import numpy as np

from .config import ZOOM_TRANSITION_CONFIG
from .easing import clamp01, ease_out_expo, ease_zoom_progress, smootherstep
from .zoom_blocks import FollowStrategy, ZoomIntoCursorMode


def effective_ease_durations(duration, intro_ms, outro_ms):
    """-> (intro, outro) scaled down so they never overlap within ``duration``."""
    duration = max(0.0, duration)
    if duration <= 0:
        return 0.0, 0.0
    intro, outro = max(0.0, intro_ms), max(0.0, outro_ms)
    total = intro + outro
    if total > duration:
        intro = intro * duration / total
        outro = outro * duration / total
    return intro, outro


def zoom_scale_curve(elapsed, duration, target_scale, intro_ms=None, outro_ms=None, style=None):
    """
    Scale for every value of ``elapsed`` (ms since block start, scalar or
    array), the same way a whole block's ramp is built frame by frame.
    """
    intro_ms = ZOOM_TRANSITION_CONFIG["default_intro_ms"] if intro_ms is None else intro_ms
    outro_ms = ZOOM_TRANSITION_CONFIG["default_outro_ms"] if outro_ms is None else outro_ms
    elapsed = np.asarray(elapsed, dtype=np.float64)
    if duration <= 0:
        out = np.ones_like(elapsed)
        return float(out) if out.ndim == 0 else out

    intro, outro = effective_ease_durations(duration, intro_ms, outro_ms)
    t = np.clip(elapsed, 0.0, duration)

    scales = np.full_like(t, float(target_scale))

    in_mask = t < intro
    if intro > 0:
        p = np.asarray(ease_zoom_progress(style, t / intro))
        scales = np.where(in_mask, 1.0 + (target_scale - 1.0) * p, scales)

    out_mask = (t > duration - outro) & ~in_mask
    if outro > 0:
        q = np.asarray(ease_out_expo((t - (duration - outro)) / outro))
        scales = np.where(out_mask, np.maximum(1.0, target_scale - (target_scale - 1.0) * q), scales)

    return float(scales) if scales.ndim == 0 else scales


def calculate_zoom_scale(elapsed, duration, target_scale, intro_ms=None, outro_ms=None, style=None):
    return float(zoom_scale_curve(float(elapsed), duration, target_scale, intro_ms, outro_ms, style))


def refocus_blur(progress, transition_ms, max_blur=None):
    """Defocus bell peaking mid-transition; short transitions get less."""
    max_blur = ZOOM_TRANSITION_CONFIG["max_refocus_blur"] if max_blur is None else max_blur
    if max_blur <= 0:
        return 0.0
    duration_scale = min(1.0, max(0.0, (transition_ms - 150.0) / 450.0))
    if duration_scale <= 0:
        return 0.0
    return math.sin(math.pi * smootherstep(progress)) * max_blur * duration_scale


# ─── Transform ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ZoomTransform:
    scale: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    scale_compensation_x: float = 0.0
    scale_compensation_y: float = 0.0
    refocus_blur: float = 0.0

    def to_dict(self):
        return {
            "scale": self.scale,
            "panX": self.pan_x,
            "panY": self.pan_y,
            "scaleCompensationX": self.scale_compensation_x,
            "scaleCompensationY": self.scale_compensation_y,
            "refocusBlur": self.refocus_blur,
        }


IDENTITY_TRANSFORM = ZoomTransform()


def _blends_back_to_center(block):
    if block.follow_strategy == FollowStrategy.MOUSE:
        return block.zoom_into_cursor_mode == ZoomIntoCursorMode.CENTER
    return True


def calculate_zoom_transform(block, t_ms, draw_width, draw_height, zoom_center, override_scale=None,
                             disable_refocus_blur=False, allow_pan_without_zoom=False,
                             current_scale=None):
    """
    Pan + scale for the video layer. ``zoom_center`` is the camera (view)
    center in normalized source space; the transform is "scale about the
    center, then translate".
    """
    if block is None:
        scale = 1.0 if current_scale is None else current_scale
        if not allow_pan_without_zoom:
            return ZoomTransform(scale=scale)
        return ZoomTransform(
            scale=scale,
            pan_x=(0.5 - zoom_center[0]) * draw_width,
            pan_y=(0.5 - zoom_center[1]) * draw_height,
        )

    duration = block.duration
    elapsed = t_ms - block.start_time
    target = override_scale if override_scale is not None else (block.scale or 2.0)
    scale = current_scale if current_scale is not None else calculate_zoom_scale(
        elapsed, duration, target, block.intro_ms, block.outro_ms, block.transition_style
    )

    intro, outro = effective_ease_durations(duration, block.intro_ms, block.outro_ms)
    t = max(0.0, min(duration, elapsed))
    outro_progress = (t - (duration - outro)) / outro if outro > 0 and t > duration - outro else 0.0

    strength = 1.0
    if _blends_back_to_center(block):
        strength = 1.0 - ease_zoom_progress(block.transition_style, outro_progress)
    cx = 0.5 + (zoom_center[0] - 0.5) * strength
    cy = 0.5 + (zoom_center[1] - 0.5) * strength

    scale_progress = clamp01((scale - 1.0) / (target - 1.0)) if target > 1 else 0.0
    pan_blend = 1.0 if allow_pan_without_zoom and target <= 1 else scale_progress

    mode = block.zoom_into_cursor_mode
    raw_x = (0.5 - cx) * draw_width * scale
    raw_y = (0.5 - cy) * draw_height * scale
    if mode == ZoomIntoCursorMode.SNAP:
        pan_x, pan_y = raw_x, raw_y
    elif mode in (ZoomIntoCursorMode.CURSOR, ZoomIntoCursorMode.LEAD) and target > 1:
        # Pan tied to (scale - 1): the point under the center stays fixed while zooming
        pan_x = (0.5 - cx) * draw_width * (scale - 1.0)
        pan_y = (0.5 - cy) * draw_height * (scale - 1.0)
    else:
        pan_x, pan_y = raw_x * pan_blend, raw_y * pan_blend

    blur = 0.0
    if not disable_refocus_blur:
        if intro > 0 and t < intro:
            blur = refocus_blur(t / intro, intro)
        elif outro > 0 and t > duration - outro:
            blur = refocus_blur((t - (duration - outro)) / outro, outro)

    return ZoomTransform(scale=scale, pan_x=pan_x, pan_y=pan_y, refocus_blur=blur)


def _js_round(v, places):
    f = 10 ** places
    return math.floor(v * f + 0.5) / f


def _fmt(v):
    if v == 0:
        return "0"
    if float(v).is_integer():
        return str(int(v))
    return repr(float(v))


def zoom_transform_string(transform):
    """CSS transform; sub-pixel translation (3 dp) and 4 dp scale."""
    tx = _js_round(transform.scale_compensation_x + transform.pan_x, 3)
    ty = _js_round(transform.scale_compensation_y + transform.pan_y, 3)
    s = _js_round(transform.scale, 4)
    return f"translate3d({_fmt(tx)}px, {_fmt(ty)}px, 0) scale3d({_fmt(s)}, {_fmt(s)}, 1)"


def zoom_affine_matrix(transform, draw_width, draw_height):
    """
    2x3 affine mapping draw-area pixels to output pixels for the same
    transform (scale about the draw-area center, then translate).
    """
    s = transform.scale
    cx, cy = draw_width / 2.0, draw_height / 2.0
    tx = transform.pan_x + transform.scale_compensation_x
    ty = transform.pan_y + transform.scale_compensation_y
    return np.array([
        [s, 0.0, cx * (1.0 - s) + tx],
        [0.0, s, cy * (1.0 - s) + ty],
    ], dtype=np.float64)


def apply_zoom_to_point(x, y, transform, draw_width, draw_height):
    """Where a draw-area pixel lands after the zoom (for overlay layers)."""
    M = zoom_affine_matrix(transform, draw_width, draw_height)
    px, py = M @ np.array([x, y, 1.0])
    return float(px), float(py)


# ─── Motion blur ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MotionBlurConfig:
    enabled: bool
    max_blur_radius: float
    velocity_threshold: float
    intensity_multiplier: float
    samples: int


def get_motion_blur_config(settings=None):
    intensity = 25.0 if settings is None else settings.motion_blur_intensity
    threshold = 20.0 if settings is None else settings.motion_blur_threshold
    return MotionBlurConfig(
        enabled=True if settings is None else settings.motion_blur_enabled,
        max_blur_radius=intensity / 100.0 * 40.0,
        velocity_threshold=threshold / 100.0 * 10.0,
        intensity_multiplier=2.0 + intensity / 100.0 * 4.0,
        samples=8 if settings is None else settings.motion_blur_samples,
    )


def calculate_motion_blur_mix(velocity, config, draw_width, draw_height):
    """0..1 blur mix from per-frame camera velocity (normalized units)."""
    if not config.enabled:
        return 0.0
    speed = math.hypot(velocity[0] * draw_width, velocity[1] * draw_height)
    threshold = config.velocity_threshold * 15.0
    if speed <= threshold:
        return 0.0
    return clamp01((speed - threshold) / 100.0)
