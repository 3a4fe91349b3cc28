"""
Camera orchestrator
===================
``compute_camera_state`` resolves one frame: it finds the active zoom
block, reads the cursor, picks a follow target for the block's strategy
and phase, moves the camera with the integrator, clamps once and finally
keeps the cursor glyph on screen.

It never mutates its inputs. The caller threads the returned
``CameraPhysicsState`` into the next call; preview and export each own
their own state and ``ZoomBlockCache``.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .config import CAMERA_CONFIG, CURSOR_STOP_CONFIG
from .cursor_glyphs import cursor_margins
from .cursor_trajectory import classify_dwell
from .dead_zone import NO_OVERSCAN, OutputOverscan, get_half_windows
from .phases import Phase, detect_phase, intro_center, blend_center, intro_destination, mouse_follow_target
from .physics import INITIAL_STATE, advance
from .visibility import ContentBounds, clamp_center_to_content_bounds, project_center_to_keep_cursor_visible
from .zoom_blocks import FollowStrategy, MouseFollowAlgorithm, ZoomBlockCache, ZoomIntoCursorMode
from .zoom_transform import calculate_zoom_scale

logger = logging.getLogger(__name__)

CENTER = (0.5, 0.5)


@dataclass(frozen=True)
class FrameContext:
    """
    Per-frame geometry: source size, output size, padding overscan, crop,
    and the mockup screen rectangle (output pixels) when a device mockup
    is shown. ``cursor_size`` is None when no cursor layer is rendered.
    """

    source_width: float
    source_height: float
    output_width: Optional[float] = None
    output_height: Optional[float] = None
    overscan: OutputOverscan = NO_OVERSCAN
    content_bounds: Optional[ContentBounds] = None
    mockup_screen: Optional[Tuple[float, float, float, float]] = None
    force_follow_cursor: bool = False
    cursor_size: Optional[float] = None
    cursor_theme: Optional[str] = None


@dataclass(frozen=True)
class CameraResult:
    active_block: object
    center: Tuple[float, float]
    scale: float
    phase: Phase
    frozen: bool
    physics: object


class _Space:
    """Cursor remapping and the two clamping modes for one frame's geometry."""

    def __init__(self, context):
        self.ctx = context
        self.ov = context.overscan or NO_OVERSCAN
        ov = self.ov
        if ov.any:
            self.bounds = (-ov.left, 1.0 + ov.right, -ov.top, 1.0 + ov.bottom)
        else:
            self.bounds = (0.0, 1.0, 0.0, 1.0)

    def cursor(self, p):
        x, y = p
        ctx = self.ctx
        if ctx.mockup_screen and ctx.output_width and ctx.output_height:
            sx, sy, sw, sh = ctx.mockup_screen
            ow, oh = ctx.output_width, ctx.output_height

            def unit(v, d):
                return max(0.0, min(1.0, v / d))

            x = unit(sx, ow) + x * unit(sw, ow)
            y = unit(sy, oh) + y * unit(sh, oh)
        lo_x, hi_x, lo_y, hi_y = self.bounds
        return max(lo_x, min(hi_x, x)), max(lo_y, min(hi_y, y))

    def follow(self, algorithm, cursor, base, hw_x, hw_y, scale, velocity, dead_zone_ratio):
        ov = self.ov
        if not ov.any:
            return mouse_follow_target(algorithm, cursor, base, hw_x, hw_y, scale, velocity, dead_zone_ratio)
        target = mouse_follow_target(
            algorithm, ov.to_output(*cursor), ov.to_output(*base),
            hw_x / ov.denom_x, hw_y / ov.denom_y, scale, velocity, dead_zone_ratio,
        )
        return ov.from_output(*target)

    def clamp(self, center, hw_x, hw_y, scale):
        ov = self.ov
        ignore_overscan = scale > 1.01
        if ov.any:
            out = clamp_center_to_content_bounds(
                ov.to_output(*center), hw_x / ov.denom_x, hw_y / ov.denom_y,
                allow_full_range=True, ignore_overscan=ignore_overscan,
            )
            return ov.from_output(*out)
        return clamp_center_to_content_bounds(
            center, hw_x, hw_y, NO_OVERSCAN, ignore_overscan=ignore_overscan,
            content_bounds=self.ctx.content_bounds,
        )

    def keep_visible(self, center, cursor, hw_x, hw_y, margins):
        ov = self.ov
        if ov.any:
            out = project_center_to_keep_cursor_visible(
                ov.to_output(*center), ov.to_output(*cursor), hw_x / ov.denom_x, hw_y / ov.denom_y,
                NO_OVERSCAN, margins.scaled(ov.denom_x, ov.denom_y) if margins else None,
                allow_full_range=True,
            )
            return ov.from_output(*out)
        return project_center_to_keep_cursor_visible(center, cursor, hw_x, hw_y, NO_OVERSCAN, margins)

    def margins(self, cursor_type, hw_x, hw_y):
        ctx = self.ctx
        if ctx.cursor_size is None:
            return None
        out_w = ctx.output_width or ctx.source_width
        out_h = ctx.output_height or ctx.source_height
        if self.ov.any:
            out_w, out_h = out_w / self.ov.denom_x, out_h / self.ov.denom_y
        return cursor_margins(cursor_type, ctx.cursor_size, out_w, out_h, hw_x, hw_y, ctx.cursor_theme)


def _fixed_target(block, source_width, source_height):
    if block.follow_strategy == FollowStrategy.CENTER or block.is_fill:
        return CENTER
    if block.follow_strategy == FollowStrategy.MANUAL:
        if block.target_x is None or block.target_y is None:
            return CENTER
        return (block.target_x / (block.screen_width or source_width),
                block.target_y / (block.screen_height or source_height))
    return None


def compute_camera_state(effects, trajectory, timeline_ms, source_time_ms, context, state=INITIAL_STATE,
                         settings=None, deterministic=False, cache=None):
    """
    Camera center and scale for one frame.

    In deterministic mode time must never go backwards (raises
    ``ValueError``) and every forward step is playback; a step too long to
    integrate still snaps inside the integrator. Outside it, a jump beyond
    the seek threshold snaps onto the target with zero velocity, as does
    the first call in either mode.
    """
    cache = cache or ZoomBlockCache()
    last = state.last_time_ms
    dt_ms = 0.0 if last is None else timeline_ms - last
    if deterministic and dt_ms < 0:
        raise ValueError(
            f"Deterministic camera pass went backwards: {timeline_ms}ms after {last}ms"
        )
    # Export steps forward frame by frame; only preview can scrub
    seek = last is None or (not deterministic and abs(dt_ms) > CAMERA_CONFIG["seek_threshold_ms"])
    if seek and last is not None:
        logger.debug("Seek %.1fms -> %.1fms, camera snaps", last, timeline_ms)

    block = cache.block_at(effects, timeline_ms)
    phase = detect_phase(block, timeline_ms)
    space = _Space(context)
    sw, sh = context.source_width, context.source_height
    ow, oh = context.output_width, context.output_height

    if block is None:
        target_scale = scale = 1.0
    else:
        target_scale = space.ov.fill_scale if block.is_fill else block.scale
        scale = calculate_zoom_scale(timeline_ms - block.start_time, block.duration, target_scale,
                                     block.intro_ms, block.outro_ms, block.transition_style)
    hw_x, hw_y = get_half_windows(scale, sw, sh, ow, oh)
    aim_x, aim_y = get_half_windows(target_scale, sw, sh, ow, oh)

    # ─── Cursor ─────────────────────────────────────────────────────────
    raw = trajectory.normalized_at(source_time_ms, sw, sh)
    cursor = space.cursor(raw) if raw is not None else CENTER

    idle_px = CURSOR_STOP_CONFIG["idle_px"]
    if block is not None and block.mouse_idle_px is not None:
        idle_px = block.mouse_idle_px
    previous = None if seek else state.frozen_target
    dwell = classify_dwell(trajectory, source_time_ms, sw, sh, scale, previous_target=previous, idle_px=idle_px)
    frozen_target = None
    if dwell.frozen:
        frozen_target = previous if previous is not None else space.cursor(dwell.target)
    follow_cursor = frozen_target or cursor

    def smoothed():
        if frozen_target is not None:
            return frozen_target
        s = trajectory.smoothed_at(source_time_ms)
        return space.cursor((s[0] / sw, s[1] / sh)) if s is not None else cursor

    # ─── Pre-block and forced cursor follow ─────────────────────────────
    if context.force_follow_cursor:
        return CameraResult(block, follow_cursor, scale, phase.phase, dwell.frozen, state.evolve(
            x=follow_cursor[0], y=follow_cursor[1], vx=0.0, vy=0.0, scale=scale,
            last_time_ms=timeline_ms, last_source_time_ms=source_time_ms,
            last_block_id=block.id if block else None,
            intro_anchor=None, intro_destination=None, frozen_target=frozen_target,
        ))

    if block is None:
        return CameraResult(None, CENTER, 1.0, Phase.PRE_BLOCK, False, state.evolve(
            x=0.5, y=0.5, vx=0.0, vy=0.0, scale=1.0,
            last_time_ms=timeline_ms, last_source_time_ms=source_time_ms,
            last_block_id=None, intro_anchor=None, intro_destination=None, frozen_target=None,
        ))

    # ─── Block entry ────────────────────────────────────────────────────
    velocity = trajectory.velocity_at(source_time_ms, sw, sh)
    anchor, destination = state.intro_anchor, state.intro_destination
    if block.id != state.last_block_id or anchor is None:
        anchor = state.center
        destination = None
        if block.follows_mouse:
            destination = intro_destination(block, anchor, smoothed(), velocity, aim_x, aim_y, target_scale)
            destination = space.clamp(destination, aim_x, aim_y, target_scale)
        logger.debug("Entered zoom block %s at %.1fms (anchor %.3f, %.3f)",
                     block.id, timeline_ms, anchor[0], anchor[1])

    # ─── Target and motion ──────────────────────────────────────────────
    fixed = _fixed_target(block, sw, sh)
    mode = block.zoom_into_cursor_mode
    fixed_intro = fixed is None and phase.phase == Phase.INTRO and mode != ZoomIntoCursorMode.SNAP
    v = (0.0, 0.0)

    if fixed is not None:
        center = fixed
    else:
        algo = block.mouse_follow_algorithm
        live_input = smoothed() if algo == MouseFollowAlgorithm.SMOOTH else follow_cursor
        live = space.follow(algo, live_input, state.center, hw_x, hw_y, scale, velocity, block.dead_zone_ratio)

        if fixed_intro:
            center = intro_center(anchor, destination, block.transition_style, phase.progress)
        elif phase.phase == Phase.BLEND and mode != ZoomIntoCursorMode.SNAP:
            center = blend_center(destination, live, phase.progress)
        elif phase.phase in (Phase.INTRO, Phase.BLEND) or seek:
            center = space.clamp(live, hw_x, hw_y, scale)
        elif algo in (MouseFollowAlgorithm.DIRECT, MouseFollowAlgorithm.SMOOTH):
            center = live
        else:
            center, v = advance(
                state.center, (state.vx, state.vy), live, dt_ms / 1000.0, settings,
                scale=scale, block_smoothing=block.smoothing,
                outro=phase.phase == Phase.OUTRO, frozen=dwell.frozen,
            )

    # ─── Clamp, then keep the cursor visible ────────────────────────────
    if fixed_intro:
        center = space.clamp(center, aim_x, aim_y, scale)
    else:
        center = space.clamp(center, hw_x, hw_y, scale)

    if fixed is None and raw is not None:
        before = center
        margins = space.margins(trajectory.cursor_type_at(source_time_ms), hw_x, hw_y)
        center = space.keep_visible(center, space.cursor(raw), hw_x, hw_y, margins)
        moved = math.hypot(center[0] - before[0], center[1] - before[1])
        if frozen_target is not None and moved > 1e-6:
            frozen_target = center

    return CameraResult(block, center, scale, phase.phase, dwell.frozen, state.evolve(
        x=center[0], y=center[1], vx=v[0], vy=v[1], scale=scale,
        last_time_ms=timeline_ms, last_source_time_ms=source_time_ms, last_block_id=block.id,
        intro_anchor=anchor, intro_destination=destination, frozen_target=frozen_target,
    ))
