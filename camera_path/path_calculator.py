"""
Camera path calculator
======================
Runs the camera over every frame of a composition in one forward,
deterministic pass and returns a ``CameraPathFrame`` per frame: center,
scale, ready-to-apply transform (values and string), velocity and motion
blur mix. The renderer looks frames up instead of re-deriving them.

Preview uses ``PreviewCamera``: the precomputed path when one is
available, otherwise a live, seek-tolerant computation with its own state.
"""

import logging
import time
from dataclasses import dataclass
from typing import Sequence, Tuple

from .config import CAMERA_CONFIG
from .cursor_trajectory import CursorTrajectory, MouseEvent
from .errors import PathCalculationCancelled
from .layout import camera_output_context
from .orchestrator import FrameContext, compute_camera_state
from .physics import INITIAL_STATE
from .visibility import ContentBounds
from .zoom_blocks import ZoomBlockCache, is_zoom_effect
from .zoom_transform import (
    IDENTITY_TRANSFORM,
    ZoomTransform,
    calculate_motion_blur_mix,
    calculate_zoom_transform,
    get_motion_blur_config,
    zoom_transform_string,
)

logger = logging.getLogger(__name__)


# ─── Inputs ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Recording:
    id: str
    width: float
    height: float
    mouse_events: Sequence[MouseEvent] = ()

    @staticmethod
    def from_dict(d):
        return Recording(
            id=str(d["id"]),
            width=float(d["width"]),
            height=float(d["height"]),
            mouse_events=tuple(MouseEvent.from_dict(e) for e in d.get("mouseEvents") or []),
        )


@dataclass(frozen=True)
class ClipLayout:
    """A recording placed on the timeline over frames ``[start_frame, end_frame)``."""

    start_frame: int
    end_frame: int
    recording_id: str
    source_in_ms: float = 0.0
    playback_rate: float = 1.0

    @staticmethod
    def from_dict(d):
        return ClipLayout(
            start_frame=int(d["startFrame"]),
            end_frame=int(d["endFrame"]),
            recording_id=str(d["recordingId"]),
            source_in_ms=float(d.get("sourceIn", 0.0)),
            playback_rate=float(d.get("playbackRate", 1.0)),
        )

    def contains(self, frame):
        return self.start_frame <= frame < self.end_frame

    def source_time_ms(self, frame, fps):
        elapsed = (frame - self.start_frame) / fps * 1000.0
        return self.source_in_ms + elapsed * (self.playback_rate or 1.0)


# ─── Output ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CameraPathFrame:
    active_zoom_block: object = None
    zoom_center: Tuple[float, float] = (0.5, 0.5)
    zoom_scale: float = 1.0
    velocity: Tuple[float, float] = (0.0, 0.0)
    motion_blur_mix: float = 0.0
    zoom_transform: ZoomTransform = IDENTITY_TRANSFORM
    zoom_transform_str: str = zoom_transform_string(IDENTITY_TRANSFORM)

    def to_dict(self):
        return {
            "activeZoomBlockId": self.active_zoom_block.id if self.active_zoom_block else None,
            "zoomCenter": {"x": self.zoom_center[0], "y": self.zoom_center[1]},
            "zoomScale": self.zoom_scale,
            "velocity": {"x": self.velocity[0], "y": self.velocity[1]},
            "motionBlurMix": self.motion_blur_mix,
            "zoomTransform": self.zoom_transform.to_dict(),
            "zoomTransformStr": self.zoom_transform_str,
        }


DEFAULT_FRAME = CameraPathFrame()


# ─── Effect lookup ──────────────────────────────────────────────────────────


def _is_type(effect, kind):
    return str(effect.get("type", "")).lower() == kind and effect.get("enabled", True)


def active_effect_data(effects, kind, t_ms):
    """``data`` of the first enabled effect of ``kind`` covering ``t_ms``."""
    for e in effects:
        if _is_type(e, kind) and e.get("startTime", 0) <= t_ms <= e.get("endTime", float("inf")):
            return e.get("data") or {}
    return None


def has_camera_tracking(effects):
    """Zoom effects, or a background with a device mockup, need the camera."""
    for e in effects:
        if is_zoom_effect(e):
            return True
        if _is_type(e, "background") and ((e.get("data") or {}).get("mockup") or {}).get("enabled"):
            return True
    return False


def frame_context(effects, recording, t_ms, canvas_width, canvas_height):
    """Geometry for one frame from the background, crop and cursor effects."""
    output = camera_output_context(canvas_width, canvas_height, recording.width, recording.height,
                                   active_effect_data(effects, "background", t_ms))
    crop = active_effect_data(effects, "crop", t_ms)
    cursor = active_effect_data(effects, "cursor", t_ms)
    return output, FrameContext(
        source_width=recording.width,
        source_height=recording.height,
        output_width=output.output_width,
        output_height=output.output_height,
        overscan=output.overscan,
        content_bounds=ContentBounds.from_crop(crop) if crop else None,
        mockup_screen=output.mockup_screen,
        force_follow_cursor=output.force_follow_cursor,
        cursor_size=float(cursor.get("size", 1.0)) if cursor is not None else None,
        cursor_theme=cursor.get("theme") if cursor is not None else None,
    )


def build_frame(result, t_ms, prev_center, output, blur_config, allow_pan_without_zoom=False):
    """Turn one orchestrator result into the frame the renderer consumes."""
    cx, cy = result.center
    # Zero whenever nothing visibly pans (scale 1)
    pan_gain = max(0.0, result.scale - 1.0)
    velocity = ((cx - prev_center[0]) * pan_gain, (cy - prev_center[1]) * pan_gain)

    block = result.active_block
    transform = calculate_zoom_transform(
        block, t_ms, output.draw_width, output.draw_height, result.center,
        override_scale=output.overscan.fill_scale if block is not None and block.is_fill else None,
        disable_refocus_blur=block is not None and block.is_fill,
        allow_pan_without_zoom=allow_pan_without_zoom,
        current_scale=result.scale,
    )
    return CameraPathFrame(
        active_zoom_block=block,
        zoom_center=result.center,
        zoom_scale=result.scale,
        velocity=velocity,
        motion_blur_mix=calculate_motion_blur_mix(velocity, blur_config, output.draw_width, output.draw_height),
        zoom_transform=transform,
        zoom_transform_str=zoom_transform_string(transform),
    )


# ─── Full pass ──────────────────────────────────────────────────────────────


def calculate_camera_path(effects, recordings, clips, fps, canvas_width, canvas_height, settings=None,
                          should_cancel=None, cache=None):
    """
    Deterministic camera path for frames ``0 .. max(clip.end_frame)``.

    ``recordings`` maps recording id -> ``Recording``. ``should_cancel`` is
    polled before every frame; when it returns True the pass raises
    ``PathCalculationCancelled`` and nothing is returned.
    """
    if fps <= 0:
        raise ValueError(f"fps must be > 0 (got {fps})")
    if not clips:
        return []

    total = max(c.end_frame for c in clips)
    if not has_camera_tracking(effects):
        logger.info("No zoom or mockup effects: %d default frames", total)
        return [DEFAULT_FRAME] * total

    t0 = time.monotonic()
    cache = cache or ZoomBlockCache()
    logger.info("1. Parsing zoom blocks ...")
    blocks = cache.blocks(effects)
    logger.info("   %d zoom block(s)", len(blocks))

    trajectories = {rid: CursorTrajectory(rec.mouse_events) for rid, rec in recordings.items()}
    blur_config = get_motion_blur_config(settings)
    state = INITIAL_STATE
    frames = []

    logger.info("2. Simulating camera over %d frames at %s fps ...", total, fps)
    for f in range(total):
        if should_cancel is not None and should_cancel():
            logger.info("   Cancelled at frame %d/%d", f, total)
            raise PathCalculationCancelled(f, total)

        clip = next((c for c in clips if c.contains(f)), None)
        recording = recordings.get(clip.recording_id) if clip is not None else None
        if recording is None:
            frames.append(DEFAULT_FRAME)
            continue

        t_ms = f / fps * 1000.0
        source_ms = clip.source_time_ms(f, fps)
        output, context = frame_context(effects, recording, t_ms, canvas_width, canvas_height)
        result = compute_camera_state(effects, trajectories[clip.recording_id], t_ms, source_ms, context,
                                      state, settings, deterministic=True, cache=cache)
        state = result.physics

        prev_center = frames[-1].zoom_center if frames else result.center
        frames.append(build_frame(result, t_ms, prev_center, output, blur_config,
                                  allow_pan_without_zoom=context.force_follow_cursor))
        if f % 500 == 0:
            logger.debug("   frame %d/%d", f, total)

    elapsed = time.monotonic() - t0
    logger.info("   %d frames in %.2fs (%.0f fps)", total, elapsed, total / max(elapsed, 0.001))
    return frames


# ─── Preview ────────────────────────────────────────────────────────────────


class PreviewCamera:
    """
    Camera for interactive playback. Serves frames from a precomputed path
    when one is attached; otherwise computes live, carrying its own physics
    state and block cache. Never share one between sessions.
    """

    def __init__(self, settings=None, path=None, fps=None):
        self.settings = settings
        self.path = path
        self.fps = fps
        self.cache = ZoomBlockCache()
        self.state = INITIAL_STATE
        self.blur_config = get_motion_blur_config(settings)
        self._prev_center = (0.5, 0.5)

    def attach_path(self, path, fps):
        self.path, self.fps = path, fps

    def invalidate(self):
        """Project data changed: drop the path, the cache and the carried state."""
        self.path = None
        self.cache.invalidate()
        self.reset()

    def reset(self):
        self.state = INITIAL_STATE
        self._prev_center = (0.5, 0.5)

    def frame_at(self, effects, recording, trajectory, timeline_ms, source_time_ms, canvas_width, canvas_height):
        if self.path and self.fps:
            idx = int(timeline_ms / 1000.0 * self.fps + 0.5)
            if 0 <= idx < len(self.path):
                return self.path[idx]

        last = self.state.last_time_ms
        seek = last is None or abs(timeline_ms - last) > CAMERA_CONFIG["seek_threshold_ms"]
        output, context = frame_context(effects, recording, timeline_ms, canvas_width, canvas_height)
        result = compute_camera_state(effects, trajectory, timeline_ms, source_time_ms, context,
                                      self.state, self.settings, deterministic=False, cache=self.cache)
        self.state = result.physics
        # A scrub is not motion: no velocity or blur on the landing frame
        prev_center = result.center if seek else self._prev_center
        frame = build_frame(result, timeline_ms, prev_center, output, self.blur_config,
                            allow_pan_without_zoom=context.force_follow_cursor)
        self._prev_center = result.center
        return frame
