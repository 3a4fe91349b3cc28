"""
Zoom blocks
===========
Turns the timeline's zoom effects into validated, immutable ``ZoomBlock``
intervals and answers "which block is active at t?".

Corrupt effect data fails fast with ``ZoomBlockValidationError`` naming the
effect and field. Blocks keep the timeline's order: when two blocks
overlap, the earlier one in the list wins.
"""

import hashlib
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .config import ZOOM_TRANSITION_CONFIG
from .easing import LEGACY_STYLES
from .errors import ZoomBlockValidationError

logger = logging.getLogger(__name__)

BLOCK_EPSILON_MS = ZOOM_TRANSITION_CONFIG["block_epsilon_ms"]


class FollowStrategy(str, Enum):
    MOUSE = "mouse"
    CENTER = "center"
    MANUAL = "manual"


class MouseFollowAlgorithm(str, Enum):
    DEADZONE = "deadzone"
    DIRECT = "direct"
    SMOOTH = "smooth"
    THIRDS = "thirds"


class ZoomIntoCursorMode(str, Enum):
    CENTER = "center"
    CURSOR = "cursor"
    SNAP = "snap"
    LEAD = "lead"


class TransitionStyle(str, Enum):
    LINEAR = "linear"
    CUBIC = "cubic"
    SINE = "sine"
    EXPO = "expo"
    SIGMOID = "sigmoid"
    SMOOTHER = "smoother"
    SETTLE = "settle"


@dataclass(frozen=True)
class ZoomBlock:
    id: str
    start_time: float
    end_time: float
    scale: float
    intro_ms: float
    outro_ms: float
    smoothing: float = 0.0
    origin: str = "manual"
    auto_scale: Optional[str] = None  # "fill" or None
    target_x: Optional[float] = None
    target_y: Optional[float] = None
    screen_width: Optional[float] = None
    screen_height: Optional[float] = None
    follow_strategy: FollowStrategy = FollowStrategy.MOUSE
    mouse_idle_px: Optional[float] = None
    dead_zone_ratio: Optional[float] = None
    transition_style: TransitionStyle = TransitionStyle.SMOOTHER
    mouse_follow_algorithm: MouseFollowAlgorithm = MouseFollowAlgorithm.DEADZONE
    zoom_into_cursor_mode: ZoomIntoCursorMode = ZoomIntoCursorMode.CURSOR

    @property
    def duration(self):
        return self.end_time - self.start_time

    @property
    def is_fill(self):
        return self.auto_scale == "fill"

    @property
    def follows_mouse(self):
        return self.follow_strategy == FollowStrategy.MOUSE


# ─── Parsing ────────────────────────────────────────────────────────────────


def is_zoom_effect(effect):
    return str(effect.get("type", "")).lower() == "zoom" and effect.get("enabled", True)


def _finite(effect_id, field, value):
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ZoomBlockValidationError(effect_id, field, f"not a finite number ({value!r})")
    return float(value)


def _optional_finite(effect_id, field, data):
    value = data.get(field)
    return None if value is None else _finite(effect_id, field, value)


def _enum(effect_id, field, enum_cls, value, default, aliases=None):
    if value is None:
        return default
    value = (aliases or {}).get(value, value)
    try:
        return enum_cls(value)
    except ValueError:
        raise ZoomBlockValidationError(
            effect_id, field, f"invalid value {value!r}; use one of {[e.value for e in enum_cls]}"
        ) from None


def parse_zoom_effect(effect):
    """Validate one zoom effect dict and return its ``ZoomBlock``."""
    effect_id = effect.get("id", "<unnamed>")
    data = effect.get("data")
    if not isinstance(data, dict):
        raise ZoomBlockValidationError(effect_id, "data", "missing zoom data")

    start = _finite(effect_id, "startTime", effect.get("startTime"))
    end = _finite(effect_id, "endTime", effect.get("endTime"))
    if start >= end:
        raise ZoomBlockValidationError(effect_id, "endTime", f"non-positive duration ({start} >= {end})")

    origin = data.get("origin")
    if origin not in ("auto", "manual"):
        raise ZoomBlockValidationError(effect_id, "origin", f"invalid value {origin!r}")

    scale = _finite(effect_id, "scale", data.get("scale"))
    if scale <= 0:
        raise ZoomBlockValidationError(effect_id, "scale", f"must be > 0 ({scale})")

    timings = {}
    for field in ("introMs", "outroMs", "smoothing"):
        value = _finite(effect_id, field, data.get(field))
        if value < 0:
            raise ZoomBlockValidationError(effect_id, field, f"must be >= 0 ({value})")
        timings[field] = value

    target_x = _optional_finite(effect_id, "targetX", data)
    target_y = _optional_finite(effect_id, "targetY", data)
    screen_w = _optional_finite(effect_id, "screenWidth", data)
    screen_h = _optional_finite(effect_id, "screenHeight", data)
    for field, value in (("screenWidth", screen_w), ("screenHeight", screen_h)):
        if value is not None and value <= 0:
            raise ZoomBlockValidationError(effect_id, field, f"must be > 0 ({value})")

    idle_px = _optional_finite(effect_id, "mouseIdlePx", data)
    if idle_px is not None and idle_px < 0:
        raise ZoomBlockValidationError(effect_id, "mouseIdlePx", f"must be >= 0 ({idle_px})")

    dz_ratio = _optional_finite(effect_id, "deadZoneRatio", data)
    if dz_ratio is not None and not 0.0 <= dz_ratio <= 1.0:
        raise ZoomBlockValidationError(effect_id, "deadZoneRatio", f"must be within 0-1 ({dz_ratio})")

    auto_scale = data.get("autoScale")
    if auto_scale not in (None, "fill"):
        raise ZoomBlockValidationError(effect_id, "autoScale", f"invalid value {auto_scale!r}")

    return ZoomBlock(
        id=str(effect_id),
        start_time=start,
        end_time=end,
        scale=scale,
        intro_ms=timings["introMs"],
        outro_ms=timings["outroMs"],
        smoothing=timings["smoothing"],
        origin=origin,
        auto_scale=auto_scale,
        target_x=target_x,
        target_y=target_y,
        screen_width=screen_w,
        screen_height=screen_h,
        follow_strategy=_enum(effect_id, "followStrategy", FollowStrategy,
                              data.get("followStrategy"), FollowStrategy.MOUSE),
        mouse_idle_px=idle_px,
        dead_zone_ratio=dz_ratio,
        transition_style=_enum(effect_id, "transitionStyle", TransitionStyle,
                               data.get("transitionStyle"), TransitionStyle.SMOOTHER,
                               aliases=LEGACY_STYLES),
        mouse_follow_algorithm=_enum(effect_id, "mouseFollowAlgorithm", MouseFollowAlgorithm,
                                     data.get("mouseFollowAlgorithm"), MouseFollowAlgorithm.DEADZONE),
        zoom_into_cursor_mode=_enum(effect_id, "zoomIntoCursorMode", ZoomIntoCursorMode,
                                    data.get("zoomIntoCursorMode"), ZoomIntoCursorMode.CURSOR),
    )


def parse_zoom_blocks(effects) -> List[ZoomBlock]:
    """Enabled zoom effects -> blocks, in timeline order (never re-sorted)."""
    return [parse_zoom_effect(e) for e in effects if is_zoom_effect(e)]


# ─── Lookup ─────────────────────────────────────────────────────────────────


def get_zoom_block_at(blocks, t_ms):
    """
    Exact interval match first (first block in list order wins); otherwise
    the block whose start or end is nearest within the 40ms boundary epsilon.
    """
    for b in blocks:
        if b.start_time <= t_ms <= b.end_time:
            return b

    best, best_dist = None, math.inf
    for b in blocks:
        after_end = t_ms - b.end_time
        if 0 < after_end <= BLOCK_EPSILON_MS and after_end < best_dist:
            best, best_dist = b, after_end
        before_start = b.start_time - t_ms
        if 0 < before_start <= BLOCK_EPSILON_MS and before_start < best_dist:
            best, best_dist = b, before_start
    return best


def zoom_effects_hash(effects):
    """Content hash over every field of the enabled zoom effects."""
    h = hashlib.sha1()
    for e in effects:
        if not is_zoom_effect(e):
            continue
        data = e.get("data") or {}
        h.update(repr((e.get("id"), e.get("startTime"), e.get("endTime"),
                       sorted(data.items(), key=lambda kv: kv[0]))).encode("utf-8"))
        h.update(b";")
    return h.hexdigest()


class ZoomBlockCache:
    """
    Parsed blocks keyed by the content hash of the zoom effects, plus a
    memo of the last block hit. Owned by one caller (a preview session or
    an export pass), never shared.
    """

    def __init__(self):
        self._hash = None
        self._blocks = []
        self._shadowed = []
        self._last = None
        self.parse_count = 0

    def invalidate(self):
        self._hash = None
        self._blocks = []
        self._shadowed = []
        self._last = None

    def blocks(self, effects):
        key = zoom_effects_hash(effects)
        if key != self._hash:
            self._blocks = parse_zoom_blocks(effects)
            self._hash = key
            self._last = None
            # A block is "shadowed" when an earlier block overlaps it; only
            # unshadowed blocks can answer a lookup from the memo alone.
            self._shadowed = [
                any(a.start_time <= b.end_time and b.start_time <= a.end_time
                    for a in self._blocks[:i])
                for i, b in enumerate(self._blocks)
            ]
            self.parse_count += 1
            logger.debug("Parsed %d zoom block(s)", len(self._blocks))
        return self._blocks

    def block_at(self, effects, t_ms):
        blocks = self.blocks(effects)
        last = self._last
        if last is not None:
            b = blocks[last]
            if b.start_time <= t_ms <= b.end_time and not self._shadowed[last]:
                return b
        found = get_zoom_block_at(blocks, t_ms)
        if found is not None and found.start_time <= t_ms <= found.end_time:
            self._last = blocks.index(found)
        return found
