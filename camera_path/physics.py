"""
Camera physics
==============
The carried ``CameraPhysicsState`` and the two integrators that move the
camera center toward its target between frames:

  spring       semi-implicit Euler on a damped spring, sub-stepped at 16ms
  exponential  first-order lag, ``c += (target - c) * (1 - exp(-dt / tau))``

A seek, or a frame delta too large to integrate, snaps onto the target
with zero velocity.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .config import CAMERA_CONFIG, EXPONENTIAL_CONFIG, SPRING_CONFIG
from .easing import clamp01, lerp

Point = Tuple[float, float]


@dataclass(frozen=True)
class CameraPhysicsState:
    """Everything carried from one frame to the next. Never mutated."""

    x: float = 0.5
    y: float = 0.5
    vx: float = 0.0
    vy: float = 0.0
    scale: float = 1.0
    last_time_ms: Optional[float] = None
    last_source_time_ms: Optional[float] = None
    last_block_id: Optional[str] = None
    intro_anchor: Optional[Point] = None
    intro_destination: Optional[Point] = None
    frozen_target: Optional[Point] = None

    @property
    def center(self):
        return self.x, self.y

    def evolve(self, **changes):
        return replace(self, **changes)


INITIAL_STATE = CameraPhysicsState()


@dataclass(frozen=True)
class SpringParams:
    stiffness: float
    damping: float
    mass: float = 1.0


def normalize_smoothing_amount(value):
    """0..100 smoothing; legacy 0..1 values are read as fractions."""
    if value is None or not math.isfinite(value):
        return 0.0
    if 0 < value <= 1:
        value *= 100.0
    return max(0.0, min(100.0, value))


def spring_params(settings, outro=False, frozen=False):
    cfg = SPRING_CONFIG
    if frozen:
        return SpringParams(cfg["frozen_stiffness"], cfg["frozen_damping"])
    if settings is not None and settings.dynamics is not None:
        d = settings.dynamics
        return SpringParams(d.stiffness, d.damping, d.mass or 1.0)
    if outro:
        return SpringParams(cfg["outro_stiffness"], cfg["outro_damping"])
    if settings is not None and settings.smoothness is not None:
        t = clamp01(settings.smoothness / 100.0)
        return SpringParams(lerp(*cfg["smooth_stiffness_range"], t), lerp(*cfg["smooth_damping_range"], t))
    return SpringParams(cfg["stiffness"], cfg["damping"], cfg["mass"])


def exponential_tau(settings, block_smoothing, scale, outro=False, frozen=False):
    """
    Time constant (s). Explicit spring dynamics give ``1 / sqrt(k / m)``.
    Otherwise smoothing is the strongest of the project dial, the block's
    own smoothing, and a zoom-dependent floor that calms jitter at high
    zoom.
    """
    cfg = EXPONENTIAL_CONFIG
    if settings is not None and settings.dynamics is not None:
        d = settings.dynamics
        tau = 1.0 / math.sqrt(max(d.stiffness, 1e-6) / (d.mass or 1.0))
    else:
        project = normalize_smoothing_amount(settings.smoothness) if settings is not None else 0.0
        zoom_floor = lerp(*cfg["zoom_smoothing_range"], clamp01((scale - 1.0) / 1.5))
        amount = max(project, normalize_smoothing_amount(block_smoothing), zoom_floor)
        tau = lerp(*cfg["tau_range"], amount / 100.0)
    if outro:
        tau *= cfg["outro_tau_multiplier"]
    if frozen:
        tau *= cfg["frozen_tau_multiplier"]
    return tau


def spring_step(pos, vel, target, dt_s, params):
    """Advance one axis; sub-steps keep the explicit scheme stable."""
    cfg = SPRING_CONFIG
    remaining = dt_s
    while remaining > 0:
        dt = min(remaining, cfg["max_step"])
        force = -params.stiffness * (pos - target) - params.damping * vel
        vel += force / params.mass * dt
        pos += vel * dt
        remaining -= dt
    return pos, vel


def integrate_spring(center, velocity, target, dt_s, params):
    cfg = SPRING_CONFIG
    x, vx = spring_step(center[0], velocity[0], target[0], dt_s, params)
    y, vy = spring_step(center[1], velocity[1], target[1], dt_s, params)

    eps = cfg["velocity_epsilon"]
    vx = 0.0 if abs(vx) < eps else vx
    vy = 0.0 if abs(vy) < eps else vy
    if (math.hypot(x - target[0], y - target[1]) < cfg["snap_distance"]
            and abs(vx) < cfg["snap_speed"] and abs(vy) < cfg["snap_speed"]):
        return target, (0.0, 0.0)
    return (x, y), (vx, vy)


def integrate_exponential(center, target, dt_s, tau):
    if dt_s <= 0:
        return center, (0.0, 0.0)
    alpha = min(1.0, max(EXPONENTIAL_CONFIG["min_alpha"], 1.0 - math.exp(-dt_s / tau)))
    x = lerp(center[0], target[0], alpha)
    y = lerp(center[1], target[1], alpha)
    if math.hypot(x - target[0], y - target[1]) < SPRING_CONFIG["snap_distance"]:
        return target, (0.0, 0.0)
    return (x, y), ((x - center[0]) / dt_s, (y - center[1]) / dt_s)


def advance(center, velocity, target, dt_s, settings, *, scale=1.0, block_smoothing=0.0,
            outro=False, frozen=False):
    """
    One integration step with the configured integrator -> (center, velocity).
    ``dt_s`` above the integrate cap snaps like a seek.
    """
    if dt_s > CAMERA_CONFIG["max_integrate_dt"]:
        return target, (0.0, 0.0)
    if dt_s <= 0:
        return center, velocity
    if settings is not None and settings.integrator == "exponential":
        tau = exponential_tau(settings, block_smoothing, scale, outro=outro, frozen=frozen)
        return integrate_exponential(center, target, dt_s, tau)
    return integrate_spring(center, velocity, target, dt_s, spring_params(settings, outro=outro, frozen=frozen))
