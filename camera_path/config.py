"""
Camera configuration
====================
Module-level tuning constants for the camera engine plus the per-project
``CameraSettings`` bag (smoothness dial, spring dynamics, motion blur).
"""

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Optional

logger = logging.getLogger(__name__)


# ─── Camera behaviour ───────────────────────────────────────────────────────

CAMERA_CONFIG = {
    # Dead-zone size as a ratio of the visible window at 1x zoom
    "dead_zone_ratio": 0.4,
    # Timeline jump (ms) treated as a seek instead of playback
    "seek_threshold_ms": 100.0,
    # Samples taken when averaging the cursor over a window
    "cinematic_samples": 8,
    # Frame deltas above this (s) snap instead of integrating
    "max_integrate_dt": 0.5,
    # Length of the intro -> hold blend window
    "intro_hold_blend_ms": 150.0,
    # Lookback used for directional cursor velocity
    "velocity_lookback_ms": 80.0,
    # Window of the exponentially weighted "smooth" cursor
    "smooth_cursor_window_ms": 200.0,
}

DEAD_ZONE_CONFIG = {
    "shrink_start_scale": 1.5,
    "shrink_end_scale": 4.0,
    "min_ratio": 0.1,
    "shrink_factor": 0.7,
    "override_shrink_factor": 0.85,
    # Soft band beyond the dead-zone edge, as a multiple of its half extent
    "transition_band": 1.5,
}

CURSOR_STOP_CONFIG = {
    # Normalized units / second below which the cursor counts as stopped
    "velocity_threshold": 0.002,
    # Unfreeze needs this multiple of the threshold
    "release_multiplier": 1.5,
    "dwell_ms": 80.0,
    # No stop detection below this zoom
    "min_zoom": 1.05,
    # Default jitter floor when a block has no mouseIdlePx
    "idle_px": 2.0,
}

SPRING_CONFIG = {
    "stiffness": 60.0,
    "damping": 15.0,
    "mass": 1.0,
    "outro_stiffness": 30.0,
    "outro_damping": 25.0,
    "frozen_stiffness": 600.0,
    "frozen_damping": 80.0,
    # Smoothness dial 0..100 maps stiffness 300 -> 40, damping 20 -> 35
    "smooth_stiffness_range": (300.0, 40.0),
    "smooth_damping_range": (20.0, 35.0),
    "max_step": 0.016,
    "velocity_epsilon": 1e-4,
    "snap_distance": 1e-4,
    "snap_speed": 1e-3,
}

EXPONENTIAL_CONFIG = {
    "tau_range": (0.08, 0.5),
    "zoom_smoothing_range": (8.0, 22.0),
    "frozen_tau_multiplier": 3.0,
    "outro_tau_multiplier": 2.0,
    "min_alpha": 0.001,
}

ZOOM_TRANSITION_CONFIG = {
    "default_intro_ms": 450.0,
    "default_outro_ms": 800.0,
    "block_epsilon_ms": 40.0,
    "max_refocus_blur": 0.4,
}

INTEGRATORS = ("spring", "exponential")


# ─── Per-project settings ───────────────────────────────────────────────────


@dataclass(frozen=True)
class SpringDynamics:
    stiffness: float
    damping: float
    mass: float = 1.0


@dataclass(frozen=True)
class CameraSettings:
    """Camera options a project can set; everything is optional."""

    smoothness: Optional[float] = None  # 0..100 "cameraman" dial
    dynamics: Optional[SpringDynamics] = None
    integrator: str = "spring"
    motion_blur_enabled: bool = True
    motion_blur_intensity: float = 25.0
    motion_blur_threshold: float = 20.0
    motion_blur_samples: int = field(default_factory=lambda: CAMERA_CONFIG["cinematic_samples"])

    def __post_init__(self):
        if self.integrator not in INTEGRATORS:
            raise ValueError(
                f"Unknown integrator: {self.integrator!r}. Use: {list(INTEGRATORS)}"
            )

    @staticmethod
    def from_dict(d):
        """Build settings from a project-file dict (camelCase keys)."""
        if not d:
            return CameraSettings()
        dyn = d.get("cameraDynamics") or d.get("dynamics")
        dynamics = None
        if dyn:
            dynamics = SpringDynamics(
                stiffness=float(dyn["stiffness"]),
                damping=float(dyn["damping"]),
                mass=float(dyn.get("mass") or 1.0),
            )
        smoothness = d.get("cameraSmoothness", d.get("smoothness"))
        return CameraSettings(
            smoothness=None if smoothness is None else float(smoothness),
            dynamics=dynamics,
            integrator=d.get("integrator", "spring"),
            motion_blur_enabled=bool(d.get("motionBlurEnabled", True)),
            motion_blur_intensity=float(d.get("motionBlurIntensity", 25.0)),
            motion_blur_threshold=float(d.get("motionBlurThreshold", 20.0)),
            motion_blur_samples=int(d.get("motionBlurSamples", CAMERA_CONFIG["cinematic_samples"])),
        )

    @staticmethod
    def from_env(base=None):
        """Apply CAMERA_PATH_* environment overrides on top of ``base``."""
        base = base or CameraSettings()
        smoothness = os.getenv("CAMERA_PATH_SMOOTHNESS")
        integrator = os.getenv("CAMERA_PATH_INTEGRATOR")
        blur = os.getenv("CAMERA_PATH_MOTION_BLUR")
        changes = {}
        if smoothness:
            changes["smoothness"] = float(smoothness)
        if integrator:
            changes["integrator"] = integrator.strip().lower()
        if blur:
            changes["motion_blur_enabled"] = blur.strip().lower() not in ("0", "false", "off", "no")
        if changes:
            logger.debug("Camera settings overridden from environment: %s", changes)
        return replace(base, **changes)


def setup_logging(level=logging.INFO):
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
