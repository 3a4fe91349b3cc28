"""
Easing curves shared by the zoom scale ramp, the intro pan and the
intro -> hold blend. Every curve takes a scalar or an array of normalized
progress and returns the same shape; scalars come back as Python floats
so per-frame code stays in plain float arithmetic.
"""

import numpy as np


def lerp(a, b, t):
    return a + (b - a) * t


def clamp(v, lo, hi):
    return max(lo, min(hi, v))


def clamp01(v):
    return max(0.0, min(1.0, v))


def _out(x):
    x = np.asarray(x, dtype=np.float64)
    return float(x) if x.ndim == 0 else x


def _p(t):
    return np.clip(np.asarray(t, dtype=np.float64), 0.0, 1.0)


# ─── Basic curves ───────────────────────────────────────────────────────────


def linear(t):
    return _out(_p(t))


def smoothstep(t):
    x = _p(t)
    return _out(x * x * (3.0 - 2.0 * x))


def smootherstep(t):
    """6x^5 - 15x^4 + 10x^3: zero velocity and acceleration at both ends."""
    x = _p(t)
    return _out(x * x * x * (x * (x * 6.0 - 15.0) + 10.0))


def ease_in_out_cubic(t):
    x = _p(t)
    return _out(np.where(x < 0.5, 4.0 * x**3, 1.0 - (-2.0 * x + 2.0) ** 3 / 2.0))


def ease_in_out_sine(t):
    return _out(0.5 - 0.5 * np.cos(np.pi * _p(t)))


def ease_in_out_expo(t):
    x = _p(t)
    # Both branches are evaluated by np.where; keep exponents bounded
    lo = np.power(2.0, np.minimum(20.0 * x - 10.0, 0.0)) / 2.0
    hi = (2.0 - np.power(2.0, np.minimum(-20.0 * x + 10.0, 0.0))) / 2.0
    out = np.where(x < 0.5, lo, hi)
    out = np.where(x <= 0.0, 0.0, np.where(x >= 1.0, 1.0, out))
    return _out(out)


def ease_in_out_sigmoid(t, k=10.0):
    """Logistic curve rescaled so it hits exactly 0 and 1 at the ends."""
    x = _p(t)

    def s(v):
        return 1.0 / (1.0 + np.exp(-k * (v - 0.5)))

    s0, s1 = s(0.0), s(1.0)
    return _out((s(x) - s0) / (s1 - s0))


def ease_out_expo(t):
    x = _p(t)
    return _out(np.where(x >= 1.0, 1.0, 1.0 - np.power(2.0, -10.0 * x)))


# ─── Transition style registry ──────────────────────────────────────────────

EASE_FUNCTIONS = {
    "linear": linear,
    "cubic": ease_in_out_cubic,
    "sine": ease_in_out_sine,
    "expo": ease_in_out_expo,
    "sigmoid": ease_in_out_sigmoid,
    "smoother": smootherstep,
    "settle": smootherstep,
}

LEGACY_STYLES = {
    "cinematic": "cubic",
    "smooth": "sine",
    "spring": "expo",
}

DEFAULT_STYLE = "smoother"


def ease_zoom_progress(style, progress):
    """Ease ``progress`` with a transition style, falling back to smoother."""
    key = getattr(style, "value", style) or DEFAULT_STYLE
    key = LEGACY_STYLES.get(key, key)
    return EASE_FUNCTIONS.get(key, smootherstep)(progress)
