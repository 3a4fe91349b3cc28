"""
Bounds clamping and cursor visibility
=====================================
``clamp_center_to_content_bounds`` is the single clamping step applied to
the camera center each frame. ``project_center_to_keep_cursor_visible``
then pushes the center so the whole cursor glyph stays on screen; it runs
after clamping and wins over it.

Infeasible ranges (min > max) are resolved locally, never raised.
"""

from dataclasses import dataclass

from .cursor_glyphs import CursorMargins
from .dead_zone import NO_OVERSCAN


@dataclass(frozen=True)
class ContentBounds:
    """Normalized rectangle the visible window must stay inside (a crop)."""

    min_x: float = 0.0
    max_x: float = 1.0
    min_y: float = 0.0
    max_y: float = 1.0

    @staticmethod
    def from_crop(crop):
        return ContentBounds(
            min_x=crop["x"], max_x=crop["x"] + crop["width"],
            min_y=crop["y"], max_y=crop["y"] + crop["height"],
        )


FULL_FRAME = ContentBounds()


def _clamp_range(c, lo, hi):
    if lo > hi:
        return (lo + hi) / 2.0
    return max(lo, min(hi, c))


def clamp_center_to_content_bounds(center, half_window_x, half_window_y, overscan=NO_OVERSCAN,
                                   allow_full_range=False, ignore_overscan=False,
                                   content_bounds=None):
    """
    Clamp a camera center.

    ``allow_full_range`` means the inputs are already in output space
    (content + padding normalized to 0..1): then ``ignore_overscan`` keeps
    the window inside the output, otherwise the center may reach the output
    edges. In video space the window stays inside the content, or may
    extend into the overscan by its ratio on each side.
    """
    b = content_bounds or FULL_FRAME
    cx, cy = center

    if allow_full_range:
        if ignore_overscan:
            return (_clamp_range(cx, b.min_x + half_window_x, b.max_x - half_window_x),
                    _clamp_range(cy, b.min_y + half_window_y, b.max_y - half_window_y))
        return _clamp_range(cx, b.min_x, b.max_x), _clamp_range(cy, b.min_y, b.max_y)

    left = 0.0 if ignore_overscan else overscan.left
    right = 0.0 if ignore_overscan else overscan.right
    top = 0.0 if ignore_overscan else overscan.top
    bottom = 0.0 if ignore_overscan else overscan.bottom
    return (_clamp_range(cx, b.min_x + half_window_x - left, b.max_x - half_window_x + right),
            _clamp_range(cy, b.min_y + half_window_y - top, b.max_y - half_window_y + bottom))


def project_center_to_keep_cursor_visible(center, cursor, half_window_x, half_window_y,
                                          overscan=NO_OVERSCAN, margins=None,
                                          allow_full_range=False):
    """
    Move the center the least amount so ``[cursor - margin, cursor + margin]``
    fits in ``[center - hw, center + hw]`` on both axes. When that conflicts
    with the allowed range (cursor at the frame edge, extreme zoom) the
    center stops at the nearest allowed position; a glyph wider than the
    window is centered on.
    """
    m = margins or CursorMargins()

    def axis(c, p, hw, margin_min, margin_max, over_min, over_max):
        p = max(0.0, min(1.0, p))
        lo = p + margin_max - hw
        hi = p - margin_min + hw
        if lo > hi:
            lo = hi = (lo + hi) / 2.0
        allowed_lo = hw if allow_full_range else hw - over_min
        allowed_hi = 1.0 - hw if allow_full_range else 1.0 - hw + over_max
        return max(allowed_lo, min(allowed_hi, max(lo, min(hi, c))))

    return (axis(center[0], cursor[0], half_window_x, m.left, m.right, overscan.left, overscan.right),
            axis(center[1], cursor[1], half_window_y, m.top, m.bottom, overscan.top, overscan.bottom))


def cursor_fully_visible(center, cursor, half_window_x, half_window_y, margins=None, tol=1e-9):
    m = margins or CursorMargins()
    cx, cy = center
    px, py = max(0.0, min(1.0, cursor[0])), max(0.0, min(1.0, cursor[1]))
    return (px - m.left >= cx - half_window_x - tol and px + m.right <= cx + half_window_x + tol
            and py - m.top >= cy - half_window_y - tol and py + m.bottom <= cy + half_window_y + tol)
