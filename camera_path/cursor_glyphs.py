"""
Cursor glyph geometry: base size and hotspot of every rendered cursor,
and the hotspot-relative margins the visibility projector needs.
"""

from dataclasses import dataclass

# Electron / CSS cursor names -> glyph names
ELECTRON_TO_GLYPH = {
    "default": "arrow",
    "pointer": "pointingHand",
    "text": "iBeam",
    "vertical-text": "iBeamCursorForVerticalLayout",
    "crosshair": "crosshair",
    "move": "openHand",
    "grabbing": "closedHand",
    "grab": "openHand",
    "not-allowed": "operationNotAllowed",
    "context-menu": "contextualMenu",
    "copy": "dragCopy",
    "alias": "dragLink",
    "e-resize": "resizeRight",
    "w-resize": "resizeLeft",
    "n-resize": "resizeUp",
    "s-resize": "resizeDown",
    "ew-resize": "resizeLeftRight",
    "ns-resize": "resizeUpDown",
    "ne-resize": "resizeRight",
    "nw-resize": "resizeLeft",
    "se-resize": "resizeRight",
    "sw-resize": "resizeLeft",
    "nesw-resize": "resizeLeftRight",
    "nwse-resize": "resizeLeftRight",
    "col-resize": "resizeLeftRight",
    "row-resize": "resizeUpDown",
    "all-scroll": "openHand",
    "zoom-in": "crosshair",
    "zoom-out": "crosshair",
}

# (width, height) in px at size 1.0
GLYPH_DIMENSIONS = {
    "arrow": (24, 32),
    "iBeam": (16, 32),
    "pointingHand": (28, 28),
    "closedHand": (28, 28),
    "openHand": (32, 32),
    "crosshair": (24, 24),
    "resizeLeft": (24, 24),
    "resizeRight": (24, 24),
    "resizeUp": (24, 24),
    "resizeDown": (24, 24),
    "resizeLeftRight": (32, 24),
    "resizeUpDown": (24, 32),
    "contextualMenu": (24, 32),
    "disappearingItem": (24, 32),
    "dragCopy": (24, 32),
    "dragLink": (24, 32),
    "operationNotAllowed": (28, 28),
    "iBeamCursorForVerticalLayout": (32, 16),
}

# Hotspot as (x, y) ratios of the glyph size
GLYPH_HOTSPOTS = {
    "arrow": (0.15, 0.12),
    "iBeam": (0.5, 0.5),
    "pointingHand": (0.64, 0.18),
    "closedHand": (0.5, 0.34),
    "openHand": (0.5, 0.34),
    "contextualMenu": (0.25, 0.175),
    "dragCopy": (0.25, 0.175),
    "dragLink": (0.25, 0.19),
}

# The tahoe themes ship 32x32 glyphs for a subset of cursors
TAHOE_THEMES = ("tahoe", "tahoe-no-tail")
TAHOE_HOTSPOTS = {
    "arrow": (2 / 128, 3 / 128),
    "iBeam": (65 / 128, 62 / 128),
    "pointingHand": (22 / 128, 3 / 128),
    "openHand": (38 / 128, 38 / 128),
    "crosshair": (65 / 128, 65 / 128),
    "resizeLeftRight": (30 / 128, 47 / 128),
    "resizeUpDown": (47 / 128, 33 / 128),
    "operationNotAllowed": (2 / 128, 2 / 128),
}


@dataclass(frozen=True)
class CursorMargins:
    """Glyph extent around the hotspot, in normalized source units."""

    left: float = 0.0
    right: float = 0.0
    top: float = 0.0
    bottom: float = 0.0

    def scaled(self, sx, sy):
        return CursorMargins(self.left / sx, self.right / sx, self.top / sy, self.bottom / sy)


def glyph_for(cursor_type):
    if cursor_type in GLYPH_DIMENSIONS:
        return cursor_type
    return ELECTRON_TO_GLYPH.get(cursor_type, "arrow")


def glyph_geometry(glyph, theme=None):
    """-> ((width, height), (hotspot_x, hotspot_y)) for a glyph and theme."""
    if theme in TAHOE_THEMES and glyph in TAHOE_HOTSPOTS:
        return (32, 32), TAHOE_HOTSPOTS[glyph]
    return GLYPH_DIMENSIONS[glyph], GLYPH_HOTSPOTS.get(glyph, (0.5, 0.5))


def cursor_margins(cursor_type, size, draw_width, draw_height, half_window_x, half_window_y, theme=None):
    """
    Hotspot-relative glyph margins converted from output pixels into the
    normalized units of the visible window (the glyph is drawn at a fixed
    pixel size on screen, so it covers more source area when zoomed out).
    """
    (w, h), (hx, hy) = glyph_geometry(glyph_for(cursor_type), theme)
    width_px, height_px = w * size, h * size
    window_w, window_h = half_window_x * 2.0, half_window_y * 2.0
    return CursorMargins(
        left=hx * width_px / draw_width * window_w,
        right=(1.0 - hx) * width_px / draw_width * window_w,
        top=hy * height_px / draw_height * window_h,
        bottom=(1.0 - hy) * height_px / draw_height * window_h,
    )
