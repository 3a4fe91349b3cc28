"""
Output layout
=============
Where the recording is drawn on the canvas (inside background padding or
a device mockup's screen) and how far the camera's output extends past
it on each side. Pixel positions follow the compositor's rounding so the
overscan the camera sees matches what is drawn.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .dead_zone import NO_OVERSCAN, OutputOverscan


def _round(v):
    # Half up, the compositor's rounding
    return math.floor(v + 0.5)


@dataclass(frozen=True)
class VideoPosition:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class MockupPosition:
    mockup_x: int
    mockup_y: int
    mockup_width: int
    mockup_height: int
    screen_x: int
    screen_y: int
    screen_width: int
    screen_height: int
    video_x: int
    video_y: int
    video_width: int
    video_height: int
    mockup_scale: float


@dataclass(frozen=True)
class CameraOutput:
    output_width: float
    output_height: float
    draw_width: float
    draw_height: float
    overscan: OutputOverscan = NO_OVERSCAN
    mockup_screen: Optional[Tuple[float, float, float, float]] = None
    force_follow_cursor: bool = False


def calculate_video_position(canvas_width, canvas_height, video_width, video_height, padding=0.0):
    """Fit the video inside ``canvas - 2 * padding``, centered."""
    avail_w = canvas_width - padding * 2
    avail_h = canvas_height - padding * 2
    video_aspect = video_width / video_height
    if video_aspect > avail_w / avail_h:
        draw_w, draw_h = avail_w, avail_w / video_aspect
    else:
        draw_w, draw_h = avail_h * video_aspect, avail_h
    return VideoPosition((canvas_width - draw_w) / 2, (canvas_height - draw_h) / 2, draw_w, draw_h)


def _cover(screen_w, screen_h, video_w, video_h):
    # Fill the screen region, cropping the overflow
    video_aspect = video_w / video_h
    if video_aspect > screen_w / screen_h:
        w, h = screen_h * video_aspect, screen_h
    else:
        w, h = screen_w, screen_w / video_aspect
    return (screen_w - w) / 2, (screen_h - h) / 2, w, h


def calculate_mockup_position(canvas_width, canvas_height, mockup, video_width, video_height, padding=0.0):
    """
    Place a device frame (``frameWidth``/``frameHeight`` with a
    ``screenRegion`` in frame pixels) in the padded canvas; the video covers
    the screen region. None when the mockup has no usable geometry.
    """
    frame_w, frame_h = mockup.get("frameWidth"), mockup.get("frameHeight")
    region = mockup.get("screenRegion")
    if not frame_w or not frame_h or not region:
        return None

    avail_w = canvas_width - padding * 2
    avail_h = canvas_height - padding * 2
    if frame_w / frame_h > avail_w / avail_h:
        s = avail_w / frame_w
    else:
        s = avail_h / frame_h

    mockup_w, mockup_h = _round(frame_w * s), _round(frame_h * s)
    mockup_x = _round((canvas_width - frame_w * s) / 2)
    mockup_y = _round((canvas_height - frame_h * s) / 2)

    left = mockup_x + _round(region["x"] * s)
    top = mockup_y + _round(region["y"] * s)
    right = mockup_x + _round((region["x"] + region["width"]) * s)
    bottom = mockup_y + _round((region["y"] + region["height"]) * s)
    screen_w, screen_h = max(0, right - left), max(0, bottom - top)
    if screen_w == 0 or screen_h == 0:
        return None

    vx, vy, vw, vh = _cover(screen_w, screen_h, video_width, video_height)
    return MockupPosition(
        mockup_x, mockup_y, mockup_w, mockup_h,
        left, top, screen_w, screen_h,
        left + _round(vx), top + _round(vy), _round(vw), _round(vh),
        s,
    )


def camera_output_params(canvas_width, canvas_height, video, mockup=None):
    """
    -> (output_width, output_height, overscan). The output is the canvas,
    or the mockup screen; overscan is the gap between it and the drawn
    video as a ratio of the video's size.
    """
    if mockup is not None:
        out_w, out_h = mockup.screen_width, mockup.screen_height
        off_x, off_y = mockup.screen_x, mockup.screen_y
    else:
        out_w, out_h = canvas_width, canvas_height
        off_x = off_y = 0

    if out_w <= 0 or out_h <= 0 or video.width <= 0 or video.height <= 0:
        return out_w, out_h, NO_OVERSCAN

    rel_x, rel_y = video.x - off_x, video.y - off_y
    return out_w, out_h, OutputOverscan(
        left=max(0.0, rel_x / video.width),
        right=max(0.0, (out_w - rel_x - video.width) / video.width),
        top=max(0.0, rel_y / video.height),
        bottom=max(0.0, (out_h - rel_y - video.height) / video.height),
    )


def camera_output_context(canvas_width, canvas_height, source_width, source_height, background=None):
    """Everything the camera needs to know about where its output lands."""
    background = background or {}
    padding = background.get("padding") or 0
    mockup_data = background.get("mockup") or {}

    mockup = None
    if mockup_data.get("enabled"):
        mockup = calculate_mockup_position(canvas_width, canvas_height, mockup_data,
                                           source_width, source_height, padding)
    if mockup is not None:
        video = VideoPosition(mockup.video_x, mockup.video_y, mockup.video_width, mockup.video_height)
    else:
        video = calculate_video_position(canvas_width, canvas_height, source_width, source_height, padding)

    out_w, out_h, overscan = camera_output_params(canvas_width, canvas_height, video, mockup)
    if mockup is None:
        return CameraOutput(out_w, out_h, video.width, video.height, overscan)
    return CameraOutput(out_w, out_h, video.width, video.height, overscan,
                        mockup_screen=(0, 0, out_w, out_h), force_follow_cursor=True)
