"""Camera path synthesis: per-frame pan/zoom from zoom blocks and a mouse log."""

from .config import CameraSettings, SpringDynamics
from .cursor_trajectory import CursorTrajectory, MouseEvent
from .dead_zone import OutputOverscan
from .errors import CameraPathError, PathCalculationCancelled, ZoomBlockValidationError
from .orchestrator import CameraResult, FrameContext, compute_camera_state
from .path_calculator import (
    DEFAULT_FRAME,
    CameraPathFrame,
    ClipLayout,
    PreviewCamera,
    Recording,
    calculate_camera_path,
)
from .physics import INITIAL_STATE, CameraPhysicsState
from .visibility import ContentBounds
from .zoom_blocks import ZoomBlock, ZoomBlockCache, get_zoom_block_at, parse_zoom_blocks
from .zoom_transform import ZoomTransform, calculate_zoom_transform, zoom_transform_string

__all__ = [
    "CameraSettings",
    "SpringDynamics",
    "CursorTrajectory",
    "MouseEvent",
    "OutputOverscan",
    "CameraPathError",
    "PathCalculationCancelled",
    "ZoomBlockValidationError",
    "CameraResult",
    "FrameContext",
    "compute_camera_state",
    "DEFAULT_FRAME",
    "CameraPathFrame",
    "ClipLayout",
    "PreviewCamera",
    "Recording",
    "calculate_camera_path",
    "INITIAL_STATE",
    "CameraPhysicsState",
    "ContentBounds",
    "ZoomBlock",
    "ZoomBlockCache",
    "get_zoom_block_at",
    "parse_zoom_blocks",
    "ZoomTransform",
    "calculate_zoom_transform",
    "zoom_transform_string",
]
