class CameraPathError(Exception):
    """Base class for camera engine errors."""


class ZoomBlockValidationError(CameraPathError, ValueError):
    """A zoom effect carries data the camera cannot trust."""

    def __init__(self, effect_id, field, message):
        self.effect_id = effect_id
        self.field = field
        super().__init__(f"Zoom effect {effect_id!r}: {field}: {message}")


class PathCalculationCancelled(CameraPathError):
    """Raised when a camera path pass is abandoned mid-computation."""

    def __init__(self, frame, total_frames):
        self.frame = frame
        self.total_frames = total_frames
        super().__init__(f"Camera path cancelled at frame {frame}/{total_frames}")
