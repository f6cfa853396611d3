"""Virtual trackball: turn a 2D mouse drag into a 3D rotation quaternion."""

from .errors import DegenerateViewportError, InvalidSpeedFactorError, TrackballError
from .trackball import (
    DragRotation,
    TrackballConfig,
    compose_rotation,
    drag_rotation,
    normalize_mouse,
    solve_drag,
    trackball,
)

__all__ = [
    "DegenerateViewportError",
    "DragRotation",
    "InvalidSpeedFactorError",
    "TrackballConfig",
    "TrackballError",
    "compose_rotation",
    "drag_rotation",
    "normalize_mouse",
    "solve_drag",
    "trackball",
]
