"""Map a mouse drag over a viewport to a rotation quaternion."""
from __future__ import annotations

import contextlib
import logging
import math
from dataclasses import dataclass
from typing import Iterable, MutableSequence, Optional

import numpy as np

from .errors import DegenerateViewportError, InvalidSpeedFactorError
from .vector_math import (
    DOUBLE_EPS,
    DOUBLE_EPS_SQ,
    Quaternion,
    Vector,
    axis_angle_to_quat,
    cross,
    dot,
    magnitude,
    quat_mult,
    quat_norm,
    to_quaternion,
)

logger = logging.getLogger(__name__)

# Pixels trimmed from the shorter viewport side before scaling.
VIEWPORT_MARGIN = 4


@dataclass(slots=True)
class TrackballConfig:
    speed_factor: float = 1.0
    check_viewport: bool = True
    # extra spin per unit of drag past the unit circle, single precision 0.2
    amplification: float = float(np.float32(0.2))
    vector_eps: float = DOUBLE_EPS
    quat_eps_sq: float = DOUBLE_EPS_SQ


@dataclass(frozen=True, slots=True)
class DragRotation:
    axis: Vector
    angle: float


def _check_speed_factor(speed_factor: float) -> None:
    if not speed_factor > 0:
        raise InvalidSpeedFactorError(f"Speed factor must be positive, got {speed_factor!r}")


def viewport_scale(width: int, height: int, check: bool = True) -> float:
    """Denominator shared by both axes so the mapping keeps a 1:1 aspect."""
    scale = min(abs(width), abs(height)) - VIEWPORT_MARGIN
    if scale <= 0:
        if check:
            raise DegenerateViewportError(
                f"Viewport {width}x{height} is too small for a trackball"
            )
        logger.debug("Unchecked degenerate viewport %dx%d (scale %d)", width, height, scale)
    return scale


def _dilate(value: int, dimension: int, speed_factor: float) -> int:
    # C-style integer division and truncation on both steps.
    center = int(dimension / 2)
    return int(speed_factor * (value - center) + center)


def normalize_mouse(
    x: int,
    y: int,
    width: int,
    height: int,
    speed_factor: float = 1.0,
    check_viewport: bool = True,
) -> tuple[float, float]:
    """Pixel position to centered trackball coordinates, y pointing up.

    Points inside the viewport land roughly in [-1, 1]; ``speed_factor``
    dilates both axes about the viewport center before scaling.
    """
    _check_speed_factor(speed_factor)
    scale = np.float64(viewport_scale(width, height, check_viewport))
    px = _dilate(x, width, speed_factor)
    py = _dilate(y, height, speed_factor)
    with np.errstate(divide="ignore", invalid="ignore"):
        nx = np.float64(2 * px - width - 1) / scale
        ny = np.float64(-2 * py + height - 1) / scale
    return float(nx), float(ny)


def solve_drag(
    start: tuple[float, float],
    current: tuple[float, float],
    config: TrackballConfig = TrackballConfig(),
) -> Optional[DragRotation]:
    """Rotation carrying ``start`` onto ``current`` on the z = 1 cap.

    Returns None when either lifted point is too short (or NaN) to normalize.
    """
    x0, y0 = start
    x1, y1 = current
    n0 = math.sqrt(x0 * x0 + y0 * y0 + 1.0)
    n1 = math.sqrt(x1 * x1 + y1 * y1 + 1.0)
    if not (n0 > config.vector_eps and n1 > config.vector_eps):
        return None

    v0 = np.array([x0, y0, 1.0], dtype=np.float64) / n0
    v1 = np.array([x1, y1, 1.0], dtype=np.float64) / n1
    axis = cross(v0, v1)
    angle = math.atan2(magnitude(axis), dot(v0, v1))

    planar_sq = x1 * x1 + y1 * y1
    if planar_sq > 1.0:
        angle *= 1.0 + config.amplification * (math.sqrt(planar_sq) - 1.0)
    return DragRotation(axis=axis, angle=angle)


def compose_rotation(
    rotation: DragRotation,
    down_quat: Iterable[float] | Quaternion,
    config: TrackballConfig = TrackballConfig(),
) -> Quaternion:
    """Apply the drag on top of ``down_quat`` (``qrot * down_quat``).

    A base rotation with norm at or below ``config.quat_eps_sq`` is ignored
    and the drag rotation is returned on its own.
    """
    qrot = axis_angle_to_quat(rotation.axis, rotation.angle)
    base = to_quaternion(down_quat)
    norm = quat_norm(base)
    if abs(norm) > config.quat_eps_sq:
        return quat_mult(qrot, base / norm)
    logger.debug("Base rotation has norm %g, starting from the drag rotation", norm)
    return qrot


def drag_rotation(
    width: int,
    height: int,
    speed_factor: Optional[float],
    down_quat: Iterable[float] | Quaternion,
    down_x: int,
    down_y: int,
    mouse_x: int,
    mouse_y: int,
    config: TrackballConfig = TrackballConfig(),
) -> Optional[Quaternion]:
    """Rotation after dragging from (down_x, down_y) to (mouse_x, mouse_y).

    ``down_quat`` is the rotation when the button went down. Returns a new
    float64 quaternion, or None when the drag geometry is degenerate.
    Passing ``speed_factor=None`` uses ``config.speed_factor``.
    """
    if speed_factor is None:
        speed_factor = config.speed_factor
    _check_speed_factor(speed_factor)
    base = to_quaternion(down_quat)

    # Unchecked viewports are allowed to run into inf/NaN.
    quiet = contextlib.nullcontext() if config.check_viewport else np.errstate(all="ignore")
    with quiet:
        start = normalize_mouse(down_x, down_y, width, height, speed_factor, config.check_viewport)
        current = normalize_mouse(mouse_x, mouse_y, width, height, speed_factor, config.check_viewport)
        rotation = solve_drag(start, current, config)
        if rotation is None:
            logger.debug("Degenerate drag %s -> %s, rotation left unchanged", start, current)
            return None
        return compose_rotation(rotation, base, config)


def trackball(
    width: int,
    height: int,
    speed_factor: float,
    down_quat: Iterable[float] | Quaternion,
    down_x: int,
    down_y: int,
    mouse_x: int,
    mouse_y: int,
    out: MutableSequence[float] | Quaternion,
    config: TrackballConfig = TrackballConfig(),
) -> bool:
    """In-place form of :func:`drag_rotation`.

    Writes the result into ``out`` and returns True. On degenerate geometry
    ``out`` is left exactly as it was and False is returned. A float32
    ``out`` receives the float64 result narrowed on this final write.
    """
    if len(out) != 4:
        raise ValueError(f"Output quaternion must have 4 components, got {len(out)}")
    quat = drag_rotation(
        width, height, speed_factor, down_quat, down_x, down_y, mouse_x, mouse_y, config
    )
    if quat is None:
        return False
    if isinstance(out, np.ndarray):
        out[...] = quat
    else:
        out[:] = quat.tolist()
    return True
