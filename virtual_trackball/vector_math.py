"""Lightweight vector and quaternion helpers for trackball rotations.

Quaternions are numpy arrays stored scalar-last, ``(x, y, z, w)``, matching
``pyrr.quaternion``, so the identity rotation is ``(0, 0, 0, 1)``.
"""
from __future__ import annotations

from typing import Iterable

import numpy as np
from pyrr import quaternion

Vector = np.ndarray
Quaternion = np.ndarray

DOUBLE_EPS = 1.0e-14
DOUBLE_EPS_SQ = 1.0e-28

IDENTITY_QUAT = np.array([0.0, 0.0, 0.0, 1.0], dtype=np.float64)


def to_vector(value: Iterable[float] | Vector) -> Vector:
    """Convert any iterable to a float64 numpy vector."""
    return np.asarray(list(value), dtype=np.float64)


def to_quaternion(value: Iterable[float] | Quaternion) -> Quaternion:
    quat = to_vector(value)
    if quat.shape != (4,):
        raise ValueError(f"Quaternion must have 4 components, got shape {quat.shape}")
    return quat


def magnitude(vec: Vector) -> float:
    return float(np.linalg.norm(vec))


def dot(a: Vector, b: Vector) -> float:
    return float(np.dot(a, b))


def cross(a: Vector, b: Vector) -> Vector:
    return np.cross(a, b)


def quat_norm(quat: Quaternion) -> float:
    return magnitude(quat)


def axis_angle_to_quat(axis: Vector, angle: float) -> Quaternion:
    """Right-handed rotation of ``angle`` radians about ``axis``.

    The axis need not be unit length. An axis whose squared length is at or
    below ``DOUBLE_EPS`` yields the identity.
    """
    axis = to_vector(axis)
    if dot(axis, axis) <= DOUBLE_EPS:
        return IDENTITY_QUAT.copy()
    # pyrr normalises the axis itself
    return quaternion.create_from_axis_rotation(axis, angle, dtype=np.float64)


def quat_mult(p: Quaternion, q: Quaternion) -> Quaternion:
    """Hamilton product ``p * q``: rotating by the result applies ``q`` then ``p``."""
    return quaternion.cross(to_quaternion(p), to_quaternion(q))


def rotate_vector(quat: Quaternion, vec: Vector) -> Vector:
    """Rotate vec by the unit quaternion quat."""
    pure = np.array([vec[0], vec[1], vec[2], 0.0], dtype=np.float64)
    return quat_mult(quat_mult(quat, pure), quaternion.conjugate(quat))[:3]
