"""
Quaternion and Euler angle helpers for 3D orientation.

Quaternions are numpy arrays [w, x, y, z] using the Hamilton product.
Euler angles always follow the fixed X -> Y -> Z convention:

    R(roll, pitch, yaw) = Rx(roll) @ Ry(pitch) @ Rz(yaw)

Both the construction (quat_from_euler_xyz) and the decomposition
(euler_xyz_from_rotation_matrix) use this convention so that small
rotations round-trip.
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from .constants import GIMBAL_LOCK_EPSILON, UNIT_X, UNIT_Y, UNIT_Z


def to_float32(value: float) -> float:
    """Narrow a real value to single precision.

    Returns a Python float that is exactly representable as a float32.
    Values too large for float32 become +/-inf, NaN stays NaN.
    """
    with np.errstate(over='ignore', invalid='ignore'):
        return float(np.float32(value))


def quat_from_axis_angle(axis, angle: float) -> np.ndarray:
    """Build a unit quaternion rotating `angle` radians about `axis`.

    Args:
        axis: 3D rotation axis, does not need to be normalized.
        angle: Rotation angle in radians.

    Returns:
        Quaternion [w, x, y, z].
    """
    axis = np.asarray(axis, dtype=np.float64)
    norm = np.linalg.norm(axis)
    if norm < 1e-12:
        return np.array([1.0, 0.0, 0.0, 0.0])
    axis = axis / norm
    half_angle = 0.5 * angle
    s = math.sin(half_angle)
    return np.array([math.cos(half_angle), axis[0] * s, axis[1] * s, axis[2] * s])


def quat_mult(q: np.ndarray, r: np.ndarray) -> np.ndarray:
    """Compute the Hamilton product of two quaternions q and r.

    Args:
        q: First quaternion [qw, qx, qy, qz].
        r: Second quaternion [rw, rx, ry, rz].
    Returns:
        The product quaternion [pw, px, py, pz] = q * r.
    """
    w1, x1, y1, z1 = q
    w2, x2, y2, z2 = r
    return np.array([
        w1*w2 - x1*x2 - y1*y2 - z1*z2,
        w1*x2 + x1*w2 + y1*z2 - z1*y2,
        w1*y2 - x1*z2 + y1*w2 + z1*x2,
        w1*z2 + x1*y2 - y1*x2 + z1*w2
    ])


def quat_normalize(q: np.ndarray) -> np.ndarray:
    """Scale a quaternion to unit length. A zero quaternion becomes identity."""
    q = np.asarray(q, dtype=np.float64)
    n = np.linalg.norm(q)
    if n < 1e-12:
        return np.array([1.0, 0.0, 0.0, 0.0])
    return q / n


def quat_from_euler_xyz(roll: float, pitch: float, yaw: float) -> np.ndarray:
    """Compose roll, pitch and yaw into one quaternion.

    The axis-angle rotations about the fixed X, Y and Z axes are multiplied
    in that order: q = qx(roll) * qy(pitch) * qz(yaw).

    Args:
        roll: Rotation about X in radians.
        pitch: Rotation about Y in radians.
        yaw: Rotation about Z in radians.

    Returns:
        Quaternion [w, x, y, z] in float64.
    """
    q_roll = quat_from_axis_angle(UNIT_X, roll)
    q_pitch = quat_from_axis_angle(UNIT_Y, pitch)
    q_yaw = quat_from_axis_angle(UNIT_Z, yaw)
    return quat_mult(quat_mult(q_roll, q_pitch), q_yaw)


def quat_to_rotation_matrix(q: np.ndarray) -> np.ndarray:
    """Convert a quaternion [w, x, y, z] into a 3x3 rotation matrix."""
    w, x, y, z = quat_normalize(q)
    return np.array([
        [1 - 2*y*y - 2*z*z, 2*x*y - 2*w*z,     2*x*z + 2*w*y],
        [2*x*y + 2*w*z,     1 - 2*x*x - 2*z*z, 2*y*z - 2*w*x],
        [2*x*z - 2*w*y,     2*y*z + 2*w*x,     1 - 2*x*x - 2*y*y]
    ], dtype=np.float64)


def euler_xyz_from_rotation_matrix(R: np.ndarray) -> Tuple[float, float, float]:
    """Decompose a rotation matrix into X-Y-Z Euler angles.

    Inverse of R = Rx(roll) @ Ry(pitch) @ Rz(yaw).

    Args:
        R: 3x3 rotation matrix.

    Returns:
        (roll, pitch, yaw) with roll, yaw in (-pi, pi] and pitch in
        [-pi/2, pi/2]. At gimbal lock yaw is 0 and the free rotation is
        reported as roll.
    """
    R = np.asarray(R, dtype=np.float64)
    sin_pitch = min(1.0, max(-1.0, R[0, 2]))
    pitch = math.asin(sin_pitch)

    if math.sqrt(R[0, 0]**2 + R[0, 1]**2) > GIMBAL_LOCK_EPSILON:
        roll = math.atan2(-R[1, 2], R[2, 2])
        yaw = math.atan2(-R[0, 1], R[0, 0])
    else:
        # Only roll + yaw (pitch = +pi/2) or yaw - roll (pitch = -pi/2) is observable
        sign = 1.0 if sin_pitch > 0 else -1.0
        roll = math.atan2(sign * R[1, 0], R[1, 1])
        yaw = 0.0

    return roll, pitch, yaw


def euler_xyz_from_quat(q: np.ndarray) -> Tuple[float, float, float]:
    """Convert a quaternion to (roll, pitch, yaw) using the X-Y-Z convention."""
    return euler_xyz_from_rotation_matrix(quat_to_rotation_matrix(q))
