"""
Mathematical utilities for pose integration.
"""

from .rotations import (
    to_float32,
    quat_from_axis_angle,
    quat_mult,
    quat_normalize,
    quat_from_euler_xyz,
    quat_to_rotation_matrix,
    euler_xyz_from_rotation_matrix,
    euler_xyz_from_quat,
)
from .constants import *

__all__ = [
    "to_float32",
    "quat_from_axis_angle",
    "quat_mult",
    "quat_normalize",
    "quat_from_euler_xyz",
    "quat_to_rotation_matrix",
    "euler_xyz_from_rotation_matrix",
    "euler_xyz_from_quat",
]
