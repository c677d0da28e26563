"""
Global pose integration for simulated objects.

This package provides:
- A thread-safe kinematic pose integrator (quaternion based, X-Y-Z Euler angles)
- Message envelopes for frames and kinematic states
- Session, scheduling and configuration plumbing for the integration service
"""

__version__ = "1.0.0"
__author__ = "Sim Global Team"

from .integrator import PoseIntegrator, Pose, KinematicState, IntegratorConfig
from .math import quat_from_euler_xyz, euler_xyz_from_quat

__all__ = [
    "PoseIntegrator",
    "Pose",
    "KinematicState",
    "IntegratorConfig",
    "quat_from_euler_xyz",
    "euler_xyz_from_quat"
]
