"""
Kinematic pose integration for a simulated rigid body.
"""

from .integrator import PoseIntegrator
from .state import Pose, KinematicState
from .config import IntegratorConfig

__all__ = ["PoseIntegrator", "Pose", "KinematicState", "IntegratorConfig"]
