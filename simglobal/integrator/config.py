"""
Immutable configuration for the pose integrator.
"""

import math
from dataclasses import dataclass

from .state import Pose


@dataclass(frozen=True)
class IntegratorConfig:
    """
    Startup parameters of a single integrated object.

    Attributes:
        x, y, z: Initial position in meters.
        roll, pitch, yaw: Initial orientation in radians.
        frequency: Integration frequency in Hz.
        frame_id: Sender identifier of the integrated frame.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    roll: float = 0.0
    pitch: float = 0.0
    yaw: float = 0.0

    frequency: float = 100.0
    frame_id: int = 0

    def __post_init__(self):
        if not math.isfinite(self.frequency) or self.frequency <= 0:
            raise ValueError(f"Integration frequency must be positive, got {self.frequency}")
        if self.frame_id < 0:
            raise ValueError(f"Frame id must be non-negative, got {self.frame_id}")

    @property
    def dt(self) -> float:
        """Fixed step length in seconds."""
        return 1.0 / self.frequency

    @property
    def initial_pose(self) -> Pose:
        return Pose(
            x=self.x,
            y=self.y,
            z=self.z,
            roll=self.roll,
            pitch=self.pitch,
            yaw=self.yaw
        )
