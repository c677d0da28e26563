"""
Pose and kinematic state value types.
"""

import numpy as np
from dataclasses import dataclass, fields
from typing import Any, Dict

from ..math import to_float32


def _narrow_fields(instance) -> None:
    # Frozen dataclasses need object.__setattr__ to normalise in place
    for f in fields(instance):
        object.__setattr__(instance, f.name, to_float32(getattr(instance, f.name)))


def _wire_float(data: Dict[str, Any], key: str) -> float:
    """Read an optional numeric wire field, defaulting to zero."""
    try:
        return float(data.get(key, 0.0))
    except (TypeError, ValueError, OverflowError) as e:
        raise ValueError(f"Field {key!r} is not a number: {e}") from e


@dataclass(frozen=True)
class Pose:
    """
    6-DOF pose of the simulated object in the global frame.

    - x, y, z: Position in meters
    - roll, pitch, yaw: Orientation in radians, composed X -> Y -> Z

    All fields are stored in single precision.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    roll: float = 0.0
    pitch: float = 0.0
    yaw: float = 0.0

    def __post_init__(self):
        _narrow_fields(self)

    @property
    def position(self) -> np.ndarray:
        """Get position as [x, y, z] vector."""
        return np.array([self.x, self.y, self.z])

    @property
    def orientation(self) -> np.ndarray:
        """Get orientation as [roll, pitch, yaw] vector."""
        return np.array([self.roll, self.pitch, self.yaw])

    def to_dict(self) -> Dict[str, float]:
        return {
            'x': self.x,
            'y': self.y,
            'z': self.z,
            'roll': self.roll,
            'pitch': self.pitch,
            'yaw': self.yaw
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Pose':
        """Create a pose from wire fields. Missing fields default to zero."""
        return cls(
            x=_wire_float(data, 'x'),
            y=_wire_float(data, 'y'),
            z=_wire_float(data, 'z'),
            roll=_wire_float(data, 'roll'),
            pitch=_wire_float(data, 'pitch'),
            yaw=_wire_float(data, 'yaw')
        )

    def __str__(self) -> str:
        return (
            f"Pose(pos=[{self.x:.3f}, {self.y:.3f}, {self.z:.3f}], "
            f"rot=[{self.roll:.3f}, {self.pitch:.3f}, {self.yaw:.3f}])"
        )


@dataclass(frozen=True)
class KinematicState:
    """
    Most recently known instantaneous motion of the simulated object.

    - vx, vy, vz: Linear velocity in m/s
    - roll_rate, pitch_rate, yaw_rate: Angular rates in rad/s
    """

    vx: float = 0.0
    vy: float = 0.0
    vz: float = 0.0

    roll_rate: float = 0.0
    pitch_rate: float = 0.0
    yaw_rate: float = 0.0

    def __post_init__(self):
        _narrow_fields(self)

    @property
    def velocity(self) -> np.ndarray:
        """Get linear velocity as [vx, vy, vz] vector."""
        return np.array([self.vx, self.vy, self.vz])

    @property
    def angular_rate(self) -> np.ndarray:
        """Get angular rates as [roll_rate, pitch_rate, yaw_rate] vector."""
        return np.array([self.roll_rate, self.pitch_rate, self.yaw_rate])

    def to_dict(self) -> Dict[str, float]:
        return {
            'vx': self.vx,
            'vy': self.vy,
            'vz': self.vz,
            'rollRate': self.roll_rate,
            'pitchRate': self.pitch_rate,
            'yawRate': self.yaw_rate
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'KinematicState':
        """Create a kinematic state from wire fields. Missing fields default to zero."""
        return cls(
            vx=_wire_float(data, 'vx'),
            vy=_wire_float(data, 'vy'),
            vz=_wire_float(data, 'vz'),
            roll_rate=_wire_float(data, 'rollRate'),
            pitch_rate=_wire_float(data, 'pitchRate'),
            yaw_rate=_wire_float(data, 'yawRate')
        )

    def __str__(self) -> str:
        return (
            f"KinematicState(vel=[{self.vx:.3f}, {self.vy:.3f}, {self.vz:.3f}], "
            f"rates=[{self.roll_rate:.3f}, {self.pitch_rate:.3f}, {self.yaw_rate:.3f}])"
        )
