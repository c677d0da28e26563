"""
Kinematic pose integrator for a single simulated object.
"""

import threading
from typing import Any, Dict, Optional

from ..math import euler_xyz_from_quat, quat_from_euler_xyz, quat_mult
from .config import IntegratorConfig
from .state import KinematicState, Pose


class PoseIntegrator:
    """
    Integrates the global pose of one rigid body from its kinematic state.

    The kinematic state is written asynchronously (e.g. from a message
    receiver thread) through update_kinematic_state(), while a single
    periodic caller advances the pose with step(). Only the kinematic state
    is shared between the two, and it is guarded by a lock. The pose is
    owned by the stepping thread.
    """

    def __init__(self, config: Optional[IntegratorConfig] = None):
        """
        Initialize the integrator.

        Args:
            config: Immutable startup configuration (initial pose, rate, id)
        """
        self.config = config or IntegratorConfig()

        self._pose = self.config.initial_pose
        self._kinematic_state = KinematicState()
        self._kinematic_state_lock = threading.Lock()

        # Statistics
        self.step_count = 0
        self.update_count = 0
        self.last_dt = None

    @property
    def pose(self) -> Pose:
        """Most recently integrated pose."""
        return self._pose

    @property
    def kinematic_state(self) -> KinematicState:
        """Consistent snapshot of the latest kinematic state."""
        with self._kinematic_state_lock:
            return self._kinematic_state

    def update_kinematic_state(self, state: KinematicState) -> None:
        """
        Replace the stored kinematic state (last write wins).

        Safe to call concurrently with step().
        """
        with self._kinematic_state_lock:
            self._kinematic_state = state
            self.update_count += 1

    def step(self, dt: float) -> Pose:
        """
        Advance the pose by dt seconds using the latest kinematic state.

        The angular rates are turned into an incremental rotation about the
        world X, Y and Z axes (in that order) and pre-multiplied onto the
        current orientation. Position is integrated linearly. Intermediate
        math is done in double precision, the stored pose is single
        precision. A dt of zero leaves the pose unchanged.

        Args:
            dt: Elapsed time since the previous step in seconds

        Returns:
            The new pose, which is also the stored pose
        """
        with self._kinematic_state_lock:
            state = self._kinematic_state

        pose = self._pose

        delta_q = quat_from_euler_xyz(
            state.roll_rate * dt,
            state.pitch_rate * dt,
            state.yaw_rate * dt
        )
        q = quat_from_euler_xyz(pose.roll, pose.pitch, pose.yaw)
        new_roll, new_pitch, new_yaw = euler_xyz_from_quat(quat_mult(delta_q, q))

        new_pose = Pose(
            x=pose.x + state.vx * dt,
            y=pose.y + state.vy * dt,
            z=pose.z + state.vz * dt,
            roll=new_roll,
            pitch=new_pitch,
            yaw=new_yaw
        )

        self._pose = new_pose
        self.step_count += 1
        self.last_dt = dt

        return new_pose

    def reset(self, pose: Optional[Pose] = None):
        """Reset to the configured initial pose (or `pose`) at rest."""
        with self._kinematic_state_lock:
            self._kinematic_state = KinematicState()
            self.update_count = 0

        self._pose = pose if pose is not None else self.config.initial_pose
        self.step_count = 0
        self.last_dt = None

    def get_statistics(self) -> Dict[str, Any]:
        """Get integrator statistics."""
        return {
            'frame_id': self.config.frame_id,
            'steps': self.step_count,
            'kinematic_updates': self.update_count,
            'last_dt': self.last_dt,
            'pose': self._pose.to_dict()
        }
