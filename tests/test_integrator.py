#!/usr/bin/env python3
"""
Unit tests for the pose integrator.
"""

import unittest
import numpy as np
import math
import threading
import sys
import os

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from simglobal.integrator import PoseIntegrator, Pose, KinematicState, IntegratorConfig


class TestStateTypes(unittest.TestCase):
    """Test Pose, KinematicState and IntegratorConfig."""

    def test_pose_initialization(self):
        """Test pose defaults and single precision storage."""
        pose = Pose(x=0.1, y=2.0, yaw=0.5)

        self.assertEqual(pose.x, float(np.float32(0.1)))
        self.assertEqual(pose.y, 2.0)
        self.assertEqual(pose.z, 0.0)
        self.assertEqual(pose.yaw, 0.5)
        np.testing.assert_array_equal(pose.position, [pose.x, 2.0, 0.0])
        np.testing.assert_array_equal(pose.orientation, [0.0, 0.0, 0.5])

    def test_kinematic_state_defaults_to_rest(self):
        """Test kinematic state initializes to all zero."""
        state = KinematicState()

        np.testing.assert_array_equal(state.velocity, np.zeros(3))
        np.testing.assert_array_equal(state.angular_rate, np.zeros(3))

    def test_value_types_are_immutable(self):
        """Test that poses and states cannot be partially modified."""
        state = KinematicState(vx=1.0)

        with self.assertRaises(AttributeError):
            state.vx = 2.0

    def test_dict_fields(self):
        """Test wire field names and defaults."""
        state = KinematicState.from_dict({'vx': 1.5, 'yawRate': -0.25})

        self.assertEqual(state.vx, 1.5)
        self.assertEqual(state.yaw_rate, -0.25)
        self.assertEqual(state.vy, 0.0)
        self.assertEqual(state.to_dict()['yawRate'], -0.25)
        self.assertEqual(Pose.from_dict(Pose(x=1.0, roll=0.5).to_dict()), Pose(x=1.0, roll=0.5))

    def test_dict_fields_out_of_float_range(self):
        """Test integers too large for a float are rejected as ValueError."""
        with self.assertRaises(ValueError):
            KinematicState.from_dict({'vx': 10 ** 400})
        with self.assertRaises(ValueError):
            Pose.from_dict({'yaw': 10 ** 400})
        with self.assertRaises(ValueError):
            KinematicState.from_dict({'rollRate': 'fast'})

    def test_config_dt(self):
        """Test step length derived from frequency."""
        config = IntegratorConfig(frequency=50.0, frame_id=3)

        self.assertAlmostEqual(config.dt, 0.02)
        self.assertEqual(config.initial_pose, Pose())

    def test_config_rejects_invalid_frequency(self):
        """Test that zero, negative and non-finite frequencies are refused."""
        for frequency in (0.0, -10.0, float('inf'), float('nan')):
            with self.assertRaises(ValueError):
                IntegratorConfig(frequency=frequency)

    def test_config_rejects_negative_frame_id(self):
        with self.assertRaises(ValueError):
            IntegratorConfig(frame_id=-1)


class TestPoseIntegrator(unittest.TestCase):
    """Test the integration step."""

    def setUp(self):
        """Set up test fixtures."""
        self.integrator = PoseIntegrator(IntegratorConfig())

    def test_zero_input_gives_zero_output(self):
        """Test all-zero pose and state stay zero."""
        self.integrator.update_kinematic_state(KinematicState())

        pose = self.integrator.step(0.1)

        total = pose.x + pose.y + pose.z + pose.roll + pose.pitch + pose.yaw
        self.assertAlmostEqual(total, 0.0)

    def test_zero_input_keeps_pose(self):
        """Test zero kinematic state leaves any pose unchanged."""
        config = IntegratorConfig(x=1.0, y=-2.0, z=3.0, roll=0.1, pitch=-0.2, yaw=0.3)
        integrator = PoseIntegrator(config)

        for dt in (0.01, 0.1, 1.0, 10.0):
            pose = integrator.step(dt)

            np.testing.assert_allclose(pose.position, [1.0, -2.0, 3.0], atol=1e-6)
            np.testing.assert_allclose(pose.orientation, [0.1, -0.2, 0.3], atol=1e-6)

    def test_unit_forward_velocity(self):
        """Test vx = 1 for 0.1 s moves 0.1 m along X."""
        self.integrator.update_kinematic_state(KinematicState(vx=1.0))

        pose = self.integrator.step(0.1)

        self.assertAlmostEqual(pose.x, 0.1, places=6)
        self.assertEqual(pose.y, 0.0)
        self.assertEqual(pose.z, 0.0)
        self.assertAlmostEqual(pose.roll, 0.0)
        self.assertAlmostEqual(pose.pitch, 0.0)
        self.assertAlmostEqual(pose.yaw, 0.0)

    def test_linear_position_law(self):
        """Test position advances by v * dt and orientation is unchanged."""
        config = IntegratorConfig(x=5.0, y=-1.0, z=2.0, roll=0.2, pitch=0.1, yaw=-0.7)
        integrator = PoseIntegrator(config)
        integrator.update_kinematic_state(KinematicState(vx=1.5, vy=-2.0, vz=0.25))

        pose = integrator.step(0.2)

        np.testing.assert_allclose(pose.position, [5.3, -1.4, 2.05], atol=1e-6)
        np.testing.assert_allclose(pose.orientation, [0.2, 0.1, -0.7], atol=1e-6)

    def test_returned_pose_is_stored_pose(self):
        """Test no divergence between return value and stored state."""
        self.integrator.update_kinematic_state(KinematicState(vy=3.0, yaw_rate=0.4))

        pose = self.integrator.step(0.05)

        self.assertEqual(pose, self.integrator.pose)

    def test_single_axis_rotation(self):
        """Test constant yaw rate accumulates linearly."""
        self.integrator.update_kinematic_state(KinematicState(yaw_rate=0.5))

        for _ in range(10):
            pose = self.integrator.step(0.1)

        self.assertAlmostEqual(pose.yaw, 0.5, places=5)
        self.assertAlmostEqual(pose.roll, 0.0, places=6)
        self.assertAlmostEqual(pose.pitch, 0.0, places=6)

    def test_many_small_steps_match_one_large_step(self):
        """Test n steps of dt approximate one step of n * dt."""
        state = KinematicState(roll_rate=0.1, pitch_rate=0.2, yaw_rate=0.3)
        config = IntegratorConfig(roll=0.05, pitch=-0.1, yaw=0.2)

        fine = PoseIntegrator(config)
        fine.update_kinematic_state(state)
        for _ in range(10):
            fine_pose = fine.step(0.01)

        coarse = PoseIntegrator(config)
        coarse.update_kinematic_state(state)
        coarse_pose = coarse.step(0.1)

        np.testing.assert_allclose(fine_pose.orientation, coarse_pose.orientation, atol=2e-3)

    def test_rotation_is_applied_in_world_frame(self):
        """Test roll increment about world X on a yawed body."""
        integrator = PoseIntegrator(IntegratorConfig(yaw=math.pi / 2))
        integrator.update_kinematic_state(KinematicState(roll_rate=0.1))

        pose = integrator.step(1.0)

        # Pre-multiplying Rx keeps Rx(0.1) @ Rz(pi/2) in X-Y-Z form
        self.assertAlmostEqual(pose.roll, 0.1, places=5)
        self.assertAlmostEqual(pose.pitch, 0.0, places=5)
        self.assertAlmostEqual(pose.yaw, math.pi / 2, places=5)

    def test_zero_dt_is_identity(self):
        """Test degenerate step leaves the pose unchanged."""
        config = IntegratorConfig(x=1.0, roll=0.3)
        integrator = PoseIntegrator(config)
        integrator.update_kinematic_state(KinematicState(vx=10.0, yaw_rate=2.0))

        pose = integrator.step(0.0)

        self.assertEqual(pose.x, 1.0)
        self.assertAlmostEqual(pose.roll, 0.3, places=6)
        self.assertAlmostEqual(pose.yaw, 0.0, places=6)

    def test_update_visible_to_next_step(self):
        """Test read-after-write ordering between update and step."""
        self.integrator.update_kinematic_state(KinematicState(vx=1.0))
        self.integrator.step(1.0)
        self.integrator.update_kinematic_state(KinematicState(vx=-3.0))

        pose = self.integrator.step(1.0)

        self.assertAlmostEqual(pose.x, -2.0)
        self.assertEqual(self.integrator.kinematic_state, KinematicState(vx=-3.0))

    def test_non_finite_input_does_not_raise(self):
        """Test NaN propagates without an exception."""
        self.integrator.update_kinematic_state(KinematicState(vx=float('nan'), yaw_rate=float('nan')))

        pose = self.integrator.step(0.1)

        self.assertTrue(math.isnan(pose.x))

    def test_replay_is_deterministic(self):
        """Test replaying the same update/step sequence gives the same pose."""
        sequence = [
            (KinematicState(vx=1.0, yaw_rate=0.2), 0.01),
            (KinematicState(vx=0.5, vy=0.3, roll_rate=-0.1), 0.02),
            (KinematicState(vz=-1.0, pitch_rate=0.4, yaw_rate=-0.3), 0.01),
        ]

        def replay():
            integrator = PoseIntegrator(IntegratorConfig(x=1.0, yaw=0.5))
            for _ in range(50):
                for state, dt in sequence:
                    integrator.update_kinematic_state(state)
                    integrator.step(dt)
            return integrator.pose

        self.assertEqual(replay(), replay())

    def test_state_is_cumulative(self):
        """Test two steps with the same state advance the pose twice."""
        self.integrator.update_kinematic_state(KinematicState(vz=2.0))

        first = self.integrator.step(0.5)
        second = self.integrator.step(0.5)

        self.assertNotEqual(first, second)
        self.assertAlmostEqual(second.z, 2.0)

    def test_reset(self):
        """Test reset restores the initial pose at rest."""
        integrator = PoseIntegrator(IntegratorConfig(x=4.0))
        integrator.update_kinematic_state(KinematicState(vx=1.0))
        integrator.step(1.0)

        integrator.reset()

        self.assertEqual(integrator.pose, Pose(x=4.0))
        self.assertEqual(integrator.kinematic_state, KinematicState())
        self.assertEqual(integrator.step_count, 0)

        integrator.reset(Pose(y=1.0))
        self.assertEqual(integrator.pose, Pose(y=1.0))

    def test_statistics(self):
        """Test step and update counters."""
        self.integrator.update_kinematic_state(KinematicState(vx=1.0))
        self.integrator.step(0.1)
        self.integrator.step(0.1)

        stats = self.integrator.get_statistics()

        self.assertEqual(stats['steps'], 2)
        self.assertEqual(stats['kinematic_updates'], 1)
        self.assertEqual(stats['last_dt'], 0.1)
        self.assertEqual(stats['frame_id'], 0)


class TestConcurrentUpdates(unittest.TestCase):
    """Test updates racing the integration step."""

    def test_no_torn_kinematic_state(self):
        """Test every observed state was written as a whole."""
        integrator = PoseIntegrator()
        stop = threading.Event()
        torn = []

        def writer():
            i = 0
            while not stop.is_set():
                value = float(i % 1000)
                integrator.update_kinematic_state(KinematicState(
                    vx=value, vy=value, vz=value,
                    roll_rate=value, pitch_rate=value, yaw_rate=value))
                i += 1

        def reader():
            for _ in range(5000):
                state = integrator.kinematic_state
                fields = {state.vx, state.vy, state.vz,
                          state.roll_rate, state.pitch_rate, state.yaw_rate}
                if len(fields) != 1:
                    torn.append(state)

        writers = [threading.Thread(target=writer) for _ in range(3)]
        for thread in writers:
            thread.start()
        try:
            reader()
        finally:
            stop.set()
            for thread in writers:
                thread.join()

        self.assertEqual(torn, [])

    def test_steps_observe_whole_updates(self):
        """Test racing steps always integrate equal velocity components."""
        integrator = PoseIntegrator()
        stop = threading.Event()

        def writer():
            i = 0
            while not stop.is_set():
                value = float(i % 7)
                integrator.update_kinematic_state(KinematicState(vx=value, vy=value, vz=value))
                i += 1

        threads = [threading.Thread(target=writer) for _ in range(2)]
        for thread in threads:
            thread.start()

        mismatches = 0
        try:
            for _ in range(2000):
                pose = integrator.step(0.001)
                if not (pose.x == pose.y == pose.z):
                    mismatches += 1
        finally:
            stop.set()
            for thread in threads:
                thread.join()

        self.assertEqual(mismatches, 0)
        self.assertEqual(integrator.step_count, 2000)


if __name__ == '__main__':
    unittest.main()
