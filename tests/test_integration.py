#!/usr/bin/env python3
"""
Integration tests for the complete pose integration service.
"""

import unittest
import numpy as np
import math
import sys
import os
import threading
import time

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from simglobal.integrator import KinematicState
from simglobal.messages import FRAME, decode_envelope, encode_envelope, extract_message, make_envelope
from simglobal.runtime import Config, SimGlobalSystem, build_arg_parser


class LoopbackSession:
    """Output session that keeps encoded datagrams instead of sending them."""

    def __init__(self, cid):
        self.cid = cid
        self.datagrams = []
        self.lock = threading.Lock()

    def send(self, message, sender_stamp=0, sample_time=None):
        with self.lock:
            self.datagrams.append(encode_envelope(make_envelope(message, sender_stamp, sample_time)))
        return True

    def frames(self):
        with self.lock:
            datagrams = list(self.datagrams)
        return [decode_envelope(d) for d in datagrams]


def build_system(argv):
    config = Config()
    config.apply_args(build_arg_parser().parse_args(argv))
    system = SimGlobalSystem(config, install_signal_handlers=False)
    output = LoopbackSession(config.cid)
    system.output_sessions = [output]
    return system, output


class TestServicePipeline(unittest.TestCase):
    """Test datagrams in, frames out."""

    def test_kinematic_datagram_to_frame(self):
        """Test a received kinematic state drives the published frames."""
        system, output = build_system(["--cid=111", "--freq=10", "--frame-id=2",
                                       "--x=1", "--y=2", "--yaw=0.5"])

        datagram = encode_envelope(make_envelope(
            KinematicState(vx=1.0, vy=-0.5, yaw_rate=0.2), sender_stamp=2))
        system.input_session.handle_datagram(datagram)

        for _ in range(10):
            system.on_tick()

        envelopes = output.frames()
        self.assertEqual(len(envelopes), 10)
        self.assertTrue(all(e.data_type == FRAME and e.sender_stamp == 2 for e in envelopes))

        pose = extract_message(envelopes[-1])
        self.assertAlmostEqual(pose.x, 2.0, places=5)
        self.assertAlmostEqual(pose.y, 1.5, places=5)
        self.assertAlmostEqual(pose.yaw, 0.7, places=5)
        self.assertEqual(pose, system.integrator.pose)

    def test_foreign_frames_do_not_move_object(self):
        """Test kinematic states of other objects are ignored."""
        system, output = build_system(["--cid=111", "--freq=100", "--frame-id=0"])

        system.input_session.handle_datagram(encode_envelope(
            make_envelope(KinematicState(vx=5.0), sender_stamp=9)))
        system.on_tick()

        pose = extract_message(output.frames()[0])
        self.assertEqual(pose.x, 0.0)

    def test_circular_motion(self):
        """Test forward speed plus yaw rate integrated in world coordinates."""
        system, output = build_system(["--cid=111", "--freq=100", "--frame-id=0"])
        speed = 2.0
        yaw_rate = 0.5

        # The sender resolves its body velocity into the global frame every tick
        for _ in range(200):
            yaw = system.integrator.pose.yaw
            system.integrator.update_kinematic_state(KinematicState(
                vx=speed * math.cos(yaw), vy=speed * math.sin(yaw), yaw_rate=yaw_rate))
            system.on_tick()

        pose = system.integrator.pose
        radius = speed / yaw_rate
        self.assertAlmostEqual(pose.yaw, 1.0, places=4)
        expected = np.array([radius * math.sin(1.0), radius * (1 - math.cos(1.0))])
        np.testing.assert_allclose([pose.x, pose.y], expected, atol=0.02)


class TestServiceLoop(unittest.TestCase):
    """Test the fixed rate loop with concurrent updates."""

    def test_run_with_concurrent_updates(self):
        """Test the loop integrates updates delivered from another thread."""
        system, output = build_system(["--cid=111", "--freq=200", "--frame-id=1"])
        system.running = True

        loop = threading.Thread(target=system.run)
        loop.start()

        datagram = encode_envelope(make_envelope(KinematicState(vz=1.0), sender_stamp=1))
        try:
            for _ in range(20):
                system.input_session.handle_datagram(datagram)
                time.sleep(0.005)
        finally:
            system.running = False
            system.trigger.stop()
            loop.join(timeout=2.0)

        self.assertFalse(loop.is_alive())
        frames = output.frames()
        self.assertGreater(len(frames), 0)
        self.assertEqual(len(frames), system.integrator.step_count)
        self.assertGreater(system.integrator.pose.z, 0.0)


if __name__ == '__main__':
    unittest.main()
