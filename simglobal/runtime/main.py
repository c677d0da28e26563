#!/usr/bin/env python3
"""
Global pose integration service.

Listens for kinematic states of one frame on a session, integrates the
frame's global pose at a fixed frequency and publishes it back.
"""

import signal
import sys
import threading
import time
from typing import List, Optional

from ..integrator import KinematicState, Pose, PoseIntegrator
from ..messages import KINEMATIC_STATE, Envelope, extract_message
from .config import Config, build_arg_parser
from .scheduler import PeriodicTrigger
from .session import Session

USAGE = ("Usage:   {prog} --frame-id=<ID of frame to integrate> --freq=<Integration frequency> "
         "--cid=<OpenDaVINCI session> [--x=<Initial X position>] [--y=<Initial Y position>] "
         "[--z=<Initial Z position>] [--roll=<Initial roll angle (around X)>] "
         "[--pitch=<Initial pitch angle (around Y)>] [--yaw=<Initial yaw angle (around Z)>] "
         "[--out-cid=<Additional output session>] [--config=<JSON file>] [--verbose]")
EXAMPLE = "Example: {prog} --frame-id=0 --freq=100 --cid=111"


def format_frame(frame_id: int, pose: Pose) -> str:
    """Human readable line for one integrated frame."""
    return (f"Frame with id {frame_id} is at [x={pose.x:g}, y={pose.y:g}, z={pose.z:g}] "
            f"with the rotation [roll={pose.roll:g}, pitch={pose.pitch:g}, yaw={pose.yaw:g}].")


class SimGlobalSystem:
    """Wires the pose integrator to the input and output sessions."""

    def __init__(self, config: Config, install_signal_handlers: bool = True):
        """
        Initialize the integration service.

        Args:
            config: Validated service configuration
            install_signal_handlers: Stop cleanly on SIGINT/SIGTERM
        """
        self.config = config
        self.integrator_config = config.to_integrator_config()
        self.frame_id = self.integrator_config.frame_id
        self.dt = self.integrator_config.dt
        self.verbose = config.verbose

        self.integrator = PoseIntegrator(self.integrator_config)

        # Sessions: kinematic states come in on cid, frames go out on cid + out_cids
        self.input_session = Session(
            config.cid,
            interface=config.multicast_interface,
            ttl=config.multicast_ttl
        )
        self.output_sessions = [self.input_session] + [
            Session(cid, listen=False,
                    interface=config.multicast_interface,
                    ttl=config.multicast_ttl)
            for cid in config.out_cids
        ]
        self.input_session.data_trigger(KINEMATIC_STATE, self.on_kinematic_state)

        self.trigger = PeriodicTrigger(self.integrator_config.frequency)

        self.running = False
        self.status_thread = None
        self.start_time = time.time()
        self.ignored_updates = 0
        self.send_errors = 0

        if install_signal_handlers:
            signal.signal(signal.SIGINT, self._signal_handler)
            signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals."""
        print("\nShutdown signal received, stopping integration...")
        self.stop()

    def on_kinematic_state(self, envelope: Envelope):
        """Accept kinematic states addressed to our frame only."""
        if envelope.sender_stamp != self.frame_id:
            self.ignored_updates += 1
            return

        kinematic_state = extract_message(envelope)
        if isinstance(kinematic_state, KinematicState):
            self.integrator.update_kinematic_state(kinematic_state)

    def on_tick(self) -> bool:
        """Integrate one step and publish the resulting frame."""
        frame = self.integrator.step(self.dt)
        sample_time = time.time()

        for session in self.output_sessions:
            if not session.send(frame, sender_stamp=self.frame_id, sample_time=sample_time):
                self.send_errors += 1

        if self.verbose:
            print(format_frame(self.frame_id, frame))

        return self.running

    def start(self) -> bool:
        """Open all sessions and start status output."""
        if self.running:
            print("Integration already running")
            return True

        for session in self.output_sessions:
            if not session.open():
                print(f"ERROR: Failed to open session {session.cid}")
                self._close_sessions()
                return False

        self.running = True
        self.start_time = time.time()

        self.status_thread = threading.Thread(target=self._status_loop, daemon=True)
        self.status_thread.start()

        print(f"Integrating frame {self.frame_id} at {self.integrator_config.frequency:g} Hz "
              f"on session {self.config.cid}")
        return True

    def run(self):
        """Block in the integration loop until stopped."""
        self.trigger.run(self.on_tick)

    def stop(self):
        """Stop the integration loop and close all sessions."""
        if not self.running:
            return

        self.running = False
        self.trigger.stop()

        if (self.status_thread and self.status_thread.is_alive()
                and self.status_thread is not threading.current_thread()):
            self.status_thread.join(timeout=2.0)

        self._close_sessions()

    def _close_sessions(self):
        for session in self.output_sessions:
            session.close()

    def _status_loop(self):
        """Periodic status output."""
        interval = self.config.status_interval_s
        last_output_time = time.time()

        while self.running:
            current_time = time.time()
            if interval > 0 and current_time - last_output_time >= interval:
                self.print_status()
                last_output_time = current_time

            time.sleep(0.1)

    def print_status(self):
        """Print current service status."""
        uptime = time.time() - self.start_time
        stats = self.integrator.get_statistics()
        session_stats = self.input_session.get_statistics()
        trigger_stats = self.trigger.get_statistics()

        print(f"\n=== Global Pose Integration Status (Uptime: {uptime:.1f}s) ===")
        print(format_frame(self.frame_id, self.integrator.pose))
        print(f"Kinematic state: {self.integrator.kinematic_state}")
        print(f"Integrator: {stats['steps']} steps, {stats['kinematic_updates']} updates, "
              f"{self.ignored_updates} ignored")
        print(f"Trigger: {trigger_stats['ticks']} ticks, {trigger_stats['overruns']} overruns")
        print(f"Session {session_stats['cid']}: {session_stats['received']} received, "
              f"{session_stats['sent']} sent, {session_stats['decode_errors']} decode errors, "
              f"{self.send_errors} send errors")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    prog = parser.prog

    try:
        config = Config(args.config)
    except (OSError, ValueError) as e:
        print(f"Failed to load config: {e}", file=sys.stderr)
        return 1
    config.apply_args(args)

    if config.missing_required():
        print(f"{prog} integrates the global position of an object based on its kinematic state.",
              file=sys.stderr)
        print(USAGE.format(prog=prog), file=sys.stderr)
        print(EXAMPLE.format(prog=prog), file=sys.stderr)
        return 1

    if config.verbose:
        config.print_config()

    try:
        system = SimGlobalSystem(config)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    if not system.start():
        print("Failed to start integration")
        return 1

    try:
        system.run()
    except KeyboardInterrupt:
        print("\nKeyboard interrupt received")
    finally:
        system.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
