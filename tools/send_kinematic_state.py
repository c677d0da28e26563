#!/usr/bin/env python3
"""
send_kinematic_state.py

Publishes a constant kinematic state for one frame at a fixed rate, to
drive a running integrator by hand.

Usage:
    python tools/send_kinematic_state.py --cid=111 --frame-id=0 --vx=1 --yaw-rate=0.1
"""

import argparse
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from simglobal.integrator import KinematicState
from simglobal.runtime import PeriodicTrigger, Session


def main():
    parser = argparse.ArgumentParser(description="Publish a constant kinematic state")
    parser.add_argument("--cid", type=int, required=True, help="Session id")
    parser.add_argument("--frame-id", dest="frame_id", type=int, required=True,
                        help="Frame the state is addressed to")
    parser.add_argument("--freq", type=float, default=10.0, help="Publish rate in Hz")
    parser.add_argument("--count", type=int, default=0,
                        help="Number of messages to send (0 = until interrupted)")
    for name in ("vx", "vy", "vz", "roll-rate", "pitch-rate", "yaw-rate"):
        parser.add_argument(f"--{name}", dest=name.replace("-", "_"), type=float, default=0.0)
    args = parser.parse_args()

    state = KinematicState(
        vx=args.vx, vy=args.vy, vz=args.vz,
        roll_rate=args.roll_rate, pitch_rate=args.pitch_rate, yaw_rate=args.yaw_rate
    )

    session = Session(args.cid, listen=False)
    if not session.open():
        return 1

    trigger = PeriodicTrigger(args.freq)

    def on_tick() -> bool:
        session.send(state, sender_stamp=args.frame_id)
        return args.count <= 0 or session.envelopes_sent < args.count

    print(f"Sending {state} to frame {args.frame_id} on session {args.cid}")
    try:
        trigger.run(on_tick)
    except KeyboardInterrupt:
        print("\nKeyboard interrupt received")
    finally:
        session.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
