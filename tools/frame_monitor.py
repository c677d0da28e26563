#!/usr/bin/env python3
"""
frame_monitor.py

Joins a session and prints every integrated frame (and optionally every
kinematic state) that passes by. Useful to check a running integrator.

Usage:
    python tools/frame_monitor.py --cid=111 [--frame-id=0] [--kinematic]
"""

import argparse
import os
import sys
import time

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from simglobal.messages import FRAME, KINEMATIC_STATE, extract_message
from simglobal.runtime import Session
from simglobal.runtime.main import format_frame


def main():
    parser = argparse.ArgumentParser(description="Print frames published on a session")
    parser.add_argument("--cid", type=int, required=True, help="Session id to join")
    parser.add_argument("--frame-id", dest="frame_id", type=int, default=None,
                        help="Only show this frame id")
    parser.add_argument("--kinematic", action="store_true",
                        help="Also show kinematic states")
    args = parser.parse_args()

    session = Session(args.cid)

    def wanted(envelope) -> bool:
        return args.frame_id is None or envelope.sender_stamp == args.frame_id

    def on_frame(envelope):
        if wanted(envelope):
            print(format_frame(envelope.sender_stamp, extract_message(envelope)))

    def on_kinematic_state(envelope):
        if wanted(envelope):
            print(f"Kinematic state for {envelope.sender_stamp}: {extract_message(envelope)}")

    session.data_trigger(FRAME, on_frame)
    if args.kinematic:
        session.data_trigger(KINEMATIC_STATE, on_kinematic_state)

    if not session.open():
        return 1

    try:
        while True:
            time.sleep(1.0)
    except KeyboardInterrupt:
        print("\nKeyboard interrupt received")
    finally:
        session.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
