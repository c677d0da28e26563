#!/usr/bin/env python3
"""
Basic usage example of the pose integrator.

This example drives the integrator in-process: one thread plays the role of
a vehicle model publishing kinematic states, while a fixed rate trigger
integrates and prints the pose. No network session is involved.
"""

import sys
import os
import math
import threading
import time

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from simglobal.integrator import PoseIntegrator, IntegratorConfig, KinematicState
from simglobal.runtime import PeriodicTrigger
from simglobal.runtime.main import format_frame


def vehicle_model(integrator: PoseIntegrator, stop: threading.Event, speed=5.0, turn_radius=20.0):
    """
    Publish kinematic states of a vehicle driving a circle.

    Body forward speed is resolved into the global frame using the latest
    integrated yaw.
    """
    yaw_rate = speed / turn_radius

    while not stop.is_set():
        yaw = integrator.pose.yaw
        integrator.update_kinematic_state(KinematicState(
            vx=speed * math.cos(yaw),
            vy=speed * math.sin(yaw),
            yaw_rate=yaw_rate
        ))
        time.sleep(0.02)  # 50 Hz model


def main():
    """Main example function."""
    print("Pose Integrator - Basic Usage Example")
    print("=" * 40)

    config = IntegratorConfig(x=0.0, y=-20.0, frequency=100.0, frame_id=0)
    integrator = PoseIntegrator(config)
    duration = 5.0

    stop = threading.Event()
    model_thread = threading.Thread(target=vehicle_model, args=(integrator, stop), daemon=True)
    model_thread.start()

    trigger = PeriodicTrigger(config.frequency)
    start_time = time.monotonic()

    def on_tick() -> bool:
        pose = integrator.step(config.dt)
        if integrator.step_count % 50 == 0:
            print(f"t={time.monotonic() - start_time:5.2f}s  {format_frame(config.frame_id, pose)}")
        return time.monotonic() - start_time < duration

    try:
        trigger.run(on_tick)
    except KeyboardInterrupt:
        print("\nInterrupted")
    finally:
        stop.set()
        model_thread.join(timeout=1.0)

    stats = integrator.get_statistics()
    trigger_stats = trigger.get_statistics()
    print(f"\nFinal pose: {integrator.pose}")
    print(f"Steps: {stats['steps']}, kinematic updates: {stats['kinematic_updates']}, "
          f"overruns: {trigger_stats['overruns']}")


if __name__ == "__main__":
    main()
