"""
Configuration manager for the global pose integration service.
"""

import argparse
import copy
import json
import math
from typing import Any, Dict, List, Optional

from ..integrator import IntegratorConfig

REQUIRED_KEYS = ("cid", "freq", "frame_id")


class Config:
    """Configuration manager for the integration service."""

    DEFAULT_CONFIG = {
        # Session (OpenDaVINCI conference id) and integration
        "cid": None,
        "freq": None,
        "frame_id": None,

        # Initial pose
        "initial_pose": {
            "x": 0.0,
            "y": 0.0,
            "z": 0.0,
            "roll": 0.0,
            "pitch": 0.0,
            "yaw": 0.0
        },

        # Additional sessions receiving the integrated frame
        "out_cids": [],

        # Multicast transport
        "multicast": {
            "interface": "0.0.0.0",
            "ttl": 1
        },

        # Output configuration
        "verbose": False,
        "status_interval_s": 10.0
    }

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Optional path to a JSON configuration file
        """
        self.config_file = config_file
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)

        if config_file is not None:
            self.load_config()

    def load_config(self):
        """
        Load configuration from file, merged over the defaults.

        Raises:
            OSError: If the file cannot be read
            ValueError: If the file is not a JSON object
        """
        with open(self.config_file, 'r') as f:
            file_config = json.load(f)

        if not isinstance(file_config, dict):
            raise ValueError(f"{self.config_file} must contain a JSON object")

        self._merge_config(self.config, file_config)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]):
        """Recursively merge configuration dictionaries."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def apply_args(self, args: argparse.Namespace):
        """Override configuration with command line arguments that were given."""
        if args.cid is not None:
            self.set("cid", args.cid)
        if args.freq is not None:
            self.set("freq", args.freq)
        if args.frame_id is not None:
            self.set("frame_id", args.frame_id)

        for key in ("x", "y", "z", "roll", "pitch", "yaw"):
            value = getattr(args, key)
            if value is not None:
                self.set(f"initial_pose.{key}", value)

        if args.out_cid:
            self.set("out_cids", list(args.out_cid))
        if args.verbose:
            self.set("verbose", True)

    def get(self, key: str, default=None):
        """Get configuration value with optional default."""
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """Set configuration value."""
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def missing_required(self) -> List[str]:
        """Names of required settings that have no value."""
        return [key for key in REQUIRED_KEYS if self.config.get(key) is None]

    def validate(self):
        """
        Check the configuration for values the service cannot run with.

        Raises:
            ValueError: Describing the first invalid setting
        """
        missing = self.missing_required()
        if missing:
            raise ValueError(f"Missing required settings: {', '.join(missing)}")

        for cid in [self.cid] + self.out_cids:
            if not 1 <= cid <= 254:
                raise ValueError(f"Session id must be within 1..254, got {cid}")

        if not math.isfinite(self.freq) or self.freq <= 0:
            raise ValueError(f"Integration frequency must be positive, got {self.freq}")

        if self.frame_id < 0:
            raise ValueError(f"Frame id must be non-negative, got {self.frame_id}")

    def to_integrator_config(self) -> IntegratorConfig:
        """Build the immutable integrator configuration."""
        self.validate()
        pose = self.config["initial_pose"]
        return IntegratorConfig(
            x=float(pose["x"]),
            y=float(pose["y"]),
            z=float(pose["z"]),
            roll=float(pose["roll"]),
            pitch=float(pose["pitch"]),
            yaw=float(pose["yaw"]),
            frequency=self.freq,
            frame_id=self.frame_id
        )

    # Property accessors for common configuration values
    @property
    def cid(self) -> int:
        return int(self.config["cid"])

    @property
    def freq(self) -> float:
        return float(self.config["freq"])

    @property
    def frame_id(self) -> int:
        return int(self.config["frame_id"])

    @property
    def out_cids(self) -> List[int]:
        """Extra output sessions, without repeats or the input session."""
        cids = []
        for cid in self.config["out_cids"]:
            cid = int(cid)
            if cid != self.cid and cid not in cids:
                cids.append(cid)
        return cids

    @property
    def verbose(self) -> bool:
        return bool(self.config["verbose"])

    @property
    def multicast_interface(self) -> str:
        return self.config["multicast"]["interface"]

    @property
    def multicast_ttl(self) -> int:
        return int(self.config["multicast"]["ttl"])

    @property
    def status_interval_s(self) -> float:
        return float(self.config["status_interval_s"])

    def print_config(self):
        """Print current configuration."""
        print("=== Global Pose Integration Configuration ===")
        print(json.dumps(self.config, indent=2))


def build_arg_parser() -> argparse.ArgumentParser:
    """Command line interface of the integration service."""
    parser = argparse.ArgumentParser(
        description="Integrates the global position of an object based on its kinematic state."
    )
    parser.add_argument("--cid", type=int, help="OpenDaVINCI session id (1..254)")
    parser.add_argument("--freq", type=float, help="Integration frequency in Hz")
    parser.add_argument("--frame-id", dest="frame_id", type=int,
                        help="ID of the frame to integrate")
    parser.add_argument("--x", type=float, help="Initial X position")
    parser.add_argument("--y", type=float, help="Initial Y position")
    parser.add_argument("--z", type=float, help="Initial Z position")
    parser.add_argument("--roll", type=float, help="Initial roll angle (around X)")
    parser.add_argument("--pitch", type=float, help="Initial pitch angle (around Y)")
    parser.add_argument("--yaw", type=float, help="Initial yaw angle (around Z)")
    parser.add_argument("--out-cid", dest="out_cid", type=int, action="append",
                        help="Additional session id to publish frames to (repeatable)")
    parser.add_argument("--config", help="JSON configuration file")
    parser.add_argument("--verbose", action="store_true",
                        help="Print every integrated frame")
    return parser
