"""
Process wiring: configuration, sessions and the fixed rate integration loop.
"""

from .config import Config, build_arg_parser
from .scheduler import PeriodicTrigger
from .session import Session
from .main import SimGlobalSystem, main

__all__ = ["Config", "build_arg_parser", "PeriodicTrigger", "Session", "SimGlobalSystem", "main"]
