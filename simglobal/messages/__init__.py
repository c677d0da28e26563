"""
Message envelopes exchanged with other simulation processes.
"""

from .envelope import (
    Envelope,
    FRAME,
    KINEMATIC_STATE,
    make_envelope,
    extract_message,
    encode_envelope,
    decode_envelope,
    split_lines,
)

__all__ = [
    "Envelope",
    "FRAME",
    "KINEMATIC_STATE",
    "make_envelope",
    "extract_message",
    "encode_envelope",
    "decode_envelope",
    "split_lines",
]
