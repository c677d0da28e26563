"""
Envelope encoding for messages exchanged on a session.

Every datagram carries one or more newline terminated JSON envelopes:

    {"dataType": 1002, "senderStamp": 3, "sent": 1700000000.25,
     "sampleTimeStamp": 1700000000.25, "payload": {"vx": 1.0, ...}}
"""

import json
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from ..integrator.state import KinematicState, Pose

# Identifiers of the OpenDLV standard message set
FRAME = 1001            # opendlv.sim.Frame
KINEMATIC_STATE = 1002  # opendlv.sim.KinematicState

MESSAGE_TYPES = {
    FRAME: Pose,
    KINEMATIC_STATE: KinematicState,
}

DATA_TYPE_IDS = {cls: data_type for data_type, cls in MESSAGE_TYPES.items()}

Message = Union[Pose, KinematicState]


@dataclass
class Envelope:
    """A message payload tagged with its type, sender and timestamps."""

    data_type: int
    sender_stamp: int = 0
    payload: Dict[str, Any] = field(default_factory=dict)

    # Seconds since epoch
    sent: Optional[float] = None
    sample_time: Optional[float] = None

    def __post_init__(self):
        if self.sent is None:
            self.sent = time.time()
        if self.sample_time is None:
            self.sample_time = self.sent


def make_envelope(message: Message, sender_stamp: int = 0,
                  sample_time: Optional[float] = None) -> Envelope:
    """
    Wrap a message into an envelope.

    Args:
        message: Pose or KinematicState to send
        sender_stamp: Sender identifier of the message
        sample_time: Time the message content was sampled (defaults to now)

    Returns:
        Envelope ready for encoding
    """
    data_type = DATA_TYPE_IDS.get(type(message))
    if data_type is None:
        raise ValueError(f"Unsupported message type: {type(message).__name__}")

    return Envelope(
        data_type=data_type,
        sender_stamp=sender_stamp,
        payload=message.to_dict(),
        sample_time=sample_time
    )


def extract_message(envelope: Envelope) -> Message:
    """Decode the payload of an envelope into its message type."""
    cls = MESSAGE_TYPES.get(envelope.data_type)
    if cls is None:
        raise ValueError(f"Unknown data type: {envelope.data_type}")
    return cls.from_dict(envelope.payload)


def encode_envelope(envelope: Envelope) -> bytes:
    """Serialize an envelope to a newline terminated JSON line."""
    packet = {
        'dataType': envelope.data_type,
        'senderStamp': envelope.sender_stamp,
        'sent': envelope.sent,
        'sampleTimeStamp': envelope.sample_time,
        'payload': envelope.payload
    }
    return (json.dumps(packet, separators=(',', ':')) + "\n").encode('utf-8')


def decode_envelope(line: Union[bytes, str]) -> Envelope:
    """
    Parse one JSON line into an envelope.

    Raises:
        ValueError: If the line is not a valid envelope
    """
    if isinstance(line, bytes):
        try:
            line = line.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ValueError(f"Envelope is not UTF-8: {e}") from e

    try:
        packet = json.loads(line)
    except json.JSONDecodeError as e:
        raise ValueError(f"Envelope is not valid JSON: {e}") from e

    if not isinstance(packet, dict):
        raise ValueError("Envelope must be a JSON object")
    if 'dataType' not in packet:
        raise ValueError("Envelope has no dataType")

    payload = packet.get('payload', {})
    if not isinstance(payload, dict):
        raise ValueError("Envelope payload must be a JSON object")

    try:
        return Envelope(
            data_type=int(packet['dataType']),
            sender_stamp=int(packet.get('senderStamp', 0)),
            payload=payload,
            sent=packet.get('sent'),
            sample_time=packet.get('sampleTimeStamp')
        )
    except (TypeError, ValueError, OverflowError) as e:
        raise ValueError(f"Envelope header is malformed: {e}") from e


def split_lines(buffer: bytes) -> Tuple[List[bytes], bytes]:
    """
    Extract complete lines from a receive buffer.

    Returns:
        (complete non-empty lines, remaining partial data)
    """
    lines = []
    while b"\n" in buffer:
        line, buffer = buffer.split(b"\n", 1)
        if line.strip():
            lines.append(line)
    return lines, buffer
