"""
UDP multicast session for exchanging message envelopes.

A session with id `cid` is the multicast group 225.0.0.<cid> on port
12175. Every process that joins the group receives every envelope sent to
it, including its own.
"""

import socket
import struct
import threading
import time
from typing import Callable, Dict, List, Optional

from ..messages import Envelope, decode_envelope, encode_envelope, make_envelope, split_lines

MULTICAST_PREFIX = "225.0.0."
SESSION_PORT = 12175
MAX_DATAGRAM_SIZE = 65507

EnvelopeCallback = Callable[[Envelope], None]


class Session:
    """
    Publish/subscribe access to one multicast session.
    """

    def __init__(self, cid: int, listen: bool = True,
                 interface: str = "0.0.0.0", ttl: int = 1):
        """
        Initialize session.

        Args:
            cid: Session id (1..254)
            listen: Join the group and dispatch incoming envelopes
            interface: Local interface address used for multicast
            ttl: Multicast time-to-live of sent datagrams
        """
        if not 1 <= cid <= 254:
            raise ValueError(f"Session id must be within 1..254, got {cid}")

        self.cid = cid
        self.group = f"{MULTICAST_PREFIX}{cid}"
        self.port = SESSION_PORT
        self.listen = listen
        self.interface = interface
        self.ttl = ttl

        self.sock = None
        self.is_open = False

        # Receiver thread
        self.receiver_thread = None
        self.running = False

        # Registered callbacks per data type
        self._triggers: Dict[int, List[EnvelopeCallback]] = {}
        self._triggers_lock = threading.Lock()

        # Statistics
        self.envelopes_sent = 0
        self.envelopes_received = 0
        self.envelopes_dispatched = 0
        self.decode_errors = 0
        self.callback_errors = 0
        self.last_receive_time = 0

    def open(self) -> bool:
        """
        Create the socket and, when listening, join the multicast group.

        Returns:
            True if the session is ready
        """
        if self.is_open:
            return True

        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, self.ttl)
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_LOOP, 1)

            if self.listen:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
                if hasattr(socket, "SO_REUSEPORT"):
                    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
                sock.bind(("", self.port))

                membership = struct.pack("4s4s",
                                          socket.inet_aton(self.group),
                                          socket.inet_aton(self.interface))
                sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, membership)
                sock.settimeout(0.5)

        except OSError as e:
            print(f"Session {self.cid}: Open failed: {e}")
            return False

        self.sock = sock
        self.is_open = True

        if self.listen:
            self.running = True
            self.receiver_thread = threading.Thread(target=self._receive_loop, daemon=True)
            self.receiver_thread.start()

        print(f"Session {self.cid}: Joined {self.group}:{self.port}"
              f"{'' if self.listen else ' (send only)'}")
        return True

    def data_trigger(self, data_type: int, callback: EnvelopeCallback):
        """Register callback for every received envelope of data_type."""
        with self._triggers_lock:
            self._triggers.setdefault(data_type, []).append(callback)

    def send(self, message, sender_stamp: int = 0,
             sample_time: Optional[float] = None) -> bool:
        """
        Send a message to every member of the session.

        Returns:
            True if the datagram was handed to the network
        """
        if not self.is_open:
            return False

        data = encode_envelope(make_envelope(message, sender_stamp, sample_time))
        try:
            self.sock.sendto(data, (self.group, self.port))
        except OSError as e:
            print(f"Session {self.cid}: Send error: {e}")
            return False

        self.envelopes_sent += 1
        return True

    def dispatch(self, envelope: Envelope):
        """Hand an envelope to the callbacks registered for its data type."""
        with self._triggers_lock:
            callbacks = list(self._triggers.get(envelope.data_type, []))

        for callback in callbacks:
            try:
                callback(envelope)
                self.envelopes_dispatched += 1
            except (ValueError, TypeError, OverflowError) as e:
                self.callback_errors += 1
                print(f"Session {self.cid}: Callback error for data type "
                      f"{envelope.data_type}: {e}")

    def handle_datagram(self, data: bytes):
        """Decode all envelopes in a datagram and dispatch them."""
        lines, rest = split_lines(data)
        if rest.strip():
            lines.append(rest)

        for line in lines:
            try:
                envelope = decode_envelope(line)
            except ValueError as e:
                self.decode_errors += 1
                print(f"Session {self.cid}: Decode error: {e}")
                continue

            self.envelopes_received += 1
            self.last_receive_time = time.time()
            self.dispatch(envelope)

    def _receive_loop(self):
        """Receiver loop for incoming datagrams."""
        while self.running:
            try:
                data, _ = self.sock.recvfrom(MAX_DATAGRAM_SIZE)
            except socket.timeout:
                continue
            except OSError as e:
                if self.running:
                    print(f"Session {self.cid}: Receive error: {e}")
                    time.sleep(0.1)
                continue

            self.handle_datagram(data)

    def get_data_age(self) -> float:
        """Seconds since the last envelope was received."""
        if self.last_receive_time == 0:
            return float('inf')

        return time.time() - self.last_receive_time

    def get_statistics(self) -> dict:
        """Get session statistics."""
        return {
            'cid': self.cid,
            'group': self.group,
            'open': self.is_open,
            'sent': self.envelopes_sent,
            'received': self.envelopes_received,
            'dispatched': self.envelopes_dispatched,
            'decode_errors': self.decode_errors,
            'callback_errors': self.callback_errors,
            'data_age': self.get_data_age()
        }

    def close(self):
        """Leave the session and release the socket."""
        self.running = False

        if self.receiver_thread and self.receiver_thread.is_alive():
            self.receiver_thread.join(timeout=2.0)
        self.receiver_thread = None

        if self.sock:
            try:
                self.sock.close()
            except OSError as e:
                print(f"Session {self.cid}: Close error: {e}")
            self.sock = None

        if self.is_open:
            print(f"Session {self.cid}: Closed")
        self.is_open = False
