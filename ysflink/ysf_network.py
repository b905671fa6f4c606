"""Link to a YSF reflector over UDP: polling, data exchange and link supervision."""

from __future__ import annotations

import enum
import logging
import socket
from collections import deque
from typing import Any

from .aprs import _Timer
from .utils import dump

logger = logging.getLogger(__name__)

CALLSIGN_LENGTH = 10
FRAME_LENGTH = 155
POLL_LENGTH = 14
_READ_LENGTH = 200
_BUFFER_CAPACITY = 1000
_SEND_POLL_MS = 5 * 1000
_RECV_POLL_MS = 60 * 1000

Address = Any


class _PacketQueue:
    """Received packets, bounded like a byte ring buffer with a length prefix."""

    def __init__(self, capacity: int, name: str) -> None:
        self._capacity = capacity
        self._name = name
        self._packets: deque[bytes] = deque()
        self._used = 0

    def __len__(self) -> int:
        return len(self._packets)

    def push(self, packet: bytes) -> None:
        needed = len(packet) + 1
        if self._used + needed > self._capacity:
            logger.error("%s overflow, %u bytes dropped", self._name, len(packet))
            return
        self._packets.append(bytes(packet))
        self._used += needed

    def pop(self) -> bytes | None:
        if not self._packets:
            return None
        packet = self._packets.popleft()
        self._used -= len(packet) + 1
        return packet


def _open_udp(local_address: str, local_port: int, remote: Address) -> socket.socket:
    family = socket.AF_INET6 if len(remote) == 4 else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_DGRAM)
    try:
        default = "::" if family == socket.AF_INET6 else ""
        sock.bind((local_address or default, local_port))
        sock.setblocking(False)
    except OSError:
        sock.close()
        raise
    return sock


def _same_endpoint(a: Address, b: Address) -> bool:
    return tuple(a[:2]) == tuple(b[:2])


def _receive(sock: Any, length: int) -> tuple[bytes, Address] | None:
    try:
        data, address = sock.recvfrom(length)
    except (BlockingIOError, InterruptedError):
        return None
    except OSError as exc:
        logger.error("Error returned from recvfrom: %s", exc)
        return None
    if not data:
        return None
    return bytes(data), address


def _callsign_field(callsign: str) -> bytes:
    return callsign.encode("latin-1", errors="replace")[:CALLSIGN_LENGTH].ljust(
        CALLSIGN_LENGTH, b" "
    )


class LinkStatus(enum.Enum):
    """State of a network link."""

    NOT_OPEN = enum.auto()
    NOT_LINKED = enum.auto()
    LINKING = enum.auto()
    LINKED = enum.auto()


class YsfNetwork:
    """A link to one YSF reflector, kept alive by polls in both directions."""

    def __init__(
        self,
        local_port: int,
        name: str,
        address: Address | None,
        callsign: str,
        static: bool = True,
        debug: bool = False,
        *,
        local_address: str = "",
        sock: Any = None,
    ) -> None:
        self.name = name
        self.address = address
        self.static = static
        self.debug = debug
        self._local_address = local_address
        self._local_port = local_port
        self._socket = sock
        self._given_socket = sock

        field = _callsign_field(callsign)
        self._poll = b"YSFP" + field
        self._unlink = b"YSFU" + field

        self._buffer = _PacketQueue(_BUFFER_CAPACITY, "YSF Network Buffer")
        self._send_poll_timer = _Timer()
        self._send_poll_timer.timeout_ms = _SEND_POLL_MS
        self._recv_poll_timer = _Timer()
        self._recv_poll_timer.timeout_ms = _RECV_POLL_MS
        self.status = LinkStatus.NOT_OPEN

    @property
    def dgid(self) -> int:
        """The DG-ID this network is reached on; always 0."""
        return 0

    def description(self, dgid: int) -> str:
        """Return a short description of the link."""
        return "YSF: " + self.name

    def open(self) -> None:
        """Open the socket. Raises OSError when the reflector has no address."""
        if self.address is None:
            logger.error("Unable to resolve the address of the YSF network")
            self.status = LinkStatus.NOT_OPEN
            raise OSError("unable to resolve the address of the YSF network")

        logger.info("Opening YSF network connection")
        if self._socket is None:
            try:
                self._socket = _open_udp(self._local_address, self._local_port, self.address)
            except OSError:
                self.status = LinkStatus.NOT_OPEN
                raise
        self.status = LinkStatus.NOT_LINKED

    def link(self) -> None:
        """Start linking: begin polling the reflector."""
        if self.status is not LinkStatus.NOT_LINKED:
            return
        self.status = LinkStatus.LINKING
        self._send_poll_timer.start()
        self._recv_poll_timer.start()
        self._write_poll()

    def write(self, dgid: int, data: bytes) -> None:
        """Send one frame to the reflector while linked."""
        data = bytes(data)
        if len(data) < FRAME_LENGTH:
            raise ValueError(f"frame needs {FRAME_LENGTH} bytes, got {len(data)}")
        if self.status is not LinkStatus.LINKED:
            return
        self._send(data[:FRAME_LENGTH], "YSF Network Data Sent")

    def read(self, dgid: int) -> bytes | None:
        """Return the next received data frame, or None."""
        return self._buffer.pop()

    def clock(self, ms: int) -> None:
        """Advance time by ``ms`` milliseconds and handle one received packet."""
        if self.status is LinkStatus.NOT_OPEN:
            return

        self._recv_poll_timer.clock(ms)
        if self._recv_poll_timer.has_expired():
            if self.static:
                self.status = LinkStatus.LINKING
            else:
                self.status = LinkStatus.NOT_LINKED
                self._send_poll_timer.stop()
            logger.info("Lost link to %s", self.name)
            self._recv_poll_timer.stop()

        self._send_poll_timer.clock(ms)
        if self._send_poll_timer.has_expired():
            self._write_poll()
            self._send_poll_timer.start()

        if self._socket is None:
            return
        received = _receive(self._socket, _READ_LENGTH)
        if received is None or self.address is None:
            return
        packet, sender = received
        if not _same_endpoint(sender, self.address):
            return

        if self.debug:
            dump("YSF Network Data Received", packet, 1)

        if packet[:4] == b"YSFP":
            self._recv_poll_timer.start()
            if self.status is LinkStatus.LINKING:
                if self.name == "MMDVM":
                    logger.info("Link successful to %s", self.name)
                else:
                    logger.info("Linked to %s", self.name)
                self.status = LinkStatus.LINKED

        if packet[:4] == b"YSFD":
            self._recv_poll_timer.start()
            self._buffer.push(packet[:0xFF])

    def unlink(self) -> None:
        """Tell the reflector we are leaving."""
        if self.status is not LinkStatus.LINKED:
            return
        self._send_poll_timer.stop()
        self._recv_poll_timer.stop()
        self._send(self._unlink, "YSF Network Data Sent")
        logger.info("Unlinked from %s", self.name)
        self.status = LinkStatus.NOT_LINKED

    def close(self) -> None:
        """Close the socket."""
        if self._socket is not None:
            self._socket.close()
            self._socket = None
        logger.info("Closing YSF network connection")
        self.status = LinkStatus.NOT_OPEN

    def _write_poll(self) -> None:
        if self.status not in (LinkStatus.LINKING, LinkStatus.LINKED):
            return
        self._send(self._poll, "YSF Network Data Sent")

    def _send(self, packet: bytes, title: str) -> None:
        if self._socket is None or self.address is None:
            return
        if self.debug:
            dump(title, packet, 1)
        try:
            self._socket.sendto(packet, self.address)
        except OSError as exc:
            logger.error("Error returned from sendto: %s", exc)