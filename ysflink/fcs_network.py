"""Link to an FCS reflector room over UDP."""

from __future__ import annotations

import enum
import logging
from typing import Any

from .aprs import _Timer
from .reflectors import Resolver, resolve_udp
from .utils import dump
from .ysf_network import _open_udp, _PacketQueue, _receive, _same_endpoint

logger = logging.getLogger(__name__)

FCS_VERSION = "MMDVM"
FCS_PORT = 62500
FCS_DOMAIN = "xreflector.net"
FRAME_LENGTH = 155
FCS_FRAME_LENGTH = 130
_READ_LENGTH = 200
_BUFFER_CAPACITY = 1000
_PING_MS = 800
_RESET_MS = 1000
_CLOSE = b"CLOSE      "

Address = Any


def _latin1(text: str) -> bytes:
    return text.encode("latin-1", errors="replace")


def _field(text: str, length: int) -> bytes:
    return _latin1(text)[:length].ljust(length, b"\x00")


class FcsState(enum.Enum):
    """State of the FCS link."""

    UNLINKED = enum.auto()
    LINKING = enum.auto()
    LINKED = enum.auto()


class FcsNetwork:
    """A link to one FCS room, translating its frames to and from YSF frames."""

    def __init__(
        self,
        port: int,
        callsign: str,
        rx_frequency: int,
        tx_frequency: int,
        locator: str,
        id: int,
        debug: bool = False,
        *,
        resolver: Resolver | None = None,
        sock: Any = None,
        server_port: int = FCS_PORT,
    ) -> None:
        self.debug = debug
        self.address: Address | None = None
        self.state = FcsState.UNLINKED
        self.reflector = ""
        self.options = ""
        self._print = ""
        self._n = 0
        self._local_port = port
        self._server_port = server_port
        self._resolver = resolver or resolve_udp
        self._socket = sock
        self._addresses: dict[str, Address] = {}
        self._buffer = _PacketQueue(_BUFFER_CAPACITY, "FCS Network Buffer")

        info = "%9u%9u%-6.6s%-12.12s%7u" % (
            rx_frequency, tx_frequency, locator, FCS_VERSION, id
        )
        self._info = _latin1(info)[:43].ljust(100, b" ")

        call = _latin1(callsign)
        self._ping = bytearray(b"PING" + call[:6].ljust(6, b" ") + bytes(15))
        self._options = bytearray((b"FCSO" + call).ljust(50, b" ")[:50])

        self._ping_timer = _Timer()
        self._ping_timer.timeout_ms = _PING_MS
        self._reset_timer = _Timer()
        self._reset_timer.timeout_ms = _RESET_MS

    def open(self) -> None:
        """Resolve the FCS999 server and open the socket.

        Raises OSError when the server cannot be resolved.
        """
        logger.info("Resolving FCS999 address")
        address = self._resolver(f"fcs999.{FCS_DOMAIN}", self._server_port)
        if address is None:
            logger.warning("Unable to lookup the address for FCS999")
            raise OSError("unable to look up the address for FCS999")
        self._addresses["FCS999"] = address

        logger.info("Opening FCS network connection")
        if self._socket is None:
            self._socket = _open_udp("", self._local_port, address)

    def set_options(self, options: str) -> None:
        """Set the options text sent once linked."""
        self.options = options

    def clear_destination(self) -> None:
        """Forget the current room and stop pinging."""
        self._ping_timer.stop()
        self._reset_timer.stop()
        self.state = FcsState.UNLINKED

    def write(self, data: bytes) -> None:
        """Send a YSF data frame to the room while linked."""
        data = bytes(data)
        if len(data) < FRAME_LENGTH:
            raise ValueError(f"frame needs {FRAME_LENGTH} bytes, got {len(data)}")
        if self.state is not FcsState.LINKED:
            return
        packet = bytearray(b" " * FCS_FRAME_LENGTH)
        packet[0:120] = data[35:155]
        packet[120] = data[34]
        packet[121:129] = _field(self.reflector, 8)
        self._send(bytes(packet), "FCS Network Data Sent")

    def write_link(self, reflector: str) -> bool:
        """Start linking to a room such as ``FCS00101``.

        Returns False when the server of the room cannot be resolved.
        """
        if self.state is not FcsState.LINKED:
            name = reflector[:6]
            address = self._addresses.get(name)
            if address is None:
                address = self._resolver(f"{name}.{FCS_DOMAIN}", self._server_port)
                if address is None:
                    logger.warning("Unknown FCS reflector - %s", name)
                    return False
            self.address = address

        self.reflector = reflector
        self._ping[10:18] = _field(reflector, 8)
        self._print = reflector[:6] + "-" + reflector[6:]
        self.state = FcsState.LINKING

        self._ping_timer.start()
        self._write_ping()
        return True

    def write_unlink(self, count: int = 1) -> None:
        """Send ``count`` close packets while linked."""
        if self.state is not FcsState.LINKED:
            return
        for _ in range(count):
            self._send(_CLOSE, None)

    def read(self) -> bytes | None:
        """Return the next received packet as a YSF packet, or None.

        Pings come back as 14 byte YSFP polls, data as 155 byte YSFD frames.
        """
        packet = self._buffer.pop()
        if packet is None:
            return None

        if len(packet) != FCS_FRAME_LENGTH:
            poll = bytearray(b" " * 14)
            poll[0:4] = b"YSFP"
            poll[4:12] = _field(self._print, 8)
            return bytes(poll)

        self._reset_timer.start()

        frame = bytearray(b" " * FRAME_LENGTH)
        frame[0:4] = b"YSFD"
        frame[35:155] = packet[:120]
        frame[4:13] = _field(self._print, 9)
        frame[34] = self._n
        self._n = (self._n + 2) & 0xFF
        return bytes(frame)

    def clock(self, ms: int) -> None:
        """Advance time by ``ms`` milliseconds and handle one received packet."""
        self._ping_timer.clock(ms)
        if self._ping_timer.has_expired():
            self._write_ping()
            self._ping_timer.start()

        self._reset_timer.clock(ms)
        if self._reset_timer.has_expired():
            self._n = 0
            self._reset_timer.stop()

        if self._socket is None:
            return
        received = _receive(self._socket, _READ_LENGTH)
        if received is None:
            return
        packet, sender = received

        if self.state is FcsState.UNLINKED or self.address is None:
            return
        if not _same_endpoint(sender, self.address):
            return

        if self.debug:
            dump("FCS Network Data Received", packet, 1)

        length = len(packet)
        if length == 7 or (length == 10 and self.state is FcsState.LINKING):
            if self.state is FcsState.LINKING:
                logger.info("Linked to %s", self._print)
            self.state = FcsState.LINKED
            self._write_info()
            self._write_options(self._print)

        if length in (7, 10, FCS_FRAME_LENGTH):
            self._buffer.push(packet)

    def close(self) -> None:
        """Close the socket."""
        if self._socket is not None:
            self._socket.close()
            self._socket = None
        logger.info("Closing FCS network connection")

    def _write_info(self) -> None:
        if self.state is not FcsState.LINKED:
            return
        self._send(self._info, "FCS Network Data Sent")

    def _write_ping(self) -> None:
        if self.state is FcsState.UNLINKED:
            return
        self._send(bytes(self._ping), "FCS Network Data Sent")

    def _write_options(self, reflector: str) -> None:
        if self.state is not FcsState.LINKED or not self.options:
            return
        self._options[14:50] = b" " * 36
        self._options[4:12] = _field(reflector[:6] + reflector[7:9], 8)
        opt = _latin1(self.options)[:38]
        self._options[12:12 + len(opt)] = opt
        self._send(bytes(self._options), "FCS Network Options Sent")

    def _send(self, packet: bytes, title: str | None) -> None:
        if self._socket is None or self.address is None:
            return
        if self.debug and title is not None:
            dump(title, packet, 1)
        try:
            self._socket.sendto(packet, self.address)
        except OSError as exc:
            logger.error("Error returned from sendto: %s", exc)