"""Position and station reports sent to an APRS-IS gateway over UDP."""

from __future__ import annotations

import logging
import math
import socket
import struct
from itertools import takewhile
from typing import Any

from .reflectors import Resolver, resolve_udp

logger = logging.getLogger(__name__)

CALLSIGN_LENGTH = 10
_CALLSIGN_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")
_FIRST_ID_SECONDS = 60
_ID_INTERVAL_SECONDS = 20 * 60
_FEET_PER_METRE = 3.28

_RADIO_SYMBOLS = {
    0x24: "[", 0x28: "[", 0x30: "[", 0x33: "[",
    0x25: ">", 0x29: ">", 0x31: ">",
    0x20: "r", 0x26: "r",
}

_BANDS = (
    (1200000000, "23cm/1.2GHz"),
    (420000000, "70cm"),
    (144000000, "2m"),
    (50000000, "6m"),
    (28000000, "10m"),
)


def _f32(value: float) -> float:
    """Round a value to single precision."""
    return struct.unpack("f", struct.pack("f", value))[0]


def _degrees_minutes(value: float) -> float:
    magnitude = abs(value)
    degrees = math.floor(magnitude)
    return (magnitude - degrees) * 60.0 + degrees * 100.0


def _format_position(latitude: float, longitude: float) -> tuple[str, str, str, str]:
    lat = "%07.2f" % _degrees_minutes(latitude)
    lon = "%08.2f" % _degrees_minutes(longitude)
    return lat, "S" if latitude < 0.0 else "N", lon, "W" if longitude < 0.0 else "E"


def _band(tx_frequency: int) -> str:
    for lower, name in _BANDS:
        if tx_frequency >= lower:
            return name
    return "4m"


class _Timer:
    """A countdown driven by elapsed milliseconds."""

    def __init__(self) -> None:
        self.timeout_ms = 0
        self._elapsed = 0
        self.running = False

    def start(self) -> None:
        self._elapsed = 0
        self.running = True

    def stop(self) -> None:
        self.running = False

    def clock(self, ms: int) -> None:
        if self.running:
            self._elapsed += ms

    def has_expired(self) -> bool:
        return self.running and self.timeout_ms > 0 and self._elapsed >= self.timeout_ms


class AprsWriter:
    """Builds APRS packets for the gateway and for received radio positions."""

    def __init__(
        self,
        callsign: str,
        rpt_suffix: str,
        address: str,
        port: int,
        suffix: str = "",
        debug: bool = False,
        *,
        resolver: Resolver | None = None,
        sock: Any = None,
    ) -> None:
        if not callsign:
            raise ValueError("callsign must not be empty")
        if not address:
            raise ValueError("address must not be empty")
        if port <= 0:
            raise ValueError("port must be positive")

        self.callsign = callsign
        if rpt_suffix:
            self.callsign += "-" + rpt_suffix[:1]
        self.suffix = suffix
        self.debug = debug

        self.tx_frequency = 0
        self.rx_frequency = 0
        self.desc = ""
        self.symbol = ""
        self.latitude = 0.0
        self.longitude = 0.0
        self.height = 0

        self._address = (resolver or resolve_udp)(address, port)
        self._socket = sock
        self._owns_socket = sock is None
        self._id_timer = _Timer()

    def set_info(self, tx_frequency: int, rx_frequency: int, desc: str, symbol: str) -> None:
        """Set the frequencies, description and map symbol of the station."""
        self.tx_frequency = tx_frequency
        self.rx_frequency = rx_frequency
        self.desc = desc
        self.symbol = symbol

    def set_static_location(self, latitude: float, longitude: float, height: int) -> None:
        """Set the fixed position of the station, height in metres."""
        self.latitude = _f32(latitude)
        self.longitude = _f32(longitude)
        self.height = int(height)

    def open(self) -> None:
        """Open the connection and schedule the first station report.

        Raises OSError when the server address could not be resolved.
        """
        if self._address is None:
            logger.error("Unable to lookup the adress of the APRS-IS server")
            raise OSError("unable to look up the address of the APRS-IS server")

        if self._socket is None:
            family = socket.AF_INET6 if len(self._address) == 4 else socket.AF_INET
            sock = socket.socket(family, socket.SOCK_DGRAM)
            sock.bind(("::" if family == socket.AF_INET6 else "", 0))
            sock.setblocking(False)
            self._socket = sock
            self._owns_socket = True

        logger.info("Opened connection to the APRS Gateway")

        self._id_timer.timeout_ms = _FIRST_ID_SECONDS * 1000
        self._id_timer.start()

    def position_report(
        self, source: bytes, radio_type: str, radio: int, latitude: float, longitude: float
    ) -> str:
        """Return the APRS packet for a position received from a radio."""
        raw = bytes(source[:CALLSIGN_LENGTH]).decode("latin-1")
        callsign = "".join(takewhile(lambda c: c in _CALLSIGN_CHARS, raw))
        if self.suffix:
            callsign += "-" + self.suffix[:1]

        latitude = _f32(latitude)
        longitude = _f32(longitude)
        lat, ns, lon, ew = _format_position(latitude, longitude)
        symbol = _RADIO_SYMBOLS.get(radio, "-")

        return (
            f"{callsign}>APDPRS,C4FM*,qAR,{self.callsign}:!{lat}{ns}/{lon}{ew}{symbol}"
            f" {radio_type} via MMDVM\r\n"
        )

    def write(
        self, source: bytes, radio_type: str, radio: int, latitude: float, longitude: float
    ) -> None:
        """Send the position of a radio to the APRS gateway."""
        self._send(self.position_report(source, radio_type, radio, latitude, longitude))

    def _description(self) -> str:
        extra = (", " + self.desc) if self.desc else ""
        if self.tx_frequency != 0:
            offset = _f32(_f32(self.rx_frequency - self.tx_frequency) / _f32(1000000.0))
            sign = "-" if offset < 0.0 else "+"
            return "MMDVM Voice (C4FM) %.5fMHz %s%.4fMHz%s" % (
                self.tx_frequency / 1000000.0, sign, abs(offset), extra
            )
        return "MMDVM Voice (C4FM)" + extra

    def id_frame(self) -> str | None:
        """Return the station report, or None while no location is set."""
        if self.latitude == 0.0 and self.longitude == 0.0:
            return None

        server = self.callsign + ("S" if "-" in self.callsign else "-S")
        symbol = self.symbol or "D&"
        lat, ns, lon, ew = _format_position(self.latitude, self.longitude)
        feet = _f32(_f32(float(self.height)) * _f32(_FEET_PER_METRE))

        return "%s>APDG03,TCPIP*,qAC,%s:!%s%s%s%s%s%s/A=%06.0f%s %s\r\n" % (
            self.callsign, server,
            lat, ns, symbol[0],
            lon, ew, symbol[1:2],
            feet, _band(self.tx_frequency), self._description(),
        )

    def clock(self, ms: int) -> None:
        """Advance time; sends the station report when it is due."""
        self._id_timer.clock(ms)
        if self._id_timer.has_expired():
            frame = self.id_frame()
            if frame is not None:
                self._send(frame)
            self._id_timer.timeout_ms = _ID_INTERVAL_SECONDS * 1000
            self._id_timer.start()

    def close(self) -> None:
        """Close the connection."""
        if self._socket is not None:
            self._socket.close()
            self._socket = None
        self._id_timer.stop()

    def _send(self, text: str) -> None:
        if self._socket is None or self._address is None:
            raise RuntimeError("the APRS connection is not open")
        if self.debug:
            logger.debug("APRS ==> %s", text)
        self._socket.sendto(text.encode("ascii", errors="replace"), self._address)