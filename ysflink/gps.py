"""Decoding of GPS positions sent by radios in the data channel of voice frames."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Protocol

from .crc import checksum
from .fich import Fich
from .payload import read_vd_mode1_data, read_vd_mode2_data
from .utils import dump

logger = logging.getLogger(__name__)

FI_COMMUNICATIONS = 1
DT_VD_MODE1 = 0
DT_VD_MODE2 = 2

CALLSIGN_LENGTH = 10
SHORT_GPS = b"\x22\x62"
LONG_GPS = b"\x47\x64"
END_MARKER = 0x03
_BUFFER_LENGTH = 300
_MIN_POSITION_LENGTH = 14

RADIO_NAMES = {
    0x20: "DR-2X",
    0x24: "FT-1D",
    0x25: "FTM-400D",
    0x26: "DR-1X",
    0x28: "FT-2D",
    0x29: "FTM-100D",
    0x31: "FTM-300D",
    0x30: "FT-3D",
    0x33: "FT-5D",
}


def _f32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


_HUNDREDTH = _f32(0.01)
_SIXTIETH = _f32(1.0 / 60.0)


def _to_degrees(degrees: int, minutes: int, fraction: int, direction: int) -> float:
    minutes_f = _f32(minutes + _f32(_f32(fraction) * _HUNDREDTH))
    value = _f32(degrees + _f32(minutes_f * _SIXTIETH))
    return _f32(value * direction)


class PositionWriter(Protocol):
    def write(
        self, source: bytes, radio_type: str, radio: int, latitude: float, longitude: float
    ) -> None: ...


@dataclass(frozen=True)
class GpsPosition:
    """A decoded radio position; north and east are positive."""

    radio: int
    radio_name: str
    latitude: float
    longitude: float


def _two_digits(tens_byte: int, units_byte: int) -> tuple[int, int, int]:
    tens = tens_byte & 0x0F
    units = units_byte & 0x0F
    return tens, units, tens * 10 + units


def _longitude_degrees(group: int, b: int) -> int | None:
    if group == 0x50:
        if 0x76 <= b <= 0x7F:
            return b - 0x76
        if 0x6C <= b <= 0x75:
            return 100 + (b - 0x6C)
        if 0x26 <= b <= 0x6B:
            return 110 + (b - 0x26)
        return None
    if group == 0x30:
        if 0x26 <= b <= 0x7F:
            return 10 + (b - 0x26)
        return None
    return None


def decode_gps_position(buffer: bytes) -> GpsPosition | None:
    """Decode the position held in a GPS data block, or None if it is malformed."""
    buffer = bytes(buffer)
    if len(buffer) < _MIN_POSITION_LENGTH:
        raise ValueError(f"GPS data needs {_MIN_POSITION_LENGTH} bytes, got {len(buffer)}")

    if any((b & 0xF0) not in (0x50, 0x30) for b in buffer[5:11]):
        return None

    tens, units, lat_deg = _two_digits(buffer[5], buffer[6])
    if tens > 9 or units > 9 or lat_deg > 89:
        return None

    tens, units, lat_min = _two_digits(buffer[7], buffer[8])
    if tens > 9 or units > 9 or lat_min > 59:
        return None

    tens, units, lat_min_frac = _two_digits(buffer[9], buffer[10])
    # The units digit may read 10 on some radios.
    if tens > 9 or units > 10 or lat_min_frac > 99:
        return None

    lat_dir = {0x50: 1, 0x30: -1}.get(buffer[8] & 0xF0)
    if lat_dir is None:
        return None

    lon_deg = _longitude_degrees(buffer[9] & 0xF0, buffer[11])
    if lon_deg is None:
        return None

    b = buffer[12]
    if 0x58 <= b <= 0x61:
        lon_min = b - 0x58
    elif 0x26 <= b <= 0x57:
        lon_min = 10 + (b - 0x26)
    else:
        return None

    b = buffer[13]
    if 0x1C <= b <= 0x7F:
        lon_min_frac = b - 0x1C
    else:
        return None

    lon_dir = {0x30: 1, 0x50: -1}.get(buffer[10] & 0xF0)
    if lon_dir is None:
        return None

    radio = buffer[4]
    return GpsPosition(
        radio=radio,
        radio_name=RADIO_NAMES.get(radio, "0x%02X" % radio),
        latitude=_to_degrees(lat_deg, lat_min, lat_min_frac, lat_dir),
        longitude=_to_degrees(lon_deg, lon_min, lon_min_frac, lon_dir),
    )


class GpsDecoder:
    """Collects GPS data from the frames of one transmission and reports it once."""

    def __init__(self, writer: PositionWriter) -> None:
        if writer is None:
            raise ValueError("a position writer is required")
        self._writer = writer
        self._buffer = bytearray(_BUFFER_LENGTH)
        self._sent = False

    def reset(self) -> None:
        """Allow a position to be reported again, for a new transmission."""
        self._sent = False

    def data(self, source: bytes, frame: bytes, fich: Fich) -> None:
        """Take the data channel of one communications frame."""
        if self._sent or fich.fi != FI_COMMUNICATIONS:
            return

        fn = fich.fn
        ft = fich.ft
        if fich.dt == DT_VD_MODE1:
            if fn in (0, 1, 2):
                return
            block = read_vd_mode1_data(frame)
            if block is None:
                return
            start = (fn - 3) * 20
            self._buffer[start:start + len(block)] = block
            if fn == ft:
                self._finish(source, (fn - 2) * 20)
        elif fich.dt == DT_VD_MODE2:
            if fn not in (6, 7):
                return
            block = read_vd_mode2_data(frame)
            if block is None:
                return
            start = (fn - 6) * 10
            self._buffer[start:start + len(block)] = block
            if fn == ft:
                self._finish(source, (fn - 5) * 10)

    def _finish(self, source: bytes, length: int) -> None:
        if not self._has_valid_end(length):
            return

        kind = bytes(self._buffer[1:3])
        if kind == SHORT_GPS:
            dump("Short GPS data received", bytes(self._buffer[:length]))
            self._transmit(source)
        elif kind == LONG_GPS:
            dump("Long GPS data received", bytes(self._buffer[:length]))
            self._transmit(source)

        self._sent = True

    def _has_valid_end(self, length: int) -> bool:
        for i in range(length, 0, -1):
            if self._buffer[i] == END_MARKER:
                return checksum(self._buffer[:i + 1]) == self._buffer[i + 1]
        return False

    def _transmit(self, source: bytes) -> None:
        if bytes(source[:CALLSIGN_LENGTH]) == b" " * CALLSIGN_LENGTH:
            return

        position = decode_gps_position(self._buffer)
        if position is None:
            return

        logger.info(
            "GPS Position from %10.10s of radio=%s lat=%f long=%f",
            bytes(source[:CALLSIGN_LENGTH]).decode("latin-1"),
            position.radio_name, position.latitude, position.longitude,
        )
        self._writer.write(
            source, position.radio_name, position.radio, position.latitude, position.longitude
        )
        self._sent = True