"""Reading and writing the data channel of YSF frames.

Each block is whitened, protected by a CRC-CCITT16, convolutionally encoded
and interleaved before being spread over the payload section of a frame.
The read functions return the recovered data, or ``None`` when the CRC
does not match. The write functions fill the payload of a mutable frame in
place.
"""

from __future__ import annotations

from dataclasses import dataclass

from .convolution import ConvolutionalCodec
from .crc import add_ccitt16, check_ccitt16

SYNC_LENGTH_BYTES = 5
FICH_LENGTH_BYTES = 25
PAYLOAD_OFFSET = SYNC_LENGTH_BYTES + FICH_LENGTH_BYTES
_CHUNKS = 5
_STRIDE = 18

WHITENING_DATA = bytes((
    0x93, 0xD7, 0x51, 0x21, 0x9C, 0x2F, 0x6C, 0xD0, 0xEF, 0x0F,
    0xF8, 0x3D, 0xF1, 0x73, 0x20, 0x94, 0xED, 0x1E, 0x7C, 0xD8,
))


def _interleave_table(columns: int) -> tuple[int, ...]:
    return tuple(2 * row + 40 * column for row in range(20) for column in range(columns))


_INTERLEAVE_9_20 = _interleave_table(9)
_INTERLEAVE_5_20 = _interleave_table(5)


@dataclass(frozen=True)
class _Layout:
    """How one coded block is laid out and what it carries."""

    table: tuple[int, ...]
    data_length: int
    crc_length: int

    @property
    def coded_bits(self) -> int:
        return len(self.table) * 2

    @property
    def coded_bytes(self) -> int:
        return self.coded_bits // 8

    @property
    def decoded_bits(self) -> int:
        return self.crc_length * 8


_LONG = _Layout(_INTERLEAVE_9_20, 20, 22)
_SHORT = _Layout(_INTERLEAVE_5_20, 10, 12)


def _read_bit(buffer: bytes, index: int) -> int:
    return (buffer[index >> 3] >> (7 - (index & 7))) & 1


def _write_bit(buffer: bytearray, index: int, bit: int) -> None:
    mask = 0x80 >> (index & 7)
    if bit:
        buffer[index >> 3] |= mask
    else:
        buffer[index >> 3] &= ~mask & 0xFF


def _whiten(data: bytes) -> bytes:
    return bytes(b ^ w for b, w in zip(data, WHITENING_DATA))


def _require_frame(frame: bytes, needed: int) -> None:
    if len(frame) < needed:
        raise ValueError(f"frame needs {needed} bytes, got {len(frame)}")


def _require_mutable(frame: bytearray, needed: int) -> None:
    if not isinstance(frame, (bytearray, memoryview)):
        raise TypeError("frame must be a mutable bytearray")
    _require_frame(frame, needed)


def _require_dt(dt: bytes, length: int) -> bytes:
    dt = bytes(dt)
    if len(dt) != length:
        raise ValueError(f"data must be {length} bytes, got {len(dt)}")
    return dt


def _spread_end(start: int, size: int) -> int:
    return PAYLOAD_OFFSET + start + _STRIDE * (_CHUNKS - 1) + size


def _gather(frame: bytes, start: int, size: int) -> bytes:
    base = PAYLOAD_OFFSET + start
    return b"".join(
        bytes(frame[base + _STRIDE * n:base + _STRIDE * n + size]) for n in range(_CHUNKS)
    )


def _scatter(frame: bytearray, start: int, size: int, coded: bytes) -> None:
    base = PAYLOAD_OFFSET + start
    for n in range(_CHUNKS):
        frame[base + _STRIDE * n:base + _STRIDE * n + size] = coded[size * n:size * (n + 1)]


def _decode_block(coded: bytes, layout: _Layout) -> bytes | None:
    codec = ConvolutionalCodec()
    for position in layout.table:
        codec.decode(_read_bit(coded, position), _read_bit(coded, position + 1))
    output = codec.chainback(layout.decoded_bits)
    if not check_ccitt16(output):
        return None
    return _whiten(output[:layout.data_length])


def _encode_block(dt: bytes, layout: _Layout) -> bytes:
    block = add_ccitt16(_whiten(dt) + bytes(2)) + b"\x00"
    convolved = ConvolutionalCodec().encode(block, len(layout.table))

    interleaved = bytearray(layout.coded_bytes)
    for pair, position in enumerate(layout.table):
        _write_bit(interleaved, position, _read_bit(convolved, 2 * pair))
        _write_bit(interleaved, position + 1, _read_bit(convolved, 2 * pair + 1))
    return bytes(interleaved)


def _read_spread(frame: bytes, start: int, size: int, layout: _Layout) -> bytes | None:
    _require_frame(frame, _spread_end(start, size))
    return _decode_block(_gather(frame, start, size), layout)


def _write_spread(dt: bytes, frame: bytearray, start: int, size: int, layout: _Layout) -> None:
    _require_mutable(frame, _spread_end(start, size))
    dt = _require_dt(dt, layout.data_length)
    _scatter(frame, start, size, _encode_block(dt, layout))


def read_header_data(frame: bytes) -> bytes | None:
    """Return the 40 data bytes of a header frame, or None if either half fails its CRC."""
    first = _read_spread(frame, 0, 9, _LONG)
    second = _read_spread(frame, 9, 9, _LONG)
    if first is None or second is None:
        return None
    return first + second


def write_header_data(dt: bytes, frame: bytearray) -> None:
    """Write 40 data bytes into the payload of a header frame."""
    dt = _require_dt(dt, 2 * _LONG.data_length)
    _write_spread(dt[:20], frame, 0, 9, _LONG)
    _write_spread(dt[20:], frame, 9, 9, _LONG)


def read_vd_mode1_data(frame: bytes) -> bytes | None:
    """Return the 20 data bytes of a V/D mode 1 frame, or None on a CRC error."""
    return _read_spread(frame, 0, 9, _LONG)


def write_vd_mode1_data(dt: bytes, frame: bytearray) -> None:
    """Write 20 data bytes into a V/D mode 1 frame."""
    _write_spread(dt, frame, 0, 9, _LONG)


def read_vd_mode2_data(frame: bytes) -> bytes | None:
    """Return the 10 data bytes of a V/D mode 2 frame, or None on a CRC error."""
    return _read_spread(frame, 0, 5, _SHORT)


def write_vd_mode2_data(dt: bytes, frame: bytearray) -> None:
    """Write 10 data bytes into a V/D mode 2 frame."""
    _write_spread(dt, frame, 0, 5, _SHORT)


def read_voice_fr_mode_data(frame: bytes) -> bytes | None:
    """Return the 20 data bytes of a voice full-rate frame, or None on a CRC error."""
    _require_frame(frame, PAYLOAD_OFFSET + _LONG.coded_bytes)
    coded = bytes(frame[PAYLOAD_OFFSET:PAYLOAD_OFFSET + _LONG.coded_bytes])
    return _decode_block(coded, _LONG)


def write_voice_fr_mode_data(dt: bytes, frame: bytearray) -> None:
    """Write 20 data bytes into a voice full-rate frame."""
    _require_mutable(frame, PAYLOAD_OFFSET + _LONG.coded_bytes)
    dt = _require_dt(dt, _LONG.data_length)
    frame[PAYLOAD_OFFSET:PAYLOAD_OFFSET + _LONG.coded_bytes] = _encode_block(dt, _LONG)


def read_data_fr_mode_data1(frame: bytes) -> bytes | None:
    """Return the first 20 data bytes of a data full-rate frame, or None on a CRC error."""
    return _read_spread(frame, 0, 9, _LONG)


def write_data_fr_mode_data1(dt: bytes, frame: bytearray) -> None:
    """Write the first 20 data bytes of a data full-rate frame."""
    _write_spread(dt, frame, 0, 9, _LONG)


def read_data_fr_mode_data2(frame: bytes) -> bytes | None:
    """Return the second 20 data bytes of a data full-rate frame, or None on a CRC error."""
    return _read_spread(frame, 9, 9, _LONG)


def write_data_fr_mode_data2(dt: bytes, frame: bytearray) -> None:
    """Write the second 20 data bytes of a data full-rate frame."""
    _write_spread(dt, frame, 9, 9, _LONG)