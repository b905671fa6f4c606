"""Hex dumps and bit/byte conversion helpers."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

logger = logging.getLogger(__name__)

_BYTES_PER_LINE = 16

# Gateway log levels: 1 debug, 2 message, 3 info, 4 warning, 5 error, 6 fatal.
_LEVELS = {
    1: logging.DEBUG,
    2: logging.INFO,
    3: logging.INFO,
    4: logging.WARNING,
    5: logging.ERROR,
    6: logging.CRITICAL,
}


def _logging_level(level: int) -> int:
    return _LEVELS.get(level, logging.INFO)


def _printable(value: int) -> str:
    return chr(value) if 0x20 <= value <= 0x7E else "."


def format_dump(data: bytes) -> list[str]:
    """Return the lines of a hex dump of ``data``, sixteen bytes per line."""
    data = bytes(data)
    lines = []
    for offset in range(0, len(data), _BYTES_PER_LINE):
        chunk = data[offset:offset + _BYTES_PER_LINE]
        hex_part = "".join(f"{b:02X} " for b in chunk)
        hex_part += "   " * (_BYTES_PER_LINE - len(chunk))
        text = "".join(_printable(b) for b in chunk)
        lines.append(f"{offset:04X}:  {hex_part}   *{text}*")
    return lines


def dump(title: str, data: bytes, level: int = 2) -> None:
    """Log ``title`` followed by a hex dump of ``data``."""
    log_level = _logging_level(level)
    logger.log(log_level, "%s", title)
    for line in format_dump(data):
        logger.log(log_level, "%s", line)


def dump_bits(title: str, bits: Sequence[bool], level: int = 2) -> None:
    """Pack ``bits`` big-endian into bytes and log a hex dump of them."""
    bits = [bool(b) for b in bits]
    packed = bytearray()
    for start in range(0, len(bits), 8):
        group = bits[start:start + 8]
        group += [False] * (8 - len(group))
        packed.append(bits_to_byte_be(group))
    dump(title, bytes(packed), level)


def byte_to_bits_be(byte: int) -> list[bool]:
    """Split a byte into eight bits, most significant first."""
    if not 0 <= byte <= 0xFF:
        raise ValueError(f"not a byte value: {byte}")
    return [bool(byte & (0x80 >> n)) for n in range(8)]


def byte_to_bits_le(byte: int) -> list[bool]:
    """Split a byte into eight bits, least significant first."""
    return byte_to_bits_be(byte)[::-1]


def _check_eight(bits: Iterable[bool]) -> list[bool]:
    values = [bool(b) for b in bits]
    if len(values) != 8:
        raise ValueError(f"expected 8 bits, got {len(values)}")
    return values


def bits_to_byte_be(bits: Iterable[bool]) -> int:
    """Join eight bits, most significant first, into a byte."""
    value = 0
    for bit in _check_eight(bits):
        value = (value << 1) | int(bit)
    return value


def bits_to_byte_le(bits: Iterable[bool]) -> int:
    """Join eight bits, least significant first, into a byte."""
    return bits_to_byte_be(_check_eight(bits)[::-1])