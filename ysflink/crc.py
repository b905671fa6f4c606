"""CRC-CCITT16 and simple additive checksum used in YSF frames."""

from __future__ import annotations

_POLY = 0x1021


def _make_table() -> tuple[int, ...]:
    table = []
    for index in range(256):
        crc = index << 8
        for _ in range(8):
            crc = ((crc << 1) ^ _POLY) if crc & 0x8000 else (crc << 1)
        table.append(crc & 0xFFFF)
    return tuple(table)


_TABLE = _make_table()


def _ccitt16(body: bytes) -> int:
    crc = 0
    for value in body:
        crc = ((crc << 8) & 0xFFFF) ^ _TABLE[(crc >> 8) ^ value]
    return crc ^ 0xFFFF


def _check_length(data: bytes) -> bytes:
    data = bytes(data)
    if len(data) <= 2:
        raise ValueError("data must be longer than the two CRC bytes")
    return data


def add_ccitt16(data: bytes) -> bytes:
    """Return ``data`` with its last two bytes replaced by the CRC of the rest."""
    data = _check_length(data)
    body = data[:-2]
    return body + _ccitt16(body).to_bytes(2, "big")


def check_ccitt16(data: bytes) -> bool:
    """Tell whether the last two bytes of ``data`` hold the CRC of the rest."""
    data = _check_length(data)
    return _ccitt16(data[:-2]).to_bytes(2, "big") == data[-2:]


def checksum(data: bytes) -> int:
    """Sum of all bytes, modulo 256."""
    return sum(bytes(data)) & 0xFF