import logging

import pytest

from ysflink.utils import (
    bits_to_byte_be,
    bits_to_byte_le,
    byte_to_bits_be,
    byte_to_bits_le,
    dump,
    dump_bits,
    format_dump,
)


def test_format_dump_short_line():
    lines = format_dump(b"ABC")
    assert lines == ["0000:  41 42 43 " + "   " * 13 + "   *ABC*"]


def test_format_dump_non_printable_replaced():
    lines = format_dump(b"\x00A\x7f")
    assert lines[0].endswith("*.A.*")


def test_format_dump_empty():
    assert format_dump(b"") == []


def test_dump_logs_title_and_lines(caplog):
    caplog.set_level(logging.DEBUG, logger="ysflink.utils")
    dump("Title here", b"YSFP", level=1)
    messages = [r.getMessage() for r in caplog.records]
    assert messages[0] == "Title here"
    assert messages[1:] == format_dump(b"YSFP")
    assert all(r.levelno == logging.DEBUG for r in caplog.records)


def test_dump_bits_packs_big_endian(caplog):
    caplog.set_level(logging.DEBUG, logger="ysflink.utils")
    bits = byte_to_bits_be(0x59) + [True]
    dump_bits("Bits", bits)
    messages = [r.getMessage() for r in caplog.records]
    assert messages[1:] == format_dump(bytes([0x59, 0x80]))


@pytest.mark.parametrize("value", [0x00, 0x01, 0x80, 0x5A, 0xFF])
def test_be_round_trip(value):
    assert bits_to_byte_be(byte_to_bits_be(value)) == value


@pytest.mark.parametrize("value", [0x00, 0x01, 0x80, 0x5A, 0xFF])
def test_le_round_trip(value):
    assert bits_to_byte_le(byte_to_bits_le(value)) == value


def test_bit_orders_are_reversed():
    assert byte_to_bits_be(0x80)[0] is True
    assert byte_to_bits_le(0x80)[7] is True
    assert byte_to_bits_le(0x35) == byte_to_bits_be(0x35)[::-1]


def test_bits_to_byte_wrong_length():
    with pytest.raises(ValueError):
        bits_to_byte_be([True] * 7)
    with pytest.raises(ValueError):
        bits_to_byte_le([False] * 9)


def test_byte_to_bits_rejects_out_of_range():
    with pytest.raises(ValueError):
        byte_to_bits_be(256)