"""Detection of DTMF tones carried in YSF V/D mode 2 voice frames."""

from __future__ import annotations

import enum

SYNC_LENGTH_BYTES = 5
FICH_LENGTH_BYTES = 25
_PAYLOAD_OFFSET = SYNC_LENGTH_BYTES + FICH_LENGTH_BYTES
_SLICE_OFFSETS = range(5, 90, 18)
_SLICE_LENGTH = 13
_MIN_FRAME_LENGTH = _PAYLOAD_OFFSET + _SLICE_OFFSETS[-1] + _SLICE_LENGTH

_SIG_MASK = (0xCC, 0xCC, 0xDD, 0xDD, 0xEE, 0xEE, 0xFF, 0xFF, 0xEE, 0xEE, 0xDD, 0x99, 0x98)
_SIG = (0x08, 0x80, 0xC9, 0x10, 0x26, 0xA0, 0xE3, 0x31, 0xE2, 0xE6, 0xD5, 0x08, 0x88)

_SYM_POSITIONS = (0, 1, 2, 3, 4, 5, 8, 9, 10, 11, 12)
_SYM_MASK = (0x33, 0x33, 0x22, 0x22, 0x11, 0x11, 0x11, 0x11, 0x22, 0x66, 0x66)

_SYMBOLS = {
    (0x33, 0x11, 0x22, 0x02, 0x00, 0x00, 0x01, 0x11, 0x00, 0x04, 0x62): "0",
    (0x33, 0x10, 0x20, 0x20, 0x00, 0x01, 0x01, 0x10, 0x00, 0x04, 0x62): "1",
    (0x22, 0x23, 0x02, 0x02, 0x00, 0x10, 0x01, 0x01, 0x00, 0x04, 0x62): "2",
    (0x22, 0x22, 0x00, 0x20, 0x00, 0x11, 0x01, 0x00, 0x00, 0x04, 0x62): "3",
    (0x11, 0x11, 0x22, 0x02, 0x01, 0x00, 0x00, 0x11, 0x00, 0x06, 0x44): "4",
    (0x11, 0x10, 0x20, 0x20, 0x01, 0x01, 0x00, 0x10, 0x00, 0x06, 0x44): "5",
    (0x00, 0x23, 0x02, 0x02, 0x01, 0x10, 0x00, 0x01, 0x00, 0x06, 0x44): "6",
    (0x00, 0x22, 0x00, 0x20, 0x01, 0x11, 0x00, 0x00, 0x00, 0x06, 0x44): "7",
    (0x33, 0x11, 0x22, 0x02, 0x10, 0x00, 0x11, 0x11, 0x22, 0x60, 0x22): "8",
    (0x33, 0x10, 0x20, 0x20, 0x10, 0x01, 0x11, 0x10, 0x22, 0x60, 0x22): "9",
    (0x22, 0x23, 0x02, 0x02, 0x10, 0x10, 0x11, 0x01, 0x22, 0x60, 0x22): "A",
    (0x22, 0x22, 0x00, 0x20, 0x10, 0x11, 0x11, 0x00, 0x22, 0x60, 0x22): "B",
    (0x11, 0x11, 0x22, 0x02, 0x11, 0x00, 0x10, 0x11, 0x22, 0x62, 0x04): "C",
    (0x11, 0x10, 0x20, 0x20, 0x11, 0x01, 0x10, 0x10, 0x22, 0x62, 0x04): "D",
    (0x00, 0x23, 0x02, 0x02, 0x11, 0x10, 0x10, 0x01, 0x22, 0x62, 0x04): "*",
    (0x00, 0x22, 0x00, 0x20, 0x11, 0x11, 0x10, 0x00, 0x22, 0x62, 0x04): "#",
}

VD2_SILENCE = bytes(
    (0x7B, 0xB2, 0x8E, 0x43, 0x36, 0xE4, 0xA2, 0x39, 0x78, 0x49, 0x33, 0x68, 0x33)
)

_NO_TONE = " "
_PRESS_THRESHOLD = 3
_RELEASE_THRESHOLD = 100


class DtmfStatus(enum.Enum):
    """What a completed DTMF command asks the gateway to do."""

    NONE = enum.auto()
    CONNECT_YSF = enum.auto()
    CONNECT_FCS = enum.auto()
    DISCONNECT = enum.auto()


def _is_tone(ambe: bytearray) -> bool:
    return all((b & m) == s for b, m, s in zip(ambe, _SIG_MASK, _SIG))


def _tone_char(ambe: bytearray) -> str:
    symbols = tuple(ambe[p] & m for p, m in zip(_SYM_POSITIONS, _SYM_MASK))
    return _SYMBOLS.get(symbols, _NO_TONE)


class DtmfDecoder:
    """Collects DTMF digits from successive frames into a command."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Forget all digits and the pending command."""
        self._data = ""
        self._command = ""
        self._pressed = False
        self._press_count = 0
        self._release_count = 0
        self._last_char = _NO_TONE

    def decode_vd_mode2(self, frame: bytearray, end: bool) -> DtmfStatus:
        """Scan a V/D mode 2 frame for tones, silencing any found in place.

        Returns the status of the command entered so far.
        """
        if not isinstance(frame, (bytearray, memoryview)):
            raise TypeError("frame must be a mutable bytearray")
        if len(frame) < _MIN_FRAME_LENGTH:
            raise ValueError(f"frame needs {_MIN_FRAME_LENGTH} bytes, got {len(frame)}")

        for offset in _SLICE_OFFSETS:
            start = _PAYLOAD_OFFSET + offset
            status = self._decode_slice(frame, start, end)
            if status is not DtmfStatus.NONE:
                return status
        return DtmfStatus.NONE

    def _decode_slice(self, frame: bytearray, start: int, end: bool) -> DtmfStatus:
        ambe = frame[start:start + _SLICE_LENGTH]

        if not end and _is_tone(ambe):
            c = _tone_char(ambe)
            if c != _NO_TONE:
                frame[start:start + _SLICE_LENGTH] = VD2_SILENCE

            if c == self._last_char:
                self._press_count += 1
            else:
                self._last_char = c
                self._press_count = 0

            if c != _NO_TONE and not self._pressed and self._press_count >= _PRESS_THRESHOLD:
                self._data += c
                self._release_count = 0
                self._pressed = True
        else:
            if (end or self._release_count >= _RELEASE_THRESHOLD) and self._data:
                self._command = self._data
                self._data = ""
                self._release_count = 0

            self._pressed = False
            self._release_count += 1
            self._press_count = 0
            self._last_char = _NO_TONE

        return self._validate()

    def _validate(self) -> DtmfStatus:
        command = self._command
        if not command:
            return DtmfStatus.NONE

        first, rest = command[0], command[1:]
        digits = all("0" <= c <= "9" for c in rest)

        if command == "#":
            return DtmfStatus.DISCONNECT
        if first == "A" and len(command) in (3, 4):
            return DtmfStatus.CONNECT_FCS if digits else DtmfStatus.NONE
        if first == "#" and len(command) == 6:
            if not digits:
                return DtmfStatus.NONE
            if command == "#99999":
                return DtmfStatus.DISCONNECT
            return DtmfStatus.CONNECT_YSF
        return DtmfStatus.NONE

    def pop_reflector(self) -> str:
        """Return the command without its first character and reset the decoder."""
        command = self._command
        self.reset()
        return command[1:]