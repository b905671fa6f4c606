"""Frame Information Channel header fields of a YSF frame."""

from __future__ import annotations

FICH_LENGTH = 6
RAW_LENGTH = 4


class Fich:
    """The six decoded FICH bytes, with each field exposed as a property."""

    def __init__(self) -> None:
        self._fich = bytearray(FICH_LENGTH)

    def __repr__(self) -> str:
        return f"Fich({bytes(self._fich).hex()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fich):
            return NotImplemented
        return self._fich == other._fich

    def __bytes__(self) -> bytes:
        return bytes(self._fich)

    def copy(self) -> Fich:
        """Return an independent copy of this header."""
        duplicate = Fich()
        duplicate._fich[:] = self._fich
        return duplicate

    def load_raw(self, data: bytes) -> None:
        """Replace the first four bytes with those of ``data``."""
        data = bytes(data)
        if len(data) < RAW_LENGTH:
            raise ValueError(f"raw FICH needs {RAW_LENGTH} bytes, got {len(data)}")
        self._fich[:RAW_LENGTH] = data[:RAW_LENGTH]

    def raw(self) -> bytes:
        """Return the first four bytes, those that travel over the network."""
        return bytes(self._fich[:RAW_LENGTH])

    def _set(self, index: int, keep: int, value: int) -> None:
        self._fich[index] = (self._fich[index] & keep) | value

    @property
    def fi(self) -> int:
        """Frame indicator."""
        return (self._fich[0] >> 6) & 0x03

    @fi.setter
    def fi(self, value: int) -> None:
        self._set(0, 0x3F, (value << 6) & 0xC0)

    @property
    def cm(self) -> int:
        """Call mode."""
        return (self._fich[0] >> 2) & 0x03

    @property
    def bn(self) -> int:
        """Block number."""
        return self._fich[0] & 0x03

    @bn.setter
    def bn(self, value: int) -> None:
        self._set(0, 0xFC, value & 0x03)

    @property
    def bt(self) -> int:
        """Block total."""
        return (self._fich[1] >> 6) & 0x03

    @bt.setter
    def bt(self, value: int) -> None:
        self._set(1, 0x3F, (value << 6) & 0xC0)

    @property
    def fn(self) -> int:
        """Frame number."""
        return (self._fich[1] >> 3) & 0x07

    @fn.setter
    def fn(self, value: int) -> None:
        self._set(1, 0xC7, (value << 3) & 0x38)

    @property
    def ft(self) -> int:
        """Frame total."""
        return self._fich[1] & 0x07

    @ft.setter
    def ft(self, value: int) -> None:
        self._set(1, 0xF8, value & 0x07)

    @property
    def dt(self) -> int:
        """Data type."""
        return self._fich[2] & 0x03

    @property
    def mr(self) -> int:
        """Message route."""
        return (self._fich[2] >> 3) & 0x03

    @mr.setter
    def mr(self, value: int) -> None:
        self._set(2, 0xC7, (value << 3) & 0x38)

    @property
    def voip(self) -> bool:
        """VoIP flag."""
        return bool(self._fich[2] & 0x04)

    @voip.setter
    def voip(self, on: bool) -> None:
        self._set(2, 0xFB, 0x04 if on else 0x00)

    @property
    def dev(self) -> bool:
        """Deviation flag."""
        return bool(self._fich[2] & 0x40)

    @dev.setter
    def dev(self, on: bool) -> None:
        self._set(2, 0xBF, 0x40 if on else 0x00)

    @property
    def dgid(self) -> int:
        """Digital group id."""
        return self._fich[3] & 0x7F

    @dgid.setter
    def dgid(self, value: int) -> None:
        self._set(3, 0x80, value & 0x7F)