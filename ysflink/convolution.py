"""Rate 1/2, constraint length 5 convolutional encoder and Viterbi decoder."""

from __future__ import annotations

_BRANCH_TABLE1 = (0, 0, 0, 0, 1, 1, 1, 1)
_BRANCH_TABLE2 = (0, 1, 1, 0, 0, 1, 1, 0)

_HALF_STATES = 8
_NUM_STATES = 16
_M = 2
_K = 5
MAX_DECISIONS = 180


def _read_bit(buffer: bytes, index: int) -> int:
    return (buffer[index >> 3] >> (7 - (index & 7))) & 1


def _write_bit(buffer: bytearray, index: int, bit: int) -> None:
    mask = 0x80 >> (index & 7)
    if bit:
        buffer[index >> 3] |= mask
    else:
        buffer[index >> 3] &= ~mask & 0xFF


class ConvolutionalCodec:
    """Encoder and hard-decision Viterbi decoder for the YSF inner code."""

    def __init__(self) -> None:
        self.start()

    def start(self) -> None:
        """Reset the decoder to begin a new block."""
        self._metrics = [0] * _NUM_STATES
        self._decisions: list[int] = []

    def decode(self, s0: int, s1: int) -> None:
        """Feed one received symbol pair to the decoder."""
        if len(self._decisions) >= MAX_DECISIONS:
            raise ValueError(f"more than {MAX_DECISIONS} symbol pairs decoded")
        s0 = 1 if s0 else 0
        s1 = 1 if s1 else 0

        old = self._metrics
        new = [0] * _NUM_STATES
        word = 0
        for i, (b1, b2) in enumerate(zip(_BRANCH_TABLE1, _BRANCH_TABLE2)):
            j = i * 2
            metric = (b1 ^ s0) + (b2 ^ s1)
            upper = old[i]
            lower = old[i + _HALF_STATES]

            m0 = (upper + metric) & 0xFFFF
            m1 = (lower + _M - metric) & 0xFFFF
            decision0 = 1 if m0 >= m1 else 0
            new[j] = m1 if decision0 else m0

            m0 = (upper + _M - metric) & 0xFFFF
            m1 = (lower + metric) & 0xFFFF
            decision1 = 1 if m0 >= m1 else 0
            new[j + 1] = m1 if decision1 else m0

            word |= (decision1 << (j + 1)) | (decision0 << j)

        self._decisions.append(word)
        self._metrics = new

    def chainback(self, n_bits: int) -> bytes:
        """Trace back ``n_bits`` decisions and return the decoded bits, MSB first."""
        if n_bits < 0 or n_bits > len(self._decisions):
            raise ValueError(
                f"cannot trace back {n_bits} bits from {len(self._decisions)} decisions"
            )
        out = bytearray((n_bits + 7) // 8)
        state = 0
        for position in reversed(range(n_bits)):
            decisions = self._decisions.pop()
            bit = (decisions >> (state >> (9 - _K))) & 1
            state = (bit << 7) | (state >> 1)
            _write_bit(out, position, bit)
        return bytes(out)

    def encode(self, data: bytes, n_bits: int) -> bytes:
        """Encode the first ``n_bits`` bits of ``data`` into ``2 * n_bits`` bits."""
        if n_bits <= 0:
            raise ValueError("n_bits must be positive")
        data = bytes(data)
        if len(data) * 8 < n_bits:
            raise ValueError(f"{len(data)} bytes hold fewer than {n_bits} bits")

        out = bytearray((2 * n_bits + 7) // 8)
        d1 = d2 = d3 = d4 = 0
        k = 0
        for i in range(n_bits):
            d = _read_bit(data, i)
            g1 = (d + d3 + d4) & 1
            g2 = (d + d1 + d2 + d4) & 1
            d4, d3, d2, d1 = d3, d2, d1, d

            _write_bit(out, k, g1)
            _write_bit(out, k + 1, g2)
            k += 2
        return bytes(out)