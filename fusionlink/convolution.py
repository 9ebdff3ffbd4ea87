"""Rate 1/2, constraint length 5 convolutional code with a Viterbi decoder."""

from __future__ import annotations

from .utils import read_bit, write_bit

_BRANCH_TABLE1 = (0, 0, 0, 0, 1, 1, 1, 1)
_BRANCH_TABLE2 = (0, 1, 1, 0, 0, 1, 1, 0)

_NUM_OF_STATES_D2 = 8
_NUM_OF_STATES = 16
_M = 2
_K = 5
_MAX_DECISIONS = 180


class ViterbiDecoder:
    """Hard-decision Viterbi decoder fed one symbol pair at a time."""

    def __init__(self) -> None:
        self._metrics = [0] * _NUM_OF_STATES
        self._decisions: list[int] = []

    def start(self) -> None:
        """Reset the path metrics and the decision history."""
        self._metrics = [0] * _NUM_OF_STATES
        self._decisions = []

    def decode(self, s0: int, s1: int) -> None:
        """Add one received pair of hard bits."""
        if len(self._decisions) >= _MAX_DECISIONS:
            raise OverflowError(f"at most {_MAX_DECISIONS} symbol pairs per frame")

        old = self._metrics
        new = [0] * _NUM_OF_STATES
        decisions = 0
        for i in range(_NUM_OF_STATES_D2):
            j = i * 2
            metric = (_BRANCH_TABLE1[i] ^ s0) + (_BRANCH_TABLE2[i] ^ s1)

            m0 = old[i] + metric
            m1 = old[i + _NUM_OF_STATES_D2] + (_M - metric)
            decision0 = 1 if m0 >= m1 else 0
            new[j] = m1 if decision0 else m0

            m0 = old[i] + (_M - metric)
            m1 = old[i + _NUM_OF_STATES_D2] + metric
            decision1 = 1 if m0 >= m1 else 0
            new[j + 1] = m1 if decision1 else m0

            decisions |= (decision1 << (j + 1)) | (decision0 << j)

        self._decisions.append(decisions)
        self._metrics = new

    def chainback(self, n_bits: int) -> bytes:
        """Trace back ``n_bits`` decoded bits, packed most significant bit first."""
        if n_bits > len(self._decisions):
            raise ValueError("not enough symbols decoded for the requested bits")
        out = bytearray((n_bits + 7) // 8)
        state = 0
        for position in range(n_bits - 1, -1, -1):
            decision = self._decisions.pop()
            bit = (decision >> (state >> (9 - _K))) & 1
            state = (bit << 7) | (state >> 1)
            write_bit(out, position, bool(bit))
        return bytes(out)


def encode(data: bytes, n_bits: int) -> bytes:
    """Encode the first ``n_bits`` of ``data`` into ``2 * n_bits`` output bits."""
    if n_bits <= 0:
        raise ValueError("n_bits must be positive")
    out = bytearray((2 * n_bits + 7) // 8)
    d1 = d2 = d3 = d4 = 0
    for i in range(n_bits):
        d = 1 if read_bit(data, i) else 0
        g1 = (d + d3 + d4) & 1
        g2 = (d + d1 + d2 + d4) & 1
        d4, d3, d2, d1 = d3, d2, d1, d
        write_bit(out, 2 * i, bool(g1))
        write_bit(out, 2 * i + 1, bool(g2))
    return bytes(out)