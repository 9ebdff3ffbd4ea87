"""Bit helpers, hex dumps and a tick-driven timer."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

_BIT_MASKS = (0x80, 0x40, 0x20, 0x10, 0x08, 0x04, 0x02, 0x01)


class Timer:
    """A countdown timer advanced by explicit clock ticks."""

    def __init__(self, ticks_per_sec: int, secs: int = 0, msecs: int = 0) -> None:
        self._ticks_per_sec = ticks_per_sec
        self._timeout = 0
        self._elapsed = 0
        self.set_timeout(secs, msecs)

    def set_timeout(self, secs: int, msecs: int = 0) -> None:
        """Set the timeout; zero for both disables expiry."""
        if secs > 0 or msecs > 0:
            self._timeout = (
                self._ticks_per_sec * secs + (self._ticks_per_sec * msecs) // 1000 + 1
            )
        else:
            self._timeout = 0

    @property
    def timeout(self) -> int:
        return self._timeout

    def start(self) -> None:
        if self._timeout > 0:
            self._elapsed = 1

    def stop(self) -> None:
        self._elapsed = 0

    def clock(self, ticks: int = 1) -> None:
        if self._elapsed > 0 and self._timeout > 0:
            self._elapsed += ticks

    def is_running(self) -> bool:
        return self._elapsed > 0

    def has_expired(self) -> bool:
        if self._timeout == 0 or self._elapsed == 0:
            return False
        return self._elapsed >= self._timeout


def _printable(byte: int) -> str:
    return chr(byte) if 0x20 <= byte <= 0x7E else "."


def hex_dump(title: str, data: bytes) -> list[str]:
    """Return the title followed by rows of sixteen bytes in hex and text."""
    lines = [title]
    for offset in range(0, len(data), 16):
        chunk = data[offset:offset + 16]
        hex_part = "".join(f"{b:02X} " for b in chunk).ljust(48)
        text_part = "".join(_printable(b) for b in chunk)
        lines.append(f"{offset:04X}:  {hex_part}   *{text_part}*")
    return lines


def log_hex_dump(logger: logging.Logger, level: int, title: str, data: bytes) -> None:
    """Write a hex dump of ``data`` to ``logger`` at ``level``."""
    for line in hex_dump(title, data):
        logger.log(level, "%s", line)


def _pack_bits(bits: Sequence[bool]) -> bytes:
    packed = bytearray()
    for start in range(0, len(bits), 8):
        group = list(bits[start:start + 8])
        group.extend([False] * (8 - len(group)))
        packed.append(bits_to_byte_be(group))
    return bytes(packed)


def bits_dump(title: str, bits: Sequence[bool]) -> list[str]:
    """Hex dump of a bit sequence packed most significant bit first."""
    return hex_dump(title, _pack_bits(bits))


def byte_to_bits_be(byte: int) -> list[bool]:
    return [(byte & mask) == mask for mask in _BIT_MASKS]


def byte_to_bits_le(byte: int) -> list[bool]:
    return [(byte & mask) == mask for mask in reversed(_BIT_MASKS)]


def bits_to_byte_be(bits: Iterable[bool]) -> int:
    return sum(mask for mask, bit in zip(_BIT_MASKS, bits) if bit)


def bits_to_byte_le(bits: Iterable[bool]) -> int:
    return sum(mask for mask, bit in zip(reversed(_BIT_MASKS), bits) if bit)


def read_bit(data: bytes, index: int) -> bool:
    """Read bit ``index`` of ``data``, counting from the top of the first byte."""
    return bool(data[index >> 3] & _BIT_MASKS[index & 7])


def write_bit(data: bytearray, index: int, value: bool) -> None:
    """Set or clear bit ``index`` of ``data`` in place."""
    mask = _BIT_MASKS[index & 7]
    if value:
        data[index >> 3] |= mask
    else:
        data[index >> 3] &= ~mask & 0xFF