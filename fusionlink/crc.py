"""CRC-CCITT (16 bit) and the 8-bit additive checksum."""

from __future__ import annotations


def _make_table() -> tuple[int, ...]:
    table = []
    for value in range(256):
        crc = value << 8
        for _ in range(8):
            crc = ((crc << 1) ^ 0x1021) if crc & 0x8000 else (crc << 1)
        table.append(crc & 0xFFFF)
    return tuple(table)


_TABLE = _make_table()


def ccitt16(data: bytes) -> int:
    """CRC-CCITT over ``data``: polynomial 0x1021, initial 0, inverted result."""
    crc = 0
    for byte in data:
        crc = ((crc << 8) & 0xFFFF) ^ _TABLE[(crc >> 8) ^ byte]
    return ~crc & 0xFFFF


def add_ccitt16(buffer: bytearray) -> None:
    """Store the CRC of all but the last two bytes into those two bytes, high first."""
    if len(buffer) <= 2:
        raise ValueError("buffer must be longer than two bytes")
    crc = ccitt16(buffer[:-2])
    buffer[-2] = crc >> 8
    buffer[-1] = crc & 0xFF


def check_ccitt16(data: bytes) -> bool:
    """Whether the last two bytes of ``data`` hold the CRC of the rest."""
    if len(data) <= 2:
        raise ValueError("data must be longer than two bytes")
    crc = ccitt16(data[:-2])
    return data[-2] == crc >> 8 and data[-1] == crc & 0xFF


def checksum8(data: bytes) -> int:
    """Sum of the bytes modulo 256."""
    return sum(data) & 0xFF