import pytest

from fusionlink.crc import add_ccitt16, ccitt16, check_ccitt16, checksum8


def test_ccitt16_check_value():
    assert ccitt16(b"123456789") == 0xCE3C


def test_ccitt16_empty_is_inverted_zero():
    assert ccitt16(b"") == 0xFFFF


def test_add_then_check():
    buf = bytearray(b"HELLO WORLD\x00\x00")
    add_ccitt16(buf)
    assert check_ccitt16(buf)
    crc = ccitt16(b"HELLO WORLD")
    assert buf[-2:] == bytes([crc >> 8, crc & 0xFF])


def test_add_keeps_payload():
    buf = bytearray(b"abcdef\xff\xff")
    add_ccitt16(buf)
    assert buf[:6] == b"abcdef"


def test_check_detects_corruption():
    buf = bytearray(22)
    buf[:5] = b"C4FM!"
    add_ccitt16(buf)
    for index in range(len(buf)):
        damaged = bytearray(buf)
        damaged[index] ^= 0x01
        assert not check_ccitt16(damaged)


def test_short_buffers_rejected():
    with pytest.raises(ValueError):
        add_ccitt16(bytearray(2))
    with pytest.raises(ValueError):
        check_ccitt16(b"\x00\x00")


def test_checksum8_wraps():
    assert checksum8(b"\xff\x01") == 0
    assert checksum8(b"") == 0
    assert checksum8(bytes([0x10, 0x20, 0x30])) == 0x60