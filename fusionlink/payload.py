"""Encoding and decoding of the data channels carried in a YSF frame payload.

Every channel is whitened, protected by a CRC-CCITT, convolutionally encoded
and interleaved before it is placed in the frame. The read functions return
the recovered bytes, or ``None`` when the CRC does not match. The write
functions update a mutable frame in place and leave the other bytes as they
are.
"""

from __future__ import annotations

from .convolution import ViterbiDecoder, encode
from .crc import add_ccitt16, check_ccitt16
from .utils import read_bit, write_bit

_SYNC_LENGTH_BYTES = 5
_FICH_LENGTH_BYTES = 25
_PAYLOAD_OFFSET = _SYNC_LENGTH_BYTES + _FICH_LENGTH_BYTES

_SLICE_STRIDE = 18
_SLICE_COUNT = 5

_WHITENING_DATA = bytes.fromhex("93D751219C2F6CD0EF0FF83DF1732094ED1E7CD8")


def _interleave_table(columns: int) -> tuple[int, ...]:
    return tuple(2 * row + 40 * column for row in range(20) for column in range(columns))


_INTERLEAVE_9_20 = _interleave_table(9)
_INTERLEAVE_5_20 = _interleave_table(5)


def _require_frame(frame: bytes, needed: int) -> None:
    if len(frame) < needed:
        raise ValueError(f"frame must hold at least {needed} bytes, got {len(frame)}")


def _require_data(data: bytes, needed: int) -> None:
    if len(data) < needed:
        raise ValueError(f"data must hold at least {needed} bytes, got {len(data)}")


def _whiten(data: bytes) -> bytes:
    return bytes(b ^ w for b, w in zip(data, _WHITENING_DATA))


def _gather(frame: bytes, start: int, width: int) -> bytes:
    """Collect five ``width`` byte slices spaced eighteen bytes apart."""
    base = _PAYLOAD_OFFSET + start
    _require_frame(frame, base + (_SLICE_COUNT - 1) * _SLICE_STRIDE + width)
    return b"".join(
        bytes(frame[pos:pos + width])
        for pos in range(base, base + _SLICE_COUNT * _SLICE_STRIDE, _SLICE_STRIDE)
    )


def _scatter(frame: bytearray, start: int, width: int, block: bytes) -> None:
    """Spread ``block`` over five ``width`` byte slices spaced eighteen bytes apart."""
    base = _PAYLOAD_OFFSET + start
    _require_frame(frame, base + (_SLICE_COUNT - 1) * _SLICE_STRIDE + width)
    for k in range(_SLICE_COUNT):
        pos = base + k * _SLICE_STRIDE
        frame[pos:pos + width] = block[k * width:(k + 1) * width]


def _decode_block(dch: bytes, table: tuple[int, ...], length: int) -> bytes | None:
    """Deinterleave and decode ``dch``; return ``length`` data bytes if the CRC holds."""
    decoder = ViterbiDecoder()
    decoder.start()
    for n in table:
        decoder.decode(int(read_bit(dch, n)), int(read_bit(dch, n + 1)))

    output = decoder.chainback(len(table) - 4)
    if not check_ccitt16(output[:length + 2]):
        return None
    return _whiten(output[:length])


def _encode_block(data: bytes, table: tuple[int, ...], length: int) -> bytes:
    """Whiten, add the CRC, encode and interleave ``length`` bytes of ``data``."""
    block = bytearray(_whiten(data[:length]) + b"\x00\x00")
    add_ccitt16(block)
    block.append(0x00)

    convolved = encode(bytes(block), len(table))
    interleaved = bytearray(len(convolved))
    for j, n in enumerate(table):
        write_bit(interleaved, n, read_bit(convolved, 2 * j))
        write_bit(interleaved, n + 1, read_bit(convolved, 2 * j + 1))
    return bytes(interleaved)


def read_header_data(frame: bytes) -> bytes | None:
    """Read the 40 bytes of a header or terminator frame, or ``None`` on a CRC error."""
    first = _decode_block(_gather(frame, 0, 9), _INTERLEAVE_9_20, 20)
    second = _decode_block(_gather(frame, 9, 9), _INTERLEAVE_9_20, 20)
    if first is None or second is None:
        return None
    return first + second


def write_header_data(data: bytes, frame: bytearray) -> None:
    """Write 40 bytes of header data into ``frame``."""
    _require_data(data, 40)
    _scatter(frame, 0, 9, _encode_block(data[:20], _INTERLEAVE_9_20, 20))
    _scatter(frame, 9, 9, _encode_block(data[20:40], _INTERLEAVE_9_20, 20))


def read_vd_mode1_data(frame: bytes) -> bytes | None:
    """Read the 20 data bytes of a V/D mode 1 frame."""
    return _decode_block(_gather(frame, 0, 9), _INTERLEAVE_9_20, 20)


def write_vd_mode1_data(data: bytes, frame: bytearray) -> None:
    """Write 20 data bytes into a V/D mode 1 frame."""
    _require_data(data, 20)
    _scatter(frame, 0, 9, _encode_block(data, _INTERLEAVE_9_20, 20))


def read_vd_mode2_data(frame: bytes) -> bytes | None:
    """Read the 10 data bytes of a V/D mode 2 frame."""
    return _decode_block(_gather(frame, 0, 5), _INTERLEAVE_5_20, 10)


def write_vd_mode2_data(data: bytes, frame: bytearray) -> None:
    """Write 10 data bytes into a V/D mode 2 frame."""
    _require_data(data, 10)
    _scatter(frame, 0, 5, _encode_block(data, _INTERLEAVE_5_20, 10))


def read_voice_fr_mode_data(frame: bytes) -> bytes | None:
    """Read the 20 data bytes of a voice full-rate frame."""
    _require_frame(frame, _PAYLOAD_OFFSET + 45)
    dch = bytes(frame[_PAYLOAD_OFFSET:_PAYLOAD_OFFSET + 45])
    return _decode_block(dch, _INTERLEAVE_9_20, 20)


def write_voice_fr_mode_data(data: bytes, frame: bytearray) -> None:
    """Write 20 data bytes into a voice full-rate frame."""
    _require_data(data, 20)
    _require_frame(frame, _PAYLOAD_OFFSET + 45)
    frame[_PAYLOAD_OFFSET:_PAYLOAD_OFFSET + 45] = _encode_block(data, _INTERLEAVE_9_20, 20)


def read_data_fr_mode_data1(frame: bytes) -> bytes | None:
    """Read the first 20 data bytes of a data full-rate frame."""
    return _decode_block(_gather(frame, 0, 9), _INTERLEAVE_9_20, 20)


def write_data_fr_mode_data1(data: bytes, frame: bytearray) -> None:
    """Write the first 20 data bytes of a data full-rate frame."""
    _require_data(data, 20)
    _scatter(frame, 0, 9, _encode_block(data, _INTERLEAVE_9_20, 20))


def read_data_fr_mode_data2(frame: bytes) -> bytes | None:
    """Read the second 20 data bytes of a data full-rate frame."""
    return _decode_block(_gather(frame, 9, 9), _INTERLEAVE_9_20, 20)


def write_data_fr_mode_data2(data: bytes, frame: bytearray) -> None:
    """Write the second 20 data bytes of a data full-rate frame."""
    _require_data(data, 20)
    _scatter(frame, 9, 9, _encode_block(data, _INTERLEAVE_9_20, 20))