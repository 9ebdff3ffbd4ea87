import pytest

from fusionlink import payload

FRAME_LENGTH = 120
OFFSET = 30

DATA20 = bytes(range(0x41, 0x41 + 20))
DATA20_B = b"N0CALL    TEST DATA!"
DATA10 = b"0123456789"


def blank_frame(fill=0x00):
    return bytearray([fill] * FRAME_LENGTH)


def slice_positions(start, width):
    return {
        OFFSET + start + k * 18 + i for k in range(5) for i in range(width)
    }


@pytest.mark.parametrize(
    "writer,reader",
    [
        (payload.write_vd_mode1_data, payload.read_vd_mode1_data),
        (payload.write_voice_fr_mode_data, payload.read_voice_fr_mode_data),
        (payload.write_data_fr_mode_data1, payload.read_data_fr_mode_data1),
        (payload.write_data_fr_mode_data2, payload.read_data_fr_mode_data2),
    ],
)
def test_twenty_byte_round_trip(writer, reader):
    frame = blank_frame()
    writer(DATA20, frame)
    assert reader(bytes(frame)) == DATA20


def test_vd_mode2_round_trip():
    frame = blank_frame()
    payload.write_vd_mode2_data(DATA10, frame)
    assert payload.read_vd_mode2_data(bytes(frame)) == DATA10


def test_header_round_trip():
    frame = blank_frame()
    payload.write_header_data(DATA20 + DATA20_B, frame)
    assert payload.read_header_data(bytes(frame)) == DATA20 + DATA20_B


def test_header_halves_match_data_fr_layout():
    frame = blank_frame()
    payload.write_header_data(DATA20 + DATA20_B, frame)
    assert payload.read_data_fr_mode_data1(frame) == DATA20
    assert payload.read_data_fr_mode_data2(frame) == DATA20_B


def test_vd_mode1_touches_only_its_slices():
    frame = blank_frame(0xA5)
    payload.write_vd_mode1_data(DATA20, frame)
    touched = slice_positions(0, 9)
    untouched = [frame[i] for i in range(FRAME_LENGTH) if i not in touched]
    assert untouched == [0xA5] * (FRAME_LENGTH - len(touched))


def test_vd_mode2_touches_only_its_slices():
    frame = blank_frame(0x5A)
    payload.write_vd_mode2_data(DATA10, frame)
    touched = slice_positions(0, 5)
    untouched = [frame[i] for i in range(FRAME_LENGTH) if i not in touched]
    assert untouched == [0x5A] * (FRAME_LENGTH - len(touched))


def test_data_fr2_leaves_first_half_intact():
    frame = blank_frame()
    payload.write_data_fr_mode_data1(DATA20, frame)
    payload.write_data_fr_mode_data2(DATA20_B, frame)
    assert payload.read_data_fr_mode_data1(frame) == DATA20
    assert payload.read_data_fr_mode_data2(frame) == DATA20_B


def test_voice_fr_occupies_contiguous_block():
    frame = blank_frame(0x77)
    payload.write_voice_fr_mode_data(DATA20, frame)
    assert frame[:OFFSET] == bytearray([0x77] * OFFSET)
    assert frame[OFFSET + 45:] == bytearray([0x77] * (FRAME_LENGTH - OFFSET - 45))


def test_blank_frame_fails_crc():
    frame = bytes(FRAME_LENGTH)
    assert payload.read_vd_mode1_data(frame) is None
    assert payload.read_vd_mode2_data(frame) is None
    assert payload.read_header_data(frame) is None


def test_header_fails_when_one_half_is_missing():
    frame = blank_frame()
    payload.write_data_fr_mode_data1(DATA20, frame)
    assert payload.read_header_data(frame) is None


def test_single_bit_error_is_corrected():
    frame = blank_frame()
    payload.write_vd_mode1_data(DATA20, frame)
    frame[OFFSET + 18 * 2 + 4] ^= 0x10
    assert payload.read_vd_mode1_data(frame) == DATA20


def test_single_bit_error_corrected_in_mode2():
    frame = blank_frame()
    payload.write_vd_mode2_data(DATA10, frame)
    frame[OFFSET + 18 + 2] ^= 0x01
    assert payload.read_vd_mode2_data(frame) == DATA10


def test_write_is_deterministic_for_same_data():
    first = blank_frame()
    second = blank_frame(0xFF)
    payload.write_vd_mode1_data(DATA20, first)
    payload.write_vd_mode1_data(DATA20, second)
    positions = sorted(slice_positions(0, 9))
    assert [first[i] for i in positions] == [second[i] for i in positions]


def test_short_data_is_rejected():
    frame = blank_frame()
    with pytest.raises(ValueError):
        payload.write_vd_mode1_data(b"short", frame)
    with pytest.raises(ValueError):
        payload.write_header_data(DATA20, frame)
    with pytest.raises(ValueError):
        payload.write_vd_mode2_data(b"123", frame)


def test_short_frame_is_rejected():
    with pytest.raises(ValueError):
        payload.read_vd_mode1_data(bytes(50))
    with pytest.raises(ValueError):
        payload.write_voice_fr_mode_data(DATA20, bytearray(40))
    with pytest.raises(ValueError):
        payload.read_data_fr_mode_data2(bytes(100))