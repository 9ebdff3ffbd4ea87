import pytest

from fusionlink.fich import Fich


def test_new_fich_is_all_zero():
    fich = Fich()
    assert bytes(fich) == bytes(6)
    assert fich.raw == bytes(4)


def test_raw_requires_four_bytes():
    with pytest.raises(ValueError):
        Fich(b"\x01\x02\x03")


def test_raw_round_trip():
    raw = bytes([0x49, 0x6B, 0x5A, 0x85])
    assert Fich(raw).raw == raw


def test_six_byte_raw_keeps_crc_bytes():
    value = bytes([1, 2, 3, 4, 5, 6])
    fich = Fich(value)
    assert bytes(fich) == value
    assert fich.raw == value[:4]


@pytest.mark.parametrize("name,value", [
    ("fi", 0), ("fi", 1), ("fi", 2), ("fi", 3),
    ("bn", 2), ("bt", 3), ("fn", 5), ("fn", 7),
    ("ft", 6), ("mr", 3), ("dgid", 0x55), ("dgid", 0x7F),
])
def test_field_set_then_get(name, value):
    fich = Fich()
    setattr(fich, name, value)
    assert getattr(fich, name) == value


def test_fields_do_not_disturb_each_other():
    fich = Fich()
    fich.fi = 2
    fich.bn = 1
    fich.bt = 3
    fich.fn = 6
    fich.ft = 7
    fich.mr = 2
    fich.voip = True
    fich.dev = True
    fich.dgid = 42
    assert (fich.fi, fich.bn, fich.bt, fich.fn, fich.ft, fich.mr) == (2, 1, 3, 6, 7, 2)
    assert fich.voip and fich.dev
    assert fich.dgid == 42

    rebuilt = Fich(fich.raw)
    assert (rebuilt.fi, rebuilt.bn, rebuilt.bt, rebuilt.fn, rebuilt.ft) == (2, 1, 3, 6, 7)
    assert rebuilt.mr == 2 and rebuilt.dgid == 42 and rebuilt.voip and rebuilt.dev


def test_setters_mask_out_of_range_values():
    fich = Fich()
    fich.fi = 5
    assert fich.fi == 1
    fich.ft = 0x0F
    assert fich.ft == 7
    assert fich.fn == 0


def test_flags_clear():
    fich = Fich(bytes([0xFF, 0xFF, 0xFF, 0xFF]))
    fich.voip = False
    fich.dev = False
    assert not fich.voip
    assert not fich.dev
    assert fich.mr == 3
    assert fich.dt == 3


def test_dgid_keeps_top_bit():
    fich = Fich(bytes([0, 0, 0, 0x80]))
    fich.dgid = 0x12
    assert fich.raw[3] == 0x92
    assert fich.dgid == 0x12


def test_cm_and_dt_read_from_raw():
    fich = Fich(bytes([0x0C, 0x00, 0x03, 0x00]))
    assert fich.cm == 3
    assert fich.dt == 3
    assert fich.fi == 0


def test_copy_is_independent():
    original = Fich(bytes([0x40, 0x08, 0x00, 0x01]))
    duplicate = original.copy()
    assert duplicate == original
    duplicate.dgid = 9
    assert original.dgid == 1
    assert duplicate != original