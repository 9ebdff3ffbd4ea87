import socket

import pytest

from fusionlink.aprs import AprsWriter, band_name, format_coordinates


@pytest.fixture
def receiver():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    yield sock
    sock.close()


def _writer(port, rpt_suffix="", suffix=""):
    return AprsWriter("N0CALL", rpt_suffix, "127.0.0.1", port, suffix, False)


def test_format_coordinates_zero_widths():
    assert format_coordinates(0.0, 0.0) == ("0000.00N", "00000.00E")


def test_format_coordinates_hemispheres():
    north, east = format_coordinates(51.5, 0.125)
    south, west = format_coordinates(-51.5, -0.125)
    assert north[:-1] == south[:-1]
    assert east[:-1] == west[:-1]
    assert (north[-1], south[-1], east[-1], west[-1]) == ("N", "S", "E", "W")
    assert north == "5130.00N"


@pytest.mark.parametrize(
    "frequency, name",
    [
        (0, "4m"),
        (28000000, "10m"),
        (50000000, "6m"),
        (144000000, "2m"),
        (420000000, "70cm"),
        (1200000000, "23cm/1.2GHz"),
        (143999999, "6m"),
    ],
)
def test_band_name(frequency, name):
    assert band_name(frequency) == name


def test_constructor_rejects_empty_callsign():
    with pytest.raises(ValueError):
        AprsWriter("", "", "127.0.0.1", 14580, "", False)


def test_constructor_rejects_zero_port():
    with pytest.raises(ValueError):
        AprsWriter("N0CALL", "", "127.0.0.1", 0, "", False)


def test_rpt_suffix_appended_to_callsign():
    writer = _writer(14580, rpt_suffix="BX")
    assert writer.callsign == "N0CALL-B"


def test_id_frame_none_without_location():
    writer = _writer(14580)
    writer.set_info(145500000, 144900000, "", "")
    assert writer.id_frame() is None


def test_id_frame_contents():
    writer = _writer(14580, rpt_suffix="B")
    writer.set_info(145500000, 144900000, "Test", "")
    writer.set_static_location(51.5, -0.125, 10)
    frame = writer.id_frame()
    assert frame.startswith("N0CALL-B>APDG03,TCPIP*,qAC,N0CALL-BS:!5130.00ND")
    assert "W&/A=000033" in frame
    assert "2m MMDVM Voice (C4FM) 145.50000MHz -0.6000MHz, Test\r\n" in frame


def test_id_frame_without_frequency():
    writer = _writer(14580)
    writer.set_info(0, 0, "", "/r")
    writer.set_static_location(10.0, 20.0, 0)
    frame = writer.id_frame()
    assert frame.endswith("4m MMDVM Voice (C4FM)\r\n")
    assert ":!1000.00N/" in frame
    assert "E r/A=" not in frame
    assert "Er/A=000000" in frame


def test_position_report_uses_callsign_prefix_and_suffix():
    writer = _writer(14580, suffix="Y")
    report = writer.position_report(b"N0CALL/X  ", "FT-1D", 0x24, 0.0, 0.0)
    assert report.startswith("N0CALL-Y>APDPRS,C4FM*,qAR,N0CALL:!")
    assert report.endswith("[ FT-1D via MMDVM\r\n")


def test_position_report_unknown_radio_symbol():
    writer = _writer(14580)
    report = writer.position_report(b"N0CALL    ", "0x99", 0x99, 1.0, 1.0)
    assert "E- 0x99 via MMDVM" in report


def test_write_sends_report(receiver):
    port = receiver.getsockname()[1]
    writer = _writer(port)
    writer.open()
    try:
        writer.write(b"N0CALL    ", "FT-2D", 0x28, 1.0, -2.0)
        data, _ = receiver.recvfrom(1024)
    finally:
        writer.close()
    expected = writer.position_report(b"N0CALL    ", "FT-2D", 0x28, 1.0, -2.0)
    assert data.decode() == expected


def test_clock_sends_beacon_after_first_minute(receiver):
    port = receiver.getsockname()[1]
    with _writer(port) as writer:
        writer.set_static_location(51.5, -0.125, 10)
        writer.clock(59000)
        writer.clock(1000)
        data, _ = receiver.recvfrom(1024)
        assert data.decode() == writer.id_frame()


def test_clock_before_expiry_sends_nothing(receiver):
    receiver.settimeout(0.2)
    port = receiver.getsockname()[1]
    with _writer(port) as writer:
        writer.set_static_location(51.5, -0.125, 10)
        writer.clock(1000)
        with pytest.raises(TimeoutError):
            receiver.recvfrom(1024)
        assert writer.id_frame().startswith("N0CALL>APDG03,TCPIP*,qAC,N0CALL-S:!5130.00N")