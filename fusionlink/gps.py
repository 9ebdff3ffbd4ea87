"""Recovery of radio GPS reports from the data channel of voice frames."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .crc import checksum8
from .payload import read_vd_mode1_data, read_vd_mode2_data
from .utils import log_hex_dump

if TYPE_CHECKING:
    from .aprs import AprsWriter
    from .fich import Fich

_log = logging.getLogger(__name__)

_FI_COMMUNICATIONS = 1
_DT_VD_MODE1 = 0
_DT_VD_MODE2 = 2

_SHORT_GPS = b"\x22\x62"
_LONG_GPS = b"\x47\x64"
_END_MARKER = 0x03
_BUFFER_SIZE = 300
_CALLSIGN_LENGTH = 10

_RADIO_NAMES = {
    0x20: "DR-2X",
    0x24: "FT-1D",
    0x25: "FTM-400D",
    0x26: "DR-1X",
    0x28: "FT-2D",
    0x29: "FTM-100D",
    0x31: "FTM-300D",
    0x30: "FT-3D",
    0x33: "FT-5D",
}


def _f32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def radio_name(code: int) -> str:
    """Model name for a radio code, or the code in hex when unknown."""
    return _RADIO_NAMES.get(code, f"0x{code:02X}")


@dataclass(frozen=True)
class GpsPosition:
    """A decoded position: north and east positive."""

    radio: int
    latitude: float
    longitude: float

    @property
    def radio_name(self) -> str:
        return radio_name(self.radio)


def _two_digits(high: int, low: int, max_tens: int, max_units: int, max_value: int) -> int | None:
    tens = high & 0x0F
    units = low & 0x0F
    value = tens * 10 + units
    if tens > max_tens or units > max_units or value > max_value:
        return None
    return value


def _combine(degrees: int, minutes: int, fraction: int, direction: int) -> float:
    frac = _f32(_f32(float(fraction)) * _f32(0.01))
    total_minutes = _f32(minutes + frac)
    value = _f32(degrees + _f32(total_minutes * _f32(1.0 / 60.0)))
    return _f32(value * direction)


def decode_position(buffer: bytes) -> GpsPosition | None:
    """Decode the position held in a GPS data block, or ``None`` if it is malformed."""
    if len(buffer) < 14:
        raise ValueError(f"GPS data needs at least 14 bytes, got {len(buffer)}")

    if any(buffer[i] & 0xF0 not in (0x50, 0x30) for i in range(5, 11)):
        return None

    lat_deg = _two_digits(buffer[5], buffer[6], 9, 9, 89)
    lat_min = _two_digits(buffer[7], buffer[8], 9, 9, 59)
    # Some radios send a units digit of ten here.
    lat_min_frac = _two_digits(buffer[9], buffer[10], 9, 10, 99)
    if lat_deg is None or lat_min is None or lat_min_frac is None:
        return None

    lat_dir = 1 if buffer[8] & 0xF0 == 0x50 else -1

    b = buffer[11]
    if buffer[9] & 0xF0 == 0x50:
        if 0x76 <= b <= 0x7F:
            lon_deg = b - 0x76
        elif 0x6C <= b <= 0x75:
            lon_deg = 100 + (b - 0x6C)
        elif 0x26 <= b <= 0x6B:
            lon_deg = 110 + (b - 0x26)
        else:
            return None
    else:
        if 0x26 <= b <= 0x7F:
            lon_deg = 10 + (b - 0x26)
        else:
            return None

    b = buffer[12]
    if 0x58 <= b <= 0x61:
        lon_min = b - 0x58
    elif 0x26 <= b <= 0x57:
        lon_min = 10 + (b - 0x26)
    else:
        return None

    b = buffer[13]
    if not 0x1C <= b <= 0x7F:
        return None
    lon_min_frac = b - 0x1C

    lon_dir = 1 if buffer[10] & 0xF0 == 0x30 else -1

    return GpsPosition(
        radio=buffer[4],
        latitude=_combine(lat_deg, lat_min, lat_min_frac, lat_dir),
        longitude=_combine(lon_deg, lon_min, lon_min_frac, lon_dir),
    )


class GpsDecoder:
    """Assembles GPS data across the frames of a transmission and reports it once."""

    def __init__(self, writer: AprsWriter) -> None:
        if writer is None:
            raise ValueError("an APRS writer is required")
        self._writer = writer
        self._buffer = bytearray(_BUFFER_SIZE)
        self._sent = False

    def reset(self) -> None:
        """Allow a new report for the next transmission."""
        self._sent = False

    def data(self, source: bytes, frame: bytes, fich: Fich) -> None:
        """Take in one frame heard from ``source``."""
        if self._sent or fich.fi != _FI_COMMUNICATIONS:
            return

        fn, ft = fich.fn, fich.ft
        if fich.dt == _DT_VD_MODE1:
            if fn < 3:
                return
            block = read_vd_mode1_data(frame)
            if block is None:
                return
            offset = (fn - 3) * 20
            self._buffer[offset:offset + 20] = block
            if fn == ft:
                self._complete(source, (fn - 2) * 20)
        elif fich.dt == _DT_VD_MODE2:
            if fn not in (6, 7):
                return
            block = read_vd_mode2_data(frame)
            if block is None:
                return
            offset = (fn - 6) * 10
            self._buffer[offset:offset + 10] = block
            if fn == ft:
                self._complete(source, (fn - 5) * 10)

    def _complete(self, source: bytes, length: int) -> None:
        valid = False
        for i in range(length, 0, -1):
            if self._buffer[i] == _END_MARKER:
                valid = checksum8(self._buffer[:i + 1]) == self._buffer[i + 1]
                break
        if not valid:
            return

        kind = bytes(self._buffer[1:3])
        if kind == _SHORT_GPS:
            log_hex_dump(_log, logging.INFO, "Short GPS data received", bytes(self._buffer[:length]))
            self._transmit(source)
        elif kind == _LONG_GPS:
            log_hex_dump(_log, logging.INFO, "Long GPS data received", bytes(self._buffer[:length]))
            self._transmit(source)

        self._sent = True

    def _transmit(self, source: bytes) -> None:
        if bytes(source[:_CALLSIGN_LENGTH]) == b" " * _CALLSIGN_LENGTH:
            return

        position = decode_position(self._buffer)
        if position is None:
            return

        _log.info(
            "GPS Position from %s of radio=%s lat=%f long=%f",
            bytes(source[:_CALLSIGN_LENGTH]).decode("latin-1"),
            position.radio_name,
            position.latitude,
            position.longitude,
        )
        self._writer.write(
            source, position.radio_name, position.radio, position.latitude, position.longitude
        )
        self._sent = True