"""Position reports and station beacons sent to an APRS gateway over UDP."""

from __future__ import annotations

import logging
import math
import socket
import struct
from itertools import takewhile

from .utils import Timer

_log = logging.getLogger(__name__)

_CALLSIGN_LENGTH = 10
_CALLSIGN_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")

_FIRST_BEACON_SECS = 60
_BEACON_INTERVAL_SECS = 20 * 60

_RADIO_SYMBOLS = {
    0x24: "[",
    0x28: "[",
    0x30: "[",
    0x33: "[",
    0x25: ">",
    0x29: ">",
    0x31: ">",
    0x20: "r",
    0x26: "r",
}

_BANDS = (
    (1_200_000_000, "23cm/1.2GHz"),
    (420_000_000, "70cm"),
    (144_000_000, "2m"),
    (50_000_000, "6m"),
    (28_000_000, "10m"),
)


def _f32(value: float) -> float:
    """Round ``value`` to single precision."""
    return struct.unpack("f", struct.pack("f", value))[0]


def _degrees_minutes(value: float) -> float:
    magnitude = abs(value)
    degrees = math.floor(magnitude)
    return (magnitude - degrees) * 60.0 + degrees * 100.0


def format_coordinates(latitude: float, longitude: float) -> tuple[str, str]:
    """Return latitude and longitude as APRS ``DDMM.mm`` text with hemisphere letters."""
    lat = f"{_degrees_minutes(latitude):07.2f}{'S' if latitude < 0.0 else 'N'}"
    lon = f"{_degrees_minutes(longitude):08.2f}{'W' if longitude < 0.0 else 'E'}"
    return lat, lon


def band_name(frequency: int) -> str:
    """Name of the amateur band a transmit frequency in hertz falls in."""
    for lower, name in _BANDS:
        if frequency >= lower:
            return name
    return "4m"


def _source_callsign(source: bytes) -> str:
    text = bytes(source[:_CALLSIGN_LENGTH]).decode("latin-1")
    return "".join(takewhile(lambda c: c in _CALLSIGN_CHARS, text))


def _resolve(address: str, port: int) -> tuple[int, tuple] | None:
    try:
        infos = socket.getaddrinfo(address, port, type=socket.SOCK_DGRAM)
    except (socket.gaierror, UnicodeError):
        return None
    if not infos:
        return None
    family, _, _, _, sockaddr = infos[0]
    return family, sockaddr


class AprsWriter:
    """Sends position reports for heard stations and a periodic station beacon."""

    def __init__(
        self,
        callsign: str,
        rpt_suffix: str,
        address: str,
        port: int,
        suffix: str,
        debug: bool = False,
    ) -> None:
        if not callsign:
            raise ValueError("callsign must not be empty")
        if not address:
            raise ValueError("address must not be empty")
        if port <= 0:
            raise ValueError("port must be positive")

        self.callsign = callsign + ("-" + rpt_suffix[0] if rpt_suffix else "")
        self.debug = debug
        self.suffix = suffix
        self.tx_frequency = 0
        self.rx_frequency = 0
        self.desc = ""
        self.symbol = ""
        self.latitude = 0.0
        self.longitude = 0.0
        self.height = 0

        self._id_timer = Timer(1000)
        self._destination = _resolve(address, port)
        self._socket: socket.socket | None = None

    def __enter__(self) -> AprsWriter:
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def set_info(self, tx_frequency: int, rx_frequency: int, desc: str, symbol: str) -> None:
        self.tx_frequency = tx_frequency
        self.rx_frequency = rx_frequency
        self.desc = desc
        self.symbol = symbol

    def set_static_location(self, latitude: float, longitude: float, height: int) -> None:
        self.latitude = _f32(latitude)
        self.longitude = _f32(longitude)
        self.height = height

    def open(self) -> None:
        """Open the socket and arm the beacon timer; raises ``OSError`` on failure."""
        if self._destination is None:
            raise ConnectionError("Unable to lookup the address of the APRS-IS server")
        family, _ = self._destination
        self._socket = socket.socket(family, socket.SOCK_DGRAM)
        _log.info("Opened connection to the APRS Gateway")

        self._id_timer.set_timeout(_FIRST_BEACON_SECS)
        self._id_timer.start()

    def position_report(
        self,
        source: bytes,
        radio_type: str,
        radio: int,
        latitude: float,
        longitude: float,
    ) -> str:
        """The APRS packet reporting a heard station's position."""
        callsign = _source_callsign(source)
        if self.suffix:
            callsign += "-" + self.suffix[0]

        lat, lon = format_coordinates(latitude, longitude)
        symbol = _RADIO_SYMBOLS.get(radio, "-")
        return (
            f"{callsign}>APDPRS,C4FM*,qAR,{self.callsign}:!{lat}/{lon}{symbol} "
            f"{radio_type} via MMDVM\r\n"
        )

    def _description(self) -> str:
        extra = ", " + self.desc if self.desc else ""
        if self.tx_frequency == 0:
            return f"MMDVM Voice (C4FM){extra}"
        offset = _f32(_f32(float(self.rx_frequency - self.tx_frequency)) / 1_000_000.0)
        sign = "-" if offset < 0.0 else "+"
        return (
            f"MMDVM Voice (C4FM) {self.tx_frequency / 1_000_000.0:.5f}MHz "
            f"{sign}{abs(offset):.4f}MHz{extra}"
        )

    def id_frame(self) -> str | None:
        """The station beacon, or ``None`` when no location has been set."""
        if self.latitude == 0.0 and self.longitude == 0.0:
            return None

        lat, lon = format_coordinates(self.latitude, self.longitude)
        server = self.callsign + ("S" if "-" in self.callsign else "-S")
        symbol = self.symbol or "D&"
        table = symbol[0]
        code = symbol[1] if len(symbol) > 1 else "\0"
        altitude = _f32(_f32(float(self.height)) * _f32(3.28))

        output = (
            f"{self.callsign}>APDG03,TCPIP*,qAC,{server}:!{lat}{table}{lon}{code}"
            f"/A={altitude:06.0f}{band_name(self.tx_frequency)} {self._description()}\r\n"
        )
        # A one-character symbol leaves a terminator in the packet, ending it there.
        return output.split("\0", 1)[0]

    def _send(self, text: str) -> None:
        if self._socket is None or self._destination is None:
            return
        if self.debug:
            _log.debug("APRS ==> %s", text)
        self._socket.sendto(text.encode("utf-8"), self._destination[1])

    def write(
        self,
        source: bytes,
        radio_type: str,
        radio: int,
        latitude: float,
        longitude: float,
    ) -> None:
        """Send a position report for ``source``."""
        self._send(self.position_report(source, radio_type, radio, latitude, longitude))

    def clock(self, ms: int) -> None:
        """Advance the beacon timer and send the beacon when it expires."""
        self._id_timer.clock(ms)
        if self._id_timer.has_expired():
            frame = self.id_frame()
            if frame is not None:
                self._send(frame)
            self._id_timer.set_timeout(_BEACON_INTERVAL_SECS)
            self._id_timer.start()

    def close(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None