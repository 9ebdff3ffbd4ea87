"""Link to FCS reflectors over UDP."""

from __future__ import annotations

import enum
import logging
import socket
from collections import deque

from .utils import Timer, log_hex_dump

_log = logging.getLogger(__name__)

FCS_PORT = 62500

_VERSION = "MMDVM"
_BUFFER_LENGTH = 200
_INFO_FIELDS_LENGTH = 43
_INFO_LENGTH = 100
_OPTIONS_LENGTH = 50
_DATA_LENGTH = 130
_FRAME_LENGTH = 155
_CLOSE = b"CLOSE      "
_HANDSHAKE_LENGTHS = (7, 10)


class FcsState(enum.Enum):
    """Link state towards an FCS reflector."""

    UNLINKED = enum.auto()
    LINKING = enum.auto()
    LINKED = enum.auto()


def _ascii(text: str) -> bytes:
    return text.encode("latin-1", errors="replace")


def _fixed(text: str, size: int, fill: bytes = b"\0") -> bytes:
    return _ascii(text)[:size].ljust(size, fill)


def _resolve(host: str, port: int) -> tuple[int, tuple] | None:
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
    except (OSError, UnicodeError):
        return None
    if not infos:
        return None
    family, _, _, _, sockaddr = infos[0]
    return family, sockaddr


def _match(first: tuple, second: tuple) -> bool:
    return tuple(first[:2]) == tuple(second[:2])


def _open_socket(family: int, port: int) -> socket.socket:
    sock = socket.socket(family, socket.SOCK_DGRAM)
    try:
        sock.bind(("::" if family == socket.AF_INET6 else "", port))
        sock.setblocking(False)
    except OSError:
        sock.close()
        raise
    return sock


class FcsNetwork:
    """Carries YSF frames to and from an FCS reflector room."""

    def __init__(
        self,
        port: int,
        callsign: str,
        rx_frequency: int,
        tx_frequency: int,
        locator: str,
        id: int,
        debug: bool = False,
    ) -> None:
        self._port = port
        self._debug = debug
        self._socket: socket.socket | None = None
        self._destination: tuple[int, tuple] | None = None
        self._addresses: dict[str, tuple[int, tuple]] = {}

        info = f"{rx_frequency:9d}{tx_frequency:9d}{locator[:6]:<6}{_VERSION:<12}{id:7d}"
        self._info = _ascii(info)[:_INFO_FIELDS_LENGTH].ljust(_INFO_LENGTH, b" ")

        call = _ascii(callsign)
        self._ping = bytearray(b"PING" + call[:6].ljust(6, b" ") + bytes(15))
        self._options = bytearray(b"FCSO" + call[:46].ljust(46, b" "))

        self._opt = ""
        self._reflector = ""
        self._print = ""
        self._queue: deque[bytes] = deque()
        self._n = 0
        self._ping_timer = Timer(1000, 0, 800)
        self._reset_timer = Timer(1000, 1)
        self._state = FcsState.UNLINKED

    @property
    def state(self) -> FcsState:
        return self._state

    def open(self) -> None:
        """Resolve the default reflector and open the socket."""
        _log.info("Resolving FCS999 address")
        entry = _resolve("fcs999.xreflector.net", FCS_PORT)
        if entry is None:
            _log.warning("Unable to lookup the address for FCS999")
            raise ConnectionError("Unable to lookup the address for FCS999")
        self._addresses["FCS999"] = entry

        _log.info("Opening FCS network connection")
        self._socket = _open_socket(entry[0], self._port)

    def set_options(self, options: str) -> None:
        self._opt = options

    def clear_destination(self) -> None:
        self._ping_timer.stop()
        self._reset_timer.stop()
        self._state = FcsState.UNLINKED

    def write(self, data: bytes) -> None:
        """Send a 155 byte YSF network frame to the linked room."""
        if self._state is not FcsState.LINKED:
            return
        if len(data) < _FRAME_LENGTH:
            raise ValueError(f"frame must hold {_FRAME_LENGTH} bytes, got {len(data)}")

        buffer = bytearray(b" " * _DATA_LENGTH)
        buffer[0:120] = data[35:155]
        buffer[120] = data[34]
        buffer[121:129] = _fixed(self._reflector, 8)
        self._dump("FCS Network Data Sent", bytes(buffer))
        self._send(bytes(buffer))

    def write_link(self, reflector: str) -> None:
        """Start linking to ``reflector``; raises ``ConnectionError`` if it is unknown."""
        if self._state is not FcsState.LINKED:
            name = reflector[:6]
            entry = self._addresses.get(name)
            if entry is None:
                entry = _resolve(f"{name}.xreflector.net", FCS_PORT)
                if entry is None:
                    _log.warning("Unknown FCS reflector - %s", name)
                    raise ConnectionError(f"Unknown FCS reflector - {name}")
            self._destination = entry

        self._reflector = reflector
        self._ping[10:18] = _fixed(reflector, 8)
        self._print = reflector[:6] + "-" + reflector[6:]
        self._state = FcsState.LINKING
        self._ping_timer.start()
        self._write_ping()

    def write_unlink(self, count: int = 1) -> None:
        if self._state is not FcsState.LINKED:
            return
        for _ in range(count):
            self._send(_CLOSE)

    def read(self) -> bytes | None:
        """Return the next frame in YSF network form, or ``None`` if there is none."""
        if not self._queue:
            return None
        packet = self._queue.popleft()

        # Pings are passed up so that the gateway's lost-link timer is reset.
        if len(packet) != _DATA_LENGTH:
            return b"YSFP" + _fixed(self._print, 8) + b"  "

        self._reset_timer.start()
        frame = bytearray(b" " * 35) + packet[:120]
        frame[0:4] = b"YSFD"
        frame[4:13] = _fixed(self._print, 9)
        frame[34] = self._n
        self._n = (self._n + 2) & 0xFF
        return bytes(frame)

    def clock(self, ms: int) -> None:
        """Advance the timers and take in one waiting packet."""
        self._ping_timer.clock(ms)
        if self._ping_timer.is_running() and self._ping_timer.has_expired():
            self._write_ping()
            self._ping_timer.start()

        self._reset_timer.clock(ms)
        if self._reset_timer.is_running() and self._reset_timer.has_expired():
            self._n = 0
            self._reset_timer.stop()

        received = self._receive()
        if received is None:
            return
        data, address = received

        if self._state is FcsState.UNLINKED:
            return
        if self._destination is None or not _match(address, self._destination[1]):
            return

        self._dump("FCS Network Data Received", data)

        length = len(data)
        if length == 7 or (length == 10 and self._state is FcsState.LINKING):
            if self._state is FcsState.LINKING:
                _log.info("Linked to %s", self._print)
            self._state = FcsState.LINKED
            self._write_info()
            self._write_options(self._print)

        if length in _HANDSHAKE_LENGTHS or length == _DATA_LENGTH:
            self._queue.append(data)

    def close(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None
        _log.info("Closing FCS network connection")

    def _write_info(self) -> None:
        if self._state is not FcsState.LINKED:
            return
        self._dump("FCS Network Data Sent", self._info)
        self._send(self._info)

    def _write_ping(self) -> None:
        if self._state is FcsState.UNLINKED:
            return
        self._dump("FCS Network Data Sent", bytes(self._ping))
        self._send(bytes(self._ping))

    def _write_options(self, reflector: str) -> None:
        if self._state is not FcsState.LINKED or not self._opt:
            return
        self._options[14:_OPTIONS_LENGTH] = b" " * (_OPTIONS_LENGTH - 14)
        self._options[4:12] = _fixed(reflector[:6] + reflector[7:9], 8)
        opt = _ascii(self._opt)[:_OPTIONS_LENGTH - 12]
        self._options[12:12 + len(opt)] = opt
        self._dump("FCS Network Options Sent", bytes(self._options))
        self._send(bytes(self._options))

    def _dump(self, title: str, data: bytes) -> None:
        if self._debug:
            log_hex_dump(_log, logging.DEBUG, title, data)

    def _send(self, data: bytes) -> None:
        if self._socket is None or self._destination is None:
            return
        try:
            self._socket.sendto(data, self._destination[1])
        except OSError as error:
            _log.error("Error sending to the FCS network: %s", error)

    def _receive(self) -> tuple[bytes, tuple] | None:
        if self._socket is None:
            return None
        try:
            return self._socket.recvfrom(_BUFFER_LENGTH)
        except (BlockingIOError, InterruptedError):
            return None
        except OSError as error:
            _log.error("Error reading from the FCS network: %s", error)
            return None