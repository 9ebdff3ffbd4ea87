"""Link to a YSF reflector over UDP."""

from __future__ import annotations

import enum
import logging
import socket
from collections import deque

from .utils import Timer, log_hex_dump

_log = logging.getLogger(__name__)

_CALLSIGN_LENGTH = 10
_BUFFER_LENGTH = 200
_FRAME_LENGTH = 155


class LinkStatus(enum.Enum):
    """State of a network link."""

    NOT_OPEN = enum.auto()
    NOT_LINKED = enum.auto()
    LINKING = enum.auto()
    LINKED = enum.auto()


def _match(first: tuple, second: tuple) -> bool:
    return tuple(first[:2]) == tuple(second[:2])


class YsfNetwork:
    """Polls a YSF reflector and carries frames to and from it."""

    def __init__(
        self,
        local_port: int,
        name: str,
        address: tuple | None,
        callsign: str,
        static: bool = True,
        debug: bool = False,
        local_address: str = "",
    ) -> None:
        self._local_port = local_port
        self._local_address = local_address
        self._name = name
        self._address = address
        self._static = static
        self._debug = debug
        self._socket: socket.socket | None = None

        node = callsign.encode("latin-1", errors="replace")[:_CALLSIGN_LENGTH]
        node = node.ljust(_CALLSIGN_LENGTH, b" ")
        self._poll = b"YSFP" + node
        self._unlink = b"YSFU" + node

        self._queue: deque[bytes] = deque()
        self._send_poll_timer = Timer(1000, 5)
        self._recv_poll_timer = Timer(1000, 60)
        self._state = LinkStatus.NOT_OPEN

    def description(self, dgid: int) -> str:
        return "YSF: " + self._name

    def dgid(self) -> int:
        return 0

    def status(self) -> LinkStatus:
        return self._state

    def open(self) -> None:
        """Open the socket; raises ``ConnectionError`` or ``OSError`` on failure."""
        if self._address is None:
            _log.error("Unable to resolve the address of the YSF network")
            self._state = LinkStatus.NOT_OPEN
            raise ConnectionError("Unable to resolve the address of the YSF network")

        _log.info("Opening YSF network connection")
        family = socket.AF_INET6 if len(self._address) == 4 else socket.AF_INET
        host = self._local_address or ("::" if family == socket.AF_INET6 else "")
        sock = socket.socket(family, socket.SOCK_DGRAM)
        try:
            sock.bind((host, self._local_port))
            sock.setblocking(False)
        except OSError:
            sock.close()
            self._state = LinkStatus.NOT_OPEN
            raise
        self._socket = sock
        self._state = LinkStatus.NOT_LINKED

    def link(self) -> None:
        if self._state is not LinkStatus.NOT_LINKED:
            return
        self._state = LinkStatus.LINKING
        self._send_poll_timer.start()
        self._recv_poll_timer.start()
        self._write_poll()

    def write(self, dgid: int, data: bytes) -> None:
        """Send a 155 byte frame while linked."""
        if self._state is not LinkStatus.LINKED:
            return
        if len(data) < _FRAME_LENGTH:
            raise ValueError(f"frame must hold {_FRAME_LENGTH} bytes, got {len(data)}")
        frame = bytes(data[:_FRAME_LENGTH])
        self._dump("YSF Network Data Sent", frame)
        self._send(frame)

    def read(self, dgid: int) -> bytes | None:
        """Return the next received data frame, or ``None`` if there is none."""
        return self._queue.popleft() if self._queue else None

    def unlink(self) -> None:
        if self._state is not LinkStatus.LINKED:
            return
        self._send_poll_timer.stop()
        self._recv_poll_timer.stop()
        self._dump("YSF Network Data Sent", self._unlink)
        self._send(self._unlink)
        _log.info("Unlinked from %s", self._name)
        self._state = LinkStatus.NOT_LINKED

    def clock(self, ms: int) -> None:
        """Advance the poll timers and take in one waiting packet."""
        if self._state is LinkStatus.NOT_OPEN:
            return

        self._recv_poll_timer.clock(ms)
        if self._recv_poll_timer.is_running() and self._recv_poll_timer.has_expired():
            if self._static:
                self._state = LinkStatus.LINKING
            else:
                self._state = LinkStatus.NOT_LINKED
                self._send_poll_timer.stop()
            _log.info("Lost link to %s", self._name)
            self._recv_poll_timer.stop()

        self._send_poll_timer.clock(ms)
        if self._send_poll_timer.is_running() and self._send_poll_timer.has_expired():
            self._write_poll()
            self._send_poll_timer.start()

        received = self._receive()
        if received is None or self._address is None:
            return
        data, address = received
        if not _match(address, self._address):
            return

        self._dump("YSF Network Data Received", data)

        if data[:4] == b"YSFP":
            self._recv_poll_timer.start()
            if self._state is LinkStatus.LINKING:
                if self._name == "MMDVM":
                    _log.info("Link successful to %s", self._name)
                else:
                    _log.info("Linked to %s", self._name)
                self._state = LinkStatus.LINKED

        if data[:4] == b"YSFD":
            self._recv_poll_timer.start()
            self._queue.append(data)

    def close(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None
        _log.info("Closing YSF network connection")
        self._state = LinkStatus.NOT_OPEN

    def _write_poll(self) -> None:
        if self._state not in (LinkStatus.LINKING, LinkStatus.LINKED):
            return
        self._dump("YSF Network Data Sent", self._poll)
        self._send(self._poll)

    def _dump(self, title: str, data: bytes) -> None:
        if self._debug:
            log_hex_dump(_log, logging.DEBUG, title, data)

    def _send(self, data: bytes) -> None:
        if self._socket is None or self._address is None:
            return
        try:
            self._socket.sendto(data, self._address)
        except OSError as error:
            _log.error("Error sending to the YSF network: %s", error)

    def _receive(self) -> tuple[bytes, tuple] | None:
        if self._socket is None:
            return None
        try:
            return self._socket.recvfrom(_BUFFER_LENGTH)
        except (BlockingIOError, InterruptedError):
            return None
        except OSError as error:
            _log.error("Error reading from the YSF network: %s", error)
            return None