"""The list of YSF reflectors read from a hosts file."""

from __future__ import annotations

import logging
import re
import socket
from dataclasses import dataclass
from os import PathLike

_log = logging.getLogger(__name__)

_FIELD_DELIMITERS = ";\r\n"
_LAST_DELIMITERS = "\r\n"
_INT_PREFIX = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")


@dataclass
class Reflector:
    """One reflector: its id, name and resolved socket address."""

    id: str
    name: str
    address: tuple


def _atoi(value: str) -> int:
    match = _INT_PREFIX.match(value)
    return int(match.group(1)) if match else 0


def _split_fields(line: str) -> list[str] | None:
    """Split into six fields; runs of delimiters count as one, as empty fields are skipped."""
    fields = []
    pos = 0
    for delimiters in (_FIELD_DELIMITERS,) * 5 + (_LAST_DELIMITERS,):
        while pos < len(line) and line[pos] in delimiters:
            pos += 1
        if pos >= len(line):
            return None
        end = pos
        while end < len(line) and line[end] not in delimiters:
            end += 1
        fields.append(line[pos:end])
        pos = end + 1
    return fields


def _lookup(host: str, port: int) -> tuple | None:
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
    except (OSError, UnicodeError):
        return None
    if not infos:
        return None
    return infos[0][4]


class ReflectorList:
    """Reflectors loaded from a semicolon separated hosts file."""

    def __init__(self, hosts_file: str | PathLike[str]) -> None:
        self._hosts_file = hosts_file
        self._reflectors: list[Reflector] = []

    def __len__(self) -> int:
        return len(self._reflectors)

    def __iter__(self):
        return iter(self._reflectors)

    def load(self) -> int:
        """Read the hosts file and return how many reflectors are known."""
        try:
            with open(self._hosts_file, encoding="utf-8", errors="replace") as handle:
                for line in handle:
                    self._add_line(line)
        except OSError:
            pass

        _log.info("Loaded %u YSF reflectors", len(self._reflectors))
        return len(self._reflectors)

    def _add_line(self, line: str) -> None:
        if line.startswith("#"):
            return
        fields = _split_fields(line)
        if fields is None:
            return
        ident, name, _, host, port_text, _ = fields
        if "YCS" in ident or "YCS" in name:
            return

        address = _lookup(host, _atoi(port_text) & 0xFFFF)
        if address is None:
            _log.warning("Unable to resolve the address for %s", host)
            return
        self._reflectors.append(Reflector(ident, name, address))

    def find_by_id(self, id: str) -> Reflector | None:
        for reflector in self._reflectors:
            if reflector.id == id:
                return reflector
        _log.info("Trying to find non existent YSF reflector with an id of %s", id)
        return None

    def find_by_name(self, name: str) -> Reflector | None:
        for reflector in self._reflectors:
            if reflector.name == name:
                return reflector
        _log.info("Trying to find non existent YSF reflector with a name of %s", name)
        return None