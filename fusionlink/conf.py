"""Reading of the gateway's INI-style configuration file."""

from __future__ import annotations

import re
import struct
from collections.abc import Callable
from dataclasses import dataclass, fields
from os import PathLike
from typing import Any

_KEY_DELIMITERS = " \t=\r\n"
_VALUE_DELIMITERS = "\r\n"

_INT_PREFIX = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(
    r"[ \t\n\v\f\r]*([+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?))"
)

_ASCII_UPPER = str.maketrans("abcdefghijklmnopqrstuvwxyz", "ABCDEFGHIJKLMNOPQRSTUVWXYZ")


@dataclass
class Config:
    """Every setting of the gateway, with the defaults used when a key is absent."""

    # General
    callsign: str = ""
    suffix: str = ""
    id: int = 0
    rpt_address: str = ""
    rpt_port: int = 0
    my_address: str = ""
    my_port: int = 0
    wiresx_make_upper: bool = True
    wiresx_command_passthrough: bool = False
    debug: bool = False
    daemon: bool = False

    # Info
    rx_frequency: int = 0
    tx_frequency: int = 0
    power: int = 0
    latitude: float = 0.0
    longitude: float = 0.0
    height: int = 0
    name: str = ""
    description: str = ""

    # Log
    log_display_level: int = 0
    log_file_level: int = 0
    log_file_path: str = ""
    log_file_root: str = ""
    log_file_rotate: bool = True

    # APRS
    aprs_enabled: bool = False
    aprs_address: str = ""
    aprs_port: int = 0
    aprs_suffix: str = ""
    aprs_description: str = ""
    aprs_symbol: str = ""

    # Network
    network_startup: str = ""
    network_options: str = ""
    network_inactivity_timeout: int = 0
    network_revert: bool = False
    network_debug: bool = False

    # YSF Network
    ysf_network_enabled: bool = False
    ysf_network_port: int = 0
    ysf_network_hosts: str = ""
    ysf_network_reload_time: int = 0
    ysf_network_parrot_address: str = "127.0.0.1"
    ysf_network_parrot_port: int = 0
    ysf_network_ysf2dmr_address: str = "127.0.0.1"
    ysf_network_ysf2dmr_port: int = 0
    ysf_network_ysf2nxdn_address: str = "127.0.0.1"
    ysf_network_ysf2nxdn_port: int = 0
    ysf_network_ysf2p25_address: str = "127.0.0.1"
    ysf_network_ysf2p25_port: int = 0

    # FCS Network
    fcs_network_enabled: bool = False
    fcs_network_file: str = ""
    fcs_network_port: int = 0

    # GPSD
    gpsd_enabled: bool = False
    gpsd_address: str = ""
    gpsd_port: str = ""

    # Remote Commands
    remote_commands_enabled: bool = False
    remote_commands_port: int = 6073


def _atoi(value: str) -> int:
    match = _INT_PREFIX.match(value)
    return int(match.group(1)) if match else 0


def _atof(value: str) -> float:
    match = _FLOAT_PREFIX.match(value)
    return float(match.group(1)) if match else 0.0


def _upper(value: str) -> str:
    return value.translate(_ASCII_UPPER)


def _uint(value: str) -> int:
    return _atoi(value) & 0xFFFFFFFF


def _ushort(value: str) -> int:
    return _atoi(value) & 0xFFFF


def _int(value: str) -> int:
    return _atoi(value)


def _flag(value: str) -> bool:
    return _atoi(value) == 1


def _float32(value: str) -> float:
    number = _atof(value)
    try:
        return struct.unpack("f", struct.pack("f", number))[0]
    except OverflowError:
        return float("inf") if number > 0 else float("-inf")


_Converter = Callable[[str], Any]

_SECTIONS: list[tuple[str, dict[str, tuple[str, _Converter]]]] = [
    ("[General]", {
        "Callsign": ("callsign", _upper),
        "Suffix": ("suffix", _upper),
        "Id": ("id", _uint),
        "RptAddress": ("rpt_address", str),
        "RptPort": ("rpt_port", _ushort),
        "LocalAddress": ("my_address", str),
        "LocalPort": ("my_port", _ushort),
        "WiresXMakeUpper": ("wiresx_make_upper", _flag),
        "WiresXCommandPassthrough": ("wiresx_command_passthrough", _flag),
        "Debug": ("debug", _flag),
        "Daemon": ("daemon", _flag),
    }),
    ("[Info]", {
        "TXFrequency": ("tx_frequency", _uint),
        "RXFrequency": ("rx_frequency", _uint),
        "Power": ("power", _uint),
        "Latitude": ("latitude", _float32),
        "Longitude": ("longitude", _float32),
        "Height": ("height", _int),
        "Name": ("name", str),
        "Description": ("description", str),
    }),
    ("[Log]", {
        "FilePath": ("log_file_path", str),
        "FileRoot": ("log_file_root", str),
        "FileLevel": ("log_file_level", _uint),
        "DisplayLevel": ("log_display_level", _uint),
        "FileRotate": ("log_file_rotate", _flag),
    }),
    ("[APRS]", {
        "Enable": ("aprs_enabled", _flag),
        "Address": ("aprs_address", str),
        "Port": ("aprs_port", _ushort),
        "Suffix": ("aprs_suffix", str),
        "Description": ("aprs_description", str),
        "Symbol": ("aprs_symbol", str),
    }),
    ("[Network]", {
        "Startup": ("network_startup", str),
        "Options": ("network_options", str),
        "InactivityTimeout": ("network_inactivity_timeout", _uint),
        "Revert": ("network_revert", _flag),
        "Debug": ("network_debug", _flag),
    }),
    ("[YSF Network]", {
        "Enable": ("ysf_network_enabled", _flag),
        "Port": ("ysf_network_port", _ushort),
        "Hosts": ("ysf_network_hosts", str),
        "ReloadTime": ("ysf_network_reload_time", _uint),
        "ParrotAddress": ("ysf_network_parrot_address", str),
        "ParrotPort": ("ysf_network_parrot_port", _ushort),
        "YSF2DMRAddress": ("ysf_network_ysf2dmr_address", str),
        "YSF2DMRPort": ("ysf_network_ysf2dmr_port", _ushort),
        "YSF2NXDNAddress": ("ysf_network_ysf2nxdn_address", str),
        "YSF2NXDNPort": ("ysf_network_ysf2nxdn_port", _ushort),
        "YSF2P25Address": ("ysf_network_ysf2p25_address", str),
        "YSF2P25Port": ("ysf_network_ysf2p25_port", _ushort),
    }),
    ("[FCS Network]", {
        "Enable": ("fcs_network_enabled", _flag),
        "Rooms": ("fcs_network_file", str),
        "Port": ("fcs_network_port", _ushort),
    }),
    ("[GPSD]", {
        "Enable": ("gpsd_enabled", _flag),
        "Address": ("gpsd_address", str),
        "Port": ("gpsd_port", str),
    }),
    ("[Remote Commands]", {
        "Enable": ("remote_commands_enabled", _flag),
        "Port": ("remote_commands_port", _ushort),
    }),
]

# Every planned field is reachable from exactly the table above.
assert {f for _, keys in _SECTIONS for f, _ in keys.values()} <= {f.name for f in fields(Config)}


def _section_keys(header: str) -> dict[str, tuple[str, _Converter]] | None:
    for prefix, keys in _SECTIONS:
        if header.startswith(prefix):
            return keys
    return None


def _split_line(line: str) -> tuple[str, str] | None:
    """Split a line into its key and raw value, as the tokenizer of the format does."""
    start = 0
    while start < len(line) and line[start] in _KEY_DELIMITERS:
        start += 1
    if start == len(line):
        return None
    end = start
    while end < len(line) and line[end] not in _KEY_DELIMITERS:
        end += 1
    key = line[start:end]

    pos = end + 1
    while pos < len(line) and line[pos] in _VALUE_DELIMITERS:
        pos += 1
    if pos >= len(line):
        return None
    stop = pos
    while stop < len(line) and line[stop] not in _VALUE_DELIMITERS:
        stop += 1
    return key, line[pos:stop]


def _clean_value(value: str) -> str:
    if len(value) > 1 and value[0] == '"' and value[-1] == '"':
        return value[1:-1]
    value = value.split("#", 1)[0]
    return value.rstrip(" \t")


def load_config(path: str | PathLike[str]) -> Config:
    """Read the configuration file at ``path``; raises ``OSError`` if it cannot be opened."""
    config = Config()
    keys: dict[str, tuple[str, _Converter]] | None = None

    with open(path, encoding="utf-8", errors="replace", newline="") as handle:
        for line in handle:
            if line.startswith("#"):
                continue
            if line.startswith("["):
                keys = _section_keys(line)
                continue

            parts = _split_line(line)
            if parts is None:
                continue
            key, raw = parts
            if keys is None or key not in keys:
                continue

            field_name, convert = keys[key]
            setattr(config, field_name, convert(_clean_value(raw)))

    return config