"""Reading the gateway's ini-style configuration file."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

_LOCALHOST = "127.0.0.1"

_KEY_DELIMITERS = " \t=\r\n"
_VALUE_DELIMITERS = "\r\n"

_SECTIONS = (
    ("[General]", "general"),
    ("[Info]", "info"),
    ("[Log]", "log"),
    ("[APRS]", "aprs"),
    ("[Network]", "network"),
    ("[YSF Network]", "ysf_network"),
    ("[FCS Network]", "fcs_network"),
    ("[GPSD]", "gpsd"),
    ("[Remote Commands]", "remote_commands"),
)

_INT_PREFIX = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(
    r"[ \t\n\v\f\r]*([+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?))"
)


@dataclass
class Config:
    """All settings of the gateway, with their defaults."""

    # General
    callsign: str = ""
    suffix: str = ""
    id: int = 0
    rpt_address: str = ""
    rpt_port: int = 0
    my_address: str = ""
    my_port: int = 0
    wires_x_make_upper: bool = True
    wires_x_command_passthrough: bool = False
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
    ysf_network_parrot_address: str = _LOCALHOST
    ysf_network_parrot_port: int = 0
    ysf_network_ysf2dmr_address: str = _LOCALHOST
    ysf_network_ysf2dmr_port: int = 0
    ysf_network_ysf2nxdn_address: str = _LOCALHOST
    ysf_network_ysf2nxdn_port: int = 0
    ysf_network_ysf2p25_address: str = _LOCALHOST
    ysf_network_ysf2p25_port: int = 0
    ysf_network_ysf_direct_address: str = _LOCALHOST
    ysf_network_ysf_direct_port: int = 0

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


def _atoi(text: str) -> int:
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def _atof(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(1)) if match else 0.0


def _upper(text: str) -> str:
    return "".join(c.upper() if c.isascii() else c for c in text)


def _flag(text: str) -> bool:
    return _atoi(text) == 1


def _unsigned(text: str) -> int:
    return _atoi(text) & 0xFFFFFFFF


def _port(text: str) -> int:
    return _atoi(text) & 0xFFFF


Converter = Callable[[str], object]

_KEYS: dict[str, dict[str, tuple[str, Converter]]] = {
    "general": {
        "Callsign": ("callsign", _upper),
        "Suffix": ("suffix", _upper),
        "Id": ("id", _unsigned),
        "RptAddress": ("rpt_address", str),
        "RptPort": ("rpt_port", _port),
        "LocalAddress": ("my_address", str),
        "LocalPort": ("my_port", _port),
        "WiresXMakeUpper": ("wires_x_make_upper", _flag),
        "WiresXCommandPassthrough": ("wires_x_command_passthrough", _flag),
        "Debug": ("debug", _flag),
        "Daemon": ("daemon", _flag),
    },
    "info": {
        "TXFrequency": ("tx_frequency", _unsigned),
        "RXFrequency": ("rx_frequency", _unsigned),
        "Power": ("power", _unsigned),
        "Latitude": ("latitude", _atof),
        "Longitude": ("longitude", _atof),
        "Height": ("height", _atoi),
        "Name": ("name", str),
        "Description": ("description", str),
    },
    "log": {
        "FilePath": ("log_file_path", str),
        "FileRoot": ("log_file_root", str),
        "FileLevel": ("log_file_level", _unsigned),
        "DisplayLevel": ("log_display_level", _unsigned),
        "FileRotate": ("log_file_rotate", _flag),
    },
    "aprs": {
        "Enable": ("aprs_enabled", _flag),
        "Address": ("aprs_address", str),
        "Port": ("aprs_port", _port),
        "Suffix": ("aprs_suffix", str),
        "Description": ("aprs_description", str),
        "Symbol": ("aprs_symbol", str),
    },
    "network": {
        "Startup": ("network_startup", str),
        "Options": ("network_options", str),
        "InactivityTimeout": ("network_inactivity_timeout", _unsigned),
        "Revert": ("network_revert", _flag),
        "Debug": ("network_debug", _flag),
    },
    "ysf_network": {
        "Enable": ("ysf_network_enabled", _flag),
        "Port": ("ysf_network_port", _port),
        "Hosts": ("ysf_network_hosts", str),
        "ReloadTime": ("ysf_network_reload_time", _unsigned),
        "ParrotAddress": ("ysf_network_parrot_address", str),
        "ParrotPort": ("ysf_network_parrot_port", _port),
        "YSF2DMRAddress": ("ysf_network_ysf2dmr_address", str),
        "YSF2DMRPort": ("ysf_network_ysf2dmr_port", _port),
        "YSF2NXDNAddress": ("ysf_network_ysf2nxdn_address", str),
        "YSF2NXDNPort": ("ysf_network_ysf2nxdn_port", _port),
        "YSF2P25Address": ("ysf_network_ysf2p25_address", str),
        "YSF2P25Port": ("ysf_network_ysf2p25_port", _port),
        "YSFDirectAddress": ("ysf_network_ysf_direct_address", str),
        "YSFDirectPort": ("ysf_network_ysf_direct_port", _port),
    },
    "fcs_network": {
        "Enable": ("fcs_network_enabled", _flag),
        "Rooms": ("fcs_network_file", str),
        "Port": ("fcs_network_port", _port),
    },
    "gpsd": {
        "Enable": ("gpsd_enabled", _flag),
        "Address": ("gpsd_address", str),
        "Port": ("gpsd_port", str),
    },
    "remote_commands": {
        "Enable": ("remote_commands_enabled", _flag),
        "Port": ("remote_commands_port", _port),
    },
}


def _section_of(line: str) -> str | None:
    for header, section in _SECTIONS:
        if line.startswith(header):
            return section
    return None


def _split_entry(line: str) -> tuple[str, str] | None:
    """Split a line into key and raw value the way the file format expects.

    The key ends at the first space, tab or ``=``; the value is everything
    after that single delimiter up to the end of the line.
    """
    start = 0
    while start < len(line) and line[start] in _KEY_DELIMITERS:
        start += 1
    if start >= len(line):
        return None
    end = start
    while end < len(line) and line[end] not in _KEY_DELIMITERS:
        end += 1
    key = line[start:end]

    rest = line[end + 1:]
    begin = 0
    while begin < len(rest) and rest[begin] in _VALUE_DELIMITERS:
        begin += 1
    if begin >= len(rest):
        return None
    finish = begin
    while finish < len(rest) and rest[finish] not in _VALUE_DELIMITERS:
        finish += 1
    return key, rest[begin:finish]


def _clean_value(value: str) -> str:
    if len(value) > 1 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    hash_at = value.find("#")
    if hash_at >= 0:
        value = value[:hash_at]
    return value.rstrip(" \t")


def parse_config(lines: Iterable[str]) -> Config:
    """Build a Config from the lines of an ini file."""
    config = Config()
    section: str | None = None

    for line in lines:
        if line.startswith("#"):
            continue
        if line.startswith("["):
            section = _section_of(line)
            continue

        entry = _split_entry(line)
        if entry is None:
            continue
        key, value = entry
        value = _clean_value(value)

        if section is None:
            continue
        target = _KEYS[section].get(key)
        if target is None:
            continue
        attribute, convert = target
        setattr(config, attribute, convert(value))

    return config


def load_config(path: str | Path) -> Config:
    """Read and parse the configuration file at ``path``.

    Raises OSError when the file cannot be opened.
    """
    with Path(path).open("r", encoding="utf-8", errors="replace") as handle:
        return parse_config(handle)