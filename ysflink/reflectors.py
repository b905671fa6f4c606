"""The list of YSF reflectors read from a hosts file."""

from __future__ import annotations

import logging
import socket
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

Address = Any
Resolver = Callable[[str, int], Optional[Address]]


def resolve_udp(host: str, port: int) -> Address | None:
    """Resolve ``host`` and ``port`` to a UDP socket address, or None."""
    try:
        results = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
    except (socket.gaierror, UnicodeError):
        return None
    if not results:
        return None
    return results[0][4]


@dataclass
class Reflector:
    """One reflector: its id, its name and its resolved network address."""

    id: str
    name: str
    address: Address


class _Tokenizer:
    """Splits a line the way successive delimiter-set scans do."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def next(self, delimiters: str) -> str | None:
        text = self._text
        pos = self._pos
        while pos < len(text) and text[pos] in delimiters:
            pos += 1
        if pos >= len(text):
            self._pos = pos
            return None
        end = pos
        while end < len(text) and text[end] not in delimiters:
            end += 1
        self._pos = end + 1
        return text[pos:end]


def _atoi(text: str) -> int:
    text = text.lstrip()
    sign = 1
    if text[:1] in "+-" and text[:1]:
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    digits = ""
    for c in text:
        if not c.isdigit():
            break
        digits += c
    return sign * int(digits) if digits else 0


class ReflectorList:
    """Reflectors loaded from a semicolon separated hosts file."""

    def __init__(self, hosts_file: str | Path, resolver: Resolver | None = None) -> None:
        self.hosts_file = Path(hosts_file)
        self._resolver = resolver or resolve_udp
        self.reflectors: list[Reflector] = []

    def __len__(self) -> int:
        return len(self.reflectors)

    def __iter__(self):
        return iter(self.reflectors)

    def load(self) -> int:
        """Add the reflectors from the hosts file and return how many are held.

        Lines starting with ``#`` are comments; a line needs six fields,
        ``id;name;description;host;port;rest``. YCS entries are skipped, as are
        hosts that cannot be resolved. A missing file adds nothing.
        """
        try:
            with self.hosts_file.open("r", encoding="utf-8", errors="replace") as handle:
                for line in handle:
                    self._parse_line(line)
        except FileNotFoundError:
            pass

        logger.info("Loaded %u YSF reflectors", len(self.reflectors))
        return len(self.reflectors)

    def _parse_line(self, line: str) -> None:
        if line.startswith("#"):
            return

        tokens = _Tokenizer(line)
        fields = [tokens.next(";\r\n") for _ in range(5)]
        fields.append(tokens.next("\r\n"))
        if any(field is None for field in fields):
            return

        reflector_id, name, _, host, port_text, _ = fields
        if "YCS" in reflector_id or "YCS" in name:
            return

        port = _atoi(port_text) & 0xFFFF
        address = self._resolver(host, port)
        if address is None:
            logger.warning("Unable to resolve the address for %s", host)
            return

        self.reflectors.append(Reflector(reflector_id, name, address))

    def find_by_id(self, reflector_id: str) -> Reflector | None:
        """Return the reflector with this id, or None."""
        for reflector in self.reflectors:
            if reflector.id == reflector_id:
                return reflector
        logger.info("Trying to find non existent YSF reflector with an id of %s", reflector_id)
        return None

    def find_by_name(self, name: str) -> Reflector | None:
        """Return the reflector with this name, or None."""
        for reflector in self.reflectors:
            if reflector.name == name:
                return reflector
        logger.info("Trying to find non existent YSF reflector with a name of %s", name)
        return None