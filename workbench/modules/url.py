"""Emulated ``url`` module: strict URL parsing.

Malformed input raises InvalidURLError rather than returning a partial
result. Hierarchical schemes (http, https, ws, wss, ftp) must carry a host.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from workbench.core.errors import InvalidURLError
from workbench.modules.base import BuiltinModule

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")

# Schemes that require an authority component
_HOST_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})

_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}


@dataclass(frozen=True)
class ParsedUrl:
    """Components of a parsed URL, named after the runtime's URL fields.

    ``port`` is "" when absent or equal to the scheme's default port.
    """

    href: str
    protocol: str
    host: str
    hostname: str
    port: str
    pathname: str
    search: str
    query: str
    hash: str


class UrlModule(BuiltinModule):
    name = "url"

    def parse(self, url_string: str) -> ParsedUrl:
        """Parse ``url_string`` into its components.

        Raises:
            InvalidURLError: If the input has no scheme, contains whitespace,
                lacks a required host or carries an invalid port
        """
        if not isinstance(url_string, str):
            raise InvalidURLError(str(url_string))
        text = url_string.strip()
        if not text or not _SCHEME.match(text) or any(ch.isspace() for ch in text):
            raise InvalidURLError(url_string)

        try:
            parts = urlsplit(text)
            port = parts.port
        except ValueError as e:
            raise InvalidURLError(url_string) from e

        scheme = parts.scheme.lower()
        hostname = parts.hostname or ""
        if scheme in _HOST_SCHEMES and not hostname:
            raise InvalidURLError(url_string)

        port_text = "" if port is None or _DEFAULT_PORTS.get(scheme) == port else str(port)
        pathname = parts.path or ("/" if scheme in _HOST_SCHEMES else "")
        return ParsedUrl(
            href=text,
            protocol=f"{scheme}:",
            host=f"{hostname}:{port_text}" if port_text else hostname,
            hostname=hostname,
            port=port_text,
            pathname=pathname,
            search=f"?{parts.query}" if parts.query else "",
            query=parts.query,
            hash=f"#{parts.fragment}" if parts.fragment else "",
        )
