"""Emulated ``buffer`` module: text/byte conversion and zero-filled buffers.

Buffers are plain ``bytearray`` objects. ``Buffer.from`` is spelled
``Buffer.from_`` because ``from`` is a Python keyword; the keyword name is
still reachable through ``getattr(Buffer, "from")``.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any, Iterable

from workbench.modules.base import BuiltinModule

_ENCODINGS = {
    "utf8": "utf-8",
    "utf-8": "utf-8",
    "ascii": "ascii",
    "latin1": "latin-1",
    "binary": "latin-1",
}


def _normalize(encoding: str) -> str:
    key = encoding.lower()
    if key in _ENCODINGS or key in ("hex", "base64"):
        return key
    raise TypeError(f"Unknown encoding: {encoding}")


def encode(text: str, encoding: str = "utf8") -> bytearray:
    """Encode text to raw bytes."""
    key = _normalize(encoding)
    if key == "hex":
        try:
            return bytearray.fromhex(text)
        except ValueError as e:
            raise TypeError(f"Invalid hex string: {e}") from e
    if key == "base64":
        try:
            return bytearray(base64.b64decode(text, validate=False))
        except binascii.Error as e:
            raise TypeError(f"Invalid base64 string: {e}") from e
    return bytearray(text.encode(_ENCODINGS[key]))


def decode(data: bytes | bytearray, encoding: str = "utf8") -> str:
    """Decode raw bytes to text (invalid UTF-8 becomes U+FFFD)."""
    key = _normalize(encoding)
    if key == "hex":
        return bytes(data).hex()
    if key == "base64":
        return base64.b64encode(bytes(data)).decode("ascii")
    return bytes(data).decode(_ENCODINGS[key], errors="replace")


class BufferModule(BuiltinModule):
    """The ``Buffer`` namespace handed to scripts and exported by ``buffer``."""

    name = "buffer"

    def from_(self, value: str | Iterable[int], encoding: str = "utf8") -> bytearray:
        if isinstance(value, str):
            return encode(value, encoding)
        return bytearray(value)

    def toString(self, buffer: Any, encoding: str = "utf8") -> str:  # noqa: N802
        return decode(buffer, encoding)

    def alloc(self, size: int) -> bytearray:
        if not isinstance(size, int) or isinstance(size, bool) or size < 0:
            raise ValueError(f"The value of \"size\" is out of range: {size!r}")
        return bytearray(size)

    def isBuffer(self, obj: Any) -> bool:  # noqa: N802
        return isinstance(obj, (bytes, bytearray))

    def byteLength(self, text: str, encoding: str = "utf8") -> int:  # noqa: N802
        return len(encode(text, encoding))

    def concat(self, buffers: Iterable[bytes | bytearray]) -> bytearray:
        return bytearray(b"".join(bytes(b) for b in buffers))

    @property
    def Buffer(self) -> BufferModule:  # noqa: N802
        """``require('buffer').Buffer`` is the same namespace."""
        return self


setattr(BufferModule, "from", BufferModule.from_)
