"""Emulated built-in modules exposed to sandboxed scripts through require().

The catalog is fixed: fs, path, http, url, util and buffer, plus a small
allow-list of well-known third-party utility names.
"""

from __future__ import annotations

from .base import OutputSink, default_output
from .registry import BUILTIN_MODULE_NAMES, THIRD_PARTY_MODULE_NAMES, BuiltinModuleRegistry

__all__ = [
    "BUILTIN_MODULE_NAMES",
    "BuiltinModuleRegistry",
    "OutputSink",
    "THIRD_PARTY_MODULE_NAMES",
    "default_output",
]
