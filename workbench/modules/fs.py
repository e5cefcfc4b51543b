"""Emulated ``fs`` module with no backing filesystem.

Sandboxed scripts get no file access: synchronous calls raise
UnsupportedBuiltinError, existsSync() warns and answers False, and the
callback variants deliver an error on the next event-loop tick.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

from workbench.core.errors import UnsupportedBuiltinError
from workbench.modules.base import BuiltinModule, OutputSink, guarded


def _not_implemented(operation: str) -> UnsupportedBuiltinError:
    return UnsupportedBuiltinError(f"{operation} not implemented in sandbox environment")


class FsModule(BuiltinModule):
    name = "fs"

    def __init__(self, sink: OutputSink) -> None:
        object.__setattr__(self, "_sink", sink)

    def readFileSync(self, path: str, encoding: str = "utf8") -> str:  # noqa: N802
        raise _not_implemented("readFileSync")

    def writeFileSync(self, path: str, data: Any, encoding: str = "utf8") -> None:  # noqa: N802
        raise _not_implemented("writeFileSync")

    def existsSync(self, path: str) -> bool:  # noqa: N802
        self._sink("warn", f"fs.existsSync({path}) - returning false (not implemented)")
        return False

    def readFile(self, path: str, *args: Any) -> None:  # noqa: N802
        """``readFile(path, [options], callback)``: callback receives an error."""
        self._fail_later("readFile", args)

    def writeFile(self, path: str, data: Any, *args: Any) -> None:  # noqa: N802
        """``writeFile(path, data, [options], callback)``: callback receives an error."""
        self._fail_later("writeFile", args)

    def _fail_later(self, operation: str, args: tuple[Any, ...]) -> None:
        callback: Callable[..., Any] | None = args[-1] if args and callable(args[-1]) else None
        if callback is None:
            raise TypeError(f'The "callback" argument of fs.{operation} must be a function')
        asyncio.get_running_loop().call_soon(
            guarded(callback, self._sink), _not_implemented(operation)
        )
