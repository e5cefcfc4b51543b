"""Globals synthesized for sandboxed scripts.

Builds the console, process, timer and module-record objects a script
receives as parameters, and the closed set of language builtins it may use.
Everything here talks to the outside world only through the output sink and
the running event loop.
"""

from __future__ import annotations

import asyncio
import builtins
from types import SimpleNamespace
from typing import Any, Callable

from workbench.modules.base import OutputSink, guarded, pretty, to_json

# Language builtins visible to scripts. Anything not listed here (open,
# __import__, eval, exec, compile, globals, input, exit, ...) is unresolvable.
SAFE_BUILTIN_NAMES = (
    "abs", "all", "any", "ascii", "bin", "bool", "bytearray", "bytes",
    "callable", "chr", "dict", "divmod", "enumerate", "filter", "float",
    "format", "frozenset", "getattr", "hasattr", "hash", "hex", "id", "int",
    "isinstance", "issubclass", "iter", "len", "list", "map", "max", "min",
    "next", "object", "oct", "ord", "pow", "property", "range", "repr",
    "reversed", "round", "set", "setattr", "slice", "sorted", "staticmethod",
    "classmethod", "str", "sum", "super", "tuple", "type", "zip",
    "__build_class__",
    "ArithmeticError", "AssertionError", "AttributeError", "Exception",
    "ImportError", "IndexError", "KeyError", "LookupError",
    "ModuleNotFoundError", "NameError", "NotImplementedError", "OSError",
    "RuntimeError", "StopAsyncIteration", "StopIteration", "TypeError",
    "ValueError", "ZeroDivisionError",
)


def safe_builtins(print_function: Callable[..., None]) -> dict[str, Any]:
    """Return the builtins mapping for one execution, with print() rerouted."""
    allowed = {name: getattr(builtins, name) for name in SAFE_BUILTIN_NAMES}
    allowed["print"] = print_function
    return allowed


def format_args(args: tuple[Any, ...]) -> str:
    """Space-join console arguments, pretty-printing containers and objects."""
    return " ".join(pretty(arg) for arg in args)


def format_table(data: Any) -> str:
    if isinstance(data, (list, tuple)):
        return "\n".join(f"{index}: {_compact(item)}" for index, item in enumerate(data))
    return pretty(data)


def _compact(item: Any) -> str:
    try:
        return to_json(item)
    except ValueError:
        return repr(item)


class Console:
    """``console`` global: every method routes to the output sink."""

    def __init__(self, sink: OutputSink) -> None:
        self._sink = sink

    def log(self, *args: Any) -> None:
        self._sink("log", format_args(args))

    def error(self, *args: Any) -> None:
        self._sink("error", format_args(args))

    def warn(self, *args: Any) -> None:
        self._sink("warn", format_args(args))

    def info(self, *args: Any) -> None:
        self._sink("info", format_args(args))

    debug = log

    def dir(self, obj: Any) -> None:
        self._sink("log", pretty(obj))

    def table(self, data: Any) -> None:
        self._sink("log", format_table(data))


class Process:
    """``process`` global with a static identity and a mutable env mapping.

    exit() only reports; it never stops the script or the host.
    """

    def __init__(
        self,
        sink: OutputSink,
        argv: list[str],
        env: dict[str, str],
        working_directory: str,
        version: str,
        platform: str,
    ) -> None:
        self._sink = sink
        self._cwd = working_directory
        self.argv = list(argv)
        self.env = dict(env)
        self.version = version
        self.platform = platform
        self.exitCode: int | None = None  # noqa: N815

    def cwd(self) -> str:
        return self._cwd

    def exit(self, code: int = 0) -> None:
        self.exitCode = code
        self._sink("info", f"Process exited with code {code}")


class IntervalHandle:
    """Repeating timer built from one-shot ``loop.call_later`` handles."""

    def __init__(self, loop: asyncio.AbstractEventLoop, delay: float, callback: Callable[..., None], args: tuple[Any, ...]) -> None:
        self._loop = loop
        self._delay = delay
        self._callback = callback
        self._args = args
        self._cancelled = False
        self._handle: asyncio.TimerHandle | None = None
        self._schedule()

    def _schedule(self) -> None:
        self._handle = self._loop.call_later(self._delay, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._callback(*self._args)
        if not self._cancelled:
            self._schedule()

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()

    def cancelled(self) -> bool:
        return self._cancelled


class Timers:
    """Timer globals delegating to the running event loop.

    Delays are in milliseconds. Callback failures are reported to the sink
    as uncaught errors; an interval keeps running after a failing tick.
    """

    def __init__(self, sink: OutputSink) -> None:
        self._sink = sink

    def setTimeout(self, callback: Callable[..., Any], delay: float = 0, *args: Any) -> asyncio.TimerHandle:  # noqa: N802
        loop = asyncio.get_running_loop()
        return loop.call_later(max(delay or 0, 0) / 1000, guarded(callback, self._sink), *args)

    def setInterval(self, callback: Callable[..., Any], delay: float = 0, *args: Any) -> IntervalHandle:  # noqa: N802
        loop = asyncio.get_running_loop()
        return IntervalHandle(loop, max(delay or 0, 1) / 1000, guarded(callback, self._sink), args)

    def setImmediate(self, callback: Callable[..., Any], *args: Any) -> asyncio.Handle:  # noqa: N802
        loop = asyncio.get_running_loop()
        return loop.call_soon(guarded(callback, self._sink), *args)

    @staticmethod
    def clear(handle: Any) -> None:
        if handle is not None and hasattr(handle, "cancel"):
            handle.cancel()

    def bindings(self) -> dict[str, Callable[..., Any]]:
        return {
            "setTimeout": self.setTimeout,
            "setInterval": self.setInterval,
            "clearTimeout": self.clear,
            "clearInterval": self.clear,
            "setImmediate": self.setImmediate,
            "clearImmediate": self.clear,
        }


class ModuleRecord:
    """Per-execution ``module`` object; ``module.exports`` starts empty."""

    def __init__(self, filename: str) -> None:
        self.exports: Any = SimpleNamespace()
        self.filename = filename
        self.id = filename
        self.loaded = False

    def __repr__(self) -> str:
        return f"ModuleRecord(id={self.id!r}, exports={self.exports!r})"
