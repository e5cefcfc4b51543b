"""Shared plumbing for emulated built-in modules.

Defines the output sink contract, the read-only module base class, the
value rendering used by console/util, and the guard that reports failures of
scheduled callbacks to the sink instead of the event loop.
"""

from __future__ import annotations

import asyncio
import json
import sys
import traceback
from typing import Any, Callable

OutputSink = Callable[[str, str], None]

OUTPUT_LEVELS = ("log", "error", "warn", "info")

# Signals aimed at the host; everything else a script raises is reported
HOST_SIGNALS = (asyncio.CancelledError, KeyboardInterrupt, GeneratorExit)


def default_output(level: str, message: str) -> None:
    """Mirror script output to the process console.

    log/info go to stdout, warn/error to stderr.
    """
    stream = sys.stderr if level in ("error", "warn") else sys.stdout
    print(message, file=stream)


class BuiltinModule:
    """Base class for emulated modules; instances are read-only to scripts."""

    name: str = ""

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError(f"Built-in module '{self.name}' is read-only")

    def __delattr__(self, key: str) -> None:
        raise AttributeError(f"Built-in module '{self.name}' is read-only")

    def __repr__(self) -> str:
        return f"<builtin module '{self.name}'>"


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (bytes, bytearray)):
        return list(obj)
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    if hasattr(obj, "__dict__") and not callable(obj):
        return {k: v for k, v in vars(obj).items() if not k.startswith("_")}
    return str(obj)


def to_json(obj: Any, indent: int | None = None) -> str:
    """Serialize like JSON.stringify, tolerating non-JSON Python values.

    Raises:
        ValueError: On circular structures
    """
    return json.dumps(obj, indent=indent, default=_json_default, ensure_ascii=False)


def pretty(obj: Any, indent: int = 2) -> str:
    """Render one console argument.

    Strings print raw and numbers via str(). ``None`` and booleans print as
    their JSON literals so they read the same alone and inside containers.
    """
    if obj is None or isinstance(obj, bool):
        return json.dumps(obj)
    if isinstance(obj, (str, int, float)):
        return str(obj)
    if callable(obj):
        return repr(obj)
    try:
        return to_json(obj, indent=indent)
    except ValueError:
        return repr(obj)


def describe_failure(error: BaseException) -> str:
    """Failure kind and message, e.g. ``TypeError: bad operand``."""
    return f"{type(error).__name__}: {error}"


def guarded(callback: Callable[..., Any], sink: OutputSink) -> Callable[..., None]:
    """Wrap a scheduled script callback so its failures reach the sink."""

    def run(*args: Any) -> None:
        try:
            callback(*args)
        except HOST_SIGNALS:
            raise
        except BaseException as e:
            sink("error", f"Uncaught {describe_failure(e)}")
            sink("error", "".join(traceback.format_exception(e)).rstrip())

    return run
