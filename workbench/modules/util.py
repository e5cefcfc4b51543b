"""Emulated ``util`` module: printf-style formatting and JSON inspection."""

from __future__ import annotations

import math
import re
from typing import Any

from workbench.modules.base import BuiltinModule, to_json

_DIRECTIVE = re.compile(r"%[sdj%]")


def _to_number(value: Any) -> str:
    """Render a value the way the runtime's Number() conversion prints it."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        number = value
    else:
        try:
            number = float(str(value).strip() or 0)
        except ValueError:
            return "NaN"
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    return str(int(number)) if number.is_integer() else repr(number)


def _to_json(value: Any) -> str:
    try:
        return to_json(value)
    except ValueError:
        return "[Circular]"


def format(fmt: str, *args: Any) -> str:  # noqa: A001
    """Substitute ``%s``, ``%d`` and ``%j`` directives from ``args``.

    ``%%`` and directives left without a matching argument are copied to the
    output unchanged. Arguments beyond the directives are ignored.

    >>> format("%s has %d items", "cart", 3)
    'cart has 3 items'
    >>> format("%s and %s", "one")
    'one and %s'
    """
    remaining = iter(args)
    consumed = 0

    def substitute(match: re.Match[str]) -> str:
        nonlocal consumed
        directive = match.group(0)
        if directive == "%%" or consumed >= len(args):
            return directive
        value = next(remaining)
        consumed += 1
        if directive == "%s":
            return str(value)
        if directive == "%d":
            return _to_number(value)
        return _to_json(value)

    return _DIRECTIVE.sub(substitute, str(fmt))


class UtilModule(BuiltinModule):
    name = "util"

    def format(self, fmt: str, *args: Any) -> str:
        return format(fmt, *args)

    def inspect(self, obj: Any, depth: int = 2) -> str:
        """Render ``obj`` as JSON indented by ``depth`` spaces."""
        try:
            return to_json(obj, indent=depth or 2)
        except ValueError:
            return repr(obj)
