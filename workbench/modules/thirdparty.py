"""Minimal stand-ins for well-known third-party utility packages.

Only names on this allow-list resolve through require() besides the
built-in catalog.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Iterable

from workbench.modules.base import BuiltinModule

_MISSING = object()


class LodashModule(BuiltinModule):
    name = "lodash"

    def map(self, items: Iterable[Any], fn: Callable[[Any], Any]) -> list[Any]:
        return [fn(item) for item in items]

    def filter(self, items: Iterable[Any], fn: Callable[[Any], Any]) -> list[Any]:
        return [item for item in items if fn(item)]

    def reduce(self, items: Iterable[Any], fn: Callable[[Any, Any], Any], initial: Any = _MISSING) -> Any:
        if initial is _MISSING:
            return functools.reduce(fn, items)
        return functools.reduce(fn, items, initial)
