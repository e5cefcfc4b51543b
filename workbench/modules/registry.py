"""Fixed catalog of emulated built-in modules behind a require() contract."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Mapping

from workbench.core.errors import ModuleResolutionError
from workbench.modules.base import BuiltinModule, OutputSink, default_output
from workbench.modules.buffer import BufferModule
from workbench.modules.fs import FsModule
from workbench.modules.http import HttpModule
from workbench.modules.path import PathModule
from workbench.modules.thirdparty import LodashModule
from workbench.modules.url import UrlModule
from workbench.modules.util import UtilModule

BUILTIN_MODULE_NAMES = ("fs", "path", "http", "url", "util", "buffer")
THIRD_PARTY_MODULE_NAMES = ("lodash",)

_NODE_PREFIX = "node:"


class BuiltinModuleRegistry:
    """Immutable name -> module catalog.

    Modules that report to the outside world (fs warnings, http listen
    notices) are bound to ``sink`` at construction.

    Example:
        >>> registry = BuiltinModuleRegistry()
        >>> registry.resolve("path").join("/a", "b")
        '/a/b'
        >>> registry.resolve("left-pad")
        Traceback (most recent call last):
        ...
        workbench.core.errors.ModuleResolutionError: Cannot find module 'left-pad'
    """

    def __init__(self, sink: OutputSink = default_output, working_directory: str = "/workspace") -> None:
        builtins: dict[str, BuiltinModule] = {
            "fs": FsModule(sink),
            "path": PathModule(working_directory),
            "http": HttpModule(sink),
            "url": UrlModule(),
            "util": UtilModule(),
            "buffer": BufferModule(),
        }
        self._builtins: Mapping[str, BuiltinModule] = MappingProxyType(builtins)
        self._third_party: Mapping[str, BuiltinModule] = MappingProxyType({"lodash": LodashModule()})

    @property
    def builtins(self) -> Mapping[str, BuiltinModule]:
        return self._builtins

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._builtins) + tuple(self._third_party)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        try:
            self.resolve(name)
        except ModuleResolutionError:
            return False
        return True

    def resolve(self, name: str) -> Any:
        """Look up a module by name (``node:`` prefixed built-ins accepted).

        Raises:
            ModuleResolutionError: If the name is neither built-in nor allow-listed
        """
        if not isinstance(name, str):
            raise ModuleResolutionError(str(name))
        if name in self._builtins:
            return self._builtins[name]
        if name.startswith(_NODE_PREFIX) and name[len(_NODE_PREFIX):] in self._builtins:
            return self._builtins[name[len(_NODE_PREFIX):]]
        if name in self._third_party:
            return self._third_party[name]
        raise ModuleResolutionError(name)

    @property
    def path(self) -> PathModule:
        return self._builtins["path"]  # type: ignore[return-value]

    @property
    def buffer(self) -> BufferModule:
        return self._builtins["buffer"]  # type: ignore[return-value]

    def create_require(self) -> Callable[[str], Any]:
        """Return a require() function bound to this catalog."""

        def require(module_name: str) -> Any:
            return self.resolve(module_name)

        return require
