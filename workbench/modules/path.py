"""Emulated ``path`` module: POSIX-style string arithmetic on virtual paths.

No normalization of ``.``/``..`` segments is performed; every operation is
plain string splitting on ``/`` and ``.``.
"""

from __future__ import annotations

import re

from workbench.modules.base import BuiltinModule

_REPEATED_SEPARATORS = re.compile(r"/+")


class PathModule(BuiltinModule):
    """join/resolve/dirname/basename/extname over ``/``-separated strings."""

    name = "path"
    sep = "/"
    delimiter = ":"

    def __init__(self, working_directory: str = "/workspace") -> None:
        object.__setattr__(self, "_cwd", working_directory)

    def join(self, *paths: str) -> str:
        """Concatenate segments, collapse repeated separators, drop a trailing one.

        >>> PathModule().join("/a/", "/b")
        '/a/b'
        """
        joined = _REPEATED_SEPARATORS.sub("/", "/".join(paths))
        if joined.endswith("/"):
            joined = joined[:-1]
        return joined or "/"

    def resolve(self, *paths: str) -> str:
        """Fold segments left to right from the virtual working directory.

        An absolute segment replaces everything resolved so far.

        >>> PathModule().resolve("/a", "/b")
        '/b'
        """
        resolved = self._cwd
        for segment in paths:
            if segment.startswith("/"):
                resolved = segment
            else:
                resolved = self.join(resolved, segment)
        return resolved

    def dirname(self, path: str) -> str:
        return "/".join(path.split("/")[:-1]) or "/"

    def basename(self, path: str, ext: str | None = None) -> str:
        name = path.split("/")[-1]
        if ext and name.endswith(ext):
            return name[: -len(ext)]
        return name

    def extname(self, path: str) -> str:
        name = path.split("/")[-1]
        last_dot = name.rfind(".")
        # a leading dot marks a dotfile, not an extension
        return name[last_dot:] if last_dot > 0 else ""

    def isAbsolute(self, path: str) -> bool:  # noqa: N802
        return path.startswith("/")
