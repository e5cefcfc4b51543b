"""Capability handle abstraction over host-managed files and directories.

Provides the polymorphic handle interface consumed by the tree service and
the content cache, plus two concrete hosts:

- Disk: local filesystem access through pathlib, with blocking calls pushed
  to a worker thread so the event loop keeps running.
- Memory: an in-process tree for tests and ephemeral workspaces, with
  optional failure injection.

Handles are explicitly tagged with their kind at construction. Holders keep
non-owning references: the backing resource may disappear at any time and
every operation may raise HostIOError.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import tempfile
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from workbench.core.errors import HostIOError
from workbench.core.models import HandleKind


class WritableStream(ABC):
    """Exclusive write stream returned by FileHandle.open_for_exclusive_write()."""

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """Append bytes to the pending content."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Commit the pending content to the file."""
        pass

    async def abort(self) -> None:
        """Discard the pending content; the file keeps its old content."""
        return None


class CapabilityHandle(ABC):
    """Opaque reference to one host file or directory.

    Attributes:
        kind: HandleKind.FILE or HandleKind.DIRECTORY
        name: Entry name within its parent directory
    """

    kind: HandleKind

    def __init__(self, name: str) -> None:
        self.name = name

    @property
    def key(self) -> str:
        """Identity used to key per-handle caches."""
        return f"{type(self).__name__}:{id(self)}"

    @property
    def is_directory(self) -> bool:
        return self.kind is HandleKind.DIRECTORY

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class DirectoryHandle(CapabilityHandle):
    """Directory variant: can enumerate its entries."""

    kind = HandleKind.DIRECTORY

    @abstractmethod
    async def list_entries(self) -> list[tuple[str, CapabilityHandle]]:
        """Enumerate ``(name, handle)`` pairs of the directory.

        Raises:
            HostIOError: If the host cannot enumerate the directory
        """
        pass


class FileHandle(CapabilityHandle):
    """File variant: can be read and opened for exclusive write."""

    kind = HandleKind.FILE

    @abstractmethod
    async def read_bytes(self) -> bytes:
        """Read the full file content.

        Raises:
            HostIOError: If the host cannot read the file
        """
        pass

    @abstractmethod
    async def open_for_exclusive_write(self) -> WritableStream:
        """Open a stream that replaces the file content on close.

        Raises:
            HostIOError: If the host refuses the write
        """
        pass


# ---------------------------------------------------------------------------
# Disk host
# ---------------------------------------------------------------------------


class DiskDirectoryHandle(DirectoryHandle):
    """Directory handle backed by a local filesystem path."""

    def __init__(self, path: Path | str, name: str | None = None) -> None:
        path = Path(path)
        super().__init__(name if name is not None else path.name)
        self.path = path

    @property
    def key(self) -> str:
        return f"disk:{self.path.resolve()}"

    def _scan(self) -> list[tuple[str, CapabilityHandle]]:
        entries: list[tuple[str, CapabilityHandle]] = []
        with os.scandir(self.path) as it:
            for entry in it:
                handle: CapabilityHandle
                # directory symlinks stay leaves so link cycles cannot recurse
                if entry.is_dir(follow_symlinks=False):
                    handle = DiskDirectoryHandle(entry.path, entry.name)
                else:
                    handle = DiskFileHandle(entry.path, entry.name)
                entries.append((entry.name, handle))
        # scandir order is arbitrary; hand out a stable enumeration order
        return sorted(entries, key=lambda pair: pair[0])

    async def list_entries(self) -> list[tuple[str, CapabilityHandle]]:
        try:
            return await asyncio.to_thread(self._scan)
        except OSError as e:
            raise HostIOError(f"Cannot list directory '{self.path}': {e}") from e


class _DiskWritableStream(WritableStream):
    """Buffers into a sibling temp file and swaps it in on close.

    A symlinked target is resolved first so the link survives and the file it
    points at receives the content. The old permission bits carry over.
    """

    def __init__(self, target: Path) -> None:
        target = target.resolve()
        self._target = target
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".crswap", dir=target.parent
        )
        self._fd = fd
        self._tmp = Path(tmp_name)
        self._closed = False

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise HostIOError(f"Stream for '{self._target}' is closed")
        try:
            await asyncio.to_thread(os.write, self._fd, data)
        except OSError as e:
            raise HostIOError(f"Cannot write '{self._target}': {e}") from e

    def _commit(self) -> None:
        os.close(self._fd)
        try:
            if self._target.exists():
                shutil.copymode(self._target, self._tmp)
            os.replace(self._tmp, self._target)
        except OSError:
            self._tmp.unlink(missing_ok=True)
            raise

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await asyncio.to_thread(self._commit)
        except OSError as e:
            raise HostIOError(f"Cannot commit '{self._target}': {e}") from e

    def _discard(self) -> None:
        os.close(self._fd)
        self._tmp.unlink(missing_ok=True)

    async def abort(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await asyncio.to_thread(self._discard)
        except OSError as e:
            raise HostIOError(f"Cannot discard pending write to '{self._target}': {e}") from e


class DiskFileHandle(FileHandle):
    """File handle backed by a local filesystem path."""

    def __init__(self, path: Path | str, name: str | None = None) -> None:
        path = Path(path)
        super().__init__(name if name is not None else path.name)
        self.path = path

    @property
    def key(self) -> str:
        return f"disk:{self.path.resolve()}"

    async def read_bytes(self) -> bytes:
        try:
            return await asyncio.to_thread(self.path.read_bytes)
        except OSError as e:
            raise HostIOError(f"Cannot read '{self.path}': {e}") from e

    async def open_for_exclusive_write(self) -> WritableStream:
        try:
            return await asyncio.to_thread(_DiskWritableStream, self.path)
        except OSError as e:
            raise HostIOError(f"Cannot open '{self.path}' for writing: {e}") from e


def open_directory(path: Path | str) -> DiskDirectoryHandle:
    """Create a root directory handle for a local path.

    Raises:
        HostIOError: If the path is not an existing directory
    """
    root = Path(path)
    if not root.is_dir():
        raise HostIOError(f"Not a directory: {root}")
    return DiskDirectoryHandle(root, root.resolve().name)


# ---------------------------------------------------------------------------
# Memory host
# ---------------------------------------------------------------------------


class MemoryDirectoryHandle(DirectoryHandle):
    """In-process directory; entries keep insertion order.

    Attributes:
        fail_listing: When True, list_entries() raises HostIOError
    """

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._entries: dict[str, CapabilityHandle] = {}
        self._id = uuid.uuid4().hex
        self.fail_listing = False
        self.list_calls = 0

    @property
    def key(self) -> str:
        return f"memory:{self._id}"

    def add(self, handle: CapabilityHandle) -> CapabilityHandle:
        self._entries[handle.name] = handle
        return handle

    def add_file(self, name: str, content: str | bytes = b"") -> MemoryFileHandle:
        handle = MemoryFileHandle(name, content)
        self.add(handle)
        return handle

    def add_directory(self, name: str) -> MemoryDirectoryHandle:
        handle = MemoryDirectoryHandle(name)
        self.add(handle)
        return handle

    def remove(self, name: str) -> None:
        self._entries.pop(name, None)

    async def list_entries(self) -> list[tuple[str, CapabilityHandle]]:
        self.list_calls += 1
        if self.fail_listing:
            raise HostIOError(f"Cannot list directory '{self.name}'")
        return list(self._entries.items())

    @classmethod
    def from_mapping(cls, name: str, tree: dict) -> MemoryDirectoryHandle:
        """Build a directory from a nested mapping.

        Values that are dicts become directories; str/bytes values become
        files with that content.
        """
        root = cls(name)
        for child_name, value in tree.items():
            if isinstance(value, dict):
                root.add(cls.from_mapping(child_name, value))
            else:
                root.add_file(child_name, value)
        return root


class _MemoryWritableStream(WritableStream):
    def __init__(self, target: MemoryFileHandle) -> None:
        self._target = target
        self._chunks: list[bytes] = []
        self._closed = False

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise HostIOError(f"Stream for '{self._target.name}' is closed")
        if self._target.fail_write:
            raise HostIOError(f"Cannot write '{self._target.name}'")
        self._chunks.append(bytes(data))

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._target.fail_close:
            raise HostIOError(f"Cannot commit '{self._target.name}'")
        self._target.data = b"".join(self._chunks)

    async def abort(self) -> None:
        self._closed = True
        self._chunks.clear()


class MemoryFileHandle(FileHandle):
    """In-process file.

    Attributes:
        data: Current committed content
        fail_read: When True, read_bytes() raises HostIOError
        fail_write: When True, stream writes raise HostIOError
        fail_close: When True, committing a stream raises HostIOError
        read_calls: Number of read_bytes() calls served
    """

    def __init__(self, name: str, content: str | bytes = b"") -> None:
        super().__init__(name)
        self.data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        self._id = uuid.uuid4().hex
        self.fail_read = False
        self.fail_write = False
        self.fail_close = False
        self.read_calls = 0

    @property
    def key(self) -> str:
        return f"memory:{self._id}"

    async def read_bytes(self) -> bytes:
        self.read_calls += 1
        if self.fail_read:
            raise HostIOError(f"Cannot read '{self.name}'")
        return self.data

    async def open_for_exclusive_write(self) -> WritableStream:
        return _MemoryWritableStream(self)
