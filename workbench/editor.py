"""Content cache and editing session over file capability handles.

ContentCache keeps the last-known text of each file keyed by handle identity,
so repeated opens skip the host and the editing surface never needs a second
source of truth. EditorSession tracks the single active EditableFile.

Host failures are logged and absorbed: reads degrade to "" and writes return
False without touching the cache.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from workbench.core.errors import HostIOError
from workbench.core.logging import WorkbenchLogger
from workbench.core.models import EditableFile, HandleKind

if TYPE_CHECKING:
    from workbench.core.capabilities import FileHandle
    from workbench.tree import TreeNode

_HOST_ERRORS = (HostIOError, OSError)


class ContentCache:
    """Text content per file handle, last writer wins."""

    def __init__(self, logger: WorkbenchLogger | None = None) -> None:
        self.logger = logger if logger is not None else WorkbenchLogger()
        self._entries: dict[str, str] = {}

    def __contains__(self, handle: FileHandle) -> bool:
        return handle.key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, handle: FileHandle) -> str | None:
        return self._entries.get(handle.key)

    def put(self, handle: FileHandle, text: str) -> None:
        self._entries[handle.key] = text

    def clear(self) -> None:
        self._entries.clear()

    async def read(self, handle: FileHandle) -> str:
        """Return the file's text, from the cache when possible.

        Never raises: a host read failure is logged and yields "".
        """
        cached = self._entries.get(handle.key)
        if cached is not None:
            self.logger.log_file_operation("read", handle.name, cached=True, size=len(cached))
            return cached

        try:
            data = await handle.read_bytes()
        except _HOST_ERRORS as e:
            self.logger.log_host_io_error("read", handle.name, e)
            return ""

        text = data.decode("utf-8", errors="replace")
        self._entries[handle.key] = text
        self.logger.log_file_operation("read", handle.name, cached=False, size=len(data))
        return text

    async def write(self, handle: FileHandle, text: str) -> bool:
        """Replace the file's content with ``text``.

        The cache entry is only updated after the host confirms the close.

        Returns:
            True on success, False if any host step failed
        """
        data = text.encode("utf-8")
        try:
            stream = await handle.open_for_exclusive_write()
        except _HOST_ERRORS as e:
            self.logger.log_host_io_error("write", handle.name, e)
            return False

        try:
            await stream.write(data)
        except _HOST_ERRORS as e:
            self.logger.log_host_io_error("write", handle.name, e)
            try:
                await stream.abort()
            except _HOST_ERRORS as abort_error:
                self.logger.log_host_io_error("abort", handle.name, abort_error)
            return False

        try:
            await stream.close()
        except _HOST_ERRORS as e:
            self.logger.log_host_io_error("write", handle.name, e)
            return False

        self._entries[handle.key] = text
        self.logger.log_file_operation("write", handle.name, size=len(data))
        return True


class EditorSession:
    """The active editable file and its coupling to the content cache.

    Attributes:
        cache: ContentCache shared with any other reader of the same handles
        current_file: Active EditableFile, or None
    """

    def __init__(self, cache: ContentCache | None = None, logger: WorkbenchLogger | None = None) -> None:
        self.logger = logger if logger is not None else WorkbenchLogger()
        self.cache = cache if cache is not None else ContentCache(self.logger)
        self.current_file: EditableFile | None = None

    @property
    def content(self) -> str:
        """Current editor text ("" when no file is open)."""
        return self.current_file.content if self.current_file is not None else ""

    async def open(self, node: TreeNode) -> EditableFile | None:
        """Make a browsing-tree file node the active file.

        Directories are not opened; the call returns None and leaves the
        active file unchanged.
        """
        if node.kind is not HandleKind.FILE:
            return None

        content = await self.cache.read(node.handle)
        self.current_file = EditableFile(
            id=node.id,
            name=node.name,
            path=node.path,
            kind=node.kind,
            content=content,
            modified=False,
            handle=node.handle,
        )
        return self.current_file

    def update_content(self, text: str) -> None:
        """Replace the active file's text in memory and mark it modified."""
        if self.current_file is None:
            return
        self.current_file.content = text
        self.current_file.modified = True
        if self.current_file.handle is not None:
            self.cache.put(self.current_file.handle, text)

    async def save(self) -> bool:
        """Write the active file back to its host handle.

        Returns:
            True if the write was confirmed, False otherwise (including when
            no file is open)
        """
        if self.current_file is None or self.current_file.handle is None:
            return False

        saved = await self.cache.write(self.current_file.handle, self.current_file.content)
        if saved:
            self.current_file.modified = False
        return saved

    def reset(self) -> None:
        """Close the active file and clear every cached content entry."""
        self.current_file = None
        self.cache.clear()
