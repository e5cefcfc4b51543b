"""Directory tree service with a browsing projection and a lookup projection.

Turns a root DirectoryHandle into two independently owned trees:

- Browsing projection: one level at a time, filtered by ExplorerFilterConfig,
  sorted directories-first. Directories start with no children and are
  filled in by expand().
- Lookup projection: the whole subtree built eagerly with no filtering, for
  terminal-style name/extension/path queries.

Neither projection is derived from the other. Host enumeration failures are
logged and degrade to an empty level; they never propagate.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable

from workbench.core.errors import HostIOError
from workbench.core.logging import WorkbenchLogger
from workbench.core.models import ExplorerFilterConfig, HandleKind

if TYPE_CHECKING:
    from workbench.core.capabilities import CapabilityHandle, DirectoryHandle

# Dotfiles that stay visible even when hidden files are filtered out
ALWAYS_VISIBLE_DOTFILES = (".env", ".gitignore", ".eslintrc", ".prettierrc", ".vscode")

# Build/output directories that are never shown in the browsing projection
ALWAYS_HIDDEN_DIRECTORIES = frozenset(
    {"dist", "build", ".next", ".nuxt", "coverage", ".nyc_output"}
)

_HOST_ERRORS = (HostIOError, OSError)


@dataclass
class TreeNode:
    """Browsing-projection node.

    ``children`` is a list for directories (empty until expanded) and None
    for files. ``path`` is the ``/``-joined ancestor chain.
    """

    id: str
    name: str
    kind: HandleKind
    path: str
    handle: Any = field(repr=False, compare=False)
    children: list[TreeNode] | None = None
    expanded: bool = False

    @property
    def is_directory(self) -> bool:
        return self.kind is HandleKind.DIRECTORY


@dataclass
class TerminalTreeNode:
    """Lookup-projection node, built eagerly for the full subtree."""

    name: str
    handle: Any = field(repr=False, compare=False)
    is_directory: bool
    children: list[TerminalTreeNode] = field(default_factory=list)


def should_skip(name: str, config: ExplorerFilterConfig) -> bool:
    """Decide whether an entry is hidden from the browsing projection.

    Pure: the verdict depends only on ``name`` and ``config``.
    """
    if name.startswith(".") and not config.show_hidden_files:
        if not name.startswith(ALWAYS_VISIBLE_DOTFILES):
            return True

    if name == "node_modules" and not config.show_node_modules:
        return True

    if name == ".git" and not config.show_git_files:
        return True

    return name in ALWAYS_HIDDEN_DIRECTORIES


def sort_key(is_directory: bool, name: str) -> tuple[int, str, str]:
    """Directories first, then case-insensitive name order.

    Names equal up to case put the lowercase spelling first.
    """
    return (0 if is_directory else 1, name.casefold(), name.swapcase())


class DirectoryTreeService:
    """Builds, caches and serves the two tree projections of a root directory.

    Attributes:
        config: Current explorer filter settings (browsing projection only)
        root: Selected root directory handle, or None
        file_tree: Top level of the browsing projection
        terminal_tree: Root node of the lookup projection, or None
    """

    def __init__(
        self,
        config: ExplorerFilterConfig | None = None,
        script_extensions: Iterable[str] = (".js", ".mjs", ".cjs", ".py"),
        logger: WorkbenchLogger | None = None,
    ) -> None:
        self.config = config if config is not None else ExplorerFilterConfig()
        self.script_extensions = tuple(script_extensions)
        self.logger = logger if logger is not None else WorkbenchLogger()
        self.root: DirectoryHandle | None = None
        self.file_tree: list[TreeNode] = []
        self.terminal_tree: TerminalTreeNode | None = None

    @property
    def has_root(self) -> bool:
        return self.root is not None

    def should_skip(self, name: str) -> bool:
        return should_skip(name, self.config)

    # -- browsing projection ------------------------------------------------

    async def build_tree(self, directory: DirectoryHandle, prefix: str = "") -> list[TreeNode]:
        """Build one filtered, sorted level of the browsing projection.

        Args:
            directory: Directory handle to enumerate
            prefix: Virtual path of ``directory`` ("" for the root)

        Returns:
            Sorted TreeNodes; empty when the host cannot enumerate.
        """
        items: list[TreeNode] = []
        try:
            entries = await directory.list_entries()
        except _HOST_ERRORS as e:
            self.logger.log_host_io_error("list", prefix or directory.name, e)
            entries = []

        for name, handle in entries:
            if self.should_skip(name):
                continue
            is_directory = handle.kind is HandleKind.DIRECTORY
            items.append(
                TreeNode(
                    id=f"{prefix}/{name}",
                    name=name,
                    kind=handle.kind,
                    path=f"{prefix}/{name}" if prefix else name,
                    handle=handle,
                    children=[] if is_directory else None,
                )
            )

        items.sort(key=lambda node: sort_key(node.is_directory, node.name))
        self.logger.log_tree_built("browsing", prefix, len(items))
        return items

    async def expand(self, node: TreeNode) -> None:
        """Toggle a directory node, loading its children on first expansion.

        Files are left untouched. Collapsing keeps the loaded children.
        """
        if not node.is_directory:
            return

        loaded = False
        if not node.children:
            node.children = await self.build_tree(node.handle, node.path)
            loaded = True

        node.expanded = not node.expanded
        self.logger.log_tree_expanded(node.path, node.expanded, loaded)

    async def refresh_file_tree(self) -> list[TreeNode]:
        """Rebuild the browsing projection from the root."""
        if self.root is None:
            self.file_tree = []
        else:
            self.file_tree = await self.build_tree(self.root)
        return self.file_tree

    async def update_filter(self, **changes: Any) -> ExplorerFilterConfig:
        """Merge a partial filter update and rebuild the browsing projection.

        The lookup projection is left untouched.

        Raises:
            PolicyValidationError: If ``changes`` names unknown settings
        """
        self.config = self.config.merged(**changes)
        self.logger.log_filter_updated(self.config)
        if self.root is not None:
            await self.refresh_file_tree()
        return self.config

    # -- lookup projection --------------------------------------------------

    async def build_terminal_tree(self, directory: DirectoryHandle) -> TerminalTreeNode:
        """Build the full unfiltered subtree under ``directory``."""
        return TerminalTreeNode(
            name=directory.name,
            handle=directory,
            is_directory=True,
            children=await self._terminal_children(directory, directory.name),
        )

    async def _terminal_children(
        self, directory: DirectoryHandle, path: str
    ) -> list[TerminalTreeNode]:
        try:
            entries = await directory.list_entries()
        except _HOST_ERRORS as e:
            self.logger.log_host_io_error("list", path, e)
            return []

        async def build_child(name: str, handle: CapabilityHandle) -> TerminalTreeNode:
            if handle.kind is HandleKind.DIRECTORY:
                children = await self._terminal_children(handle, f"{path}/{name}")  # type: ignore[arg-type]
                return TerminalTreeNode(name=name, handle=handle, is_directory=True, children=children)
            return TerminalTreeNode(name=name, handle=handle, is_directory=False)

        # gather keeps enumeration order regardless of completion order
        children = await asyncio.gather(*(build_child(name, handle) for name, handle in entries))
        self.logger.log_tree_built("lookup", path, len(children))
        return list(children)

    def find_by_name(self, name: str) -> TerminalTreeNode | None:
        """Return the first file node named ``name`` in depth-first order."""
        if self.terminal_tree is None:
            return None
        return _find_file(self.terminal_tree.children, name)

    def list_matching_extensions(self, extensions: Iterable[str] | None = None) -> list[str]:
        """Collect file names ending in any of ``extensions``, in traversal order."""
        if self.terminal_tree is None:
            return []
        if isinstance(extensions, str):
            extensions = (extensions,)
        suffixes = tuple(extensions) if extensions is not None else self.script_extensions
        matches: list[str] = []
        _collect_matching(self.terminal_tree.children, suffixes, matches)
        return matches

    def list_directory(self, path: str = "") -> list[TerminalTreeNode]:
        """Return the children of the directory at ``path`` ("" is the root).

        Unresolvable paths yield an empty list.
        """
        if self.terminal_tree is None:
            return []
        node = self.terminal_tree
        for segment in (part for part in path.split("/") if part):
            match = next(
                (child for child in node.children if child.is_directory and child.name == segment),
                None,
            )
            if match is None:
                return []
            node = match
        return list(node.children)

    # -- lifecycle ----------------------------------------------------------

    async def set_root(self, directory: DirectoryHandle) -> None:
        """Select a new root and build both projections from scratch."""
        self.root = directory
        self.logger.log_root_selected(directory.name)
        await self.load()

    async def load(self) -> None:
        """Discard and rebuild both projections from the current root."""
        if self.root is None:
            self.file_tree = []
            self.terminal_tree = None
            return
        self.file_tree, self.terminal_tree = await asyncio.gather(
            self.build_tree(self.root),
            self.build_terminal_tree(self.root),
        )

    def reset(self) -> None:
        """Drop the root and both projections."""
        self.root = None
        self.file_tree = []
        self.terminal_tree = None


def _find_file(nodes: list[TerminalTreeNode], name: str) -> TerminalTreeNode | None:
    for node in nodes:
        if node.is_directory:
            found = _find_file(node.children, name)
            if found is not None:
                return found
        elif node.name == name:
            return node
    return None


def _collect_matching(
    nodes: list[TerminalTreeNode], suffixes: tuple[str, ...], matches: list[str]
) -> None:
    for node in nodes:
        if node.is_directory:
            _collect_matching(node.children, suffixes, matches)
        elif node.name.endswith(suffixes):
            matches.append(node.name)
