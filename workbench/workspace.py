"""Workspace state: selected root, both tree projections and the editor.

The root handle and both projections are created together when a root is
selected and dropped together on reset(), which also clears the content
cache and closes the active file.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from workbench.core.logging import WorkbenchLogger
from workbench.core.models import RunnerPolicy
from workbench.editor import ContentCache, EditorSession
from workbench.tree import DirectoryTreeService

if TYPE_CHECKING:
    from workbench.core.capabilities import DirectoryHandle
    from workbench.core.models import EditableFile, ExplorerFilterConfig
    from workbench.tree import TerminalTreeNode, TreeNode


class Workspace:
    """Facade over DirectoryTreeService and EditorSession.

    Example:
        >>> workspace = Workspace()
        >>> await workspace.set_root(open_directory("project"))
        >>> node = workspace.file_tree[0]
        >>> await workspace.expand(node)
        >>> editable = await workspace.open_file(node.children[0])
        >>> workspace.update_content(editable.content + "\\n")
        >>> await workspace.save_file()
        True
    """

    def __init__(
        self,
        policy: RunnerPolicy | None = None,
        logger: WorkbenchLogger | None = None,
    ) -> None:
        self.policy = policy if policy is not None else RunnerPolicy()
        self.logger = logger if logger is not None else WorkbenchLogger()
        self.tree = DirectoryTreeService(
            config=self.policy.explorer,
            script_extensions=self.policy.script_extensions,
            logger=self.logger,
        )
        self.editor = EditorSession(ContentCache(self.logger), self.logger)

    @property
    def has_selected_directory(self) -> bool:
        return self.tree.has_root

    @property
    def root(self) -> DirectoryHandle | None:
        return self.tree.root

    @property
    def file_tree(self) -> list[TreeNode]:
        return self.tree.file_tree

    @property
    def terminal_tree(self) -> TerminalTreeNode | None:
        return self.tree.terminal_tree

    @property
    def explorer_settings(self) -> ExplorerFilterConfig:
        return self.tree.config

    @property
    def current_file(self) -> EditableFile | None:
        return self.editor.current_file

    @property
    def editor_content(self) -> str:
        return self.editor.content

    async def set_root(self, directory: DirectoryHandle) -> None:
        await self.tree.set_root(directory)

    async def reload(self) -> None:
        await self.tree.load()

    async def expand(self, node: TreeNode) -> None:
        await self.tree.expand(node)

    async def update_explorer_settings(self, **changes: Any) -> ExplorerFilterConfig:
        return await self.tree.update_filter(**changes)

    async def open_file(self, node: TreeNode) -> EditableFile | None:
        return await self.editor.open(node)

    def update_content(self, text: str) -> None:
        self.editor.update_content(text)

    async def save_file(self) -> bool:
        return await self.editor.save()

    def reset(self) -> None:
        """Forget the root, both projections, the active file and all cached content."""
        self.tree.reset()
        self.editor.reset()
        self.logger.log_reset()
