"""Script workbench: a sandboxed script runner and a capability-backed file tree.

Public API:
    create_sandbox / ScriptSandbox: run untrusted script text against
        emulated runtime globals and built-in modules
    open_workspace / Workspace: select a root directory, browse it through a
        filtered lazy tree, query it through an eager lookup tree, and edit
        files through a content cache
"""

from __future__ import annotations

from workbench.core import (
    EditableFile,
    ExecutionResult,
    ExplorerFilterConfig,
    HandleKind,
    HostIOError,
    InvalidURLError,
    ModuleResolutionError,
    PolicyValidationError,
    RunnerPolicy,
    UnsupportedBuiltinError,
    WorkbenchError,
)
from workbench.core.capabilities import (
    DiskDirectoryHandle,
    DiskFileHandle,
    MemoryDirectoryHandle,
    MemoryFileHandle,
    open_directory,
)
from workbench.core.factory import create_sandbox, open_workspace
from workbench.core.logging import WorkbenchLogger, configure_structlog
from workbench.editor import ContentCache, EditorSession
from workbench.modules import BuiltinModuleRegistry, default_output
from workbench.policies import DEFAULT_POLICY, load_policy
from workbench.runtimes.script import ScriptSandbox
from workbench.tree import DirectoryTreeService, TerminalTreeNode, TreeNode, should_skip
from workbench.workspace import Workspace

__all__ = [
    "DEFAULT_POLICY",
    "BuiltinModuleRegistry",
    "ContentCache",
    "DirectoryTreeService",
    "DiskDirectoryHandle",
    "DiskFileHandle",
    "EditableFile",
    "EditorSession",
    "ExecutionResult",
    "ExplorerFilterConfig",
    "HandleKind",
    "HostIOError",
    "InvalidURLError",
    "MemoryDirectoryHandle",
    "MemoryFileHandle",
    "ModuleResolutionError",
    "PolicyValidationError",
    "RunnerPolicy",
    "ScriptSandbox",
    "TerminalTreeNode",
    "TreeNode",
    "UnsupportedBuiltinError",
    "WorkbenchError",
    "WorkbenchLogger",
    "Workspace",
    "configure_structlog",
    "create_sandbox",
    "default_output",
    "load_policy",
    "open_workspace",
    "should_skip",
]
