"""Factory functions for sandboxes and workspaces.

Provides create_sandbox() and open_workspace(), which fill in default
policies, loggers and output sinks so callers only name what they override.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from workbench.core.capabilities import DirectoryHandle, open_directory
from workbench.core.logging import WorkbenchLogger
from workbench.core.models import RunnerPolicy
from workbench.modules.base import default_output
from workbench.policies import load_policy

if TYPE_CHECKING:
    from workbench.modules.base import OutputSink
    from workbench.runtimes.script import ScriptSandbox
    from workbench.workspace import Workspace


def _resolve_policy(policy: RunnerPolicy | None, policy_path: str | Path | None) -> RunnerPolicy:
    if policy is not None:
        return policy
    if policy_path is not None:
        return load_policy(str(policy_path))
    return RunnerPolicy()


def create_sandbox(
    policy: RunnerPolicy | None = None,
    output: OutputSink | None = None,
    logger: WorkbenchLogger | None = None,
    policy_path: str | Path | None = None,
) -> ScriptSandbox:
    """Create a ScriptSandbox with its own console/process state.

    Args:
        policy: Optional RunnerPolicy. Takes precedence over policy_path.
        output: Optional output sink. Defaults to printing on the console.
        logger: Optional WorkbenchLogger. If None, sandbox creates default logger.
        policy_path: Optional TOML file loaded with load_policy()

    Returns:
        ScriptSandbox ready for execute()

    Raises:
        PolicyValidationError: If the policy file holds invalid values

    Examples:
        >>> sandbox = create_sandbox()
        >>> result = await sandbox.execute("module.exports = 40 + 2")
        >>> result.exports
        42

        >>> lines = []
        >>> sandbox = create_sandbox(output=lambda level, msg: lines.append(msg))
    """
    from workbench.runtimes.script import ScriptSandbox

    return ScriptSandbox(
        policy=_resolve_policy(policy, policy_path),
        output=output if output is not None else default_output,
        logger=logger,
    )


async def open_workspace(
    root: DirectoryHandle | str | Path,
    policy: RunnerPolicy | None = None,
    logger: WorkbenchLogger | None = None,
    policy_path: str | Path | None = None,
) -> Workspace:
    """Create a Workspace and select ``root`` as its directory.

    Both tree projections are built before this returns.

    Args:
        root: Directory handle, or a local path opened with the disk host
        policy: Optional RunnerPolicy (explorer filters, script extensions)
        logger: Optional WorkbenchLogger
        policy_path: Optional TOML file loaded with load_policy()

    Raises:
        HostIOError: If a local path is not an existing directory
    """
    from workbench.workspace import Workspace

    handle = root if isinstance(root, DirectoryHandle) else open_directory(root)
    workspace = Workspace(_resolve_policy(policy, policy_path), logger)
    await workspace.set_root(handle)
    return workspace
