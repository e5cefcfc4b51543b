"""Pydantic models for type-safe workbench configuration, results and records.

Provides validated data models for the explorer filter settings, the runner
policy that shapes the emulated runtime, execution results and the editable
file record handed to an editing surface.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from workbench.core.errors import PolicyValidationError


class HandleKind(str, Enum):
    """Kind of a host capability handle.

    FILE: readable/writable file handle
    DIRECTORY: enumerable directory handle
    """
    FILE = "file"
    DIRECTORY = "directory"


class ExplorerFilterConfig(BaseModel):
    """Visibility settings for the browsing projection of the directory tree.

    Affects only the filtered browsing tree; the lookup tree used by
    terminal-style consumers is never filtered.

    Attributes:
        show_hidden_files: Show dotfiles beyond the always-visible allow-list
        show_node_modules: Show node_modules directories
        show_git_files: Show .git directories
    """

    model_config = ConfigDict(extra="forbid")

    show_hidden_files: bool = Field(
        default=False,
        description="Show dotfiles beyond the always-visible allow-list"
    )

    show_node_modules: bool = Field(
        default=False,
        description="Show node_modules directories"
    )

    show_git_files: bool = Field(
        default=False,
        description="Show .git directories"
    )

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise PolicyValidationError(f"Invalid explorer settings: {e}") from e

    def merged(self, **changes: Any) -> ExplorerFilterConfig:
        """Return a new config with a partial update merged over this one."""
        return ExplorerFilterConfig(**(self.model_dump() | changes))


class RunnerPolicy(BaseModel):
    """Configuration for the emulated runtime and the workbench defaults.

    Attributes:
        working_directory: Virtual cwd for process.cwd() and path.resolve()
        argv: Static process.argv exposed to scripts
        env: Initial process.env mapping (copied per sandbox)
        version: Static process.version string
        platform: Static process.platform string
        default_filename: Virtual filename used when none is given
        script_extensions: Default suffixes for lookup-tree script listing
        explorer: Initial browsing-projection filter settings
    """

    working_directory: str = Field(
        default="/workspace",
        description="Virtual working directory seen by scripts"
    )

    argv: list[str] = Field(
        default_factory=lambda: ["node", "index.js"],
        description="Static process.argv"
    )

    env: dict[str, str] = Field(
        default_factory=lambda: {
            "NODE_ENV": "development",
            "PATH": "/usr/bin:/bin",
        },
        description="Initial process.env mapping"
    )

    version: str = Field(
        default="v18.17.0",
        description="Static process.version"
    )

    platform: str = Field(
        default="browser",
        description="Static process.platform"
    )

    default_filename: str = Field(
        default="index.py",
        description="Virtual filename used when execute() is given none"
    )

    script_extensions: list[str] = Field(
        default_factory=lambda: [".js", ".mjs", ".cjs", ".py"],
        description="Suffixes listed by the lookup tree by default"
    )

    explorer: ExplorerFilterConfig = Field(
        default_factory=ExplorerFilterConfig,
        description="Initial explorer filter settings"
    )

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise PolicyValidationError(f"Invalid runner policy: {e}") from e

    @field_validator("working_directory")
    @classmethod
    def validate_working_directory(cls, v: str) -> str:
        """Ensure the virtual working directory is absolute."""
        if not v.startswith("/"):
            raise ValueError("working_directory must be an absolute virtual path")
        return v

    @field_validator("script_extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        """Ensure every script extension starts with a dot."""
        for ext in v:
            if not ext.startswith("."):
                raise ValueError(f"Extension '{ext}' must start with '.'")
        return v


class ExecutionResult(BaseModel):
    """Terminal result of one ScriptSandbox.execute() call.

    Produced exactly once per call and frozen afterwards. Callers branch on
    ``success``: a successful run carries the script's return value and its
    module record, a failed run carries the failure message.

    Attributes:
        success: Whether the script completed without raising
        value: Value returned by the script body (None when it returns nothing)
        module: Module record of the run (exports live on module.exports)
        failure_message: Message of the failure that ended the run
        duration_ms: Wall-clock execution time in milliseconds
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    success: bool = Field(
        description="Whether the script completed without raising"
    )

    value: Any = Field(
        default=None,
        description="Return value of the script body"
    )

    module: Any = Field(
        default=None,
        description="Module record of a successful run"
    )

    failure_message: str | None = Field(
        default=None,
        description="Failure message of an unsuccessful run"
    )

    duration_ms: float = Field(
        default=0.0,
        description="Wall-clock execution time in milliseconds"
    )

    @property
    def exports(self) -> Any:
        """Shortcut for ``module.exports`` (None when the run failed)."""
        return getattr(self.module, "exports", None)


class EditableFile(BaseModel):
    """File record handed to an editing surface.

    Combines the browsing-tree node metadata with the current text content
    and a dirty flag. The capability handle travels along but is excluded
    from serialization.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    name: str
    path: str
    kind: HandleKind = HandleKind.FILE
    content: str = ""
    modified: bool = False
    handle: Any = Field(default=None, exclude=True, repr=False)
