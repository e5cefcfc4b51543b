"""Core workbench abstractions and models.

This module provides the foundational types and interfaces of the workbench,
including Pydantic models for configuration and results, the capability
handle abstraction, the base sandbox contract, and error types.
"""

from __future__ import annotations

from .base import BaseSandbox
from .capabilities import CapabilityHandle, DirectoryHandle, FileHandle, WritableStream
from .errors import (
    HostIOError,
    InvalidURLError,
    ModuleResolutionError,
    PolicyValidationError,
    UnsupportedBuiltinError,
    WorkbenchError,
)
from .models import EditableFile, ExecutionResult, ExplorerFilterConfig, HandleKind, RunnerPolicy

__all__ = [
    "BaseSandbox",
    "CapabilityHandle",
    "DirectoryHandle",
    "EditableFile",
    "ExecutionResult",
    "ExplorerFilterConfig",
    "FileHandle",
    "HandleKind",
    "HostIOError",
    "InvalidURLError",
    "ModuleResolutionError",
    "PolicyValidationError",
    "RunnerPolicy",
    "UnsupportedBuiltinError",
    "WorkbenchError",
    "WritableStream",
]
