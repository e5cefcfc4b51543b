"""Exception classes for workbench configuration, host I/O and script failures.

Provides domain-specific exceptions for policy validation, capability host
failures and the failures raised by emulated built-in modules. Script-side
failures never escape ScriptSandbox.execute(); they are converted into an
ExecutionResult at the sandbox boundary.
"""

from __future__ import annotations


class WorkbenchError(Exception):
    """Base exception for all workbench failures.

    Catch this type to handle any workbench-originated error (invalid
    configuration, host I/O failures, unsupported built-ins, module
    resolution failures).
    """

    pass


class PolicyValidationError(WorkbenchError):
    """Raised when runner policy or explorer configuration is invalid.

    Indicates that a provided RunnerPolicy, ExplorerFilterConfig or policy
    TOML file contains invalid values (unknown filter keys, wrong types,
    missing required fields).

    This exception wraps Pydantic ValidationError with a clearer
    domain-specific name for workbench consumers.
    """

    pass


class HostIOError(WorkbenchError):
    """Raised by capability hosts when enumeration, read or write fails.

    The tree service and content cache absorb this error at the point of
    occurrence: they log it and degrade to an empty or partial result.
    """

    pass


class UnsupportedBuiltinError(WorkbenchError, NotImplementedError):
    """Raised by emulated built-ins that have no backing implementation.

    The synchronous fs stubs raise it to signal that sandboxed scripts have
    no real filesystem access.
    """

    pass


class ModuleResolutionError(WorkbenchError, ModuleNotFoundError):
    """Raised by require() for names outside the built-in catalog.

    Scripts can catch it themselves; if they do not, the sandbox boundary
    converts it into a failed ExecutionResult.
    """

    def __init__(self, module_name: str) -> None:
        super().__init__(f"Cannot find module '{module_name}'")
        self.module_name = module_name


class InvalidURLError(WorkbenchError, ValueError):
    """Raised by url.parse() for malformed input."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid URL: {url}")
        self.url = url
