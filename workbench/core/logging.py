"""Structured logging for workbench execution, tree and file events.

Provides WorkbenchLogger class that uses structlog for structured event
emission (execution.start, execution.complete, tree.built, host.io_error).
Configures structlog with console rendering by default but allows custom
configuration.

Script console output does not flow through here: it goes to the sandbox's
output sink.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from workbench.core.models import ExecutionResult, ExplorerFilterConfig


def configure_structlog(level: int = logging.INFO, use_json: bool = False) -> None:
    """Configure structlog with sensible defaults for workbench logging.

    Args:
        level: Minimum log level (default: logging.INFO)
        use_json: If True, use JSON renderer; otherwise use console renderer
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if use_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


class WorkbenchLogger:
    """Wrapper for structured logging of workbench events.

    Accepts either structlog or standard logging.Logger instances and normalizes
    emission so callers do not need to care which backend is in use.
    """

    _PATH_TRUNCATION_SUFFIX = "...[truncated]"
    _MAX_PATH_LENGTH = 140

    def __init__(self, logger: Any = None) -> None:
        """Initialize WorkbenchLogger with optional custom logger.

        Args:
            logger: Optional structlog BoundLogger, logging.Logger, or string name.
                    If None, a default structlog logger named 'workbench' is created.
                    If string, creates a structlog logger with that name.
        """
        if logger is None:
            self._logger = structlog.get_logger("workbench")
        elif isinstance(logger, str):
            self._logger = structlog.get_logger(logger)
        else:
            self._logger = logger

    @property
    def logger(self) -> Any:
        """Expose the underlying logger instance (structlog or logging.Logger)."""
        return self._logger

    def _emit(self, level: int, message: str, **fields: Any) -> None:
        """Emit a log record regardless of logger backend."""
        extra = dict(fields)
        extra.setdefault("log_message", message)
        # Ensure event key is always present for downstream processors
        extra.setdefault("event", message.split(".", 1)[-1] if "." in message else message)

        if isinstance(self._logger, logging.Logger):
            # Standard logging expects structured data in the 'extra' mapping
            self._logger.log(level, message, extra=extra)
            return

        method_name = logging.getLevelName(level).lower()
        log_method = getattr(self._logger, method_name, None)
        if not callable(log_method):
            log_method = self._logger.info

        log_kwargs = dict(extra)
        event_value = log_kwargs.pop("event", None)
        event_arg = event_value if event_value is not None else message
        log_method(event_arg, **log_kwargs)

    def _truncate_path(self, path: str) -> str:
        """Truncate long virtual paths to keep logs concise."""
        if len(path) <= self._MAX_PATH_LENGTH:
            return path
        keep = self._MAX_PATH_LENGTH - len(self._PATH_TRUNCATION_SUFFIX)
        return f"{path[:keep]}{self._PATH_TRUNCATION_SUFFIX}"

    def log_execution_start(self, filename: str, script_bytes: int, **extra: Any) -> None:
        """Log the start of a script execution.

        Args:
            filename: Virtual filename the script runs as
            script_bytes: Size of the script text in bytes
            **extra: Additional key-value pairs to include in log event
        """
        self._emit(
            logging.INFO,
            "workbench.execution.start",
            event="execution.start",
            script=self._truncate_path(filename),
            script_bytes=script_bytes,
            **extra,
        )

    def log_execution_complete(self, result: ExecutionResult, filename: str) -> None:
        """Log the completion of a script execution with its outcome.

        Args:
            result: ExecutionResult produced at the sandbox boundary
            filename: Virtual filename the script ran as
        """
        log_kwargs: dict[str, Any] = {
            "event": "execution.complete",
            "script": self._truncate_path(filename),
            "success": result.success,
            "duration_ms": result.duration_ms,
        }
        if result.failure_message is not None:
            log_kwargs["failure_message"] = result.failure_message

        self._emit(logging.INFO, "workbench.execution.complete", **log_kwargs)

    def log_tree_built(self, projection: str, path: str, entry_count: int) -> None:
        """Log a (re)build of one tree projection level.

        Args:
            projection: "browsing" or "lookup"
            path: Virtual path prefix of the built level ("" for the root)
            entry_count: Number of retained entries at this level
        """
        self._emit(
            logging.DEBUG,
            "workbench.tree.built",
            event="tree.built",
            projection=projection,
            path=self._truncate_path(path),
            entry_count=entry_count,
        )

    def log_tree_expanded(self, path: str, expanded: bool, loaded: bool) -> None:
        """Log an expand/collapse toggle of a browsing-tree directory.

        Args:
            path: Virtual path of the directory node
            expanded: New value of the expanded flag
            loaded: Whether children were fetched from the host by this call
        """
        self._emit(
            logging.DEBUG,
            "workbench.tree.expanded",
            event="tree.expanded",
            path=self._truncate_path(path),
            expanded=expanded,
            loaded=loaded,
        )

    def log_host_io_error(self, operation: str, target: str, error: BaseException) -> None:
        """Log a capability host failure that was absorbed locally.

        Emits a WARNING-level event; the caller continues with a degraded
        (empty or partial) result.

        Args:
            operation: Host operation ("list", "read", "write")
            target: Name or virtual path of the handle involved
            error: The exception raised by the host
        """
        self._emit(
            logging.WARNING,
            "workbench.host.io_error",
            event="host.io_error",
            operation=operation,
            target=self._truncate_path(target),
            error_type=type(error).__name__,
            error=str(error),
        )

    def log_file_operation(self, operation: str, name: str, **kwargs: Any) -> None:
        """Log a content read or write.

        Args:
            operation: Operation type ("read", "write")
            name: File handle name
            **kwargs: Operation-specific metadata (cached, size)
        """
        event = f"file.{operation}"
        self._emit(
            logging.DEBUG,
            f"workbench.{event}",
            event=event,
            file=name,
            **kwargs,
        )

    def log_filter_updated(self, config: ExplorerFilterConfig) -> None:
        """Log a change of the explorer filter settings."""
        self._emit(
            logging.INFO,
            "workbench.filter.updated",
            event="filter.updated",
            **config.model_dump(),
        )

    def log_root_selected(self, name: str) -> None:
        """Log selection of a new workspace root directory."""
        self._emit(
            logging.INFO,
            "workbench.workspace.root_selected",
            event="workspace.root_selected",
            root=name,
        )

    def log_reset(self) -> None:
        """Log a full reset of the workspace state."""
        self._emit(logging.INFO, "workbench.workspace.reset", event="workspace.reset")
