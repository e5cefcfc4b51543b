"""Abstract base class for script sandbox implementations.

Provides BaseSandbox ABC that defines the contract for sandboxes: an async
execute() that always returns an ExecutionResult and a side-effect free
validate_code(). Shares policy, output sink and logger initialization.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from workbench.core.logging import WorkbenchLogger
    from workbench.core.models import ExecutionResult, RunnerPolicy
    from workbench.modules.base import OutputSink


class BaseSandbox(ABC):
    """Abstract base class for script sandboxes.

    Attributes:
        policy: RunnerPolicy shaping the emulated runtime
        output: Output sink receiving console-style script output
        logger: WorkbenchLogger for structured event logging
    """

    def __init__(
        self,
        policy: RunnerPolicy,
        output: OutputSink,
        logger: WorkbenchLogger | None = None
    ) -> None:
        """Initialize BaseSandbox with policy, output sink and logger.

        Args:
            policy: RunnerPolicy with validated runtime settings
            output: Callable receiving ``(level, message)`` pairs
            logger: Optional WorkbenchLogger for structured events.
                    If None, creates default logger named 'workbench'.
        """
        self.policy = policy
        self.output = output

        if logger is None:
            # Import here to avoid circular dependency
            from workbench.core.logging import WorkbenchLogger
            self.logger = WorkbenchLogger()
        else:
            self.logger = logger

    @abstractmethod
    async def execute(self, code: str, filename: str | None = None) -> ExecutionResult:
        """Run untrusted script text and report the outcome.

        Implementations must:
        1. Log execution start via self.logger.log_execution_start()
        2. Bind the emulated globals and a call-scoped require()
        3. Evaluate the script with only those bindings visible
        4. Convert any failure into a failed ExecutionResult (never raise)
        5. Log execution complete via self.logger.log_execution_complete()

        Args:
            code: Untrusted script text
            filename: Virtual filename the script runs as

        Returns:
            ExecutionResult with success flag, value or failure message
        """
        pass

    @abstractmethod
    def validate_code(self, code: str) -> bool:
        """Validate script syntax without executing it.

        Args:
            code: Script text to validate

        Returns:
            True if syntax is valid, False otherwise
        """
        pass
