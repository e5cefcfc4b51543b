"""ScriptSandbox: runs untrusted script text against emulated runtime globals.

The script is parsed with ``ast`` and grafted into the body of an
``async def`` whose parameters are exactly the injected globals. The wrapper
is compiled and executed with a globals mapping holding nothing but a closed
set of language builtins, so every identifier the script resolves is either
one of its own, a parameter, or an allowed builtin. ``import`` statements
fail because ``__import__`` is not among those builtins; ``require()`` is the
only module channel.

This is API substitution, not isolation: the script shares the host process
and event loop.
"""

from __future__ import annotations

import ast
import time
import traceback
from types import SimpleNamespace
from typing import Any

from workbench.core.base import BaseSandbox
from workbench.core.models import ExecutionResult, RunnerPolicy
from workbench.modules.base import HOST_SIGNALS, OutputSink, default_output, describe_failure
from workbench.modules.registry import BuiltinModuleRegistry
from workbench.runtimes.script.environment import (
    Console,
    ModuleRecord,
    Process,
    Timers,
    format_args,
    safe_builtins,
)

# Names bound as parameters of the wrapped script, in call order
SCRIPT_PARAMETERS = (
    "require",
    "module",
    "exports",
    "console",
    "process",
    "globalThis",
    "__filename",
    "__dirname",
    "Buffer",
    "setTimeout",
    "setInterval",
    "clearTimeout",
    "clearInterval",
    "setImmediate",
    "clearImmediate",
)

_ENTRY_POINT = "__script_main__"

_WRAPPER_TEMPLATE = f"async def {_ENTRY_POINT}({', '.join(SCRIPT_PARAMETERS)}):\n    pass\n"


def wrap_script(code: str, filename: str) -> Any:
    """Compile ``code`` as the body of the async entry-point function.

    Line numbers of the script are preserved in tracebacks.

    Raises:
        SyntaxError: If the script does not parse or compile
    """
    script = ast.parse(code, filename=filename, mode="exec")
    wrapper = ast.parse(_WRAPPER_TEMPLATE, filename=filename, mode="exec")
    entry = wrapper.body[0]
    assert isinstance(entry, ast.AsyncFunctionDef)
    if script.body:
        entry.body = script.body
    ast.fix_missing_locations(wrapper)
    return compile(wrapper, filename, "exec")


class ScriptSandbox(BaseSandbox):
    """Execution sandbox emulating a server-side scripting runtime.

    ``console``, ``process``, ``globalThis`` and the module catalog are
    created once per sandbox and shared by its executions; ``module``,
    ``exports`` and ``require`` are fresh for every call. Construct one
    sandbox per script for full global-state separation.

    Example:
        Basic usage::

            sandbox = ScriptSandbox()
            result = await sandbox.execute("module.exports = 1 + 1")
            result.success          # True
            result.module.exports   # 2

        Capturing output::

            lines = []
            sandbox = ScriptSandbox(output=lambda level, msg: lines.append((level, msg)))
            await sandbox.execute("console.log('hi', {'a': 1})")

        Failures never raise::

            result = await sandbox.execute("require('left-pad')")
            result.success          # False
            result.failure_message  # "Cannot find module 'left-pad'"
    """

    def __init__(
        self,
        policy: RunnerPolicy | None = None,
        output: OutputSink = default_output,
        logger: Any = None,
        registry: BuiltinModuleRegistry | None = None,
    ) -> None:
        """Initialize ScriptSandbox.

        Args:
            policy: RunnerPolicy (defaults to RunnerPolicy())
            output: Sink for console-style output, ``(level, message)``
            logger: Optional WorkbenchLogger
            registry: Module catalog; built from ``output`` and the policy's
                      working directory when omitted
        """
        super().__init__(policy if policy is not None else RunnerPolicy(), output, logger)
        self.registry = registry if registry is not None else BuiltinModuleRegistry(
            output, self.policy.working_directory
        )
        self.console = Console(output)
        self.process = Process(
            output,
            argv=self.policy.argv,
            env=self.policy.env,
            working_directory=self.policy.working_directory,
            version=self.policy.version,
            platform=self.policy.platform,
        )
        self.timers = Timers(output)
        self.global_namespace = SimpleNamespace()

    def validate_code(self, code: str) -> bool:
        """Check that ``code`` compiles as a script body, without running it."""
        try:
            wrap_script(code, "<validate>")
            return True
        except (SyntaxError, ValueError):
            return False

    def _print(self, *args: Any, sep: str = " ", end: str = "\n", **_: Any) -> None:
        # print() inside scripts behaves like console.log
        if sep == " ":
            self.output("log", format_args(args))
        else:
            self.output("log", sep.join(str(arg) for arg in args))

    def _bindings(self, module: ModuleRecord, filename: str) -> dict[str, Any]:
        bindings: dict[str, Any] = {
            "require": self.registry.create_require(),
            "module": module,
            "exports": module.exports,
            "console": self.console,
            "process": self.process,
            "globalThis": self.global_namespace,
            "__filename": filename,
            "__dirname": self.registry.path.dirname(filename),
            "Buffer": self.registry.buffer,
        }
        bindings.update(self.timers.bindings())
        return bindings

    def _report_failure(self, error: BaseException, filename: str) -> None:
        self.output("error", describe_failure(error))
        trace = _format_trace(error, filename)
        if trace:
            self.output("error", trace)

    async def execute(self, code: str, filename: str | None = None) -> ExecutionResult:
        """Run ``code`` as ``filename`` and return its ExecutionResult.

        Workflow:
        1. Derive ``__dirname`` from the virtual filename
        2. Create a fresh module record and a call-scoped require()
        3. Wrap the script as an async function over the injected names
        4. Await it
        5. Map the outcome to an ExecutionResult

        Anything raised by the script, by a built-in module it calls, or by
        compiling it is reported to the output sink and turned into a failed
        result. Only cancellation and interrupts of the host propagate.
        """
        filename = filename or self.policy.default_filename
        self.logger.log_execution_start(filename, len(code.encode("utf-8", "surrogatepass")))
        start_time = time.perf_counter()

        module = ModuleRecord(filename)
        try:
            compiled = wrap_script(code, filename)
            namespace: dict[str, Any] = {
                "__builtins__": safe_builtins(self._print),
                "__name__": "__sandbox__",
            }
            exec(compiled, namespace)  # noqa: S102 - restricted builtins, injected globals only
            entry = namespace[_ENTRY_POINT]
            value = await entry(**self._bindings(module, filename))
        except HOST_SIGNALS:
            raise
        except BaseException as e:
            self._report_failure(e, filename)
            result = ExecutionResult(
                success=False,
                failure_message=str(e),
                duration_ms=(time.perf_counter() - start_time) * 1000,
            )
        else:
            module.loaded = True
            result = ExecutionResult(
                success=True,
                value=value,
                module=module,
                duration_ms=(time.perf_counter() - start_time) * 1000,
            )

        self.logger.log_execution_complete(result, filename)
        return result


def _format_trace(error: BaseException, filename: str) -> str:
    """Format the traceback starting at the first frame of the script itself."""
    summary = traceback.TracebackException.from_exception(error)
    frames = list(summary.stack)
    for index, frame in enumerate(frames):
        if frame.filename == filename:
            summary.stack = traceback.StackSummary.from_list(frames[index:])
            break
    return "".join(summary.format()).rstrip()
