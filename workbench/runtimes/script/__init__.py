"""Script runtime: evaluates untrusted script text with emulated runtime globals.

Provides ScriptSandbox, which wraps the script as an async function over a
closed set of injected names (require, module, console, process, Buffer,
timers) and converts every failure into an ExecutionResult.
"""

from .sandbox import SCRIPT_PARAMETERS, ScriptSandbox, wrap_script

__all__ = ["SCRIPT_PARAMETERS", "ScriptSandbox", "wrap_script"]
