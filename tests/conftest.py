"""Shared pytest fixtures for all tests."""

from __future__ import annotations

import pytest

from workbench.core.capabilities import MemoryDirectoryHandle
from workbench.core.models import RunnerPolicy
from workbench.runtimes.script import ScriptSandbox


class OutputCapture:
    """Output sink collecting ``(level, message)`` pairs."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def __call__(self, level: str, message: str) -> None:
        self.records.append((level, message))

    def messages(self, level: str | None = None) -> list[str]:
        return [msg for lvl, msg in self.records if level is None or lvl == level]

    @property
    def text(self) -> str:
        return "\n".join(self.messages())


@pytest.fixture
def output() -> OutputCapture:
    return OutputCapture()


@pytest.fixture
def sandbox(output: OutputCapture) -> ScriptSandbox:
    """ScriptSandbox with default policy whose output is captured."""
    return ScriptSandbox(policy=RunnerPolicy(), output=output)


@pytest.fixture
def project_tree() -> MemoryDirectoryHandle:
    """In-memory project with hidden, vendor and build entries.

    Enumeration order is deliberately unsorted.
    """
    return MemoryDirectoryHandle.from_mapping(
        "project",
        {
            "README.md": "# demo\n",
            "src": {
                "main.py": "print('main')\n",
                "util.js": "module.exports = {}\n",
                "lib": {"deep.js": "// deep\n"},
            },
            ".env": "KEY=1\n",
            "app.js": "console.log('app')\n",
            ".DS_Store": b"\x00",
            "node_modules": {"lodash": {"index.js": "//"}},
            ".git": {"HEAD": "ref: refs/heads/main\n"},
            "dist": {"bundle.js": "//"},
            "Assets": {},
            "b.ts": "export {}\n",
        },
    )


@pytest.fixture
def extension_tree() -> MemoryDirectoryHandle:
    """Tree holding a.js, b.ts and c/d.js."""
    return MemoryDirectoryHandle.from_mapping(
        "root",
        {"a.js": "", "b.ts": "", "c": {"d.js": ""}},
    )
