#!/usr/bin/env python3
"""
Workbench CLI.

Runs script files in the sandbox and queries directory trees from the
command line, the way a terminal panel would.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from workbench.core.errors import HostIOError, PolicyValidationError
from workbench.core.factory import create_sandbox, open_workspace
from workbench.core.logging import configure_structlog
from workbench.tree import TreeNode
from workbench.workspace import Workspace

try:
    import importlib.metadata

    __version__ = importlib.metadata.version("script-workbench")
except Exception:
    __version__ = "unknown"

console = Console()
err_console = Console(stderr=True)

_LEVEL_STYLES = {"log": "", "info": "cyan", "warn": "yellow", "error": "red"}


def render_output(level: str, message: str) -> None:
    """Output sink printing script output with a per-level style."""
    target = err_console if level in ("warn", "error") else console
    target.print(message, style=_LEVEL_STYLES.get(level, ""), markup=False, highlight=False)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="workbench",
        description="Run sandboxed scripts and inspect workspace trees",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--policy", type=Path, default=None, help="Policy TOML file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Emit structured logs")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Execute a script file in the sandbox")
    run.add_argument("script", type=Path)
    run.add_argument("--filename", default=None, help="Virtual filename (default: script name)")

    tree = sub.add_parser("tree", help="Show the filtered browsing tree")
    tree.add_argument("root", type=Path)
    tree.add_argument("--depth", type=int, default=2, help="Levels to expand (default: 2)")
    tree.add_argument("--hidden", action="store_true", help="Show hidden files")
    tree.add_argument("--node-modules", action="store_true", help="Show node_modules")
    tree.add_argument("--git", action="store_true", help="Show .git")

    ls = sub.add_parser("ls", help="List a directory of the unfiltered lookup tree")
    ls.add_argument("root", type=Path)
    ls.add_argument("path", nargs="?", default="")

    find = sub.add_parser("find", help="Find the first file with an exact name")
    find.add_argument("root", type=Path)
    find.add_argument("name")

    scripts = sub.add_parser("scripts", help="List script files by extension")
    scripts.add_argument("root", type=Path)
    scripts.add_argument("--ext", action="append", default=None, help="Extension (repeatable)")

    return parser.parse_args(argv)


async def _render_level(workspace: Workspace, nodes: list[TreeNode], branch: Tree, depth: int) -> None:
    for node in nodes:
        if node.is_directory:
            child = branch.add(f"[bold blue]{escape(node.name)}/[/]")
            if depth > 1:
                await workspace.expand(node)
                await _render_level(workspace, node.children or [], child, depth - 1)
        else:
            branch.add(escape(node.name))


async def cmd_run(args: argparse.Namespace) -> int:
    code = args.script.read_text(encoding="utf-8")
    sandbox = create_sandbox(output=render_output, policy_path=args.policy)
    result = await sandbox.execute(code, args.filename or args.script.name)
    if not result.success:
        return 1
    if result.value is not None:
        console.print(repr(result.value), markup=False, highlight=False)
    return 0


async def cmd_tree(args: argparse.Namespace) -> int:
    workspace = await open_workspace(args.root, policy_path=args.policy)
    await workspace.update_explorer_settings(
        show_hidden_files=args.hidden,
        show_node_modules=args.node_modules,
        show_git_files=args.git,
    )
    root = Tree(f"[bold]{escape(workspace.root.name if workspace.root else str(args.root))}[/]")
    await _render_level(workspace, workspace.file_tree, root, args.depth)
    console.print(root)
    return 0


async def cmd_ls(args: argparse.Namespace) -> int:
    workspace = await open_workspace(args.root, policy_path=args.policy)
    for node in workspace.tree.list_directory(args.path):
        console.print(f"{node.name}/" if node.is_directory else node.name, markup=False)
    return 0


async def cmd_find(args: argparse.Namespace) -> int:
    workspace = await open_workspace(args.root, policy_path=args.policy)
    node = workspace.tree.find_by_name(args.name)
    if node is None:
        err_console.print(f"{args.name}: not found", markup=False)
        return 1
    console.print(node.name, markup=False)
    return 0


async def cmd_scripts(args: argparse.Namespace) -> int:
    workspace = await open_workspace(args.root, policy_path=args.policy)
    for name in workspace.tree.list_matching_extensions(args.ext):
        console.print(name, markup=False)
    return 0


COMMANDS = {
    "run": cmd_run,
    "tree": cmd_tree,
    "ls": cmd_ls,
    "find": cmd_find,
    "scripts": cmd_scripts,
}


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)
    configure_structlog(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        return asyncio.run(COMMANDS[args.command](args))
    except (HostIOError, PolicyValidationError, OSError, UnicodeDecodeError) as e:
        err_console.print(f"ERROR: {e}", markup=False)
        return 2
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
