"""Policy management for the workbench runtime and explorer.

Provides the default runner policy and TOML-based configuration loading
for the emulated process surface (argv, env, version), the virtual working
directory, script listing extensions and the initial explorer filters.
"""

from __future__ import annotations

import os
import tomllib

from pydantic import ValidationError

from workbench.core.errors import PolicyValidationError
from workbench.core.models import RunnerPolicy

DEFAULT_POLICY = {
    # Virtual cwd reported by process.cwd() and used as path.resolve() base
    "working_directory": "/workspace",

    # Static process surface seen by scripts
    "argv": ["node", "index.js"],
    "version": "v18.17.0",
    "platform": "browser",

    # Initial process.env; each sandbox gets its own copy
    "env": {
        "NODE_ENV": "development",
        "PATH": "/usr/bin:/bin",
    },

    "default_filename": "index.py",

    # Suffixes listed by the lookup tree when no extension set is given
    "script_extensions": [".js", ".mjs", ".cjs", ".py"],

    # Browsing projection starts with hidden/vendor/VCS entries filtered out
    "explorer": {
        "show_hidden_files": False,
        "show_node_modules": False,
        "show_git_files": False,
    },
}


def load_policy(path: str = "config/workbench.toml") -> RunnerPolicy:
    """Load and merge user policy configuration with defaults.

    Performs a shallow merge of user-provided TOML settings with DEFAULT_POLICY.
    The env and explorer tables are deep-merged so a file can add one
    variable or flip one filter without restating the rest.

    Args:
        path: Path to the policy TOML file. If file doesn't exist, returns
              RunnerPolicy with defaults.

    Returns:
        RunnerPolicy: Validated policy model with merged configuration.

    Raises:
        PolicyValidationError: If policy contains invalid values (unknown
                               explorer keys, relative working directory, etc.)
        tomllib.TOMLDecodeError: If TOML file is malformed
        OSError: If file exists but cannot be read
    """
    if not os.path.exists(path):
        try:
            return RunnerPolicy(**DEFAULT_POLICY)  # type: ignore[arg-type]
        except PolicyValidationError:
            raise
        except ValidationError as e:
            raise PolicyValidationError(f"Default policy validation failed: {e}") from e

    with open(path, "rb") as f:
        data = tomllib.load(f)

    # Merge top-level keys, with user overrides taking precedence
    policy = DEFAULT_POLICY | data

    policy["env"] = DEFAULT_POLICY["env"] | data.get("env", {})
    policy["explorer"] = DEFAULT_POLICY["explorer"] | data.get("explorer", {})

    try:
        return RunnerPolicy(**policy)  # type: ignore[arg-type]
    except PolicyValidationError:
        raise
    except ValidationError as e:
        raise PolicyValidationError(f"Policy validation failed: {e}") from e
