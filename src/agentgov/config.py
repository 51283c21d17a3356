"""Compiler configuration loader.

Supports .agentgov/config.toml or .agentgov/config.json next to the
governance document for customizing output locations and hook behavior.
"""

from __future__ import annotations

import json
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from agentgov.errors import ConfigError
from agentgov.model import TIMEOUT_RESOLUTIONS

logger = logging.getLogger(__name__)

CONFIG_DIR = ".agentgov"


@dataclass(frozen=True)
class OutputLayout:
    """Artifact locations relative to the output root."""

    settings_path: str = ".claude/settings.json"
    hooks_dir: str = ".claude/hooks"
    workflow_path: str = ".github/workflows/governance.yml"
    docs_path: str = "GOVERNANCE.md"


@dataclass(frozen=True)
class HookOptions:
    """Behavior baked into generated enforcement scripts."""

    on_timeout: str = "block"  # resolution for prompt gates without their own on_timeout
    python: str = "python3"


@dataclass(frozen=True)
class WorkflowOptions:
    runs_on: str = "ubuntu-latest"


@dataclass(frozen=True)
class CompilerConfig:
    """Compiler configuration for one project."""

    output: OutputLayout = field(default_factory=OutputLayout)
    hooks: HookOptions = field(default_factory=HookOptions)
    workflow: WorkflowOptions = field(default_factory=WorkflowOptions)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CompilerConfig:
        """Parse and validate config dict into CompilerConfig."""
        output_data = _section(data, "output")
        hooks_data = _section(data, "hooks")
        workflow_data = _section(data, "workflow")

        defaults = OutputLayout()
        output = OutputLayout(
            settings_path=_string(output_data, "settings_path", defaults.settings_path),
            hooks_dir=_string(output_data, "hooks_dir", defaults.hooks_dir),
            workflow_path=_string(output_data, "workflow_path", defaults.workflow_path),
            docs_path=_string(output_data, "docs_path", defaults.docs_path),
        )

        on_timeout = _string(hooks_data, "on_timeout", HookOptions.on_timeout)
        if on_timeout not in TIMEOUT_RESOLUTIONS:
            raise ConfigError(
                f"hooks.on_timeout must be one of {', '.join(TIMEOUT_RESOLUTIONS)}, got `{on_timeout}`"
            )
        hooks = HookOptions(
            on_timeout=on_timeout,
            python=_string(hooks_data, "python", HookOptions.python),
        )

        workflow = WorkflowOptions(
            runs_on=_string(workflow_data, "runs_on", WorkflowOptions.runs_on),
        )
        return cls(output=output, hooks=hooks, workflow=workflow)


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table")
    return section


def _string(section: dict[str, Any], key: str, default: str) -> str:
    value = section.get(key, default)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{key} must be a non-empty string")
    return value.strip()


def load_compiler_config(project_root: Path) -> CompilerConfig:
    """Load compiler configuration from .agentgov/config.toml or config.json.

    Priority order:
    1. .agentgov/config.toml (preferred)
    2. .agentgov/config.json (fallback)

    Returns:
        Parsed config, or defaults when neither file exists

    Raises:
        ConfigError: If config file is malformed or invalid
    """
    config_dir = project_root / CONFIG_DIR

    toml_path = config_dir / "config.toml"
    if toml_path.exists():
        logger.debug("loading compiler config %s", toml_path)
        try:
            with open(toml_path, "rb") as f:
                data = tomllib.load(f)
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
            raise ConfigError(f"Malformed TOML config at {toml_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read config at {toml_path}: {e.strerror or e}") from e
        return CompilerConfig.from_dict(data)

    json_path = config_dir / "config.json"
    if json_path.exists():
        logger.debug("loading compiler config %s", json_path)
        try:
            with open(json_path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ConfigError(f"Malformed JSON config at {json_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read config at {json_path}: {e.strerror or e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid config structure in {json_path}: expected an object")
        return CompilerConfig.from_dict(data)

    return CompilerConfig()
