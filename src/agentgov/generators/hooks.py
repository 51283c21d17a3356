"""Project the model into standalone enforcement scripts.

One script per concern. Every script reads the lifecycle event (JSON on
stdin), prints one JSON decision and exits ``0`` to allow or ``2`` to block.
Policy data is embedded at compile time so the scripts have no runtime
dependency on agentgov.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from agentgov.artifacts.canonical_json import canonical_dumps
from agentgov.config import CompilerConfig
from agentgov.generators.settings import classify_gate
from agentgov.model import (
    ACTION_TYPES,
    AgentAction,
    ApprovalGate,
    CommandAction,
    GovernanceModel,
    PromptAction,
    rule_glob,
    trigger_command_pattern,
    trigger_path_pattern,
)
from agentgov.rendering import TemplateRenderer

EXIT_ALLOW = 0
EXIT_BLOCK = 2

SECRET_SCAN = "secret-scan"
PERMISSION_GUARD = "permission-guard"
GATE_SCRIPTS: dict[str, str] = {
    "command": "gate-command",
    "prompt": "gate-prompt",
    "agent": "gate-agent",
}


@dataclass(frozen=True)
class EnforcementScript:
    """Generated hook script."""

    filename: str
    content: str
    concern: str
    executable: bool = True


def project_hooks(
    model: GovernanceModel,
    config: CompilerConfig,
    renderer: TemplateRenderer,
) -> list[EnforcementScript]:
    """Generate one script per enforcement concern present in the model.

    Raises:
        RuleFormatError: If a deny rule lacks its scope's field
    """
    scripts: list[EnforcementScript] = []

    if model.secret_patterns:
        scripts.append(_render(renderer, config, model, SECRET_SCAN, _secret_scan_config(model)))

    guard = _permission_guard_config(model)
    if guard["filesystem_deny"] or guard["command_deny"]:
        scripts.append(_render(renderer, config, model, PERMISSION_GUARD, guard))

    for action_type in ACTION_TYPES:
        gates = [gate for gate in model.approval_gates if gate.action.type == action_type]
        if not gates:
            continue
        gate_config = {"gates": [_gate_config(gate, config) for gate in gates]}
        scripts.append(_render(renderer, config, model, GATE_SCRIPTS[action_type], gate_config))

    return scripts


def _render(
    renderer: TemplateRenderer,
    config: CompilerConfig,
    model: GovernanceModel,
    concern: str,
    policy: dict[str, Any],
) -> EnforcementScript:
    content = renderer.render(
        f"hooks/{concern.replace('-', '_')}.py.j2",
        {
            "python": config.hooks.python,
            "project": " ".join(model.project.split()),
            "hook_name": concern,
            "policy_json": canonical_dumps(policy),
            "exit_allow": EXIT_ALLOW,
            "exit_block": EXIT_BLOCK,
        },
    )
    return EnforcementScript(filename=f"{concern}.py", content=content, concern=concern)


def _secret_scan_config(model: GovernanceModel) -> dict[str, Any]:
    enforcement = model.secrets.enforcement if model.secrets else None
    return {
        "patterns": [
            {"pattern": secret.pattern, "label": secret.label}
            for secret in model.secret_patterns
        ],
        "message": enforcement.message if enforcement and enforcement.message else None,
    }


def _permission_guard_config(model: GovernanceModel) -> dict[str, Any]:
    guard: dict[str, list[dict[str, Any]]] = {"filesystem_deny": [], "command_deny": []}
    permissions = model.permissions
    if permissions is None:
        return guard
    if permissions.filesystem is not None:
        guard["filesystem_deny"] = [
            {"glob": rule_glob(rule, "filesystem"), "reason": rule.reason}
            for rule in permissions.filesystem.deny
        ]
    if permissions.commands is not None:
        guard["command_deny"] = [
            {"glob": rule_glob(rule, "commands"), "reason": rule.reason}
            for rule in permissions.commands.deny
        ]
    return guard


def _gate_config(gate: ApprovalGate, config: CompilerConfig) -> dict[str, Any]:
    _event, matcher = classify_gate(gate)
    action = gate.action
    entry: dict[str, Any] = {
        "name": gate.name,
        "matcher": matcher,
        "command_pattern": trigger_command_pattern(gate.trigger),
        "path_pattern": trigger_path_pattern(gate.trigger),
        "timeout": action.timeout,
        "on_timeout": action.on_timeout or config.hooks.on_timeout,
    }
    if isinstance(action, CommandAction):
        entry["command"] = action.command
    elif isinstance(action, (PromptAction, AgentAction)):
        entry["prompt"] = action.prompt
    return entry
