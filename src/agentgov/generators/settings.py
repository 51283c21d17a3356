"""Project the model into the local enforcement descriptor (.claude/settings.json)."""

from __future__ import annotations

from typing import Any

from agentgov.artifacts.canonical_json import pretty_dumps
from agentgov.model import (
    COMMAND_MATCHER,
    PATH_MATCHER,
    PRE_TOOL_USE,
    RULE_LISTS,
    ApprovalGate,
    CommandAction,
    CommandTrigger,
    GovernanceModel,
    PathTrigger,
    Permissions,
    Sandbox,
    ToolTrigger,
    format_rule,
    iter_permission_rules,
)


def project_settings(model: GovernanceModel) -> dict[str, Any]:
    """Build the descriptor with optional ``permissions``, ``sandbox``, ``hooks`` keys.

    Raises:
        RuleFormatError: If a permission rule lacks its scope's field
    """
    settings: dict[str, Any] = {}

    permissions = _project_permissions(model)
    if permissions:
        settings["permissions"] = permissions

    if model.sandbox is not None and model.sandbox.enabled:
        settings["sandbox"] = _project_sandbox(model.sandbox, model.permissions)

    hooks = _project_hooks(model.approval_gates)
    if hooks:
        settings["hooks"] = hooks

    return settings


def settings_to_json(settings: dict[str, Any]) -> str:
    return pretty_dumps(settings)


def _project_permissions(model: GovernanceModel) -> dict[str, list[str]]:
    lists: dict[str, list[str]] = {name: [] for name in RULE_LISTS}
    for list_name, scope, rule in iter_permission_rules(model.permissions):
        lists[list_name].append(format_rule(rule, scope))
    return {name: entries for name, entries in lists.items() if entries}


def _project_sandbox(sandbox: Sandbox, permissions: Permissions | None) -> dict[str, Any]:
    bounds: dict[str, Any] = {"enabled": True}

    if sandbox.mode:
        bounds["mode"] = sandbox.mode

    network = permissions.network if permissions else None
    if network is not None:
        if network.allowed_domains is not None:
            bounds["allowedDomains"] = list(network.allowed_domains)
        if network.blocked_domains is not None:
            bounds["blockedDomains"] = list(network.blocked_domains)

    if sandbox.allowed_paths is not None:
        bounds["allowedPaths"] = list(sandbox.allowed_paths)
    if sandbox.blocked_paths is not None:
        bounds["blockedPaths"] = list(sandbox.blocked_paths)
    if sandbox.excluded_commands is not None:
        bounds["excludedCommands"] = list(sandbox.excluded_commands)

    return bounds


def classify_gate(gate: ApprovalGate) -> tuple[str, str]:
    """Return ``(lifecycle_event, matcher)`` for a gate.

    Every trigger kind currently resolves to the pre-action event.
    """
    trigger = gate.trigger
    if isinstance(trigger, ToolTrigger):
        return PRE_TOOL_USE, trigger.tool
    if isinstance(trigger, CommandTrigger):
        return PRE_TOOL_USE, COMMAND_MATCHER
    if isinstance(trigger, PathTrigger):
        return PRE_TOOL_USE, PATH_MATCHER
    raise TypeError(f"unknown trigger variant: {trigger!r}")


def _hook_entry(gate: ApprovalGate) -> dict[str, Any]:
    action = gate.action
    entry: dict[str, Any] = {"type": action.type}
    if isinstance(action, CommandAction):
        entry["command"] = action.command
    else:
        entry["prompt"] = action.prompt
    if action.timeout is not None:
        entry["timeout"] = action.timeout
    return entry


def _project_hooks(gates: tuple[ApprovalGate, ...]) -> dict[str, list[dict[str, Any]]]:
    hooks: dict[str, list[dict[str, Any]]] = {}
    for gate in gates:
        event, matcher = classify_gate(gate)
        hooks.setdefault(event, []).append(
            {
                "matcher": matcher,
                "hooks": [_hook_entry(gate)],
            }
        )
    return hooks
