"""Render GOVERNANCE.md from the canonical model."""

from __future__ import annotations

from typing import Any

from agentgov.model import (
    CommandAction,
    CommandTrigger,
    GovernanceModel,
    NetworkPermissions,
    PathTrigger,
    PermissionRule,
    Secrets,
    ToolTrigger,
    Trigger,
)
from agentgov.rendering import TemplateRenderer

DOCS_TEMPLATE = "GOVERNANCE.md.j2"


def render_documentation(model: GovernanceModel, renderer: TemplateRenderer) -> str:
    return renderer.render(DOCS_TEMPLATE, collect_docs_data(model))


def collect_docs_data(model: GovernanceModel) -> dict[str, Any]:
    permissions = model.permissions
    filesystem = permissions.filesystem if permissions else None
    commands = permissions.commands if permissions else None
    network = permissions.network if permissions else None
    audit = model.audit

    return {
        "project": model.project,
        "version": model.version,
        "description": model.description,
        "filesystem": _rule_sections(filesystem, "path") if filesystem else [],
        "commands": _rule_sections(commands, "pattern") if commands else [],
        "network": _network_doc(network) if network else None,
        "secrets": _secrets_doc(model.secrets) if model.secrets else None,
        "gates": [_gate_doc(gate.name, gate.trigger, gate.action) for gate in model.approval_gates],
        "roles": [
            {
                "name": role.name,
                "members": list(role.members),
                "restrictions": list(role.restrictions),
                "behavior": list(role.behavior),
                "gates": [
                    _gate_doc(gate.name, gate.trigger, gate.action)
                    for gate in role.additional_gates
                ],
            }
            for role in model.roles
            if role.members or role.restrictions or role.behavior or role.additional_gates
        ],
        "testing": model.testing,
        "operational": model.operational,
        "audit": audit if audit and (audit.events or audit.destinations or audit.retention) else None,
        "cost_controls": list(model.cost_controls),
        "data_classification": [
            {"label": label, "globs": list(globs)} for label, globs in model.data_classification
        ],
        "compliance": [framework for framework in model.compliance if framework.controls],
    }


def _network_doc(network: NetworkPermissions) -> dict[str, Any] | None:
    allowed = list(network.allowed_domains or ())
    blocked = list(network.blocked_domains or ())
    if not allowed and not blocked:
        return None
    return {"allowed": allowed, "blocked": blocked}


def _secrets_doc(secrets: Secrets) -> dict[str, Any] | None:
    if not (secrets.policy or secrets.allowed_sources or secrets.patterns):
        return None
    return {
        "policy": secrets.policy,
        "allowed_sources": list(secrets.allowed_sources),
        "patterns": [secret.label for secret in secrets.patterns],
    }


def _rule_sections(lists: Any, field_name: str) -> list[dict[str, Any]]:
    headings = {"deny": "Blocked", "ask": "Requires approval", "allow": "Allowed"}
    sections = []
    for list_name, heading in headings.items():
        rules: tuple[PermissionRule, ...] = lists.get(list_name)
        if rules:
            sections.append(
                {
                    "heading": heading,
                    "rules": [
                        {"glob": getattr(rule, field_name) or "(missing)", "reason": rule.reason}
                        for rule in rules
                    ],
                }
            )
    return sections


def describe_trigger(trigger: Trigger) -> str:
    if isinstance(trigger, ToolTrigger):
        text = f"Tool `{trigger.tool}`"
        if trigger.command_pattern:
            text += f" running commands matching `{trigger.command_pattern}`"
        if trigger.path_pattern:
            text += f" on files matching `{trigger.path_pattern}`"
        return text
    if isinstance(trigger, CommandTrigger):
        return f"Commands matching `{trigger.command_pattern}`"
    if isinstance(trigger, PathTrigger):
        return f"Files matching `{trigger.path_pattern}`"
    raise TypeError(f"unknown trigger variant: {trigger!r}")


def _gate_doc(name: str, trigger: Trigger, action: Any) -> dict[str, Any]:
    detail = action.command if isinstance(action, CommandAction) else action.prompt
    return {
        "name": name,
        "trigger": describe_trigger(trigger),
        "action": action.type,
        "detail": detail,
        "timeout": action.timeout,
    }
