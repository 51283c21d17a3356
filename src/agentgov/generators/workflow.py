"""Project the CI-relevant subset of the model into a GitHub Actions workflow."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any

from agentgov.artifacts.canonical_json import canonical_dumps
from agentgov.config import CompilerConfig
from agentgov.model import GovernanceModel, trigger_path_pattern
from agentgov.rendering import TemplateRenderer

WORKFLOW_TEMPLATE = "workflows/governance.yml.j2"
CONTRACTOR_ROLE = "contractor"
INFRASTRUCTURE_MARKERS: tuple[str, ...] = (".tf", "infrastructure/")


@dataclass(frozen=True)
class PipelineDefinition:
    filename: str
    content: str
    data: dict[str, Any]


def collect_workflow_data(model: GovernanceModel, config: CompilerConfig) -> dict[str, Any]:
    """Extract the data bag the workflow template renders.

    Every extraction tolerates its section being absent.
    """
    operational = model.operational
    data: dict[str, Any] = {
        "project_name": model.project,
        "runs_on": config.workflow.runs_on,
        "protected_branches": [branch.name for branch in operational.protected_branches]
        if operational
        else [],
        "secret_patterns": [
            {"pattern": secret.pattern, "name": secret.name}
            for secret in model.secret_patterns
        ],
        "has_terraform": uses_infrastructure_as_code(model),
        "dynamodb_billing_mode": operational.dynamodb.billing_mode
        if operational and operational.dynamodb
        else None,
        "contractor_members": _contractor_members(model),
        "contractor_restricted_paths": _restricted_paths(model),
        "compliance_controls": [
            {
                "framework": framework.name,
                "id": control.id,
                "description": control.description,
                "evidence": list(control.satisfied_by),
            }
            for framework in model.compliance
            for control in framework.controls
        ],
        "required_tests": _required_tests(model),
        "no_ai_attribution": bool(
            operational and operational.git and operational.git.no_claude_attribution
        ),
    }
    # Serialized forms handed to scripts inside the workflow.
    data["secret_patterns_json"] = canonical_dumps(data["secret_patterns"])
    data["compliance_controls_json"] = canonical_dumps(data["compliance_controls"])
    data["contractor_members_json"] = canonical_dumps(data["contractor_members"])
    data["contractor_restricted_paths_json"] = canonical_dumps(data["contractor_restricted_paths"])
    return data


def project_workflow(
    model: GovernanceModel,
    config: CompilerConfig,
    renderer: TemplateRenderer,
) -> PipelineDefinition:
    data = collect_workflow_data(model, config)
    content = renderer.render(WORKFLOW_TEMPLATE, data)
    return PipelineDefinition(
        filename=PurePosixPath(config.output.workflow_path).name,
        content=content,
        data=data,
    )


def uses_infrastructure_as_code(model: GovernanceModel) -> bool:
    """True when any approval gate's path trigger targets Terraform or infrastructure/."""
    for gate in model.approval_gates:
        pattern = trigger_path_pattern(gate.trigger)
        if pattern and any(marker in pattern for marker in INFRASTRUCTURE_MARKERS):
            return True
    return False


def _contractor_members(model: GovernanceModel) -> list[str]:
    role = model.role(CONTRACTOR_ROLE)
    return list(role.members) if role else []


def _restricted_paths(model: GovernanceModel) -> list[str]:
    permissions = model.permissions
    if permissions is None or permissions.filesystem is None:
        return []
    filesystem = permissions.filesystem
    return [rule.path for rule in (*filesystem.deny, *filesystem.ask) if rule.path]


def _required_tests(model: GovernanceModel) -> list[dict[str, str]]:
    if model.testing is None:
        return []
    steps: list[dict[str, str]] = []
    for requirement in model.testing.required_before_merge:
        for directory in requirement.directories or (".",):
            steps.append(
                {
                    "name": requirement.name
                    if directory == "."
                    else f"{requirement.name} ({directory})",
                    "command": requirement.command,
                    "directory": directory,
                }
            )
    return steps
