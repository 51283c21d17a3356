"""Load a governance document and build the canonical model."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from agentgov.errors import (
    DocumentSyntaxError,
    GovernanceError,
    SchemaViolationError,
    SourceNotFoundError,
    SourceUnreadableError,
)
from agentgov.model import (
    Action,
    AgentAction,
    ApprovalGate,
    Audit,
    AuditDestination,
    BillingConstraint,
    BranchProtection,
    CommandAction,
    CommandTrigger,
    ComplianceControl,
    ComplianceFramework,
    CostControl,
    DeploymentStage,
    GitPolicy,
    GovernanceModel,
    NetworkPermissions,
    Operational,
    PathTrigger,
    PermissionRule,
    Permissions,
    PromptAction,
    Role,
    RuleLists,
    Sandbox,
    SecretEnforcement,
    SecretPattern,
    Secrets,
    TestingEnforcement,
    TestingPolicy,
    TestRequirement,
    ToolTrigger,
    Trigger,
)
from agentgov.schemas.validator import collect_violations

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "governance.yaml"
GOVERNANCE_SCHEMA = "governance"
AUDIT_DESTINATION_OPTIONS = ("path", "bucket", "prefix", "profile", "endpoint")


@dataclass
class ValidationReport:
    """Non-raising validation outcome."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    model: GovernanceModel | None = None


def load_document(path: Path) -> GovernanceModel:
    """Read, parse and validate a governance file.

    Raises:
        SourceNotFoundError: If the path does not exist
        SourceUnreadableError: If the file cannot be read
        DocumentSyntaxError: If the file is not valid UTF-8 YAML
        SchemaViolationError: If the document violates the schema
    """
    if not path.is_file():
        raise SourceNotFoundError(path)
    logger.debug("reading governance document %s", path)
    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise DocumentSyntaxError(str(path), f"not valid UTF-8 ({exc.reason} at byte {exc.start})") from exc
    except OSError as exc:
        raise SourceUnreadableError(path, exc.strerror or str(exc)) from exc
    return parse_string(content, source=str(path))


def parse_string(content: str, source: str = DEFAULT_SOURCE) -> GovernanceModel:
    """Parse and validate governance YAML from a string."""
    try:
        raw = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise DocumentSyntaxError(source, str(exc)) from exc
    return validate(raw, source=source)


def validate(raw: Any, source: str = DEFAULT_SOURCE) -> GovernanceModel:
    """Validate a parsed document and return the canonical model.

    Either the full model is returned or ``SchemaViolationError`` carrying
    every violation is raised; nothing is partially applied.
    """
    violations = collect_violations(raw, GOVERNANCE_SCHEMA)
    if violations:
        logger.debug("%s: %d schema violation(s)", source, len(violations))
        raise SchemaViolationError(source, violations)
    return build_model(raw)


def validate_file(path: Path) -> ValidationReport:
    """Validate without raising."""
    try:
        model = load_document(path)
    except GovernanceError as exc:
        return ValidationReport(valid=False, errors=exc.messages())
    return ValidationReport(valid=True, model=model)


def build_model(raw: dict[str, Any]) -> GovernanceModel:
    """Convert a schema-valid mapping into the canonical model."""
    permissions = raw.get("permissions")
    secrets = raw.get("secrets")
    operational = raw.get("operational")
    testing = raw.get("testing")
    audit = raw.get("audit")
    sandbox = raw.get("sandbox")
    compliance = raw.get("compliance") or {}

    return GovernanceModel(
        version=raw["version"],
        project=raw["project"],
        description=raw.get("description"),
        data_classification=tuple(
            (label, tuple(globs)) for label, globs in (raw.get("data_classification") or {}).items()
        ),
        permissions=_build_permissions(permissions) if permissions is not None else None,
        secrets=_build_secrets(secrets) if secrets is not None else None,
        approval_gates=tuple(_build_gate(gate) for gate in raw.get("approval_gates") or []),
        operational=_build_operational(operational) if operational is not None else None,
        testing=_build_testing(testing) if testing is not None else None,
        roles=tuple(
            _build_role(name, role or {}) for name, role in (raw.get("roles") or {}).items()
        ),
        audit=_build_audit(audit) if audit is not None else None,
        sandbox=_build_sandbox(sandbox) if sandbox is not None else None,
        compliance=tuple(
            ComplianceFramework(
                name=framework["name"],
                controls=tuple(
                    ComplianceControl(
                        id=control["id"],
                        description=control["description"],
                        satisfied_by=tuple(control["satisfied_by"]),
                    )
                    for control in framework["controls"]
                ),
            )
            for framework in compliance.get("frameworks") or []
        ),
        cost_controls=tuple(
            CostControl(
                category=category,
                resource=entry.get("resource"),
                policy=entry.get("policy"),
                alert_threshold=entry.get("alert_threshold"),
                action=entry.get("action"),
                enforcement=entry.get("enforcement"),
            )
            for category, entries in (raw.get("cost_controls") or {}).items()
            for entry in entries
        ),
    )


def _optional_tuple(value: list[str] | None) -> tuple[str, ...] | None:
    return tuple(value) if value is not None else None


def _build_rule_lists(raw: dict[str, Any] | None) -> RuleLists | None:
    if raw is None:
        return None

    def rules(name: str) -> tuple[PermissionRule, ...]:
        return tuple(
            PermissionRule(
                path=entry.get("path"),
                pattern=entry.get("pattern"),
                reason=entry.get("reason"),
            )
            for entry in raw.get(name) or []
        )

    return RuleLists(deny=rules("deny"), ask=rules("ask"), allow=rules("allow"))


def _build_permissions(raw: dict[str, Any]) -> Permissions:
    network = raw.get("network")
    return Permissions(
        filesystem=_build_rule_lists(raw.get("filesystem")),
        commands=_build_rule_lists(raw.get("commands")),
        network=NetworkPermissions(
            allowed_domains=_optional_tuple(network.get("allowed_domains")),
            blocked_domains=_optional_tuple(network.get("blocked_domains")),
        )
        if network is not None
        else None,
    )


def _build_secrets(raw: dict[str, Any]) -> Secrets:
    detection = raw.get("detection") or {}
    enforcement = raw.get("enforcement")
    return Secrets(
        policy=raw.get("policy"),
        allowed_sources=tuple(raw.get("allowed_sources") or []),
        patterns=tuple(
            SecretPattern(pattern=entry["pattern"], name=entry.get("name"))
            for entry in detection.get("patterns") or []
        ),
        enforcement=SecretEnforcement(
            hook=enforcement.get("hook"),
            action=enforcement.get("action"),
            message=enforcement.get("message"),
        )
        if enforcement is not None
        else None,
    )


def _build_trigger(raw: dict[str, Any]) -> Trigger:
    tool = raw.get("tool")
    command_pattern = raw.get("command_pattern")
    path_pattern = raw.get("path_pattern")
    if tool:
        return ToolTrigger(tool=tool, command_pattern=command_pattern, path_pattern=path_pattern)
    if command_pattern:
        return CommandTrigger(command_pattern=command_pattern, path_pattern=path_pattern)
    if path_pattern:
        return PathTrigger(path_pattern=path_pattern)
    raise ValueError("approval gate trigger declares no tool, command_pattern or path_pattern")


def _build_action(raw: dict[str, Any]) -> Action:
    timeout = raw.get("timeout")
    on_timeout = raw.get("on_timeout")
    action_type = raw["type"]
    if action_type == "command":
        return CommandAction(command=raw["command"], timeout=timeout, on_timeout=on_timeout)
    if action_type == "prompt":
        return PromptAction(prompt=raw["prompt"], timeout=timeout, on_timeout=on_timeout)
    return AgentAction(prompt=raw["prompt"], timeout=timeout, on_timeout=on_timeout)


def _build_gate(raw: dict[str, Any]) -> ApprovalGate:
    return ApprovalGate(
        name=raw["name"],
        trigger=_build_trigger(raw["trigger"]),
        action=_build_action(raw["action"]),
    )


def _build_operational(raw: dict[str, Any]) -> Operational:
    branches = raw.get("branches") or {}
    deployment = raw.get("deployment") or {}
    dynamodb = raw.get("dynamodb")
    git = raw.get("git")
    return Operational(
        protected_branches=tuple(
            BranchProtection(name=entry["name"], requires=tuple(entry["requires"].items()))
            for entry in branches.get("protected") or []
        ),
        deployment=tuple(
            DeploymentStage(
                environment=stage["environment"],
                branch=stage["branch"],
                auto_deploy=stage.get("auto_deploy"),
                gates=tuple(stage.get("gates") or []),
            )
            for stage in deployment.get("sequence") or []
        ),
        dynamodb=BillingConstraint(
            billing_mode=dynamodb["billing_mode"],
            enforcement=dynamodb["enforcement"],
            reason=dynamodb.get("reason"),
        )
        if dynamodb is not None
        else None,
        git=GitPolicy(
            no_claude_attribution=bool(git.get("no_claude_attribution", False)),
            reason=git.get("reason"),
        )
        if git is not None
        else None,
    )


def _build_test_requirements(raw: list[dict[str, Any]] | None) -> tuple[TestRequirement, ...]:
    return tuple(
        TestRequirement(
            name=entry["name"],
            command=entry["command"],
            directories=tuple(entry.get("directories") or []),
        )
        for entry in raw or []
    )


def _build_testing(raw: dict[str, Any]) -> TestingPolicy:
    enforcement = raw.get("enforcement")
    return TestingPolicy(
        required_before_commit=_build_test_requirements(raw.get("required_before_commit")),
        required_before_merge=_build_test_requirements(raw.get("required_before_merge")),
        enforcement=TestingEnforcement(
            hook=enforcement["hook"],
            action=enforcement["action"],
            prompt=enforcement.get("prompt"),
        )
        if enforcement is not None
        else None,
    )


def _build_role(name: str, raw: dict[str, Any]) -> Role:
    return Role(
        name=name,
        members=tuple(raw.get("members") or []),
        restrictions=tuple(raw.get("restrictions") or []),
        additional_gates=tuple(_build_gate(gate) for gate in raw.get("additional_gates") or []),
        behavior=tuple(raw.get("behavior") or []),
    )


def _build_audit(raw: dict[str, Any]) -> Audit:
    destinations = []
    for entry in raw.get("destinations") or []:
        options: list[tuple[str, str]] = []
        for key, value in entry.items():
            if key == "headers":
                options.extend((f"headers.{name}", header) for name, header in value.items())
            elif key in AUDIT_DESTINATION_OPTIONS:
                options.append((key, value))
        destinations.append(AuditDestination(type=entry["type"], options=tuple(options)))

    return Audit(
        enabled=raw.get("enabled"),
        events=tuple(raw.get("events") or []),
        destinations=tuple(destinations),
        required_fields=tuple(raw.get("required_fields") or []),
        retention=raw.get("retention"),
    )


def _build_sandbox(raw: dict[str, Any]) -> Sandbox:
    filesystem = raw.get("filesystem") or {}
    network = raw.get("network") or {}
    return Sandbox(
        enabled=bool(raw.get("enabled", False)),
        mode=raw.get("mode"),
        allowed_paths=_optional_tuple(filesystem.get("allowed_paths")),
        blocked_paths=_optional_tuple(filesystem.get("blocked_paths")),
        network_inherit_from=network.get("inherit_from"),
        excluded_commands=_optional_tuple(raw.get("excluded_commands")),
    )
