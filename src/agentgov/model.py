"""Canonical, immutable model of one governance document."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import ClassVar, Union

from agentgov.errors import RuleFormatError

# Projection order for permission rules: every list is emitted deny first,
# and within a list filesystem rules precede command rules.
RULE_LISTS: tuple[str, ...] = ("deny", "ask", "allow")
PERMISSION_SCOPES: tuple[str, ...] = ("filesystem", "commands")

SCOPE_CAPABILITIES: dict[str, str] = {
    "filesystem": "Read|Write|Edit",
    "commands": "Bash",
}
SCOPE_RULE_FIELDS: dict[str, str] = {
    "filesystem": "path",
    "commands": "pattern",
}

PRE_TOOL_USE = "PreToolUse"
COMMAND_MATCHER = "Bash"
PATH_MATCHER = "Edit|Write"

ACTION_TYPES: tuple[str, ...] = ("command", "prompt", "agent")
SANDBOX_MODES: tuple[str, ...] = ("auto-allow", "regular")
TIMEOUT_RESOLUTIONS: tuple[str, ...] = ("allow", "block")

Scalar = Union[str, int, float, bool, None]


@dataclass(frozen=True)
class PermissionRule:
    """One allow/ask/deny entry. Which field is meaningful depends on the scope."""

    path: str | None = None
    pattern: str | None = None
    reason: str | None = None


@dataclass(frozen=True)
class RuleLists:
    """Ordered deny/ask/allow lists for one scope."""

    deny: tuple[PermissionRule, ...] = ()
    ask: tuple[PermissionRule, ...] = ()
    allow: tuple[PermissionRule, ...] = ()

    def get(self, list_name: str) -> tuple[PermissionRule, ...]:
        if list_name not in RULE_LISTS:
            raise KeyError(list_name)
        rules: tuple[PermissionRule, ...] = getattr(self, list_name)
        return rules


@dataclass(frozen=True)
class NetworkPermissions:
    allowed_domains: tuple[str, ...] | None = None
    blocked_domains: tuple[str, ...] | None = None


@dataclass(frozen=True)
class Permissions:
    filesystem: RuleLists | None = None
    commands: RuleLists | None = None
    network: NetworkPermissions | None = None

    def scope(self, scope: str) -> RuleLists | None:
        if scope not in PERMISSION_SCOPES:
            raise KeyError(scope)
        lists: RuleLists | None = getattr(self, scope)
        return lists


@dataclass(frozen=True)
class SecretPattern:
    pattern: str
    name: str | None = None

    @property
    def label(self) -> str:
        return self.name or self.pattern


@dataclass(frozen=True)
class SecretEnforcement:
    hook: str | None = None
    action: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class Secrets:
    policy: str | None = None
    allowed_sources: tuple[str, ...] = ()
    patterns: tuple[SecretPattern, ...] = ()
    enforcement: SecretEnforcement | None = None


# Triggers: resolved once at validation time, tool > command > path.


@dataclass(frozen=True)
class ToolTrigger:
    """Gate bound to a named tool, optionally narrowed by command or path."""

    kind: ClassVar[str] = "tool"

    tool: str
    command_pattern: str | None = None
    path_pattern: str | None = None


@dataclass(frozen=True)
class CommandTrigger:
    kind: ClassVar[str] = "command"

    command_pattern: str
    path_pattern: str | None = None


@dataclass(frozen=True)
class PathTrigger:
    kind: ClassVar[str] = "path"

    path_pattern: str


Trigger = Union[ToolTrigger, CommandTrigger, PathTrigger]


@dataclass(frozen=True)
class CommandAction:
    """Run an external command; its exit status decides."""

    type: ClassVar[str] = "command"

    command: str
    timeout: float | None = None  # seconds
    on_timeout: str | None = None


@dataclass(frozen=True)
class PromptAction:
    """Ask a human at the terminal."""

    type: ClassVar[str] = "prompt"

    prompt: str
    timeout: float | None = None  # seconds
    on_timeout: str | None = None


@dataclass(frozen=True)
class AgentAction:
    """Hand the decision to a reviewing agent."""

    type: ClassVar[str] = "agent"

    prompt: str
    timeout: float | None = None  # seconds
    on_timeout: str | None = None


Action = Union[CommandAction, PromptAction, AgentAction]


@dataclass(frozen=True)
class ApprovalGate:
    name: str
    trigger: Trigger
    action: Action


@dataclass(frozen=True)
class BranchProtection:
    name: str
    requires: tuple[tuple[str, Scalar], ...] = ()


@dataclass(frozen=True)
class DeploymentStage:
    environment: str
    branch: str
    auto_deploy: bool | None = None
    gates: tuple[str, ...] = ()


@dataclass(frozen=True)
class BillingConstraint:
    billing_mode: str
    enforcement: str
    reason: str | None = None


@dataclass(frozen=True)
class GitPolicy:
    no_claude_attribution: bool = False
    reason: str | None = None


@dataclass(frozen=True)
class Operational:
    protected_branches: tuple[BranchProtection, ...] = ()
    deployment: tuple[DeploymentStage, ...] = ()
    dynamodb: BillingConstraint | None = None
    git: GitPolicy | None = None


@dataclass(frozen=True)
class TestRequirement:
    __test__ = False  # not a pytest class

    name: str
    command: str
    directories: tuple[str, ...] = ()


@dataclass(frozen=True)
class TestingEnforcement:
    __test__ = False

    hook: str
    action: str
    prompt: str | None = None


@dataclass(frozen=True)
class TestingPolicy:
    __test__ = False

    required_before_commit: tuple[TestRequirement, ...] = ()
    required_before_merge: tuple[TestRequirement, ...] = ()
    enforcement: TestingEnforcement | None = None


@dataclass(frozen=True)
class Role:
    name: str
    members: tuple[str, ...] = ()
    restrictions: tuple[str, ...] = ()
    additional_gates: tuple[ApprovalGate, ...] = ()
    behavior: tuple[str, ...] = ()


@dataclass(frozen=True)
class AuditDestination:
    type: str
    options: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class Audit:
    enabled: bool | None = None
    events: tuple[str, ...] = ()
    destinations: tuple[AuditDestination, ...] = ()
    required_fields: tuple[str, ...] = ()
    retention: str | None = None


@dataclass(frozen=True)
class Sandbox:
    enabled: bool = False
    mode: str | None = None
    allowed_paths: tuple[str, ...] | None = None
    blocked_paths: tuple[str, ...] | None = None
    network_inherit_from: str | None = None
    excluded_commands: tuple[str, ...] | None = None


@dataclass(frozen=True)
class ComplianceControl:
    id: str
    description: str
    satisfied_by: tuple[str, ...]


@dataclass(frozen=True)
class ComplianceFramework:
    name: str
    controls: tuple[ComplianceControl, ...] = ()


@dataclass(frozen=True)
class CostControl:
    category: str
    resource: str | None = None
    policy: str | None = None
    alert_threshold: str | None = None
    action: str | None = None
    enforcement: str | None = None


@dataclass(frozen=True)
class GovernanceModel:
    """Validated governance document. Built once per compilation."""

    version: str
    project: str
    description: str | None = None
    data_classification: tuple[tuple[str, tuple[str, ...]], ...] = ()
    permissions: Permissions | None = None
    secrets: Secrets | None = None
    approval_gates: tuple[ApprovalGate, ...] = ()
    operational: Operational | None = None
    testing: TestingPolicy | None = None
    roles: tuple[Role, ...] = ()
    audit: Audit | None = None
    sandbox: Sandbox | None = None
    compliance: tuple[ComplianceFramework, ...] = ()
    cost_controls: tuple[CostControl, ...] = ()

    def role(self, name: str) -> Role | None:
        for role in self.roles:
            if role.name == name:
                return role
        return None

    @property
    def secret_patterns(self) -> tuple[SecretPattern, ...]:
        return self.secrets.patterns if self.secrets else ()


def rule_glob(rule: PermissionRule, scope: str) -> str:
    """Return the glob a rule contributes for its scope.

    Raises:
        RuleFormatError: If the rule lacks the field its scope requires
    """
    field_name = SCOPE_RULE_FIELDS[scope]
    value = getattr(rule, field_name)
    if not value:
        noun = "Filesystem" if scope == "filesystem" else "Command"
        raise RuleFormatError(
            f"{noun} permission rule must have a {field_name}"
            + (f" (reason: {rule.reason})" if rule.reason else "")
        )
    glob: str = value
    return glob


def format_rule(rule: PermissionRule, scope: str) -> str:
    """Render ``<capability>(<glob>)``. Globs are inserted verbatim."""
    return f"{SCOPE_CAPABILITIES[scope]}({rule_glob(rule, scope)})"


def iter_permission_rules(
    permissions: Permissions | None,
) -> Iterator[tuple[str, str, PermissionRule]]:
    """Yield ``(list_name, scope, rule)`` in canonical projection order."""
    if permissions is None:
        return
    for list_name in RULE_LISTS:
        for scope in PERMISSION_SCOPES:
            lists = permissions.scope(scope)
            if lists is None:
                continue
            for rule in lists.get(list_name):
                yield list_name, scope, rule


def trigger_path_pattern(trigger: Trigger) -> str | None:
    """Path pattern a trigger carries, whichever variant it is."""
    return trigger.path_pattern


def trigger_command_pattern(trigger: Trigger) -> str | None:
    if isinstance(trigger, PathTrigger):
        return None
    return trigger.command_pattern
