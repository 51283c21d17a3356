"""Error kinds raised while loading, validating, projecting and writing."""

from __future__ import annotations

from dataclasses import dataclass

REASON_SOURCE_NOT_FOUND = "SOURCE_NOT_FOUND"
REASON_SYNTAX_ERROR = "SYNTAX_ERROR"
REASON_SOURCE_UNREADABLE = "SOURCE_UNREADABLE"
REASON_SCHEMA_VIOLATION = "SCHEMA_VIOLATION"
REASON_RULE_FORMAT = "RULE_FORMAT"
REASON_WRITE_ERROR = "WRITE_ERROR"
REASON_CONFIG_INVALID = "CONFIG_INVALID"


class GovernanceError(Exception):
    """Base class for every failure the compiler reports to the user."""

    reason_code: str = "GOVERNANCE_ERROR"

    def messages(self) -> list[str]:
        """Return the error as a flat list of human-readable lines."""
        return [str(self)]


class SourceNotFoundError(GovernanceError):
    """The governance document path does not exist."""

    reason_code = REASON_SOURCE_NOT_FOUND

    def __init__(self, path: object) -> None:
        super().__init__(f"Governance file not found: {path}")
        self.path = path


class SourceUnreadableError(GovernanceError):
    """The governance document exists but cannot be read."""

    reason_code = REASON_SOURCE_UNREADABLE

    def __init__(self, path: object, detail: str) -> None:
        super().__init__(f"Cannot read governance file {path}: {detail}")
        self.path = path


class DocumentSyntaxError(GovernanceError):
    """The document is not parseable YAML."""

    reason_code = REASON_SYNTAX_ERROR

    def __init__(self, source: str, detail: str) -> None:
        super().__init__(f"YAML parsing error in {source}: {detail}")
        self.source = source
        self.detail = detail


@dataclass(frozen=True)
class Violation:
    """Single schema violation."""

    path: str  # dot-separated, "(root)" for the document itself
    message: str
    allowed: tuple[str, ...] = ()

    def render(self) -> str:
        line = f"{self.path}: {self.message}"
        if self.allowed:
            line += f" (allowed values: {', '.join(self.allowed)})"
        return line


class SchemaViolationError(GovernanceError):
    """Aggregated structural violations for one document."""

    reason_code = REASON_SCHEMA_VIOLATION

    def __init__(self, source: str, violations: list[Violation]) -> None:
        self.source = source
        self.violations = tuple(violations)
        super().__init__(
            f"Validation errors in {source}:\n"
            + "\n".join(f"  - {violation.render()}" for violation in self.violations)
        )

    def messages(self) -> list[str]:
        return [f"{self.source}: {violation.render()}" for violation in self.violations]


class RuleFormatError(GovernanceError):
    """A permission rule lacks the field its scope requires."""

    reason_code = REASON_RULE_FORMAT


class ArtifactWriteError(GovernanceError):
    """Storage failure while publishing artifacts."""

    reason_code = REASON_WRITE_ERROR

    def __init__(self, path: object, detail: str) -> None:
        super().__init__(f"Failed to write {path}: {detail}")
        self.path = path


class ConfigError(GovernanceError):
    """Compiler configuration file is malformed."""

    reason_code = REASON_CONFIG_INVALID
