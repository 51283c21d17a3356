"""Schema validation against package-data schemas, collecting every violation."""

from __future__ import annotations

import re
from typing import Any

from jsonschema import ValidationError as JsonSchemaError
from jsonschema.validators import Draft202012Validator

from agentgov.errors import Violation
from agentgov.utils.schema_registry import get_registry

ROOT_PATH = "(root)"

_REQUIRED_RE = re.compile(r"^'(?P<name>.+)' is a required property$")


def collect_violations(data: Any, schema_name: str) -> list[Violation]:
    """Validate data against a packaged schema and return all violations.

    The walk never stops at the first problem; results are sorted by field
    path so reports are stable between runs.

    Args:
        data: Parsed document (any YAML value)
        schema_name: Name of schema to validate against

    Returns:
        List of violations, empty when the data conforms
    """
    schema = get_registry().get_json(schema_name)
    validator = Draft202012Validator(
        schema,
        format_checker=Draft202012Validator.FORMAT_CHECKER,
    )
    violations = [_to_violation(error) for error in validator.iter_errors(data)]
    return sorted(violations, key=lambda v: (v.path, v.message))


def _to_violation(error: JsonSchemaError) -> Violation:
    parts = [str(p) for p in error.absolute_path]

    if error.validator == "required":
        # Point at the missing field, not its parent.
        match = _REQUIRED_RE.match(error.message)
        if match:
            parts.append(match.group("name"))
            return Violation(path=".".join(parts), message="required field is missing")

    allowed: tuple[str, ...] = ()
    if error.validator == "enum":
        allowed = tuple(str(value) for value in error.validator_value)

    return Violation(
        path=".".join(parts) if parts else ROOT_PATH,
        message=error.message,
        allowed=allowed,
    )
