"""Tests for GOVERNANCE.md rendering."""

from __future__ import annotations

from pathlib import Path

from agentgov.generators.docs import describe_trigger, render_documentation
from agentgov.model import CommandTrigger, PathTrigger, ToolTrigger
from agentgov.parser import load_document, validate
from agentgov.rendering import JinjaRenderer

RENDERER = JinjaRenderer()


def test_minimal_document(minimal_document: Path) -> None:
    text = render_documentation(load_document(minimal_document), RENDERER)

    assert text.startswith("# Governance Documentation\n")
    assert "Project: Minimal (policy version 1.0)" in text
    assert "## Permissions" not in text
    assert "## Approval Gates" not in text
    assert text.endswith("*Auto-generated by agentgov*\n")


def test_full_document_sections(full_document: Path) -> None:
    text = render_documentation(load_document(full_document), RENDERER)

    assert "- `.env*` - Credentials\n" in text
    assert "- `secrets/**`\n" in text
    assert "**Requires approval:**" in text
    assert "### Command Restrictions" in text
    assert "**Allowed domains:** github.com" in text
    assert "- AWS Access Key\n" in text
    assert "### Terraform review" in text
    assert "**Trigger:** Files matching `infrastructure/**/*.tf`" in text
    assert "**Action:** prompt (timeout 30s)" in text
    assert "### contractor" in text
    assert "- Unit tests: `pytest` in services/api" in text
    assert "- `main`: reviews=2, status_checks=True" in text
    assert "1. staging from `main` (auto deploy)" in text
    assert "- file: path=audit.log" in text
    assert "- compute / lambda (alert at $100)" in text
    assert "- **restricted**: data/cards/**" in text
    assert "**3.4:** Card data is protected" in text


def test_sections_are_separated_by_blank_lines(full_document: Path) -> None:
    text = render_documentation(load_document(full_document), RENDERER)

    assert "\n\n\n" not in text
    for heading in ("## Permissions", "## Secrets", "## Roles", "## Compliance"):
        assert f"\n\n{heading}\n" in text


def test_describe_trigger_variants() -> None:
    assert describe_trigger(ToolTrigger(tool="Bash", command_pattern="push")) == (
        "Tool `Bash` running commands matching `push`"
    )
    assert describe_trigger(CommandTrigger(command_pattern="npm")) == "Commands matching `npm`"
    assert describe_trigger(PathTrigger(path_pattern="*.tf")) == "Files matching `*.tf`"


def test_empty_sections_get_no_heading() -> None:
    model = validate(
        {
            "version": "1",
            "project": "p",
            "permissions": {"network": {}},
            "secrets": {},
            "roles": {"contractor": {}, "reviewer": {"members": ["ana"]}},
            "audit": {"enabled": True},
            "compliance": {"frameworks": []},
        }
    )

    text = render_documentation(model, RENDERER)

    for heading in ("## Permissions", "### Network", "## Secrets", "### contractor", "## Audit", "## Compliance"):
        assert heading not in text
    assert "## Roles\n\n### reviewer\n\nMembers: ana\n" in text
    assert "\n\n\n" not in text


def test_roles_heading_dropped_when_every_role_is_empty() -> None:
    model = validate({"version": "1", "project": "p", "roles": {"contractor": {}}})

    assert "## Roles" not in render_documentation(model, RENDERER)
