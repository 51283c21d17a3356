"""Pytest configuration and fixtures for agentgov tests."""
from pathlib import Path

import pytest

MINIMAL_DOCUMENT = """\
version: "1.0"
project: "Minimal"
"""

FULL_DOCUMENT = """\
version: "2.1"
project: "Payments API"
description: "Card processing service."

data_classification:
  restricted:
    - "data/cards/**"

permissions:
  filesystem:
    deny:
      - path: ".env*"
        reason: "Credentials"
      - path: "secrets/**"
    ask:
      - path: "infrastructure/**"
        reason: "Platform owned"
    allow:
      - path: "src/**"
  commands:
    deny:
      - pattern: "rm -rf:*"
        reason: "Destructive"
    ask:
      - pattern: "git push:*"
  network:
    allowed_domains:
      - "github.com"

sandbox:
  enabled: true
  mode: regular
  filesystem:
    blocked_paths:
      - "data/cards"
  excluded_commands:
    - "docker"

secrets:
  policy: "Use the vault."
  detection:
    patterns:
      - pattern: "AKIA[0-9A-Z]{16}"
        name: "AWS Access Key"
      - pattern: "sk_live_[0-9a-zA-Z]{24}"
  enforcement:
    message: "Move it to the vault."

approval_gates:
  - name: "Terraform review"
    trigger:
      path_pattern: "infrastructure/**/*.tf"
    action:
      type: prompt
      prompt: "Terraform is changing."
      timeout: 30
  - name: "Deploy check"
    trigger:
      tool: "Bash"
      command_pattern: "deploy"
    action:
      type: command
      command: "exit 0"
      timeout: 10
  - name: "Schema review"
    trigger:
      command_pattern: "alembic upgrade"
    action:
      type: agent
      prompt: "Review the migration plan."

operational:
  branches:
    protected:
      - name: main
        requires:
          reviews: 2
          status_checks: true
  deployment:
    sequence:
      - environment: staging
        branch: main
        auto_deploy: true
  dynamodb:
    billing_mode: PAY_PER_REQUEST
    enforcement: required
  git:
    no_claude_attribution: true

testing:
  required_before_merge:
    - name: "Unit tests"
      command: "pytest"
      directories:
        - "services/api"

roles:
  contractor:
    members:
      - "ext-dev"
    behavior:
      - "Explain every change"

audit:
  enabled: true
  events:
    - "tool_use"
  destinations:
    - type: file
      path: "audit.log"
  retention: "1 year"

cost_controls:
  compute:
    - resource: "lambda"
      alert_threshold: "$100"

compliance:
  frameworks:
    - name: "PCI DSS"
      controls:
        - id: "3.4"
          description: "Card data is protected"
          satisfied_by:
            - "permissions.filesystem.deny"
"""


@pytest.fixture
def minimal_document(tmp_path: Path) -> Path:
    path = tmp_path / "governance.yaml"
    path.write_text(MINIMAL_DOCUMENT, encoding="utf-8")
    return path


@pytest.fixture
def full_document(tmp_path: Path) -> Path:
    path = tmp_path / "governance.yaml"
    path.write_text(FULL_DOCUMENT, encoding="utf-8")
    return path
