"""Projectors from the governance model to artifact text."""

from agentgov.generators.docs import render_documentation
from agentgov.generators.hooks import EnforcementScript, project_hooks
from agentgov.generators.settings import classify_gate, project_settings, settings_to_json
from agentgov.generators.workflow import PipelineDefinition, collect_workflow_data, project_workflow

__all__ = [
    "EnforcementScript",
    "PipelineDefinition",
    "classify_gate",
    "collect_workflow_data",
    "project_hooks",
    "project_settings",
    "project_workflow",
    "render_documentation",
    "settings_to_json",
]
