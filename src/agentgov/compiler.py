"""Compile a governance document into its enforcement artifacts.

Pipeline: load -> validate -> project (settings, hook scripts, workflow,
documentation) -> write. Any stage failure stops the pipeline before the
output tree is touched.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from agentgov.artifacts.writer import Artifact, write_artifacts
from agentgov.config import CompilerConfig, load_compiler_config
from agentgov.errors import GovernanceError
from agentgov.generators.docs import render_documentation
from agentgov.generators.hooks import project_hooks
from agentgov.generators.settings import project_settings, settings_to_json
from agentgov.generators.workflow import project_workflow
from agentgov.model import GovernanceModel
from agentgov.parser import DEFAULT_SOURCE, load_document, parse_string
from agentgov.rendering import TemplateRenderer, default_renderer

logger = logging.getLogger(__name__)


@dataclass
class CompilationResult:
    """Outcome of a compile or preview run."""

    success: bool
    artifacts: list[Artifact] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    # Index returned by the writer; None for previews and failures.
    index: dict[str, Any] | None = None

    @property
    def paths(self) -> list[str]:
        return [artifact.path for artifact in self.artifacts]


def generate_artifacts(
    model: GovernanceModel,
    config: CompilerConfig,
    renderer: TemplateRenderer,
) -> list[Artifact]:
    """Project the model into artifacts: settings, hooks, workflow, docs.

    Raises:
        RuleFormatError: If a permission rule lacks its scope's field
    """
    layout = config.output
    artifacts = [
        Artifact(path=layout.settings_path, content=settings_to_json(project_settings(model)))
    ]

    hooks_dir = PurePosixPath(layout.hooks_dir)
    for script in project_hooks(model, config, renderer):
        artifacts.append(
            Artifact(
                path=str(hooks_dir / script.filename),
                content=script.content,
                executable=script.executable,
            )
        )

    pipeline = project_workflow(model, config, renderer)
    artifacts.append(Artifact(path=layout.workflow_path, content=pipeline.content))

    artifacts.append(Artifact(path=layout.docs_path, content=render_documentation(model, renderer)))
    return artifacts


def compile_governance(
    path: Path,
    output_dir: Path,
    *,
    config: CompilerConfig | None = None,
    renderer: TemplateRenderer | None = None,
) -> CompilationResult:
    """Compile ``path`` and write the artifacts under ``output_dir``."""
    return _run(
        lambda: load_document(path),
        lambda: config or load_compiler_config(path.parent),
        renderer,
        output_dir,
    )


def preview_governance(
    path: Path,
    *,
    config: CompilerConfig | None = None,
    renderer: TemplateRenderer | None = None,
) -> CompilationResult:
    """Compile ``path`` without writing anything."""
    return _run(
        lambda: load_document(path),
        lambda: config or load_compiler_config(path.parent),
        renderer,
        None,
    )


def compile_source(
    text: str,
    output_dir: Path,
    *,
    source: str = DEFAULT_SOURCE,
    config: CompilerConfig | None = None,
    renderer: TemplateRenderer | None = None,
) -> CompilationResult:
    """Compile raw document text; ``source`` labels it in error messages."""
    return _run(
        lambda: parse_string(text, source=source),
        lambda: config or CompilerConfig(),
        renderer,
        output_dir,
    )


def preview_source(
    text: str,
    *,
    source: str = DEFAULT_SOURCE,
    config: CompilerConfig | None = None,
    renderer: TemplateRenderer | None = None,
) -> CompilationResult:
    return _run(
        lambda: parse_string(text, source=source),
        lambda: config or CompilerConfig(),
        renderer,
        None,
    )


def _run(
    load: Callable[[], GovernanceModel],
    resolve_config: Callable[[], CompilerConfig],
    renderer: TemplateRenderer | None,
    output_dir: Path | None,
) -> CompilationResult:
    try:
        model = load()
        config = resolve_config()
        artifacts = generate_artifacts(model, config, renderer or default_renderer())
        logger.debug("projected %d artifact(s) for %s", len(artifacts), model.project)
        index = None
        if output_dir is not None:
            index = write_artifacts(artifacts, output_dir)
            logger.debug("published artifacts under %s", output_dir)
    except GovernanceError as e:
        return CompilationResult(success=False, errors=e.messages())
    return CompilationResult(success=True, artifacts=artifacts, index=index)
