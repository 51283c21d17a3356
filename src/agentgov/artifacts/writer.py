"""Staged artifact writer.

Every artifact is first written into a staging directory under the output
root; only when all of them are staged are they moved into place. A failure
while staging leaves the output tree untouched.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any

from agentgov.artifacts.canonical_json import sha256_text
from agentgov.errors import ArtifactWriteError

logger = logging.getLogger(__name__)

ARTIFACT_INDEX_SCHEMA_VERSION = "agentgov.artifacts.v1"
STAGING_PREFIX = ".agentgov-staging-"
EXECUTABLE_MODE = 0o755


@dataclass(frozen=True)
class Artifact:
    """One generated file, addressed relative to the output root."""

    path: str  # POSIX relative path
    content: str
    executable: bool = False


def write_artifacts(artifacts: Sequence[Artifact], output_root: Path) -> dict[str, Any]:
    """Write artifacts under ``output_root`` and return the index payload.

    Raises:
        ArtifactWriteError: If any file cannot be staged or published
    """
    for artifact in artifacts:
        _check_relative(artifact.path)

    try:
        output_root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArtifactWriteError(output_root, e.strerror or str(e)) from e

    try:
        staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=output_root))
    except OSError as e:
        raise ArtifactWriteError(output_root, e.strerror or str(e)) from e

    try:
        staged: list[tuple[Artifact, Path]] = []
        for index, artifact in enumerate(artifacts):
            staged_path = staging / f"{index:03d}.tmp"
            try:
                staged_path.write_text(artifact.content, encoding="utf-8")
                if artifact.executable:
                    staged_path.chmod(EXECUTABLE_MODE)
            except OSError as e:
                raise ArtifactWriteError(artifact.path, e.strerror or str(e)) from e
            staged.append((artifact, staged_path))

        for artifact, _ in staged:
            target = output_root / artifact.path
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ArtifactWriteError(artifact.path, e.strerror or str(e)) from e

        for artifact, staged_path in staged:
            target = output_root / artifact.path
            try:
                os.replace(staged_path, target)
            except OSError as e:
                raise ArtifactWriteError(artifact.path, e.strerror or str(e)) from e
            logger.debug("wrote %s", target)
    finally:
        shutil.rmtree(staging, ignore_errors=True)

    return {
        "schema_version": ARTIFACT_INDEX_SCHEMA_VERSION,
        "artifacts": [
            {
                "path": artifact.path,
                "sha256": sha256_text(artifact.content),
                "executable": artifact.executable,
            }
            for artifact in artifacts
        ],
    }


def _check_relative(path: str) -> None:
    pure = PurePosixPath(path)
    if pure.is_absolute() or ".." in pure.parts or not pure.parts:
        raise ArtifactWriteError(path, "artifact paths must stay inside the output directory")
