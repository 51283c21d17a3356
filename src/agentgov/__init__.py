"""agentgov - compile a governance.yaml policy into enforcement artifacts."""

from agentgov.compiler import (
    CompilationResult,
    compile_governance,
    compile_source,
    generate_artifacts,
    preview_governance,
    preview_source,
)

__version__ = "0.3.0"

__all__ = [
    "CompilationResult",
    "__version__",
    "compile_governance",
    "compile_source",
    "generate_artifacts",
    "preview_governance",
    "preview_source",
]
