"""agentgov CLI - compile governance.yaml into enforcement artifacts."""

import logging
from enum import Enum
from importlib.resources import files
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from agentgov import __version__
from agentgov.compiler import CompilationResult, compile_governance, preview_governance
from agentgov.parser import DEFAULT_SOURCE, validate_file

PREVIEW_LINES = 10

cli = typer.Typer(
    name="agentgov",
    help="agentgov - Policy compiler for coding-agent governance",
    no_args_is_help=True,
)
console = Console(soft_wrap=True)
err_console = Console(stderr=True)


class StarterTemplate(str, Enum):
    """Packaged starter documents for ``agentgov init``."""

    STARTUP = "startup"
    SOC2 = "soc2"
    HIPAA = "hipaa"
    ENTERPRISE = "enterprise"


def _version_option_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@cli.callback()
def _cli_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show agentgov version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
) -> None:
    """Configure logging for every command."""
    _ = version
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _print_errors(errors: list[str]) -> None:
    console.print("[bold red]Error:[/bold red] governance compilation failed")
    for error in errors:
        console.print(f"  {error}", markup=False, highlight=False)


@cli.command(name="init")
def init_cmd(
    template: StarterTemplate = typer.Option(
        StarterTemplate.STARTUP,
        "--template",
        "-t",
        help="Starter policy to copy (startup, soc2, hipaa, enterprise).",
    ),
) -> None:
    """Create governance.yaml from a starter template."""
    target = Path(DEFAULT_SOURCE)
    if target.exists():
        console.print(f"[bold red]Error:[/bold red] {target} already exists; refusing to overwrite")
        raise typer.Exit(1)

    starter = files("agentgov") / "templates" / "compliance" / f"{template.value}.yaml"
    target.write_text(starter.read_text(encoding="utf-8"), encoding="utf-8")
    console.print(f"[green]✓ Created {target} from the {template.value} template[/green]")
    console.print("Next: edit it, then run [bold]agentgov compile[/bold]")


@cli.command()
def validate(
    file: Path = typer.Option(
        Path(DEFAULT_SOURCE), "--file", "-f", help="Governance document to validate."
    ),
) -> None:
    """Validate a governance document without generating anything."""
    report = validate_file(file)
    if not report.valid:
        _print_errors(report.errors)
        raise typer.Exit(1)
    assert report.model is not None
    console.print(f"[green]✓ {file} is valid[/green] (project: {report.model.project})")


@cli.command(name="compile")
def compile_cmd(
    file: Path = typer.Option(
        Path(DEFAULT_SOURCE), "--file", "-f", help="Governance document to compile."
    ),
    output: Path = typer.Option(Path("."), "--output", "-o", help="Output root directory."),
) -> None:
    """Compile a governance document and write every artifact."""
    result = compile_governance(file, output)
    if not result.success:
        _print_errors(result.errors)
        raise typer.Exit(1)

    console.print(f"[green]✓ Compiled {file} into {len(result.artifacts)} artifact(s)[/green]")
    for path in result.paths:
        console.print(f"  {output / path}", highlight=False)


@cli.command()
def preview(
    file: Path = typer.Option(
        Path(DEFAULT_SOURCE), "--file", "-f", help="Governance document to preview."
    ),
) -> None:
    """Show what compile would generate, without writing files."""
    result = preview_governance(file)
    if not result.success:
        _print_errors(result.errors)
        raise typer.Exit(1)
    _print_preview(result)


def _print_preview(result: CompilationResult) -> None:
    for artifact in result.artifacts:
        lines = artifact.content.splitlines()
        console.print(f"\n[bold]{artifact.path}[/bold]", highlight=False)
        for line in lines[:PREVIEW_LINES]:
            console.print(f"  {line}", markup=False, highlight=False)
        if len(lines) > PREVIEW_LINES:
            console.print(f"  ... ({len(lines) - PREVIEW_LINES} more lines)", highlight=False)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
