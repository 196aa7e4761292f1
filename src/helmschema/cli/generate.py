from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from helmschema.cli.renderers import GenerateJsonRenderer, GenerateRenderer, run_events
from helmschema.core.generate import generate_events

console = Console(stderr=True)
out = Console()


def generate(
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a config file (default: .helm-schema.yaml if present).",
    ),
    chart_search_root: str | None = typer.Option(
        None,
        "--chart-search-root",
        "-d",
        help="Directory to search recursively for Chart.yaml files.",
    ),
    value_files: list[str] | None = typer.Option(
        None,
        "--value-files",
        "-f",
        help="Values file names to look for, in order. Repeatable or comma separated.",
    ),
    output_file: str | None = typer.Option(
        None,
        "--output-file",
        "-o",
        help="File name of the generated schema, next to Chart.yaml.",
    ),
    dry_run: bool | None = typer.Option(
        None,
        "--dry-run/--no-dry-run",
        help="Print the schemas instead of writing them.",
    ),
    no_dependencies: bool | None = typer.Option(
        None,
        "--no-dependencies/--dependencies",
        "-n",
        help="Do not embed or reference dependency schemas.",
    ),
    use_references: bool | None = typer.Option(
        None,
        "--use-references/--no-use-references",
        "-r",
        help="Reference dependency schemas with $ref instead of embedding them.",
    ),
    keep_full_comment: bool | None = typer.Option(
        None,
        "--keep-full-comment/--no-keep-full-comment",
        "-s",
        help="Keep comment paragraphs separated by blank lines.",
    ),
    helm_docs_compatibility_mode: bool | None = typer.Option(
        None,
        "--helm-docs-compatibility-mode/--no-helm-docs-compatibility-mode",
        "-p",
        help="Also read helm-docs '# --' comments.",
    ),
    dont_strip_helm_docs_prefix: bool | None = typer.Option(
        None,
        "--dont-strip-helm-docs-prefix/--strip-helm-docs-prefix",
        "-x",
        help="Keep helm-docs '--' prefixes and @tags in descriptions.",
    ),
    skip_auto_generation: list[str] | None = typer.Option(
        None,
        "--skip-auto-generation",
        "-k",
        help="Keywords not to generate: title, description, required, default, additionalProperties.",
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Number of charts processed in parallel.",
    ),
    log_level: str = typer.Option(
        "warning",
        "--log-level",
        "-l",
        help="Log level (debug, info, warning, error).",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Show stack traces for unexpected errors.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit one JSON object per event.",
    ),
) -> None:
    """Generate values.schema.json for every chart below the search root."""
    _configure_logging(log_level)
    overrides = {
        "chart_search_root": chart_search_root,
        "value_files": value_files,
        "output_file": output_file,
        "dry_run": dry_run,
        "no_dependencies": no_dependencies,
        "use_references": use_references,
        "keep_full_comment": keep_full_comment,
        "helm_docs_compatibility_mode": helm_docs_compatibility_mode,
        "dont_strip_helm_docs_prefix": dont_strip_helm_docs_prefix,
        "skip_auto_generation": skip_auto_generation,
        "workers": workers,
    }
    events = generate_events(
        config_path=config,
        overrides={key: value for key, value in overrides.items() if value is not None},
    )
    renderer = GenerateJsonRenderer(out) if json_output else GenerateRenderer(console, out)
    try:
        exit_code = run_events(events, renderer)
    except Exception as exc:  # noqa: BLE001
        if debug:
            raise
        console.print(f"[red]Unexpected error:[/red] {exc}", markup=True, highlight=False)
        raise typer.Exit(code=3)
    raise typer.Exit(code=exit_code)


def _configure_logging(level: str) -> None:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise typer.BadParameter(f"Unknown log level: {level}", param_hint="--log-level")
    logging.basicConfig(
        level=numeric,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
