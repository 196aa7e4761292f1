import typer
from .generate import generate
from helmschema import __version__

app = typer.Typer(
    name="helm-schema",
    help="Generate values.schema.json files from annotated Helm values",
    no_args_is_help=True,
)

@app.command("version")
def version() -> None:
    """Show the helm-schema version."""
    typer.echo(f"helm-schema v{__version__}")

app.command()(generate)
