"""
Main CLI application for csa-scan.

Defines the Typer application structure and command routing,
with a thin CLI layer over the service layer.
"""
import typer

from csascan import __version__
from csascan.cli.commands.scan import scan_command


# Initialize Typer app
app = typer.Typer(help="csa-scan - container software composition analysis for CI pipelines")

# Register commands
app.command("scan", help="Generate an SBOM for a target, upload it and wait for the analysis result.")(scan_command)


def _version_callback(value: bool):
    if value:
        typer.echo(f"csa-scan {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"),
):
    """csa-scan - container software composition analysis for CI pipelines.

    Run 'csa-scan scan <target> --project-name <name>' to scan an image or directory.
    """
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
