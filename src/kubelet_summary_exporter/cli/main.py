# src/kubelet_summary_exporter/cli/main.py
"""
This module is the main entry point for the exporter CLI.
"""

import logging

import typer

from . import serve

logger = logging.getLogger(__name__)


app = typer.Typer(
    name="kubelet-summary-exporter",
    help="Expose per-pod ephemeral storage usage from the kubelet summary API to Prometheus.",
    add_completion=False,
)


def version_callback(value: bool):
    """
    Prints the version of the exporter.
    """
    if value:
        from .. import __version__

        typer.echo(f"kubelet-summary-exporter version: {__version__}")
        raise typer.Exit()


@app.command()
def version():
    """
    Show the version of the exporter.
    """
    from .. import __version__

    typer.echo(f"kubelet-summary-exporter version: {__version__}")


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
):
    """
    kubelet-summary-exporter main entry point.
    """
    pass


app.add_typer(serve.app, name="serve")


if __name__ == "__main__":
    app()
