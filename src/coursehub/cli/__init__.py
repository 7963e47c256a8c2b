"""CLI commands for CourseHub.

Usage:
    coursehub --help
    coursehub serve --port 3000
"""

import typer

from coursehub.cli.serve import app as serve_app

app = typer.Typer(
    name="coursehub",
    help="CourseHub: course and student management API",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")


@app.callback()
def callback() -> None:
    """CourseHub: course and student management API."""


def main() -> None:
    """Entry point for the CLI."""
    app()
