"""CLI command for running the API server.

Usage:
    coursehub serve
    coursehub serve --port 8080 --host 0.0.0.0
    coursehub serve --reload --log-level debug
"""

from __future__ import annotations

import typer

app = typer.Typer(help="Run the CourseHub API server")


@app.callback(invoke_without_command=True)
def serve(
    host: str | None = typer.Option(
        None,
        "--host",
        "-h",
        help="Host to bind to (default: from settings)",
    ),
    port: int | None = typer.Option(
        None,
        "--port",
        "-p",
        help="Port to listen on (default: PORT, 3000)",
    ),
    reload: bool = typer.Option(
        False,
        "--reload",
        "-r",
        help="Enable auto-reload for development",
    ),
    log_level: str = typer.Option(
        "info",
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, error",
    ),
    access_log: bool = typer.Option(
        True,
        "--access-log/--no-access-log",
        help="Enable/disable access logging",
    ),
) -> None:
    """Run the CourseHub API server.

    Settings are validated before the server starts; a missing or malformed
    connection string exits with status 1.
    """
    import uvicorn
    from pydantic import ValidationError

    from coursehub.config import get_settings

    try:
        settings = get_settings()
    except ValidationError as e:
        typer.echo(f"Invalid configuration:\n{e}", err=True)
        raise typer.Exit(code=1)

    host = host or settings.host
    port = port or settings.port

    typer.echo("Starting CourseHub server...")
    typer.echo(f"  Host: {host}")
    typer.echo(f"  Port: {port}")
    typer.echo(f"  Log level: {log_level}")
    if reload:
        typer.echo("  Reload: enabled")
    typer.echo()

    uvicorn.run(
        app="coursehub.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level.lower(),
        access_log=access_log,
    )
