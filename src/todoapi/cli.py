"""Command-line interface for the Todo API.

This module provides the CLI commands for running the server and for
preparing the identities it authenticates.
"""

from typing import NoReturn

import click

from todoapi.core.config import get_settings
from todoapi.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version="0.1.0", prog_name="todoapi")
def cli() -> None:
    """Todo API - Todo backend with HTTP Basic and JWT authentication."""


@cli.command()
@click.option(
    "--host",
    type=str,
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Start the Todo API server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    if bind_workers > 1 and settings.database_url.startswith("sqlite"):
        click.echo(
            "Error: SQLite does not support multiple worker processes. "
            "Use --workers 1 or switch to a server database.",
            err=True,
        )
        raise SystemExit(1)

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting Todo API server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "todoapi.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command("hash-password")
@click.option(
    "--password",
    type=str,
    default=None,
    help="Password to hash (prompts if not provided)",
)
def hash_password_command(password: str | None) -> None:
    """Print an Argon2id hash for use as a user's password_hash."""
    from todoapi.infrastructure.auth import hash_password

    if password is None:
        password = click.prompt("Password", hide_input=True, confirmation_prompt=True)
    if not password:
        click.echo("Error: Password must not be empty", err=True)
        raise SystemExit(1)

    click.echo(hash_password(password))


@cli.command()
def info() -> None:
    """Display Todo API configuration. Secrets are never printed."""
    from sqlalchemy.engine import make_url

    settings = get_settings()
    database_url = make_url(settings.database_url).render_as_string(hide_password=True)

    identities = settings.users_file or f"{len(settings.users)} configured user(s)"
    click.echo(f"""
Todo API v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  Workers:      {settings.workers}

Database:
  URL:          {database_url}
  Echo:         {settings.db_echo}

Tokens:
  Algorithm:    {settings.jwt_algorithm}
  Lifetime:     {settings.token_lifetime_seconds} seconds
  Grace:        {settings.refresh_grace_seconds} seconds
  Max Age:      {settings.refresh_max_age_seconds} seconds
  Login Path:   {settings.token_uri}
  Refresh Path: {settings.refresh_token_uri}
  Header:       {settings.token_header}

Identities:     {identities}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `todoapi` command is run
    or when using `python -m todoapi`.
    """
    cli()


if __name__ == "__main__":
    main()
