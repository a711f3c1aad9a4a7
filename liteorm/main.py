from __future__ import annotations

import json
import sys
from typing import Optional

import typer

from liteorm.config import get_settings
from liteorm.database import migrate as apply_migrations
from liteorm.database import rollback as drop_migrations
from liteorm.database import seed_admin
from liteorm.errors import is_failure
from liteorm.infrastructure import SQLiteORM, open_connection
from liteorm.models import User
from liteorm.utils.logging import configure_logging

app = typer.Typer(help="liteorm database CLI.")


def _orm() -> SQLiteORM:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    connection = open_connection(settings)
    if connection.failure is not None:
        typer.echo(f"{connection.failure.message} Path: {connection.failure.path}", err=True)
        raise typer.Exit(code=1)
    return SQLiteORM(connection)


def _exit_on_failure(result: object) -> None:
    if result is False:
        typer.echo("No rows were written.", err=True)
        raise typer.Exit(code=1)
    if is_failure(result):
        typer.echo(str(result), err=True)
        raise typer.Exit(code=1)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"env={settings.app_env} | db={settings.database_path()} | "
        f"log_dir={settings.log_dir} level={settings.log_level}"
    )


@app.command()
def migrate() -> None:
    """
    Create the users table and its indexes.
    """
    orm = _orm()
    try:
        _exit_on_failure(apply_migrations(orm))
        typer.echo("Migrated: users")
    finally:
        orm.connection.close()


@app.command()
def rollback() -> None:
    """
    Drop the users table.
    """
    orm = _orm()
    try:
        _exit_on_failure(drop_migrations(orm))
        typer.echo("Rolled back: users")
    finally:
        orm.connection.close()


@app.command()
def seed(
    password: str = typer.Option(
        ...,
        "--password",
        "-p",
        prompt=True,
        hide_input=True,
        help="Password for the administrator account.",
    ),
) -> None:
    """
    Insert the administrator account.
    """
    orm = _orm()
    try:
        result = seed_admin(orm, password)
        _exit_on_failure(result)
        typer.echo(f"Seeded administrator with id={result}")
    finally:
        orm.connection.close()


@app.command()
def columns(
    table: str = typer.Argument(..., help="Table to inspect."),
) -> None:
    """
    Print a table's columns and declared types.
    """
    orm = _orm()
    try:
        result = orm.get_columns(table, with_types=True)
        _exit_on_failure(result)
        typer.echo(json.dumps(result, indent=2))
    finally:
        orm.connection.close()


@app.command()
def users(
    page: int = typer.Option(1, "--page", min=1, help="Page number (1-based)."),
    per_page: Optional[int] = typer.Option(
        None, "--per-page", min=1, help="Override the model's page size."
    ),
) -> None:
    """
    List users, one page at a time.
    """
    orm = _orm()
    try:
        result = User(orm).paginate(page, per_page)
        _exit_on_failure(result)
        typer.echo(json.dumps(result, indent=2, default=str))
    finally:
        orm.connection.close()


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
