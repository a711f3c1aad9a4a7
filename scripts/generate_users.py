"""
Synthetic user generation for liteorm databases.

Implements deterministic pseudo-random user generation, optional CSV emission,
and batched loading through `SQLiteORM.save_bulk` (one transaction per batch).
"""

from __future__ import annotations

import csv
import random
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import typer

from liteorm.config import get_settings
from liteorm.database import hash_password, migrate
from liteorm.infrastructure import SQLiteConnection, SQLiteORM
from liteorm.utils.logging import LogSystem, configure_logging

app = typer.Typer(help="Generate synthetic users and load them into SQLite.")

COLUMNS = ["name", "email", "password", "created_at", "updated_at"]

_FIRST_NAMES = ["Ada", "Grace", "Linus", "Barbara", "Dennis", "Margaret", "Ken", "Frances"]
_LAST_NAMES = ["Lovelace", "Hopper", "Torvalds", "Liskov", "Ritchie", "Hamilton", "Thompson"]

# Generated accounts share one hash; deriving one per row would dominate runtime.
_PLACEHOLDER_PASSWORD = "change-me-please"


def _generate_users(rows: int, seed: int, iterations: int = 1_000) -> List[Dict[str, str]]:
    rng = random.Random(seed)
    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    password = hash_password(_PLACEHOLDER_PASSWORD, iterations)

    users: List[Dict[str, str]] = []
    for i in range(rows):
        first = rng.choice(_FIRST_NAMES)
        last = rng.choice(_LAST_NAMES)
        users.append(
            {
                "name": f"{first} {last}",
                "email": f"{first.lower()}.{last.lower()}.{i}@example.com",
                "password": password,
                "created_at": now,
                "updated_at": now,
            }
        )
    return users


def _write_csv(csv_path: Path, users: List[Dict[str, str]]) -> None:
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=COLUMNS)
        writer.writeheader()
        writer.writerows(users)


def _load_into_db(orm: SQLiteORM, users: List[Dict[str, str]], batch_size: int) -> int:
    """Insert users batch by batch; returns the number of rows loaded."""
    loaded = 0
    for start in range(0, len(users), batch_size):
        batch = users[start : start + batch_size]
        if not orm.save_bulk("users", batch):
            break
        loaded += len(batch)
    return loaded


@app.command()
def main(
    rows: int = typer.Option(
        1_000,
        "--rows",
        "-r",
        help="Number of users to generate.",
    ),
    batch_size: int = typer.Option(
        500,
        "--batch-size",
        "-b",
        help="Users per transaction.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Optional CSV output path.",
    ),
    db: Optional[Path] = typer.Option(
        None,
        "--db",
        help="Optional database file override.",
    ),
    no_load: bool = typer.Option(
        False,
        "--no-load",
        help="Only generate (and optionally write CSV); skip loading.",
    ),
) -> None:
    """
    Generate synthetic users and optionally load them with bulk inserts.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level)
    start = time.perf_counter()

    typer.echo(f"Generating {rows:,} users (seed={seed})")
    users = _generate_users(rows, seed)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        _write_csv(output, users)
        typer.echo(f"CSV written to {output}")

    if no_load:
        typer.echo("Skipping load (no-load flag set).")
        return

    log = LogSystem(settings.log_dir)
    with SQLiteConnection(db or settings.database_path(), log, owns_log=True) as connection:
        orm = SQLiteORM(connection)
        if not migrate(orm):
            typer.echo("Could not prepare the users table.", err=True)
            raise typer.Exit(code=1)
        loaded = _load_into_db(orm, users, batch_size)

    duration = time.perf_counter() - start
    typer.echo(f"Loaded {loaded:,}/{rows:,} users in {duration:.2f}s.")
    if loaded != rows:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
