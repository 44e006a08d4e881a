"""CLI command for seeding sample data.

Usage:
    k8sdemo seed
"""

from __future__ import annotations

import asyncio

import typer

from k8sdemo.config import settings
from k8sdemo.observability import configure_logging
from k8sdemo.persistence.db import close_db, init_db
from k8sdemo.persistence.seed import seed_database

app = typer.Typer(help="Insert sample items into an empty database")


async def _seed() -> int:
    await init_db()
    try:
        return await seed_database()
    finally:
        await close_db()


@app.callback(invoke_without_command=True)
def seed() -> None:
    """Create tables and insert the sample items if the table is empty."""
    configure_logging(json_format=False, level=settings.log_level)
    inserted = asyncio.run(_seed())
    if inserted:
        typer.echo(f"Inserted {inserted} sample items")
    else:
        typer.echo("Database already contains data, nothing inserted")
