"""Persisted history command."""

import asyncio
import click

from . import cli
from .shared import console, _truncate

from rich.markup import escape
from rich.table import Table


@cli.command("history")
@click.argument("handle")
@click.option("--limit", "-n", default=20, help="Max rows")
def history(handle, limit):
    """Show persisted conversation history with HANDLE."""
    async def _history():
        from threadline.config import load_settings
        from threadline.db.connection import init_db, close_db
        from threadline.db.models import PostgresHistorySource

        settings = load_settings()
        if not settings.database_url:
            raise click.ClickException("THREADLINE_DATABASE_URL is not set")

        await init_db(settings.database_url)
        try:
            return settings.bot_handle, await PostgresHistorySource(limit).fetch_history(handle)
        finally:
            await close_db()

    bot_handle, entries = asyncio.run(_history())

    if not entries:
        console.print(f"[yellow]No history with {escape(handle)}.[/yellow]")
        return

    from threadline.formatting import display_sender, format_timestamp

    t = Table(title=f"History with {handle}")
    t.add_column("Time")
    t.add_column("Sender")
    t.add_column("Text")
    for e in entries:
        t.add_row(format_timestamp(e.timestamp), escape(display_sender(e.sender, bot_handle)), escape(_truncate(e.text, 80)))
    console.print(t)
