"""Bundle building command."""

import asyncio
import json

import click
from rich.markup import escape
from rich.table import Table

from . import cli
from .shared import console, _truncate


@cli.command("build")
@click.argument("focus_id")
@click.option("--fixture", "-f", required=True, type=click.Path(exists=True, dir_okay=False),
              help="JSON file with messages (and optionally history)")
@click.option("--bot-handle", default=None, help="Bot handle rendered as (YOU); overrides THREADLINE_BOT_HANDLE")
@click.option("--max-hops", type=int, default=None, help="Max parent lookups")
@click.option("--db", "use_db", is_flag=True, help="Read history from PostgreSQL instead of the fixture")
@click.option("--no-images", is_flag=True, help="Do not download images")
@click.option("--json", "as_json", is_flag=True, help="Print the bundle as JSON")
def build(focus_id, fixture, bot_handle, max_hops, use_db, no_images, as_json):
    """Build the context bundle for FOCUS_ID."""
    async def _build():
        from threadline.config import load_settings
        from threadline.main import build_bundle
        from threadline.sources import FixtureError, load_fixture

        settings = load_settings(bot_handle=bot_handle, max_hops=max_hops)
        try:
            source, history = load_fixture(fixture)
        except FixtureError as e:
            raise click.ClickException(str(e))

        if use_db:
            from threadline.db.connection import init_db, close_db
            from threadline.db.models import PostgresHistorySource

            if not settings.database_url:
                raise click.ClickException("THREADLINE_DATABASE_URL is not set")
            await init_db(settings.database_url)
            try:
                return await build_bundle(
                    focus_id, settings, source, PostgresHistorySource(settings.history_limit),
                    fetch_images=not no_images,
                )
            finally:
                await close_db()

        return await build_bundle(focus_id, settings, source, history, fetch_images=not no_images)

    bundle = asyncio.run(_build())
    if bundle is None:
        raise click.ClickException(f"Message {focus_id} could not be resolved — no context available")

    if as_json:
        click.echo(json.dumps(bundle.to_dict(), indent=2, ensure_ascii=False))
        return

    console.print(bundle.text, markup=False, highlight=False, emoji=False, soft_wrap=True)

    if bundle.images:
        t = Table(title=f"Images ({bundle.image_count})")
        t.add_column("#", justify="right")
        t.add_column("Sender")
        t.add_column("Type")
        t.add_column("Source")
        t.add_column("Size", justify="right")
        for i, img in enumerate(bundle.images, 1):
            t.add_row(str(i), escape(img.sender), img.media_type, escape(_truncate(img.url)), f"{len(img.data) * 3 // 4} B")
        console.print(t)
