"""Main CLI entry point for Harmony Discover."""

import asyncio
import logging
import sys
from typing import NoReturn, get_args

import click
from rich.console import Console
from rich.table import Table

from harmony_discover import __version__
from harmony_discover.core.config import get_settings
from harmony_discover.core.exceptions import HarmonyDiscoverError, NotFoundError
from harmony_discover.core.models import Activity, Mood, TimeOfDay
from harmony_discover.services.catalog import JsonCatalogSource, load_events
from harmony_discover.services.engine import RecommendationEngine
from harmony_discover.utils.text import format_duration

console = Console()
logger = logging.getLogger(__name__)


def load_engine(catalog_path: str, events_path: str | None = None) -> RecommendationEngine:
    """Build an engine from a catalog file and optionally replay recorded events."""
    engine = RecommendationEngine()
    asyncio.run(engine.refresh_catalog(JsonCatalogSource(catalog_path)))

    if events_path:
        replayed = 0
        for event in load_events(events_path):
            try:
                engine.record_event(event)
            except NotFoundError:
                logger.warning(f"Skipping event for unknown track {event.track_id} (user {event.user_id})")
                continue
            replayed += 1
        logger.info(f"Replayed {replayed} interaction events")
    return engine


def get_engine(ctx: click.Context) -> RecommendationEngine:
    """Get or create the engine for this invocation."""
    obj = ctx.ensure_object(dict)
    if obj.get("engine") is None:
        try:
            obj["engine"] = load_engine(obj["catalog_path"], obj.get("events_path"))
        except HarmonyDiscoverError as e:
            fail(str(e))
    return obj["engine"]


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    console.print(f"[red]{message}[/red]", soft_wrap=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="harmony-discover")
@click.option("--catalog", "-c", "catalog_path", help="Catalog JSON file (default: $CATALOG_PATH)")
@click.option("--events", "-e", "events_path", help="Interaction events JSON file to replay")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, catalog_path: str | None, events_path: str | None, verbose: bool) -> None:
    """Harmony Discover - music recommendations from listening history."""
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["catalog_path"] = catalog_path or settings.catalog_path
    ctx.obj["events_path"] = events_path or settings.events_path


@cli.command()
@click.option("--user", "-u", "user_id", help="Listener ID (profile built from replayed events)")
@click.option("--track", "-t", "track_id", help="Currently playing track ID")
@click.option("--time", "time_of_day", type=click.Choice(get_args(TimeOfDay)), help="Time of day")
@click.option("--mood", type=click.Choice(get_args(Mood)), help="Listener mood")
@click.option("--activity", type=click.Choice(get_args(Activity)), help="Current activity")
@click.option("--limit", "-l", type=click.IntRange(min=1), default=None, help="Number of results")
@click.option("--explain", is_flag=True, help="Show a longer explanation for each track")
@click.pass_context
def recommend(
    ctx: click.Context,
    user_id: str | None,
    track_id: str | None,
    time_of_day: TimeOfDay | None,
    mood: Mood | None,
    activity: Activity | None,
    limit: int | None,
    explain: bool,
) -> None:
    """Recommend tracks for a listener and context."""
    engine = get_engine(ctx)
    try:
        context = engine.build_context(
            user_id=user_id,
            current_track_id=track_id,
            time_of_day=time_of_day,
            mood=mood,
            activity=activity,
            limit=limit,
        )
    except NotFoundError as e:
        fail(str(e))

    with console.status("Ranking tracks..."):
        results = asyncio.run(engine.get_recommendations(context))

    if not results:
        console.print("[yellow]No recommendations for this context[/yellow]")
        return

    table = Table(title="Recommendations")
    table.add_column("#", style="dim", justify="right")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="green")
    table.add_column("Artist", style="cyan")
    table.add_column("Score", justify="right", style="magenta")
    table.add_column("Conf.", justify="right")
    table.add_column("Reason")

    for i, rec in enumerate(results, 1):
        table.add_row(
            str(i),
            rec.track.id,
            rec.track.title,
            rec.track.artist,
            f"{rec.score:.3f}",
            f"{rec.confidence:.2f}",
            rec.reason,
        )

    console.print(table)

    if explain:
        for rec in results:
            explanation = engine.get_recommendation_explanation(rec.track, context)
            console.print(f"[green]{rec.track.title}[/green]: {explanation}")


@cli.command()
@click.argument("track_id")
@click.option("--limit", "-l", type=click.IntRange(min=1), default=10, help="Number of results")
@click.pass_context
def similar(ctx: click.Context, track_id: str, limit: int) -> None:
    """Show the tracks most similar to TRACK_ID."""
    engine = get_engine(ctx)
    try:
        seed = engine.catalog.get(track_id)
        results = engine.similar_tracks(track_id, limit=limit)
    except NotFoundError as e:
        fail(str(e))

    if not results:
        console.print(f"[yellow]No similar tracks for '{seed.title}'[/yellow]")
        return

    table = Table(title=f"Similar to {seed.title}")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="green")
    table.add_column("Artist", style="cyan")
    table.add_column("Genre")
    table.add_column("Similarity", justify="right", style="magenta")

    for track, score in results:
        table.add_row(track.id, track.title, track.artist, track.genre, f"{score:.3f}")

    console.print(table)


@cli.command()
@click.option("--limit", "-l", type=click.IntRange(min=1), default=10, help="Number of results")
@click.pass_context
def trending(ctx: click.Context, limit: int) -> None:
    """Show the most played tracks in the catalog."""
    engine = get_engine(ctx)
    tracks = engine.trending.trending_tracks(limit)

    if not tracks:
        console.print("[yellow]Nothing is trending yet[/yellow]")
        return

    table = Table(title="Trending Tracks")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Title", style="green")
    table.add_column("Artist", style="cyan")
    table.add_column("Length", justify="right")
    table.add_column("Plays", justify="right", style="magenta")

    for i, track in enumerate(tracks, 1):
        table.add_row(str(i), track.title, track.artist, format_duration(track.duration), f"{track.play_count:,}")

    console.print(table)


@cli.command()
@click.argument("user_id")
@click.pass_context
def profile(ctx: click.Context, user_id: str) -> None:
    """Show the learned profile for USER_ID."""
    engine = get_engine(ctx)
    user = engine.profiles.get(user_id)
    if user is None:
        console.print(f"[yellow]No profile for user '{user_id}'[/yellow]")
        return

    console.print(f"\n[bold]Profile: {user.user_id}[/bold]")
    console.print(f"  Last active:      [cyan]{user.last_active:%Y-%m-%d %H:%M:%S}[/cyan]")
    console.print(f"  Favorite genres:  [cyan]{', '.join(sorted(user.favorite_genres)) or '-'}[/cyan]")
    console.print(f"  Favorite artists: [cyan]{', '.join(sorted(user.favorite_artists)) or '-'}[/cyan]")
    console.print(f"  Tracks in history: [cyan]{len(user.recent_tracks)}[/cyan]")

    if user.recent_tracks:
        table = Table(title="Recent Tracks")
        table.add_column("Title", style="green")
        table.add_column("Artist", style="cyan")
        table.add_column("Plays", justify="right", style="magenta")
        table.add_column("Skips", justify="right")
        for track in user.recent_tracks:
            table.add_row(
                track.title,
                track.artist,
                str(user.play_counts.get(track.id, 0)),
                str(user.skip_counts.get(track.id, 0)),
            )
        console.print(table)


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show catalog and engine statistics."""
    engine = get_engine(ctx)
    catalog_stats = engine.catalog.get_stats()

    console.print("\n[bold]Catalog Stats[/bold]")
    console.print(f"  Total tracks:     [cyan]{catalog_stats['total_tracks']:,}[/cyan]")
    console.print(f"  Unique artists:   [cyan]{catalog_stats['unique_artists']:,}[/cyan]")
    console.print(f"  Genres:           [cyan]{', '.join(catalog_stats['genres']) or '-'}[/cyan]")
    console.print(f"  Max play count:   [cyan]{catalog_stats['max_play_count']:,}[/cyan]")
    console.print(f"  Avg play count:   [cyan]{catalog_stats['avg_play_count']:.2f}[/cyan]")
    console.print(f"  Known listeners:  [cyan]{len(engine.profiles)}[/cyan]")
    console.print(f"  Similarity pairs: [cyan]{engine.similarity.pair_count:,}[/cyan]")


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
