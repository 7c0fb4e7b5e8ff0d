"""Typer CLI definition for affirmloop."""

import asyncio
import logging
from pathlib import Path
from typing import NoReturn

import typer

from .config import load_config
from .engine import AffirmationEngine
from .errors import (
    AffirmloopError,
    LineInUseError,
    ProtectedTemplateError,
    RecordNotFoundError,
    SessionAudioError,
)
from .library.models import Goal
from .library.promotion import promote_record
from .library.seed import seed_library
from .telemetry.models import FeedbackStatus
from .tts.models import Pace

app = typer.Typer(help="Tiered affirmation sessions with cached speech")


def _get_engine(ctx: typer.Context) -> AffirmationEngine:
    """Build the engine once per invocation from the selected config file."""
    if ctx.obj.get("engine") is None:
        config = load_config(ctx.obj["config_path"])
        ctx.obj["engine"] = AffirmationEngine.from_config(config)
    return ctx.obj["engine"]


def _fail(ctx: typer.Context, e: Exception, message: str | None = None) -> NoReturn:
    """Report an error the way every command does and exit with status 1."""
    if ctx.obj.get("debug"):
        typer.echo(f"Debug - {type(e).__name__}: {e!r}", err=True)
    else:
        typer.echo(f"Error: {message or e}", err=True)
    raise typer.Exit(1) from None


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "-c", "--config", help="Config file (default ~/.config/affirmloop)"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Show verbose error messages and tier decisions"
    ),
) -> None:
    """Tiered affirmation sessions with cached speech."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    ctx.obj = {"config_path": config, "debug": debug, "engine": None}


@app.command()
def seed(ctx: typer.Context) -> None:
    """Seed the library with the default protected templates."""
    engine = _get_engine(ctx)
    lines, templates = seed_library(engine.library)
    typer.echo(f"Seeded {lines} new lines and {templates} new templates")


@app.command()
def resolve(
    ctx: typer.Context,
    intent: str = typer.Argument(..., help="What the session should help with"),
    goal: Goal = typer.Option(..., "-g", "--goal", help="Session goal"),
    first_session: bool = typer.Option(
        False, "--first-session", help="Always generate bespoke lines"
    ),
    speak: bool = typer.Option(
        False, "--speak", help="Synthesize every line through the audio cache"
    ),
    voice: str | None = typer.Option(
        None, "-v", "--voice", help="Voice name or id (from config if omitted)"
    ),
    pace: Pace | None = typer.Option(
        None, "-p", "--pace", help="Speaking pace (from config if omitted)"
    ),
) -> None:
    """Resolve an intent into a session and print its lines."""
    engine = _get_engine(ctx)

    try:
        result = asyncio.run(engine.resolve(intent, goal, first_session))
    except AffirmloopError as e:
        _fail(ctx, e)

    typer.echo(
        f"Tier: {result.tier.value}  Cost: ${result.cost:.2f}  "
        f"Confidence: {result.confidence:.2f}"
    )
    typer.echo(f"Record: {result.record_id}")
    for i, line in enumerate(result.lines, 1):
        typer.echo(f"  {i}. {line}")

    if not speak:
        return

    try:
        paths = asyncio.run(
            engine.render(result, voice, pace.value if pace else None)
        )
    except SessionAudioError as e:
        for line, error in e.failures.items():
            typer.echo(f"  failed: {line[:50]} ({error})", err=True)
        _fail(ctx, e)
    except (AffirmloopError, KeyError, ValueError) as e:
        _fail(ctx, e)

    for path in paths:
        typer.echo(f"Audio: {path}")


@app.command()
def feedback(
    ctx: typer.Context,
    record_id: str = typer.Argument(..., help="Record id printed by resolve"),
    rating: int | None = typer.Option(
        None, "-r", "--rating", min=1, max=5, help="Rating from 1 to 5"
    ),
    replayed: bool = typer.Option(
        False, "--replayed", help="Mark the session as replayed"
    ),
) -> None:
    """Rate a resolved session. Each record accepts feedback once."""
    engine = _get_engine(ctx)

    try:
        result = engine.record_feedback(record_id, rating, True if replayed else None)
    except (RecordNotFoundError, ValueError) as e:
        _fail(ctx, e)

    if result.status is FeedbackStatus.DUPLICATE:
        typer.echo(f"Feedback already recorded for {record_id}, ignored")
        return

    typer.echo(f"Feedback recorded for {record_id}")
    if result.lines_updated:
        typer.echo(f"  {result.lines_updated} pooled lines promoted")
    if result.template_updated:
        typer.echo("  template promoted")


@app.command()
def stats(
    ctx: typer.Context,
    days: int = typer.Option(7, "-d", "--days", min=1, help="Days to summarize"),
) -> None:
    """Show cost per tier and audio cache size."""
    engine = _get_engine(ctx)

    summaries = engine.records.cost_summary(days)
    total_requests = sum(s.requests for s in summaries)
    total_cost = sum(s.total_cost for s in summaries)

    typer.echo(f"=== Last {days} days ===")
    typer.echo(f"Requests: {total_requests}  Total cost: ${total_cost:.2f}")
    for summary in summaries:
        share = summary.requests / total_requests * 100 if total_requests else 0.0
        rating = f"{summary.avg_rating:.1f}" if summary.avg_rating else "-"
        typer.echo(
            f"  {summary.tier.value:<10} {summary.requests:>5} ({share:4.1f}%)  "
            f"${summary.total_cost:.2f}  rating {rating}  replays {summary.replays}"
        )

    cache_stats = engine.cache_storage.stats()
    typer.echo(
        f"Audio cache: {cache_stats.entries} files, "
        f"{cache_stats.total_bytes / 1024:.1f} KiB, "
        f"{cache_stats.total_accesses} plays"
    )


@app.command()
def promote(
    ctx: typer.Context,
    record_id: str = typer.Argument(..., help="Rated pooled record to promote"),
    title: str = typer.Option(..., "-t", "--title", help="Template title"),
) -> None:
    """Turn a well-rated pooled session into a reusable template."""
    engine = _get_engine(ctx)

    try:
        template = promote_record(engine.library, engine.records, record_id, title)
    except (RecordNotFoundError, ValueError) as e:
        _fail(ctx, e)

    typer.echo(f"Created template {template.id}: {template.title}")


@app.command("delete-template")
def delete_template(
    ctx: typer.Context,
    template_id: str = typer.Argument(..., help="Template to delete"),
) -> None:
    """Delete an unprotected template. Its lines stay in the pool."""
    engine = _get_engine(ctx)

    try:
        deleted = engine.library.delete_template(template_id)
    except ProtectedTemplateError as e:
        _fail(ctx, e)

    if not deleted:
        typer.echo(f"Error: Template not found: {template_id}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Deleted template {template_id}")


@app.command("delete-line")
def delete_line(
    ctx: typer.Context,
    line_id: str = typer.Argument(..., help="Line to delete"),
) -> None:
    """Delete a pooled line that no template references."""
    engine = _get_engine(ctx)

    try:
        deleted = engine.library.delete_line(line_id)
    except LineInUseError as e:
        _fail(ctx, e)

    if not deleted:
        typer.echo(f"Error: Line not found: {line_id}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Deleted line {line_id}")


@app.command()
def voices(ctx: typer.Context) -> None:
    """List voices offered by the configured speech provider."""
    engine = _get_engine(ctx)

    try:
        available = asyncio.run(engine.audio_cache.provider.list_voices())
    except (AffirmloopError, KeyError) as e:
        _fail(ctx, e, f"Failed to list voices: {e}")

    for voice in available:
        typer.echo(f"{voice['name']}: {voice['id']}")
