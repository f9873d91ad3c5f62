"""Command-line entry point for round sync, player import and scoring."""

import asyncio
import logging
from pathlib import Path

import typer

from .config import DATABASE_URL, configure_logging
from .errors import FantasyError
from .providers import AsyncMatchDataProvider, SportmonksClient, load_players_from_csv
from .round_sync import sync_rounds
from .scoring import ScoringEngine
from .storage import DatabaseManager, PlayerRepository

app = typer.Typer(help="Fantasy draft and scoring tools.")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    configure_logging(logging.DEBUG if verbose else None)


def _run_or_exit(coro):
    """Run a coroutine, turning platform and input errors into a non-zero exit."""
    try:
        return asyncio.run(coro)
    except (FantasyError, UnicodeDecodeError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


async def _open_database(database_url: str) -> DatabaseManager:
    db = DatabaseManager(database_url)
    await db.init()
    try:
        await db.create_all()
    except FantasyError:
        await db.dispose()
        raise
    return db


@app.command("init-db")
def init_db(
    database_url: str = typer.Option(DATABASE_URL, help="SQLAlchemy async database URL."),
) -> None:
    """Create the database tables."""

    async def _run() -> None:
        db = await _open_database(database_url)
        await db.dispose()

    _run_or_exit(_run())
    typer.echo("Database ready")


@app.command("import-players")
def import_players(
    csv_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Player CSV file."),
    database_url: str = typer.Option(DATABASE_URL, help="SQLAlchemy async database URL."),
) -> None:
    """Load or refresh the player directory from a CSV file."""

    async def _run() -> int:
        players = load_players_from_csv(csv_path)
        db = await _open_database(database_url)
        try:
            async with db.session() as session:
                await PlayerRepository(session).upsert_many(players)
        finally:
            await db.dispose()
        return len(players)

    count = _run_or_exit(_run())
    typer.echo(f"Imported {count} players")


@app.command("sync-rounds")
def sync_rounds_cmd(
    database_url: str = typer.Option(DATABASE_URL, help="SQLAlchemy async database URL."),
) -> None:
    """Store the current season's rounds from the provider."""

    async def _run() -> int:
        db = await _open_database(database_url)
        try:
            provider = AsyncMatchDataProvider(SportmonksClient())
            return len(await sync_rounds(provider, db))
        finally:
            await db.dispose()

    count = _run_or_exit(_run())
    typer.echo(f"Synced {count} rounds")


@app.command("score-round")
def score_round_cmd(
    round_id: int = typer.Argument(..., help="Provider round id."),
    publish: bool = typer.Option(False, "--publish", help="Store points in the database."),
    database_url: str = typer.Option(DATABASE_URL, help="SQLAlchemy async database URL."),
) -> None:
    """Score every fixture of a round and print the non-zero totals."""

    async def _run():
        db = await _open_database(database_url)
        try:
            engine = ScoringEngine(AsyncMatchDataProvider(SportmonksClient()), db)
            if publish:
                return await engine.publish_round_points(round_id)
            return await engine.score_round(round_id)
        finally:
            await db.dispose()

    scores = _run_or_exit(_run())
    for score in sorted(scores, key=lambda s: (-s.points, s.player_id)):
        if score.points:
            typer.echo(f"{score.player_id}\t{score.player_name}\t{score.points}")
    typer.echo(f"{len(scores)} players scored")


if __name__ == "__main__":
    app()
