"""Command line for inspecting a listening-history dataset.

Every command reads a tab-separated triplets file (user, song, play count)
given with `--history` or the LISTENING_HISTORY_PATH environment variable.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
import duckdb

from .config import get_history_path, get_log_level, get_top_songs_limit
from .dataset import Dataset
from .io import build_dataset, load_triplets
from .metrics.metrics import get_top_songs_by_listeners


def _history_option(func):
    return click.option(
        "--history",
        "history_path",
        type=click.Path(path_type=Path),
        default=None,
        help="Triplets file (defaults to env LISTENING_HISTORY_PATH).",
    )(func)


def _validate_option(func):
    return click.option(
        "--validate/--no-validate",
        default=False,
        show_default=True,
        help=(
            "Fail if the history references songs missing from the catalog. "
            "Catalogs built from a triplets file always pass."
        ),
    )(func)


def _resolve_history(history_path: Path | None) -> Path:
    path = history_path or get_history_path()
    if path is None:
        raise click.ClickException(
            "No listening history given. Pass --history or set LISTENING_HISTORY_PATH."
        )
    if not path.exists():
        raise click.ClickException(f"Listening history file not found: {path}")
    return path


def _open_dataset(history_path: Path | None, validate: bool) -> Dataset:
    path = _resolve_history(history_path)
    try:
        return build_dataset(load_triplets(path), validate=validate)
    except ValueError as exc:  # includes DataIntegrityError
        raise click.ClickException(str(exc)) from exc


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def main() -> None:
    """Listening dataset CLI."""
    try:
        level = get_log_level()
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    logging.basicConfig(level=level)


@main.command("stats")
@_history_option
@_validate_option
def stats(history_path: Path | None, validate: bool) -> None:
    """Print user and song counts plus the number of (user, song) entries."""
    dataset = _open_dataset(history_path, validate)
    click.echo(dataset.dataset_stats())
    click.echo(f"Size: {dataset.size()}")


@main.command("top-songs")
@_history_option
@_validate_option
@click.option(
    "--limit",
    type=click.IntRange(min=0),
    default=None,
    help="Number of songs to show (defaults to env TOP_SONGS_LIMIT or 10).",
)
@click.option(
    "--backend",
    type=click.Choice(["dataset", "duckdb"]),
    default="dataset",
    show_default=True,
    help="Compute the ranking in memory or with DuckDB.",
)
def top_songs(history_path: Path | None, validate: bool, limit: int | None, backend: str) -> None:
    """Print the most popular songs by number of unique listeners."""
    if limit is not None:
        n = limit
    else:
        try:
            n = get_top_songs_limit()
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc

    if backend == "duckdb":
        # --validate has no effect here: DuckDB ranks the triplets directly
        path = _resolve_history(history_path)
        try:
            triplets = load_triplets(path)
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc
        con = duckdb.connect(":memory:")
        try:
            res = get_top_songs_by_listeners(triplets, con=con, limit=n)
        finally:
            con.close()
        rows = list(zip(res["song_id"], res["listener_count"], strict=True))
    else:
        dataset = _open_dataset(history_path, validate)
        rows = [(song.id, song.listener_count) for song in dataset.top_popular_songs(n)]

    for rank, (song_id, listeners) in enumerate(rows, start=1):
        click.echo(f"{rank}\t{song_id}\t{listeners}")


@main.command("user-songs")
@click.argument("user_id")
@_history_option
@_validate_option
def user_songs(user_id: str, history_path: Path | None, validate: bool) -> None:
    """Print every song USER_ID has played."""
    dataset = _open_dataset(history_path, validate)
    for song_id in dataset.songs_for_user(user_id):
        click.echo(song_id)


@main.command("song-users")
@click.argument("song_id")
@_history_option
@_validate_option
def song_users(song_id: str, history_path: Path | None, validate: bool) -> None:
    """Print every user who has listened to SONG_ID."""
    dataset = _open_dataset(history_path, validate)
    for user_id in dataset.users_for_song(song_id):
        click.echo(user_id)


if __name__ == "__main__":
    main()
