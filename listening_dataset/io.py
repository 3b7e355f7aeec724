"""Load listening-history triplet files into a `Dataset`.

The input format is the Echo Nest Taste Profile "triplets" file: one
tab-separated ``user_id  song_id  play_count`` record per line, no header.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from listening_dataset.dataset import Dataset
from listening_dataset.models import Song

TRIPLET_COLUMNS = ["user_id", "song_id", "play_count"]


def load_triplets(path: str | Path) -> pd.DataFrame:
    """Read a triplets file into a DataFrame.

    Rows missing a user or song ID are dropped, and repeated (user, song)
    rows are summed into one.

    Args:
        path (str | Path): Tab-separated triplets file.

    Returns:
        pd.DataFrame: Columns 'user_id', 'song_id' (str) and 'play_count' (int).

    Raises:
        FileNotFoundError: If `path` does not exist.
        ValueError: If a play count is missing, non-numeric or negative.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Listening history file not found: {path}")

    try:
        df = pd.read_csv(
            path,
            sep="\t",
            header=None,
            names=TRIPLET_COLUMNS,
            dtype={"user_id": str, "song_id": str},
            skip_blank_lines=True,
            keep_default_na=False,
            na_values=[""],
        )
    except pd.errors.EmptyDataError:
        logging.warning("Listening history file is empty: %s", path)
        return pd.DataFrame(
            {
                "user_id": pd.Series(dtype=str),
                "song_id": pd.Series(dtype=str),
                "play_count": pd.Series(dtype=int),
            }
        )
    df = df.dropna(subset=["user_id", "song_id"])

    counts = pd.to_numeric(df["play_count"], errors="coerce")
    if counts.isna().any():
        bad = df.loc[counts.isna(), "play_count"].iloc[0]
        raise ValueError(f"Invalid play count in {path}: {bad!r}")
    fractional = counts % 1 != 0
    if fractional.any():
        bad = df.loc[fractional, "play_count"].iloc[0]
        raise ValueError(f"Invalid play count in {path}: {bad!r}")
    if (counts < 0).any():
        raise ValueError(f"Negative play count in {path}")
    df["play_count"] = counts.astype(int)

    df = (
        df.groupby(["user_id", "song_id"], sort=False, as_index=False)["play_count"]
        .sum()
        .reset_index(drop=True)
    )
    logging.info("Loaded %d listening records from %s", len(df), path)
    return df


def build_dataset(triplets_df: pd.DataFrame, *, validate: bool = False) -> Dataset:
    """Build a `Dataset` from a triplets DataFrame.

    Each song's listeners are the distinct users who played it, in the order
    they first appear.

    Args:
        triplets_df (pd.DataFrame): Frame with 'user_id', 'song_id' and
            'play_count' columns, e.g. from `load_triplets()`.
        validate (bool): Passed through to `Dataset`.

    Returns:
        Dataset: The assembled dataset.
    """
    history: dict[str, dict[str, int]] = {}
    listeners: dict[str, dict[str, None]] = {}

    for user_id, song_id, play_count in triplets_df[TRIPLET_COLUMNS].itertuples(
        index=False, name=None
    ):
        user_songs = history.setdefault(user_id, {})
        user_songs[song_id] = user_songs.get(song_id, 0) + int(play_count)
        listeners.setdefault(song_id, {})[user_id] = None

    catalog = {song_id: Song(song_id, tuple(users)) for song_id, users in listeners.items()}
    logging.info("Built dataset with %d users and %d songs", len(history), len(catalog))
    return Dataset(history, catalog, validate=validate)


def load_dataset(path: str | Path, *, validate: bool = False) -> Dataset:
    """Load a triplets file straight into a `Dataset`."""
    return build_dataset(load_triplets(path), validate=validate)
