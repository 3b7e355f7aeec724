import contextlib
from pathlib import Path
from typing import Any

import pandas as pd

TOP_SONG_COLUMNS = ["song_id", "listener_count", "play_count", "percentage"]


def get_top_songs_by_listeners(
    triplets_df: pd.DataFrame,
    *,
    db_path: str | Path | None = None,
    con: Any | None = None,
    limit: int | None = None,
) -> pd.DataFrame:
    """Most popular songs by unique listeners using DuckDB.

    Computes the same ranking as `Dataset.top_popular_songs()` directly from a
    triplets DataFrame, which makes it useful as a cross-check on large inputs.

    Args:
        triplets_df: Frame with 'user_id', 'song_id' and 'play_count' columns.
        db_path: Optional DuckDB database path (if `con` not provided).
        con: Optional DuckDB connection to use.
        limit: Optional cap on the number of rows returned.

    Returns:
        pd.DataFrame: Columns 'song_id', 'listener_count', 'play_count' and
            'percentage' (fraction of all listener entries), sorted by
            listener_count descending then song_id.
    """
    if triplets_df.empty:
        return pd.DataFrame(columns=TOP_SONG_COLUMNS)

    if con is None and db_path is None:
        raise ValueError("get_top_songs_by_listeners requires a DuckDB connection or db_path.")

    close_conn = False
    if con is None:
        import duckdb  # type: ignore

        con = duckdb.connect(str(db_path))
        close_conn = True

    try:
        df = triplets_df[["user_id", "song_id", "play_count"]].copy()

        rel = "df_triplets_in"
        with contextlib.suppress(Exception):
            con.unregister(rel)
        con.register(rel, df)

        lim = f"LIMIT {int(limit)}" if (limit is not None and limit >= 0) else ""
        sql = f"""
            WITH songs AS (
                SELECT
                    song_id,
                    COUNT(DISTINCT user_id) AS listener_count,
                    SUM(play_count) AS play_count
                FROM {rel}
                GROUP BY 1
            ), totals AS (
                SELECT SUM(listener_count) AS total_listeners FROM songs
            )
            SELECT s.song_id, s.listener_count, s.play_count,
                   (s.listener_count::DOUBLE / NULLIF(t.total_listeners, 0)) AS percentage
            FROM songs s CROSS JOIN totals t
            ORDER BY s.listener_count DESC, s.song_id
            {lim}
        """
        res = con.execute(sql).df()
        if not res.empty:
            res["listener_count"] = res["listener_count"].astype(int)
            res["play_count"] = res["play_count"].astype(int)
            res["percentage"] = res["percentage"].fillna(0.0)
        return res
    finally:
        if close_conn:
            con.close()
