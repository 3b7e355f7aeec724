"""In-memory listening-history dataset with lazily cached aggregates.

A `Dataset` wraps two prebuilt maps:

- listening history: ``{user_id: {song_id: play_count}}``
- song catalog: ``{song_id: Song}``

The maps are treated as immutable once handed over. Aggregates (`size()` and
`top_popular_songs()`) are computed on first use and memoized. The size cache
is compute-once: mutating the backing maps afterwards does not change the
cached value until `clear_cache()` is called. Instances are not thread-safe.
"""

from __future__ import annotations

import heapq
import logging
from collections.abc import Mapping

from listening_dataset.errors import DataIntegrityError
from listening_dataset.models import Song, SongFrequency

ListeningHistory = Mapping[str, Mapping[str, int]]
SongCatalog = Mapping[str, Song]


class Dataset:
    """Users, songs and per-user play counts plus derived statistics."""

    def __init__(
        self,
        listening_history: ListeningHistory,
        song_catalog: SongCatalog,
        *,
        validate: bool = False,
    ) -> None:
        """Store the backing maps.

        Args:
            listening_history: Mapping of user ID to a mapping of song ID to
                play count.
            song_catalog: Mapping of song ID to `Song`.
            validate: If True, require every song in the listening history to
                be present in the catalog.

        Raises:
            DataIntegrityError: If `validate` is set and the history references
                uncatalogued songs.
        """
        self._listening_history = listening_history
        self._song_catalog = song_catalog
        self._size: int | None = None
        self._top_songs: dict[int, list[Song]] = {}

        if validate:
            self._check_integrity()

    def _check_integrity(self) -> None:
        missing = {
            song_id
            for songs in self._listening_history.values()
            for song_id in songs
            if song_id not in self._song_catalog
        }
        if missing:
            raise DataIntegrityError(missing)

    @property
    def listening_history(self) -> ListeningHistory:
        return self._listening_history

    @property
    def song_catalog(self) -> SongCatalog:
        return self._song_catalog

    def number_of_users(self) -> int:
        return len(self._listening_history)

    def list_users(self) -> list[str]:
        """Return all user IDs as a new list."""
        logging.debug("No of users in dataset: %d", self.number_of_users())
        return list(self._listening_history.keys())

    def songs_for_user(self, user_id: str) -> list[str]:
        """Get the IDs of every song a user has played.

        Returns an empty list for unknown users.
        """
        songs = self._listening_history.get(user_id)
        if songs is None:
            return []
        return list(songs.keys())

    def users_for_song(self, song_id: str) -> list[str]:
        """Get the IDs of every user who has listened to a song.

        Returns an empty list for songs missing from the catalog.
        """
        song = self._song_catalog.get(song_id)
        if song is None:
            return []
        return list(song.listeners)

    def play_count(self, user_id: str, song_id: str) -> int:
        return self._listening_history.get(user_id, {}).get(song_id, 0)

    def dataset_stats(self) -> str:
        """Summary of the dataset, e.g. ``"Users: 2\\tSongs: 2"``."""
        return f"Users: {self.number_of_users()}\tSongs: {len(self._song_catalog)}"

    def size(self) -> int:
        """Number of (user, song) entries across all users.

        A user who played one song 50 times contributes 1. Computed once and
        cached; call `clear_cache()` after mutating the backing maps.
        """
        if self._size is None:
            self._size = sum(len(songs) for songs in self._listening_history.values())
            logging.info("Dataset Size: %d", self._size)
        return self._size

    def top_popular_songs(self, n: int) -> list[Song]:
        """Get the `n` most popular songs, most listeners first.

        Popularity is the number of unique listeners of a song, not its total
        play count. Results are cached per `n`; each call returns a new list.

        Args:
            n: Maximum number of songs to return.

        Returns:
            list[Song]: At most `n` songs in non-increasing listener order.

        Raises:
            ValueError: If `n` is negative.
        """
        if n < 0:
            raise ValueError(f"n must be non-negative, got {n}")
        cached = self._top_songs.get(n)
        if cached is not None:
            return list(cached)

        logging.debug("Calculating the %d most popular songs in the dataset ..", n)
        result = [self._song_catalog[song_id] for song_id in self._select_top(n)]
        self._top_songs[n] = result
        return list(result)

    def _select_top(self, n: int) -> list[str]:
        # Bounded min-heap; the root is the weakest song still in the top n
        if n == 0:
            return []
        heap: list[SongFrequency] = []
        for song_id, song in self._song_catalog.items():
            entry = SongFrequency(song.listener_count, song_id)
            if len(heap) < n:
                heapq.heappush(heap, entry)
            elif heap[0].listener_count < entry.listener_count:
                heapq.heapreplace(heap, entry)

        ordered: list[str] = []
        while heap:
            ordered.append(heapq.heappop(heap).song_id)
        ordered.reverse()
        return ordered

    def clear_cache(self) -> None:
        """Drop the cached size and every cached top-N result."""
        self._size = None
        self._top_songs = {}
