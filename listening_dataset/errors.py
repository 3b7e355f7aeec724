from __future__ import annotations

from collections.abc import Iterable


class DataIntegrityError(ValueError):
    """Listening history references songs that are missing from the catalog."""

    def __init__(self, missing_song_ids: Iterable[str]):
        self.missing_song_ids = sorted(set(missing_song_ids))
        examples = ", ".join(self.missing_song_ids[:5])
        super().__init__(
            f"{len(self.missing_song_ids)} song(s) in listening history are missing "
            f"from the song catalog (e.g. {examples})"
        )
