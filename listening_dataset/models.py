from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Song:
    """A catalogued song and the users who have listened to it.

    Attributes:
        id: Song ID.
        listeners: User IDs of everyone who played the song, deduplicated.
    """

    id: str
    listeners: tuple[str, ...] = ()

    @property
    def listener_count(self) -> int:
        return len(self.listeners)


@dataclass(frozen=True, order=True)
class SongFrequency:
    # Ordered on listener_count alone so heap ties never compare song ids
    listener_count: int
    song_id: str = field(compare=False)
