"""Records exchanged between the lyric repository and the pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

STATUS_NEW = "new"
STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"

LOAD_STATUSES = (STATUS_NEW, STATUS_PROCESSING, STATUS_COMPLETED, STATUS_FAILED)


@dataclass
class Song:
    id: int
    artist_id: int
    name: str
    lyrics_full_text: Optional[str] = None
    album_id: Optional[int] = None
    is_selectable: bool = True
    load_status: str = STATUS_NEW
    unplayable_reason: Optional[str] = None


@dataclass
class CanonicalLyric:
    """A stored root word and its moderation state."""

    id: int
    root_word: str
    is_blocklisted: bool = False
    blocklist_reason: Optional[str] = None
    is_flagged: bool = False
    flagged_user: Optional[str] = None
    reviewed_at: Optional[str] = None


@dataclass
class SongLyricLink:
    """Occurrences of one root word in one song."""

    song_id: int
    lyric_id: int
    root_word: str
    count: int
    is_selectable: bool
    is_in_title: bool
    is_expanded: bool = False
    is_blocklisted: bool = False
    blocklist_reason: Optional[str] = None


@dataclass
class ArtistLyricStats:
    artist_id: int
    lyric_id: int
    song_count: int
    total_count: int


__all__ = [
    "ArtistLyricStats",
    "CanonicalLyric",
    "LOAD_STATUSES",
    "STATUS_COMPLETED",
    "STATUS_FAILED",
    "STATUS_NEW",
    "STATUS_PROCESSING",
    "Song",
    "SongLyricLink",
]
