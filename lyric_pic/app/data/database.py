"""SQLite storage for songs, root words and their per-song links."""

from __future__ import annotations

import os
import queue
import re
import sqlite3
import threading
from contextlib import contextmanager
from typing import Any, Dict, Generator, Iterable, List, Mapping, Optional, Sequence, Tuple

from lyric_pic.core.blocklist import BlocklistSnapshot, default_blocklist_entries, is_disabling_reason
from lyric_pic.utils.observability import get_logger

from .models import (
    LOAD_STATUSES,
    ArtistLyricStats,
    CanonicalLyric,
    STATUS_NEW,
    Song,
    SongLyricLink,
)

DEFAULT_DB_ENV = "LYRIC_PIC_DB"
DEFAULT_DB_PATH = "lyric_pic.db"

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS artist (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        slug TEXT UNIQUE NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS album (
        id INTEGER PRIMARY KEY,
        artist_id INTEGER NOT NULL REFERENCES artist(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        album_type TEXT NOT NULL DEFAULT 'studio',
        release_year INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS song (
        id INTEGER PRIMARY KEY,
        artist_id INTEGER NOT NULL REFERENCES artist(id) ON DELETE CASCADE,
        album_id INTEGER REFERENCES album(id) ON DELETE SET NULL,
        name TEXT NOT NULL,
        lyrics_full_text TEXT,
        is_selectable INTEGER NOT NULL DEFAULT 1,
        load_status TEXT NOT NULL DEFAULT 'new',
        unplayable_reason TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS lyric (
        id INTEGER PRIMARY KEY,
        root_word TEXT UNIQUE NOT NULL,
        is_blocklisted INTEGER NOT NULL DEFAULT 0,
        blocklist_reason TEXT,
        is_flagged INTEGER NOT NULL DEFAULT 0,
        flagged_user TEXT,
        reviewed_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS song_lyric (
        song_id INTEGER NOT NULL REFERENCES song(id) ON DELETE CASCADE,
        lyric_id INTEGER NOT NULL REFERENCES lyric(id) ON DELETE CASCADE,
        count INTEGER NOT NULL DEFAULT 0,
        is_selectable INTEGER NOT NULL DEFAULT 1,
        is_in_title INTEGER NOT NULL DEFAULT 0,
        is_expanded INTEGER NOT NULL DEFAULT 0,
        PRIMARY KEY (song_id, lyric_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS artist_lyric (
        artist_id INTEGER NOT NULL REFERENCES artist(id) ON DELETE CASCADE,
        lyric_id INTEGER NOT NULL REFERENCES lyric(id) ON DELETE CASCADE,
        song_count INTEGER NOT NULL DEFAULT 0,
        total_count INTEGER NOT NULL DEFAULT 0,
        PRIMARY KEY (artist_id, lyric_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_song_artist ON song (artist_id)",
    "CREATE INDEX IF NOT EXISTS idx_lyric_blocklisted ON lyric (is_blocklisted)",
    "CREATE INDEX IF NOT EXISTS idx_song_lyric_lyric ON song_lyric (lyric_id)",
    "CREATE INDEX IF NOT EXISTS idx_song_lyric_selectable ON song_lyric (song_id, is_selectable)",
    "CREATE INDEX IF NOT EXISTS idx_artist_lyric_artist ON artist_lyric (artist_id)",
)

_LINK_COLUMNS = """
    sl.song_id, sl.lyric_id, l.root_word, sl.count, sl.is_selectable,
    sl.is_in_title, sl.is_expanded, l.is_blocklisted, l.blocklist_reason
"""


def default_db_path() -> str:
    return os.environ.get(DEFAULT_DB_ENV) or DEFAULT_DB_PATH


def _ensure_parent_directory(path: str) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def _normalise_text(value: Optional[str]) -> Optional[str]:
    cleaned = str(value or "").strip()
    if not cleaned:
        return None
    return cleaned.lower()


def _slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def _row_to_song(row: sqlite3.Row) -> Song:
    return Song(
        id=row["id"],
        artist_id=row["artist_id"],
        name=row["name"],
        lyrics_full_text=row["lyrics_full_text"],
        album_id=row["album_id"],
        is_selectable=bool(row["is_selectable"]),
        load_status=row["load_status"],
        unplayable_reason=row["unplayable_reason"],
    )


def _row_to_lyric(row: sqlite3.Row) -> CanonicalLyric:
    return CanonicalLyric(
        id=row["id"],
        root_word=row["root_word"],
        is_blocklisted=bool(row["is_blocklisted"]),
        blocklist_reason=row["blocklist_reason"],
        is_flagged=bool(row["is_flagged"]),
        flagged_user=row["flagged_user"],
        reviewed_at=row["reviewed_at"],
    )


def _row_to_link(row: sqlite3.Row) -> SongLyricLink:
    return SongLyricLink(
        song_id=row["song_id"],
        lyric_id=row["lyric_id"],
        root_word=row["root_word"],
        count=row["count"],
        is_selectable=bool(row["is_selectable"]),
        is_in_title=bool(row["is_in_title"]),
        is_expanded=bool(row["is_expanded"]),
        is_blocklisted=bool(row["is_blocklisted"]),
        blocklist_reason=row["blocklist_reason"],
    )


class SQLiteLyricRepository:
    """Repository encapsulating all SQLite access for the lyric pipeline.

    Methods that take a ``conn`` argument join the caller's transaction
    (see :meth:`transaction`); without one they run and commit on their own.
    """

    def __init__(
        self,
        db_path: Optional[str] = None,
        *,
        pool_size: int = 4,
        pool_timeout: float = 5.0,
    ) -> None:
        self.db_path = db_path or default_db_path()
        self._pool_size = max(1, int(pool_size))
        self._pool_timeout = max(0.0, float(pool_timeout))
        self._pool: queue.Queue = queue.Queue(maxsize=self._pool_size)
        self._pool_semaphore = threading.BoundedSemaphore(self._pool_size)
        self._logger = get_logger(__name__).bind(
            component="sqlite_repository",
            db_path=self.db_path,
        )
        self._logger.info(
            "SQLite repository initialised",
            context={"pool_size": self._pool_size, "pool_timeout": self._pool_timeout},
        )

    # ------------------------------------------------------------------
    # Connection pool
    # ------------------------------------------------------------------
    def _create_connection(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self.db_path, check_same_thread=False)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys=ON")
        try:
            connection.execute("PRAGMA journal_mode=WAL")
        except sqlite3.Error as exc:
            self._logger.warning(
                "SQLite WAL mode unavailable",
                context={"error": str(exc)},
            )
        return connection

    def _acquire_connection(self) -> sqlite3.Connection:
        if not self._pool_semaphore.acquire(timeout=self._pool_timeout or None):
            self._logger.error(
                "Database connection pool exhausted",
                context={"pool_size": self._pool_size, "timeout": self._pool_timeout},
            )
            raise TimeoutError("Database connection pool exhausted")

        try:
            return self._pool.get_nowait()
        except queue.Empty:
            return self._create_connection()

    def _release_connection(self, connection: sqlite3.Connection) -> None:
        try:
            self._pool.put_nowait(connection)
        except queue.Full:
            connection.close()
        finally:
            self._pool_semaphore.release()

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Yield a pooled connection committed on success, rolled back on error."""

        connection = self._acquire_connection()
        try:
            yield connection
            if connection.in_transaction:
                connection.commit()
        except Exception as exc:
            if connection.in_transaction:
                connection.rollback()
            self._logger.error(
                "SQLite operation failed",
                context={"error": str(exc), "error_type": type(exc).__name__},
            )
            raise
        finally:
            self._release_connection(connection)

    @contextmanager
    def _using(self, conn: Optional[sqlite3.Connection]) -> Generator[sqlite3.Connection, None, None]:
        if conn is not None:
            yield conn
            return
        with self.transaction() as connection:
            yield connection

    def close(self) -> None:
        while True:
            try:
                connection = self._pool.get_nowait()
            except queue.Empty:
                break
            connection.close()

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------
    def ensure_database(self) -> int:
        """Create missing tables and indexes; return the number of stored root words."""

        _ensure_parent_directory(self.db_path)
        with self.transaction() as conn:
            self._initialise_schema(conn)
            (count,) = conn.execute("SELECT COUNT(*) FROM lyric").fetchone()
        self._logger.info("Database schema verified", context={"lyric_count": int(count)})
        return int(count)

    def _initialise_schema(self, connection: sqlite3.Connection) -> None:
        for statement in _SCHEMA:
            connection.execute(statement)
        self._ensure_schema_extensions(connection)

    def _ensure_schema_extensions(self, connection: sqlite3.Connection) -> None:
        existing_columns = {
            row["name"] for row in connection.execute("PRAGMA table_info(song_lyric)")
        }
        if "is_expanded" not in existing_columns:
            connection.execute(
                "ALTER TABLE song_lyric ADD COLUMN is_expanded INTEGER NOT NULL DEFAULT 0"
            )

    # ------------------------------------------------------------------
    # Catalogue
    # ------------------------------------------------------------------
    def create_artist(self, name: str, *, slug: Optional[str] = None) -> int:
        slug_value = slug or _slugify(name)
        with self.transaction() as conn:
            conn.execute(
                "INSERT INTO artist (name, slug) VALUES (?, ?) ON CONFLICT(slug) DO NOTHING",
                (name, slug_value),
            )
            row = conn.execute("SELECT id FROM artist WHERE slug = ?", (slug_value,)).fetchone()
        return int(row["id"])

    def create_album(
        self,
        artist_id: int,
        name: str,
        *,
        album_type: str = "studio",
        release_year: Optional[int] = None,
    ) -> int:
        with self.transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO album (artist_id, name, album_type, release_year) VALUES (?, ?, ?, ?)",
                (artist_id, name, album_type, release_year),
            )
            return int(cursor.lastrowid)

    def add_song(
        self,
        artist_id: int,
        name: str,
        lyrics_full_text: Optional[str],
        *,
        album_id: Optional[int] = None,
    ) -> int:
        with self.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO song (artist_id, album_id, name, lyrics_full_text, load_status)
                VALUES (?, ?, ?, ?, ?)
                """,
                (artist_id, album_id, name, lyrics_full_text, STATUS_NEW),
            )
            return int(cursor.lastrowid)

    def find_song_by_name(self, artist_id: int, name: str) -> Optional[Song]:
        with self.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM song WHERE artist_id = ? AND name = ? ORDER BY id LIMIT 1",
                (artist_id, name),
            ).fetchone()
        return _row_to_song(row) if row else None

    def get_song(self, song_id: int, *, conn: Optional[sqlite3.Connection] = None) -> Optional[Song]:
        with self._using(conn) as connection:
            row = connection.execute("SELECT * FROM song WHERE id = ?", (song_id,)).fetchone()
        return _row_to_song(row) if row else None

    def list_song_ids(
        self,
        *,
        artist_id: Optional[int] = None,
        only_selectable: bool = False,
        statuses: Optional[Sequence[str]] = None,
    ) -> List[int]:
        conditions: List[str] = []
        params: List[Any] = []
        if artist_id is not None:
            conditions.append("artist_id = ?")
            params.append(artist_id)
        if only_selectable:
            conditions.append("is_selectable = 1")
        if statuses:
            conditions.append(f"load_status IN ({','.join('?' for _ in statuses)})")
            params.extend(statuses)
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        with self.transaction() as conn:
            rows = conn.execute(f"SELECT id FROM song {where} ORDER BY id", params).fetchall()
        return [int(row["id"]) for row in rows]

    def list_artist_ids(self) -> List[int]:
        with self.transaction() as conn:
            rows = conn.execute("SELECT id FROM artist ORDER BY id").fetchall()
        return [int(row["id"]) for row in rows]

    def set_song_status(
        self,
        song_id: int,
        status: str,
        *,
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        if status not in LOAD_STATUSES:
            raise ValueError(f"Unknown load status: {status!r}")
        with self._using(conn) as connection:
            connection.execute("UPDATE song SET load_status = ? WHERE id = ?", (status, song_id))

    def set_song_selectable(
        self,
        song_id: int,
        selectable: bool,
        *,
        status: Optional[str] = None,
        reason: Optional[str] = None,
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        with self._using(conn) as connection:
            connection.execute(
                "UPDATE song SET is_selectable = ?, unplayable_reason = ? WHERE id = ?",
                (int(bool(selectable)), None if selectable else reason, song_id),
            )
            if status is not None:
                self.set_song_status(song_id, status, conn=connection)

    # ------------------------------------------------------------------
    # Root words
    # ------------------------------------------------------------------
    def find_or_create_lyric(
        self,
        root_word: str,
        *,
        conn: Optional[sqlite3.Connection] = None,
    ) -> int:
        """Return the id of ``root_word``, inserting it when unseen.

        The insert relies on the unique ``root_word`` constraint, so
        concurrent writers converge on one row.
        """

        normalized = _normalise_text(root_word)
        if normalized is None:
            raise ValueError("root_word must be a non-empty string")
        with self._using(conn) as connection:
            connection.execute(
                "INSERT INTO lyric (root_word) VALUES (?) ON CONFLICT(root_word) DO NOTHING",
                (normalized,),
            )
            row = connection.execute(
                "SELECT id FROM lyric WHERE root_word = ?",
                (normalized,),
            ).fetchone()
        return int(row["id"])

    def get_lyric(self, root_word: str) -> Optional[CanonicalLyric]:
        normalized = _normalise_text(root_word)
        if normalized is None:
            return None
        with self.transaction() as conn:
            row = conn.execute("SELECT * FROM lyric WHERE root_word = ?", (normalized,)).fetchone()
        return _row_to_lyric(row) if row else None

    def get_lyrics_by_words(
        self,
        words: Iterable[str],
        *,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Dict[str, CanonicalLyric]:
        terms = sorted({term for term in (_normalise_text(w) for w in words) if term})
        if not terms:
            return {}
        lyrics: Dict[str, CanonicalLyric] = {}
        with self._using(conn) as connection:
            # SQLite caps bound parameters, so look words up in slices.
            for start in range(0, len(terms), 500):
                chunk = terms[start : start + 500]
                placeholders = ",".join("?" for _ in chunk)
                rows = connection.execute(
                    f"SELECT * FROM lyric WHERE root_word IN ({placeholders})",
                    chunk,
                ).fetchall()
                for row in rows:
                    lyrics[row["root_word"]] = _row_to_lyric(row)
        return lyrics

    def list_lyrics_with_pending_links(self) -> List[Tuple[int, str]]:
        """Root words that still have links not yet expanded by the cleanup pass."""

        with self.transaction() as conn:
            rows = conn.execute(
                """
                SELECT DISTINCT l.id, l.root_word
                FROM lyric l
                JOIN song_lyric sl ON sl.lyric_id = l.id
                WHERE sl.is_expanded = 0
                ORDER BY l.root_word
                """
            ).fetchall()
        return [(int(row["id"]), row["root_word"]) for row in rows]

    def delete_unused_lyrics(self) -> int:
        """Delete root words no song references; blocklist entries are kept."""

        with self.transaction() as conn:
            cursor = conn.execute(
                """
                DELETE FROM lyric
                WHERE is_blocklisted = 0
                  AND NOT EXISTS (SELECT 1 FROM song_lyric sl WHERE sl.lyric_id = lyric.id)
                """
            )
            deleted = cursor.rowcount
        self._logger.info("Unused lyrics deleted", context={"deleted": deleted})
        return deleted

    # ------------------------------------------------------------------
    # Moderation
    # ------------------------------------------------------------------
    def load_blocklist(self) -> BlocklistSnapshot:
        with self.transaction() as conn:
            rows = conn.execute(
                "SELECT root_word, blocklist_reason FROM lyric WHERE is_blocklisted = 1"
            ).fetchall()
        return BlocklistSnapshot.from_entries((row["root_word"], row["blocklist_reason"]) for row in rows)

    def seed_blocklist(self, entries: Optional[Mapping[str, str]] = None) -> int:
        """Blocklist ``entries`` (defaults to the built-in table) that are not yet blocked."""

        table = default_blocklist_entries() if entries is None else dict(entries)
        seeded = 0
        with self.transaction() as conn:
            for word, reason in sorted(table.items()):
                lyric_id = self.find_or_create_lyric(word, conn=conn)
                cursor = conn.execute(
                    """
                    UPDATE lyric SET is_blocklisted = 1, blocklist_reason = ?
                    WHERE id = ? AND is_blocklisted = 0
                    """,
                    (reason, lyric_id),
                )
                seeded += cursor.rowcount
                if is_disabling_reason(reason):
                    self._disable_links(conn, lyric_id)
        self._logger.info("Blocklist seeded", context={"entries": len(table), "seeded": seeded})
        return seeded

    def blocklist_lyric(self, root_word: str, reason: str) -> int:
        """Blocklist ``root_word``; disabling reasons switch off every song link."""

        with self.transaction() as conn:
            lyric_id = self.find_or_create_lyric(root_word, conn=conn)
            conn.execute(
                "UPDATE lyric SET is_blocklisted = 1, blocklist_reason = ? WHERE id = ?",
                (reason, lyric_id),
            )
            disabled = self._disable_links(conn, lyric_id) if is_disabling_reason(reason) else 0
        self._logger.info(
            "Lyric blocklisted",
            context={"root_word": root_word, "reason": reason, "links_disabled": disabled},
        )
        return lyric_id

    def unblocklist_lyric(self, root_word: str) -> bool:
        normalized = _normalise_text(root_word)
        with self.transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE lyric SET is_blocklisted = 0, blocklist_reason = NULL
                WHERE root_word = ? AND is_blocklisted = 1
                """,
                (normalized,),
            )
            return cursor.rowcount > 0

    def _disable_links(self, conn: sqlite3.Connection, lyric_id: int) -> int:
        cursor = conn.execute(
            "UPDATE song_lyric SET is_selectable = 0 WHERE lyric_id = ? AND is_selectable = 1",
            (lyric_id,),
        )
        return cursor.rowcount

    def flag_lyric(self, root_word: str, user: str) -> bool:
        with self.transaction() as conn:
            cursor = conn.execute(
                "UPDATE lyric SET is_flagged = 1, flagged_user = ? WHERE root_word = ?",
                (user, _normalise_text(root_word)),
            )
            return cursor.rowcount > 0

    def unflag_lyric(self, root_word: str) -> bool:
        with self.transaction() as conn:
            cursor = conn.execute(
                "UPDATE lyric SET is_flagged = 0, flagged_user = NULL WHERE root_word = ?",
                (_normalise_text(root_word),),
            )
            return cursor.rowcount > 0

    def mark_reviewed(self, root_word: str) -> bool:
        with self.transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE lyric SET reviewed_at = CURRENT_TIMESTAMP, is_flagged = 0, flagged_user = NULL
                WHERE root_word = ?
                """,
                (_normalise_text(root_word),),
            )
            return cursor.rowcount > 0

    def list_flagged_lyrics(self) -> List[CanonicalLyric]:
        with self.transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM lyric WHERE is_flagged = 1 ORDER BY root_word"
            ).fetchall()
        return [_row_to_lyric(row) for row in rows]

    # ------------------------------------------------------------------
    # Song links
    # ------------------------------------------------------------------
    def clear_song_lyrics(self, song_id: int, *, conn: Optional[sqlite3.Connection] = None) -> int:
        with self._using(conn) as connection:
            cursor = connection.execute("DELETE FROM song_lyric WHERE song_id = ?", (song_id,))
            return cursor.rowcount

    def insert_song_lyrics(
        self,
        links: Iterable[SongLyricLink],
        *,
        conn: Optional[sqlite3.Connection] = None,
    ) -> int:
        rows = [
            (
                link.song_id,
                link.lyric_id,
                int(link.count),
                int(link.is_selectable),
                int(link.is_in_title),
                int(link.is_expanded),
            )
            for link in links
        ]
        with self._using(conn) as connection:
            connection.executemany(
                """
                INSERT INTO song_lyric (song_id, lyric_id, count, is_selectable, is_in_title, is_expanded)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
        return len(rows)

    def fetch_song_lyrics(
        self,
        song_id: int,
        *,
        conn: Optional[sqlite3.Connection] = None,
    ) -> List[SongLyricLink]:
        with self._using(conn) as connection:
            rows = connection.execute(
                f"""
                SELECT {_LINK_COLUMNS}
                FROM song_lyric sl
                JOIN lyric l ON l.id = sl.lyric_id
                WHERE sl.song_id = ?
                ORDER BY l.root_word
                """,
                (song_id,),
            ).fetchall()
        return [_row_to_link(row) for row in rows]

    def fetch_links_for_lyric(
        self,
        lyric_id: int,
        *,
        conn: Optional[sqlite3.Connection] = None,
    ) -> List[SongLyricLink]:
        with self._using(conn) as connection:
            rows = connection.execute(
                f"""
                SELECT {_LINK_COLUMNS}
                FROM song_lyric sl
                JOIN lyric l ON l.id = sl.lyric_id
                WHERE sl.lyric_id = ?
                ORDER BY sl.song_id
                """,
                (lyric_id,),
            ).fetchall()
        return [_row_to_link(row) for row in rows]

    def set_link_flags(
        self,
        song_id: int,
        selectable: Mapping[int, bool],
        *,
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        with self._using(conn) as connection:
            connection.executemany(
                "UPDATE song_lyric SET is_selectable = ? WHERE song_id = ? AND lyric_id = ?",
                [(int(flag), song_id, lyric_id) for lyric_id, flag in selectable.items()],
            )

    def mark_link_expanded(
        self,
        song_id: int,
        lyric_id: int,
        *,
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        with self._using(conn) as connection:
            connection.execute(
                """
                UPDATE song_lyric SET is_expanded = 1, is_selectable = 0
                WHERE song_id = ? AND lyric_id = ?
                """,
                (song_id, lyric_id),
            )

    def add_count_to_song(
        self,
        song_id: int,
        lyric_id: int,
        count: int,
        *,
        is_in_title: bool,
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        """Add ``count`` occurrences to an existing link or insert a non-selectable one.

        New links are left unexpanded so the next re-rank may pick them.
        """

        with self._using(conn) as connection:
            connection.execute(
                """
                INSERT INTO song_lyric (song_id, lyric_id, count, is_selectable, is_in_title, is_expanded)
                VALUES (?, ?, ?, 0, ?, 0)
                ON CONFLICT(song_id, lyric_id) DO UPDATE SET count = count + excluded.count
                """,
                (song_id, lyric_id, int(count), int(is_in_title)),
            )

    def count_playable_words(
        self,
        song_id: int,
        *,
        conn: Optional[sqlite3.Connection] = None,
    ) -> int:
        with self._using(conn) as connection:
            (count,) = connection.execute(
                """
                SELECT COUNT(DISTINCT sl.lyric_id)
                FROM song_lyric sl
                JOIN lyric l ON l.id = sl.lyric_id
                WHERE sl.song_id = ? AND sl.is_selectable = 1 AND l.is_blocklisted = 0
                """,
                (song_id,),
            ).fetchone()
        return int(count)

    # ------------------------------------------------------------------
    # Artist statistics
    # ------------------------------------------------------------------
    def fetch_artist_link_rows(
        self,
        artist_id: int,
        *,
        conn: Optional[sqlite3.Connection] = None,
    ) -> List[Tuple[int, int, str, int]]:
        """``(song_id, lyric_id, root_word, count)`` over the artist's enabled songs."""

        with self._using(conn) as connection:
            rows = connection.execute(
                """
                SELECT sl.song_id, sl.lyric_id, l.root_word, sl.count
                FROM song_lyric sl
                JOIN song s ON s.id = sl.song_id
                JOIN lyric l ON l.id = sl.lyric_id
                WHERE s.artist_id = ? AND s.is_selectable = 1
                ORDER BY sl.song_id, l.root_word
                """,
                (artist_id,),
            ).fetchall()
        return [
            (int(row["song_id"]), int(row["lyric_id"]), row["root_word"], int(row["count"]))
            for row in rows
        ]

    def replace_artist_lyric_stats(
        self,
        artist_id: int,
        stats: Sequence[ArtistLyricStats],
        *,
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        with self._using(conn) as connection:
            connection.execute("DELETE FROM artist_lyric WHERE artist_id = ?", (artist_id,))
            connection.executemany(
                """
                INSERT INTO artist_lyric (artist_id, lyric_id, song_count, total_count)
                VALUES (?, ?, ?, ?)
                """,
                [(item.artist_id, item.lyric_id, item.song_count, item.total_count) for item in stats],
            )

    def fetch_artist_lyric_stats(self, artist_id: int) -> Dict[int, ArtistLyricStats]:
        with self.transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM artist_lyric WHERE artist_id = ?",
                (artist_id,),
            ).fetchall()
        return {
            int(row["lyric_id"]): ArtistLyricStats(
                artist_id=int(row["artist_id"]),
                lyric_id=int(row["lyric_id"]),
                song_count=int(row["song_count"]),
                total_count=int(row["total_count"]),
            )
            for row in rows
        }

    def fetch_puzzle_candidates(self, song_id: int) -> List[Dict[str, Any]]:
        """Selectable, non-blocklisted words of a song with their catalogue song count."""

        with self.transaction() as conn:
            rows = conn.execute(
                """
                SELECT sl.lyric_id, l.root_word AS word, sl.count,
                       COALESCE(al.song_count, 0) AS song_count
                FROM song_lyric sl
                JOIN song s ON s.id = sl.song_id
                JOIN lyric l ON l.id = sl.lyric_id
                LEFT JOIN artist_lyric al
                       ON al.lyric_id = sl.lyric_id AND al.artist_id = s.artist_id
                WHERE sl.song_id = ? AND sl.is_selectable = 1 AND l.is_blocklisted = 0
                ORDER BY l.root_word
                """,
                (song_id,),
            ).fetchall()
        return [{key: row[key] for key in row.keys()} for row in rows]


__all__ = ["DEFAULT_DB_ENV", "SQLiteLyricRepository", "default_db_path"]
