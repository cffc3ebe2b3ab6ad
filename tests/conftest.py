import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from lyric_pic.app.data.database import SQLiteLyricRepository
from lyric_pic.app.services.reconciliation import LyricReconciler


class SequenceRandom:
    """Random stub whose ``sample`` returns the first ``k`` items of the pool."""

    def __init__(self) -> None:
        self.pools = []

    def sample(self, population, k):
        pool = list(population)
        self.pools.append(pool)
        return pool[:k]

    def shuffle(self, items):
        return None


@pytest.fixture
def repository(tmp_path):
    """Fresh SQLite repository with the schema created."""

    repo = SQLiteLyricRepository(str(tmp_path / "lyrics.db"), pool_size=2)
    repo.ensure_database()
    yield repo
    repo.close()


@pytest.fixture
def reconciler(repository):
    return LyricReconciler(repository)


@pytest.fixture
def artist_id(repository):
    return repository.create_artist("Test Artist")


@pytest.fixture
def make_song(repository, artist_id):
    """Factory inserting a song for the default test artist."""

    def _make(name, lyrics="", artist=None):
        return repository.add_song(artist if artist is not None else artist_id, name, lyrics)

    return _make


@pytest.fixture
def sequence_random():
    return SequenceRandom()
