"""
Shared pytest fixtures for tournament draw tests.
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from draw.models import Participant
from draw.store import TournamentStore


def make_players(count):
    """Players P1..Pn, listed in seed order."""
    return [Participant(f"P{i}", username=f"Player {i}") for i in range(1, count + 1)]


@pytest.fixture
def store(tmp_path):
    """Tournament store on a temporary data directory."""
    return TournamentStore(str(tmp_path), lock_timeout=1)


@pytest.fixture
def tournament_with_players(store):
    """Create a tournament and register a given number of seeded players."""
    def _create(count, name='Club Championship'):
        tournament = store.create_tournament(name, start_date='2026-06-01')
        for i in range(1, count + 1):
            store.add_player(tournament['id'], f"P{i}", username=f"Player {i}", seed_number=i)
        return tournament['id']
    return _create


@pytest.fixture
def client(store, monkeypatch):
    """Flask test client backed by the temporary store."""
    import app as app_module
    monkeypatch.setattr(app_module, 'store', store)
    app_module.app.config['TESTING'] = True
    with app_module.app.test_client() as client:
        yield client
