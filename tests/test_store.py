"""
Tests for the YAML tournament store.
"""
import os
import pytest
import sys
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from draw.elimination import generate_single_elimination_matches
from draw.errors import TournamentNotFound, DuplicateRegistration
from draw.store import TournamentStore, _slugify
from conftest import make_players


class TestSlugify:
    def test_slugify(self):
        assert _slugify("Summer Open 2026!") == "summer-open-2026"
        assert _slugify("  --  ") == "tournament"


class TestTournaments:
    """Tests for tournament records."""

    def test_create_and_load(self, store):
        tournament = store.create_tournament("Summer Open", start_date="2026-07-01")
        assert tournament['id'] == 'summer-open'
        assert tournament['status'] == 'registration'
        loaded = store.load_tournament('summer-open')
        assert loaded['name'] == 'Summer Open'
        assert loaded['start_date'] == '2026-07-01'

    def test_duplicate_names_get_suffix(self, store):
        store.create_tournament("Summer Open")
        second = store.create_tournament("Summer Open")
        assert second['id'] == 'summer-open-2'

    def test_load_missing(self, store):
        with pytest.raises(TournamentNotFound):
            store.load_tournament('nope')

    def test_list_tournaments(self, store):
        assert store.list_tournaments() == []
        store.create_tournament("B Cup")
        store.create_tournament("A Cup")
        assert [t['id'] for t in store.list_tournaments()] == ['a-cup', 'b-cup']

    def test_unparsable_tournament_file_is_skipped(self, store, tmp_path):
        store.create_tournament("Good")
        broken = tmp_path / 'tournaments' / 'broken'
        broken.mkdir()
        (broken / 'tournament.yaml').write_text("name: [unclosed")
        assert [t['id'] for t in store.list_tournaments()] == ['good']


class TestRegistrations:
    """Tests for player registrations."""

    def test_players_ordered_by_seed_then_registration(self, store):
        tid = store.create_tournament("Open")['id']
        store.add_player(tid, 'unseeded-1')
        store.add_player(tid, 'seed-2', seed_number=2)
        store.add_player(tid, 'unseeded-2')
        store.add_player(tid, 'seed-1', seed_number=1)
        order = [reg['player_id'] for reg in store.load_players(tid)]
        assert order == ['seed-1', 'seed-2', 'unseeded-1', 'unseeded-2']

    def test_duplicate_registration(self, store):
        tid = store.create_tournament("Open")['id']
        store.add_player(tid, 'p1')
        with pytest.raises(DuplicateRegistration):
            store.add_player(tid, 'p1')

    def test_register_for_missing_tournament(self, store):
        with pytest.raises(TournamentNotFound):
            store.add_player('nope', 'p1')

    def test_load_participants(self, store):
        tid = store.create_tournament("Open")['id']
        store.add_player(tid, 'p1', email='p1@example.com', username='Pat')
        participants = store.load_participants(tid)
        assert len(participants) == 1
        assert participants[0].id == 'p1'
        assert participants[0].display_name == 'Pat'


class TestBrackets:
    """Tests for bracket persistence."""

    def test_save_and_load_bracket(self, store, tmp_path):
        tid = store.create_tournament("Open")['id']
        matches = generate_single_elimination_matches(make_players(5), 'standard')
        store.save_bracket(tid, {'id': 'b-1', 'name': 'Main Draw', 'matches': matches})

        raw = yaml.safe_load((tmp_path / 'tournaments' / tid / 'bracket.yaml').read_text())
        assert raw['id'] == 'b-1'
        assert len(raw['matches']) == 7

        loaded = store.load_bracket(tid)
        assert [m.to_dict() for m in loaded['matches']] == [m.to_dict() for m in matches]

    def test_missing_bracket(self, store):
        tid = store.create_tournament("Open")['id']
        assert store.load_bracket(tid) is None

    def test_delete_bracket(self, store):
        tid = store.create_tournament("Open")['id']
        store.save_bracket(tid, {'id': 'b-1', 'matches': []})
        store.delete_bracket(tid)
        assert store.load_bracket(tid) is None
        store.delete_bracket(tid)

    def test_find_match_tournament(self, store):
        first = store.create_tournament("First")['id']
        second = store.create_tournament("Second")['id']
        matches = generate_single_elimination_matches(make_players(4), 'standard')
        store.save_bracket(second, {'id': 'b-2', 'matches': matches})
        assert store.find_match_tournament(matches[0].id) == second
        assert store.find_match_tournament('missing') is None
        assert first != second


class TestLocking:
    def test_lock_is_per_tournament_and_reused(self, store):
        a = store.create_tournament("A")['id']
        b = store.create_tournament("B")['id']
        assert store.lock(a) is store.lock(a)
        assert store.lock(a) is not store.lock(b)

    def test_lock_is_reentrant(self, store):
        tid = store.create_tournament("A")['id']
        with store.lock(tid):
            with store.lock(tid):
                assert store.lock(tid).is_locked
        assert not store.lock(tid).is_locked

    def test_lock_conflicts_across_stores(self, tmp_path):
        from filelock import Timeout
        first = TournamentStore(str(tmp_path), lock_timeout=0.1)
        second = TournamentStore(str(tmp_path), lock_timeout=0.1)
        tid = first.create_tournament("A")['id']
        with first.lock(tid):
            with pytest.raises(Timeout):
                second.lock(tid).acquire()
