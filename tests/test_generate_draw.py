"""
Tests for the generate_draw command line script.
"""
import pytest
import sys
import os
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from generate_draw import load_players, format_draw, main
from draw.elimination import generate_single_elimination_matches


class TestLoadPlayers:
    def test_plain_names(self, tmp_path):
        path = tmp_path / "players.yaml"
        path.write_text(yaml.dump(['Ann', 'Bob', 'Cid']))
        players = load_players(str(path))
        assert [p.id for p in players] == ['Ann', 'Bob', 'Cid']

    def test_mappings_under_players_key(self, tmp_path):
        path = tmp_path / "players.yaml"
        path.write_text(yaml.dump({'players': [
            {'id': 'u1', 'username': 'Ann', 'email': 'ann@example.com'},
            {'player_id': 'u2', 'email': 'bob@example.com'},
        ]}))
        players = load_players(str(path))
        assert [p.id for p in players] == ['u1', 'u2']
        assert [p.display_name for p in players] == ['Ann', 'bob@example.com']

    def test_empty_file(self, tmp_path):
        path = tmp_path / "players.yaml"
        path.write_text("")
        assert load_players(str(path)) == []


class TestFormatDraw:
    def test_standard_three_players(self, tmp_path):
        path = tmp_path / "players.yaml"
        path.write_text(yaml.dump(['Ann', 'Bob', 'Cid']))
        players = load_players(str(path))
        matches = generate_single_elimination_matches(players, 'standard')
        assert format_draw(matches, players).splitlines() == [
            '# Semifinal',
            'M1: Ann vs BYE -> Ann advances',
            'M2: Bob vs Cid',
            '',
            '# Final',
            'M1: Ann vs TBD',
        ]


class TestMain:
    def test_main_prints_draw(self, tmp_path, capsys):
        path = tmp_path / "players.yaml"
        path.write_text(yaml.dump([f'Player{i}' for i in range(1, 9)]))
        assert main([str(path), '--seeding', 'standard']) == 0
        out = capsys.readouterr().out
        assert '# Quarterfinal' in out
        assert 'M1: Player1 vs Player8' in out
        assert '# Final' in out

    def test_main_random_with_seed_is_reproducible(self, tmp_path, capsys):
        path = tmp_path / "players.yaml"
        path.write_text(yaml.dump([f'Player{i}' for i in range(1, 7)]))
        main([str(path), '--seed', '3'])
        first = capsys.readouterr().out
        main([str(path), '--seed', '3'])
        assert capsys.readouterr().out == first

    def test_main_too_few_players(self, tmp_path, capsys):
        path = tmp_path / "players.yaml"
        path.write_text(yaml.dump(['Solo']))
        assert main([str(path)]) == 1
        assert 'At least 2 players' in capsys.readouterr().err

    def test_main_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / 'missing.yaml')]) == 1
        assert 'Could not read' in capsys.readouterr().err
