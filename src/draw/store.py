"""
YAML file storage for tournaments, player registrations and brackets.

Layout under the data directory:
    tournaments/<tournament_id>/tournament.yaml
    tournaments/<tournament_id>/players.yaml
    tournaments/<tournament_id>/bracket.yaml
    tournaments/<tournament_id>/.lock
"""
import os
import re
import logging
import yaml
from datetime import datetime
from typing import List, Optional
from filelock import FileLock

from .errors import TournamentNotFound, DuplicateRegistration
from .models import Match, Participant

logger = logging.getLogger(__name__)

TOURNAMENT_FILE = 'tournament.yaml'
PLAYERS_FILE = 'players.yaml'
BRACKET_FILE = 'bracket.yaml'


def _slugify(name: str) -> str:
    """Convert tournament name to filesystem-safe slug."""
    slug = name.lower().strip()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = re.sub(r'[\s-]+', '-', slug)
    slug = slug.strip('-')
    return slug or 'tournament'


def _read_yaml(path: str):
    if not os.path.exists(path):
        return None
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.warning(f'Failed to parse {path}: {e}')
        return None


def _write_yaml(path: str, data):
    # Replace in one step so lock-free readers never see a half written file
    os.makedirs(os.path.dirname(path), exist_ok=True)
    tmp_path = f'{path}.tmp'
    with open(tmp_path, 'w', encoding='utf-8') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    os.replace(tmp_path, path)


def registration_sort_key(indexed_registration):
    """Seeded players first by seed number, unseeded last, ties by registration order."""
    index, registration = indexed_registration
    seed = registration.get('seed_number')
    return (seed is None, seed if seed is not None else 0, index)


class TournamentStore:
    def __init__(self, data_dir: str, lock_timeout: float = 10):
        self.data_dir = data_dir
        self.tournaments_dir = os.path.join(data_dir, 'tournaments')
        self.lock_timeout = lock_timeout
        self._locks = {}

    def _tournament_dir(self, tournament_id: str) -> str:
        return os.path.join(self.tournaments_dir, tournament_id)

    def _path(self, tournament_id: str, filename: str) -> str:
        return os.path.join(self._tournament_dir(tournament_id), filename)

    def lock(self, tournament_id: str) -> FileLock:
        """Per-tournament lock guarding every read-modify-write of its files."""
        if tournament_id not in self._locks:
            os.makedirs(self._tournament_dir(tournament_id), exist_ok=True)
            self._locks[tournament_id] = FileLock(self._path(tournament_id, '.lock'),
                                                  timeout=self.lock_timeout)
        return self._locks[tournament_id]

    # Tournaments

    def create_tournament(self, name: str, start_date: Optional[str] = None) -> dict:
        base_slug = _slugify(name)
        os.makedirs(self.tournaments_dir, exist_ok=True)
        with FileLock(os.path.join(self.tournaments_dir, '.lock'), timeout=self.lock_timeout):
            slug = base_slug
            suffix = 2
            while os.path.exists(self._tournament_dir(slug)):
                slug = f'{base_slug}-{suffix}'
                suffix += 1
            tournament = {
                'id': slug,
                'name': name,
                'start_date': start_date,
                'status': 'registration',
                'created': datetime.now().isoformat(),
            }
            _write_yaml(self._path(slug, TOURNAMENT_FILE), tournament)
            _write_yaml(self._path(slug, PLAYERS_FILE), {'players': []})
        logger.info(f'Created tournament {slug}')
        return tournament

    def load_tournament(self, tournament_id: str) -> dict:
        data = _read_yaml(self._path(tournament_id, TOURNAMENT_FILE))
        if not data:
            raise TournamentNotFound('Tournament not found')
        return data

    def save_tournament(self, tournament: dict):
        _write_yaml(self._path(tournament['id'], TOURNAMENT_FILE), tournament)

    def list_tournaments(self) -> List[dict]:
        if not os.path.isdir(self.tournaments_dir):
            return []
        tournaments = []
        for entry in sorted(os.listdir(self.tournaments_dir)):
            data = _read_yaml(self._path(entry, TOURNAMENT_FILE))
            if data:
                tournaments.append(data)
        return tournaments

    # Registrations

    def load_players(self, tournament_id: str) -> List[dict]:
        """Registrations in draw order."""
        data = _read_yaml(self._path(tournament_id, PLAYERS_FILE))
        registrations = data.get('players', []) if data else []
        return [reg for _, reg in sorted(enumerate(registrations), key=registration_sort_key)]

    def add_player(self, tournament_id: str, player_id: str, email: Optional[str] = None,
                   username: Optional[str] = None, seed_number: Optional[int] = None) -> dict:
        self.load_tournament(tournament_id)
        with self.lock(tournament_id):
            data = _read_yaml(self._path(tournament_id, PLAYERS_FILE)) or {}
            registrations = data.get('players', [])
            if any(reg['player_id'] == player_id for reg in registrations):
                raise DuplicateRegistration('Player is already registered for this tournament')
            registration = {
                'player_id': player_id,
                'email': email,
                'username': username,
                'seed_number': seed_number,
                'created': datetime.now().isoformat(),
            }
            registrations.append(registration)
            _write_yaml(self._path(tournament_id, PLAYERS_FILE), {'players': registrations})
        return registration

    def load_participants(self, tournament_id: str) -> List[Participant]:
        return [
            Participant(reg['player_id'], email=reg.get('email'), username=reg.get('username'))
            for reg in self.load_players(tournament_id)
        ]

    # Brackets

    def load_bracket(self, tournament_id: str) -> Optional[dict]:
        data = _read_yaml(self._path(tournament_id, BRACKET_FILE))
        if not data:
            return None
        data['matches'] = [Match.from_dict(m) for m in data.get('matches', [])]
        return data

    def save_bracket(self, tournament_id: str, bracket: dict):
        data = dict(bracket)
        data['matches'] = [m.to_dict() for m in bracket.get('matches', [])]
        _write_yaml(self._path(tournament_id, BRACKET_FILE), data)

    def delete_bracket(self, tournament_id: str):
        path = self._path(tournament_id, BRACKET_FILE)
        if os.path.exists(path):
            os.remove(path)

    def find_match_tournament(self, match_id: str) -> Optional[str]:
        """Return the id of the tournament whose bracket holds the match."""
        for tournament in self.list_tournaments():
            bracket = _read_yaml(self._path(tournament['id'], BRACKET_FILE))
            if bracket and any(m.get('id') == match_id for m in bracket.get('matches', [])):
                return tournament['id']
        return None
