"""
Draw generation, result reporting and scheduling on top of the tournament store.

Every operation that rewrites a bracket holds the tournament's file lock for
the whole read-modify-write, so regenerations and sibling results feeding the
same next match are serialised.
"""
import logging
import random
import uuid
from datetime import datetime
from typing import Optional
from filelock import Timeout

from .elimination import (
    generate_single_elimination_matches,
    advance_winner,
    feeder_slot,
    insertion_order,
)
from .errors import (
    AdvancementConflict,
    BracketAlreadyExists,
    InsufficientParticipants,
    InvalidResult,
    InvalidSchedule,
    InvalidSeedingMode,
    MatchNotFound,
    ScheduleConflict,
)
from .models import BYE_SCORE, SEEDING_MODES, SEEDING_RANDOM, STATUS_COMPLETED
from .scheduling import auto_schedule_matches
from .store import TournamentStore

logger = logging.getLogger(__name__)


def generate_draw(store: TournamentStore, tournament_id: str, seeding_mode: str = SEEDING_RANDOM,
                  replace: bool = True, rng: Optional[random.Random] = None) -> dict:
    """Build and persist the main draw for a tournament, replacing any previous one."""
    store.load_tournament(tournament_id)
    if seeding_mode not in SEEDING_MODES:
        raise InvalidSeedingMode(f'Unknown seeding mode: {seeding_mode}')

    participants = store.load_participants(tournament_id)
    if len(participants) < 2:
        raise InsufficientParticipants('Not enough players registered to generate a draw (min 2).')

    try:
        with store.lock(tournament_id):
            if not replace and store.load_bracket(tournament_id) is not None:
                raise BracketAlreadyExists('A draw already exists for this tournament')

            matches = generate_single_elimination_matches(participants, seeding_mode, rng)

            store.delete_bracket(tournament_id)
            bracket = {
                'id': str(uuid.uuid4()),
                'tournament_id': tournament_id,
                'name': 'Main Draw',
                'format': 'single_elimination',
                'seeding_mode': seeding_mode,
                'created': datetime.now().isoformat(),
                'matches': insertion_order(matches),
            }
            store.save_bracket(tournament_id, bracket)

            tournament = store.load_tournament(tournament_id)
            tournament['status'] = 'in_progress'
            store.save_tournament(tournament)
    except Timeout:
        logger.warning(f'Draw generation for {tournament_id} timed out waiting for the lock')
        raise BracketAlreadyExists('A draw is already being generated for this tournament')

    logger.info(f'Draw generated for {tournament_id}: {len(matches)} matches ({seeding_mode} seeding)')
    return bracket


def _locate_match(store: TournamentStore, match_id: str):
    tournament_id = store.find_match_tournament(match_id)
    if tournament_id is None:
        raise MatchNotFound('Match not found')
    return tournament_id


def _find(matches, match_id):
    match = next((m for m in matches if m.id == match_id), None)
    if match is None:
        raise MatchNotFound('Match not found')
    return match


def report_result(store: TournamentStore, match_id: str, winner_id: str, score: Optional[str] = None):
    """Record a match winner and advance them into the next match."""
    if score and score.strip().lower() == BYE_SCORE.lower():
        raise InvalidResult('"Bye" is reserved for walkovers and cannot be used as a score')
    tournament_id = _locate_match(store, match_id)

    try:
        with store.lock(tournament_id):
            bracket = store.load_bracket(tournament_id)
            matches = bracket['matches']
            match = _find(matches, match_id)

            if match.is_bye:
                raise InvalidResult('A bye match cannot have a result')
            if match.player1_id is None or match.player2_id is None:
                raise InvalidResult('Both players must be known before a result can be recorded')
            if not match.has_player(winner_id):
                raise InvalidResult('Winner ID does not match any player in this match')

            if match.next_match_id:
                next_match = _find(matches, match.next_match_id)
                current = getattr(next_match, feeder_slot(match))
                if next_match.status == STATUS_COMPLETED and current != winner_id:
                    raise AdvancementConflict(
                        'The next match has already been played with a different player')

            match.winner_id = winner_id
            match.score = score
            match.status = STATUS_COMPLETED
            advance_winner(matches, match, winner_id)
            store.save_bracket(tournament_id, bracket)

            if match.next_match_id is None:
                tournament = store.load_tournament(tournament_id)
                tournament['status'] = 'completed'
                store.save_tournament(tournament)
    except Timeout:
        logger.warning(f'Result for match {match_id} timed out waiting for the {tournament_id} lock')
        raise AdvancementConflict('Another result for this tournament is being saved, try again')

    logger.info(f'Match {match_id} in {tournament_id} won by {winner_id}')
    return match


def schedule_match(store: TournamentStore, match_id: str, start_time: Optional[str] = None,
                   court: Optional[str] = None):
    """Set or clear the start time and court of a single match."""
    if start_time:
        try:
            datetime.fromisoformat(start_time)
        except ValueError:
            raise InvalidSchedule(f'Invalid start time: {start_time!r}')
    tournament_id = _locate_match(store, match_id)

    try:
        with store.lock(tournament_id):
            bracket = store.load_bracket(tournament_id)
            match = _find(bracket['matches'], match_id)
            match.start_time = start_time or None
            match.court = str(court) if court else None
            store.save_bracket(tournament_id, bracket)
    except Timeout:
        logger.warning(f'Scheduling match {match_id} timed out waiting for the {tournament_id} lock')
        raise ScheduleConflict('Another update for this tournament is being saved, try again')
    return match


def auto_schedule(store: TournamentStore, tournament_id: str, start_date: str, start_time: str,
                  courts: int, match_duration_minutes: int, daily_start_time: str,
                  daily_end_time: str) -> int:
    """Assign court/time slots to every pending match of the tournament's draw."""
    store.load_tournament(tournament_id)
    try:
        with store.lock(tournament_id):
            bracket = store.load_bracket(tournament_id)
            if bracket is None:
                raise MatchNotFound('No bracket found')
            assignments = auto_schedule_matches(bracket['matches'], start_date, start_time, courts,
                                                match_duration_minutes, daily_start_time, daily_end_time)
            by_id = {m.id: m for m in bracket['matches']}
            for assignment in assignments:
                match = by_id[assignment['id']]
                match.start_time = assignment['start_time']
                match.court = assignment['court']
            store.save_bracket(tournament_id, bracket)
    except Timeout:
        logger.warning(f'Auto-scheduling {tournament_id} timed out waiting for the lock')
        raise ScheduleConflict('Another update for this tournament is being saved, try again')

    logger.info(f'Auto-scheduled {len(assignments)} matches for {tournament_id}')
    return len(assignments)
