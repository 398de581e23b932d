"""
Single elimination draw generation and winner advancement.
"""
import math
import random
import uuid
from typing import List, Dict, Optional, Sequence

from .models import (
    Match,
    Participant,
    STATUS_BYE,
    STATUS_COMPLETED,
    SEEDING_RANDOM,
    SEEDING_STANDARD,
    BYE_SCORE,
)


def get_round_name(teams_in_round: int) -> str:
    """Get the name of a round based on number of players still in it."""
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {teams_in_round}"


def calculate_bracket_size(num_players: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_players <= 0:
        return 0
    size = 2
    while size < num_players:
        size *= 2
    return size


def calculate_byes(num_players: int) -> int:
    """Calculate number of byes needed."""
    return calculate_bracket_size(num_players) - num_players


def _generate_bracket_order(bracket_size: int) -> List[int]:
    """
    Generate the standard tournament bracket order (fold seeding).
    This ensures that if all higher seeds win, they meet in the proper rounds.

    For 8 players: [1, 8, 4, 5, 2, 7, 3, 6]
    This gives matchups: 1v8, 4v5, 2v7, 3v6
    Winners: 1v4 side, 2v3 side
    Final: 1v2 (if chalk)
    """
    if bracket_size <= 2:
        return [1, 2]

    half_size = bracket_size // 2
    upper_half = _generate_bracket_order(half_size)

    # Pair each seed with its complement in the doubled bracket
    result = []
    for seed in upper_half:
        result.extend([seed, bracket_size + 1 - seed])

    return result


def order_participants(participants: Sequence[Participant], seeding_mode: str = SEEDING_RANDOM,
                       rng: Optional[random.Random] = None) -> List[Optional[Participant]]:
    """
    Order participants into bracket slots.

    random: uniform shuffle, no empty slots.
    standard: participants are taken as already ranked (index 0 is seed 1) and
    placed by fold seeding; seeds beyond the participant count become None.
    """
    if seeding_mode == SEEDING_STANDARD:
        total_slots = calculate_bracket_size(len(participants))
        slots = []
        for seed_rank in _generate_bracket_order(total_slots):
            if seed_rank <= len(participants):
                slots.append(participants[seed_rank - 1])
            else:
                slots.append(None)
        return slots

    shuffled = list(participants)
    (rng or random).shuffle(shuffled)
    return shuffled


def _create_match_tree(size: int) -> Dict[tuple, Match]:
    """Create empty matches for every round, keyed by (round, number), with forward links."""
    total_rounds = int(math.log2(size))
    match_map = {}
    matches_in_round = size // 2
    for round_number in range(1, total_rounds + 1):
        for match_number in range(1, matches_in_round + 1):
            match_map[(round_number, match_number)] = Match(
                id=str(uuid.uuid4()),
                round_number=round_number,
                match_number_in_round=match_number,
            )
        matches_in_round //= 2

    # Matches 2k-1 and 2k feed match k of the next round
    for (round_number, match_number), match in match_map.items():
        if round_number < total_rounds:
            next_match = match_map[(round_number + 1, (match_number + 1) // 2)]
            match.next_match_id = next_match.id

    return match_map


def advance_winner(matches: List[Match], match: Match, winner_id: str) -> Optional[Match]:
    """
    Place the winner of a decided match into its slot of the next match.

    Odd match numbers feed player1 of the next match, even numbers feed player2.
    Returns the updated next match, or None when the match is the final.
    """
    if not match.next_match_id:
        return None
    next_match = next((m for m in matches if m.id == match.next_match_id), None)
    if next_match is None:
        return None
    if match.match_number_in_round % 2 != 0:
        next_match.player1_id = winner_id
    else:
        next_match.player2_id = winner_id
    return next_match


def feeder_slot(match: Match) -> str:
    """Name of the next-match slot this match's winner goes into."""
    return 'player1_id' if match.match_number_in_round % 2 != 0 else 'player2_id'


def _resolve_bye(matches: List[Match], match: Match, winner_id: str):
    match.status = STATUS_COMPLETED
    match.winner_id = winner_id
    match.score = BYE_SCORE
    advance_winner(matches, match, winner_id)


def generate_single_elimination_matches(participants: Sequence[Participant],
                                        seeding_mode: str = SEEDING_RANDOM,
                                        rng: Optional[random.Random] = None) -> List[Match]:
    """
    Build the complete match tree for a single elimination draw.

    Returns matches ordered by round then match number. Round 1 byes are
    resolved immediately and their winners already sit in round 2. Fewer than
    two participants produce an empty list.
    """
    if len(participants) < 2:
        return []

    slots = order_participants(participants, seeding_mode, rng)
    if seeding_mode == SEEDING_STANDARD:
        size = len(slots)
    else:
        size = calculate_bracket_size(len(slots))

    match_map = _create_match_tree(size)
    matches = list(match_map.values())
    first_round_count = size // 2

    if seeding_mode == SEEDING_STANDARD:
        for i in range(first_round_count):
            match = match_map[(1, i + 1)]
            p1 = slots[i * 2]
            p2 = slots[i * 2 + 1]
            match.player1_id = p1.id if p1 else None
            match.player2_id = p2.id if p2 else None

            if p1 and not p2:
                _resolve_bye(matches, match, p1.id)
            elif p2 and not p1:
                _resolve_bye(matches, match, p2.id)
            elif not p1 and not p2:
                match.status = STATUS_BYE
    else:
        # Byes are front-loaded into the first round-1 matches
        byes_count = size - len(slots)
        remaining = iter(slots)
        for i in range(first_round_count):
            match = match_map[(1, i + 1)]
            if i < byes_count:
                p1 = next(remaining, None)
                match.player1_id = p1.id if p1 else None
                if p1:
                    _resolve_bye(matches, match, p1.id)
            else:
                p1 = next(remaining, None)
                p2 = next(remaining, None)
                match.player1_id = p1.id if p1 else None
                match.player2_id = p2.id if p2 else None

    return matches


def insertion_order(matches: List[Match]) -> List[Match]:
    """Deepest rounds first, so every next_match_id points at an already written match."""
    return sorted(matches, key=lambda m: (-m.round_number, m.match_number_in_round))


def get_bracket_display(matches: List[Match], participants: Optional[Dict[str, Participant]] = None) -> Dict:
    """
    Get bracket data formatted for UI display.

    Rounds are keyed by round number with a human readable name, matches in
    bracket order. Player names resolve through `participants` when given.
    """
    participants = participants or {}

    def _name(player_id):
        if player_id is None:
            return None
        participant = participants.get(player_id)
        return participant.display_name if participant else player_id

    if not matches:
        return {
            'rounds': [],
            'bracket_size': 0,
            'total_rounds': 0,
            'byes': 0,
            'champion': None
        }

    total_rounds = max(m.round_number for m in matches)
    bracket_size = 2 ** total_rounds
    rounds = []
    for round_number in range(1, total_rounds + 1):
        round_matches = sorted(
            (m for m in matches if m.round_number == round_number),
            key=lambda m: m.match_number_in_round
        )
        rounds.append({
            'round_number': round_number,
            'name': get_round_name(bracket_size // 2 ** (round_number - 1)),
            'matches': [
                dict(m.to_dict(),
                     player1_name=_name(m.player1_id),
                     player2_name=_name(m.player2_id),
                     winner_name=_name(m.winner_id))
                for m in round_matches
            ]
        })

    first_round_byes = sum(1 for m in matches if m.round_number == 1 and m.is_bye)
    final = next(m for m in matches if m.round_number == total_rounds)

    return {
        'rounds': rounds,
        'bracket_size': bracket_size,
        'total_rounds': total_rounds,
        'byes': first_round_byes,
        'champion': _name(final.winner_id) if final.is_decided else None
    }
