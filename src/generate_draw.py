import argparse
import random
import sys
import yaml
from draw.elimination import generate_single_elimination_matches, get_bracket_display
from draw.models import Participant, SEEDING_MODES, SEEDING_RANDOM


def load_players(file_path):
    """Load players from a YAML list of names or {id, username, email} mappings, in seed order."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or []
    if isinstance(data, dict):
        data = data.get('players', [])

    players = []
    for entry in data:
        if isinstance(entry, dict):
            player_id = entry.get('id') or entry.get('player_id')
            players.append(Participant(str(player_id), email=entry.get('email'), username=entry.get('username')))
        else:
            players.append(Participant(str(entry), username=str(entry)))
    return players


def format_draw(matches, participants):
    """Render the draw round by round."""
    display = get_bracket_display(matches, {p.id: p for p in participants})
    lines = []
    for round_data in display['rounds']:
        if lines:
            lines.append('')
        lines.append(f"# {round_data['name']}")
        for match in round_data['matches']:
            player1 = match['player1_name'] or 'TBD'
            player2 = match['player2_name'] or ('BYE' if match['round_number'] == 1 else 'TBD')
            line = f"M{match['match_number_in_round']}: {player1} vs {player2}"
            if match['score'] == 'Bye':
                line += f" -> {match['winner_name']} advances"
            lines.append(line)
    return '\n'.join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Generate a single elimination draw.')
    parser.add_argument('players_file', help='YAML file listing players (seed order for standard seeding)')
    parser.add_argument('--seeding', choices=SEEDING_MODES, default=SEEDING_RANDOM)
    parser.add_argument('--seed', type=int, default=None, help='Random seed for reproducible random draws')
    args = parser.parse_args(argv)

    try:
        players = load_players(args.players_file)
    except (OSError, yaml.YAMLError) as e:
        print(f"Error: Could not read {args.players_file}: {e}", file=sys.stderr)
        return 1

    matches = generate_single_elimination_matches(players, args.seeding, random.Random(args.seed))
    if not matches:
        print("Error: At least 2 players are needed to generate a draw.", file=sys.stderr)
        return 1

    print(format_draw(matches, players))
    return 0


if __name__ == '__main__':
    sys.exit(main())
