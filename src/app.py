"""
Flask web application for Tournament Draw.
"""
import os
import logging
from flask import Flask, request, jsonify
from draw.elimination import get_bracket_display
from draw.errors import DrawError
from draw.models import SEEDING_RANDOM
from draw.services import generate_draw, report_result, schedule_match, auto_schedule
from draw.store import TournamentStore

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))
LOCK_TIMEOUT = float(os.environ.get('DRAW_LOCK_TIMEOUT', '10'))
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
app.logger.setLevel(LOG_LEVEL)

store = TournamentStore(DATA_DIR, lock_timeout=LOCK_TIMEOUT)


def _error_response(error: DrawError):
    return jsonify({'error': error.message}), error.status_code


def _get_json() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    """List all tournaments."""
    return jsonify(store.list_tournaments())


@app.route('/api/tournaments', methods=['POST'])
def api_create_tournament():
    """Create a new tournament."""
    data = _get_json()
    name = (data.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Tournament name is required'}), 400

    tournament = store.create_tournament(name, start_date=data.get('start_date'))
    return jsonify(tournament), 201


@app.route('/api/tournaments/<tournament_id>', methods=['GET'])
def api_get_tournament(tournament_id):
    """Get a single tournament."""
    try:
        return jsonify(store.load_tournament(tournament_id))
    except DrawError as e:
        return _error_response(e)


@app.route('/api/tournaments/<tournament_id>/players', methods=['GET'])
def api_list_players(tournament_id):
    """List registrations in draw order: seeded players first, then by registration time."""
    try:
        store.load_tournament(tournament_id)
    except DrawError as e:
        return _error_response(e)
    return jsonify(store.load_players(tournament_id))


@app.route('/api/tournaments/<tournament_id>/players', methods=['POST'])
def api_add_player(tournament_id):
    """Register a player for a tournament."""
    data = _get_json()
    player_id = data.get('player_id')
    if not player_id:
        return jsonify({'error': 'player_id is required'}), 400

    seed_number = data.get('seed_number')
    if seed_number is not None:
        try:
            seed_number = int(seed_number)
        except (TypeError, ValueError):
            return jsonify({'error': 'seed_number must be an integer'}), 400
        if seed_number < 1:
            return jsonify({'error': 'seed_number must be positive'}), 400

    try:
        registration = store.add_player(
            tournament_id,
            str(player_id),
            email=data.get('email'),
            username=data.get('username'),
            seed_number=seed_number
        )
    except DrawError as e:
        return _error_response(e)
    return jsonify(registration), 201


@app.route('/api/generate-draw', methods=['POST'])
def api_generate_draw():
    """Generate (or regenerate) the single elimination draw of a tournament."""
    data = _get_json()
    tournament_id = data.get('tournament_id')
    if not tournament_id:
        return jsonify({'error': 'Missing tournament_id'}), 400

    try:
        bracket = generate_draw(store, tournament_id, data.get('seeding_mode') or SEEDING_RANDOM)
    except DrawError as e:
        return _error_response(e)
    except Exception:
        app.logger.exception(f'Draw generation failed for {tournament_id}')
        return jsonify({'error': 'Internal Server Error'}), 500

    return jsonify({'success': True, 'bracket_id': bracket['id']})


@app.route('/api/tournaments/<tournament_id>/bracket', methods=['GET'])
def api_get_bracket(tournament_id):
    """Bracket grouped by round, with player names and champion."""
    try:
        store.load_tournament(tournament_id)
    except DrawError as e:
        return _error_response(e)

    bracket = store.load_bracket(tournament_id)
    if bracket is None:
        return jsonify({'error': 'No bracket found'}), 404

    participants = {p.id: p for p in store.load_participants(tournament_id)}
    display = get_bracket_display(bracket['matches'], participants)
    display['bracket_id'] = bracket['id']
    display['seeding_mode'] = bracket.get('seeding_mode')
    return jsonify(display)


@app.route('/api/matches/update', methods=['POST'])
def api_update_match():
    """Record a match result and advance the winner."""
    data = _get_json()
    match_id = data.get('match_id')
    winner_id = data.get('winner_id')
    if not match_id or not winner_id:
        return jsonify({'error': 'Missing match_id or winner_id'}), 400

    try:
        match = report_result(store, match_id, winner_id, data.get('score_text'))
    except DrawError as e:
        return _error_response(e)
    except Exception:
        app.logger.exception(f'Saving result for match {match_id} failed')
        return jsonify({'error': 'Internal Server Error'}), 500

    return jsonify({'success': True, 'match': match.to_dict()})


@app.route('/api/matches/schedule', methods=['POST'])
def api_schedule_match():
    """Set start time and court of a match by hand."""
    data = _get_json()
    match_id = data.get('match_id')
    if not match_id:
        return jsonify({'error': 'Missing match_id'}), 400

    try:
        match = schedule_match(store, match_id, data.get('start_time'), data.get('court'))
    except DrawError as e:
        return _error_response(e)
    except Exception:
        app.logger.exception(f'Scheduling match {match_id} failed')
        return jsonify({'error': 'Internal Server Error'}), 500

    return jsonify({'success': True, 'match': match.to_dict()})


@app.route('/api/tournaments/<tournament_id>/auto-schedule', methods=['POST'])
def api_auto_schedule(tournament_id):
    """Pack all pending matches into court/time slots."""
    data = _get_json()
    required = ['startDate', 'startTime', 'courts', 'matchDurationMinutes', 'dailyStartTime', 'dailyEndTime']
    missing = [key for key in required if data.get(key) in (None, '')]
    if missing:
        return jsonify({'error': f'Missing {", ".join(missing)}'}), 400

    try:
        courts = int(data['courts'])
        duration = int(data['matchDurationMinutes'])
    except (TypeError, ValueError):
        return jsonify({'error': 'courts and matchDurationMinutes must be integers'}), 400

    try:
        count = auto_schedule(
            store,
            tournament_id,
            start_date=data['startDate'],
            start_time=data['startTime'],
            courts=courts,
            match_duration_minutes=duration,
            daily_start_time=data['dailyStartTime'],
            daily_end_time=data['dailyEndTime']
        )
    except DrawError as e:
        return _error_response(e)
    except Exception:
        app.logger.exception(f'Auto-scheduling {tournament_id} failed')
        return jsonify({'error': 'Internal Server Error'}), 500

    if count == 0:
        return jsonify({'success': True, 'count': 0, 'message': 'No matches to schedule'})
    return jsonify({'success': True, 'count': count})


if __name__ == '__main__':
    app.run(debug=True, port=5000)
