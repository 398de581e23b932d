import datetime
from typing import List

from .errors import InvalidSchedule
from .models import Match, STATUS_COMPLETED


def _parse_time(time_str):
    try:
        return datetime.datetime.strptime(time_str, '%H:%M').time()
    except (TypeError, ValueError):
        raise InvalidSchedule(f'Invalid time: {time_str!r} (expected HH:MM)')


def _parse_date(date_str):
    try:
        return datetime.date.fromisoformat(date_str)
    except (TypeError, ValueError):
        raise InvalidSchedule(f'Invalid date: {date_str!r} (expected YYYY-MM-DD)')


def _minutes(time_obj):
    return time_obj.hour * 60 + time_obj.minute


def schedulable_matches(matches: List[Match]) -> List[Match]:
    """Matches still to be played, in round then bracket order. Byes and walkovers never get a slot."""
    pending = [m for m in matches if not m.is_bye and m.status != STATUS_COMPLETED]
    return sorted(pending, key=lambda m: (m.round_number, m.match_number_in_round))


def auto_schedule_matches(matches: List[Match], start_date: str, start_time: str, courts: int,
                          match_duration_minutes: int, daily_start_time: str,
                          daily_end_time: str) -> List[dict]:
    """
    Pack matches into court/time slots.

    All courts are filled at the current time before time advances by one
    match duration. A match that would run past the daily end time moves to
    the next day at the daily start time, back on court 1.
    Returns a list of {'id', 'start_time', 'court'} assignments.
    """
    if not isinstance(courts, int) or courts < 1:
        raise InvalidSchedule('At least one court is required')
    if not isinstance(match_duration_minutes, int) or match_duration_minutes < 1:
        raise InvalidSchedule('Match duration must be a positive number of minutes')

    current_date = _parse_date(start_date)
    current_minutes = _minutes(_parse_time(start_time))
    day_start = _minutes(_parse_time(daily_start_time))
    day_end = _minutes(_parse_time(daily_end_time))
    if day_start + match_duration_minutes > day_end:
        raise InvalidSchedule('No match fits between the daily start and end times')

    if current_minutes < day_start:
        current_minutes = day_start

    assignments = []
    current_court = 1
    for match in schedulable_matches(matches):
        if current_minutes + match_duration_minutes > day_end:
            current_date += datetime.timedelta(days=1)
            current_minutes = day_start
            current_court = 1

        start = datetime.datetime.combine(current_date, datetime.time()) + \
            datetime.timedelta(minutes=current_minutes)
        assignments.append({
            'id': match.id,
            'start_time': start.isoformat(timespec='minutes'),
            'court': str(current_court)
        })

        current_court += 1
        if current_court > courts:
            current_court = 1
            current_minutes += match_duration_minutes

    return assignments
