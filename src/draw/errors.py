"""
Errors raised by the draw services. Each carries the HTTP status the API answers with.
"""


class DrawError(Exception):
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class TournamentNotFound(DrawError):
    status_code = 404


class MatchNotFound(DrawError):
    status_code = 404


class InvalidSeedingMode(DrawError):
    pass


class InsufficientParticipants(DrawError):
    pass


class InvalidResult(DrawError):
    pass


class InvalidSchedule(DrawError):
    pass


class BracketAlreadyExists(DrawError):
    status_code = 409


class AdvancementConflict(DrawError):
    status_code = 409


class DuplicateRegistration(DrawError):
    status_code = 409


class ScheduleConflict(DrawError):
    status_code = 409
