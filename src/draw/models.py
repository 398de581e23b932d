STATUS_SCHEDULED = 'scheduled'
STATUS_COMPLETED = 'completed'
STATUS_BYE = 'bye'

SEEDING_RANDOM = 'random'
SEEDING_STANDARD = 'standard'
SEEDING_MODES = (SEEDING_RANDOM, SEEDING_STANDARD)

BYE_SCORE = 'Bye'


class Participant:
    def __init__(self, id, email=None, username=None):
        self.id = id
        self.email = email
        self.username = username

    @property
    def display_name(self):
        return self.username or self.email or str(self.id)

    def __repr__(self):
        return f"Participant(id={self.id}, username={self.username})"


class Match:
    FIELDS = (
        'id', 'round_number', 'match_number_in_round', 'player1_id', 'player2_id',
        'status', 'winner_id', 'score', 'next_match_id', 'start_time', 'court',
    )

    def __init__(self, id, round_number, match_number_in_round, player1_id=None, player2_id=None,
                 status=STATUS_SCHEDULED, winner_id=None, score=None, next_match_id=None,
                 start_time=None, court=None):
        self.id = id
        self.round_number = round_number
        self.match_number_in_round = match_number_in_round
        self.player1_id = player1_id
        self.player2_id = player2_id
        self.status = status
        self.winner_id = winner_id
        self.score = score
        self.next_match_id = next_match_id
        # Set by the scheduling assistant, never by the bracket builder
        self.start_time = start_time
        self.court = court

    @property
    def is_bye(self):
        # Walkovers from the builder always have an empty slot
        return self.status == STATUS_BYE or (
            self.score == BYE_SCORE and (self.player1_id is None or self.player2_id is None))

    @property
    def is_decided(self):
        return self.status == STATUS_COMPLETED and self.winner_id is not None

    def has_player(self, player_id):
        return player_id is not None and player_id in (self.player1_id, self.player2_id)

    def to_dict(self):
        return {field: getattr(self, field) for field in self.FIELDS}

    @classmethod
    def from_dict(cls, data):
        return cls(**{field: data.get(field) for field in cls.FIELDS if field in data})

    def __repr__(self):
        return (f"Match(round={self.round_number}, number={self.match_number_in_round}, "
                f"players=({self.player1_id}, {self.player2_id}), status={self.status})")
