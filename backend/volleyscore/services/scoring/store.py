from typing import Optional

from volleyscore import db
from volleyscore.models import Match
from .engine import ScoringState


class MatchStore:
    """Match persistence for scoring operations.

    ``get`` takes a row lock (``SELECT ... FOR UPDATE``) so two operations on
    the same match serialize; SQLite ignores the lock. Nothing is written
    until the caller commits the session.
    """

    def get(self, match_id: int) -> Optional[Match]:
        return Match.query.filter_by(id=match_id).with_for_update().first()

    def patch(self, match: Match, state: ScoringState) -> None:
        match.apply_scoring_state(state)
        db.session.add(match)


match_store = MatchStore()
