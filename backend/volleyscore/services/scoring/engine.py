"""Live volleyball scoring rules.

Pure transitions over a match's status, score and point history. Nothing in
this module touches the database: callers build a ``ScoringState`` from the
stored match, apply one operation and persist the state that comes back.
Every operation either returns a new state or raises a ``VolleyScoreError``
without side effects.

The point history doubles as the undo log. Each event records the side that
scored and the score *before* the point, so popping the last event restores
the previous score exactly, including across a set boundary.
"""
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from volleyscore.exceptions import (
    InconsistentSetHistory,
    InvalidRequest,
    MatchAlreadyCompleted,
    MatchAlreadyStarted,
    MatchNotInProgress,
    NoPointsToUndo,
    ScoreNotInitialized,
    ScoringFormatMissing,
)

SCHEDULED = 'scheduled'
IN_PROGRESS = 'in_progress'
COMPLETED = 'completed'
MATCH_STATUSES = (SCHEDULED, IN_PROGRESS, COMPLETED)

HOME = 'home'
AWAY = 'away'
SIDES = (HOME, AWAY)


@dataclass(frozen=True)
class RuleSet:
    sets_to_win: int
    points_per_set: int
    tiebreaker_points: int
    max_sets: int


SCORING_RULES = {
    'standard': RuleSet(sets_to_win=3, points_per_set=25, tiebreaker_points=15, max_sets=5),
    'avp_beach': RuleSet(sets_to_win=2, points_per_set=21, tiebreaker_points=15, max_sets=3),
}
SCORING_FORMATS = tuple(SCORING_RULES)


def get_rules(scoring_format: str) -> RuleSet:
    try:
        return SCORING_RULES[scoring_format]
    except KeyError:
        raise InvalidRequest(f"Unknown scoring format: {scoring_format}") from None


def points_to_win(current_set: int, rules: RuleSet) -> int:
    """Target for the given set; the last possible set is the tiebreaker."""
    if current_set == rules.max_sets:
        return rules.tiebreaker_points
    return rules.points_per_set


def set_winner(home: int, away: int, target: int) -> Optional[str]:
    """Side that has reached ``target`` with a two point lead, if any."""
    if home >= target and home - away >= 2:
        return HOME
    if away >= target and away - home >= 2:
        return AWAY
    return None


def validate_side(side) -> str:
    if side not in SIDES:
        raise InvalidRequest("side must be 'home' or 'away'")
    return side


@dataclass(frozen=True)
class SideCount:
    """A home/away pair: sets won, or the final score of one set."""
    home: int = 0
    away: int = 0

    def get(self, side: str) -> int:
        return getattr(self, side)

    def add(self, side: str, amount: int = 1) -> 'SideCount':
        return replace(self, **{side: self.get(side) + amount})

    @property
    def leader(self) -> str:
        # Ties count for away; a recorded set can never be tied.
        return HOME if self.home > self.away else AWAY

    def to_dict(self) -> dict:
        return {'home': self.home, 'away': self.away}

    @classmethod
    def from_dict(cls, data: dict) -> 'SideCount':
        return cls(home=int(data['home']), away=int(data['away']))


@dataclass(frozen=True)
class PointEvent:
    side: str
    set_number: int
    home_score: int
    away_score: int

    def to_dict(self) -> dict:
        return {
            'side': self.side,
            'set_number': self.set_number,
            'home_score': self.home_score,
            'away_score': self.away_score,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PointEvent':
        return cls(
            side=data['side'],
            set_number=int(data['set_number']),
            home_score=int(data['home_score']),
            away_score=int(data['away_score']),
        )


@dataclass(frozen=True)
class MatchScore:
    current_set: int = 1
    home: int = 0
    away: int = 0
    sets_won: SideCount = field(default_factory=SideCount)
    set_history: Tuple[SideCount, ...] = ()

    def to_dict(self) -> dict:
        return {
            'current_set': self.current_set,
            'home': self.home,
            'away': self.away,
            'sets_won': self.sets_won.to_dict(),
            'set_history': [s.to_dict() for s in self.set_history],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'MatchScore':
        return cls(
            current_set=int(data['current_set']),
            home=int(data['home']),
            away=int(data['away']),
            sets_won=SideCount.from_dict(data['sets_won']),
            set_history=tuple(SideCount.from_dict(s) for s in data.get('set_history', [])),
        )


@dataclass(frozen=True)
class ScoringState:
    """The match fields owned by the scoring engine."""
    status: str = SCHEDULED
    scoring_format: Optional[str] = None
    score: Optional[MatchScore] = None
    point_history: Tuple[PointEvent, ...] = ()

    @property
    def can_undo(self) -> bool:
        return len(self.point_history) > 0


def start_match(state: ScoringState) -> ScoringState:
    if state.status != SCHEDULED:
        raise MatchAlreadyStarted()
    if not state.scoring_format:
        raise ScoringFormatMissing()
    get_rules(state.scoring_format)
    return replace(state, status=IN_PROGRESS, score=MatchScore(), point_history=())


def add_point(state: ScoringState, side: str) -> ScoringState:
    """Award one point to ``side``, closing the set or the match when won."""
    validate_side(side)
    if state.status != IN_PROGRESS:
        raise MatchNotInProgress()
    if state.score is None or not state.scoring_format:
        raise ScoreNotInitialized()

    rules = get_rules(state.scoring_format)
    score = state.score
    point_history = state.point_history + (
        PointEvent(side=side, set_number=score.current_set, home_score=score.home, away_score=score.away),
    )

    home = score.home + (1 if side == HOME else 0)
    away = score.away + (1 if side == AWAY else 0)
    winner = set_winner(home, away, points_to_win(score.current_set, rules))

    if winner is None:
        return replace(state, score=replace(score, home=home, away=away), point_history=point_history)

    sets_won = score.sets_won.add(winner)
    set_history = score.set_history + (SideCount(home=home, away=away),)

    if sets_won.get(winner) >= rules.sets_to_win:
        # Match over: the deciding set keeps its final score, no new set opens.
        final = replace(score, home=home, away=away, sets_won=sets_won, set_history=set_history)
        return replace(state, status=COMPLETED, score=final, point_history=point_history)

    next_set = MatchScore(
        current_set=score.current_set + 1,
        home=0,
        away=0,
        sets_won=sets_won,
        set_history=set_history,
    )
    return replace(state, score=next_set, point_history=point_history)


def undo_point(state: ScoringState) -> ScoringState:
    """Remove the last point, reopening the previous set if that point closed it."""
    if state.status != IN_PROGRESS:
        raise MatchNotInProgress()
    if state.score is None or not state.point_history:
        raise NoPointsToUndo()

    last_point = state.point_history[-1]
    point_history = state.point_history[:-1]
    score = state.score

    if last_point.set_number < score.current_set:
        if not score.set_history:
            raise InconsistentSetHistory()
        closed_set = score.set_history[-1]
        restored = MatchScore(
            current_set=last_point.set_number,
            home=last_point.home_score,
            away=last_point.away_score,
            sets_won=score.sets_won.add(closed_set.leader, -1),
            set_history=score.set_history[:-1],
        )
    else:
        restored = replace(score, home=last_point.home_score, away=last_point.away_score)

    return replace(state, score=restored, point_history=point_history)


def end_match(state: ScoringState, winner: Optional[str] = None) -> ScoringState:
    """Close the match early. ``winner`` is checked but not recorded."""
    if winner is not None:
        validate_side(winner)
    if state.status == COMPLETED:
        raise MatchAlreadyCompleted()
    # A match ended before it started still gets a score so completed
    # matches always carry one.
    score = state.score if state.score is not None else MatchScore()
    return replace(state, status=COMPLETED, score=score)
