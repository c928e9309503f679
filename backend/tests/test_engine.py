from dataclasses import replace

import pytest

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
from volleyscore.services.scoring.engine import (
    COMPLETED,
    IN_PROGRESS,
    SCHEDULED,
    SCORING_RULES,
    MatchScore,
    PointEvent,
    ScoringState,
    SideCount,
    add_point,
    end_match,
    points_to_win,
    set_winner,
    start_match,
    undo_point,
)


def started(scoring_format='standard'):
    return start_match(ScoringState(status=SCHEDULED, scoring_format=scoring_format))


def play(state, sides):
    for side in sides:
        state = add_point(state, side)
    return state


def win_set(state, side):
    """Score straight points for ``side`` until the current set closes."""
    current = state.score.current_set
    while state.status == IN_PROGRESS and state.score.current_set == current:
        state = add_point(state, side)
    return state


def assert_invariants(state):
    score = state.score
    assert score.sets_won.home + score.sets_won.away == len(score.set_history)
    set_numbers = [p.set_number for p in state.point_history]
    assert set_numbers == sorted(set_numbers)
    assert score.home >= 0 and score.away >= 0


# ---------- RULES ----------

@pytest.mark.parametrize("scoring_format, current_set, expected", [
    ('standard', 1, 25),
    ('standard', 4, 25),
    ('standard', 5, 15),
    ('avp_beach', 1, 21),
    ('avp_beach', 2, 21),
    ('avp_beach', 3, 15),
])
def test_points_to_win(scoring_format, current_set, expected):
    assert points_to_win(current_set, SCORING_RULES[scoring_format]) == expected


@pytest.mark.parametrize("home, away, expected", [
    (25, 23, 'home'),
    (25, 24, None),
    (24, 22, None),
    (30, 28, 'home'),
    (23, 25, 'away'),
    (0, 0, None),
])
def test_set_winner(home, away, expected):
    assert set_winner(home, away, 25) == expected


# ---------- START ----------

def test_start_initializes_score():
    state = started()
    assert state.status == IN_PROGRESS
    assert state.score == MatchScore(current_set=1, home=0, away=0, sets_won=SideCount(0, 0), set_history=())
    assert state.point_history == ()
    assert state.can_undo is False


def test_start_twice_is_rejected():
    with pytest.raises(MatchAlreadyStarted, match="Match has already started or completed"):
        start_match(started())


def test_start_without_scoring_format():
    with pytest.raises(ScoringFormatMissing, match="Match does not have a scoring format set"):
        start_match(ScoringState(status=SCHEDULED))


# ---------- ADD POINT ----------

def test_add_point_logs_score_before_point():
    state = play(started(), ['home', 'away', 'home'])
    assert (state.score.home, state.score.away) == (2, 1)
    assert state.point_history[-1] == PointEvent(side='home', set_number=1, home_score=1, away_score=1)
    assert len(state.point_history) == 3


def test_standard_set_needs_two_point_lead():
    state = replace(started(), score=MatchScore(home=24, away=24))

    state = add_point(state, 'home')
    assert (state.score.current_set, state.score.home, state.score.away) == (1, 25, 24)
    assert state.score.set_history == ()

    state = add_point(state, 'home')
    assert state.score.set_history == (SideCount(26, 24),)
    assert state.score.sets_won == SideCount(1, 0)
    assert (state.score.current_set, state.score.home, state.score.away) == (2, 0, 0)


def test_avp_tiebreaker_set_played_to_fifteen():
    score = MatchScore(current_set=3, home=14, away=13, sets_won=SideCount(1, 1),
                       set_history=(SideCount(21, 15), SideCount(19, 21)))
    state = replace(started('avp_beach'), score=score)

    state = add_point(state, 'home')

    assert state.status == COMPLETED
    assert state.score.set_history[-1] == SideCount(15, 13)
    assert state.score.sets_won == SideCount(2, 1)


def test_avp_tiebreaker_needs_two_point_lead():
    history = (SideCount(21, 15), SideCount(19, 21))
    score = MatchScore(current_set=3, home=14, away=14, sets_won=SideCount(1, 1), set_history=history)
    state = replace(started('avp_beach'), score=score)

    state = add_point(state, 'home')

    assert state.status == IN_PROGRESS
    assert state.score.current_set == 3
    assert (state.score.home, state.score.away) == (15, 14)
    assert state.score.set_history == history
    assert state.score.sets_won == SideCount(1, 1)

    state = add_point(state, 'home')

    assert state.status == COMPLETED
    assert state.score.set_history[-1] == SideCount(16, 14)


def test_avp_match_completes_without_opening_new_set():
    state = win_set(started('avp_beach'), 'home')
    assert state.score.sets_won == SideCount(1, 0)
    assert state.score.current_set == 2

    state = win_set(state, 'home')

    assert state.status == COMPLETED
    assert state.score.current_set == 2
    assert (state.score.home, state.score.away) == (21, 0)
    assert state.score.sets_won == SideCount(2, 0)
    assert len(state.point_history) == 42
    assert_invariants(state)


@pytest.mark.parametrize("sequence, expected_sets", [
    (['home', 'home', 'home'], SideCount(3, 0)),
    (['home', 'away', 'home', 'away', 'away'], SideCount(2, 3)),
])
def test_standard_match_outcomes(sequence, expected_sets):
    state = started('standard')
    for side in sequence:
        state = win_set(state, side)
    assert state.status == COMPLETED
    assert state.score.sets_won == expected_sets
    assert state.score.current_set == len(sequence)
    # the fifth set is the tiebreaker
    if len(sequence) == 5:
        assert state.score.set_history[-1] == SideCount(0, 15)
    assert_invariants(state)


def test_add_point_rejected_when_not_in_progress():
    with pytest.raises(MatchNotInProgress):
        add_point(ScoringState(status=SCHEDULED, scoring_format='standard'), 'home')
    finished = win_set(win_set(started('avp_beach'), 'away'), 'away')
    with pytest.raises(MatchNotInProgress):
        add_point(finished, 'home')


def test_add_point_without_score():
    with pytest.raises(ScoreNotInitialized, match="Match score not initialized"):
        add_point(ScoringState(status=IN_PROGRESS, scoring_format='standard'), 'home')


def test_add_point_invalid_side():
    with pytest.raises(InvalidRequest):
        add_point(started(), 'left')


# ---------- UNDO ----------

def test_undo_within_set_round_trip():
    before = play(started(), ['home', 'away', 'away'])
    after = undo_point(add_point(before, 'home'))
    assert after == before


def test_undo_across_set_boundary_round_trip():
    before = replace(started('avp_beach'), score=MatchScore(home=20, away=19))
    closed = add_point(before, 'home')
    assert closed.score.current_set == 2

    assert undo_point(closed) == before


def test_cross_set_undo_restores_previous_set():
    state = ScoringState(
        status=IN_PROGRESS,
        scoring_format='avp_beach',
        score=MatchScore(current_set=2, home=0, away=0, sets_won=SideCount(1, 0),
                         set_history=(SideCount(21, 19),)),
        point_history=(PointEvent(side='home', set_number=1, home_score=20, away_score=19),),
    )

    state = undo_point(state)

    assert state.score == MatchScore(current_set=1, home=20, away=19, sets_won=SideCount(0, 0), set_history=())
    assert state.point_history == ()


def test_undo_walks_back_to_start():
    initial = started('avp_beach')
    state = win_set(initial, 'away')
    state = play(state, ['home', 'away', 'home'])
    assert state.score.current_set == 2

    while state.can_undo:
        count = len(state.point_history)
        state = undo_point(state)
        assert len(state.point_history) == count - 1
        assert_invariants(state)

    assert state == initial


def test_undo_with_no_points():
    with pytest.raises(NoPointsToUndo, match="No points to undo"):
        undo_point(started())


def test_undo_rejected_when_not_in_progress():
    finished = win_set(win_set(started('avp_beach'), 'home'), 'home')
    with pytest.raises(MatchNotInProgress):
        undo_point(finished)


def test_undo_with_inconsistent_set_history():
    state = ScoringState(
        status=IN_PROGRESS,
        scoring_format='standard',
        score=MatchScore(current_set=2),
        point_history=(PointEvent(side='home', set_number=1, home_score=24, away_score=20),),
    )
    with pytest.raises(InconsistentSetHistory, match="Cannot undo: set history inconsistent"):
        undo_point(state)


# ---------- END ----------

def test_end_match_keeps_score():
    state = play(started(), ['home', 'home'])
    ended = end_match(state, 'home')
    assert ended.status == COMPLETED
    assert ended.score == state.score
    assert ended.point_history == state.point_history


def test_end_scheduled_match_gets_empty_score():
    ended = end_match(ScoringState(status=SCHEDULED, scoring_format='standard'))
    assert ended.status == COMPLETED
    assert ended.score == MatchScore()


def test_end_completed_match_rejected():
    with pytest.raises(MatchAlreadyCompleted, match="Match is already completed"):
        end_match(end_match(started()))


def test_end_match_invalid_winner():
    with pytest.raises(InvalidRequest):
        end_match(started(), 'nobody')


# ---------- SERIALIZATION ----------

def test_score_dict_shape():
    state = win_set(started('avp_beach'), 'home')
    state = add_point(state, 'away')
    assert state.score.to_dict() == {
        'current_set': 2,
        'home': 0,
        'away': 1,
        'sets_won': {'home': 1, 'away': 0},
        'set_history': [{'home': 21, 'away': 0}],
    }
    assert MatchScore.from_dict(state.score.to_dict()) == state.score
