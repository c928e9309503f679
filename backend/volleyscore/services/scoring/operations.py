from functools import wraps
from typing import Iterable, Optional

from flask import current_app

from volleyscore import db, socketio
from volleyscore.access import MANAGER_ROLES, SCORING_ROLES, require_role
from volleyscore.exceptions import MatchNotFound, VolleyScoreError
from volleyscore.models import Match
from . import engine
from .store import match_store


def match_room(match_id: int) -> str:
    return f"match:{match_id}"


def _describe(view: dict) -> str:
    score = view.get('score')
    if not score:
        return f"status={view['status']}"
    sets_won = score['sets_won']
    return (
        f"status={view['status']} set={score['current_set']} "
        f"score={score['home']}-{score['away']} sets={sets_won['home']}-{sets_won['away']}"
    )


def transactional(allowed_roles: Iterable[str]):
    """Run an engine transition against one stored match as a single transaction.

    The decorated function receives the match's ``ScoringState`` plus any
    extra arguments and returns the next state. The wrapper takes the match
    id instead: it loads the match under a row lock, checks the caller's
    role, persists the new state and commits. Any exception rolls back and
    propagates, so a rejected call writes nothing. On success the score view
    is broadcast to the match room and returned.
    """
    def decorator(transition):
        @wraps(transition)
        def wrapper(match_id: int, *args, **kwargs) -> dict:
            action = transition.__name__
            try:
                match = match_store.get(match_id)
                if match is None:
                    raise MatchNotFound(match_id)
                require_role(match.organization_id, allowed_roles)
                state = transition(match.scoring_state(), *args, **kwargs)
                match_store.patch(match, state)
                db.session.commit()
            except VolleyScoreError as exc:
                db.session.rollback()
                if exc.status_code >= 500:
                    current_app.logger.error(f"[{action}] match={match_id} corrupt state: {exc}")
                else:
                    current_app.logger.info(f"[{action}] match={match_id} rejected: {exc}")
                raise
            except Exception as exc:
                db.session.rollback()
                current_app.logger.error(f"[{action}] match={match_id} failed: {exc}", exc_info=True)
                raise

            view = match.score_view()
            current_app.logger.info(f"[{action}] match={match_id} {_describe(view)}")
            socketio.emit('score_update', view, to=match_room(match_id), namespace='/ws')
            return view
        return wrapper
    return decorator


@transactional(SCORING_ROLES)
def start_match(state):
    return engine.start_match(state)


@transactional(SCORING_ROLES)
def add_point(state, side):
    return engine.add_point(state, side)


@transactional(SCORING_ROLES)
def undo_point(state):
    return engine.undo_point(state)


@transactional(MANAGER_ROLES)
def end_match(state, winner=None):
    if winner is not None:
        current_app.logger.info(f"[end_match] requested winner={winner} (not recorded)")
    return engine.end_match(state, winner)


def get_match_score(match_id: int) -> Optional[dict]:
    """Score view for a match, or None when it does not exist. Never writes."""
    match = db.session.get(Match, match_id)
    if match is None:
        return None
    return match.score_view()
