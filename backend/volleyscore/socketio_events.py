from flask_socketio import join_room, leave_room, emit
from volleyscore import db
from volleyscore.models import Match
from volleyscore.services.scoring.operations import match_room


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def _match_id(data):
    try:
        return int((data or {}).get('match_id'))
    except (TypeError, ValueError):
        return None


def handle_join_match(data):
    """Subscribe to live score updates; the current score is sent right away."""
    match_id = _match_id(data)
    if match_id is None:
        emit('error', {'message': 'match_id is required'})
        return
    match = db.session.get(Match, match_id)
    if not match:
        emit('error', {'message': 'Match not found'})
        return
    room = match_room(match_id)
    join_room(room)
    emit('joined', {'room': room})
    emit('score_update', match.score_view())


def handle_leave_match(data):
    match_id = _match_id(data)
    if match_id is None:
        emit('error', {'message': 'match_id is required'})
        return
    room = match_room(match_id)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(socketio, testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_match', handle_join_match, namespace=namespace)
        socketio.on_event('leave_match', handle_leave_match, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
