import os
import sys
import pytest

# Ensure the backend root (containing the `volleyscore` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from volleyscore import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    LOG_LEVEL = 'DEBUG'
    CORS_ORIGINS = ['http://localhost:3000']
    MATCH_LIST_LIMIT = 50


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import volleyscore.models  # noqa: F401
        db.create_all()
    # Requests push their own app context so each test client keeps its
    # own logged-in user; the in-memory database survives between contexts.
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


def login_client(flask_app, username, password='password'):
    """A fresh test client with its own session cookie, registered and logged in."""
    c = flask_app.test_client()
    res = c.post('/register', json={'username': username, 'password': password})
    assert res.status_code == 201
    return c


@pytest.fixture()
def club(flask_app):
    """An organization with an owner, an admin, a scorer and an outsider, each logged in."""
    owner = login_client(flask_app, 'olivia')
    res = owner.post('/api/organizations', json={'name': 'Sand Club'})
    assert res.status_code == 201
    org_id = res.get_json()['id']

    clients = {'owner': owner}
    for username, role in [('adam', 'admin'), ('sam', 'scorer')]:
        clients[role] = login_client(flask_app, username)
        res = owner.post(f'/api/organizations/{org_id}/members', json={'username': username, 'role': role})
        assert res.status_code == 201
    clients['outsider'] = login_client(flask_app, 'otto')
    clients['anonymous'] = flask_app.test_client()
    clients['org_id'] = org_id
    return clients


def teams(home='Home Team', away='Away Team'):
    return [
        {'side': 'home', 'team_name': home, 'players': []},
        {'side': 'away', 'team_name': away, 'players': []},
    ]


@pytest.fixture()
def make_match(club):
    def _make(scoring_format='avp_beach', name='Final'):
        payload = {
            'organization_id': club['org_id'],
            'format': 'teams',
            'name': name,
            'participants': teams(),
        }
        if scoring_format is not None:
            payload['scoring_format'] = scoring_format
        res = club['owner'].post('/api/matches', json=payload)
        assert res.status_code == 201
        return res.get_json()['id']
    return _make
