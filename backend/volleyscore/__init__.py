from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))
    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Live score updates are pushed over Socket.IO
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from volleyscore.main import main
    flask_app.register_blueprint(main)

    from volleyscore.api.organizations import organizations
    flask_app.register_blueprint(organizations, url_prefix='/api/organizations')

    from volleyscore.api.matches import matches
    flask_app.register_blueprint(matches, url_prefix='/api/matches')

    from volleyscore.api.scoring import scoring
    flask_app.register_blueprint(scoring, url_prefix='/api/matches')

    from volleyscore.socketio_events import register_socketio_handlers
    register_socketio_handlers(socketio, testing=flask_app.config.get('TESTING', False))

    from volleyscore.exceptions import VolleyScoreError

    @flask_app.errorhandler(VolleyScoreError)
    def handle_volleyscore_error(exc):
        return jsonify({'error': str(exc)}), exc.status_code

    from volleyscore.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Not authenticated'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from volleyscore.models import Organization, OrganizationMember, Match
        import json
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # One user per organization role
            users = {}
            for username, role in [('owner1', 'owner'), ('admin1', 'admin'), ('scorer1', 'scorer')]:
                user = User(username=username)
                user.set_password('password')
                db.session.add(user)
                users[role] = user
            db.session.flush()

            org = Organization(name='Demo Volleyball Club', created_by=users['owner'].id)
            db.session.add(org)
            db.session.flush()
            for role, user in users.items():
                db.session.add(OrganizationMember(organization_id=org.id, user_id=user.id, role=role))

            for name, match_format, scoring_format, participants in [
                ('Court 1', 'teams', 'standard', [
                    {'side': 'home', 'team_name': 'Spikers', 'players': []},
                    {'side': 'away', 'team_name': 'Diggers', 'players': []},
                ]),
                ('Beach Court', 'doubles', 'avp_beach', [
                    {'side': 'home', 'team_name': None, 'players': ['Ana', 'Bea']},
                    {'side': 'away', 'team_name': None, 'players': ['Cai', 'Dee']},
                ]),
            ]:
                db.session.add(Match(
                    organization_id=org.id,
                    name=name,
                    format=match_format,
                    scoring_format=scoring_format,
                    participants=json.dumps(participants),
                    created_by=users['owner'].id,
                ))

            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
