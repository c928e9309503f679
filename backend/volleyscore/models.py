from volleyscore import db, bcrypt
from flask_login import UserMixin
from volleyscore.services.scoring.engine import (
    SCHEDULED,
    MatchScore,
    PointEvent,
    ScoringState,
)
import json

OWNER = 'owner'
ADMIN = 'admin'
SCORER = 'scorer'
ORG_ROLES = (OWNER, ADMIN, SCORER)

MATCH_FORMATS = ('singles', 'doubles', 'teams')


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    memberships = db.relationship('OrganizationMember', back_populates='user')

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class Organization(db.Model):
    __tablename__ = 'organization'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    members = db.relationship('OrganizationMember', back_populates='organization', lazy='dynamic')
    matches = db.relationship('Match', back_populates='organization', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'created_by': self.created_by,
        }


class OrganizationMember(db.Model):
    __tablename__ = 'organization_member'
    __table_args__ = (
        db.UniqueConstraint('organization_id', 'user_id', name='uq_organization_member'),
    )
    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, db.ForeignKey('organization.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    role = db.Column(db.String(16), nullable=False)  # owner, admin, scorer
    organization = db.relationship('Organization', back_populates='members')
    user = db.relationship('User', back_populates='memberships')

    def to_dict(self):
        return {
            'id': self.id,
            'organization_id': self.organization_id,
            'user_id': self.user_id,
            'username': self.user.username if self.user else None,
            'role': self.role,
        }


class Match(db.Model):
    __tablename__ = 'volley_match'
    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, db.ForeignKey('organization.id'), nullable=False, index=True)
    name = db.Column(db.String(128), nullable=True)
    format = db.Column(db.String(16), nullable=False)  # singles, doubles, teams
    scoring_format = db.Column(db.String(16), nullable=True)  # standard, avp_beach
    status = db.Column(db.String(16), nullable=False, default=SCHEDULED, index=True)  # scheduled, in_progress, completed
    participants = db.Column(db.Text, nullable=False, default='[]')  # JSON-encoded list of sides
    score = db.Column(db.Text, nullable=True)  # JSON-encoded MatchScore, absent while scheduled
    point_history = db.Column(db.Text, nullable=True)  # JSON-encoded list of PointEvent
    created_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    organization = db.relationship('Organization', back_populates='matches')

    def participants_list(self):
        try:
            return json.loads(self.participants) if self.participants else []
        except ValueError:
            return []

    def scoring_state(self) -> ScoringState:
        """Decode the engine-owned columns."""
        score = MatchScore.from_dict(json.loads(self.score)) if self.score else None
        history = json.loads(self.point_history) if self.point_history else []
        return ScoringState(
            status=self.status or SCHEDULED,
            scoring_format=self.scoring_format,
            score=score,
            point_history=tuple(PointEvent.from_dict(p) for p in history),
        )

    def apply_scoring_state(self, state: ScoringState) -> None:
        self.status = state.status
        self.score = json.dumps(state.score.to_dict()) if state.score is not None else None
        self.point_history = json.dumps([p.to_dict() for p in state.point_history])

    def score_view(self):
        """Read-only projection used by live scoreboards."""
        state = self.scoring_state()
        return {
            'id': self.id,
            'name': self.name,
            'status': state.status,
            'scoring_format': state.scoring_format,
            'participants': self.participants_list(),
            'score': state.score.to_dict() if state.score else None,
            'can_undo': state.can_undo,
        }

    def to_dict(self):
        state = self.scoring_state()
        return {
            'id': self.id,
            'organization_id': self.organization_id,
            'name': self.name,
            'format': self.format,
            'scoring_format': self.scoring_format,
            'status': state.status,
            'participants': self.participants_list(),
            'score': state.score.to_dict() if state.score else None,
            'point_history': [p.to_dict() for p in state.point_history],
            'created_by': self.created_by,
        }
