from flask import Blueprint, current_app, jsonify
from flask_login import current_user
import json

from volleyscore import db
from volleyscore.access import MANAGER_ROLES, require_membership, require_role
from volleyscore.exceptions import InvalidRequest, MatchNotFound, OrganizationNotFound
from volleyscore.models import MATCH_FORMATS, Match, Organization
from volleyscore.services.scoring.engine import SCHEDULED, SCORING_FORMATS, SIDES
from .payload import json_object, optional_text

matches = Blueprint('matches', __name__)


def _clean_participants(match_format, participants):
    """Validate the two sides of a match and return them normalized."""
    if not isinstance(participants, list) or len(participants) != 2:
        raise InvalidRequest('Exactly two sides are required.')
    if any(not isinstance(p, dict) for p in participants):
        raise InvalidRequest('Each participant must be an object.')

    sides = [p.get('side') for p in participants]
    if sorted(sides, key=str) != sorted(SIDES):
        raise InvalidRequest('Participants must include home and away sides.')

    cleaned = []
    for p in participants:
        team_name = optional_text(p, 'team_name')
        players = p.get('players') or []
        if not isinstance(players, list) or any(not isinstance(name, str) for name in players):
            raise InvalidRequest('players must be a list of names.')
        if match_format == 'teams':
            if not team_name:
                raise InvalidRequest('Teams format requires a team name for each side.')
        else:
            required = 1 if match_format == 'singles' else 2
            if len(players) != required:
                raise InvalidRequest(f'{match_format} format requires {required} player(s) per side.')
        cleaned.append({'side': p['side'], 'team_name': team_name, 'players': players})
    # Home first keeps scoreboards stable
    cleaned.sort(key=lambda p: SIDES.index(p['side']))
    return cleaned


@matches.route('', methods=['POST'])
def create_match():
    data = json_object()
    organization_id = data.get('organization_id')
    if organization_id is None:
        raise InvalidRequest('organization_id is required')
    if not isinstance(organization_id, int):
        raise InvalidRequest('organization_id must be an integer')

    organization = db.session.get(Organization, organization_id)
    if not organization:
        raise OrganizationNotFound(organization_id)
    require_role(organization.id, MANAGER_ROLES)

    match_format = data.get('format')
    if match_format not in MATCH_FORMATS:
        raise InvalidRequest(f"format must be one of: {', '.join(MATCH_FORMATS)}")

    scoring_format = data.get('scoring_format')
    if scoring_format is not None and scoring_format not in SCORING_FORMATS:
        raise InvalidRequest(f"scoring_format must be one of: {', '.join(SCORING_FORMATS)}")

    participants = _clean_participants(match_format, data.get('participants'))
    name = optional_text(data, 'name')

    match = Match(
        organization_id=organization.id,
        name=name,
        format=match_format,
        scoring_format=scoring_format,
        status=SCHEDULED,
        participants=json.dumps(participants),
        created_by=current_user.id,
    )
    db.session.add(match)
    db.session.commit()
    current_app.logger.info(f"[create_match] match={match.id} org={organization.id} scoring_format={scoring_format}")
    return jsonify(match.to_dict()), 201


@matches.route('/<int:match_id>', methods=['GET'])
def get_match(match_id):
    match = db.session.get(Match, match_id)
    if not match:
        raise MatchNotFound(match_id)
    require_membership(match.organization_id)
    return jsonify(match.to_dict())
