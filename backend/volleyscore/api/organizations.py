from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required

from volleyscore import db
from volleyscore.access import MANAGER_ROLES, require_membership, require_role
from volleyscore.exceptions import InvalidRequest, OrganizationNotFound, PermissionDenied, UserNotFound
from volleyscore.models import ORG_ROLES, OWNER, Match, Organization, OrganizationMember, User
from .payload import json_object, optional_text

organizations = Blueprint('organizations', __name__)


def _get_organization(organization_id):
    organization = db.session.get(Organization, organization_id)
    if not organization:
        raise OrganizationNotFound(organization_id)
    return organization


@organizations.route('', methods=['POST'])
@login_required
def create_organization():
    """Create an organization with the current user as its owner."""
    data = json_object()
    name = optional_text(data, 'name')
    if not name:
        raise InvalidRequest('Organization name is required')

    if OrganizationMember.query.filter_by(user_id=current_user.id).first():
        raise InvalidRequest('You already belong to an organization')

    organization = Organization(
        name=name,
        description=optional_text(data, 'description'),
        created_by=current_user.id,
    )
    db.session.add(organization)
    db.session.flush()
    db.session.add(OrganizationMember(organization_id=organization.id, user_id=current_user.id, role=OWNER))
    db.session.commit()
    current_app.logger.info(f"[create_organization] org={organization.id} owner={current_user.id}")
    return jsonify(organization.to_dict()), 201


@organizations.route('/<int:organization_id>/members', methods=['POST'])
def invite_member(organization_id):
    organization = _get_organization(organization_id)
    membership = require_role(organization.id, MANAGER_ROLES)

    data = json_object()
    role = data.get('role')
    if role not in ORG_ROLES:
        raise InvalidRequest(f"role must be one of: {', '.join(ORG_ROLES)}")
    if role == OWNER and membership.role != OWNER:
        raise PermissionDenied('Only owners can add other owners')

    username = optional_text(data, 'username')
    user = User.query.filter_by(username=username).first() if username else None
    if not user:
        raise UserNotFound(username)
    if OrganizationMember.query.filter_by(user_id=user.id).first():
        raise InvalidRequest('User already belongs to an organization')

    new_member = OrganizationMember(organization_id=organization.id, user_id=user.id, role=role)
    db.session.add(new_member)
    db.session.commit()
    current_app.logger.info(f"[invite_member] org={organization.id} user={user.id} role={role}")
    return jsonify(new_member.to_dict()), 201


@organizations.route('/<int:organization_id>/members', methods=['GET'])
def list_members(organization_id):
    organization = _get_organization(organization_id)
    require_membership(organization.id)
    return jsonify([m.to_dict() for m in organization.members.all()])


@organizations.route('/<int:organization_id>/matches', methods=['GET'])
def list_matches(organization_id):
    organization = _get_organization(organization_id)
    require_membership(organization.id)
    limit = int(current_app.config.get('MATCH_LIST_LIMIT', 50))
    rows = (
        Match.query.filter_by(organization_id=organization.id)
        .order_by(Match.id.desc())
        .limit(limit)
        .all()
    )
    return jsonify([m.to_dict() for m in rows])
