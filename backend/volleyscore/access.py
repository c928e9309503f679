"""Organization role checks for the logged-in user."""
from typing import Iterable, Optional

from flask_login import current_user

from volleyscore.exceptions import NotAuthenticated, NotOrganizationMember, RoleRequired
from volleyscore.models import ADMIN, OWNER, SCORER, OrganizationMember

SCORING_ROLES = (OWNER, ADMIN, SCORER)
MANAGER_ROLES = (OWNER, ADMIN)


def get_membership(organization_id: int) -> Optional[OrganizationMember]:
    if not current_user.is_authenticated:
        return None
    return OrganizationMember.query.filter_by(
        organization_id=organization_id, user_id=current_user.id
    ).first()


def require_membership(organization_id: int) -> OrganizationMember:
    if not current_user.is_authenticated:
        raise NotAuthenticated()
    membership = get_membership(organization_id)
    if membership is None:
        raise NotOrganizationMember(organization_id)
    return membership


def require_role(organization_id: int, allowed_roles: Iterable[str]) -> OrganizationMember:
    """Return the caller's membership if its role is allowed, else raise."""
    allowed_roles = tuple(allowed_roles)
    membership = require_membership(organization_id)
    if membership.role not in allowed_roles:
        raise RoleRequired(allowed_roles)
    return membership
