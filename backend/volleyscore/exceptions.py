"""Domain exceptions.

Every business rule violation raises one of these; the blueprints turn them
into ``{"error": message}`` responses using ``status_code``.
"""


class VolleyScoreError(Exception):
    """Base class for all rejections."""
    status_code = 400


# ---- Access ----

class NotAuthenticated(VolleyScoreError):
    status_code = 401

    def __init__(self):
        super().__init__("Not authenticated")


class PermissionDenied(VolleyScoreError):
    status_code = 403


class NotOrganizationMember(PermissionDenied):
    def __init__(self, organization_id):
        self.organization_id = organization_id
        super().__init__("You are not a member of this organization")


class RoleRequired(PermissionDenied):
    def __init__(self, allowed_roles):
        self.allowed_roles = tuple(allowed_roles)
        super().__init__(
            f"This action requires one of these roles: {', '.join(self.allowed_roles)}"
        )


# ---- Lookups ----

class MatchNotFound(VolleyScoreError):
    status_code = 404

    def __init__(self, match_id):
        self.match_id = match_id
        super().__init__("Match not found")


class OrganizationNotFound(VolleyScoreError):
    status_code = 404

    def __init__(self, organization_id):
        self.organization_id = organization_id
        super().__init__("Organization not found")


class UserNotFound(VolleyScoreError):
    status_code = 404

    def __init__(self, username):
        self.username = username
        super().__init__(f"User {username} not found")


# ---- Input ----

class InvalidRequest(VolleyScoreError):
    """Malformed or missing request data."""
    pass


# ---- Scoring state ----

class InvalidMatchState(VolleyScoreError):
    """The match is not in a state that allows the operation."""
    pass


class MatchAlreadyStarted(InvalidMatchState):
    def __init__(self):
        super().__init__("Match has already started or completed")


class ScoringFormatMissing(InvalidMatchState):
    def __init__(self):
        super().__init__("Match does not have a scoring format set")


class MatchNotInProgress(InvalidMatchState):
    def __init__(self):
        super().__init__("Match is not in progress")


class ScoreNotInitialized(InvalidMatchState):
    def __init__(self):
        super().__init__("Match score not initialized")


class NoPointsToUndo(InvalidMatchState):
    def __init__(self):
        super().__init__("No points to undo")


class MatchAlreadyCompleted(InvalidMatchState):
    def __init__(self):
        super().__init__("Match is already completed")


class InconsistentSetHistory(VolleyScoreError):
    """Stored score is corrupt: a set boundary was crossed with no set recorded."""
    status_code = 500

    def __init__(self):
        super().__init__("Cannot undo: set history inconsistent")
