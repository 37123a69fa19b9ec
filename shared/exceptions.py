"""
Domain errors

Policy checks and services raise these instead of returning HTTP
responses, so the REST API and the server-rendered pages translate the
same failure into their own medium.
"""


class MemberHubError(Exception):
    """Base class for all domain errors."""

    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(MemberHubError):
    """Input is missing, malformed or conflicts with existing data."""

    status_code = 400
    default_message = "Invalid request"


class PermissionDenied(MemberHubError):
    """The acting member's role does not allow the operation."""

    status_code = 403
    default_message = "Insufficient permissions"


class NotFound(MemberHubError):
    """The requested record does not exist or is not visible."""

    status_code = 404
    default_message = "Not found"
