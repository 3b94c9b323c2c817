from fastapi import status


class TaskTrackerError(Exception):
    """Base error carrying the HTTP status and the message shown to clients."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskTrackerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(TaskTrackerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class NotFoundError(TaskTrackerError):
    # Also raised for rows owned by someone else.
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(TaskTrackerError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class InternalError(TaskTrackerError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
