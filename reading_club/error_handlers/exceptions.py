"""
Custom exception hierarchy for type-safe error handling

Provides a structured exception hierarchy that maps to HTTP status codes
and enables consistent error responses across the application.

Usage:
    from reading_club.error_handlers.exceptions import AlreadyAssignedError

    def claim(schedule):
        if schedule.daily_leader_id:
            raise AlreadyAssignedError('Day 3 already has a leader')

Exception Hierarchy:
    AppException (base)
    ├── ValidationException (400)
    ├── AuthenticationException (401)
    ├── AuthorizationException (403)
    ├── ResourceNotFoundException (404)
    ├── ConflictException (409)
    ├── ConfigurationException (500)
    └── LeaderAssignmentError
        ├── PreconditionError (422)
        ├── NotEligibleError (403)
        ├── AlreadyAssignedError (409)
        ├── CapReachedError (422)
        ├── BackupNotNeededError (409)
        └── UnsupportedPolicyError (400)
"""
from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Base class of every error the API reports to clients

    Subclasses set status_code and error_type; handle_errors renders
    to_dict() as the response body. Keys in details (schedule_id,
    supported_policies, ...) are merged into that body so clients can act
    on them without parsing the message.
    """
    status_code = 500
    error_type = 'ApplicationError'

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        body = {
            'error': self.error_type,
            'message': self.message,
            'status_code': self.status_code
        }
        body.update(self.details)
        return body

    def __str__(self) -> str:
        return f"{self.error_type}: {self.message}"


class ValidationException(AppException):
    """Malformed body or query parameter (HTTP 400)"""
    status_code = 400
    error_type = 'ValidationError'


class AuthenticationException(AppException):
    """Missing, unknown or deactivated API token (HTTP 401)"""
    status_code = 401
    error_type = 'AuthenticationError'


class AuthorizationException(AppException):
    """
    Authenticated, but not allowed (HTTP 403)

    Used for owner-only endpoints; slot-level refusals raise NotEligibleError.
    """
    status_code = 403
    error_type = 'AuthorizationError'


class ResourceNotFoundException(AppException):
    """Event, schedule or user id does not exist, or not in this event (HTTP 404)"""
    status_code = 404
    error_type = 'NotFound'


class ConflictException(AppException):
    """
    Write collided with a unique constraint (HTTP 409)

    Raised by with_db_transaction when two requests race to create the
    same row, e.g. two owners opening one event at once.
    """
    status_code = 409
    error_type = 'Conflict'


class ConfigurationException(AppException):
    """
    Configuration errors (HTTP 500)

    Raised when application is misconfigured.
    """
    status_code = 500
    error_type = 'ConfigurationError'


class LeaderAssignmentError(AppException):
    """
    Base class for leader assignment failures

    None of these are retried internally; each one is terminal for the
    operation that raised it and is surfaced to the caller as-is.
    """
    status_code = 422
    error_type = 'LeaderAssignmentError'


class PreconditionError(LeaderAssignmentError):
    """
    Operation cannot proceed (HTTP 422)

    Event is not approved, has no materialized schedules, or schedules
    were already materialized.
    """
    status_code = 422
    error_type = 'PreconditionError'


class NotEligibleError(LeaderAssignmentError):
    """
    Actor is not enrolled or lacks permission for this slot (HTTP 403)
    """
    status_code = 403
    error_type = 'NotEligibleError'


class AlreadyAssignedError(LeaderAssignmentError):
    """
    Slot already has a leader, or a concurrent writer got there first (HTTP 409)

    Expected under concurrency: the caller may re-query and pick another slot.
    """
    status_code = 409
    error_type = 'AlreadyAssignedError'


class CapReachedError(LeaderAssignmentError):
    """
    Participant already leads the maximum number of days (HTTP 422)
    """
    status_code = 422
    error_type = 'CapReachedError'


class BackupNotNeededError(LeaderAssignmentError):
    """
    Slot is functioning and must not be overwritten by a backup (HTTP 409)
    """
    status_code = 409
    error_type = 'BackupNotNeededError'


class UnsupportedPolicyError(LeaderAssignmentError):
    """
    Unknown assignment policy string (HTTP 400)
    """
    status_code = 400
    error_type = 'UnsupportedPolicyError'
