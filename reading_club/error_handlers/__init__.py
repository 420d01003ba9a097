"""
Unified Error Handling System

Provides centralized, consistent error handling across the entire application.

Usage:
    from reading_club.error_handlers import handle_errors
    from reading_club.error_handlers.exceptions import NotEligibleError

    @bp.route('/endpoint')
    @handle_errors
    def my_endpoint():
        if not enrolled:
            raise NotEligibleError('Enroll in the event first')
        return jsonify({'success': True})
"""
from .exceptions import (
    AppException,
    ValidationException,
    AuthenticationException,
    AuthorizationException,
    ResourceNotFoundException,
    ConflictException,
    ConfigurationException,
    LeaderAssignmentError,
    PreconditionError,
    NotEligibleError,
    AlreadyAssignedError,
    CapReachedError,
    BackupNotNeededError,
    UnsupportedPolicyError,
)
from .decorators import handle_errors, with_db_transaction
from .logging import setup_logging, register_error_handlers


__all__ = [
    # Exceptions
    'AppException',
    'ValidationException',
    'AuthenticationException',
    'AuthorizationException',
    'ResourceNotFoundException',
    'ConflictException',
    'ConfigurationException',
    'LeaderAssignmentError',
    'PreconditionError',
    'NotEligibleError',
    'AlreadyAssignedError',
    'CapReachedError',
    'BackupNotNeededError',
    'UnsupportedPolicyError',
    # Decorators
    'handle_errors',
    'with_db_transaction',
    # Setup
    'setup_logging',
    'register_error_handlers',
]
