"""
Route decorators for error responses and transactions

Stack them with handle_errors outermost so that a failed transaction is
rolled back before the error response is built:

    @bp.route('/<int:schedule_id>/claim', methods=['POST'])
    @handle_errors
    @require_authentication()
    @with_db_transaction
    def claim(event_id, schedule_id):
        ...
"""
import uuid
from functools import wraps

from flask import current_app, jsonify, request
from sqlalchemy.exc import IntegrityError

from .exceptions import AppException, ConflictException


def _route_context(view, view_args):
    """'claim POST /api/... event_id=3 schedule_id=7' for log lines"""
    ids = ' '.join(f'{key}={value}' for key, value in sorted(view_args.items()))
    context = f'{view.__name__} {request.method} {request.path}'
    return f'{context} {ids}' if ids else context


def handle_errors(f):
    """
    Convert exceptions raised by a view into JSON error responses

    AppException subclasses answer with their own status code and
    to_dict() body and are logged as warnings together with the route's
    ids. Anything else becomes a 500 whose error_id matches the logged
    traceback; internal details never reach the client.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            return f(*args, **kwargs)

        except AppException as e:
            current_app.logger.warning(
                f"{e.error_type} in {_route_context(f, kwargs)}: {e.message}",
                extra={'details': e.details} if e.details else {}
            )
            return jsonify(e.to_dict()), e.status_code

        except Exception:
            error_id = uuid.uuid4().hex[:12]
            current_app.logger.exception(
                f"Unexpected error [{error_id}] in {_route_context(f, kwargs)}"
            )
            return jsonify({
                'error': 'InternalError',
                'message': 'An unexpected error occurred',
                'error_id': error_id,
                'status_code': 500
            }), 500

    return decorated


def with_db_transaction(f):
    """
    Commit the session when the view returns, roll back when it raises

    Services only flush, so this is where leader changes and their audit
    rows become visible together. A unique-constraint collision (two
    requests creating the same schedule day or enrollment) is reported as
    ConflictException instead of a 500.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        session = current_app.extensions['sqlalchemy'].session

        try:
            result = f(*args, **kwargs)
            session.commit()
            return result
        except IntegrityError as e:
            session.rollback()
            raise ConflictException(
                'The request collided with a concurrent change; reload and retry',
                details={'constraint': str(e.orig)}
            )
        except Exception:
            session.rollback()
            raise

    return decorated
