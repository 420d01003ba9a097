"""
Logging setup and app-wide HTTP error handlers

Route-level failures are handled by @handle_errors; the handlers here catch
what never reaches a view (unknown URLs, wrong methods, rate limits) and
anything that escapes a view without the decorator.
"""
import logging
import os
import traceback
import uuid

from flask import jsonify, request

from reading_club.utils.validators import sanitize_request_data

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

# status -> (error name, client message); names match AppException.error_type
HTTP_ERRORS = {
    400: ('BadRequest', 'The request body or parameters are malformed'),
    401: ('Unauthorized', 'A bearer token is required'),
    403: ('Forbidden', 'Access denied'),
    404: ('NotFound', 'The requested resource was not found'),
    405: ('MethodNotAllowed', 'This method is not allowed for this endpoint'),
    429: ('TooManyRequests', 'Rate limit exceeded'),
}


def setup_logging(app):
    """
    Send the app logger to LOG_FILE and the console at LOG_LEVEL

    app.logger is the 'reading_club' logger, so every module logger under
    reading_club.* ends up in the same handlers. Calling this again for a
    new app replaces the handlers instead of stacking duplicates.
    """
    log_level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO').upper())
    log_file = app.config.get('LOG_FILE', 'logs/reading_club.log')

    if not os.path.isabs(log_file):
        project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
        log_file = os.path.join(project_root, log_file)
    os.makedirs(os.path.dirname(log_file), exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT)
    file_handler = logging.FileHandler(log_file)
    console_handler = logging.StreamHandler()

    for handler in list(app.logger.handlers):
        if getattr(handler, 'reading_club_handler', False):
            app.logger.removeHandler(handler)
            handler.close()

    for handler in (file_handler, console_handler):
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        handler.reading_club_handler = True
        app.logger.addHandler(handler)

    app.logger.setLevel(log_level)
    logging.getLogger('werkzeug').setLevel(log_level)
    return app.logger


def _error_response(error_name, message, status_code, **extra):
    payload = {
        'error': error_name,
        'message': message,
        'status_code': status_code
    }
    payload.update(extra)
    return jsonify(payload), status_code


def register_error_handlers(app):
    """Register JSON handlers for HTTP errors raised outside @handle_errors"""

    def http_error(error):
        name, message = HTTP_ERRORS[error.code]
        log = app.logger.info if error.code == 404 else app.logger.warning
        log(f"{error.code} {request.method} {request.path} from {request.remote_addr}")
        if error.code == 429 and error.description:
            message = f'{message}: {error.description}'
        return _error_response(name, message, error.code)

    for status_code in HTTP_ERRORS:
        app.register_error_handler(status_code, http_error)

    @app.errorhandler(500)
    def internal_error(error):
        """Log the traceback and request under an error_id the client can quote"""
        error_id = uuid.uuid4().hex[:12]
        app.logger.error(
            f"Internal error [{error_id}] on {request.method} {request.path}: {error}\n"
            f"{traceback.format_exc()}"
        )
        if request.content_length:
            body = sanitize_request_data(request.get_data(as_text=True)[:500])
            app.logger.error(f"Request body [{error_id}]: {body}")

        return _error_response('InternalError', 'An unexpected error occurred', 500, error_id=error_id)
