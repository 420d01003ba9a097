"""
Health Check Endpoints
Provides endpoints for liveness and readiness checks.
"""
from datetime import datetime

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from reading_club.models import get_db

health_bp = Blueprint('health', __name__, url_prefix='/health')


@health_bp.route('/ping', methods=['GET'])
def ping():
    """
    Simple ping endpoint for basic connectivity checks.
    Returns: 200 OK with pong message
    """
    return jsonify({
        'status': 'ok',
        'message': 'pong',
        'timestamp': datetime.utcnow().isoformat()
    }), 200


@health_bp.route('/ready', methods=['GET'])
def readiness():
    """
    Readiness probe - checks if application is ready to serve traffic.

    Returns:
        200: Application is ready
        503: Database is unreachable
    """
    checks = {'database': False}
    errors = []

    try:
        get_db().session.execute(text('SELECT 1'))
        checks['database'] = True
    except SQLAlchemyError as e:
        errors.append(f"Database: {str(e)}")

    all_checks_passed = all(checks.values())
    response = {
        'status': 'ready' if all_checks_passed else 'not_ready',
        'checks': checks,
        'timestamp': datetime.utcnow().isoformat()
    }
    if errors:
        response['errors'] = errors

    return jsonify(response), 200 if all_checks_passed else 503
