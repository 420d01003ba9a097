"""
Event lifecycle routes
Opening an approved event: materialize its days and run the first allocation
"""
from flask import Blueprint, jsonify, request

from reading_club.error_handlers import ValidationException, handle_errors, with_db_transaction
from reading_club.utils.validators import validate_date_param
from .auth import get_current_user, require_authentication
from .leader_assignments import build_service, load_event

events_bp = Blueprint('events', __name__, url_prefix='/api/events')


@events_bp.route('/<int:event_id>/open', methods=['POST'])
@handle_errors
@require_authentication()
@with_db_transaction
def open_event(event_id):
    """
    Open an approved event

    Creates one schedule per non-rest day when the event has none yet and,
    unless the event is voluntary, allocates leaders right away.

    Request body (optional):
        {
            "rest_dates": ["2025-03-08"],
            "progress_labels": {"1": "Chapters 1-2"}
        }
    """
    event = load_event(event_id)
    data = request.get_json(silent=True) or {}

    rest_dates = data.get('rest_dates') or []
    if not isinstance(rest_dates, list):
        raise ValidationException('rest_dates must be a list of YYYY-MM-DD dates')
    rest_dates = [validate_date_param(value, 'rest_dates') for value in rest_dates]

    labels = data.get('progress_labels') or {}
    if not isinstance(labels, dict):
        raise ValidationException('progress_labels must be an object of day_number -> text')
    try:
        labels = {int(day): str(text) for day, text in labels.items()}
    except ValueError:
        raise ValidationException('progress_labels keys must be day numbers')

    summary = build_service().open_event(event, get_current_user(), rest_dates, labels)
    return jsonify({
        'success': True,
        'data': summary,
        'message': f"Event {event.id} is open with {len(event.schedules)} days"
    })
