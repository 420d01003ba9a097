"""
Leader assignment routes
Daily leader allocation, claims, reassignment and backup for reading events
"""
import random
from datetime import timedelta

from flask import Blueprint, current_app, jsonify, request

from reading_club.error_handlers import (
    AuthorizationException,
    ResourceNotFoundException,
    handle_errors,
    with_db_transaction,
)
from reading_club.extensions import limiter
from reading_club.models import get_db, get_models
from reading_club.services.leader_assignment import LeaderAssignmentService
from reading_club.utils.validators import (
    parse_bool_param,
    parse_id_mapping,
    parse_int_param,
    validate_required_fields,
)
from .auth import get_current_user, require_authentication

leader_assignments_bp = Blueprint(
    'leader_assignments', __name__,
    url_prefix='/api/events/<int:event_id>/leader-assignments'
)


def build_service():
    """LeaderAssignmentService bound to the request's session, clock and config"""
    seed = current_app.config.get('LEADER_ALLOCATION_SEED')
    return LeaderAssignmentService(
        get_db().session,
        get_models(),
        clock=current_app.extensions['clock'],
        rng=random.Random(seed) if seed is not None else random.Random(),
        settings=current_app.config
    )


def load_event(event_id):
    ReadingEvent = get_models()['ReadingEvent']
    event = get_db().session.get(ReadingEvent, event_id)
    if event is None:
        raise ResourceNotFoundException(f'Event {event_id} not found')
    return event


def load_schedule(event, schedule_id):
    ReadingSchedule = get_models()['ReadingSchedule']
    schedule = get_db().session.query(ReadingSchedule).filter_by(
        id=schedule_id, event_id=event.id
    ).first()
    if schedule is None:
        raise ResourceNotFoundException(f'Schedule {schedule_id} not found in event {event.id}')
    return schedule


def load_user(user_id, field_name):
    User = get_models()['User']
    user = get_db().session.get(User, user_id)
    if user is None:
        raise ResourceNotFoundException(f'{field_name} {user_id} not found')
    return user


def require_owner(event, user):
    if not event.is_event_owner(user):
        raise AuthorizationException('Only the event owner can manage leader assignments')


@leader_assignments_bp.route('/auto-assign', methods=['POST'])
@handle_errors
@require_authentication()
@with_db_transaction
def auto_assign(event_id):
    """
    Allocate daily leaders for every open day of the event

    Request body (all optional):
        {
            "assignment_policy": "random|balanced|rotation|voluntary",
            "max_leadership_count": 3,
            "volunteer_assignments": {"<schedule_id>": <user_id>},
            "reset": false
        }
    """
    user = get_current_user()
    event = load_event(event_id)
    require_owner(event, user)

    data = request.get_json(silent=True) or {}
    service = build_service()
    result = service.auto_assign(
        event,
        policy=data.get('assignment_policy') or data.get('assignment_type'),
        max_leadership_count=parse_int_param(data.get('max_leadership_count'), 'max_leadership_count', minimum=1),
        volunteer_assignments=parse_id_mapping(data.get('volunteer_assignments'), 'volunteer_assignments'),
        reset=parse_bool_param(data.get('reset'), 'reset'),
        actor=user
    )

    payload = result.to_summary()
    payload['statistics'] = service.statistics(event)
    return jsonify({
        'success': True,
        'data': payload,
        'message': f"Assigned {result.assigned_count} days using the {result.policy.value} policy"
    })


@leader_assignments_bp.route('/<int:schedule_id>/claim', methods=['POST'])
@limiter.limit('30 per minute')
@handle_errors
@require_authentication()
@with_db_transaction
def claim(event_id, schedule_id):
    """Claim an empty day as its leader (voluntary events only)"""
    user = get_current_user()
    event = load_event(event_id)
    schedule = load_schedule(event, schedule_id)

    schedule_data = build_service().claim(event, user, schedule)
    return jsonify({
        'success': True,
        'data': schedule_data,
        'message': f"You are now leading day {schedule_data['day_number']}"
    })


@leader_assignments_bp.route('/<int:schedule_id>/reassign', methods=['POST'])
@handle_errors
@require_authentication()
@with_db_transaction
def reassign(event_id, schedule_id):
    """
    Replace the leader of a day

    Request body:
        {"new_leader_id": <user_id>}
    """
    user = get_current_user()
    event = load_event(event_id)
    schedule = load_schedule(event, schedule_id)

    data = request.get_json(silent=True) or {}
    validate_required_fields(data, ['new_leader_id'])
    new_leader = load_user(parse_int_param(data['new_leader_id'], 'new_leader_id'), 'User')

    result = build_service().reassign(event, user, schedule, new_leader)
    return jsonify({
        'success': True,
        'data': result,
        'message': f"Day {schedule.day_number} is now led by {new_leader.nickname}"
    })


@leader_assignments_bp.route('/<int:schedule_id>/backup', methods=['POST'])
@handle_errors
@require_authentication()
@with_db_transaction
def backup(event_id, schedule_id):
    """
    Put a backup leader on a day that needs one

    Request body:
        {"backup_leader_id": <user_id>}
    """
    user = get_current_user()
    event = load_event(event_id)
    schedule = load_schedule(event, schedule_id)

    data = request.get_json(silent=True) or {}
    validate_required_fields(data, ['backup_leader_id'])
    backup_leader = load_user(parse_int_param(data['backup_leader_id'], 'backup_leader_id'), 'User')

    result = build_service().backup_assign(event, user, schedule, backup_leader)
    return jsonify({
        'success': True,
        'data': result,
        'message': f"{backup_leader.nickname} is covering day {schedule.day_number}"
    })


@leader_assignments_bp.route('/statistics', methods=['GET'])
@handle_errors
@require_authentication()
def statistics(event_id):
    """Coverage and workload figures for the owner's dashboard"""
    event = load_event(event_id)
    require_owner(event, get_current_user())

    return jsonify({'success': True, 'data': build_service().statistics(event)})


@leader_assignments_bp.route('/backup-needed', methods=['GET'])
@handle_errors
@require_authentication()
def backup_needed(event_id):
    """
    Days whose leader is missing or has not published, most urgent first

    Query params:
        lookahead_days: only scan days up to today + N
    """
    event = load_event(event_id)
    require_owner(event, get_current_user())

    lookahead_days = parse_int_param(request.args.get('lookahead_days'), 'lookahead_days', minimum=0)
    service = build_service()
    candidates = service.backup_needed(event, lookahead_days)
    soon = service.clock.today() + timedelta(days=1)

    return jsonify({
        'success': True,
        'data': {
            'backup_schedules': [c.to_dict() for c in candidates],
            'total_needing_backup': len(candidates),
            'content_deadline_soon': sum(
                1 for c in candidates if c.missing_content and c.content_deadline <= soon
            ),
            'engagement_deadline_soon': sum(
                1 for c in candidates if c.missing_engagement and c.engagement_deadline <= soon
            )
        }
    })


@leader_assignments_bp.route('/permissions', methods=['GET'])
@handle_errors
@require_authentication()
def permissions(event_id):
    """Capability flags of the caller, optionally for one day (?schedule_id=)"""
    event = load_event(event_id)
    schedule_id = parse_int_param(request.args.get('schedule_id'), 'schedule_id')
    schedule = load_schedule(event, schedule_id) if schedule_id is not None else None

    return jsonify({
        'success': True,
        'data': build_service().check_permissions(event, get_current_user(), schedule)
    })


@leader_assignments_bp.route('/participants', methods=['GET'])
@handle_errors
@require_authentication()
def participants(event_id):
    """Members who can be given a day, with how many days each already leads"""
    event = load_event(event_id)
    require_owner(event, get_current_user())

    return jsonify({'success': True, 'data': build_service().participants(event)})
