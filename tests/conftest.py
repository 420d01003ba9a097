"""
Pytest configuration and fixtures for Reading Club backend tests.

This module provides shared fixtures for:
- Flask application with test configuration
- Database setup and teardown
- A fixed clock so window and deadline rules are deterministic
- Model factories for creating test data
"""
import random
from datetime import date, datetime, timedelta

import pytest

from reading_club import create_app
from reading_club.extensions import db as _db
from reading_club.services.leader_assignment import LeaderAssignmentService
from reading_club.services.schedule_ledger import ScheduleLedger
from reading_club.utils.clock import FixedClock

# "Today" for every test unless a test moves the clock
TODAY = date(2025, 3, 10)


@pytest.fixture(scope='session')
def app():
    """
    Create application for the tests.

    Uses TestingConfig with in-memory SQLite database.
    Scope is 'session' to reuse the same app across all tests.
    """
    app = create_app('testing')
    app.config.update({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'RATELIMIT_ENABLED': False,
    })

    return app


@pytest.fixture(scope='function')
def db(app):
    """
    Create database for the tests.

    Creates all tables before each test function and drops them after.
    This ensures test isolation.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def db_session(db):
    """Session used by services under test"""
    return db.session


@pytest.fixture(scope='function')
def clock(app):
    """
    Fixed clock installed on the app for the duration of one test.

    Routes read the clock from app.extensions, so moving it here moves
    "today" for HTTP tests too.
    """
    original = app.extensions['clock']
    fixed = FixedClock(TODAY)
    app.extensions['clock'] = fixed
    yield fixed
    app.extensions['clock'] = original


@pytest.fixture(scope='function')
def client(app, db, clock):
    """
    Create a test client for the app.

    The client can be used to make requests to the application.
    """
    with app.test_client() as client:
        yield client


@pytest.fixture(scope='function')
def models(app, db):
    """Get all models from the model registry."""
    from reading_club.models import get_models
    return get_models()


@pytest.fixture
def service(db_session, models, clock):
    """LeaderAssignmentService with a fixed clock and seeded random source"""
    return LeaderAssignmentService(db_session, models, clock=clock, rng=random.Random(1234))


@pytest.fixture
def ledger(db_session, models):
    return ScheduleLedger(db_session, models)


# =============================================================================
# Model Factories
# =============================================================================

@pytest.fixture
def user_factory(models, db):
    """
    Factory for creating User instances.

    Usage:
        user = user_factory(nickname="Alice")
        user = user_factory(is_active=False)
    """
    counter = [0]

    def _create_user(**kwargs):
        User = models['User']
        counter[0] += 1
        defaults = {
            'nickname': f'Reader {counter[0]}',
            'avatar_url': f'https://example.com/avatars/{counter[0]}.png',
            'api_token': f'token-{counter[0]}',
            'is_active': True,
        }
        defaults.update(kwargs)
        user = User(**defaults)
        db.session.add(user)
        db.session.commit()
        return user

    return _create_user


@pytest.fixture
def event_factory(models, db, user_factory):
    """
    Factory for creating approved ReadingEvent instances.

    Usage:
        event = event_factory(assignment_policy="rotation")
        event = event_factory(owner=my_user, start_date=TODAY, end_date=TODAY)
    """
    counter = [0]

    def _create_event(owner=None, **kwargs):
        ReadingEvent = models['ReadingEvent']
        counter[0] += 1

        if owner is None:
            owner = user_factory(nickname=f'Owner {counter[0]}')

        defaults = {
            'title': f'Reading Event {counter[0]}',
            'book_name': 'The Little Prince',
            'owner_id': owner.id,
            'start_date': TODAY,
            'end_date': TODAY + timedelta(days=6),
            'status': 'enrolling',
            'approval_status': 'approved',
            'approved_at': datetime(2025, 3, 1, 9, 0),
            'assignment_policy': 'balanced',
        }
        defaults.update(kwargs)
        event = ReadingEvent(**defaults)
        db.session.add(event)
        db.session.commit()
        return event

    return _create_event


@pytest.fixture
def enrollment_factory(models, db, user_factory):
    """
    Factory for creating EventEnrollment instances.

    Enrollment timestamps increase with each call so roster order follows
    creation order.

    Usage:
        enrollment = enrollment_factory(event)
        enrollment = enrollment_factory(event, user=me, enrollment_type="observer")
    """
    counter = [0]

    def _create_enrollment(event, user=None, **kwargs):
        EventEnrollment = models['EventEnrollment']
        counter[0] += 1

        if user is None:
            user = user_factory()

        defaults = {
            'event_id': event.id,
            'user_id': user.id,
            'enrollment_type': 'participant',
            'status': 'enrolled',
            'enrolled_at': datetime(2025, 3, 1, 8, 0) + timedelta(minutes=counter[0]),
        }
        defaults.update(kwargs)
        enrollment = EventEnrollment(**defaults)
        db.session.add(enrollment)
        db.session.commit()
        return enrollment

    return _create_enrollment


@pytest.fixture
def schedule_factory(models, db):
    """
    Factory for creating single ReadingSchedule rows.

    Prefer ScheduleLedger.materialize for whole events; this is for tests
    that need one hand-made slot.
    """
    def _create_schedule(event, day_number=1, **kwargs):
        ReadingSchedule = models['ReadingSchedule']
        defaults = {
            'event_id': event.id,
            'day_number': day_number,
            'date': event.start_date + timedelta(days=day_number - 1),
            'reading_progress': f'Day {day_number}',
        }
        defaults.update(kwargs)
        schedule = ReadingSchedule(**defaults)
        db.session.add(schedule)
        db.session.commit()
        return schedule

    return _create_schedule


# =============================================================================
# Helper Fixtures
# =============================================================================

@pytest.fixture
def event_with_roster(db, event_factory, enrollment_factory, user_factory, ledger):
    """
    Build an approved event with materialized days and enrolled members.

    Usage:
        event, members = event_with_roster(members=3, days=7, assignment_policy="rotation")
    """
    def _build(members=2, days=7, **event_kwargs):
        event_kwargs.setdefault('end_date', event_kwargs.get('start_date', TODAY) + timedelta(days=days - 1))
        event = event_factory(**event_kwargs)
        users = [user_factory() for _ in range(members)]
        for user in users:
            enrollment_factory(event, user=user)
        ledger.materialize(event)
        db.session.commit()
        return event, users

    return _build


@pytest.fixture
def auth_headers():
    """Build the Authorization header for a user's API token"""
    def _headers(user):
        return {'Authorization': f'Bearer {user.api_token}'}
    return _headers
