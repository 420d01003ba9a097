"""
Unit tests for database models.

Tests cover:
- Model defaults and computed properties
- Constraints on events, enrollments and schedules
- Relationships between models
"""
from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import TODAY


class TestUserModel:

    @pytest.mark.unit
    def test_user_summary(self, user_factory):
        user = user_factory(nickname='Alice', avatar_url=None)

        assert user.is_active is True
        assert user.to_summary() == {'id': user.id, 'nickname': 'Alice', 'avatar_url': None}

    @pytest.mark.unit
    def test_api_token_is_unique(self, db, user_factory):
        user_factory(api_token='shared')

        with pytest.raises(IntegrityError):
            user_factory(api_token='shared')
        db.session.rollback()


class TestReadingEventModel:

    @pytest.mark.unit
    def test_defaults(self, db, models, user_factory):
        ReadingEvent = models['ReadingEvent']
        owner = user_factory()
        event = ReadingEvent(title='Spring', book_name='Walden', owner_id=owner.id,
                             start_date=TODAY, end_date=TODAY + timedelta(days=2))
        db.session.add(event)
        db.session.commit()

        assert event.status == 'draft'
        assert event.approval_status == 'pending'
        assert event.assignment_policy == 'voluntary'
        assert event.max_leadership_count is None
        assert (event.content_days_before, event.content_days_after, event.engagement_days_after) == (1, 0, 1)
        assert event.is_approved is False
        assert event.has_schedules is False
        assert event.days_count == 3

    @pytest.mark.unit
    def test_end_before_start_is_rejected(self, db, event_factory):
        with pytest.raises(IntegrityError):
            event_factory(start_date=TODAY, end_date=TODAY - timedelta(days=1))
        db.session.rollback()

    @pytest.mark.unit
    def test_owner_check_accepts_user_or_id(self, event_factory, user_factory):
        event = event_factory()
        stranger = user_factory()

        assert event.is_event_owner(event.owner) is True
        assert event.is_event_owner(event.owner_id) is True
        assert event.is_event_owner(stranger) is False
        assert event.is_event_owner(None) is False

    @pytest.mark.unit
    def test_approve(self, db, event_factory):
        event = event_factory(approval_status='pending', approved_at=None)
        event.approve()
        db.session.commit()

        assert event.is_approved is True
        assert event.approved_at is not None

    @pytest.mark.unit
    def test_deadlines_follow_offsets(self, event_factory):
        event = event_factory(content_days_after=1, engagement_days_after=2)

        assert event.content_deadline_for(TODAY) == TODAY + timedelta(days=1)
        assert event.engagement_deadline_for(TODAY) == TODAY + timedelta(days=2)


class TestEnrollmentModel:

    @pytest.mark.unit
    def test_one_enrollment_per_user_and_event(self, db, event_factory, user_factory, enrollment_factory):
        event = event_factory()
        user = user_factory()
        enrollment_factory(event, user=user)

        with pytest.raises(IntegrityError):
            enrollment_factory(event, user=user)
        db.session.rollback()

    @pytest.mark.unit
    def test_roster_eligibility(self, event_factory, enrollment_factory, user_factory):
        event = event_factory()

        assert enrollment_factory(event).is_roster_eligible is True
        assert enrollment_factory(event, enrollment_type='observer').is_roster_eligible is False
        assert enrollment_factory(event, status='cancelled').is_roster_eligible is False
        assert enrollment_factory(event, user=user_factory(is_active=False)).is_roster_eligible is False


class TestReadingScheduleModel:

    @pytest.mark.unit
    def test_day_number_unique_per_event(self, db, event_factory, schedule_factory):
        event = event_factory()
        schedule_factory(event, day_number=1)

        with pytest.raises(IntegrityError):
            schedule_factory(event, day_number=1)
        db.session.rollback()

    @pytest.mark.unit
    def test_summary(self, event_factory, user_factory, schedule_factory):
        event = event_factory()
        leader = user_factory(nickname='Lead')
        schedule = schedule_factory(event, day_number=2, daily_leader_id=leader.id, engagement_count=3)

        assert schedule.to_summary() == {
            'id': schedule.id,
            'day_number': 2,
            'date': (TODAY + timedelta(days=1)).isoformat(),
            'reading_progress': 'Day 2',
            'leader': leader.to_summary(),
        }

    @pytest.mark.unit
    def test_event_schedules_are_ordered(self, event_factory, schedule_factory):
        event = event_factory()
        schedule_factory(event, day_number=3)
        schedule_factory(event, day_number=1)
        schedule_factory(event, day_number=2)

        assert [s.day_number for s in event.schedules] == [1, 2, 3]


class TestLeaderAssignmentLogModel:

    @pytest.mark.unit
    def test_to_dict(self, db, models, event_factory, user_factory, schedule_factory):
        LeaderAssignmentLog = models['LeaderAssignmentLog']
        event = event_factory()
        schedule = schedule_factory(event)
        leader = user_factory()
        log = LeaderAssignmentLog(event_id=event.id, schedule_id=schedule.id, action='backup',
                                  actor_id=event.owner_id, old_leader_id=None, new_leader_id=leader.id)
        db.session.add(log)
        db.session.commit()

        data = log.to_dict()
        assert data['action'] == 'backup'
        assert data['actor_id'] == event.owner_id
        assert data['new_leader_id'] == leader.id
        assert data['created_at'] is not None
