"""
Participant Roster Service
Resolves which enrolled members may be considered for daily leadership
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from .assignment_types import Participant


class RosterProvider:
    """
    Builds the leader roster for an event

    Roster = enrollments of type 'participant' with status 'enrolled'
    whose user account is active. Observers and cancelled enrollments
    never lead. Order is enrollment order, which is also the tie-break
    order for the balanced and rotation policies.
    """

    def __init__(self, db_session: Session, models: dict):
        self.db = db_session
        self.EventEnrollment = models['EventEnrollment']
        self.User = models['User']

    def _roster_query(self, event_id: int):
        Enrollment = self.EventEnrollment
        return self.db.query(Enrollment).join(
            self.User, Enrollment.user_id == self.User.id
        ).filter(
            Enrollment.event_id == event_id,
            Enrollment.enrollment_type == 'participant',
            Enrollment.status == 'enrolled',
            self.User.is_active.is_(True)
        ).order_by(Enrollment.enrolled_at, Enrollment.id)

    def participants(self, event, leadership_counts: Optional[dict] = None) -> List[Participant]:
        """
        Get roster entries for an event

        Args:
            event: ReadingEvent
            leadership_counts: optional user_id -> days led, from ScheduleLedger

        Returns:
            List of Participant in roster order
        """
        counts = leadership_counts or {}
        return [
            Participant(
                user_id=enrollment.user.id,
                nickname=enrollment.user.nickname,
                avatar_url=enrollment.user.avatar_url,
                leadership_count=counts.get(enrollment.user.id, 0)
            )
            for enrollment in self._roster_query(event.id).all()
        ]

    def roster_ids(self, event) -> List[int]:
        return [enrollment.user_id for enrollment in self._roster_query(event.id).all()]

    def is_roster_member(self, event, user) -> bool:
        if user is None:
            return False
        return self._roster_query(event.id).filter(
            self.EventEnrollment.user_id == user.id
        ).first() is not None

    def find_enrollment(self, event, user):
        """Any enrollment of the user in the event, observers included"""
        if user is None:
            return None
        return self.db.query(self.EventEnrollment).filter_by(
            event_id=event.id,
            user_id=user.id
        ).first()
