"""
EventEnrollment model
Links users to the reading events they joined
"""
from datetime import datetime


def create_enrollment_model(db):
    """Factory function to create EventEnrollment model with db instance"""

    class EventEnrollment(db.Model):
        """
        EventEnrollment model

        Observers follow along without taking part, so they are never
        considered for leadership. Only 'enrolled' participants are on the
        leader roster.
        """
        __tablename__ = 'event_enrollments'

        ENROLLMENT_TYPES = ('participant', 'observer')
        STATUSES = ('enrolled', 'completed', 'cancelled')

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        event_id = db.Column(db.Integer, db.ForeignKey('reading_events.id'), nullable=False)
        user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
        enrollment_type = db.Column(db.String(20), nullable=False, default='participant')
        status = db.Column(db.String(20), nullable=False, default='enrolled')
        enrolled_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

        __table_args__ = (
            db.UniqueConstraint('event_id', 'user_id', name='uq_event_enrollments_event_user'),
            db.Index('idx_event_enrollments_status', 'event_id', 'status'),
        )

        # Relationships
        user = db.relationship('User', backref='enrollments', lazy=True)
        event = db.relationship('ReadingEvent', backref='enrollments', lazy=True)

        @property
        def is_roster_eligible(self):
            """Enrolled, non-observer, with an active account"""
            return (
                self.enrollment_type == 'participant'
                and self.status == 'enrolled'
                and self.user is not None
                and self.user.is_active
            )

        def __repr__(self):
            return f'<EventEnrollment event={self.event_id} user={self.user_id} {self.status}>'

    return EventEnrollment
