"""
ReadingEvent model
A time-boxed reading program split into daily schedules, each led by one member
"""
from datetime import datetime, timedelta


def create_reading_event_model(db):
    """Factory function to create ReadingEvent model with db instance"""

    class ReadingEvent(db.Model):
        """
        ReadingEvent model representing one reading program instance

        The event owner (the group leader) curates enrollment, approves the
        daily leader plan and acts as the backup for any day whose leader
        goes quiet. The lifecycle fields (status, approval_status) are
        managed elsewhere; leader assignment only reads them.

        Window offsets are in days relative to a schedule's date:
        - content_days_before / content_days_after bound the leader's
          authoring window (default: the day before through the day itself)
        - content_deadline = date + content_days_after
        - engagement_deadline = date + engagement_days_after
        """
        __tablename__ = 'reading_events'

        STATUSES = ('draft', 'enrolling', 'in_progress', 'completed')
        APPROVAL_STATUSES = ('pending', 'approved', 'rejected')
        ASSIGNMENT_POLICIES = ('voluntary', 'random', 'balanced', 'rotation')

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        title = db.Column(db.String(200), nullable=False)
        book_name = db.Column(db.String(200), nullable=False)
        owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
        start_date = db.Column(db.Date, nullable=False)
        end_date = db.Column(db.Date, nullable=False)
        status = db.Column(db.String(20), nullable=False, default='draft')
        approval_status = db.Column(db.String(20), nullable=False, default='pending')
        approved_at = db.Column(db.DateTime)

        # Leader assignment configuration
        assignment_policy = db.Column(db.String(20), nullable=False, default='voluntary')
        max_leadership_count = db.Column(db.Integer, nullable=True)  # None = unbounded

        # Permission window offsets (days)
        content_days_before = db.Column(db.Integer, nullable=False, default=1)
        content_days_after = db.Column(db.Integer, nullable=False, default=0)
        engagement_days_after = db.Column(db.Integer, nullable=False, default=1)

        created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

        __table_args__ = (
            db.Index('idx_reading_events_status', 'status', 'approval_status'),
            db.Index('idx_reading_events_owner', 'owner_id'),
            db.CheckConstraint('end_date >= start_date', name='ck_reading_events_date_range'),
        )

        # Relationships
        owner = db.relationship('User', foreign_keys=[owner_id], lazy=True)

        @property
        def is_approved(self):
            return self.approval_status == 'approved'

        @property
        def is_in_progress(self):
            return self.status == 'in_progress'

        @property
        def has_schedules(self):
            return len(self.schedules) > 0

        @property
        def days_count(self):
            """Calendar days in the event range, rest days included"""
            if not self.start_date or not self.end_date:
                return 0
            return (self.end_date - self.start_date).days + 1

        def is_event_owner(self, user):
            """
            Check whether a user (or user id) owns this event

            Args:
                user: User instance, user id, or None

            Returns:
                bool: True only for the owning user
            """
            if user is None:
                return False
            user_id = user if isinstance(user, int) else user.id
            return self.owner_id == user_id

        def approve(self):
            """Mark the event approved (the approval workflow itself lives elsewhere)"""
            self.approval_status = 'approved'
            self.approved_at = datetime.utcnow()

        def content_deadline_for(self, schedule_date):
            return schedule_date + timedelta(days=self.content_days_after or 0)

        def engagement_deadline_for(self, schedule_date):
            return schedule_date + timedelta(days=self.engagement_days_after or 0)

        def __repr__(self):
            return f'<ReadingEvent {self.id}: {self.title}>'

    return ReadingEvent
