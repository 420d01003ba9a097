"""
ReadingSchedule model - one day of a reading event and its daily leader
"""
from datetime import datetime


def create_reading_schedule_model(db):
    """Factory function to create ReadingSchedule model with db instance"""

    class ReadingSchedule(db.Model):
        """
        ReadingSchedule model representing one day-slot of an event

        daily_leader_id is a plain reference; the leader's identity is
        owned by the users table. Writes to it go through
        ScheduleLedger.compare_and_set_leader so concurrent claims cannot
        both win.

        Activity signals:
        - content_published_at: set when the leader's material is published
        - check_in_count / engagement_count: member check-ins and the
          reactions (flowers) given on the day
        """
        __tablename__ = 'reading_schedules'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        event_id = db.Column(db.Integer, db.ForeignKey('reading_events.id'), nullable=False)
        day_number = db.Column(db.Integer, nullable=False)
        date = db.Column(db.Date, nullable=False)
        reading_progress = db.Column(db.String(200), nullable=False, default='')
        daily_leader_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)

        content_published_at = db.Column(db.DateTime, nullable=True)
        check_in_count = db.Column(db.Integer, nullable=False, default=0)
        engagement_count = db.Column(db.Integer, nullable=False, default=0)

        created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
        updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

        __table_args__ = (
            db.UniqueConstraint('event_id', 'day_number', name='uq_reading_schedules_event_day'),
            db.Index('idx_reading_schedules_date', 'date'),
            db.Index('idx_reading_schedules_leader', 'daily_leader_id'),
        )

        # Relationships
        daily_leader = db.relationship('User', foreign_keys=[daily_leader_id], lazy=True)
        event = db.relationship('ReadingEvent', backref=db.backref(
            'schedules', order_by='ReadingSchedule.day_number', lazy=True
        ), lazy=True)

        def to_summary(self):
            return {
                'id': self.id,
                'day_number': self.day_number,
                'date': self.date.isoformat() if self.date else None,
                'reading_progress': self.reading_progress,
                'leader': self.daily_leader.to_summary() if self.daily_leader else None
            }

        def __repr__(self):
            return f'<ReadingSchedule {self.id}: event {self.event_id} day {self.day_number} -> {self.daily_leader_id}>'

    return ReadingSchedule
