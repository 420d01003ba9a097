"""
Leader assignment audit log
Records every change to a schedule's daily leader
"""
from datetime import datetime


def create_assignment_log_model(db):
    """Factory function to create LeaderAssignmentLog model with db instance"""

    class LeaderAssignmentLog(db.Model):
        """
        Audit row for a single leader mutation

        action is one of 'auto_assign', 'claim', 'reassign', 'backup'.
        old_leader_id is None when the slot was empty before the change.
        """
        __tablename__ = 'leader_assignment_logs'

        ACTIONS = ('auto_assign', 'claim', 'reassign', 'backup')

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        event_id = db.Column(db.Integer, db.ForeignKey('reading_events.id'), nullable=False)
        schedule_id = db.Column(db.Integer, db.ForeignKey('reading_schedules.id'), nullable=False)
        action = db.Column(db.String(20), nullable=False)
        actor_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)  # None for system runs
        old_leader_id = db.Column(db.Integer, nullable=True)
        new_leader_id = db.Column(db.Integer, nullable=True)
        note = db.Column(db.String(200))
        created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

        __table_args__ = (
            db.Index('idx_leader_logs_event', 'event_id', 'created_at'),
            db.Index('idx_leader_logs_schedule', 'schedule_id'),
        )

        def to_dict(self):
            return {
                'id': self.id,
                'event_id': self.event_id,
                'schedule_id': self.schedule_id,
                'action': self.action,
                'actor_id': self.actor_id,
                'old_leader_id': self.old_leader_id,
                'new_leader_id': self.new_leader_id,
                'note': self.note,
                'created_at': self.created_at.isoformat() if self.created_at else None
            }

        def __repr__(self):
            return f'<LeaderAssignmentLog {self.action} schedule={self.schedule_id}: {self.old_leader_id} -> {self.new_leader_id}>'

    return LeaderAssignmentLog
