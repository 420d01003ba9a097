"""
Backup Detector

Flags schedule slots whose daily leader is missing or has gone quiet, so
the event owner can step in. Read-only: recomputed on every query from
the schedules and their activity signals.

A slot needs backup when it has no leader, or has a leader but no
published content. Ranking puts the nearest (or already passed) deadline
first, which is the content deadline or, for a slot also missing
engagement, whichever of its two deadlines comes sooner. At equal
distance, slots with no leader at all come before slots whose leader is
dormant.
"""
from datetime import timedelta
from typing import Iterable, List, Optional

from .assignment_types import BackupCandidate, BackupUrgency


class ActivitySignals:
    """
    Answers the per-schedule activity questions the detector needs

    Reads the signal columns kept on the schedule row. Swap in another
    implementation when content or reactions are tracked elsewhere.
    """

    def has_content(self, schedule) -> bool:
        return schedule.content_published_at is not None

    def has_engagement(self, schedule) -> bool:
        return (schedule.engagement_count or 0) > 0

    def has_check_ins(self, schedule) -> bool:
        return (schedule.check_in_count or 0) > 0


class BackupDetector:
    """Builds ranked BackupCandidate views for an event's schedules"""

    DUE_SOON_DAYS = 1

    def __init__(self, clock, signals: Optional[ActivitySignals] = None):
        self.clock = clock
        self.signals = signals or ActivitySignals()

    def needs_backup(self, schedule) -> bool:
        if schedule.daily_leader_id is None:
            return True
        return not self.signals.has_content(schedule)

    def evaluate(self, event, schedule) -> BackupCandidate:
        """Build the candidate view for one schedule (flagged or not)"""
        today = self.clock.today()
        content_deadline = event.content_deadline_for(schedule.date)
        engagement_deadline = event.engagement_deadline_for(schedule.date)
        has_leader = schedule.daily_leader_id is not None

        missing_content = has_leader and not self.signals.has_content(schedule)
        missing_engagement = (
            schedule.date <= today
            and self.signals.has_check_ins(schedule)
            and not self.signals.has_engagement(schedule)
        )
        # A missing engagement reply can fall due before the content does
        deadline = min(content_deadline, engagement_deadline) if missing_engagement else content_deadline
        days_until = (deadline - today).days

        return BackupCandidate(
            schedule_id=schedule.id,
            day_number=schedule.day_number,
            date=schedule.date,
            leader_id=schedule.daily_leader_id,
            leader=schedule.daily_leader.to_summary() if schedule.daily_leader else None,
            reading_progress=schedule.reading_progress or '',
            needs_backup=self.needs_backup(schedule),
            missing_content=missing_content,
            missing_engagement=missing_engagement,
            content_deadline=content_deadline,
            engagement_deadline=engagement_deadline,
            days_until_deadline=days_until,
            urgency=self._urgency(days_until)
        )

    def candidates(self, event, schedules: Iterable, lookahead_days: Optional[int] = None) -> List[BackupCandidate]:
        """
        Get ranked schedules that need backup

        Args:
            event: ReadingEvent the schedules belong to
            schedules: the event's schedules
            lookahead_days: only consider slots dated within this many days
                from today (None = all slots)

        Returns:
            Flagged candidates sorted by priority, priority 1 = most urgent
        """
        horizon = None
        if lookahead_days is not None:
            horizon = self.clock.today() + timedelta(days=lookahead_days)

        flagged = []
        for schedule in schedules:
            if horizon is not None and schedule.date > horizon:
                continue
            if not self.needs_backup(schedule):
                continue
            flagged.append(self.evaluate(event, schedule))

        flagged.sort(key=lambda c: (c.days_until_deadline, 0 if c.is_unassigned else 1, c.day_number))
        for rank, candidate in enumerate(flagged, start=1):
            candidate.priority = rank
        return flagged

    def _urgency(self, days_until: int) -> BackupUrgency:
        if days_until < 0:
            return BackupUrgency.OVERDUE
        if days_until <= self.DUE_SOON_DAYS:
            return BackupUrgency.DUE_SOON
        return BackupUrgency.UPCOMING
