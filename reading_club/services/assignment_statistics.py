"""
Assignment Statistics Service

Aggregates an event's schedule ledger into coverage, workload and
content-completion metrics for the owner's dashboard.

Percentages are 0 when their denominator is 0, so an event with no
schedules (or no leaders yet) reports zeros rather than failing.
"""
from typing import Iterable, List, Optional

from .backup_detector import ActivitySignals


def percentage(part: int, whole: int) -> float:
    """part / whole * 100 rounded to 2 decimals, 0 when whole is 0"""
    if not whole:
        return 0
    return round(part / whole * 100, 2)


class AssignmentStatistics:
    """
    Service for summarizing leader assignment of one event

    Workload entries list each leader with the days they lead, how many of
    those days have published content, and the reactions recorded on them.
    """

    def __init__(self, signals: Optional[ActivitySignals] = None):
        self.signals = signals or ActivitySignals()

    def compute(self, schedules: Iterable, backup_needed: int = 0) -> dict:
        """
        Aggregate schedules of one event

        Args:
            schedules: the event's ReadingSchedule rows
            backup_needed: number of slots currently flagged for backup

        Returns:
            dict: {
                "total_schedules", "assigned_schedules", "unassigned_schedules",
                "unique_leader_count", "assignment_rate", "leader_workload",
                "content_completion_rate", "backup_needed"
            }
        """
        schedules = list(schedules)
        assigned = [s for s in schedules if s.daily_leader_id is not None]
        with_content = [s for s in assigned if self.signals.has_content(s)]

        total = len(schedules)
        return {
            'total_schedules': total,
            'assigned_schedules': len(assigned),
            'unassigned_schedules': total - len(assigned),
            'unique_leader_count': len({s.daily_leader_id for s in assigned}),
            'assignment_rate': percentage(len(assigned), total),
            'leader_workload': self._workload(assigned),
            'content_completion_rate': percentage(len(with_content), len(assigned)),
            'backup_needed': backup_needed
        }

    def _workload(self, assigned: List) -> List[dict]:
        workload = {}
        for schedule in assigned:
            entry = workload.setdefault(schedule.daily_leader_id, {
                'user_id': schedule.daily_leader_id,
                'nickname': schedule.daily_leader.nickname if schedule.daily_leader else None,
                'assigned_count': 0,
                'content_completed': 0,
                'engagement_count': 0
            })
            entry['assigned_count'] += 1
            if self.signals.has_content(schedule):
                entry['content_completed'] += 1
            entry['engagement_count'] += schedule.engagement_count or 0

        # Heaviest workload first, like the workload dashboard
        return sorted(workload.values(), key=lambda e: (-e['assigned_count'], e['user_id']))
