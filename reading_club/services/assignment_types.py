"""
Data classes and enums shared by the leader assignment services
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple

from reading_club.error_handlers.exceptions import UnsupportedPolicyError


class AssignmentPolicy(str, Enum):
    """Rule sets for bulk daily-leader allocation"""
    RANDOM = "random"
    BALANCED = "balanced"
    ROTATION = "rotation"
    VOLUNTARY = "voluntary"

    @classmethod
    def parse(cls, value) -> "AssignmentPolicy":
        """
        Convert a policy string (or enum member) to an AssignmentPolicy

        Raises:
            UnsupportedPolicyError: for anything outside the four policies
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedPolicyError(
                f"Unsupported assignment policy: {value}",
                details={'supported_policies': [p.value for p in cls]}
            )


class BackupUrgency(str, Enum):
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    UPCOMING = "upcoming"


@dataclass(frozen=True)
class SlotState:
    """Snapshot of one schedule as seen by the allocation engine"""
    schedule_id: int
    day_number: int
    leader_id: Optional[int] = None


@dataclass
class Participant:
    """Roster entry: an enrolled, non-observer, active member"""
    user_id: int
    nickname: str
    avatar_url: Optional[str] = None
    leadership_count: int = 0

    def to_dict(self):
        return {
            'id': self.user_id,
            'nickname': self.nickname,
            'avatar_url': self.avatar_url,
            'leadership_count': self.leadership_count,
        }


@dataclass
class AllocationOptions:
    """
    Caller-supplied knobs for a bulk allocation run

    max_leadership_count: per-participant cap for this event (None = unbounded)
    volunteer_assignments: schedule_id -> user_id pairs for the voluntary policy
    reset: reassign every slot instead of skipping already-led ones
    """
    max_leadership_count: Optional[int] = None
    volunteer_assignments: Dict[int, int] = field(default_factory=dict)
    reset: bool = False


@dataclass
class AssignmentResult:
    """Outcome of one allocation run; applied by writing leaders back to the ledger"""
    policy: AssignmentPolicy
    assignments: Dict[int, Optional[int]] = field(default_factory=dict)
    changes: List[Tuple[int, Optional[int], Optional[int]]] = field(default_factory=list)
    kept_count: int = 0
    unfilled: List[int] = field(default_factory=list)
    conflicts: List[int] = field(default_factory=list)
    # Slots re-picked under reset that landed on their existing leader
    reconfirmed: List[int] = field(default_factory=list)

    @property
    def assigned_count(self) -> int:
        """Slots that received a leader in this run"""
        written = sum(
            1 for schedule_id, _old, new in self.changes
            if new is not None and schedule_id not in self.conflicts
        )
        return written + len(self.reconfirmed)

    @property
    def total_assigned(self) -> int:
        return sum(1 for leader_id in self.assignments.values() if leader_id is not None)

    @property
    def unfilled_count(self) -> int:
        return len(self.unfilled)

    def to_summary(self):
        return {
            'assignment_policy': self.policy.value,
            'assigned_count': self.assigned_count,
            'total_assigned': self.total_assigned,
            'kept_count': self.kept_count,
            'unfilled_count': self.unfilled_count,
            'conflict_count': len(self.conflicts),
        }


@dataclass
class PermissionWindow:
    """Inclusive date interval in which a non-owner leader may act on a slot"""
    opens_on: date
    closes_on: date

    def contains(self, day: date) -> bool:
        return self.opens_on <= day <= self.closes_on

    def has_closed(self, day: date) -> bool:
        return day > self.closes_on

    def to_dict(self):
        return {
            'opens_on': self.opens_on.isoformat(),
            'closes_on': self.closes_on.isoformat(),
        }


@dataclass
class BackupCandidate:
    """Derived view of a schedule that may need the owner to step in"""
    schedule_id: int
    day_number: int
    date: date
    leader_id: Optional[int]
    needs_backup: bool
    missing_content: bool
    missing_engagement: bool
    content_deadline: date
    engagement_deadline: date
    days_until_deadline: int
    leader: Optional[dict] = None
    reading_progress: str = ''
    priority: int = 0
    urgency: BackupUrgency = BackupUrgency.UPCOMING

    @property
    def is_unassigned(self) -> bool:
        return self.leader_id is None

    def to_dict(self):
        return {
            'schedule': {
                'id': self.schedule_id,
                'day_number': self.day_number,
                'date': self.date.isoformat(),
                'reading_progress': self.reading_progress,
            },
            'leader': self.leader,
            'needs_backup': self.needs_backup,
            'missing_content': self.missing_content,
            'missing_engagement': self.missing_engagement,
            'content_deadline': self.content_deadline.isoformat(),
            'engagement_deadline': self.engagement_deadline.isoformat(),
            'days_until_deadline': self.days_until_deadline,
            'backup_priority': self.priority,
            'urgency': self.urgency.value,
        }
