"""
Business logic services for the Reading Club backend
"""
from .assignment_types import (
    AllocationOptions,
    AssignmentPolicy,
    AssignmentResult,
    BackupCandidate,
    BackupUrgency,
    Participant,
    PermissionWindow,
    SlotState,
)
from .leader_allocation import allocate
from .schedule_ledger import ScheduleLedger
from .roster import RosterProvider
from .backup_detector import ActivitySignals, BackupDetector
from .assignment_statistics import AssignmentStatistics
from .permission_window import PermissionPolicy, authoring_window
from .leader_assignment import LeaderAssignmentService

__all__ = [
    'AllocationOptions',
    'AssignmentPolicy',
    'AssignmentResult',
    'BackupCandidate',
    'BackupUrgency',
    'Participant',
    'PermissionWindow',
    'SlotState',
    'allocate',
    'ScheduleLedger',
    'RosterProvider',
    'ActivitySignals',
    'BackupDetector',
    'AssignmentStatistics',
    'PermissionPolicy',
    'authoring_window',
    'LeaderAssignmentService',
]
