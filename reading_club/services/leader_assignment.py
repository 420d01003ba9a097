"""
Leader Assignment Service
Bulk allocation, claims, reassignment, backup fill and read-only views
for daily leaders of a reading event

Usage:
    service = LeaderAssignmentService(db.session, models, clock=clock)
    result = service.auto_assign(event, policy='rotation')
    service.claim(event, user, schedule)
    db.session.commit()

The service flushes but never commits; callers own the transaction.
"""
import logging
import random
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from reading_club.error_handlers.exceptions import (
    AlreadyAssignedError,
    AuthorizationException,
    BackupNotNeededError,
    CapReachedError,
    NotEligibleError,
    PreconditionError,
    ResourceNotFoundException,
)
from reading_club.utils.clock import SystemClock
from .assignment_statistics import AssignmentStatistics
from .assignment_types import (
    AllocationOptions,
    AssignmentPolicy,
    AssignmentResult,
    BackupCandidate,
)
from .backup_detector import ActivitySignals, BackupDetector
from .leader_allocation import allocate
from .permission_window import PermissionPolicy
from .roster import RosterProvider
from .schedule_ledger import ScheduleLedger

logger = logging.getLogger(__name__)


class LeaderAssignmentService:
    """
    Manages daily leader assignment for reading events

    Handles:
    - Bulk allocation under the random/balanced/rotation/voluntary policies
    - Self-claims in voluntary events
    - Owner reassignment and backup fill
    - Statistics, backup candidates and permission checks
    """

    def __init__(self, db_session: Session, models: dict, clock=None,
                 rng: Optional[random.Random] = None, settings: Optional[dict] = None,
                 signals: Optional[ActivitySignals] = None):
        """
        Initialize LeaderAssignmentService

        Args:
            db_session: SQLAlchemy database session
            models: Dictionary of model classes from the model registry
            clock: object with today(); defaults to the system clock
            rng: random source for the random policy
            settings: app config mapping (DEFAULT_MAX_LEADERSHIP_COUNT,
                BACKUP_LOOKAHEAD_DAYS)
            signals: content/engagement signal provider
        """
        self.db = db_session
        self.models = models
        self.LeaderAssignmentLog = models['LeaderAssignmentLog']
        self.User = models['User']
        self.settings = settings or {}
        self.clock = clock or SystemClock()
        self.rng = rng or random.Random()

        self.ledger = ScheduleLedger(db_session, models)
        self.roster = RosterProvider(db_session, models)
        self.detector = BackupDetector(self.clock, signals)
        self.statistics_service = AssignmentStatistics(signals)
        self.permissions = PermissionPolicy(self.clock)

    # ------------------------------------------------------------------
    # Bulk allocation
    # ------------------------------------------------------------------

    def resolve_cap(self, event, override: Optional[int] = None) -> Optional[int]:
        """Cap precedence: explicit override, event setting, app default"""
        if override is not None:
            return override
        if event.max_leadership_count is not None:
            return event.max_leadership_count
        return self.settings.get('DEFAULT_MAX_LEADERSHIP_COUNT')

    def auto_assign(self, event, policy=None, max_leadership_count: Optional[int] = None,
                    volunteer_assignments: Optional[Dict[int, int]] = None,
                    reset: bool = False, actor=None) -> AssignmentResult:
        """
        Allocate leaders to every open slot of an event

        Slots that already have a leader are kept unless reset is True.
        A slot whose leader changed between read and write is skipped and
        reported as a conflict; the rest of the run still applies.

        Args:
            event: ReadingEvent to allocate
            policy: policy name; defaults to the event's assignment_policy
            max_leadership_count: cap override for this run
            volunteer_assignments: schedule_id -> user_id (voluntary policy)
            reset: reassign already-led slots too
            actor: user who triggered the run, for the audit log

        Returns:
            AssignmentResult

        Raises:
            PreconditionError: event not approved or without schedules
            UnsupportedPolicyError: unknown policy
        """
        if not event.is_approved:
            raise PreconditionError(f"Event {event.id} is not approved")
        if not event.has_schedules:
            raise PreconditionError(f"Event {event.id} has no schedules")

        policy = AssignmentPolicy.parse(policy or event.assignment_policy)
        roster_ids = self.roster.roster_ids(event)
        if not roster_ids:
            logger.warning(f"Event {event.id} has no eligible participants; all open slots stay unassigned")

        options = AllocationOptions(
            max_leadership_count=self.resolve_cap(event, max_leadership_count),
            volunteer_assignments=volunteer_assignments or {},
            reset=reset
        )
        result = allocate(self.ledger.slot_states(event.id), roster_ids, policy, options, self.rng)

        for schedule_id, old_leader_id, new_leader_id in result.changes:
            if not self.ledger.compare_and_set_leader(schedule_id, old_leader_id, new_leader_id):
                result.conflicts.append(schedule_id)
                continue
            self._log(event, schedule_id, 'auto_assign', actor, old_leader_id, new_leader_id,
                      note=f'policy={policy.value}')

        self.db.flush()
        logger.info(
            f"Auto-assigned event {event.id} with policy={policy.value}: "
            f"{result.assigned_count} assigned, {result.kept_count} kept, "
            f"{result.unfilled_count} unfilled, {len(result.conflicts)} conflicts"
        )
        return result

    def open_event(self, event, actor, rest_dates=(), progress_labels=None) -> dict:
        """
        Prepare an approved event for its first day

        Materializes the schedules when missing and runs the initial bulk
        allocation unless the event is voluntary (members claim days
        themselves then).

        Raises:
            AuthorizationException: actor is not the event owner
            PreconditionError: event not approved
        """
        if not event.is_event_owner(actor):
            raise AuthorizationException('Only the event owner can open the event')
        if not event.is_approved:
            raise PreconditionError(f"Event {event.id} is not approved")

        created = []
        if not event.has_schedules:
            created = self.ledger.materialize(event, rest_dates, progress_labels)

        summary = {'schedules_created': len(created), 'allocation': None}
        if AssignmentPolicy.parse(event.assignment_policy) != AssignmentPolicy.VOLUNTARY:
            summary['allocation'] = self.auto_assign(event, actor=actor).to_summary()
        return summary

    # ------------------------------------------------------------------
    # Single-slot mutations
    # ------------------------------------------------------------------

    def claim_rejection(self, event, user, schedule):
        """
        Explain why user cannot claim schedule right now

        Returns:
            The LeaderAssignmentError a claim would raise, or None if the
            claim would be accepted
        """
        if AssignmentPolicy.parse(event.assignment_policy) != AssignmentPolicy.VOLUNTARY:
            return NotEligibleError('This event does not accept self-claimed leadership')
        if not self.roster.is_roster_member(event, user):
            return NotEligibleError('Enroll in the event as a participant before claiming a day')
        if schedule.daily_leader_id is not None:
            return AlreadyAssignedError(
                f'Day {schedule.day_number} already has a leader',
                details={'schedule_id': schedule.id}
            )
        if self.permissions.window_closed(event, schedule):
            return NotEligibleError(f'Day {schedule.day_number} can no longer be claimed')

        cap = self.resolve_cap(event)
        if cap is not None and self.ledger.leadership_count(event.id, user.id) >= cap:
            return CapReachedError(
                f'Leadership limit of {cap} days reached',
                details={'max_leadership_count': cap}
            )
        return None

    def claim(self, event, user, schedule) -> dict:
        """
        Self-claim an empty day in a voluntary event

        Raises:
            NotEligibleError: wrong policy, not on the roster, or window closed
            AlreadyAssignedError: slot taken, including by a concurrent claim
            CapReachedError: user already leads the maximum number of days
        """
        self._ensure_schedule_of(event, schedule)
        rejection = self.claim_rejection(event, user, schedule)
        if rejection is not None:
            raise rejection

        if not self.ledger.compare_and_set_leader(schedule.id, None, user.id):
            raise AlreadyAssignedError(
                f'Day {schedule.day_number} was claimed by someone else',
                details={'schedule_id': schedule.id}
            )

        self._log(event, schedule.id, 'claim', user, None, user.id)
        self.db.flush()
        logger.info(f"User {user.id} claimed day {schedule.day_number} of event {event.id}")
        return self._schedule_view(schedule)

    def reassign(self, event, actor, schedule, new_leader) -> dict:
        """
        Owner replaces the leader of a day

        The owner's choice is authoritative: the only check on new_leader
        is roster membership.

        Returns:
            dict with the schedule plus old_leader and new_leader summaries

        Raises:
            NotEligibleError: actor is not the owner, or new_leader not on roster
            AlreadyAssignedError: the slot changed since it was read
        """
        self._ensure_schedule_of(event, schedule)
        if not event.is_event_owner(actor):
            raise NotEligibleError('Only the event owner can reassign leaders')
        if not self.roster.is_roster_member(event, new_leader):
            raise NotEligibleError('The new leader must be an enrolled participant')

        old_leader_id = schedule.daily_leader_id
        old_leader = schedule.daily_leader
        if not self.ledger.compare_and_set_leader(schedule.id, old_leader_id, new_leader.id):
            raise AlreadyAssignedError(
                f'Day {schedule.day_number} changed while reassigning; reload and retry',
                details={'schedule_id': schedule.id}
            )

        self._log(event, schedule.id, 'reassign', actor, old_leader_id, new_leader.id)
        self.db.flush()
        logger.info(
            f"Reassigned day {schedule.day_number} of event {event.id}: {old_leader_id} -> {new_leader.id}"
        )
        return {
            'schedule': self._schedule_view(schedule),
            'old_leader': old_leader.to_summary() if old_leader else None,
            'new_leader': new_leader.to_summary()
        }

    def backup_assign(self, event, actor, schedule, backup_leader) -> dict:
        """
        Owner fills a failing day with a backup leader

        Raises:
            NotEligibleError: actor is not the owner, or backup not on roster
            BackupNotNeededError: the day has a leader with published content
            AlreadyAssignedError: the slot changed since it was read
        """
        self._ensure_schedule_of(event, schedule)
        if not event.is_event_owner(actor):
            raise NotEligibleError('Only the event owner can assign a backup leader')
        if not self.detector.needs_backup(schedule):
            raise BackupNotNeededError(
                f'Day {schedule.day_number} does not need a backup',
                details={'schedule_id': schedule.id}
            )
        if not self.roster.is_roster_member(event, backup_leader):
            raise NotEligibleError('The backup leader must be an enrolled participant')

        old_leader_id = schedule.daily_leader_id
        if not self.ledger.compare_and_set_leader(schedule.id, old_leader_id, backup_leader.id):
            raise AlreadyAssignedError(
                f'Day {schedule.day_number} changed while assigning a backup; reload and retry',
                details={'schedule_id': schedule.id}
            )

        self._log(event, schedule.id, 'backup', actor, old_leader_id, backup_leader.id)
        self.db.flush()
        logger.info(
            f"Backup for day {schedule.day_number} of event {event.id}: {old_leader_id} -> {backup_leader.id}"
        )
        return {
            'schedule': self._schedule_view(schedule),
            'backup_leader': backup_leader.to_summary()
        }

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def participants(self, event) -> List[dict]:
        """Roster members with the number of days each currently leads"""
        counts = self.ledger.leadership_counts(event.id)
        return [p.to_dict() for p in self.roster.participants(event, counts)]

    def backup_needed(self, event, lookahead_days: Optional[int] = None) -> List[BackupCandidate]:
        if lookahead_days is None:
            lookahead_days = self.settings.get('BACKUP_LOOKAHEAD_DAYS')
        return self.detector.candidates(event, self.ledger.schedules_for(event.id), lookahead_days)

    def statistics(self, event) -> dict:
        schedules = self.ledger.schedules_for(event.id)
        flagged = sum(1 for s in schedules if self.detector.needs_backup(s))
        return self.statistics_service.compute(schedules, backup_needed=flagged)

    def check_permissions(self, event, actor, schedule=None) -> dict:
        """
        Capability flags of actor for the event (and optionally one day)

        Returns:
            dict with can_view, can_claim, can_be_assigned, can_backup,
            leadership counts, the actor's led days and, for a given
            schedule, its permission window
        """
        if actor is None:
            return {'can_view': False, 'message': 'User not found'}

        is_owner = event.is_event_owner(actor)
        enrollment = self.roster.find_enrollment(event, actor)
        if not is_owner and (enrollment is None or enrollment.status == 'cancelled'):
            return {'can_view': False, 'message': 'User is not enrolled in this event'}

        if schedule is not None:
            self._ensure_schedule_of(event, schedule)

        leadership_count = self.ledger.leadership_count(event.id, actor.id)
        permissions = {
            'can_view': True,
            'is_owner': is_owner,
            'can_claim': schedule is not None and self.claim_rejection(event, actor, schedule) is None,
            'can_be_assigned': self.roster.is_roster_member(event, actor) and event.is_in_progress,
            'can_backup': is_owner,
            'leadership_count': leadership_count,
            'max_leadership_count': self.resolve_cap(event),
            'current_schedules': [
                {
                    'id': s.id,
                    'day_number': s.day_number,
                    'date': s.date.isoformat(),
                    'has_content': self.detector.signals.has_content(s),
                    'check_in_count': s.check_in_count or 0,
                    'engagement_count': s.engagement_count or 0
                }
                for s in self.ledger.schedules_for(event.id)
                if s.daily_leader_id == actor.id
            ],
            'permission_window': {}
        }

        if schedule is not None:
            window = self.permissions.window_for(event, schedule)
            permissions['permission_window'] = {
                **window.to_dict(),
                'can_author': self.permissions.can_author(event, schedule, actor),
                'content_deadline': event.content_deadline_for(schedule.date).isoformat(),
                'engagement_deadline': event.engagement_deadline_for(schedule.date).isoformat()
            }
        return permissions

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _ensure_schedule_of(self, event, schedule):
        if schedule is None or schedule.event_id != event.id:
            raise ResourceNotFoundException(f'Schedule not found in event {event.id}')

    def _schedule_view(self, schedule) -> dict:
        # Leader changed through a bulk UPDATE; reload the relationship too
        self.db.expire(schedule)
        return schedule.to_summary()

    def _log(self, event, schedule_id, action, actor, old_leader_id, new_leader_id, note=None):
        self.db.add(self.LeaderAssignmentLog(
            event_id=event.id,
            schedule_id=schedule_id,
            action=action,
            actor_id=actor.id if actor is not None else None,
            old_leader_id=old_leader_id,
            new_leader_id=new_leader_id,
            note=note
        ))
