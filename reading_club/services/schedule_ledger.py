"""
Schedule Ledger Service
Ordered day-slots of an event and the only place that writes daily leaders
"""
import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from reading_club.error_handlers.exceptions import PreconditionError
from .assignment_types import SlotState

logger = logging.getLogger(__name__)


class ScheduleLedger:
    """
    Reads and writes the per-event schedule slots

    Every leader write is a compare-and-swap: the UPDATE only matches when
    the slot still holds the leader the caller observed, so two racing
    claims on an empty slot cannot both succeed.
    """

    def __init__(self, db_session: Session, models: dict):
        """
        Initialize ScheduleLedger

        Args:
            db_session: SQLAlchemy database session
            models: Dictionary of model classes from the model registry
        """
        self.db = db_session
        self.ReadingSchedule = models['ReadingSchedule']

    def materialize(self, event, rest_dates: Iterable[date] = (),
                    progress_labels: Optional[Dict[int, str]] = None) -> List[object]:
        """
        Create one schedule per non-rest day of the event range

        Day numbers are contiguous from 1 and follow the calendar, so once
        created they are never renumbered.

        Args:
            event: ReadingEvent to materialize
            rest_dates: dates inside the range that get no slot
            progress_labels: optional day_number -> reading progress text

        Returns:
            List of created ReadingSchedule objects in day order

        Raises:
            PreconditionError: if the event already has schedules or an empty range
        """
        if event.has_schedules:
            raise PreconditionError(
                f"Event {event.id} already has schedules; day numbering cannot change"
            )
        if not event.start_date or not event.end_date or event.end_date < event.start_date:
            raise PreconditionError(f"Event {event.id} has no valid date range")

        rest = set(rest_dates)
        labels = progress_labels or {}
        created = []
        day_number = 1
        current = event.start_date

        while current <= event.end_date:
            if current not in rest:
                schedule = self.ReadingSchedule(
                    event=event,
                    day_number=day_number,
                    date=current,
                    reading_progress=labels.get(day_number, f'Day {day_number}')
                )
                self.db.add(schedule)
                created.append(schedule)
                day_number += 1
            current += timedelta(days=1)

        if not created:
            raise PreconditionError(f"Event {event.id} has only rest days")

        self.db.flush()
        logger.info(f"Materialized {len(created)} schedules for event {event.id}")
        return created

    def schedules_for(self, event_id: int) -> List[object]:
        """All schedules of an event in day order"""
        return self.db.query(self.ReadingSchedule).filter_by(
            event_id=event_id
        ).order_by(self.ReadingSchedule.day_number).all()

    def slot_states(self, event_id: int) -> List[SlotState]:
        return [
            SlotState(schedule_id=s.id, day_number=s.day_number, leader_id=s.daily_leader_id)
            for s in self.schedules_for(event_id)
        ]

    def leadership_count(self, event_id: int, user_id: int) -> int:
        """Number of days the user leads in this event"""
        return self.db.query(func.count(self.ReadingSchedule.id)).filter(
            self.ReadingSchedule.event_id == event_id,
            self.ReadingSchedule.daily_leader_id == user_id
        ).scalar() or 0

    def leadership_counts(self, event_id: int) -> Dict[int, int]:
        """Days led per user in this event"""
        rows = self.db.query(
            self.ReadingSchedule.daily_leader_id,
            func.count(self.ReadingSchedule.id)
        ).filter(
            self.ReadingSchedule.event_id == event_id,
            self.ReadingSchedule.daily_leader_id.isnot(None)
        ).group_by(self.ReadingSchedule.daily_leader_id).all()
        return {leader_id: count for leader_id, count in rows}

    def compare_and_set_leader(self, schedule_id: int, expected_leader_id: Optional[int],
                               new_leader_id: Optional[int]) -> bool:
        """
        Set a slot's leader only if it still holds expected_leader_id

        Args:
            schedule_id: Schedule to update
            expected_leader_id: Leader observed at read time (None = empty slot)
            new_leader_id: Leader to write (None clears the slot)

        Returns:
            True if this writer won, False if the slot changed underneath it
        """
        Schedule = self.ReadingSchedule
        query = self.db.query(Schedule).filter(Schedule.id == schedule_id)
        if expected_leader_id is None:
            query = query.filter(Schedule.daily_leader_id.is_(None))
        else:
            query = query.filter(Schedule.daily_leader_id == expected_leader_id)

        updated = query.update(
            {
                Schedule.daily_leader_id: new_leader_id,
                Schedule.updated_at: datetime.utcnow()
            },
            synchronize_session='fetch'
        )

        if updated != 1:
            logger.warning(
                f"Leader write lost on schedule {schedule_id}: expected {expected_leader_id}, "
                f"wanted {new_leader_id}"
            )
            return False
        return True
