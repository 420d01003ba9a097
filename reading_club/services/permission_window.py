"""
Permission Window

Time-bounded rule for who may author a day's material. The event owner
may always act (that is what makes backup possible); the day's leader
may act only inside the slot's window. Window bounds come from the
event's offsets, so the rule has no configuration of its own.
"""
from datetime import timedelta

from .assignment_types import PermissionWindow


def authoring_window(event, schedule) -> PermissionWindow:
    """
    Compute the authoring window for one schedule

    Default offsets give [date - 1 day, date]: material can be published
    the evening before and up to the day itself.
    """
    return PermissionWindow(
        opens_on=schedule.date - timedelta(days=event.content_days_before or 0),
        closes_on=schedule.date + timedelta(days=event.content_days_after or 0)
    )


class PermissionPolicy:
    """Evaluates authoring permissions against an injected clock"""

    def __init__(self, clock):
        self.clock = clock

    def window_for(self, event, schedule) -> PermissionWindow:
        return authoring_window(event, schedule)

    def can_author(self, event, schedule, actor) -> bool:
        """
        Check whether actor may author or modify content for schedule

        Args:
            event: ReadingEvent owning the schedule
            schedule: ReadingSchedule being authored
            actor: User (or None)

        Returns:
            bool: True for the owner always, for the current leader only
            while today falls inside the window
        """
        if actor is None:
            return False
        if event.is_event_owner(actor):
            return True
        if schedule.daily_leader_id is None or schedule.daily_leader_id != actor.id:
            return False
        return self.window_for(event, schedule).contains(self.clock.today())

    def window_closed(self, event, schedule) -> bool:
        """True once the slot's authoring window lies in the past"""
        return self.window_for(event, schedule).has_closed(self.clock.today())
