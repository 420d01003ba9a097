"""
Leader Allocation Engine

Pure allocation of daily leaders to schedule slots. Works on plain
SlotState snapshots and roster user ids so it can run (and be tested)
without a database; LeaderAssignmentService applies the result.

Policies:
- random:    uniform draw from participants still under their cap
- balanced:  fewest assignments so far, ties broken by roster order
- rotation:  balanced, but never the previous day's leader unless that
             leader is the only eligible participant (lookback = 1 day);
             a kept leader on the following day is avoided the same way
- voluntary: only the explicit schedule_id -> user_id pairs supplied

Slots that already carry a leader are kept, and count toward workloads
and rotation adjacency, unless options.reset is set. A slot with no
eligible participant is left unassigned and reported in result.unfilled.
"""
import logging
import random
from typing import Callable, Dict, Iterable, List, Optional

from .assignment_types import (
    AllocationOptions,
    AssignmentPolicy,
    AssignmentResult,
    SlotState,
)

logger = logging.getLogger(__name__)


class _AllocationState:
    """Running workloads for one allocation pass"""

    def __init__(self, roster: List[int], max_leadership_count: Optional[int]):
        self.roster = roster
        self.roster_index = {user_id: index for index, user_id in enumerate(roster)}
        self.workloads: Dict[int, int] = {user_id: 0 for user_id in roster}
        self.cap = max_leadership_count
        self.previous_leader: Optional[int] = None
        # Leader of the following day when that day is kept
        self.next_leader: Optional[int] = None

    def record(self, user_id: Optional[int]):
        if user_id in self.workloads:
            self.workloads[user_id] += 1

    def eligible(self) -> List[int]:
        """Roster members still under the cap, in roster order"""
        if self.cap is None:
            return list(self.roster)
        return [user_id for user_id in self.roster if self.workloads[user_id] < self.cap]

    def load_key(self, user_id: int):
        return (self.workloads[user_id], self.roster_index[user_id])


def _pick_random(slot: SlotState, state: _AllocationState, options: AllocationOptions,
                 rng: random.Random) -> Optional[int]:
    pool = state.eligible()
    if not pool:
        return None
    return rng.choice(pool)


def _pick_balanced(slot: SlotState, state: _AllocationState, options: AllocationOptions,
                   rng: random.Random) -> Optional[int]:
    pool = state.eligible()
    if not pool:
        return None
    return min(pool, key=state.load_key)


def _pick_rotation(slot: SlotState, state: _AllocationState, options: AllocationOptions,
                   rng: random.Random) -> Optional[int]:
    pool = sorted(state.eligible(), key=state.load_key)
    if not pool:
        return None
    neighbours = {state.previous_leader, state.next_leader}
    for user_id in pool:
        if user_id not in neighbours:
            return user_id
    # Everyone left leads an adjacent day; the previous day takes precedence
    for user_id in pool:
        if user_id != state.previous_leader:
            return user_id
    return pool[0]


def _pick_voluntary(slot: SlotState, state: _AllocationState, options: AllocationOptions,
                    rng: random.Random) -> Optional[int]:
    user_id = options.volunteer_assignments.get(slot.schedule_id)
    if user_id is None:
        return None
    if user_id not in state.eligible():
        logger.info(
            f"Volunteer {user_id} for schedule {slot.schedule_id} is not on the roster or is capped; slot left open"
        )
        return None
    return user_id


_PICKERS: Dict[AssignmentPolicy, Callable] = {
    AssignmentPolicy.RANDOM: _pick_random,
    AssignmentPolicy.BALANCED: _pick_balanced,
    AssignmentPolicy.ROTATION: _pick_rotation,
    AssignmentPolicy.VOLUNTARY: _pick_voluntary,
}


def allocate(slots: Iterable[SlotState], roster: Iterable[int], policy,
             options: Optional[AllocationOptions] = None,
             rng: Optional[random.Random] = None) -> AssignmentResult:
    """
    Compute a leader for every open slot under the given policy

    Args:
        slots: schedule snapshots of one event (any order)
        roster: eligible participant user ids, in roster order
        policy: AssignmentPolicy or policy string
        options: cap, volunteer pairs and reset flag
        rng: random source for the random policy

    Returns:
        AssignmentResult with the final leader per slot and the list of
        (schedule_id, old_leader_id, new_leader_id) writes to apply

    Raises:
        UnsupportedPolicyError: if policy is not one of the four policies
    """
    policy = AssignmentPolicy.parse(policy)
    options = options or AllocationOptions()
    rng = rng or random.Random()
    pick = _PICKERS[policy]

    ordered = sorted(slots, key=lambda slot: slot.day_number)
    state = _AllocationState(list(dict.fromkeys(roster)), options.max_leadership_count)
    result = AssignmentResult(policy=policy)

    if not options.reset:
        for slot in ordered:
            if slot.leader_id is not None:
                state.record(slot.leader_id)
                result.kept_count += 1

    for index, slot in enumerate(ordered):
        if slot.leader_id is not None and not options.reset:
            result.assignments[slot.schedule_id] = slot.leader_id
            state.previous_leader = slot.leader_id
            continue

        following = ordered[index + 1] if index + 1 < len(ordered) else None
        state.next_leader = following.leader_id if following and not options.reset else None

        leader_id = pick(slot, state, options, rng)
        result.assignments[slot.schedule_id] = leader_id
        if leader_id is None:
            result.unfilled.append(slot.schedule_id)
        else:
            state.record(leader_id)
        if leader_id != slot.leader_id:
            result.changes.append((slot.schedule_id, slot.leader_id, leader_id))
        elif leader_id is not None:
            result.reconfirmed.append(slot.schedule_id)
        state.previous_leader = leader_id

    logger.debug(
        f"Allocated {len(ordered)} slots with policy={policy.value}: "
        f"{len(result.changes)} changes, {result.kept_count} kept, {len(result.unfilled)} unfilled"
    )
    return result
