"""
Unit tests for the leader allocation engine.

Tests cover:
- Each allocation policy on plain slot/roster data
- Leadership cap, rotation adjacency and balanced fairness
- Kept slots, reset and unfilled slots
- Policy parsing
"""
import random
from collections import Counter

import pytest

from reading_club.error_handlers import UnsupportedPolicyError
from reading_club.services.assignment_types import (
    AllocationOptions,
    AssignmentPolicy,
    SlotState,
)
from reading_club.services.leader_allocation import allocate


def make_slots(count, leaders=None):
    leaders = leaders or {}
    return [
        SlotState(schedule_id=100 + day, day_number=day, leader_id=leaders.get(day))
        for day in range(1, count + 1)
    ]


def leaders_in_day_order(result, slots):
    return [result.assignments[slot.schedule_id] for slot in sorted(slots, key=lambda s: s.day_number)]


class TestRotationPolicy:
    """Tests for the rotation policy."""

    @pytest.mark.unit
    def test_three_days_two_members_alternate(self):
        """Three days with roster [A, B] alternate A, B, A."""
        slots = make_slots(3)
        result = allocate(slots, [1, 2], 'rotation')

        assert leaders_in_day_order(result, slots) == [1, 2, 1]
        assert result.assigned_count == 3

    @pytest.mark.unit
    @pytest.mark.parametrize('members,days', [(2, 9), (3, 10), (5, 21)])
    def test_no_adjacent_repeats(self, members, days):
        slots = make_slots(days)
        result = allocate(slots, list(range(1, members + 1)), AssignmentPolicy.ROTATION)
        leaders = leaders_in_day_order(result, slots)

        for previous, current in zip(leaders, leaders[1:]):
            assert previous != current

    @pytest.mark.unit
    def test_single_member_leads_every_day(self):
        """With one eligible member, adjacency cannot be avoided."""
        slots = make_slots(3)
        result = allocate(slots, [7], 'rotation')

        assert leaders_in_day_order(result, slots) == [7, 7, 7]

    @pytest.mark.unit
    def test_kept_predecessor_counts_for_adjacency(self):
        """A kept day-1 leader is not picked again for day 2."""
        slots = make_slots(2, leaders={1: 1})
        result = allocate(slots, [1, 2], 'rotation')

        assert result.assignments[102] == 2
        assert result.kept_count == 1

    @pytest.mark.unit
    def test_kept_successor_counts_for_adjacency(self):
        """
        Days 2, 3 and 5 are kept by members 1, 2 and 2. Day 1 avoids the
        day-2 leader and day 4 avoids both neighbours' leader, so no two
        consecutive days share a leader.
        """
        slots = make_slots(5, leaders={2: 1, 3: 2, 5: 2})
        result = allocate(slots, [1, 2], 'rotation')

        leaders = leaders_in_day_order(result, slots)
        assert leaders == [2, 1, 2, 1, 2]
        assert all(a != b for a, b in zip(leaders, leaders[1:]))

    @pytest.mark.unit
    def test_successor_repeats_when_only_eligible_member(self):
        """Member 1 keeps day 2 and is the only member, so it also leads day 1."""
        slots = make_slots(2, leaders={2: 1})
        result = allocate(slots, [1], 'rotation')

        assert leaders_in_day_order(result, slots) == [1, 1]

    @pytest.mark.unit
    def test_skips_least_loaded_when_it_was_previous_leader(self):
        """
        Days 1 and 2 are kept by members 2 and 3, so member 1 leads day 3.
        On day 4 all three are tied and member 1 comes first in roster
        order, but led day 3, so member 2 is picked.
        """
        slots = make_slots(4, leaders={1: 2, 2: 3})
        result = allocate(slots, [1, 2, 3], 'rotation')

        assert result.assignments[103] == 1
        assert result.assignments[104] == 2

    @pytest.mark.unit
    def test_predecessor_repeats_when_only_eligible_member(self):
        """Member 2 is capped by kept days, so member 1 leads days 3 and 4 back to back."""
        slots = make_slots(4, leaders={1: 2, 2: 2})
        result = allocate(slots, [1, 2], 'rotation', AllocationOptions(max_leadership_count=2))

        assert leaders_in_day_order(result, slots) == [2, 2, 1, 1]


class TestBalancedPolicy:
    """Tests for the balanced policy."""

    @pytest.mark.unit
    @pytest.mark.parametrize('members,days', [(3, 7), (4, 4), (5, 13), (2, 1)])
    def test_workload_gap_at_most_one(self, members, days):
        roster = list(range(1, members + 1))
        slots = make_slots(days)
        result = allocate(slots, roster, 'balanced')

        counts = Counter(result.assignments.values())
        workloads = [counts.get(user_id, 0) for user_id in roster]
        assert max(workloads) - min(workloads) <= 1

    @pytest.mark.unit
    def test_ties_follow_roster_order(self):
        slots = make_slots(4)
        result = allocate(slots, [30, 10, 20], 'balanced')

        assert leaders_in_day_order(result, slots) == [30, 10, 20, 30]

    @pytest.mark.unit
    def test_existing_workload_is_levelled(self):
        """Members who already lead kept days are picked last."""
        slots = make_slots(4, leaders={1: 1, 2: 1})
        result = allocate(slots, [1, 2], 'balanced')

        assert result.assignments[103] == 2
        assert result.assignments[104] == 2


class TestRandomPolicy:
    """Tests for the random policy."""

    @pytest.mark.unit
    def test_seeded_runs_are_reproducible(self):
        slots = make_slots(10)
        first = allocate(slots, [1, 2, 3], 'random', rng=random.Random(42))
        second = allocate(slots, [1, 2, 3], 'random', rng=random.Random(42))

        assert first.assignments == second.assignments

    @pytest.mark.unit
    def test_only_roster_members_are_drawn(self):
        slots = make_slots(20)
        result = allocate(slots, [4, 5], 'random', rng=random.Random(7))

        assert set(result.assignments.values()) <= {4, 5}
        assert result.unfilled == []


class TestVoluntaryPolicy:
    """Tests for the voluntary policy."""

    @pytest.mark.unit
    def test_writes_only_explicit_pairs(self):
        slots = make_slots(3)
        options = AllocationOptions(volunteer_assignments={101: 2, 103: 1})
        result = allocate(slots, [1, 2], 'voluntary', options)

        assert result.assignments == {101: 2, 102: None, 103: 1}
        assert result.assigned_count == 2
        assert result.unfilled == [102]

    @pytest.mark.unit
    def test_volunteer_outside_roster_is_ignored(self):
        slots = make_slots(1)
        options = AllocationOptions(volunteer_assignments={101: 99})
        result = allocate(slots, [1, 2], 'voluntary', options)

        assert result.assignments[101] is None
        assert result.assigned_count == 0

    @pytest.mark.unit
    def test_volunteer_over_cap_is_ignored(self):
        slots = make_slots(2)
        options = AllocationOptions(max_leadership_count=1, volunteer_assignments={101: 1, 102: 1})
        result = allocate(slots, [1], 'voluntary', options)

        assert result.assignments == {101: 1, 102: None}


class TestAllocationInvariants:
    """Tests for properties shared by every policy."""

    @pytest.mark.unit
    @pytest.mark.parametrize('policy', ['random', 'balanced', 'rotation'])
    def test_cap_is_respected(self, policy):
        slots = make_slots(10)
        result = allocate(slots, [1, 2, 3], policy, AllocationOptions(max_leadership_count=2),
                          rng=random.Random(3))

        counts = Counter(leader for leader in result.assignments.values() if leader is not None)
        assert all(count <= 2 for count in counts.values())
        # 3 members x cap 2 = 6 filled days, 4 left open
        assert sum(counts.values()) == 6
        assert result.unfilled_count == 4

    @pytest.mark.unit
    @pytest.mark.parametrize('policy', ['random', 'balanced', 'rotation', 'voluntary'])
    def test_empty_roster_leaves_slots_unfilled(self, policy):
        slots = make_slots(1)
        result = allocate(slots, [], policy)

        assert result.assigned_count == 0
        assert result.unfilled == [101]
        assert result.changes == []

    @pytest.mark.unit
    @pytest.mark.parametrize('policy', ['random', 'balanced', 'rotation'])
    def test_rerun_keeps_existing_leaders(self, policy):
        slots = make_slots(5, leaders={2: 9, 4: 8})
        result = allocate(slots, [8, 9, 10], policy, rng=random.Random(1))

        assert result.assignments[102] == 9
        assert result.assignments[104] == 8
        assert all(schedule_id not in (102, 104) for schedule_id, _, _ in result.changes)

    @pytest.mark.unit
    def test_fully_assigned_rerun_changes_nothing(self):
        slots = make_slots(3, leaders={1: 1, 2: 2, 3: 1})
        result = allocate(slots, [1, 2], 'balanced')

        assert result.changes == []
        assert result.kept_count == 3
        assert result.total_assigned == 3

    @pytest.mark.unit
    def test_reset_reassigns_everything(self):
        slots = make_slots(3, leaders={1: 2, 2: 2, 3: 2})
        result = allocate(slots, [1, 2], 'balanced', AllocationOptions(reset=True))

        assert leaders_in_day_order(result, slots) == [1, 2, 1]
        assert result.kept_count == 0
        # Day 2 keeps member 2, so only days 1 and 3 are written
        assert [change[0] for change in result.changes] == [101, 103]
        assert result.assigned_count == 3

    @pytest.mark.unit
    def test_reset_clears_slot_without_eligible_member(self):
        slots = make_slots(1, leaders={1: 5})
        result = allocate(slots, [], 'balanced', AllocationOptions(reset=True))

        assert result.changes == [(101, 5, None)]
        assert result.unfilled == [101]

    @pytest.mark.unit
    def test_reset_counts_slot_repicked_with_same_leader(self):
        slots = make_slots(1, leaders={1: 1})
        result = allocate(slots, [1], 'balanced', AllocationOptions(reset=True))

        assert result.changes == []
        assert result.reconfirmed == [101]
        assert result.to_summary()['assigned_count'] == 1
        assert result.to_summary()['total_assigned'] == 1
        assert result.to_summary()['kept_count'] == 0

    @pytest.mark.unit
    def test_slots_are_processed_in_day_order(self):
        slots = list(reversed(make_slots(3)))
        result = allocate(slots, [1, 2], 'rotation')

        assert [result.assignments[s] for s in (101, 102, 103)] == [1, 2, 1]

    @pytest.mark.unit
    def test_unknown_policy_is_rejected(self):
        with pytest.raises(UnsupportedPolicyError) as exc_info:
            allocate(make_slots(1), [1], 'lottery')

        assert exc_info.value.status_code == 400
        assert 'rotation' in exc_info.value.details['supported_policies']

    @pytest.mark.unit
    def test_policy_strings_are_normalized(self):
        assert AssignmentPolicy.parse(' Balanced ') is AssignmentPolicy.BALANCED
        assert AssignmentPolicy.parse(AssignmentPolicy.RANDOM) is AssignmentPolicy.RANDOM

    @pytest.mark.unit
    def test_summary_reports_counts(self):
        slots = make_slots(3, leaders={1: 1})
        summary = allocate(slots, [1, 2], 'balanced').to_summary()

        assert summary == {
            'assignment_policy': 'balanced',
            'assigned_count': 2,
            'total_assigned': 3,
            'kept_count': 1,
            'unfilled_count': 0,
            'conflict_count': 0,
        }
