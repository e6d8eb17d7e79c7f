from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .db import utc_now
from .models import Condition, ConditionStatus, ConditionType, Workload
from .rollout import has_explicit_partition


ALL_GROUPS_ARE_READY = "All groups are ready"
SOME_GROUPS_ARE_PROGRESSING = "Some groups are progressing"
SOME_GROUPS_ARE_UPDATED = "Some groups are updated"

MESSAGE_SEPARATOR = "; "

# The rollout-health types share a single slot in the condition list.
ROLLOUT_CONDITION_TYPES = frozenset(t.value for t in ConditionType)


@dataclass(frozen=True)
class GroupSets:
    """One consistent classification snapshot of the workload's groups.

    The sets may overlap; only the emptiness of `progressing` decides whether
    the rollout is settled.
    """

    progressing: frozenset[int] = frozenset()
    updated: frozenset[int] = frozenset()
    current: frozenset[int] = frozenset()

    @classmethod
    def of(cls, progressing: Iterable[int] = (), updated: Iterable[int] = (), current: Iterable[int] = ()) -> GroupSets:
        return cls(
            progressing=frozenset(int(i) for i in progressing),
            updated=frozenset(int(i) for i in updated),
            current=frozenset(int(i) for i in current),
        )


class RolloutHealth(Enum):
    """Rollout-health outcomes in priority order."""

    ALL_GROUPS_READY = (ConditionType.AVAILABLE, "AllGroupsReady")
    PARTITIONED_PROGRESSING = (ConditionType.PROGRESSING, "PartitionedRolloutProgressing")
    UPDATE_IN_PROGRESS = (ConditionType.UPDATE_IN_PROGRESS, "RollingUpdateInProgress")

    def __init__(self, condition_type: ConditionType, reason: str) -> None:
        self.condition_type = condition_type
        self.reason = reason


def classify_health(groups: GroupSets, partitioned: bool) -> RolloutHealth:
    if not groups.progressing:
        return RolloutHealth.ALL_GROUPS_READY
    if partitioned:
        return RolloutHealth.PARTITIONED_PROGRESSING
    return RolloutHealth.UPDATE_IN_PROGRESS


def _fragment(prefix: str, indices: frozenset[int]) -> str:
    return f"{prefix}: {sorted(indices)}"


def compose_message(health: RolloutHealth, groups: GroupSets) -> str:
    if health is RolloutHealth.ALL_GROUPS_READY:
        return ALL_GROUPS_ARE_READY

    fragments: list[str] = []
    if groups.progressing:
        fragments.append(_fragment(SOME_GROUPS_ARE_PROGRESSING, groups.progressing))
    # Held-back groups are expected under a partition, so "updated" is only
    # reported for a full rollout.
    if health is RolloutHealth.UPDATE_IN_PROGRESS and groups.updated:
        fragments.append(_fragment(SOME_GROUPS_ARE_UPDATED, groups.updated))
    return MESSAGE_SEPARATOR.join(fragments)


def build_condition(health: RolloutHealth, groups: GroupSets, now: str | None = None) -> Condition:
    return Condition(
        type=health.condition_type.value,
        status=ConditionStatus.TRUE.value,
        reason=health.reason,
        message=compose_message(health, groups),
        last_transition_time=now or utc_now(),
    )


def conditions_equal(a: Condition | None, b: Condition | None) -> bool:
    """Compare everything a status write would change; transition time is ignored."""
    if a is None or b is None:
        return a is b
    return (a.type, a.status, a.reason, a.message) == (b.type, b.status, b.reason, b.message)


def find_rollout_condition(conditions: list[Condition]) -> Condition | None:
    for c in conditions:
        if c.type in ROLLOUT_CONDITION_TYPES:
            return c
    return None


def set_rollout_condition(conditions: list[Condition], new: Condition) -> bool:
    """Merge `new` into the rollout slot of `conditions` in place.

    The previous transition time is kept unless the type or status changed.
    Returns True when the list differs from what was stored.
    """
    existing = find_rollout_condition(conditions)
    stray = [c for c in conditions if c.type in ROLLOUT_CONDITION_TYPES and c is not existing]

    if existing is None:
        conditions.append(new)
        return True

    changed = not conditions_equal(existing, new) or bool(stray)
    if (existing.type, existing.status) == (new.type, new.status) and existing.last_transition_time:
        new = new.model_copy(update={"last_transition_time": existing.last_transition_time})

    idx = next(i for i, c in enumerate(conditions) if c is existing)
    conditions[idx] = new
    if stray:
        conditions[:] = [c for c in conditions if not any(c is s for s in stray)]
    return changed


def set_condition(
    workload: Workload,
    progressing: Iterable[int],
    updated: Iterable[int],
    current: Iterable[int],
    now: str | None = None,
) -> bool:
    """Refresh the workload's rollout-health condition from a group snapshot.

    Mutates `workload.status.conditions` and returns whether a status write
    is needed.
    """
    groups = GroupSets.of(progressing, updated, current)
    health = classify_health(groups, has_explicit_partition(workload))
    return set_rollout_condition(workload.status.conditions, build_condition(health, groups, now=now))
