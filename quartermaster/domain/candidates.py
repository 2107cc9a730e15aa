"""Derive the selectable instance list for the receipt under composition.

The result is a pure function of its inputs and is recomputed on every
call; nothing here caches between calls.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from quartermaster.domain.composition import CompositionBuffer
from quartermaster.domain.inventory import AllocationKey, GroupKey, ItemInstance, collation_key, normalize_text

DEFAULT_SERIALIZED_SUFFIX = " - serialized"


@dataclass(frozen=True)
class Candidate:
    """An instance that can be picked right now."""

    instance: ItemInstance
    remaining_capacity: int
    display_name: str
    home_match: bool = False

    @property
    def id(self) -> str:
        return self.instance.id


def is_selectable(
    instance: ItemInstance,
    used_ids: frozenset[str],
    retained_ids: frozenset[str] = frozenset(),
) -> bool:
    """Operational and not bound elsewhere (retained ids of the edit target stay selectable)."""
    if not instance.is_operational:
        return False
    if instance.id in used_ids and instance.id not in retained_ids:
        return False
    return True


def unused_supply(
    pool: Iterable[ItemInstance],
    used_ids: frozenset[str],
    retained_ids: frozenset[str] = frozenset(),
) -> Counter[GroupKey]:
    """Selectable ordinary instances per (group, allocation), buffered ones included."""
    supply: Counter[GroupKey] = Counter()
    for instance in pool:
        if instance.report_required or not is_selectable(instance, used_ids, retained_ids):
            continue
        supply[instance.group_key] += 1
    return supply


def remaining_capacity(
    instance: ItemInstance,
    supply: Counter[GroupKey],
    reserved: Counter[GroupKey],
) -> int:
    if instance.report_required:
        return 1
    return max(0, supply[instance.group_key] - reserved[instance.group_key])


def display_name(instance: ItemInstance, serialized_suffix: str = DEFAULT_SERIALIZED_SUFFIX) -> str:
    name = instance.group_name
    if instance.allocation is not None and instance.allocation.location_name:
        name = f"{name} ({instance.allocation.location_name})"
    if instance.report_required:
        name = f"{name}{serialized_suffix}"
    return name


def matches_query(instance: ItemInstance, normalized_query: str) -> bool:
    if not normalized_query:
        return True
    fields = [instance.group_name, instance.serial]
    if instance.allocation is not None:
        fields.extend([instance.allocation.location_name, instance.allocation.unit_name])
    return any(normalized_query in normalize_text(value) for value in fields)


def available_for_group(
    pool: Iterable[ItemInstance],
    group_name: str,
    allocation_key: AllocationKey,
    *,
    used_ids: frozenset[str],
    buffer: CompositionBuffer,
    retained_ids: frozenset[str] = frozenset(),
) -> list[ItemInstance]:
    """Unbuffered, selectable ordinary instances of one pair, in pool order."""
    return [
        instance
        for instance in pool
        if not instance.report_required
        and instance.group_key == (group_name, allocation_key)
        and instance.id not in buffer
        and is_selectable(instance, used_ids, retained_ids)
    ]


def _order_key(candidate: Candidate) -> tuple[bool, bool, tuple[str, str], tuple[str, str], str]:
    instance = candidate.instance
    return (
        not candidate.home_match,
        instance.allocation is None,
        collation_key(instance.group_name),
        collation_key(instance.serial),
        instance.id,
    )


def resolve_candidates(
    pool: Iterable[ItemInstance],
    *,
    used_ids: frozenset[str],
    buffer: CompositionBuffer,
    retained_ids: frozenset[str] = frozenset(),
    query: str | None = None,
    home_location: str | None = None,
    serialized_suffix: str = DEFAULT_SERIALIZED_SUFFIX,
) -> list[Candidate]:
    """Filter, rank, and annotate instances eligible for selection.

    Steps:
    1. drop instances bound to other receipts (retained ones excepted) and
       non-operational instances
    2. drop instances already in the buffer
    3. keep query matches on group name, serial, or allocation names
    4. order home-allocation first, allocated before unallocated, then by name
    5. attach remaining capacity for the instance's (group, allocation) pair
    """
    instances = list(pool)
    supply = unused_supply(instances, used_ids, retained_ids)
    reserved = buffer.reserved_counts()
    normalized_query = normalize_text(query)

    candidates: list[Candidate] = []
    for instance in instances:
        if not is_selectable(instance, used_ids, retained_ids):
            continue
        if instance.id in buffer:
            continue
        if not matches_query(instance, normalized_query):
            continue
        capacity = remaining_capacity(instance, supply, reserved)
        if capacity <= 0:
            continue
        home_match = instance.allocation is not None and instance.allocation.matches(home_location)
        candidates.append(
            Candidate(
                instance=instance,
                remaining_capacity=capacity,
                display_name=display_name(instance, serialized_suffix),
                home_match=home_match,
            )
        )

    candidates.sort(key=_order_key)
    return candidates
