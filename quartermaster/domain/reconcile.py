"""Translate a requested group quantity into concrete instance adds/releases."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from quartermaster.domain.candidates import available_for_group
from quartermaster.domain.composition import CompositionBuffer
from quartermaster.domain.errors import InsufficientInventory, InvalidQuantity
from quartermaster.domain.inventory import AllocationKey, ItemInstance


@dataclass(frozen=True)
class QuantityChange:
    """What ``set_quantity`` did to one (group, allocation) line."""

    group_name: str
    allocation_key: AllocationKey
    previous: int
    current: int
    added: tuple[ItemInstance, ...] = ()
    released: tuple[ItemInstance, ...] = ()

    @property
    def changed(self) -> bool:
        return self.previous != self.current


def set_quantity(
    buffer: CompositionBuffer,
    pool: Iterable[ItemInstance],
    group_name: str,
    allocation_key: AllocationKey,
    desired: int,
    *,
    used_ids: frozenset[str],
    retained_ids: frozenset[str] = frozenset(),
) -> QuantityChange:
    """Grow or shrink an ordinary group line to ``desired`` instances.

    Growth draws unbuffered instances in pool order and fails without
    mutation when the pool is short. Shrinking releases the most recently
    added instances first.
    """
    if desired < 0:
        raise InvalidQuantity(f"Quantity for '{group_name}' cannot be negative: {desired}")

    current = buffer.group_count(group_name, allocation_key)
    if desired == current:
        return QuantityChange(group_name, allocation_key, current, current)

    if desired < current:
        released = buffer.release_from_group(group_name, allocation_key, current - desired)
        return QuantityChange(group_name, allocation_key, current, desired, released=released)

    needed = desired - current
    available = available_for_group(
        pool,
        group_name,
        allocation_key,
        used_ids=used_ids,
        buffer=buffer,
        retained_ids=retained_ids,
    )
    if len(available) < needed:
        raise InsufficientInventory(group_name, requested=needed, available=len(available))

    drawn = tuple(available[:needed])
    buffer.extend_group(drawn, used_ids=used_ids - retained_ids)
    return QuantityChange(group_name, allocation_key, current, desired, added=drawn)
