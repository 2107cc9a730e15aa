"""Composition buffer: the editable selection for one receipt.

Report-required instances are kept as one ``SingleEntry`` each. Ordinary
instances sharing a group name and allocation collapse into one
``GroupEntry`` whose backing instances are kept in the order they were
added, so releases can pop the most recent ones first.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import TypeAlias

from quartermaster.domain.errors import DuplicateSelection
from quartermaster.domain.inventory import Allocation, AllocationKey, GroupKey, ItemInstance

EntryKey: TypeAlias = tuple[str, str, AllocationKey]


@dataclass(frozen=True)
class SingleEntry:
    """One individually tracked (report-required) instance."""

    instance: ItemInstance

    @property
    def key(self) -> EntryKey:
        return ("single", self.instance.id, None)

    @property
    def group_name(self) -> str:
        return self.instance.group_name

    @property
    def allocation(self) -> Allocation | None:
        return self.instance.allocation

    @property
    def count(self) -> int:
        return 1

    @property
    def instance_ids(self) -> tuple[str, ...]:
        return (self.instance.id,)


@dataclass(frozen=True)
class GroupEntry:
    """Fungible instances merged by (group name, allocation)."""

    group_name: str
    allocation: Allocation | None
    instances: tuple[ItemInstance, ...]

    @property
    def allocation_key(self) -> AllocationKey:
        return self.allocation.key if self.allocation is not None else None

    @property
    def group_key(self) -> GroupKey:
        return (self.group_name, self.allocation_key)

    @property
    def key(self) -> EntryKey:
        return ("group", self.group_name, self.allocation_key)

    @property
    def count(self) -> int:
        return len(self.instances)

    @property
    def instance_ids(self) -> tuple[str, ...]:
        return tuple(instance.id for instance in self.instances)

    def pushed(self, instances: Sequence[ItemInstance]) -> GroupEntry:
        return GroupEntry(self.group_name, self.allocation, self.instances + tuple(instances))

    def popped(self, count: int) -> tuple[GroupEntry, tuple[ItemInstance, ...]]:
        """Split off the ``count`` most recently added instances."""
        keep = len(self.instances) - count
        return (
            GroupEntry(self.group_name, self.allocation, self.instances[:keep]),
            self.instances[keep:],
        )


ReceiptLineEntry: TypeAlias = SingleEntry | GroupEntry


def _entry_key_for(instance: ItemInstance) -> EntryKey:
    if instance.report_required:
        return ("single", instance.id, None)
    return ("group", instance.group_name, instance.allocation_key)


class CompositionBuffer:
    """Ordered receipt lines plus an identity -> line index.

    Every mutating method validates first and mutates second, so a raised
    error always leaves the buffer exactly as it was.
    """

    def __init__(self) -> None:
        self._entries: dict[EntryKey, ReceiptLineEntry] = {}
        self._index: dict[str, EntryKey] = {}

    @classmethod
    def from_instances(cls, instances: Iterable[ItemInstance]) -> CompositionBuffer:
        """Pre-populate from a receipt's bound instances (update mode)."""
        buffer = cls()
        for instance in instances:
            if instance.id in buffer:
                continue
            buffer.add_instance(instance)
        return buffer

    def copy(self) -> CompositionBuffer:
        clone = CompositionBuffer()
        clone._entries = dict(self._entries)
        clone._index = dict(self._index)
        return clone

    # --- read side ---
    @property
    def entries(self) -> tuple[ReceiptLineEntry, ...]:
        return tuple(self._entries.values())

    def __iter__(self) -> Iterator[ReceiptLineEntry]:
        return iter(tuple(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, instance_id: object) -> bool:
        return instance_id in self._index

    def instance_ids(self) -> tuple[str, ...]:
        """Flat identity projection in line order."""
        return tuple(instance_id for entry in self._entries.values() for instance_id in entry.instance_ids)

    def instances(self) -> tuple[ItemInstance, ...]:
        result: list[ItemInstance] = []
        for entry in self._entries.values():
            if isinstance(entry, SingleEntry):
                result.append(entry.instance)
            else:
                result.extend(entry.instances)
        return tuple(result)

    def entry_for(self, instance_id: str) -> ReceiptLineEntry | None:
        key = self._index.get(instance_id)
        return self._entries.get(key) if key is not None else None

    def group_entry(self, group_name: str, allocation_key: AllocationKey) -> GroupEntry | None:
        entry = self._entries.get(("group", group_name, allocation_key))
        return entry if isinstance(entry, GroupEntry) else None

    def group_count(self, group_name: str, allocation_key: AllocationKey) -> int:
        entry = self.group_entry(group_name, allocation_key)
        return entry.count if entry is not None else 0

    def reserved_counts(self) -> Counter[GroupKey]:
        """Buffered count per ordinary (group, allocation) pair."""
        counts: Counter[GroupKey] = Counter()
        for entry in self._entries.values():
            if isinstance(entry, GroupEntry):
                counts[entry.group_key] += entry.count
        return counts

    # --- write side ---
    def add_instance(
        self,
        instance: ItemInstance,
        used_ids: frozenset[str] | set[str] = frozenset(),
    ) -> ReceiptLineEntry:
        """Add one instance, merging ordinary instances into their group line."""
        if instance.id in self._index:
            raise DuplicateSelection(instance.id)
        if instance.id in used_ids:
            raise DuplicateSelection(instance.id, bound_elsewhere=True)

        key = _entry_key_for(instance)
        entry: ReceiptLineEntry
        if instance.report_required:
            entry = SingleEntry(instance)
        else:
            existing = self._entries.get(key)
            if isinstance(existing, GroupEntry):
                entry = existing.pushed((instance,))
            else:
                entry = GroupEntry(instance.group_name, instance.allocation, (instance,))

        self._entries[key] = entry
        self._index[instance.id] = key
        return entry

    def remove_instance(self, instance_id: str) -> ReceiptLineEntry | None:
        """Remove the whole line holding ``instance_id``; unknown ids are ignored."""
        key = self._index.get(instance_id)
        if key is None:
            return None
        entry = self._entries.pop(key)
        for released_id in entry.instance_ids:
            del self._index[released_id]
        return entry

    def extend_group(
        self,
        instances: Sequence[ItemInstance],
        used_ids: frozenset[str] | set[str] = frozenset(),
    ) -> GroupEntry:
        """Append several ordinary instances of one (group, allocation) pair at once."""
        if not instances:
            raise ValueError("extend_group requires at least one instance")
        group_key = instances[0].group_key
        seen: set[str] = set()
        for instance in instances:
            if instance.report_required or instance.group_key != group_key:
                raise ValueError(f"Instance {instance.id} does not belong to group {group_key!r}")
            if instance.id in self._index or instance.id in seen:
                raise DuplicateSelection(instance.id)
            if instance.id in used_ids:
                raise DuplicateSelection(instance.id, bound_elsewhere=True)
            seen.add(instance.id)

        key = _entry_key_for(instances[0])
        existing = self._entries.get(key)
        if isinstance(existing, GroupEntry):
            entry = existing.pushed(instances)
        else:
            first = instances[0]
            entry = GroupEntry(first.group_name, first.allocation, tuple(instances))
        self._entries[key] = entry
        for instance in instances:
            self._index[instance.id] = key
        return entry

    def release_from_group(
        self,
        group_name: str,
        allocation_key: AllocationKey,
        count: int,
    ) -> tuple[ItemInstance, ...]:
        """Release the ``count`` most recently added instances of a group line."""
        entry = self.group_entry(group_name, allocation_key)
        current = entry.count if entry is not None else 0
        if count < 0 or count > current:
            raise ValueError(f"Cannot release {count} of {current} from group {group_name!r}")
        if entry is None or count == 0:
            return ()

        remaining, released = entry.popped(count)
        if remaining.count == 0:
            del self._entries[entry.key]
        else:
            self._entries[entry.key] = remaining
        for instance in released:
            del self._index[instance.id]
        return released
