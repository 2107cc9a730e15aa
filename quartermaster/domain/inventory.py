"""Inventory item model and catalog ingestion.

Catalog records arrive as loosely structured mappings with optional nested
fields. Everything entering the composition core goes through
``ItemInstance.from_record`` so missing values become explicit defaults
instead of propagating as ``None`` lookups further down.
"""

from __future__ import annotations

import logging
import unicodedata
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias

logger = logging.getLogger(f"qm.{__name__}")

UNKNOWN_GROUP = "unknown"

AllocationKey: TypeAlias = str | None
GroupKey: TypeAlias = tuple[str, AllocationKey]


def normalize_text(value: str | None) -> str:
    """Fold case and strip diacritics for substring search."""
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return unicodedata.normalize("NFC", stripped).casefold().strip()


def collation_key(value: str | None) -> tuple[str, str]:
    """Sort key that orders accent/case variants together, raw text as tie-break."""
    return (normalize_text(value), value or "")


def _clean_str(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


def _flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y"}
    return bool(value)


def _nested_name(value: Any) -> str | None:
    if isinstance(value, Mapping):
        return _clean_str(value.get("name"))
    return _clean_str(value)


@dataclass(frozen=True)
class Allocation:
    """Location (and owning unit) an instance is assigned to."""

    location_id: str
    location_name: str
    unit_name: str | None = None

    @property
    def key(self) -> str:
        return self.location_id

    def matches(self, hint: str | None) -> bool:
        """Return True when a recipient's home-location hint refers to this allocation."""
        if not hint:
            return False
        if hint == self.location_id:
            return True
        return normalize_text(hint) == normalize_text(self.location_name)

    @classmethod
    def from_record(cls, record: Any) -> Allocation | None:
        if not isinstance(record, Mapping):
            return None
        location_id = _clean_str(record.get("id"))
        location_name = _clean_str(record.get("name"))
        if location_id is None and location_name is None:
            return None
        return cls(
            location_id=location_id or location_name or "",
            location_name=location_name or location_id or "",
            unit_name=_nested_name(record.get("unit")),
        )


@dataclass(frozen=True)
class ItemInstance:
    """One physical inventory unit. Owned by the inventory system; read-only here."""

    id: str
    group_name: str = UNKNOWN_GROUP
    serial: str | None = None
    report_required: bool = False
    allocation: Allocation | None = None
    is_operational: bool = True
    note: str | None = None

    @property
    def allocation_key(self) -> AllocationKey:
        return self.allocation.key if self.allocation is not None else None

    @property
    def group_key(self) -> GroupKey:
        return (self.group_name, self.allocation_key)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> ItemInstance | None:
        """Normalize one catalog record; records without an identity yield None."""
        instance_id = _clean_str(record.get("id"))
        if instance_id is None:
            return None

        group_name = _nested_name(record.get("itemName")) or _clean_str(record.get("name")) or UNKNOWN_GROUP
        report_flag = record.get("isNeedReport")
        if report_flag is None:
            report_flag = record.get("requiresReporting")

        return cls(
            id=instance_id,
            group_name=group_name,
            serial=_clean_str(record.get("idNumber")),
            report_required=_flag(report_flag, False),
            allocation=Allocation.from_record(record.get("allocatedLocation")),
            is_operational=_flag(record.get("isOperational"), True),
            note=_clean_str(record.get("note")),
        )


def instances_from_records(records: Iterable[Any]) -> list[ItemInstance]:
    """Normalize catalog records, skipping untrackable ones and duplicate identities."""
    instances: list[ItemInstance] = []
    seen: set[str] = set()
    for record in records:
        if not isinstance(record, Mapping):
            logger.warning("Skipping non-mapping catalog record: %r", record)
            continue
        instance = ItemInstance.from_record(record)
        if instance is None:
            logger.warning("Skipping catalog record without id: %r", record)
            continue
        if instance.id in seen:
            logger.warning("Skipping duplicate catalog record for item %s", instance.id)
            continue
        seen.add(instance.id)
        instances.append(instance)
    return instances


@dataclass(frozen=True)
class CatalogSnapshot:
    """Immutable point-in-time view of assignable item instances."""

    instances: tuple[ItemInstance, ...] = ()
    _by_id: dict[str, ItemInstance] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_id: dict[str, ItemInstance] = {}
        for instance in self.instances:
            by_id.setdefault(instance.id, instance)
        object.__setattr__(self, "_by_id", by_id)

    @classmethod
    def from_records(cls, records: Iterable[Any]) -> CatalogSnapshot:
        return cls(tuple(instances_from_records(records)))

    def __iter__(self) -> Iterator[ItemInstance]:
        return iter(self.instances)

    def __len__(self) -> int:
        return len(self.instances)

    def __contains__(self, instance_id: object) -> bool:
        return instance_id in self._by_id

    def get(self, instance_id: str) -> ItemInstance | None:
        return self._by_id.get(instance_id)

    def extended(self, extra: Iterable[ItemInstance]) -> CatalogSnapshot:
        """Return a snapshot that also contains ``extra`` instances not already present."""
        added = tuple(instance for instance in extra if instance.id not in self._by_id)
        if not added:
            return self
        return CatalogSnapshot(self.instances + added)
