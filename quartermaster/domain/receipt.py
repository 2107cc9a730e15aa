"""Receipt, recipient, and submission models."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from quartermaster.domain.inventory import ItemInstance

logger = logging.getLogger(f"qm.{__name__}")


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class OpenReceipt:
    """A receipt that still holds its items, as reported by the receipt provider."""

    id: str
    recipient_id: str | None
    bound_instance_ids: tuple[str, ...]
    # One instance per bound id; missing item details fall back to defaults.
    bound_instances: tuple[ItemInstance, ...] = ()
    created_by_id: str | None = None
    is_signed: bool = False

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> OpenReceipt | None:
        receipt_id = _opt_str(record.get("id"))
        if receipt_id is None:
            return None

        bound_ids: list[str] = []
        bound_instances: list[ItemInstance] = []
        raw_items = record.get("receiptItems")
        if raw_items is None:
            raw_items = record.get("items")
        for raw in raw_items or ():
            if not isinstance(raw, Mapping):
                continue
            detail = raw.get("item")
            item_id = _opt_str(raw.get("itemId"))
            if item_id is None and isinstance(detail, Mapping):
                item_id = _opt_str(detail.get("id"))
            if item_id is None or item_id in bound_ids:
                continue
            bound_ids.append(item_id)
            # Entries without item details still bind the item; it gets the "unknown" group.
            details = detail if isinstance(detail, Mapping) else {}
            instance = ItemInstance.from_record({**details, "id": item_id})
            if instance is not None:
                bound_instances.append(instance)

        return cls(
            id=receipt_id,
            recipient_id=_opt_str(record.get("signedById")),
            bound_instance_ids=tuple(bound_ids),
            bound_instances=tuple(bound_instances),
            created_by_id=_opt_str(record.get("createdById")),
            is_signed=bool(record.get("isSigned", False)),
        )


@dataclass(frozen=True)
class Recipient:
    """A person who can sign for a receipt."""

    id: str
    name: str
    home_location: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Recipient | None:
        recipient_id = _opt_str(record.get("id"))
        if recipient_id is None:
            return None
        location = record.get("location")
        if isinstance(location, Mapping):
            location = location.get("name")
        return cls(
            id=recipient_id,
            name=_opt_str(record.get("name")) or recipient_id,
            home_location=_opt_str(location),
        )


@dataclass(frozen=True)
class ReceiptSubmission:
    """Flattened receipt handed to the persistence collaborator."""

    recipient_id: str
    instance_ids: tuple[str, ...]
    receipt_id: str | None = None
    created_by_id: str | None = None

    @property
    def is_update(self) -> bool:
        return self.receipt_id is not None


def receipts_from_records(records: list[Any]) -> list[OpenReceipt]:
    receipts: list[OpenReceipt] = []
    for record in records:
        receipt = OpenReceipt.from_record(record) if isinstance(record, Mapping) else None
        if receipt is None:
            logger.warning("Skipping malformed receipt record: %r", record)
            continue
        receipts.append(receipt)
    return receipts


def recipients_from_records(records: list[Any]) -> list[Recipient]:
    recipients: list[Recipient] = []
    for record in records:
        recipient = Recipient.from_record(record) if isinstance(record, Mapping) else None
        if recipient is None:
            logger.warning("Skipping malformed recipient record: %r", record)
            continue
        recipients.append(recipient)
    return recipients
