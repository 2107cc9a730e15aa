"""Which item instances are bound to open receipts other than the one being edited."""

from __future__ import annotations

from collections.abc import Iterable

from quartermaster.domain.receipt import OpenReceipt


def used_instance_ids(
    receipts: Iterable[OpenReceipt],
    editing_receipt_id: str | None = None,
) -> frozenset[str]:
    """Union of bound identities over every receipt except ``editing_receipt_id``."""
    used: set[str] = set()
    for receipt in receipts:
        if editing_receipt_id is not None and receipt.id == editing_receipt_id:
            continue
        used.update(receipt.bound_instance_ids)
    return frozenset(used)


def editing_receipt(
    receipts: Iterable[OpenReceipt],
    editing_receipt_id: str | None,
) -> OpenReceipt | None:
    if editing_receipt_id is None:
        return None
    for receipt in receipts:
        if receipt.id == editing_receipt_id:
            return receipt
    return None


def retained_instance_ids(
    receipts: Iterable[OpenReceipt],
    editing_receipt_id: str | None,
) -> frozenset[str]:
    """Identities the receipt under edit owned before editing began (empty in create mode)."""
    receipt = editing_receipt(receipts, editing_receipt_id)
    if receipt is None:
        return frozenset()
    return frozenset(receipt.bound_instance_ids)
