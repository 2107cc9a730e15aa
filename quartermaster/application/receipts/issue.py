"""One-shot receipt issuing workflow (non-interactive composition)."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal

from quartermaster.application.receipts.compose import (
    ComposeReceiptRequest,
    ReceiptComposer,
    SubmitStatus,
)
from quartermaster.domain.errors import CompositionError, TransientFetchError
from quartermaster.domain.inventory import AllocationKey, ItemInstance
from quartermaster.domain.providers import CatalogProvider, ReceiptProvider, RecipientDirectory
from quartermaster.domain.receipt import OpenReceipt, ReceiptSubmission

IssueStatus = Literal["fetch_failed", "selection_rejected"] | SubmitStatus


@dataclass(frozen=True)
class QuantityRequest:
    """Requested count for one fungible group, optionally pinned to a location."""

    group_name: str
    quantity: int
    location: str | None = None


@dataclass(frozen=True)
class IssueReceiptRequest:
    """Inputs for composing and submitting one receipt in a single pass."""

    recipient_id: str | None
    item_ids: tuple[str, ...] = ()
    quantities: tuple[QuantityRequest, ...] = ()
    receipt_id: str | None = None
    created_by_id: str | None = None


@dataclass(frozen=True)
class IssueReceiptResult:
    """Outcome of the issuing workflow."""

    status: IssueStatus
    receipt: OpenReceipt | None = None
    submission: ReceiptSubmission | None = None
    error: str | None = None
    messages: list[str] = field(default_factory=list)


def resolve_allocation_key(
    pool: Iterable[ItemInstance],
    group_name: str,
    location: str | None,
) -> AllocationKey:
    """Map a user-facing location (id or name) to the allocation key used by the group."""
    if location is None:
        return None
    for instance in pool:
        if instance.group_name != group_name or instance.allocation is None:
            continue
        if instance.allocation.matches(location):
            return instance.allocation.key
    return location


def run_issue_receipt(
    request: IssueReceiptRequest,
    *,
    catalog: CatalogProvider,
    receipts: ReceiptProvider,
    recipients: RecipientDirectory,
) -> IssueReceiptResult:
    """Load, select, and submit; stops at the first rejected step."""
    composer = ReceiptComposer(
        catalog,
        receipts,
        recipients,
        ComposeReceiptRequest(
            created_by_id=request.created_by_id,
            editing_receipt_id=request.receipt_id,
            recipient_id=request.recipient_id,
        ),
    )
    try:
        composer.load()
    except TransientFetchError as exc:
        return IssueReceiptResult(status="fetch_failed", error=str(exc))
    except CompositionError as exc:
        return IssueReceiptResult(status="selection_rejected", error=str(exc))

    messages: list[str] = []
    if request.recipient_id is not None:
        selection = composer.select_recipient(request.recipient_id)
        if not selection.accepted:
            return IssueReceiptResult(status="invalid_recipient", error=selection.message)

    for item_id in request.item_ids:
        selection = composer.add(item_id)
        if not selection.accepted:
            return IssueReceiptResult(status="selection_rejected", error=selection.message, messages=messages)
        messages.append(f"Added {item_id}")

    for wanted in request.quantities:
        allocation_key = resolve_allocation_key(composer.pool, wanted.group_name, wanted.location)
        selection = composer.set_quantity(wanted.group_name, allocation_key, wanted.quantity)
        if not selection.accepted:
            return IssueReceiptResult(status="selection_rejected", error=selection.message, messages=messages)
        messages.append(f"Set {wanted.group_name} to {wanted.quantity}")

    submitted = composer.submit()
    return IssueReceiptResult(
        status=submitted.status,
        receipt=submitted.receipt,
        submission=submitted.submission,
        error=submitted.error,
        messages=messages,
    )
