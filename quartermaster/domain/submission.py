"""Flatten a composition buffer into a receipt submission."""

from __future__ import annotations

from collections.abc import Collection, Container

from quartermaster.domain.composition import CompositionBuffer
from quartermaster.domain.errors import EmptyComposition, InvalidRecipient, UnknownInstance
from quartermaster.domain.receipt import ReceiptSubmission


def assemble_instance_ids(buffer: CompositionBuffer) -> list[str]:
    """One id per report-required line, the recorded backing ids per group line."""
    return list(buffer.instance_ids())


def validate_recipient(
    recipient_id: str | None,
    *,
    created_by_id: str | None = None,
    known_recipient_ids: Collection[str] | None = None,
) -> str:
    if not recipient_id:
        raise InvalidRecipient("A recipient must be selected")
    if created_by_id is not None and recipient_id == created_by_id:
        raise InvalidRecipient("A receipt cannot be issued to its creator")
    if known_recipient_ids is not None and recipient_id not in known_recipient_ids:
        raise InvalidRecipient(f"Recipient {recipient_id} does not exist")
    return recipient_id


def build_submission(
    buffer: CompositionBuffer,
    *,
    recipient_id: str | None,
    pool_ids: Container[str],
    receipt_id: str | None = None,
    created_by_id: str | None = None,
    known_recipient_ids: Collection[str] | None = None,
) -> ReceiptSubmission:
    """Validate and flatten; raises before anything is handed to persistence."""
    recipient = validate_recipient(
        recipient_id,
        created_by_id=created_by_id,
        known_recipient_ids=known_recipient_ids,
    )
    if len(buffer) == 0:
        raise EmptyComposition("At least one item must be selected")

    instance_ids = assemble_instance_ids(buffer)
    for instance_id in instance_ids:
        if instance_id not in pool_ids:
            raise UnknownInstance(instance_id)

    return ReceiptSubmission(
        recipient_id=recipient,
        instance_ids=tuple(instance_ids),
        receipt_id=receipt_id,
        created_by_id=created_by_id,
    )
