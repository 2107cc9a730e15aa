"""Contracts for the external collaborators the composition session consumes."""

from __future__ import annotations

from typing import Protocol

from quartermaster.domain.inventory import ItemInstance
from quartermaster.domain.receipt import OpenReceipt, Recipient, ReceiptSubmission


class CatalogProvider(Protocol):
    """Source of the currently unassigned item instances."""

    def fetch_available(self) -> list[ItemInstance]: ...


class ReceiptProvider(Protocol):
    """Authoritative store of receipts; rejects conflicting submissions."""

    def fetch_all(self) -> list[OpenReceipt]: ...

    def create(self, submission: ReceiptSubmission) -> OpenReceipt: ...

    def update(self, receipt_id: str, submission: ReceiptSubmission) -> OpenReceipt: ...


class RecipientDirectory(Protocol):
    """People a receipt can be issued to."""

    def list(self) -> list[Recipient]: ...
