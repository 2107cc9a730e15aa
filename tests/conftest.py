"""Shared pytest fixtures: in-memory providers for composition sessions."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from quartermaster.domain.errors import ConflictOnSubmit, SubmissionError, TransientFetchError
from quartermaster.domain.inventory import ItemInstance
from quartermaster.domain.receipt import OpenReceipt, Recipient, ReceiptSubmission


@dataclass
class FakeCatalog:
    instances: list[ItemInstance] = field(default_factory=list)
    fail: bool = False
    calls: int = 0

    def fetch_available(self) -> list[ItemInstance]:
        self.calls += 1
        if self.fail:
            raise TransientFetchError("catalog unavailable")
        return list(self.instances)


@dataclass
class FakeReceipts:
    open_receipts: list[OpenReceipt] = field(default_factory=list)
    fail_fetch: bool = False
    reject_with: type[SubmissionError] | None = None
    fetch_calls: int = 0
    submitted: list[ReceiptSubmission] = field(default_factory=list)

    def fetch_all(self) -> list[OpenReceipt]:
        self.fetch_calls += 1
        if self.fail_fetch:
            raise TransientFetchError("receipts unavailable")
        return list(self.open_receipts)

    def _store(self, receipt_id: str, submission: ReceiptSubmission) -> OpenReceipt:
        self.submitted.append(submission)
        if self.reject_with is ConflictOnSubmit:
            raise ConflictOnSubmit("Item already signed out")
        if self.reject_with is not None:
            raise self.reject_with("server exploded")
        return OpenReceipt(
            id=receipt_id,
            recipient_id=submission.recipient_id,
            bound_instance_ids=submission.instance_ids,
            created_by_id=submission.created_by_id,
        )

    def create(self, submission: ReceiptSubmission) -> OpenReceipt:
        return self._store(f"R{len(self.open_receipts) + len(self.submitted) + 1}", submission)

    def update(self, receipt_id: str, submission: ReceiptSubmission) -> OpenReceipt:
        return self._store(receipt_id, submission)


@dataclass
class FakeDirectory:
    people: list[Recipient] = field(default_factory=list)
    calls: int = 0

    def list(self) -> list[Recipient]:
        self.calls += 1
        return list(self.people)


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog(
        [
            ItemInstance(id="x77", group_name="Radio", serial="X-77", report_required=True),
            ItemInstance(id="x78", group_name="Radio", serial="X-78", report_required=True),
            ItemInstance(id="h1", group_name="Helmet"),
            ItemInstance(id="h2", group_name="Helmet"),
            ItemInstance(id="h3", group_name="Helmet"),
            ItemInstance(id="b1", group_name="Binoculars", is_operational=False),
        ]
    )


@pytest.fixture
def receipts() -> FakeReceipts:
    return FakeReceipts(
        [
            OpenReceipt(
                id="R1",
                recipient_id="u2",
                bound_instance_ids=("x90", "h9"),
                bound_instances=(
                    ItemInstance(id="x90", group_name="Radio", serial="X-90", report_required=True),
                    ItemInstance(id="h9", group_name="Helmet"),
                ),
                created_by_id="u1",
            ),
            OpenReceipt(id="R2", recipient_id="u3", bound_instance_ids=("h3",)),
        ]
    )


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory(
        [
            Recipient(id="u1", name="Issuer"),
            Recipient(id="u2", name="Dana", home_location="North Gate"),
            Recipient(id="u3", name="Lee"),
        ]
    )
