"""Receipt composition session orchestration.

One ``ReceiptComposer`` backs one editing session: it loads the catalog,
receipt list, and recipient directory from their providers, exposes the
candidate list, applies selection operations to the composition buffer, and
finally hands a flattened submission to the receipt provider.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from quartermaster.domain.candidates import DEFAULT_SERIALIZED_SUFFIX, Candidate, is_selectable, resolve_candidates
from quartermaster.domain.composition import CompositionBuffer, ReceiptLineEntry
from quartermaster.domain.errors import (
    CompositionError,
    ConflictOnSubmit,
    EmptyComposition,
    InvalidRecipient,
    SubmissionError,
    TransientFetchError,
    UnknownInstance,
)
from quartermaster.domain.exclusivity import editing_receipt, retained_instance_ids, used_instance_ids
from quartermaster.domain.inventory import AllocationKey, CatalogSnapshot
from quartermaster.domain.providers import CatalogProvider, ReceiptProvider, RecipientDirectory
from quartermaster.domain.receipt import OpenReceipt, Recipient, ReceiptSubmission
from quartermaster.domain.reconcile import QuantityChange, set_quantity
from quartermaster.domain.submission import build_submission, validate_recipient
from quartermaster.runtime import get_logger

logger = get_logger(__name__)

SelectionStatus = Literal["accepted", "rejected"]

SubmitStatus = Literal[
    "invalid_recipient",
    "empty_composition",
    "unknown_instance",
    "conflict",
    "failed",
    "closed",
    "created",
    "updated",
]


@dataclass(frozen=True)
class ComposeReceiptRequest:
    """Inputs that fix the mode of one composition session."""

    created_by_id: str | None = None
    editing_receipt_id: str | None = None
    recipient_id: str | None = None


@dataclass(frozen=True)
class SelectionResult:
    """Outcome of one selection operation; rejected operations changed nothing."""

    status: SelectionStatus
    message: str | None = None
    error: CompositionError | None = None
    entry: ReceiptLineEntry | None = None
    change: QuantityChange | None = None

    @property
    def accepted(self) -> bool:
        return self.status == "accepted"


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of a submit attempt."""

    status: SubmitStatus
    receipt: OpenReceipt | None = None
    submission: ReceiptSubmission | None = None
    error: str | None = None


class ReceiptComposer:
    """Stateful editing session over the pure composition core.

    Fetch completions replace the whole snapshot, receipt list, or directory
    at once. Selection operations never raise for expected rejections; they
    return a ``SelectionResult`` and leave the buffer untouched.
    """

    def __init__(
        self,
        catalog: CatalogProvider,
        receipts: ReceiptProvider,
        recipients: RecipientDirectory,
        request: ComposeReceiptRequest | None = None,
        *,
        on_success: Callable[[], None] | None = None,
        on_cancel: Callable[[], None] | None = None,
        serialized_suffix: str = DEFAULT_SERIALIZED_SUFFIX,
    ) -> None:
        self._catalog_provider = catalog
        self._receipt_provider = receipts
        self._recipient_directory = recipients
        self._request = request or ComposeReceiptRequest()
        self._on_success = on_success
        self._on_cancel = on_cancel
        self._serialized_suffix = serialized_suffix

        self._snapshot = CatalogSnapshot()
        self._receipts: tuple[OpenReceipt, ...] = ()
        self._recipients: tuple[Recipient, ...] | None = None
        self._buffer = CompositionBuffer()
        self._recipient_id = self._request.recipient_id
        self._loaded = False
        self._finished = False

    # --- session state ---
    @property
    def is_update_mode(self) -> bool:
        return self._request.editing_receipt_id is not None

    @property
    def is_finished(self) -> bool:
        """True once a receipt was saved; the session accepts no further edits."""
        return self._finished

    @property
    def buffer(self) -> CompositionBuffer:
        return self._buffer

    @property
    def recipient_id(self) -> str | None:
        return self._recipient_id

    @property
    def receipts(self) -> tuple[OpenReceipt, ...]:
        return self._receipts

    @property
    def recipients(self) -> tuple[Recipient, ...]:
        """Recipients the receipt may be issued to (the creator excluded)."""
        return tuple(r for r in self._recipients or () if r.id != self._request.created_by_id)

    @property
    def used_ids(self) -> frozenset[str]:
        return used_instance_ids(self._receipts, self._request.editing_receipt_id)

    @property
    def retained_ids(self) -> frozenset[str]:
        return retained_instance_ids(self._receipts, self._request.editing_receipt_id)

    @property
    def pool(self) -> CatalogSnapshot:
        """Catalog snapshot plus the edit target's own instances (update mode)."""
        target = editing_receipt(self._receipts, self._request.editing_receipt_id)
        if target is None:
            return self._snapshot
        return self._snapshot.extended(target.bound_instances)

    def _home_location(self) -> str | None:
        for recipient in self._recipients or ():
            if recipient.id == self._recipient_id:
                return recipient.home_location
        return None

    # --- fetches ---
    def load(self) -> None:
        """Fetch catalog, receipts, and recipients; apply all or nothing.

        Raises:
            TransientFetchError: a provider failed; prior state is kept.
            CompositionError: the receipt under edit is not among the open receipts.
        """
        try:
            instances = self._catalog_provider.fetch_available()
            receipts = tuple(self._receipt_provider.fetch_all())
            recipients = tuple(self._recipient_directory.list())
        except TransientFetchError:
            logger.warning("Composition data fetch failed; keeping previous state")
            raise

        buffer = self._buffer
        recipient_id = self._recipient_id
        if self.is_update_mode and not self._loaded:
            target = editing_receipt(receipts, self._request.editing_receipt_id)
            if target is None:
                raise CompositionError(f"Receipt {self._request.editing_receipt_id} is not open")
            buffer = CompositionBuffer.from_instances(target.bound_instances)
            recipient_id = recipient_id or target.recipient_id

        self._snapshot = CatalogSnapshot(tuple(instances))
        self._receipts = receipts
        self._recipients = recipients
        self._buffer = buffer
        self._recipient_id = recipient_id
        self._loaded = True
        logger.debug(
            "Loaded %d available items, %d open receipts, %d recipients",
            len(self._snapshot),
            len(receipts),
            len(recipients),
        )

    def refresh_receipts(self) -> None:
        """Refetch the receipt list only; exclusivity is re-derived from it.

        Raises:
            TransientFetchError: the receipt provider failed; prior state is kept.
            CompositionError: the receipt under edit is no longer open; prior state is kept.
        """
        receipts = tuple(self._receipt_provider.fetch_all())
        editing_id = self._request.editing_receipt_id
        if editing_id is not None and editing_receipt(receipts, editing_id) is None:
            logger.warning("Receipt %s disappeared from the open receipts; keeping previous list", editing_id)
            raise CompositionError(f"Receipt {editing_id} is no longer open")
        self._receipts = receipts
        clashes = set(self._buffer.instance_ids()) & self.used_ids
        if clashes:
            logger.warning("%d selected item(s) are now bound to other receipts", len(clashes))

    # --- derivations ---
    def candidates(self, query: str | None = None) -> list[Candidate]:
        return resolve_candidates(
            self.pool,
            used_ids=self.used_ids,
            buffer=self._buffer,
            retained_ids=self.retained_ids,
            query=query,
            home_location=self._home_location(),
            serialized_suffix=self._serialized_suffix,
        )

    # --- selection operations ---
    def _reject(self, exc: CompositionError) -> SelectionResult:
        logger.info("Rejected: %s", exc)
        return SelectionResult(status="rejected", message=str(exc), error=exc)

    def _closed(self) -> SelectionResult:
        return SelectionResult(status="rejected", message="Receipt was already submitted; start a new session")

    def _known_recipient_ids(self) -> set[str] | None:
        if self._recipients is None:
            return None
        return {recipient.id for recipient in self._recipients}

    def select_recipient(self, recipient_id: str | None) -> SelectionResult:
        if self._finished:
            return self._closed()
        try:
            validate_recipient(
                recipient_id,
                created_by_id=self._request.created_by_id,
                known_recipient_ids=self._known_recipient_ids(),
            )
        except InvalidRecipient as exc:
            return self._reject(exc)
        self._recipient_id = recipient_id
        return SelectionResult(status="accepted")

    def add(self, instance_id: str) -> SelectionResult:
        """Add one instance by id (report-required line or merged group line)."""
        if self._finished:
            return self._closed()
        instance = self.pool.get(instance_id)
        if instance is None:
            return self._reject(UnknownInstance(instance_id))
        if not instance.is_operational:
            return self._reject(CompositionError(f"Item {instance_id} is not operational"))
        try:
            entry = self._buffer.add_instance(instance, used_ids=self.used_ids - self.retained_ids)
        except CompositionError as exc:
            return self._reject(exc)
        return SelectionResult(status="accepted", entry=entry)

    def remove(self, instance_id: str) -> SelectionResult:
        """Remove the whole line holding ``instance_id``."""
        if self._finished:
            return self._closed()
        entry = self._buffer.remove_instance(instance_id)
        if entry is None:
            return SelectionResult(status="rejected", message=f"Item {instance_id} is not on this receipt")
        return SelectionResult(status="accepted", entry=entry)

    def set_quantity(self, group_name: str, allocation_key: AllocationKey, desired: int) -> SelectionResult:
        if self._finished:
            return self._closed()
        used = self.used_ids
        retained = self.retained_ids
        pool = [instance for instance in self.pool if is_selectable(instance, used, retained)]
        try:
            change = set_quantity(
                self._buffer,
                pool,
                group_name,
                allocation_key,
                desired,
                used_ids=used,
                retained_ids=retained,
            )
        except CompositionError as exc:
            return self._reject(exc)
        return SelectionResult(
            status="accepted",
            entry=self._buffer.group_entry(group_name, allocation_key),
            change=change,
        )

    # --- completion ---
    def submit(self) -> SubmitResult:
        """Validate, flatten, and hand the receipt to the receipt provider.

        Validation failures make no provider call. Conflicts are returned as-is
        for the caller to decide whether to resubmit. A saved receipt closes
        the session: the buffer is discarded and later edits are rejected.
        """
        if self._finished:
            return SubmitResult(status="closed", error="Receipt was already submitted; start a new session")
        editing_id = self._request.editing_receipt_id
        try:
            submission = build_submission(
                self._buffer,
                recipient_id=self._recipient_id,
                pool_ids=self.pool,
                receipt_id=editing_id,
                created_by_id=self._request.created_by_id,
                known_recipient_ids=self._known_recipient_ids(),
            )
        except InvalidRecipient as exc:
            return SubmitResult(status="invalid_recipient", error=str(exc))
        except EmptyComposition as exc:
            return SubmitResult(status="empty_composition", error=str(exc))
        except UnknownInstance as exc:
            return SubmitResult(status="unknown_instance", error=str(exc))

        try:
            if editing_id is not None:
                receipt = self._receipt_provider.update(editing_id, submission)
            else:
                receipt = self._receipt_provider.create(submission)
        except ConflictOnSubmit as exc:
            return SubmitResult(status="conflict", submission=submission, error=str(exc))
        except SubmissionError as exc:
            return SubmitResult(status="failed", submission=submission, error=str(exc))

        logger.info("Receipt %s saved with %d item(s)", receipt.id, len(submission.instance_ids))
        self._buffer = CompositionBuffer()
        self._finished = True
        if self._on_success is not None:
            self._on_success()
        return SubmitResult(
            status="updated" if editing_id is not None else "created",
            receipt=receipt,
            submission=submission,
        )

    def cancel(self) -> None:
        """Discard the buffer without touching persisted state."""
        self._buffer = CompositionBuffer()
        if self._on_cancel is not None:
            self._on_cancel()
