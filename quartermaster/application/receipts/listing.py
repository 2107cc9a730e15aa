"""Candidate listing workflow orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from quartermaster.application.receipts.compose import ComposeReceiptRequest, ReceiptComposer
from quartermaster.domain.candidates import DEFAULT_SERIALIZED_SUFFIX, Candidate
from quartermaster.domain.errors import CompositionError, TransientFetchError
from quartermaster.domain.providers import CatalogProvider, ReceiptProvider, RecipientDirectory

ListingStatus = Literal["ok", "fetch_failed", "error"]


@dataclass(frozen=True)
class CandidateListingRequest:
    """Inputs for listing selectable items."""

    query: str | None = None
    recipient_id: str | None = None
    receipt_id: str | None = None


@dataclass(frozen=True)
class CandidateListing:
    """Selectable items for display, already ranked."""

    status: ListingStatus
    candidates: list[Candidate]
    error: str | None = None


def run_list_candidates(
    request: CandidateListingRequest,
    *,
    catalog: CatalogProvider,
    receipts: ReceiptProvider,
    recipients: RecipientDirectory,
    serialized_suffix: str = DEFAULT_SERIALIZED_SUFFIX,
) -> CandidateListing:
    composer = ReceiptComposer(
        catalog,
        receipts,
        recipients,
        ComposeReceiptRequest(editing_receipt_id=request.receipt_id, recipient_id=request.recipient_id),
        serialized_suffix=serialized_suffix,
    )
    try:
        composer.load()
    except TransientFetchError as exc:
        return CandidateListing(status="fetch_failed", candidates=[], error=str(exc))
    except CompositionError as exc:
        return CandidateListing(status="error", candidates=[], error=str(exc))

    return CandidateListing(status="ok", candidates=composer.candidates(request.query))
