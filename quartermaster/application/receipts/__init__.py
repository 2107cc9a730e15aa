"""Receipt composition workflows."""

from quartermaster.application.receipts.compose import (
    ComposeReceiptRequest,
    ReceiptComposer,
    SelectionResult,
    SubmitResult,
)
from quartermaster.application.receipts.issue import (
    IssueReceiptRequest,
    IssueReceiptResult,
    QuantityRequest,
    run_issue_receipt,
)
from quartermaster.application.receipts.listing import (
    CandidateListing,
    CandidateListingRequest,
    run_list_candidates,
)

__all__ = [
    "ComposeReceiptRequest",
    "ReceiptComposer",
    "SelectionResult",
    "SubmitResult",
    "IssueReceiptRequest",
    "IssueReceiptResult",
    "QuantityRequest",
    "run_issue_receipt",
    "CandidateListing",
    "CandidateListingRequest",
    "run_list_candidates",
]
