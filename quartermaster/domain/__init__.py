"""Core domain models and pure composition logic.

This package provides:
- ItemInstance, Allocation, CatalogSnapshot: normalized inventory view
- OpenReceipt, Recipient, ReceiptSubmission: receipt-side models
- CompositionBuffer and its SingleEntry/GroupEntry lines
- used_instance_ids, resolve_candidates, set_quantity, build_submission

Usage:
    from quartermaster.domain import CatalogSnapshot, CompositionBuffer, resolve_candidates
"""

from quartermaster.domain.candidates import Candidate, resolve_candidates
from quartermaster.domain.composition import CompositionBuffer, GroupEntry, ReceiptLineEntry, SingleEntry
from quartermaster.domain.errors import (
    CompositionError,
    ConflictOnSubmit,
    DuplicateSelection,
    EmptyComposition,
    InsufficientInventory,
    InvalidQuantity,
    InvalidRecipient,
    SubmissionError,
    TransientFetchError,
    UnknownInstance,
)
from quartermaster.domain.exclusivity import retained_instance_ids, used_instance_ids
from quartermaster.domain.inventory import UNKNOWN_GROUP, Allocation, CatalogSnapshot, ItemInstance
from quartermaster.domain.receipt import OpenReceipt, Recipient, ReceiptSubmission
from quartermaster.domain.reconcile import QuantityChange, set_quantity
from quartermaster.domain.submission import assemble_instance_ids, build_submission

__all__ = [
    # Inventory
    "UNKNOWN_GROUP",
    "Allocation",
    "CatalogSnapshot",
    "ItemInstance",
    # Receipts
    "OpenReceipt",
    "Recipient",
    "ReceiptSubmission",
    # Composition
    "Candidate",
    "CompositionBuffer",
    "GroupEntry",
    "QuantityChange",
    "ReceiptLineEntry",
    "SingleEntry",
    "assemble_instance_ids",
    "build_submission",
    "resolve_candidates",
    "retained_instance_ids",
    "set_quantity",
    "used_instance_ids",
    # Errors
    "CompositionError",
    "ConflictOnSubmit",
    "DuplicateSelection",
    "EmptyComposition",
    "InsufficientInventory",
    "InvalidQuantity",
    "InvalidRecipient",
    "SubmissionError",
    "TransientFetchError",
    "UnknownInstance",
]
