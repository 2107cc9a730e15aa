"""Error taxonomy for receipt composition."""

from __future__ import annotations


class CompositionError(RuntimeError):
    """Base class for every rejected composition or submission step."""


class DuplicateSelection(CompositionError):
    """Raised when an instance is already selected here or bound to another receipt."""

    def __init__(self, instance_id: str, *, bound_elsewhere: bool = False) -> None:
        self.instance_id = instance_id
        self.bound_elsewhere = bound_elsewhere
        where = "another open receipt" if bound_elsewhere else "this receipt"
        super().__init__(f"Item {instance_id} is already assigned to {where}")


class InsufficientInventory(CompositionError):
    """Raised when a quantity group cannot be grown to the requested count."""

    def __init__(self, group_name: str, requested: int, available: int) -> None:
        self.group_name = group_name
        self.requested = requested
        self.available = available
        super().__init__(f"Only {available} more of '{group_name}' available, {requested} requested")


class InvalidQuantity(CompositionError):
    """Raised for quantities that can never be satisfied (negative counts)."""


class UnknownInstance(CompositionError):
    """Raised when an identity is not part of the current inventory pool."""

    def __init__(self, instance_id: str) -> None:
        self.instance_id = instance_id
        super().__init__(f"Item {instance_id} is not available for this receipt")


class InvalidRecipient(CompositionError):
    """Raised at submit time when the recipient is missing or not selectable."""


class EmptyComposition(CompositionError):
    """Raised at submit time when no items were selected."""


class SubmissionError(CompositionError):
    """Raised when the persistence collaborator fails to store a receipt."""


class ConflictOnSubmit(SubmissionError):
    """Raised when the persistence collaborator rejects a conflicting submission."""


class TransientFetchError(CompositionError):
    """Raised when the catalog, receipt list, or recipient directory cannot be fetched."""
