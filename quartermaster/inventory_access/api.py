"""HTTP-backed providers for the catalog, receipts, and recipient directory."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from quartermaster.domain.errors import SubmissionError, TransientFetchError
from quartermaster.domain.inventory import ItemInstance, instances_from_records
from quartermaster.domain.receipt import (
    OpenReceipt,
    Recipient,
    ReceiptSubmission,
    recipients_from_records,
    receipts_from_records,
)
from quartermaster.inventory_access.client import InventoryApiClient
from quartermaster.runtime import Settings, get_logger, load_settings

logger = get_logger(__name__)


def _record_list(payload: Any, *, key: str, source: str) -> list[Any]:
    if isinstance(payload, Mapping):
        payload = payload.get(key)
    if not isinstance(payload, list):
        raise TransientFetchError(f"Unexpected payload shape from {source}")
    return payload


def _persisted_receipt(payload: Any, submission: ReceiptSubmission) -> OpenReceipt:
    receipt = OpenReceipt.from_record(payload) if isinstance(payload, Mapping) else None
    if receipt is not None:
        return receipt
    if submission.receipt_id is None:
        raise SubmissionError("Receipt was created but the server returned no receipt id")
    # Updates may answer without a body; echo what was sent.
    return OpenReceipt(
        id=submission.receipt_id,
        recipient_id=submission.recipient_id,
        bound_instance_ids=submission.instance_ids,
        created_by_id=submission.created_by_id,
    )


class HttpCatalogProvider:
    def __init__(self, client: InventoryApiClient) -> None:
        self._client = client

    def fetch_available(self) -> list[ItemInstance]:
        records = _record_list(self._client.get_json("items/available"), key="items", source="items/available")
        instances = instances_from_records(records)
        logger.debug("Fetched %d available items (%d records)", len(instances), len(records))
        return instances


class HttpReceiptProvider:
    def __init__(self, client: InventoryApiClient) -> None:
        self._client = client

    def fetch_all(self) -> list[OpenReceipt]:
        records = _record_list(self._client.get_json("receipts"), key="receipts", source="receipts")
        return receipts_from_records(records)

    def create(self, submission: ReceiptSubmission) -> OpenReceipt:
        payload = {
            "createdById": submission.created_by_id,
            "signedById": submission.recipient_id,
            "items": list(submission.instance_ids),
        }
        logger.info("Creating receipt for %s with %d item(s)", submission.recipient_id, len(submission.instance_ids))
        return _persisted_receipt(self._client.send_json("POST", "receipts/sign", payload), submission)

    def update(self, receipt_id: str, submission: ReceiptSubmission) -> OpenReceipt:
        payload = {
            "signedById": submission.recipient_id,
            "items": list(submission.instance_ids),
        }
        logger.info("Updating receipt %s with %d item(s)", receipt_id, len(submission.instance_ids))
        return _persisted_receipt(self._client.send_json("PATCH", f"receipts/{receipt_id}", payload), submission)


class HttpRecipientDirectory:
    def __init__(self, client: InventoryApiClient) -> None:
        self._client = client

    def list(self) -> list[Recipient]:
        records = _record_list(self._client.get_json("users"), key="users", source="users")
        return recipients_from_records(records)


@dataclass(frozen=True)
class InventoryProviders:
    """The three collaborators a composition session needs, sharing one client."""

    client: InventoryApiClient
    catalog: HttpCatalogProvider
    receipts: HttpReceiptProvider
    recipients: HttpRecipientDirectory

    def close(self) -> None:
        self.client.close()


def open_inventory_providers(
    settings: Settings | None = None,
    *,
    api_url: str | None = None,
    client: InventoryApiClient | None = None,
) -> InventoryProviders:
    """Build HTTP providers from settings (or an explicit client)."""
    if client is None:
        settings = settings or load_settings()
        client = InventoryApiClient(api_url or settings.api_url, timeout=settings.timeout)
    return InventoryProviders(
        client=client,
        catalog=HttpCatalogProvider(client),
        receipts=HttpReceiptProvider(client),
        recipients=HttpRecipientDirectory(client),
    )
