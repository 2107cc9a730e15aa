"""Centralized access to the inventory REST API."""

from quartermaster.inventory_access.api import (
    HttpCatalogProvider,
    HttpReceiptProvider,
    HttpRecipientDirectory,
    InventoryProviders,
    open_inventory_providers,
)
from quartermaster.inventory_access.client import InventoryApiClient

__all__ = [
    "HttpCatalogProvider",
    "HttpReceiptProvider",
    "HttpRecipientDirectory",
    "InventoryApiClient",
    "InventoryProviders",
    "open_inventory_providers",
]
