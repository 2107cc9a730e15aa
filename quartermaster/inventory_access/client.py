"""Thin httpx wrapper for the inventory REST API."""

from __future__ import annotations

import time
from typing import Any

import httpx

from quartermaster.domain.errors import ConflictOnSubmit, SubmissionError, TransientFetchError
from quartermaster.runtime import get_logger

logger = get_logger(__name__)

CONFLICT_STATUSES = frozenset({403, 409})


def _server_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            return ", ".join(str(err) for err in errors)
    return None


class InventoryApiClient:
    """Synchronous JSON client; callers own its lifetime via ``close()`` or ``with``."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=f"{self.base_url}/",
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    def __enter__(self) -> InventoryApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get_json(self, path: str) -> Any:
        """GET ``path``; any transport or HTTP failure becomes TransientFetchError."""
        start_time = time.time()
        try:
            response = self._client.get(path)
        except httpx.RequestError as e:
            logger.error("Failed to reach inventory API at %s: %s", self.base_url, e)
            raise TransientFetchError(f"Failed to fetch {path}: {e}") from e
        logger.debug("GET %s -> %s in %.2fs", path, response.status_code, time.time() - start_time)

        if response.is_error:
            message = _server_message(response) or response.reason_phrase
            logger.error("Inventory API error on GET %s: %s %s", path, response.status_code, message)
            raise TransientFetchError(f"Failed to fetch {path}: {response.status_code} {message}")

        try:
            return response.json()
        except ValueError as e:
            raise TransientFetchError(f"Invalid JSON from {path}") from e

    def send_json(self, method: str, path: str, payload: dict[str, Any]) -> Any:
        """POST/PATCH a submission; conflicts surface as ConflictOnSubmit, never retried."""
        try:
            response = self._client.request(method, path, json=payload)
        except httpx.RequestError as e:
            logger.error("Failed to reach inventory API at %s: %s", self.base_url, e)
            raise SubmissionError(f"Failed to submit receipt: {e}") from e
        logger.debug("%s %s -> %s", method, path, response.status_code)

        if response.status_code in CONFLICT_STATUSES:
            message = _server_message(response) or "Receipt conflicts with the current inventory state"
            logger.warning("Submission rejected with %s: %s", response.status_code, message)
            raise ConflictOnSubmit(message)
        if response.is_error:
            message = _server_message(response) or response.reason_phrase
            logger.error("Inventory API error on %s %s: %s %s", method, path, response.status_code, message)
            raise SubmissionError(f"Failed to submit receipt: {response.status_code} {message}")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None
