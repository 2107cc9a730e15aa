"""Tests for the HTTP providers against a mocked inventory API."""

from __future__ import annotations

import json

import httpx
import pytest

from quartermaster.domain.errors import ConflictOnSubmit, SubmissionError, TransientFetchError
from quartermaster.domain.receipt import ReceiptSubmission
from quartermaster.inventory_access import InventoryApiClient, open_inventory_providers

BASE_URL = "http://inventory.test/api"


def _providers(handler):
    client = InventoryApiClient(BASE_URL, transport=httpx.MockTransport(handler))
    return open_inventory_providers(client=client)


def test_catalog_fetch_normalizes_records() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(
            200,
            json=[
                {"id": "x77", "itemName": {"name": "Radio"}, "isNeedReport": True},
                {"itemName": {"name": "No id"}},
                {"id": "h1", "itemName": {"name": "Helmet"}},
            ],
        )

    providers = _providers(handler)
    instances = providers.catalog.fetch_available()
    providers.close()

    assert seen == ["/api/items/available"]
    assert [instance.id for instance in instances] == ["x77", "h1"]
    assert instances[0].report_required is True


def test_receipts_and_users_accept_wrapped_payloads() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/receipts"):
            return httpx.Response(200, json={"receipts": [{"id": "R1", "signedById": "u2", "items": [{"itemId": "x77"}]}]})
        return httpx.Response(200, json={"users": [{"id": "u2", "name": "Dana"}]})

    providers = _providers(handler)

    receipts = providers.receipts.fetch_all()
    people = providers.recipients.list()

    assert receipts[0].bound_instance_ids == ("x77",)
    assert [person.name for person in people] == ["Dana"]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"message": "boom"}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"unexpected": True}),
    ],
)
def test_fetch_failures_become_transient_errors(response: httpx.Response) -> None:
    providers = _providers(lambda request: response)

    with pytest.raises(TransientFetchError):
        providers.catalog.fetch_available()


def test_network_failure_becomes_transient_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    providers = _providers(handler)

    with pytest.raises(TransientFetchError, match="connection refused"):
        providers.receipts.fetch_all()


def test_create_posts_flat_item_list() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(201, json={"id": "R7", "signedById": "u2", "createdById": "u1", "items": []})

    providers = _providers(handler)
    receipt = providers.receipts.create(
        ReceiptSubmission(recipient_id="u2", instance_ids=("x77", "h1"), created_by_id="u1")
    )

    assert captured[0].method == "POST"
    assert captured[0].url.path == "/api/receipts/sign"
    assert json.loads(captured[0].content) == {"createdById": "u1", "signedById": "u2", "items": ["x77", "h1"]}
    assert receipt.id == "R7"


def test_update_patches_and_echoes_when_body_is_empty() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(204)

    providers = _providers(handler)
    receipt = providers.receipts.update(
        "R1", ReceiptSubmission(recipient_id="u2", instance_ids=("h9",), receipt_id="R1")
    )

    assert captured[0].method == "PATCH"
    assert captured[0].url.path == "/api/receipts/R1"
    assert json.loads(captured[0].content) == {"signedById": "u2", "items": ["h9"]}
    assert receipt.id == "R1"
    assert receipt.bound_instance_ids == ("h9",)


@pytest.mark.parametrize("status_code", [403, 409])
def test_conflict_statuses_raise_conflict_with_server_message(status_code: int) -> None:
    providers = _providers(lambda request: httpx.Response(status_code, json={"message": "Item x77 already signed"}))

    with pytest.raises(ConflictOnSubmit, match="Item x77 already signed"):
        providers.receipts.create(ReceiptSubmission(recipient_id="u2", instance_ids=("x77",)))


def test_other_submit_failures_raise_submission_error() -> None:
    providers = _providers(lambda request: httpx.Response(500, json={"errors": ["db down"]}))

    with pytest.raises(SubmissionError) as excinfo:
        providers.receipts.create(ReceiptSubmission(recipient_id="u2", instance_ids=("x77",)))

    assert not isinstance(excinfo.value, ConflictOnSubmit)
    assert "db down" in str(excinfo.value)


def test_create_without_returned_id_is_a_submission_error() -> None:
    providers = _providers(lambda request: httpx.Response(201))

    with pytest.raises(SubmissionError):
        providers.receipts.create(ReceiptSubmission(recipient_id="u2", instance_ids=("x77",)))
