"""Test the OLI API HTTP client against a mocked transport."""

from __future__ import annotations

import httpx
import pytest

from oli.sdk.api import OLIApiClient
from oli.sdk.errors import SubmissionError
from tests.helpers import TEST_API_URL, recording_transport, request_json


def _api(handler=None, api_key: str | None = "test-key") -> tuple[OLIApiClient, list[httpx.Request]]:
    transport, requests = recording_transport(handler)
    return OLIApiClient(TEST_API_URL + "/", api_key=api_key, transport=transport), requests


def test_post_attestation() -> None:
    """Test single attestation is posted as JSON without auth header."""
    api, requests = _api()
    record = {"sig": {"uid": "0x01"}, "signer": "0xabc"}

    assert api.post_attestation(record) == {"ok": True}

    assert requests[0].method == "POST"
    assert requests[0].url.path == "/attestation"
    assert request_json(requests[0]) == record
    assert "x-api-key" not in requests[0].headers


def test_post_attestations_bulk_wraps_records() -> None:
    api, requests = _api()
    api.post_attestations_bulk([{"a": 1}, {"b": 2}])

    assert requests[0].url.path == "/attestations/bulk"
    assert request_json(requests[0]) == {"attestations": [{"a": 1}, {"b": 2}]}


def test_post_trust_list() -> None:
    api, requests = _api()
    api.post_trust_list({"sig": {}, "signer": "0xabc"})
    assert requests[0].url.path == "/trust-list"


def test_read_endpoints_send_api_key_and_drop_none_params() -> None:
    """Test authenticated reads carry X-API-Key and skip unset query params."""
    api, requests = _api()
    api.get_labels({"address": "0xabc", "chain_id": None, "limit": 10})

    request = requests[0]
    assert request.method == "GET"
    assert request.url.path == "/labels"
    assert request.headers["x-api-key"] == "test-key"
    assert dict(request.url.params) == {"address": "0xabc", "limit": "10"}


def test_authenticated_endpoints() -> None:
    api, requests = _api()
    api.get_labels_bulk({"addresses": ["0xabc"]})
    api.search_addresses_by_tag({"tag_id": "usage_category", "tag_value": "dex"})
    api.get_attester_analytics({"limit": 5})

    assert [(r.method, r.url.path) for r in requests] == [
        ("POST", "/labels/bulk"),
        ("GET", "/addresses/search"),
        ("GET", "/analytics/attesters"),
    ]
    assert all(r.headers["x-api-key"] == "test-key" for r in requests)


def test_public_endpoints_skip_api_key() -> None:
    api, requests = _api()
    api.get_attestations({"attester": "0xabc"})
    api.get_trust_lists({})

    assert [r.url.path for r in requests] == ["/attestations", "/trust-lists"]
    assert all("x-api-key" not in r.headers for r in requests)


def test_error_status_raises_submission_error() -> None:
    """Test HTTP errors keep upstream status and body."""
    api, _ = _api(lambda request: httpx.Response(422, json={"detail": "bad signature"}))

    with pytest.raises(SubmissionError, match="HTTP 422") as exc_info:
        api.post_attestation({})

    assert exc_info.value.status_code == 422
    assert exc_info.value.body == {"detail": "bad signature"}


def test_error_status_with_text_body() -> None:
    api, _ = _api(lambda request: httpx.Response(500, text="upstream down"))

    with pytest.raises(SubmissionError) as exc_info:
        api.get_attestations({})

    assert exc_info.value.body == "upstream down"


def test_transport_error_raises_submission_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    api, _ = _api(handler)

    with pytest.raises(SubmissionError, match="connection refused"):
        api.post_attestation({})


def test_empty_response_body() -> None:
    api, _ = _api(lambda request: httpx.Response(204))
    assert api.post_attestation({}) is None
