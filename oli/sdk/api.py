"""HTTP client for the OLI API.

Posts signed off-chain attestations and reads labels, trust lists and
attester analytics.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from oli.sdk.constants import DEFAULT_API_URL
from oli.sdk.errors import SubmissionError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class OLIApiClient:
    """Thin wrapper over httpx for the OLI API endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.http = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self.http.close()

    def _auth_headers(self) -> dict[str, str]:
        return {"X-API-Key": self.api_key} if self.api_key else {}

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
        auth: bool = False,
    ) -> Any:
        """Send a request; wrap transport and status failures in SubmissionError."""
        query = {k: v for k, v in (params or {}).items() if v is not None}
        try:
            resp = self.http.request(
                method,
                path,
                params=query or None,
                json=body,
                headers=self._auth_headers() if auth else None,
            )
        except httpx.HTTPError as e:
            raise SubmissionError(f"{method} {path} failed: {e}")

        if resp.status_code >= 400:
            body_out = _response_body(resp)
            raise SubmissionError(
                f"{method} {path} failed: HTTP {resp.status_code}: {body_out}",
                status_code=resp.status_code,
                body=body_out,
            )
        logger.debug("%s %s -> %s", method, path, resp.status_code)
        return _response_body(resp)

    def post_attestation(self, attestation: dict[str, Any]) -> Any:
        return self._request("POST", "/attestation", body=attestation)

    def post_attestations_bulk(self, attestations: list[dict[str, Any]]) -> Any:
        return self._request("POST", "/attestations/bulk", body={"attestations": attestations})

    def post_trust_list(self, trust_list: dict[str, Any]) -> Any:
        return self._request("POST", "/trust-list", body=trust_list)

    def get_attestations(self, params: dict[str, Any]) -> Any:
        return self._request("GET", "/attestations", params=params)

    def get_trust_lists(self, params: dict[str, Any]) -> Any:
        return self._request("GET", "/trust-lists", params=params)

    def get_labels(self, params: dict[str, Any]) -> Any:
        return self._request("GET", "/labels", params=params, auth=True)

    def get_labels_bulk(self, payload: dict[str, Any]) -> Any:
        return self._request("POST", "/labels/bulk", body=payload, auth=True)

    def search_addresses_by_tag(self, params: dict[str, Any]) -> Any:
        return self._request("GET", "/addresses/search", params=params, auth=True)

    def get_attester_analytics(self, params: dict[str, Any]) -> Any:
        return self._request("GET", "/analytics/attesters", params=params, auth=True)


def _response_body(resp: httpx.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text
