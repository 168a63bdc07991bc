"""Test helper functions for DRY code and simplified test patterns.

Provides a deterministic signer, sample reference data and an httpx
transport that records requests, so client tests run without network.
"""

from __future__ import annotations

import json
from typing import Any, Callable
from unittest.mock import Mock

import httpx

from oli.sdk.api import OLIApiClient
from oli.sdk.client import OLIClient
from oli.sdk.constants import NETWORK_PRESETS, NetworkPreset
from oli.sdk.definitions import ReferenceData
from oli.sdk.registry import EASRegistry
from oli.sdk.signer import LocalSigner

TEST_PRIVATE_KEY = "0x" + "11" * 32
TEST_NETWORK: NetworkPreset = NETWORK_PRESETS["base"]
TEST_API_URL = "https://api.test"

# EIP-55 test vector
ADDRESS_LOWER = "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed"
ADDRESS_CHECKSUM = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


def sample_reference() -> ReferenceData:
    """Small reference data set covering every tag type."""
    return ReferenceData(
        tag_definitions={
            "is_contract": {"tag_id": "is_contract", "schema": {"type": "boolean"}},
            "contract_name": {"tag_id": "contract_name", "schema": {"type": "string"}},
            "deployment_block": {"tag_id": "deployment_block", "schema": {"type": "integer"}},
            "paymaster_fee": {"tag_id": "paymaster_fee", "schema": {"type": "float"}},
            "erc_type": {"tag_id": "erc_type", "schema": {"type": "array"}},
            "usage_category": {"tag_id": "usage_category", "schema": {"type": "string"}},
            "deployer_address": {
                "tag_id": "deployer_address",
                "schema": {"type": "string", "minLength": 42, "maxLength": 42},
            },
        },
        value_sets={
            "usage_category": ["DEX", "lending", "bridge"],
            "erc_type": ["erc20", "erc721"],
        },
    )


def recording_transport(
    handler: Callable[[httpx.Request], httpx.Response] | None = None,
) -> tuple[httpx.MockTransport, list[httpx.Request]]:
    """MockTransport that keeps every request; replies 200 {"ok": true} by default."""
    requests: list[httpx.Request] = []

    def _handle(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if handler is not None:
            return handler(request)
        return httpx.Response(200, json={"ok": True})

    return httpx.MockTransport(_handle), requests


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content)


def make_client(
    transport: httpx.BaseTransport | None = None,
    registry: Any = None,
    signer: LocalSigner | None = None,
    reference: ReferenceData | None = None,
    network: NetworkPreset = TEST_NETWORK,
) -> OLIClient:
    """Build an OLIClient wired to test doubles."""
    if transport is None:
        transport, _ = recording_transport()
    return OLIClient(
        network,
        signer=signer or LocalSigner.from_private_key(TEST_PRIVATE_KEY),
        api=OLIApiClient(TEST_API_URL, api_key="test-key", transport=transport),
        registry=registry,
        reference_data=reference if reference is not None else sample_reference(),
    )


def mock_registry() -> Mock:
    return Mock(spec=EASRegistry)
