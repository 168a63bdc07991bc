"""Test EAS contract transactions with a mocked Web3 instance."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from oli.sdk.constants import ATTESTATION_RECIPIENT, LABEL_POOL_SCHEMA, NETWORK_PRESETS, ZERO_UID
from oli.sdk.errors import SubmissionError
from oli.sdk.models import PreparedAttestation
from oli.sdk.registry import EASRegistry

SENDER = "0x19E7E376E7C213B7E7e7e46cc70A5dD086DAff2A"
TX_BYTES = b"\x12" * 32
UID_BYTES = b"\xaa" * 32


def _registry(receipt_status: int = 1, uids: list[bytes] | None = None) -> tuple[EASRegistry, MagicMock]:
    w3 = MagicMock()
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.send_raw_transaction.return_value = TX_BYTES
    w3.eth.wait_for_transaction_receipt.return_value = {"status": receipt_status}

    account = MagicMock()
    account.address = SENDER

    registry = EASRegistry(w3, account, NETWORK_PRESETS["base"].eas_address, 8453)
    events = [{"args": {"uid": uid}} for uid in (uids if uids is not None else [UID_BYTES])]
    registry.contract.events.Attested.return_value.process_receipt.return_value = events
    return registry, w3


def _prepared(data: bytes = b"\x01") -> PreparedAttestation:
    return PreparedAttestation(schema=LABEL_POOL_SCHEMA, data=data)


def test_registry_requires_eas_address() -> None:
    with pytest.raises(ValueError, match="EAS address is required"):
        EASRegistry(MagicMock(), MagicMock(), "", 8453)


def test_attest() -> None:
    """Test attest builds the request tuple and returns tx hash and UID."""
    registry, w3 = _registry()

    tx_hash, uid = registry.attest(_prepared(), gas_limit=500_000)

    assert tx_hash == "0x" + "12" * 32
    assert uid == "0x" + "aa" * 32

    request = registry.contract.functions.attest.call_args[0][0]
    schema, data = request
    assert schema == bytes.fromhex(LABEL_POOL_SCHEMA[2:])
    assert data == (ATTESTATION_RECIPIENT, 0, True, bytes.fromhex(ZERO_UID[2:]), b"\x01", 0)

    params = registry.contract.functions.attest.return_value.build_transaction.call_args[0][0]
    assert params == {"from": SENDER, "nonce": 7, "chainId": 8453, "gas": 500_000}
    w3.eth.wait_for_transaction_receipt.assert_called_once_with(TX_BYTES)


def test_attest_without_gas_limit_lets_node_estimate() -> None:
    registry, _ = _registry()
    registry.attest(_prepared())

    params = registry.contract.functions.attest.return_value.build_transaction.call_args[0][0]
    assert "gas" not in params


def test_attest_without_event_fails() -> None:
    registry, _ = _registry(uids=[])
    with pytest.raises(SubmissionError, match="emitted no Attested event"):
        registry.attest(_prepared())


def test_multi_attest_keeps_order() -> None:
    """Test multiAttest sends one request group and returns UIDs in order."""
    registry, _ = _registry(uids=[b"\x01" * 32, b"\x02" * 32])

    tx_hash, uids = registry.multi_attest(LABEL_POOL_SCHEMA, [_prepared(b"\x01"), _prepared(b"\x02")])

    assert tx_hash == "0x" + "12" * 32
    assert uids == ["0x" + "01" * 32, "0x" + "02" * 32]
    requests = registry.contract.functions.multiAttest.call_args[0][0]
    assert len(requests) == 1
    assert [item[4] for item in requests[0][1]] == [b"\x01", b"\x02"]


def test_multi_attest_event_count_mismatch() -> None:
    registry, _ = _registry(uids=[b"\x01" * 32])
    with pytest.raises(SubmissionError, match="emitted 1 Attested events for 2 labels"):
        registry.multi_attest(LABEL_POOL_SCHEMA, [_prepared(), _prepared()])


def test_revoke() -> None:
    registry, _ = _registry()
    uid = "0x" + "ab" * 32

    assert registry.revoke(LABEL_POOL_SCHEMA, uid) == "0x" + "12" * 32

    request = registry.contract.functions.revoke.call_args[0][0]
    assert request == (bytes.fromhex(LABEL_POOL_SCHEMA[2:]), (bytes.fromhex("ab" * 32), 0))


def test_revoke_offchain() -> None:
    registry, _ = _registry()
    uid = "0x" + "cd" * 32

    registry.revoke_offchain(uid)

    registry.contract.functions.revokeOffchain.assert_called_once_with(bytes.fromhex("cd" * 32))


def test_reverted_transaction() -> None:
    registry, _ = _registry(receipt_status=0)
    with pytest.raises(SubmissionError, match="reverted"):
        registry.attest(_prepared())


def test_broadcast_failure() -> None:
    """Test node errors surface as SubmissionError."""
    registry, w3 = _registry()
    w3.eth.send_raw_transaction.side_effect = ValueError("nonce too low")

    with pytest.raises(SubmissionError, match="Transaction failed: nonce too low"):
        registry.attest(_prepared())
