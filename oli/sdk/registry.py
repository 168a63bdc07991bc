"""On-chain EAS contract calls.

Builds, signs and broadcasts attest, multiAttest and revoke transactions
and reads UIDs back from the emitted ``Attested`` events.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.exceptions import Web3Exception
from web3.logs import DISCARD

from oli.sdk.encoding import fixed_bytes
from oli.sdk.errors import SubmissionError
from oli.sdk.models import PreparedAttestation

logger = logging.getLogger(__name__)

_REQUEST_DATA_COMPONENTS = [
    {"name": "recipient", "type": "address"},
    {"name": "expirationTime", "type": "uint64"},
    {"name": "revocable", "type": "bool"},
    {"name": "refUID", "type": "bytes32"},
    {"name": "data", "type": "bytes"},
    {"name": "value", "type": "uint256"},
]

EAS_ABI: list[dict[str, Any]] = [
    {
        "inputs": [
            {
                "components": [
                    {"name": "schema", "type": "bytes32"},
                    {"components": _REQUEST_DATA_COMPONENTS, "name": "data", "type": "tuple"},
                ],
                "name": "request",
                "type": "tuple",
            }
        ],
        "name": "attest",
        "outputs": [{"name": "", "type": "bytes32"}],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "inputs": [
            {
                "components": [
                    {"name": "schema", "type": "bytes32"},
                    {"components": _REQUEST_DATA_COMPONENTS, "name": "data", "type": "tuple[]"},
                ],
                "name": "multiRequests",
                "type": "tuple[]",
            }
        ],
        "name": "multiAttest",
        "outputs": [{"name": "", "type": "bytes32[]"}],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "inputs": [
            {
                "components": [
                    {"name": "schema", "type": "bytes32"},
                    {
                        "components": [
                            {"name": "uid", "type": "bytes32"},
                            {"name": "value", "type": "uint256"},
                        ],
                        "name": "data",
                        "type": "tuple",
                    },
                ],
                "name": "request",
                "type": "tuple",
            }
        ],
        "name": "revoke",
        "outputs": [],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "inputs": [{"name": "data", "type": "bytes32"}],
        "name": "revokeOffchain",
        "outputs": [{"name": "", "type": "uint64"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "recipient", "type": "address"},
            {"indexed": True, "name": "attester", "type": "address"},
            {"indexed": False, "name": "uid", "type": "bytes32"},
            {"indexed": True, "name": "schemaUID", "type": "bytes32"},
        ],
        "name": "Attested",
        "type": "event",
    },
]


class EASRegistry:
    """EAS contract bound to one signing account."""

    def __init__(self, w3: Web3, account: LocalAccount, eas_address: str, chain_id: int):
        if not eas_address:
            raise ValueError("EAS address is required")
        self.w3 = w3
        self.account = account
        self.chain_id = chain_id
        self.contract = w3.eth.contract(address=Web3.to_checksum_address(eas_address), abi=EAS_ABI)

    @classmethod
    def connect(cls, rpc_url: str, account: LocalAccount, eas_address: str, chain_id: int) -> EASRegistry:
        """Create a registry talking to a JSON-RPC endpoint."""
        return cls(Web3(Web3.HTTPProvider(rpc_url)), account, eas_address, chain_id)

    def attest(self, attestation: PreparedAttestation, gas_limit: int | None = None) -> tuple[str, str]:
        """Attest once; return (transaction hash, UID)."""
        request = (fixed_bytes(attestation.schema, 32, "schema"), _request_data(attestation))
        tx_hash, receipt = self._transact(self.contract.functions.attest(request), gas_limit)
        uids = self._attested_uids(receipt)
        if not uids:
            raise SubmissionError(f"Transaction {tx_hash} emitted no Attested event")
        return tx_hash, uids[0]

    def multi_attest(
        self, schema: str, attestations: Sequence[PreparedAttestation], gas_limit: int | None = None
    ) -> tuple[str, list[str]]:
        """Attest many records under one schema; UIDs keep request order."""
        requests = [(fixed_bytes(schema, 32, "schema"), [_request_data(a) for a in attestations])]
        tx_hash, receipt = self._transact(self.contract.functions.multiAttest(requests), gas_limit)
        uids = self._attested_uids(receipt)
        if len(uids) != len(attestations):
            raise SubmissionError(
                f"Transaction {tx_hash} emitted {len(uids)} Attested events for {len(attestations)} labels"
            )
        return tx_hash, uids

    def revoke(self, schema: str, uid: str, gas_limit: int | None = None) -> str:
        request = (fixed_bytes(schema, 32, "schema"), (fixed_bytes(uid, 32, "uid"), 0))
        tx_hash, _ = self._transact(self.contract.functions.revoke(request), gas_limit)
        return tx_hash

    def revoke_offchain(self, uid: str, gas_limit: int | None = None) -> str:
        """Record the revocation of an off-chain attestation on the EAS contract."""
        tx_hash, _ = self._transact(self.contract.functions.revokeOffchain(fixed_bytes(uid, 32, "uid")), gas_limit)
        return tx_hash

    def _transact(self, function: Any, gas_limit: int | None) -> tuple[str, Any]:
        """Sign, broadcast and wait for a contract call."""
        sender = self.account.address
        try:
            params: dict[str, Any] = {
                "from": sender,
                "nonce": self.w3.eth.get_transaction_count(sender),
                "chainId": self.chain_id,
            }
            if gas_limit:
                params["gas"] = int(gas_limit)
            tx = function.build_transaction(params)
            signed = self.account.sign_transaction(tx)
            raw_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            tx_hash = Web3.to_hex(raw_hash)
            logger.info("Broadcast transaction %s", tx_hash)
            receipt = self.w3.eth.wait_for_transaction_receipt(raw_hash)
        except (Web3Exception, ValueError, OSError) as e:
            raise SubmissionError(f"Transaction failed: {e}") from e

        if receipt["status"] != 1:
            raise SubmissionError(f"Transaction {tx_hash} reverted", body=dict(receipt))
        return tx_hash, receipt

    def _attested_uids(self, receipt: Any) -> list[str]:
        events = self.contract.events.Attested().process_receipt(receipt, errors=DISCARD)
        return [Web3.to_hex(event["args"]["uid"]) for event in events]


def _request_data(attestation: PreparedAttestation) -> tuple[Any, ...]:
    return (
        Web3.to_checksum_address(attestation.recipient),
        attestation.expiration_time,
        attestation.revocable,
        fixed_bytes(attestation.ref_uid, 32, "refUID"),
        attestation.data,
        0,
    )
