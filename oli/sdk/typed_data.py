"""EIP-712 typed data for EAS off-chain attestations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from oli.sdk.constants import ATTEST_VERSION, EAS_DOMAIN_NAME, EAS_DOMAIN_VERSION
from oli.sdk.encoding import BytesLike, fixed_bytes, to_bytes

ATTEST_PRIMARY_TYPE = "Attest"

ATTEST_TYPES: dict[str, list[dict[str, str]]] = {
    "Attest": [
        {"name": "version", "type": "uint16"},
        {"name": "schema", "type": "bytes32"},
        {"name": "recipient", "type": "address"},
        {"name": "time", "type": "uint64"},
        {"name": "expirationTime", "type": "uint64"},
        {"name": "revocable", "type": "bool"},
        {"name": "refUID", "type": "bytes32"},
        {"name": "data", "type": "bytes"},
        {"name": "salt", "type": "bytes32"},
    ]
}


def build_domain(chain_id: int, verifying_contract: str) -> dict[str, Any]:
    """EIP-712 domain of the EAS contract on a chain."""
    return {
        "name": EAS_DOMAIN_NAME,
        "version": EAS_DOMAIN_VERSION,
        "chainId": chain_id,
        "verifyingContract": verifying_contract,
    }


@dataclass(frozen=True)
class OffchainTypedData:
    """Typed data an external signer signs for an off-chain attestation."""

    domain: dict[str, Any]
    message: dict[str, Any]
    types: dict[str, list[dict[str, str]]]
    primary_type: str = ATTEST_PRIMARY_TYPE

    def signing_message(self) -> dict[str, Any]:
        """Message with hex fields as bytes, as EIP-712 hashing expects."""
        message = dict(self.message)
        for name in ("schema", "refUID", "salt"):
            message[name] = fixed_bytes(message[name], 32, name)
        message["data"] = to_bytes(message["data"], "data")
        return message

    def to_api_dict(self, uid: str, r: str, s: str, v: int) -> dict[str, Any]:
        """JSON form posted to the OLI API under ``sig``."""
        return {
            "domain": {**self.domain, "chainId": str(self.domain["chainId"])},
            "primaryType": self.primary_type,
            "types": self.types,
            "message": {
                **self.message,
                "time": str(self.message["time"]),
                "expirationTime": str(self.message["expirationTime"]),
            },
            "uid": uid,
            "version": ATTEST_VERSION,
            "signature": {"r": r, "s": s, "v": v},
        }


def build_offchain_typed_data(
    schema: str,
    recipient: str,
    time: int,
    ref_uid: str,
    data: BytesLike,
    salt: BytesLike,
    domain: dict[str, Any],
    expiration_time: int | None = None,
    revocable: bool | None = None,
) -> OffchainTypedData:
    """Build the ``Attest`` typed data for one attestation."""
    return OffchainTypedData(
        domain=domain,
        types=ATTEST_TYPES,
        message={
            "version": ATTEST_VERSION,
            "schema": schema,
            "recipient": recipient,
            "time": time,
            "expirationTime": 0 if expiration_time is None else expiration_time,
            "revocable": True if revocable is None else revocable,
            "refUID": ref_uid,
            "data": _hex(data),
            "salt": _hex(salt),
        },
    )


def _hex(value: BytesLike) -> str:
    return "0x" + to_bytes(value).hex()
