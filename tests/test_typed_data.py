"""Test EIP-712 typed data construction and local signing."""

from __future__ import annotations

import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data

from oli.sdk.constants import ATTESTATION_RECIPIENT, LABEL_POOL_SCHEMA, ZERO_UID
from oli.sdk.signer import LocalSigner
from oli.sdk.typed_data import ATTEST_TYPES, build_domain, build_offchain_typed_data
from tests.helpers import TEST_NETWORK, TEST_PRIVATE_KEY


def _typed(**overrides: object):
    args = {
        "schema": LABEL_POOL_SCHEMA,
        "recipient": ATTESTATION_RECIPIENT,
        "time": 1_700_000_000,
        "ref_uid": ZERO_UID,
        "data": b"\xde\xad",
        "salt": b"\x07" * 32,
        "domain": build_domain(TEST_NETWORK.chain_id, TEST_NETWORK.eas_address),
    }
    args.update(overrides)
    return build_offchain_typed_data(**args)  # type: ignore[arg-type]


def test_build_domain() -> None:
    assert build_domain(8453, "0x4200000000000000000000000000000000000021") == {
        "name": "EAS Attestation",
        "version": "1.2.0",
        "chainId": 8453,
        "verifyingContract": "0x4200000000000000000000000000000000000021",
    }


def test_attest_type_field_order() -> None:
    assert [field["name"] for field in ATTEST_TYPES["Attest"]] == [
        "version", "schema", "recipient", "time", "expirationTime", "revocable", "refUID", "data", "salt"
    ]


def test_build_offchain_typed_data_defaults() -> None:
    """Test unset expiration and revocability fall back to 0 and True."""
    typed = _typed()

    assert typed.primary_type == "Attest"
    assert typed.message["version"] == 2
    assert typed.message["expirationTime"] == 0
    assert typed.message["revocable"] is True
    assert typed.message["data"] == "0xdead"
    assert typed.message["salt"] == "0x" + "07" * 32


def test_build_offchain_typed_data_explicit_values() -> None:
    typed = _typed(expiration_time=99, revocable=False)
    assert typed.message["expirationTime"] == 99
    assert typed.message["revocable"] is False


def test_signing_message_uses_bytes() -> None:
    message = _typed().signing_message()

    assert message["schema"] == bytes.fromhex(LABEL_POOL_SCHEMA[2:])
    assert message["refUID"] == b"\x00" * 32
    assert message["salt"] == b"\x07" * 32
    assert message["data"] == b"\xde\xad"


def test_to_api_dict() -> None:
    """Test numeric fields are stringified for the API payload."""
    payload = _typed().to_api_dict("0x" + "ab" * 32, "0x01", "0x02", 27)

    assert payload["domain"]["chainId"] == "8453"
    assert payload["message"]["time"] == "1700000000"
    assert payload["message"]["expirationTime"] == "0"
    assert payload["message"]["recipient"] == ATTESTATION_RECIPIENT
    assert payload["primaryType"] == "Attest"
    assert payload["uid"] == "0x" + "ab" * 32
    assert payload["version"] == 2
    assert payload["signature"] == {"r": "0x01", "s": "0x02", "v": 27}


def test_local_signer_signature_recovers_signer() -> None:
    """Test the typed data signature recovers to the signing account."""
    signer = LocalSigner.from_private_key(TEST_PRIVATE_KEY)
    typed = _typed()

    signature = signer.sign_typed_data(typed)

    signable = encode_typed_data(
        domain_data=typed.domain, message_types=typed.types, message_data=typed.signing_message()
    )
    assert Account.recover_message(signable, signature=signature.signature) == signer.address
    assert len(signature.signature) == 65
    assert signature.v in (27, 28)
    assert signature.r_hex == "0x" + signature.signature[:32].hex()
    assert signature.s_hex == "0x" + signature.signature[32:64].hex()


def test_local_signer_invalid_key() -> None:
    with pytest.raises(ValueError, match="Invalid private key"):
        LocalSigner.from_private_key("0x1234")


def test_local_signer_requires_account() -> None:
    with pytest.raises(ValueError, match="Account is required"):
        LocalSigner(None)  # type: ignore[arg-type]
