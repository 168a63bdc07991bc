"""Chain-aware validation of chain ids, addresses and reference UIDs."""

from __future__ import annotations

import re
from typing import Any

from eth_utils import to_checksum_address

from oli.sdk.constants import ZERO_UID
from oli.sdk.errors import AddressError, FormatError

EVM_ADDRESS_PATTERN = re.compile(r"^(0x)?[0-9a-fA-F]{40}$")
UID_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")
DECIMAL_PATTERN = re.compile(r"^[0-9]+$")

MAX_ADDRESS_LENGTH = 66


def validate_caip2(chain_id: str) -> str:
    """Validate a CAIP-2 chain id and return it unchanged.

    Only the eip155 namespace constrains its reference (a decimal chain
    number or ``any``); other namespaces accept any non-empty reference.
    """
    if not isinstance(chain_id, str) or chain_id.count(":") != 1:
        raise FormatError(
            f"Unsupported chain ID format: {chain_id}. Must be CAIP-2 (e.g., eip155:8453 for Base)."
        )
    namespace, reference = chain_id.split(":")
    if not namespace or not reference:
        raise FormatError(
            f"Unsupported chain ID format: {chain_id}. Must be CAIP-2 (e.g., eip155:8453 for Base)."
        )
    if namespace.lower() == "eip155" and reference != "any" and not DECIMAL_PATTERN.fullmatch(reference):
        raise FormatError(
            f"Invalid eip155 chain_id format: {chain_id}. Expected eip155:<number> or eip155:any"
        )
    return chain_id


def is_evm_chain(chain_id: str) -> bool:
    return chain_id.lower().startswith("eip155:")


def checksum_evm_address(address: Any) -> str:
    """Return the EIP-55 checksummed form of a 20-byte hex address."""
    if not isinstance(address, str) or not EVM_ADDRESS_PATTERN.fullmatch(address):
        raise AddressError(f"Address must be a valid EVM address: {address}")
    if not address.startswith("0x"):
        address = "0x" + address
    return to_checksum_address(address)


def validate_address_for_chain(address: str, chain_id: str) -> str:
    """Validate an address against its chain and return the canonical form."""
    if is_evm_chain(chain_id):
        return checksum_evm_address(address)

    if not address or len(address) > MAX_ADDRESS_LENGTH:
        raise AddressError(
            f"Address to be labelled exceeds maximum length of {MAX_ADDRESS_LENGTH} "
            f"characters or is empty: {address}"
        )
    if ":" in address:
        raise AddressError(f"Address to be labelled must not contain ':' character: {address}")
    return address


def validate_ref_uid(ref_uid: str | None = None) -> str:
    """Validate a 32-byte hex UID, defaulting to the zero UID."""
    value = ZERO_UID if ref_uid is None else ref_uid
    if not isinstance(value, str) or not UID_PATTERN.fullmatch(value):
        raise FormatError(f"refUid must be a 32-byte hex string. Received: {ref_uid}")
    return value


def validate_trust_list(owner_name: Any, attesters: Any, attestations: Any) -> None:
    """Validate trust list fields."""
    if not isinstance(owner_name, str) or not 3 <= len(owner_name) <= 100:
        raise FormatError("Owner name must be 3-100 ASCII characters.")
    if not owner_name.isascii():
        raise FormatError("Owner name must be ASCII.")
    if not isinstance(attesters, list):
        raise FormatError("attesters must be an array.")
    if not isinstance(attestations, list):
        raise FormatError("attestations must be an array.")


def validate_network_config(eas_address: str | None, label_pool_schema: str | None) -> None:
    """Check that the selected network has an EAS contract and label schema."""
    if not eas_address or not label_pool_schema:
        raise FormatError("EAS address and label pool schema must be configured for selected network.")
