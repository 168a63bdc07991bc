"""ABI encoding of OLI attestation data and EAS UID derivation.

Label and trust list data use the tuple ABI layout of their registered EAS
schemas, so any EAS indexer can decode them. UIDs follow the EAS v2
off-chain packing.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Sequence

from eth_abi import decode, encode
from eth_utils import keccak

from oli.sdk.constants import ATTEST_VERSION
from oli.sdk.errors import EncodingError

LABEL_DATA_TYPES = ["string", "string"]
TRUST_LIST_DATA_TYPES = ["string", "string", "string"]

BytesLike = bytes | str


def to_json(value: Any) -> str:
    """Serialize like JSON.stringify: compact, insertion order, literal unicode."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def encode_label_data(caip10: str, tags: Mapping[str, Any] | str) -> bytes:
    """Encode a label as ``(string caip10, string tagsJson)``.

    Args:
        caip10: CAIP-10 id of the labelled address
        tags: Tag mapping, or an already serialized JSON string

    Returns:
        ABI-encoded attestation data
    """
    tags_json = tags if isinstance(tags, str) else to_json(dict(tags))
    return encode(LABEL_DATA_TYPES, [caip10, tags_json])


def decode_label_data(data: BytesLike) -> tuple[str, dict[str, Any]]:
    """Decode label data back into its CAIP-10 id and tag mapping."""
    caip10, tags_json = decode(LABEL_DATA_TYPES, to_bytes(data))
    return caip10, json.loads(tags_json)


def encode_trust_list_data(
    owner_name: str,
    attesters: Sequence[Mapping[str, Any]] | None,
    attestations: Sequence[Mapping[str, Any]] | None,
) -> bytes:
    """Encode a trust list as ``(string ownerName, string attestersJson, string attestationsJson)``."""
    return encode(
        TRUST_LIST_DATA_TYPES,
        [owner_name, to_json(list(attesters or [])), to_json(list(attestations or []))],
    )


def decode_trust_list_data(data: BytesLike) -> tuple[str, list[Any], list[Any]]:
    owner_name, attesters_json, attestations_json = decode(TRUST_LIST_DATA_TYPES, to_bytes(data))
    return owner_name, json.loads(attesters_json), json.loads(attestations_json)


def calculate_uid_v2(
    schema: BytesLike,
    recipient: BytesLike,
    attester: BytesLike,
    timestamp: int,
    data: BytesLike,
    expiration_time: int = 0,
    revocable: bool = True,
    ref_uid: BytesLike = b"\x00" * 32,
    salt: BytesLike = b"\x00" * 32,
    bump: int = 0,
) -> str:
    """Compute the EAS v2 UID of an attestation.

    ``bump`` re-derives a fresh UID when a collision is detected.
    """
    packed = pack_uid_fields(
        schema, recipient, attester, timestamp, data, expiration_time, revocable, ref_uid, salt, bump
    )
    return "0x" + keccak(packed).hex()


def pack_uid_fields(
    schema: BytesLike,
    recipient: BytesLike,
    attester: BytesLike,
    timestamp: int,
    data: BytesLike,
    expiration_time: int,
    revocable: bool,
    ref_uid: BytesLike,
    salt: BytesLike,
    bump: int,
) -> bytes:
    """Pack UID fields in EAS order, big-endian."""
    return b"".join(
        [
            uint_bytes(ATTEST_VERSION, 2, "version"),
            fixed_bytes(schema, 32, "schema"),
            fixed_bytes(recipient, 20, "recipient"),
            fixed_bytes(attester, 20, "attester"),
            uint_bytes(timestamp, 8, "timestamp"),
            uint_bytes(expiration_time, 8, "expirationTime"),
            b"\x01" if revocable else b"\x00",
            fixed_bytes(ref_uid, 32, "refUID"),
            to_bytes(data, "data"),
            fixed_bytes(salt, 32, "salt"),
            uint_bytes(bump, 4, "bump"),
        ]
    )


def to_bytes(value: BytesLike, name: str = "value") -> bytes:
    """Accept raw bytes or a 0x-prefixed hex string."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str) and value.startswith(("0x", "0X")):
        try:
            return bytes.fromhex(value[2:])
        except ValueError:
            raise EncodingError(f"{name} is not valid hex: {value}")
    raise EncodingError(f"{name} must be bytes or a 0x-prefixed hex string. Received: {value!r}")


def fixed_bytes(value: BytesLike, length: int, name: str) -> bytes:
    raw = to_bytes(value, name)
    if len(raw) != length:
        raise EncodingError(f"{name} must be exactly {length} bytes, got {len(raw)}")
    return raw


def uint_bytes(value: int, length: int, name: str) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"{name} must be an integer. Received: {value!r}")
    try:
        return value.to_bytes(length, "big")
    except OverflowError:
        raise EncodingError(f"{name} does not fit in {length} unsigned bytes: {value}")
