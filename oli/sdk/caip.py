"""CAIP-2 chain ids and CAIP-10 account ids."""

from __future__ import annotations

import re
from typing import NamedTuple

from oli.sdk.errors import FormatError

CAIP10_PATTERN = re.compile(r"^([^:]+):([^:]+):([^:]+)$")


class Caip10Parts(NamedTuple):
    chain_id: str
    address: str


def is_caip10(value: str) -> bool:
    """Return True if value looks like <namespace>:<reference>:<address>."""
    return isinstance(value, str) and CAIP10_PATTERN.fullmatch(value) is not None


def parse_caip10(value: str) -> Caip10Parts:
    """Split a CAIP-10 id into its CAIP-2 chain id and address."""
    match = CAIP10_PATTERN.fullmatch(value) if isinstance(value, str) else None
    if not match:
        raise FormatError(
            f"Invalid CAIP-10 format: {value}. Expected <namespace>:<reference>:<address>."
        )
    namespace, reference, address = match.groups()
    return Caip10Parts(f"{namespace}:{reference}", address)


def build_caip10(chain_id: str, address: str) -> str:
    """Join a CAIP-2 chain id and an address."""
    return f"{chain_id}:{address}"


def split_caip2(chain_id: str) -> tuple[str, str]:
    """Split a CAIP-2 chain id into namespace and reference."""
    namespace, sep, reference = chain_id.partition(":")
    if not sep:
        raise FormatError(f"Invalid CAIP-2 chain id: {chain_id}")
    return namespace, reference
