"""Test CAIP-2 and CAIP-10 parsing helpers."""

from __future__ import annotations

import pytest

from oli.sdk.caip import Caip10Parts, build_caip10, is_caip10, parse_caip10, split_caip2
from oli.sdk.errors import FormatError


def test_is_caip10() -> None:
    """Test CAIP-10 detection."""
    assert is_caip10("eip155:8453:0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed")
    assert is_caip10("solana:5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp:7S3P4HxJpyyigGzodYwHtCxZyUQe9JiBMHyRWXArAaKv")

    assert not is_caip10("0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed")
    assert not is_caip10("eip155:8453")
    assert not is_caip10("a:b:c:d")
    assert not is_caip10("eip155::0xabc")
    assert not is_caip10(None)  # type: ignore[arg-type]


def test_parse_caip10() -> None:
    """Test CAIP-10 splitting into chain id and address."""
    parts = parse_caip10("eip155:8453:0xabc")
    assert parts == Caip10Parts("eip155:8453", "0xabc")
    assert parts.chain_id == "eip155:8453"
    assert parts.address == "0xabc"


def test_parse_caip10_invalid() -> None:
    with pytest.raises(FormatError, match="Invalid CAIP-10 format"):
        parse_caip10("eip155:8453")

    with pytest.raises(FormatError, match="Invalid CAIP-10 format"):
        parse_caip10("eip155:8453:0xabc:extra")


def test_build_caip10() -> None:
    assert build_caip10("eip155:1", "0xabc") == "eip155:1:0xabc"


def test_split_caip2() -> None:
    """Test CAIP-2 splitting and rejection of ids without a namespace."""
    assert split_caip2("eip155:8453") == ("eip155", "8453")
    assert split_caip2("bip122:000000000019d6689c085ae165831e93") == ("bip122", "000000000019d6689c085ae165831e93")

    with pytest.raises(FormatError, match="Invalid CAIP-2 chain id"):
        split_caip2("8453")
