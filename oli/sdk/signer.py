"""EIP-712 signing with a local Ethereum account."""

from __future__ import annotations

from dataclasses import dataclass

from eth_account import Account
from eth_account.signers.local import LocalAccount

from oli.sdk.typed_data import OffchainTypedData


@dataclass(frozen=True)
class TypedDataSignature:
    """65-byte r || s || v signature and its parts."""

    signature: bytes
    r: int
    s: int
    v: int

    @property
    def r_hex(self) -> str:
        return "0x" + self.r.to_bytes(32, "big").hex()

    @property
    def s_hex(self) -> str:
        return "0x" + self.s.to_bytes(32, "big").hex()


class LocalSigner:
    """Signs typed data and transactions with an in-process account."""

    def __init__(self, account: LocalAccount):
        if account is None:
            raise ValueError("Account is required")
        self.account = account

    @classmethod
    def from_private_key(cls, private_key: str) -> LocalSigner:
        try:
            return cls(Account.from_key(private_key))
        except Exception as e:
            raise ValueError(f"Invalid private key: {e}")

    @property
    def address(self) -> str:
        return self.account.address

    def sign_typed_data(self, typed: OffchainTypedData) -> TypedDataSignature:
        """Sign an off-chain attestation's typed data."""
        signed = self.account.sign_typed_data(
            domain_data=typed.domain,
            message_types=typed.types,
            message_data=typed.signing_message(),
        )
        return TypedDataSignature(signature=bytes(signed.signature), r=signed.r, s=signed.s, v=signed.v)
