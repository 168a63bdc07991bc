"""Pydantic models for OLI data structures.

Input payloads accept the field spellings used by OLI label files and API
clients; aliases are resolved here, before any validation runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from oli.sdk.constants import ATTESTATION_RECIPIENT, ZERO_UID
from oli.sdk.errors import FormatError


class SubmissionState(str, Enum):
    """Lifecycle of one submission."""
    RECEIVED = "received"
    VALIDATED = "validated"
    ENCODED = "encoded"
    SIGNED = "signed"
    TRANSACTED = "transacted"
    SUBMITTED = "submitted"
    COMPLETED = "completed"
    FAILED = "failed"


class LabelPayload(BaseModel):
    """Label as supplied by a caller, before validation."""

    model_config = ConfigDict(populate_by_name=True)

    address: str = Field(
        ...,
        validation_alias=AliasChoices("address", "caip10", "caip_10"),
        description="Plain address or CAIP-10 account id",
    )
    chain_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("chain_id", "chainId", "chainID"),
        description="CAIP-2 chain id, optional when address is CAIP-10",
    )
    tags: Any = Field(default_factory=dict, description="tag_id -> value mapping")
    ref_uid: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ref_uid", "refUid", "refuid"),
        description="UID of a referenced attestation",
    )

    @field_validator("chain_id", mode="before")
    @classmethod
    def coerce_chain_id(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @classmethod
    def from_record(cls, record: LabelPayload | dict[str, Any]) -> LabelPayload:
        """Map one bulk record onto a LabelPayload."""
        if isinstance(record, LabelPayload):
            return record
        if not isinstance(record, dict):
            raise FormatError(f"Each label must be an object. Received: {record!r}")
        try:
            payload = cls.model_validate(record)
        except ValidationError as e:
            raise FormatError(f"Each label must include an address or caip10 field: {e}")
        if not payload.address:
            raise FormatError("Each label must include an address or caip10 field.")
        return payload


class ValidatedLabel(BaseModel):
    """Label after normalization; immutable from here on."""

    model_config = ConfigDict(frozen=True)

    address: str
    chain_id: str
    tags: dict[str, Any]
    ref_uid: str = ZERO_UID


class TrustListPayload(BaseModel):
    """Trust list naming an owner's trusted attesters and attestations."""

    model_config = ConfigDict(populate_by_name=True)

    owner_name: str = Field(..., validation_alias=AliasChoices("owner_name", "ownerName"))
    attesters: list[Any] = Field(default_factory=list)
    attestations: list[Any] = Field(default_factory=list)


@dataclass(frozen=True)
class PreparedAttestation:
    """Validated and encoded attestation, ready to be signed or broadcast."""

    schema: str
    data: bytes
    ref_uid: str = ZERO_UID
    recipient: str = ATTESTATION_RECIPIENT
    expiration_time: int = 0
    revocable: bool = True


class SubmissionResult(BaseModel):
    """Outcome of a label or trust list submission."""

    success: bool
    onchain: bool
    status: SubmissionState = SubmissionState.COMPLETED
    transaction_hash: str | None = None
    uid: str | None = None
    uids: list[str] | None = None
    eas_schema_chain: int | None = None
    eas_schema: str | None = None
    # Passed through from the API response when present.
    accepted: Any = None
    duplicates: Any = None
    failed_validation: Any = None
    error: str | None = None


class RevocationResult(BaseModel):
    """Outcome of a revocation transaction."""

    uid: str
    transaction_hash: str
    onchain: bool


class CachedDefinitions(BaseModel):
    """On-disk cache of tag definitions and value sets."""

    model_config = ConfigDict(populate_by_name=True)

    fetched_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="fetchedAt"
    )
    tag_definitions: dict[str, Any] = Field(default_factory=dict, alias="tagDefinitions")
    value_sets: dict[str, list[str]] = Field(default_factory=dict, alias="valueSets")
