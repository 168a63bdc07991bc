"""Core OLI SDK functionality.

Provides the high-level client that validates, encodes and submits label
and trust list attestations, on-chain through the EAS contract or off-chain
as signed records posted to the OLI API.
"""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Sequence

from eth_utils import keccak

from oli.sdk.api import OLIApiClient
from oli.sdk.caip import build_caip10, is_caip10, parse_caip10
from oli.sdk.constants import CHAIN_ID_PLACEHOLDERS, ZERO_UID, NetworkPreset
from oli.sdk.definitions import ReferenceData
from oli.sdk.encoding import encode_label_data, encode_trust_list_data
from oli.sdk.errors import ConflictError, FormatError
from oli.sdk.models import (
    LabelPayload,
    PreparedAttestation,
    RevocationResult,
    SubmissionResult,
    SubmissionState,
    TrustListPayload,
    ValidatedLabel,
)
from oli.sdk.registry import EASRegistry
from oli.sdk.signer import LocalSigner
from oli.sdk.tags import validate_tags
from oli.sdk.typed_data import build_domain, build_offchain_typed_data
from oli.sdk.validation import (
    validate_address_for_chain,
    validate_caip2,
    validate_network_config,
    validate_ref_uid,
    validate_trust_list,
)

logger = logging.getLogger(__name__)

EVM_ANY_CHAIN = "eip155:any"


class SubmissionKind(str, Enum):
    LABEL = "label"
    LABEL_BULK = "label-bulk"
    TRUST_LIST = "trust-list"


def validate_label(
    address: str,
    chain_id: str,
    tags: Any,
    ref_uid: str | None,
    reference: ReferenceData,
) -> ValidatedLabel:
    """Validate and normalize one label against the reference data."""
    validate_caip2(chain_id)
    return ValidatedLabel(
        address=validate_address_for_chain(address, chain_id),
        chain_id=chain_id,
        tags=validate_tags(tags, reference),
        ref_uid=validate_ref_uid(ref_uid),
    )


def is_chain_id_placeholder(chain_id: str | None) -> bool:
    return chain_id is None or chain_id.strip() in CHAIN_ID_PLACEHOLDERS


@dataclass
class Finalized:
    """What a finalizer hands back after submitting."""

    uids: list[str]
    transaction_hash: str | None = None
    response: Any = None


class OffchainFinalizer:
    """Signs attestations with EIP-712 and posts them to the OLI API."""

    def __init__(self, signer: LocalSigner, api: OLIApiClient, domain: dict[str, Any]):
        self.signer = signer
        self.api = api
        self.domain = domain

    def sign(self, attestation: PreparedAttestation) -> tuple[str, dict[str, Any]]:
        """Sign one attestation; return its UID and the API record."""
        typed = build_offchain_typed_data(
            schema=attestation.schema,
            recipient=attestation.recipient,
            time=int(time.time()),
            ref_uid=attestation.ref_uid,
            data=attestation.data,
            salt=secrets.token_bytes(32),
            domain=self.domain,
            expiration_time=attestation.expiration_time,
            revocable=attestation.revocable,
        )
        signature = self.signer.sign_typed_data(typed)
        # Off-chain UIDs are derived from the signature, not from calculate_uid_v2.
        uid = "0x" + keccak(signature.signature).hex()
        record = {
            "sig": typed.to_api_dict(uid, signature.r_hex, signature.s_hex, signature.v),
            "signer": self.signer.address,
        }
        return uid, record

    def finalize(self, kind: SubmissionKind, attestations: Sequence[PreparedAttestation]) -> Finalized:
        signed = [self.sign(attestation) for attestation in attestations]
        uids = [uid for uid, _ in signed]
        records = [record for _, record in signed]
        logger.debug("Signed %d off-chain %s attestation(s)", len(records), kind.value)

        if kind is SubmissionKind.LABEL_BULK:
            response = self.api.post_attestations_bulk(records)
        elif kind is SubmissionKind.TRUST_LIST:
            response = self.api.post_trust_list(records[0])
        else:
            response = self.api.post_attestation(records[0])
        return Finalized(uids=uids, response=response)


class OnchainFinalizer:
    """Broadcasts attestations to the EAS contract."""

    def __init__(self, registry: EASRegistry, gas_limit: int | None = None):
        self.registry = registry
        self.gas_limit = gas_limit

    def finalize(self, kind: SubmissionKind, attestations: Sequence[PreparedAttestation]) -> Finalized:
        if kind is SubmissionKind.LABEL_BULK:
            tx_hash, uids = self.registry.multi_attest(attestations[0].schema, attestations, self.gas_limit)
        else:
            tx_hash, uid = self.registry.attest(attestations[0], self.gas_limit)
            uids = [uid]
        return Finalized(uids=uids, transaction_hash=tx_hash)


class OLIClient:
    """High-level client for OLI label and trust list attestations."""

    def __init__(
        self,
        network: NetworkPreset,
        signer: LocalSigner | None = None,
        api: OLIApiClient | None = None,
        registry: EASRegistry | None = None,
        reference_data: ReferenceData | None = None,
        definitions_loader: Callable[[], ReferenceData] | None = None,
    ):
        """Initialize OLI client.

        Args:
            network: EAS deployment and schemas to attest against
            signer: Account signing off-chain attestations
            api: OLI API client (a default one is created if omitted)
            registry: On-chain EAS registry, required for on-chain calls
            reference_data: Tag definitions and value sets, if already loaded
            definitions_loader: Loads reference data on init() when none was given
        """
        if not network:
            raise ValueError("Network is required")

        self.network = network
        self.signer = signer
        self.api = api or OLIApiClient()
        self.registry = registry
        self.reference_data = reference_data
        self.definitions_loader = definitions_loader

    def init(self) -> ReferenceData:
        """Load reference data once and check the network config."""
        validate_network_config(self.network.eas_address, self.network.label_pool_schema)
        if self.reference_data is None:
            if self.definitions_loader is None:
                logger.warning("No definitions loader configured; tags are not checked against OLI definitions.")
                self.reference_data = ReferenceData.empty()
            else:
                self.reference_data = self.definitions_loader()
        return self.reference_data

    # --- Input resolution and validation ---
    def resolve_label_input(self, payload: LabelPayload | dict[str, Any]) -> LabelPayload:
        """Resolve a CAIP-10 address into its chain id and plain address."""
        label = LabelPayload.from_record(payload)
        address = label.address
        chain_id = None if is_chain_id_placeholder(label.chain_id) else label.chain_id

        if is_caip10(address):
            parsed = parse_caip10(address)
            if chain_id and chain_id != parsed.chain_id:
                raise ConflictError(
                    f"Conflicting chainId inputs. Provided {chain_id} but CAIP-10 uses {parsed.chain_id}."
                )
            chain_id, address = parsed
        elif chain_id is None:
            raise FormatError("chainId is required unless the address is provided in CAIP-10 format.")

        return label.model_copy(update={"address": address, "chain_id": chain_id})

    def resolve_read_address(self, address: str, chain_id: str | None = None) -> tuple[str, str | None]:
        """Resolve an address for read queries; the chain id may stay unset."""
        chain_id = None if is_chain_id_placeholder(chain_id) else chain_id
        if is_caip10(address):
            parsed = parse_caip10(address)
            if chain_id and chain_id != parsed.chain_id:
                raise ConflictError(
                    f"Conflicting chainId inputs. Provided {chain_id} but CAIP-10 uses {parsed.chain_id}."
                )
            chain_id, address = parsed

        if chain_id:
            validate_caip2(chain_id)
            return validate_address_for_chain(address, chain_id), chain_id
        return validate_address_for_chain(address, EVM_ANY_CHAIN), None

    def validate_label(self, payload: LabelPayload | dict[str, Any]) -> ValidatedLabel:
        """Resolve, validate and normalize a label."""
        reference = self.init()
        resolved = self.resolve_label_input(payload)
        return validate_label(resolved.address, resolved.chain_id, resolved.tags, resolved.ref_uid, reference)

    def validate_trust_list(self, payload: TrustListPayload | dict[str, Any]) -> TrustListPayload:
        if isinstance(payload, TrustListPayload):
            owner_name, attesters, attestations = payload.owner_name, payload.attesters, payload.attestations
        elif isinstance(payload, dict):
            owner_name = payload.get("owner_name", payload.get("ownerName"))
            attesters = payload.get("attesters", [])
            attestations = payload.get("attestations", [])
        else:
            raise FormatError("Trust list must be an object.")

        validate_trust_list(owner_name, attesters, attestations)
        return TrustListPayload(owner_name=owner_name, attesters=attesters, attestations=attestations)

    # --- Encoding ---
    def prepare_label(self, label: ValidatedLabel) -> PreparedAttestation:
        data = encode_label_data(build_caip10(label.chain_id, label.address), label.tags)
        return PreparedAttestation(schema=self.network.label_pool_schema, data=data, ref_uid=label.ref_uid)

    def prepare_trust_list(self, trust_list: TrustListPayload) -> PreparedAttestation:
        data = encode_trust_list_data(trust_list.owner_name, trust_list.attesters, trust_list.attestations)
        return PreparedAttestation(schema=self.network.label_trust_schema, data=data, ref_uid=ZERO_UID)

    # --- Submission ---
    def submit_label(
        self, payload: LabelPayload | dict[str, Any], onchain: bool = False, gas_limit: int | None = None
    ) -> SubmissionResult:
        """Validate, encode and submit one label."""
        self._transition(SubmissionKind.LABEL, SubmissionState.RECEIVED)
        label = self.validate_label(payload)
        self._transition(SubmissionKind.LABEL, SubmissionState.VALIDATED)
        prepared = self.prepare_label(label)
        self._transition(SubmissionKind.LABEL, SubmissionState.ENCODED)
        return self._finalize(SubmissionKind.LABEL, [prepared], onchain, gas_limit)

    def submit_label_bulk(
        self,
        labels: Sequence[LabelPayload | dict[str, Any]],
        onchain: bool = False,
        gas_limit: int | None = None,
    ) -> SubmissionResult:
        """Submit many labels at once.

        Every label is validated before anything is signed or sent; one
        invalid label fails the whole batch.
        """
        if not isinstance(labels, (list, tuple)):
            raise FormatError("Bulk labels must be an array of labels.")
        if not labels:
            raise FormatError("Bulk labels must contain at least one label.")

        self._transition(SubmissionKind.LABEL_BULK, SubmissionState.RECEIVED)
        validated = [self.validate_label(LabelPayload.from_record(record)) for record in labels]
        self._transition(SubmissionKind.LABEL_BULK, SubmissionState.VALIDATED)
        prepared = [self.prepare_label(label) for label in validated]
        self._transition(SubmissionKind.LABEL_BULK, SubmissionState.ENCODED)
        return self._finalize(SubmissionKind.LABEL_BULK, prepared, onchain, gas_limit)

    def submit_trust_list(
        self, payload: TrustListPayload | dict[str, Any], onchain: bool = False, gas_limit: int | None = None
    ) -> SubmissionResult:
        """Validate, encode and submit a trust list."""
        self.init()
        self._transition(SubmissionKind.TRUST_LIST, SubmissionState.RECEIVED)
        trust_list = self.validate_trust_list(payload)
        self._transition(SubmissionKind.TRUST_LIST, SubmissionState.VALIDATED)
        prepared = self.prepare_trust_list(trust_list)
        self._transition(SubmissionKind.TRUST_LIST, SubmissionState.ENCODED)
        return self._finalize(SubmissionKind.TRUST_LIST, [prepared], onchain, gas_limit)

    def revoke(
        self, uid: str, onchain: bool = False, gas_limit: int | None = None, schema: str | None = None
    ) -> RevocationResult:
        """Revoke an attestation by UID.

        Off-chain attestations are revoked through the EAS revokeOffchain
        call, so both paths send a transaction and cost gas.
        """
        if not uid:
            raise FormatError("Attestation UID required")
        uid = validate_ref_uid(uid)
        registry = self._require_registry()

        if onchain:
            tx_hash = registry.revoke(schema or self.network.label_pool_schema, uid, gas_limit)
        else:
            logger.info("Revoking off-chain attestation %s with an on-chain revokeOffchain call", uid)
            tx_hash = registry.revoke_offchain(uid, gas_limit)
        logger.info("Revoked %s in transaction %s", uid, tx_hash)
        return RevocationResult(uid=uid, transaction_hash=tx_hash, onchain=onchain)

    # --- Read side ---
    def get_labels(
        self, address: str, chain_id: str | None = None, limit: int | None = None, **params: Any
    ) -> Any:
        """Fetch labels of an address (plain or CAIP-10)."""
        resolved_address, resolved_chain = self.resolve_read_address(address, chain_id)
        return self.api.get_labels({"address": resolved_address, "chain_id": resolved_chain, "limit": limit, **params})

    def get_labels_bulk(self, addresses: Sequence[str], **params: Any) -> Any:
        checked = [validate_address_for_chain(address, EVM_ANY_CHAIN) for address in addresses]
        return self.api.get_labels_bulk({"addresses": checked, **params})

    def search_addresses_by_tag(
        self, tag_id: str, tag_value: str, chain_id: str | None = None, limit: int | None = None, **params: Any
    ) -> Any:
        if chain_id and not is_chain_id_placeholder(chain_id):
            validate_caip2(chain_id)
        else:
            chain_id = None
        query = {"tag_id": tag_id, "tag_value": tag_value, "chain_id": chain_id, "limit": limit, **params}
        return self.api.search_addresses_by_tag(query)

    def get_attester_analytics(self, chain_id: str | None = None, limit: int | None = None, **params: Any) -> Any:
        if is_chain_id_placeholder(chain_id):
            chain_id = None
        return self.api.get_attester_analytics({"chain_id": chain_id, "limit": limit, **params})

    def get_attestations(self, **params: Any) -> Any:
        return self.api.get_attestations(params)

    def get_trust_lists(self, **params: Any) -> Any:
        return self.api.get_trust_lists(params)

    # --- Internal helpers ---
    def _require_signer(self) -> LocalSigner:
        if not self.signer:
            raise ValueError("No signer configured. Set OLI_PRIVATE_KEY or pass a signer.")
        return self.signer

    def _require_registry(self) -> EASRegistry:
        if not self.registry:
            raise ValueError("No EAS registry configured. Set OLI_PRIVATE_KEY and OLI_RPC_URL.")
        return self.registry

    def _finalizer(self, onchain: bool, gas_limit: int | None) -> OffchainFinalizer | OnchainFinalizer:
        if onchain:
            return OnchainFinalizer(self._require_registry(), gas_limit)
        domain = build_domain(self.network.chain_id, self.network.eas_address)
        return OffchainFinalizer(self._require_signer(), self.api, domain)

    def _finalize(
        self,
        kind: SubmissionKind,
        prepared: list[PreparedAttestation],
        onchain: bool,
        gas_limit: int | None,
    ) -> SubmissionResult:
        finalizer = self._finalizer(onchain, gas_limit)
        self._transition(kind, SubmissionState.TRANSACTED if onchain else SubmissionState.SIGNED)
        try:
            finalized = finalizer.finalize(kind, prepared)
        except Exception:
            self._transition(kind, SubmissionState.FAILED)
            raise
        self._transition(kind, SubmissionState.SUBMITTED)

        result = self._build_result(kind, prepared[0].schema, onchain, finalized)
        self._transition(kind, result.status)
        if onchain:
            logger.info("Submitted %s on-chain in %s: %s", kind.value, finalized.transaction_hash, finalized.uids)
        else:
            logger.info("Submitted %s off-chain: %s", kind.value, finalized.uids)
        return result

    def _build_result(
        self, kind: SubmissionKind, schema: str, onchain: bool, finalized: Finalized
    ) -> SubmissionResult:
        response = finalized.response if isinstance(finalized.response, dict) else {}
        result = SubmissionResult(
            success=True,
            onchain=onchain,
            status=SubmissionState.COMPLETED,
            transaction_hash=finalized.transaction_hash,
            eas_schema_chain=self.network.chain_id if onchain else None,
            eas_schema=schema,
            accepted=response.get("accepted"),
            duplicates=response.get("duplicates"),
            failed_validation=response.get("failed_validation"),
        )
        if kind is SubmissionKind.LABEL_BULK:
            result.uids = finalized.uids
        else:
            result.uid = finalized.uids[0]
        return result

    def _transition(self, kind: SubmissionKind, state: SubmissionState) -> None:
        logger.debug("%s submission: %s", kind.value, state.value)
