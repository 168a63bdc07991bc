"""Protocol constants and network presets for OLI on EAS."""

from __future__ import annotations

from dataclasses import dataclass

ZERO_UID = "0x" + "0" * 64

# Recipient used for every attestation issued by this tool, so its
# submissions can be told apart from other issuers'.
ATTESTATION_RECIPIENT = "0x0000000000000000000000000000000000000003"

ATTEST_VERSION = 2

EAS_DOMAIN_NAME = "EAS Attestation"
EAS_DOMAIN_VERSION = "1.2.0"

LABEL_POOL_SCHEMA = "0xcff83309b59685fdae9dad7c63d969150676d51d8eeda66799d1c4898b84556a"
LABEL_TRUST_SCHEMA = "0x6d780a85bfad501090cd82868a0c773c09beafda609d54888a65c106898c363d"

DEFAULT_API_URL = "https://api.openlabelsinitiative.org"

DEFAULT_TAG_DEFINITIONS_URL = (
    "https://raw.githubusercontent.com/openlabelsinitiative/OLI/refs/heads/main/"
    "1_label_schema/tags/tag_definitions.yml"
)

DEFAULT_VALUE_SET_URLS = {
    "owner_project": "https://api.growthepie.com/v1/labels/projects.json",
    "usage_category": (
        "https://raw.githubusercontent.com/openlabelsinitiative/OLI/refs/heads/main/"
        "1_label_schema/tags/valuesets/usage_category.yml"
    ),
}

CACHE_FILE = ".oli-cache.json"

CHAIN_ID_PLACEHOLDERS = frozenset({"", "auto", "-", "_"})


@dataclass(frozen=True)
class NetworkPreset:
    """EAS deployment a network key resolves to."""

    key: str
    name: str
    chain_id: int
    rpc_url: str
    eas_address: str
    label_pool_schema: str = LABEL_POOL_SCHEMA
    label_trust_schema: str = LABEL_TRUST_SCHEMA


NETWORK_PRESETS: dict[str, NetworkPreset] = {
    "base": NetworkPreset(
        key="base",
        name="Base",
        chain_id=8453,
        rpc_url="https://mainnet.base.org",
        eas_address="0x4200000000000000000000000000000000000021",
    ),
    "arbitrum": NetworkPreset(
        key="arbitrum",
        name="Arbitrum One",
        chain_id=42161,
        rpc_url="https://arb1.arbitrum.io/rpc",
        eas_address="0xbD75f629A22Dc1ceD33dDA0b68c546A1c035c458",
    ),
}
