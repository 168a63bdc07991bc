"""CLI configuration management for OLI using pydantic-settings.

Handles network preset resolution, signer and registry setup, logging and
environment configuration through a pydantic-settings BaseSettings model.
"""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.logging import RichHandler

from oli.sdk.api import OLIApiClient
from oli.sdk.client import OLIClient
from oli.sdk.constants import (
    DEFAULT_API_URL,
    DEFAULT_TAG_DEFINITIONS_URL,
    DEFAULT_VALUE_SET_URLS,
    NETWORK_PRESETS,
    NetworkPreset,
)
from oli.sdk.definitions import load_definitions
from oli.sdk.registry import EASRegistry
from oli.sdk.signer import LocalSigner
from oli.sdk.validation import validate_network_config

LOG_LEVELS = {"debug": logging.DEBUG, "info": logging.INFO}


class OLIConfig(BaseSettings):
    """OLI CLI configuration using pydantic-settings BaseSettings."""

    model_config = SettingsConfigDict(
        env_prefix='OLI_',
        env_file='.env',
        env_file_encoding='utf-8',
        secrets_dir='/run/secrets'
    )

    network: Literal["base", "arbitrum", "custom"] = Field(
        default="base",
        description="Network preset; 'custom' starts from base and expects overrides"
    )
    rpc_url: str | None = Field(default=None, description="JSON-RPC endpoint")
    chain_id: int | None = Field(default=None, description="EVM chain id of the EAS deployment")
    eas_address: str | None = Field(default=None, description="EAS contract address")
    label_pool_schema: str | None = Field(default=None, description="Label pool schema UID")
    label_trust_schema: str | None = Field(default=None, description="Label trust schema UID")
    api_url: str = Field(default=DEFAULT_API_URL, description="OLI API base URL")
    api_key: str | None = Field(default=None, description="OLI API key for read endpoints")
    private_key: str | None = Field(default=None, description="Private key for signing")
    tag_definitions_url: str = Field(
        default=DEFAULT_TAG_DEFINITIONS_URL,
        description="Tag definitions YAML; empty string runs offline"
    )
    value_set_urls: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_VALUE_SET_URLS),
        description="tag_id -> value set URL"
    )
    log_level: Literal["silent", "info", "debug"] = Field(default="info")
    cache_ttl_minutes: int = Field(default=60, description="Definitions cache lifetime")
    project_root: Path = Field(default=Path("."), description="Directory holding the definitions cache")

    @field_validator('chain_id')
    @classmethod
    def validate_chain_id(cls, v: int | None) -> int | None:
        """Validate chain ID is positive if provided."""
        if v is not None and v <= 0:
            raise ValueError("Chain ID must be positive")
        return v

    @field_validator('cache_ttl_minutes')
    @classmethod
    def validate_cache_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Cache TTL must not be negative")
        return v


def resolve_network(config: OLIConfig) -> NetworkPreset:
    """Fill unset network fields from the selected preset."""
    preset = NETWORK_PRESETS.get(config.network, NETWORK_PRESETS["base"])
    return NetworkPreset(
        key=config.network,
        name=preset.name if config.network in NETWORK_PRESETS else "Custom",
        chain_id=config.chain_id or preset.chain_id,
        rpc_url=config.rpc_url or preset.rpc_url,
        eas_address=config.eas_address or preset.eas_address,
        label_pool_schema=config.label_pool_schema or preset.label_pool_schema,
        label_trust_schema=config.label_trust_schema or preset.label_trust_schema,
    )


def configure_logging(level: str) -> None:
    """Route SDK logs through rich."""
    root = logging.getLogger()
    if level == "silent":
        root.setLevel(logging.CRITICAL + 1)
        return
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(RichHandler(show_path=False, show_time=False))
    root.setLevel(LOG_LEVELS.get(level, logging.INFO))
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_signer(config: OLIConfig) -> LocalSigner:
    """Create typed-data signer from the configured private key."""
    if not config.private_key:
        raise ValueError("Private key required. Set OLI_PRIVATE_KEY environment variable.")
    return LocalSigner.from_private_key(config.private_key)


def create_registry(config: OLIConfig, signer: LocalSigner) -> EASRegistry:
    """Connect the EAS contract of the configured network."""
    network = resolve_network(config)
    return EASRegistry.connect(network.rpc_url, signer.account, network.eas_address, network.chain_id)


def create_client(config: OLIConfig) -> OLIClient:
    """Create an OLIClient; signing is available only when a key is set."""
    signer = create_signer(config) if config.private_key else None
    return OLIClient(
        resolve_network(config),
        signer=signer,
        api=OLIApiClient(config.api_url, api_key=config.api_key),
        registry=create_registry(config, signer) if signer else None,
        definitions_loader=partial(
            load_definitions,
            config.project_root,
            config.tag_definitions_url,
            config.value_set_urls,
            config.cache_ttl_minutes,
        ),
    )


def validate_config(config: OLIConfig) -> None:
    """Validate configuration completeness for submitting attestations."""
    network = resolve_network(config)
    validate_network_config(network.eas_address, network.label_pool_schema)
    if not config.private_key:
        raise ValueError("Private key required. Set OLI_PRIVATE_KEY environment variable.")
