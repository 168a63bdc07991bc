"""Typer CLI for OLI label and trust list attestations.

Provides commands: validate-label, submit-label, submit-label-bulk,
submit-trust-list, revoke, get-labels, search, attester-analytics.
Main entrypoint for the OLI command-line interface.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
import yaml
from rich.console import Console

from oli import __version__
from oli.cli.config import OLIConfig, configure_logging, create_client, validate_config
from oli.sdk.client import OLIClient


app = typer.Typer(
    name="oli",
    help="Open Labels Initiative - label and trust list attestations on EAS",
    add_completion=False,
    rich_markup_mode="rich"
)
console = Console()


def version_callback(show_version: bool) -> None:
    """Show version and exit."""
    if show_version:
        console.print(f"OLI version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True
    )
) -> None:
    """Open Labels Initiative CLI."""
    pass


def _get_client(submitting: bool = False) -> OLIClient:
    """Load configuration and build a client."""
    config = OLIConfig()
    configure_logging(config.log_level)
    if submitting:
        validate_config(config)
    return create_client(config)


def _parse_maybe_json_file(value: str) -> Any:
    """Read a JSON/YAML file, or parse value as inline JSON."""
    path = Path(value)
    if path.is_file():
        content = path.read_text(encoding="utf-8")
        try:
            return json.loads(content)
        except json.JSONDecodeError:
            try:
                return yaml.safe_load(content)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid JSON or YAML in {path}: {e}")
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def _extract_tags_input(raw: Any) -> tuple[Any, str | None]:
    """Split a tags document into tags and an optional refUid."""
    if isinstance(raw, dict) and "tags" in raw:
        return raw["tags"], raw.get("refUid") or raw.get("refuid") or raw.get("ref_uid")
    return raw, None


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))  # Use print() to avoid rich formatting


@app.command()
def validate_label(
    address: str = typer.Argument(..., help="Address to label (plain or CAIP-10)"),
    chain_id: str = typer.Argument(..., help="CAIP-2 chain id (e.g. eip155:8453), or 'auto' for CAIP-10 input"),
    tags: str = typer.Argument(..., help="JSON string or path to JSON/YAML with tags")
) -> None:
    """Validate a label against the OLI tag definitions."""
    try:
        client = _get_client()
        tag_input, ref_uid = _extract_tags_input(_parse_maybe_json_file(tags))
        validated = client.validate_label(
            {"address": address, "chain_id": chain_id, "tags": tag_input, "ref_uid": ref_uid}
        )

        console.print("✅ Valid label!")
        _print_json(validated.model_dump())

    except Exception as e:
        console.print(f"❌ Error validating label: {e}")
        raise typer.Exit(1)


@app.command()
def submit_label(
    address: str = typer.Argument(..., help="Address to label (plain or CAIP-10)"),
    chain_id: str = typer.Argument(..., help="CAIP-2 chain id (e.g. eip155:8453), or 'auto' for CAIP-10 input"),
    tags: str = typer.Argument(..., help="JSON string or path to JSON/YAML with tags"),
    onchain: bool = typer.Option(False, "--onchain", help="Submit on-chain instead of off-chain"),
    ref: str = typer.Option("", "--ref", "-r", help="Reference UID")
) -> None:
    """Submit a single label."""
    try:
        client = _get_client(submitting=True)
        tag_input, ref_from_file = _extract_tags_input(_parse_maybe_json_file(tags))
        result = client.submit_label(
            {"address": address, "chain_id": chain_id, "tags": tag_input, "ref_uid": ref or ref_from_file},
            onchain=onchain
        )

        console.print("✅ Label submitted successfully!")
        console.print(f"UID: [bold]{result.uid}[/bold]")
        if result.transaction_hash:
            console.print(f"Transaction: {result.transaction_hash}")

    except Exception as e:
        console.print(f"❌ Error submitting label: {e}")
        raise typer.Exit(1)


@app.command()
def submit_label_bulk(
    file: str = typer.Argument(..., help="Path to JSON/YAML array of labels"),
    onchain: bool = typer.Option(False, "--onchain", help="Submit on-chain in one multiAttest transaction")
) -> None:
    """Submit labels in bulk (all labels are validated first)."""
    try:
        client = _get_client(submitting=True)
        labels = _parse_maybe_json_file(file)
        if not isinstance(labels, list):
            raise ValueError("Bulk file must contain an array of labels")
        result = client.submit_label_bulk(labels, onchain=onchain)

        console.print(f"✅ {len(result.uids or [])} labels submitted successfully!")
        for uid in result.uids or []:
            console.print(f"UID: {uid}")
        if result.transaction_hash:
            console.print(f"Transaction: {result.transaction_hash}")

    except Exception as e:
        console.print(f"❌ Error submitting labels: {e}")
        raise typer.Exit(1)


@app.command()
def submit_trust_list(
    file: str = typer.Argument(..., help="Path to YAML/JSON trust list file"),
    onchain: bool = typer.Option(False, "--onchain", help="Submit on-chain instead of off-chain")
) -> None:
    """Submit a trust list."""
    try:
        client = _get_client(submitting=True)
        data = _parse_maybe_json_file(file)
        if not isinstance(data, dict):
            raise ValueError("Trust list file must contain an object")
        result = client.submit_trust_list(data, onchain=onchain)

        console.print("✅ Trust list submitted successfully!")
        console.print(f"UID: [bold]{result.uid}[/bold]")
        if result.transaction_hash:
            console.print(f"Transaction: {result.transaction_hash}")

    except Exception as e:
        console.print(f"❌ Error submitting trust list: {e}")
        raise typer.Exit(1)


@app.command()
def revoke(
    uid: str = typer.Argument(..., help="UID to revoke (0x...)"),
    onchain: bool = typer.Option(False, "--onchain", help="The attestation was made on-chain")
) -> None:
    """Revoke an attestation by UID (always sends a transaction)."""
    try:
        client = _get_client(submitting=True)
        result = client.revoke(uid, onchain=onchain)

        console.print("✅ Attestation revoked successfully!")
        console.print(f"UID: [bold]{result.uid}[/bold]")
        console.print(f"Transaction: {result.transaction_hash}")

    except Exception as e:
        console.print(f"❌ Error revoking attestation: {e}")
        raise typer.Exit(1)


@app.command()
def get_labels(
    address: str = typer.Argument(..., help="Address to fetch (plain or CAIP-10)"),
    chain_id: str = typer.Option("", "--chain-id", "-c", help="Chain filter"),
    limit: int = typer.Option(100, "--limit", "-l", help="Maximum number of labels")
) -> None:
    """Fetch labels for an address."""
    try:
        client = _get_client()
        _print_json(client.get_labels(address, chain_id=chain_id or None, limit=limit))
    except Exception as e:
        console.print(f"❌ Error fetching labels: {e}")
        raise typer.Exit(1)


@app.command()
def search(
    tag_id: str = typer.Argument(..., help="Tag ID"),
    tag_value: str = typer.Argument(..., help="Tag value"),
    chain_id: str = typer.Option("", "--chain-id", "-c", help="Chain filter"),
    limit: int = typer.Option(1000, "--limit", "-l", help="Maximum number of addresses")
) -> None:
    """Search addresses by tag."""
    try:
        client = _get_client()
        _print_json(client.search_addresses_by_tag(tag_id, tag_value, chain_id=chain_id or None, limit=limit))
    except Exception as e:
        console.print(f"❌ Error searching addresses: {e}")
        raise typer.Exit(1)


@app.command()
def attester_analytics(
    chain_id: str = typer.Option("", "--chain-id", "-c", help="Chain filter"),
    limit: int = typer.Option(100, "--limit", "-l", help="Maximum number of attesters")
) -> None:
    """Get attester analytics."""
    try:
        client = _get_client()
        _print_json(client.get_attester_analytics(chain_id=chain_id or None, limit=limit))
    except Exception as e:
        console.print(f"❌ Error fetching attester analytics: {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
