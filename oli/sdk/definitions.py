"""Tag definitions and value sets used to validate label tags.

The reference data is fetched from the OLI repository and the growthepie
projects API, cached next to the project in a JSON file, and handed to the
validators as an explicit read-only parameter.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import httpx
import yaml
from pydantic import ValidationError

from oli.sdk.constants import CACHE_FILE
from oli.sdk.models import CachedDefinitions

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = 30.0


@dataclass(frozen=True)
class ReferenceData:
    """Read-only tag definitions and value sets for one operation."""

    tag_definitions: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    value_sets: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tag_definitions", MappingProxyType(dict(self.tag_definitions)))
        value_sets = {k: tuple(str(v).lower() for v in values) for k, values in self.value_sets.items()}
        object.__setattr__(self, "value_sets", MappingProxyType(value_sets))

    @classmethod
    def empty(cls) -> ReferenceData:
        """Offline reference data: every tag passes unchecked."""
        return cls()

    @classmethod
    def from_cache(cls, cached: CachedDefinitions) -> ReferenceData:
        return cls(tag_definitions=cached.tag_definitions, value_sets=cached.value_sets)

    @property
    def is_empty(self) -> bool:
        return not self.tag_definitions and not self.value_sets

    def tag_schema(self, tag_id: str) -> Mapping[str, Any] | None:
        """Return the JSON schema of a known tag, None for unknown tags."""
        definition = self.tag_definitions.get(tag_id)
        if definition is None:
            return None
        return definition.get("schema") or {}

    def allowed_values(self, tag_id: str) -> tuple[str, ...] | None:
        return self.value_sets.get(tag_id)

    def to_cache(self) -> CachedDefinitions:
        return CachedDefinitions(
            tag_definitions={k: dict(v) for k, v in self.tag_definitions.items()},
            value_sets={k: list(v) for k, v in self.value_sets.items()},
        )


def load_definitions(
    project_root: str | Path,
    tag_definitions_url: str,
    value_set_urls: Mapping[str, str],
    cache_ttl_minutes: int = 60,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ReferenceData:
    """Load reference data from the cache, or fetch and cache it.

    Fetch failures never abort: they degrade to empty reference data.
    An empty tag_definitions_url selects offline mode. Called from inside a
    running event loop, the fetch cannot run and also degrades to empty.
    """
    cache_path = Path(project_root) / CACHE_FILE
    cached = read_cache(cache_path)
    if cached is not None and not is_expired(cached.fetched_at, cache_ttl_minutes):
        logger.debug("Using cached OLI tag definitions from %s", cache_path)
        return ReferenceData.from_cache(cached)

    if not tag_definitions_url:
        logger.warning("Tag definitions URL not set; running in offline mode with empty definitions.")
        return ReferenceData.empty()

    sources = {"tags": tag_definitions_url}
    sources.update({tag_id: url for tag_id, url in value_set_urls.items() if url})
    try:
        texts = asyncio.run(fetch_sources(sources, transport))
        reference = ReferenceData(
            tag_definitions=parse_tag_definitions(texts.pop("tags")),
            value_sets={tag_id: parse_value_set(text) for tag_id, text in texts.items()},
        )
    except (httpx.HTTPError, yaml.YAMLError, ValueError, TypeError, RuntimeError) as e:
        logger.warning("Failed to fetch tag definitions or value sets; proceeding with empty definitions: %s", e)
        return ReferenceData.empty()

    write_cache(cache_path, reference.to_cache())
    logger.info(
        "Fetched %d tag definitions and %d value sets", len(reference.tag_definitions), len(reference.value_sets)
    )
    return reference


async def fetch_sources(
    urls: Mapping[str, str], transport: httpx.AsyncBaseTransport | None = None
) -> dict[str, str]:
    """GET all sources concurrently and return their bodies by key."""
    async with httpx.AsyncClient(timeout=FETCH_TIMEOUT, transport=transport, follow_redirects=True) as client:
        keys = list(urls)
        responses = await asyncio.gather(*(client.get(urls[key]) for key in keys))
    for response in responses:
        response.raise_for_status()
    return {key: response.text for key, response in zip(keys, responses)}


def parse_tag_definitions(text: str) -> dict[str, Any]:
    """Index the `tags` list of tag_definitions.yml by tag_id."""
    parsed = yaml.safe_load(text) or {}
    if not isinstance(parsed, dict):
        raise ValueError("Tag definitions must be a mapping with a 'tags' list")
    return {entry["tag_id"]: entry for entry in parsed.get("tags") or [] if "tag_id" in entry}


def parse_value_set(text: str) -> list[str]:
    """Extract lower-cased allowed values from a value set document.

    Understands the OLI category YAML (``categories: [{category_id}]``) and
    the growthepie projects JSON (``data.data`` rows, id first).
    """
    parsed = yaml.safe_load(text) or {}
    if isinstance(parsed, dict) and "categories" in parsed:
        return [str(c["category_id"]).lower() for c in parsed["categories"] or []]
    if isinstance(parsed, dict):
        data = parsed.get("data") or {}
        rows = data.get("data") if isinstance(data, dict) else None
    else:
        rows = parsed
    if not isinstance(rows, list):
        raise ValueError("Value set must be a category list or a list of data rows")
    return [str(row[0] if isinstance(row, list) else row).lower() for row in rows]


def read_cache(cache_path: Path) -> CachedDefinitions | None:
    if not cache_path.exists():
        return None
    try:
        return CachedDefinitions.model_validate_json(cache_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValidationError) as e:
        logger.debug("Ignoring unreadable definitions cache %s: %s", cache_path, e)
        return None


def write_cache(cache_path: Path, cached: CachedDefinitions) -> None:
    try:
        cache_path.write_text(cached.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
    except OSError as e:
        logger.warning("Could not write definitions cache %s: %s", cache_path, e)


def is_expired(fetched_at: datetime, ttl_minutes: int, now: datetime | None = None) -> bool:
    if fetched_at.tzinfo is None:
        fetched_at = fetched_at.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return now - fetched_at > timedelta(minutes=ttl_minutes)
