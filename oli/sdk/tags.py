"""Normalization and validation of label tags.

Tags without a known definition pass through unchecked so labels keep
working while the OLI tag schema evolves.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from oli.sdk.definitions import ReferenceData
from oli.sdk.errors import TagTypeError, TagValueError
from oli.sdk.validation import checksum_evm_address

logger = logging.getLogger(__name__)

ADDRESS_TAG_LENGTH = 42


def normalize_tags(tags: Mapping[str, Any]) -> dict[str, Any]:
    """Lower-case keys, trim strings and coerce "true"/"false" to booleans."""
    normalized: dict[str, Any] = {}
    for key, value in tags.items():
        normalized[str(key).lower()] = _normalize_value(value)
    return normalized


def _normalize_value(value: Any) -> Any:
    if isinstance(value, str):
        trimmed = value.strip()
        if trimmed == "true":
            return True
        if trimmed == "false":
            return False
        return trimmed
    if isinstance(value, list):
        return [item.strip() if isinstance(item, str) else item for item in value]
    return value


def validate_tags(tags: Any, reference: ReferenceData) -> dict[str, Any]:
    """Normalize tags and check them against the reference data."""
    if not isinstance(tags, Mapping):
        raise TagTypeError("Tags must be an object of OLI-compliant tag_id -> value pairs.")

    normalized = normalize_tags(tags)
    for tag_id, value in normalized.items():
        schema = reference.tag_schema(tag_id)
        if schema is None:
            if not reference.is_empty:
                logger.warning("Unknown tag '%s' is not in the OLI tag definitions; passing it through", tag_id)
            continue

        check_tag_type(tag_id, value, schema.get("type"))
        if is_address_tag(schema) and isinstance(value, str):
            value = checksum_evm_address(value)

        allowed = reference.allowed_values(tag_id)
        if allowed is not None:
            value = check_value_set(tag_id, value, allowed)
        normalized[tag_id] = value

    return normalized


def check_tag_type(tag_id: str, value: Any, tag_type: str | None) -> None:
    """Raise TagTypeError when value does not match the declared type."""
    is_bool = isinstance(value, bool)
    if tag_type == "boolean" and not is_bool:
        raise TagTypeError(f"Tag '{tag_id}' must be boolean.", tag_id)
    if tag_type == "string" and not isinstance(value, str):
        raise TagTypeError(f"Tag '{tag_id}' must be string.", tag_id)
    if tag_type == "integer" and (is_bool or not isinstance(value, int)):
        raise TagTypeError(f"Tag '{tag_id}' must be integer.", tag_id)
    if tag_type == "float" and (is_bool or not isinstance(value, (int, float))):
        raise TagTypeError(f"Tag '{tag_id}' must be number.", tag_id)
    if tag_type == "array" and not isinstance(value, list):
        raise TagTypeError(f"Tag '{tag_id}' must be an array.", tag_id)


def is_address_tag(schema: Mapping[str, Any]) -> bool:
    return (
        schema.get("type") == "string"
        and schema.get("minLength") == ADDRESS_TAG_LENGTH
        and schema.get("maxLength") == ADDRESS_TAG_LENGTH
    )


def check_value_set(tag_id: str, value: Any, allowed: tuple[str, ...]) -> Any:
    """Match value (or each element) case-insensitively against a value set.

    Returns the value with every match replaced by its canonical entry.
    """
    allowed_set = set(allowed)

    def canonical(item: Any) -> str:
        lowered = str(item).lower()
        if lowered not in allowed_set:
            raise TagValueError(
                f"Tag '{tag_id}' must be one of: {', '.join(allowed)}. Received: {value}",
                tag_id,
                list(allowed),
            )
        return lowered

    if isinstance(value, list):
        return [canonical(item) for item in value]
    return canonical(value)
