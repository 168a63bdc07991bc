"""Error taxonomy for OLI attestations.

All errors derive from ValueError so callers that only care about
"bad input" can keep catching ValueError.
"""

from __future__ import annotations

from typing import Any


class OLIError(ValueError):
    """Base class for OLI SDK errors."""


class FormatError(OLIError):
    """Malformed CAIP-2, CAIP-10, refUID or hex value."""


class AddressError(OLIError):
    """Address is malformed or does not fit its chain."""


class TagTypeError(OLIError):
    """Tag value does not match the declared tag type."""

    def __init__(self, message: str, tag_id: str | None = None):
        super().__init__(message)
        self.tag_id = tag_id


class TagValueError(OLIError):
    """Tag value is not part of the tag's value set."""

    def __init__(self, message: str, tag_id: str | None = None, allowed: list[str] | None = None):
        super().__init__(message)
        self.tag_id = tag_id
        self.allowed = allowed or []


class ConflictError(OLIError):
    """Contradictory chain id inputs."""


class EncodingError(OLIError):
    """Fixed-width field has the wrong byte layout."""


class SubmissionError(OLIError):
    """Remote submission failed; keeps the upstream status and body."""

    def __init__(self, message: str, status_code: int | None = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
