"""OLI SDK: validation, encoding and submission of OLI attestations."""

from __future__ import annotations

from oli.sdk.client import OLIClient
from oli.sdk.errors import (
    AddressError,
    ConflictError,
    EncodingError,
    FormatError,
    OLIError,
    SubmissionError,
    TagTypeError,
    TagValueError,
)

__all__ = [
    "AddressError",
    "ConflictError",
    "EncodingError",
    "FormatError",
    "OLIClient",
    "OLIError",
    "SubmissionError",
    "TagTypeError",
    "TagValueError",
]
