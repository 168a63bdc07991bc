"""OLI Attest - label and trust list attestations for the Open Labels Initiative."""

__version__ = "0.1.0"
