"""
This package handles checking that releases are signed.

Every verification method contains a verifier subclass of SignatureVerifier,
which makes no assumptions about where signatures are stored. All it demands
is the implementation of an async 'verify' method returning a
SignatureBatchResult.
"""

from .base import (  # noqa: F401
    BatchFailure,
    DiscoveryExhausted,
    ProbeFailure,
    SignatureBatchResult,
    SignatureCheckError,
    SignatureDiscoveryResult,
    SignatureVerifier,
)
from .mirror import MirrorSignatureVerifier  # noqa: F401

__all__ = [
    "BatchFailure",
    "DiscoveryExhausted",
    "MirrorSignatureVerifier",
    "ProbeFailure",
    "SignatureBatchResult",
    "SignatureCheckError",
    "SignatureDiscoveryResult",
    "SignatureVerifier",
]
