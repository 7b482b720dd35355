"""
This package checks for release signatures published on an HTTP signature
mirror, laid out as {base_url}/{algorithm}={hex}/signature-{n}.
"""

from .probe import SignatureProbe  # noqa
from .verifier import MirrorSignatureVerifier, run  # noqa
