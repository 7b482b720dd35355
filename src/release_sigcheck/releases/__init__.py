"""
This package models the releases whose signatures are checked, and decides
which of them are in scope for a given run.
"""

from .base import (  # noqa
    AbstractRelease,
    ConcreteRelease,
    MalformedPayload,
    NotConcreteRelease,
    Release,
    ReleaseError,
    VersionParseFailure,
    payload_digest,
)
from .graph import InvalidGraph, parse_graph  # noqa
from .versions import (  # noqa
    is_tracked,
    parse_tracked_versions,
    parse_version,
    select_tracked,
    strip_arch,
)
