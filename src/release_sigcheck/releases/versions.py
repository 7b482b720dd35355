"""
Deciding which releases are in scope for a signature check. A release is
checked when its version (minus any architecture suffix) is one of the
versions the caller is tracking.
"""

import logging

import semver

from .base import VersionParseFailure

__copyright__ = "(c) 2022 Red Hat, Inc."
__license__ = "MIT"

logger = logging.getLogger(__name__)


def strip_arch(version):
    """'4.1.0+amd64' -> '4.1.0'"""
    return version.split("+", 1)[0]


def parse_version(version):
    stripped = strip_arch(version)
    try:
        return semver.Version.parse(stripped)
    except (TypeError, ValueError) as e:
        raise VersionParseFailure(f"invalid version '{version}': {e}") from e


def parse_tracked_versions(versions):
    """Build a set of tracked versions from strings, e.g. from the command line."""
    return set(parse_version(v) for v in versions)


def is_tracked(tracked_versions, release) -> bool:
    return parse_version(release.version) in tracked_versions


def select_tracked(releases, tracked_versions, strict=False):
    """
    Return the releases whose version is tracked, in their original order.

    Releases with a version we cannot parse are skipped with a warning, unless
    strict is set, in which case the first one aborts the selection by raising
    VersionParseFailure.
    """
    selected = []
    for release in releases:
        try:
            tracked = is_tracked(tracked_versions, release)
        except VersionParseFailure as e:
            if strict:
                raise
            logger.warning("Skipping release: %s", e)
            continue
        if tracked:
            selected.append(release)
        else:
            logger.debug("Release %s is not tracked, skipping", release.version)
    return selected
