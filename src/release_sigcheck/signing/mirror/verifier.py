"""
This module checks that releases have signatures published on the release
signature mirror. It does not look at what the signatures say, only that at
least one of them can be fetched for every tracked release.
"""

import asyncio
import logging

import httpx

from release_sigcheck.releases import (
    ReleaseError,
    payload_digest,
    select_tracked,
)
from release_sigcheck.signing.base import (
    BatchFailure,
    DiscoveryExhausted,
    ProbeFailure,
    SignatureBatchResult,
    SignatureDiscoveryResult,
    SignatureVerifier,
)
from .probe import SignatureProbe

__copyright__ = "(c) 2022 Red Hat, Inc."
__license__ = "MIT"

# See https://github.com/openshift/cluster-update-keys/blob/master/stores/store-openshift-official-release-mirror
BASE_URL = "https://mirror.openshift.com/pub/openshift-v4/signatures/openshift/release/"

DEFAULT_TIMEOUT_SECS = 30

# The cluster-version operator gives up after maxSignatureSearch = 10, so
# anything at signature-10 or beyond would never be seen by a cluster.
MAX_SIGNATURES = 10

logger = logging.getLogger(__name__)


def build_client(timeout=DEFAULT_TIMEOUT_SECS):
    return httpx.AsyncClient(
        timeout=timeout,
        headers={"Accept-Encoding": "gzip"},
        follow_redirects=True,
    )


class MirrorSignatureVerifier(SignatureVerifier):
    def __init__(
        self,
        client=None,
        base_url=BASE_URL,
        timeout=DEFAULT_TIMEOUT_SECS,
        max_signatures=MAX_SIGNATURES,
    ):
        super(MirrorSignatureVerifier, self).__init__()

        if max_signatures < 2:
            raise RuntimeError("max_signatures must be at least 2")

        self.client = client
        self.base_url = base_url
        self.timeout = timeout
        self.max_signatures = max_signatures

    async def discover(self, client, release):
        """
        Look for signature-1, signature-2, ... for the given release, one at a
        time, and return the index of the first one that exists.

        Raises DiscoveryExhausted, carrying every probe error in order, if none
        of them do.
        """
        digest = payload_digest(release)
        probe = SignatureProbe(client, self.base_url, timeout=self.timeout)

        errors = []
        for index in range(1, self.max_signatures):
            try:
                await probe.probe(digest, index)
            except ProbeFailure as e:
                errors.append(e)
                continue
            return index

        raise DiscoveryExhausted(release, errors)

    async def discover_result(self, client, release):
        try:
            index = await self.discover(client, release)
        except DiscoveryExhausted as e:
            logger.debug("%s", e)
            return SignatureDiscoveryResult(
                release, success=False, summary=str(e), errors=e.errors
            )
        except ReleaseError as e:
            logger.debug("Cannot check release %s: %s", release.version, e)
            return SignatureDiscoveryResult(
                release,
                success=False,
                summary=f"Failed to find signatures for {release.version}: {e}",
                errors=[e],
            )

        logger.debug("Release %s is signed (signature-%d)", release.version, index)
        return SignatureDiscoveryResult(
            release,
            success=True,
            summary=f"Found signature-{index} for {release.version}",
            index=index,
        )

    async def verify(self, releases, tracked_versions, strict=False):
        """
        Check every tracked release concurrently. Results come back in the
        order the releases were given, no matter which check finishes first,
        and one release failing never stops the others.
        """
        logger.info("Checking release signatures")
        tracked_releases = select_tracked(releases, tracked_versions, strict=strict)
        logger.debug(
            "%d of %d releases are tracked", len(tracked_releases), len(releases)
        )

        if self.client is not None:
            results = await self._verify_with(self.client, tracked_releases)
        else:
            async with build_client(timeout=self.timeout) as client:
                results = await self._verify_with(client, tracked_releases)

        batch = SignatureBatchResult(results)
        logger.info(
            "Signature check finished: %d checked, %d failed",
            len(batch.results),
            len(batch.failures),
        )
        return batch

    async def _verify_with(self, client, releases):
        return await asyncio.gather(
            *(self.discover_result(client, release) for release in releases)
        )


async def run(releases, tracked_versions, strict=False, **verifier_kwargs):
    """
    Check the signatures of every tracked release, raising BatchFailure with
    all failing results if any release has none.
    """
    verifier = MirrorSignatureVerifier(**verifier_kwargs)
    batch = await verifier.verify(releases, tracked_versions, strict=strict)
    if not batch.success:
        raise BatchFailure(batch.failures)
