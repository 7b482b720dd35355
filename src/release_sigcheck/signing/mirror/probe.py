"""
This module checks for the existence of a single signature object on a
signature mirror. It makes use of httpx, and performs exactly one GET per
probe: there is no retrying at this level.

httpx timeouts apply to each phase of a request separately, so a probe is
additionally bounded as a whole by the probe timeout.
"""

import asyncio
import logging
from urllib.parse import quote

import httpx

from release_sigcheck.signing.base import ProbeFailure

__copyright__ = "(c) 2022 Red Hat, Inc."
__license__ = "MIT"

logger = logging.getLogger(__name__)


class SignatureProbe:
    def __init__(self, client, base_url, timeout=None):
        if client is None:
            raise RuntimeError("client must not be None")
        self.client = client

        if base_url is None:
            raise RuntimeError("base_url must not be None")
        if not base_url.endswith("/"):
            base_url += "/"
        self.base_url = base_url

        self.timeout = timeout

    def signature_url(self, digest, index):
        """
        Signatures are stored per digest, one directory each, e.g.

        {base_url}sha256=abcd.../signature-1

        ':' is not allowed in the directory name, so it becomes '='. Anything
        else that is not safe in a path segment is percent-encoded.
        """
        directory = quote(digest.replace(":", "="), safe="=")
        return f"{self.base_url}{directory}/signature-{index}"

    async def probe(self, digest, index):
        url = self.signature_url(digest, index)
        logger.debug("Probing %s", url)
        try:
            response = await asyncio.wait_for(self.client.get(url), self.timeout)
        except asyncio.TimeoutError as e:
            raise ProbeFailure(url, reason=f"timed out after {self.timeout}s") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ProbeFailure(url, reason=str(e) or type(e).__name__) from e

        if not response.is_success:
            raise ProbeFailure(
                url, status_code=response.status_code, reason=response.reason_phrase
            )
        logger.debug("Found signature at %s", url)
