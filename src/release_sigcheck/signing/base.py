__copyright__ = "(c) 2022 Red Hat, Inc."
__license__ = "MIT"


class SignatureCheckError(Exception):
    pass


class ProbeFailure(SignatureCheckError):
    """One candidate signature location could not be fetched."""

    def __init__(self, url, status_code=None, reason=None):
        self.url = url
        self.status_code = status_code
        self.reason = reason
        if status_code is not None:
            message = f"Error fetching {url} - {status_code} {reason or ''}".rstrip()
        else:
            message = f"Error fetching {url} - {reason}"
        super(ProbeFailure, self).__init__(message)


class DiscoveryExhausted(SignatureCheckError):
    """Every candidate signature location failed for a release."""

    def __init__(self, release, errors):
        self.release = release
        self.errors = list(errors)
        lines = [f"Failed to find signatures for {release.version} - {release.payload}:"]
        lines.extend(f"  {e}" for e in self.errors)
        super(DiscoveryExhausted, self).__init__("\n".join(lines))


class BatchFailure(SignatureCheckError):
    """One or more releases had no discoverable signature."""

    def __init__(self, failures):
        self.failures = list(failures)
        lines = ["Signature check errors:"]
        lines.extend(result.summary for result in self.failures)
        super(BatchFailure, self).__init__("\n".join(lines))


class SignatureDiscoveryResult:
    """Represents the result of looking up the signatures of one release."""

    def __init__(self, release, success, summary, errors=None, index=None):
        self.release = release
        self.success = success
        self.summary = summary
        self.errors = list(errors) if errors is not None else []
        # signature-{index} is where the signature was found
        self.index = index

    def __bool__(self):
        return self.success

    def __repr__(self):
        return (
            f"SignatureDiscoveryResult({self.release!r}, success={self.success!r})"
        )


class SignatureBatchResult:
    """Represents the result after checking signatures for a batch of releases."""

    def __init__(self, results):
        self.results = list(results)

    @property
    def failures(self):
        return [result for result in self.results if not result.success]

    @property
    def success(self):
        return not self.failures

    def __bool__(self):
        return self.success


class SignatureVerifier:
    """
    Represents a way of checking that releases are signed. It doesn't make any
    assumptions about where the signatures live.
    """

    async def verify(self, releases, tracked_versions, strict=False):
        """
        Does the actual verification.

        Returns an instance of SignatureBatchResult.
        """
        raise NotImplementedError("verify")
