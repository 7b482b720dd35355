__copyright__ = "(c) 2022 Red Hat, Inc."
__license__ = "MIT"


class ReleaseError(Exception):
    pass


class NotConcreteRelease(ReleaseError):
    pass


class MalformedPayload(ReleaseError):
    pass


class VersionParseFailure(ReleaseError):
    pass


class Release:
    """
    A single release as it appears in a release graph. Releases are read-only
    as far as we are concerned: they are handed to us for one verification run
    and we never change or persist them.

    Only concrete releases carry a payload (the pullspec of the release image),
    and only those can have signatures looked up for them.
    """

    def __init__(self, version, metadata=None):
        if version is None:
            raise RuntimeError("version must not be None")
        self.version = version
        self.metadata = metadata if metadata is not None else {}

    @property
    def payload(self):
        return None

    @classmethod
    def from_dict(cls, node):
        """
        Build a release from a graph node, e.g.

        {"version": "4.1.0", "payload": "quay.io/openshift-release-dev/ocp-release@sha256:...", "metadata": {}}

        Nodes without a payload become abstract releases.
        """
        version = node.get("version")
        metadata = node.get("metadata")
        if "payload" in node:
            return ConcreteRelease(version, node["payload"], metadata=metadata)
        return AbstractRelease(version, metadata=metadata)

    def __repr__(self):
        return f"{type(self).__name__}({self.version!r})"


class ConcreteRelease(Release):
    def __init__(self, version, payload, metadata=None):
        super(ConcreteRelease, self).__init__(version, metadata=metadata)
        if payload is None:
            raise RuntimeError("payload must not be None")
        self._payload = payload

    @property
    def payload(self):
        return self._payload

    def __repr__(self):
        return f"{type(self).__name__}({self.version!r}, {self._payload!r})"

    def __eq__(self, other):
        if not isinstance(other, ConcreteRelease):
            return NotImplemented
        return (self.version, self._payload) == (other.version, other._payload)

    def __hash__(self):
        return hash((self.version, self._payload))


class AbstractRelease(Release):
    """A placeholder release. It has a version but nothing to pull."""

    def __eq__(self, other):
        if not isinstance(other, AbstractRelease):
            return NotImplemented
        return self.version == other.version

    def __hash__(self):
        return hash(self.version)


def payload_digest(release):
    """
    Return the content digest of a release's payload: the part after the
    last '@', e.g. 'sha256:abcd' for 'quay.io/repo@sha256:abcd'.

    A payload without any '@' is returned whole.
    """
    if not isinstance(release, ConcreteRelease):
        raise NotConcreteRelease(f"not a concrete release: {release.version}")

    digest = release.payload.split("@")[-1]
    if not digest:
        raise MalformedPayload(f"could not parse payload '{release.payload}'")
    return digest
