import asyncio
import json

import httpx
import pytest

from release_sigcheck.releases import AbstractRelease, ConcreteRelease

__copyright__ = "(c) 2022 Red Hat, Inc."
__license__ = "MIT"


PAYLOAD_REPO = "quay.io/openshift-release-dev/ocp-release"


def digest_for(name):
    """A fake but well-formed sha256 digest, unique per name."""
    return "sha256:" + name.encode().hex().ljust(64, "0")[:64]


def release_for(version, name=None):
    return ConcreteRelease(version, f"{PAYLOAD_REPO}@{digest_for(name or version)}")


class FakeMirror:
    """
    An in-memory signature mirror to hand to httpx.MockTransport.

    Everything is a 404 unless signed with sign(). Directories can be made
    slow (delay) or unreachable (per object). Every request is recorded.
    """

    def __init__(self):
        self.signed = {}
        self.delays = {}
        self.unreachable = set()
        self.requests = []
        self.in_flight = {}
        self.max_in_flight = {}
        self.max_in_flight_total = 0

    @staticmethod
    def directory(digest):
        return digest.replace(":", "=")

    def sign(self, digest, *indices):
        self.signed.setdefault(self.directory(digest), set()).update(
            f"signature-{i}" for i in indices
        )

    def delay(self, digest, seconds):
        self.delays[self.directory(digest)] = seconds

    def break_object(self, digest, index):
        self.unreachable.add((self.directory(digest), f"signature-{index}"))

    def requested(self, digest):
        """The object names requested for a digest, in request order."""
        directory = self.directory(digest)
        return [name for (d, name) in self.requests if d == directory]

    async def handler(self, request):
        directory, name = request.url.path.rstrip("/").split("/")[-2:]
        self.requests.append((directory, name))

        self.in_flight[directory] = self.in_flight.get(directory, 0) + 1
        self.max_in_flight[directory] = max(
            self.max_in_flight.get(directory, 0), self.in_flight[directory]
        )
        self.max_in_flight_total = max(
            self.max_in_flight_total, sum(self.in_flight.values())
        )
        try:
            await asyncio.sleep(self.delays.get(directory, 0))
        finally:
            self.in_flight[directory] -= 1

        if (directory, name) in self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        if name in self.signed.get(directory, set()):
            return httpx.Response(200, content=b"\x00signature")
        return httpx.Response(404)

    def client(self):
        return httpx.AsyncClient(
            transport=httpx.MockTransport(self.handler), follow_redirects=True
        )


@pytest.fixture
def mirror():
    return FakeMirror()


@pytest.fixture
def patched_mirror(monkeypatch, mirror):
    """A FakeMirror that any client built by the verifier itself talks to."""
    monkeypatch.setattr(
        "release_sigcheck.signing.mirror.verifier.build_client",
        lambda timeout: mirror.client(),
    )
    return mirror


@pytest.fixture
def graph_file(tmp_path):
    """
    A small release graph: two plain releases and an arch-suffixed one.
    """
    graph = {
        "nodes": [
            {"version": "4.1.0", "payload": release_for("4.1.0").payload, "metadata": {}},
            {"version": "4.1.1", "payload": release_for("4.1.1").payload, "metadata": {}},
            {
                "version": "4.1.2+amd64",
                "payload": release_for("4.1.2").payload,
                "metadata": {"io.openshift.upgrades.graph.release.channels": "stable-4.1"},
            },
        ],
        "edges": [[0, 1], [1, 2]],
    }
    path = tmp_path / "graph.json"
    path.write_text(json.dumps(graph))
    return path


@pytest.fixture
def abstract_release():
    return AbstractRelease("4.2.0")
