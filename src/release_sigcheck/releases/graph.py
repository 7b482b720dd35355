import json

from .base import Release

__copyright__ = "(c) 2022 Red Hat, Inc."
__license__ = "MIT"


class InvalidGraph(Exception):
    pass


def parse_graph(graph_contents):
    """
    Given a complete release graph document as a string, parse it and return
    the list of releases found in its nodes, in document order.

    A graph document looks like this:

    {
      "nodes": [
        {"version": "4.1.0", "payload": "quay.io/openshift-release-dev/ocp-release@sha256:...", "metadata": {}},
        ...
      ],
      "edges": [[0, 1], ...]
    }

    Edges are accepted but not used; only the nodes matter for signatures.
    """
    try:
        graph = json.loads(graph_contents)
    except ValueError as e:
        raise InvalidGraph(f"Graph is not valid JSON: {e}")

    if not isinstance(graph, dict) or not isinstance(graph.get("nodes"), list):
        raise InvalidGraph("Graph must be an object with a 'nodes' list")

    releases = []
    for idx, node in enumerate(graph["nodes"]):
        if not isinstance(node, dict):
            raise InvalidGraph(f"Node {idx} is not an object: {node!r}")
        if not isinstance(node.get("version"), str):
            raise InvalidGraph(f"Node {idx} has no version: {node!r}")
        if "payload" in node and not isinstance(node["payload"], str):
            raise InvalidGraph(f"Node {idx} has a non-string payload: {node!r}")
        releases.append(Release.from_dict(node))
    return releases
