"""Tree walking: full visitor traversal plus two fast read-only variants."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from .node_types import Node, get_visitable_keys

if TYPE_CHECKING:
    from .node_path import NodePath


# ============================================================
# STATE AND VISITORS
# ============================================================


@dataclass
class TraversalState:
    """Mutable data threaded through one walk.

    Setting ``stop_traversal`` ends the walk. Setting ``skip_sub_nodes`` in an
    enter callback skips the current node's children; the flag resets once
    honoured.
    """

    stop_traversal: bool = False
    skip_sub_nodes: bool = False


class Visitor:
    """Per-node-type callbacks: ``enter_<NodeType>`` and ``exit_<NodeType>``.

    Node types without a method are walked through with no-op callbacks.
    """

    def enter(self, path: NodePath, state: TraversalState) -> None:
        method = getattr(self, "enter_" + path.node_type, None)
        if method is not None:
            method(path, state)

    def exit(self, path: NodePath, state: TraversalState) -> None:
        method = getattr(self, "exit_" + path.node_type, None)
        if method is not None:
            method(path, state)


# ============================================================
# CHILD PATHS
# ============================================================


def child_paths(path: NodePath, key: str) -> list[NodePath]:
    """Paths for the child node(s) stored under ``path.node[key]``."""
    from .node_path import NodePath

    node = path.node
    sub = node.get(key)
    result: list[NodePath] = []
    if isinstance(sub, list):
        i = 0
        while i < len(sub):
            child = sub[i]
            if isinstance(child, dict):
                result.append(
                    NodePath.create(
                        node=child,
                        parent=node,
                        key=key,
                        container=sub,
                        index=i,
                        parent_path=path,
                    )
                )
            i += 1
    elif isinstance(sub, dict):
        result.append(
            NodePath.create(
                node=sub, parent=node, key=key, container=sub, parent_path=path
            )
        )
    return result


def _child_nodes(node: Node, key: str) -> list[Node]:
    sub = node.get(key)
    if isinstance(sub, list):
        return [child for child in sub if isinstance(child, dict)]
    if isinstance(sub, dict):
        return [sub]
    return []


# ============================================================
# WALKS
# ============================================================


def traverse(path: NodePath, visitor: Visitor, state: TraversalState) -> None:
    """Walk the tree rooted at ``path``, calling enter before and exit after
    each node's children."""
    if state.stop_traversal:
        return
    keys = get_visitable_keys(path.node_type)
    visitor.enter(path, state)
    if state.stop_traversal:
        return
    if state.skip_sub_nodes:
        state.skip_sub_nodes = False
    else:
        for key in keys:
            for sub_path in child_paths(path, key):
                traverse(sub_path, visitor, state)
                if state.stop_traversal:
                    return
    visitor.exit(path, state)


def traverse_nodes_fast(
    node: Node,
    enter: Callable[[Node, TraversalState], None],
    state: TraversalState,
) -> None:
    """Pre-order walk over raw nodes; no Paths are built."""
    if state.stop_traversal:
        return
    keys = get_visitable_keys(str(node["nodeType"]))
    enter(node, state)
    if state.stop_traversal:
        return
    if state.skip_sub_nodes:
        state.skip_sub_nodes = False
        return
    for key in keys:
        for child in _child_nodes(node, key):
            traverse_nodes_fast(child, enter, state)
            if state.stop_traversal:
                return


def traverse_paths_fast(
    path: NodePath,
    enter: Callable[[NodePath, TraversalState], None],
    state: TraversalState,
) -> None:
    """Pre-order walk over Paths with a single enter callback."""
    if state.stop_traversal:
        return
    keys = get_visitable_keys(path.node_type)
    enter(path, state)
    if state.stop_traversal:
        return
    if state.skip_sub_nodes:
        state.skip_sub_nodes = False
        return
    for key in keys:
        for sub_path in child_paths(path, key):
            traverse_paths_fast(sub_path, enter, state)
            if state.stop_traversal:
                return
