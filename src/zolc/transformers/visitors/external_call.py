"""Reject secret values passed to functions of external contracts."""

from __future__ import annotations

import logging

from ...errors import SecrecyLeakError
from ...traverse import (
    NodePath,
    TraversalState,
    VariableBinding,
    Visitor,
    traverse_nodes_fast,
)
from ...traverse.node_types import Node, REFERENCING_TYPES

logger = logging.getLogger(__name__)


class ExternalCallVisitor(Visitor):
    def enter_FunctionCall(self, path: NodePath, state: TraversalState) -> None:
        node = path.node
        if not path.is_external_function_call():
            return
        function_node = node.get("expression")
        assert isinstance(function_node, dict)
        if path.is_token_contract_instance(function_node):
            logger.info(
                "recognised a standard token contract call at %s", path.get_location()
            )
        for arg in node.get("arguments") or []:
            if not isinstance(arg, dict) or path.is_this(arg):
                continue
            name = _secret_argument(path, arg)
            if name is not None:
                raise SecrecyLeakError(
                    "Cannot pass a secret state (" + name + ") to an external function call.",
                    path.get_location(),
                )


def _secret_argument(path: NodePath, arg: Node) -> str | None:
    """Name of a secret variable the argument expression reads, if any."""
    found: list[str] = []

    def enter(sub: Node, state: TraversalState) -> None:
        if sub.get("nodeType") not in REFERENCING_TYPES or path.is_this(sub):
            return
        binding = path.get_referenced_binding(sub)
        if isinstance(binding, VariableBinding) and binding.is_secret:
            found.append(binding.name)
            state.stop_traversal = True

    traverse_nodes_fast(arg, enter, TraversalState())
    return found[0] if found else None
