"""Reject language features the compiler does not model."""

from __future__ import annotations

from ...errors import UnsupportedConstructError
from ...traverse import NodePath, TraversalState, VariableBinding, Visitor
from ...traverse.indicator import FunctionDefinitionIndicator
from ...traverse.node_types import Node

UNSUPPORTED_NODE_TYPES: dict[str, str] = {
    "WhileStatement": "while loops",
    "DoWhileStatement": "do-while loops",
    "InlineAssembly": "inline assembly",
    "TryStatement": "try/catch statements",
    "Conditional": "conditional (ternary) expressions",
    "FunctionCallOptions": "function call options",
}

SECRET_ASSIGNMENT_OPERATORS: frozenset[str] = frozenset({"=", "+=", "-="})


def _secret_state_binding(path: NodePath, node: Node) -> VariableBinding | None:
    binding = path.get_referenced_binding(node)
    if isinstance(binding, VariableBinding) and binding.state_variable and binding.is_secret:
        return binding
    return None


class UnsupportedVisitor(Visitor):
    """First pass; also builds every Path, and so every binding, in the tree."""

    def enter(self, path: NodePath, state: TraversalState) -> None:
        feature = UNSUPPORTED_NODE_TYPES.get(path.node_type)
        if feature is not None:
            raise UnsupportedConstructError(feature + " are not supported", path.get_location())
        super().enter(path, state)

    def enter_FunctionDefinition(self, path: NodePath, state: TraversalState) -> None:
        kind = path.node.get("kind")
        if kind in ("fallback", "receive"):
            raise UnsupportedConstructError(
                str(kind) + " functions are not supported", path.get_location()
            )

    def exit_FunctionDefinition(self, path: NodePath, state: TraversalState) -> None:
        modifiers = path.node.get("modifiers")
        if not modifiers:
            return
        indicators = path.scope.indicators
        assert isinstance(indicators, FunctionDefinitionIndicator)
        if indicators.interacts_with_secret:
            raise UnsupportedConstructError(
                "modifiers are not supported on functions which interact with secret states",
                path.get_location(),
            )

    def enter_Assignment(self, path: NodePath, state: TraversalState) -> None:
        node = path.node
        lhs = node.get("leftHandSide")
        if not isinstance(lhs, dict):
            return
        if lhs.get("nodeType") == "TupleExpression":
            for component in lhs.get("components") or []:
                if isinstance(component, dict) and _secret_state_binding(path, component):
                    raise UnsupportedConstructError(
                        "tuple assignment to secret states is not supported",
                        path.get_location(),
                    )
            return
        binding = _secret_state_binding(path, lhs)
        if binding is None:
            return
        operator = str(node.get("operator"))
        if operator not in SECRET_ASSIGNMENT_OPERATORS:
            raise UnsupportedConstructError(
                "operator '" + operator + "' is not supported on secret state '" + binding.name + "'",
                path.get_location(),
            )

    def enter_UnaryOperation(self, path: NodePath, state: TraversalState) -> None:
        node = path.node
        sub = node.get("subExpression")
        if node.get("operator") != "delete" or not isinstance(sub, dict):
            return
        binding = _secret_state_binding(path, sub)
        if binding is not None:
            raise UnsupportedConstructError(
                "delete is not supported on secret state '" + binding.name + "'",
                path.get_location(),
            )
