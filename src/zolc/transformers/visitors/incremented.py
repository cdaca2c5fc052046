"""Mark every write to a state variable as an incrementation or a general write."""

from __future__ import annotations

from ...traverse import NodePath, TraversalState, VariableBinding, Visitor
from ...traverse.node_types import Node, mapping_key_name

MODIFYING_UNARY_OPERATORS: frozenset[str] = frozenset({"++", "--", "delete"})


def _target(node: Node) -> Node | None:
    """The l-value written by an Assignment or UnaryOperation."""
    if node.get("nodeType") == "Assignment":
        lhs = node.get("leftHandSide")
    else:
        lhs = node.get("subExpression")
    return lhs if isinstance(lhs, dict) else None


class IncrementedVisitor(Visitor):
    def enter_Assignment(self, path: NodePath, state: TraversalState) -> None:
        self._mark(path)

    def enter_UnaryOperation(self, path: NodePath, state: TraversalState) -> None:
        if path.node.get("operator") in MODIFYING_UNARY_OPERATORS:
            self._mark(path)

    def _mark(self, path: NodePath) -> None:
        node = path.node
        lhs = _target(node)
        if lhs is None:
            return
        binding = path.get_referenced_binding(lhs)
        if not isinstance(binding, VariableBinding) or not binding.state_variable:
            return
        if node.get("operator") == "delete":
            is_incremented, is_decremented = False, False
        else:
            incrementation = path.is_incrementation()
            is_incremented = incrementation.is_incremented
            is_decremented = incrementation.is_decremented
        node["isIncremented"] = is_incremented
        node["isDecremented"] = is_decremented
        binding.update_incrementation(path, is_incremented, is_decremented)
        indicator = path.scope.get_referenced_indicator(lhs)
        if indicator is not None:
            indicator.update_incrementation(path, is_incremented, is_decremented)
        if lhs.get("nodeType") == "IndexAccess" and binding.is_mapping:
            index_node = lhs.get("indexExpression")
            key_name = mapping_key_name(index_node if isinstance(index_node, dict) else None)
            key = binding.mapping_keys.get(key_name)
            if key is not None:
                key.update_incrementation(is_incremented, is_decremented)
            if indicator is not None:
                indicator_key = indicator.mapping_keys.get(key_name)
                if indicator_key is not None:
                    indicator_key.update_incrementation(is_incremented, is_decremented)
        if not binding.is_secret:
            return
        statement = path.parent_path
        if statement is not None and statement.node_type == "ExpressionStatement":
            statement.node["incrementsSecretState"] = is_incremented
            statement.node["decrementsSecretState"] = is_decremented
            statement.node["modifiesSecretState"] = True
