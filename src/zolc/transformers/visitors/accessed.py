"""Mark reads of secret state that need a membership witness for the prior value."""

from __future__ import annotations

from ...traverse import NodePath, TraversalState, VariableBinding, Visitor
from ...traverse.node_types import get_referenced_declaration_id, mapping_key_name


def _is_incrementation_self_term(path: NodePath, decl_id: int) -> bool:
    """Is this the re-read of the target on the right of ``a = a + b``?"""
    rhs_path = path.get_ancestor_contained_within("rightHandSide")
    if rhs_path is None or rhs_path.parent_path is None:
        return False
    assignment = rhs_path.parent_path.node
    if assignment.get("nodeType") != "Assignment" or not assignment.get("isIncremented"):
        return False
    lhs = assignment.get("leftHandSide")
    return isinstance(lhs, dict) and get_referenced_declaration_id(lhs) == decl_id


class AccessedVisitor(Visitor):
    def enter_Identifier(self, path: NodePath, state: TraversalState) -> None:
        binding = path.get_referenced_binding()
        if not isinstance(binding, VariableBinding):
            return
        if not binding.state_variable or not binding.is_secret:
            return
        if path.is_modification() or _is_incrementation_self_term(path, binding.id):
            return
        path.node["isAccessed"] = True
        path.node["accessedSecretState"] = True
        binding.update_accessed(path)
        indicator = path.scope.get_referenced_indicator(path.node)
        if indicator is not None:
            indicator.update_accessed(path)
        parent_path = path.parent_path
        if (
            not binding.is_mapping
            or parent_path is None
            or parent_path.node_type != "IndexAccess"
            or path.container_name != "baseExpression"
        ):
            return
        index_node = parent_path.node.get("indexExpression")
        key_name = mapping_key_name(index_node if isinstance(index_node, dict) else None)
        key = binding.mapping_keys.get(key_name)
        if key is not None:
            key.update_accessed(path)
        if indicator is not None:
            indicator_key = indicator.mapping_keys.get(key_name)
            if indicator_key is not None:
                indicator_key.update_accessed(path)
