"""Lexical scopes and their binding tables.

A Scope is created for each scopable node (SourceUnit, ContractDefinition,
FunctionDefinition) and shared by every non-scopable descendant Path. Paths
report themselves to their nearest enclosing Scope as they are built, which is
how bindings and references accumulate during traversal.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..errors import ResolutionError
from .binding import Binding, VariableBinding, make_binding
from .indicator import (
    ContractDefinitionIndicator,
    FunctionDefinitionIndicator,
    StateVariableIndicator,
)
from .node_types import (
    DECLARATION_TYPES,
    Node,
    get_referenced_declaration_id,
    is_magic_id,
    mapping_key_name,
)

if TYPE_CHECKING:
    from .node_path import NodePath

logger = logging.getLogger(__name__)


class Scope:
    """Binding table for one scopable node."""

    def __init__(self, path: NodePath):
        node = path.node
        self.path: NodePath = path
        self.scope_id: object = node.get("id")
        self.scope_name: str = str(node.get("name", ""))
        self.scope_type: str = path.node_type
        self.bindings: dict[int, Binding] = {}
        self.parent_scope: Scope | None = None
        if path.parent_path is not None:
            self.parent_scope = path.parent_path.scope
        self.indicators: FunctionDefinitionIndicator | ContractDefinitionIndicator | None = None
        if self.scope_type == "FunctionDefinition":
            self.indicators = FunctionDefinitionIndicator(self)
        elif self.scope_type == "ContractDefinition":
            self.indicators = ContractDefinitionIndicator(self)

    def __repr__(self) -> str:
        return "Scope(" + self.scope_type + ", " + self.scope_name + ")"

    # ============================================================
    # UPDATES
    # ============================================================

    def update(self, path: NodePath) -> None:
        """Register a newly built descendant Path with this scope."""
        node = path.node
        if path.node_type in DECLARATION_TYPES and isinstance(node.get("id"), int):
            self.bindings[int(node["id"])] = make_binding(path, self)
        elif path.node_type == "Identifier":
            self._update_reference(path)

    def _update_reference(self, path: NodePath) -> None:
        node = path.node
        ref_id = node.get("referencedDeclaration")
        if not isinstance(ref_id, int) or is_magic_id(ref_id):
            return
        binding = self.get_binding(ref_id)
        if binding is None:
            if self._is_exported_id(ref_id):
                logger.debug("reference to imported symbol '%s'", node.get("name"))
                return
            raise ResolutionError(
                "cannot resolve reference to '" + str(node.get("name", "")) + "'",
                path.get_location(),
            )
        binding.add_reference(path)
        if path.is_modification():
            binding.add_modification(path)
        if not isinstance(binding, VariableBinding):
            return
        index_access = _enclosing_index_access(path)
        key_name: str | None = None
        if binding.is_mapping and index_access is not None:
            index_node = index_access.node.get("indexExpression")
            key_name = mapping_key_name(index_node if isinstance(index_node, dict) else None)
            binding.add_mapping_key(key_name, path)
        function_scope = self.get_ancestor_of_scope_type("FunctionDefinition")
        if binding.state_variable and function_scope is not None:
            indicators = function_scope.indicators
            assert isinstance(indicators, FunctionDefinitionIndicator)
            indicator = indicators.update(path, binding)
            if key_name is not None:
                indicator.add_mapping_key(key_name, path)

    # ============================================================
    # LOOKUPS
    # ============================================================

    def get_binding(self, decl_id: int) -> Binding | None:
        """Find a binding by declaration id, walking outwards through scopes."""
        scope: Scope | None = self
        while scope is not None:
            binding = scope.bindings.get(decl_id)
            if binding is not None:
                return binding
            scope = scope.parent_scope
        return None

    def get_referenced_binding(self, node: Node) -> Binding | None:
        decl_id = get_referenced_declaration_id(node)
        if decl_id is None or is_magic_id(decl_id):
            return None
        return self.get_binding(decl_id)

    def get_referenced_node(self, node: Node) -> Node | None:
        binding = self.get_referenced_binding(node)
        if binding is None:
            return None
        return binding.node

    def get_referenced_indicator(self, node: Node) -> StateVariableIndicator | None:
        """This function's indicator for the state variable ``node`` refers to."""
        function_scope = self.get_ancestor_of_scope_type("FunctionDefinition")
        if function_scope is None:
            return None
        indicators = function_scope.indicators
        assert isinstance(indicators, FunctionDefinitionIndicator)
        return indicators.get(get_referenced_declaration_id(node))

    def get_ancestor_of_scope_type(self, scope_type: str) -> Scope | None:
        scope: Scope | None = self
        while scope is not None:
            if scope.scope_type == scope_type:
                return scope
            scope = scope.parent_scope
        return None

    def get_root_scope(self) -> Scope:
        scope = self
        while scope.parent_scope is not None:
            scope = scope.parent_scope
        return scope

    def filter_bindings(self, kind: str) -> list[Binding]:
        return [b for b in self.bindings.values() if b.kind == kind]

    def state_variable_bindings(self) -> list[VariableBinding]:
        result: list[VariableBinding] = []
        for binding in self.bindings.values():
            if isinstance(binding, VariableBinding) and binding.state_variable:
                result.append(binding)
        return result

    def secret_state_bindings(self) -> list[VariableBinding]:
        return [b for b in self.state_variable_bindings() if b.is_secret]

    def _is_exported_id(self, decl_id: int) -> bool:
        root = self.get_root_scope().path.node
        exported = root.get("exportedSymbols")
        if not isinstance(exported, dict):
            return False
        for ids in exported.values():
            if isinstance(ids, list) and decl_id in ids:
                return True
        return False


def _enclosing_index_access(path: NodePath) -> NodePath | None:
    """The IndexAccess whose base expression is this Identifier, if any."""
    parent_path = path.parent_path
    if (
        parent_path is not None
        and parent_path.node_type == "IndexAccess"
        and path.container_name == "baseExpression"
    ):
        return parent_path
    return None
