"""Indicators: per-function and per-contract summaries of secret state usage.

A FunctionDefinitionIndicator holds one StateVariableIndicator for every state
variable the function references. Flags are filled in as Paths are built and
as the check passes run; ``finalise`` copies the contract-wide whole/partitioned
decision into each function once the whole pass has made it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import ClassificationError
from .binding import MappingKey, VariableBinding

if TYPE_CHECKING:
    from .node_path import NodePath
    from .scope import Scope


# ============================================================
# STATE VARIABLE INDICATOR
# ============================================================


class StateVariableIndicator:
    """Usage of one state variable within one function."""

    def __init__(self, scope: Scope, binding: VariableBinding):
        self.scope: Scope = scope
        self.binding: VariableBinding = binding
        self.id: int = binding.id
        self.name: str = binding.name
        self.node = binding.node
        self.is_secret: bool = binding.is_secret
        self.is_mapping: bool = binding.is_mapping
        self.mapping_keys: dict[str, MappingKey] = {}
        self.is_referenced: bool = False
        self.referencing_paths: list[NodePath] = []
        self.is_modified: bool = False
        self.modifying_paths: list[NodePath] = []
        self.is_incremented: bool = False
        self.is_decremented: bool = False
        self.incrementing_paths: list[NodePath] = []
        self.decrementing_paths: list[NodePath] = []
        self.is_accessed: bool = False
        self.accessed_paths: list[NodePath] = []
        self.is_known: bool = False
        self.is_unknown: bool = False
        self.is_whole: bool | None = None
        self.is_partitioned: bool | None = None
        self.is_nullified: bool = False
        self.nullifying_paths: list[NodePath] = []
        self.new_commitments_required: bool = False
        self.initialisation_required: bool = False
        self.old_commitment_access_required: bool = False
        self._general_write: bool = False

    def update(self, path: NodePath) -> None:
        """Record a referencing Identifier Path."""
        self.is_referenced = True
        self.referencing_paths.append(path)
        if path.is_modification():
            self.is_modified = True
            self.modifying_paths.append(path)
        if path.node.get("isKnown"):
            self.is_known = True
        if path.node.get("isUnknown"):
            self.is_unknown = True

    def add_mapping_key(self, key_name: str, path: NodePath) -> MappingKey:
        key = self.mapping_keys.get(key_name)
        if key is None:
            key = MappingKey(key_name, self)
            self.mapping_keys[key_name] = key
        key.add_reference(path)
        if path.is_modification():
            key.add_modification(path)
        return key

    def update_incrementation(
        self, path: NodePath, is_incremented: bool, is_decremented: bool
    ) -> None:
        if not is_incremented:
            self._general_write = True
            self.is_incremented = False
            self.is_decremented = False
            return
        self.incrementing_paths.append(path)
        if is_decremented:
            self.decrementing_paths.append(path)
        if self._general_write:
            return
        self.is_incremented = True
        if is_decremented:
            self.is_decremented = True

    def update_accessed(self, path: NodePath) -> None:
        self.is_accessed = True
        self.accessed_paths.append(path)

    def finalise(self) -> None:
        """Adopt the binding's decision and derive the commitment requirements."""
        binding = self.binding
        if binding.is_whole is None:
            raise ClassificationError(
                "state '" + self.name + "' was never resolved to whole or partitioned",
                binding.path.get_location(),
            )
        self.is_whole = binding.is_whole
        self.is_partitioned = binding.is_partitioned
        if self.is_partitioned:
            self.is_nullified = self.is_decremented
            self.nullifying_paths = list(self.decrementing_paths)
        else:
            self.is_nullified = self.is_modified
            self.nullifying_paths = list(self.modifying_paths)
        for key in self.mapping_keys.values():
            key.is_nullified = key.is_decremented if self.is_partitioned else key.is_modified
        self.new_commitments_required = self.is_modified
        self.initialisation_required = bool(self.is_whole) and self.is_modified
        self.old_commitment_access_required = self.is_nullified or self.is_accessed

    def __repr__(self) -> str:
        return "StateVariableIndicator(" + self.name + ")"


# ============================================================
# FUNCTION INDICATOR
# ============================================================


class FunctionDefinitionIndicator:
    """State variable usage within one function, keyed by declaration id."""

    def __init__(self, scope: Scope):
        self.scope: Scope = scope
        self.state_variables: dict[int, StateVariableIndicator] = {}
        self.interacts_with_secret: bool = False
        self.interacts_with_public: bool = False
        self.modifies_secret_state: bool = False
        self.increments_secret_state: bool = False
        self.decrements_secret_state: bool = False
        self.new_commitments_required: bool = False
        self.nullifiers_required: bool = False
        self.old_commitment_access_required: bool = False
        self.initialisation_required: bool = False

    def get(self, decl_id: int | None) -> StateVariableIndicator | None:
        if decl_id is None:
            return None
        return self.state_variables.get(decl_id)

    def update(self, path: NodePath, binding: VariableBinding) -> StateVariableIndicator:
        indicator = self.state_variables.get(binding.id)
        if indicator is None:
            indicator = StateVariableIndicator(self.scope, binding)
            self.state_variables[binding.id] = indicator
        indicator.update(path)
        if binding.is_secret:
            self.interacts_with_secret = True
            if indicator.is_modified:
                self.modifies_secret_state = True
        else:
            self.interacts_with_public = True
        return indicator

    def secret_indicators(self) -> list[StateVariableIndicator]:
        return [ind for ind in self.state_variables.values() if ind.is_secret]

    def finalise(self) -> None:
        for indicator in self.secret_indicators():
            indicator.finalise()
            if indicator.is_incremented:
                self.increments_secret_state = True
            if indicator.is_decremented:
                self.decrements_secret_state = True
            if indicator.new_commitments_required:
                self.new_commitments_required = True
            if indicator.is_nullified:
                self.nullifiers_required = True
            if indicator.old_commitment_access_required:
                self.old_commitment_access_required = True
            if indicator.initialisation_required:
                self.initialisation_required = True


# ============================================================
# CONTRACT INDICATOR
# ============================================================


class ContractDefinitionIndicator:
    """What the shield contract must verify, aggregated across functions."""

    def __init__(self, scope: Scope):
        self.scope: Scope = scope
        self.zkSnark_verification_required: bool = False
        self.nullifiers_required: bool = False
        self.old_commitment_access_required: bool = False
        self.new_commitments_required: bool = False

    def update(self, function_indicator: FunctionDefinitionIndicator) -> None:
        if function_indicator.interacts_with_secret:
            self.zkSnark_verification_required = True
        if function_indicator.nullifiers_required:
            self.nullifiers_required = True
        if function_indicator.old_commitment_access_required:
            self.old_commitment_access_required = True
        if function_indicator.new_commitments_required:
            self.new_commitments_required = True
