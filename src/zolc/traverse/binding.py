"""Bindings: one record per declared symbol, with every referencing Path.

A VariableBinding additionally carries the contract-wide usage facts of a
variable (secrecy, decorators, incrementation, access) and, once the whole
pass has run, its single whole/partitioned decision.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import ClassificationError
from .node_types import Node

if TYPE_CHECKING:
    from .node_path import NodePath
    from .scope import Scope


# ============================================================
# MAPPING KEYS
# ============================================================


class MappingKey:
    """Usage of one key of a mapping, e.g. ``balances[msg.sender]``."""

    def __init__(self, name: str, container: VariableBinding | object):
        self.name: str = name
        self.container = container
        self.is_msg_sender: bool = name == "msg.sender"
        self.referencing_paths: list[NodePath] = []
        self.modifying_paths: list[NodePath] = []
        self.accessed_paths: list[NodePath] = []
        self.is_referenced: bool = False
        self.is_modified: bool = False
        self.is_incremented: bool = False
        self.is_decremented: bool = False
        self.is_accessed: bool = False
        self.is_nullified: bool = False
        self._general_write: bool = False

    def add_reference(self, path: NodePath) -> None:
        self.is_referenced = True
        self.referencing_paths.append(path)

    def add_modification(self, path: NodePath) -> None:
        self.is_modified = True
        self.modifying_paths.append(path)

    def update_incrementation(self, is_incremented: bool, is_decremented: bool) -> None:
        if not is_incremented:
            self._general_write = True
            self.is_incremented = False
            return
        if not self._general_write:
            self.is_incremented = True
        if is_decremented:
            self.is_decremented = True

    def update_accessed(self, path: NodePath) -> None:
        self.is_accessed = True
        self.accessed_paths.append(path)

    def __repr__(self) -> str:
        return "MappingKey(" + self.name + ")"


# ============================================================
# BINDINGS
# ============================================================


class Binding:
    """A declared symbol: variable, function, contract, struct, event."""

    def __init__(self, path: NodePath, scope: Scope):
        node = path.node
        self.kind: str = path.node_type
        self.id: int = int(node["id"])
        self.name: str = str(node.get("name", ""))
        self.node: Node = node
        self.path: NodePath = path
        self.scope: Scope = scope
        self.is_referenced: bool = False
        self.reference_count: int = 0
        self.referencing_paths: list[NodePath] = []
        self.is_modified: bool = False
        self.modification_count: int = 0
        self.modifying_paths: list[NodePath] = []

    def add_reference(self, path: NodePath) -> None:
        self.is_referenced = True
        self.reference_count += 1
        self.referencing_paths.append(path)

    def add_modification(self, path: NodePath) -> None:
        self.is_modified = True
        self.modification_count += 1
        self.modifying_paths.append(path)

    def __repr__(self) -> str:
        return self.__class__.__name__ + "(" + self.kind + ", " + self.name + ")"


class VariableBinding(Binding):
    """A declared variable; for state variables, its usage across functions."""

    def __init__(self, path: NodePath, scope: Scope):
        super().__init__(path, scope)
        node = self.node
        type_name = node.get("typeName")
        self.state_variable: bool = bool(node.get("stateVariable"))
        self.is_secret: bool = bool(node.get("isSecret"))
        self.is_known: bool = bool(node.get("isKnown"))
        self.is_unknown: bool = bool(node.get("isUnknown"))
        self.is_reinitialisable: bool = bool(node.get("isReinitialisable"))
        self.is_mapping: bool = (
            isinstance(type_name, dict) and type_name.get("nodeType") == "Mapping"
        )
        self.mapping_keys: dict[str, MappingKey] = {}
        # Whole/partitioned: reasons accumulate during the pipeline; the
        # decision itself is made once, by resolve_whole_partitioned().
        self.is_whole: bool | None = None
        self.is_partitioned: bool | None = None
        self.whole_reasons: list[str] = []
        self.partitioned_reasons: list[str] = []
        self.is_incremented: bool = False
        self.is_decremented: bool = False
        self.incrementing_paths: list[NodePath] = []
        self.is_accessed: bool = False
        self.accessed_paths: list[NodePath] = []
        self.is_nullified: bool = False
        self.nullifying_paths: list[NodePath] = []
        self._general_write: bool = False

    def add_mapping_key(self, key_name: str, path: NodePath) -> MappingKey:
        key = self.mapping_keys.get(key_name)
        if key is None:
            key = MappingKey(key_name, self)
            self.mapping_keys[key_name] = key
        key.add_reference(path)
        if path.is_modification():
            key.add_modification(path)
        return key

    def add_whole_reason(self, reason: str) -> None:
        if reason not in self.whole_reasons:
            self.whole_reasons.append(reason)

    def add_partitioned_reason(self, reason: str) -> None:
        if reason not in self.partitioned_reasons:
            self.partitioned_reasons.append(reason)

    def update_incrementation(
        self, path: NodePath, is_incremented: bool, is_decremented: bool
    ) -> None:
        """Record one write; the variable stays incremented only while every
        write seen so far is an incrementation."""
        if not is_incremented:
            self._general_write = True
            self.is_incremented = False
            self.is_decremented = False
            self.add_whole_reason("non-incrementation")
            return
        self.incrementing_paths.append(path)
        if self._general_write:
            return
        self.is_incremented = True
        if is_decremented:
            self.is_decremented = True
        self.add_partitioned_reason("incrementation")

    def update_accessed(self, path: NodePath) -> None:
        self.is_accessed = True
        self.accessed_paths.append(path)
        self.add_whole_reason("accessed")

    def resolve_whole_partitioned(self) -> None:
        """Decide, once, between whole and partitioned compilation."""
        if self.is_whole is not None:
            return
        if self.is_known and self.is_unknown:
            raise ClassificationError(
                "state '" + self.name + "' is decorated both known and unknown",
                self.path.get_location(),
            )
        if self.is_unknown and len(self.whole_reasons) > 0:
            raise ClassificationError(
                "state '"
                + self.name
                + "' is decorated unknown but requires whole compilation ("
                + ", ".join(self.whole_reasons)
                + ")",
                self.path.get_location(),
            )
        if len(self.whole_reasons) > 0:
            self.is_whole = True
            self.is_partitioned = False
        elif len(self.partitioned_reasons) > 0:
            self.is_whole = False
            self.is_partitioned = True
        else:
            self.add_whole_reason("default")
            self.is_whole = True
            self.is_partitioned = False
        if self.is_partitioned:
            self.is_nullified = self.is_decremented
            if self.is_nullified:
                self.nullifying_paths = list(self.incrementing_paths)
        else:
            self.is_nullified = self.is_modified
            if self.is_nullified:
                self.nullifying_paths = list(self.modifying_paths)
        self.node["isWhole"] = self.is_whole
        self.node["isPartitioned"] = self.is_partitioned
        self.node["isNullified"] = self.is_nullified


def make_binding(path: NodePath, scope: Scope) -> Binding:
    """Build the right kind of Binding for a declaration Path."""
    if path.node_type == "VariableDeclaration":
        return VariableBinding(path, scope)
    return Binding(path, scope)
