"""Validate known/unknown/reinitialisable decorators and record what they imply.

``known`` and ``reinitialisable`` force whole compilation; ``unknown`` asks for
partitioned compilation. Decorators may appear on the declaration or at any
referencing site, but must agree across all of them.
"""

from __future__ import annotations

from ...errors import ClassificationError, UnsupportedConstructError
from ...traverse import NodePath, TraversalState, VariableBinding, Visitor
from ...traverse.node_types import Node


def _decorators(node: Node) -> list[str]:
    names: list[str] = []
    if node.get("isKnown"):
        names.append("known")
    if node.get("isUnknown"):
        names.append("unknown")
    if node.get("isReinitialisable"):
        names.append("reinitialisable")
    return names


class DecoratorVisitor(Visitor):
    def enter_VariableDeclaration(self, path: NodePath, state: TraversalState) -> None:
        decorators = _decorators(path.node)
        if len(decorators) == 0:
            return
        name = str(path.node.get("name", ""))
        if not path.node.get("isSecret"):
            raise UnsupportedConstructError(
                "decorator '" + decorators[0] + "' is only allowed on secret variables, not '" + name + "'",
                path.get_location(),
            )
        if "known" in decorators and "unknown" in decorators:
            raise ClassificationError(
                "variable '" + name + "' is decorated both known and unknown",
                path.get_location(),
            )
        binding = path.scope.get_binding(int(path.node["id"]))
        if isinstance(binding, VariableBinding):
            _record(binding, decorators)

    def enter_Identifier(self, path: NodePath, state: TraversalState) -> None:
        decorators = _decorators(path.node)
        if len(decorators) == 0:
            return
        binding = path.get_referenced_binding()
        if not isinstance(binding, VariableBinding):
            return
        if not binding.is_secret:
            raise UnsupportedConstructError(
                "decorator '" + decorators[0] + "' is only allowed on secret variables, not '" + binding.name + "'",
                path.get_location(),
            )
        if "known" in decorators and "unknown" in decorators:
            raise ClassificationError(
                "variable '" + binding.name + "' is decorated both known and unknown",
                path.get_location(),
            )
        if ("known" in decorators and binding.is_unknown) or (
            "unknown" in decorators and binding.is_known
        ):
            raise ClassificationError(
                "variable '" + binding.name + "' is decorated known in one place and unknown in another",
                path.get_location(),
            )
        _record(binding, decorators)


def _record(binding: VariableBinding, decorators: list[str]) -> None:
    if "known" in decorators:
        binding.is_known = True
        binding.add_whole_reason("known")
    if "unknown" in decorators:
        binding.is_unknown = True
        binding.add_partitioned_reason("unknown")
    if "reinitialisable" in decorators:
        binding.is_reinitialisable = True
        binding.add_whole_reason("reinitialisable")
