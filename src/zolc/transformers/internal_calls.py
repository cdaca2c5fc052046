"""Collect calls from one contract function to another."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..traverse import NodePath, TraversalState
from ..traverse.indicator import FunctionDefinitionIndicator
from ..traverse.node_types import Node, mapping_key_name

logger = logging.getLogger(__name__)


@dataclass
class StateName:
    """A caller-side argument: ``name`` or ``name.member_name``."""

    name: str
    member_name: str | None = None

    def qualified(self) -> str:
        if self.member_name:
            return self.name + "." + self.member_name
        return self.name


@dataclass
class InternalCall:
    """One call site of a same-contract function.

    ``parent_type`` is ``FunctionDefinition`` when the call is a direct body
    statement of the caller, otherwise the node type of the enclosing
    statement (e.g. ``IfStatement``). When ``circuit_import`` is False the
    callee's statements are spliced into the caller instead of being called.
    """

    callee: str
    caller: str
    parent_type: str
    old_state_names: list[str] = field(default_factory=list)
    new_state_names: list[StateName] = field(default_factory=list)
    interacts_with_secret: bool = False
    circuit_import: bool = True


def _state_name(arg: Node) -> StateName:
    if arg.get("nodeType") == "Identifier":
        return StateName(str(arg.get("name", "")))
    expression = arg.get("expression")
    if (
        arg.get("nodeType") == "MemberAccess"
        and isinstance(expression, dict)
        and expression.get("nodeType") == "Identifier"
    ):
        return StateName(str(expression.get("name", "")), str(arg.get("memberName", "")))
    return StateName(mapping_key_name(arg))


def _parent_type(path: NodePath) -> str:
    statement = path.get_ancestor_of_type("ExpressionStatement")
    owner = statement.parent_path if statement is not None else None
    while owner is not None and owner.node_type in ("Block", "UncheckedBlock"):
        owner = owner.parent_path
    if owner is None:
        return "FunctionDefinition"
    return owner.node_type


def _circuit_import(indicator: FunctionDefinitionIndicator) -> bool:
    """False when every secret state the callee touches is partitioned and
    only ever incremented or decremented."""
    secret = indicator.secret_indicators()
    if len(secret) == 0:
        return True
    for state in secret:
        if not state.is_partitioned or not state.is_incremented:
            return True
    return False


def collect_internal_calls(root_path: NodePath) -> list[InternalCall]:
    """Every call from one function to another of the same contract, in
    source order. ``root_path`` must already have been checked."""
    calls: list[InternalCall] = []

    def enter(path: NodePath, state: TraversalState) -> None:
        if path.node_type != "FunctionCall":
            return
        expression = path.node.get("expression")
        if not isinstance(expression, dict) or expression.get("nodeType") != "Identifier":
            return
        callee_node = path.get_referenced_node(expression)
        if callee_node is None or callee_node.get("nodeType") != "FunctionDefinition":
            return
        callee_path = path.get_path(callee_node)
        contract = path.get_contract_definition()
        if contract is None or callee_path.get_contract_definition() is not contract:
            return
        caller_path = path.get_ancestor_of_type("FunctionDefinition")
        if caller_path is None:
            return
        indicator = callee_path.scope.indicators
        assert isinstance(indicator, FunctionDefinitionIndicator)
        params = callee_path.get_function_parameters() or []
        call = InternalCall(
            callee=str(callee_node.get("name", "")),
            caller=str(caller_path.node.get("name", "")),
            parent_type=_parent_type(path),
            old_state_names=[str(p.get("name", "")) for p in params],
            new_state_names=[
                _state_name(arg)
                for arg in path.node.get("arguments") or []
                if isinstance(arg, dict)
            ],
            interacts_with_secret=indicator.interacts_with_secret,
            circuit_import=_circuit_import(indicator),
        )
        logger.debug("internal call %s -> %s", call.caller, call.callee)
        calls.append(call)

    root_path.traverse_paths_fast(enter)
    return calls
