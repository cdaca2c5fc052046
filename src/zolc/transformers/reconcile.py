"""Internal-call parameter reconciliation.

When one compiled function calls another that touches secret state, the
caller's circuit must supply every cryptographic value the callee's circuit
needs. For each call site this pass clones the callee's circuit parameters,
renames its state variables into the caller's vocabulary, expands them into
concrete argument names, and merges them into the caller in a canonical
order. Emitters pass circuit arguments by position, so the order is exact.

Callees whose every secret state is a partitioned incrementation are not
imported as sub-circuits: their assignments are spliced into the caller and
their commitment delta is folded into the caller's.

Must run after the check pipeline has finalised every indicator.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass

from ..errors import ResolutionError, UnsupportedConstructError
from ..circuit.nodes import build_node
from ..traverse.node_types import Node
from .internal_calls import InternalCall, StateName

logger = logging.getLogger(__name__)


@dataclass
class ReconcileOptions:
    """Options threaded through reconciliation."""

    encrypted: bool = False
    keep_struct_definitions: bool = False


# ============================================================
# RENAMING
# ============================================================


def rename_state_names(name: str, renames: dict[str, str]) -> str:
    """Replace state names in an underscore-joined parameter name.

    A key of ``renames`` matches only as a whole ``_``-delimited segment, so
    ``a`` is renamed in ``a``, ``a_oldCommitment_salt`` and ``balances_a`` but
    not in ``ab`` or ``xa``. Every segment is looked up in the original name,
    so swaps (``a -> b``, ``b -> a``) and chains (``a -> b``, ``b -> c``)
    rename each segment exactly once.
    """
    renames = {old: new for old, new in renames.items() if old != "" and old != new}
    if not renames:
        return name
    return re.sub(
        r"(^|_)(" + _alternation(renames) + r")(?=_|$)",
        lambda m: m.group(1) + renames[m.group(2)],
        name,
    )


def rename_state_name(name: str, old: str, new: str) -> str:
    return rename_state_names(name, {old: new})


def _alternation(renames: dict[str, str]) -> str:
    # longest first, so ``a_b`` wins over ``a``
    return "|".join(re.escape(old) for old in sorted(renames, key=len, reverse=True))


def _rename_expression(expression: str, renames: dict[str, str]) -> str:
    """Rename variables inside an expression string like ``a + b.c``."""
    renames = {old: new for old, new in renames.items() if old != ""}
    if not renames:
        return expression
    return re.sub(
        r"(?<![A-Za-z0-9_.])(" + _alternation(renames) + r")(?![A-Za-z0-9_])",
        lambda m: renames[m.group(1)],
        expression,
    )


def _rename_parameters(parameters: list[Node], call: InternalCall) -> list[Node]:
    """Rename a cloned parameter list into the caller's vocabulary, in place."""
    pairs = list(zip(call.old_state_names, call.new_state_names))
    names = {old: new.name for old, new in pairs}
    qualified = {old: new.qualified() for old, new in pairs}
    members = {old for old, new in pairs if new.member_name}
    result: list[Node] = []
    for param in parameters:
        node_type = param.get("nodeType")
        if node_type == "Boilerplate":
            param["name"] = rename_state_names(str(param.get("name", "")), names)
            key = param.get("mappingKeyName")
            if isinstance(key, str) and key in names:
                param["mappingKeyName"] = names[key]
            value = param.get("newCommitmentValue")
            if isinstance(value, str):
                param["newCommitmentValue"] = _rename_expression(value, qualified)
        elif node_type == "VariableDeclaration":
            if param.get("name") in members:
                # a struct member travels inside its struct
                continue
            param["name"] = rename_state_names(str(param.get("name", "")), names)
        result.append(param)
    return result


def _renamed_statement(node: object, renames: dict[str, StateName]) -> object:
    """Copy of a statement with renamed Identifiers."""
    if isinstance(node, list):
        return [_renamed_statement(n, renames) for n in node]
    if not isinstance(node, dict):
        return node
    if node.get("nodeType") == "Identifier" and node.get("name") in renames:
        state_name = renames[str(node["name"])]
        if state_name.member_name:
            return build_node(
                "MemberAccess",
                {"expression": state_name.name, "memberName": state_name.member_name},
            )
        return dict(node, name=state_name.name)
    return {key: _renamed_statement(value, renames) for key, value in node.items()}


# ============================================================
# ARGUMENT EXPANSION
# ============================================================


def _expand_parameter(param: Node, options: ReconcileOptions) -> list[str]:
    if param.get("nodeType") == "VariableDeclaration":
        return [str(param.get("name", ""))]
    name = str(param.get("name", ""))
    bp_type = param.get("bpType")
    accessed_only = bool(param.get("isAccessed")) and not param.get("isNullified")
    if bp_type == "PoKoSK":
        return [name + "_oldCommitment_owner_secretKey"]
    if bp_type == "nullification":
        args = [name + "_oldCommitment_owner_secretKey", "nullifierRoot"]
        if not accessed_only:
            args += ["newNullifierRoot", name + "_oldCommitment_nullifier"]
        args.append(name + "_nullifier_nonmembershipWitness_siblingPath")
        if not accessed_only:
            args.append(name + "_nullifier_nonmembershipWitness_newsiblingPath")
        return args
    if bp_type == "oldCommitmentPreimage":
        return [name + "_oldCommitment_value", name + "_oldCommitment_salt"]
    if bp_type == "oldCommitmentExistence":
        args = []
        if param.get("isWhole") and not accessed_only:
            args.append(name + "_oldCommitment_isDummy")
        args += [
            "commitmentRoot",
            name + "_oldCommitment_membershipWitness_index",
            name + "_oldCommitment_membershipWitness_siblingPath",
        ]
        return args
    if bp_type == "newCommitment":
        args = []
        if not options.encrypted:
            args.append(name + "_newCommitment_owner_publicKey")
        args += [name + "_newCommitment_salt", name + "_newCommitment_commitment"]
        return args
    if bp_type == "mapping":
        return [str(param.get("mappingKeyName", ""))]
    if bp_type == "encryption":
        return [name + "_newCommitment_ephSecretKey", name + "_newCommitment_owner_publicKey_point"]
    return []


def expand_arguments(
    parameters: list[Node], options: ReconcileOptions | None = None
) -> list[str]:
    """Concrete circuit argument names for a parameter list, without duplicates."""
    if options is None:
        options = ReconcileOptions()
    arguments: list[str] = []
    for param in parameters:
        for arg in _expand_parameter(param, options):
            if arg not in arguments:
                arguments.append(arg)
    return arguments


# ============================================================
# MERGING AND ORDERING
# ============================================================


def _structural_key(param: Node) -> tuple[object, ...]:
    if param.get("nodeType") == "Boilerplate":
        return (param.get("nodeType"), param.get("name"), param.get("bpType"))
    return (param.get("nodeType"), param.get("name"))


def _supersedes(old: Node, new: Node) -> bool:
    """Should a later entry for the same state replace an earlier one?"""
    if old.get("name") != new.get("name") or old.get("bpType") != new.get("bpType"):
        return False
    if old.get("bpType") == "nullification":
        return bool(
            old.get("isAccessed")
            and not old.get("isNullified")
            and (new.get("isNullified") or not new.get("isAccessed"))
        )
    if old.get("bpType") == "oldCommitmentExistence":
        return bool(
            (not old.get("isWhole") or not old.get("initialisationRequired"))
            and new.get("isWhole")
            and new.get("initialisationRequired")
        )
    return False


def union_parameters(existing: list[Node], additions: list[Node]) -> list[Node]:
    """Ordered union of two parameter lists; on a collision a superseding
    addition replaces the existing entry in place."""
    result = list(existing)
    positions = {_structural_key(p): i for i, p in enumerate(result)}
    for param in additions:
        key = _structural_key(param)
        i = positions.get(key)
        if i is None:
            positions[key] = len(result)
            result.append(param)
        elif _supersedes(result[i], param):
            result[i] = param
    return result


@dataclass
class _Group:
    """A contiguous run of Boilerplate entries for one state."""

    first_index: int
    is_new_commitment: bool = False
    new_commitment_index: int | None = None
    mapping_index: int | None = None
    old_commitment_index: int | None = None


def reorder_parameters(parameters: list[Node]) -> None:
    """Put a merged parameter list into canonical order, in place.

    Superseded nullification and old-commitment-existence entries are
    replaced by their later counterparts. Then, for a state whose first group
    does not create a new commitment, the new-commitment entry of a later
    group is moved to follow the first group's old-commitment-existence or
    mapping entry (whichever is deeper), so spending precedes producing.
    Only the first later group that creates a new commitment is moved; any
    further groups for the same state keep their positions.
    """
    for i in range(len(parameters)):
        for j in range(i + 1, len(parameters)):
            if _supersedes(parameters[i], parameters[j]):
                parameters[i] = parameters[j]
    seen: set[int] = set()
    deduped: list[Node] = []
    for param in parameters:
        if id(param) not in seen:
            seen.add(id(param))
            deduped.append(param)
    parameters[:] = deduped

    groups: dict[str, list[_Group]] = {}
    current_name: str | None = None
    for index, param in enumerate(parameters):
        bp_type = param.get("bpType")
        if not bp_type:
            continue
        name = str(param.get("name", ""))
        if name != current_name:
            current_name = name
            groups.setdefault(name, []).append(_Group(first_index=index))
        group = groups[name][-1]
        if bp_type == "newCommitment":
            group.is_new_commitment = True
            group.new_commitment_index = index
        elif bp_type == "mapping":
            group.mapping_index = index
        elif bp_type == "oldCommitmentExistence":
            group.old_commitment_index = index

    moves: list[tuple[Node, Node]] = []
    for name_groups in groups.values():
        first = name_groups[0]
        if first.is_new_commitment or len(name_groups) < 2:
            continue
        later = next((g for g in name_groups[1:] if g.is_new_commitment), None)
        if later is None or later.new_commitment_index is None:
            continue
        anchors = [i for i in (first.old_commitment_index, first.mapping_index) if i is not None]
        anchor_index = max(anchors) if anchors else first.first_index
        moves.append((parameters[later.new_commitment_index], parameters[anchor_index]))

    for element, _ in moves:
        parameters.remove(element)
    for element, anchor in moves:
        position = next(i for i, p in enumerate(parameters) if p is anchor)
        parameters.insert(position + 1, element)


# ============================================================
# CIRCUIT FILES
# ============================================================


def _files(folder: Node) -> list[Node]:
    files = folder.get("files")
    return files if isinstance(files, list) else []


def _find_file(folder: Node, name: str) -> Node:
    for file in _files(folder):
        if file.get("fileName") == name:
            return file
    raise ResolutionError("no circuit file for function '" + name + "'")


def _function_definition(file: Node) -> Node:
    for node in file.get("nodes") or []:
        if isinstance(node, dict) and node.get("nodeType") == "FunctionDefinition":
            return node
    raise ResolutionError("circuit file '" + str(file.get("fileName")) + "' has no function")


def _parameter_list(function: Node, key: str) -> list[Node]:
    param_list = function.get(key)
    if not isinstance(param_list, dict):
        param_list = build_node("ParameterList")
        function[key] = param_list
    params = param_list.get("parameters")
    if not isinstance(params, list):
        params = []
        param_list["parameters"] = params
    return params


def _call_site_statement_lists(function: Node, parent_type: str) -> list[list[Node]]:
    """Statement lists that may hold the call: the caller's body, or the
    bodies of its ``parent_type`` statements."""
    body = function.get("body")
    statements = body.get("statements") if isinstance(body, dict) else None
    if not isinstance(statements, list):
        return []
    if parent_type == "FunctionDefinition":
        return [statements]
    lists: list[list[Node]] = []
    for statement in statements:
        if not isinstance(statement, dict) or statement.get("nodeType") != parent_type:
            continue
        for key in ("body", "trueBody", "falseBody"):
            sub = statement.get(key)
            if isinstance(sub, dict) and isinstance(sub.get("statements"), list):
                lists.append(sub["statements"])
    return lists


def _remove_struct_definitions(file: Node) -> None:
    nodes = file.get("nodes")
    if isinstance(nodes, list):
        nodes[:] = [
            n for n in nodes if not (isinstance(n, dict) and n.get("nodeType") == "StructDefinition")
        ]


# ============================================================
# RECONCILIATION
# ============================================================


def _call_expressions(function: Node, call: InternalCall) -> list[Node]:
    """The caller's InternalFunctionCall expressions for ``call.callee``, in
    statement order."""
    found: list[Node] = []
    for statements in _call_site_statement_lists(function, call.parent_type):
        for statement in statements:
            expression = statement.get("expression")
            if (
                statement.get("nodeType") == "ExpressionStatement"
                and isinstance(expression, dict)
                and expression.get("nodeType") == "InternalFunctionCall"
                and expression.get("name") == call.callee
            ):
                found.append(expression)
    return found


def _import_callee(
    folder: Node, call: InternalCall, options: ReconcileOptions, site: int
) -> None:
    """Merge the callee's parameters into the caller and write the expanded
    arguments onto the ``site``-th matching call expression only."""
    callee = _function_definition(_find_file(folder, call.callee))
    params = _rename_parameters(copy.deepcopy(_parameter_list(callee, "parameters")), call)
    returns = _rename_parameters(copy.deepcopy(_parameter_list(callee, "returnParameters")), call)
    arguments = expand_arguments(params, options)

    caller_file = _find_file(folder, call.caller)
    if not options.keep_struct_definitions:
        _remove_struct_definitions(caller_file)
    caller = _function_definition(caller_file)
    merged = union_parameters(_parameter_list(caller, "parameters"), params)
    reorder_parameters(merged)
    caller["parameters"]["parameters"] = merged
    caller["returnParameters"]["parameters"] = union_parameters(
        _parameter_list(caller, "returnParameters"), returns
    )

    expressions = _call_expressions(caller, call)
    if site >= len(expressions):
        logger.warning(
            "no call site %d of %s in circuit %s", site, call.callee, call.caller
        )
        return
    expression = expressions[site]
    circuit_arguments = expression.setdefault("CircuitArguments", [])
    assert isinstance(circuit_arguments, list)
    for arg in arguments:
        if arg not in circuit_arguments:
            circuit_arguments.append(arg)
    circuit_return = expression.setdefault("CircuitReturn", [])
    assert isinstance(circuit_return, list)
    circuit_return.extend(copy.deepcopy(returns))


def _partitioned_direction(statements: list[Node]) -> tuple[set[str], str | None]:
    """Names of the partitioned states written and the last write's bpType."""
    names: set[str] = set()
    bp_type: str | None = None
    for statement in statements:
        if isinstance(statement, dict) and statement.get("isPartitioned"):
            names.add(str(statement.get("name", "")))
            bp_type = str(statement.get("bpType"))
    return names, bp_type


def _splice_callee(folder: Node, call: InternalCall) -> None:
    callee = _function_definition(_find_file(folder, call.callee))
    callee_body = callee.get("body") or {}
    renames = {
        old: new for old, new in zip(call.old_state_names, call.new_state_names)
    }
    spliced: list[Node] = []
    for statement in callee_body.get("statements") or []:
        expression = statement.get("expression")
        if (
            statement.get("nodeType") == "ExpressionStatement"
            and isinstance(expression, dict)
            and expression.get("nodeType") == "Assignment"
        ):
            renamed = _renamed_statement(statement, renames)
            assert isinstance(renamed, dict)
            spliced.append(renamed)

    names, callee_bp_type = _partitioned_direction(callee_body.get("statements") or [])
    if len(names) > 1:
        raise UnsupportedConstructError(
            "cannot splice '"
            + call.callee
            + "' into '"
            + call.caller
            + "': it writes more than one partitioned state ("
            + ", ".join(sorted(names))
            + ")"
        )
    commitment_value: str | None = None
    for statement in callee_body.get("preStatements") or []:
        value = statement.get("newCommitmentValue")
        if statement.get("isPartitioned") and isinstance(value, str):
            commitment_value = value
    if commitment_value is not None:
        commitment_value = _rename_expression(
            commitment_value, {old: new.qualified() for old, new in renames.items()}
        )

    caller = _function_definition(_find_file(folder, call.caller))
    caller_body = caller.get("body")
    assert isinstance(caller_body, dict)
    _, caller_bp_type = _partitioned_direction(caller_body.get("statements") or [])
    for statements in _call_site_statement_lists(caller, call.parent_type):
        for statement in spliced:
            if statement not in statements:
                statements.append(statement)

    if len(names) == 0 or commitment_value is None:
        return
    sign = " + (" if callee_bp_type == caller_bp_type else " - ("
    for key in ("preStatements", "postStatements"):
        for statement in caller_body.get(key) or []:
            value = statement.get("newCommitmentValue")
            if statement.get("isPartitioned") and isinstance(value, str):
                statement["newCommitmentValue"] = value + sign + commitment_value + ")"


def reconcile_internal_calls(
    folder: Node, calls: list[InternalCall], options: ReconcileOptions | None = None
) -> None:
    """Reconcile every call site's circuit with its callee's, in place.

    ``calls`` are in source order. The k-th call from one caller to one
    callee under the same parent statement type updates the k-th matching
    call expression in the caller's circuit.
    """
    if options is None:
        options = ReconcileOptions()
    sites: dict[tuple[str, str, str], int] = {}
    for call in calls:
        key = (call.caller, call.callee, call.parent_type)
        site = sites.get(key, 0)
        sites[key] = site + 1
        if not call.interacts_with_secret:
            logger.debug("skipping %s -> %s: no secret state", call.caller, call.callee)
            continue
        if call.circuit_import:
            _import_callee(folder, call, options, site)
        else:
            _splice_callee(folder, call)
        logger.info("reconciled internal call %s -> %s", call.caller, call.callee)
