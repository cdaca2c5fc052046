"""Tests for scopes, bindings, mapping keys and function indicators."""

from ast_builder import single_function_tree
from zolc.transformers.checks import build_paths
from zolc.traverse import Binding, VariableBinding
from zolc.traverse.indicator import ContractDefinitionIndicator, FunctionDefinitionIndicator


def _scope_of(root, node):
    return root.get_path(node).scope


def _function_indicator(root, f) -> FunctionDefinitionIndicator:
    indicators = _scope_of(root, f).indicators
    assert isinstance(indicators, FunctionDefinitionIndicator)
    return indicators


def test_scopes_per_scopable_node(b):
    a = b.state_var("a")
    x = b.param("x")
    lhs = b.ident(a)
    stmt = b.expr_stmt(b.assign(lhs, b.ident(x)))
    ast, f = single_function_tree(b, [a], [stmt], params=[x])
    root = build_paths(ast)
    contract = ast["nodes"][0]
    assert root.scope.scope_type == "SourceUnit"
    contract_scope = _scope_of(root, contract)
    function_scope = _scope_of(root, f)
    assert contract_scope.scope_type == "ContractDefinition"
    assert contract_scope.scope_name == "C"
    assert isinstance(contract_scope.indicators, ContractDefinitionIndicator)
    assert function_scope.parent_scope is contract_scope
    assert contract_scope.parent_scope is root.scope
    # Non-scopable paths share the scope of their nearest scopable ancestor
    assert _scope_of(root, stmt) is function_scope
    assert _scope_of(root, lhs) is function_scope
    assert function_scope.get_root_scope() is root.scope
    assert function_scope.get_ancestor_of_scope_type("ContractDefinition") is contract_scope


def test_bindings_live_in_declaring_scope(b):
    a = b.state_var("a", secret=True)
    x = b.param("x")
    ast, f = single_function_tree(b, [a], [b.expr_stmt(b.assign(b.ident(a), b.ident(x)))], [x])
    root = build_paths(ast)
    contract_scope = _scope_of(root, ast["nodes"][0])
    function_scope = _scope_of(root, f)
    assert set(contract_scope.bindings) == {a["id"], f["id"]}
    assert x["id"] in function_scope.bindings
    assert function_scope.get_binding(a["id"]) is contract_scope.bindings[a["id"]]
    assert contract_scope.get_binding(x["id"]) is None
    assert [bd.name for bd in contract_scope.filter_bindings("FunctionDefinition")] == ["f"]
    assert [bd.name for bd in contract_scope.secret_state_bindings()] == ["a"]
    assert root.scope.bindings[ast["nodes"][0]["id"]].kind == "ContractDefinition"


def test_binding_kinds(b):
    a = b.state_var("a", secret=True, mapping=True)
    ast, f = single_function_tree(b, [a], [])
    root = build_paths(ast)
    contract_scope = _scope_of(root, ast["nodes"][0])
    binding = contract_scope.bindings[a["id"]]
    assert isinstance(binding, VariableBinding)
    assert binding.state_variable
    assert binding.is_secret
    assert binding.is_mapping
    assert binding.path is root.get_path(a)
    function_binding = contract_scope.bindings[f["id"]]
    assert type(function_binding) is Binding
    assert function_binding.kind == "FunctionDefinition"


def test_reference_and_modification_counts(b):
    a = b.state_var("a")
    x = b.param("x")
    stmts = [
        b.expr_stmt(b.assign(b.ident(a), b.ident(x))),
        b.expr_stmt(b.assign(b.ident(x), b.ident(a))),
        b.expr_stmt(b.unary("++", b.ident(a))),
    ]
    ast, f = single_function_tree(b, [a], stmts, [x])
    root = build_paths(ast)
    binding = _scope_of(root, f).get_binding(a["id"])
    assert binding.reference_count == 3
    assert binding.modification_count == 2
    assert binding.is_referenced
    assert binding.is_modified
    param = _scope_of(root, f).get_binding(x["id"])
    assert param.reference_count == 2
    assert param.modification_count == 1


def test_hoisting_resolves_later_function(b):
    g = b.function("g", [])
    call = b.call(b.ident(g), [])
    f = b.function("f", [b.expr_stmt(call)])
    contract = b.contract("C", [f, g])
    ast = b.source_unit([contract])
    root = build_paths(ast)
    binding = _scope_of(root, contract).bindings[g["id"]]
    assert binding.reference_count == 1
    assert binding.referencing_paths[0].node is call["expression"]


def test_mapping_keys(b):
    bal = b.state_var("bal", secret=True, mapping=True)
    x = b.param("x")
    stmts = [
        b.expr_stmt(b.assign(b.index(b.ident(bal), b.msg_sender()), b.ident(x), "+=")),
        b.expr_stmt(b.assign(b.ident(x), b.index(b.ident(bal), b.ident(x)))),
    ]
    ast, f = single_function_tree(b, [bal], stmts, [x])
    root = build_paths(ast)
    binding = _scope_of(root, f).get_binding(bal["id"])
    assert list(binding.mapping_keys) == ["msg.sender", "x"]
    sender = binding.mapping_keys["msg.sender"]
    assert sender.is_msg_sender
    assert sender.is_modified
    assert len(sender.referencing_paths) == 1
    other = binding.mapping_keys["x"]
    assert not other.is_msg_sender
    assert other.is_referenced
    assert not other.is_modified
    indicator = _function_indicator(root, f).get(bal["id"])
    assert list(indicator.mapping_keys) == ["msg.sender", "x"]
    assert indicator.mapping_keys["msg.sender"].container is indicator


def test_function_indicator_tracks_state_usage(b):
    a = b.state_var("a", secret=True)
    p = b.state_var("p")
    x = b.param("x")
    read = b.ident(a)
    stmts = [
        b.expr_stmt(b.assign(b.ident(p), b.ident(x))),
        b.expr_stmt(b.assign(b.ident(x), read)),
    ]
    ast, f = single_function_tree(b, [a, p], stmts, [x])
    root = build_paths(ast)
    indicators = _function_indicator(root, f)
    assert set(indicators.state_variables) == {a["id"], p["id"]}
    assert indicators.interacts_with_secret
    assert indicators.interacts_with_public
    assert not indicators.modifies_secret_state
    secret = indicators.get(a["id"])
    assert secret.is_secret
    assert secret.is_referenced
    assert not secret.is_modified
    assert secret.referencing_paths == [root.get_path(read)]
    assert [ind.name for ind in indicators.secret_indicators()] == ["a"]
    assert indicators.get(x["id"]) is None
    assert indicators.get(None) is None
    assert root.get_path(read).scope.get_referenced_indicator(read) is secret


def test_function_indicator_marks_secret_writes(b):
    a = b.state_var("a", secret=True)
    ast, f = single_function_tree(b, [a], [b.expr_stmt(b.assign(b.ident(a), b.literal("1")))])
    root = build_paths(ast)
    indicators = _function_indicator(root, f)
    assert indicators.modifies_secret_state
    assert not indicators.interacts_with_public
    assert indicators.get(a["id"]).is_modified


def test_decorated_reference_recorded_on_indicator(b):
    a = b.state_var("a", secret=True)
    stmt = b.expr_stmt(b.assign(b.ident(a, isKnown=True), b.literal("1")))
    ast, f = single_function_tree(b, [a], [stmt])
    root = build_paths(ast)
    indicator = _function_indicator(root, f).get(a["id"])
    assert indicator.is_known
    assert not indicator.is_unknown


def test_state_outside_function_has_no_indicator(b):
    a = b.state_var("a")
    ast, f = single_function_tree(b, [a], [])
    root = build_paths(ast)
    assert _scope_of(root, a).get_referenced_indicator(b.ident(a)) is None
