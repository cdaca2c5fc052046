"""Tests for collecting internal calls from a checked tree."""

from zolc.transformers.checks import run_checks
from zolc.transformers.internal_calls import InternalCall, StateName, collect_internal_calls


def _collect(ast) -> list[InternalCall]:
    return collect_internal_calls(run_checks(ast))


def _find_call(calls: list[InternalCall], callee: str) -> InternalCall:
    for call in calls:
        if call.callee == callee:
            return call
    raise AssertionError("no call to " + callee)


def test_partitioned_callee_is_spliced(b):
    a = b.state_var("a", secret=True)
    y = b.param("y")
    x = b.param("x")
    g = b.function("g", [b.expr_stmt(b.assign(b.ident(a), b.ident(y), "+="))], params=[y])
    f = b.function("f", [b.expr_stmt(b.call(b.ident(g), [b.ident(x)]))], params=[x])
    ast = b.source_unit([b.contract("C", [a, f, g])])
    calls = _collect(ast)
    assert len(calls) == 1
    call = calls[0]
    assert call.callee == "g"
    assert call.caller == "f"
    assert call.parent_type == "FunctionDefinition"
    assert call.old_state_names == ["y"]
    assert call.new_state_names == [StateName("x")]
    assert call.interacts_with_secret
    assert not call.circuit_import


def test_whole_callee_in_if_is_imported(b):
    a = b.state_var("a", secret=True)
    y = b.param("y")
    x = b.param("x")
    g = b.function("g", [b.expr_stmt(b.assign(b.ident(a), b.ident(y)))], params=[y])
    branch = b.if_stmt(b.literal("true"), [b.expr_stmt(b.call(b.ident(g), [b.ident(x)]))])
    f = b.function("f", [branch], params=[x])
    ast = b.source_unit([b.contract("C", [a, f, g])])
    call = _find_call(_collect(ast), "g")
    assert call.parent_type == "IfStatement"
    assert call.circuit_import
    assert call.interacts_with_secret


def test_member_argument_state_name(b):
    a = b.state_var("a", secret=True)
    y = b.param("y")
    s = b.param("s")
    g = b.function("g", [b.expr_stmt(b.assign(b.ident(a), b.ident(y)))], params=[y])
    call_expr = b.call(b.ident(g), [b.member(b.ident(s), "v")])
    f = b.function("f", [b.expr_stmt(call_expr)], params=[s])
    ast = b.source_unit([b.contract("C", [a, f, g])])
    call = _find_call(_collect(ast), "g")
    assert call.new_state_names == [StateName("s", "v")]
    assert call.new_state_names[0].qualified() == "s.v"
    assert StateName("s").qualified() == "s"


def test_public_callee(b):
    p = b.state_var("p")
    g = b.function("g", [b.expr_stmt(b.assign(b.ident(p), b.literal("1")))])
    f = b.function("f", [b.expr_stmt(b.call(b.ident(g), []))])
    ast = b.source_unit([b.contract("C", [p, f, g])])
    call = _find_call(_collect(ast), "g")
    assert not call.interacts_with_secret
    assert call.circuit_import
    assert call.old_state_names == []
    assert call.new_state_names == []


def test_builtin_and_external_calls_ignored(b):
    erc20 = b.contract("ERC20", [])
    token = b.contract_instance("token", erc20)
    x = b.param("x")
    stmts = [
        b.require(b.ident(x)),
        b.expr_stmt(b.call(b.member(b.ident(token), "transfer"), [b.ident(x)])),
    ]
    f = b.function("f", stmts, params=[x])
    ast = b.source_unit([erc20, b.contract("C", [token, f])])
    assert _collect(ast) == []


def test_calls_in_source_order(b):
    a = b.state_var("a", secret=True)
    y = b.param("y")
    z = b.param("z")
    g = b.function("g", [b.expr_stmt(b.assign(b.ident(a), b.ident(y)))], params=[y])
    h = b.function("h", [b.expr_stmt(b.assign(b.ident(a), b.ident(z)))], params=[z])
    f = b.function(
        "f",
        [
            b.expr_stmt(b.call(b.ident(h), [b.literal("1")])),
            b.expr_stmt(b.call(b.ident(g), [b.literal("2")])),
        ],
    )
    ast = b.source_unit([b.contract("C", [a, f, g, h])])
    assert [c.callee for c in _collect(ast)] == ["h", "g"]
