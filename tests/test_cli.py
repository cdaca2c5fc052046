"""Tests for the command-line entry point."""

import json

import pytest

from ast_builder import TreeBuilder, single_function_tree
from zolc.circuit.nodes import build_node
from zolc.cli import USAGE, UsageError, main, parse_args


def _write(tmp_path, name: str, obj) -> str:
    path = tmp_path / name
    path.write_text(json.dumps(obj))
    return str(path)


def _whole_tree(b: TreeBuilder) -> dict:
    a = b.state_var("a", secret=True)
    x = b.param("x")
    stmt = b.expr_stmt(b.assign(b.ident(a), b.ident(x)))
    return single_function_tree(b, [a], [stmt], [x])[0]


def _calling_tree(b: TreeBuilder) -> dict:
    a = b.state_var("a", secret=True)
    y = b.param("y")
    x = b.param("x")
    g = b.function("g", [b.expr_stmt(b.assign(b.ident(a), b.ident(y)))], params=[y])
    f = b.function("f", [b.expr_stmt(b.call(b.ident(g), [b.ident(x)]))], params=[x])
    return b.source_unit([b.contract("C", [a, f, g])])


def _find_scope(output: dict, scope: str) -> dict:
    for entry in output["scopes"]:
        if entry["scope"] == scope:
            return entry
    raise AssertionError("no scope " + scope)


def _run(capsys, argv: list[str]) -> tuple[int, str, str]:
    code = main(argv)
    captured = capsys.readouterr()
    return code, captured.out, captured.err


# --- argument parsing ---


def test_parse_args():
    args = parse_args(["in.json", "--stop-at", "checks", "-o", "out.json", "--encrypt", "-vv"])
    assert args.input_file == "in.json"
    assert args.stop_at == "checks"
    assert args.output_file == "out.json"
    assert args.encrypted
    assert args.verbosity == 2


@pytest.mark.parametrize(
    "argv,message",
    [
        (["--bogus"], "unknown flag '--bogus'"),
        (["--stop-at", "emit"], "unknown phase 'emit'"),
        (["--stop-at"], "--stop-at requires an argument"),
        (["a.json", "b.json"], "unexpected argument 'b.json'"),
    ],
)
def test_parse_args_errors(argv, message):
    with pytest.raises(UsageError, match=message):
        parse_args(argv)


def test_help(capsys):
    code, out, _ = _run(capsys, ["--help"])
    assert code == 0
    assert out == USAGE


def test_usage_error_exit_code(capsys):
    code, _, err = _run(capsys, ["--bogus"])
    assert code == 2
    assert err.startswith("error: unknown flag")


# --- phases ---


def test_stop_at_paths(tmp_path, capsys):
    source = _write(tmp_path, "in.json", _whole_tree(TreeBuilder()))
    code, out, _ = _run(capsys, [source, "--stop-at", "paths"])
    assert code == 0
    output = json.loads(out)
    assert [s["scope"] for s in output["scopes"]] == [
        "SourceUnit:",
        "ContractDefinition:C",
        "FunctionDefinition:f",
    ]
    contract = _find_scope(output, "ContractDefinition:C")
    a = contract["bindings"][0]
    assert a["name"] == "a"
    assert a["isSecret"] is True
    assert "isWhole" not in a
    assert _find_scope(output, "FunctionDefinition:f")["parameters"] == []


def test_stop_at_checks(tmp_path, capsys):
    source = _write(tmp_path, "in.json", _whole_tree(TreeBuilder()))
    code, out, _ = _run(capsys, [source, "--stop-at", "checks"])
    assert code == 0
    output = json.loads(out)
    a = _find_scope(output, "ContractDefinition:C")["bindings"][0]
    assert a["isWhole"] is True
    assert a["isNullified"] is True
    assert a["references"] == 1
    assert a["modifications"] == 1
    assert _find_scope(output, "FunctionDefinition:f")["parameters"] == [
        "a:PoKoSK",
        "a:nullification",
        "a:oldCommitmentPreimage",
        "a:oldCommitmentExistence",
        "a:newCommitment",
    ]


def test_stop_at_calls(tmp_path, capsys):
    source = _write(tmp_path, "in.json", _calling_tree(TreeBuilder()))
    code, out, _ = _run(capsys, [source, "--stop-at", "calls"])
    assert code == 0
    calls = json.loads(out)["calls"]
    assert calls == [
        {
            "callee": "g",
            "caller": "f",
            "parent_type": "FunctionDefinition",
            "old_state_names": ["y"],
            "new_state_names": [{"name": "x", "member_name": None}],
            "interacts_with_secret": True,
            "circuit_import": True,
        }
    ]


def test_full_run_prints_annotated_tree(tmp_path, capsys):
    source = _write(tmp_path, "in.json", _whole_tree(TreeBuilder()))
    code, out, _ = _run(capsys, [source])
    assert code == 0
    tree = json.loads(out)
    declaration = tree["nodes"][0]["nodes"][0]
    assert declaration["isWhole"] is True
    assert declaration["isPartitioned"] is False


def test_reconcile_circuits(tmp_path, capsys):
    source = _write(tmp_path, "in.json", _calling_tree(TreeBuilder()))
    callee = build_node(
        "FunctionDefinition",
        {
            "name": "g",
            "parameters": build_node(
                "ParameterList",
                {
                    "parameters": [
                        build_node("VariableDeclaration", {"name": "y"}),
                        build_node("Boilerplate", {"name": "a", "bpType": "PoKoSK"}),
                    ]
                },
            ),
        },
    )
    call = build_node("InternalFunctionCall", {"name": "g"})
    caller = build_node(
        "FunctionDefinition",
        {
            "name": "f",
            "body": build_node(
                "Block", {"statements": [build_node("ExpressionStatement", {"expression": call})]}
            ),
        },
    )
    folder = build_node(
        "Folder",
        {
            "files": [
                build_node("File", {"fileName": "g", "nodes": [callee]}),
                build_node("File", {"fileName": "f", "nodes": [caller]}),
            ]
        },
    )
    circuits = _write(tmp_path, "circuits.json", folder)
    target = tmp_path / "out.json"
    code, out, _ = _run(capsys, [source, "--circuits", circuits, "-o", str(target)])
    assert code == 0
    assert out == ""
    result = json.loads(target.read_text())
    expression = result["files"][1]["nodes"][0]["body"]["statements"][0]["expression"]
    assert expression["CircuitArguments"] == ["x", "a_oldCommitment_owner_secretKey"]


# --- failures ---


def test_check_error_exit_code(tmp_path, capsys):
    b = TreeBuilder()
    ast = single_function_tree(b, [], [b.while_stmt(b.literal("true"), [])])[0]
    source = _write(tmp_path, "in.json", ast)
    code, out, err = _run(capsys, [source])
    assert code == 1
    assert out == ""
    assert err.startswith("error: while loops are not supported at ast.nodes[0]")


def test_missing_input(tmp_path, capsys):
    code, _, err = _run(capsys, [str(tmp_path / "missing.json")])
    assert code == 1
    assert "error: cannot open" in err


def test_invalid_json(tmp_path, capsys):
    source = tmp_path / "in.json"
    source.write_text("{not json")
    code, _, err = _run(capsys, [str(source)])
    assert code == 1
    assert "error: invalid JSON" in err


def test_circuit_file_not_a_folder(tmp_path, capsys):
    source = _write(tmp_path, "in.json", _calling_tree(TreeBuilder()))
    circuits = _write(tmp_path, "circuits.json", [])
    code, _, err = _run(capsys, [source, "--circuits", circuits])
    assert code == 1
    assert "is not a Folder" in err
