"""Command-line entry point."""

from __future__ import annotations

import dataclasses
import json
import logging
import sys

from .circuit.boilerplate import collect_parameters
from .errors import ZolcError
from .transformers.checks import build_paths, run_checks
from .transformers.internal_calls import collect_internal_calls
from .transformers.reconcile import ReconcileOptions, reconcile_internal_calls
from .traverse import NodePath, Scope, TraversalState, VariableBinding
from .traverse.indicator import FunctionDefinitionIndicator
from .traverse.node_types import Node

PHASES: list[str] = ["paths", "checks", "calls"]

USAGE: str = """\
zolc [OPTIONS] [INPUT] [-o OUTPUT]

Reads an annotated JSON syntax tree from INPUT (or stdin), checks it and
reconciles internal calls between its circuits.

Options:
  --stop-at PHASE     Stop after phase: paths, checks, calls
  --circuits FILE     JSON circuit Folder to reconcile internal calls in
  --encrypt           Circuit outputs are encrypted (no owner public keys)
  -o, --output FILE   Write output to FILE instead of stdout
  -v, --verbose       Log progress (repeat for debug output)
  --help              Show this help message
"""


@dataclasses.dataclass
class Arguments:
    stop_at: str | None = None
    circuits_file: str | None = None
    encrypted: bool = False
    input_file: str | None = None
    output_file: str | None = None
    verbosity: int = 0


class UsageError(Exception):
    """Bad command line."""


def parse_args(argv: list[str]) -> Arguments:
    """Parse command-line arguments."""
    result = Arguments()
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in ("--stop-at", "--circuits", "-o", "--output"):
            if i + 1 >= len(argv):
                raise UsageError(arg + " requires an argument")
            value = argv[i + 1]
            if arg == "--stop-at":
                result.stop_at = value
            elif arg == "--circuits":
                result.circuits_file = value
            else:
                result.output_file = value
            i += 2
        elif arg == "--encrypt":
            result.encrypted = True
            i += 1
        elif arg == "-v" or arg == "--verbose":
            result.verbosity += 1
            i += 1
        elif arg == "-vv":
            result.verbosity += 2
            i += 1
        elif arg.startswith("-"):
            raise UsageError("unknown flag '" + arg + "'")
        else:
            if result.input_file is not None:
                raise UsageError("unexpected argument '" + arg + "'")
            result.input_file = arg
            i += 1
    if result.stop_at is not None and result.stop_at not in PHASES:
        raise UsageError("unknown phase '" + result.stop_at + "'")
    return result


def read_json(input_file: str | None) -> object:
    """Load JSON from a file, or stdin when ``input_file`` is None."""
    if input_file is None:
        return json.load(sys.stdin)
    with open(input_file, encoding="utf-8") as f:
        return json.load(f)


def write_output(output: str, output_file: str | None) -> None:
    if output_file is None:
        print(output)
        return
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(output + "\n")


def to_json(obj: object) -> str:
    return json.dumps(obj, indent=2)


# --- Binding table serialization ---


def _scope_to_dict(scope: Scope) -> dict[str, object]:
    bindings: list[object] = []
    for binding in scope.bindings.values():
        entry: dict[str, object] = {
            "id": binding.id,
            "name": binding.name,
            "kind": binding.kind,
            "references": binding.reference_count,
            "modifications": binding.modification_count,
        }
        if isinstance(binding, VariableBinding) and binding.state_variable:
            entry["isSecret"] = binding.is_secret
            if binding.is_whole is not None:
                entry["isWhole"] = binding.is_whole
                entry["isPartitioned"] = binding.is_partitioned
                entry["isNullified"] = binding.is_nullified
        bindings.append(entry)
    result: dict[str, object] = {"scope": scope.scope_type + ":" + scope.scope_name, "bindings": bindings}
    if isinstance(scope.indicators, FunctionDefinitionIndicator):
        parameters: list[object] = []
        for indicator in scope.indicators.secret_indicators():
            for bp in collect_parameters(indicator):
                parameters.append(str(bp["name"]) + ":" + str(bp["bpType"]))
        result["parameters"] = parameters
    return result


def scopes_to_dict(root: NodePath) -> dict[str, object]:
    """Every scope in the tree with its bindings, in source order."""
    scopes: list[object] = []
    seen: set[int] = set()

    def enter(path: NodePath, state: TraversalState) -> None:
        if path.is_scopable() and id(path.scope) not in seen:
            seen.add(id(path.scope))
            scopes.append(_scope_to_dict(path.scope))

    root.traverse_paths_fast(enter)
    return {"scopes": scopes}


def run_pipeline(ast: Node, args: Arguments) -> str:
    """Run phases up to ``args.stop_at`` and render the result as JSON."""
    if args.stop_at == "paths":
        return to_json(scopes_to_dict(build_paths(ast)))
    root = run_checks(ast)
    if args.stop_at == "checks":
        return to_json(scopes_to_dict(root))
    calls = collect_internal_calls(root)
    if args.stop_at == "calls":
        return to_json({"calls": [dataclasses.asdict(c) for c in calls]})
    if args.circuits_file is None:
        return to_json(ast)
    folder = read_json(args.circuits_file)
    if not isinstance(folder, dict):
        raise ZolcError("circuit file '" + args.circuits_file + "' is not a Folder")
    options = ReconcileOptions(encrypted=args.encrypted)
    reconcile_internal_calls(folder, calls, options)
    return to_json(folder)


def _log_level(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def main(argv: list[str] | None = None) -> int:
    """Entry point. Returns the process exit code."""
    if argv is None:
        argv = sys.argv[1:]
    if "--help" in argv or "-h" in argv:
        print(USAGE, end="")
        return 0
    try:
        args = parse_args(argv)
    except UsageError as e:
        print("error: " + str(e), file=sys.stderr)
        return 2
    logging.basicConfig(
        level=_log_level(args.verbosity),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        ast = read_json(args.input_file)
    except OSError:
        print("error: cannot open '" + str(args.input_file) + "'", file=sys.stderr)
        return 1
    except ValueError as e:
        print("error: invalid JSON: " + str(e), file=sys.stderr)
        return 1
    if not isinstance(ast, dict):
        print("error: input is not a syntax tree", file=sys.stderr)
        return 1
    try:
        output = run_pipeline(ast, args)
    except ZolcError as e:
        print("error: " + str(e), file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print("error: " + str(e), file=sys.stderr)
        return 1
    write_output(output, args.output_file)
    return 0


if __name__ == "__main__":
    sys.exit(main())
