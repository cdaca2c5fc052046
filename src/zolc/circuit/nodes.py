"""Circuit-tree node builders.

Circuit trees are the abstract shapes handed to the circuit emitter: plain
dicts keyed by ``nodeType``, like the parser's tree. A Folder holds one File
per compiled function; each File holds the function's FunctionDefinition and
any StructDefinitions it needs.
"""

from __future__ import annotations

from ..traverse.node_types import Node

CIRCUIT_FILE_EXTENSION = ".zok"


def _identifier(name: str) -> Node:
    return {"nodeType": "Identifier", "name": name}


def build_node(node_type: str, fields: dict[str, object] | None = None) -> Node:
    """Build a circuit node of ``node_type`` from ``fields``.

    Missing child fields default to empty lists or freshly built children, so
    every node can be appended to without further checks.
    """
    f = fields if fields is not None else {}
    if node_type == "Folder":
        return {"nodeType": node_type, "files": f.get("files", [])}
    if node_type == "File":
        return {
            "nodeType": node_type,
            "fileName": f.get("fileName"),
            "fileId": f.get("fileId"),
            "fileExtension": CIRCUIT_FILE_EXTENSION,
            "nodes": f.get("nodes", []),
        }
    if node_type == "FunctionDefinition":
        return {
            "nodeType": node_type,
            "name": f.get("name"),
            "parameters": f.get("parameters", build_node("ParameterList")),
            "returnParameters": f.get("returnParameters", build_node("ParameterList")),
            "body": f.get("body", build_node("Block")),
        }
    if node_type == "ParameterList":
        return {"nodeType": node_type, "parameters": f.get("parameters", [])}
    if node_type == "Block":
        return {
            "nodeType": node_type,
            "preStatements": f.get("preStatements", []),
            "statements": f.get("statements", []),
            "postStatements": f.get("postStatements", []),
        }
    if node_type == "StructDefinition":
        return {"nodeType": node_type, "name": f.get("name"), "members": f.get("members", [])}
    if node_type == "VariableDeclaration":
        return {
            "nodeType": node_type,
            "name": f.get("name"),
            "isPrivate": bool(f.get("isSecret", False)),
            "interactsWithSecret": bool(f.get("interactsWithSecret", False)),
            "typeName": {"nodeType": "ElementaryTypeName", "name": f.get("type", "field")},
        }
    if node_type == "ExpressionStatement":
        return {
            "nodeType": node_type,
            "expression": f.get("expression", {}),
            "isVarDec": bool(f.get("isVarDec", False)),
        }
    if node_type == "Assignment":
        return {
            "nodeType": node_type,
            "operator": f.get("operator", "="),
            "leftHandSide": f.get("leftHandSide", {}),
            "rightHandSide": f.get("rightHandSide", {}),
        }
    if node_type == "BinaryOperation":
        return {
            "nodeType": node_type,
            "leftExpression": f.get("leftExpression", {}),
            "operator": f.get("operator"),
            "rightExpression": f.get("rightExpression", {}),
        }
    if node_type == "Identifier":
        return _identifier(str(f.get("name", "")))
    if node_type == "Literal":
        return {"nodeType": node_type, "value": f.get("value")}
    if node_type == "MemberAccess":
        expression = f.get("expression")
        if isinstance(expression, str):
            expression = _identifier(expression)
        return {
            "nodeType": node_type,
            "expression": expression if expression is not None else {},
            "memberName": f.get("memberName"),
        }
    if node_type == "InternalFunctionCall":
        return {
            "nodeType": node_type,
            "name": f.get("name"),
            "internalFunctionInteractsWithSecret": bool(
                f.get("internalFunctionInteractsWithSecret", False)
            ),
            "oldStateName": f.get("oldStateName", []),
            "newStateName": f.get("newStateName", []),
            "CircuitArguments": f.get("CircuitArguments", []),
            "CircuitReturn": f.get("CircuitReturn", []),
        }
    if node_type == "InternalFunctionBoilerplate":
        return {
            "nodeType": "Boilerplate",
            "bpSection": "importStatements",
            "bpType": "internalFunctionCall",
            "name": f.get("name"),
            "internalFunctionInteractsWithSecret": bool(
                f.get("internalFunctionInteractsWithSecret", False)
            ),
            "circuitImport": bool(f.get("circuitImport", False)),
        }
    if node_type == "Boilerplate":
        return {
            "nodeType": node_type,
            "bpSection": f.get("bpSection", "parameters"),
            "bpType": f.get("bpType"),
            "name": f.get("name"),
            "isWhole": bool(f.get("isWhole", False)),
            "isPartitioned": bool(f.get("isPartitioned", False)),
            "isAccessed": bool(f.get("isAccessed", False)),
            "isNullified": bool(f.get("isNullified", False)),
            "initialisationRequired": bool(f.get("initialisationRequired", False)),
            "mappingKeyName": f.get("mappingKeyName"),
        }
    if node_type == "BoilerplateStatement":
        return {
            "nodeType": node_type,
            "bpType": f.get("bpType"),
            "name": f.get("name"),
            "isWhole": bool(f.get("isWhole", False)),
            "isPartitioned": bool(f.get("isPartitioned", False)),
            "newCommitmentValue": f.get("newCommitmentValue"),
        }
    raise ValueError("unknown circuit node type: " + node_type)
