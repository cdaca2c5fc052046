"""Closed node-type tables: visitable child keys and node categories.

Nodes are the JSON dicts produced by the parser (``nodeType`` plus
type-specific fields). Each node type lists the fields holding child nodes,
in the order they are walked.
"""

from __future__ import annotations

from ..errors import UnsupportedConstructError

# Type alias for tree nodes
Node = dict[str, object]

# Built-in identifiers (msg, this, require, ...) carry ids outside the range
# the parser hands out to source declarations.
MAGIC_ID_THRESHOLD = 4294967200


# ============================================================
# VISITABLE KEYS
# ============================================================

VISITABLE_KEYS: dict[str, tuple[str, ...]] = {
    # Source-level
    "SourceUnit": ("nodes",),
    "PragmaDirective": (),
    "ImportDirective": (),
    "ContractDefinition": ("baseContracts", "nodes"),
    "InheritanceSpecifier": ("baseName",),
    "UserDefinedTypeName": (),
    "IdentifierPath": (),
    "StructDefinition": ("members",),
    "EnumDefinition": ("members",),
    "EnumValue": (),
    "EventDefinition": ("parameters",),
    "ModifierDefinition": ("parameters", "body"),
    "ModifierInvocation": ("modifierName", "arguments"),
    "FunctionDefinition": ("parameters", "returnParameters", "body"),
    "ParameterList": ("parameters",),
    "VariableDeclaration": ("typeName",),
    # Types
    "ElementaryTypeName": (),
    "Mapping": ("keyType", "valueType"),
    "ArrayTypeName": ("baseType",),
    # Statements
    "Block": ("statements",),
    "UncheckedBlock": ("statements",),
    "VariableDeclarationStatement": ("declarations", "initialValue"),
    "ExpressionStatement": ("expression",),
    "IfStatement": ("condition", "trueBody", "falseBody"),
    "ForStatement": ("initializationExpression", "condition", "loopExpression", "body"),
    "WhileStatement": ("condition", "body"),
    "DoWhileStatement": ("condition", "body"),
    "Return": ("expression",),
    "EmitStatement": ("eventCall",),
    "Break": (),
    "Continue": (),
    "PlaceholderStatement": (),
    "InlineAssembly": (),
    "TryStatement": ("externalCall", "clauses"),
    "TryCatchClause": ("parameters", "block"),
    # Expressions
    "Assignment": ("leftHandSide", "rightHandSide"),
    "BinaryOperation": ("leftExpression", "rightExpression"),
    "UnaryOperation": ("subExpression",),
    "TupleExpression": ("components",),
    "Conditional": ("condition", "trueExpression", "falseExpression"),
    "Identifier": (),
    "Literal": (),
    "ElementaryTypeNameExpression": ("typeName",),
    "IndexAccess": ("indexExpression", "baseExpression"),
    "MemberAccess": ("expression",),
    "FunctionCall": ("expression", "arguments"),
    "FunctionCallOptions": ("expression", "options"),
    "NewExpression": ("typeName",),
}


def get_visitable_keys(node_type: str) -> tuple[str, ...]:
    """Child-holding fields for a node type, in walk order."""
    keys = VISITABLE_KEYS.get(node_type)
    if keys is None:
        raise UnsupportedConstructError("unknown node type '" + node_type + "'")
    return keys


# ============================================================
# CATEGORIES
# ============================================================

SCOPABLE_TYPES: frozenset[str] = frozenset(
    {"SourceUnit", "ContractDefinition", "FunctionDefinition"}
)

# Node types whose Scope hoists the declarations directly beneath them.
HOISTING_TYPES: frozenset[str] = frozenset({"SourceUnit", "ContractDefinition"})

DECLARATION_TYPES: frozenset[str] = frozenset(
    {
        "ContractDefinition",
        "FunctionDefinition",
        "VariableDeclaration",
        "StructDefinition",
        "EnumDefinition",
        "EventDefinition",
        "ModifierDefinition",
    }
)

REFERENCING_TYPES: frozenset[str] = frozenset(
    {"Identifier", "IndexAccess", "MemberAccess"}
)

STATEMENT_TYPES: frozenset[str] = frozenset(
    {
        "ExpressionStatement",
        "VariableDeclarationStatement",
        "ImportStatementList",
        "ImportStatement",
    }
)


def is_magic_id(ref_id: object) -> bool:
    """Check if a referencedDeclaration id denotes a language built-in."""
    return isinstance(ref_id, int) and (ref_id < 0 or ref_id > MAGIC_ID_THRESHOLD)


# ============================================================
# NODE HELPERS
# ============================================================


def get_referenced_declaration_id(node: Node) -> int | None:
    """Id of the declaration a referencing node refers to, if any."""
    node_type = node.get("nodeType")
    if node_type == "Identifier":
        ref_id = node.get("referencedDeclaration")
    elif node_type == "IndexAccess":
        base = node.get("baseExpression")
        return get_referenced_declaration_id(base) if isinstance(base, dict) else None
    elif node_type == "MemberAccess":
        expr = node.get("expression")
        return get_referenced_declaration_id(expr) if isinstance(expr, dict) else None
    else:
        return None
    if isinstance(ref_id, int):
        return ref_id
    return None


def is_msg_node(node: Node) -> bool:
    """Check if a node is the built-in ``msg`` identifier."""
    return (
        node.get("nodeType") == "Identifier"
        and node.get("name") == "msg"
        and is_magic_id(node.get("referencedDeclaration"))
    )


def is_msg_sender_node(node: Node) -> bool:
    """Check if a node is ``msg.sender``."""
    expr = node.get("expression")
    return (
        node.get("nodeType") == "MemberAccess"
        and node.get("memberName") == "sender"
        and isinstance(expr, dict)
        and is_msg_node(expr)
    )


def mapping_key_name(index_node: Node | None) -> str:
    """Readable name for a mapping key expression: ``x``, ``msg.sender``, ``0``."""
    if index_node is None:
        return ""
    node_type = index_node.get("nodeType")
    if is_msg_sender_node(index_node):
        return "msg.sender"
    if node_type == "Identifier":
        return str(index_node.get("name", ""))
    if node_type == "Literal":
        return str(index_node.get("value", ""))
    if node_type == "MemberAccess":
        expr = index_node.get("expression")
        base = mapping_key_name(expr) if isinstance(expr, dict) else ""
        return base + "." + str(index_node.get("memberName", ""))
    if node_type == "IndexAccess":
        base = index_node.get("baseExpression")
        index = index_node.get("indexExpression")
        base_name = mapping_key_name(base) if isinstance(base, dict) else ""
        index_name = mapping_key_name(index) if isinstance(index, dict) else ""
        return base_name + "[" + index_name + "]"
    return ""
