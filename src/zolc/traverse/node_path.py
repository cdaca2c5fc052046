"""NodePath: a navigable handle on one tree node.

A node cannot carry a ``parent`` pointer without creating a reference cycle
(the parent already contains the node), so the parent link lives on a separate
wrapper instead. Paths are cached per node: building a Path twice for the same
node returns the same instance.

Container naming:

    parent[key] is container, always.
    If container is a list, container[index] is node.
    Otherwise container is node.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from ..errors import StructuralIntegrityError
from .binding import Binding
from .node_types import (
    HOISTING_TYPES,
    SCOPABLE_TYPES,
    STATEMENT_TYPES,
    Node,
    get_referenced_declaration_id,
    is_magic_id,
    is_msg_node,
    is_msg_sender_node,
)
from .scope import Scope
from .traverse import (
    TraversalState,
    Visitor,
    child_paths,
    traverse,
    traverse_nodes_fast,
    traverse_paths_fast,
)

logger = logging.getLogger(__name__)

# Contract names recognised as standard token interfaces.
TOKEN_CONTRACT_NAMES: frozenset[str] = frozenset({"ERC20", "ERC721", "IERC20", "IERC721"})


@dataclass
class Incrementation:
    """Whether an expression only adds to (or subtracts from) its target."""

    is_incremented: bool = False
    is_decremented: bool = False


@dataclass
class _ReferenceState(TraversalState):
    found: dict[int, list[NodePath]] | None = None


# ============================================================
# PATH CACHE
# ============================================================


class PathCache:
    """Node -> Path table; one per tree."""

    def __init__(self) -> None:
        self._paths: dict[int, NodePath] = {}

    def get(self, node: Node) -> NodePath | None:
        return self._paths.get(id(node))

    def has(self, node: Node) -> bool:
        return id(node) in self._paths

    def set(self, node: Node, path: NodePath) -> None:
        self._paths[id(node)] = path

    def __len__(self) -> int:
        return len(self._paths)


# Root node id -> that tree's cache. A cache holds the Path of its root, and
# so the root node itself, which keeps the id from being reused.
_tree_caches: dict[int, PathCache] = {}


def tree_cache(root: Node) -> PathCache:
    """The process-wide cache of the tree rooted at ``root``."""
    cache = _tree_caches.get(id(root))
    if cache is None:
        cache = PathCache()
        _tree_caches[id(root)] = cache
    return cache


def clear_path_caches() -> None:
    """Forget every tree's Paths."""
    _tree_caches.clear()


# ============================================================
# NODE PATH
# ============================================================


class NodePath:
    """A node plus its parent, container, key/index and enclosing Scope."""

    def __init__(
        self,
        node: Node,
        parent: Node,
        key: str,
        container: Node | list[Node],
        index: int | None,
        parent_path: NodePath | None,
        cache: PathCache,
    ):
        NodePath.validate_constructor_args(node, parent, key, container, index)
        self.node: Node = node
        self.parent: Node = parent
        self.key: str = key
        self.container: Node | list[Node] = container
        self.parent_path: NodePath | None = parent_path
        self.in_list: bool = isinstance(container, list)
        self.index: int | None = index if self.in_list else None
        self.container_name: str = key
        self.node_type: str = str(node["nodeType"])
        self.cache: PathCache = cache
        self.scope: Scope
        cache.set(node, self)
        self.set_scope()

    @classmethod
    def create(
        cls,
        node: Node,
        parent: Node,
        key: str,
        container: Node | list[Node],
        index: int | None = None,
        parent_path: NodePath | None = None,
        cache: PathCache | None = None,
    ) -> NodePath:
        """Return the cached Path for ``node``, building it on first request.

        Without a ``parent_path`` or ``cache``, ``node`` is taken as the root
        of its tree and the tree's process-wide cache is used.
        """
        if cache is None:
            cache = parent_path.cache if parent_path is not None else tree_cache(node)
        cached = cache.get(node)
        if cached is not None:
            return cached
        return cls(node, parent, key, container, index, parent_path, cache)

    @classmethod
    def root(cls, ast: Node, cache: PathCache | None = None) -> NodePath:
        """Path for the top of a tree, under a dummy ``{"ast": ast}`` parent.

        Repeated calls for the same ``ast`` return the same Path.
        """
        return cls.create(node=ast, parent={"ast": ast}, key="ast", container=ast, cache=cache)

    @staticmethod
    def validate_constructor_args(
        node: Node,
        parent: Node,
        key: str,
        container: Node | list[Node],
        index: int | None,
    ) -> None:
        if not isinstance(node, dict) or "nodeType" not in node:
            raise StructuralIntegrityError("can't create a path without a node")
        if parent is None:
            raise StructuralIntegrityError("can't create a path without a parent")
        if container is None:
            raise StructuralIntegrityError("can't create a path without a container")
        if key is None or key == "":
            raise StructuralIntegrityError("can't create a path without a key")
        if parent.get(key) is not container:
            raise StructuralIntegrityError("container is not parent[" + repr(key) + "]")
        if isinstance(container, list):
            if index is None:
                raise StructuralIntegrityError("index must exist for a list container")
            if index < 0 or index >= len(container) or container[index] is not node:
                raise StructuralIntegrityError(
                    "parent[" + repr(key) + "][" + str(index) + "] is not node"
                )
        else:
            if index is not None:
                logger.warning("index shouldn't exist for a non-list container")
            if node is not container:
                raise StructuralIntegrityError("container is not node for a non-list container")

    def __repr__(self) -> str:
        return "NodePath(" + self.node_type + " at " + self.get_location() + ")"

    # ============================================================
    # TRAVERSAL
    # ============================================================

    def traverse(self, visitor: Visitor, state: TraversalState | None = None) -> None:
        traverse(self, visitor, state if state is not None else TraversalState())

    def traverse_paths_fast(
        self,
        enter: Callable[[NodePath, TraversalState], None],
        state: TraversalState | None = None,
    ) -> None:
        traverse_paths_fast(self, enter, state if state is not None else TraversalState())

    def traverse_nodes_fast(
        self,
        enter: Callable[[Node, TraversalState], None],
        state: TraversalState | None = None,
    ) -> None:
        traverse_nodes_fast(self.node, enter, state if state is not None else TraversalState())

    def get_path(self, node: Node) -> NodePath:
        """The cached Path of any node in this tree."""
        path = self.cache.get(node)
        if path is None:
            raise StructuralIntegrityError("node not found in path cache")
        return path

    def get_location(self) -> str:
        """Human-readable location, e.g. ``ast.nodes[2].body.statements[0]``."""
        parts: list[str] = []
        path: NodePath | None = self
        while path is not None:
            if path.in_list:
                parts.append(path.key + "[" + str(path.index) + "]")
            else:
                parts.append(path.key)
            path = path.parent_path
        parts.reverse()
        return ".".join(parts)

    # ============================================================
    # ANCESTRY
    # ============================================================

    def find_ancestor(self, callback: Callable[[NodePath], bool]) -> NodePath | None:
        """First Path from this one upwards for which ``callback`` is truthy."""
        path: NodePath | None = self
        while path is not None:
            if callback(path):
                return path
            path = path.parent_path
        return None

    def find_ancestor_from_parent(
        self, callback: Callable[[NodePath], bool]
    ) -> NodePath | None:
        if self.parent_path is None:
            return None
        return self.parent_path.find_ancestor(callback)

    def query_ancestors(self, callback: Callable[[NodePath], object]) -> object:
        """First truthy ``callback`` result from this Path upwards, else None."""
        path: NodePath | None = self
        while path is not None:
            result = callback(path)
            if result:
                return result
            path = path.parent_path
        return None

    def get_ancestry(self) -> list[NodePath]:
        """This Path and all its ancestors, nearest first."""
        paths: list[NodePath] = []
        path: NodePath | None = self
        while path is not None:
            paths.append(path)
            path = path.parent_path
        return paths

    def is_ancestor(self, maybe_descendant: NodePath) -> bool:
        return maybe_descendant.is_descendant(self)

    def is_descendant(self, maybe_ancestor: NodePath) -> bool:
        return self.find_ancestor_from_parent(lambda p: p is maybe_ancestor) is not None

    def get_ancestor_of_type(self, node_type: str) -> NodePath | None:
        return self.find_ancestor(lambda p: p.node_type == node_type)

    def get_ancestor_contained_within(self, container_name: str) -> NodePath | None:
        return self.find_ancestor(lambda p: p.container_name == container_name)

    def is_in_type(self, *node_types: str) -> bool:
        return self.find_ancestor(lambda p: p.node_type in node_types) is not None

    # ============================================================
    # SIBLINGS
    # ============================================================

    def get_sibling_node(self, index: int) -> Node | None:
        if not isinstance(self.container, list):
            return None
        if index < 0 or index >= len(self.container):
            return None
        return self.container[index]

    def get_sibling_nodes(self) -> list[Node] | None:
        """All nodes in this Path's container, itself included."""
        if not isinstance(self.container, list):
            return None
        return self.container

    def get_first_sibling_node(self) -> Node | None:
        return self.get_sibling_node(0)

    def get_last_sibling_node(self) -> Node | None:
        if not isinstance(self.container, list):
            return None
        return self.get_sibling_node(len(self.container) - 1)

    def get_prev_sibling_node(self) -> Node | None:
        if self.index is None:
            return None
        return self.get_sibling_node(self.index - 1)

    def get_next_sibling_node(self) -> Node | None:
        if self.index is None:
            return None
        return self.get_sibling_node(self.index + 1)

    def get_all_next_sibling_nodes(self) -> list[Node] | None:
        if not isinstance(self.container, list) or self.index is None:
            return None
        return self.container[self.index + 1 :]

    def get_all_prev_sibling_nodes(self) -> list[Node] | None:
        """Previous siblings, nearest first."""
        if not isinstance(self.container, list) or self.index is None:
            return None
        return list(reversed(self.container[: self.index]))

    # ============================================================
    # ENCLOSING DEFINITIONS
    # ============================================================

    def get_source_unit(self) -> NodePath | None:
        return self.get_ancestor_of_type("SourceUnit")

    def get_contract_definition(self) -> NodePath | None:
        return self.get_ancestor_of_type("ContractDefinition")

    def get_function_names(self) -> list[str] | None:
        """Names of the functions in this ContractDefinition."""
        if self.node_type != "ContractDefinition":
            return None
        names: list[str] = []

        def enter(node: Node, state: TraversalState) -> None:
            if node["nodeType"] != "FunctionDefinition":
                return
            names.append(str(node.get("name", "")))
            state.skip_sub_nodes = True

        self.traverse_nodes_fast(enter)
        return names

    def _function_list(self, list_key: str) -> list[Node] | None:
        function_path = self.get_ancestor_of_type("FunctionDefinition")
        if function_path is None:
            return None
        param_list = function_path.node.get(list_key)
        if not isinstance(param_list, dict):
            return None
        params = param_list.get("parameters")
        return params if isinstance(params, list) else None

    def get_function_parameters(self) -> list[Node] | None:
        return self._function_list("parameters")

    def get_function_return_parameters(self) -> list[Node] | None:
        return self._function_list("returnParameters")

    def get_function_body_statements(self) -> list[Node] | None:
        function_path = self.get_ancestor_of_type("FunctionDefinition")
        if function_path is None:
            return None
        body = function_path.node.get("body")
        if not isinstance(body, dict):
            return None
        statements = body.get("statements")
        return statements if isinstance(statements, list) else None

    # ============================================================
    # STATEMENTS AND DECLARATIONS
    # ============================================================

    def is_statement(self) -> bool:
        return self.node_type in STATEMENT_TYPES

    def is_function_body_statement(self) -> bool:
        return self.container_name == "statements"

    def is_in_function_body_statement(self) -> bool:
        return self.find_ancestor(lambda p: p.is_function_body_statement()) is not None

    def is_function_parameter_declaration(self) -> bool:
        params = self.get_function_parameters()
        if params is None:
            return False
        return any(p is self.node for p in params)

    def is_function_parameter(self, node: Node | None = None) -> bool:
        binding = self.get_referenced_binding(node)
        return binding is not None and binding.path.is_function_parameter_declaration()

    def is_function_return_parameter_declaration(self) -> bool:
        parent_path = self.parent_path
        return (
            parent_path is not None
            and parent_path.node_type == "ParameterList"
            and parent_path.container_name == "returnParameters"
        )

    def is_function_return_parameter(self, node: Node | None = None) -> bool:
        binding = self.get_referenced_binding(node)
        return binding is not None and binding.path.is_function_return_parameter_declaration()

    # NOTE: function parameters are not local stack variables.
    def is_local_stack_variable_declaration(self) -> bool:
        return self.is_in_function_body_statement() and self.node_type in (
            "VariableDeclaration",
            "VariableDeclarationStatement",
        )

    def is_local_stack_variable(self, node: Node | None = None) -> bool:
        binding = self.get_referenced_binding(node)
        return binding is not None and binding.path.is_local_stack_variable_declaration()

    def is_modification(self) -> bool:
        """Is this the root l-value of an assignment, ``++``/``--`` or ``delete``?"""
        path: NodePath = self
        while path.parent_path is not None:
            parent_type = path.parent_path.node_type
            if parent_type == "IndexAccess" and path.container_name == "baseExpression":
                path = path.parent_path
            elif parent_type == "MemberAccess" and path.container_name == "expression":
                path = path.parent_path
            elif parent_type == "TupleExpression":
                path = path.parent_path
            else:
                break
        if path.container_name == "leftHandSide":
            return True
        parent_path = path.parent_path
        if parent_path is not None and parent_path.node_type == "UnaryOperation":
            return parent_path.node.get("operator") in ("++", "--", "delete")
        return False

    # ============================================================
    # EXTERNAL CONTRACTS
    # ============================================================

    def is_external_contract_instance_declaration(self, node: Node | None = None) -> bool:
        if node is None:
            node = self.node
        if node.get("nodeType") == "VariableDeclarationStatement":
            declarations = node.get("declarations")
            if not isinstance(declarations, list) or len(declarations) == 0:
                return False
            node = declarations[0]
        if node.get("nodeType") != "VariableDeclaration":
            return False
        type_descriptions = node.get("typeDescriptions")
        type_string = ""
        if isinstance(type_descriptions, dict):
            type_string = str(type_descriptions.get("typeString", ""))
        if not type_string.startswith("contract "):
            return False
        type_name = node.get("typeName")
        if not isinstance(type_name, dict):
            return False
        contract_id = type_name.get("referencedDeclaration")
        contract_path = self.get_contract_definition()
        if contract_path is not None and contract_id == contract_path.node.get("id"):
            return False
        return contract_id is not None

    def is_external_contract_instance(self, node: Node | None = None) -> bool:
        declaration = self.get_referenced_node(node)
        if declaration is None:
            return False
        return self.is_external_contract_instance_declaration(declaration)

    def is_external_function_call(self, node: Node | None = None) -> bool:
        if node is None:
            node = self.node
        if node.get("nodeType") != "FunctionCall":
            return False
        function_node = node.get("expression")
        if not isinstance(function_node, dict) or function_node.get("nodeType") != "MemberAccess":
            return False
        return self.is_external_contract_instance(function_node)

    def is_token_contract_instance(self, node: Node | None = None) -> bool:
        """Is ``node`` an instance of a standard token contract (ERC20, ...)?"""
        declaration = self.get_referenced_node(node)
        if declaration is None or not self.is_external_contract_instance_declaration(declaration):
            return False
        type_string = str(declaration.get("typeDescriptions", {}).get("typeString", ""))
        return type_string[len("contract ") :] in TOKEN_CONTRACT_NAMES

    def get_referenced_exported_symbol_name(self, node: Node | None = None) -> str | None:
        if node is None:
            node = self.node
        ref_id = node.get("referencedDeclaration")
        if ref_id is None:
            return None
        source_unit = self.get_source_unit()
        if source_unit is None:
            return None
        exported = source_unit.node.get("exportedSymbols")
        if not isinstance(exported, dict):
            return None
        for name, ids in exported.items():
            if isinstance(ids, list) and ref_id in ids:
                return str(name)
        return None

    def is_exported_symbol(self, node: Node | None = None) -> bool:
        return self.get_referenced_exported_symbol_name(node) is not None

    # ============================================================
    # INCREMENTATION
    # ============================================================

    def is_incrementation(self, expression: Node | None = None) -> Incrementation:
        """Decide whether an Assignment or UnaryOperation only adds to (or
        subtracts from) its own target.

        ``a += b``, ``a = a + b`` and ``a++`` are incrementations; ``a -= b``,
        ``a = a - b`` and ``a--`` are incrementations that also decrement.
        """
        if expression is None:
            expression = self.node
        node_type = expression.get("nodeType")
        if node_type == "Assignment":
            lhs = expression.get("leftHandSide")
        elif node_type == "UnaryOperation":
            lhs = expression.get("subExpression")
        else:
            return Incrementation()
        if not isinstance(lhs, dict):
            return Incrementation()
        return self.is_incrementation_of(lhs, expression)

    def is_incrementation_of(self, lhs: Node, expression: Node | None = None) -> Incrementation:
        """Decide whether ``expression`` is an incrementation of ``lhs``."""
        if expression is None:
            expression = self.node
        node_type = expression.get("nodeType")
        operator = expression.get("operator")
        if node_type == "UnaryOperation":
            sub = expression.get("subExpression")
            if not isinstance(sub, dict) or not _same_lvalue(sub, lhs):
                return Incrementation()
            if operator == "++":
                return Incrementation(True, False)
            if operator == "--":
                return Incrementation(True, True)
            return Incrementation()
        if node_type == "Assignment":
            if operator == "+=":
                return Incrementation(True, False)
            if operator == "-=":
                return Incrementation(True, True)
            if operator != "=":
                return Incrementation()
            rhs = expression.get("rightHandSide")
            if not isinstance(rhs, dict):
                return Incrementation()
            return _additive_incrementation(lhs, rhs)
        if node_type == "BinaryOperation":
            return _additive_incrementation(lhs, expression)
        return Incrementation()

    # ============================================================
    # BUILT-INS AND MAPPINGS
    # ============================================================

    def is_msg_sender(self, node: Node | None = None) -> bool:
        return is_msg_sender_node(node if node is not None else self.node)

    def is_msg(self, node: Node | None = None) -> bool:
        return is_msg_node(node if node is not None else self.node)

    def is_this(self, node: Node | None = None) -> bool:
        if node is None:
            node = self.node
        return (
            node.get("nodeType") == "Identifier"
            and node.get("name") == "this"
            and is_magic_id(node.get("referencedDeclaration"))
        )

    def is_mapping_declaration(self, node: Node | None = None) -> bool:
        if node is None:
            node = self.node
        type_name = node.get("typeName")
        return (
            node.get("nodeType") == "VariableDeclaration"
            and isinstance(type_name, dict)
            and type_name.get("nodeType") == "Mapping"
        )

    def is_mapping_identifier(self, node: Node | None = None) -> bool:
        """Is ``node`` an IndexAccess into a mapping (rather than an array)?"""
        if node is None:
            node = self.node
        if node.get("nodeType") != "IndexAccess":
            return False
        declaration = self.get_referenced_node(node)
        return declaration is not None and self.is_mapping_declaration(declaration)

    def is_mapping(self, node: Node | None = None) -> bool:
        return self.is_mapping_declaration(node) or self.is_mapping_identifier(node)

    def is_require_statement(self, node: Node | None = None) -> bool:
        """True for the ExpressionStatement, FunctionCall or Identifier of a
        ``require(...)``."""
        if node is None:
            node = self.node
        node_type = node.get("nodeType")
        if node_type == "ExpressionStatement":
            expression = node.get("expression")
            return isinstance(expression, dict) and self.is_require_statement(expression)
        if node_type == "FunctionCall":
            expression = node.get("expression")
            return isinstance(expression, dict) and expression.get("name") == "require"
        if node_type == "Identifier":
            return node.get("name") == "require" and is_magic_id(
                node.get("referencedDeclaration")
            )
        return False

    # ============================================================
    # REFERENCES
    # ============================================================

    def get_referenced_declaration_id(self, node: Node | None = None) -> int | None:
        return get_referenced_declaration_id(node if node is not None else self.node)

    def get_referenced_binding(self, node: Node | None = None) -> Binding | None:
        return self.scope.get_referenced_binding(node if node is not None else self.node)

    def get_referenced_node(self, node: Node | None = None) -> Node | None:
        return self.scope.get_referenced_node(node if node is not None else self.node)

    def _collect_same(
        self,
        beneath_node_type: str,
        match: Callable[[NodePath], bool],
    ) -> dict[int, list[NodePath]]:
        ids: dict[int, list[NodePath]] = {}

        def collect(path: NodePath, state: TraversalState) -> None:
            ref_id = path.node.get("referencedDeclaration")
            if isinstance(ref_id, int) and match(path):
                ids[ref_id] = []

        self.traverse_paths_fast(collect)
        if len(ids) == 0:
            return {}
        root_path = self.get_ancestor_of_type(beneath_node_type)
        if root_path is None:
            return {}

        def gather(path: NodePath, state: TraversalState) -> None:
            assert isinstance(state, _ReferenceState) and state.found is not None
            ref_id = path.node.get("referencedDeclaration")
            if isinstance(ref_id, int) and ref_id in state.found and match(path):
                state.found[ref_id].append(path)

        root_path.traverse_paths_fast(gather, _ReferenceState(found=ids))
        return ids

    def get_all_nodes_which_reference_the_same(
        self, beneath_node_type: str = "Block"
    ) -> dict[int, list[NodePath]]:
        """Every Path beneath the nearest ``beneath_node_type`` ancestor that
        references a declaration referenced at or below this Path."""
        return self._collect_same(beneath_node_type, lambda p: True)

    def get_all_nodes_which_modify_the_same(
        self, beneath_node_type: str = "Block"
    ) -> dict[int, list[NodePath]]:
        """As above, restricted to Paths that modify the declaration."""
        return self._collect_same(beneath_node_type, lambda p: p.is_modification())

    # ============================================================
    # SCOPE
    # ============================================================

    def is_scopable(self) -> bool:
        return self.node_type in SCOPABLE_TYPES

    def set_scope(self) -> None:
        """Attach this Path to its Scope, registering it with the nearest
        enclosing one first."""
        if self.parent_path is None:
            self.scope = Scope(self)
        else:
            nearest = self.parent_path.scope
            nearest.update(self)
            self.scope = Scope(self) if self.is_scopable() else nearest
        if self.node_type in HOISTING_TYPES:
            child_paths(self, "nodes")


# ============================================================
# EXPRESSION HELPERS
# ============================================================


def _same_lvalue(a: Node, b: Node) -> bool:
    """Do two expressions denote the same storage location?"""
    node_type = a.get("nodeType")
    if node_type != b.get("nodeType"):
        return False
    if node_type == "Identifier":
        ref_a = a.get("referencedDeclaration")
        return ref_a is not None and ref_a == b.get("referencedDeclaration")
    if node_type == "Literal":
        return a.get("value") == b.get("value")
    if node_type == "MemberAccess":
        if is_msg_sender_node(a) and is_msg_sender_node(b):
            return True
        expr_a = a.get("expression")
        expr_b = b.get("expression")
        return (
            a.get("memberName") == b.get("memberName")
            and isinstance(expr_a, dict)
            and isinstance(expr_b, dict)
            and _same_lvalue(expr_a, expr_b)
        )
    if node_type == "IndexAccess":
        base_a, base_b = a.get("baseExpression"), b.get("baseExpression")
        index_a, index_b = a.get("indexExpression"), b.get("indexExpression")
        return (
            isinstance(base_a, dict)
            and isinstance(base_b, dict)
            and isinstance(index_a, dict)
            and isinstance(index_b, dict)
            and _same_lvalue(base_a, base_b)
            and _same_lvalue(index_a, index_b)
        )
    return False


def _additive_terms(node: Node, sign: int, terms: list[tuple[Node, int]]) -> None:
    """Flatten a chain of ``+``/``-`` into signed terms."""
    if node.get("nodeType") == "BinaryOperation" and node.get("operator") in ("+", "-"):
        left = node.get("leftExpression")
        right = node.get("rightExpression")
        if isinstance(left, dict) and isinstance(right, dict):
            _additive_terms(left, sign, terms)
            _additive_terms(right, sign if node.get("operator") == "+" else -sign, terms)
            return
    terms.append((node, sign))


def _references_declaration(node: Node, decl_id: int | None) -> bool:
    found = TraversalState()

    def enter(sub: Node, state: TraversalState) -> None:
        if get_referenced_declaration_id(sub) == decl_id:
            state.stop_traversal = True

    traverse_nodes_fast(node, enter, found)
    return found.stop_traversal


def _additive_incrementation(lhs: Node, rhs: Node) -> Incrementation:
    if rhs.get("nodeType") != "BinaryOperation" or rhs.get("operator") not in ("+", "-"):
        return Incrementation()
    terms: list[tuple[Node, int]] = []
    _additive_terms(rhs, 1, terms)
    matches = [(term, sign) for term, sign in terms if _same_lvalue(term, lhs)]
    if len(matches) != 1 or matches[0][1] < 0:
        return Incrementation()
    decl_id = get_referenced_declaration_id(lhs)
    is_decremented = False
    for term, sign in terms:
        if term is matches[0][0]:
            continue
        if _references_declaration(term, decl_id):
            return Incrementation()
        if sign < 0:
            is_decremented = True
    return Incrementation(True, is_decremented)
