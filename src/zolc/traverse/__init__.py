"""Path/Scope engine: navigable node handles, scopes, bindings and indicators."""

from .binding import Binding, MappingKey, VariableBinding
from .indicator import (
    ContractDefinitionIndicator,
    FunctionDefinitionIndicator,
    StateVariableIndicator,
)
from .node_path import Incrementation, NodePath, PathCache, clear_path_caches, tree_cache
from .node_types import Node, get_visitable_keys, is_magic_id
from .scope import Scope
from .traverse import (
    TraversalState,
    Visitor,
    traverse,
    traverse_nodes_fast,
    traverse_paths_fast,
)

__all__ = [
    "Binding",
    "ContractDefinitionIndicator",
    "FunctionDefinitionIndicator",
    "Incrementation",
    "MappingKey",
    "Node",
    "NodePath",
    "PathCache",
    "Scope",
    "StateVariableIndicator",
    "TraversalState",
    "VariableBinding",
    "Visitor",
    "clear_path_caches",
    "get_visitable_keys",
    "is_magic_id",
    "traverse",
    "traverse_nodes_fast",
    "traverse_paths_fast",
    "tree_cache",
]
