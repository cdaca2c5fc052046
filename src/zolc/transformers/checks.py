"""Check pipeline: validation and marking passes over the parsed tree.

Passes run in a fixed order, each relying on annotations left by the ones
before it. The first error raised aborts the whole pipeline.

    unsupported    reject unmodelled constructs; builds every Path
    external_call  reject secret arguments to external contracts
    decorator      validate known/unknown/reinitialisable decorators
    incremented    mark incrementations and general writes
    accessed       mark reads of secret state
    whole          resolve whole/partitioned, finalise indicators
"""

from __future__ import annotations

import logging

from ..traverse import NodePath, TraversalState, Visitor
from ..traverse.node_types import Node
from .visitors import (
    AccessedVisitor,
    DecoratorVisitor,
    ExternalCallVisitor,
    IncrementedVisitor,
    UnsupportedVisitor,
    WholeVisitor,
)

logger = logging.getLogger(__name__)

PASSES: list[tuple[type[Visitor], str]] = [
    (UnsupportedVisitor, "No unsupported constructs"),
    (ExternalCallVisitor, "No secret leakage into external calls"),
    (DecoratorVisitor, "No conflicting known/unknown decorators"),
    (IncrementedVisitor, "Incrementations marked"),
    (AccessedVisitor, "Accessed values marked"),
    (WholeVisitor, "Whole/partitioned states resolved"),
]


def build_paths(ast: Node) -> NodePath:
    """Build the Path, Scope and binding of every node without checking anything."""
    root = NodePath.root(ast)
    root.traverse(Visitor(), TraversalState())
    return root


def run_checks(ast: Node) -> NodePath:
    """Run every check pass over ``ast`` in order, annotating it in place."""
    logger.info("Performing checks on the AST...")
    root = NodePath.root(ast)
    for visitor_class, done in PASSES:
        root.traverse(visitor_class(), TraversalState())
        logger.info(done)
    logger.info("Checks complete.")
    return root
