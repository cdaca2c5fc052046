"""Resolve each secret state to whole or partitioned and finalise indicators."""

from __future__ import annotations

import logging

from ...traverse import NodePath, TraversalState, Visitor
from ...traverse.indicator import ContractDefinitionIndicator, FunctionDefinitionIndicator

logger = logging.getLogger(__name__)


class WholeVisitor(Visitor):
    def exit_ContractDefinition(self, path: NodePath, state: TraversalState) -> None:
        scope = path.scope
        for binding in scope.secret_state_bindings():
            if not binding.is_referenced:
                logger.info(
                    "secret state '%s' is never referenced; compiling it as whole", binding.name
                )
            binding.resolve_whole_partitioned()
            logger.debug(
                "state '%s' is %s (%s)",
                binding.name,
                "whole" if binding.is_whole else "partitioned",
                ", ".join(binding.whole_reasons if binding.is_whole else binding.partitioned_reasons),
            )
        contract_indicator = scope.indicators
        assert isinstance(contract_indicator, ContractDefinitionIndicator)
        for node in path.node.get("nodes") or []:
            if not isinstance(node, dict) or node.get("nodeType") != "FunctionDefinition":
                continue
            function_indicator = path.get_path(node).scope.indicators
            assert isinstance(function_indicator, FunctionDefinitionIndicator)
            function_indicator.finalise()
            contract_indicator.update(function_indicator)
