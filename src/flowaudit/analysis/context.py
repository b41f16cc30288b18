"""Checker context shared by the analyzer and every rule module."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from flowaudit.graph.workflow_graph import WorkflowGraph
from flowaudit.models.workflow import Workflow, WorkflowNode


@dataclass(frozen=True)
class CheckerContext:
    """Read-only view of one workflow handed to rule modules.

    ``node`` is only set for node-scoped applicability checks.
    """

    workflow: Workflow
    graph: WorkflowGraph
    nodes: Mapping[str, WorkflowNode]
    node: WorkflowNode | None = None

    def for_node(self, node: WorkflowNode) -> CheckerContext:
        return dataclasses.replace(self, node=node)


def create_checker_context(
    workflow: Workflow,
    logger: logging.Logger | None = None,
) -> CheckerContext:
    """Build the graph for *workflow* and wrap it in a context.

    Raises:
        StructuralError: A connection references an unknown node.
    """
    graph = WorkflowGraph.from_workflow(workflow, logger=logger)
    nodes = MappingProxyType({node.id: node for node in graph.nodes})
    return CheckerContext(workflow=workflow, graph=graph, nodes=nodes)
