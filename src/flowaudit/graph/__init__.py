"""Workflow dependency-graph engine."""

from flowaudit.graph.workflow_graph import LoopInfo, SCCInfo, WorkflowGraph

__all__ = ["LoopInfo", "SCCInfo", "WorkflowGraph"]
