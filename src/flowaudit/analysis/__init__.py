"""Analysis orchestration: per-node dispatch, scenario checks, aggregation."""

from flowaudit.analysis.analyzer import (
    AnalysisResult,
    WorkflowAnalyzer,
    aggregate_node_categories,
    analyze_workflow,
)
from flowaudit.analysis.context import CheckerContext, create_checker_context

__all__ = [
    "AnalysisResult",
    "CheckerContext",
    "WorkflowAnalyzer",
    "aggregate_node_categories",
    "analyze_workflow",
    "create_checker_context",
]
