"""flowaudit — static security analysis for automation workflows."""

from flowaudit.analysis import AnalysisResult, WorkflowAnalyzer, analyze_workflow
from flowaudit.graph import WorkflowGraph
from flowaudit.models import Workflow
from flowaudit.rules import NodeClassifier, RuleRegistry

__version__ = "0.1.0"

__all__ = [
    "AnalysisResult",
    "NodeClassifier",
    "RuleRegistry",
    "Workflow",
    "WorkflowAnalyzer",
    "WorkflowGraph",
    "analyze_workflow",
]
