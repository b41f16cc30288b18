from flowaudit.models.enums import (
    AnalysisMethod,
    NodeCategory,
    NodeClassification,
    RuleModuleType,
    SCCKind,
    Severity,
)
from flowaudit.models.findings import (
    CheckResult,
    Finding,
    NodeCategories,
    RelatedNode,
    create_finding,
)
from flowaudit.models.workflow import (
    Connection,
    ConnectionTarget,
    NodeOutputs,
    Workflow,
    WorkflowNode,
)

__all__ = [
    "AnalysisMethod",
    "CheckResult",
    "Connection",
    "ConnectionTarget",
    "Finding",
    "NodeCategories",
    "NodeCategory",
    "NodeClassification",
    "NodeOutputs",
    "RelatedNode",
    "RuleModuleType",
    "SCCKind",
    "Severity",
    "Workflow",
    "WorkflowNode",
    "create_finding",
]
