"""Pydantic models for findings and per-module check results."""

from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field

from flowaudit.models.enums import AnalysisMethod, NodeCategory, Severity
from flowaudit.models.workflow import WorkflowNode


class RelatedNode(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    name: str
    type: str


class Finding(BaseModel):
    """One reported observation with severity, message and structured evidence."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    checker_id: str
    code: str
    severity: Severity
    message: str
    subject_node_id: str | None = None
    subject_node_name: str | None = None
    subject_node_type: str | None = None
    related_nodes: list[RelatedNode] = Field(default_factory=list)
    extracted_values: dict[str, Any] = Field(default_factory=dict)
    confidence: float = Field(1.0, ge=0.0, le=1.0)
    analysis_method: AnalysisMethod = AnalysisMethod.STATIC

    @property
    def related_node_ids(self) -> list[str]:
        return [related.id for related in self.related_nodes]


class NodeCategories(BaseModel):
    """Category labels grouped by role; each list is deduplicated and ordered."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    triggers: list[str] = Field(default_factory=list)
    data_sources: list[str] = Field(default_factory=list)
    outputs: list[str] = Field(default_factory=list)
    others: list[str] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "NodeCategories":
        return cls()

    @classmethod
    def of(cls, category: NodeCategory, *labels: str) -> "NodeCategories":
        """Build categories holding *labels* under a single *category*."""
        return cls(**{_CATEGORY_FIELDS[category]: _dedupe(labels)})

    @classmethod
    def merge(cls, categories: Iterable["NodeCategories | None"]) -> "NodeCategories":
        """Union per category, preserving first-seen order."""
        merged: dict[str, list[str]] = {name: [] for name in _CATEGORY_FIELDS.values()}
        for item in categories:
            if item is None:
                continue
            for name, bucket in merged.items():
                bucket.extend(getattr(item, name))
        return cls(**{name: _dedupe(labels) for name, labels in merged.items()})

    def is_empty(self) -> bool:
        return not (self.triggers or self.data_sources or self.outputs or self.others)


_CATEGORY_FIELDS = {
    NodeCategory.TRIGGER: "triggers",
    NodeCategory.DATA_SOURCE: "data_sources",
    NodeCategory.OUTPUT: "outputs",
    NodeCategory.OTHER: "others",
}


def _dedupe(labels: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(labels))


class CheckResult(BaseModel):
    """Result of running one rule module (or a built-in classifier) once."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    checker_id: str
    checker_name: str
    passed: bool
    findings: list[Finding] = Field(default_factory=list)
    node_categories: NodeCategories | None = None

    @property
    def highest_severity(self) -> Severity:
        return Severity.max_of(f.severity for f in self.findings)


def create_finding(
    *,
    checker_id: str,
    code: str,
    severity: Severity,
    message: str,
    node: WorkflowNode | None = None,
    related_nodes: Iterable[WorkflowNode] = (),
    extracted_values: dict[str, Any] | None = None,
    confidence: float = 1.0,
    analysis_method: AnalysisMethod = AnalysisMethod.STATIC,
) -> Finding:
    """Create a :class:`Finding` about *node*, copying its identity fields."""
    return Finding(
        checker_id=checker_id,
        code=code,
        severity=severity,
        message=message,
        subject_node_id=node.id if node else None,
        subject_node_name=node.name if node else None,
        subject_node_type=node.type if node else None,
        related_nodes=[RelatedNode(id=n.id, name=n.name, type=n.type) for n in related_nodes],
        extracted_values=dict(extracted_values or {}),
        confidence=confidence,
        analysis_method=analysis_method,
    )
