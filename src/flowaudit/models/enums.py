"""String enums shared across the graph engine and analysis pipeline."""

from enum import StrEnum


class NodeClassification(StrEnum):
    SAFE = "safe"
    REVIEW_REQUIRED = "review_required"
    UNKNOWN = "unknown"


class Severity(StrEnum):
    """Finding severity, ordered none < note < warning < error."""

    NONE = "none"
    NOTE = "note"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def max_of(cls, severities) -> "Severity":
        """Highest severity in *severities*, ``NONE`` when empty."""
        return cls(max(severities, key=lambda s: _SEVERITY_RANK[cls(s)], default=cls.NONE))


_SEVERITY_RANK = {
    Severity.NONE: 0,
    Severity.NOTE: 1,
    Severity.WARNING: 2,
    Severity.ERROR: 3,
}


class AnalysisMethod(StrEnum):
    STATIC = "static"
    AI = "ai"


class RuleModuleType(StrEnum):
    NODE = "node"
    SCENARIO = "scenario"


class SCCKind(StrEnum):
    SINGLE = "single"
    LOOP = "loop"


class NodeCategory(StrEnum):
    TRIGGER = "trigger"
    DATA_SOURCE = "dataSource"
    OUTPUT = "output"
    OTHER = "other"
