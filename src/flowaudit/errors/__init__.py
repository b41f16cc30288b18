from flowaudit.errors.exceptions import (
    ClassifierConfigError,
    CycleInvariantViolation,
    FlowAuditError,
    NodeNotFoundError,
    RegistryError,
    RuleModuleError,
    StructuralError,
)

__all__ = [
    "ClassifierConfigError",
    "CycleInvariantViolation",
    "FlowAuditError",
    "NodeNotFoundError",
    "RegistryError",
    "RuleModuleError",
    "StructuralError",
]
