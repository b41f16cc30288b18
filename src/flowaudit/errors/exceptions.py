"""Custom exception classes for flowaudit."""


class FlowAuditError(Exception):
    """Base exception for flowaudit."""

    def __init__(self, code: str, message: str, details=None):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)


class StructuralError(FlowAuditError):
    """Malformed workflow graph. Aborts the whole analysis."""

    def __init__(self, message: str, details=None, code: str = "STRUCTURAL_ERROR"):
        super().__init__(code, message, details)


class NodeNotFoundError(StructuralError):
    """A connection endpoint does not resolve to any node id or name."""

    def __init__(self, node_key: str):
        self.node_key = node_key
        super().__init__(
            f"Node not found: {node_key}",
            details={"node_key": node_key},
            code="NODE_NOT_FOUND",
        )


class CycleInvariantViolation(FlowAuditError):
    """The condensed graph contains a cycle, i.e. SCC computation is broken."""

    def __init__(self, message: str = "Condensed graph should be acyclic but contains cycles"):
        super().__init__("CYCLE_INVARIANT_VIOLATION", message)


class RuleModuleError(FlowAuditError):
    """A rule module raised while being queried or run."""

    def __init__(self, module_id: str, phase: str, cause: BaseException):
        self.module_id = module_id
        self.phase = phase
        super().__init__(
            "RULE_MODULE_ERROR",
            f"Rule module '{module_id}' failed during {phase}: {cause}",
            details={"module_id": module_id, "phase": phase, "error": repr(cause)},
        )
        self.__cause__ = cause


class ClassifierConfigError(FlowAuditError):
    """Review-required table is inconsistent."""

    def __init__(self, message: str, details=None):
        super().__init__("CLASSIFIER_CONFIG_ERROR", message, details)


class RegistryError(FlowAuditError):
    """Rule module registry is inconsistent."""

    def __init__(self, message: str, details=None):
        super().__init__("REGISTRY_ERROR", message, details)
