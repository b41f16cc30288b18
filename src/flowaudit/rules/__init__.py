"""Rule module contract, registry and node classification tables."""

from flowaudit.rules.base import (
    BaseNodeRule,
    BaseScenarioRule,
    RuleModule,
    RuleModuleDescriptor,
    RuleRegistry,
)
from flowaudit.rules.classifier import NodeClassifier
from flowaudit.rules.node_types import NodeType
from flowaudit.rules.security_rules import (
    DEFAULT_SECURITY_CONFIG,
    ReviewRequiredInfo,
    SecurityConfig,
)

__all__ = [
    "BaseNodeRule",
    "BaseScenarioRule",
    "DEFAULT_SECURITY_CONFIG",
    "NodeClassifier",
    "NodeType",
    "ReviewRequiredInfo",
    "RuleModule",
    "RuleModuleDescriptor",
    "RuleRegistry",
    "SecurityConfig",
]
