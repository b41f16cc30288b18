"""Rule module contract and base classes.

A rule module is either node-scoped (checks one step's configuration) or
scenario-scoped (reasons about the whole workflow). The analyzer only talks
to modules through :class:`RuleModule`; concrete heuristics live outside
this package and are handed in through a :class:`RuleRegistry`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, ClassVar, Collection, Iterable, Protocol

from flowaudit.errors.exceptions import RegistryError
from flowaudit.models.enums import NodeCategory, RuleModuleType
from flowaudit.models.findings import CheckResult, Finding, NodeCategories
from flowaudit.models.workflow import WorkflowNode

if TYPE_CHECKING:
    from flowaudit.analysis.context import CheckerContext
    from flowaudit.graph.workflow_graph import WorkflowGraph


class RuleModule(Protocol):
    """Uniform check contract implemented by every rule module."""

    id: str
    name: str
    type: RuleModuleType

    def is_applicable(self, context: CheckerContext) -> bool: ...

    def check(self, node: WorkflowNode | None = None) -> CheckResult: ...


class BaseNodeRule(ABC):
    """Base class for node-scoped rule modules."""

    type: ClassVar[RuleModuleType] = RuleModuleType.NODE
    id: ClassVar[str] = "node-rule"
    name: ClassVar[str] = "Node Rule"
    description: ClassVar[str] = ""

    def __init__(self, context: CheckerContext, logger: logging.Logger | None = None) -> None:
        self.context = context
        self.logger = logger or logging.getLogger(f"{__name__}.{self.id}")
        self._categories: dict[NodeCategory, list[str]] = {}

    @abstractmethod
    def supported_node_types(self) -> Collection[str]:
        """Step types this module knows how to check."""

    @abstractmethod
    def check_node(self, node: WorkflowNode) -> list[Finding]:
        """Run the module's heuristics against *node*."""

    def categorize_node(self, node: WorkflowNode) -> None:
        """Record *node*'s role via :meth:`add_to_category`. No-op by default."""

    def add_to_category(self, category: NodeCategory, label: str) -> None:
        bucket = self._categories.setdefault(category, [])
        if label not in bucket:
            bucket.append(label)

    def is_applicable(self, context: CheckerContext) -> bool:
        if context.node is None:
            return False
        return context.node.type in self.supported_node_types()

    def check(self, node: WorkflowNode | None = None) -> CheckResult:
        self._categories = {}
        if node is None:
            return CheckResult(
                checker_id=self.id,
                checker_name=self.name,
                passed=True,
                node_categories=NodeCategories.empty(),
            )

        self.logger.debug("Checking node %r (%s)", node.name, node.type)
        self.categorize_node(node)
        findings = self.check_node(node)
        return CheckResult(
            checker_id=self.id,
            checker_name=self.name,
            passed=not findings,
            findings=findings,
            node_categories=NodeCategories.merge(
                NodeCategories.of(category, *labels)
                for category, labels in self._categories.items()
            ),
        )


class BaseScenarioRule(ABC):
    """Base class for whole-workflow rule modules."""

    type: ClassVar[RuleModuleType] = RuleModuleType.SCENARIO
    id: ClassVar[str] = "scenario-rule"
    name: ClassVar[str] = "Scenario Rule"
    description: ClassVar[str] = ""

    def __init__(self, context: CheckerContext, logger: logging.Logger | None = None) -> None:
        self.context = context
        self.workflow = context.workflow
        self.graph: WorkflowGraph = context.graph
        self.nodes = context.nodes
        self.logger = logger or logging.getLogger(f"{__name__}.{self.id}")

    @abstractmethod
    def is_applicable(self, context: CheckerContext) -> bool:
        """Whether this scenario applies to the workflow in *context*."""

    @abstractmethod
    def check_scenario(self) -> list[Finding]:
        """Run the scenario analysis over the whole workflow."""

    def check(self, node: WorkflowNode | None = None) -> CheckResult:
        """Run :meth:`check_scenario`; callers gate on :meth:`is_applicable` first."""
        findings = self.check_scenario()
        return CheckResult(
            checker_id=self.id,
            checker_name=self.name,
            passed=not findings,
            findings=findings,
        )

    # ----- graph helpers -----

    def get_node(self, node_id: str) -> WorkflowNode | None:
        return self.nodes.get(node_id)

    def downstream_nodes(self, node_id: str) -> list[WorkflowNode]:
        """Immediate successors of *node_id*."""
        return self._to_nodes(self.graph.dependents(node_id))

    def all_downstream_nodes(self, node_id: str) -> list[WorkflowNode]:
        """Every node reachable from *node_id*."""
        return self._to_nodes(self.graph.all_reachable_forward(node_id))

    def all_upstream_nodes(self, node_id: str) -> list[WorkflowNode]:
        """Every node that can reach *node_id*."""
        return self._to_nodes(self.graph.all_reachable_backward(node_id))

    def _to_nodes(self, node_ids: Iterable[str]) -> list[WorkflowNode]:
        return [self.nodes[node_id] for node_id in node_ids if node_id in self.nodes]


@dataclass(frozen=True)
class RuleModuleDescriptor:
    """Registry entry: identity of a rule module plus the factory that builds it."""

    id: str
    name: str
    type: RuleModuleType
    factory: Callable[[CheckerContext], RuleModule]

    @classmethod
    def for_class(cls, module_class: type) -> RuleModuleDescriptor:
        """Describe a rule class whose constructor takes the context."""
        return cls(
            id=module_class.id,
            name=module_class.name,
            type=module_class.type,
            factory=module_class,
        )

    def create(self, context: CheckerContext) -> RuleModule:
        """Instantiate the module and check it matches this descriptor.

        Raises:
            RegistryError: The built module reports a different id or type.
        """
        module = self.factory(context)
        if module.id != self.id or module.type != self.type:
            raise RegistryError(
                f"Rule module factory for '{self.id}' built '{module.id}' ({module.type})",
                details={"expected": self.id, "actual": module.id},
            )
        return module


class RuleRegistry:
    """Ordered, explicit list of rule module descriptors."""

    def __init__(self, descriptors: Iterable[RuleModuleDescriptor] = ()) -> None:
        self._descriptors = tuple(descriptors)
        seen: set[str] = set()
        for descriptor in self._descriptors:
            if descriptor.id in seen:
                raise RegistryError(
                    f"Duplicate rule module id '{descriptor.id}'",
                    details={"module_id": descriptor.id},
                )
            seen.add(descriptor.id)

    @classmethod
    def of(cls, *module_classes: type) -> RuleRegistry:
        return cls(RuleModuleDescriptor.for_class(module_class) for module_class in module_classes)

    @property
    def descriptors(self) -> tuple[RuleModuleDescriptor, ...]:
        return self._descriptors

    @property
    def node_descriptors(self) -> list[RuleModuleDescriptor]:
        return [d for d in self._descriptors if d.type == RuleModuleType.NODE]

    @property
    def scenario_descriptors(self) -> list[RuleModuleDescriptor]:
        return [d for d in self._descriptors if d.type == RuleModuleType.SCENARIO]

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self):
        return iter(self._descriptors)
