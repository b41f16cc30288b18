"""WorkflowAnalyzer — orchestrates classification and rule dispatch.

For every step, in input order:

- safe steps get one ``none`` finding and no dispatch,
- review-required steps go to the first applicable node rule module; if
  there is none, or every applicable module fails, they get one
  ``warning`` finding asking for manual review,
- unknown steps get one ``warning`` finding asking for classification.

Afterwards every applicable scenario module runs once. Module failures are
logged and contained; only a structural error in the workflow itself
aborts the analysis.

Usage::

    analyzer = WorkflowAnalyzer(registry=RuleRegistry.of(MyCodeRule, MyScopeScenario))
    result = analyzer.analyze(workflow)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from flowaudit.analysis.context import CheckerContext, create_checker_context
from flowaudit.errors.exceptions import RegistryError, RuleModuleError
from flowaudit.graph.workflow_graph import WorkflowGraph
from flowaudit.logging_config import bind_analysis_context, clear_analysis_context
from flowaudit.models.enums import NodeCategory, NodeClassification, RuleModuleType, Severity
from flowaudit.models.findings import CheckResult, Finding, NodeCategories, create_finding
from flowaudit.models.workflow import Workflow, WorkflowNode
from flowaudit.rules.base import RuleModule, RuleRegistry
from flowaudit.rules.classifier import NodeClassifier
from flowaudit.rules.security_rules import ReviewRequiredInfo

SAFE_NODE_CHECKER_ID = "safe-node-classifier"
SAFE_NODE_CHECKER_NAME = "Safe Node Classifier"
SAFE_NODE_CODE = "SAFE_NODE_CONFIRMED"

UNIMPLEMENTED_CHECKER_ID = "unimplemented-node-checker"
UNIMPLEMENTED_CHECKER_NAME = "Unimplemented Node Checker"
UNIMPLEMENTED_CODE = "UNIMPLEMENTED_NODE_REVIEW_REQUIRED"

UNKNOWN_NODE_CHECKER_ID = "unknown-node-classifier"
UNKNOWN_NODE_CHECKER_NAME = "Unknown Node Classifier"
UNKNOWN_NODE_CODE = "UNKNOWN_NODE_NEEDS_CLASSIFICATION"


# ---------------------------------------------------------------------------
# Result data structures
# ---------------------------------------------------------------------------


@dataclass
class AnalysisResult:
    """Result of one analysis run."""

    check_results: list[CheckResult]
    graph: WorkflowGraph
    aggregated_categories: NodeCategories
    failed_modules: list[str] = field(default_factory=list)

    @property
    def findings(self) -> list[Finding]:
        return [finding for result in self.check_results for finding in result.findings]

    @property
    def findings_by_severity(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for finding in self.findings:
            counts[finding.severity.value] = counts.get(finding.severity.value, 0) + 1
        return counts

    @property
    def highest_severity(self) -> Severity:
        return Severity.max_of(f.severity for f in self.findings)

    @property
    def passed(self) -> bool:
        return all(result.passed for result in self.check_results)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to JSON-safe dict."""
        return {
            "check_results": [r.model_dump(mode="json") for r in self.check_results],
            "aggregated_categories": self.aggregated_categories.model_dump(mode="json"),
            "findings_by_severity": self.findings_by_severity,
            "highest_severity": self.highest_severity.value,
            "failed_modules": list(self.failed_modules),
            "graph": self.graph.export(),
            "execution_order": self.graph.execution_order(),
        }


def aggregate_node_categories(check_results: Iterable[CheckResult]) -> NodeCategories:
    """Union node categories across results, deduplicated in first-seen order."""
    return NodeCategories.merge(result.node_categories for result in check_results)


# ---------------------------------------------------------------------------
# Analyzer
# ---------------------------------------------------------------------------


class WorkflowAnalyzer:
    """Classifies every step, dispatches to rule modules and aggregates results."""

    def __init__(
        self,
        registry: RuleRegistry | None = None,
        classifier: NodeClassifier | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._registry = registry or RuleRegistry()
        self._classifier = classifier or NodeClassifier(logger=self._logger)

    @property
    def registry(self) -> RuleRegistry:
        return self._registry

    @property
    def classifier(self) -> NodeClassifier:
        return self._classifier

    # ----- public API -----

    def analyze(self, workflow: Workflow | dict[str, Any]) -> AnalysisResult:
        """Analyze *workflow* and return ordered check results.

        Args:
            workflow: Workflow snapshot, or its raw dict form.

        Returns:
            AnalysisResult with one result per step (input order) followed by
            one result per applicable scenario module (registration order).

        Raises:
            StructuralError: A connection references an unknown node.
            pydantic.ValidationError: *workflow* is a malformed dict.
        """
        if not isinstance(workflow, Workflow):
            workflow = Workflow.model_validate(workflow)

        bind_analysis_context(workflow.id, workflow.name)
        try:
            context = create_checker_context(workflow, logger=self._logger)
            failed_modules: list[str] = []
            modules = self._create_modules(context, failed_modules)

            check_results = self._run_node_checks(context, modules, failed_modules)
            check_results.extend(self._run_scenario_checks(context, modules, failed_modules))

            result = AnalysisResult(
                check_results=check_results,
                graph=context.graph,
                aggregated_categories=aggregate_node_categories(check_results),
                failed_modules=failed_modules,
            )
            self._logger.info(
                "Analysis complete: %d nodes, %d results, %d findings, highest severity %s",
                context.graph.node_count,
                len(check_results),
                len(result.findings),
                result.highest_severity.value,
            )
            return result
        finally:
            clear_analysis_context()

    # ----- internals -----

    def _create_modules(
        self,
        context: CheckerContext,
        failed_modules: list[str],
    ) -> list[RuleModule]:
        modules = []
        for descriptor in self._registry:
            try:
                modules.append(descriptor.create(context))
            except RegistryError:
                raise
            except Exception as exc:
                error = RuleModuleError(descriptor.id, "create", exc)
                self._logger.exception("rule_module_create_failed: %s", error.message)
                failed_modules.append(descriptor.id)
        return modules

    def _run_node_checks(
        self,
        context: CheckerContext,
        modules: list[RuleModule],
        failed_modules: list[str],
    ) -> list[CheckResult]:
        node_modules = [m for m in modules if m.type == RuleModuleType.NODE]
        results = []
        for node in context.workflow.nodes:
            results.append(self._check_node(node, context, node_modules, failed_modules))
        return results

    def _check_node(
        self,
        node: WorkflowNode,
        context: CheckerContext,
        node_modules: list[RuleModule],
        failed_modules: list[str],
    ) -> CheckResult:
        classification = self._classifier.classify(node.type)

        if classification == NodeClassification.SAFE:
            return _safe_node_result(node)
        if classification == NodeClassification.UNKNOWN:
            return _unknown_node_result(node)

        review_info = self._classifier.get_review_info(node.type)
        node_failures: list[str] = []
        if review_info is not None and review_info.has_rule_module:
            node_context = context.for_node(node)
            for module in node_modules:
                phase = "is_applicable"
                try:
                    if not module.is_applicable(node_context):
                        continue
                    phase = "check"
                    return module.check(node)
                except Exception as exc:
                    error = RuleModuleError(module.id, phase, exc)
                    self._logger.exception(
                        "node_rule_module_failed: %s (node %r)", error.message, node.name
                    )
                    node_failures.append(module.id)
                    if module.id not in failed_modules:
                        failed_modules.append(module.id)

        return _unimplemented_node_result(node, review_info, node_failures)

    def _run_scenario_checks(
        self,
        context: CheckerContext,
        modules: list[RuleModule],
        failed_modules: list[str],
    ) -> list[CheckResult]:
        results = []
        for module in (m for m in modules if m.type == RuleModuleType.SCENARIO):
            phase = "is_applicable"
            try:
                if not module.is_applicable(context):
                    continue
                phase = "check"
                results.append(module.check())
            except Exception as exc:
                error = RuleModuleError(module.id, phase, exc)
                self._logger.exception("scenario_rule_module_failed: %s", error.message)
                if module.id not in failed_modules:
                    failed_modules.append(module.id)
        return results


def analyze_workflow(
    workflow: Workflow | dict[str, Any],
    registry: RuleRegistry | None = None,
) -> AnalysisResult:
    """Convenience wrapper: analyze *workflow* with a fresh analyzer."""
    return WorkflowAnalyzer(registry=registry).analyze(workflow)


# ---------------------------------------------------------------------------
# Built-in per-node outcomes
# ---------------------------------------------------------------------------


def _safe_node_result(node: WorkflowNode) -> CheckResult:
    return CheckResult(
        checker_id=SAFE_NODE_CHECKER_ID,
        checker_name=SAFE_NODE_CHECKER_NAME,
        passed=True,
        findings=[
            create_finding(
                checker_id=SAFE_NODE_CHECKER_ID,
                code=SAFE_NODE_CODE,
                severity=Severity.NONE,
                message="safe",
                node=node,
            )
        ],
    )


def _unknown_node_result(node: WorkflowNode) -> CheckResult:
    return CheckResult(
        checker_id=UNKNOWN_NODE_CHECKER_ID,
        checker_name=UNKNOWN_NODE_CHECKER_NAME,
        passed=True,
        findings=[
            create_finding(
                checker_id=UNKNOWN_NODE_CHECKER_ID,
                code=UNKNOWN_NODE_CODE,
                severity=Severity.WARNING,
                message=f'New node type "{node.type}" discovered - please review and classify',
                node=node,
                extracted_values={
                    "node_type": node.type,
                    "classification": NodeClassification.UNKNOWN.value,
                },
            )
        ],
    )


def _unimplemented_node_result(
    node: WorkflowNode,
    review_info: ReviewRequiredInfo | None,
    failed_module_ids: list[str],
) -> CheckResult:
    external = bool(review_info and review_info.external_connection)
    connection_type = "external" if external else "internal"
    return CheckResult(
        checker_id=UNIMPLEMENTED_CHECKER_ID,
        checker_name=UNIMPLEMENTED_CHECKER_NAME,
        passed=False,
        node_categories=NodeCategories.of(NodeCategory.OTHER, node.type),
        findings=[
            create_finding(
                checker_id=UNIMPLEMENTED_CHECKER_ID,
                code=UNIMPLEMENTED_CODE,
                severity=Severity.WARNING,
                message=(
                    f'Node type "{node.type}" ({connection_type} connection) '
                    "requires manual review as checker is not defined"
                ),
                node=node,
                extracted_values={
                    "node_type": node.type,
                    "classification": NodeClassification.REVIEW_REQUIRED.value,
                    "external_connection": external,
                    "has_rule_module": bool(review_info and review_info.has_rule_module),
                    "rule_module_id": review_info.rule_module_id if review_info else None,
                    "failed_rule_modules": list(failed_module_ids),
                },
            )
        ],
    )
