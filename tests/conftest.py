"""Shared test fixtures: workflow builders and sample rule modules."""

from typing import Iterable

import pytest

from flowaudit.models import NodeCategory, Severity, Workflow, WorkflowNode, create_finding
from flowaudit.rules import BaseNodeRule, BaseScenarioRule, NodeType


def make_node(node_id: str, node_type: str = NodeType.SET, name: str | None = None, **parameters):
    return WorkflowNode(
        id=node_id,
        name=name or f"Node {node_id}",
        type=node_type,
        parameters=parameters,
    )


def make_workflow(
    nodes: Iterable[WorkflowNode],
    edges: Iterable[tuple[str, str]] = (),
    workflow_id: str = "wf_test",
    name: str = "Test workflow",
) -> Workflow:
    """Build a workflow whose connections reference nodes by name, like an export."""
    nodes = list(nodes)
    names = {node.id: node.name for node in nodes}
    connections: dict[str, dict] = {}
    for source, target in edges:
        outputs = connections.setdefault(names.get(source, source), {"main": [[]]})
        outputs["main"][0].append(
            {"node": names.get(target, target), "type": "main", "index": 0}
        )
    return Workflow(id=workflow_id, name=name, nodes=nodes, connections=connections)


# ---------------------------------------------------------------------------
# Sample rule modules
# ---------------------------------------------------------------------------


class HttpRequestRule(BaseNodeRule):
    id = "httprequest"
    name = "HTTP Request Checker"

    def supported_node_types(self):
        return {NodeType.HTTP_REQUEST, NodeType.HTTP_REQUEST_TOOL}

    def categorize_node(self, node):
        self.add_to_category(NodeCategory.OUTPUT, node.type)

    def check_node(self, node):
        url = node.parameters.get("url", "")
        if not url.startswith("http://"):
            return []
        return [
            create_finding(
                checker_id=self.id,
                code="INSECURE_HTTP_URL",
                severity=Severity.WARNING,
                message=f"Request to {url} is not encrypted",
                node=node,
                extracted_values={"url": url},
            )
        ]


class JsCodeRule(BaseNodeRule):
    id = "jscode"
    name = "JavaScript Code Checker"

    def supported_node_types(self):
        return {NodeType.CODE}

    def categorize_node(self, node):
        self.add_to_category(NodeCategory.OTHER, node.type)

    def check_node(self, node):
        if "eval(" not in node.parameters.get("jsCode", ""):
            return []
        return [
            create_finding(
                checker_id=self.id,
                code="DYNAMIC_CODE_EVALUATION",
                severity=Severity.ERROR,
                message="Code node evaluates dynamic input",
                node=node,
            )
        ]


class ExplodingCodeRule(BaseNodeRule):
    id = "exploding-code"
    name = "Exploding Code Checker"

    def supported_node_types(self):
        return {NodeType.CODE}

    def check_node(self, node):
        raise RuntimeError("boom")


class WebhookToHttpScenario(BaseScenarioRule):
    """Flags HTTP requests reachable from an inbound webhook."""

    id = "webhook-to-http"
    name = "Webhook to HTTP Scenario"

    def is_applicable(self, context):
        return any(node.type == NodeType.WEBHOOK for node in context.workflow.nodes)

    def check_scenario(self):
        findings = []
        for webhook in (n for n in self.workflow.nodes if n.type == NodeType.WEBHOOK):
            for node in self.all_downstream_nodes(webhook.id):
                if node.type != NodeType.HTTP_REQUEST:
                    continue
                findings.append(
                    create_finding(
                        checker_id=self.id,
                        code="WEBHOOK_DATA_FORWARDED",
                        severity=Severity.NOTE,
                        message=f"Webhook data may reach {node.name}",
                        node=node,
                        related_nodes=self.graph.shortest_path_nodes(webhook.id, node.id),
                    )
                )
        return findings


class BrokenScenario(BaseScenarioRule):
    id = "broken-scenario"
    name = "Broken Scenario"

    def is_applicable(self, context):
        return True

    def check_scenario(self):
        raise ValueError("scenario exploded")


class NeverApplicableScenario(BaseScenarioRule):
    id = "never-applicable"
    name = "Never Applicable Scenario"

    def is_applicable(self, context):
        return False

    def check_scenario(self):
        raise AssertionError("must not run")


@pytest.fixture
def linear_workflow():
    """manual trigger -> set -> http request."""
    return make_workflow(
        [
            make_node("trigger", NodeType.MANUAL_TRIGGER, name="Start"),
            make_node("set", NodeType.SET, name="Prepare"),
            make_node("http", NodeType.HTTP_REQUEST, name="Call API", url="http://api.example.com"),
        ],
        [("trigger", "set"), ("set", "http")],
    )


@pytest.fixture
def mixed_workflow():
    """One step of each classification plus a rule-backed code step."""
    return make_workflow(
        [
            make_node("hook", NodeType.WEBHOOK, name="Inbound"),
            make_node("code", NodeType.CODE, name="Transform", jsCode="return eval(input)"),
            make_node("http", NodeType.HTTP_REQUEST, name="Forward", url="http://example.com"),
            make_node("set", NodeType.SET, name="Shape"),
            make_node("mystery", "community.mysteryNode", name="Mystery"),
        ],
        [("hook", "code"), ("code", "http"), ("http", "set"), ("set", "mystery")],
    )
