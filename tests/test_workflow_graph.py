"""Tests for the workflow dependency graph: SCCs, condensation and traversal."""

import logging

import networkx as nx
import pytest

from conftest import make_node, make_workflow
from flowaudit.errors import CycleInvariantViolation, NodeNotFoundError, StructuralError
from flowaudit.graph import SCCInfo, WorkflowGraph
from flowaudit.models import Connection, SCCKind, Workflow


def build(node_ids, edges):
    return WorkflowGraph.from_workflow(make_workflow([make_node(n) for n in node_ids], edges))


# Workflow shapes checked against the structural properties below.
GRAPH_CORPUS = {
    "empty": ([], []),
    "single": (["a"], []),
    "linear": (["a", "b", "c", "d"], [("a", "b"), ("b", "c"), ("c", "d")]),
    "diamond": (["a", "b", "c", "d"], [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")]),
    "self_loop": (["a", "b"], [("a", "a"), ("a", "b")]),
    "retry_loop": (
        ["a", "b", "c", "d"],
        [("a", "b"), ("b", "c"), ("c", "b"), ("c", "d")],
    ),
    "cycle_plus_isolated": (["a", "b", "c", "d"], [("a", "b"), ("b", "c"), ("c", "a")]),
    "two_loops_chained": (
        ["a", "b", "c", "d", "e", "f"],
        [("a", "b"), ("b", "a"), ("b", "c"), ("c", "d"), ("d", "e"), ("e", "c"), ("e", "f")],
    ),
    "parallel_edges": (["a", "b"], [("a", "b"), ("a", "b"), ("a", "b")]),
    "reverse_declared": (["d", "c", "b", "a"], [("a", "b"), ("b", "c"), ("c", "d")]),
    "fan_out_fan_in_cycle": (
        ["t", "x", "y", "z", "out"],
        [("t", "x"), ("x", "y"), ("x", "z"), ("y", "x"), ("z", "out"), ("out", "t")],
    ),
}


@pytest.fixture(params=sorted(GRAPH_CORPUS))
def corpus_graph(request):
    node_ids, edges = GRAPH_CORPUS[request.param]
    return build(node_ids, edges), node_ids, edges


# ---------------------------------------------------------------------------
# Structural properties over the corpus
# ---------------------------------------------------------------------------


class TestStructuralProperties:
    def test_sccs_partition_node_ids(self, corpus_graph):
        graph, node_ids, _ = corpus_graph
        members = [node_id for scc in graph.find_sccs() for node_id in scc.node_ids]
        assert sorted(members) == sorted(node_ids)
        assert len(members) == len(set(members))

    def test_condensation_is_acyclic(self, corpus_graph):
        graph, _, _ = corpus_graph
        assert nx.is_directed_acyclic_graph(graph.condensed_graph)

    def test_execution_order_respects_cross_scc_edges(self, corpus_graph):
        graph, _, edges = corpus_graph
        group_index = {
            node_id: index
            for index, group in enumerate(graph.execution_order())
            for node_id in group
        }
        for source, target in edges:
            if graph.scc_of(source) != graph.scc_of(target):
                assert group_index[source] < group_index[target]

    def test_execution_order_covers_every_node_once(self, corpus_graph):
        graph, node_ids, _ = corpus_graph
        flattened = [node_id for group in graph.execution_order() for node_id in group]
        assert sorted(flattened) == sorted(node_ids)

    def test_topological_order_lists_every_scc(self, corpus_graph):
        graph, _, _ = corpus_graph
        assert sorted(graph.topological_order()) == sorted(scc.id for scc in graph.find_sccs())

    def test_loop_kind_matches_definition(self, corpus_graph):
        graph, _, edges = corpus_graph
        for scc in graph.find_sccs():
            members = set(scc.node_ids)
            internal = any(s in members and t in members for s, t in edges)
            expected = len(members) > 1 or internal
            assert scc.is_loop == expected


# ---------------------------------------------------------------------------
# SCCs and condensation
# ---------------------------------------------------------------------------


class TestSCCs:
    def test_cycle_plus_isolated_node(self):
        graph = build(["a", "b", "c", "d"], [("a", "b"), ("b", "c"), ("c", "a")])
        sccs = graph.find_sccs()

        assert len(sccs) == 2
        by_members = {frozenset(scc.node_ids): scc for scc in sccs}
        assert by_members[frozenset({"a", "b", "c"})].kind == SCCKind.LOOP
        assert by_members[frozenset({"d"})].kind == SCCKind.SINGLE

        condensed = graph.condensed_graph
        assert condensed.number_of_nodes() == 2
        assert condensed.number_of_edges() == 0
        assert sorted(graph.topological_order()) == ["SCC_0", "SCC_1"]

    def test_scc_ids_follow_first_member_appearance(self):
        graph = build(["x", "a", "b"], [("a", "b"), ("b", "a")])
        sccs = graph.find_sccs()
        assert [scc.id for scc in sccs] == ["SCC_0", "SCC_1"]
        assert sccs[0].node_ids == ("x",)
        assert sccs[1].node_ids == ("a", "b")

    def test_self_loop_is_loop(self):
        graph = build(["a", "b"], [("a", "a"), ("a", "b")])
        scc = graph.scc_of("a")
        assert scc.kind == SCCKind.LOOP
        assert scc.has_internal_edge
        assert graph.scc_of("b").kind == SCCKind.SINGLE
        assert graph.has_circular_dependencies()

    def test_acyclic_graph_has_no_loops(self):
        graph = build(["a", "b", "c"], [("a", "b"), ("b", "c")])
        assert not graph.has_circular_dependencies()
        assert graph.loop_sccs() == []
        assert graph.loop_info() == []

    def test_condensed_node_attributes(self):
        graph = build(["a", "b", "c"], [("a", "b"), ("b", "a"), ("b", "c")])
        condensed = graph.condensed_graph
        loop_id = graph.scc_of("a").id
        assert condensed.nodes[loop_id]["kind"] == SCCKind.LOOP
        assert condensed.nodes[loop_id]["original_nodes"] == ["a", "b"]
        assert condensed.nodes[loop_id]["node_count"] == 2
        assert condensed.has_edge(loop_id, graph.scc_of("c").id)

    def test_parallel_cross_scc_edges_collapse(self):
        graph = build(["a", "b"], [("a", "b"), ("a", "b")])
        assert graph.edge_count == 2
        assert graph.condensed_graph.number_of_edges() == 1

    def test_loop_info_lists_internal_edges(self):
        graph = build(["a", "b", "c"], [("a", "b"), ("b", "a"), ("b", "c")])
        (loop,) = graph.loop_info()
        assert loop.node_ids == ("a", "b")
        assert sorted(loop.edges) == [("a", "b"), ("b", "a")]

    def test_condense_rejects_overlapping_components(self):
        graph = build(["a", "b"], [("a", "b")])
        bad = [
            SCCInfo(id="SCC_0", node_ids=("a", "b"), kind=SCCKind.LOOP, has_internal_edge=True),
            SCCInfo(id="SCC_1", node_ids=("b",), kind=SCCKind.SINGLE, has_internal_edge=False),
        ]
        with pytest.raises(StructuralError):
            graph.condense(bad)

    def test_condense_rejects_incomplete_cover(self):
        graph = build(["a", "b"], [("a", "b")])
        partial = [SCCInfo(id="SCC_0", node_ids=("a",), kind=SCCKind.SINGLE, has_internal_edge=False)]
        with pytest.raises(StructuralError):
            graph.condense(partial)

    def test_condense_with_non_scc_partition_fails_loudly(self):
        graph = build(["a", "b"], [("a", "b"), ("b", "a")])
        split = [
            SCCInfo(id="SCC_0", node_ids=("a",), kind=SCCKind.SINGLE, has_internal_edge=False),
            SCCInfo(id="SCC_1", node_ids=("b",), kind=SCCKind.SINGLE, has_internal_edge=False),
        ]
        with pytest.raises(CycleInvariantViolation):
            graph.condense(split)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_empty_workflow_is_valid(self):
        graph = build([], [])
        assert graph.node_count == 0
        assert graph.find_sccs() == []
        assert graph.execution_order() == []

    def test_connections_resolve_by_name(self):
        workflow = make_workflow(
            [make_node("n1", name="Fetch"), make_node("n2", name="Store")],
            [("n1", "n2")],
        )
        assert "Fetch" in workflow.connections
        graph = WorkflowGraph.from_workflow(workflow)
        assert graph.dependents("n1") == ["n2"]
        assert graph.connections == [Connection("n1", 0, "n2", 0)]

    def test_connections_resolve_by_id(self):
        nodes = [make_node("n1", name="Fetch"), make_node("n2", name="Store")]
        graph = WorkflowGraph(nodes, [Connection("n1", 0, "n2", 0)])
        assert graph.dependencies("n2") == ["n1"]

    def test_unknown_endpoint_raises_structural_error(self):
        nodes = [make_node("n1")]
        with pytest.raises(NodeNotFoundError) as exc_info:
            WorkflowGraph(nodes, [Connection("n1", 0, "ghost", 0)])
        assert exc_info.value.code == "NODE_NOT_FOUND"
        assert exc_info.value.details == {"node_key": "ghost"}
        assert isinstance(exc_info.value, StructuralError)

    def test_unknown_source_key_without_targets_raises(self):
        workflow = Workflow.model_validate(
            {
                "nodes": [{"id": "n1", "name": "Fetch", "type": "n8n-nodes-base.set"}],
                "connections": {"Ghost": {"main": [[]]}},
            }
        )
        with pytest.raises(NodeNotFoundError) as exc_info:
            WorkflowGraph.from_workflow(workflow)
        assert exc_info.value.details == {"node_key": "Ghost"}

    def test_source_key_without_targets_resolves_by_name(self):
        workflow = Workflow.model_validate(
            {
                "nodes": [{"id": "n1", "name": "Fetch", "type": "n8n-nodes-base.set"}],
                "connections": {"Fetch": {"main": [[]]}},
            }
        )
        graph = WorkflowGraph.from_workflow(workflow)
        assert graph.node_count == 1
        assert graph.edge_count == 0

    def test_duplicate_node_id_keeps_first(self, caplog):
        first = make_node("n1", name="First")
        second = make_node("n1", name="Second")
        with caplog.at_level(logging.WARNING):
            graph = WorkflowGraph([first, second], [])
        assert graph.node_count == 1
        assert graph.node("n1").name == "First"
        assert "Duplicate node id" in caplog.text

    def test_injected_logger_receives_loop_report(self, caplog):
        logger = logging.getLogger("tests.graph")
        with caplog.at_level(logging.INFO, logger="tests.graph"):
            WorkflowGraph.from_workflow(
                make_workflow([make_node("a"), make_node("b")], [("a", "b"), ("b", "a")]),
                logger=logger,
            )
        assert any(
            r.name == "tests.graph" and "loop" in r.getMessage() for r in caplog.records
        )

    def test_graph_is_frozen(self):
        graph = build(["a", "b"], [("a", "b")])
        with pytest.raises(nx.NetworkXError):
            graph.get_nx_graph().add_node("c")
        with pytest.raises(nx.NetworkXError):
            graph.condensed_graph.add_node("SCC_9")


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


class TestTraversal:
    @pytest.fixture
    def graph(self):
        # a -> b -> c -> d, a -> e, e -> d, f isolated
        return build(
            ["a", "b", "c", "d", "e", "f"],
            [("a", "b"), ("b", "c"), ("c", "d"), ("a", "e"), ("e", "d")],
        )

    def test_direct_neighbours(self, graph):
        assert sorted(graph.dependents("a")) == ["b", "e"]
        assert sorted(graph.dependencies("d")) == ["c", "e"]
        assert graph.dependencies("a") == []

    def test_reachability_excludes_start(self, graph):
        assert sorted(graph.all_reachable_forward("a")) == ["b", "c", "d", "e"]
        assert sorted(graph.all_reachable_backward("d")) == ["a", "b", "c", "e"]
        assert graph.all_reachable_forward("f") == []

    def test_reachability_in_cycle_excludes_start(self):
        graph = build(["a", "b"], [("a", "b"), ("b", "a")])
        assert graph.all_reachable_forward("a") == ["b"]
        assert graph.all_reachable_backward("a") == ["b"]

    def test_shortest_path_is_minimal(self, graph):
        assert graph.shortest_path("a", "d") == ["a", "e", "d"]

    def test_shortest_path_to_self(self, graph):
        assert graph.shortest_path("a", "a") == ["a"]

    def test_shortest_path_unreachable(self, graph):
        assert graph.shortest_path("d", "a") == []
        assert graph.shortest_path("a", "f") == []

    def test_shortest_path_nodes(self, graph):
        assert [node.id for node in graph.shortest_path_nodes("a", "c")] == ["a", "b", "c"]

    def test_unknown_node_queries_are_empty(self, graph):
        assert graph.dependencies("missing") == []
        assert graph.dependents("missing") == []
        assert graph.all_reachable_forward("missing") == []
        assert graph.all_reachable_backward("missing") == []
        assert graph.shortest_path("missing", "a") == []
        assert graph.scc_of("missing") is None
        assert graph.node("missing") is None
        assert not graph.has_node("missing")


class TestExport:
    def test_export_is_json_safe(self):
        workflow = make_workflow(
            [make_node("a", url="https://example.com"), make_node("b")],
            [("a", "b")],
        )
        exported = WorkflowGraph.from_workflow(workflow).export()
        assert [node["id"] for node in exported["nodes"]] == ["a", "b"]
        assert exported["nodes"][0]["parameters"] == {"url": "https://example.com"}
        assert exported["edges"] == [
            {"source": "a", "target": "b", "output_index": 0, "input_index": 0}
        ]
