"""WorkflowGraph — dependency graph over workflow steps.

Builds an immutable directed multigraph from a workflow's steps and
connections, then eagerly derives:

- strongly connected components (SCCs); an SCC is a *loop* when it has more
  than one member or its only member feeds itself,
- the condensed graph, where every SCC collapses to one node (always a DAG),
- a topological order of the condensed graph.

Example::

    Original graph:   A -> B <-> C -> D
    SCCs:             [A], [B, C], [D]
    Condensed DAG:    SCC_0 -> SCC_1 -> SCC_2

All queries are pure reads. A changed workflow needs a new WorkflowGraph.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

import networkx as nx
from networkx import DiGraph, MultiDiGraph

from flowaudit.errors.exceptions import (
    CycleInvariantViolation,
    NodeNotFoundError,
    StructuralError,
)
from flowaudit.models.enums import SCCKind
from flowaudit.models.workflow import Connection, Workflow, WorkflowNode


@dataclass(frozen=True)
class SCCInfo:
    """A strongly connected component of the workflow graph."""

    id: str
    node_ids: tuple[str, ...]
    kind: SCCKind
    has_internal_edge: bool

    @property
    def is_loop(self) -> bool:
        return self.kind == SCCKind.LOOP


@dataclass(frozen=True)
class LoopInfo:
    """A loop SCC together with every edge that stays inside it."""

    id: str
    node_ids: tuple[str, ...]
    edges: list[tuple[str, str]] = field(default_factory=list)


class WorkflowGraph:
    """Directed graph of workflow steps with SCC and execution-order analysis.

    Wraps a NetworkX MultiDiGraph so fan-out/fan-in connections between the
    same pair of steps are all kept.
    """

    def __init__(
        self,
        nodes: Iterable[WorkflowNode],
        connections: Iterable[Connection],
        logger: logging.Logger | None = None,
        *,
        source_keys: Iterable[str] = (),
    ) -> None:
        """Build the graph.

        Args:
            nodes: Workflow steps, in input order.
            connections: Edges whose endpoints are node ids or node names.
            logger: Logger to report on; defaults to this module's logger.
            source_keys: Keys of the raw connection map. Each must resolve
                even when it lists no targets.

        Raises:
            NodeNotFoundError: A connection endpoint or source key matches no
                node id or name.
        """
        self._logger = logger or logging.getLogger(__name__)
        self._graph: MultiDiGraph[str] = nx.MultiDiGraph()
        self._nodes: dict[str, WorkflowNode] = {}
        self._position: dict[str, int] = {}
        self._connections: list[Connection] = []

        name_to_id = self._add_nodes(nodes)
        for key in source_keys:
            self._resolve_node_id(key, name_to_id)
        self._add_connections(connections, name_to_id)
        nx.freeze(self._graph)

        self._sccs = self._find_sccs()
        self._scc_by_id = {scc.id: scc for scc in self._sccs}
        self._scc_position = {scc.id: index for index, scc in enumerate(self._sccs)}
        self._scc_of_node = {node_id: scc for scc in self._sccs for node_id in scc.node_ids}
        self._condensed = self.condense(self._sccs)
        self._topological_order = self._sort_condensed()

        self._logger.debug(
            "Workflow graph built: %d nodes, %d edges, %d SCCs",
            self.node_count,
            self.edge_count,
            len(self._sccs),
        )
        loops = self.loop_sccs()
        if loops:
            self._logger.info(
                "Detected %d loop(s) in workflow: %s",
                len(loops),
                "; ".join(" <-> ".join(scc.node_ids) for scc in loops),
            )

    @classmethod
    def from_workflow(
        cls,
        workflow: Workflow,
        logger: logging.Logger | None = None,
    ) -> "WorkflowGraph":
        """Build a graph from a workflow snapshot."""
        return cls(
            workflow.nodes,
            workflow.iter_connections(),
            logger=logger,
            source_keys=workflow.connections.keys(),
        )

    # ----- construction -----

    def _add_nodes(self, nodes: Iterable[WorkflowNode]) -> dict[str, str]:
        """Add nodes and return a name -> id map for resolving connections.

        Connections may reference a node either by id or by name.
        """
        name_to_id: dict[str, str] = {}
        for node in nodes:
            if not node.id:
                continue
            if node.id in self._nodes:
                self._logger.warning("Duplicate node id %r ignored", node.id)
                continue
            self._position[node.id] = len(self._position)
            self._nodes[node.id] = node
            self._graph.add_node(node.id, node=node)
            name_to_id[node.name] = node.id
        return name_to_id

    def _add_connections(
        self,
        connections: Iterable[Connection],
        name_to_id: dict[str, str],
    ) -> None:
        for connection in connections:
            source_id = self._resolve_node_id(connection.source_id, name_to_id)
            target_id = self._resolve_node_id(connection.target_id, name_to_id)
            resolved = Connection(
                source_id=source_id,
                source_output_port=connection.source_output_port,
                target_id=target_id,
                target_input_port=connection.target_input_port,
            )
            self._graph.add_edge(
                source_id,
                target_id,
                output_index=resolved.source_output_port,
                input_index=resolved.target_input_port,
            )
            self._connections.append(resolved)

    def _resolve_node_id(self, node_key: str, name_to_id: dict[str, str]) -> str:
        """Normalise a node reference (id or name) to the node id."""
        if node_key in self._nodes:
            return node_key
        node_id = name_to_id.get(node_key)
        if node_id is None:
            raise NodeNotFoundError(node_key)
        return node_id

    def _find_sccs(self) -> list[SCCInfo]:
        """Decompose the graph into SCCs, ordered by first member appearance."""
        components = [
            sorted(component, key=self._position.__getitem__)
            for component in nx.strongly_connected_components(self._graph)
        ]
        components.sort(key=lambda members: self._position[members[0]])

        sccs = []
        for index, members in enumerate(components):
            has_internal_edge = self._has_internal_edge(members)
            kind = SCCKind.LOOP if len(members) > 1 or has_internal_edge else SCCKind.SINGLE
            sccs.append(
                SCCInfo(
                    id=f"SCC_{index}",
                    node_ids=tuple(members),
                    kind=kind,
                    has_internal_edge=has_internal_edge,
                )
            )
        return sccs

    def _has_internal_edge(self, members: list[str]) -> bool:
        """True if any edge (self-loops included) stays inside *members*."""
        member_set = set(members)
        return any(
            neighbor in member_set
            for node_id in members
            for neighbor in self._graph.successors(node_id)
        )

    def condense(self, sccs: list[SCCInfo]) -> DiGraph:
        """Collapse each SCC into one node.

        Parallel cross-SCC edges collapse to a single edge and intra-SCC
        edges disappear, so the result is acyclic whenever *sccs* really are
        the graph's strongly connected components.

        Raises:
            StructuralError: *sccs* is not a partition of the node ids.
            CycleInvariantViolation: The condensed graph has a cycle.
        """
        seen: set[str] = set()
        for scc in sccs:
            if seen.intersection(scc.node_ids) or not scc.node_ids:
                raise StructuralError(f"SCC {scc.id} overlaps another component or is empty")
            seen.update(scc.node_ids)
        if seen != set(self._nodes):
            raise StructuralError("SCCs do not cover every node of the graph")

        condensed = nx.condensation(self._graph, scc=[set(scc.node_ids) for scc in sccs])
        condensed = nx.relabel_nodes(condensed, {index: scc.id for index, scc in enumerate(sccs)})
        for scc in sccs:
            condensed.nodes[scc.id].update(
                kind=scc.kind,
                original_nodes=list(scc.node_ids),
                node_count=len(scc.node_ids),
            )

        if not nx.is_directed_acyclic_graph(condensed):
            raise CycleInvariantViolation()
        return nx.freeze(condensed)

    def _sort_condensed(self) -> list[str]:
        # Ties between independent branches follow SCC order.
        return list(
            nx.lexicographical_topological_sort(
                self._condensed, key=self._scc_position.__getitem__
            )
        )

    # ----- structure -----

    @property
    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    @property
    def nodes(self) -> list[WorkflowNode]:
        return list(self._nodes.values())

    @property
    def connections(self) -> list[Connection]:
        """Resolved edges (id to id), duplicates included."""
        return list(self._connections)

    @property
    def condensed_graph(self) -> DiGraph:
        """Frozen condensed DAG; nodes are SCC ids."""
        return self._condensed

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def node(self, node_id: str) -> WorkflowNode | None:
        return self._nodes.get(node_id)

    def get_nx_graph(self) -> MultiDiGraph[str]:
        """Return a frozen copy of the underlying NetworkX graph."""
        return nx.freeze(self._graph.copy())  # type: ignore[no-any-return]

    # ----- SCC / ordering -----

    def find_sccs(self) -> list[SCCInfo]:
        """Strongly connected components; they partition the node ids."""
        return list(self._sccs)

    def scc_of(self, node_id: str) -> SCCInfo | None:
        return self._scc_of_node.get(node_id)

    def loop_sccs(self) -> list[SCCInfo]:
        return [scc for scc in self._sccs if scc.is_loop]

    def has_circular_dependencies(self) -> bool:
        return any(scc.is_loop for scc in self._sccs)

    def loop_info(self) -> list[LoopInfo]:
        """Every loop SCC with the edges running between its members."""
        loops = []
        for scc in self.loop_sccs():
            members = set(scc.node_ids)
            edges = [
                (source, target)
                for node_id in scc.node_ids
                for source, target in self._graph.out_edges(node_id)
                if target in members
            ]
            loops.append(LoopInfo(id=scc.id, node_ids=scc.node_ids, edges=edges))
        return loops

    def topological_order(self) -> list[str]:
        """SCC ids in a topological order of the condensed graph."""
        return list(self._topological_order)

    def execution_order(self) -> list[list[str]]:
        """Topological order expanded to node ids.

        A group with several ids is one circular unit, not a strict sub-order.
        """
        return [list(self._scc_by_id[scc_id].node_ids) for scc_id in self._topological_order]

    # ----- traversal -----

    def dependencies(self, node_id: str) -> list[str]:
        """Direct upstream nodes of *node_id*."""
        if node_id not in self._nodes:
            return []
        return list(self._graph.predecessors(node_id))

    def dependents(self, node_id: str) -> list[str]:
        """Direct downstream nodes of *node_id*."""
        if node_id not in self._nodes:
            return []
        return list(self._graph.successors(node_id))

    def all_reachable_forward(self, node_id: str) -> list[str]:
        """Every node reachable from *node_id*, in BFS order, excluding it."""
        if node_id not in self._nodes:
            return []
        return [n for n in nx.bfs_tree(self._graph, node_id) if n != node_id]

    def all_reachable_backward(self, node_id: str) -> list[str]:
        """Every node that can reach *node_id*, in BFS order, excluding it."""
        if node_id not in self._nodes:
            return []
        return [n for n in nx.bfs_tree(self._graph, node_id, reverse=True) if n != node_id]

    def shortest_path(self, from_id: str, to_id: str) -> list[str]:
        """Fewest-hop path from *from_id* to *to_id*, both ends included.

        Returns ``[from_id]`` when both are the same node and ``[]`` when
        *to_id* is unreachable or either node is unknown.
        """
        if from_id not in self._nodes or to_id not in self._nodes:
            return []
        try:
            return nx.shortest_path(self._graph, from_id, to_id)
        except nx.NetworkXNoPath:
            return []

    def shortest_path_nodes(self, from_id: str, to_id: str) -> list[WorkflowNode]:
        return [self._nodes[node_id] for node_id in self.shortest_path(from_id, to_id)]

    # ----- export -----

    def export(self) -> dict[str, list[dict[str, Any]]]:
        """JSON-safe dump of nodes and edges for visualisation/diagnostics."""
        return {
            "nodes": [
                {
                    "id": node.id,
                    "name": node.name,
                    "type": node.type,
                    "parameters": node.parameters,
                }
                for node in self._nodes.values()
            ],
            "edges": [
                {
                    "source": connection.source_id,
                    "target": connection.target_id,
                    "output_index": connection.source_output_port,
                    "input_index": connection.target_input_port,
                }
                for connection in self._connections
            ],
        }
