"""Pydantic models for the workflow snapshot handed to the analyzer.

The connection map follows the automation tool's export format::

    {"Source name or id": {"main": [[{"node": "Target", "type": "main", "index": 0}], null]}}

where the outer list is indexed by source output port. The bare shape
``{"Source": [[{"node": "Target", "index": 0}]]}`` is accepted as well and
normalised to the ``main`` family.
"""

from dataclasses import dataclass
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WorkflowNode(BaseModel):
    """A single configured step."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str
    name: str
    type: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    type_version: float | None = Field(None, alias="typeVersion")


class ConnectionTarget(BaseModel):
    """One target of an output port."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    node: str | None = None
    type: str = "main"
    index: int | None = 0


class NodeOutputs(BaseModel):
    """All output ports of one source node, grouped by connection family."""

    model_config = ConfigDict(frozen=True, extra="allow")

    main: list[list[ConnectionTarget] | None] | None = None


@dataclass(frozen=True)
class Connection:
    """A directed edge between two steps.

    Endpoints are node ids once the graph has resolved them; before that they
    may still be node names.
    """

    source_id: str
    source_output_port: int
    target_id: str
    target_input_port: int = 0


class Workflow(BaseModel):
    """Immutable snapshot of a workflow definition."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    name: str = ""
    nodes: list[WorkflowNode] = Field(default_factory=list)
    connections: dict[str, NodeOutputs] = Field(default_factory=dict)

    @field_validator("connections", mode="before")
    @classmethod
    def _normalise_port_lists(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        return {
            source: {"main": outputs} if isinstance(outputs, list) else outputs
            for source, outputs in value.items()
        }

    def iter_connections(self) -> Iterator[Connection]:
        """Yield one unresolved :class:`Connection` per ``main`` target.

        Null ports and targets without a node are skipped.
        """
        for source_key, outputs in self.connections.items():
            if not outputs.main:
                continue
            for port_index, targets in enumerate(outputs.main):
                if not targets:
                    continue
                for target in targets:
                    if not target.node:
                        continue
                    yield Connection(
                        source_id=source_key,
                        source_output_port=port_index,
                        target_id=target.node,
                        target_input_port=target.index or 0,
                    )
