from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, NamedTuple, Optional, Tuple

from picograph.errors import InvalidConnection

from .NodeModule import NodeDefinition, NodeModule, PinConfig
from .Types import PinDirection, PinKind

if TYPE_CHECKING:
    from picograph.noderegistry.NodeRegistry import NodeCatalogue

logger = logging.getLogger(__name__)


# Connections are plain tuples keyed by node id (arena style); nodes never
# hold references to each other.
class Connection(NamedTuple):
    source_node_id: str
    source_pin_id: str
    target_node_id: str
    target_pin_id: str

    kind: PinKind = PinKind.ANY

    @property
    def is_exec(self) -> bool:
        return self.kind.is_exec

    def to_dict(self) -> Dict[str, str]:
        return {
            "fromNode": self.source_node_id,
            "fromPin": self.source_pin_id,
            "toNode": self.target_node_id,
            "toPin": self.target_pin_id,
        }

    def __repr__(self):
        return (
            f"Connection({self.source_node_id}.{self.source_pin_id} -> "
            f"{self.target_node_id}.{self.target_pin_id})"
        )


@dataclass
class NodeInstance:
    id: str
    definition_id: str
    properties: Dict[str, Any] = field(default_factory=dict)
    position: Tuple[float, float] = (0.0, 0.0)
    # None means "use the behavior's default"
    is_entry_point: Optional[bool] = None
    event_name: Optional[str] = None

    def get(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "definitionId": self.definition_id,
            "properties": dict(self.properties),
            "position": {"x": self.position[0], "y": self.position[1]},
        }
        if self.is_entry_point is not None:
            data["isEntryPoint"] = self.is_entry_point
        if self.event_name is not None:
            data["eventName"] = self.event_name
        return data

    def __repr__(self):
        return f"NodeInstance({self.id}: {self.definition_id})"


def _parse_position(raw: Any) -> Tuple[float, float]:
    if isinstance(raw, dict):
        return float(raw.get("x", 0) or 0), float(raw.get("y", 0) or 0)
    if isinstance(raw, (list, tuple)) and len(raw) >= 2:
        return float(raw[0]), float(raw[1])
    return 0.0, 0.0


class Graph:
    """
    Node instances plus connections, with lookup indices for the compiler.

    Every ``connect`` enforces the wiring rules: an input pin accepts one
    connection, an exec output feeds one consumer, value outputs fan out.
    """

    def __init__(self, catalogue: "NodeCatalogue"):
        self.catalogue = catalogue
        self.nodes: Dict[str, NodeInstance] = {}
        self.connections: List[Connection] = []

        self._incoming: Dict[Tuple[str, str], Connection] = {}
        self._outgoing: Dict[Tuple[str, str], List[Connection]] = defaultdict(list)

    # ── Nodes ────────────────────────────────────────────────────────────────

    def add_node(self, node: NodeInstance) -> NodeInstance:
        # raises UnknownNodeDefinition
        self.catalogue.require(node.definition_id, node.id)
        if node.id in self.nodes:
            raise ValueError(f"Node with id '{node.id}' already exists in the graph")
        self.nodes[node.id] = node
        logger.debug("graph: added %r", node)
        return node

    def create_node(self, definition_id: str, node_id: str, **properties) -> NodeInstance:
        return self.add_node(self.catalogue.create_node(definition_id, node_id, properties))

    def remove_node(self, node_id: str) -> None:
        if node_id not in self.nodes:
            raise ValueError(f"Node with id '{node_id}' does not exist in the graph")
        for conn in [c for c in self.connections if node_id in (c.source_node_id, c.target_node_id)]:
            self.disconnect(conn)
        del self.nodes[node_id]

    def get_node(self, node_id: str) -> Optional[NodeInstance]:
        return self.nodes.get(node_id)

    def __iter__(self) -> Iterator[NodeInstance]:
        return iter(self.nodes.values())

    def __len__(self) -> int:
        return len(self.nodes)

    def module_of(self, node_id: str) -> NodeModule:
        node = self.nodes[node_id]
        return self.catalogue.require(node.definition_id, node.id)

    def definition_of(self, node_id: str) -> NodeDefinition:
        return self.module_of(node_id).definition

    # ── Pins ─────────────────────────────────────────────────────────────────

    def pins_of(self, node_id: str) -> Tuple[Tuple[PinConfig, ...], Tuple[PinConfig, ...]]:
        """Static pins of the definition plus any derived from instance properties."""
        definition = self.definition_of(node_id)
        inputs, outputs = definition.inputs, definition.outputs
        if definition.instance_pins is not None:
            extra = tuple(definition.instance_pins(self.nodes[node_id], self))
            inputs = inputs + tuple(p for p in extra if p.direction is PinDirection.INPUT)
            outputs = outputs + tuple(p for p in extra if p.direction is PinDirection.OUTPUT)
        return inputs, outputs

    def find_pin(self, node_id: str, pin_id: str) -> Optional[PinConfig]:
        inputs, outputs = self.pins_of(node_id)
        return next((p for p in inputs + outputs if p.id == pin_id), None)

    # ── Connections ──────────────────────────────────────────────────────────

    def connect(
        self,
        source_node_id: str,
        source_pin_id: str,
        target_node_id: str,
        target_pin_id: str,
    ) -> Connection:
        for node_id in (source_node_id, target_node_id):
            if node_id not in self.nodes:
                raise InvalidConnection(f"Connection references unknown node '{node_id}'", node_id)
        if source_node_id == target_node_id:
            raise InvalidConnection(
                f"Node '{source_node_id}' can not be connected to itself", source_node_id
            )

        source = self.find_pin(source_node_id, source_pin_id)
        target = self.find_pin(target_node_id, target_pin_id)
        if source is None:
            raise InvalidConnection(
                f"Node '{source_node_id}' has no pin '{source_pin_id}'", source_node_id, source_pin_id
            )
        if target is None:
            raise InvalidConnection(
                f"Node '{target_node_id}' has no pin '{target_pin_id}'", target_node_id, target_pin_id
            )
        if source.direction is not PinDirection.OUTPUT:
            raise InvalidConnection(
                f"Pin '{source_node_id}.{source_pin_id}' is not an output", source_node_id, source_pin_id
            )
        if target.direction is not PinDirection.INPUT:
            raise InvalidConnection(
                f"Pin '{target_node_id}.{target_pin_id}' is not an input", target_node_id, target_pin_id
            )
        if not PinKind.compatible(source.kind, target.kind):
            raise InvalidConnection(
                f"Can not connect {source.kind.value} pin '{source_node_id}.{source_pin_id}' "
                f"to {target.kind.value} pin '{target_node_id}.{target_pin_id}'",
                target_node_id,
                target_pin_id,
            )

        existing = self._incoming.get((target_node_id, target_pin_id))
        if existing is not None:
            if existing[:4] == (source_node_id, source_pin_id, target_node_id, target_pin_id):
                raise InvalidConnection(f"Duplicate connection {existing!r}", target_node_id, target_pin_id)
            raise InvalidConnection(
                f"Input '{target_node_id}.{target_pin_id}' already has a connection",
                target_node_id,
                target_pin_id,
            )
        if source.is_exec and self._outgoing.get((source_node_id, source_pin_id)):
            raise InvalidConnection(
                f"Exec output '{source_node_id}.{source_pin_id}' already has a consumer",
                source_node_id,
                source_pin_id,
            )

        kind = target.kind if source.kind is PinKind.ANY else source.kind
        conn = Connection(source_node_id, source_pin_id, target_node_id, target_pin_id, kind)
        self.connections.append(conn)
        self._incoming[(target_node_id, target_pin_id)] = conn
        self._outgoing[(source_node_id, source_pin_id)].append(conn)
        logger.debug("graph: connected %r", conn)
        return conn

    def disconnect(self, conn: Connection) -> None:
        self.connections.remove(conn)
        self._incoming.pop((conn.target_node_id, conn.target_pin_id), None)
        outgoing = self._outgoing.get((conn.source_node_id, conn.source_pin_id), [])
        if conn in outgoing:
            outgoing.remove(conn)

    def incoming(self, node_id: str, pin_id: str) -> Optional[Connection]:
        return self._incoming.get((node_id, pin_id))

    def outgoing(self, node_id: str, pin_id: str) -> List[Connection]:
        return list(self._outgoing.get((node_id, pin_id), ()))

    # ── Serialisation ────────────────────────────────────────────────────────

    @classmethod
    def from_dict(cls, data: Dict[str, Any], catalogue: "NodeCatalogue") -> "Graph":
        """
        Build a Graph from the editor's JSON shape.

        All nodes are added before any connection so that pins derived from
        other instances (call sites of custom events) are resolvable.

        Raises:
            UnknownNodeDefinition: a node names a definition the catalogue lacks.
            InvalidConnection:     a connection breaks a wiring rule.
        """
        graph = cls(catalogue)
        for raw in data.get("nodes", []):
            module = catalogue.require(raw.get("definitionId", ""), raw.get("id"))
            properties = module.definition.default_properties()
            properties.update(raw.get("properties") or {})
            graph.add_node(
                NodeInstance(
                    id=raw["id"],
                    definition_id=raw["definitionId"],
                    properties=properties,
                    position=_parse_position(raw.get("position")),
                    is_entry_point=raw.get("isEntryPoint"),
                    event_name=raw.get("eventName"),
                )
            )
        for raw in data.get("connections", []):
            graph.connect(raw["fromNode"], raw["fromPin"], raw["toNode"], raw["toPin"])
        return graph

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes.values()],
            "connections": [conn.to_dict() for conn in self.connections],
        }

    def __repr__(self):
        return f"Graph(nodes={len(self.nodes)}, connections={len(self.connections)})"


__all__ = ["Connection", "NodeInstance", "Graph"]
