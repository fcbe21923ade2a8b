"""
picograph errors
================
Every error aborts the whole compilation; no partial Lua is ever returned.

    CompileError
      ├── UnknownNodeDefinition   graph references a definition id absent from the catalogue
      ├── MissingRequiredInput    required pin has no connection, inline value or default
      ├── GraphCycleDetected      exec chain or value expression re-enters itself
      ├── DanglingValueReference  stateful output read before (or outside) its emission
      ├── InvalidPropertyValue    property / literal can not be formatted as Lua
      ├── DuplicateEntryPoint     two entry nodes claim the same lifecycle event
      ├── GraphTooComplex         recursion / visit ceiling exceeded
      └── InvalidConnection       connection breaks a Graph Model invariant
"""

from __future__ import annotations

from typing import Any, Iterable, Optional


class CompileError(Exception):
    """Base class for all compilation failures."""

    kind = "CompileError"

    def __init__(self, message: str, node_id: Optional[str] = None, pin_id: Optional[str] = None):
        super().__init__(message)
        self.node_id = node_id
        self.pin_id = pin_id

    def to_dict(self) -> dict:
        return {
            "error": self.kind,
            "message": str(self),
            "nodeId": self.node_id,
            "pinId": self.pin_id,
        }


class UnknownNodeDefinition(CompileError):
    kind = "UnknownNodeDefinition"

    def __init__(self, definition_id: str, node_id: Optional[str] = None):
        where = f" (node '{node_id}')" if node_id else ""
        super().__init__(f"Unknown node definition '{definition_id}'{where}", node_id)
        self.definition_id = definition_id


class MissingRequiredInput(CompileError):
    kind = "MissingRequiredInput"

    def __init__(self, node_id: str, pin_id: str):
        super().__init__(
            f"Node '{node_id}' requires a value on input '{pin_id}'", node_id, pin_id
        )


class GraphCycleDetected(CompileError):
    kind = "GraphCycleDetected"

    def __init__(self, node_id: str, graph: str = "exec"):
        super().__init__(f"Cyclic {graph} connection involving node '{node_id}'", node_id)
        self.graph = graph


class DanglingValueReference(CompileError):
    kind = "DanglingValueReference"

    def __init__(self, node_id: str, pin_id: str, reader_id: Optional[str] = None):
        reader = f" by node '{reader_id}'" if reader_id else ""
        super().__init__(
            f"Output '{pin_id}' of node '{node_id}' was read{reader} before it was "
            f"emitted on the active exec path",
            node_id,
            pin_id,
        )
        self.reader_id = reader_id


class InvalidPropertyValue(CompileError):
    kind = "InvalidPropertyValue"

    def __init__(self, node_id: Optional[str], key: str, value: Any, reason: str = ""):
        owner = f"node '{node_id}' " if node_id else ""
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid value {value!r} for {owner}property '{key}'{detail}", node_id)
        self.key = key
        self.value = value


class DuplicateEntryPoint(CompileError):
    kind = "DuplicateEntryPoint"

    def __init__(self, event_name: str, node_ids: Iterable[str]):
        ids = list(node_ids)
        super().__init__(
            f"Event '{event_name}' has more than one entry node: {', '.join(ids)}",
            ids[0] if ids else None,
        )
        self.event_name = event_name
        self.node_ids = ids


class GraphTooComplex(CompileError):
    kind = "GraphTooComplex"

    def __init__(self, limit_name: str, limit: int, node_id: Optional[str] = None):
        super().__init__(f"Graph exceeds the {limit_name} limit of {limit}", node_id)
        self.limit_name = limit_name
        self.limit = limit


class InvalidConnection(CompileError):
    kind = "InvalidConnection"

    def __init__(self, message: str, node_id: Optional[str] = None, pin_id: Optional[str] = None):
        super().__init__(message, node_id, pin_id)


__all__ = [
    "CompileError",
    "UnknownNodeDefinition",
    "MissingRequiredInput",
    "GraphCycleDetected",
    "DanglingValueReference",
    "InvalidPropertyValue",
    "DuplicateEntryPoint",
    "GraphTooComplex",
    "InvalidConnection",
]
