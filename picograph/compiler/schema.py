"""
picograph - Graph JSON Schema + Validator
=========================================
Defines the serialisation format the editor saves and provides a
lightweight validator that runs without any third-party JSON Schema library.

Canonical JSON format
---------------------

    {
      "nodes": [
        {
          "id":           "node_001",           // unique within this graph (str, required)
          "definitionId": "circ",               // catalogue key (str, required)
          "properties":   { "pin:x": 10 },      // inspector values (dict, optional)
          "position":     { "x": 0, "y": 0 },   // editor metadata, ignored (optional)
          "isEntryPoint": true,                 // entry override (bool, optional)
          "eventName":    "_init"               // lifecycle override (str, optional)
        }
      ],
      "connections": [
        {
          "fromNode": "node_000",               // source node id (str, required)
          "fromPin":  "exec_out",               // source pin id (str, required)
          "toNode":   "node_001",               // target node id (str, required)
          "toPin":    "exec_in"                 // target pin id (str, required)
        }
      ],
      "variables": [                            // workspace globals (list, optional)
        { "id": "v1", "name": "score", "type": "number", "defaultValue": 0 }
      ],
      "settings": { "use60Fps": false }         // project settings (dict, optional)
    }

Structural problems raise SchemaError. Unknown definition ids are left to
the compiler (UnknownNodeDefinition) unless ``strict`` is set together with
a catalogue, in which case they are reported here.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

if TYPE_CHECKING:
    from picograph.noderegistry.NodeRegistry import NodeCatalogue

logger = logging.getLogger(__name__)


# ── Validation helpers ────────────────────────────────────────────────────────

class SchemaError(ValueError):
    """Raised when graph JSON fails structural validation."""


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise SchemaError(message)


def _require_keys(obj: Dict, keys: List[str], context: str) -> None:
    for key in keys:
        _require(key in obj, f"{context}: missing required field '{key}'")


# ── Public validator ─────────────────────────────────────────────────────────

def validate(
    data: Dict[str, Any],
    *,
    catalogue: Optional["NodeCatalogue"] = None,
    strict: bool = False,
) -> None:
    """
    Validate a parsed graph JSON dict.

    Args:
        data:      A pre-parsed dict (result of json.load / json.loads).
        catalogue: When given, definition ids are checked against it.
        strict:    When True, an unknown definition id is a SchemaError.
                   When False (default), it is logged as a warning.

    Raises:
        SchemaError: On any structural violation.
    """
    _require(isinstance(data, dict), "graph JSON must be a JSON object at the top level")
    _require_keys(data, ["nodes", "connections"], "graph root")

    _require(isinstance(data["nodes"],       list), "nodes must be a list")
    _require(isinstance(data["connections"], list), "connections must be a list")

    # ── Validate nodes ──────────────────────────────────────────────────────

    node_ids: set[str] = set()

    for i, node in enumerate(data["nodes"]):
        ctx = f"nodes[{i}]"
        _require(isinstance(node, dict), f"{ctx}: each node must be a JSON object")
        _require_keys(node, ["id", "definitionId"], ctx)
        _require(isinstance(node["id"],           str), f"{ctx}.id must be a string")
        _require(isinstance(node["definitionId"], str), f"{ctx}.definitionId must be a string")
        _require(node["id"].strip() != "", f"{ctx}.id must not be empty")
        _require(
            node["id"] not in node_ids,
            f"{ctx}: duplicate node id '{node['id']}'",
        )
        node_ids.add(node["id"])

        if node.get("properties") is not None:
            _require(isinstance(node["properties"], dict), f"{ctx}.properties must be an object")
        if node.get("isEntryPoint") is not None:
            _require(isinstance(node["isEntryPoint"], bool), f"{ctx}.isEntryPoint must be a boolean")
        if node.get("eventName") is not None:
            _require(isinstance(node["eventName"], str), f"{ctx}.eventName must be a string")

        if catalogue is not None and node["definitionId"] not in catalogue:
            msg = f"{ctx}: unknown node definition '{node['definitionId']}'"
            if strict:
                raise SchemaError(msg)
            logger.warning(msg)

    # ── Validate connections ────────────────────────────────────────────────

    for i, conn in enumerate(data["connections"]):
        ctx = f"connections[{i}]"
        _require(isinstance(conn, dict), f"{ctx}: each connection must be a JSON object")
        _require_keys(conn, ["fromNode", "fromPin", "toNode", "toPin"], ctx)

        for field in ("fromNode", "fromPin", "toNode", "toPin"):
            _require(isinstance(conn[field], str), f"{ctx}.{field} must be a string")

        _require(
            conn["fromNode"] in node_ids,
            f"{ctx}: fromNode '{conn['fromNode']}' not found in nodes",
        )
        _require(
            conn["toNode"] in node_ids,
            f"{ctx}: toNode '{conn['toNode']}' not found in nodes",
        )

    # ── Validate workspace variables and settings ───────────────────────────

    variables = data.get("variables")
    if variables is not None:
        _require(isinstance(variables, list), "variables must be a list")
        for i, variable in enumerate(variables):
            _require(isinstance(variable, dict), f"variables[{i}]: each variable must be a JSON object")
            _require_keys(variable, ["id"], f"variables[{i}]")

    settings = data.get("settings")
    if settings is not None:
        _require(isinstance(settings, dict), "settings must be an object")
        if "use60Fps" in settings:
            _require(isinstance(settings["use60Fps"], bool), "settings.use60Fps must be a boolean")


def validate_file(
    path: Union[str, Path],
    *,
    catalogue: Optional["NodeCatalogue"] = None,
    strict: bool = False,
) -> Dict[str, Any]:
    """
    Load and validate a graph JSON file.

    Returns:
        The parsed dict on success.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        SchemaError: If the graph structure is invalid.
    """
    path = Path(path)
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    validate(data, catalogue=catalogue, strict=strict)
    return data


__all__ = ["SchemaError", "validate", "validate_file"]
