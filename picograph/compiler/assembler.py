"""
Output Assembler
================
Wraps each entry point's exec chain in a Lua function and stitches the
cartridge source together:

    -- Generated with picoGraph

    score = 0                         workspace globals, one per variable

    function _init()                  lifecycle events: _init, _update,
      ...                             _update60, _draw, then any other
    end                               event name alphabetically

    function custom_spawn(x, y)       custom events, by display name
      ...
    end

A graph with no entry node compiles to the header plus
``-- No entry node present.``
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from picograph.config import CompilerSettings
from picograph.core.GraphPrimitives import Graph, NodeInstance
from picograph.core.Types import LIFECYCLE_EVENTS
from picograph.errors import DuplicateEntryPoint

from .context import (
    CompilationContext,
    CustomEventSignature,
    parse_custom_event_parameters,
)
from .emitter import LuaEmitter
from .lua import (
    default_literal_for_kind,
    format_literal,
    is_identifier,
    sanitize_identifier,
)

logger = logging.getLogger(__name__)

HEADER = "-- Generated with picoGraph"
NO_ENTRY = "-- No entry node present."

DEFAULT_CUSTOM_EVENT_NAME = "CustomEvent"


# ── Workspace variables ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class WorkspaceVariable:
    id: str
    name: str
    type: str = "any"
    default_value: Any = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int = 0) -> "WorkspaceVariable":
        kind = str(data.get("type") or "any").strip().lower()
        if kind not in ("number", "string", "boolean", "table"):
            kind = "any"
        default = data.get("defaultValue", data.get("default_value"))
        return cls(
            id=str(data.get("id") or f"variable_{index}"),
            name=str(data.get("name") or ""),
            type=kind,
            default_value=default,
        )


def _variable_default_literal(variable: WorkspaceVariable) -> str:
    value = variable.default_value
    if variable.type == "table" and isinstance(value, list):
        # editor rows: [{key, value}] with raw Lua value text
        rows = []
        for row in value:
            if not isinstance(row, dict):
                continue
            key = str(row.get("key") or "").strip()
            text = str(row.get("value") or "").strip()
            if not key:
                if text:
                    rows.append(text)
                continue
            rows.append(f"{_table_key(key)} = {text or 'nil'}")
        if len(rows) == 1 and rows[0].startswith("{") and rows[0].endswith("}"):
            return rows[0]
        return "{ " + ", ".join(rows) + " }" if rows else "{}"
    if value is None:
        return default_literal_for_kind(variable.type)
    return format_literal(variable.type, value, f"variable:{variable.name or variable.id}")


def _table_key(key: str) -> str:
    if is_identifier(key) or (key.startswith("[") and key.endswith("]")):
        return key
    return f"[{key}]"


def declare_variables(variables: Sequence[WorkspaceVariable]) -> Tuple[List[str], Dict[str, str]]:
    """Global declarations plus the ``variable id → Lua name`` map."""
    lines: List[str] = []
    names: Dict[str, str] = {}
    used = set()
    for index, variable in enumerate(variables):
        base = sanitize_identifier(variable.name.strip() or variable.id or f"var{index + 1}")
        candidate = base
        suffix = 2
        while candidate in used:
            candidate = f"{base}_{suffix}"
            suffix += 1
        used.add(candidate)
        names[variable.id] = candidate
        lines.append(f"{candidate} = {_variable_default_literal(variable)}")
    return lines, names


# ── Entry points ──────────────────────────────────────────────────────────────

def entry_info(graph: Graph, node: NodeInstance) -> Tuple[bool, Optional[str]]:
    """(is entry point, lifecycle event name) with instance flags taking precedence."""
    behavior = graph.module_of(node.id).behavior
    is_entry = node.is_entry_point
    if is_entry is None:
        is_entry = bool(behavior is not None and behavior.is_entry_point)
    event_name = node.event_name or (behavior.event_name if behavior is not None else None)
    return is_entry, event_name


def _event_order(event_name: str) -> Tuple[int, str]:
    if event_name in LIFECYCLE_EVENTS:
        return LIFECYCLE_EVENTS.index(event_name), ""
    return len(LIFECYCLE_EVENTS), event_name


def _custom_event_display_name(node: NodeInstance) -> str:
    raw = node.properties.get("name")
    return raw.strip() if isinstance(raw, str) and raw.strip() else DEFAULT_CUSTOM_EVENT_NAME


def build_custom_event_signatures(nodes: Sequence[NodeInstance]) -> Dict[str, CustomEventSignature]:
    signatures: Dict[str, CustomEventSignature] = {}
    used = set()
    for node in nodes:
        display = _custom_event_display_name(node)
        base = sanitize_identifier(display)
        if not base.startswith("custom_"):
            base = f"custom_{base}"
        candidate = base
        suffix = 1
        while candidate in used:
            candidate = f"{base}_{suffix}"
            suffix += 1
        used.add(candidate)
        signatures[node.id] = CustomEventSignature(
            node_id=node.id,
            display_name=display,
            function_name=candidate,
            parameters=parse_custom_event_parameters(node.properties.get("parameters")),
        )
    return signatures


# ── Assembly ──────────────────────────────────────────────────────────────────

def _function_block(signature: str, body: List[str]) -> List[str]:
    return ["", f"function {signature}", *body, "end"]


def assemble(
    graph: Graph,
    settings: Optional[CompilerSettings] = None,
    variables: Sequence[WorkspaceVariable] = (),
) -> str:
    """
    Compile *graph* to cartridge source.

    Raises:
        DuplicateEntryPoint: two entry nodes claim the same event, checked
                             before anything is emitted.
        CompileError:        any other compilation failure.
    """
    settings = settings or CompilerSettings()

    lifecycle: Dict[str, List[str]] = defaultdict(list)
    custom: List[NodeInstance] = []
    for node in graph:
        is_entry, event_name = entry_info(graph, node)
        if not is_entry:
            continue
        if not event_name:
            custom.append(node)
            continue
        if event_name == "_update" and settings.use_60fps:
            event_name = "_update60"
        lifecycle[event_name].append(node.id)

    if not lifecycle and not custom:
        return "\n".join([HEADER, NO_ENTRY])

    for event_name, node_ids in sorted(lifecycle.items()):
        if len(node_ids) > 1:
            raise DuplicateEntryPoint(event_name, node_ids)

    declarations, variable_names = declare_variables(variables)
    compilation = CompilationContext(
        graph=graph,
        settings=settings,
        variable_names=variable_names,
        custom_events=build_custom_event_signatures(custom),
    )
    emitter = LuaEmitter(compilation)

    output = [HEADER]
    if declarations:
        output.append("")
        output.extend(declarations)

    for event_name in sorted(lifecycle, key=_event_order):
        node_id = lifecycle[event_name][0]
        logger.debug("assemble: %s from %s", event_name, node_id)
        output.extend(_function_block(f"{event_name}()", emitter.emit_entry(node_id)))

    signatures = sorted(
        compilation.custom_events.values(),
        key=lambda s: (s.display_name.lower(), s.display_name),
    )
    for signature in signatures:
        logger.debug("assemble: %s from %s", signature.function_name, signature.node_id)
        header = f"{signature.function_name}({signature.parameter_list})"
        output.extend(_function_block(header, emitter.emit_entry(signature.node_id)))

    logger.info(
        "compiled %d lifecycle and %d custom event function(s) in %d steps",
        len(lifecycle), len(signatures), compilation.steps,
    )
    return "\n".join(output)


__all__ = [
    "HEADER",
    "NO_ENTRY",
    "WorkspaceVariable",
    "assemble",
    "declare_variables",
    "entry_info",
    "build_custom_event_signatures",
]
