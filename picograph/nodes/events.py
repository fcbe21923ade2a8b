"""
Event nodes: lifecycle entry points, custom events and their call sites.
"""

from __future__ import annotations

from typing import List

from picograph.compiler.context import parse_custom_event_parameters
from picograph.compiler.lua import (
    call_expression,
    default_literal_for_kind,
    reconstruct_arguments,
)
from picograph.core.NodeModule import (
    ModuleList,
    NodeBehavior,
    NodeDefinition,
    PinConfig,
    PropertySchema,
    exec_in,
    exec_out,
    value_in,
    value_out,
)
from picograph.core.Types import OMIT

MODULES = ModuleList()


# ── Lifecycle ─────────────────────────────────────────────────────────────────

class LifecycleEvent(NodeBehavior):
    is_entry_point = True

    def emit_exec(self, ctx):
        return ctx.emit_next_exec("exec_out")


@MODULES.register(NodeDefinition(
    id="event_start",
    title="Event Init",
    category="Events",
    description="Called once on cart startup.",
    search_tags=("start", "init", "boot", "lifecycle"),
    unique=True,
    outputs=(exec_out(),),
))
class EventInit(LifecycleEvent):
    event_name = "_init"


@MODULES.register(NodeDefinition(
    id="event_update",
    title="Event Update",
    category="Events",
    description="Called once per update",
    search_tags=("update", "loop", "frame", "tick"),
    unique=True,
    outputs=(exec_out(),),
))
class EventUpdate(LifecycleEvent):
    event_name = "_update"


@MODULES.register(NodeDefinition(
    id="event_draw",
    title="Event Draw",
    category="Events",
    description="Called once per visible frame.",
    search_tags=("draw", "render", "frame", "lifecycle"),
    unique=True,
    outputs=(exec_out(),),
))
class EventDraw(LifecycleEvent):
    event_name = "_draw"


# ── Custom events ─────────────────────────────────────────────────────────────

def _custom_event_pins(node, graph) -> List[PinConfig]:
    return [
        value_out(p.output_pin_id, p.kind, name=p.name)
        for p in parse_custom_event_parameters(node.get("parameters"))
    ]


@MODULES.register(NodeDefinition(
    id="custom_event",
    title="Custom Event",
    category="Events",
    description="Defines a custom event that can be triggered elsewhere.",
    search_tags=("event", "custom", "broadcast", "trigger"),
    outputs=(exec_out(),),
    properties=(
        PropertySchema("name", "Event Name", "string", "CustomEvent", placeholder="Enter event name"),
    ),
    instance_pins=_custom_event_pins,
))
class CustomEvent(NodeBehavior):
    # no event name: compiled as custom_<name>(params)
    is_entry_point = True

    def emit_exec(self, ctx):
        signature = ctx.custom_event(ctx.node_id)
        if signature is not None:
            for param in signature.parameters:
                ctx.bind_output(param.output_pin_id, param.lua_name)
        return ctx.emit_next_exec("exec_out")


def _call_site_pins(node, graph) -> List[PinConfig]:
    target = graph.get_node(node.get("eventId") or "")
    if target is None or target.definition_id != "custom_event":
        return []
    return [
        value_in(p.input_pin_id, p.kind, name=p.name)
        for p in parse_custom_event_parameters(target.get("parameters"))
    ]


@MODULES.register(NodeDefinition(
    id="call_custom_event",
    title="Call Custom Event",
    category="Events",
    description="Invokes a custom event defined elsewhere in the graph.",
    search_tags=("event", "call", "trigger", "custom"),
    inputs=(exec_in(),),
    outputs=(exec_out(),),
    properties=(PropertySchema("eventId", "Event", "string", ""),),
    instance_pins=_call_site_pins,
))
class CallCustomEvent(NodeBehavior):
    def emit_exec(self, ctx):
        signature = ctx.custom_event(ctx.property("eventId"))
        if signature is None:
            return [ctx.line("-- missing custom event target"), *ctx.emit_next_exec("exec_out")]

        values = []
        for param in signature.parameters:
            value = ctx.input(param.input_pin_id)
            if value is OMIT and not param.optional:
                value = default_literal_for_kind(param.kind)
            values.append(value)

        args = reconstruct_arguments(values, ["nil"] * len(values))
        return [ctx.line(call_expression(signature.function_name, args)), *ctx.emit_next_exec("exec_out")]
