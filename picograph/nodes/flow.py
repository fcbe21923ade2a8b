"""
Flow control nodes: if, for_loop and sequence.

Each nests its branch bodies one indent deeper through ``ctx.emit_branch``;
the rest of the outer chain resumes at the node's own indent.
"""

from __future__ import annotations

from typing import List

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
from picograph.core.Types import PinKind

MODULES = ModuleList()


@MODULES.register(NodeDefinition(
    id="if",
    title="If",
    category="Logic",
    description="Branch execution based on a boolean condition.",
    search_tags=("if", "condition", "branch", "logic"),
    inputs=(exec_in(), value_in("condition", PinKind.BOOLEAN, name="Condition")),
    outputs=(exec_out("then", "Then"), exec_out("else", "Else")),
))
class If(NodeBehavior):
    def emit_exec(self, ctx):
        level = ctx.indent_level
        condition = ctx.input_or("condition", "false")
        lines = [ctx.line(f"if {condition} then")]

        then_lines = ctx.emit_branch("then", level + 1)
        lines.extend(then_lines or [ctx.line("-- then branch", level + 1)])

        if ctx.find_exec_targets("else"):
            lines.append(ctx.line("else"))
            else_lines = ctx.emit_branch("else", level + 1)
            lines.extend(else_lines or [ctx.line("-- else branch", level + 1)])

        lines.append(ctx.line("end"))
        return lines


@MODULES.register(NodeDefinition(
    id="for_loop",
    title="For Loop",
    category="Logic",
    description="Iterate from start to end inclusive using PICO-8 for semantics.",
    search_tags=("loop", "for", "iterate", "counter"),
    inputs=(
        exec_in(),
        value_in("start", PinKind.NUMBER, name="Start", default_value=0),
        value_in("end", PinKind.NUMBER, name="End", default_value=10),
        value_in("step", PinKind.NUMBER, name="Step", default_value=1),
    ),
    outputs=(
        exec_out("loop", "Loop"),
        exec_out("completed", "Completed"),
        value_out("index", PinKind.NUMBER, name="Index"),
    ),
    properties=(PropertySchema("index", "Index Variable", "string", "i"),),
))
class ForLoop(NodeBehavior):
    def emit_exec(self, ctx):
        level = ctx.indent_level
        index = ctx.sanitize_identifier(ctx.property("index", "i"))
        start = ctx.input_or("start", "0")
        end = ctx.input_or("end", "0")
        step = ctx.input_or("step", "1")
        lines = [ctx.line(f"for {index} = {start}, {end}, {step} do")]

        # the loop variable only exists inside the body
        with ctx.scope():
            ctx.bind_output("index", index)
            body = ctx.emit_branch("loop", level + 1)
        lines.extend(body or [ctx.line("-- loop body", level + 1)])

        lines.append(ctx.line("end"))
        lines.extend(ctx.emit_branch("completed", level))
        return lines

    def evaluate_value(self, ctx):
        return ctx.bound_output("index")


DEFAULT_BRANCHES = ("a", "b", "c")


def _sequence_pins(node, graph) -> List[PinConfig]:
    branches = node.get("branches")
    ids = []
    if isinstance(branches, list):
        for entry in branches:
            branch_id = entry.get("id") if isinstance(entry, dict) else entry
            if isinstance(branch_id, str) and branch_id.strip() and branch_id.strip() not in ids:
                ids.append(branch_id.strip())
    if not ids:
        ids = list(DEFAULT_BRANCHES)
    return [exec_out(branch_id, branch_id.upper()) for branch_id in ids]


@MODULES.register(NodeDefinition(
    id="sequence",
    title="Sequence",
    category="Logic",
    description="Execute connected branches sequentially.",
    search_tags=("sequence", "flow", "order", "multi"),
    inputs=(exec_in(),),
    instance_pins=_sequence_pins,
))
class Sequence(NodeBehavior):
    def emit_exec(self, ctx):
        lines = []
        _, outputs = ctx.graph.pins_of(ctx.node_id)
        for pin in outputs:
            lines.append(ctx.line(f"-- sequence {pin.label.lower()}"))
            lines.extend(ctx.emit_branch(pin.id))
        return lines
