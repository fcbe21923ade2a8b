"""
Variable nodes.

``get_var`` / ``set_var`` address workspace globals (declared in the
preamble) by ``variableId``, falling back to the ``name`` property.
The local variants declare and read ``local`` names on the current path.
"""

from __future__ import annotations

from picograph.compiler.lua import default_literal_for_kind
from picograph.core.NodeModule import (
    ModuleList,
    NodeBehavior,
    NodeDefinition,
    PropertySchema,
    exec_in,
    exec_out,
    value_in,
    value_out,
)
from picograph.core.Types import PinKind

MODULES = ModuleList()

LOCAL_TYPES = ("number", "string", "boolean", "table")


@MODULES.register(NodeDefinition(
    id="set_var",
    title="Set Variable",
    category="Logic",
    description="Assign a value to a variable in the current scope.",
    search_tags=("set", "assign", "variable", "write"),
    inputs=(exec_in(), value_in("value", PinKind.ANY, name="Value")),
    outputs=(exec_out(),),
    properties=(
        PropertySchema("variableId", "Variable", "string", ""),
        PropertySchema("name", "Variable Name", "string", "score"),
    ),
))
class SetVariable(NodeBehavior):
    def emit_exec(self, ctx):
        value = ctx.input_or("value", "nil")
        return [ctx.line(f"{ctx.variable_name()} = {value}"), *ctx.emit_next_exec("exec_out")]


@MODULES.register(NodeDefinition(
    id="get_var",
    title="Get Variable",
    category="Logic",
    description="Expose the current value of a variable.",
    search_tags=("get", "read", "variable", "access"),
    outputs=(value_out("value", PinKind.ANY, name="Value"),),
    properties=(
        PropertySchema("variableId", "Variable", "string", ""),
        PropertySchema("name", "Variable Name", "string", "score"),
    ),
))
class GetVariable(NodeBehavior):
    def evaluate_value(self, ctx):
        return ctx.variable_name()


@MODULES.register(NodeDefinition(
    id="set_local_var",
    title="Set Local",
    category="Logic",
    description="Declare or assign a local variable with an inline literal.",
    search_tags=("local", "set", "assign", "variable"),
    inputs=(
        exec_in(),
        value_in("value", PinKind.ANY, name="Value", description="Optional override for the inline literal"),
    ),
    outputs=(exec_out(),),
    properties=(
        PropertySchema("name", "Name", "string", "localVar"),
        PropertySchema("variableType", "Type", "enum", "number", options=LOCAL_TYPES),
        PropertySchema("value", "Value", "string", None),
    ),
))
class SetLocalVariable(NodeBehavior):
    def emit_exec(self, ctx):
        name = ctx.sanitize_identifier(ctx.property("name", "localVar"))
        kind = ctx.property("variableType", "number")
        if ctx.is_connected("value"):
            value = ctx.input("value")
        else:
            inline = ctx.property("value")
            if inline is None or inline == "":
                value = default_literal_for_kind(kind)
            else:
                value = ctx.literal(kind, inline, "value")
        return [ctx.line(f"local {name} = {value}"), *ctx.emit_next_exec("exec_out")]


@MODULES.register(NodeDefinition(
    id="get_local_var",
    title="Get Local",
    category="Logic",
    description="Access a local variable declared earlier in the flow.",
    search_tags=("local", "get", "variable", "read"),
    outputs=(value_out("value", PinKind.ANY, name="Value"),),
    properties=(PropertySchema("name", "Name", "string", "localVar"),),
))
class GetLocalVariable(NodeBehavior):
    def evaluate_value(self, ctx):
        return ctx.sanitize_identifier(ctx.property("name", "localVar"))
