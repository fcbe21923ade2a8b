"""
Coroutine nodes.

``lua_coroutine_resume`` is two-phase: its statement binds the success flag
and first result to hidden locals, and readers of its outputs get those
names back.
"""

from __future__ import annotations

from picograph.compiler.lua import call_expression
from picograph.core.NodeModule import (
    ModuleList,
    NodeBehavior,
    NodeDefinition,
    exec_in,
    exec_out,
    value_in,
    value_out,
)
from picograph.core.Types import PinKind

MODULES = ModuleList()


@MODULES.register(NodeDefinition(
    id="lua_coroutine_create",
    title="Coroutine Create",
    category="Lua",
    description="Wrap a function in a new coroutine.",
    search_tags=("coroutine", "create", "cocreate", "lua"),
    inputs=(value_in("fn", PinKind.ANY, name="Function"),),
    outputs=(value_out("coroutine", PinKind.ANY, name="Coroutine"),),
))
class CoroutineCreate(NodeBehavior):
    def evaluate_value(self, ctx):
        return f"coroutine.create({ctx.input_or('fn', 'function() end')})"


@MODULES.register(NodeDefinition(
    id="lua_coroutine_resume",
    title="Coroutine Resume",
    category="Lua",
    description="Resume a coroutine and capture the success flag alongside the first returned value.",
    search_tags=("coroutine", "resume", "lua"),
    inputs=(
        exec_in(),
        value_in("coroutine", PinKind.ANY, name="Coroutine", required=True),
        value_in("arg1", PinKind.ANY, name="Arg 1", description="Optional first value passed to coroutine"),
        value_in("arg2", PinKind.ANY, name="Arg 2", description="Optional second value passed to coroutine"),
    ),
    outputs=(
        exec_out(),
        value_out("success", PinKind.BOOLEAN, name="Success"),
        value_out("result", PinKind.ANY, name="Result"),
    ),
))
class CoroutineResume(NodeBehavior):
    def emit_exec(self, ctx):
        args = [ctx.input("coroutine")]
        args.extend(ctx.call_arguments(("arg1", "arg2"), ("nil", "nil")))

        success = ctx.bind_output("success", ctx.temp("co_success"))
        result = ctx.bind_output("result", ctx.temp("co_result"))
        line = ctx.line(f"local {success}, {result} = {call_expression('coroutine.resume', args)}")
        return [line, *ctx.emit_next_exec("exec_out")]

    def evaluate_value(self, ctx):
        return ctx.bound_output()
