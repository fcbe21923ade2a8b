"""
Input and audio nodes.
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
    id="input_btn",
    title="Button State",
    category="Input",
    description="Read the current pressed state for a controller button.",
    search_tags=("btn", "input", "button", "press"),
    inputs=(
        value_in("button", PinKind.NUMBER, name="Button", description="Button index or glyph code"),
        value_in("player", PinKind.NUMBER, name="Player", description="Optional player index"),
    ),
    outputs=(value_out("value", PinKind.BOOLEAN, name="Pressed"),),
))
class Btn(NodeBehavior):
    def evaluate_value(self, ctx):
        args = ctx.call_arguments(("button", "player"), ("nil", "nil"))
        return call_expression("btn", args)


@MODULES.register(NodeDefinition(
    id="audio_sfx",
    title="Play SFX",
    category="Audio",
    description="Trigger a sound effect, control looping, or stop playback via SFX().",
    search_tags=("sfx", "audio", "sound", "effect"),
    inputs=(
        exec_in(),
        value_in("id", PinKind.NUMBER, name="SFX", default_value=0, description="Sound effect slot or command"),
        value_in("channel", PinKind.NUMBER, name="Channel", description="Playback channel (-1 auto)"),
        value_in("offset", PinKind.NUMBER, name="Offset", description="Note offset"),
        value_in("length", PinKind.NUMBER, name="Length", description="Number of notes to play"),
    ),
    outputs=(exec_out(),),
))
class Sfx(NodeBehavior):
    def emit_exec(self, ctx):
        args = ctx.call_arguments(("id", "channel", "offset", "length"), ("0", "nil", "nil", "nil"))
        return [ctx.line(call_expression("sfx", args)), *ctx.emit_next_exec("exec_out")]
