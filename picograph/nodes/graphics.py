"""
Graphics nodes. Each emits one PICO-8 draw call with trailing optional
arguments dropped; an omitted slot before a provided one takes its
placeholder (``spr`` size ``1``, flips ``false``).
"""

from __future__ import annotations

from typing import Optional, Sequence

from picograph.compiler.lua import call_expression
from picograph.core.NodeModule import (
    ModuleList,
    NodeBehavior,
    NodeDefinition,
    exec_in,
    exec_out,
    value_in,
)
from picograph.core.Types import PinKind

MODULES = ModuleList()


class DrawCall(NodeBehavior):
    """Emit ``<function>(args)`` from the pins listed in ``slots``."""

    function = ""
    slots: Sequence[str] = ()
    placeholders: Sequence[Optional[str]] = ()

    def emit_exec(self, ctx):
        placeholders = self.placeholders or [None] * len(self.slots)
        args = ctx.call_arguments(self.slots, placeholders)
        return [ctx.line(call_expression(self.function, args)), *ctx.emit_next_exec("exec_out")]


def _number(pin_id: str, name: str, default=None, description: str = ""):
    return value_in(pin_id, PinKind.NUMBER, name=name, default_value=default, description=description)


@MODULES.register(NodeDefinition(
    id="graphics_cls",
    title="Clear Screen",
    category="Graphics",
    description="Clear the screen, optionally to a colour.",
    search_tags=("cls", "clear", "screen"),
    inputs=(exec_in(), _number("color", "Color")),
    outputs=(exec_out(),),
))
class Cls(DrawCall):
    function = "cls"
    slots = ("color",)


@MODULES.register(NodeDefinition(
    id="graphics_circ",
    title="Draw Circle",
    category="Graphics",
    description="Render an outlined circle at the specified position.",
    search_tags=("circle", "outline", "shape", "draw"),
    inputs=(
        exec_in(),
        _number("x", "X", 0),
        _number("y", "Y", 0),
        _number("radius", "Radius", 4),
        _number("color", "Color"),
    ),
    outputs=(exec_out(),),
))
class Circ(DrawCall):
    function = "circ"
    slots = ("x", "y", "radius", "color")


@MODULES.register(NodeDefinition(
    id="graphics_circfill",
    title="Draw Filled Circle",
    category="Graphics",
    description="Render a filled circle at the specified position.",
    search_tags=("circle", "filled", "shape", "draw"),
    inputs=(
        exec_in(),
        _number("x", "X", 0),
        _number("y", "Y", 0),
        _number("radius", "Radius", 4),
        _number("color", "Color"),
    ),
    outputs=(exec_out(),),
))
class Circfill(DrawCall):
    function = "circfill"
    slots = ("x", "y", "radius", "color")


@MODULES.register(NodeDefinition(
    id="graphics_rectfill",
    title="Draw Filled Rectangle",
    category="Graphics",
    description="Render a filled rectangle between two corners.",
    search_tags=("rect", "rectangle", "filled", "draw"),
    inputs=(
        exec_in(),
        _number("x0", "X0", 0),
        _number("y0", "Y0", 0),
        _number("x1", "X1", 8),
        _number("y1", "Y1", 8),
        _number("color", "Color"),
    ),
    outputs=(exec_out(),),
))
class Rectfill(DrawCall):
    function = "rectfill"
    slots = ("x0", "y0", "x1", "y1", "color")


@MODULES.register(NodeDefinition(
    id="graphics_pset",
    title="Set Pixel",
    category="Graphics",
    description="Set the colour of a single pixel.",
    search_tags=("pset", "pixel", "point", "draw"),
    inputs=(exec_in(), _number("x", "X", 0), _number("y", "Y", 0), _number("color", "Color")),
    outputs=(exec_out(),),
))
class Pset(DrawCall):
    function = "pset"
    slots = ("x", "y", "color")


@MODULES.register(NodeDefinition(
    id="graphics_spr",
    title="Draw Sprite",
    category="Graphics",
    description="Blit one or more sprites at the given screen position.",
    search_tags=("spr", "sprite", "draw", "blit"),
    inputs=(
        exec_in(),
        _number("sprite", "Sprite", 0),
        _number("x", "X", 0),
        _number("y", "Y", 0),
        _number("w", "Width"),
        _number("h", "Height"),
        value_in("flip_x", PinKind.BOOLEAN, name="Flip X"),
        value_in("flip_y", PinKind.BOOLEAN, name="Flip Y"),
    ),
    outputs=(exec_out(),),
))
class Spr(DrawCall):
    function = "spr"
    slots = ("sprite", "x", "y", "w", "h", "flip_x", "flip_y")
    placeholders = ("0", "0", "0", "1", "1", "false", "false")


@MODULES.register(NodeDefinition(
    id="print",
    title="Print",
    category="PICO-8",
    description="Render text on screen using the PICO-8 print command.",
    search_tags=("print", "text", "output", "debug"),
    inputs=(
        exec_in(),
        value_in("msg", PinKind.STRING, name="Text", default_value="hello"),
        _number("x", "X", 0),
        _number("y", "Y", 0),
        _number("color", "Color", 7),
    ),
    outputs=(exec_out(),),
))
class Print(DrawCall):
    function = "print"
    slots = ("msg", "x", "y", "color")
