"""
Pure value nodes: literals, arithmetic, comparison and math built-ins.
"""

from __future__ import annotations

from picograph.core.NodeModule import (
    ModuleList,
    NodeBehavior,
    NodeDefinition,
    PropertySchema,
    value_in,
    value_out,
)
from picograph.core.Types import PinKind

MODULES = ModuleList()


# ── Literals ──────────────────────────────────────────────────────────────────

class Literal(NodeBehavior):
    kind = PinKind.ANY
    default = None

    def evaluate_value(self, ctx):
        return ctx.literal(self.kind, ctx.property("value", self.default), "value")


@MODULES.register(NodeDefinition(
    id="number_literal",
    title="Number",
    category="Values",
    description="Constant numeric literal.",
    search_tags=("number", "literal", "constant", "value"),
    outputs=(value_out("value", PinKind.NUMBER, name="Value"),),
    properties=(PropertySchema("value", "Number", "number", 0),),
))
class NumberLiteral(Literal):
    kind = PinKind.NUMBER
    default = 0


@MODULES.register(NodeDefinition(
    id="string_literal",
    title="String",
    category="Values",
    description="Constant string literal.",
    search_tags=("string", "text", "literal", "constant"),
    outputs=(value_out("value", PinKind.STRING, name="Value"),),
    properties=(PropertySchema("value", "Text", "multiline", ""),),
))
class StringLiteral(Literal):
    kind = PinKind.STRING
    default = ""


@MODULES.register(NodeDefinition(
    id="boolean_literal",
    title="Boolean",
    category="Values",
    description="Constant boolean literal.",
    search_tags=("boolean", "literal", "true", "false"),
    outputs=(value_out("value", PinKind.BOOLEAN, name="Value"),),
    properties=(PropertySchema("value", "Value", "boolean", True),),
))
class BooleanLiteral(Literal):
    kind = PinKind.BOOLEAN
    default = True


# ── Arithmetic / logic ────────────────────────────────────────────────────────

class BinaryOperator(NodeBehavior):
    operator = "+"
    identity = "0"

    def evaluate_value(self, ctx):
        a = ctx.input_or("a", self.identity)
        b = ctx.input_or("b", self.identity)
        return f"({a}) {self.operator} ({b})"


@MODULES.register(NodeDefinition(
    id="add_number",
    title="Add",
    category="Math",
    description="Add two numbers.",
    search_tags=("add", "plus", "sum", "math"),
    inputs=(value_in("a", PinKind.NUMBER, name="A"), value_in("b", PinKind.NUMBER, name="B")),
    outputs=(value_out("sum", PinKind.NUMBER, name="Sum"),),
))
class AddNumber(BinaryOperator):
    operator = "+"
    identity = "0"


@MODULES.register(NodeDefinition(
    id="multiply_number",
    title="Multiply",
    category="Math",
    description="Multiply two numbers.",
    search_tags=("multiply", "times", "product", "math"),
    inputs=(value_in("a", PinKind.NUMBER, name="A"), value_in("b", PinKind.NUMBER, name="B")),
    outputs=(value_out("product", PinKind.NUMBER, name="Product"),),
))
class MultiplyNumber(BinaryOperator):
    operator = "*"
    identity = "1"


COMPARE_OPERATORS = ("==", "!=", ">", "<", ">=", "<=")


@MODULES.register(NodeDefinition(
    id="compare",
    title="Compare",
    category="Logic",
    description="Compare two values with a selected operator.",
    search_tags=("compare", "logic", "condition", "branch"),
    inputs=(value_in("a", PinKind.ANY, name="A"), value_in("b", PinKind.ANY, name="B")),
    outputs=(value_out("res", PinKind.BOOLEAN, name="Result"),),
    properties=(PropertySchema("operator", "Operator", "enum", "==", options=COMPARE_OPERATORS),),
))
class Compare(NodeBehavior):
    def evaluate_value(self, ctx):
        operator = ctx.sanitize_operator(ctx.property("operator", "=="))
        a = ctx.input_or("a", "0")
        b = ctx.input_or("b", "0")
        return f"({a}) {operator} ({b})"


# ── Math built-ins ────────────────────────────────────────────────────────────

@MODULES.register(NodeDefinition(
    id="math_rnd",
    title="Random",
    category="Math",
    description="Random number from 0 up to (not including) the range.",
    search_tags=("rnd", "random", "math"),
    inputs=(value_in("value", PinKind.NUMBER, name="Range"),),
    outputs=(value_out("result", PinKind.NUMBER, name="Result"),),
))
class Rnd(NodeBehavior):
    def evaluate_value(self, ctx):
        return f"rnd({ctx.input_or('value', '1')})"


@MODULES.register(NodeDefinition(
    id="math_flr",
    title="Floor",
    category="Math",
    description="Round a number down to the nearest integer.",
    search_tags=("flr", "floor", "round", "math"),
    inputs=(value_in("value", PinKind.NUMBER, name="Value"),),
    outputs=(value_out("result", PinKind.NUMBER, name="Result"),),
))
class Flr(NodeBehavior):
    def evaluate_value(self, ctx):
        return f"flr({ctx.input_or('value', '0')})"
