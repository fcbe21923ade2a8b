"""
Node Module Contract
====================
Every catalogue entry pairs a static ``NodeDefinition`` (pins + inspector
schema) with an optional ``NodeBehavior`` holding the Lua emission hooks.

    NodeModule(definition, behavior)

      definition  ─ shared by every instance of the node type
      behavior    ─ emit_exec(ctx)       → list of Lua statement lines
                    evaluate_value(ctx)  → single Lua expression
                    is_entry_point / event_name for lifecycle roots

Adding a new node type
----------------------
1. Describe its pins and properties with a ``NodeDefinition``.
2. Subclass ``NodeBehavior`` and override the hooks it needs.
3. Add ``NodeModule(definition, MyBehavior())`` to a module list handed to
   ``NodeCatalogue``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    List,
    Optional,
    Sequence,
    Tuple,
)

from picograph.errors import InvalidPropertyValue

from .Types import NUMERIC_TEXT, PinDirection, PinKind

if TYPE_CHECKING:
    from picograph.compiler.context import ExecContext, ValueContext
    from .GraphPrimitives import Graph, NodeInstance


# ── Pins ──────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PinConfig:
    id: str
    direction: PinDirection
    kind: PinKind
    name: str = ""
    default_value: Any = None
    description: str = ""
    required: bool = False

    @property
    def is_exec(self) -> bool:
        return self.kind.is_exec

    @property
    def has_default(self) -> bool:
        return self.default_value is not None

    @property
    def label(self) -> str:
        return self.name or self.id


def exec_in(pin_id: str = "exec_in", name: str = "Exec") -> PinConfig:
    return PinConfig(pin_id, PinDirection.INPUT, PinKind.EXEC, name=name)


def exec_out(pin_id: str = "exec_out", name: str = "Exec") -> PinConfig:
    return PinConfig(pin_id, PinDirection.OUTPUT, PinKind.EXEC, name=name)


def value_in(pin_id: str, kind: PinKind = PinKind.ANY, **kwargs) -> PinConfig:
    return PinConfig(pin_id, PinDirection.INPUT, kind, **kwargs)


def value_out(pin_id: str, kind: PinKind = PinKind.ANY, **kwargs) -> PinConfig:
    return PinConfig(pin_id, PinDirection.OUTPUT, kind, **kwargs)


# ── Inspector properties ─────────────────────────────────────────────────────

PROPERTY_TYPES = frozenset({"string", "number", "boolean", "enum", "multiline", "table"})


@dataclass(frozen=True)
class PropertySchema:
    key: str
    label: str
    type: str = "string"
    default_value: Any = None
    options: Tuple[str, ...] = ()
    placeholder: str = ""

    def __post_init__(self):
        if self.type not in PROPERTY_TYPES:
            raise ValueError(f"Unknown property type '{self.type}' for property '{self.key}'")

    def validate(self, value: Any, node_id: str = "") -> Any:
        """Return *value* if it fits this schema, else raise InvalidPropertyValue."""
        if value is None:
            return value

        if self.type == "enum":
            if str(value) not in self.options:
                raise InvalidPropertyValue(
                    node_id, self.key, value,
                    f"expected one of {', '.join(self.options)}",
                )
        elif self.type == "number":
            if isinstance(value, bool) or not isinstance(value, (int, float, str)):
                raise InvalidPropertyValue(node_id, self.key, value, "expected a number")
            if isinstance(value, str) and not NUMERIC_TEXT.match(value.strip()):
                raise InvalidPropertyValue(node_id, self.key, value, "expected a number")
        elif self.type == "boolean":
            if not isinstance(value, bool) and str(value).lower() not in ("true", "false"):
                raise InvalidPropertyValue(node_id, self.key, value, "expected a boolean")
        elif self.type in ("string", "multiline"):
            if not isinstance(value, (str, int, float)):
                raise InvalidPropertyValue(node_id, self.key, value, "expected text")
        return value


# ── Definition ───────────────────────────────────────────────────────────────

InstancePinsHook = Callable[["NodeInstance", "Graph"], Sequence[PinConfig]]


@dataclass(frozen=True)
class NodeDefinition:
    id: str
    title: str
    category: str
    inputs: Tuple[PinConfig, ...] = ()
    outputs: Tuple[PinConfig, ...] = ()
    properties: Tuple[PropertySchema, ...] = ()
    search_tags: Tuple[str, ...] = ()
    description: str = ""
    unique: bool = False
    # Extra pins derived from instance properties (sequence branches,
    # custom-event parameters, call-site arguments).
    instance_pins: Optional[InstancePinsHook] = field(default=None, compare=False)

    def __post_init__(self):
        seen = set()
        for pin in self.inputs + self.outputs:
            if pin.id in seen:
                raise ValueError(f"Duplicate pin id '{pin.id}' on node definition '{self.id}'")
            seen.add(pin.id)
        for pin in self.inputs:
            if pin.direction is not PinDirection.INPUT:
                raise ValueError(f"Pin '{pin.id}' on '{self.id}' is listed as an input but is an output")
        for pin in self.outputs:
            if pin.direction is not PinDirection.OUTPUT:
                raise ValueError(f"Pin '{pin.id}' on '{self.id}' is listed as an output but is an input")

    def get_property(self, key: str) -> Optional[PropertySchema]:
        return next((p for p in self.properties if p.key == key), None)

    def default_properties(self) -> dict:
        return {schema.key: schema.default_value for schema in self.properties}

    @property
    def has_exec_pins(self) -> bool:
        return any(pin.is_exec for pin in self.inputs + self.outputs)


# ── Behavior ─────────────────────────────────────────────────────────────────

class NodeBehavior:
    """
    Base class for emission hooks. Override ``emit_exec`` for statement
    nodes, ``evaluate_value`` for expression nodes, or both for two-phase
    nodes whose data outputs are bound during their own exec emission.
    """

    is_entry_point: bool = False
    event_name: Optional[str] = None

    def emit_exec(self, ctx: "ExecContext") -> List[str]:
        raise NotImplementedError(f"{type(self).__name__} does not emit statements")

    def evaluate_value(self, ctx: "ValueContext") -> str:
        raise NotImplementedError(f"{type(self).__name__} does not produce values")

    @property
    def has_exec(self) -> bool:
        return type(self).emit_exec is not NodeBehavior.emit_exec

    @property
    def has_value(self) -> bool:
        return type(self).evaluate_value is not NodeBehavior.evaluate_value


@dataclass(frozen=True)
class NodeModule:
    definition: NodeDefinition
    behavior: Optional[NodeBehavior] = None

    @property
    def id(self) -> str:
        return self.definition.id


class ModuleList(list):
    """
    Ordered list of NodeModules with a class decorator for behaviors:

        MODULES = ModuleList()

        @MODULES.register(NodeDefinition(id="graphics_cls", ...))
        class Cls(NodeBehavior):
            ...
    """

    def register(self, definition: NodeDefinition):
        def decorator(behavior_cls):
            self.append(NodeModule(definition, behavior_cls()))
            return behavior_cls
        return decorator


__all__ = [
    "PinConfig",
    "PropertySchema",
    "NodeDefinition",
    "NodeBehavior",
    "NodeModule",
    "ModuleList",
    "exec_in",
    "exec_out",
    "value_in",
    "value_out",
]
