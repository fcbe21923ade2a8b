"""
Emission contexts
=================
``CompilationContext`` is the per-compile state (graph snapshot, settings,
symbol table, visit counter, workspace variable and custom-event lookups).

Node behaviors never see it directly. Each hook receives a thin per-node
view bound to the node being emitted:

    ExecContext   handed to emit_exec       statements, branches, bindings
    ValueContext  handed to evaluate_value  expressions only

Both resolve inputs through the same fallback chain:

    connection  →  inline property "pin:<id>"  →  pin default  →  OMIT
                                                  (MissingRequiredInput when
                                                   the pin is required)
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Union,
)

from picograph.config import CompilerSettings
from picograph.core.GraphPrimitives import Connection, Graph, NodeInstance
from picograph.core.NodeModule import NodeDefinition, PinConfig
from picograph.core.Types import OMIT, Omitted, PinKind
from picograph.errors import (
    DanglingValueReference,
    GraphTooComplex,
    InvalidPropertyValue,
    MissingRequiredInput,
)

from .lua import (
    format_literal,
    reconstruct_arguments,
    sanitize_identifier,
    sanitize_operator,
)
from .symbols import SymbolTable

if TYPE_CHECKING:
    from .emitter import LuaEmitter

InputValue = Union[str, Omitted]

INLINE_PREFIX = "pin:"


def inline_property_key(pin_id: str) -> str:
    return f"{INLINE_PREFIX}{pin_id}"


# ── Custom events ─────────────────────────────────────────────────────────────

CUSTOM_EVENT_KINDS = (PinKind.ANY, PinKind.NUMBER, PinKind.STRING, PinKind.BOOLEAN)


@dataclass(frozen=True)
class CustomEventParameter:
    id: str
    name: str
    lua_name: str
    kind: PinKind = PinKind.ANY
    optional: bool = False

    @property
    def output_pin_id(self) -> str:
        return f"param_{self.id}"

    @property
    def input_pin_id(self) -> str:
        return f"arg_{self.id}"


def parse_custom_event_parameters(raw: Any) -> List[CustomEventParameter]:
    """Normalise the ``parameters`` property of a custom event node."""
    if not isinstance(raw, (list, tuple)):
        return []

    params: List[CustomEventParameter] = []
    used = set()
    for index, entry in enumerate(raw):
        entry = entry if isinstance(entry, dict) else {}
        name = str(entry.get("name") or "").strip() or f"param{index + 1}"

        base = sanitize_identifier(name)
        lua_name = base
        suffix = 2
        while lua_name in used:
            lua_name = f"{base}_{suffix}"
            suffix += 1
        used.add(lua_name)

        param_id = str(entry.get("id") or "").strip() or f"param_{index + 1:02d}"
        kind = PinKind.parse(entry.get("type", "any"))
        if kind not in CUSTOM_EVENT_KINDS:
            kind = PinKind.ANY
        params.append(
            CustomEventParameter(param_id, name, lua_name, kind, bool(entry.get("optional")))
        )
    return params


@dataclass(frozen=True)
class CustomEventSignature:
    node_id: str
    display_name: str
    function_name: str
    parameters: List[CustomEventParameter] = field(default_factory=list)

    @property
    def parameter_list(self) -> str:
        return ", ".join(p.lua_name for p in self.parameters)


# ── Per-compile state ─────────────────────────────────────────────────────────

@dataclass
class CompilationContext:
    graph: Graph
    settings: CompilerSettings = field(default_factory=CompilerSettings)
    symbols: SymbolTable = field(default_factory=SymbolTable)
    variable_names: Dict[str, str] = field(default_factory=dict)
    custom_events: Dict[str, CustomEventSignature] = field(default_factory=dict)
    steps: int = 0

    def indent(self, level: int) -> str:
        return self.settings.indent_unit * max(0, level)

    def tick(self, node_id: str) -> None:
        self.steps += 1
        if self.steps > self.settings.max_steps:
            raise GraphTooComplex("max_steps", self.settings.max_steps, node_id)

    def check_depth(self, depth: int, node_id: str) -> None:
        if depth > self.settings.max_depth:
            raise GraphTooComplex("max_depth", self.settings.max_depth, node_id)


# ── Node views ────────────────────────────────────────────────────────────────

class NodeContext:
    """Shared helpers for exec and value hooks."""

    def __init__(self, emitter: "LuaEmitter", node_id: str, value_path: FrozenSet[str]):
        self.emitter = emitter
        self.node_id = node_id
        self.value_path = value_path

    @property
    def compilation(self) -> CompilationContext:
        return self.emitter.compilation

    @property
    def graph(self) -> Graph:
        return self.emitter.compilation.graph

    @property
    def node(self) -> NodeInstance:
        return self.graph.nodes[self.node_id]

    @property
    def definition(self) -> NodeDefinition:
        return self.graph.definition_of(self.node_id)

    @property
    def properties(self) -> Dict[str, Any]:
        return self.node.properties

    # ── Properties and literals ──────────────────────────────────────────────

    def property(self, key: str, default: Any = None) -> Any:
        schema = self.definition.get_property(key)
        value = self.node.properties.get(key)
        if value is None and schema is not None:
            value = schema.default_value
        if schema is not None:
            schema.validate(value, self.node_id)
        return default if value is None else value

    def literal(self, kind: Union[PinKind, str], value: Any, key: str = "value") -> str:
        try:
            return format_literal(kind, value, key)
        except InvalidPropertyValue as exc:
            if exc.node_id is not None:
                raise
            reason = f"not a valid {PinKind.parse(kind).value}"
            raise InvalidPropertyValue(self.node_id, exc.key, exc.value, reason) from exc

    def sanitize_identifier(self, raw: Any) -> str:
        return sanitize_identifier(raw)

    def sanitize_operator(self, raw: Any) -> str:
        return sanitize_operator(raw, self.node_id)

    # ── Inputs ───────────────────────────────────────────────────────────────

    def find_pin(self, pin_id: str) -> Optional[PinConfig]:
        return self.graph.find_pin(self.node_id, pin_id)

    def is_connected(self, pin_id: str) -> bool:
        return self.graph.incoming(self.node_id, pin_id) is not None

    def resolve_value_input(self, pin_id: str, fallback: InputValue) -> InputValue:
        return self.emitter.resolve_value_input(self, pin_id, fallback)

    def input(self, pin_id: str) -> InputValue:
        """Connection, else inline value, else pin default, else OMIT."""
        if self.is_connected(pin_id):
            return self.resolve_value_input(pin_id, OMIT)

        pin = self.find_pin(pin_id)
        if pin is None:
            raise ValueError(f"Node definition '{self.node.definition_id}' has no pin '{pin_id}'")

        key = inline_property_key(pin_id)
        inline = self.node.properties.get(key)
        if inline is not None and not (inline == "" and pin.kind is not PinKind.STRING):
            return self.literal(pin.kind, inline, key)

        if pin.has_default:
            return self.literal(pin.kind, pin.default_value, pin_id)

        if pin.required:
            raise MissingRequiredInput(self.node_id, pin_id)
        return OMIT

    def input_or(self, pin_id: str, text: str) -> str:
        value = self.input(pin_id)
        return text if value is OMIT else value

    def call_arguments(
        self,
        pin_ids: Sequence[str],
        placeholders: Sequence[Optional[str]],
    ) -> List[str]:
        return reconstruct_arguments([self.input(pin_id) for pin_id in pin_ids], placeholders)

    # ── Workspace lookups ────────────────────────────────────────────────────

    def variable_name(self) -> str:
        """Global name for get_var / set_var: by variableId, else by name."""
        variable_id = self.node.properties.get("variableId")
        if isinstance(variable_id, str) and variable_id in self.compilation.variable_names:
            return self.compilation.variable_names[variable_id]
        return sanitize_identifier(self.node.properties.get("name") or "var")

    def custom_event(self, node_id: Any) -> Optional[CustomEventSignature]:
        if not isinstance(node_id, str):
            return None
        return self.compilation.custom_events.get(node_id)


class ExecContext(NodeContext):
    def __init__(
        self,
        emitter: "LuaEmitter",
        node_id: str,
        indent_level: int,
        path: FrozenSet[str],
    ):
        super().__init__(emitter, node_id, frozenset())
        self.indent_level = indent_level
        self.path = path

    def indent(self, level: Optional[int] = None) -> str:
        return self.compilation.indent(self.indent_level if level is None else level)

    def line(self, text: str, level: Optional[int] = None) -> str:
        return f"{self.indent(level)}{text}"

    # ── Exec chain ───────────────────────────────────────────────────────────

    def find_exec_targets(self, pin_id: str) -> List[Connection]:
        return self.emitter.find_exec_targets(self.node_id, pin_id)

    def emit_next_exec(self, pin_id: str = "exec_out") -> List[str]:
        return self.emitter.emit_next_exec(self, pin_id)

    def emit_branch(
        self,
        pin_id: str,
        indent_level: Optional[int] = None,
        path: Optional[Iterable[str]] = None,
    ) -> List[str]:
        return self.emitter.emit_branch(self, pin_id, indent_level, path)

    def emit_exec_chain(self, node_id: str, indent_level: int, path: Iterable[str]) -> List[str]:
        return self.emitter.emit_exec_chain(node_id, indent_level, frozenset(path))

    # ── Two-phase bindings ───────────────────────────────────────────────────

    def temp(self, label: str) -> str:
        return self.compilation.symbols.temp(self.node_id, label)

    def bind_output(self, pin_id: str, identifier: Optional[str] = None) -> str:
        """Bind *pin_id* to a Lua name for readers later on this exec path."""
        name = identifier or self.temp(pin_id)
        return self.compilation.symbols.bind(self.node_id, pin_id, name)

    @contextmanager
    def scope(self) -> Iterator[SymbolTable]:
        with self.compilation.symbols.scope() as symbols:
            yield symbols


class ValueContext(NodeContext):
    def __init__(
        self,
        emitter: "LuaEmitter",
        node_id: str,
        pin_id: str,
        value_path: FrozenSet[str],
        reader_id: Optional[str] = None,
    ):
        super().__init__(emitter, node_id, value_path)
        self.pin_id = pin_id
        self.reader_id = reader_id

    def bound_output(self, pin_id: Optional[str] = None) -> str:
        """Identifier bound by this node's own emit_exec, if still in scope."""
        pin_id = pin_id or self.pin_id
        name = self.compilation.symbols.lookup(self.node_id, pin_id)
        if name is None:
            raise DanglingValueReference(self.node_id, pin_id, self.reader_id)
        return name


__all__ = [
    "CompilationContext",
    "NodeContext",
    "ExecContext",
    "ValueContext",
    "CustomEventParameter",
    "CustomEventSignature",
    "parse_custom_event_parameters",
    "inline_property_key",
]
