"""
Lua Emitter
===========
Recursive descent over the graph: exec connections give statement order,
value connections give expressions.

    emit_entry(node)                      new function scope, indent 1
      └─ emit_exec_chain(node, level, path)
           └─ behavior.emit_exec(ExecContext)
                ├─ ctx.input / resolve_value_input
                │     └─ evaluate_value(producer, pin)
                │          pure producer     → behavior.evaluate_value(ValueContext)
                │          stateful producer → identifier bound in the symbol table
                ├─ ctx.emit_next_exec(pin)        same indent, same scope
                └─ ctx.emit_branch(pin, level)    nested scope when level is deeper

The exec ``path`` and the value ``value_path`` are frozensets threaded
through every call; finding the next node already on the path is a cycle.
The depth ceiling counts block nesting (the indent level) for statements
and expression nesting for values, so a long straight-line body is bounded
only by ``max_steps``.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, List, Optional

from picograph.core.GraphPrimitives import Connection
from picograph.core.Types import PinKind
from picograph.errors import CompileError, GraphCycleDetected

from .context import (
    CompilationContext,
    ExecContext,
    InputValue,
    NodeContext,
    ValueContext,
)

logger = logging.getLogger(__name__)


class LuaEmitter:
    def __init__(self, compilation: CompilationContext):
        self.compilation = compilation

    @property
    def graph(self):
        return self.compilation.graph

    # ── Exec walk ────────────────────────────────────────────────────────────

    def emit_entry(self, node_id: str, indent_level: int = 1) -> List[str]:
        with self.compilation.symbols.scope():
            return self.emit_exec_chain(node_id, indent_level, frozenset())

    def emit_exec_chain(self, node_id: str, indent_level: int, path: FrozenSet[str]) -> List[str]:
        if node_id in path:
            raise GraphCycleDetected(node_id, "exec")
        self.compilation.check_depth(indent_level, node_id)
        self.compilation.tick(node_id)

        module = self.graph.module_of(node_id)
        behavior = module.behavior
        if behavior is None or not behavior.has_exec:
            raise CompileError(
                f"Node '{node_id}' ({module.id}) can not be emitted as a statement", node_id
            )

        logger.debug("emit: %s (%s) at indent %d", node_id, module.id, indent_level)
        ctx = ExecContext(self, node_id, indent_level, path | {node_id})
        return list(behavior.emit_exec(ctx))

    def find_exec_targets(self, node_id: str, pin_id: str) -> List[Connection]:
        return [c for c in self.graph.outgoing(node_id, pin_id) if c.kind is PinKind.EXEC]

    def emit_next_exec(self, ctx: ExecContext, pin_id: str) -> List[str]:
        targets = self.find_exec_targets(ctx.node_id, pin_id)
        if not targets:
            return []
        return self.emit_exec_chain(targets[0].target_node_id, ctx.indent_level, ctx.path)

    def emit_branch(
        self,
        ctx: ExecContext,
        pin_id: str,
        indent_level: Optional[int] = None,
        path: Optional[Iterable[str]] = None,
    ) -> List[str]:
        level = ctx.indent_level if indent_level is None else indent_level
        branch_path = ctx.path if path is None else frozenset(path)

        targets = self.find_exec_targets(ctx.node_id, pin_id)
        if not targets:
            return []

        lines: List[str] = []
        if level > ctx.indent_level:
            with self.compilation.symbols.scope():
                for target in targets:
                    lines.extend(self.emit_exec_chain(target.target_node_id, level, branch_path))
        else:
            for target in targets:
                lines.extend(self.emit_exec_chain(target.target_node_id, level, branch_path))
        return lines

    # ── Value resolution ─────────────────────────────────────────────────────

    def resolve_value_input(self, reader: NodeContext, pin_id: str, fallback: InputValue) -> InputValue:
        conn = self.graph.incoming(reader.node_id, pin_id)
        if conn is None:
            return fallback
        return self.evaluate_value(conn.source_node_id, conn.source_pin_id, reader)

    def evaluate_value(self, node_id: str, pin_id: str, reader: NodeContext) -> str:
        if node_id in reader.value_path:
            raise GraphCycleDetected(node_id, "value")
        value_path = reader.value_path | {node_id}
        self.compilation.check_depth(len(value_path), node_id)
        self.compilation.tick(node_id)

        module = self.graph.module_of(node_id)
        behavior = module.behavior
        ctx = ValueContext(self, node_id, pin_id, value_path, reader_id=reader.node_id)

        if behavior is not None and behavior.has_value:
            return behavior.evaluate_value(ctx)
        if module.definition.has_exec_pins:
            # two-phase producer without its own hook: read the binding back
            return ctx.bound_output(pin_id)
        raise CompileError(f"Node '{node_id}' ({module.id}) does not produce a value", node_id, pin_id)


__all__ = ["LuaEmitter"]
