"""
picograph compiler - node graph to PICO-8 Lua
=============================================
Compiles a node graph into a cartridge's Lua source.

Pipeline:
    graph JSON  →  [schema.validate]       →  checked dict
    dict        →  [Graph.from_dict]       →  Graph (catalogue-bound)
    Graph       →  [assembler.assemble]    →  Lua source str
                      └─ [emitter.LuaEmitter] per entry point

Public API
----------
    from picograph.compiler import compile_graph, compile_json

    source = compile_graph(graph, settings=CompilerSettings(use_60fps=True))
    source = compile_json(json.load(fh))

The compiler performs no I/O and keeps no state between calls.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional, Sequence

from picograph.config import CompilerSettings
from picograph.core.GraphPrimitives import Graph
from picograph.errors import CompileError, GraphTooComplex

from .assembler import WorkspaceVariable, assemble

if TYPE_CHECKING:
    from picograph.noderegistry.NodeRegistry import NodeCatalogue

logger = logging.getLogger(__name__)

# Python frames one exec step or value lookup can hold on the stack
FRAMES_PER_NODE = 8


@contextmanager
def _stack_headroom(node_count: int) -> Iterator[None]:
    """Raise the recursion limit so every node can sit on the walk at once."""
    previous = sys.getrecursionlimit()
    needed = previous + node_count * FRAMES_PER_NODE
    sys.setrecursionlimit(needed)
    logger.debug("recursion limit %d -> %d for %d nodes", previous, needed, node_count)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


def compile_graph(
    graph: Graph,
    settings: Optional[CompilerSettings] = None,
    variables: Sequence[WorkspaceVariable] = (),
) -> str:
    """
    Compile a Graph into Lua source.

    Args:
        graph:      Graph snapshot; not modified.
        settings:   Compiler settings (defaults when omitted).
        variables:  Workspace globals declared in the preamble.

    Returns:
        Complete Lua source as a single string.

    Raises:
        CompileError: any compilation failure; no partial output.
    """
    settings = settings or CompilerSettings()
    try:
        with _stack_headroom(len(graph)):
            return assemble(graph, settings, variables)
    except RecursionError:
        raise GraphTooComplex("max_depth", settings.max_depth) from None


def compile_json(
    data: Dict[str, Any],
    catalogue: Optional["NodeCatalogue"] = None,
    settings: Optional[CompilerSettings] = None,
    *,
    strict: bool = False,
) -> str:
    """
    Validate, load and compile a serialised graph.

    ``settings.use60Fps`` in the document turns on the 60fps remap; it can
    not turn off a remap requested by *settings*.
    """
    from picograph.nodes import default_catalogue

    from .schema import validate

    catalogue = catalogue or default_catalogue()
    validate(data, catalogue=catalogue, strict=strict)

    settings = settings or CompilerSettings()
    if (data.get("settings") or {}).get("use60Fps"):
        settings = settings.with_overrides(use_60fps=True)

    graph = Graph.from_dict(data, catalogue)
    variables = [WorkspaceVariable.from_dict(v, i) for i, v in enumerate(data.get("variables") or [])]
    logger.debug("compile_json: %r, %d variable(s)", graph, len(variables))
    return compile_graph(graph, settings, variables)


__all__ = ["compile_graph", "compile_json", "CompileError"]
