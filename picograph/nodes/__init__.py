"""
Reference node library.

    from picograph.nodes import default_catalogue

    catalogue = default_catalogue()     # fresh NodeCatalogue per call
"""

from __future__ import annotations

from typing import List

from picograph.core.NodeModule import NodeModule
from picograph.noderegistry.NodeRegistry import NodeCatalogue

from . import coroutines, events, flow, graphics, hardware, values, variables

NODE_MODULES: List[NodeModule] = [
    *events.MODULES,
    *flow.MODULES,
    *variables.MODULES,
    *values.MODULES,
    *graphics.MODULES,
    *hardware.MODULES,
    *coroutines.MODULES,
]


def default_catalogue() -> NodeCatalogue:
    return NodeCatalogue(NODE_MODULES)


__all__ = ["NODE_MODULES", "default_catalogue"]
