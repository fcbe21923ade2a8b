"""
Per-compile symbol table
========================
Maps ``(node_id, output_pin_id) → Lua identifier`` for two-phase nodes,
whose outputs are bound to locals while their statement is emitted and read
back by name afterwards.

Scopes mirror Lua block nesting: a binding made inside an ``if`` body or a
loop body disappears when that block closes, so a later reader gets a
DanglingValueReference instead of an out-of-scope local.

Hidden temporaries are named ``__pg_<node>_<label>``; when two different
owners sanitize to the same name the later one gets a numeric suffix.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

from .lua import hidden_identifier

logger = logging.getLogger(__name__)

Key = Tuple[str, str]


class SymbolTable:
    def __init__(self):
        self._scopes: List[Dict[Key, str]] = [{}]
        # identifier → (owner node id, label)
        self._owners: Dict[str, Key] = {}
        self._issued: Dict[Key, str] = {}

    # ── Scopes ───────────────────────────────────────────────────────────────

    @property
    def depth(self) -> int:
        return len(self._scopes)

    def push_scope(self) -> None:
        self._scopes.append({})

    def pop_scope(self) -> None:
        if len(self._scopes) == 1:
            raise RuntimeError("can not pop the root scope")
        self._scopes.pop()

    @contextmanager
    def scope(self) -> Iterator["SymbolTable"]:
        self.push_scope()
        try:
            yield self
        finally:
            self.pop_scope()

    # ── Bindings ─────────────────────────────────────────────────────────────

    def bind(self, node_id: str, pin_id: str, identifier: str) -> str:
        self._scopes[-1][(node_id, pin_id)] = identifier
        logger.debug("symbols: %s.%s -> %s (depth %d)", node_id, pin_id, identifier, self.depth)
        return identifier

    def lookup(self, node_id: str, pin_id: str) -> Optional[str]:
        for scope in reversed(self._scopes):
            identifier = scope.get((node_id, pin_id))
            if identifier is not None:
                return identifier
        return None

    # ── Hidden temporaries ───────────────────────────────────────────────────

    def temp(self, node_id: str, label: str) -> str:
        """Collision-free hidden identifier, stable per (node, label)."""
        key = (node_id, label)
        if key in self._issued:
            return self._issued[key]

        base = hidden_identifier(node_id, label)
        candidate = base
        counter = 2
        while candidate in self._owners:
            candidate = f"{base}_{counter}"
            counter += 1

        self._owners[candidate] = key
        self._issued[key] = candidate
        return candidate


__all__ = ["SymbolTable"]
