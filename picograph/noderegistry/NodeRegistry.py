"""
Node Catalogue
==============
An explicit, immutable mapping ``definitionId → NodeModule``.

Catalogues are plain objects built from a module list and handed to the
compiler; nothing registers itself globally, so two catalogues (or two
compiles sharing one) never see each other's state.

    catalogue = NodeCatalogue(NODE_MODULES)
    catalogue.require("graphics_circ") → NodeModule
    catalogue.search("circle")         → [NodeDefinition, ...] best match first
    catalogue.create_node("graphics_circ", "n1") → NodeInstance with property defaults
"""

from __future__ import annotations

import logging
import math
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from picograph.core.GraphPrimitives import NodeInstance
from picograph.core.NodeModule import NodeDefinition, NodeModule
from picograph.errors import UnknownNodeDefinition

logger = logging.getLogger(__name__)


# ── Fuzzy search ──────────────────────────────────────────────────────────────

# Lower weight ranks the field higher.
_TITLE_WEIGHT = 0.8
_FIELD_WEIGHT = 1.0


def fuzzy_score(query: str, candidate: str) -> float:
    """
    Subsequence distance of *query* inside *candidate*.

    Counts the characters skipped before, between and after the matched
    characters. ``math.inf`` when *query* is not a subsequence.
    """
    if not candidate:
        return math.inf
    if not query:
        return 0

    q_index = 0
    score = 0
    last_match = -1
    for c_index, ch in enumerate(candidate):
        if ch != query[q_index]:
            continue
        score += c_index if last_match == -1 else c_index - last_match - 1
        last_match = c_index
        q_index += 1
        if q_index == len(query):
            break

    if q_index != len(query):
        return math.inf
    return score + len(candidate) - last_match - 1


def _search_fields(definition: NodeDefinition) -> List[Tuple[str, float]]:
    fields = [(definition.title, _TITLE_WEIGHT), (definition.category, _FIELD_WEIGHT)]
    if definition.description:
        fields.append((definition.description, _FIELD_WEIGHT))
    fields.extend((tag, _FIELD_WEIGHT) for tag in definition.search_tags)
    return [(text.lower(), weight) for text, weight in fields if text and text.strip()]


def score_definition(definition: NodeDefinition, query: str) -> float:
    best = math.inf
    for text, weight in _search_fields(definition):
        weighted = fuzzy_score(query, text) * weight
        if weighted < best:
            best = weighted
        if best == 0:
            break
    return best


# ── Catalogue ─────────────────────────────────────────────────────────────────

class NodeCatalogue:
    def __init__(self, modules: Iterable[NodeModule]):
        entries: Dict[str, NodeModule] = {}
        for module in modules:
            if module.id in entries:
                raise ValueError(f"Node definition '{module.id}' is registered twice")
            entries[module.id] = module
        self._modules: Mapping[str, NodeModule] = MappingProxyType(entries)
        logger.debug("catalogue: %d node definitions", len(entries))

    def __contains__(self, definition_id: str) -> bool:
        return definition_id in self._modules

    def __iter__(self) -> Iterator[NodeModule]:
        return iter(self._modules.values())

    def __len__(self) -> int:
        return len(self._modules)

    def get(self, definition_id: str) -> Optional[NodeModule]:
        return self._modules.get(definition_id)

    def require(self, definition_id: str, node_id: Optional[str] = None) -> NodeModule:
        module = self._modules.get(definition_id)
        if module is None:
            raise UnknownNodeDefinition(definition_id, node_id)
        return module

    def list(self) -> List[NodeDefinition]:
        return [module.definition for module in self._modules.values()]

    def search(self, query: Optional[str]) -> List[NodeDefinition]:
        """Palette search: every definition for an empty query, else fuzzy matches."""
        normalized = (query or "").strip().lower()
        if not normalized:
            return sorted(self.list(), key=lambda d: d.title.lower())

        ranked = []
        for definition in self.list():
            score = score_definition(definition, normalized)
            if math.isfinite(score):
                ranked.append((score, definition.title.lower(), definition))
        ranked.sort(key=lambda entry: (entry[0], entry[1]))
        return [definition for _, _, definition in ranked]

    def create_node(
        self,
        definition_id: str,
        node_id: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> NodeInstance:
        module = self.require(definition_id, node_id)
        merged = module.definition.default_properties()
        merged.update(properties or {})
        return NodeInstance(id=node_id, definition_id=definition_id, properties=merged)

    def entry_modules(self) -> List[NodeModule]:
        return [m for m in self._modules.values() if m.behavior is not None and m.behavior.is_entry_point]

    def __repr__(self):
        return f"NodeCatalogue({len(self._modules)} definitions)"


__all__ = ["NodeCatalogue", "fuzzy_score", "score_definition"]
