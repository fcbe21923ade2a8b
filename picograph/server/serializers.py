"""
Definition serializer: NodeDefinition → JSON-safe dict for the editor palette.

    SerializedPin keys:        id, name, kind, direction, defaultValue, description, required
    SerializedProperty keys:   key, label, type, defaultValue, options, placeholder
    SerializedDefinition keys: id, title, category, description, searchTags, unique,
                               entryPoint, inputs, outputs, properties
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from picograph.core.NodeModule import NodeBehavior, NodeDefinition, PinConfig, PropertySchema


def _serialize_pin(pin: PinConfig) -> Dict[str, Any]:
    return {
        "id": pin.id,
        "name": pin.label,
        "kind": pin.kind.value,
        "direction": pin.direction.value,
        "defaultValue": pin.default_value,
        "description": pin.description,
        "required": pin.required,
    }


def _serialize_property(schema: PropertySchema) -> Dict[str, Any]:
    return {
        "key": schema.key,
        "label": schema.label,
        "type": schema.type,
        "defaultValue": schema.default_value,
        "options": list(schema.options),
        "placeholder": schema.placeholder,
    }


def serialize_definition(
    definition: NodeDefinition,
    behavior: Optional[NodeBehavior] = None,
) -> Dict[str, Any]:
    return {
        "id": definition.id,
        "title": definition.title,
        "category": definition.category,
        "description": definition.description,
        "searchTags": list(definition.search_tags),
        "unique": definition.unique,
        "entryPoint": bool(behavior is not None and behavior.is_entry_point),
        "inputs": [_serialize_pin(p) for p in definition.inputs],
        "outputs": [_serialize_pin(p) for p in definition.outputs],
        "properties": [_serialize_property(p) for p in definition.properties],
    }
