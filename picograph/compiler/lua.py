"""
Lua text utilities
==================
Pure helpers turning user text and inspector values into valid Lua:

    sanitize_identifier("Player Score")  → "player_score"
    sanitize_identifier("end")           → "end_"
    format_literal("string", 'say "hi"') → '"say \\"hi\\""'
    format_literal("number", 7.0)        → "7"
    reconstruct_arguments(["1", OMIT, "3"], ["_", "0", "_"]) → ["1", "0", "3"]

Nothing here touches the graph; the emitter and node behaviors call in.
"""

from __future__ import annotations

import math
import re
from typing import Any, List, Optional, Sequence, Union

from picograph.core.Types import NUMERIC_TEXT, OMIT, Omitted, PinKind
from picograph.errors import InvalidPropertyValue


# ── Identifiers ───────────────────────────────────────────────────────────────

LUA_RESERVED: frozenset[str] = frozenset({
    "and", "break", "do", "else", "elseif", "end", "false", "for",
    "function", "goto", "if", "in", "local", "nil", "not", "or",
    "repeat", "return", "then", "true", "until", "while",
})

# Compiler-generated temporaries live under this prefix; user names never do.
HIDDEN_PREFIX = "__pg_"

FALLBACK_IDENTIFIER = "var"

_INVALID_CHARS = re.compile(r"[^a-z0-9_]")
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _normalise(raw: Any) -> str:
    text = str(raw if raw is not None else "").strip().lower()
    return _INVALID_CHARS.sub("_", text)


def sanitize_identifier(raw: Any) -> str:
    """Map arbitrary text to a lower-case Lua identifier safe for user names."""
    text = str(raw if raw is not None else "").strip().lower()
    sanitized = _INVALID_CHARS.sub("_", text)

    # nothing survived (empty input, or only punctuation / non-ascii)
    if not re.search(r"[a-z0-9]", text):
        return FALLBACK_IDENTIFIER

    if sanitized[0].isdigit():
        sanitized = f"v_{sanitized}"

    if sanitized in LUA_RESERVED:
        sanitized = f"{sanitized}_"

    if sanitized.startswith(HIDDEN_PREFIX):
        sanitized = f"v{sanitized}"

    return sanitized


def hidden_identifier(node_id: str, label: str) -> str:
    """Name of a compiler temporary owned by *node_id*."""
    owner = _normalise(node_id).strip("_") or "node"
    suffix = _normalise(label).strip("_") or "tmp"
    return f"{HIDDEN_PREFIX}{owner}_{suffix}"


def is_identifier(text: str) -> bool:
    return bool(_IDENTIFIER.match(text)) and text not in LUA_RESERVED


# ── Operators ─────────────────────────────────────────────────────────────────

COMPARISON_OPERATORS = ("==", "!=", "~=", ">", "<", ">=", "<=")


def sanitize_operator(operator: Any, node_id: Optional[str] = None) -> str:
    op = str(operator if operator is not None else "==").strip()
    if op not in COMPARISON_OPERATORS:
        raise InvalidPropertyValue(node_id, "operator", operator, "not a comparison operator")
    return "~=" if op == "!=" else op


# ── Literals ──────────────────────────────────────────────────────────────────

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
}


def escape_string(text: str) -> str:
    out = []
    for ch in text:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ord(ch) < 32 or ord(ch) == 127:
            out.append(f"\\{ord(ch):03d}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def _format_number(value: Any, key: str) -> str:
    if isinstance(value, bool):
        raise InvalidPropertyValue(None, key, value, "expected a number, got a boolean")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidPropertyValue(None, key, value, "number is not finite")
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, str):
        text = value.strip()
        if NUMERIC_TEXT.match(text):
            return text
    raise InvalidPropertyValue(None, key, value, "expected a number")


def _format_boolean(value: Any, key: str) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower()
    if isinstance(value, int) and value in (0, 1):
        return "true" if value else "false"
    raise InvalidPropertyValue(None, key, value, "expected a boolean")


def _format_table_key(key: Any) -> str:
    if isinstance(key, str):
        text = key.strip()
        if is_identifier(text):
            return text
        if text.startswith("[") and text.endswith("]"):
            return text
        return f"[{escape_string(text)}]"
    return f"[{format_literal(PinKind.ANY, key)}]"


def _format_table(value: Any, key: str) -> str:
    if isinstance(value, str):
        text = value.strip()
        return text or "{}"
    if isinstance(value, dict):
        fragments = [
            f"{_format_table_key(k)} = {format_literal(PinKind.ANY, v)}"
            for k, v in value.items()
        ]
    elif isinstance(value, (list, tuple)):
        fragments = [format_literal(PinKind.ANY, v) for v in value]
    else:
        raise InvalidPropertyValue(None, key, value, "expected a table")
    return "{ " + ", ".join(fragments) + " }" if fragments else "{}"


def format_literal(kind: Union[PinKind, str], value: Any, key: str = "value") -> str:
    """
    Render *value* as Lua literal text for a pin of *kind*.

    Absent values are ``nil`` whatever the kind. Raises InvalidPropertyValue
    when the value can not be expressed as that kind.
    """
    kind = PinKind.parse(kind)
    if value is None or value is OMIT:
        return "nil"

    if kind is PinKind.NUMBER:
        return _format_number(value, key)
    if kind is PinKind.BOOLEAN:
        return _format_boolean(value, key)
    if kind is PinKind.STRING:
        if isinstance(value, (dict, list, tuple)):
            raise InvalidPropertyValue(None, key, value, "expected text")
        if isinstance(value, bool):
            return escape_string(_format_boolean(value, key))
        return escape_string(str(value))
    if kind is PinKind.TABLE:
        return _format_table(value, key)

    # any / exec / unknown: infer from the python type
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _format_number(value, key)
    if isinstance(value, (dict, list, tuple)):
        return _format_table(value, key)
    return escape_string(str(value))


def default_literal_for_kind(kind: Union[PinKind, str]) -> str:
    kind = PinKind.parse(kind)
    return {
        PinKind.NUMBER: "0",
        PinKind.BOOLEAN: "false",
        PinKind.STRING: '""',
        PinKind.TABLE: "{}",
    }.get(kind, "nil")


# ── Argument omission ─────────────────────────────────────────────────────────

ArgValue = Union[str, Omitted]


def reconstruct_arguments(
    values: Sequence[ArgValue],
    placeholders: Sequence[Optional[str]],
) -> List[str]:
    """
    Rebuild a variable-arity argument list from optional slots.

    Every slot up to the last provided one is kept; omitted slots before it
    take their placeholder text; omitted slots after it are dropped.

    Raises ValueError if an omitted slot that must be materialised has no
    placeholder.
    """
    if len(placeholders) < len(values):
        raise ValueError("every argument slot needs a placeholder entry")

    last = -1
    for index in range(len(values) - 1, -1, -1):
        if values[index] is not OMIT:
            last = index
            break

    args: List[str] = []
    for index in range(last + 1):
        value = values[index]
        if value is OMIT:
            placeholder = placeholders[index]
            if placeholder is None:
                raise ValueError(f"argument slot {index} is omitted and has no placeholder")
            args.append(placeholder)
        else:
            args.append(value)
    return args


def call_expression(function_name: str, args: Sequence[str]) -> str:
    return f"{function_name}({', '.join(args)})"


__all__ = [
    "LUA_RESERVED",
    "HIDDEN_PREFIX",
    "sanitize_identifier",
    "hidden_identifier",
    "sanitize_operator",
    "format_literal",
    "default_literal_for_kind",
    "escape_string",
    "reconstruct_arguments",
    "call_expression",
]
