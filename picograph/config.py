"""
Compiler settings
=================
Defaults can be overridden from the environment (a ``.env`` file in the
working directory is loaded first):

    PICOGRAPH_USE_60FPS   "1"/"true" remaps _update to _update60   (default off)
    PICOGRAPH_MAX_DEPTH   block / expression nesting ceiling        (default 150)
    PICOGRAPH_MAX_STEPS   total node visits per compile             (default 50000)
    PICOGRAPH_INDENT      spaces per indent level                   (default 2)
    PICOGRAPH_OUTPUT_DIR  CLI output directory                      (default ".")
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_MAX_DEPTH = 150
DEFAULT_MAX_STEPS = 50_000
DEFAULT_INDENT = 2

OUTPUT_FILENAME = "compiled.lua"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < 1:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class CompilerSettings:
    use_60fps: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH
    max_steps: int = DEFAULT_MAX_STEPS
    indent_width: int = DEFAULT_INDENT
    output_dir: str = "."

    @property
    def indent_unit(self) -> str:
        return " " * self.indent_width

    def with_overrides(self, **changes) -> "CompilerSettings":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "CompilerSettings":
        if env is None:
            load_dotenv()
            env = os.environ
        return cls(
            use_60fps=env.get("PICOGRAPH_USE_60FPS", "").strip().lower() in _TRUTHY,
            max_depth=_env_int(env, "PICOGRAPH_MAX_DEPTH", DEFAULT_MAX_DEPTH),
            max_steps=_env_int(env, "PICOGRAPH_MAX_STEPS", DEFAULT_MAX_STEPS),
            indent_width=_env_int(env, "PICOGRAPH_INDENT", DEFAULT_INDENT),
            output_dir=env.get("PICOGRAPH_OUTPUT_DIR", ".") or ".",
        )


__all__ = ["CompilerSettings", "OUTPUT_FILENAME"]
