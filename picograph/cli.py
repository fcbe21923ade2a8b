"""
picograph-compile - CLI for the picoGraph Lua compiler
======================================================
Compiles a saved graph JSON file into PICO-8 cartridge Lua.

Usage
-----
    picograph-compile <graph.json> [options]

Options
-------
    --out       <dir>   Output directory (default: $PICOGRAPH_OUTPUT_DIR or .)
    --print             Print the generated source to stdout instead of writing a file
    --use-60fps         Emit _update60 instead of _update
    --strict            Treat unknown node definitions as schema errors
    -v, --verbose       Debug logging

Examples
--------
    # Compile to ./compiled.lua:
    picograph-compile graphs/bouncing_ball.json

    # Compile into a cartridge folder at 60fps:
    picograph-compile graphs/bouncing_ball.json --out carts/ball --use-60fps

    # Print the generated source without writing a file:
    picograph-compile graphs/bouncing_ball.json --print
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from picograph.compiler import compile_json
from picograph.compiler.schema import SchemaError, validate_file
from picograph.config import OUTPUT_FILENAME, CompilerSettings
from picograph.errors import CompileError
from picograph.nodes import default_catalogue

logger = logging.getLogger("picograph.cli")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="picograph-compile",
        description="Compile a picoGraph JSON graph to PICO-8 Lua.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    p.add_argument(
        "graph_json",
        metavar="graph.json",
        help="Path to the graph JSON file to compile.",
    )
    p.add_argument(
        "--out",
        metavar="DIR",
        default=None,
        help=f"Output directory for {OUTPUT_FILENAME} (default: $PICOGRAPH_OUTPUT_DIR or .).",
    )
    p.add_argument(
        "--print",
        dest="print_only",
        action="store_true",
        help="Print generated source to stdout instead of writing a file.",
    )
    p.add_argument(
        "--use-60fps",
        dest="use_60fps",
        action="store_true",
        default=None,
        help="Name the update entry point _update60.",
    )
    p.add_argument(
        "--strict",
        action="store_true",
        help="Treat unknown node definitions as errors rather than warnings.",
    )
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return p


def main(argv=None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    json_path = Path(args.graph_json)
    if not json_path.exists():
        print(f"[error] File not found: {json_path}", file=sys.stderr)
        return 1

    try:
        settings = CompilerSettings.from_env().with_overrides(
            use_60fps=args.use_60fps,
            output_dir=args.out,
        )
    except ValueError as exc:
        print(f"[error] Invalid configuration: {exc}", file=sys.stderr)
        return 1

    catalogue = default_catalogue()

    # ── Validate JSON ────────────────────────────────────────────────────────
    try:
        data = validate_file(json_path, catalogue=catalogue, strict=args.strict)
    except json.JSONDecodeError as exc:
        print(f"[error] Invalid JSON: {exc}", file=sys.stderr)
        return 1
    except SchemaError as exc:
        print(f"[error] Schema validation failed: {exc}", file=sys.stderr)
        return 1

    logger.info("graph: %s (%d nodes, %d connections)",
                json_path.stem, len(data["nodes"]), len(data["connections"]))

    # ── Compile ──────────────────────────────────────────────────────────────
    try:
        source = compile_json(data, catalogue, settings, strict=args.strict)
    except CompileError as exc:
        print(f"[error] {exc.kind}: {exc}", file=sys.stderr)
        return 1

    # ── Output ───────────────────────────────────────────────────────────────
    if args.print_only:
        print(source)
        return 0

    out_dir = Path(settings.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / OUTPUT_FILENAME
    out_path.write_text(source + "\n", encoding="utf-8")

    print(f"[picograph-compile] wrote  : {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
