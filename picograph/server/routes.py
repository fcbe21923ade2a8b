"""
Compiler REST routes.

All routes are mounted under /api by main.py.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from picograph.compiler import compile_json
from picograph.compiler.schema import SchemaError
from picograph.errors import CompileError
from picograph.server.serializers import serialize_definition
from picograph.server.state import compiler_state

logger = logging.getLogger(__name__)

router = APIRouter()


# ── GET /nodes ────────────────────────────────────────────────────────────────

@router.get("/nodes")
async def list_nodes(q: Optional[str] = Query(default=None)) -> List[Dict[str, Any]]:
    catalogue = compiler_state.catalogue
    return [
        serialize_definition(definition, catalogue.require(definition.id).behavior)
        for definition in catalogue.search(q)
    ]


# ── GET /nodes/:id ────────────────────────────────────────────────────────────

@router.get("/nodes/{definition_id}")
async def get_node(definition_id: str) -> Dict[str, Any]:
    module = compiler_state.catalogue.get(definition_id)
    if module is None:
        raise HTTPException(status_code=404, detail="Node definition not found")
    return serialize_definition(module.definition, module.behavior)


# ── POST /compile ─────────────────────────────────────────────────────────────

class CompileBody(BaseModel):
    nodes: List[Dict[str, Any]]
    connections: List[Dict[str, Any]] = Field(default_factory=list)
    variables: List[Dict[str, Any]] = Field(default_factory=list)
    settings: Dict[str, Any] = Field(default_factory=dict)
    strict: bool = False


@router.post("/compile")
async def compile_source(body: CompileBody) -> Dict[str, Any]:
    data = body.model_dump(exclude={"strict"})
    try:
        source = compile_json(
            data,
            compiler_state.catalogue,
            compiler_state.settings,
            strict=body.strict,
        )
    except SchemaError as exc:
        raise HTTPException(
            status_code=422,
            detail={"error": "SchemaError", "message": str(exc), "nodeId": None, "pinId": None},
        )
    except CompileError as exc:
        logger.info("compile rejected: %s", exc)
        raise HTTPException(status_code=422, detail=exc.to_dict())
    return {"source": source}
