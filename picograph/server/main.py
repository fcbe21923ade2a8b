"""
picoGraph compiler HTTP host.

Serves the node palette and compiles graphs posted by the editor:

    GET  /health             version and catalogue size
    GET  /api/nodes?q=       palette search
    GET  /api/nodes/{id}     one definition
    POST /api/compile        graph JSON -> {"source": ...}

Start with:
    python -m picograph.server.main      (PICOGRAPH_HOST / PICOGRAPH_PORT)
    uvicorn picograph.server.main:app --port 3001
"""
from __future__ import annotations

import os

# Load .env before the state module reads PICOGRAPH_* settings.
from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from picograph import __version__  # noqa: E402
from picograph.server.routes import router  # noqa: E402
from picograph.server.state import compiler_state  # noqa: E402

app = FastAPI(title="picoGraph Compiler API", version=__version__)

# the editor is served from a different origin than the compiler
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)
app.include_router(router, prefix="/api")


@app.get("/health")
async def health() -> dict:
    return {
        "status": "ok",
        "version": __version__,
        "nodes": len(compiler_state.catalogue),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=os.environ.get("PICOGRAPH_HOST", "127.0.0.1"),
        port=int(os.environ.get("PICOGRAPH_PORT", "3001")),
    )
