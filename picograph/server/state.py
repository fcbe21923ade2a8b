"""
CompilerState: the catalogue and settings shared by every request.

Both are read-only once built; compiles never write back into them, so
concurrent requests need no locking.
"""
from __future__ import annotations

from typing import Optional

from picograph.config import CompilerSettings
from picograph.noderegistry.NodeRegistry import NodeCatalogue
from picograph.nodes import default_catalogue


class CompilerState:
    """Holds the node catalogue and the environment-derived settings."""

    def __init__(
        self,
        catalogue: Optional[NodeCatalogue] = None,
        settings: Optional[CompilerSettings] = None,
    ) -> None:
        self.catalogue: NodeCatalogue = catalogue or default_catalogue()
        self.settings: CompilerSettings = settings or CompilerSettings.from_env()


compiler_state = CompilerState()
