"""FastAPI admin surface for the Solr indexer.

Endpoints are registered on an ``APIRouter`` so a host application can
mount them. The standalone ``app`` includes the router directly::

    uvicorn solrindex.server:app --port 8430

Call ``configure`` before serving to point the endpoints at a real
repository and settings.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, FastAPI, HTTPException
from pydantic import BaseModel

from solrindex.errors import SolrClientError
from solrindex.indexing import SearchIndexer
from solrindex.records.repository import InMemoryRepository, Repository
from solrindex.settings import IndexSettings
from solrindex.solr.client import CORE_OPTION, HOST_OPTION, PORT_OPTION

router = APIRouter()

app = FastAPI(
    title="Solr Index API",
    description="Reindex, clear and ping the Solr search index",
    version="0.1.0",
)

_state: dict[str, Any] = {
    "repository": None,
    "settings": None,
    "indexer": None,
}


# ============================================================================
# Pydantic Models for API
# ============================================================================


class ConnectionOverride(BaseModel):
    """Per-request Solr connection override; empty fields use settings."""

    host: str | None = None
    port: int | None = None
    core: str | None = None

    def to_options(self) -> dict[str, Any]:
        """Return the override as connection options."""
        options: dict[str, Any] = {}
        if self.host:
            options[HOST_OPTION] = self.host
        if self.port:
            options[PORT_OPTION] = self.port
        if self.core:
            options[CORE_OPTION] = self.core
        return options


# ============================================================================
# State
# ============================================================================


def configure(
    repository: Repository,
    settings: IndexSettings | None = None,
    indexer: SearchIndexer | None = None,
) -> SearchIndexer:
    """Bind the endpoints to a repository and settings."""
    settings = settings or IndexSettings()
    _state["repository"] = repository
    _state["settings"] = settings
    _state["indexer"] = indexer or SearchIndexer(repository, settings)
    return _state["indexer"]


def get_indexer() -> SearchIndexer:
    """Return the configured indexer, binding an empty repository if unset."""
    if _state["indexer"] is None:
        configure(InMemoryRepository())
    return _state["indexer"]


def _options(override: ConnectionOverride | None) -> dict[str, Any]:
    return override.to_options() if override is not None else {}


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/api/health")
async def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "version": "0.1.0"}


@router.post("/api/solr/ping")
async def ping_solr(override: ConnectionOverride | None = None) -> dict[str, Any]:
    """Check whether Solr answers."""
    indexer = get_indexer()
    return {"ok": indexer.ping(_options(override))}


@router.post("/api/solr/index")
async def index_all(override: ConnectionOverride | None = None) -> dict[str, Any]:
    """Reindex every item and addon record."""
    indexer = get_indexer()
    try:
        report = indexer.index_all(_options(override))
    except SolrClientError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return report.to_dict()


@router.post("/api/solr/clear")
async def clear_index(override: ConnectionOverride | None = None) -> dict[str, Any]:
    """Delete every document from the index."""
    indexer = get_indexer()
    try:
        indexer.delete_all(_options(override))
    except SolrClientError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"status": "cleared"}


app.include_router(router)


# ============================================================================
# Main Entry Point
# ============================================================================


def run_server(host: str = "127.0.0.1", port: int = 8430) -> None:
    """Run the admin server."""
    import uvicorn

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
