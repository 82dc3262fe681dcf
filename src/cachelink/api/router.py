"""
FastAPI router exposing the list resolvers.

Endpoints:
- GET  /__lists            - Read and remove keys of all cacheable types
- GET  /lists/{read_key}   - Cached list for a type (e.g. /lists/allTask)
- POST /lists/{remove_key} - Remove ids from a list (e.g. /lists/removeTask)

Remove body:
    {"id": "1"} or {"id": ["1", "2"]}
"""

from __future__ import annotations

from typing import Any, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..link.cache_query import CacheQueryLink


class RemoveRequest(BaseModel):
    """Ids to drop from a cached list."""
    id: Union[str, int, list[Union[str, int]]]


class RemoveResponse(BaseModel):
    removed: bool


# Create router
router = APIRouter()

# Global instance (set by create_list_router)
_link: CacheQueryLink | None = None


def set_link(link: CacheQueryLink):
    """Set the cache link the endpoints resolve against."""
    global _link
    _link = link


def get_link() -> CacheQueryLink:
    """Get the cache link."""
    if _link is None:
        raise RuntimeError("Cache link not initialized. Call set_link() first.")
    return _link


@router.get("/__lists")
def list_keys(link: CacheQueryLink = Depends(get_link)) -> dict[str, list[str]]:
    """Return the root field names the registry serves."""
    return {
        "read": sorted(link.query_resolvers()),
        "remove": sorted(link.mutation_resolvers()),
    }


@router.get("/lists/{read_key}")
def read_list(read_key: str, link: CacheQueryLink = Depends(get_link)) -> dict[str, Any]:
    """Return the cached list for a read key, empty when nothing is cached."""
    resolvers = link.query_resolvers()
    if read_key not in resolvers:
        raise HTTPException(status_code=404, detail={"error": f"List '{read_key}' not found"})
    return resolvers[read_key](None, {}, {"link": link}, None)


@router.post("/lists/{remove_key}", response_model=RemoveResponse)
def remove_from_list(
    remove_key: str,
    body: RemoveRequest,
    link: CacheQueryLink = Depends(get_link),
) -> RemoveResponse:
    """Remove ids from a cached list and evict their entity records."""
    resolvers = link.mutation_resolvers()
    if remove_key not in resolvers:
        raise HTTPException(status_code=404, detail={"error": f"Removal '{remove_key}' not found"})
    removed = resolvers[remove_key](None, {"id": body.id}, {"link": link}, None)
    return RemoveResponse(removed=removed)


def create_list_router(link: CacheQueryLink) -> APIRouter:
    """
    Create a configured list API router.

    Usage:
        app = FastAPI()
        app.include_router(create_list_router(link), prefix="/cache")
    """
    set_link(link)
    return router
