"""Cache administration API router.

Provides visibility into and control over the named caches:
- GET    /api/cache/stats                     - Per-cache sizes and backend reachability
- GET    /api/cache/keys                      - Cached keys grouped by cache name
- GET    /api/cache/keys/{pattern}            - Keys containing a pattern
- DELETE /api/cache/clear                     - Clear every cache
- DELETE /api/cache/clear/{cacheName}         - Clear one cache
- DELETE /api/cache/evict/{cacheName}/{key}   - Evict one entry
- GET    /api/cache/info                      - Backend ping and total key count
- PUT    /api/cache/ttl/{cacheName}/{key}     - Re-arm the TTL of one entry

Keys are matched with ``:path`` converters so an empty key or pattern reaches
the handler and is rejected as 400 rather than falling through to routing.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from k8sdemo.api.deps import get_cache_admin
from k8sdemo.services.cache_admin import (
    BackendInfo,
    CacheAdmin,
    CacheKeyListing,
    CacheStats,
    KeySearchResult,
    TtlUpdate,
)

router = APIRouter(prefix="/api/cache", tags=["Cache"])


class TtlRequest(BaseModel):
    """Body of a TTL update; validated by the service so a missing ttl is a 400."""

    ttl: int | None = None


@router.get("/stats", response_model=CacheStats)
async def get_cache_stats(admin: CacheAdmin = Depends(get_cache_admin)) -> Response:
    """Get cache names, approximate sizes and backend reachability.

    Returns 503 with the same body (sizes -1, ``error`` set) when the
    backend is unreachable.
    """
    stats = await admin.stats()
    return JSONResponse(
        status_code=200 if stats.redis_connected else 503,
        content=stats.model_dump(by_alias=True, exclude_none=True),
    )


@router.get("/keys", response_model=CacheKeyListing)
async def get_all_cache_keys(admin: CacheAdmin = Depends(get_cache_admin)) -> CacheKeyListing:
    """Get all cached keys grouped by cache name, prefix stripped."""
    return await admin.list_keys()


@router.get("/keys/{pattern:path}", response_model=KeySearchResult)
async def search_cache_keys(
    pattern: str,
    admin: CacheAdmin = Depends(get_cache_admin),
) -> KeySearchResult:
    """Get keys containing a pattern, grouped by cache name; 400 if empty."""
    return await admin.search_keys(pattern)


@router.delete("/clear", status_code=204)
async def clear_all_caches(admin: CacheAdmin = Depends(get_cache_admin)) -> Response:
    """Clear every registered cache."""
    await admin.clear_all()
    return Response(status_code=204)


@router.delete("/clear/{cache_name}", status_code=204)
async def clear_cache(cache_name: str, admin: CacheAdmin = Depends(get_cache_admin)) -> Response:
    """Clear one cache; 404 if the cache name is not registered."""
    await admin.clear(cache_name)
    return Response(status_code=204)


@router.delete("/evict/{cache_name}/{key:path}", status_code=204)
async def evict_cache_entry(
    cache_name: str,
    key: str,
    admin: CacheAdmin = Depends(get_cache_admin),
) -> Response:
    """Evict one entry; 404 if the cache or key is unknown, 400 if key is empty."""
    await admin.evict(cache_name, key)
    return Response(status_code=204)


@router.get("/info", response_model=BackendInfo)
async def get_backend_info(admin: CacheAdmin = Depends(get_cache_admin)) -> Response:
    """Get backend ping result and total key count; 503 when unreachable."""
    info = await admin.backend_info()
    return JSONResponse(
        status_code=200 if info.connected else 503,
        content=info.model_dump(by_alias=True, exclude_none=True),
    )


@router.put("/ttl/{cache_name}/{key:path}", response_model=TtlUpdate)
async def update_cache_ttl(
    cache_name: str,
    key: str,
    body: TtlRequest | None = None,
    admin: CacheAdmin = Depends(get_cache_admin),
) -> Response:
    """Re-arm the TTL of a cached entry.

    Returns 200 with a confirmation, 404 if the key is not cached,
    400 if the TTL is missing or not positive.
    """
    ttl = body.ttl if body is not None else None
    updated = await admin.set_ttl(cache_name, key, ttl)
    if not updated:
        return JSONResponse(
            status_code=404,
            content={
                "success": False,
                "cacheName": cache_name,
                "key": key,
                "error": "Key not found or TTL update failed",
            },
        )
    confirmation = TtlUpdate(
        success=True,
        cache_name=cache_name,
        key=key,
        ttl=ttl,
        message="TTL updated successfully",
    )
    return JSONResponse(status_code=200, content=confirmation.model_dump(by_alias=True))
