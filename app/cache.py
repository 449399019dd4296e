"""
Page cache for rendered dashboard views.

Each rendered payload is stored in a diskcache.Cache, tagged with the view
path it belongs to (e.g. "/dashboard/invoices"). Revalidating a path evicts
every entry carrying that tag and bumps a per-path generation counter that
is part of every key, so a render that started before the revalidation can
never be served afterwards.
"""

import sqlite3
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

import diskcache

from app.core.config import get_settings
from app.core.log import log_event

INVOICES_PATH = "/dashboard/invoices"
DASHBOARD_PATH = "/dashboard"

# Lo que puede lanzar diskcache al escribir/evictar (disco, sqlite interno, lock)
CACHE_ERRORS = (OSError, sqlite3.Error, diskcache.Timeout)


def _generation_key(path: str) -> str:
    return f"gen:{path}"


def _cache_key(path: str, generation: int, params: Optional[Mapping[str, Any]] = None) -> str:
    base = f"{path}@{generation}"
    if not params:
        return base
    qs = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return f"{base}?{qs}"


class PageCache:
    """
    Disk-backed cache of view payloads, invalidated per path.

    Attributes:
        cache_dir: Directory holding the diskcache files.
    """

    def __init__(self, cache_dir: str | Path) -> None:
        self.cache_dir = Path(cache_dir)
        self._cache = diskcache.Cache(str(self.cache_dir), tag_index=True)

    def get_or_render(
        self,
        path: str,
        render: Callable[[], Any],
        params: Optional[Mapping[str, Any]] = None,
        expire: Optional[int] = None,
    ) -> Any:
        """
        Return the cached payload for path+params, rendering it on a miss.

        Args:
            path: View path; also the tag used for invalidation.
            render: Zero-argument callable producing the payload.
            params: Query parameters that distinguish variants of the view.
            expire: TTL in seconds. None means until revalidated.
        """
        # La generación se lee antes de renderizar: si alguien revalida durante
        # el render, el valor queda guardado bajo una key que ya nadie consulta
        generation = self._cache.get(_generation_key(path), default=0)
        key = _cache_key(path, generation, params)
        cached = self._cache.get(key, default=None)
        if cached is not None:
            return cached

        value = render()
        self._cache.set(key, value, expire=expire, tag=path)
        return value

    def revalidate_path(self, path: str) -> int:
        """Mark every cached rendering of `path` stale. Returns entries evicted."""
        self._cache.incr(_generation_key(path), default=0)
        evicted = self._cache.evict(path)
        log_event("cache_revalidated", path=path, evicted=evicted)
        return evicted

    def clear(self) -> None:
        self._cache.clear()

    def close(self) -> None:
        self._cache.close()


@lru_cache
def _page_cache(cache_dir: str) -> PageCache:
    return PageCache(cache_dir)


def get_page_cache() -> PageCache:
    return _page_cache(get_settings().cache_dir)


def revalidate_path(path: str) -> int:
    return get_page_cache().revalidate_path(path)
