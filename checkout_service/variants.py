"""
variants.py — Product Handle Resolution

Resolves product handles to purchasable variant ids through the Shopify
catalog, backed by a process-wide cache.

The cache has no TTL and is never invalidated: a handle's first variant is
treated as static for the life of the process. Platforms that recycle
processes may hand out an empty cache at any time, so the cache only saves
latency. Concurrent writers store identical values for a key, so the
unlocked last-write-wins dict is safe.
"""

import logging
from typing import Dict, Optional, Protocol

from .errors import NotFoundError
from .models import CatalogLookupResult, ResolvedVariant

log = logging.getLogger(__name__)


class CatalogClient(Protocol):
    def lookup_product_by_handle(self, handle: str) -> CatalogLookupResult:
        ...


class VariantCache:
    """Handle → ResolvedVariant store, keyed by the trimmed handle."""

    def __init__(self):
        self._entries: Dict[str, ResolvedVariant] = {}

    def get(self, handle: str) -> Optional[ResolvedVariant]:
        return self._entries.get(handle)

    def put(self, variant: ResolvedVariant):
        self._entries[variant.handle] = variant

    def __contains__(self, handle: str) -> bool:
        return handle in self._entries

    def __len__(self) -> int:
        return len(self._entries)


# Lives as long as the process
process_cache = VariantCache()


class VariantResolver:
    """
    Resolves handles to variants, consulting the cache before the catalog.

    Args:
        catalog (CatalogClient): Anything with `lookup_product_by_handle`.
        cache (VariantCache): The store to read from and write to.
    """

    def __init__(self, catalog: CatalogClient, cache: VariantCache):
        self.catalog = catalog
        self.cache = cache

    def resolve(self, handle: str) -> ResolvedVariant:
        """
        Returns the first variant of the product with the given handle.

        Raises:
            NotFoundError: If no product matches or it has no purchasable variant.
            UpstreamError: If the catalog lookup itself fails.
        """
        key = (handle or "").strip()
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        result = self.catalog.lookup_product_by_handle(key)
        if result.title is None and result.variant_id is None:
            log.warning(f"[Handle: {key}] Produkt nicht gefunden.")
            raise NotFoundError(f"Product not found for handle '{key}'")
        if result.variant_id is None or result.variant_id <= 0:
            log.warning(f"[Handle: {key}] Produkt ohne kaufbare Variante.")
            raise NotFoundError(f"No purchasable variant for handle '{key}'")

        variant = ResolvedVariant(handle=key, title=result.title or key, variant_id=result.variant_id)
        self.cache.put(variant)
        log.info(f"[Handle: {key}] Variante {variant.variant_id} aufgelöst und gecacht.")
        return variant
