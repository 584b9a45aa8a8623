"""
Factory for creating geo lookup providers.
"""

import logging
from enum import Enum
from typing import Optional

import httpx

from tinyhawk_app.cache.strategies import CacheStrategy
from .strategies import (
    CachedGeoLookup,
    GeoLookupStrategy,
    IpapiGeoLookup,
    IpinfoGeoLookup,
    IpstackGeoLookup,
    NullGeoLookup,
)

logger = logging.getLogger(__name__)


class GeoProvider(Enum):
    """Available geo lookup providers"""
    IPAPI = "ipapi"
    IPSTACK = "ipstack"
    IPINFO = "ipinfo"
    NULL = "null"


class GeoLookupFactory:
    """Builds the configured provider, optionally wrapped in a result cache."""

    _http_providers = {
        GeoProvider.IPAPI: IpapiGeoLookup,
        GeoProvider.IPSTACK: IpstackGeoLookup,
        GeoProvider.IPINFO: IpinfoGeoLookup,
    }

    @classmethod
    def create(
        cls,
        provider: GeoProvider,
        api_key: str = "",
        timeout: float = 4.0,
        cache: Optional[CacheStrategy] = None,
        cache_ttl: int = 86400,
        client: Optional[httpx.AsyncClient] = None,
    ) -> GeoLookupStrategy:
        """
        Create a geo lookup provider.

        Args:
            provider: Provider to use (from enum)
            api_key: Key/token for providers that need one
            timeout: Per-request HTTP timeout in seconds
            cache: Optional cache for successful results
            cache_ttl: Cache TTL in seconds
            client: Optional pre-built httpx client (tests)

        Returns:
            GeoLookupStrategy instance
        """
        if provider == GeoProvider.NULL:
            logger.info("Geo enrichment disabled")
            return NullGeoLookup()

        provider_cls = cls._http_providers.get(provider)
        if provider_cls is None:
            raise ValueError(f"Unknown geo provider: {provider}")

        lookup: GeoLookupStrategy = provider_cls(api_key=api_key, timeout=timeout, client=client)
        logger.info("Geo provider %s initialized", provider.value)

        if cache is not None:
            lookup = CachedGeoLookup(lookup, cache, ttl=cache_ttl)
        return lookup
