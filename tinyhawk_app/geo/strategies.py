"""
Geo lookup strategies using Strategy Pattern.

Each provider exposes the same contract, ``lookup(ip) -> GeoLocation | None``,
so the click recorder never knows which service is behind it.

Providers are best-effort: missing credentials, network failures, bad
status codes and unparsable bodies all come back as None instead of
raising.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from tinyhawk_app.cache.strategies import CacheStrategy
from .models import GeoLocation

logger = logging.getLogger(__name__)


class GeoLookupStrategy(ABC):
    """Abstract base class for geo lookup providers."""

    name = "abstract"

    @abstractmethod
    async def lookup(self, ip: str) -> Optional[GeoLocation]:
        """
        Resolve an IP address to a location.

        Args:
            ip: Normalized public IP address

        Returns:
            GeoLocation, or None when the provider has no data
        """
        pass

    async def aclose(self) -> None:
        """Release resources (HTTP connections) held by the provider."""
        return None


class HttpGeoLookup(GeoLookupStrategy):
    """
    Shared plumbing for JSON-over-HTTP providers.

    Subclasses build the request URL and decide whether a payload
    carries data; field extraction is common.
    """

    requires_api_key = False

    def __init__(
        self,
        api_key: str = "",
        timeout: float = 4.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)
        if self.requires_api_key and not api_key:
            logger.warning("Geo provider %s needs an API key; lookups are disabled", self.name)

    @abstractmethod
    def build_url(self, ip: str) -> str:
        pass

    def has_data(self, payload: Dict[str, Any]) -> bool:
        return "error" not in payload

    def parse(self, payload: Dict[str, Any]) -> GeoLocation:
        return GeoLocation(
            country=payload.get("country_name") or payload.get("country") or None,
            region=(
                payload.get("region")
                or payload.get("region_name")
                or payload.get("region_code")
                or None
            ),
            city=payload.get("city") or None,
        )

    async def lookup(self, ip: str) -> Optional[GeoLocation]:
        if self.requires_api_key and not self.api_key:
            return None

        try:
            response = await self.client.get(self.build_url(ip), timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.warning("%s lookup failed for %s: %s", self.name, ip, e)
            return None
        except ValueError as e:
            logger.warning("%s returned invalid JSON for %s: %s", self.name, ip, e)
            return None

        if not isinstance(payload, dict) or not self.has_data(payload):
            logger.debug("%s has no data for %s", self.name, ip)
            return None

        location = self.parse(payload)
        return None if location.is_empty() else location

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()


class IpapiGeoLookup(HttpGeoLookup):
    """ipapi.co - free tier, no key required."""

    name = "ipapi"

    def build_url(self, ip: str) -> str:
        return f"https://ipapi.co/{quote(ip, safe='')}/json/"

    def has_data(self, payload: Dict[str, Any]) -> bool:
        return not payload.get("error")


class IpstackGeoLookup(HttpGeoLookup):
    """ipstack.com - requires an access key."""

    name = "ipstack"
    requires_api_key = True

    def build_url(self, ip: str) -> str:
        return f"http://api.ipstack.com/{quote(ip, safe='')}?access_key={quote(self.api_key, safe='')}"

    def has_data(self, payload: Dict[str, Any]) -> bool:
        # Errors come back as 200 with {"success": false, "error": {...}}
        return payload.get("success", True) is not False and "error" not in payload


class IpinfoGeoLookup(HttpGeoLookup):
    """ipinfo.io - requires a token."""

    name = "ipinfo"
    requires_api_key = True

    def build_url(self, ip: str) -> str:
        return f"https://ipinfo.io/{quote(ip, safe='')}/json?token={quote(self.api_key, safe='')}"

    def has_data(self, payload: Dict[str, Any]) -> bool:
        return not payload.get("bogon") and "error" not in payload


class NullGeoLookup(GeoLookupStrategy):
    """
    Null Object Pattern - enrichment disabled.
    Every lookup returns None.
    """

    name = "null"

    async def lookup(self, ip: str) -> Optional[GeoLocation]:
        return None


class CachedGeoLookup(GeoLookupStrategy):
    """
    Decorator that remembers successful lookups per IP.

    Misses are not cached, so a provider outage does not pin
    visitors to "no data" for the whole TTL.
    """

    def __init__(self, inner: GeoLookupStrategy, cache: CacheStrategy, ttl: int = 86400):
        self.inner = inner
        self.cache = cache
        self.ttl = ttl
        self.name = f"cached-{inner.name}"

    @staticmethod
    def cache_key(ip: str) -> str:
        return f"geo:{ip}"

    async def lookup(self, ip: str) -> Optional[GeoLocation]:
        key = self.cache_key(ip)
        cached = await self.cache.get(key)
        if cached:
            try:
                return GeoLocation.model_validate_json(cached)
            except ValueError:
                logger.warning("Discarding unreadable geo cache entry for %s", ip)
                await self.cache.delete(key)

        location = await self.inner.lookup(ip)
        if location is not None:
            await self.cache.set(key, location.model_dump_json(), ttl=self.ttl)
        return location

    async def aclose(self) -> None:
        await self.inner.aclose()
        await self.cache.aclose()
