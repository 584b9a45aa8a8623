"""
Geo enrichment module.
Implements Strategy Pattern for pluggable IP -> location providers.
"""

from .models import GeoLocation
from .strategies import (
    GeoLookupStrategy,
    HttpGeoLookup,
    IpapiGeoLookup,
    IpstackGeoLookup,
    IpinfoGeoLookup,
    NullGeoLookup,
    CachedGeoLookup,
)
from .factory import GeoLookupFactory, GeoProvider

__all__ = [
    "GeoLocation",
    "GeoLookupStrategy",
    "HttpGeoLookup",
    "IpapiGeoLookup",
    "IpstackGeoLookup",
    "IpinfoGeoLookup",
    "NullGeoLookup",
    "CachedGeoLookup",
    "GeoLookupFactory",
    "GeoProvider",
]
