"""
Database models for the shortener.

ShortLink holds the code -> target mapping and the all-time click counter.
ClickEvent holds one row per resolved redirect, enriched with geo data
after the fact when the lookup succeeds.
"""

from .short_link import ShortLink
from .click_event import ClickEvent

__all__ = ["ShortLink", "ClickEvent"]
