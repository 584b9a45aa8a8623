from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String

from tinyhawk_app.database.connection import Base
from tinyhawk_app.models.short_link import utc_now


class ClickEvent(Base):
    """
    One resolved redirect.

    Created with empty geo fields; updated at most once if enrichment
    returns data.
    """
    __tablename__ = "click_events"
    __table_args__ = (
        Index("ix_click_events_link_created", "link_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    link_id = Column(Integer, ForeignKey("short_links.id"), nullable=False, index=True)
    ip = Column(String(64), nullable=True)
    user_agent = Column(String, nullable=True)
    referrer = Column(String, nullable=True)
    country = Column(String(128), nullable=True)
    region = Column(String(128), nullable=True)
    city = Column(String(128), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
