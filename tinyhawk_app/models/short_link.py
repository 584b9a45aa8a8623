from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from tinyhawk_app.database.connection import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ShortLink(Base):
    """
    Short code -> target URL mapping.

    The code is unique and never reassigned. click_count is only ever
    changed by an atomic UPDATE in the redirect path.
    """
    __tablename__ = "short_links"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    # unique=True is the final authority on collisions (optimistic insert)
    code = Column(String(64), unique=True, nullable=False, index=True)
    target_url = Column(String, nullable=False)
    is_custom_alias = Column(Boolean, nullable=False, default=False)
    click_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
