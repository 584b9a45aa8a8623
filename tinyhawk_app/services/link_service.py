import logging
import re
from typing import Optional

from pydantic import HttpUrl, TypeAdapter, ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tinyhawk_app.config import settings
from tinyhawk_app.errors import (
    ConflictError,
    ExhaustedError,
    InvalidInputError,
    NotFoundError,
    StorageError,
)
from tinyhawk_app.models.short_link import ShortLink
from tinyhawk_app.services.short_code_factory import ShortCodeFactory
from tinyhawk_app.services.short_code_strategies import ShortCodeStrategy

logger = logging.getLogger(__name__)

ALIAS_PATTERN = re.compile(r"^[A-Za-z0-9\-_]+$")
MAX_ALIAS_LENGTH = 64
# First path segments already taken by routes; an alias here would be shadowed
RESERVED_ALIASES = frozenset({"api", "docs", "redoc", "openapi.json", "health"})

_http_url = TypeAdapter(HttpUrl)


def validate_target_url(target_url: str) -> str:
    """Return the trimmed URL, or raise InvalidInputError unless it is absolute http(s)."""
    candidate = (target_url or "").strip()
    if not candidate:
        raise InvalidInputError("target_url is required")
    try:
        _http_url.validate_python(candidate)
    except ValidationError:
        raise InvalidInputError("target_url must be an absolute http(s) URL") from None
    return candidate


def validate_alias(custom_alias: str) -> str:
    alias = custom_alias.strip()
    if not alias:
        raise InvalidInputError("custom_alias must not be empty")
    if len(alias) > MAX_ALIAS_LENGTH:
        raise InvalidInputError(f"custom_alias must be at most {MAX_ALIAS_LENGTH} characters")
    if not ALIAS_PATTERN.match(alias):
        raise InvalidInputError("custom_alias contains invalid characters")
    if alias.lower() in RESERVED_ALIASES:
        raise InvalidInputError(f"custom_alias '{alias}' is reserved")
    return alias


class LinkService:
    """
    Allocates short codes and looks links up.

    Allocation is an optimistic insert: the unique constraint on
    ``short_links.code`` decides collisions, there is no separate
    existence check that could race with another request.
    """

    def __init__(
        self,
        db: Session,
        short_code_strategy: Optional[ShortCodeStrategy] = None,
        code_length: Optional[int] = None,
        max_retries: Optional[int] = None,
    ):
        self.db = db
        # Use provided strategy or create default from factory
        self.short_code_strategy = short_code_strategy or ShortCodeFactory.create_strategy()
        self.code_length = code_length if code_length is not None else settings.short_code_length
        self.max_retries = max_retries if max_retries is not None else settings.max_retries

    async def allocate(self, target_url: str, custom_alias: Optional[str] = None) -> ShortLink:
        """Create a short link for ``target_url``.

        Raises:
            InvalidInputError: bad URL or alias
            ConflictError: custom alias already taken
            ExhaustedError: every generated candidate collided
            StorageError: any other persistence failure
        """
        target = validate_target_url(target_url)

        if custom_alias is not None:
            alias = validate_alias(custom_alias)
            link = self._try_insert(target, alias, is_custom_alias=True)
            if link is None:
                logger.info("Custom alias already in use: %s", alias)
                raise ConflictError(f"custom alias '{alias}' is already in use")
            logger.info("Created custom alias %s -> %s", link.code, link.target_url)
            return link

        for attempt in range(1, self.max_retries + 1):
            code = self.short_code_strategy.generate(self.code_length)
            link = self._try_insert(target, code, is_custom_alias=False)
            if link is not None:
                logger.info("Created short code %s -> %s", link.code, link.target_url)
                return link
            logger.warning(
                "Short code collision on %s (attempt %d/%d)", code, attempt, self.max_retries
            )

        raise ExhaustedError(
            f"Could not allocate a unique short code after {self.max_retries} attempts"
        )

    def _try_insert(self, target_url: str, code: str, is_custom_alias: bool) -> Optional[ShortLink]:
        """Insert the row; None means the code was already taken."""
        link = ShortLink(
            code=code,
            target_url=target_url,
            is_custom_alias=is_custom_alias,
            click_count=0,
        )
        self.db.add(link)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return None
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Failed to persist short link %s: %s", code, exc)
            raise StorageError("failed to persist short link") from exc
        self.db.refresh(link)
        return link

    async def get_link(self, code: str) -> ShortLink:
        """Get a link by code or raise NotFoundError."""
        try:
            link = self.db.query(ShortLink).filter(ShortLink.code == code).first()
        except SQLAlchemyError as exc:
            raise StorageError("failed to load short link") from exc
        if link is None:
            raise NotFoundError(f"short code '{code}' not found")
        return link
