"""
Tests for short code allocation.
"""
import asyncio
from itertools import cycle
from typing import List

import pytest

from tinyhawk_app.errors import ConflictError, ExhaustedError, InvalidInputError, NotFoundError
from tinyhawk_app.models.short_link import ShortLink
from tinyhawk_app.services.link_service import LinkService
from tinyhawk_app.services.short_code_strategies import ShortCodeStrategy


class ScriptedStrategy(ShortCodeStrategy):
    """Returns codes from a fixed script, cycling when exhausted."""

    alphabet = "abcdefghijklmnopqrstuvwxyz"

    def __init__(self, codes: List[str]):
        self._codes = cycle(codes)
        self.calls = 0

    def generate(self, length: int) -> str:
        self.calls += 1
        return next(self._codes)


class TestGeneratedCodes:
    """Allocation without an alias"""

    def test_allocates_code_of_configured_length(self, db_session):
        service = LinkService(db_session, code_length=6)

        link = asyncio.run(service.allocate("https://www.example.com/some/page?q=1"))

        assert link.id is not None
        assert len(link.code) == 6
        assert link.target_url == "https://www.example.com/some/page?q=1"
        assert link.is_custom_alias is False
        assert link.click_count == 0
        assert link.created_at is not None

    def test_codes_are_unique(self, db_session):
        service = LinkService(db_session)

        codes = {
            asyncio.run(service.allocate("https://www.example.com/")).code
            for _ in range(50)
        }

        assert len(codes) == 50

    def test_trims_target_url(self, db_session):
        service = LinkService(db_session)

        link = asyncio.run(service.allocate("  https://python.org/  "))

        assert link.target_url == "https://python.org/"

    def test_retries_after_collision(self, db_session):
        db_session.add(ShortLink(code="taken1", target_url="https://a.example/"))
        db_session.commit()
        strategy = ScriptedStrategy(["taken1", "fresh1"])
        service = LinkService(db_session, short_code_strategy=strategy, max_retries=6)

        link = asyncio.run(service.allocate("https://b.example/"))

        assert link.code == "fresh1"
        assert strategy.calls == 2

    def test_exhausted_after_max_retries(self, db_session):
        db_session.add(ShortLink(code="taken1", target_url="https://a.example/"))
        db_session.commit()
        strategy = ScriptedStrategy(["taken1"])
        service = LinkService(db_session, short_code_strategy=strategy, max_retries=6)

        with pytest.raises(ExhaustedError):
            asyncio.run(service.allocate("https://b.example/"))

        assert strategy.calls == 6
        # Session is still usable after the failed inserts
        assert db_session.query(ShortLink).count() == 1

    def test_zero_retries_is_honoured(self, db_session):
        strategy = ScriptedStrategy(["fresh1"])
        service = LinkService(db_session, short_code_strategy=strategy, max_retries=0)

        with pytest.raises(ExhaustedError):
            asyncio.run(service.allocate("https://b.example/"))

        assert strategy.calls == 0
        assert db_session.query(ShortLink).count() == 0

    def test_zero_length_is_rejected_not_defaulted(self, db_session):
        service = LinkService(db_session, code_length=0)

        with pytest.raises(ValueError):
            asyncio.run(service.allocate("https://b.example/"))


class TestCustomAlias:
    """Allocation with a user-chosen alias"""

    def test_alias_succeeds_once(self, db_session):
        service = LinkService(db_session)

        link = asyncio.run(service.allocate("https://www.example.com/", "my-Link_01"))
        assert link.code == "my-Link_01"
        assert link.is_custom_alias is True

        with pytest.raises(ConflictError):
            asyncio.run(service.allocate("https://other.example/", "my-Link_01"))

    def test_alias_is_trimmed(self, db_session):
        service = LinkService(db_session)

        link = asyncio.run(service.allocate("https://www.example.com/", "  promo  "))

        assert link.code == "promo"

    def test_alias_conflicts_with_generated_code(self, db_session):
        strategy = ScriptedStrategy(["abc123"])
        service = LinkService(db_session, short_code_strategy=strategy)
        asyncio.run(service.allocate("https://a.example/"))

        with pytest.raises(ConflictError):
            asyncio.run(service.allocate("https://b.example/", "abc123"))

    @pytest.mark.parametrize("alias", ["bad alias!", "", "   ", "emoji😀", "a/b", "x" * 65])
    def test_invalid_alias(self, db_session, alias):
        service = LinkService(db_session)

        with pytest.raises(InvalidInputError):
            asyncio.run(service.allocate("https://www.example.com/", alias))

        assert db_session.query(ShortLink).count() == 0

    @pytest.mark.parametrize("alias", ["api", "health", "Docs"])
    def test_reserved_alias(self, db_session, alias):
        service = LinkService(db_session)

        with pytest.raises(InvalidInputError):
            asyncio.run(service.allocate("https://www.example.com/", alias))


class TestTargetValidation:
    """Target URL must be absolute http(s)"""

    @pytest.mark.parametrize(
        "target",
        ["not-a-url", "ftp://x", "ftp://files.example.com/a.txt", "", "   ", "/relative/path",
         "javascript:alert(1)", "http://"],
    )
    def test_rejects_invalid_urls(self, db_session, target):
        service = LinkService(db_session)

        with pytest.raises(InvalidInputError):
            asyncio.run(service.allocate(target))

    @pytest.mark.parametrize(
        "target",
        ["http://example.com", "https://example.com/path?x=1#frag", "http://localhost:8080/a"],
    )
    def test_accepts_http_and_https(self, db_session, target):
        service = LinkService(db_session)

        link = asyncio.run(service.allocate(target))

        assert link.target_url == target


class TestGetLink:
    def test_get_existing(self, db_session):
        service = LinkService(db_session)
        created = asyncio.run(service.allocate("https://www.example.com/", "lookup"))

        found = asyncio.run(service.get_link("lookup"))

        assert found.id == created.id

    def test_get_missing(self, db_session):
        service = LinkService(db_session)

        with pytest.raises(NotFoundError):
            asyncio.run(service.get_link("doesnotexist"))
