"""
Short code generation strategies for the shortener.
Uses Strategy Pattern to allow different alphabets.

Strategies only produce candidates. Uniqueness is decided by the
database when the allocator inserts the row.
"""

import secrets
import string
from abc import ABC, abstractmethod


class ShortCodeStrategy(ABC):
    """Abstract base class for short code generation strategies"""

    alphabet: str = ""

    @abstractmethod
    def generate(self, length: int) -> str:
        """
        Generate a candidate short code.

        Args:
            length: Number of characters in the code

        Returns:
            A URL-safe random string of exactly ``length`` characters
        """
        pass


class RandomAlphabetStrategy(ShortCodeStrategy):
    """Draws each character independently from ``alphabet`` using a CSPRNG."""

    def generate(self, length: int) -> str:
        if length < 1:
            raise ValueError(f"Short code length must be positive, got {length}")
        return ''.join(secrets.choice(self.alphabet) for _ in range(length))


class NanoidShortCodeStrategy(RandomAlphabetStrategy):
    """
    64-character URL-safe alphabet (A-Z, a-z, 0-9, '-', '_').

    6 characters give 64^6 (~6.9e10) codes, so collisions are rare
    long before the table gets large.
    """

    alphabet = string.ascii_letters + string.digits + "-_"


class Base62ShortCodeStrategy(RandomAlphabetStrategy):
    """
    Alphanumeric alphabet only, for codes that must survive
    copy/paste and double-click selection without punctuation.
    """

    alphabet = string.digits + string.ascii_lowercase + string.ascii_uppercase
