from abc import ABC, abstractmethod


class LinkProvider(ABC):
    """
    Maps lookup keys to short identifiers that redirect to a formatted URL.

    A key keeps the identifier it was first given; main.py only talks to this
    interface, so the backing store stays a construction-time choice.
    """

    @abstractmethod
    def allocate(self, lookup_key: str) -> str:
        """Return the identifier for lookup_key, creating the mapping and redirect on first use."""
        ...

    @abstractmethod
    def lookup(self, lookup_key: str) -> str | None:
        """Return the identifier already mapped to lookup_key, or None."""
        ...

    @abstractmethod
    def format_redirect_target(self, lookup_key: str) -> str:
        """Return the URL the redirect for lookup_key points at."""
        ...
