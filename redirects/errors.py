class RedirectorError(Exception):
    """Base class for every error raised while allocating links."""


class ConfigurationError(RedirectorError):
    """Missing or malformed configuration, detected before any store I/O."""


class StoreUnavailableError(RedirectorError):
    """The object store failed for a reason other than a missing key."""


class IdentifierSpaceExhaustedError(RedirectorError):
    def __init__(self, attempts: int):
        super().__init__(f"No unused identifier found after {attempts} attempts")
        self.attempts = attempts


class PartialCommitError(RedirectorError):
    """
    The state record was written but its redirect object was not.

    The mapping now points at an identifier with no redirect behind it.
    Allocators built with repair_dangling=True recreate the redirect on the
    next allocate() for the same key.
    """

    def __init__(self, lookup_key: str, identifier: str):
        super().__init__(
            f"State for '{lookup_key}' points at '{identifier}' but the redirect object was not created"
        )
        self.lookup_key = lookup_key
        self.identifier = identifier
