import logging
from typing import Callable

from botocore.exceptions import BotoCoreError, ClientError

from redirects.errors import (
    ConfigurationError,
    IdentifierSpaceExhaustedError,
    PartialCommitError,
    StoreUnavailableError,
)
from redirects.identifiers import DEFAULT_LENGTH, random_token
from redirects.link_provider import LinkProvider
from storage.s3_client import ObjectExistsError, S3Client

logger = logging.getLogger(__name__)

DEFAULT_STATE_PREFIX = "state/"
DEFAULT_REDIRECT_TARGET_FORMAT = "%s"
DEFAULT_MAX_ATTEMPTS = 100

_STORE_ERRORS = (ClientError, BotoCoreError)


def check_redirect_target_format(template: str) -> None:
    """Raise ConfigurationError unless template takes exactly one %s argument."""
    if not isinstance(template, str):
        raise ConfigurationError(f"Redirect target format must be a string, got {type(template).__name__}")
    try:
        template % ("",)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Redirect target format {template!r} must contain exactly one %s placeholder: {e}"
        ) from e


class S3LinkAllocator(LinkProvider):
    """
    Allocates short identifiers backed by two kinds of S3 object.

    State record   <state_prefix><lookup key>   private, body = identifier
    Redirect       <identifier>                 public-read, empty body,
                                                WebsiteRedirectLocation = target URL

    S3 static website hosting turns the redirect object into an HTTP 301, so
    https://<bucket website>/<identifier> lands on the formatted target.

    The state record is written with a create-if-absent precondition. When
    two callers allocate the same key at once, the loser re-reads the state
    record and returns the winner's identifier.
    """

    def __init__(
        self,
        s3_client: S3Client,
        redirect_target_format: str = DEFAULT_REDIRECT_TARGET_FORMAT,
        state_prefix: str = DEFAULT_STATE_PREFIX,
        link_prefix: str = "",
        identifier_length: int = DEFAULT_LENGTH,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        repair_dangling: bool = False,
        token_source: Callable[[int], str] = random_token,
    ):
        check_redirect_target_format(redirect_target_format)
        if identifier_length < 1:
            raise ConfigurationError(f"Identifier length must be positive, got {identifier_length}")
        if max_attempts < 1:
            raise ConfigurationError(f"Max attempts must be positive, got {max_attempts}")

        self._s3 = s3_client
        self.redirect_target_format = redirect_target_format
        self.state_prefix = state_prefix
        self.link_prefix = link_prefix
        self.identifier_length = identifier_length
        self.max_attempts = max_attempts
        self.repair_dangling = repair_dangling
        self._token_source = token_source

    @classmethod
    def from_config(cls, s3_client: S3Client, config: dict) -> "S3LinkAllocator":
        return cls(
            s3_client,
            redirect_target_format=config.get("redirect_target_format", DEFAULT_REDIRECT_TARGET_FORMAT),
            state_prefix=config.get("state_prefix", DEFAULT_STATE_PREFIX),
            link_prefix=config.get("link_prefix", ""),
            identifier_length=int(config.get("identifier_length", DEFAULT_LENGTH)),
            max_attempts=int(config.get("max_attempts", DEFAULT_MAX_ATTEMPTS)),
            repair_dangling=bool(config.get("repair_dangling", False)),
        )

    # ------------------------------------------------------------------
    # LinkProvider interface
    # ------------------------------------------------------------------

    def allocate(self, lookup_key: str) -> str:
        stored = self._read_state(lookup_key)
        if stored:
            logger.debug("State for %r already maps to %s", lookup_key, stored)
            if self.repair_dangling:
                self._repair(lookup_key, stored)
            return stored

        identifier = self._unused_identifier()

        # An empty placeholder left by an earlier write already occupies the
        # key, so it is overwritten rather than created
        try:
            self._s3.put(
                self._state_key(lookup_key),
                body=identifier.encode("utf-8"),
                acl="private",
                if_absent=stored is None,
            )
        except ObjectExistsError:
            return self._winner_of_race(lookup_key, identifier)
        except _STORE_ERRORS as e:
            raise StoreUnavailableError(f"Failed to write state for '{lookup_key}': {e}") from e

        try:
            self._write_redirect(lookup_key, identifier)
        except _STORE_ERRORS as e:
            logger.error("Redirect %s for %r was not created: %s", identifier, lookup_key, e)
            raise PartialCommitError(lookup_key, identifier) from e

        logger.info("Allocated %s for %r", identifier, lookup_key)
        return identifier

    def lookup(self, lookup_key: str) -> str | None:
        return self._read_state(lookup_key) or None

    def format_redirect_target(self, lookup_key: str) -> str:
        return self.redirect_target_format % (lookup_key,)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _state_key(self, lookup_key: str) -> str:
        return self.state_prefix + lookup_key

    def _read_state(self, lookup_key: str) -> str | None:
        try:
            return self._s3.get_text(self._state_key(lookup_key))
        except _STORE_ERRORS as e:
            raise StoreUnavailableError(f"Failed to read state for '{lookup_key}': {e}") from e

    def _exists(self, identifier: str) -> bool:
        try:
            return self._s3.exists(identifier)
        except _STORE_ERRORS as e:
            raise StoreUnavailableError(f"Failed to probe '{identifier}': {e}") from e

    def _unused_identifier(self) -> str:
        for _ in range(self.max_attempts):
            candidate = self.link_prefix + self._token_source(self.identifier_length)
            if not self._exists(candidate):
                return candidate
            logger.debug("Identifier %s is taken, drawing again", candidate)
        raise IdentifierSpaceExhaustedError(self.max_attempts)

    def _write_redirect(self, lookup_key: str, identifier: str) -> None:
        self._s3.put(
            identifier,
            acl="public-read",
            redirect_location=self.format_redirect_target(lookup_key),
        )

    def _winner_of_race(self, lookup_key: str, discarded: str) -> str:
        winner = self._read_state(lookup_key)
        if not winner:
            raise StoreUnavailableError(
                f"State for '{lookup_key}' was created concurrently but reads back empty"
            )
        logger.warning(
            "Lost allocation race for %r; using %s instead of %s", lookup_key, winner, discarded
        )
        return winner

    def _repair(self, lookup_key: str, identifier: str) -> None:
        if self._exists(identifier):
            return
        logger.warning("Redirect %s for %r is missing, recreating it", identifier, lookup_key)
        try:
            self._write_redirect(lookup_key, identifier)
        except _STORE_ERRORS as e:
            raise PartialCommitError(lookup_key, identifier) from e
