"""Custom exceptions for Hoarder Social Relay.

This module defines the exception hierarchy used throughout the relay.
All event-handling exceptions inherit from RelayError, which allows
for unified error handling in the webhook handler and dispatcher.
"""


class RelayError(Exception):
    """Base class for relay errors.

    All recoverable errors while handling a webhook event should inherit from this class.
    """


class RemoteCallError(RelayError):
    """A remote collaborator call failed.

    Raised for non-success HTTP statuses and transport errors (connection
    failures, timeouts) from the bookmark store, Bluesky or LinkedIn.
    The relay never retries these; the call site logs and degrades.
    """

    def __init__(
        self,
        message: str,
        *,
        service: str = "",
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class AuthenticationError(RemoteCallError):
    """Bluesky session exchange failed.

    Treated as a remote call failure for that platform only.
    """


class MalformedRequestError(RelayError):
    """Webhook body could not be understood.

    Surfaced to the webhook caller as HTTP 500.
    """


class ParseError(RelayError):
    """Failed to parse a remote payload.

    The payload is missing fields the relay cannot work without.
    """


class ConfigurationError(Exception):
    """Invalid configuration.

    This is NOT a RelayError - configuration issues should be fixed
    before the relay starts, not handled per event.
    """

    pass
