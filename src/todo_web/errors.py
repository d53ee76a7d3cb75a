from __future__ import annotations


# PUBLIC_INTERFACE
class TodoAppError(Exception):
    """
    Base class for every error the application turns into an HTTP response.

    Subclasses set `status_code`; the message is sent to the client verbatim
    as a plain-text body.
    """

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(TodoAppError):
    """Required settings are missing or malformed. Fatal at startup."""


class InvalidInputError(TodoAppError):
    """Client supplied form data that cannot be accepted."""

    status_code = 400


class BackendError(TodoAppError):
    """A call to DynamoDB or Bedrock did not produce a usable result."""


class BackendUnavailableError(BackendError):
    """The service could not be reached or refused the call."""


class BackendBadResponseError(BackendError):
    """The service answered, but with something we cannot use."""
