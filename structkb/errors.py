"""Structured error kinds for the query flow.

Every failure a caller can observe is an ``AssistantError`` whose ``kind``
tells the web layer, the CLI and tests what went wrong without matching on
message strings. ``message`` is the user-facing text (Chinese where it is
produced locally, the provider's own text where one was returned).
"""

from __future__ import annotations

from enum import Enum

#: Shown when nothing more specific is known.
GENERIC_FAILURE_MESSAGE = "请求失败，请检查网络或 API Key"


class ErrorKind(str, Enum):
    """What went wrong during a query."""

    MISSING_CREDENTIAL = "missing_credential"
    NETWORK_FAILURE = "network_failure"
    PROVIDER_ERROR = "provider_error"
    EMPTY_RESPONSE = "empty_response"


class AssistantError(Exception):
    """Base class for all query-flow failures."""

    kind: ErrorKind = ErrorKind.PROVIDER_ERROR

    def __init__(self, message: str = "") -> None:
        self.message = message or GENERIC_FAILURE_MESSAGE
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}


class MissingCredentialError(AssistantError):
    """No API key configured for the selected provider."""

    kind = ErrorKind.MISSING_CREDENTIAL


class NetworkError(AssistantError):
    """The provider could not be reached."""

    kind = ErrorKind.NETWORK_FAILURE


class ProviderError(AssistantError):
    """The provider answered with a non-success response."""

    kind = ErrorKind.PROVIDER_ERROR


class EmptyResponseError(AssistantError):
    """The provider succeeded but returned no usable text."""

    kind = ErrorKind.EMPTY_RESPONSE
