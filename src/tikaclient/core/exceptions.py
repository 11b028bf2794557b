"""
Custom exceptions for tikaclient.

This module defines the error taxonomy shared by the resolver, the artifact
fetcher, the process supervisor and the HTTP client. Every error carries an
``ErrorKind`` so callers can react to a failure class without matching on
concrete exception types.

Exception Hierarchy:
    TikaError (base)
    ├── ConfigurationError (invalid or missing settings, mode mismatch)
    ├── TikaIOError (filesystem failures)
    ├── NetworkError (transport failures)
    │   ├── HTTPStatusError (non-success HTTP status)
    │   └── ServerError (sidecar spawn, readiness or termination failures)
    ├── SerializationError (malformed response bodies)
    ├── UrlParseError (malformed endpoint URL)
    ├── AddressParseError (malformed bind address)
    └── InvalidTypeNameError (unknown configuration endpoint name)

Example:
    >>> from tikaclient.core.exceptions import ErrorKind, NetworkError
    >>> try:
    ...     raise NetworkError("no language detected", url="http://localhost:9998")
    ... except NetworkError as e:
    ...     assert e.kind is ErrorKind.NETWORK
    ...     print(e.context["url"])
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure classes reported by tikaclient."""

    CONFIGURATION = "configuration"
    IO = "io"
    NETWORK = "network"
    SERIALIZATION = "serialization"
    URL_PARSE = "url_parse"
    ADDRESS_PARSE = "address_parse"
    INVALID_TYPE_NAME = "invalid_type_name"


class TikaError(Exception):
    """
    Base exception for all tikaclient errors.

    Attributes:
        message: Human-readable error message
        context: Optional dictionary of additional context
        kind: Failure class of this error
    """

    kind: ErrorKind = ErrorKind.CONFIGURATION

    def __init__(self, message: str, **context: object) -> None:
        """
        Initialize an error with message and context.

        Args:
            message: Human-readable error message
            **context: Additional context as keyword arguments
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message


class ConfigurationError(TikaError):
    """
    Invalid or missing configuration.

    Raised for mode mismatches (e.g. starting a sidecar from a remote-only
    client), undecodable environment values, malformed numeric settings and
    artifacts that are configured but missing on disk.
    """

    kind = ErrorKind.CONFIGURATION


class TikaIOError(TikaError):
    """Filesystem failure while creating directories or writing artifacts."""

    kind = ErrorKind.IO


class NetworkError(TikaError):
    """
    Network-level failure.

    The original exception (usually an ``httpx.TransportError``) is preserved
    via ``__cause__``.
    """

    kind = ErrorKind.NETWORK


class HTTPStatusError(NetworkError):
    """
    The service answered with a non-success status code.

    Kept apart from plain transport failures so callers can tell a refused
    connection from a 4xx/5xx answer.

    Attributes:
        status_code: HTTP status code of the response
    """

    def __init__(self, message: str, status_code: int, **context: object) -> None:
        super().__init__(message, status_code=status_code, **context)
        self.status_code = status_code

    def __str__(self) -> str:
        """Return string representation with the status code."""
        return f"HTTP {self.status_code}: {self.message}"


class ServerError(NetworkError):
    """
    The sidecar process could not be brought up or torn down.

    Raised when the child fails to spawn, exits before emitting its readiness
    banner, does not become ready within the startup timeout, or cannot be
    terminated.
    """


class SerializationError(TikaError):
    """Response body could not be decoded into the expected schema."""

    kind = ErrorKind.SERIALIZATION


class UrlParseError(TikaError):
    """Malformed endpoint URL supplied at configuration time."""

    kind = ErrorKind.URL_PARSE


class AddressParseError(TikaError):
    """Malformed bind address supplied at configuration time."""

    kind = ErrorKind.ADDRESS_PARSE


class InvalidTypeNameError(TikaError):
    """
    An unknown type name was requested.

    Attributes:
        name: The rejected name
    """

    kind = ErrorKind.INVALID_TYPE_NAME

    def __init__(self, name: str, **context: object) -> None:
        super().__init__(f"invalid type name: {name}", name=name, **context)
        self.name = name


__all__ = [
    "ErrorKind",
    "TikaError",
    "ConfigurationError",
    "TikaIOError",
    "NetworkError",
    "HTTPStatusError",
    "ServerError",
    "SerializationError",
    "UrlParseError",
    "AddressParseError",
    "InvalidTypeNameError",
]
