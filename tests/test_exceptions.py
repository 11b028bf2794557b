"""Tests for the tikaclient error taxonomy."""

import pytest

from tikaclient.core.exceptions import (
    AddressParseError,
    ConfigurationError,
    ErrorKind,
    HTTPStatusError,
    InvalidTypeNameError,
    NetworkError,
    SerializationError,
    ServerError,
    TikaError,
    TikaIOError,
    UrlParseError,
)


class TestErrorKinds:
    """Each error class reports its failure class."""

    @pytest.mark.parametrize(
        ("error_cls", "kind"),
        [
            (ConfigurationError, ErrorKind.CONFIGURATION),
            (TikaIOError, ErrorKind.IO),
            (NetworkError, ErrorKind.NETWORK),
            (ServerError, ErrorKind.NETWORK),
            (SerializationError, ErrorKind.SERIALIZATION),
            (UrlParseError, ErrorKind.URL_PARSE),
            (AddressParseError, ErrorKind.ADDRESS_PARSE),
        ],
    )
    def test_kind(self, error_cls: type[TikaError], kind: ErrorKind) -> None:
        """Test that the kind attribute matches the class."""
        error = error_cls("boom")
        assert error.kind is kind
        assert isinstance(error, TikaError)

    def test_http_status_is_network_error(self) -> None:
        """Test that status failures can be caught as network failures."""
        error = HTTPStatusError("GET /detectors failed", status_code=503)
        assert isinstance(error, NetworkError)
        assert error.kind is ErrorKind.NETWORK

    def test_invalid_type_name(self) -> None:
        """Test the invalid type name message and kind."""
        error = InvalidTypeNameError("bogus")
        assert error.kind is ErrorKind.INVALID_TYPE_NAME
        assert error.name == "bogus"
        assert str(error) == "invalid type name: bogus"


class TestErrorContext:
    """Errors carry their message and keyword context."""

    def test_message_and_context(self) -> None:
        """Test that context keywords are preserved."""
        error = NetworkError("no language detected", url="http://localhost:9998")
        assert error.message == "no language detected"
        assert str(error) == "no language detected"
        assert error.context == {"url": "http://localhost:9998"}

    def test_http_status_str(self) -> None:
        """Test that the status code is part of the string form."""
        error = HTTPStatusError("PUT /translate failed", status_code=500, url="u")
        assert error.status_code == 500
        assert str(error) == "HTTP 500: PUT /translate failed"
        assert error.context["status_code"] == 500
        assert error.context["url"] == "u"

    def test_cause_is_preserved(self) -> None:
        """Test that chained causes survive raising."""
        with pytest.raises(NetworkError) as exc_info:
            try:
                raise ConnectionRefusedError("refused")
            except ConnectionRefusedError as e:
                raise NetworkError("connect failed") from e
        assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)
