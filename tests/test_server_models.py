"""Tests for sidecar lifecycle models."""

import ipaddress
from pathlib import Path

import pytest

from tikaclient.core.exceptions import AddressParseError, UrlParseError
from tikaclient.core.server.models import (
    BindAddress,
    DownloadedArtifact,
    EnvironmentArtifact,
    ManagedLocal,
    RemoteOnly,
    validate_endpoint,
)


class TestBindAddress:
    """Tests for BindAddress parsing and formatting."""

    def test_parse_ipv4(self) -> None:
        """Test parsing an IPv4 address."""
        address = BindAddress.parse("127.0.0.1:9998")
        assert address.host == ipaddress.ip_address("127.0.0.1")
        assert address.port == 9998
        assert str(address) == "127.0.0.1:9998"

    def test_parse_ipv6(self) -> None:
        """Test that bracketed IPv6 addresses round-trip."""
        address = BindAddress.parse("[::1]:9999")
        assert address.host.version == 6
        assert address.port == 9999
        assert str(address) == "[::1]:9999"

    @pytest.mark.parametrize(
        "value",
        [
            "127.0.0.1",
            "localhost:9998",
            "127.0.0.1:http",
            "127.0.0.1:70000",
            "::1:9998",
            ":9998",
            "",
        ],
    )
    def test_invalid(self, value: str) -> None:
        """Test that malformed addresses are rejected."""
        with pytest.raises(AddressParseError):
            BindAddress.parse(value)


class TestOperatingMode:
    """Tests for endpoint derivation."""

    def test_managed_local_endpoint(self) -> None:
        """Test that a managed endpoint is http:// plus the bind address."""
        mode = ManagedLocal(bind_address="0.0.0.0:9000")
        assert mode.endpoint == "http://0.0.0.0:9000"
        assert mode.kind == "managed_local"

    def test_managed_local_accepts_bind_address(self) -> None:
        """Test passing an already parsed address."""
        mode = ManagedLocal(bind_address=BindAddress.parse("[::1]:9998"))
        assert mode.endpoint == "http://[::1]:9998"

    def test_managed_local_bad_address(self) -> None:
        """Test that address errors propagate unwrapped."""
        with pytest.raises(AddressParseError):
            ManagedLocal(bind_address="nowhere")

    def test_remote_only_endpoint_unchanged(self) -> None:
        """Test that a remote endpoint is used exactly as given."""
        mode = RemoteOnly(endpoint_url="https://tika.example.com:8443/tika")
        assert mode.endpoint == "https://tika.example.com:8443/tika"

    @pytest.mark.parametrize("url", ["not a url", "ftp://tika.example.com", "http://"])
    def test_remote_only_bad_url(self, url: str) -> None:
        """Test that malformed endpoints are rejected."""
        with pytest.raises(UrlParseError):
            RemoteOnly(endpoint_url=url)

    def test_validate_endpoint_returns_input(self) -> None:
        """Test that a valid URL is returned unchanged."""
        assert validate_endpoint("http://localhost:9998") == "http://localhost:9998"


class TestArtifacts:
    """Tests for artifact locations."""

    def test_exists(self, tmp_path: Path) -> None:
        """Test that exists() reflects the filesystem."""
        jar = tmp_path / "tika-server.jar"
        artifact = EnvironmentArtifact(path=jar)
        assert artifact.exists() is False
        jar.write_bytes(b"PK")
        assert artifact.exists() is True

    def test_directory_is_not_an_artifact(self, tmp_path: Path) -> None:
        """Test that a directory does not count as a present artifact."""
        assert DownloadedArtifact(path=tmp_path).exists() is False
