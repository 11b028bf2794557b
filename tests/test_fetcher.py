"""Tests for the server archive fetcher."""

from pathlib import Path

import httpx
import pytest

from tikaclient.core.exceptions import HTTPStatusError, NetworkError, TikaIOError
from tikaclient.core.server.fetcher import download_artifact
from tikaclient.core.server.models import DownloadedArtifact

URL = "https://repo.test/tika-server-1.20.jar"
PAYLOAD = b"PK\x03\x04" + b"x" * 200_000


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestDownloadArtifact:
    """Tests for download_artifact."""

    def test_writes_file(self, storage_dir: Path) -> None:
        """Test that the body lands under the requested name."""
        with _client(lambda request: httpx.Response(200, content=PAYLOAD)) as client:
            result = download_artifact(
                URL, storage_dir, filename="tika-server-1.20.jar", client=client
            )

        target = storage_dir / "tika-server-1.20.jar"
        assert result.artifact == DownloadedArtifact(path=target)
        assert result.bytes_written == len(PAYLOAD)
        assert target.read_bytes() == PAYLOAD
        assert not (storage_dir / "tika-server-1.20.jar.part").exists()

    def test_creates_destination(self, tmp_path: Path) -> None:
        """Test that a missing destination directory is created."""
        destination = tmp_path / "a" / "b"
        with _client(lambda request: httpx.Response(200, content=b"jar")) as client:
            result = download_artifact(URL, destination, filename="t.jar", client=client)
        assert result.artifact.exists()

    def test_reports_progress(self, storage_dir: Path) -> None:
        """Test that progress ends at the full size with a known total."""
        calls: list[tuple[int, int | None]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, content=PAYLOAD, headers={"Content-Length": str(len(PAYLOAD))}
            )

        with _client(handler) as client:
            download_artifact(
                URL,
                storage_dir,
                filename="t.jar",
                client=client,
                on_progress=lambda written, total: calls.append((written, total)),
            )

        assert calls
        assert calls[-1] == (len(PAYLOAD), len(PAYLOAD))
        assert [written for written, _ in calls] == sorted(written for written, _ in calls)

    def test_overwrites_existing(self, storage_dir: Path) -> None:
        """Test that an existing file is replaced."""
        target = storage_dir / "t.jar"
        target.write_bytes(b"old")
        with _client(lambda request: httpx.Response(200, content=b"new")) as client:
            download_artifact(URL, storage_dir, filename="t.jar", client=client)
        assert target.read_bytes() == b"new"

    def test_http_status_error(self, storage_dir: Path) -> None:
        """Test that a non-success status fails without leaving files."""
        with _client(lambda request: httpx.Response(404, content=b"not found")) as client:
            with pytest.raises(HTTPStatusError) as exc_info:
                download_artifact(URL, storage_dir, filename="t.jar", client=client)

        assert exc_info.value.status_code == 404
        assert list(storage_dir.iterdir()) == []

    def test_transport_error(self, storage_dir: Path) -> None:
        """Test that transport failures become NetworkError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with _client(handler) as client:
            with pytest.raises(NetworkError) as exc_info:
                download_artifact(URL, storage_dir, filename="t.jar", client=client)

        assert not isinstance(exc_info.value, HTTPStatusError)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert list(storage_dir.iterdir()) == []

    def test_unwritable_destination(self, tmp_path: Path) -> None:
        """Test that a destination that cannot be created is an IO error."""
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with _client(lambda request: httpx.Response(200, content=b"jar")) as client:
            with pytest.raises(TikaIOError):
                download_artifact(URL, blocker / "sub", filename="t.jar", client=client)

    def test_follows_redirects(self, storage_dir: Path) -> None:
        """Test that mirrors answering with a redirect are followed."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "repo.test":
                return httpx.Response(302, headers={"Location": "https://mirror.test/t.jar"})
            return httpx.Response(200, content=b"mirrored")

        with _client(handler) as client:
            result = download_artifact(URL, storage_dir, filename="t.jar", client=client)
        assert result.artifact.path.read_bytes() == b"mirrored"
