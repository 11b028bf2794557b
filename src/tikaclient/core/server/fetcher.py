"""
Download the server archive.

A single streaming GET is written to a ``.part`` file next to the target and
renamed into place once the body has been fully written, so a failed download
never leaves a truncated archive behind under the final name. There is no
retry; callers decide whether to try again.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import httpx

from tikaclient.core.exceptions import HTTPStatusError, NetworkError, TikaIOError
from tikaclient.core.server.models import DownloadedArtifact

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_TIMEOUT = 300.0
CHUNK_SIZE = 64 * 1024

ProgressCallback = Callable[[int, int | None], None]


@dataclass(frozen=True)
class DownloadResult:
    """A finished download."""

    artifact: DownloadedArtifact
    bytes_written: int


def download_artifact(
    url: str,
    destination_dir: Path,
    *,
    filename: str,
    client: httpx.Client | None = None,
    timeout: float = DEFAULT_DOWNLOAD_TIMEOUT,
    on_progress: ProgressCallback | None = None,
) -> DownloadResult:
    """
    Stream ``url`` into ``destination_dir / filename``.

    Args:
        url: Remote archive URL
        destination_dir: Directory to write into (created if missing)
        filename: Target file name; an existing file is overwritten
        client: HTTP client to use; a short-lived one is created if omitted
        timeout: Timeout in seconds for the short-lived client
        on_progress: Called with (bytes written so far, total size if known)

    Returns:
        DownloadResult with the DownloadedArtifact and the byte count

    Raises:
        NetworkError: On transport failures
        HTTPStatusError: If the server answers with a non-success status
        TikaIOError: If the file cannot be created or written
    """
    target = Path(destination_dir) / filename
    partial = target.with_name(target.name + ".part")

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise TikaIOError(
            f"Failed to create directory {target.parent}: {e}", path=str(target.parent)
        ) from e

    owns_client = client is None
    http = client if client is not None else httpx.Client(timeout=timeout)
    written = 0
    try:
        logger.info("Downloading %s to %s", url, target)
        with http.stream("GET", url, follow_redirects=True) as response:
            if response.is_error:
                raise HTTPStatusError(
                    f"Failed to download {url}",
                    status_code=response.status_code,
                    url=url,
                )
            length = response.headers.get("Content-Length")
            total = int(length) if length and length.isdigit() else None
            with partial.open("wb") as f:
                for chunk in response.iter_bytes(CHUNK_SIZE):
                    f.write(chunk)
                    written += len(chunk)
                    if on_progress is not None:
                        on_progress(written, total)
        os.replace(partial, target)
    except httpx.HTTPError as e:
        _discard(partial)
        raise NetworkError(f"Failed to download {url}: {e}", url=url) from e
    except OSError as e:
        _discard(partial)
        raise TikaIOError(f"Failed to write {target}: {e}", path=str(target)) from e
    except BaseException:
        _discard(partial)
        raise
    finally:
        if owns_client:
            http.close()

    logger.info("Wrote %d bytes to %s", written, target)
    return DownloadResult(artifact=DownloadedArtifact(path=target), bytes_written=written)


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Failed to remove partial download %s: %s", path, e)


__all__ = ["DownloadResult", "download_artifact", "DEFAULT_DOWNLOAD_TIMEOUT"]
