"""
Locate the runnable server artifact.

Resolution precedence is fixed:
    configured artifact path > executable on the search path > download

The resolver only reads its inputs and filesystem metadata. A configured path
is returned even when nothing exists there yet, so the supervisor can report
"configured but missing" instead of silently falling back to a download.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from tikaclient.core.exceptions import ConfigurationError
from tikaclient.core.server.models import (
    ArtifactLocation,
    EnvironmentArtifact,
    RemoteDownload,
    SystemExecutable,
)

logger = logging.getLogger(__name__)

DEFAULT_EXECUTABLE_NAME = "tika-rest-server"

DOWNLOAD_URL_TEMPLATE = (
    "https://repo1.maven.org/maven2/org/apache/tika/tika-server/"
    "{version}/tika-server-{version}.jar"
)


def download_url(version: str, url_template: str = DOWNLOAD_URL_TEMPLATE) -> str:
    """Form the download URL for a server version."""
    return url_template.format(version=version)


def artifact_filename(version: str) -> str:
    """Deterministic local file name for a downloaded server archive."""
    return f"tika-server-{version}.jar"


def _decode_override(value: str | bytes) -> str:
    """
    Return the override as text.

    ``os.environ`` smuggles undecodable bytes through as lone surrogates, so a
    str that cannot be encoded back to UTF-8 is just as undecodable as raw bytes.
    """
    try:
        if isinstance(value, bytes):
            return value.decode("utf-8")
        value.encode("utf-8")
    except UnicodeError as e:
        raise ConfigurationError(
            "Artifact path override is set but is not valid unicode",
            value=repr(value),
        ) from e
    return value


def resolve_artifact(
    *,
    artifact_override: str | bytes | None,
    version: str,
    executable_name: str = DEFAULT_EXECUTABLE_NAME,
    search_path: str | None = None,
    url_template: str = DOWNLOAD_URL_TEMPLATE,
) -> ArtifactLocation | RemoteDownload:
    """
    Decide where the server artifact comes from.

    Args:
        artifact_override: Configured archive path (e.g. ``TIKA_SERVER_JAR``)
        version: Server version, used to form the download URL
        executable_name: Name probed on the search path
        search_path: ``PATH``-style string; ``None`` uses the process PATH
        url_template: Download URL template with a ``{version}`` field

    Returns:
        EnvironmentArtifact, SystemExecutable, or a RemoteDownload placeholder

    Raises:
        ConfigurationError: If the override is set but not decodable text
    """
    if artifact_override is not None:
        path = _decode_override(artifact_override)
        if path:
            logger.debug("Using configured artifact %s", path)
            return EnvironmentArtifact(path=Path(path))

    found = shutil.which(executable_name, path=search_path)
    if found:
        logger.debug("Found %s on the search path at %s", executable_name, found)
        return SystemExecutable(path=Path(found))

    url = download_url(version, url_template)
    logger.debug("No local artifact found; will download %s", url)
    return RemoteDownload(url=url, filename=artifact_filename(version))


__all__ = [
    "DEFAULT_EXECUTABLE_NAME",
    "DOWNLOAD_URL_TEMPLATE",
    "download_url",
    "artifact_filename",
    "resolve_artifact",
]
