"""
Sidecar lifecycle: artifact resolution, download and process supervision.

The supervisor lives in ``tikaclient.core.server.supervisor``.
"""

from tikaclient.core.server.models import (
    ArtifactLocation,
    BindAddress,
    DownloadedArtifact,
    EnvironmentArtifact,
    ManagedLocal,
    OperatingMode,
    RemoteDownload,
    RemoteOnly,
    ServerState,
    SystemExecutable,
    Verbosity,
)
from tikaclient.core.server.resolver import resolve_artifact

__all__ = [
    "ArtifactLocation",
    "BindAddress",
    "DownloadedArtifact",
    "EnvironmentArtifact",
    "ManagedLocal",
    "OperatingMode",
    "RemoteDownload",
    "RemoteOnly",
    "ServerState",
    "SystemExecutable",
    "Verbosity",
    "resolve_artifact",
]
