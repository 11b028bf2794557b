"""
Data models for the sidecar lifecycle.

These models describe where the server artifact lives, how the client talks to
the service (a locally managed sidecar or an existing remote endpoint), and the
state of the supervised child process.

Key Models:
    - BindAddress: validated ``ip:port`` pair the sidecar binds to
    - ManagedLocal / RemoteOnly: the two operating modes (``OperatingMode``)
    - SystemExecutable / EnvironmentArtifact / DownloadedArtifact: resolved
      artifacts (``ArtifactLocation``)
    - RemoteDownload: placeholder for an artifact that still has to be fetched
    - ServerState: supervisor state machine
    - ProcessHandle: the live child process and its stream pumps
"""

from __future__ import annotations

import ipaddress
import subprocess
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Literal, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from tikaclient.core.exceptions import AddressParseError, UrlParseError

if TYPE_CHECKING:
    from tikaclient.core.server.supervisor import StreamPump


class BindAddress(BaseModel):
    """Network address a managed sidecar binds to."""

    model_config = ConfigDict(frozen=True)

    host: ipaddress.IPv4Address | ipaddress.IPv6Address
    port: int = Field(ge=0, le=65535)

    @classmethod
    def parse(cls, value: str) -> BindAddress:
        """
        Parse an ``ip:port`` string (IPv6 hosts in brackets, e.g. ``[::1]:9998``).

        Raises:
            AddressParseError: If the string is not a valid socket address
        """
        text = value.strip()
        if text.startswith("["):
            host_part, sep, port_part = text[1:].partition("]:")
        else:
            host_part, sep, port_part = text.rpartition(":")
        if not sep or not host_part or not port_part:
            raise AddressParseError(f"Failed to parse address: {value!r}", address=value)
        try:
            host = ipaddress.ip_address(host_part)
            port = int(port_part)
        except ValueError as e:
            raise AddressParseError(f"Failed to parse address: {value!r}", address=value) from e
        if not 0 <= port <= 65535:
            raise AddressParseError(f"Port out of range in address: {value!r}", address=value)
        if not text.startswith("[") and host.version == 6:
            raise AddressParseError(
                f"IPv6 addresses must be bracketed: {value!r}", address=value
            )
        return cls(host=host, port=port)

    def __str__(self) -> str:
        if self.host.version == 6:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def validate_endpoint(url: str) -> str:
    """
    Check that ``url`` is an absolute http(s) URL and return it unchanged.

    Raises:
        UrlParseError: If the URL is malformed or not http(s)
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise UrlParseError(f"Failed to parse url: {url!r}", url=url) from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise UrlParseError(f"Failed to parse url: {url!r}", url=url)
    return url


class ManagedLocal(BaseModel):
    """The client owns a sidecar process bound to ``bind_address``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["managed_local"] = "managed_local"
    bind_address: BindAddress

    @field_validator("bind_address", mode="before")
    @classmethod
    def _parse_bind_address(cls, v: object) -> object:
        if isinstance(v, str):
            return BindAddress.parse(v)
        return v

    @property
    def endpoint(self) -> str:
        return f"http://{self.bind_address}"


class RemoteOnly(BaseModel):
    """The client only issues HTTP calls against an existing endpoint."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["remote_only"] = "remote_only"
    endpoint_url: str

    @field_validator("endpoint_url")
    @classmethod
    def _validate_endpoint_url(cls, v: str) -> str:
        return validate_endpoint(v)

    @property
    def endpoint(self) -> str:
        return self.endpoint_url


OperatingMode = Annotated[Union[ManagedLocal, RemoteOnly], Field(discriminator="kind")]


class _Artifact(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: Path

    def exists(self) -> bool:
        """Whether the artifact is present on disk."""
        return self.path.is_file()


class SystemExecutable(_Artifact):
    """An executable found on the search path; invoked directly."""

    kind: Literal["system_executable"] = "system_executable"


class EnvironmentArtifact(_Artifact):
    """An archive named by configuration; run through the runtime interpreter."""

    kind: Literal["environment_artifact"] = "environment_artifact"


class DownloadedArtifact(_Artifact):
    """An archive fetched into the storage directory."""

    kind: Literal["downloaded_artifact"] = "downloaded_artifact"


ArtifactLocation = Annotated[
    Union[SystemExecutable, EnvironmentArtifact, DownloadedArtifact],
    Field(discriminator="kind"),
]


class RemoteDownload(BaseModel):
    """Placeholder for an artifact that must be downloaded before use."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["remote_download"] = "remote_download"
    url: str
    filename: str


class Verbosity(str, Enum):
    """How much of the sidecar's output reaches the parent's console."""

    SILENT = "silent"
    VERBOSE = "verbose"


class ServerState(str, Enum):
    """Supervisor state machine."""

    NO_PROCESS = "no_process"
    STARTING = "starting"
    READY = "ready"
    STOPPING = "stopping"


@dataclass
class ProcessHandle:
    """
    A live sidecar process.

    ``stdout_pump`` is only set when stdout is captured (silent mode); stderr
    is always captured so the readiness banner can be scanned.
    """

    process: subprocess.Popen[bytes]
    bind_address: BindAddress
    command: list[str]
    stderr_pump: StreamPump
    stdout_pump: StreamPump | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def pid(self) -> int:
        return self.process.pid

    def poll(self) -> int | None:
        return self.process.poll()


__all__ = [
    "BindAddress",
    "validate_endpoint",
    "ManagedLocal",
    "RemoteOnly",
    "OperatingMode",
    "SystemExecutable",
    "EnvironmentArtifact",
    "DownloadedArtifact",
    "ArtifactLocation",
    "RemoteDownload",
    "Verbosity",
    "ServerState",
    "ProcessHandle",
]
