"""
Configuration model for tikaclient.

``ServiceConfig`` is built once (directly, or from the environment via
``tikaclient.core.config.loader.load_config``) and then only read. The two
exceptions are owned by the supervisor: ``artifact`` is replaced after a
successful download, and ``mode`` is replaced when a sidecar is restarted on a
new address.
"""

import tempfile
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from tikaclient.core.exceptions import ConfigurationError

from tikaclient.core.server.models import (
    DownloadedArtifact,
    EnvironmentArtifact,
    ManagedLocal,
    OperatingMode,
    RemoteDownload,
    SystemExecutable,
    Verbosity,
)
from tikaclient.core.server.resolver import artifact_filename, download_url
from tikaclient.core.web.translate import Translator

DEFAULT_VERSION = "1.20"
DEFAULT_BIND_ADDRESS = "127.0.0.1:9998"
DEFAULT_ENTRY_POINT = "org.apache.tika.server.TikaServerCli"
DEFAULT_READINESS_BANNER = "Started Apache Tika server at"


class ServiceConfig(BaseModel):
    """
    Everything needed to reach (and optionally run) the document-analysis service.

    Example:
        >>> from tikaclient.core.server.models import RemoteOnly
        >>> config = ServiceConfig(mode=RemoteOnly(endpoint_url="http://localhost:9998"))
        >>> config.endpoint
        'http://localhost:9998'
    """

    version: str = Field(
        default=DEFAULT_VERSION,
        min_length=1,
        description="Server version, used to form download URLs"
    )
    storage_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        description="Where downloaded artifacts are stored"
    )
    artifact: Union[
        SystemExecutable, EnvironmentArtifact, DownloadedArtifact, RemoteDownload, None
    ] = Field(
        default=None,
        description="Resolved artifact, or a placeholder to download (None = derive from version)"
    )
    mode: OperatingMode = Field(
        default_factory=lambda: ManagedLocal(bind_address=DEFAULT_BIND_ADDRESS),
        description="Managed local sidecar or existing remote endpoint"
    )
    translator: Translator = Field(
        default=Translator.LINGO24,
        description="Translator backend used by the translate endpoint"
    )
    verbosity: Verbosity = Field(
        default=Verbosity.SILENT,
        description="Whether sidecar output reaches the parent's console"
    )
    java: str = Field(
        default="java",
        description="Runtime interpreter used to run server archives"
    )
    entry_point: str = Field(
        default=DEFAULT_ENTRY_POINT,
        description="Main class passed to the runtime interpreter"
    )
    readiness_banner: str = Field(
        default=DEFAULT_READINESS_BANNER,
        min_length=1,
        description="Substring on the sidecar's stderr that signals readiness"
    )
    startup_timeout: Optional[float] = Field(
        default=60.0,
        gt=0,
        description="Seconds to wait for readiness (None waits indefinitely)"
    )
    stop_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds to wait for the sidecar to exit before killing it"
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Per-request HTTP timeout in seconds"
    )
    reuse_download: bool = Field(
        default=True,
        description="Adopt a previously downloaded archive instead of fetching again"
    )

    @classmethod
    def build(cls, **values: Any) -> "ServiceConfig":
        """
        Validate ``values`` into a config.

        Raises:
            ConfigurationError: If a value is out of range or of the wrong type
        """
        try:
            return cls(**values)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors(include_url=False)
            ]
            raise ConfigurationError(
                f"Invalid service configuration: {'; '.join(errors)}", errors=errors
            ) from e

    def model_post_init(self, __context: object) -> None:
        if self.artifact is None:
            self.artifact = RemoteDownload(
                url=download_url(self.version), filename=artifact_filename(self.version)
            )

    @property
    def endpoint(self) -> str:
        """Base URL of the service for the current mode."""
        return self.mode.endpoint

    @property
    def is_remote_only(self) -> bool:
        return self.mode.kind == "remote_only"


__all__ = [
    "ServiceConfig",
    "DEFAULT_VERSION",
    "DEFAULT_BIND_ADDRESS",
    "DEFAULT_ENTRY_POINT",
    "DEFAULT_READINESS_BANNER",
]
