"""
HTTP client for the document-analysis service.

``TikaClient`` issues requests against the endpoint derived from its
configuration: either a locally managed sidecar (``ManagedLocal``) or an
existing service (``RemoteOnly``). Lifecycle calls are delegated to a
``ServerSupervisor``; request operations never touch the process.

Every operation makes exactly one round trip and never retries. Transport
failures raise ``NetworkError``, non-success answers raise ``HTTPStatusError``
and undecodable bodies raise ``SerializationError``.

Example:
    >>> with TikaClient.remote("http://localhost:9998") as client:
    ...     client.detectors().name
    'org.apache.tika.detect.DefaultDetector'
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from tikaclient.core.config.loader import load_config
from tikaclient.core.config.models import DEFAULT_BIND_ADDRESS, ServiceConfig
from tikaclient.core.exceptions import (
    HTTPStatusError,
    NetworkError,
    SerializationError,
    UrlParseError,
)
from tikaclient.core.server.fetcher import ProgressCallback
from tikaclient.core.server.models import (
    BindAddress,
    DownloadedArtifact,
    ServerState,
)
from tikaclient.core.server.supervisor import ServerSupervisor
from tikaclient.core.web.models import ConfigPath, Detector, MimeType, Parser
from tikaclient.core.web.translate import Translator, normalize_language

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

JSON = "application/json"
TEXT = "text/plain"

DETECT_PATH = "detect/stream"
LANGUAGE_PATH = "language/string"

# Characters of an error response body kept on HTTPStatusError
ERROR_BODY_LIMIT = 500

RequestContent = bytes | str


class TikaClient:
    """
    Client for a Tika-compatible document-analysis server.

    Attributes:
        config: Service configuration shared with the supervisor
    """

    def __init__(
        self,
        config: ServiceConfig,
        *,
        http_client: httpx.Client | None = None,
        supervisor: ServerSupervisor | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Service configuration
            http_client: HTTP client to use; one is created (and closed by
                ``close``) if omitted
            supervisor: Supervisor for the managed sidecar; created if omitted
        """
        self.config = config
        self._owns_http = http_client is None
        self._http = (
            http_client
            if http_client is not None
            else httpx.Client(timeout=config.request_timeout)
        )
        self._supervisor = (
            supervisor
            if supervisor is not None
            else ServerSupervisor(config, http_client=self._http)
        )
        self._closed = False

    @classmethod
    def remote(
        cls, endpoint_url: str, *, http_client: httpx.Client | None = None, **overrides: Any
    ) -> TikaClient:
        """Client for an existing service; never spawns a process."""
        config = ServiceConfig.build(
            mode={"kind": "remote_only", "endpoint_url": endpoint_url}, **overrides
        )
        return cls(config, http_client=http_client)

    @classmethod
    def managed(
        cls,
        bind_address: str | BindAddress = DEFAULT_BIND_ADDRESS,
        *,
        start: bool = True,
        http_client: httpx.Client | None = None,
        **overrides: Any,
    ) -> TikaClient:
        """
        Client that owns a local sidecar bound to ``bind_address``.

        With ``start=True`` the sidecar is started before returning; if that
        fails the client is closed and the error re-raised.
        """
        config = ServiceConfig.build(
            mode={"kind": "managed_local", "bind_address": bind_address}, **overrides
        )
        client = cls(config, http_client=http_client)
        if start:
            client._start_or_close()
        return client

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        start: bool = False,
        http_client: httpx.Client | None = None,
        **overrides: Any,
    ) -> TikaClient:
        """Build a client from ``TIKA_*`` environment variables."""
        client = cls(load_config(environ, **overrides), http_client=http_client)
        if start and not client.config.is_remote_only:
            client._start_or_close()
        return client

    def _start_or_close(self) -> None:
        try:
            self.start_server()
        except BaseException:
            self.close()
            raise

    # ------------------------------------------------------------------
    # Endpoint and lifecycle
    # ------------------------------------------------------------------

    @property
    def endpoint(self) -> str:
        return self.config.endpoint

    @property
    def supervisor(self) -> ServerSupervisor:
        return self._supervisor

    def endpoint_url(self, path: str) -> httpx.URL:
        """Resolve ``path`` against the service endpoint."""
        base = self.endpoint if self.endpoint.endswith("/") else self.endpoint + "/"
        try:
            return httpx.URL(base).join(path)
        except httpx.InvalidURL as e:
            raise UrlParseError(f"Failed to parse url: {path!r}", url=base, path=path) from e

    def is_server_live(self) -> bool:
        return self._supervisor.is_live()

    @property
    def server_state(self) -> ServerState:
        return self._supervisor.state

    def start_server(self, bind_address: str | BindAddress | None = None) -> ServerState:
        """Start the managed sidecar; see ``ServerSupervisor.start``."""
        return self._supervisor.start(bind_address)

    def stop_server(self) -> None:
        self._supervisor.stop()

    def restart_server(self, bind_address: str | BindAddress | None = None) -> ServerState:
        """Restart the managed sidecar, optionally on a new address."""
        return self._supervisor.restart(bind_address)

    def download_server(self, on_progress: ProgressCallback | None = None) -> DownloadedArtifact:
        return self._supervisor.download(on_progress=on_progress)

    def close(self) -> None:
        """Stop a managed sidecar and release the HTTP client. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._supervisor.close()
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> TikaClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __del__(self) -> None:
        if not hasattr(self, "_closed"):
            return
        try:
            self.close()
        except Exception as e:
            logger.error("Error while releasing tika client: %s", e)

    def __repr__(self) -> str:
        return f"TikaClient(endpoint={self.endpoint!r}, state={self.server_state.value})"

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Send one request to ``path`` relative to the endpoint.

        Raises:
            NetworkError: On transport failures
            HTTPStatusError: On a non-success status code
        """
        url = self.endpoint_url(path)
        try:
            response = self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise NetworkError(f"{method} {url} failed: {e}", url=str(url)) from e
        if response.is_error:
            raise HTTPStatusError(
                f"{method} {url} failed",
                status_code=response.status_code,
                url=str(url),
                body=response.text[:ERROR_BODY_LIMIT],
            )
        return response

    def get_json(self, path: str) -> httpx.Response:
        """GET ``path`` with ``Accept: application/json``; the body is left undecoded."""
        return self.request("GET", path, headers={"Accept": JSON})

    def put_stream(self, path: str, body: RequestContent, accept: str) -> httpx.Response:
        """PUT ``body`` to ``path`` with the given ``Accept`` header."""
        return self.request("PUT", path, content=body, headers={"Accept": accept})

    # ------------------------------------------------------------------
    # Server configuration
    # ------------------------------------------------------------------

    def detectors(self) -> Detector:
        return _decode(self.get_json(ConfigPath.DETECTORS.path), Detector)

    def parsers(self) -> Parser:
        return _decode(self.get_json(ConfigPath.PARSERS.path), Parser)

    def parsers_details(self) -> Parser:
        return _decode(self.get_json(ConfigPath.PARSERS_DETAILS.path), Parser)

    def mime_types(self) -> list[MimeType]:
        """Mime type catalog, flattened into records keyed by identifier."""
        catalog = _json(self.get_json(ConfigPath.MIME_TYPES.path))
        if not isinstance(catalog, dict):
            raise SerializationError(
                "invalid serde: expected a map of mime types", path=ConfigPath.MIME_TYPES.path
            )
        try:
            return MimeType.from_catalog(catalog)
        except ValidationError as e:
            raise SerializationError(f"invalid serde: {e}", path=ConfigPath.MIME_TYPES.path) from e

    def server_config(self, path: ConfigPath) -> Detector | Parser | list[MimeType]:
        """Fetch and decode one of the configuration endpoints."""
        match path:
            case ConfigPath.DETECTORS:
                return self.detectors()
            case ConfigPath.PARSERS:
                return self.parsers()
            case ConfigPath.PARSERS_DETAILS:
                return self.parsers_details()
            case ConfigPath.MIME_TYPES:
                return self.mime_types()

    # ------------------------------------------------------------------
    # Detection and translation
    # ------------------------------------------------------------------

    def translate(
        self,
        content: RequestContent,
        dest_lang: str,
        src_lang: str | None = None,
        translator: Translator | None = None,
    ) -> str:
        """
        Translate ``content`` into ``dest_lang``.

        The source language is auto-detected by the server when ``src_lang``
        is omitted. ``translator`` defaults to the configured backend.
        """
        backend = translator or self.config.translator
        segments = ["translate", "all", backend.jvm_class]
        if src_lang is not None:
            segments.append(normalize_language(src_lang))
        segments.append(normalize_language(dest_lang))
        return self.put_stream("/".join(segments), content, TEXT).text

    def detect_language(self, content: RequestContent) -> str:
        """
        Detect the language of ``content``.

        Raises:
            NetworkError: If the server answers with an empty body
        """
        url = self.endpoint_url(LANGUAGE_PATH)
        language = self.put_stream(LANGUAGE_PATH, content, TEXT).text.strip()
        if not language:
            raise NetworkError("no language detected", url=str(url))
        return language

    def detect_mime(self, content: RequestContent) -> str:
        """Detect the mime type of ``content``; the server's answer is returned as is."""
        return self.put_stream(DETECT_PATH, content, TEXT).text.strip()


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise SerializationError(f"invalid serde: {e}", url=str(response.url)) from e


def _decode(response: httpx.Response, model: type[M]) -> M:
    data = _json(response)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise SerializationError(f"invalid serde: {e}", url=str(response.url)) from e


__all__ = ["TikaClient"]
