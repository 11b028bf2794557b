"""
Sidecar process supervision.

The supervisor spawns the server as a child process, watches its stderr for
the readiness banner, and tears it down again. It owns the only mutable parts
of a ``ServiceConfig`` (``artifact`` after a download, ``mode`` on restart)
and the ``ProcessHandle``; the handle's presence is the single signal that a
managed process is running.

Stream policy:
- stderr is always piped so the banner can be scanned.
- Silent: stdout is piped too. Both pipes stay open for the life of the
  process and are drained into the logger at DEBUG level.
- Verbose: stdout is inherited from the start. Scanned stderr lines are
  echoed to the console, and once the server is ready stderr is handed over
  to the console verbatim without further scanning.

``start``/``stop``/``download`` are not safe to call concurrently on one
supervisor; callers sharing a client across threads must serialize them.
Calling ``stop`` from another thread while ``start`` is blocked in the
readiness scan is supported and makes ``start`` fail with ``ServerError``.
"""

from __future__ import annotations

import logging
import os
import queue
import signal
import subprocess
import sys
import threading
import time
from collections import deque
from collections.abc import Callable
from typing import IO

import httpx

from tikaclient.core.config.models import ServiceConfig
from tikaclient.core.exceptions import ConfigurationError, ServerError
from tikaclient.core.server.fetcher import DownloadResult, ProgressCallback, download_artifact
from tikaclient.core.server.models import (
    BindAddress,
    DownloadedArtifact,
    EnvironmentArtifact,
    ManagedLocal,
    ProcessHandle,
    RemoteDownload,
    RemoteOnly,
    ServerState,
    SystemExecutable,
    Verbosity,
)

logger = logging.getLogger(__name__)

# Platform detection
IS_WINDOWS = sys.platform == "win32"
IS_UNIX = not IS_WINDOWS

LineSink = Callable[[str], None]
FetchFn = Callable[..., DownloadResult]

_TAIL_LINES = 20


def _log_sink(line: str) -> None:
    logger.debug("[tika] %s", line)


def _console_sink(line: str) -> None:
    sys.stderr.write(line + "\n")
    sys.stderr.flush()


class StreamPump(threading.Thread):
    """
    Reads lines from one of the child's pipes.

    Until released, lines are queued for the readiness scan. After release
    they go straight to the sink. End of stream is signalled by a ``None``
    entry on the queue.
    """

    def __init__(
        self,
        stream: IO[bytes],
        name: str,
        sink: LineSink = _log_sink,
        released: bool = False,
    ) -> None:
        super().__init__(name=name, daemon=True)
        self._stream = stream
        self._sink = sink
        self._lines: queue.Queue[str | None] = queue.Queue()
        self._released = threading.Event()
        if released:
            self._released.set()

    def run(self) -> None:
        try:
            for raw in iter(self._stream.readline, b""):
                line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
                if self._released.is_set():
                    self._sink(line)
                else:
                    self._lines.put(line)
        except (OSError, ValueError) as e:
            # ValueError: the pipe was closed under us during teardown
            logger.debug("Stream %s closed: %s", self.name, e)
        finally:
            self._lines.put(None)

    def next_line(self, timeout: float | None = None) -> str | None:
        """
        Next unreleased line, or ``None`` at end of stream.

        Raises:
            queue.Empty: If no line arrives within ``timeout`` seconds
        """
        return self._lines.get(timeout=timeout)

    def release(self, sink: LineSink | None = None) -> None:
        """Stop queueing; send pending and future lines to ``sink``."""
        if sink is not None:
            self._sink = sink
        self._released.set()
        while True:
            try:
                line = self._lines.get_nowait()
            except queue.Empty:
                return
            if line is None:
                return
            self._sink(line)


def build_command(
    config: ServiceConfig,
    artifact: SystemExecutable | EnvironmentArtifact | DownloadedArtifact,
    bind_address: BindAddress,
) -> list[str]:
    """
    Build the sidecar invocation.

    Executables are run directly; archives are run through the runtime
    interpreter with a classpath argument and the entry point class.
    """
    match artifact:
        case SystemExecutable(path=path):
            command = [str(path)]
        case EnvironmentArtifact(path=path) | DownloadedArtifact(path=path):
            command = [config.java, "-cp", str(path), config.entry_point]
        case _:
            raise ConfigurationError(f"Cannot run artifact {artifact!r}")
    return [*command, "--host", str(bind_address.host), "--port", str(bind_address.port)]


class ServerSupervisor:
    """
    Manages the lifecycle of a locally managed sidecar.

    Example:
        >>> supervisor = ServerSupervisor(ServiceConfig())
        >>> supervisor.start()
        <ServerState.READY: 'ready'>
        >>> supervisor.is_live()
        True
        >>> supervisor.stop()
    """

    def __init__(
        self,
        config: ServiceConfig,
        *,
        fetch: FetchFn = download_artifact,
        http_client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the supervisor.

        Args:
            config: Service configuration; ``artifact`` and ``mode`` are
                updated in place by ``download`` and ``restart``
            fetch: Download function (see ``download_artifact``)
            http_client: HTTP client used for downloads
        """
        self.config = config
        self._fetch = fetch
        self._http_client = http_client
        self._handle: ProcessHandle | None = None
        self._state = ServerState.NO_PROCESS

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def handle(self) -> ProcessHandle | None:
        return self._handle

    @property
    def pid(self) -> int | None:
        return self._handle.pid if self.is_live() and self._handle else None

    def is_live(self) -> bool:
        """Whether a managed process is running; reaps a process that died on its own."""
        handle = self._handle
        if handle is None:
            return False
        if handle.poll() is not None and self._state is ServerState.READY:
            logger.warning(
                "Server process %d exited unexpectedly with code %s",
                handle.pid,
                handle.process.returncode,
            )
            self._release_handle(handle)
            return False
        return True

    def download(self, on_progress: ProgressCallback | None = None) -> DownloadedArtifact:
        """
        Fetch the server archive if the configuration still holds a placeholder.

        Returns:
            The downloaded artifact (also stored in ``config.artifact``)

        Raises:
            ConfigurationError: If the artifact resolved to a local path
            NetworkError: On transport or HTTP status failures
            TikaIOError: On filesystem failures
        """
        artifact = self.config.artifact
        if isinstance(artifact, DownloadedArtifact):
            return artifact
        if not isinstance(artifact, RemoteDownload):
            raise ConfigurationError(
                f"Nothing to download: server resolved to {artifact.path}",
                artifact=str(artifact.path),
            )

        cached = self.config.storage_dir / artifact.filename
        if self.config.reuse_download and cached.is_file():
            logger.info("Reusing previously downloaded %s", cached)
            downloaded = DownloadedArtifact(path=cached)
        else:
            result = self._fetch(
                artifact.url,
                self.config.storage_dir,
                filename=artifact.filename,
                client=self._http_client,
                on_progress=on_progress,
            )
            downloaded = result.artifact

        self.config.artifact = downloaded
        return downloaded

    def start(self, bind_address: BindAddress | str | None = None) -> ServerState:
        """
        Spawn the sidecar and block until it reports readiness.

        Args:
            bind_address: New address to bind to; defaults to the configured one

        Returns:
            ServerState.READY

        Raises:
            ConfigurationError: For remote-only clients, if a server is already
                running, or if a configured archive is missing
            ServerError: If the process cannot be spawned, exits before its
                banner, or misses the startup timeout
            NetworkError / TikaIOError: If a required download fails
        """
        mode = self.config.mode
        if isinstance(mode, RemoteOnly):
            raise ConfigurationError(
                "Cannot start a server for a remote-only client",
                endpoint=mode.endpoint_url,
            )
        if self.is_live():
            raise ConfigurationError(
                "Server is already running", pid=self._handle.pid if self._handle else None
            )

        if bind_address is not None:
            mode = ManagedLocal(bind_address=bind_address)
            self.config.mode = mode

        artifact = self._ensure_artifact()
        command = build_command(self.config, artifact, mode.bind_address)

        self._state = ServerState.STARTING
        try:
            handle = self._spawn(command, mode.bind_address)
        except BaseException:
            self._state = ServerState.NO_PROCESS
            raise
        self._handle = handle

        try:
            self._await_ready(handle)
        except BaseException:
            self._cleanup_failed_start(handle)
            raise

        verbose = self.config.verbosity is Verbosity.VERBOSE
        handle.stderr_pump.release(_console_sink if verbose else _log_sink)
        self._state = ServerState.READY
        logger.info("Server ready at http://%s (pid %d)", mode.bind_address, handle.pid)
        return self._state

    def stop(self) -> None:
        """
        Terminate the sidecar and wait for it to exit.

        Calling ``stop`` without a running process is a no-op. The handle is
        cleared even when termination fails.

        Raises:
            ServerError: If the process could not be terminated
        """
        handle = self._handle
        if handle is None:
            self._state = ServerState.NO_PROCESS
            return

        self._state = ServerState.STOPPING
        try:
            self._terminate(handle.process)
            logger.info("Stopped server process %d", handle.pid)
        finally:
            self._release_handle(handle)

    def restart(self, bind_address: BindAddress | str | None = None) -> ServerState:
        """Stop the sidecar, then start it again (optionally on a new address)."""
        self.stop()
        return self.start(bind_address)

    def close(self) -> None:
        """Stop the sidecar, logging failures instead of raising them."""
        try:
            self.stop()
        except ServerError as e:
            logger.error("Failed to stop server during teardown: %s", e)

    def _ensure_artifact(
        self,
    ) -> SystemExecutable | EnvironmentArtifact | DownloadedArtifact:
        artifact = self.config.artifact
        if isinstance(artifact, RemoteDownload) or artifact is None:
            artifact = self.download()
        if isinstance(artifact, (EnvironmentArtifact, DownloadedArtifact)) and not artifact.exists():
            raise ConfigurationError(
                f"Server archive is configured but missing: {artifact.path}",
                path=str(artifact.path),
            )
        return artifact

    def _spawn(self, command: list[str], bind_address: BindAddress) -> ProcessHandle:
        silent = self.config.verbosity is Verbosity.SILENT
        kwargs: dict[str, object] = {
            "stdin": subprocess.DEVNULL,
            "stdout": subprocess.PIPE if silent else None,
            "stderr": subprocess.PIPE,
        }
        # Own process group so the whole tree can be signalled on stop
        if IS_UNIX:
            kwargs["start_new_session"] = True

        logger.debug("Running process: %s", " ".join(command))
        try:
            process = subprocess.Popen(command, **kwargs)  # type: ignore[call-overload]
        except OSError as e:
            raise ServerError(f"Failed to start server: {e}", command=command) from e

        assert process.stderr is not None
        stderr_pump = StreamPump(process.stderr, name=f"tika-stderr-{process.pid}")
        stderr_pump.start()
        stdout_pump = None
        if process.stdout is not None:
            stdout_pump = StreamPump(
                process.stdout, name=f"tika-stdout-{process.pid}", released=True
            )
            stdout_pump.start()

        return ProcessHandle(
            process=process,
            bind_address=bind_address,
            command=command,
            stderr_pump=stderr_pump,
            stdout_pump=stdout_pump,
        )

    def _await_ready(self, handle: ProcessHandle) -> None:
        banner = self.config.readiness_banner
        timeout = self.config.startup_timeout
        deadline = None if timeout is None else time.monotonic() + timeout
        echo = self.config.verbosity is Verbosity.VERBOSE
        tail: deque[str] = deque(maxlen=_TAIL_LINES)

        while True:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            try:
                line = handle.stderr_pump.next_line(remaining)
            except queue.Empty:
                raise ServerError(
                    f"Server did not become ready within {timeout}s",
                    pid=handle.pid,
                    output="\n".join(tail),
                ) from None

            if line is None:
                try:
                    code = handle.process.wait(timeout=self.config.stop_timeout)
                except subprocess.TimeoutExpired:
                    code = None
                raise ServerError(
                    "Server exited before it was ready",
                    exit_code=code,
                    output="\n".join(tail),
                )

            tail.append(line)
            if echo:
                _console_sink(line)
            else:
                _log_sink(line)
            if banner in line:
                return

    def _cleanup_failed_start(self, handle: ProcessHandle) -> None:
        if self._handle is not handle:
            # Already torn down by a concurrent stop()
            return
        try:
            self._terminate(handle.process)
        except ServerError as e:
            logger.error("Failed to clean up server after failed start: %s", e)
        finally:
            self._release_handle(handle)

    def _terminate(self, process: subprocess.Popen[bytes]) -> None:
        if process.poll() is not None:
            return
        timeout = self.config.stop_timeout
        try:
            self._signal(process, force=False)
            try:
                process.wait(timeout=timeout)
                return
            except subprocess.TimeoutExpired:
                logger.debug(
                    "Process %d did not terminate gracefully, force killing", process.pid
                )
            self._signal(process, force=True)
            process.wait(timeout=timeout)
        except subprocess.TimeoutExpired as e:
            raise ServerError(
                f"Server process {process.pid} did not exit after being killed",
                pid=process.pid,
            ) from e
        except OSError as e:
            raise ServerError(
                f"Failed to terminate server process {process.pid}: {e}",
                pid=process.pid,
            ) from e

    @staticmethod
    def _signal(process: subprocess.Popen[bytes], *, force: bool) -> None:
        try:
            if IS_UNIX:
                sig = signal.SIGKILL if force else signal.SIGTERM
                os.killpg(os.getpgid(process.pid), sig)
            elif force:
                process.kill()
            else:
                process.terminate()
        except ProcessLookupError:
            # Already gone
            pass

    def _release_handle(self, handle: ProcessHandle) -> None:
        if self._handle is handle:
            self._handle = None
        self._state = ServerState.NO_PROCESS
        for pump in (handle.stderr_pump, handle.stdout_pump):
            if pump is not None:
                pump.join(timeout=1.0)
        for stream in (handle.process.stderr, handle.process.stdout):
            if stream is not None:
                try:
                    stream.close()
                except OSError as e:
                    logger.debug("Failed to close pipe: %s", e)


__all__ = ["ServerSupervisor", "StreamPump", "build_command", "IS_UNIX", "IS_WINDOWS"]
