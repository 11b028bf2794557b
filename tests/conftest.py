"""
Pytest configuration and shared fixtures.

Provides fixtures for temp storage directories, stand-in server executables
that mimic the sidecar's stderr banner, and HTTP clients backed by
``httpx.MockTransport``.
"""

import stat
import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import httpx
import pytest

from tikaclient.core.web.client import TikaClient

ENDPOINT = "http://tika.test:9998"

Handler = Callable[[httpx.Request], httpx.Response]

# ==============================================================================
# Stand-in server scripts
# ==============================================================================

_READY_SCRIPT = """\
import sys
import time

args = sys.argv[1:]
host = args[args.index("--host") + 1]
port = args[args.index("--port") + 1]
print("INFO  Loading configuration", file=sys.stderr, flush=True)
print(f"INFO  Started Apache Tika server at http://{host}:{port}/", file=sys.stderr, flush=True)
print("ready on stdout", flush=True)
while True:
    time.sleep(0.1)
"""

_CRASH_SCRIPT = """\
import sys

print("ERROR  Address already in use", file=sys.stderr, flush=True)
sys.exit(3)
"""

_HANG_SCRIPT = """\
import sys
import time

print("INFO  Loading configuration", file=sys.stderr, flush=True)
while True:
    time.sleep(0.1)
"""

_JAVA_SCRIPT = """\
import os
import sys
import time

args = sys.argv[1:]
if args[:1] != ["-cp"] or not os.path.isfile(args[1]):
    print(f"Error: could not find or load main class ({args!r})", file=sys.stderr, flush=True)
    sys.exit(1)
main_class = args[2]
host = args[args.index("--host") + 1]
port = args[args.index("--port") + 1]
banner = f"INFO  {main_class} Started Apache Tika server at http://{host}:{port}/"
print(banner, file=sys.stderr, flush=True)
while True:
    time.sleep(0.1)
"""

SCRIPTS = {
    "ready": _READY_SCRIPT,
    "crash": _CRASH_SCRIPT,
    "hang": _HANG_SCRIPT,
    "java": _JAVA_SCRIPT,
}


@pytest.fixture
def storage_dir(tmp_path: Path) -> Path:
    """Provide an empty download directory."""
    path = tmp_path / "storage"
    path.mkdir()
    return path


@pytest.fixture
def make_server(tmp_path: Path) -> Callable[[str], Path]:
    """
    Factory for executable stand-ins of the server.

    ``make_server("ready")`` prints the readiness banner and keeps running,
    ``"crash"`` exits before the banner, ``"hang"`` never prints it.
    ``"java"`` stands in for the runtime interpreter: it requires
    ``-cp <existing file> <main class>`` before printing the banner.
    """
    if sys.platform == "win32":
        pytest.skip("stand-in server scripts need a POSIX shebang")

    def _make(behaviour: str) -> Path:
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir(exist_ok=True)
        script = bin_dir / f"tika-{behaviour}"
        script.write_text(f"#!{sys.executable}\n{SCRIPTS[behaviour]}")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make


# ==============================================================================
# HTTP fixtures
# ==============================================================================


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


@pytest.fixture
def remote_client() -> Iterator[Callable[[Handler], tuple[TikaClient, RecordingTransport]]]:
    """
    Factory for a remote-only client whose HTTP calls hit a mock handler.

    Returns the client and the transport that recorded its requests.
    """
    clients: list[TikaClient] = []

    def _make(handler: Handler) -> tuple[TikaClient, RecordingTransport]:
        transport = RecordingTransport(handler)
        client = TikaClient.remote(ENDPOINT, http_client=httpx.Client(transport=transport))
        clients.append(client)
        return client, transport

    yield _make

    for client in clients:
        client.close()
