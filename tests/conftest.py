"""
pytest configuration and fixtures.
"""

import threading
from pathlib import Path
from typing import Generator, Optional
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fileserver import FileServer, ServerConfig
from fileserver.core.exchange import Exchange
from fileserver.http import Headers, HTTPRequest


class FakeSink:
    """
    In-memory stand-in for a client connection.

    Records every byte the exchange sends and every close. ``events`` can
    be shared with other doubles to check the order things happen in.
    """

    def __init__(self, events: Optional[list] = None):
        self.data = bytearray()
        self.close_count = 0
        self.events = events if events is not None else []

    def sendall(self, data: bytes) -> None:
        if self.close_count:
            raise BrokenPipeError("sink closed")
        self.data += data

    def close(self) -> None:
        self.close_count += 1
        self.events.append("exchange")


class ParsedResponse:
    """Status, headers and body pulled back out of raw response bytes."""

    def __init__(self, raw: bytes):
        head, _, self.body = bytes(raw).partition(b"\r\n\r\n")
        lines = head.decode("latin-1").split("\r\n")
        version, code, self.reason = lines[0].split(" ", 2)
        self.version = version
        self.status = int(code)
        self.headers = Headers()
        for line in lines[1:]:
            name, _, value = line.partition(":")
            self.headers.add(name.strip(), value.strip())

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name)


def build_request(method: str = "GET", path: str = "/", headers: Optional[dict] = None) -> HTTPRequest:
    return HTTPRequest(
        method=method,
        uri=path,
        path=path,
        headers=Headers(headers or {}),
        client_address=("127.0.0.1", 54321),
    )


@pytest.fixture
def make_exchange():
    """Factory: make_exchange("GET", "/a.txt", {"If-None-Match": "..."})."""

    def factory(method: str = "GET", path: str = "/", headers: Optional[dict] = None) -> Exchange:
        return Exchange(build_request(method, path, headers), FakeSink())

    return factory


@pytest.fixture
def parse_response():
    """Parse what an exchange wrote to its FakeSink."""

    def parse(exchange: Exchange) -> ParsedResponse:
        return ParsedResponse(exchange.sink.data)

    return parse


@pytest.fixture
def srv_root(tmp_path: Path) -> Path:
    """
    A small served tree:

        a.txt         "hello"
        sub/b.txt     "world"
    """
    root = tmp_path / "srv"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"hello")
    (root / "sub" / "b.txt").write_bytes(b"world")
    return root


@pytest.fixture
def config(srv_root: Path) -> ServerConfig:
    """Test server configuration over ``srv_root``."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        root_dir=str(srv_root),
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        log_level="WARNING",
    )


class BackgroundServer:
    """Runs a FileServer on a daemon thread."""

    def __init__(self, server: FileServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def host(self) -> str:
        return self.server.address[0]

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()
        if not self.server.wait_until_ready(5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)


@pytest.fixture
def running_server(config: ServerConfig) -> Generator[BackgroundServer, None, None]:
    """A FileServer serving ``srv_root`` on a free port."""
    background = BackgroundServer(FileServer(config))
    background.start()

    yield background

    background.stop()


@pytest.hookimpl(hookwrapper=True)
def pytest_sessionfinish(session, exitstatus):
    """
    Let pytest's tmp_path cleanup delete very deep trees.

    On Python < 3.12 ``shutil.rmtree`` recurses once per directory level,
    so removing the tree built by the deep-tree listing test overflows the
    default recursion limit. Raise it only while session cleanup runs.
    """
    old_limit = sys.getrecursionlimit()
    sys.setrecursionlimit(max(old_limit, 10000))
    try:
        yield
    finally:
        sys.setrecursionlimit(old_limit)
