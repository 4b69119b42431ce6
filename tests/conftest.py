import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest


class ReplayTargetHandler(BaseHTTPRequestHandler):
    """Records every GET. Paths containing set-cookie set a cookie, /fail answers 500."""

    def do_GET(self):
        self.server.record(self.path, self.headers.get("Cookie"))

        if self.path.startswith("/fail"):
            self.send_response(500)
            body = b"boom"
        else:
            self.send_response(200)
            body = b"x" * 1024
        if "set-cookie" in self.path:
            self.send_header("Set-Cookie", "session=abc123; Path=/")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


class ReplayTargetServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self):
        super().__init__(("127.0.0.1", 0), ReplayTargetHandler)
        self._lock = threading.Lock()
        self._requests: list[tuple[str, str | None]] = []

    @property
    def base_url(self) -> str:
        host, port = self.server_address[:2]
        return f"http://{host}:{port}"

    @property
    def requests(self) -> list[tuple[str, str | None]]:
        with self._lock:
            return list(self._requests)

    @property
    def paths(self) -> list[str]:
        return [path for path, _ in self.requests]

    def record(self, path: str, cookie: str | None):
        with self._lock:
            self._requests.append((path, cookie))


@pytest.fixture
def http_server():
    server = ReplayTargetServer()
    t = threading.Thread(target=server.serve_forever, daemon=True)
    t.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()


def access_line(path: str, method: str = "GET", status: int = 200) -> str:
    return (
        f'127.0.0.1 - - [15/Jan/2024:08:23:45 +0000] "{method} {path} HTTP/1.1" '
        f'{status} 512 "-" "Mozilla/5.0"'
    )


@pytest.fixture
def write_log(tmp_path):
    """Write access-log lines for the given paths and return the file path."""

    def _write(paths, name="access.log"):
        f = tmp_path / name
        f.write_text("".join(access_line(p) + "\n" for p in paths))
        return str(f)

    return _write
