"""
Highscore Service
=================

Small HTTP API that persists and serves the top-10 leaderboard.

Routes (also served under the /api prefix):
    GET  /highscores   -> JSON array of up to 10 {name, score, date}
    POST /highscores   -> body {name, score}; returns the updated array

Usage:
    python -m basket_catch.highscores.server [--host HOST] [--port PORT] [--data-file PATH]
"""

from __future__ import annotations

import argparse
import http.server
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional, Tuple

from basket_catch.highscores.leaderboard import InvalidScoreError, to_payload
from basket_catch.highscores.store import HighscoreStore

logger = logging.getLogger(__name__)

HIGHSCORE_PATHS = {"/highscores", "/api/highscores"}
MAX_BODY_BYTES = 16 * 1024
DEFAULT_DATA_FILE = Path("data") / "highscores.json"


class HighscoreRequestHandler(http.server.BaseHTTPRequestHandler):
    """Serves the highscore routes from `self.server.store`."""

    server: "HighscoreServer"

    def _route(self) -> str:
        # strip query/fragment
        return self.path.split("?")[0].split("#")[0].rstrip("/") or "/"

    def do_OPTIONS(self):
        self.send_response(204)
        self._send_cors_headers()
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.send_header("Content-Length", "0")
        self.end_headers()

    def do_GET(self):
        if self._route() not in HIGHSCORE_PATHS:
            self._send_json(404, {"error": "Not found"})
            return
        try:
            entries = self.server.store.top()
        except OSError:
            logger.exception("Could not read highscores")
            self._send_json(500, {"error": "Could not read highscores"})
            return
        self._send_json(200, to_payload(entries))

    def do_POST(self):
        if self._route() not in HIGHSCORE_PATHS:
            self._send_json(404, {"error": "Not found"})
            return

        body, error = self._read_json_body()
        if error is not None:
            self._send_json(400, {"error": error})
            return

        if not isinstance(body, dict):
            body = {}
        try:
            entries = self.server.store.add(body.get("name"), body.get("score"))
        except InvalidScoreError:
            self._send_json(400, {"error": "Invalid score"})
            return
        except OSError:
            logger.exception("Could not save highscore")
            self._send_json(500, {"error": "Could not save highscore"})
            return
        self._send_json(200, to_payload(entries))

    def _read_json_body(self) -> Tuple[Any, Optional[str]]:
        try:
            length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            return None, "Invalid Content-Length"
        if length > MAX_BODY_BYTES:
            return None, "Body too large"
        raw = self.rfile.read(length) if length > 0 else b""
        if not raw:
            return {}, None
        try:
            return json.loads(raw.decode("utf-8")), None
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None, "Invalid JSON"

    def _send_cors_headers(self) -> None:
        self.send_header("Access-Control-Allow-Origin", "*")

    def _send_json(self, status: int, payload: Any) -> None:
        data = json.dumps(payload).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(data)))
        self.send_header("Cache-Control", "no-cache")
        self._send_cors_headers()
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.client_address[0], format % args)

    def log_error(self, format, *args):
        logger.warning("%s - %s", self.client_address[0], format % args)


class HighscoreServer(http.server.ThreadingHTTPServer):
    """Threaded HTTP server carrying the shared store."""

    daemon_threads = True

    def __init__(self, address: Tuple[str, int], store: HighscoreStore):
        super().__init__(address, HighscoreRequestHandler)
        self.store = store

    @property
    def url(self) -> str:
        host, port = self.server_address[:2]
        return f"http://{host}:{port}"


def make_server(
    host: str = "127.0.0.1",
    port: int = 3000,
    data_file: Optional[os.PathLike] = None
) -> HighscoreServer:
    """
    Build (but do not start) a highscore server.

    Args:
        host: Bind address.
        port: Bind port; 0 picks a free one.
        data_file: JSON array file. Defaults to data/highscores.json.
    """
    store = HighscoreStore(data_file or DEFAULT_DATA_FILE)
    return HighscoreServer((host, port), store)


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the highscore service")
    parser.add_argument("--host", default="0.0.0.0", help="Bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", 3000)),
                        help="Port (default: $PORT or 3000)")
    parser.add_argument("--data-file", type=Path, default=DEFAULT_DATA_FILE,
                        help="Leaderboard JSON file (default: data/highscores.json)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every request")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    httpd = make_server(args.host, args.port, args.data_file)
    logger.info("Highscores API listening on http://%s:%d", args.host, httpd.server_address[1])
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        httpd.server_close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
