"""HTTP transport.

Requests are POSTed forms carrying the envelope fields, url-encoded or
multipart as legacy PHP peers send them. The reply is the raw response
body, and the HTTP status is passed back unchanged for the caller to
interpret.
"""

from __future__ import annotations

import email.parser
import email.policy
import logging
import threading
import urllib.parse
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional, Tuple

import requests

from .base import (
    Fields,
    Handler,
    Server as BaseServer,
    Transport,
    TransportConnectionError,
    TransportError,
    TransportPortError,
    TransportTimeout,
)


logger = logging.getLogger(__name__)

default_address = "127.0.0.1"


class Client(Transport):
    """POST form fields with a shared :class:`requests.Session`."""

    timeout = 30.0

    def __init__(self, timeout: Optional[float] = None, verify: bool = True, trust_env: bool = True):
        if timeout is not None:
            self.timeout = timeout
        self.verify = verify
        self.session = requests.Session()
        # trust_env=False ignores proxy settings and .netrc from the environment.
        self.session.trust_env = trust_env

    def send(self, url: str, fields: Fields) -> Tuple[bytes, int]:
        try:
            response = self.session.post(url, data=fields, timeout=self.timeout, verify=self.verify)
        except requests.exceptions.Timeout as exc:
            raise TransportTimeout(f"POST {url}: no response in {self.timeout:.2f} sec") from exc
        except requests.exceptions.ConnectionError as exc:
            raise TransportConnectionError(f"POST {url}: {exc}") from exc
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"POST {url}: {exc}") from exc

        return response.content, response.status_code

    def close(self) -> None:
        self.session.close()


def _flatten(parsed: dict) -> Fields:
    # parse_qs returns a list for every field; only the first value counts.
    return {key: values[0] for key, values in parsed.items() if values}


def _multipart(content_type: str, raw: bytes) -> Fields:
    """Extract the form fields from a ``multipart/form-data`` body, which
    is what a PHP asker posting an array through curl sends.
    """

    head = f"Content-Type: {content_type}\r\nMIME-Version: 1.0\r\n\r\n".encode("latin-1")
    message = email.parser.BytesParser(policy=email.policy.HTTP).parsebytes(head + raw)

    if not message.is_multipart():
        raise ValueError("multipart body has no parts")

    fields = dict()
    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if not name or name in fields:
            continue
        payload = part.get_payload(decode=True) or b""
        fields[name] = payload.decode("utf-8")
    return fields


def parse_form(content_type: Optional[str], raw: bytes) -> Fields:
    """Return the fields of a POSTed form. Both encodings a browser or curl
    may choose are accepted; a missing Content-Type is read as
    url-encoded. Anything else raises ValueError.
    """

    media_type = (content_type or "application/x-www-form-urlencoded").split(";")[0].strip().lower()

    if media_type == "application/x-www-form-urlencoded":
        parsed = urllib.parse.parse_qs(raw.decode("latin-1"), keep_blank_values=True)
        return _flatten(parsed)

    if media_type == "multipart/form-data":
        return _multipart(content_type, raw)

    raise ValueError(f"unsupported Content-Type: {content_type}")


class _RequestHandler(BaseHTTPRequestHandler):

    # Set per server instance, see Server.start().
    callback: Handler = None

    def log_message(self, format, *args):
        logger.debug("%s - " + format, self.address_string(), *args)

    def do_POST(self):
        length = int(self.headers.get("Content-Length") or 0)
        raw = self.rfile.read(length) if length > 0 else b""

        try:
            fields = parse_form(self.headers.get("Content-Type"), raw)
        except (ValueError, UnicodeDecodeError) as exc:
            logger.warning("unreadable form from %s: %s", self.address_string(), exc)
            fields = None
            body, status = b"", 400

        if fields is not None:
            try:
                body, status = self.callback(fields)
            except Exception:
                logger.exception("unhandled error answering %s", self.path)
                body, status = b"", 500

        if isinstance(body, str):
            body = body.encode("ascii")

        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=us-ascii")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):
        self.send_error(405, "requests must be POSTed")


class Server(BaseServer):
    """Serve requests from a :class:`ThreadingHTTPServer` on a background
    thread. A *port* of None binds any free port; the bound port is
    available once :func:`start` returns.
    """

    def __init__(self, handler: Handler, address: Optional[str] = None, port: Optional[int] = None, path: str = "/"):
        BaseServer.__init__(self, handler, address or default_address, port)
        self.path = path
        self.httpd: Optional[ThreadingHTTPServer] = None
        self.thread: Optional[threading.Thread] = None

    @property
    def url(self) -> str:
        return f"http://{self.address}:{self.port}{self.path}"

    def start(self) -> None:
        request_class = type("RequestHandler", (_RequestHandler,), {"callback": staticmethod(self.handler)})

        try:
            self.httpd = ThreadingHTTPServer((self.address, self.port or 0), request_class)
        except OSError as exc:
            raise TransportPortError(f"cannot bind {self.address}:{self.port}") from exc

        self.httpd.daemon_threads = True
        self.port = self.httpd.server_address[1]

        self.thread = threading.Thread(target=self.httpd.serve_forever, daemon=True)
        self.thread.start()
        logger.info("serving HTTP requests at %s", self.url)

    def stop(self) -> None:
        if self.httpd is None:
            return

        self.httpd.shutdown()
        self.httpd.server_close()
        self.thread.join()
        logger.info("stopped serving HTTP requests at %s", self.url)

        self.httpd = None
        self.thread = None
