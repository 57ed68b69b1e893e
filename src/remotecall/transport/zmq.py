"""ZeroMQ transport.

The same envelope fields carried by the HTTP transport, framed for a
REQ/ROUTER socket pair:

Request
    version, name, value, name, value, ...

Response
    status, body

The status is the ASCII text of an HTTP-style status code, so that the
dialog layer interprets both transports identically.
"""

from __future__ import annotations

import concurrent.futures
import itertools
import logging
import queue
import threading
from typing import Optional, Sequence, Tuple

import zmq

from .base import (
    Fields,
    Handler,
    Server as BaseServer,
    Transport,
    TransportConnectionError,
    TransportPortError,
    TransportTimeout,
)


logger = logging.getLogger(__name__)

VERSION = b"a"

default_address = "127.0.0.1"
minimum_port = 10079
maximum_port = 13679
zmq_context = zmq.Context()
_signal_ids = itertools.count()


def to_frames(fields: Fields) -> Tuple[bytes, ...]:
    """Encode envelope fields as request frames."""

    parts = [VERSION]
    for name, value in fields.items():
        if isinstance(value, str):
            value = value.encode("utf-8")
        parts.append(name.encode("utf-8"))
        parts.append(value)
    return tuple(parts)


def from_frames(parts: Sequence[bytes]) -> Fields:
    """Decode request frames into envelope fields."""

    if not parts:
        raise ValueError("empty message")

    their_version = parts[0]
    if their_version != VERSION:
        raise ValueError(f"message is protocol {their_version!r}, recipient expects {VERSION!r}")

    pairs = parts[1:]
    if len(pairs) % 2:
        raise ValueError("unpaired request field")

    fields = dict()
    for index in range(0, len(pairs), 2):
        fields[pairs[index].decode("utf-8")] = pairs[index + 1].decode("utf-8")
    return fields


class Client(Transport):
    """Issue each request on its own short-lived REQ socket.

    A REQ socket cannot recover from a missed reply, so sockets are never
    reused between requests.
    """

    timeout = 30.0

    def __init__(self, timeout: Optional[float] = None):
        if timeout is not None:
            self.timeout = timeout

    def send(self, url: str, fields: Fields) -> Tuple[bytes, int]:
        socket = zmq_context.socket(zmq.REQ)
        socket.setsockopt(zmq.LINGER, 0)
        socket.setsockopt(zmq.RCVTIMEO, int(self.timeout * 1000))

        try:
            socket.connect(url)
            socket.send_multipart(to_frames(fields))
            parts = socket.recv_multipart()
        except zmq.Again as exc:
            raise TransportTimeout(f"{url}: no response in {self.timeout:.2f} sec") from exc
        except zmq.ZMQError as exc:
            raise TransportConnectionError(f"{url}: {exc}") from exc
        finally:
            socket.close()

        if len(parts) != 2:
            raise TransportConnectionError(f"{url}: malformed response, {len(parts)} frames")

        status, body = parts

        try:
            status = int(status)
        except ValueError as exc:
            raise TransportConnectionError(f"{url}: malformed response status {status!r}") from exc

        return body, status


class Server(BaseServer):
    """Receive requests via a ZeroMQ ROUTER socket, respond to them.

    Incoming requests are handed to a worker pool; responses are queued and
    the poller thread is signalled to send them, since ZeroMQ sockets must
    only be used from the thread that polls them.
    """

    poll_interval = 100

    def __init__(self, handler: Handler, address: Optional[str] = None, port: Optional[int] = None, avoid: Optional[set] = None):
        BaseServer.__init__(self, handler, address or default_address, port)
        self.avoid = set(avoid or set())
        self.socket = None
        self.shutdown = True
        self.thread: Optional[threading.Thread] = None
        self.workers: Optional[concurrent.futures.ThreadPoolExecutor] = None
        self._responses = queue.SimpleQueue()

    @property
    def url(self) -> str:
        return f"tcp://{self.address}:{self.port}"

    def _bind_any(self) -> int:
        for port in range(minimum_port, maximum_port + 1):
            if port in self.avoid:
                continue
            try:
                self.socket.bind(f"tcp://{self.address}:{port}")
                return port
            except zmq.ZMQError:
                continue
        raise TransportPortError(
            f"no ports available in range {minimum_port}:{maximum_port}"
        )

    def start(self) -> None:
        self.socket = zmq_context.socket(zmq.ROUTER)
        self.socket.setsockopt(zmq.LINGER, 0)

        if self.port is None:
            self.port = self._bind_any()
        else:
            try:
                self.socket.bind(self.url)
            except zmq.ZMQError as exc:
                self.socket.close()
                raise TransportPortError(f"port already in use: {self.port}") from exc

        internal = f"inproc://remotecall.Server:signal:{next(_signal_ids)}"
        self._signal_rx = zmq_context.socket(zmq.PAIR)
        self._signal_rx.bind(internal)
        self._signal_tx = zmq_context.socket(zmq.PAIR)
        self._signal_tx.connect(internal)
        self._signal_lock = threading.Lock()

        self.shutdown = False
        self.workers = concurrent.futures.ThreadPoolExecutor(max_workers=8)
        self.thread = threading.Thread(target=self.run, daemon=True)
        self.thread.start()
        logger.info("serving ZeroMQ requests at %s", self.url)

    def stop(self) -> None:
        if self.shutdown:
            return

        # Workers still need the poller thread to deliver their responses,
        # so they are drained before the poller is told to exit.

        self.workers.shutdown(wait=True)
        self.shutdown = True
        self.thread.join()
        self._signal_tx.close()
        logger.info("stopped serving ZeroMQ requests at %s", self.url)

    # --- internal ---
    def _rep_outgoing(self) -> None:
        self._signal_rx.recv(flags=zmq.NOBLOCK)
        frames = self._responses.get(block=False)
        self.socket.send_multipart(frames)

    def _req_incoming(self, parts: Tuple[bytes, ...]) -> None:
        # REQ peers prepend an empty delimiter frame after the identity.
        ident = parts[0]
        request = parts[2:] if len(parts) > 1 and parts[1] == b"" else parts[1:]

        try:
            fields = from_frames(request)
        except (ValueError, UnicodeDecodeError) as exc:
            logger.warning("malformed request: %s", exc)
            body, status = b"", 400
        else:
            try:
                body, status = self.handler(fields)
            except Exception:
                logger.exception("unhandled error answering request")
                body, status = b"", 500

        if isinstance(body, str):
            body = body.encode("ascii")

        self._responses.put((ident, b"", str(status).encode(), body))
        with self._signal_lock:
            self._signal_tx.send(b"")

    def run(self) -> None:
        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)
        poller.register(self._signal_rx, zmq.POLLIN)

        while not self.shutdown:
            for active, _flag in poller.poll(self.poll_interval):
                if active == self._signal_rx:
                    self._rep_outgoing()
                elif active == self.socket:
                    parts = tuple(self.socket.recv_multipart())
                    try:
                        self.workers.submit(self._req_incoming, parts)
                    except RuntimeError:
                        logger.warning("dropped request received during shutdown")

        self.socket.close()
        self._signal_rx.close()
