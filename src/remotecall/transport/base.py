"""Transport interface.

Every backend delivers the same two form fields and hands back a body and
an HTTP-style status; this module is what the dialog layer relies on.
It lives outside :mod:`remotecall.protocol` so the protocol remains
transport-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple


# Raised by any backend. The asker wraps them in TransmitFailure.

class TransportError(Exception):
    """A failure below the dialog layer, where no status was obtained."""


class TransportTimeout(TransportError):
    """The remote service accepted the request but did not answer in time."""


class TransportConnectionError(TransportError):
    """The remote service could not be reached, or dropped the connection."""


class TransportPortError(TransportError):
    """A server could not bind the requested port."""


Fields = Dict[str, str]
Handler = Callable[[Fields], Tuple[bytes, int]]


class Transport(ABC):
    """Client-side contract: deliver form fields, return the raw reply."""

    @abstractmethod
    def send(self, url: str, fields: Fields) -> Tuple[bytes, int]:
        """Deliver *fields* to *url*; return (body, status).

        A non-success status is returned, not raised. Failures to reach the
        remote end at all raise a :class:`TransportError`.
        """

    def close(self) -> None:
        """Release any held connections."""


class Server(ABC):
    """Server-side contract: receive form fields, answer via *handler*.

    The handler takes the received fields and returns (body, status).
    """

    def __init__(self, handler: Handler, address: Optional[str] = None, port: Optional[int] = None):
        self.handler = handler
        self.address = address
        self.port = port

    @abstractmethod
    def start(self) -> None:
        """Bind and begin serving in the background."""

    @abstractmethod
    def stop(self) -> None:
        """Stop serving and release the bound port."""

    @property
    @abstractmethod
    def url(self) -> str:
        """Where clients should send requests."""

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc_info):
        self.stop()
