"""Transport layer implementations.

The backend is chosen per call, or for the whole process with the
REMOTECALL_TRANSPORT environment variable: 'http' (the default) or 'zmq'.
"""

import os

from .base import (
    Transport,
    TransportError,
    TransportTimeout,
    TransportConnectionError,
    TransportPortError,
)

BACKENDS = ("http", "zmq")


def _backend(name=None):

    if name is None:
        name = os.environ.get("REMOTECALL_TRANSPORT", "http")

    if name == "http":
        from . import http
        return http
    elif name == "zmq":
        from . import zmq
        return zmq
    else:
        raise ValueError(f"unknown transport backend: {name!r}")


def client(backend=None, **kwargs):
    """Return a client :class:`Transport` for the selected backend."""

    return _backend(backend).Client(**kwargs)


def server(handler, address=None, port=None, backend=None, **kwargs):
    """Return an unstarted server for the selected backend."""

    return _backend(backend).Server(handler, address=address, port=port, **kwargs)
