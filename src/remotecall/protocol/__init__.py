from . import fields
from . import cipher
from . import codec
from . import envelope
from . import result
from . import target

from .result import Ok, Fault, State


"""
remotecall Protocol Layer
=========================

This package defines the transport-agnostic pieces of a remote call: how
content is obfuscated, how a request is wrapped, and how a reply is
represented.

The protocol layer MUST NOT depend on any transport implementation
(e.g. HTTP, ZeroMQ).

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

Dialog (remotecall.dialog)
    Asker and replier roles
    - ask()
    - reply() / respond()

    │
    ▼
Result (result.py)
    Ok / Fault, and the reply payload shape

    │
    ▼
Request Target (target.py)
    Operation name + parameters, normalized on receipt

    │
    ▼
Envelope (envelope.py)
    'from' + 'content' wire fields

    │
    ▼
Codec (codec.py)
    JSON -> base64 -> substitution, and back

    │
    ▼
Cipher Table (cipher.py)
    Substitution table derived from a shared secret

    │
    ▼
Field Vocabulary (fields.py)
    Canonical names for wire and payload keys

---------------------------------------------------------------------

Below the Protocol Layer (for context)
--------------------------------------

Transport Layer (remotecall.transport)
    Moves form fields and bytes
    - HTTP
    - ZeroMQ

---------------------------------------------------------------------
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
