""" Python implementation of remotecall. Two services exchange obfuscated
    payloads over HTTP (or ZeroMQ): the asking service names an operation
    and its parameters, the replying service checks the caller against the
    operation's allow list, runs it, and returns the result.
"""

# Utility components.

from . import json
from . import errors

# Submodules used by multiple other components.

from . import protocol
from . import transport
from . import config
home = config.directory

# Primary public-facing interfaces.

from . import access
from . import dialog
from . import registry
from . import service

ask = dialog.ask
reply = dialog.reply

from .dialog import Asker, Replier
from .protocol import Ok, Fault
from .registry import Target, TargetRegistry
from .service import ServiceAccess

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
