""" Exceptions raised by the remotecall protocol layer. Every fault that
    can cross the wire is named by its class name, which is what
    :func:`lookup` uses to turn a fault reported by a remote service back
    into an exception on the local side.

    Transport errors are defined separately, in
    :mod:`remotecall.transport.base`, so that the protocol layer does not
    depend on any particular transport.
"""


class RemoteError(Exception):
    """ Base class for all protocol-level faults. """


class ConfigurationFault(RemoteError):
    """ A required url, service id, or secret is missing. Raised before any
        network activity takes place.
    """


class Misconfigured(ConfigurationFault):
    """ A registered target does not declare an allow list, so no access
        decision can be made for it.
    """


class EncodeFailure(RemoteError):
    """ A payload could not be serialized and obfuscated. """


class DecodeFailure(RemoteError):
    """ Received content could not be de-obfuscated and parsed. """


class TransmitFailure(RemoteError):
    """ The request never completed at the transport level: the connection
        failed, or the remote end answered with a non-success status. The
        observed *status* is retained when one is available.
    """

    def __init__(self, message, status=None):
        RemoteError.__init__(self, message)
        self.status = status


class MalformedRequest(RemoteError):
    """ Base class for inbound requests that cannot be interpreted. """


class UnknownAsker(MalformedRequest):
    pass


class BadRequest(MalformedRequest):
    pass


class BadRequestTarget(BadRequest):
    pass


class AuthorizationDenied(RemoteError):
    """ The caller is not on the allow list for the requested operation. """


class OperationNotFound(RemoteError):
    pass


class OperationExecutionFault(RemoteError):
    """ The remote operation raised an exception while executing. """



_by_name = dict()

for _class in (RemoteError, ConfigurationFault, Misconfigured, EncodeFailure,
               DecodeFailure, TransmitFailure, MalformedRequest, UnknownAsker,
               BadRequest, BadRequestTarget, AuthorizationDenied,
               OperationNotFound, OperationExecutionFault):
    _by_name[_class.__name__] = _class

del _class


def lookup(kind):
    """ Return the exception class matching the fault *kind*, which is the
        class name as it appears on the wire. Unrecognized names map to
        :class:`RemoteError`.
    """

    try:
        return _by_name[kind]
    except KeyError:
        return RemoteError


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
