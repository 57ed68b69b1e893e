""" Results of a remote call. An :class:`Ok` carries whatever the remote
    operation returned, including False, None, or an empty container; a
    :class:`Fault` names what went wrong. The two are never ambiguous on the
    wire: a reply payload is either ``{"value": ...}`` or
    ``{"error": {"type": ..., "text": ...}}``.
"""

import enum

from collections.abc import Mapping

from .. import errors
from . import fields


class State(enum.Enum):
    """ Progress of a single ask or reply. FAILED is reachable from every
        other state.
    """

    IDLE = 'idle'
    ENCODING = 'encoding'
    TRANSMITTING = 'transmitting'
    AWAITING_REPLY = 'awaiting reply'
    DECODING = 'decoding'
    DONE = 'done'
    FAILED = 'failed'



class Ok:

    ok = True

    def __init__(self, value, state=State.DONE):
        self.value = value
        self.state = state


    def __bool__(self):
        return True


    def __eq__(self, other):
        if isinstance(other, Ok):
            return self.value == other.value
        return NotImplemented


    def __repr__(self):
        return 'Ok(%s)' % (repr(self.value))


    def to_payload(self):
        return {fields.VALUE: self.value}


    def unwrap(self):
        return self.value


# end of class Ok



class Fault:
    """ A :class:`Fault` describes a failed call. The *kind* is the name of
        the matching exception class in :mod:`remotecall.errors`; *text* is
        a human-readable description, and *status* is the transport status,
        if one was observed.
    """

    ok = False

    def __init__(self, kind, text='', status=None, state=State.FAILED):
        self.kind = kind
        self.text = text
        self.status = status
        self.state = state


    def __bool__(self):
        return False


    def __eq__(self, other):
        if isinstance(other, Fault):
            return self.kind == other.kind and self.text == other.text
        return NotImplemented


    def __repr__(self):
        return 'Fault(%s, %s)' % (repr(self.kind), repr(self.text))


    @classmethod
    def from_exception(cls, exception, state=State.FAILED):
        kind = type(exception).__name__
        status = getattr(exception, 'status', None)
        return cls(kind, str(exception), status, state)


    def exception(self):
        """ Return an exception instance matching this fault.
        """

        exception_class = errors.lookup(self.kind)

        if exception_class is errors.TransmitFailure:
            return exception_class(self.text, status=self.status)

        return exception_class(self.text)


    def to_payload(self):
        error = {fields.ERROR_TYPE: self.kind, fields.ERROR_TEXT: self.text}
        return {fields.ERROR: error}


    def unwrap(self):
        raise self.exception()


# end of class Fault



def from_payload(decoded):
    """ Rebuild an :class:`Ok` or :class:`Fault` from a decoded reply
        payload. Anything that is not one of the two recognized shapes is
        reported as a DecodeFailure fault.
    """

    if not isinstance(decoded, Mapping):
        return Fault('DecodeFailure', 'reply payload is not a mapping')

    error = decoded.get(fields.ERROR)

    if error is not None:
        if isinstance(error, Mapping):
            kind = error.get(fields.ERROR_TYPE) or 'RemoteError'
            text = error.get(fields.ERROR_TEXT) or ''
        else:
            kind = 'RemoteError'
            text = str(error)

        return Fault(str(kind), str(text))

    if fields.VALUE in decoded:
        return Ok(decoded[fields.VALUE])

    return Fault('DecodeFailure', 'reply payload has neither a value nor an error')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
