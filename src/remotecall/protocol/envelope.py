""" The envelope is the outermost layer of a request: the identity of the
    asking service, and the obfuscated content. On the wire these are two
    form fields, named in :mod:`remotecall.protocol.fields`.
"""

from .. import errors
from . import fields


class Envelope:
    """ The :class:`Envelope` pairs the *sender* of a request with its
        obfuscated *content*. It is a plain container; :func:`parse` is
        the place where received envelopes are validated.
    """

    def __init__(self, sender, content):
        self.sender = sender
        self.content = content


    def __repr__(self):
        return 'Envelope(sender=%s)' % (repr(self.sender))


    def fields(self):
        """ Return the envelope as a dictionary of wire fields.
        """

        return build(self.sender, self.content)


# end of class Envelope



def build(sender, content):
    """ Return the wire fields for a request from *sender* carrying
        *content*.
    """

    return {fields.FROM: sender, fields.CONTENT: content}



def parse(received, sender=None):
    """ Validate the *received* wire fields and return an :class:`Envelope`.
        An explicit *sender* takes precedence over the 'from' field. A
        missing sender raises :class:`remotecall.errors.UnknownAsker`; a
        missing or blank content field raises
        :class:`remotecall.errors.BadRequest`.
    """

    if not sender:
        sender = _field(received, fields.FROM)

    if not sender:
        raise errors.UnknownAsker('unknown asker')

    content = _field(received, fields.CONTENT)

    if not content:
        raise errors.BadRequest('blank request content from ' + repr(sender))

    return Envelope(sender, content)



def _field(received, name):
    """ Pull a single string value out of *received*. Form parsers tend to
        return lists of values, and some transports deliver bytes; both are
        flattened here.
    """

    if received is None:
        return None

    try:
        value = received[name]
    except (KeyError, TypeError):
        return None

    if isinstance(value, (list, tuple)):
        if len(value) == 0:
            return None
        value = value[0]

    if isinstance(value, bytes):
        try:
            value = value.decode('utf-8')
        except UnicodeDecodeError:
            return None

    if value is None:
        return None

    return str(value)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
