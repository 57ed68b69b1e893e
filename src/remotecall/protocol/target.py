""" The request target is the decoded meaning of a request: which operation
    to invoke, and with what parameters.
"""

from collections.abc import Mapping

from .. import errors
from . import fields


class RequestTarget:

    def __init__(self, operation, params=None):

        if params is None:
            params = dict()

        self.operation = operation
        self.params = params


    def __eq__(self, other):
        try:
            return self.operation == other.operation and self.params == other.params
        except AttributeError:
            return NotImplemented


    def __repr__(self):
        return 'RequestTarget(%s, %s)' % (repr(self.operation), repr(self.params))


    def to_dict(self):
        return {fields.OPERATION: self.operation, fields.PARAMS: self.params}


# end of class RequestTarget



def normalize(decoded):
    """ Interpret a decoded request and return a :class:`RequestTarget`.
        The operation must be a non-empty string; legacy peers name it
        'class' rather than 'operation', and either is accepted. Parameters
        that are absent, or are not a mapping, become an empty dictionary.
        Anything that cannot be interpreted raises
        :class:`remotecall.errors.BadRequestTarget`.
    """

    if not isinstance(decoded, Mapping):
        raise errors.BadRequestTarget('request target is not a mapping')

    try:
        operation = decoded[fields.OPERATION]
    except KeyError:
        operation = decoded.get(fields.LEGACY_OPERATION)

    if not isinstance(operation, str) or operation == '':
        raise errors.BadRequestTarget('request target does not name an operation')

    params = decoded.get(fields.PARAMS)

    if isinstance(params, Mapping):
        params = dict(params)
    else:
        params = dict()

    return RequestTarget(operation, params)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
