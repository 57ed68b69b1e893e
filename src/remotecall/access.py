""" Access control applied on the replying side before any operation runs.

    Each target declares an allow list mapping operation names to the
    callers permitted to invoke them::

        {
            'run':    '*',                  # anyone
            'status': ['monitor', 'ops'],   # these two callers
            'debug':  ['ops', '*'],         # anyone; '*' in a list also opens it
        }

    An operation that does not appear in the allow list is denied. A target
    that does not declare an allow list at all is a configuration error,
    not a quiet denial.
"""

import enum
import logging

from collections.abc import Collection

from . import errors
from .protocol import fields


logger = logging.getLogger(__name__)


class Decision(enum.Enum):
    ALLOWED = 'allowed'
    DENIED = 'denied'
    MISCONFIGURED = 'misconfigured'



def check(target, operation, caller, params=None):
    """ Return the :class:`Decision` for *caller* invoking *operation* on
        *target*. The *target* is any object with an ``allow_list()``
        method; if there is no such method, or it returns None, the
        decision is MISCONFIGURED. The *params* are accepted so that the
        signature matches what a target sees when it is invoked, they are
        not consulted by the default rules.
    """

    lookup = getattr(target, 'allow_list', None)

    if lookup is None or not callable(lookup):
        return Decision.MISCONFIGURED

    allowed = lookup()

    if allowed is None:
        return Decision.MISCONFIGURED

    try:
        rule = allowed[operation]
    except KeyError:
        return Decision.DENIED
    except TypeError:
        return Decision.MISCONFIGURED

    if rule == fields.WILDCARD:
        return Decision.ALLOWED

    if isinstance(rule, str):
        if rule == caller:
            return Decision.ALLOWED
        return Decision.DENIED

    if isinstance(rule, (bytes, bytearray)):
        return Decision.DENIED

    if isinstance(rule, Collection):
        if caller in rule or fields.WILDCARD in rule:
            return Decision.ALLOWED

    return Decision.DENIED



def enforce(target, operation, caller, params=None):
    """ Same as :func:`check`, but raise an exception for anything other
        than ALLOWED: :class:`remotecall.errors.AuthorizationDenied` for
        DENIED, :class:`remotecall.errors.Misconfigured` for MISCONFIGURED.
    """

    decision = check(target, operation, caller, params)

    if decision is Decision.ALLOWED:
        return

    name = getattr(target, 'qualified', operation)

    if decision is Decision.MISCONFIGURED:
        raise errors.Misconfigured("can't validate %s without an allow list" % (repr(name)))

    logger.warning('%s denied access to %s', caller, name)
    raise errors.AuthorizationDenied("%s does not have access to %s" % (repr(caller), repr(name)))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
