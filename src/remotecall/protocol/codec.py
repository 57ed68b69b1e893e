""" Conversion between Python values and the obfuscated text that is
    carried in the content field of an envelope: JSON, then base64, then the
    character substitution described by :mod:`remotecall.protocol.cipher`.
    Characters outside the substitution alphabet (the base64 padding and
    the '+' and '/' symbols) pass through unchanged.
"""

import base64
import binascii

from .. import errors
from .. import json
from . import cipher



def encode(payload, secret):
    """ Return the obfuscated text representation of *payload*. An
        :class:`remotecall.errors.EncodeFailure` exception is raised if
        there is no *secret*, or if the payload cannot be represented
        as JSON.
    """

    if not secret:
        raise errors.EncodeFailure('trying to encode without a secret key')

    try:
        raw = json.dumps(payload)
    except json.EncodeError as e:
        raise errors.EncodeFailure('payload cannot be encoded: ' + str(e)) from e

    text = base64.b64encode(raw).decode('ascii')
    table = cipher.derive(secret)

    return text.translate(table.forward)



def decode(text, secret):
    """ Reverse :func:`encode`, returning the original Python value. The
        *text* may be a string or bytes. Any failure along the way raises
        a :class:`remotecall.errors.DecodeFailure` exception.
    """

    if not secret:
        raise errors.DecodeFailure('trying to decode without a secret key')

    if text is None:
        raise errors.DecodeFailure('nothing to decode')

    try:
        text = text.decode('ascii')
    except AttributeError:
        pass
    except UnicodeDecodeError as e:
        raise errors.DecodeFailure('content is not ASCII') from e

    table = cipher.derive(secret)
    text = text.translate(table.backward)

    try:
        raw = base64.b64decode(text)
    except (binascii.Error, ValueError) as e:
        raise errors.DecodeFailure('content is not valid base64') from e

    try:
        decoded = json.loads(raw)
    except json.DecodeError as e:
        raise errors.DecodeFailure('content is not valid JSON') from e

    return decoded


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
