""" Derivation of the substitution table used to obfuscate message content.

    The table is a permutation of the 62 alphanumeric characters, driven
    entirely by a shared secret; both ends of a conversation derive the same
    table from the same secret, and the secret itself is never transmitted.
    This is obfuscation, not encryption: the permutation is trivially
    recovered by anyone with a few samples of traffic.

    The derivation must match the legacy peers byte for byte, including the
    quirks noted below, otherwise the two ends will not agree on the table.
"""

import collections
import hashlib
import string
import threading

from .. import errors


ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase

# Secrets shorter than this are repeated MINIMUM_LENGTH times before hashing.

MINIMUM_LENGTH = 6


CipherTable = collections.namedtuple('CipherTable', ('forward', 'backward'))
CipherTable.__doc__ = """ A pair of :func:`str.translate` tables. *forward*
    is applied when encoding, *backward* when decoding; each is the inverse
    of the other.
"""


_cache = dict()
_cache_lock = threading.Lock()



def derive(secret):
    """ Return the :class:`CipherTable` for the supplied *secret*, which may
        be a string or bytes. The result for any given secret is memoized;
        derivation is deterministic, so the cache never changes an answer.
    """

    if not secret:
        raise errors.ConfigurationFault('cannot derive a cipher table without a secret')

    try:
        return _cache[secret]
    except KeyError:
        pass

    permuted = permute(secret)

    forward = str.maketrans(permuted, ALPHABET)
    backward = str.maketrans(ALPHABET, permuted)
    table = CipherTable(forward, backward)

    with _cache_lock:
        _cache[secret] = table

    return table



def permute(secret):
    """ Return the permuted alphabet, as a string, for the supplied *secret*.
        Position *i* of the result is the character that stands in for
        ``ALPHABET[i]`` on the wire.
    """

    try:
        token = secret.encode('utf-8')
    except AttributeError:
        token = bytes(secret)

    # Repeating the token MINIMUM_LENGTH times, rather than until it reaches
    # MINIMUM_LENGTH, is what the legacy peers do.

    if len(token) < MINIMUM_LENGTH:
        token = token * MINIMUM_LENGTH

    stream = hash_stream(token)

    permuted = list(ALPHABET)
    count = len(permuted)

    # The final 4-byte window is never used; the loop bound is strictly less
    # than len(stream) - 4.

    for offset in range(0, len(stream) - 4, 4):
        k1 = (stream[offset] * stream[offset + 2]) % count
        k2 = (stream[offset + 1] * stream[offset + 3]) % count
        permuted[k1], permuted[k2] = permuted[k2], permuted[k1]

    return ''.join(permuted)



def hash_stream(token):
    """ Concatenate the hexadecimal md5 digests of *token*, of *token* less
        its first byte, and of every suffix of *token*, in that order. The
        result is returned as ASCII bytes so that indexing yields the
        character codes directly.
    """

    digests = list()
    digests.append(_md5(token))
    digests.append(_md5(token[1:]))

    for index in range(len(token)):
        digests.append(_md5(token[index:]))

    stream = ''.join(digests)
    return stream.encode('ascii')


def _md5(data):
    return hashlib.md5(data).hexdigest()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
