''' JSON handling for request and reply payloads. The fastest library
    available is used: msgspec, which is a declared dependency, then orjson,
    then the standard library. Whichever is selected, :func:`dumps` returns
    bytes and :func:`loads` accepts bytes or str, and the selected library's
    failures are collected in the :data:`EncodeError` and :data:`DecodeError`
    tuples so callers can catch them without knowing which one is in use.

    The encoded text is compact, with no whitespace between tokens, matching
    what the legacy peers produce; the obfuscated content of a request is
    derived from these exact bytes.
'''

# Only one library is imported. A fallback is never loaded when a faster
# choice is present.

backend = None

try:
    import msgspec
except ImportError:
    msgspec = None
else:
    backend = 'msgspec'

if backend is None:
    try:
        import orjson
    except ImportError:
        orjson = None
    else:
        backend = 'orjson'

if backend is None:
    import json as stdlib_json
    backend = 'json'


if backend == 'msgspec':
    _encoder = msgspec.json.Encoder()
    _decoder = msgspec.json.Decoder()

    dumps = _encoder.encode
    loads = _decoder.decode
    EncodeError = (TypeError, ValueError, msgspec.EncodeError)
    DecodeError = (ValueError, msgspec.DecodeError)

elif backend == 'orjson':
    dumps = orjson.dumps
    loads = orjson.loads
    EncodeError = (TypeError, orjson.JSONEncodeError)
    DecodeError = (ValueError, orjson.JSONDecodeError)

else:

    def dumps(payload):
        return stdlib_json.dumps(payload, separators=(',', ':')).encode('utf-8')

    loads = stdlib_json.loads
    EncodeError = (TypeError, ValueError)
    DecodeError = (ValueError,)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
