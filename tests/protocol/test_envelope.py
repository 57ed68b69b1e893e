import pytest
import remotecall

from remotecall.protocol import envelope


def test_build():
    fields = envelope.build('alice', 'CONTENT')
    assert fields == {'from': 'alice', 'content': 'CONTENT'}

    wrapped = envelope.Envelope('alice', 'CONTENT')
    assert wrapped.fields() == fields


def test_parse():
    wrapped = envelope.parse({'from': 'alice', 'content': 'CONTENT'})
    assert wrapped.sender == 'alice'
    assert wrapped.content == 'CONTENT'

    # Form parsers return lists, some transports deliver bytes.

    wrapped = envelope.parse({'from': ['alice'], 'content': [b'CONTENT']})
    assert wrapped.sender == 'alice'
    assert wrapped.content == 'CONTENT'

    # Content is left out of repr(), it only ever identifies the sender.

    assert 'CONTENT' not in repr(wrapped)


def test_sender_override():
    wrapped = envelope.parse({'from': 'mallory', 'content': 'CONTENT'}, sender='alice')
    assert wrapped.sender == 'alice'

    wrapped = envelope.parse({'content': 'CONTENT'}, sender='alice')
    assert wrapped.sender == 'alice'


def test_unknown_asker():

    for fields in ({'content': 'CONTENT'}, {'from': '', 'content': 'CONTENT'}, {'from': [], 'content': 'CONTENT'}, {}, None):
        with pytest.raises(remotecall.errors.UnknownAsker):
            envelope.parse(fields)


def test_blank_content():

    for fields in ({'from': 'alice'}, {'from': 'alice', 'content': ''}, {'from': 'alice', 'content': None}):
        with pytest.raises(remotecall.errors.BadRequest):
            envelope.parse(fields)


def test_malformed_hierarchy():
    assert issubclass(remotecall.errors.UnknownAsker, remotecall.errors.MalformedRequest)
    assert issubclass(remotecall.errors.BadRequest, remotecall.errors.MalformedRequest)
    assert not issubclass(remotecall.errors.UnknownAsker, remotecall.errors.BadRequest)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
