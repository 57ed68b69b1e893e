import pytest
import remotecall

from remotecall.config import Configuration

from conftest import Loopback


@pytest.fixture
def replying(registry):
    """ The replying service, which knows alice and bob.
    """

    services = dict()
    services['alice'] = {'key-reply': 'alice to replier', 'key-request': 'replier to alice'}
    services['bob'] = {'key': 'shared with bob'}

    configuration = Configuration('replier', services)
    return remotecall.ServiceAccess(configuration, registry)


def asking(service_id, key, replying):
    services = {'replier': {'url': 'http://replier.invalid/remote', 'key-request': key}}
    configuration = Configuration(service_id, services)
    return remotecall.ServiceAccess(configuration, transport=Loopback(replying.respond))


def test_ask(replying, executed):
    alice = asking('alice', 'alice to replier', replying)

    result = alice.ask('replier', 'Echo', {'id': 10})
    assert result.ok is True
    assert result.value == {'id': 10}

    bob = asking('bob', 'shared with bob', replying)

    result = bob.ask('replier', 'Echo::private')
    assert result.ok is False
    assert result.kind == 'AuthorizationDenied'

    assert executed == ['Echo::run']


def test_service_client(replying):
    alice = asking('alice', 'alice to replier', replying)

    client = alice.service('replier')
    assert alice.service('replier') is client

    assert client.call('Echo::private') == 'secret stuff'
    assert client.call('Echo::falsy') is False

    with pytest.raises(remotecall.errors.OperationNotFound):
        client.call('Echo::missing')

    with pytest.raises(remotecall.errors.OperationExecutionFault):
        client.call('Echo::fail')


def test_unknown_services(replying):
    alice = asking('alice', 'alice to replier', replying)

    with pytest.raises(remotecall.errors.ConfigurationFault):
        alice.service('nobody')

    with pytest.raises(remotecall.errors.ConfigurationFault):
        alice.ask('nobody', 'Echo')

    with pytest.raises(remotecall.errors.ConfigurationFault):
        alice.ask('', 'Echo')


def test_unknown_asker(replying):
    carol = asking('carol', 'anything', replying)

    with pytest.raises(remotecall.errors.TransmitFailure) as caught:
        carol.ask('replier', 'Echo')

    assert caught.value.status == 403


def test_wrong_direction_key(replying):
    """ alice has separate keys for each direction; using the wrong one
        leaves the replier unable to read the request.
    """

    alice = asking('alice', 'replier to alice', replying)

    with pytest.raises(remotecall.errors.TransmitFailure) as caught:
        alice.ask('replier', 'Echo')

    assert caught.value.status == 400


def test_default_operation():
    configuration = Configuration('replier', {'alice': {'key': 'k'}}, default_operation='defaultMethod')
    replying = remotecall.ServiceAccess(configuration)

    target = replying.registry.target('Testcommand', allow={'defaultMethod': '*'})
    target.add('defaultMethod', lambda params: params.get('id'))

    alice = asking('alice', 'k', replying)
    assert alice.service('replier').call('Testcommand', {'id': 10}) == 10


def test_reply(replying):
    content = remotecall.protocol.codec.encode({'operation': 'Echo', 'params': {'id': 1}}, 'shared with bob')
    body = replying.reply({'from': 'bob', 'content': content})

    assert remotecall.protocol.codec.decode(body, 'shared with bob') == {'value': {'id': 1}}


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
