import pytest
import remotecall
import requests
import threading
import zmq

from remotecall.protocol import codec
from remotecall.transport import http as http_transport
from remotecall.transport import zmq as zmq_transport

from conftest import SECRET


@pytest.fixture
def http_server(replier):
    server = http_transport.Server(replier.respond)
    server.start()
    yield server
    server.stop()


@pytest.fixture
def zmq_server(replier):
    server = zmq_transport.Server(replier.respond)
    server.start()
    yield server
    server.stop()


def http_client():
    return http_transport.Client(timeout=5, trust_env=False)


def test_http_round_trip(http_server, executed):
    result = remotecall.ask(http_server.url, 'alice', SECRET, 'Echo', {'id': 10}, transport=http_client())

    assert result.ok is True
    assert result.value == {'id': 10}
    assert executed == ['Echo::run']


def test_http_reply_faults(http_server, executed):
    result = remotecall.ask(http_server.url, 'bob', SECRET, 'Jobs', transport=http_client())

    assert result.ok is False
    assert result.kind == 'AuthorizationDenied'
    assert executed == []


def test_http_rejections(http_server):
    client = http_client()

    body, status = client.send(http_server.url, {'content': 'anything'})
    assert status == 403
    assert body == b''

    body, status = client.send(http_server.url, {'from': 'alice'})
    assert status == 400


def test_http_multipart_form(http_server, executed):
    """ A PHP asker passing an array to CURLOPT_POSTFIELDS posts the
        fields as multipart/form-data, with the legacy 'class' key.
    """

    content = codec.encode({'class': 'Echo', 'params': {'id': 10}}, SECRET)
    form = {'from': (None, 'alice'), 'content': (None, content)}

    session = requests.Session()
    session.trust_env = False

    try:
        response = session.post(http_server.url, files=form, timeout=5)
    finally:
        session.close()

    assert response.status_code == 200
    assert codec.decode(response.content, SECRET) == {'value': {'id': 10}}
    assert executed == ['Echo::run']


def test_http_unsupported_form(http_server, executed):
    session = requests.Session()
    session.trust_env = False

    try:
        response = session.post(http_server.url, json={'from': 'alice'}, timeout=5)
    finally:
        session.close()

    assert response.status_code == 400
    assert executed == []


def test_parse_form():
    fields = http_transport.parse_form(None, b'from=alice&content=a%2Bb%3D')
    assert fields == {'from': 'alice', 'content': 'a+b='}

    body = (b'--XyZ\r\n'
            b'Content-Disposition: form-data; name="from"\r\n\r\n'
            b'alice\r\n'
            b'--XyZ\r\n'
            b'Content-Disposition: form-data; name="content"\r\n\r\n'
            b'a+b/=\r\n'
            b'--XyZ--\r\n')

    fields = http_transport.parse_form('multipart/form-data; boundary=XyZ', body)
    assert fields == {'from': 'alice', 'content': 'a+b/='}

    with pytest.raises(ValueError):
        http_transport.parse_form('application/json', b'{}')


def test_http_bad_status():
    server = http_transport.Server(lambda fields: (b'', 500))

    with server:
        with pytest.raises(remotecall.errors.TransmitFailure) as caught:
            remotecall.ask(server.url, 'alice', SECRET, 'Echo', transport=http_client())

    assert caught.value.status == 500


def test_http_handler_crash():

    def handler(fields):
        raise RuntimeError('handler crashed')

    with http_transport.Server(handler) as server:
        body, status = http_client().send(server.url, {'from': 'alice', 'content': 'x'})

    assert status == 500


def test_http_unreachable():
    server = http_transport.Server(lambda fields: (b'', 200))
    server.start()
    url = server.url
    server.stop()

    with pytest.raises(remotecall.errors.TransmitFailure) as caught:
        remotecall.ask(url, 'alice', SECRET, 'Echo', transport=http_client())

    assert caught.value.status is None


def test_frames():
    fields = {'from': 'alice', 'content': 'CONTENT+/='}
    frames = zmq_transport.to_frames(fields)

    assert frames[0] == zmq_transport.VERSION
    assert zmq_transport.from_frames(frames) == fields

    with pytest.raises(ValueError):
        zmq_transport.from_frames(())

    with pytest.raises(ValueError):
        zmq_transport.from_frames((b'z', b'from', b'alice'))

    with pytest.raises(ValueError):
        zmq_transport.from_frames((zmq_transport.VERSION, b'from'))


def test_zmq_round_trip(zmq_server, executed):
    client = zmq_transport.Client(timeout=5)

    result = remotecall.ask(zmq_server.url, 'alice', SECRET, 'Echo', {'id': 10}, transport=client)
    assert result.ok is True
    assert result.value == {'id': 10}

    result = remotecall.ask(zmq_server.url, 'alice', SECRET, 'Echo::falsy', transport=client)
    assert result.ok is True
    assert result.value is False

    assert executed == ['Echo::run', 'Echo::falsy']


def test_zmq_malformed_status():
    router = zmq_transport.zmq_context.socket(zmq.ROUTER)
    router.setsockopt(zmq.LINGER, 0)
    port = router.bind_to_random_port('tcp://127.0.0.1')

    def answer():
        parts = router.recv_multipart()
        router.send_multipart((parts[0], b'', b'okay', b''))

    thread = threading.Thread(target=answer, daemon=True)
    thread.start()

    try:
        with pytest.raises(remotecall.errors.TransmitFailure) as caught:
            remotecall.ask(f'tcp://127.0.0.1:{port}', 'alice', SECRET, 'Echo', transport=zmq_transport.Client(timeout=5))
    finally:
        thread.join(timeout=5)
        router.close()

    assert caught.value.status is None
    assert isinstance(caught.value.__cause__, remotecall.transport.TransportConnectionError)


def test_zmq_rejections(zmq_server):
    client = zmq_transport.Client(timeout=5)

    body, status = client.send(zmq_server.url, {'content': 'anything'})
    assert status == 403


def test_serve(registry, executed):
    configuration = remotecall.config.Configuration('replier', {'alice': {'key': SECRET}})
    replying = remotecall.ServiceAccess(configuration, registry)

    server = replying.serve(backend='http')

    try:
        result = remotecall.ask(server.url, 'alice', SECRET, 'Echo', {'id': 3}, transport=http_client())
    finally:
        server.stop()

    assert result.value == {'id': 3}
    assert executed == ['Echo::run']


def test_backend_selection(monkeypatch):
    assert isinstance(remotecall.transport.client('http'), http_transport.Client)
    assert isinstance(remotecall.transport.client('zmq'), zmq_transport.Client)

    monkeypatch.setenv('REMOTECALL_TRANSPORT', 'zmq')
    assert isinstance(remotecall.transport.client(), zmq_transport.Client)

    server = remotecall.transport.server(lambda fields: (b'', 200), backend='http')
    assert isinstance(server, http_transport.Server)

    with pytest.raises(ValueError):
        remotecall.transport.client('carrier pigeon')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
