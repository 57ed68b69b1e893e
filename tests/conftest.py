import pytest
import remotecall


SECRET = 's3cr3t'
URL = 'http://replier.invalid/remote'


class Loopback(remotecall.transport.Transport):
    """ A transport that hands the posted fields straight to a replier,
        recording every call. If a *status* is given, that status and
        *body* are returned instead, without involving any replier.
    """

    def __init__(self, respond=None, status=None, body=b''):
        self.respond = respond
        self.status = status
        self.body = body
        self.calls = list()

    def send(self, url, fields):
        self.calls.append((url, dict(fields)))

        if self.status is not None:
            return self.body, self.status

        return self.respond(fields)


class Unreachable(remotecall.transport.Transport):

    def __init__(self):
        self.calls = list()

    def send(self, url, fields):
        self.calls.append((url, dict(fields)))
        raise remotecall.transport.TransportConnectionError('connection refused')


@pytest.fixture
def executed():
    return list()


@pytest.fixture
def registry(executed):

    registry = remotecall.TargetRegistry()

    echo = registry.target('Echo', allow={'run': '*', 'falsy': '*', 'nothing': ['*'], 'fail': '*', 'private': ['alice']})

    @echo.operation()
    def run(params):
        executed.append('Echo::run')
        return params

    @echo.operation()
    def falsy(params):
        executed.append('Echo::falsy')
        return False

    @echo.operation()
    def nothing(params):
        executed.append('Echo::nothing')
        return None

    @echo.operation()
    def fail(params):
        executed.append('Echo::fail')
        raise ValueError('it broke')

    @echo.operation()
    def private(params):
        executed.append('Echo::private')
        return 'secret stuff'

    jobs = registry.target('Jobs', allow={'run': ['alice']})

    @jobs.operation()
    def run(params):
        executed.append('Jobs::run')
        return 'ran'

    unguarded = registry.target('Unguarded')

    @unguarded.operation()
    def run(params):
        executed.append('Unguarded::run')
        return 'should never happen'

    return registry


@pytest.fixture
def replier(registry):
    return remotecall.Replier(registry, SECRET)


@pytest.fixture
def loopback(replier):
    return Loopback(replier.respond)


def asker(transport, sender='alice', secret=SECRET, url=URL):
    return remotecall.Asker(url, sender, secret, transport)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
