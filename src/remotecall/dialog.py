""" The two roles of a remote call. Each call is a single exchange: the
    asking service encodes a command and its parameters, posts them to the
    replying service, and decodes whatever comes back; the replying service
    decodes the request, checks the caller against the target's allow list,
    runs the operation, and encodes the result.

    Asking::

        result = remotecall.ask('http://remote/request', 'my-id', 'secret-key',
                                'Orders::run', {'id': 10})
        if result.ok:
            order = result.value

    Replying, given the form fields of an inbound POST::

        replier = remotecall.Replier(registry, 'secret-key')
        body, status = replier.respond(fields)

    Nothing is shared between calls other than the registry and the secrets,
    both of which are read-only once configured.
"""

import logging

from . import access
from . import errors
from . import transport as transports
from .protocol import codec
from .protocol import envelope
from .protocol import fields
from .protocol import target as request_target
from .protocol.result import Fault, Ok, State, from_payload


logger = logging.getLogger(__name__)


class Exchange:
    """ Progress tracker for a single ask or reply. Transitions are logged
        at DEBUG level; the final state is attached to the result.
    """

    def __init__(self, role, command=None):
        self.role = role
        self.command = command
        self.state = State.IDLE


    def advance(self, state):
        logger.debug('%s %s: %s -> %s', self.role, self.command, self.state.value, state.value)
        self.state = state


    def fail(self):
        self.advance(State.FAILED)


# end of class Exchange



class Asker:
    """ The asking side of a conversation with one remote service. The
        *url* is where the remote service accepts requests, *sender* is the
        identity of this service, and *secret* is the key shared with the
        remote service for requests in this direction. If no *transport* is
        provided one is created for the backend selected by the
        environment.
    """

    def __init__(self, url, sender, secret, transport=None):
        self.url = url
        self.sender = sender
        self.secret = secret
        self.transport = transport


    def ask(self, command, params=None):
        """ Invoke *command* on the remote service with the dictionary of
            *params*, and return an :class:`Ok` or :class:`Fault`.

            If the url, sender, secret, or command is missing, nothing is
            sent and a ConfigurationFault result is returned; that case is
            never raised. Failure to encode the request raises
            :class:`remotecall.errors.EncodeFailure`, and failure to deliver
            it raises :class:`remotecall.errors.TransmitFailure`. Once a reply
            has been received, problems with it are reported as a
            :class:`Fault` result rather than raised.
        """

        if params is None:
            params = dict()

        exchange = Exchange('ask', command)

        if not (self.url and self.sender and self.secret and command):
            logger.debug('ask %s: not sent, url, id, secret, or command is missing', command)
            return Fault('ConfigurationFault', 'url, service id, secret, and command are all required', state=State.IDLE)

        exchange.advance(State.ENCODING)
        request = request_target.RequestTarget(command, params)

        try:
            content = codec.encode(request.to_dict(), self.secret)
        except errors.EncodeFailure:
            exchange.fail()
            raise

        exchange.advance(State.TRANSMITTING)
        posted = envelope.build(self.sender, content)

        if self.transport is None:
            self.transport = transports.client()

        exchange.advance(State.AWAITING_REPLY)

        try:
            body, status = self.transport.send(self.url, posted)
        except transports.TransportError as e:
            exchange.fail()
            raise errors.TransmitFailure('cannot get remote data from %s: %s' % (self.url, e)) from e

        if status != fields.HTTP_OK:
            exchange.fail()
            raise errors.TransmitFailure('HTTP reply status is not ok (%s)' % (status), status=status)

        exchange.advance(State.DECODING)

        try:
            decoded = codec.decode(body, self.secret)
        except errors.DecodeFailure as e:
            exchange.fail()
            logger.warning('ask %s: undecodable reply from %s', command, self.url)
            return Fault.from_exception(e, state=exchange.state)

        result = from_payload(decoded)

        # A fault reported by the remote service is still a completed
        # exchange; only a reply that could not be interpreted is not.

        if not result.ok and result.kind == 'DecodeFailure':
            exchange.fail()
        else:
            exchange.advance(State.DONE)

        result.state = exchange.state
        return result


# end of class Asker



class Replier:
    """ The replying side. Operations are resolved through *registry*, a
        :class:`remotecall.registry.TargetRegistry`. The *secret* is either
        a single string used for every asking service, or a callable that
        accepts the asking service's id and returns the secret for it. The
        *guard* makes the access decision; it is anything with a
        :func:`remotecall.access.check`-compatible ``check`` attribute.
    """

    def __init__(self, registry, secret, guard=access):
        self.registry = registry
        self.secret = secret
        self.guard = guard


    def secret_for(self, asker):

        if callable(self.secret):
            secret = self.secret(asker)
        else:
            secret = self.secret

        if not secret:
            raise errors.ConfigurationFault("can't get reply secret key for service id=[%s]" % (asker))

        return secret


    def receive(self, received, asker=None):
        """ Validate and decode the *received* wire fields. Returns a tuple
            of the asking service id, the secret for that service, and the
            decoded request content. The explicit *asker*, if provided,
            overrides the 'from' field.
        """

        exchange = Exchange('reply')
        exchange.advance(State.DECODING)

        try:
            wrapped = envelope.parse(received, asker)
            secret = self.secret_for(wrapped.sender)
        except errors.RemoteError:
            exchange.fail()
            raise

        try:
            decoded = codec.decode(wrapped.content, secret)
        except errors.DecodeFailure as e:
            exchange.fail()
            raise errors.BadRequest('cannot decode request from %s: %s' % (wrapped.sender, e)) from e

        return wrapped.sender, secret, decoded


    def dispatch(self, asker, decoded):
        """ Interpret the *decoded* request content and, if *asker* is
            permitted, run the requested operation. Returns an :class:`Ok`
            with the operation's return value, or a :class:`Fault` for a
            malformed target, an unknown operation, or a denied caller.

            A target with no allow list raises
            :class:`remotecall.errors.Misconfigured`. Exceptions raised by
            the operation itself are not caught here.
        """

        try:
            request = request_target.normalize(decoded)
        except errors.BadRequestTarget as e:
            logger.warning('%s sent a bad request target: %s', asker, e)
            return Fault.from_exception(e)

        exchange = Exchange('reply', request.operation)

        try:
            operation = self.registry.resolve(request.operation)
        except errors.OperationNotFound as e:
            logger.warning('%s requested an unknown operation: %s', asker, e)
            exchange.fail()
            return Fault.from_exception(e)

        decision = self.guard.check(operation, operation.name, asker, request.params)

        if decision is access.Decision.MISCONFIGURED:
            exchange.fail()
            raise errors.Misconfigured("can't validate %s without an allow list" % (operation.qualified))

        if decision is not access.Decision.ALLOWED:
            logger.warning('%s denied access to %s', asker, operation.qualified)
            exchange.fail()
            return Fault('AuthorizationDenied', "you don't have access to " + operation.qualified)

        logger.debug('%s invoking %s', asker, operation.qualified)
        value = operation.execute(request.params)
        exchange.advance(State.DONE)

        return Ok(value)


    def reply(self, received, asker=None):
        """ Answer one request, returning the encoded reply body as a
            string. Protocol faults that can be reported to the asker are
            encoded in the body; the remainder are raised, as are any
            exceptions from the operation.
        """

        asker, secret, decoded = self.receive(received, asker)
        result = self.dispatch(asker, decoded)

        return codec.encode(result.to_payload(), secret)


    def respond(self, received):
        """ Answer one request on behalf of a transport server, returning a
            (body, status) tuple. Nothing is raised: requests that cannot be
            attributed or decoded get an empty body with a 4xx status,
            configuration problems get a 500, and an exception raised by the
            operation is logged and reported to the asker as an
            OperationExecutionFault.
        """

        try:
            asker, secret, decoded = self.receive(received)
        except errors.UnknownAsker as e:
            logger.warning('rejected request: %s', e)
            return b'', 403
        except errors.BadRequest as e:
            logger.warning('rejected request: %s', e)
            return b'', 400
        except errors.ConfigurationFault:
            logger.exception('cannot reply')
            return b'', 500

        try:
            result = self.dispatch(asker, decoded)
        except errors.Misconfigured:
            logger.exception('cannot reply to %s', asker)
            return b'', 500
        except errors.RemoteError as e:
            logger.warning('%s: remote operation raised %s', asker, e)
            result = Fault.from_exception(e)
        except Exception as e:
            logger.exception('%s: remote operation failed', asker)
            result = Fault('OperationExecutionFault', '%s: %s' % (type(e).__name__, e))

        try:
            body = codec.encode(result.to_payload(), secret)
        except errors.EncodeFailure:
            logger.exception('cannot encode reply to %s', asker)
            return b'', 500

        return body.encode('ascii'), fields.HTTP_OK


# end of class Replier



def ask(url, sender, secret, command, params=None, transport=None):
    """ Convenience wrapper around :func:`Asker.ask` for a one-off call.
    """

    asker = Asker(url, sender, secret, transport)
    return asker.ask(command, params)



def reply(secret, registry, received, asker=None):
    """ Convenience wrapper around :func:`Replier.reply` for a one-off call.
    """

    replier = Replier(registry, secret)
    return replier.reply(received, asker)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
