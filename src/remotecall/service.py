""" Configuration-driven access to remote services, for an application that
    talks to several of them::

        config = remotecall.config.get()
        access = remotecall.ServiceAccess(config, registry)

        result = access.ask('remoteApp', 'Orders::run', {'id': 10})
        order = access.service('remoteApp').call('Orders::run', {'id': 10})

        server = access.serve(port=8080)

    The conversation can be half duplex: a service that only asks has no
    need for a registry, and a service that only replies has no need for
    urls.
"""

import threading

from . import dialog
from . import errors
from . import transport as transports
from .registry import TargetRegistry


class ServiceClient:
    """ A handle on one remote service, as returned by
        :func:`ServiceAccess.service`.
    """

    def __init__(self, access, service_id):
        self.access = access
        self.service_id = service_id


    def __repr__(self):
        return 'ServiceClient(%s)' % (repr(self.service_id))


    def ask(self, command, params=None):
        return self.access.ask(self.service_id, command, params)


    def call(self, command, params=None):
        """ Same as :func:`ask`, but return the value directly, raising the
            matching :mod:`remotecall.errors` exception for a fault.
        """

        result = self.ask(command, params)
        return result.unwrap()


# end of class ServiceClient



class ServiceAccess:
    """ The :class:`ServiceAccess` holds a :class:`remotecall.config.Configuration`
        and uses it to fill in the url, identity, and secret for each call.
        A *registry* is required to reply; a *transport* is shared across all
        asks, one is created for the configured backend if not provided.
    """

    def __init__(self, configuration, registry=None, transport=None):

        if registry is None:
            registry = TargetRegistry(configuration.default_operation)

        self.config = configuration
        self.registry = registry
        self.transport = transport

        self._clients = dict()
        self._clients_lock = threading.Lock()
        self._replier = None


    def ask(self, service_id, command, params=None):
        """ Ask *service_id* to run *command*. Returns the
            :class:`remotecall.protocol.Ok` or
            :class:`remotecall.protocol.Fault` from the exchange.
        """

        if not service_id:
            raise errors.ConfigurationFault("can't ask remote service without id")

        url = self.config.url(service_id)
        secret = self.config.request_key(service_id)

        if self.transport is None:
            self.transport = transports.client()

        asker = dialog.Asker(url, self.config.service_id, secret, self.transport)
        return asker.ask(command, params)


    @property
    def replier(self):
        if self._replier is None:
            self._replier = dialog.Replier(self.registry, self.reply_key)

        return self._replier


    def reply_key(self, asker):
        """ Return the secret for replying to *asker*. A service that is
            not in the configuration is an unknown asker, not a
            configuration problem on this side.
        """

        if asker not in self.config:
            raise errors.UnknownAsker('unknown asker id=[%s]' % (asker))

        return self.config.reply_key(asker)


    def reply(self, received):
        """ Answer one request; see :func:`remotecall.dialog.Replier.reply`.
        """

        return self.replier.reply(received)


    def respond(self, received):
        """ Answer one request; see :func:`remotecall.dialog.Replier.respond`.
        """

        return self.replier.respond(received)


    def serve(self, address=None, port=None, backend=None):
        """ Start, and return, a transport server answering requests via
            :func:`respond`.
        """

        server = transports.server(self.respond, address, port, backend)
        server.start()

        return server


    def service(self, service_id):
        """ Return the :class:`ServiceClient` for *service_id*. The same
            instance is returned for every call with the same id.
        """

        if service_id not in self.config:
            raise errors.ConfigurationFault('unknown service id=[%s]' % (service_id))

        with self._clients_lock:
            try:
                client = self._clients[service_id]
            except KeyError:
                client = ServiceClient(self, service_id)
                self._clients[service_id] = client

        return client


# end of class ServiceAccess


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
