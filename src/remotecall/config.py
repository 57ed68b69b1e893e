""" Configuration for a service taking part in remote calls: the identity
    of this service, and for each remote service it talks to, the url to
    ask it at and the secret keys used in each direction.

    A configuration file is JSON, by default ``services.json`` in the
    directory returned by :func:`directory`::

        {
            "id": "myApp",
            "default_operation": "run",
            "services": {
                "remoteApp": {
                    "url": "http://remote.url/remote",
                    "key-request": "secret used when we ask remoteApp",
                    "key-reply": "secret used when remoteApp asks us",
                    "key": "secret used in both directions"
                }
            }
        }

    "key" is the fallback for whichever of "key-request" and "key-reply" is
    not set. A service we only ask needs a url; a service we only reply to
    does not.
"""

import os
import threading

from . import errors
from . import json
from .protocol import fields


_cache = dict()
_cache_lock = threading.Lock()

filename_default = 'services.json'


class Configuration:
    """ A convenience class to represent remotecall configuration data. To
        first order an instance acts like a dictionary, returning the
        configuration block for a single remote service at a time.
    """

    def __init__(self, service_id=None, services=None, default_operation=fields.DEFAULT_OPERATION):

        if services is None:
            services = dict()

        self.service_id = service_id
        self.services = services
        self.default_operation = default_operation


    def __contains__(self, service_id):
        try:
            block = self.services[service_id]
        except KeyError:
            return False

        return isinstance(block, dict)


    def __getitem__(self, service_id):
        if service_id in self:
            return self.services[service_id]

        raise errors.ConfigurationFault('unknown service id=[%s]' % (service_id))


    def __len__(self):
        return len(self.services)


    @classmethod
    def from_dict(cls, raw):
        """ Build a :class:`Configuration` from the parsed contents of a
            configuration file.
        """

        if not isinstance(raw, dict):
            raise errors.ConfigurationFault('configuration must be a JSON object')

        services = raw.get('services', dict())

        if not isinstance(services, dict):
            raise errors.ConfigurationFault("'services' must be a JSON object")

        default_operation = raw.get('default_operation', fields.DEFAULT_OPERATION)

        return cls(raw.get('id'), services, default_operation)


    def request_key(self, service_id):
        """ Return the secret used to ask *service_id*.
        """

        return self._key(service_id, 'key-request', 'request')


    def reply_key(self, service_id):
        """ Return the secret used to reply to *service_id*.
        """

        return self._key(service_id, 'key-reply', 'reply')


    def _key(self, service_id, specific, direction):

        block = self[service_id]

        for name in (specific, 'key'):
            try:
                key = block[name]
            except KeyError:
                continue

            if key:
                return key

        raise errors.ConfigurationFault("can't get %s secret key for service id=[%s]" % (direction, service_id))


    def url(self, service_id):
        """ Return the url to ask *service_id* at.
        """

        block = self[service_id]

        try:
            url = block['url']
        except KeyError:
            url = None

        if url:
            return url

        raise errors.ConfigurationFault("can't get ask url for service id=[%s]" % (service_id))


# end of class Configuration



def directory(default=None):
    """ Return the directory holding ``services.json``. An absolute
        *default* pins the location for the rest of the process; otherwise
        ``$REMOTECALL_HOME`` is used if set, then ``$HOME/.remotecall``.
        The answer is remembered after the first call.
    """

    if default is not None:
        default = os.path.expandvars(str(default))
        if not os.path.isabs(default):
            raise ValueError('configuration directory must be an absolute path: ' + repr(default))

        directory.found = default

    if directory.found is None:
        home = os.environ.get('HOME')
        found = os.environ.get('REMOTECALL_HOME')

        if not found and home is None:
            raise errors.ConfigurationFault('neither REMOTECALL_HOME nor HOME is set, no configuration directory')

        directory.found = found or os.path.join(home, '.remotecall')

    return directory.found

directory.found = None



def load(filename=None):
    """ Read and return the :class:`Configuration` stored in *filename*,
        or in the default file if no *filename* is provided.
    """

    if filename is None:
        filename = os.path.join(directory(), filename_default)

    try:
        with open(filename, 'rb') as handle:
            raw = handle.read()
    except FileNotFoundError:
        raise errors.ConfigurationFault('no configuration file at ' + repr(filename))

    try:
        raw = json.loads(raw)
    except json.DecodeError as e:
        raise errors.ConfigurationFault('cannot parse ' + repr(filename) + ': ' + str(e)) from e

    return Configuration.from_dict(raw)



def get(filename=None):
    """ Retrieve the cached :class:`Configuration` for *filename*, loading
        it on first use. The same instance is always returned for the same
        filename.
    """

    if filename is None:
        filename = os.path.join(directory(), filename_default)

    try:
        return _cache[filename]
    except KeyError:
        pass

    with _cache_lock:
        try:
            config = _cache[filename]
        except KeyError:
            config = load(filename)
            _cache[filename] = config

    return config


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
