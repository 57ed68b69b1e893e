""" The registry of operations a replying service is willing to execute.

    Operations are grouped into named targets; a remote command names an
    operation as ``Target::operation``, or names just the target, in which
    case the registry's default operation (``run``, unless configured
    otherwise) is used. Every target carries the allow list consulted by
    :mod:`remotecall.access` before one of its operations is invoked.

    Registration is expected to happen once, at startup::

        registry = remotecall.TargetRegistry()
        orders = registry.target('Orders', allow={'run': '*', 'cancel': ['billing']})

        @orders.operation()
        def run(params):
            return lookup_order(params['id'])

        @orders.operation('cancel')
        def cancel_order(params):
            ...
"""

import threading

from . import errors
from .protocol import fields


class Operation:
    """ A single callable *handler* registered under *name* within a
        :class:`Target`. The handler receives the request parameters as
        a dictionary, and whatever it returns is the reply.
    """

    def __init__(self, name, handler, target):
        self.name = name
        self.handler = handler
        self.target = target


    def __repr__(self):
        return 'Operation(%s)' % (repr(self.qualified))


    @property
    def qualified(self):
        return self.target.name + fields.SEPARATOR + self.name


    def allow_list(self):
        return self.target.allow_list()


    def execute(self, params):
        return self.handler(params)


# end of class Operation



class Target:
    """ A named group of operations sharing one allow list. If *allow* is
        not provided the target has no allow list, and every attempt to
        invoke one of its operations will be rejected as misconfigured.
    """

    def __init__(self, name, allow=None):

        if not name:
            raise ValueError('a target must have a name')

        if fields.SEPARATOR in name:
            raise ValueError('target name cannot contain ' + repr(fields.SEPARATOR))

        self.name = name
        self.allow = allow
        self.operations = dict()


    def __contains__(self, name):
        return name in self.operations


    def __getitem__(self, name):
        return self.operations[name]


    def __repr__(self):
        return 'Target(%s)' % (repr(self.name))


    def add(self, name, handler):
        """ Register *handler* as the operation *name*. Registering the
            same name twice is an error.
        """

        if name in self.operations:
            raise ValueError('duplicate operation not allowed: ' + self.name + fields.SEPARATOR + name)

        if not callable(handler):
            raise TypeError('operation handler must be callable')

        operation = Operation(name, handler, self)
        self.operations[name] = operation
        return operation


    def allow_list(self):
        return self.allow


    def operation(self, name=None):
        """ Decorator form of :func:`add`; the function name is used if
            no *name* is provided.
        """

        def decorator(function):
            self.add(name or function.__name__, function)
            return function

        return decorator


# end of class Target



class TargetRegistry:

    def __init__(self, default_operation=fields.DEFAULT_OPERATION):
        self.default_operation = default_operation
        self.targets = dict()
        self._lock = threading.Lock()


    def __contains__(self, name):
        return name in self.targets


    def add(self, target):
        with self._lock:
            if target.name in self.targets:
                raise ValueError('duplicate target not allowed: ' + target.name)
            self.targets[target.name] = target

        return target


    def resolve(self, command):
        """ Return the :class:`Operation` named by *command*. A
            :class:`remotecall.errors.OperationNotFound` exception is raised
            if either the target or the operation is unknown.
        """

        target_name, operation_name = self.split(command)

        try:
            target = self.targets[target_name]
        except KeyError:
            raise errors.OperationNotFound('unknown remote target: ' + repr(target_name))

        try:
            operation = target[operation_name]
        except KeyError:
            raise errors.OperationNotFound('unknown remote operation: ' + repr(target_name + fields.SEPARATOR + operation_name))

        return operation


    def split(self, command):
        """ Split *command* into a (target, operation) tuple, on the first
            occurrence of the separator. A bare target name is paired with
            the default operation.
        """

        if not command:
            raise errors.OperationNotFound('no operation requested')

        if fields.SEPARATOR in command:
            target, operation = command.split(fields.SEPARATOR, 1)
        else:
            target = command
            operation = self.default_operation

        return target, operation


    def target(self, name, allow=None):
        """ Return the :class:`Target` registered as *name*, creating it
            with the supplied *allow* list if it does not yet exist. An
            *allow* list passed for an existing target replaces the one it
            had.
        """

        with self._lock:
            try:
                target = self.targets[name]
            except KeyError:
                target = Target(name, allow)
                self.targets[name] = target
            else:
                if allow is not None:
                    target.allow = allow

        return target


# end of class TargetRegistry


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
