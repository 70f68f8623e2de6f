"""Module to implement resources."""

# Copyright © 2015–2018 Paul Bryan.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import logging
import patchable.schema as s
import wrapt


_logger = logging.getLogger(__name__)


class _Operation:
    """A resource operation."""

    def __init__(self, attrs):
        for k in attrs:
            self.__setattr__(k, attrs[k])

    def call(self, **kwargs):
        """Call the resource operation with keyword arguments."""
        return getattr(self.resource, self.function)(**kwargs)


class ResourceError(Exception):
    """
    Base class for all resource errors.

    Parameters:
    • detail: textual description of the error.
    • code: the HTTP status most closely associated with the error.
    """

    def __init__(self, detail=None, code=None):
        super().__init__(detail)
        self.detail = detail or getattr(self, "detail", "Internal Server Error")
        self.code = code or getattr(self, "code", 500)

    def __str__(self):
        return self.detail


class BadRequest(ResourceError):
    """Raised if the request is malformed."""

    code, detail = 400, "Bad Request"


class NotFound(ResourceError):
    """Raised if the resource could not be found."""

    code, detail = 404, "Not Found"


class OperationNotAllowed(ResourceError):
    """Raised if the resource does not allow the requested operation."""

    code, detail = 405, "Operation Not Allowed"


class UnsupportedMediaType(ResourceError):
    """Raised if the request entity-body is in an unsupported format."""

    code, detail = 415, "Unsupported Media Type"


class UnprocessableEntity(ResourceError):
    """Raised if the request entity-body is well-formed but cannot be applied."""

    code, detail = 422, "Unprocessable Entity"


class Resource:
    """
    Base class for a resource.

    Parameters and instance variables:
    • name: Short name of the resource.  [class name in lower case]
    """

    def __init__(self, name=None):
        super().__init__()
        self.name = name or getattr(self, "name", type(self).__name__.lower())
        self.operations = {}
        for function in (
            attr for attr in (getattr(self, nom) for nom in dir(self)) if callable(attr)
        ):
            operation = getattr(function, "_patchable_operation_", None)
            if operation is None:
                continue  # ignore undecorated functions
            self._register_operation(**operation)

    def _register_operation(self, **operation):
        """Register a resource operation."""
        name = operation["name"]
        if name in self.operations:
            raise ValueError(f"operation name already registered: {name}")
        self.operations[name] = _Operation({**operation, "resource": self})


_types = {"list", "create", "read", "update", "patch", "delete"}


def operation(*, name=None, type=None):
    """
    Decorate a resource method to register it as a resource operation. Parameter
    and return value schemas are expressed as annotations.

    Parameters:
    • name: Operation name.  [function name]
    • type: Type of operation being registered.  {'list', 'create', 'read', 'update', 'patch', 'delete'}  [operation name]
    """

    def decorator(function):
        _name = name or function.__name__
        _type = type or _name
        if _type not in _types:
            raise ValueError(f"operation type must be one of: {_types}")

        def wrapper(wrapped, instance, args, kwargs):
            _logger.debug("%s.%s %s", instance.name, _name, kwargs)
            return wrapped(*args, **kwargs)

        decorated = wrapt.decorator(wrapper)(s.validate(function))
        decorated._patchable_operation_ = dict(
            function=function.__name__,
            name=_name,
            type=_type,
            params=s.function_params(function),
            returns=function.__annotations__.get("return"),
        )
        return decorated

    return decorator
