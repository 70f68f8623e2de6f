"""Module to expose resources through a WSGI interface."""

# Copyright © 2015–2018 Paul Bryan.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import logging
import patchable.patch
import patchable.resource
import patchable.schema
import urllib.parse
import webob
import webob.exc


_logger = logging.getLogger(__name__)


class _ErrorResponse(webob.Response):
    def __init__(self, code, message):
        super().__init__()
        self.status_code = code
        self.content_type = "application/json"
        self.json = {"error": code, "message": message}


def _response(operation, result):
    returns = operation.returns
    response = webob.Response()
    if returns and result is not None:
        response.content_type = returns.content_type
        response.body = returns.bin_encode(result)
    else:
        response.status_code = webob.exc.HTTPNoContent.code
        response.content_type = None
    return response


def _params(request, operation, path_params):
    result = {}
    for name, param in operation.params.props.items():
        if name == "_body":
            if operation.type == "patch":
                if not patchable.patch.is_readable(request.content_type):
                    raise patchable.resource.UnsupportedMediaType(
                        f"expecting {patchable.patch.JSON_PATCH} or {patchable.patch.JSON}"
                    )
                result["_body"] = patchable.patch.Entity(
                    request.content_type, request.body
                )
            else:
                if not request.body:
                    raise patchable.schema.SchemaError("missing request entity-body")
                result["_body"] = param.bin_decode(request.body)
        elif name in path_params:
            result[name] = param.str_decode(path_params[name])
    return result


# operation type: (method, item)
_routes = {
    "list": ("GET", False),
    "create": ("POST", False),
    "read": ("GET", True),
    "update": ("PUT", True),
    "patch": ("PATCH", True),
    "delete": ("DELETE", True),
}


class App:
    """
    WSGI application.

    Resource operations that take an `id` parameter address an item in the
    resource, and are routed with the identifier as a trailing path segment.

    Parameters:
    • url: URL to access the application.
    """

    def __init__(self, url):
        self.url = url
        self.base = urllib.parse.urlparse(self.url).path.rstrip("/")
        self.operations = {}

    def register_resource(self, path, resource):
        """
        Register a resource to the application.

        Parameters:
        • path: Path of resource relative to application URL.
        • resource: Resource to be served when path is requested.
        """
        res_path = self.base + "/" + path.strip("/")
        for op in resource.operations.values():
            op_method, item = _routes[op.type]
            if item != ("id" in op.params.props):
                raise ValueError(
                    f"{op.name} operation {'requires' if item else 'cannot have'} id parameter"
                )
            op_path = res_path + "/{id}" if item else res_path
            if (op_method, op_path) in self.operations:
                raise ValueError(f"operation already defined for {op_method} {op_path}")
            self.operations[(op_method, op_path)] = op
            _logger.debug("registered %s %s", op_method, op_path)

    def __call__(self, environ, start_response):
        """Handle WSGI request."""
        request = webob.Request(environ)
        try:
            operation, path_params = self._get_operation(request)
            params = _params(request, operation, path_params)
            response = _response(operation, operation.call(**params))
        except webob.exc.HTTPException as he:
            response = _ErrorResponse(he.code, he.detail or he.title)
        except patchable.resource.ResourceError as re:
            response = _ErrorResponse(re.code, re.detail)
        except patchable.schema.SchemaError as se:
            response = _ErrorResponse(webob.exc.HTTPBadRequest.code, str(se))
        except Exception as e:
            _logger.exception("unhandled exception")
            response = _ErrorResponse(webob.exc.HTTPInternalServerError.code, str(e))
        _logger.debug(
            "%s %s %s", request.method, request.path_info, response.status_code
        )
        return response(environ, start_response)

    def _get_operation(self, request):
        path = request.path_info.rstrip("/") or "/"
        candidates = [(path, {})]
        parent, _, segment = path.rpartition("/")
        if segment:
            candidates.append((parent + "/{id}", {"id": segment}))
        for op_path, path_params in candidates:
            operation = self.operations.get((request.method, op_path))
            if operation:
                return operation, path_params
        for op_path, _ in candidates:
            if any(p == op_path for _, p in self.operations):
                raise patchable.resource.OperationNotAllowed(
                    f"{request.method} not allowed for {request.path_info}"
                )
        raise webob.exc.HTTPNotFound("resource or operation not found")
