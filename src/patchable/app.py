"""Customer service application and command-line entry point."""

# Copyright © 2015–2018 Paul Bryan.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import argparse
import logging
import socketserver
import wsgiref.simple_server

from patchable.customers import CustomerResource
from patchable.memory import MemoryStore
from patchable.models import Customer
from patchable.wsgi import App


_logger = logging.getLogger(__name__)


def seed(store):
    """Insert the initial customers into the store."""
    store.insert(Customer(name="First customer"))
    store.insert(Customer(name="Second customer", phone_numbers=["01234", "56789"]))


def create_app(store=None, seed_data=True, url="/"):
    """
    Create the customer service WSGI application.

    Parameters:
    • store: Store in which customers are kept.  [new in-memory store]
    • seed_data: Insert the initial customers into the store.
    • url: URL to access the application.
    """
    if store is None:
        store = MemoryStore()
    if seed_data:
        seed(store)
    app = App(url)
    app.register_resource("/customers", CustomerResource(store))
    return app


class _ThreadingWSGIServer(socketserver.ThreadingMixIn, wsgiref.simple_server.WSGIServer):
    daemon_threads = True


def add_parser_options(parser=None, default_host="localhost", default_port=8080, **kwargs):
    """Add the service options to a parser, creating the parser if needed."""

    if parser is None:
        parser = argparse.ArgumentParser(**kwargs)

    parser.add_argument(
        "--host", help="Host name or address to listen on.", type=str, default=default_host
    )

    parser.add_argument(
        "-p", "--port", help="Port number to listen on.", type=int, default=default_port
    )

    parser.add_argument(
        "--no-seed",
        help="Start with no customers.",
        action="store_false",
        dest="seed",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_const",
        const=logging.INFO,
        dest="verbosity",
        help="Show all messages.",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        const=logging.CRITICAL,
        dest="verbosity",
        help="Show only critical errors.",
    )

    parser.add_argument(
        "-D",
        "--debug",
        action="store_const",
        const=logging.DEBUG,
        dest="verbosity",
        help="Show all messages, including debug messages.",
    )

    return parser


def setup_logger(logger, args):  # pragma: nocover
    logger.addHandler(logging.StreamHandler())
    if args.verbosity:
        logger.setLevel(args.verbosity)


def main(argv=None):  # pragma: nocover
    parser = add_parser_options(description="Serve the customer resource.")
    args = parser.parse_args(argv)
    setup_logger(logging.getLogger("patchable"), args)
    app = create_app(seed_data=args.seed)
    with wsgiref.simple_server.make_server(
        args.host, args.port, app, server_class=_ThreadingWSGIServer
    ) as server:
        _logger.info("serving on http://%s:%s/customers", args.host, args.port)
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            _logger.info("shutting down")


if __name__ == "__main__":  # pragma: nocover
    main()
