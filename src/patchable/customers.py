"""Customer resource."""

# Copyright © 2015–2018 Paul Bryan.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import logging
import patchable.patch
import patchable.schema as s

from patchable.models import Customer, customer_schema, customers_schema
from patchable.resource import NotFound, Resource, UnprocessableEntity, operation


_logger = logging.getLogger(__name__)

_id = s.int(minimum=1, description="Customer identifier.")


class CustomerResource(Resource):
    """
    Customers, backed by a store.

    Updates and patches are read, modified and persisted without isolation from
    other concurrent writers of the same customer; the last write wins.

    Parameters:
    • store: Store in which customers are kept.
    """

    def __init__(self, store, name="customers"):
        super().__init__(name)
        self.store = store

    def _get(self, id):
        customer = self.store.get(id)
        if customer is None:
            raise NotFound(f"customer {id} not found")
        return customer

    @operation()
    def list(self) -> customers_schema:
        """Return all customers."""
        return self.store.get_all()

    @operation()
    def read(self, id: _id) -> customer_schema:
        """Return a customer."""
        return self._get(id)

    @operation()
    def create(self, _body: customer_schema) -> customer_schema:
        """Create a customer. The store assigns its identifier."""
        _body.id = None
        return self.store.insert(_body)

    @operation()
    def update(self, id: _id, _body: customer_schema) -> customer_schema:
        """Replace a customer."""
        self._get(id)  # ensure customer exists
        _body.id = id
        return self.store.update(_body)

    @operation()
    def patch(
        self, id: _id, _body: s.type(python_type=patchable.patch.Entity)
    ) -> customer_schema:
        """
        Patch a customer. The patch is a JSON Patch document if the request
        entity-body is application/json-patch+json, or a partial customer if it is
        application/json.
        """
        customer = self._get(id)
        patch = _body.read()
        try:
            customer = patch.apply(customer, customer_schema)
        except patchable.patch.PatchError as pe:
            _logger.debug("customer %s patch failed: %s", id, pe)
            raise UnprocessableEntity(str(pe)) from pe
        customer.id = id
        return self.store.update(customer)

    @operation()
    def delete(self, id: _id) -> None:
        """Delete a customer."""
        self._get(id)
        self.store.delete(id)
