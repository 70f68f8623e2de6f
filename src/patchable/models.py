"""Customer data model."""

# Copyright © 2015–2018 Paul Bryan.
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

import dataclasses
import patchable.schema as s


@dataclasses.dataclass
class Customer:
    """A customer, identified by a store-assigned identifier."""

    id: s.int(nullable=True, description="Customer identifier.") = None
    name: s.str(nullable=True, description="Customer name.") = None
    phone_numbers: s.list(
        s.str(), nullable=True, description="Customer phone numbers."
    ) = None


customer_schema = s.dataclass(
    Customer,
    names={"phone_numbers": "phoneNumbers"},
    description="A customer.",
)

customers_schema = s.list(customer_schema, description="A list of customers.")
