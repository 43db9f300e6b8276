"""Order domain exceptions.

Raised by the engine and the Service Layer when business rules are
violated.  The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations


class InvalidOrderError(Exception):
    """Order creation or edit preconditions were violated.

    Raised for an empty item list, a blank customer name, a non-editable
    field, or an unknown sort field.
    """


class OrderNotFound(Exception):
    """The requested order does not exist at the Persistence Gateway."""
