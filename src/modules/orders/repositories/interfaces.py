"""Order Persistence Gateway interface.

The Service Layer depends exclusively on this contract (DIP).  It works
with the engine records from ``modules.orders.entities``, never with ORM
rows.  There is no locking and no version check: concurrent writers to
the same order follow last-write-wins.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, List, Mapping, Optional

if TYPE_CHECKING:
    from modules.orders.entities import Order, StatusHistoryEntry


class IOrderRepository(ABC):
    """Persistence Gateway contract for the Order aggregate."""

    @abstractmethod
    def fetch_all(self, customer_name: Optional[str] = None) -> List[Order]:
        """Return every order, optionally only those of one customer."""

    @abstractmethod
    def fetch_by_id(self, id: str) -> Order:
        """Return the order with *id*.

        Raises:
            OrderNotFound: no order has that id.
        """

    @abstractmethod
    def fetch_by_tracking_number(
        self, tracking_number: str, customer_name: Optional[str] = None
    ) -> Order:
        """Return the most recent order carrying *tracking_number*.

        With *customer_name* only that customer's orders are considered.

        Raises:
            OrderNotFound: no order carries that tracking number.
        """

    @abstractmethod
    def insert(self, order: Order) -> Order:
        """Store a new order and return a copy carrying its assigned ``id``."""

    @abstractmethod
    def apply_update(self, id: str, fields: Mapping[str, Any]) -> None:
        """Overwrite the given top-level fields (``items`` replaces all lines).

        Raises:
            OrderNotFound: no order has that id.
        """

    @abstractmethod
    def append_history(self, id: str, entry: StatusHistoryEntry) -> None:
        """Append one entry to the order's status history.

        Raises:
            OrderNotFound: no order has that id.
        """

    @abstractmethod
    def delete(self, id: str) -> None:
        """Remove an order and its children.

        Raises:
            OrderNotFound: no order has that id.
        """

    @abstractmethod
    def tracking_number_exists(self, tracking_number: str) -> bool:
        """Whether any stored order already carries *tracking_number*."""
