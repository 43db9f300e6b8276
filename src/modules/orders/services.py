"""Order service layer (Use Cases).

Glues the lifecycle engine to the Persistence Gateway:

1. Load the order through ``IOrderRepository``.
2. Let ``modules.orders.engine`` compute or mutate it.
3. Write the changed fields (and any new history entry) back.
4. Publish a domain event on the in-process bus.

There is no transaction spanning steps 1 to 3 and no lock: two callers
updating the same order concurrently follow last-write-wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import structlog

from modules.orders import engine
from modules.orders.constants import (
    HISTORY_PERIODS,
    TRACKING_NUMBER_MAX_RETRIES,
    OrderStatus,
)
from modules.orders.dtos import OrderQueryDTO
from modules.orders.events import OrderCancelled, OrderCreated, OrderStatusChanged
from modules.orders.exceptions import InvalidOrderError
from shared.infrastructure.bus import event_bus as default_event_bus

if TYPE_CHECKING:
    from modules.orders.dtos import CreateOrderDTO, EditOrderDTO
    from modules.orders.entities import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives the repository (and optionally an event bus) via
    constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        event_bus: Optional[IEventBus] = None,
    ) -> None:
        self._order_repo = order_repository
        self._event_bus = event_bus if event_bus is not None else default_event_bus

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Create, price and store a new pending order.

        A generated tracking number already present in storage is re-rolled
        up to ``TRACKING_NUMBER_MAX_RETRIES`` times; after that the last
        candidate is kept (tracking numbers are not unique).

        Raises:
            InvalidOrderError: no items, or a blank customer name.
        """
        log = logger.bind(customer_name=dto.customer_name)
        log.info("order.creation_started", item_count=len(dto.items))

        try:
            order = engine.create_order(dto.customer_name, dto.items, dto.notes)
        except InvalidOrderError as exc:
            log.warning("order.creation_rejected", reason=str(exc))
            raise

        order.tracking_number = self._unique_tracking_number(order.tracking_number)
        order = self._order_repo.insert(order)

        log.info(
            "order.created",
            order_id=order.id,
            tracking_number=order.tracking_number,
            total_amount=str(order.total_amount),
        )
        self._event_bus.publish(
            OrderCreated(aggregate_id=order.id, tracking_number=order.tracking_number)
        )
        return order

    def update_status(
        self,
        order_id: str,
        new_status: str,
        note: Optional[str] = None,
    ) -> Order:
        """Record a status change and persist it.

        Every call appends a history entry, including repeats of the
        current status and moves against the normal flow.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderError: *new_status* is not a known status.
        """
        order = self._order_repo.fetch_by_id(order_id)
        old_status = str(order.status)
        delivered_before = order.delivered_at

        entry = engine.update_status(order, new_status, note)

        fields = {"status": order.status}
        if order.delivered_at != delivered_before:
            fields["delivered_at"] = order.delivered_at
        self._order_repo.apply_update(order_id, fields)
        self._order_repo.append_history(order_id, entry)

        logger.info(
            "order.status_updated",
            order_id=order_id,
            old_status=old_status,
            new_status=str(order.status),
            note=entry.note,
        )
        self._event_bus.publish(
            OrderStatusChanged(
                aggregate_id=order_id,
                old_status=old_status,
                new_status=str(order.status),
            )
        )
        if order.status == OrderStatus.CANCELLED:
            self._event_bus.publish(OrderCancelled(aggregate_id=order_id))
        return order

    def cancel_order(self, order_id: str, note: Optional[str] = None) -> Order:
        """Shortcut for ``update_status(order_id, "cancelled", note)``."""
        return self.update_status(order_id, OrderStatus.CANCELLED, note)

    def edit_order(self, order_id: str, dto: EditOrderDTO) -> Order:
        """Apply an administrative correction.  Status history is untouched.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderError: the edit breaks an order precondition.
        """
        order = self._order_repo.fetch_by_id(order_id)
        changes = engine.apply_edits(order, dto.changes())
        if changes:
            self._order_repo.apply_update(order_id, changes)
        logger.info("order.edited", order_id=order_id, fields=sorted(changes))
        return order

    def delete_order(self, order_id: str) -> None:
        """Remove an order through the gateway.

        Raises:
            OrderNotFound: order does not exist.
        """
        self._order_repo.delete(order_id)
        logger.info("order.removed", order_id=order_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Raises ``OrderNotFound`` if the order does not exist."""
        return self._order_repo.fetch_by_id(order_id)

    def get_by_tracking_number(
        self, tracking_number: str, customer_name: Optional[str] = None
    ) -> Order:
        """Raises ``OrderNotFound`` if no (matching) order carries the number."""
        return self._order_repo.fetch_by_tracking_number(
            tracking_number, customer_name=customer_name
        )

    def list_orders(self, query: Optional[OrderQueryDTO] = None) -> List[Order]:
        """Order list: search on tracking number / customer, window on ``created_at``."""
        query = query or OrderQueryDTO()
        orders = self._narrow(query)
        orders = engine.filter_orders(
            orders,
            query=query.search,
            date_range=_date_range(query),
            date_field="created_at",
        )
        return engine.sort_orders(orders, query.sort_field, query.sort_direction)

    def list_history(self, query: Optional[OrderQueryDTO] = None) -> List[Order]:
        """Completed orders: search also matches fabric/color, window on delivery date."""
        query = query or OrderQueryDTO(ordering="-delivered_at")
        orders = [
            order
            for order in self._narrow(query)
            if order.status == OrderStatus.COMPLETED
        ]
        orders = engine.filter_orders(
            orders,
            query=query.search,
            date_range=_date_range(query),
            date_field="delivered_at",
            match_items=True,
        )
        return engine.sort_orders(orders, query.sort_field, query.sort_direction)

    def summary(self) -> engine.OrderSummary:
        """Order-flow counts for the admin dashboard."""
        return engine.summarize(self._order_repo.fetch_all())

    def customer_summary(
        self, customer_name: Optional[str] = None
    ) -> engine.CustomerSummary:
        """Dashboard figures for one customer (every order when ``None``)."""
        return engine.customer_summary(
            self._order_repo.fetch_all(customer_name=customer_name)
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _narrow(self, query: OrderQueryDTO) -> List[Order]:
        orders = self._order_repo.fetch_all(customer_name=query.customer_name)
        if query.status is not None:
            orders = [order for order in orders if order.status == query.status]
        return orders

    def _unique_tracking_number(self, candidate: str) -> str:
        for _ in range(TRACKING_NUMBER_MAX_RETRIES):
            if not self._order_repo.tracking_number_exists(candidate):
                return candidate
            logger.info("order.tracking_number_taken", tracking_number=candidate)
            candidate = engine.generate_tracking_number()
        logger.warning("order.tracking_number_collision", tracking_number=candidate)
        return candidate


def _date_range(query: OrderQueryDTO) -> Optional[engine.DateRange]:
    if query.start_date or query.end_date:
        return engine.DateRange.from_dates(query.start_date, query.end_date)
    if query.period:
        return engine.DateRange.last_days(HISTORY_PERIODS[query.period])
    return None
