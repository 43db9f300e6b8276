"""Order lifecycle engine.

Pure functions over the records in ``modules.orders.entities``:

- Pricing: ``unit_price`` / ``calculate_total`` from ``FABRIC_PRICING``.
- Creation: ``create_order`` (the only place an ``Order`` is built).
- Status machine: ``update_status`` appends to the history ledger and
  stamps ``delivered_at`` on completion.  Transitions are recorded, never
  blocked; backward moves are manual corrections by staff.
- Administrative edits: ``apply_edits`` (never touches history).
- Presentation helpers: ``filter_orders``, ``sort_orders``,
  ``sorted_history``, ``reached_at``, ``resolve_delivered_at``, ``summarize``,
  ``customer_summary``.

Nothing here persists.  Callers save the mutated order through the
Persistence Gateway.
"""

from __future__ import annotations

import math
import secrets
from collections import Counter
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import structlog
from django.utils import timezone
from pydantic import BaseModel, ConfigDict, ValidationError

from modules.orders.constants import (
    CUSTOMER_SUMMARY_MONTHS,
    DEFAULT_UNIT_PRICE,
    ESTIMATED_DELIVERY_DAYS,
    FABRIC_PRICING,
    NORMAL_FLOW,
    TERMINAL_STATES,
    TRACKING_NUMBER_DIGITS,
    TRACKING_NUMBER_MAX_VALUE,
    TRACKING_NUMBER_PREFIX,
    OrderStatus,
    SortDirection,
)
from modules.orders.entities import Order, OrderItem, StatusHistoryEntry
from modules.orders.exceptions import InvalidOrderError

logger = structlog.get_logger(__name__)

EDITABLE_FIELDS = frozenset({"customer_name", "items", "notes", "estimated_delivery"})

SORTABLE_FIELDS = frozenset(
    {
        "tracking_number",
        "customer_name",
        "total_amount",
        "status",
        "created_at",
        "estimated_delivery",
        "delivered_at",
        "updated_at",
    }
)

DATE_FIELDS = frozenset({"created_at", "delivered_at"})


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else timezone.now()


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------


def unit_price(fabric: str) -> Decimal:
    """Price per unit of quantity for *fabric*; unknown fabrics cost 6."""
    return FABRIC_PRICING.get(fabric, DEFAULT_UNIT_PRICE)


def calculate_total(items: Iterable[OrderItem]) -> Decimal:
    """Sum of ``unit_price(fabric) * quantity`` over *items*.

    No rounding is applied; an empty sequence totals ``0``.
    """
    return sum(
        (unit_price(item.fabric) * item.quantity for item in items),
        Decimal("0"),
    )


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


def generate_tracking_number() -> str:
    """Return ``DYE`` followed by a zero-padded random number in [0, 9999].

    Uniqueness is not checked here.
    """
    number = secrets.randbelow(TRACKING_NUMBER_MAX_VALUE + 1)
    return f"{TRACKING_NUMBER_PREFIX}{number:0{TRACKING_NUMBER_DIGITS}d}"


def estimate_delivery(start: datetime, days: Optional[int] = None) -> datetime:
    """Projected delivery: *start* plus the standard lead time."""
    return start + timedelta(days=ESTIMATED_DELIVERY_DAYS if days is None else days)


def _parse_items(items: Iterable[Any]) -> List[OrderItem]:
    try:
        return [OrderItem.model_validate(item) for item in items]
    except ValidationError as exc:
        raise InvalidOrderError(f"Invalid order item: {exc}") from exc


def _require_customer_name(customer_name: Optional[str]) -> str:
    if not customer_name or not customer_name.strip():
        raise InvalidOrderError("Customer name is required to create an order.")
    return customer_name.strip()


def create_order(
    customer_name: str,
    items: Sequence[Any],
    notes: Optional[str] = "",
    now: Optional[datetime] = None,
) -> Order:
    """Build a new pending order.

    *items* may be ``OrderItem`` instances or mappings with the same keys.

    Raises:
        InvalidOrderError: *items* is empty or invalid, or *customer_name*
            is blank.
    """
    parsed = _parse_items(items)
    if not parsed:
        raise InvalidOrderError("Order must have at least one item.")
    name = _require_customer_name(customer_name)

    created_at = _now(now)
    return Order(
        tracking_number=generate_tracking_number(),
        customer_name=name,
        items=parsed,
        total_amount=calculate_total(parsed),
        status=OrderStatus.PENDING,
        created_at=created_at,
        estimated_delivery=estimate_delivery(created_at),
        notes=notes or "",
        status_history=[],
    )


# ---------------------------------------------------------------------------
# Status machine
# ---------------------------------------------------------------------------


def _coerce_status(value: Any) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError as exc:
        raise InvalidOrderError(f"Unknown order status '{value}'.") from exc


def is_forward_transition(current: str, new: str) -> bool:
    """Whether *current* -> *new* follows the normal flow.

    Advisory only: ``update_status`` records every transition.
    """
    if current in TERMINAL_STATES:
        return False
    if new == OrderStatus.CANCELLED:
        return True
    if current in NORMAL_FLOW and new in NORMAL_FLOW:
        return NORMAL_FLOW.index(new) > NORMAL_FLOW.index(current)
    return False


def update_status(
    order: Order,
    new_status: str,
    note: Optional[str] = None,
    now: Optional[datetime] = None,
) -> StatusHistoryEntry:
    """Move *order* to *new_status* and append the change to its history.

    Repeating the current status still appends an entry.  On the first
    transition into ``completed`` the order's ``delivered_at`` is stamped.

    Returns the appended ``StatusHistoryEntry``.
    """
    status = _coerce_status(new_status)
    timestamp = _now(now)
    previous = order.status

    if not is_forward_transition(previous, status):
        logger.warning(
            "order.non_forward_transition",
            tracking_number=order.tracking_number,
            old_status=str(previous),
            new_status=status.value,
        )

    entry = StatusHistoryEntry(
        status=status,
        timestamp=timestamp,
        note=note if note is not None else f"Status updated to {status.value}",
    )
    order.status = status
    order.status_history.append(entry)
    if status == OrderStatus.COMPLETED and order.delivered_at is None:
        order.delivered_at = timestamp
    return entry


# ---------------------------------------------------------------------------
# Administrative edits
# ---------------------------------------------------------------------------


def apply_edits(order: Order, fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Apply an administrative correction to *order*.

    Only ``EDITABLE_FIELDS`` may change.  Replacing ``items`` recomputes
    ``total_amount``.  Returns the changed fields with their new values,
    ready for ``IOrderRepository.apply_update``.

    Raises:
        InvalidOrderError: a protected or unknown field was supplied, or
            the new values break the creation preconditions.
    """
    rejected = set(fields) - EDITABLE_FIELDS
    if rejected:
        raise InvalidOrderError(
            f"Fields cannot be edited: {', '.join(sorted(rejected))}."
        )

    changes: Dict[str, Any] = {}
    if "customer_name" in fields:
        changes["customer_name"] = _require_customer_name(fields["customer_name"])
    if "items" in fields:
        parsed = _parse_items(fields["items"] or [])
        if not parsed:
            raise InvalidOrderError("Order must have at least one item.")
        changes["items"] = parsed
        changes["total_amount"] = calculate_total(parsed)
    if "notes" in fields:
        changes["notes"] = fields["notes"] or ""
    if "estimated_delivery" in fields:
        if fields["estimated_delivery"] is None:
            raise InvalidOrderError("Estimated delivery cannot be cleared.")
        changes["estimated_delivery"] = fields["estimated_delivery"]

    for field, value in changes.items():
        setattr(order, field, value)
    return changes


# ---------------------------------------------------------------------------
# History helpers
# ---------------------------------------------------------------------------


def sorted_history(order: Order) -> List[StatusHistoryEntry]:
    """History entries ordered by timestamp (insertion order breaks ties)."""
    return sorted(order.status_history, key=lambda entry: entry.timestamp)


def reached_at(order: Order, status: str) -> Optional[datetime]:
    """Timestamp at which *order* first entered *status*, if ever."""
    for entry in sorted_history(order):
        if entry.status == status:
            return entry.timestamp
    return None


def resolve_delivered_at(order: Order) -> Optional[datetime]:
    """``delivered_at``, falling back to the first ``completed`` entry."""
    if order.delivered_at is not None:
        return order.delivered_at
    return reached_at(order, OrderStatus.COMPLETED)


# ---------------------------------------------------------------------------
# Filtering and sorting
# ---------------------------------------------------------------------------


class DateRange(BaseModel):
    """Inclusive instant range; either bound may be open."""

    model_config = ConfigDict(frozen=True)

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, value: datetime) -> bool:
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True

    @classmethod
    def from_dates(
        cls, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> DateRange:
        """Calendar-day range: *start_date* 00:00 through *end_date* 23:59:59.999999."""
        start = end = None
        if start_date is not None:
            start = timezone.make_aware(datetime.combine(start_date, time.min))
        if end_date is not None:
            end = timezone.make_aware(datetime.combine(end_date, time.max))
        return cls(start=start, end=end)

    @classmethod
    def last_days(cls, days: int, now: Optional[datetime] = None) -> DateRange:
        """Everything from *days* days ago up to *now*."""
        current = _now(now)
        return cls(start=current - timedelta(days=days), end=current)


def _matches_query(order: Order, needle: str, match_items: bool) -> bool:
    if needle in order.tracking_number.lower():
        return True
    if needle in order.customer_name.lower():
        return True
    if match_items:
        return any(
            needle in item.fabric.lower() or needle in item.color.lower()
            for item in order.items
        )
    return False


def _date_value(order: Order, date_field: str) -> Optional[datetime]:
    if date_field == "delivered_at":
        return resolve_delivered_at(order)
    return order.created_at


def _sort_value(order: Order, field: str) -> Any:
    if field == "delivered_at":
        return resolve_delivered_at(order)
    return getattr(order, field)


def filter_orders(
    orders: Iterable[Order],
    query: Optional[str] = "",
    date_range: Optional[DateRange] = None,
    date_field: str = "created_at",
    match_items: bool = False,
) -> List[Order]:
    """Filter by case-insensitive search and an inclusive date range.

    *query* matches a substring of the tracking number or customer name
    (plus item fabric/color when *match_items*).  *date_field* is
    ``created_at`` for order lists and ``delivered_at`` for history lists;
    orders without a value for it are dropped when a range is given.
    """
    if date_field not in DATE_FIELDS:
        raise InvalidOrderError(f"Cannot filter by date field '{date_field}'.")

    needle = (query or "").lower()
    use_range = date_range is not None and not date_range.is_open

    result = []
    for order in orders:
        if needle and not _matches_query(order, needle, match_items):
            continue
        if use_range:
            value = _date_value(order, date_field)
            if value is None or not date_range.contains(value):
                continue
        result.append(order)
    return result


def sort_orders(
    orders: Iterable[Order],
    field: str = "created_at",
    direction: str = SortDirection.DESC,
) -> List[Order]:
    """Sort by a single field.

    Dates compare by instant, strings lexicographically, amounts by
    magnitude.  ``delivered_at`` falls back to the first ``completed``
    history entry, as in ``filter_orders``.  Orders with no value for
    *field* go last in either direction.  Ties keep their input order.

    Raises:
        InvalidOrderError: *field* or *direction* is not supported.
    """
    if field not in SORTABLE_FIELDS:
        raise InvalidOrderError(f"Cannot sort by '{field}'.")
    try:
        descending = SortDirection(direction) == SortDirection.DESC
    except ValueError as exc:
        raise InvalidOrderError(f"Unknown sort direction '{direction}'.") from exc

    present: List[tuple] = []
    missing: List[Order] = []
    for order in orders:
        value = _sort_value(order, field)
        if value is None:
            missing.append(order)
        else:
            present.append((value, order))

    present.sort(key=lambda pair: pair[0], reverse=descending)
    return [order for _, order in present] + missing


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


class OrderSummary(BaseModel):
    """Order flow counts for the admin dashboard."""

    model_config = ConfigDict(frozen=True)

    total_orders: int
    active_orders: int
    by_status: Dict[str, int]
    by_month: Dict[str, int]


def summarize(orders: Iterable[Order]) -> OrderSummary:
    """Count orders overall, per status and per creation month (``YYYY-MM``)."""
    orders = list(orders)
    status_counts = Counter(str(order.status) for order in orders)
    month_counts = Counter(order.created_at.strftime("%Y-%m") for order in orders)
    return OrderSummary(
        total_orders=len(orders),
        active_orders=sum(1 for order in orders if not order.is_terminal),
        by_status={status.value: status_counts.get(status.value, 0) for status in OrderStatus},
        by_month=dict(sorted(month_counts.items())),
    )


class NextDelivery(BaseModel):
    """Earliest upcoming delivery among a customer's active orders."""

    model_config = ConfigDict(frozen=True)

    tracking_number: str
    estimated_delivery: datetime
    days_remaining: int


class CustomerSummary(BaseModel):
    """One customer's dashboard figures."""

    model_config = ConfigDict(frozen=True)

    total_orders: int
    active_orders: int
    completed_orders: int
    total_spent: Decimal
    next_delivery: Optional[NextDelivery]
    orders_this_month: int
    orders_last_month: int
    monthly_trend: int
    by_month: Dict[str, int]


def _shift_month(year: int, month: int, offset: int) -> tuple:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def _monthly_trend(this_month: int, last_month: int) -> int:
    """Percent change against last month, rounded half up.

    With no orders last month any order this month counts as +100%.
    """
    if last_month:
        change = Decimal(this_month - last_month) * 100 / last_month
        return int(change.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return 100 if this_month else 0


def customer_summary(
    orders: Iterable[Order],
    now: Optional[datetime] = None,
    months: int = CUSTOMER_SUMMARY_MONTHS,
) -> CustomerSummary:
    """Dashboard figures for one customer's orders.

    ``total_spent`` sums completed orders.  ``next_delivery`` is the active
    order with the earliest ``estimated_delivery``; ``days_remaining`` is
    rounded up and goes negative once the estimate has passed.
    ``by_month`` covers the last *months* calendar months (``YYYY-MM``),
    zero-filled, oldest first.
    """
    orders = list(orders)
    current = _now(now)

    active = [order for order in orders if not order.is_terminal]
    completed = [order for order in orders if order.status == OrderStatus.COMPLETED]

    next_delivery = None
    if active:
        upcoming = min(active, key=lambda order: order.estimated_delivery)
        seconds = (upcoming.estimated_delivery - current).total_seconds()
        next_delivery = NextDelivery(
            tracking_number=upcoming.tracking_number,
            estimated_delivery=upcoming.estimated_delivery,
            days_remaining=math.ceil(seconds / 86400),
        )

    month_counts = Counter(
        (order.created_at.year, order.created_at.month) for order in orders
    )
    this_month = (current.year, current.month)
    last_month = _shift_month(current.year, current.month, -1)

    by_month = {}
    for offset in range(-(months - 1), 1):
        year, month = _shift_month(current.year, current.month, offset)
        by_month[f"{year:04d}-{month:02d}"] = month_counts.get((year, month), 0)

    return CustomerSummary(
        total_orders=len(orders),
        active_orders=len(active),
        completed_orders=len(completed),
        total_spent=sum((order.total_amount for order in completed), Decimal("0")),
        next_delivery=next_delivery,
        orders_this_month=month_counts.get(this_month, 0),
        orders_last_month=month_counts.get(last_month, 0),
        monthly_trend=_monthly_trend(
            month_counts.get(this_month, 0), month_counts.get(last_month, 0)
        ),
        by_month=by_month,
    )
