"""Order domain constants.

Defines status choices, the normal flow of the status state machine,
the fabric pricing table and tracking-number parameters.
"""

from decimal import Decimal

from decouple import config
from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    READY = "ready", "Ready"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


# Normal forward flow.  ``cancelled`` sits outside it and is reachable
# from any non-terminal state.
NORMAL_FLOW: list[str] = [
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.READY,
    OrderStatus.COMPLETED,
]

TERMINAL_STATES: set[str] = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}


class SortDirection(models.TextChoices):
    ASC = "asc", "Ascending"
    DESC = "desc", "Descending"


# ---------------------------------------------------------------------------
# Pricing (price units per unit of quantity)
# ---------------------------------------------------------------------------

FABRIC_PRICING: dict[str, Decimal] = {
    "Cotton": Decimal("5"),
    "Silk": Decimal("12"),
    "Linen": Decimal("8"),
    "Wool": Decimal("10"),
    "Polyester": Decimal("4"),
    "Denim": Decimal("7"),
    "Velvet": Decimal("15"),
}

DEFAULT_UNIT_PRICE = Decimal("6")

DEFAULT_UNIT = "meters"

# ---------------------------------------------------------------------------
# Tracking numbers / delivery
# ---------------------------------------------------------------------------

TRACKING_NUMBER_PREFIX = "DYE"
TRACKING_NUMBER_DIGITS = 5
TRACKING_NUMBER_MAX_VALUE = 9999
TRACKING_NUMBER_MAX_RETRIES = config("TRACKING_NUMBER_MAX_RETRIES", default=5, cast=int)

ESTIMATED_DELIVERY_DAYS = config("ESTIMATED_DELIVERY_DAYS", default=14, cast=int)

# Presets offered by the history view ("last-30", ...).
HISTORY_PERIODS: dict[str, int] = {
    "last-30": 30,
    "last-90": 90,
    "last-180": 180,
    "last-365": 365,
}

# Months shown in a customer's order trend.
CUSTOMER_SUMMARY_MONTHS = 6
