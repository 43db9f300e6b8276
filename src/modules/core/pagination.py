"""Pagination classes shared by every list endpoint."""

from __future__ import annotations

from decouple import config
from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """Page-number pagination with a client-tunable ``page_size`` (capped at 100)."""

    page_size = config("DEFAULT_PAGE_SIZE", default=20, cast=int)
    page_size_query_param = "page_size"
    max_page_size = 100
