"""Role helpers.

Staff users (``is_staff``) act as administrators.  Every other
authenticated user is a customer and only sees orders placed under
their display name.
"""

from __future__ import annotations

from typing import Optional

from django.contrib.auth.models import AbstractBaseUser


def display_name(user: AbstractBaseUser) -> str:
    """Full name when set, otherwise the username."""
    full_name = getattr(user, "get_full_name", lambda: "")()
    return full_name.strip() or user.get_username()


def customer_scope(user: AbstractBaseUser) -> Optional[str]:
    """Customer name a request is restricted to; ``None`` for staff."""
    if user.is_staff:
        return None
    return display_name(user)
