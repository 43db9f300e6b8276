"""Staff domain exceptions."""

from __future__ import annotations


class StaffMemberAlreadyExists(Exception):
    """Another staff member already uses the e-mail address."""


class StaffMemberNotFound(Exception):
    """The requested staff member does not exist."""
