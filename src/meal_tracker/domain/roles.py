"""Account roles."""

from enum import Enum


class Role(Enum):
    """Capability level of an account."""

    ADMIN = "admin"
    MANAGER = "manager"
    REGULAR = "regular"
