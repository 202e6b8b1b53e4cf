from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class UserType(str, Enum):
    ADMIN = "ADMIN"
    GUEST = "GUEST"


@dataclass(frozen=True)
class Session:
    """
    Who is calling. Passed explicitly into every caller-facing operation,
    so several sessions can coexist in one process.

    For guests `user_id` is the customer id; for admins it is the staff user id.
    """

    user_type: UserType
    user_id: int
    display_name: str = ""

    @classmethod
    def admin(cls, user_id: int, display_name: str = "") -> Session:
        return cls(UserType.ADMIN, user_id, display_name)

    @classmethod
    def guest(cls, customer_id: int, display_name: str = "") -> Session:
        return cls(UserType.GUEST, customer_id, display_name)

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.ADMIN

    @property
    def is_guest(self) -> bool:
        return self.user_type == UserType.GUEST

    def describe(self) -> str:
        return f"{self.user_type.value.lower()}:{self.user_id}"
