from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    ADMIN = "ROLE ADMIN"
    MEMBER = "ROLE MEMBER"
    MERCHANT = "ROLE MERCHANT"


@dataclass(frozen=True)
class CurrentUser:
    id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
