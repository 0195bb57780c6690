from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .errors import InvalidRole


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    TUTOR = "tutor"
    ADMINISTRATOR = "administrator"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value) -> "Role":
        """Принимает Role, значение, имя или отображаемое имя (в любом регистре)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for role in cls:
                if wanted in (role.value, role.name.lower(), role.display_name.lower()):
                    return role
        raise InvalidRole(value)


@dataclass(frozen=True)
class User:
    id: int | None
    role: Role
    name: str
    first_surname: str
    email: str
    second_surname: str | None = None
    phone: str | None = None
    enrollment_code: str | None = None
    program_id: int | None = None
    division_id: int | None = None
    employee_code: str | None = None
    active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def full_name(self) -> str:
        parts = [self.name, self.first_surname]
        if self.second_surname and self.second_surname.strip():
            parts.append(self.second_surname)
        return " ".join(parts)
