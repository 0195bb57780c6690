from dataclasses import dataclass, field
from datetime import datetime
from math import ceil
from typing import Generic, TypeVar

from ..domain.entities import Role

T = TypeVar("T")


@dataclass
class UserDTO:
    """Пользователь на входе/выходе API; серверные поля на входе None."""
    name: str
    first_surname: str
    email: str
    role: str | None = None
    second_surname: str | None = None
    phone: str | None = None
    enrollment_code: str | None = None
    program_id: int | None = None
    division_id: int | None = None
    employee_code: str | None = None
    id: int | None = None
    full_name: str | None = None
    unique_identifier: str | None = None
    active: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class UserFilter:
    role: Role | None = None
    active: bool | None = None
    name_contains: str | None = None
    surname_contains: str | None = None
    email_contains: str | None = None
    program_id: int | None = None
    division_id: int | None = None


@dataclass
class PageRequest:
    page: int = 0
    size: int = 10
    sort_by: str = "id"
    sort_dir: str = "asc"

    @property
    def offset(self) -> int:
        return self.page * self.size

    @property
    def descending(self) -> bool:
        return self.sort_dir.lower() == "desc"


@dataclass
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    page: int = 0
    size: int = 10
    total_items: int = 0

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return ceil(self.total_items / self.size)

    def map(self, fn) -> "Page":
        return Page(items=[fn(i) for i in self.items], page=self.page, size=self.size, total_items=self.total_items)
