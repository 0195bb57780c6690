from __future__ import annotations

from ..domain.entities import Role, User
from .dto import Page, PageRequest, UserFilter


class IUserRepository:
    def get(self, user_id: int) -> User | None: ...
    def get_by(self, field: str, value: str) -> User | None: ...
    def exists_by(self, field: str, value: str) -> bool: ...
    def list(self, filters: UserFilter, page: PageRequest) -> Page[User]: ...
    def list_all(self, filters: UserFilter, sort_by: str = "name") -> list[User]: ...
    def put(self, user: User) -> User: ...
    def count(self, role: Role | None = None, active: bool | None = None) -> int: ...
