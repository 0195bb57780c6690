from ...domain.entities import Role, User
from ...domain.errors import InvalidSortField
from ...domain.roles import roles_with_field
from ..dto import Page, PageRequest, UserDTO, UserFilter
from ..interfaces import IUserRepository
from ..validation import to_wire

SORTABLE_FIELDS = (
    "id", "role", "name", "first_surname", "second_surname", "email",
    "enrollment_code", "employee_code", "active", "created_at", "updated_at",
)


def check_sort_field(field: str) -> str:
    if field not in SORTABLE_FIELDS:
        raise InvalidSortField(field)
    return field


class UserQueries:
    """Запросы только на чтение, результат сразу в DTO."""

    def __init__(self, repo: IUserRepository):
        self.repo = repo

    def _wire(self, user: User | None) -> UserDTO | None:
        return to_wire(user) if user is not None else None

    def get_by_id(self, user_id: int) -> UserDTO | None:
        return self._wire(self.repo.get(user_id))

    def get_by_email(self, email: str) -> UserDTO | None:
        return self._wire(self.repo.get_by("email", email))

    def get_by_enrollment_code(self, enrollment_code: str) -> UserDTO | None:
        user = self.repo.get_by("enrollment_code", enrollment_code)
        if user is None or user.role not in roles_with_field("enrollment_code"):
            return None
        return to_wire(user)

    def get_by_employee_code(self, employee_code: str) -> UserDTO | None:
        user = self.repo.get_by("employee_code", employee_code)
        if user is None or user.role not in roles_with_field("employee_code"):
            return None
        return to_wire(user)

    def list_users(self, filters: UserFilter, page: PageRequest) -> Page[UserDTO]:
        check_sort_field(page.sort_by)
        return self.repo.list(filters, page).map(to_wire)

    def list_active_by_role(self, role: Role, page: PageRequest | None = None, **extra) -> Page[UserDTO] | list[UserDTO]:
        """Активные пользователи роли: страница, если передан ``page``, иначе весь список."""
        filters = UserFilter(role=role, active=True, **extra)
        if page is not None:
            return self.list_users(filters, page)
        return [to_wire(u) for u in self.repo.list_all(filters, sort_by="name")]

    def search_by_name(self, text: str, page: PageRequest) -> Page[UserDTO]:
        return self.list_users(UserFilter(name_contains=text), page)

    def search_by_surname(self, text: str, page: PageRequest) -> Page[UserDTO]:
        return self.list_users(UserFilter(surname_contains=text), page)

    def search_by_email(self, text: str, page: PageRequest) -> Page[UserDTO]:
        return self.list_users(UserFilter(email_contains=text), page)

    def count(self, role: Role | None = None, active: bool | None = None) -> int:
        return self.repo.count(role=role, active=active)

    def email_exists(self, email: str) -> bool:
        return self.repo.exists_by("email", email)

    def enrollment_code_exists(self, enrollment_code: str) -> bool:
        return self.repo.exists_by("enrollment_code", enrollment_code)

    def employee_code_exists(self, employee_code: str) -> bool:
        return self.repo.exists_by("employee_code", employee_code)
