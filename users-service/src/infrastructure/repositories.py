from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .models import UserORM
from ..application.dto import Page, PageRequest, UserFilter
from ..application.interfaces import IUserRepository
from ..domain.entities import Role, User
from ..domain.errors import ConflictError, DuplicateEmail, DuplicateEmployeeCode, DuplicateEnrollmentCode

LOOKUP_FIELDS = {
    "email": UserORM.email,
    "enrollment_code": UserORM.enrollment_code,
    "employee_code": UserORM.employee_code,
}

# уникальные колонки и ошибка при нарушении их ограничения
UNIQUE_CONFLICTS: tuple[tuple[str, type[ConflictError]], ...] = (
    ("email", DuplicateEmail),
    ("enrollment_code", DuplicateEnrollmentCode),
    ("employee_code", DuplicateEmployeeCode),
)

STORED_FIELDS = (
    "role", "name", "first_surname", "second_surname", "email", "phone",
    "enrollment_code", "program_id", "division_id", "employee_code",
    "active", "created_at", "updated_at",
)


def to_domain(u: UserORM) -> User:
    return User(
        id=u.id,
        role=Role(u.role),
        name=u.name,
        first_surname=u.first_surname,
        second_surname=u.second_surname,
        email=u.email,
        phone=u.phone,
        enrollment_code=u.enrollment_code,
        program_id=u.program_id,
        division_id=u.division_id,
        employee_code=u.employee_code,
        active=u.active,
        created_at=u.created_at,
        updated_at=u.updated_at,
    )


def _lookup(field: str):
    try:
        return LOOKUP_FIELDS[field]
    except KeyError:
        raise ValueError(f"Unsupported lookup field: {field}") from None


def _contains(column, text: str):
    escaped = text.replace("/", "//").replace("%", "/%").replace("_", "/_")
    return column.ilike(f"%{escaped}%", escape="/")


class UserRepository(IUserRepository):
    def __init__(self, db: Session): self.db = db

    def get(self, user_id: int) -> User | None:
        row = self.db.get(UserORM, user_id)
        return to_domain(row) if row else None

    def get_by(self, field: str, value: str) -> User | None:
        row = self.db.query(UserORM).filter(_lookup(field) == value).first()
        return to_domain(row) if row else None

    def exists_by(self, field: str, value: str) -> bool:
        return self.db.query(UserORM.id).filter(_lookup(field) == value).first() is not None

    def _filtered(self, filters: UserFilter):
        q = self.db.query(UserORM)
        if filters.role is not None:
            q = q.filter(UserORM.role == filters.role.value)
        if filters.active is not None:
            q = q.filter(UserORM.active == filters.active)
        if filters.name_contains:
            q = q.filter(_contains(UserORM.name, filters.name_contains))
        if filters.surname_contains:
            q = q.filter(_contains(UserORM.first_surname, filters.surname_contains))
        if filters.email_contains:
            q = q.filter(_contains(UserORM.email, filters.email_contains))
        if filters.program_id is not None:
            q = q.filter(UserORM.program_id == filters.program_id)
        if filters.division_id is not None:
            q = q.filter(UserORM.division_id == filters.division_id)
        return q

    def list(self, filters: UserFilter, page: PageRequest) -> Page[User]:
        q = self._filtered(filters)
        total = q.count()
        column = getattr(UserORM, page.sort_by)
        order = column.desc() if page.descending else column.asc()
        rows = q.order_by(order, UserORM.id).offset(page.offset).limit(page.size).all()
        return Page(items=[to_domain(r) for r in rows], page=page.page, size=page.size, total_items=total)

    def list_all(self, filters: UserFilter, sort_by: str = "name") -> list[User]:
        rows = self._filtered(filters).order_by(getattr(UserORM, sort_by), UserORM.id).all()
        return [to_domain(r) for r in rows]

    def put(self, user: User) -> User:
        row = self.db.get(UserORM, user.id) if user.id is not None else None
        if row is None:
            row = UserORM(id=user.id)
            self.db.add(row)
        for field in STORED_FIELDS:
            value = getattr(user, field)
            setattr(row, field, value.value if isinstance(value, Role) else value)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            conflict = self._conflict_for(user)
            if conflict is None:
                raise
            raise conflict from e
        self.db.refresh(row)
        return to_domain(row)

    def _conflict_for(self, user: User) -> ConflictError | None:
        for field, error in UNIQUE_CONFLICTS:
            value = getattr(user, field)
            if value is None:
                continue
            q = self.db.query(UserORM.id).filter(LOOKUP_FIELDS[field] == value)
            if user.id is not None:
                q = q.filter(UserORM.id != user.id)
            if q.first() is not None:
                return error(value)
        return None

    def count(self, role: Role | None = None, active: bool | None = None) -> int:
        return self._filtered(UserFilter(role=role, active=active)).count()
