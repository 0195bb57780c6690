"""Таблица правил по ролям.

Всё, что зависит от роли (обязательные поля, уникальный код, какие ролевые
поля хранит запись, идентификатор пользователя), берётся из ``ROLE_RULES``.
Новая роль = новая строка в таблице.
"""
from dataclasses import dataclass

from .entities import Role, User
from .errors import ConflictError, DuplicateEmployeeCode, DuplicateEnrollmentCode

ROLE_SPECIFIC_FIELDS = ("enrollment_code", "program_id", "division_id", "employee_code")


@dataclass(frozen=True)
class RoleRule:
    required: tuple[str, ...] = ()
    unique_field: str | None = None
    conflict: type[ConflictError] | None = None
    fields: tuple[str, ...] = ()
    identity: tuple[str, ...] = ("email",)


_STAFF = RoleRule(
    unique_field="employee_code",
    conflict=DuplicateEmployeeCode,
    fields=("employee_code",),
    identity=("employee_code", "email"),
)

ROLE_RULES: dict[Role, RoleRule] = {
    Role.STUDENT: RoleRule(
        required=("enrollment_code", "program_id", "division_id"),
        unique_field="enrollment_code",
        conflict=DuplicateEnrollmentCode,
        fields=("enrollment_code", "program_id", "division_id"),
        identity=("enrollment_code",),
    ),
    Role.TEACHER: _STAFF,
    Role.TUTOR: _STAFF,
    Role.ADMINISTRATOR: RoleRule(),
}


def rule_for(role: Role) -> RoleRule:
    return ROLE_RULES[role]


def roles_with_field(field: str) -> tuple[Role, ...]:
    return tuple(role for role, rule in ROLE_RULES.items() if field in rule.fields)


def unique_identifier(user: User) -> str | None:
    for field in rule_for(user.role).identity:
        value = getattr(user, field)
        if value:
            return str(value)
    if user.id is not None:
        return str(user.id)
    return user.email
