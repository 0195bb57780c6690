"""Проверка данных пользователя с учётом роли и преобразование entity <-> DTO.

Функции без состояния: единственный побочный эффект это чтение из
репозитория при проверке уникальности. Отказы выбрасываются как
подклассы UserServiceError.
"""
from dataclasses import replace
from datetime import datetime, timezone

from ..domain.entities import Role, User
from ..domain.errors import DuplicateEmail, MissingRequiredField, RoleChangeNotAllowed
from ..domain.roles import ROLE_SPECIFIC_FIELDS, rule_for, unique_identifier
from .dto import UserDTO
from .interfaces import IUserRepository

COMMON_REQUIRED = ("name", "first_surname", "email")
COMMON_FIELDS = ("name", "first_surname", "second_surname", "email", "phone")
OPTIONAL_COMMON = ("second_surname", "phone")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _common_values(candidate: User) -> dict:
    return {
        field: None if field in OPTIONAL_COMMON and _blank(getattr(candidate, field)) else getattr(candidate, field)
        for field in COMMON_FIELDS
    }


def to_entity(dto: UserDTO) -> User:
    return User(
        id=None,
        role=Role.parse(dto.role),
        name=dto.name,
        first_surname=dto.first_surname,
        second_surname=dto.second_surname,
        email=dto.email,
        phone=dto.phone,
        enrollment_code=dto.enrollment_code,
        program_id=dto.program_id,
        division_id=dto.division_id,
        employee_code=dto.employee_code,
    )


def to_wire(user: User) -> UserDTO:
    return UserDTO(
        id=user.id,
        role=user.role.value,
        name=user.name,
        first_surname=user.first_surname,
        second_surname=user.second_surname,
        full_name=user.full_name,
        email=user.email,
        phone=user.phone,
        enrollment_code=user.enrollment_code,
        program_id=user.program_id,
        division_id=user.division_id,
        employee_code=user.employee_code,
        unique_identifier=unique_identifier(user),
        active=user.active,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def _check_common(candidate: User) -> None:
    for field in COMMON_REQUIRED:
        if _blank(getattr(candidate, field)):
            raise MissingRequiredField(field)


def _check_role_rule(candidate: User, repo: IUserRepository, existing: User | None) -> None:
    rule = rule_for(candidate.role)
    for field in rule.required:
        if _blank(getattr(candidate, field)):
            raise MissingRequiredField(field)

    if rule.unique_field is None:
        return
    code = getattr(candidate, rule.unique_field)
    if _blank(code):
        return
    current = getattr(existing, rule.unique_field) if existing is not None else None
    if code != current and repo.exists_by(rule.unique_field, code):
        raise rule.conflict(code)


def _role_fields(role: Role, source: User) -> dict:
    """Ролевые поля для ``role``; поля чужих ролей обнуляются."""
    kept = rule_for(role).fields
    values = {}
    for field in ROLE_SPECIFIC_FIELDS:
        value = getattr(source, field) if field in kept else None
        if isinstance(value, str) and not value.strip():
            value = None
        values[field] = value
    return values


def validate_and_prepare_create(
    dto: UserDTO,
    repo: IUserRepository,
    existing: User | None = None,
    now: datetime | None = None,
) -> User:
    candidate = to_entity(dto)
    _check_common(candidate)

    if repo.exists_by("email", candidate.email):
        raise DuplicateEmail(candidate.email)

    _check_role_rule(candidate, repo, existing)

    now = now or _now()
    return replace(
        candidate,
        active=True,
        created_at=now,
        updated_at=now,
        **_common_values(candidate),
        **_role_fields(candidate.role, candidate),
    )


def validate_and_prepare_update(
    dto: UserDTO,
    existing: User,
    repo: IUserRepository,
    now: datetime | None = None,
) -> User:
    if dto.role is None:
        dto = replace(dto, role=existing.role.value)
    candidate = to_entity(dto)
    if candidate.role != existing.role:
        raise RoleChangeNotAllowed(existing.role.value, candidate.role.value)
    _check_common(candidate)

    if candidate.email != existing.email and repo.exists_by("email", candidate.email):
        raise DuplicateEmail(candidate.email)

    _check_role_rule(candidate, repo, existing)

    role_values = {
        field: value
        for field, value in _role_fields(existing.role, candidate).items()
        if field in rule_for(existing.role).fields
    }
    return replace(
        existing,
        **_common_values(candidate),
        **role_values,
        updated_at=now or _now(),
    )
