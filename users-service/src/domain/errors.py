"""Ошибки операций над пользователями.

У каждой ошибки есть стабильный ``code``: по нему HTTP-слой и метрики
различают ошибки, не разбирая текст сообщения.
"""


class UserServiceError(Exception):
    """Базовый класс отказов."""

    code = "USER_ERROR"


class ValidationError(UserServiceError):
    code = "VALIDATION_ERROR"


class MissingRequiredField(ValidationError):
    code = "MISSING_REQUIRED_FIELD"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Field '{field}' is required")


class InvalidRole(ValidationError):
    code = "INVALID_ROLE"

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid role: {value!r}")


class RoleChangeNotAllowed(ValidationError):
    code = "ROLE_CHANGE_NOT_ALLOWED"

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Role cannot change from '{current}' to '{requested}'")


class InvalidSortField(ValidationError):
    code = "INVALID_SORT_FIELD"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Cannot sort by '{field}'")


class ConflictError(UserServiceError):
    code = "CONFLICT"


class DuplicateEmail(ConflictError):
    code = "DUPLICATE_EMAIL"

    def __init__(self, email: str):
        self.value = email
        super().__init__(f"Email already registered: {email}")


class DuplicateEnrollmentCode(ConflictError):
    code = "DUPLICATE_ENROLLMENT_CODE"

    def __init__(self, enrollment_code: str):
        self.value = enrollment_code
        super().__init__(f"A student with enrollment code {enrollment_code} already exists")


class DuplicateEmployeeCode(ConflictError):
    code = "DUPLICATE_EMPLOYEE_CODE"

    def __init__(self, employee_code: str):
        self.value = employee_code
        super().__init__(f"A user with employee code {employee_code} already exists")
