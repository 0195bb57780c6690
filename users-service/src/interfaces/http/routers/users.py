from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request, status
from sqlalchemy.orm import Session

from ....application.dto import Page, PageRequest, UserDTO, UserFilter
from ....application.use_cases.query_users import UserQueries
from ....application.use_cases.register_user import RegisterUser
from ....application.use_cases.set_user_active import SetUserActive
from ....application.use_cases.update_user import UpdateUser
from ....config import settings
from ....domain.entities import Role
from ....domain.errors import ConflictError, MissingRequiredField, UserServiceError
from ....infrastructure.db import get_db
from ....infrastructure.metrics import user_operation_failures_total, users_created_total
from ....infrastructure.rate_limit import CREATE_LIMIT, limiter
from ....infrastructure.repositories import UserRepository
from ..schemas import MAX_ID, CountResp, ExistsResp, MessageResp, UserIn, UserOut, UserPageOut

router = APIRouter(prefix="/api/users", tags=["users"])


def _http_error(e: UserServiceError) -> HTTPException:
    user_operation_failures_total.labels(code=e.code).inc()
    code = status.HTTP_409_CONFLICT if isinstance(e, ConflictError) else status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail={"code": e.code, "message": str(e)})


def _not_found(message: str = "user not found") -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)


def _out(dto: UserDTO) -> UserOut:
    return UserOut.model_validate(dto)


def _page_out(page: Page[UserDTO]) -> UserPageOut:
    return UserPageOut(
        items=[_out(u) for u in page.items],
        page=page.page,
        size=page.size,
        total_items=page.total_items,
        total_pages=page.total_pages,
    )


def _page_params(default_sort: str):
    def params(
        page: int = Query(0, ge=0),
        size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
        sort_by: str = Query(default_sort),
        sort_dir: str = Query("asc", pattern="^(asc|desc|ASC|DESC)$"),
    ) -> PageRequest:
        return PageRequest(page=page, size=size, sort_by=sort_by, sort_dir=sort_dir)
    return params


by_id = _page_params("id")
by_name = _page_params("name")


def _parse_role(value: str | None) -> Role | None:
    if value is None:
        return None
    try:
        return Role.parse(value)
    except UserServiceError as e:
        raise _http_error(e)


def _create(role: Role | None, payload: UserIn, db: Session) -> UserOut:
    dto = UserDTO(**payload.model_dump())
    if role is not None:
        dto.role = role.value
    try:
        created = RegisterUser(UserRepository(db)).execute(dto)
    except UserServiceError as e:
        raise _http_error(e)
    users_created_total.labels(role=created.role).inc()
    return _out(created)


def _list(call, *args) -> UserPageOut:
    try:
        return _page_out(call(*args))
    except UserServiceError as e:
        raise _http_error(e)


@router.get("/health")
def health(): return {"status": "ok"}

# --- Listing, search and counters:

@router.get("", response_model=UserPageOut)
def list_users(
    pr: PageRequest = Depends(by_id),
    active: bool | None = None,
    role: str | None = None,
    db: Session = Depends(get_db),
):
    queries = UserQueries(UserRepository(db))
    return _list(queries.list_users, UserFilter(role=_parse_role(role), active=active), pr)

@router.get("/search/name", response_model=UserPageOut)
def search_by_name(q: str = Query(..., min_length=1), pr: PageRequest = Depends(by_id), db: Session = Depends(get_db)):
    queries = UserQueries(UserRepository(db))
    return _list(queries.search_by_name, q, pr)

@router.get("/search/surname", response_model=UserPageOut)
def search_by_surname(q: str = Query(..., min_length=1), pr: PageRequest = Depends(by_id), db: Session = Depends(get_db)):
    queries = UserQueries(UserRepository(db))
    return _list(queries.search_by_surname, q, pr)

@router.get("/search/email", response_model=UserPageOut)
def search_by_email(q: str = Query(..., min_length=1), pr: PageRequest = Depends(by_id), db: Session = Depends(get_db)):
    queries = UserQueries(UserRepository(db))
    return _list(queries.search_by_email, q, pr)

@router.get("/count", response_model=CountResp)
def count_users(role: str | None = None, active: bool | None = None, db: Session = Depends(get_db)):
    return CountResp(count=UserQueries(UserRepository(db)).count(role=_parse_role(role), active=active))

@router.get("/email/exists", response_model=ExistsResp)
def email_exists(email: str, db: Session = Depends(get_db)):
    return ExistsResp(exists=UserQueries(UserRepository(db)).email_exists(email))

@router.get("/enrollment/exists", response_model=ExistsResp)
def enrollment_code_exists(enrollment_code: str, db: Session = Depends(get_db)):
    return ExistsResp(exists=UserQueries(UserRepository(db)).enrollment_code_exists(enrollment_code))

@router.get("/employee/exists", response_model=ExistsResp)
def employee_code_exists(employee_code: str, db: Session = Depends(get_db)):
    return ExistsResp(exists=UserQueries(UserRepository(db)).employee_code_exists(employee_code))

# --- Generic create:

@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
@limiter.limit(CREATE_LIMIT)
def create_user(request: Request, payload: UserIn, db: Session = Depends(get_db)):
    if payload.role is None:
        raise _http_error(MissingRequiredField("role"))
    return _create(None, payload, db)

# --- Students:

@router.get("/students", response_model=UserPageOut)
def list_students(
    pr: PageRequest = Depends(by_name),
    program_id: int | None = Query(None, gt=0, le=MAX_ID),
    division_id: int | None = Query(None, gt=0, le=MAX_ID),
    db: Session = Depends(get_db),
):
    queries = UserQueries(UserRepository(db))
    try:
        page = queries.list_active_by_role(Role.STUDENT, pr, program_id=program_id, division_id=division_id)
    except UserServiceError as e:
        raise _http_error(e)
    return _page_out(page)

@router.get("/students/simple", response_model=list[UserOut])
def list_students_simple(db: Session = Depends(get_db)):
    return [_out(u) for u in UserQueries(UserRepository(db)).list_active_by_role(Role.STUDENT)]

@router.get("/students/enrollment/{enrollment_code}", response_model=UserOut)
def get_student_by_enrollment_code(enrollment_code: str, db: Session = Depends(get_db)):
    user = UserQueries(UserRepository(db)).get_by_enrollment_code(enrollment_code)
    if not user: raise _not_found("student not found")
    return _out(user)

@router.post("/students", response_model=UserOut, status_code=status.HTTP_201_CREATED)
@limiter.limit(CREATE_LIMIT)
def create_student(request: Request, payload: UserIn, db: Session = Depends(get_db)):
    return _create(Role.STUDENT, payload, db)

# --- Teachers and tutors:

@router.get("/teachers", response_model=UserPageOut)
def list_teachers(pr: PageRequest = Depends(by_name), db: Session = Depends(get_db)):
    queries = UserQueries(UserRepository(db))
    return _list(queries.list_active_by_role, Role.TEACHER, pr)

@router.get("/teachers/simple", response_model=list[UserOut])
def list_teachers_simple(db: Session = Depends(get_db)):
    return [_out(u) for u in UserQueries(UserRepository(db)).list_active_by_role(Role.TEACHER)]

@router.post("/teachers", response_model=UserOut, status_code=status.HTTP_201_CREATED)
@limiter.limit(CREATE_LIMIT)
def create_teacher(request: Request, payload: UserIn, db: Session = Depends(get_db)):
    return _create(Role.TEACHER, payload, db)

@router.get("/tutors", response_model=UserPageOut)
def list_tutors(pr: PageRequest = Depends(by_name), db: Session = Depends(get_db)):
    queries = UserQueries(UserRepository(db))
    return _list(queries.list_active_by_role, Role.TUTOR, pr)

@router.get("/tutors/simple", response_model=list[UserOut])
def list_tutors_simple(db: Session = Depends(get_db)):
    return [_out(u) for u in UserQueries(UserRepository(db)).list_active_by_role(Role.TUTOR)]

@router.post("/tutors", response_model=UserOut, status_code=status.HTTP_201_CREATED)
@limiter.limit(CREATE_LIMIT)
def create_tutor(request: Request, payload: UserIn, db: Session = Depends(get_db)):
    return _create(Role.TUTOR, payload, db)

@router.get("/staff/employee/{employee_code}", response_model=UserOut)
def get_staff_by_employee_code(employee_code: str, db: Session = Depends(get_db)):
    user = UserQueries(UserRepository(db)).get_by_employee_code(employee_code)
    if not user: raise _not_found("teacher or tutor not found")
    return _out(user)

# --- Administrators:

@router.get("/administrators", response_model=list[UserOut])
def list_administrators(db: Session = Depends(get_db)):
    return [_out(u) for u in UserQueries(UserRepository(db)).list_active_by_role(Role.ADMINISTRATOR)]

@router.post("/administrators", response_model=UserOut, status_code=status.HTTP_201_CREATED)
@limiter.limit(CREATE_LIMIT)
def create_administrator(request: Request, payload: UserIn, db: Session = Depends(get_db)):
    return _create(Role.ADMINISTRATOR, payload, db)

# --- Single user by id:

@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int = Path(gt=0, le=MAX_ID), db: Session = Depends(get_db)):
    user = UserQueries(UserRepository(db)).get_by_id(user_id)
    if not user: raise _not_found()
    return _out(user)

@router.put("/{user_id}", response_model=UserOut)
def update_user(payload: UserIn, user_id: int = Path(gt=0, le=MAX_ID), db: Session = Depends(get_db)):
    try:
        user = UpdateUser(UserRepository(db)).execute(user_id, UserDTO(**payload.model_dump()))
    except UserServiceError as e:
        raise _http_error(e)
    if not user: raise _not_found()
    return _out(user)

@router.delete("/{user_id}", response_model=MessageResp)
def deactivate_user(user_id: int = Path(gt=0, le=MAX_ID), db: Session = Depends(get_db)):
    user = SetUserActive(UserRepository(db)).deactivate(user_id)
    if not user: raise _not_found()
    return MessageResp(message="user deactivated", id=user_id)

@router.patch("/{user_id}/reactivate", response_model=UserOut)
def reactivate_user(user_id: int = Path(gt=0, le=MAX_ID), db: Session = Depends(get_db)):
    user = SetUserActive(UserRepository(db)).reactivate(user_id)
    if not user: raise _not_found()
    return _out(user)
