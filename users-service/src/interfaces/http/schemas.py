from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

# id хранятся как 64-битные целые
MAX_ID = 2**63 - 1

class UserIn(BaseModel):
    role: str | None = None
    name: str = Field(min_length=2, max_length=100)
    first_surname: str = Field(min_length=2, max_length=100)
    second_surname: str | None = Field(None, max_length=100)
    email: EmailStr
    phone: str | None = Field(None, pattern=r"^[0-9]{10}$")
    # студент
    enrollment_code: str | None = Field(None, min_length=5, max_length=20)
    program_id: int | None = Field(None, gt=0, le=MAX_ID)
    division_id: int | None = Field(None, gt=0, le=MAX_ID)
    # преподаватель / тьютор
    employee_code: str | None = Field(None, max_length=50)

class UserOut(BaseModel):
    id: int
    role: str
    name: str
    first_surname: str
    second_surname: str | None = None
    full_name: str
    email: str
    phone: str | None = None
    enrollment_code: str | None = None
    program_id: int | None = None
    division_id: int | None = None
    employee_code: str | None = None
    unique_identifier: str | None = None
    active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    class Config: from_attributes = True

class UserPageOut(BaseModel):
    items: list[UserOut]
    page: int
    size: int
    total_items: int
    total_pages: int

class MessageResp(BaseModel):
    message: str
    id: int

class ExistsResp(BaseModel):
    exists: bool

class CountResp(BaseModel):
    count: int
