"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and provide validation for
controller handlers and tests. Request bodies are parsed here before
anything reaches a repository.
"""

from pydantic import AliasChoices, BaseModel, EmailStr, Field
from typing import Any, Dict, List, Optional
from .utils.listing import MAX_DB_INT

TEACHER_ID_ALIAS = AliasChoices('TeacherId', 'teacher_id')
# foreign keys must fit the INTEGER column
ID_BOUNDS = {'ge': -MAX_DB_INT, 'le': MAX_DB_INT}


class RegisterIn(BaseModel):
    """Payload for the registration endpoint."""
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)


class LoginIn(BaseModel):
    """Payload for the login endpoint.

    Any string is looked up as-is; an unknown email answers 404.
    """
    email: str
    password: str


class UserOut(BaseModel):
    """Public identity returned by register and login."""
    id: int
    email: str


class UserListItem(BaseModel):
    id: int
    name: str
    email: str


class RegisterOut(BaseModel):
    message: str
    user: UserOut


class TokenOut(BaseModel):
    """Authentication response containing a signed token."""
    token: str
    user: UserOut


class MessageOut(BaseModel):
    message: str


class CourseCreate(BaseModel):
    """Request body for creating a course.

    The owning teacher may be sent as `TeacherId` or `teacher_id`.
    """
    title: str
    description: str
    teacher_id: int = Field(validation_alias=TEACHER_ID_ALIAS, **ID_BOUNDS)


class CourseUpdate(BaseModel):
    """Partial course update; omitted fields keep their stored value."""
    title: Optional[str] = None
    description: Optional[str] = None
    teacher_id: Optional[int] = Field(default=None, validation_alias=TEACHER_ID_ALIAS, **ID_BOUNDS)


class TeacherCreate(BaseModel):
    name: str
    department: str


class TeacherUpdate(BaseModel):
    name: Optional[str] = None
    department: Optional[str] = None


class StudentCreate(BaseModel):
    name: str
    email: EmailStr


class StudentUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None


class ListMeta(BaseModel):
    """Pagination metadata of a list envelope."""
    totalItems: int
    page: int
    totalPages: int
    limit: int
    sort: str


class ListEnvelope(BaseModel):
    """`{meta, data}` wrapper returned by list endpoints."""
    meta: ListMeta
    data: List[Dict[str, Any]]


class FieldIssue(BaseModel):
    """A single problem found while validating a request."""
    field: str
    issue: str


class ValidationErrorOut(BaseModel):
    message: str
    errors: List[FieldIssue]
