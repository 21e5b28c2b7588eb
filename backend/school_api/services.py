"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories
and auxiliary logic. Services are intentionally thin: they execute
domain logic, persist aggregates via repositories and raise
`ServiceError` subclasses that controllers translate to HTTP statuses.
"""

from datetime import datetime, timedelta, timezone
from passlib.context import CryptContext
import jwt
import logging
from typing import Any, Dict, Iterable, List, Tuple
from sqlmodel import Session
from . import models, repositories
from .config import settings
from .utils.listing import ListQuery

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
JWT_EXPIRE_HOURS = 1

logger = logging.getLogger("school_api.services")


class ServiceError(Exception):
    """Base class for failures a controller maps to a client error."""


class ConflictError(ServiceError):
    pass


class NotFoundError(ServiceError):
    pass


class InvalidCredentialsError(ServiceError):
    pass


def issue_token(user: models.User) -> str:
    """Sign a token bound to the user's id and email, valid for one hour."""
    now = datetime.now(timezone.utc)
    payload = {
        "id": user.id,
        "email": user.email,
        "iat": now,
        "exp": now + timedelta(hours=JWT_EXPIRE_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


class AuthService:
    """Authentication related operations (register + login)."""
    def __init__(self, session: Session):
        self.session = session
        self.user_repo = repositories.UserRepository(session)

    def register(self, name: str, email: str, password: str) -> models.User:
        """Create a new user with a hashed password.

        Raises `ConflictError` when the email is already registered.
        Returns the persisted `User` instance.
        """
        if self.user_repo.get_by_email(email):
            raise ConflictError("Email already exists")
        hashed = PWD_CTX.hash(password)
        u = models.User(name=name, email=email, password_hash=hashed)
        user = self.user_repo.create(u)
        logger.info("user registered id=%s", user.id)
        return user

    def login(self, email: str, password: str) -> Tuple[str, models.User]:
        """Verify credentials and return a signed JWT token with its user.

        Raises `NotFoundError` for an unknown email and
        `InvalidCredentialsError` when the password does not verify.
        """
        user = self.user_repo.get_by_email(email)
        if not user:
            raise NotFoundError("User not found")
        if not PWD_CTX.verify(password, user.password_hash):
            logger.info("login rejected for user id=%s", user.id)
            raise InvalidCredentialsError("Invalid credentials")
        return issue_token(user), user

    def list_users(self) -> List[models.User]:
        return self.user_repo.list_all()


# column name -> key used on the wire
WIRE_NAMES = {'teacher_id': 'TeacherId', 'created_at': 'createdAt', 'updated_at': 'updatedAt'}


def _columns(obj) -> Dict[str, Any]:
    return {WIRE_NAMES.get(key, key): value for key, value in obj.model_dump().items()}


def serialize(obj, relations: Iterable[str] = ()) -> Dict[str, Any]:
    """Render a row as a JSON-ready dict, adding each loaded relation by name."""
    data = _columns(obj)
    for rel in sorted(relations):
        value = getattr(obj, rel)
        if isinstance(value, list):
            data[rel] = [_columns(item) for item in value]
        else:
            data[rel] = _columns(value) if value is not None else None
    return data


class ResourceService:
    """CRUD plus paged listing for one resource repository."""
    def __init__(self, repo: repositories.ResourceRepository):
        self.repo = repo

    def list_query(self, page=None, limit=None, sort=None, populate=None) -> ListQuery:
        return ListQuery.from_params(self.repo.loadable, page=page, limit=limit, sort=sort, populate=populate)

    def relations(self, populate) -> frozenset:
        return self.list_query(populate=populate).relations

    def list(self, query: ListQuery) -> dict:
        """Return the `{meta, data}` envelope for one page."""
        total = self.repo.count()
        rows = self.repo.list_page(query)
        return query.envelope(total, (serialize(r, query.relations) for r in rows))

    def _require(self, obj_id: int, relations: Iterable[str] = ()):
        obj = self.repo.get(obj_id, relations)
        if obj is None:
            raise NotFoundError("Not found")
        return obj

    def get(self, obj_id: int, populate=None) -> dict:
        relations = self.relations(populate)
        return serialize(self._require(obj_id, relations), relations)

    def create(self, fields: Dict[str, Any]) -> dict:
        return serialize(self.repo.create(fields))

    def update(self, obj_id: int, fields: Dict[str, Any]) -> dict:
        obj = self._require(obj_id)
        return serialize(self.repo.update(obj, fields))

    def delete(self, obj_id: int) -> None:
        self.repo.delete(self._require(obj_id))


class CourseService(ResourceService):
    """Course CRUD plus student enrolment."""
    def __init__(self, session: Session):
        super().__init__(repositories.CourseRepository(session))
        self.students = repositories.StudentRepository(session)

    def _pair(self, course_id: int, student_id: int):
        course = self._require(course_id, {'students'})
        student = self.students.get(student_id)
        if student is None:
            raise NotFoundError("Student not found")
        return course, student

    def enroll(self, course_id: int, student_id: int) -> dict:
        course, student = self._pair(course_id, student_id)
        return serialize(self.repo.enroll(course, student), {'students'})

    def unenroll(self, course_id: int, student_id: int) -> dict:
        course, student = self._pair(course_id, student_id)
        return serialize(self.repo.unenroll(course, student), {'students'})


class TeacherService(ResourceService):
    def __init__(self, session: Session):
        super().__init__(repositories.TeacherRepository(session))


class StudentService(ResourceService):
    def __init__(self, session: Session):
        super().__init__(repositories.StudentRepository(session))
