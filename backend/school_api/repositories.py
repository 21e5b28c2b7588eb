"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (users,
courses, teachers, students). Repositories return SQLModel objects and
perform commits/refreshes where appropriate.
"""

from typing import Any, Dict, Iterable, List, Optional
from sqlmodel import Session, select
from sqlalchemy import asc, desc, func
from sqlalchemy.orm import selectinload
from . import models
from .utils.listing import MAX_DB_INT, ListQuery


class UserRepository:
    """CRUD operations for `User` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance."""
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_by_email(self, email: str) -> Optional[models.User]:
        """Return a `User` by email or `None` if not found."""
        stmt = select(models.User).where(models.User.email == email)
        return self.session.exec(stmt).first()

    def list_all(self) -> List[models.User]:
        stmt = select(models.User).order_by(models.User.id)
        return self.session.exec(stmt).all()


class ResourceRepository:
    """Shared CRUD and paging for the school resources.

    Subclasses set `model` and `loadable`, the capability table mapping
    each `populate` token to the relationship attribute it eager-loads.
    """
    model = None
    loadable: Dict[str, str] = {}

    def __init__(self, session: Session):
        self.session = session

    def _eager(self, stmt, relations: Iterable[str]):
        for rel in sorted(relations):
            stmt = stmt.options(selectinload(getattr(self.model, rel)))
        return stmt

    def create(self, fields: Dict[str, Any]):
        """Build a row from validated fields, persist it and return it."""
        obj = self.model(**fields)
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def get(self, obj_id: int, relations: Iterable[str] = ()):
        """Fetch one row by primary key with the requested relations loaded.

        Ids outside the INTEGER column range cannot exist and return `None`.
        """
        if not -MAX_DB_INT <= obj_id <= MAX_DB_INT:
            return None
        stmt = self._eager(select(self.model).where(self.model.id == obj_id), relations)
        return self.session.exec(stmt).first()

    def count(self) -> int:
        return self.session.exec(select(func.count()).select_from(self.model)).one()

    def list_page(self, query: ListQuery) -> List[Any]:
        """Return one page ordered by creation time, id breaking ties."""
        if query.offset > MAX_DB_INT:
            return []
        direction = asc if query.ascending else desc
        stmt = (
            select(self.model)
            .order_by(direction(self.model.created_at), direction(self.model.id))
            .offset(query.offset)
            .limit(query.limit)
        )
        return self.session.exec(self._eager(stmt, query.relations)).all()

    def update(self, obj, fields: Dict[str, Any]):
        """Merge `fields` into `obj`; attributes not present are left alone."""
        for key, value in fields.items():
            setattr(obj, key, value)
        obj.updated_at = models.utcnow()
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def delete(self, obj) -> None:
        self.session.delete(obj)
        self.session.commit()


class CourseRepository(ResourceRepository):
    model = models.Course
    loadable = {'teacher': 'teacher', 'student': 'students'}

    def enroll(self, course: models.Course, student: models.Student) -> models.Course:
        """Link `student` to `course`; linking twice is a no-op."""
        if student not in course.students:
            course.students.append(student)
            self.session.add(course)
            self.session.commit()
        self.session.refresh(course)
        return course

    def unenroll(self, course: models.Course, student: models.Student) -> models.Course:
        if student in course.students:
            course.students.remove(student)
            self.session.add(course)
            self.session.commit()
        self.session.refresh(course)
        return course


class TeacherRepository(ResourceRepository):
    model = models.Teacher
    loadable = {'courses': 'courses'}


class StudentRepository(ResourceRepository):
    model = models.Student
    loadable = {'courses': 'courses'}
