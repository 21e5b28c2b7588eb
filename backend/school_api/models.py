"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Each class maps to a table and uses relationships where appropriate.
Courses belong to one teacher and are linked to many students through
the `course_students` association table.
"""

from typing import Optional
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime, timezone
from typing import List


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """A registered API user.

    Fields:
    - `email`: unique login name
    - `password_hash`: hashed password string (never store plaintext)
    """
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, nullable=False, unique=True)
    password_hash: str
    created_at: datetime = Field(default_factory=utcnow)


class CourseStudentLink(SQLModel, table=True):
    """Association row enrolling a `Student` in a `Course`."""
    __tablename__ = "course_students"

    course_id: Optional[int] = Field(default=None, foreign_key="courses.id", primary_key=True)
    student_id: Optional[int] = Field(default=None, foreign_key="students.id", primary_key=True)


class Teacher(SQLModel, table=True):
    """A teacher who owns zero or more courses."""
    __tablename__ = "teachers"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = None
    department: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
    courses: List['Course'] = Relationship(back_populates='teacher')


class Course(SQLModel, table=True):
    """A course taught by one `Teacher` and attended by many students.

    `teacher_id` is not checked by the handlers; referential validity is
    left to the database.
    """
    __tablename__ = "courses"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: Optional[str] = None
    description: Optional[str] = None
    teacher_id: Optional[int] = Field(default=None, foreign_key='teachers.id')
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
    teacher: Optional[Teacher] = Relationship(back_populates='courses')
    students: List['Student'] = Relationship(back_populates='courses', link_model=CourseStudentLink)


class Student(SQLModel, table=True):
    """A student enrolled in zero or more courses."""
    __tablename__ = "students"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = None
    email: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)
    courses: List[Course] = Relationship(back_populates='students', link_model=CourseStudentLink)
