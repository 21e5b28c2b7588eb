"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the school management
backend. Controllers are intentionally thin: they accept requests,
delegate to services, and return JSON responses.

Endpoints implemented:
- POST /auth/register
- POST /auth/login
- GET /auth/users (bearer token)
- POST, GET /courses ; GET, PUT, DELETE /courses/{id}
- POST, DELETE /courses/{id}/students/{student_id}
- POST, GET /teachers ; GET, PUT, DELETE /teachers/{id}
- POST, GET /students ; GET, PUT, DELETE /students/{id}
"""

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import List, Optional
import json
import logging
import time
import uuid
from .database import create_db_and_tables, get_session
from . import services
from .auth import get_current_user
from .schemas import (
    CourseCreate,
    CourseUpdate,
    FieldIssue,
    ListEnvelope,
    LoginIn,
    MessageOut,
    RegisterIn,
    RegisterOut,
    StudentCreate,
    StudentUpdate,
    TeacherCreate,
    TeacherUpdate,
    TokenOut,
    UserListItem,
    ValidationErrorOut,
)
from .config import settings

TAGS = [
    {"name": "Auth", "description": "Login and registration operations"},
    {"name": "Courses", "description": "Course management"},
    {"name": "Teachers", "description": "Teacher management"},
    {"name": "Students", "description": "Student management"},
]

app = FastAPI(title="School Management API", openapi_tags=TAGS)
logger = logging.getLogger("school_api.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()

ERROR_STATUS = {
    services.ConflictError: 400,
    services.InvalidCredentialsError: 401,
    services.NotFoundError: 404,
}


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info(
        "request_done %s",
        json.dumps(
            {
                "request_id": req_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
            ensure_ascii=True,
        ),
    )
    return response


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    issues = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        issues.append(FieldIssue(field=".".join(loc) or "body", issue=err.get("msg", "invalid")))
    body = ValidationErrorOut(message="Validation failed", errors=issues)
    return JSONResponse(status_code=400, content=body.model_dump())


@app.exception_handler(services.ServiceError)
async def service_error_handler(request: Request, exc: services.ServiceError):
    return JSONResponse(status_code=ERROR_STATUS.get(type(exc), 400), content={"message": str(exc)})


@app.exception_handler(SQLAlchemyError)
async def persistence_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("persistence failure on %s %s", request.method, request.url.path)
    message = str(exc) if settings.EXPOSE_ERROR_DETAILS else "Internal server error"
    return JSONResponse(status_code=500, content={"error": message})


@app.get("/")
def root():
    return {"status": "School Management API running"}


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}


# ------------------------------------------------------
# Auth
# ------------------------------------------------------
@app.post('/auth/register', status_code=201, response_model=RegisterOut, tags=['Auth'])
def register(payload: RegisterIn, db: Session = Depends(get_session)):
    """Register a new user.

    Responds 400 when the email is already taken. The stored password
    is a salted hash; it is never echoed back.
    """
    user = services.AuthService(db).register(payload.name, payload.email, payload.password)
    return {'message': 'User registered successfully', 'user': {'id': user.id, 'email': user.email}}


@app.post('/auth/login', response_model=TokenOut, tags=['Auth'])
def login(payload: LoginIn, db: Session = Depends(get_session)):
    """Authenticate a user and return a JWT valid for one hour.

    The token payload contains `id` and `email` and is signed using the
    configured JWT secret.
    """
    token, user = services.AuthService(db).login(payload.email, payload.password)
    return {'token': token, 'user': {'id': user.id, 'email': user.email}}


@app.get('/auth/users', response_model=List[UserListItem], tags=['Auth'])
def list_users(db: Session = Depends(get_session), identity: dict = Depends(get_current_user)):
    """List registered users (protected). Only id, name and email are exposed."""
    users = services.AuthService(db).list_users()
    return [{'id': u.id, 'name': u.name, 'email': u.email} for u in users]


# ------------------------------------------------------
# Courses
# ------------------------------------------------------
@app.post('/courses', status_code=201, tags=['Courses'])
def create_course(payload: CourseCreate, db: Session = Depends(get_session)):
    return services.CourseService(db).create(payload.model_dump())


@app.get('/courses', response_model=ListEnvelope, tags=['Courses'])
def list_courses(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    sort: Optional[str] = None,
    populate: Optional[str] = None,
    db: Session = Depends(get_session),
):
    """List courses with pagination, sorting by creation date and
    optional `populate=teacher,student`."""
    svc = services.CourseService(db)
    return svc.list(svc.list_query(page, limit, sort, populate))


@app.get('/courses/{course_id}', tags=['Courses'])
def get_course(course_id: int, populate: Optional[str] = None, db: Session = Depends(get_session)):
    return services.CourseService(db).get(course_id, populate)


@app.put('/courses/{course_id}', tags=['Courses'])
def update_course(course_id: int, payload: CourseUpdate, db: Session = Depends(get_session)):
    return services.CourseService(db).update(course_id, payload.model_dump(exclude_unset=True))


@app.delete('/courses/{course_id}', response_model=MessageOut, tags=['Courses'])
def delete_course(course_id: int, db: Session = Depends(get_session)):
    services.CourseService(db).delete(course_id)
    return {'message': 'Deleted'}


@app.post('/courses/{course_id}/students/{student_id}', tags=['Courses'])
def enroll_student(course_id: int, student_id: int, db: Session = Depends(get_session)):
    """Enroll a student in a course. Enrolling twice is harmless."""
    return services.CourseService(db).enroll(course_id, student_id)


@app.delete('/courses/{course_id}/students/{student_id}', tags=['Courses'])
def unenroll_student(course_id: int, student_id: int, db: Session = Depends(get_session)):
    return services.CourseService(db).unenroll(course_id, student_id)


# ------------------------------------------------------
# Teachers
# ------------------------------------------------------
@app.post('/teachers', status_code=201, tags=['Teachers'])
def create_teacher(payload: TeacherCreate, db: Session = Depends(get_session)):
    return services.TeacherService(db).create(payload.model_dump())


@app.get('/teachers', response_model=ListEnvelope, tags=['Teachers'])
def list_teachers(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    sort: Optional[str] = None,
    populate: Optional[str] = None,
    db: Session = Depends(get_session),
):
    """List teachers; `populate=courses` includes the courses they own."""
    svc = services.TeacherService(db)
    return svc.list(svc.list_query(page, limit, sort, populate))


@app.get('/teachers/{teacher_id}', tags=['Teachers'])
def get_teacher(teacher_id: int, populate: Optional[str] = None, db: Session = Depends(get_session)):
    return services.TeacherService(db).get(teacher_id, populate)


@app.put('/teachers/{teacher_id}', tags=['Teachers'])
def update_teacher(teacher_id: int, payload: TeacherUpdate, db: Session = Depends(get_session)):
    return services.TeacherService(db).update(teacher_id, payload.model_dump(exclude_unset=True))


@app.delete('/teachers/{teacher_id}', response_model=MessageOut, tags=['Teachers'])
def delete_teacher(teacher_id: int, db: Session = Depends(get_session)):
    services.TeacherService(db).delete(teacher_id)
    return {'message': 'Deleted'}


# ------------------------------------------------------
# Students
# ------------------------------------------------------
@app.post('/students', status_code=201, tags=['Students'])
def create_student(payload: StudentCreate, db: Session = Depends(get_session)):
    return services.StudentService(db).create(payload.model_dump())


@app.get('/students', response_model=ListEnvelope, tags=['Students'])
def list_students(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    sort: Optional[str] = None,
    populate: Optional[str] = None,
    db: Session = Depends(get_session),
):
    """List students; `populate=courses` includes their enrolled courses."""
    svc = services.StudentService(db)
    return svc.list(svc.list_query(page, limit, sort, populate))


@app.get('/students/{student_id}', tags=['Students'])
def get_student(student_id: int, populate: Optional[str] = None, db: Session = Depends(get_session)):
    return services.StudentService(db).get(student_id, populate)


@app.put('/students/{student_id}', tags=['Students'])
def update_student(student_id: int, payload: StudentUpdate, db: Session = Depends(get_session)):
    return services.StudentService(db).update(student_id, payload.model_dump(exclude_unset=True))


@app.delete('/students/{student_id}', response_model=MessageOut, tags=['Students'])
def delete_student(student_id: int, db: Session = Depends(get_session)):
    services.StudentService(db).delete(student_id)
    return {'message': 'Deleted'}
