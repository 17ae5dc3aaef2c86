import logging
from datetime import date
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError

from backend.auth.dependencies import get_current_user, require_admin
from backend.auth.jwt_handler import TokenClaims
from backend.core.errors import InvalidValue, UnsupportedField
from backend.database import SessionLocal, engine
from backend.repositories.student_repository import MAX_INTEGER, StudentRepository

router = APIRouter(tags=['students'], dependencies=[Depends(get_current_user)])

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3
MAX_TEXT_LENGTH = 100
MIN_AGE = 0
MAX_AGE = 130


class StudentRequest(BaseModel):
    name: str
    age: int
    email: str
    birth_date: date

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if len(normalized) < MIN_NAME_LENGTH:
            raise ValueError(f'Name must be at least {MIN_NAME_LENGTH} characters.')
        if len(normalized) > MAX_TEXT_LENGTH:
            raise ValueError(f'Name must be {MAX_TEXT_LENGTH} characters or fewer.')
        return normalized

    @field_validator('age')
    @classmethod
    def validate_age(cls, value: int) -> int:
        if value < MIN_AGE or value > MAX_AGE:
            raise ValueError(f'Age must be between {MIN_AGE} and {MAX_AGE}.')
        return value

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip()
        if '@' not in normalized:
            raise ValueError('Invalid email.')
        if len(normalized) > MAX_TEXT_LENGTH:
            raise ValueError(f'Email must be {MAX_TEXT_LENGTH} characters or fewer.')
        return normalized


class StudentResponse(BaseModel):
    id: int
    name: str
    age: int
    email: str
    birth_date: date

    class Config:
        from_attributes = True


@lru_cache
def get_student_repository() -> StudentRepository:
    return StudentRepository(SessionLocal, engine)


def database_unavailable() -> HTTPException:
    logger.exception('Student repository unavailable.')
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail='Database unavailable. Verify DATABASE_URL.',
    )


def not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Student not found.')


@router.get('/', response_model=list[StudentResponse])
def list_students(repo: StudentRepository = Depends(get_student_repository)):
    try:
        return repo.list()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/search', response_model=list[StudentResponse])
def search_students(
    id: str | None = Query(default=None),
    name: str | None = Query(default=None),
    age: str | None = Query(default=None),
    email: str | None = Query(default=None),
    birth_date: str | None = Query(default=None),
    repo: StudentRepository = Depends(get_student_repository),
):
    filters = {'id': id, 'name': name, 'age': age, 'email': email, 'birth_date': birth_date}
    try:
        return repo.search_many(filters)
    except (UnsupportedField, InvalidValue) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/{student_id}', response_model=StudentResponse)
def get_student(
    student_id: int = Path(ge=1, le=MAX_INTEGER),
    repo: StudentRepository = Depends(get_student_repository),
):
    try:
        student = repo.get(student_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if student is None:
        raise not_found()
    return student


@router.post('/', response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
def create_student(data: StudentRequest, repo: StudentRepository = Depends(get_student_repository)):
    try:
        student_id = repo.insert(data.name, data.age, data.email, data.birth_date)
        return repo.get(student_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.put('/{student_id}', response_model=StudentResponse)
def update_student(
    data: StudentRequest,
    student_id: int = Path(ge=1, le=MAX_INTEGER),
    repo: StudentRepository = Depends(get_student_repository),
):
    try:
        affected = repo.update(student_id, data.name, data.age, data.email, data.birth_date)
        if affected == 0:
            raise not_found()
        return repo.get(student_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.delete('/{student_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_student(
    student_id: int = Path(ge=1, le=MAX_INTEGER),
    repo: StudentRepository = Depends(get_student_repository),
    current_user: TokenClaims = Depends(require_admin),
):
    try:
        affected = repo.delete(student_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if affected == 0:
        raise not_found()

    logger.info('Student id=%s deleted by user id=%s', student_id, current_user.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
