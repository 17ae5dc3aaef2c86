import os

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('JWT_ISSUER', 'student-registry-tests')
os.environ.setdefault('JWT_AUDIENCE', 'student-registry-clients')
os.environ.setdefault('JWT_SECRET_KEY', 'test-signing-secret-that-is-long-enough-for-hs256')
os.environ.setdefault('PASSWORD_HASH_ROUNDS', '1000')

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from backend.auth.credential_store import InMemoryCredentialStore, UserRecord  # noqa: E402
from backend.auth.jwt_handler import create_access_token  # noqa: E402
from backend.auth.roles import Role  # noqa: E402
from backend.database import Base  # noqa: E402
from backend.models.course import Course  # noqa: E402
from backend.models.enrollment import Enrollment  # noqa: E402
from backend.models.professor import Professor  # noqa: E402
from backend.models.student import Student  # noqa: E402
from backend.models.user import User  # noqa: E402
from backend.repositories.student_repository import StudentRepository  # noqa: E402

TABLES = [User.__table__, Student.__table__, Professor.__table__, Course.__table__, Enrollment.__table__]


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=TABLES)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine, tables=list(reversed(TABLES)))
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def student_repository(db_engine, session_factory) -> StudentRepository:
    repository = StudentRepository(session_factory, db_engine)
    repository.ensure_schema()
    return repository


@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


def _bearer(role: Role) -> dict[str, str]:
    user = UserRecord(id=42, name='Test User', email=f'{role.value}@example.com', password_hash='unused', role=role)
    token = create_access_token(user)
    return {'Authorization': f'Bearer {token.access_token}'}


@pytest.fixture
def user_headers() -> dict[str, str]:
    return _bearer(Role.USER)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return _bearer(Role.ADMIN)


@pytest.fixture
def client(student_repository, credential_store):
    from fastapi.testclient import TestClient

    from backend.main import app
    from backend.routes.auth_routes import get_credential_store
    from backend.routes.student_routes import get_student_repository

    app.dependency_overrides[get_student_repository] = lambda: student_repository
    app.dependency_overrides[get_credential_store] = lambda: credential_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
