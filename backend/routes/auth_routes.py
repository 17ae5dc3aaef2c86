import logging
from datetime import datetime
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from backend.auth import jwt_handler
from backend.auth.credential_store import (
    CredentialStore,
    DatabaseCredentialStore,
    InMemoryCredentialStore,
)
from backend.auth.dependencies import get_current_user
from backend.auth.passwords import dummy_verify, hash_password, verify_password
from backend.auth.roles import Role
from backend.core import config
from backend.core.errors import DuplicateEmail
from backend.database import SessionLocal

router = APIRouter(tags=["auth"])

logger = logging.getLogger(__name__)


class RegisterRequest(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""


class RegisterResponse(BaseModel):
    id: int
    name: str
    email: str


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime


class CurrentUserResponse(BaseModel):
    id: int
    email: str
    name: str
    role: Role


@lru_cache
def get_credential_store() -> CredentialStore:
    if config.CREDENTIAL_STORE == "database":
        return DatabaseCredentialStore(SessionLocal)
    return InMemoryCredentialStore()


def _storage_unavailable() -> HTTPException:
    logger.exception("Credential store unavailable.")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Database unavailable. Verify DATABASE_URL.",
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, users: CredentialStore = Depends(get_credential_store)):
    name = data.name.strip()
    email = data.email.strip()
    if not name or not email or not data.password.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name, email and password are required.",
        )

    try:
        user_id = users.create(
            name,
            email,
            hash_password(data.password),
            role=Role.parse(config.REGISTRATION_DEFAULT_ROLE),
        )
    except DuplicateEmail as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered.") from exc
    except SQLAlchemyError as exc:
        raise _storage_unavailable() from exc

    return RegisterResponse(id=user_id, name=name, email=email)


@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, users: CredentialStore = Depends(get_credential_store)):
    try:
        user = users.find_by_email(data.email)
    except SQLAlchemyError as exc:
        raise _storage_unavailable() from exc

    if user is None:
        dummy_verify()
        verified = False
    else:
        verified = verify_password(data.password, user.password_hash)

    if not verified:
        logger.warning("Rejected login attempt for email=%s", data.email.strip())
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid_credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = jwt_handler.create_access_token(user)
    return TokenResponse(access_token=token.access_token, expires_at=token.expires_at)


@router.get("/me", response_model=CurrentUserResponse)
def me(current_user: jwt_handler.TokenClaims = Depends(get_current_user)):
    return CurrentUserResponse(
        id=current_user.user_id,
        email=current_user.email,
        name=current_user.name,
        role=current_user.role,
    )
