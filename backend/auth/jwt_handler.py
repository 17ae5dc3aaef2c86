import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from backend.auth.credential_store import UserRecord
from backend.auth.roles import Role
from backend.core import config
from backend.core.errors import InvalidToken, MissingConfiguration

REQUIRED_CLAIMS = ["exp", "iat", "sub", "iss", "aud"]


@dataclass(frozen=True)
class JwtSettings:
    issuer: str
    audience: str
    secret_key: str
    expires_minutes: int
    clock_skew_seconds: int


@dataclass(frozen=True)
class AccessToken:
    access_token: str
    expires_at: datetime


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    email: str
    name: str
    role: Role


def get_jwt_settings() -> JwtSettings:
    missing = config.missing_jwt_settings()
    if missing:
        raise MissingConfiguration(missing)
    return JwtSettings(
        issuer=config.JWT_ISSUER,
        audience=config.JWT_AUDIENCE,
        secret_key=config.JWT_SECRET_KEY,
        expires_minutes=config.JWT_EXPIRES_MINUTES,
        clock_skew_seconds=config.JWT_CLOCK_SKEW_SECONDS,
    )


def create_access_token(user: UserRecord, now: datetime | None = None) -> AccessToken:
    settings = get_jwt_settings()
    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(minutes=settings.expires_minutes)

    payload = {
        "sub": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": Role(user.role).value,
        "iss": settings.issuer,
        "aud": settings.audience,
        "iat": issued_at,
        "exp": expires_at,
        "jti": uuid.uuid4().hex,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=config.JWT_ALGORITHM)
    return AccessToken(access_token=token, expires_at=expires_at)


def decode_access_token(token: str) -> TokenClaims:
    if not token:
        raise InvalidToken("missing_token")

    settings = get_jwt_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[config.JWT_ALGORITHM],
            audience=settings.audience,
            issuer=settings.issuer,
            leeway=settings.clock_skew_seconds,
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError as exc:
        raise InvalidToken("token_expired") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidToken("token_invalid") from exc

    try:
        return TokenClaims(
            user_id=int(payload["sub"]),
            email=str(payload.get("email") or ""),
            name=str(payload.get("name") or ""),
            role=Role.parse(payload.get("role")),
        )
    except (TypeError, ValueError) as exc:
        raise InvalidToken("token_invalid") from exc
