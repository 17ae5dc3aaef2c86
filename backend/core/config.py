import os

from dotenv import load_dotenv

from backend.core.errors import InvalidConfiguration, MissingConfiguration

load_dotenv()


def _get_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _get_optional(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./students.db")
DB_TIMEOUT_SECONDS = _get_int(os.getenv("DB_TIMEOUT_SECONDS"), 5)

JWT_ISSUER = _get_optional(os.getenv("JWT_ISSUER"))
JWT_AUDIENCE = _get_optional(os.getenv("JWT_AUDIENCE"))
JWT_SECRET_KEY = _get_optional(os.getenv("JWT_SECRET_KEY"))
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_MINUTES = _get_int(os.getenv("JWT_EXPIRES_MINUTES"), 60)
JWT_CLOCK_SKEW_SECONDS = _get_int(os.getenv("JWT_CLOCK_SKEW_SECONDS"), 15)

PASSWORD_HASH_ROUNDS = _get_int(os.getenv("PASSWORD_HASH_ROUNDS"), 29000)

CREDENTIAL_STORE = os.getenv("CREDENTIAL_STORE", "memory").strip().lower()
REGISTRATION_DEFAULT_ROLE = os.getenv("REGISTRATION_DEFAULT_ROLE", "user").strip().lower()

REQUIRED_JWT_SETTINGS = ("JWT_ISSUER", "JWT_AUDIENCE", "JWT_SECRET_KEY")
CREDENTIAL_STORES = ("memory", "database")
REGISTRATION_ROLES = ("user", "admin")


def missing_jwt_settings() -> list[str]:
    return [name for name in REQUIRED_JWT_SETTINGS if not globals().get(name)]


def validate_runtime_config() -> None:
    missing = missing_jwt_settings()
    if missing:
        raise MissingConfiguration(missing)
    if CREDENTIAL_STORE not in CREDENTIAL_STORES:
        raise InvalidConfiguration("CREDENTIAL_STORE", CREDENTIAL_STORE, CREDENTIAL_STORES)
    if REGISTRATION_DEFAULT_ROLE not in REGISTRATION_ROLES:
        raise InvalidConfiguration("REGISTRATION_DEFAULT_ROLE", REGISTRATION_DEFAULT_ROLE, REGISTRATION_ROLES)
