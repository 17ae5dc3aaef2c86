from passlib.context import CryptContext

from backend.core import config

_pwd = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__default_rounds=config.PASSWORD_HASH_ROUNDS,
)


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("password_blank")
    return _pwd.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against ``password_hash``.

    Every rejection costs one hash computation, including blank input and
    malformed hashes, so callers cannot be told apart by timing.
    """
    if not password or not password_hash:
        _pwd.dummy_verify()
        return False
    try:
        return _pwd.verify(password, password_hash)
    except (ValueError, TypeError):
        # Unrecognized or malformed hash.
        _pwd.dummy_verify()
        return False


def dummy_verify() -> None:
    """Spend one verification's worth of work against no real hash."""
    _pwd.dummy_verify()
