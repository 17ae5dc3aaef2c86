"""Exceptions raised by the credential and student storage layers.

Routes translate these into HTTP responses; nothing below the route layer
knows about status codes.
"""


class BackendError(Exception):
    """Base class for errors raised by this backend."""


class MissingConfiguration(BackendError, RuntimeError):
    """Required settings are absent. Fatal at startup."""

    def __init__(self, names: list[str]):
        self.names = list(names)
        super().__init__(f"Missing required configuration: {', '.join(self.names)}")


class DuplicateEmail(BackendError):
    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already registered.")


class UnsupportedField(BackendError, ValueError):
    def __init__(self, field_name: object):
        self.field_name = field_name
        super().__init__("Unsupported search field.")


class InvalidValue(BackendError, ValueError):
    def __init__(self, field_name: str, value: object):
        self.field_name = field_name
        self.value = value
        super().__init__(f"Invalid value for field '{field_name}'.")


class InvalidToken(BackendError):
    """Bearer token failed signature, issuer, audience, expiry or claim checks."""

    def __init__(self, reason: str = "token_invalid"):
        self.reason = reason
        super().__init__(reason)


class InvalidConfiguration(BackendError, ValueError):
    """A setting is present but holds a value outside its allowed set."""

    def __init__(self, name: str, value: str, allowed: tuple[str, ...]):
        self.name = name
        self.value = value
        self.allowed = allowed
        super().__init__(f"Invalid value {value!r} for {name}; expected one of: {', '.join(allowed)}")
