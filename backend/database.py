from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from backend.core import config


def build_engine(database_url: str, timeout_seconds: int = config.DB_TIMEOUT_SECONDS) -> Engine:
    """Create an engine whose storage calls are bounded by ``timeout_seconds``."""
    backend_name = make_url(database_url).get_backend_name()

    if backend_name == 'sqlite':
        return create_engine(
            database_url,
            connect_args={'timeout': timeout_seconds, 'check_same_thread': False},
        )

    connect_args: dict = {}
    if backend_name == 'postgresql':
        connect_args = {
            'connect_timeout': timeout_seconds,
            'options': f'-c statement_timeout={timeout_seconds * 1000}',
        }

    return create_engine(
        database_url,
        connect_args=connect_args,
        pool_timeout=timeout_seconds,
        pool_pre_ping=True,
    )


engine = build_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()
