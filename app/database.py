from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
import os
from urllib.parse import urlparse, parse_qs, urlunparse
from app.config import settings


def clean_asyncpg_url(url: str) -> tuple[str, dict]:
    """
    Clean database URL for asyncpg compatibility.
    Converts postgresql:// to postgresql+asyncpg://, removes ALL query params
    (asyncpg doesn't support psycopg2-style params), and converts sslmode
    to connect_args format.
    Returns (cleaned_url, connect_args_dict)
    """
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

    if not url.startswith("postgresql+asyncpg://"):
        return url, {}

    parsed = urlparse(url)
    query_params = parse_qs(parsed.query)

    connect_args = {}
    if 'sslmode' in query_params:
        sslmode = query_params.pop('sslmode')[0]
        connect_args['ssl'] = sslmode != 'disable'
    else:
        # Managed PostgreSQL providers require SSL
        hostname = parsed.hostname or ''
        if ('.gcp' in hostname or 'sql.googleapis.com' in hostname or
                '.amazonaws.com' in hostname or os.getenv('DYNO')):
            connect_args['ssl'] = True

    cleaned_url = urlunparse(parsed._replace(query=''))
    return cleaned_url, connect_args


def sync_database_url(async_url: str) -> str:
    """Derive the driver-default URL Alembic uses from the async URL."""
    if settings.database_url_sync:
        return settings.database_url_sync
    if async_url.startswith("postgresql+asyncpg://"):
        return async_url.replace("postgresql+asyncpg://", "postgresql://", 1)
    if async_url.startswith("sqlite+aiosqlite://"):
        return async_url.replace("sqlite+aiosqlite://", "sqlite://", 1)
    return async_url


def engine_options(url: str, connect_args: dict) -> dict:
    if url.startswith("sqlite"):
        # One shared connection so in-memory databases survive across sessions
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
        "connect_args": connect_args,
    }


DATABASE_URL, asyncpg_connect_args = clean_asyncpg_url(settings.database_url)
DATABASE_URL_SYNC = sync_database_url(DATABASE_URL)

async_engine = create_async_engine(
    DATABASE_URL,
    echo=False,
    future=True,
    **engine_options(DATABASE_URL, asyncpg_connect_args),
)

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Base class for models
Base = declarative_base()


# Dependency for FastAPI to get async database session
async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
