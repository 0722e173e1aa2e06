from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase
from app.core.config import settings


def _engine_kwargs(url: str) -> dict:
    # SQLite (tests / local dev) does not take the pool sizing options
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,    # Drops stale connections before use
    }


# ── Async Engine ──────────────────────────────────────────────────────
# PostgreSQL via asyncpg in production
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,   # Set DEBUG=false in .env to stop SQL logs
    **_engine_kwargs(settings.DATABASE_URL),
)

# ── Session Factory ───────────────────────────────────────────────────
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


# ── Base class for all models ─────────────────────────────────────────
class Base(DeclarativeBase):
    pass


# ── Insert-if-missing ─────────────────────────────────────────────────
# Row may be created concurrently by another request; the unique/PK
# constraint decides, the loser just keeps going.
async def insert_or_ignore(session: AsyncSession, model, values: dict) -> None:
    dialect = session.get_bind().dialect.name

    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        try:
            async with session.begin_nested():
                await session.execute(model.__table__.insert().values(**values))
        except IntegrityError:
            pass
        return

    await session.execute(insert(model).values(**values).on_conflict_do_nothing())


# ── FastAPI Dependency ────────────────────────────────────────────────
# Inject this into any route with: db: AsyncSession = Depends(get_db)
async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
