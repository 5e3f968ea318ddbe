'''
Database Engine file.
1- Engine: creates and manages the connection pool
2- AsyncSessionLocal: Session Creator (with engine as bind)
3- TutoringStore: the single, app-wide data access object built on the session factory
4- get_store: Dependency handing the app-wide store to routes and view services
'''
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, AsyncEngine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from ..common.config import settings
from ..common.logger import log
from .models import Base
from .store import TutoringStore

# We define them as None. They will be created by the app's lifespan.
engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None
store: TutoringStore | None = None


def build_engine(database_url: str) -> AsyncEngine:
    """
    Creates the asynchronous engine for the given URL.
    SQLite gets a single shared connection so an in-memory database
    survives across sessions; server databases get a real pool.
    """
    if database_url.startswith("sqlite"):
        return create_async_engine(
            database_url,
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(
        database_url,
        echo=False,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=-1,
        pool_pre_ping=True
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def create_tables(bind: AsyncEngine):
    """Creates the documents table if it does not exist yet."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("Database tables ensured.")


async def create_db_engine_and_store():
    """
    Creates the engine, the session factory and the store.
    This is called by the app's lifespan event.
    """
    global engine, AsyncSessionLocal, store

    log.info("Creating database engine for URL...")
    try:
        # 1. Create the asynchronous engine
        engine = build_engine(settings.database_url)

        # 2. Create the AsyncSessionLocal factory
        AsyncSessionLocal = build_session_factory(engine)

        if settings.AUTO_CREATE_TABLES:
            await create_tables(engine)

        # 3. One store per process so every view shares the same change feed
        store = TutoringStore(AsyncSessionLocal)
        log.info("Async database engine, session factory and store created successfully.")
    except Exception as e:
        log.critical(f"Failed to create async database engine: {e}", exc_info=True)
        raise


async def dispose_db_engine():
    """Disposes of the engine. Called by the app's lifespan."""
    global engine, AsyncSessionLocal, store
    if engine:
        await engine.dispose()
        log.info("Database engine disposed.")
    engine = None
    AsyncSessionLocal = None
    store = None


def get_store() -> TutoringStore:
    """
    FastAPI dependency that provides the app-wide store.
    """
    if store is None:
        log.error("TutoringStore is not initialized. App lifespan may not have run.")
        raise RuntimeError("Data store is not available.")
    return store
