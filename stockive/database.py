from sqlmodel import SQLModel, create_engine, Session
from stockive.core.config import settings
from sqlalchemy.pool import QueuePool


DB_URL = settings.DATABASE_URL

def build_engine(url: str):
    if url.startswith("sqlite"):
        # SQLite connections get handed across FastAPI's threadpool
        return create_engine(url, connect_args={"check_same_thread": False})
    # Create engine with connection pooling
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=5,  # Number of connections to keep open
        max_overflow=10,  # Maximum number of connections to create beyond pool_size
        pool_timeout=30,  # Timeout in seconds for getting a connection from the pool
        pool_recycle=3600,  # Recycle connections after 1 hour
        pool_pre_ping=True  # Verify connections before using them from the pool
    )

engine = build_engine(DB_URL)

def create_db_and_tables():
    # Make sure every table is registered on the metadata
    import stockive.models  # noqa: F401
    SQLModel.metadata.create_all(engine)

def get_session():
    with Session(engine) as session:
        yield session

