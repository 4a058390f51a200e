from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy import create_engine
from event_analytics.core.config import settings


def build_engine(database_url: str = None):
    """Create an engine, skipping pool sizing for SQLite."""
    url = database_url or settings.DATABASE_URL
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=settings.DB_ECHO,
        )
    return create_engine(
        url,
        pool_size=settings.DB_MIN_CONNECTIONS,
        max_overflow=settings.DB_MAX_CONNECTIONS - settings.DB_MIN_CONNECTIONS,
        echo=settings.DB_ECHO,
        pool_pre_ping=True
    )


# Create SQLAlchemy engine
engine = build_engine()

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create declarative base for models
Base = declarative_base()
