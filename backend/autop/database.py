from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from autop.config import settings

# Build engine for current backend (disable thread check for SQLite)
engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if "sqlite" in settings.database_url else {}
)

# Session factory used per request
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Declarative base shared by models
Base = declarative_base()

def get_db():
    # Database session used via FastAPI dependency injection
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
