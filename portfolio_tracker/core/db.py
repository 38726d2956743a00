from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from portfolio_tracker.core.config import settings

engine_kwargs = {"echo": settings.SQL_ECHO}
if settings.DATABASE_URL.startswith("sqlite"):
    # in-memory sqlite must share one connection across threads
    engine_kwargs.update(connect_args={"check_same_thread": False}, poolclass=StaticPool)

engine = create_engine(settings.DATABASE_URL, **engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    import portfolio_tracker.models  # noqa: F401  registers tables on Base.metadata
    Base.metadata.create_all(bind=engine)
