from sqlalchemy import create_engine               # SQLAlchemy engine factory
from sqlalchemy.orm import declarative_base, sessionmaker

from config.settings import settings               # ✅ settings read from .env

# ✅ SQLite needs check_same_thread off when sessions cross the threadpool
_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=_connect_args, pool_pre_ping=True)

# ✅ session factory used by routers and scripts
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ✅ declarative base shared by every model
Base = declarative_base()


# ==========================================================
# [common] request-scoped DB session
# ==========================================================
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create missing tables. Models must be imported first so they register on Base."""
    from models import bulletins, classes, grades, statistics, students, subjects  # noqa: F401

    Base.metadata.create_all(bind=engine)
