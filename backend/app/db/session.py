from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import get_settings

settings = get_settings()


def _engine_options() -> dict:
    options: dict = {"pool_pre_ping": True}
    if settings.database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    if settings.database_isolation_level:
        options["isolation_level"] = settings.database_isolation_level
    return options


engine = create_engine(settings.database_url, **_engine_options())
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
