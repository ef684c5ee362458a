from __future__ import annotations

import logging

from sqlalchemy import inspect

from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "users": {"id", "email", "role", "is_active"},
    "classes": {"id", "name"},
    "teachers": {"id", "name", "user_id"},
    "subjects": {"id", "name", "code"},
    "timetable_entries": {
        "id",
        "class_id",
        "teacher_id",
        "subject_id",
        "day_of_week",
        "start_time",
        "end_time",
    },
    "activity_logs": {"id", "action", "entity_type", "entity_id"},
}


def missing_schema_items(connectable=None) -> tuple[list[str], dict[str, list[str]]]:
    """Return ``(missing_tables, missing_columns)`` for the scheduling schema."""
    bind = connectable if connectable is not None else engine
    inspector = inspect(bind)
    table_names = set(inspector.get_table_names())
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    for table_name, columns in REQUIRED_COLUMNS.items():
        if table_name not in table_names:
            missing_tables.append(table_name)
            continue
        existing = {item["name"] for item in inspector.get_columns(table_name)}
        missing = sorted(columns - existing)
        if missing:
            missing_columns[table_name] = missing
    return missing_tables, missing_columns


def ensure_runtime_schema_compatibility() -> None:
    import app.models  # noqa: F401

    missing_tables, missing_columns = missing_schema_items()
    if missing_tables:
        logger.info("Creating missing tables: %s", ", ".join(missing_tables))
        Base.metadata.create_all(bind=engine, checkfirst=True)
    if missing_columns:
        # Column drift needs a real migration; create_all never alters tables.
        logger.warning(
            "Database schema is missing columns %s. Run `alembic upgrade head`.",
            missing_columns,
        )
