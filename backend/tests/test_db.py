from __future__ import annotations

from hr_leave.config import Settings
from hr_leave.db import engine_options


def test_engine_options_size_postgres_pool() -> None:
    settings = Settings(
        database_url="postgresql+asyncpg://u:p@localhost/leave",
        db_pool_size=5,
        db_max_overflow=2,
    )

    options = engine_options(settings)

    assert options["pool_size"] == 5
    assert options["max_overflow"] == 2
    assert options["pool_pre_ping"] is True


def test_engine_options_skip_pool_sizing_for_sqlite() -> None:
    settings = Settings(database_url="sqlite+aiosqlite:///./leave.db", debug=True)

    options = engine_options(settings)

    assert options == {"echo": True, "pool_pre_ping": True}
