from auth_api.db.database import (
    get_db,
    get_db_session,
    init_db,
    async_engine,
    AsyncSessionLocal,
    Base,
)

__all__ = [
    "get_db",
    "get_db_session",
    "init_db",
    "async_engine",
    "AsyncSessionLocal",
    "Base",
]
