from uninexus_offline.core.settings import settings
from uninexus_offline.db.session import build_engine, create_tables


def init_db() -> None:
    """Create the key-value table in the configured storage database."""
    engine = build_engine(settings.storage_url)
    try:
        create_tables(engine)
    finally:
        engine.dispose()


if __name__ == "__main__":
    init_db()
    print("Database initialized.")
