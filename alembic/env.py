import os
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import pool, create_engine

from netanya_local.common.db import Base

# модели импортируем, чтобы таблицы попали в metadata
from netanya_local.users import models as _users  # noqa: F401
from netanya_local.catalog import models as _catalog  # noqa: F401
from netanya_local.businesses import models as _businesses  # noqa: F401
from netanya_local.reviews import models as _reviews  # noqa: F401
from netanya_local.moderation import models as _moderation  # noqa: F401
from netanya_local.admin_settings import models as _admin_settings  # noqa: F401

load_dotenv()

config = context.config


def _sync_url() -> str:
    # ВАЖНО: sync-URL (psycopg2), а не asyncpg
    url = os.getenv("DATABASE_URL_SYNC") or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL_SYNC not set")
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return url.replace("+asyncpg", "+psycopg2").replace("+aiosqlite", "")


DATABASE_URL_SYNC = _sync_url()
config.set_main_option("sqlalchemy.url", DATABASE_URL_SYNC)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline():
    context.configure(url=DATABASE_URL_SYNC, target_metadata=target_metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    engine = create_engine(DATABASE_URL_SYNC, poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
