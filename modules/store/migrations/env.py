"""Alembic environment for the SQL document store.

Targets DATABASE_URL when set, else ``sqlalchemy.url`` from the Alembic
config, else the dashboard's default SQLite file.
"""
import os
from logging.config import fileConfig

from alembic import context

from modules.store.models import Base
from modules.store.sql import DEFAULT_DATABASE_URL, get_engine

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def database_url() -> str:
    return (
        os.getenv("DATABASE_URL")
        or config.get_main_option("sqlalchemy.url")
        or DEFAULT_DATABASE_URL
    )


def run_offline(url: str) -> None:
    """Emit SQL instead of executing it."""
    context.configure(
        url=url,
        target_metadata=Base.metadata,
        literal_binds=True,
        render_as_batch=url.startswith("sqlite"),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online(url: str) -> None:
    engine = get_engine(url)
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=Base.metadata,
                # SQLite can't ALTER most constraints in place
                render_as_batch=connection.dialect.name == "sqlite",
                compare_type=True,
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_offline(database_url())
else:
    run_online(database_url())
