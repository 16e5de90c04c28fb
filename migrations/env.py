import sys
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import engine_from_config, pool
from alembic import context

# Revisions import seeds/models from the project root.
BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from database import Base  # noqa: E402
import models  # noqa: E402,F401

config = context.config
target_metadata = Base.metadata


def _cli_url() -> str:
    """URL for `alembic` CLI runs; Store.migrate() always sets one."""
    from config import get_settings

    return get_settings().database_url


def _run_with_connection(connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations() -> None:
    # Store.migrate() hands over its open connection so in-memory databases
    # and the caller's transaction are shared.
    connection = config.attributes.get("connection")
    if connection is not None:
        _run_with_connection(connection)
        return

    if config.config_file_name is not None:
        fileConfig(config.config_file_name, disable_existing_loggers=False)
    if not config.get_main_option("sqlalchemy.url"):
        config.set_main_option("sqlalchemy.url", _cli_url())

    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        _run_with_connection(connection)


run_migrations()
