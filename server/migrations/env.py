"""Alembic environment for Tessera."""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from tessera.config import Config
from tessera.infrastructure.persistence.migrate import to_sync_url
from tessera.infrastructure.persistence.tables import metadata

config = context.config

# Fall back to Tessera's own config when run as plain `alembic upgrade head`
if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", to_sync_url(Config().database.url))

# `tessera server migrate` configures logging itself
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (emit SQL)."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations against a live connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
