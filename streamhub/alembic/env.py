import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

from streamhub.core.config import settings
from streamhub.core.db import Base

# Every model module, so Base.metadata knows all tables
from streamhub.modules.access import models as access_models  # noqa: F401
from streamhub.modules.audit import models as audit_models  # noqa: F401
from streamhub.modules.catalog import models as catalog_models  # noqa: F401
from streamhub.modules.payments import models as payments_models  # noqa: F401
from streamhub.modules.plans import models as plans_models  # noqa: F401
from streamhub.modules.reports import models as reports_models  # noqa: F401
from streamhub.modules.subscriptions import models as subscriptions_models  # noqa: F401
from streamhub.modules.users import models as users_models  # noqa: F401

config = context.config
config.set_main_option("sqlalchemy.url", settings.async_database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL to the script output without a live connection."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
