from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

# Importing base registers every model on the metadata
from roombook.core.config import get_settings
from roombook.db.base import Base

config = context.config
config.set_main_option("sqlalchemy.url", get_settings().DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure_options(url: str) -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "compare_server_default": True,
        # SQLite can't ALTER most constraints in place
        "render_as_batch": url.startswith("sqlite"),
    }


# ===============================================================
# OFFLINE (emit SQL only)
# ===============================================================
def run_migrations_offline():
    url = config.get_main_option("sqlalchemy.url")
    context.configure(url=url, literal_binds=True, **_configure_options(url))

    with context.begin_transaction():
        context.run_migrations()


# ===============================================================
# ONLINE
# ===============================================================
def run_migrations_online():
    url = config.get_main_option("sqlalchemy.url")
    connectable = create_engine(url, poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_options(url))

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
