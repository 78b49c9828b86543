from __future__ import annotations
from logging.config import fileConfig
from sqlalchemy import create_engine, pool
from alembic import context
from dotenv import load_dotenv
import os, sys

# Make the procurement package importable when alembic runs from backend/
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
load_dotenv()

from procurement.models.user import Base  # noqa: E402
# Register every table on Base.metadata for autogenerate
import procurement.models.order  # noqa: E402,F401
import procurement.models.comment  # noqa: E402,F401
import procurement.models.order_update  # noqa: E402,F401
import procurement.models.audit  # noqa: E402,F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Same default as create_app so the API and migrations agree on the database
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///procurement.db')


def _configure(**kwargs):
    context.configure(
        target_metadata=Base.metadata,
        # SQLite cannot ALTER most columns in place
        render_as_batch=DATABASE_URL.startswith('sqlite'),
        compare_type=True,
        **kwargs,
    )


def run_migrations_offline():
    _configure(url=DATABASE_URL, literal_binds=True, dialect_opts={'paramstyle': 'named'})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    engine = create_engine(DATABASE_URL, poolclass=pool.NullPool, future=True)
    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
