from logging.config import fileConfig
from sqlalchemy import create_engine, pool
from alembic import context

# -----------------------------
# Import SQLAlchemy Base + Models
# (DATABASE_URL is loaded from .env by app.db.session)
# -----------------------------
from app.db.session import Base, DATABASE_URL
from app.models.ground import Ground
from app.models.booking import Booking

config = context.config
config.set_main_option("sqlalchemy.url", DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# SQLite cannot ALTER most columns in place
render_as_batch = DATABASE_URL.startswith("sqlite")


# ===============================================================
# OFFLINE MIGRATIONS
# ===============================================================
def run_migrations_offline():
    """Emit SQL for the configured URL without connecting."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        render_as_batch=render_as_batch,
    )

    with context.begin_transaction():
        context.run_migrations()


# ===============================================================
# ONLINE MIGRATIONS
# ===============================================================
def run_migrations_online():
    connectable = create_engine(DATABASE_URL, poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=render_as_batch,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
