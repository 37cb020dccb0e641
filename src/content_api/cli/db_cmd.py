"""``content-api db``: apply and inspect Alembic migrations for the resources table."""

import typer
from loguru import logger

db_app = typer.Typer()

ALEMBIC_INI = "alembic.ini"


def _config():  # type: ignore[no-untyped-def]
    from alembic.config import Config

    return Config(ALEMBIC_INI)


@db_app.command()
def upgrade(
    revision: str = typer.Argument("head", help="Revision to migrate up to"),
    sql: bool = typer.Option(False, "--sql", help="Print the migration SQL instead of running it"),
) -> None:
    """Migrate the metadata store forward."""
    from alembic import command

    logger.info(f"Migrating resources schema to {revision}{' (offline)' if sql else ''}")
    command.upgrade(_config(), revision, sql=sql)


@db_app.command()
def downgrade(
    revision: str = typer.Argument("-1", help="Revision to roll back to"),
) -> None:
    """Roll the metadata store back."""
    from alembic import command

    logger.info(f"Rolling resources schema back to {revision}")
    command.downgrade(_config(), revision)


@db_app.command()
def current() -> None:
    """Print the applied migration revision."""
    from alembic import command

    command.current(_config(), verbose=True)
