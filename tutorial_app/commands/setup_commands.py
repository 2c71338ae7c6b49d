import os

import click
from flask import current_app
from flask.cli import with_appcontext
from flask_migrate import upgrade as alembic_upgrade
from sqlalchemy import inspect as sa_inspect

from tutorial_app.commands.seed_commands import seed_tutorials
from tutorial_app.extensions import db
from tutorial_app.models import Tutorial


def _migrations_directory():
    migrate_state = current_app.extensions.get('migrate')
    directory = getattr(migrate_state, 'directory', None) or 'migrations'
    return directory if os.path.isdir(directory) else None


def ensure_schema():
    """Bring the schema up to date.

    Runs the Alembic migrations when a migrations directory exists, otherwise
    creates any missing tables from the models.  Returns the strategy used.
    """
    directory = _migrations_directory()
    if directory:
        alembic_upgrade(directory=directory)
        return 'migrate'
    db.create_all()
    return 'create_all'


@click.command("setup")
@click.option("--seed/--no-seed", default=False, help="Insert sample tutorials after creating the schema")
@with_appcontext
def setup_command(seed: bool):
    """One-shot project setup for fresh systems.

    - Upgrades DB schema to head (Alembic) or creates the tables
    - Optionally seeds sample tutorials

    Safe to run multiple times; all steps are idempotent.
    """
    engine_name = getattr(db.engine, 'name', '').lower()
    current_app.logger.info("setup: starting (engine=%s)", engine_name)

    try:
        strategy = ensure_schema()
    except Exception as e:
        current_app.logger.exception('setup: schema creation failed: %s', e)
        raise click.ClickException(f"Schema creation failed: {e}")

    tables = set(sa_inspect(db.engine).get_table_names())
    if Tutorial.__tablename__ not in tables:
        raise click.ClickException(f"Table '{Tutorial.__tablename__}' is still missing after {strategy}")
    click.echo(f"✔ Database schema ready ({strategy})")

    if seed:
        inserted = seed_tutorials()
        click.echo(f"✔ Seeded {inserted} tutorials" if inserted else "ℹ Tutorials already present, skipping seed")
