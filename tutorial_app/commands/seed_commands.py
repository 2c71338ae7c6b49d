import click
from flask.cli import with_appcontext

from tutorial_app.extensions import db
from tutorial_app.models import Tutorial
from tutorial_app.utils.model_utils import tutorial_utils

SAMPLE_TUTORIALS = (
    dict(title="Spring Boot Thymeleaf example", description="Server-side rendering with templates", level=3, published=True),
    dict(title="Flask SQLAlchemy basics", description="Models, sessions and queries", level=2, published=True),
    dict(title="Jinja2 template inheritance", description="Layouts and blocks", level=1, published=False),
    dict(title="Marshmallow form validation", description=None, level=4, published=True),
    dict(title="Alembic migrations in practice", description="Keeping schemas in sync", level=6, published=False),
)


def seed_tutorials():
    """Insert the sample tutorials when the table is empty; returns how many were added."""
    if tutorial_utils.count_tutorials() > 0:
        return 0
    tutorials = [Tutorial(**values) for values in SAMPLE_TUTORIALS]
    db.session.add_all(tutorials)
    db.session.commit()
    return len(tutorials)


@click.command("seed")
@with_appcontext
def seed_command():
    """Seed the database with a handful of sample tutorials."""
    inserted = seed_tutorials()
    if inserted:
        click.echo(f"Seeded {inserted} tutorials.")
    else:
        click.echo("Tutorials already present; nothing seeded.")
