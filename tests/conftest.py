import pytest

from tutorial_app import create_app
from tutorial_app.extensions import db
from tutorial_app.models import Tutorial


@pytest.fixture()
def app():
    """Create application for testing with a fresh in-memory database."""
    app = create_app('testing')

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture()
def runner(app):
    """Create test CLI runner."""
    return app.test_cli_runner()


@pytest.fixture()
def create_tutorial(app):
    """Persist a tutorial directly, bypassing the routes."""
    def _create_tutorial(title='Test Tutorial', description='Test Description', level=5, published=True):
        tutorial = Tutorial(title=title, description=description, level=level, published=published)
        db.session.add(tutorial)
        db.session.commit()
        return tutorial
    return _create_tutorial


@pytest.fixture()
def flashes(client):
    """Read the flash messages queued in the client's session."""
    def _flashes():
        with client.session_transaction() as session:
            return [message for _category, message in session.get('_flashes', [])]
    return _flashes
