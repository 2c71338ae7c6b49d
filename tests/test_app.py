import pytest

from tutorial_app import create_app
from tutorial_app.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    get_bool_env,
    get_database_uri,
    get_int_env,
)


class TestConfiguration:

    def test_testing_config_selected(self, app):
        assert app.config['TESTING'] is True
        assert app.config['MY_ENVIRONMENT'] == 'TESTING'
        assert app.config['SQLALCHEMY_DATABASE_URI'] == TestingConfig.SQLALCHEMY_DATABASE_URI

    def test_default_port(self, app):
        assert app.config['SERVER_PORT'] == 8080

    def test_flask_env_selects_config(self, monkeypatch):
        monkeypatch.setenv('FLASK_ENV', 'testing')
        assert create_app().config['MY_ENVIRONMENT'] == 'TESTING'

    def test_environment_classes(self):
        assert DevelopmentConfig.DEBUG is True
        assert ProductionConfig.MY_ENVIRONMENT == 'PRODUCTION'

    @pytest.mark.parametrize('raw, expected', [('true', True), ('1', True), ('on', True), ('no', False), ('garbage', False)])
    def test_get_bool_env(self, monkeypatch, raw, expected):
        monkeypatch.setenv('TUTORIAL_FLAG', raw)
        assert get_bool_env('TUTORIAL_FLAG', False) is expected

    def test_get_int_env(self, monkeypatch):
        monkeypatch.setenv('TUTORIAL_PORT', '9090')
        assert get_int_env('TUTORIAL_PORT', 1) == 9090
        monkeypatch.setenv('TUTORIAL_PORT', 'nope')
        assert get_int_env('TUTORIAL_PORT', 1) == 1

    def test_get_database_uri_rewrites_postgres_scheme(self, monkeypatch):
        monkeypatch.setenv('DATABASE_URI', 'postgres://user:pw@db/tutorials')
        assert get_database_uri('sqlite://') == 'postgresql://user:pw@db/tutorials'
        monkeypatch.delenv('DATABASE_URI')
        assert get_database_uri('sqlite:///x.db') == 'sqlite:///x.db'


class TestHttpShell:

    def test_security_headers(self, client):
        response = client.get('/tutorials')
        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert response.headers['X-Frame-Options'] == 'DENY'
        assert 'Content-Security-Policy' in response.headers

    def test_unknown_route_renders_not_found_page(self, client):
        response = client.get('/does-not-exist')
        assert response.status_code == 404
        assert b'Page not found' in response.data

    def test_static_stylesheet_served(self, client):
        response = client.get('/static/css/style.css')
        assert response.status_code == 200
        response.close()
