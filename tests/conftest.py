"""Pytest fixtures for taskboard application testing."""

import os

import pytest


# Disable OpenTelemetry for tests
os.environ["OTEL_SDK_DISABLED"] = "true"


@pytest.fixture
def app():
    """Create test application."""
    from taskboard import create_app
    from taskboard.config import TestConfig

    app = create_app(TestConfig)
    app.config["TESTING"] = True

    yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def db(app):
    """Create test database."""
    from taskboard.extensions import db as _db

    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


def _make_user(db, username):
    from taskboard.models import User

    user = User(username=username)
    user.set_password("password123")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def user(db):
    """Create test user."""
    return _make_user(db, "alice")


@pytest.fixture
def other_user(db):
    """Create a second user who must never see alice's tasks."""
    return _make_user(db, "bob")


@pytest.fixture
def auth_token(app, user):
    """Generate auth token for test user."""
    from taskboard.services.auth import generate_token

    with app.app_context():
        return generate_token(user)


@pytest.fixture
def auth_headers(auth_token):
    """Create authorization headers with test token."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def other_headers(app, other_user):
    from taskboard.services.auth import generate_token

    with app.app_context():
        return {"Authorization": f"Bearer {generate_token(other_user)}"}


class FlaskResponse:
    """requests.Response look-alike over a Flask test response."""

    def __init__(self, response):
        self._response = response
        self.status_code = response.status_code
        self.text = response.get_data(as_text=True)

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        data = self._response.get_json(silent=True)
        if data is None:
            raise ValueError("No JSON body")
        return data


class FlaskSession:
    """Routes TaskboardClient requests into the Flask test client."""

    def __init__(self, test_client, base_url):
        self.test_client = test_client
        self.base_url = base_url
        self.calls = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        path = url[len(self.base_url):]
        self.calls.append((method, path))
        response = self.test_client.open(path, method=method, json=json, headers=headers)
        return FlaskResponse(response)


@pytest.fixture
def api_client(client, db):
    """TaskboardClient wired to the test application."""
    from taskboard.client import TaskboardClient

    base_url = "http://taskboard.test"
    return TaskboardClient(base_url, session=FlaskSession(client, base_url))
