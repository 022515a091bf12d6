import pytest

from factories import make_expense, make_group
from splitly import create_app


@pytest.fixture
def app():
    return create_app({"TESTING": True, "LOG_LEVEL": "DEBUG"})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def dinner_group():
    """Three members, one 90 dinner paid by A and split three ways."""
    return make_group(
        ["a", "b", "c"],
        expenses=[make_expense("e1", "a", {"a": 30, "b": 30, "c": 30})],
    )
