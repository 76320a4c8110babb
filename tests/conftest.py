import pytest

from api.server import create_app
from demodb.query_executor import QueryExecutor
from demodb.storage import ServerStore


@pytest.fixture
def store():
    return ServerStore()


@pytest.fixture
def executor(store):
    return QueryExecutor(store)


@pytest.fixture
def app(store):
    app = create_app(store)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
