"""Tests for the API client, both against a backend and in demo mode."""

import asyncio
from urllib.parse import urlparse

import pytest
import requests

from demodb.client import ApiService
from demodb.storage import ServerStore
from demodb.types import DatabaseConnection


class UnreachableSession(requests.Session):
    """Every request fails as if nothing listens on the port"""

    def __init__(self):
        super().__init__()
        self.calls = 0

    def request(self, method, url, **kwargs):
        self.calls += 1
        raise requests.ConnectionError(f"connection refused: {url}")


class FlaskBackedSession(requests.Session):
    """Routes requests into a Flask test client"""

    def __init__(self, flask_client):
        super().__init__()
        self.flask_client = flask_client

    def request(self, method, url, json=None, **kwargs):
        reply = self.flask_client.open(urlparse(url).path, method=method, json=json)
        response = requests.Response()
        response.status_code = reply.status_code
        response._content = reply.data
        response.url = url
        response.headers['Content-Type'] = 'application/json'
        return response


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def connection():
    return DatabaseConnection(database='demo_db')


class TestDemoMode:

    @pytest.fixture
    def service(self):
        return ApiService(http=UnreachableSession(), store=ServerStore(), latency=0)

    def test_connect_falls_back_to_demo(self, service, connection):
        status = run(service.test_connection(connection))
        assert status.connected
        assert status.message == 'Connected in Demo Mode.'
        assert status.databases == ['demo_db', 'company_db', 'system_db']
        assert service.is_demo_mode()

    def test_availability_is_cached(self, service):
        assert run(service.check_backend_availability()) is False
        assert run(service.check_backend_availability()) is False
        assert service.http.calls == 1

    def test_connect_resets_state(self, service, connection):
        run(service.execute_query('DROP TABLE users', connection))
        run(service.test_connection(connection))
        assert service.store.table_exists('demo_db', 'users')

    def test_query(self, service, connection):
        result = run(service.execute_query('SELECT * FROM users ORDER BY name ASC LIMIT 2', connection))
        assert result.success
        assert [row['name'] for row in result.data] == ['Alice Brown', 'Bob Johnson']

    def test_script(self, service, connection):
        results = run(service.execute_script(
            'USE company_db; SELECT * FROM departments; DROP TABLE ghost; SHOW TABLES', connection))
        assert [r.success for r in results] == [True, True, False, True]
        assert results[3].columns == ['Tables_in_company_db']

    def test_script_stop_on_error(self, service, connection):
        results = run(service.execute_script('DROP TABLE ghost; SHOW TABLES', connection,
                                             stop_on_error=True))
        assert len(results) == 1

    def test_mock_state_only_in_demo_mode(self, service, connection):
        assert service.get_mock_server_state() is None
        run(service.test_connection(connection))
        state = service.get_mock_server_state()
        assert set(state) == {'demo_db', 'company_db', 'system_db'}


class TestBackendMode:

    @pytest.fixture
    def service(self, client):
        return ApiService(base_url='http://backend.test', http=FlaskBackedSession(client),
                          store=ServerStore(), latency=0)

    def test_connect(self, service, connection):
        status = run(service.test_connection(connection))
        assert status.connected
        assert status.message == 'Connection successful'
        assert not service.is_demo_mode()
        assert service.get_mock_server_state() is None

    def test_query_goes_to_backend(self, service, connection, store):
        result = run(service.execute_query('DROP TABLE products', connection))
        assert result.success
        assert not store.table_exists('demo_db', 'products')
        # the client's own demo store is untouched
        assert service.store.table_exists('demo_db', 'products')

    def test_failed_statement_stays_failed(self, service, connection):
        result = run(service.execute_query('DROP TABLE nonexistent', connection))
        assert not result.success
        assert result.error == "Table 'nonexistent' does not exist."

    def test_http_error_uses_server_message(self, service, connection):
        result = run(service.execute_query('   ', connection))
        assert not result.success
        assert result.error == 'Query required'

    def test_script_tracks_database(self, service, connection):
        results = run(service.execute_script('USE system_db; SELECT * FROM logs', connection))
        assert results[1].success
        assert results[1].total_rows == 2
