"""
API client for the SQL client UI

Talks to a real backend over HTTP when one answers its health check and
falls back to an in-process demo server otherwise. Both paths return the
same QueryResult contract.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from demodb.config import settings
from demodb.session import DemoSession, split_statements, used_database
from demodb.storage import ServerStore
from demodb.types import ConnectionStatus, DatabaseConnection, QueryResult

logger = logging.getLogger(__name__)

class ApiService:
    """Backend client with demo-mode fallback"""

    def __init__(self, base_url: str = None, timeout: float = None,
                 health_timeout: float = None, store: ServerStore = None,
                 latency: float = None, http: requests.Session = None):
        self.base_url = (base_url or settings.api_base_url).rstrip('/')
        self.timeout = settings.api_timeout if timeout is None else timeout
        self.health_timeout = settings.health_timeout if health_timeout is None else health_timeout
        self.store = store or ServerStore()
        self.latency = latency
        self.http = http or requests.Session()
        self.http.headers.update({'Content-Type': 'application/json'})
        self.backend_available: Optional[bool] = None

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _demo_session(self, database: Optional[str]) -> DemoSession:
        return DemoSession(self.store, database=database, latency=self.latency)

    def _switch_to_demo(self, error: Exception):
        logger.warning("Backend unreachable (%s), switching to demo mode", error)
        self.backend_available = False

    @staticmethod
    def _error_from(response: Optional[requests.Response], fallback: str) -> str:
        if response is not None:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            if isinstance(payload, dict) and payload.get('error'):
                return payload['error']
        return fallback

    async def check_backend_availability(self) -> bool:
        """Probe /health once and cache the answer"""
        if self.backend_available is not None:
            return self.backend_available
        try:
            response = await asyncio.to_thread(
                self.http.get, self._url('/health'), timeout=self.health_timeout)
            response.raise_for_status()
            self.backend_available = True
        except requests.RequestException as e:
            self._switch_to_demo(e)
        return self.backend_available

    async def test_connection(self, connection: DatabaseConnection) -> ConnectionStatus:
        if not await self.check_backend_availability():
            await self._demo_session(connection.database).simulate_network_delay()
            # New demo connection starts from the seed
            self.store.reset()
            return ConnectionStatus(
                connected=True,
                message='Connected in Demo Mode.',
                databases=self.store.list_databases(),
            )
        try:
            response = await asyncio.to_thread(
                self.http.post, self._url('/connect'),
                json=connection.to_dict(), timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
            return ConnectionStatus(
                connected=True,
                message=payload.get('message') or 'Connection successful',
                databases=payload.get('databases') or [],
            )
        except requests.ConnectionError as e:
            self._switch_to_demo(e)
            return await self.test_connection(connection)
        except requests.RequestException as e:
            logger.error("Connection error: %s", e)
            return ConnectionStatus(
                connected=False,
                error=self._error_from(getattr(e, 'response', None), 'Connection failed'),
            )

    async def execute_query(self, query: str, connection: DatabaseConnection) -> QueryResult:
        if not await self.check_backend_availability():
            return await self._demo_session(connection.database).aexecute(query)
        try:
            response = await asyncio.to_thread(
                self.http.post, self._url('/query'),
                json={'query': query.strip(), 'connection': connection.to_dict()},
                timeout=self.timeout)
            response.raise_for_status()
            payload: Dict[str, Any] = response.json()
            return QueryResult.from_dict({'success': True, **payload})
        except requests.ConnectionError as e:
            self._switch_to_demo(e)
            return await self.execute_query(query, connection)
        except requests.RequestException as e:
            logger.error("Query error: %s", e)
            return QueryResult.failure(
                self._error_from(getattr(e, 'response', None), 'Query failed'))

    async def execute_script(self, script: str, connection: DatabaseConnection,
                             stop_on_error: bool = False) -> List[QueryResult]:
        """Run each statement in order, following USE statements"""
        results = []
        current_db = connection.database
        for query in split_statements(script):
            database = used_database(query)
            if database:
                current_db = database
            result = await self.execute_query(query, connection.with_database(current_db))
            results.append(result)
            if not result.success and stop_on_error:
                break
        return results

    def is_demo_mode(self) -> bool:
        return self.backend_available is False

    def get_mock_server_state(self) -> Optional[Dict[str, Any]]:
        if self.backend_available is False:
            return self.store.get_snapshot()
        return None
