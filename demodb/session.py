"""
Demo session: runs scripts statement by statement against a store,
tracking the current database across USE statements.
"""

import asyncio
import logging
import re
from typing import List, Optional

from demodb.config import settings
from demodb.parser import strip_statement
from demodb.query_executor import QueryExecutor
from demodb.storage import ServerStore
from demodb.types import QueryResult

logger = logging.getLogger(__name__)

_USE_RE = re.compile(r'use\s+`?(\w+)`?\s*$', re.IGNORECASE)

def split_statements(script: str) -> List[str]:
    """Split a script on ';', dropping empty fragments"""
    return [part.strip() for part in script.split(';') if part.strip()]

def used_database(statement: str) -> Optional[str]:
    """Database named by a USE statement, or None"""
    match = _USE_RE.match(strip_statement(statement))
    return match.group(1) if match else None

class DemoSession:
    """One client's view of a demo server"""

    def __init__(self, store: ServerStore, database: Optional[str] = None,
                 stop_on_error: bool = False, latency: Optional[float] = None):
        self.store = store
        self.executor = QueryExecutor(store)
        self.database = database
        self.stop_on_error = stop_on_error
        self.latency = settings.simulated_latency if latency is None else latency

    def execute(self, statement: str) -> QueryResult:
        """Run one statement against the tracked database"""
        database = used_database(statement)
        if database:
            # Tracked even when USE itself fails
            self.database = database
        return self.executor.execute(statement, self.database)

    def execute_script(self, script: str) -> List[QueryResult]:
        results = []
        for statement in split_statements(script):
            result = self.execute(statement)
            results.append(result)
            if not result.success and self.stop_on_error:
                logger.info("Stopping script after failed statement: %s", result.error)
                break
        return results

    async def simulate_network_delay(self):
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    async def aexecute(self, statement: str) -> QueryResult:
        await self.simulate_network_delay()
        return self.execute(statement)

    async def aexecute_script(self, script: str) -> List[QueryResult]:
        results = []
        for statement in split_statements(script):
            result = await self.aexecute(statement)
            results.append(result)
            if not result.success and self.stop_on_error:
                break
        return results
