"""
Server state store for demodb
Holds the in-memory databases -> tables -> schema/rows hierarchy
"""

import logging
import threading
from typing import Dict, List, Any, Mapping, Optional

from demodb.clone import clone_deep
from demodb.errors import (
    AlreadyExistsError, DatabaseNotFoundError, TableNotFoundError,
)
from demodb.seed import SEED_SERVER

logger = logging.getLogger(__name__)

class ServerStore:
    """In-memory server state, seeded from a fixed snapshot"""

    def __init__(self, seed: Optional[Mapping[str, Any]] = None):
        self._seed = SEED_SERVER if seed is None else seed
        self.lock = threading.RLock()
        self._databases: Dict[str, Dict[str, Any]] = clone_deep(self._seed)

    # Lifecycle
    def reset(self):
        """Discard all mutations and restore a copy of the seed"""
        with self.lock:
            self._databases = clone_deep(self._seed)
        logger.info("Server state reset to seed (%d databases)", len(self._databases))

    def get_snapshot(self) -> Dict[str, Dict[str, Any]]:
        """Deep copy of the current state for read-only inspection"""
        with self.lock:
            return clone_deep(self._databases)

    # Database operations
    def list_databases(self) -> List[str]:
        """List all databases"""
        return list(self._databases)

    def resolve_database(self, db_name: Optional[str]) -> Optional[str]:
        """Stored name of a database, matched case-insensitively"""
        return _resolve_name(self._databases, db_name)

    def database_exists(self, db_name: Optional[str]) -> bool:
        return self.resolve_database(db_name) is not None

    def get_database(self, db_name: str) -> Dict[str, Any]:
        """Live table map of a database"""
        key = self.resolve_database(db_name)
        if key is None:
            raise DatabaseNotFoundError(f"Database '{db_name}' does not exist.")
        return self._databases[key]

    def create_database(self, db_name: str):
        if self.database_exists(db_name):
            raise AlreadyExistsError(f"Database '{db_name}' already exists.")
        self._databases[db_name] = {}
        logger.info("Created database %s", db_name)

    def drop_database(self, db_name: str):
        key = self.resolve_database(db_name)
        if key is None:
            raise DatabaseNotFoundError(f"Database '{db_name}' does not exist.")
        del self._databases[key]
        logger.info("Dropped database %s", key)

    # Table operations
    def list_tables(self, db_name: str) -> List[str]:
        return list(self.get_database(db_name))

    def resolve_table(self, db_name: Optional[str], table_name: Optional[str]) -> Optional[str]:
        """Stored name of a table, matched case-insensitively"""
        db_key = self.resolve_database(db_name)
        if db_key is None:
            return None
        return _resolve_name(self._databases[db_key], table_name)

    def table_exists(self, db_name: str, table_name: str) -> bool:
        return self.resolve_table(db_name, table_name) is not None

    def get_table(self, db_name: str, table_name: str) -> Dict[str, Any]:
        """Live table; callers outside the engine should use get_snapshot"""
        tables = self.get_database(db_name)
        key = _resolve_name(tables, table_name)
        if key is None:
            raise TableNotFoundError(f"Table '{table_name}' not found.")
        return tables[key]

    def create_table(self, db_name: str, table: Dict[str, Any]):
        tables = self.get_database(db_name)
        if _resolve_name(tables, table['name']) is not None:
            raise AlreadyExistsError(f"Table '{table['name']}' already exists.")
        tables[table['name']] = table
        logger.info("Created table %s.%s", db_name, table['name'])

    def delete_table(self, db_name: str, table_name: str):
        """Delete a table and all its data"""
        tables = self.get_database(db_name)
        key = _resolve_name(tables, table_name)
        if key is None:
            raise TableNotFoundError(f"Table '{table_name}' does not exist.")
        del tables[key]
        logger.info("Dropped table %s.%s", db_name, key)

    def rename_table(self, db_name: str, old_name: str, new_name: str):
        tables = self.get_database(db_name)
        old_key = _resolve_name(tables, old_name)
        if old_key is None:
            raise TableNotFoundError(f"Table '{old_name}' does not exist.")
        # Changing only the case of a table's own name is allowed
        new_key = _resolve_name(tables, new_name)
        if new_key is not None and (new_key != old_key or new_name == old_key):
            raise AlreadyExistsError(f"Table '{new_name}' already exists.")
        table = tables.pop(old_key)
        table['name'] = new_name
        tables[new_name] = table
        logger.info("Renamed table %s.%s to %s", db_name, old_key, new_name)

    # Data operations
    def get_all_rows(self, db_name: str, table_name: str) -> List[Dict[str, Any]]:
        """Copy of a table's rows in insertion order"""
        return [dict(row) for row in self.get_table(db_name, table_name)['data']]

    @staticmethod
    def sync_row_count(table: Dict[str, Any]):
        """Keep the stored row count in line with the data"""
        table['rows'] = len(table['data'])

def _resolve_name(entries: Mapping[str, Any], name: Optional[str]) -> Optional[str]:
    """Exact key if present, else the first key equal ignoring case"""
    if name is None:
        return None
    if name in entries:
        return name
    folded = name.casefold()
    for key in entries:
        if key.casefold() == folded:
            return key
    return None
