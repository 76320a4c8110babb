"""
demodb - mock SQL server engine for the SQL client's demo mode
"""

from demodb.parser import SQLParser
from demodb.query_executor import QueryExecutor
from demodb.session import DemoSession, split_statements
from demodb.storage import ServerStore
from demodb.types import (
    ColumnDefinition, ConnectionStatus, DatabaseConnection, KeyKind, QueryResult,
)
from demodb.errors import (
    DemoDBError, ParseError, UnsupportedStatementError, NotFoundError,
    AlreadyExistsError, NoDatabaseSelectedError,
)

__version__ = "1.0.0"

__all__ = [
    'SQLParser',
    'QueryExecutor',
    'DemoSession',
    'split_statements',
    'ServerStore',
    'ColumnDefinition',
    'ConnectionStatus',
    'DatabaseConnection',
    'KeyKind',
    'QueryResult',
    'DemoDBError',
    'ParseError',
    'UnsupportedStatementError',
    'NotFoundError',
    'AlreadyExistsError',
    'NoDatabaseSelectedError',
]
