"""
Type definitions and data structures for demodb
"""

from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
from enum import Enum

AUTO_INCREMENT = "AUTO_INCREMENT"
DEFAULT_ENGINE = "InnoDB"
DEFAULT_COLLATION = "utf8mb4_unicode_ci"

class KeyKind(Enum):
    """Column key kinds, labelled the way SHOW COLUMNS reports them"""
    PRIMARY = "PRI"
    UNIQUE = "UNI"
    MULTI = "MUL"
    NONE = ""

@dataclass
class ForeignKeyRef:
    """Advisory reference to another table's column (never enforced)"""
    table: str
    column: str

@dataclass
class ColumnDefinition:
    """Column definition for table schema"""
    name: str
    type: str
    nullable: bool = True
    key: KeyKind = KeyKind.NONE
    default: Optional[str] = None
    extra: str = ""
    references: Optional[ForeignKeyRef] = None

    @property
    def auto_increment(self) -> bool:
        return self.extra.upper() == AUTO_INCREMENT

    def __str__(self) -> str:
        parts = [self.name, self.type]
        if not self.nullable:
            parts.append("NOT NULL")
        if self.key is KeyKind.PRIMARY:
            parts.append("PRIMARY KEY")
        elif self.key is KeyKind.UNIQUE:
            parts.append("UNIQUE")
        if self.default is not None:
            parts.append(f"DEFAULT '{self.default}'")
        if self.extra:
            parts.append(self.extra)
        return ' '.join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON-shaped column stored in the server"""
        column = {
            'name': self.name,
            'type': self.type,
            'null': self.nullable,
            'key': self.key.value,
            'default': self.default,
            'extra': self.extra,
        }
        if self.references:
            column['references'] = {
                'table': self.references.table,
                'column': self.references.column,
            }
        return column

def new_table(name: str, columns: List[ColumnDefinition],
              engine: str = DEFAULT_ENGINE,
              collation: str = DEFAULT_COLLATION) -> Dict[str, Any]:
    """Build an empty JSON-shaped table"""
    return {
        'name': name,
        'rows': 0,
        'engine': engine,
        'collation': collation,
        'schema': [col.to_dict() for col in columns],
        'data': [],
    }

def primary_key(table: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Return the primary key column of a table, if any"""
    for col in table['schema']:
        if col.get('key') == KeyKind.PRIMARY.value:
            return col
    return None

# Wire names of the optional QueryResult fields
_WIRE_FIELDS = {
    'data': 'data',
    'columns': 'columns',
    'message': 'message',
    'error': 'error',
    'rows_affected': 'rowsAffected',
    'execution_time': 'executionTime',
    'total_rows': 'totalRows',
}

@dataclass
class QueryResult:
    """Standardized query result"""
    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    columns: Optional[List[str]] = None
    message: Optional[str] = None
    error: Optional[str] = None
    rows_affected: Optional[int] = None
    execution_time: Optional[int] = None
    total_rows: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API-friendly dictionary, omitting unset fields"""
        result = {'success': self.success}
        for attr, wire_name in _WIRE_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                result[wire_name] = value
        return result

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "QueryResult":
        """Build a result from the wire shape returned by a backend"""
        kwargs = {
            attr: payload.get(wire_name)
            for attr, wire_name in _WIRE_FIELDS.items()
        }
        return cls(success=bool(payload.get('success', False)), **kwargs)

    @classmethod
    def failure(cls, error: str, execution_time: Optional[int] = None) -> "QueryResult":
        return cls(success=False, error=error, execution_time=execution_time)

@dataclass
class DatabaseConnection:
    """Connection parameters sent by the SQL client"""
    host: str = "localhost"
    port: int = 3306
    username: str = "root"
    password: str = ""
    database: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'host': self.host,
            'port': self.port,
            'username': self.username,
            'password': self.password,
            'database': self.database,
        }

    def with_database(self, database: Optional[str]) -> "DatabaseConnection":
        return DatabaseConnection(self.host, self.port, self.username,
                                  self.password, database)

@dataclass
class ConnectionStatus:
    """Outcome of a connection attempt"""
    connected: bool
    message: Optional[str] = None
    error: Optional[str] = None
    databases: List[str] = field(default_factory=list)
