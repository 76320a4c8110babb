"""
Query Executor for demodb
Runs parsed statements against the server state store
"""

import logging
import time
from typing import Dict, List, Any, Optional

from demodb.errors import (
    AlreadyExistsError, DemoDBError, DatabaseNotFoundError, NoDatabaseSelectedError,
    RowNotFoundError, TableNotFoundError,
)
from demodb.parser import (
    SQLParser, ParsedStatement, ShowDatabasesStatement, CreateDatabaseStatement,
    DropDatabaseStatement, UseStatement, ShowTablesStatement, CreateTableStatement,
    DropTableStatement, TruncateTableStatement, RenameTableStatement,
    AlterTableStatement, SelectStatement, InsertStatement, UpdateStatement,
    DeleteStatement,
)
from demodb.storage import ServerStore
from demodb.types import (
    AUTO_INCREMENT, ColumnDefinition, QueryResult, new_table, primary_key,
)

logger = logging.getLogger(__name__)

class QueryExecutor:
    """Executes demo-mode statements against a server store"""

    def __init__(self, store: ServerStore):
        self.store = store

    def execute(self, query: str, db_name: Optional[str] = None) -> QueryResult:
        """Execute one statement; errors come back as a failed result"""
        start_time = time.monotonic()

        def elapsed() -> int:
            return max(0, round((time.monotonic() - start_time) * 1000))

        try:
            parsed = SQLParser.parse(query)
            with self.store.lock:
                if parsed.requires_database and not self.store.database_exists(db_name):
                    raise NoDatabaseSelectedError()
                result = self._dispatch(parsed, db_name)
        except DemoDBError as e:
            logger.debug("Statement failed: %s", e)
            return QueryResult.failure(str(e), execution_time=elapsed())
        except Exception as e:
            logger.error("Query execution failed: %s", e, exc_info=True)
            return QueryResult.failure(f"Query execution failed: {str(e)}",
                                       execution_time=elapsed())

        result.execution_time = elapsed()
        return result

    def _dispatch(self, parsed: ParsedStatement, db_name: Optional[str]) -> QueryResult:
        if isinstance(parsed, ShowDatabasesStatement):
            return self._execute_show_databases()
        elif isinstance(parsed, CreateDatabaseStatement):
            return self._execute_create_database(parsed)
        elif isinstance(parsed, DropDatabaseStatement):
            return self._execute_drop_database(parsed)
        elif isinstance(parsed, UseStatement):
            return self._execute_use(parsed)
        elif isinstance(parsed, ShowTablesStatement):
            return self._execute_show_tables(db_name)
        elif isinstance(parsed, CreateTableStatement):
            return self._execute_create_table(parsed, db_name)
        elif isinstance(parsed, DropTableStatement):
            return self._execute_drop_table(parsed, db_name)
        elif isinstance(parsed, TruncateTableStatement):
            return self._execute_truncate_table(parsed, db_name)
        elif isinstance(parsed, RenameTableStatement):
            return self._execute_rename_table(parsed, db_name)
        elif isinstance(parsed, AlterTableStatement):
            return self._execute_alter_table(parsed, db_name)
        elif isinstance(parsed, SelectStatement):
            return self._execute_select(parsed, db_name)
        elif isinstance(parsed, InsertStatement):
            return self._execute_insert(parsed, db_name)
        elif isinstance(parsed, UpdateStatement):
            return self._execute_update(parsed, db_name)
        elif isinstance(parsed, DeleteStatement):
            return self._execute_delete(parsed, db_name)
        raise TypeError(f"Unsupported statement type: {type(parsed).__name__}")

    # Database level

    def _execute_show_databases(self) -> QueryResult:
        databases = self.store.list_databases()
        return QueryResult(
            success=True,
            data=[{'Database': db} for db in databases],
            columns=['Database'],
        )

    def _execute_create_database(self, stmt: CreateDatabaseStatement) -> QueryResult:
        self.store.create_database(stmt.database)
        return QueryResult(success=True, message=f"Database '{stmt.database}' created.")

    def _execute_drop_database(self, stmt: DropDatabaseStatement) -> QueryResult:
        self.store.drop_database(stmt.database)
        return QueryResult(success=True, message=f"Database '{stmt.database}' dropped.")

    def _execute_use(self, stmt: UseStatement) -> QueryResult:
        """Acknowledge USE; the session tracks the current database"""
        database = self.store.resolve_database(stmt.database)
        if database is None:
            raise DatabaseNotFoundError(f"Unknown database '{stmt.database}'")
        return QueryResult(success=True, message=f"Database changed to '{database}'.")

    # Table level

    def _execute_show_tables(self, db_name: str) -> QueryResult:
        col_name = f"Tables_in_{self.store.resolve_database(db_name)}"
        return QueryResult(
            success=True,
            data=[{col_name: t} for t in self.store.list_tables(db_name)],
            columns=[col_name],
        )

    def _execute_create_table(self, stmt: CreateTableStatement, db_name: str) -> QueryResult:
        self.store.create_table(db_name, new_table(stmt.table_name, stmt.columns))
        return QueryResult(success=True, message=f"Table '{stmt.table_name}' created.")

    def _execute_drop_table(self, stmt: DropTableStatement, db_name: str) -> QueryResult:
        self.store.delete_table(db_name, stmt.table_name)
        return QueryResult(success=True, message=f"Table '{stmt.table_name}' dropped.")

    def _execute_truncate_table(self, stmt: TruncateTableStatement, db_name: str) -> QueryResult:
        if not self.store.table_exists(db_name, stmt.table_name):
            raise TableNotFoundError(f"Table '{stmt.table_name}' does not exist.")
        table = self.store.get_table(db_name, stmt.table_name)
        table['data'] = []
        self.store.sync_row_count(table)
        return QueryResult(success=True, message=f"Table '{stmt.table_name}' has been truncated.")

    def _execute_rename_table(self, stmt: RenameTableStatement, db_name: str) -> QueryResult:
        self.store.rename_table(db_name, stmt.old_name, stmt.new_name)
        return QueryResult(
            success=True,
            message=f"Table '{stmt.old_name}' renamed to '{stmt.new_name}'.",
        )

    def _execute_alter_table(self, stmt: AlterTableStatement, db_name: str) -> QueryResult:
        table = self.store.get_table(db_name, stmt.table_name)
        col_name = stmt.column_name

        if stmt.action == 'DROP COLUMN':
            col_name = _column_key(table, col_name)
            table['schema'] = [c for c in table['schema'] if c['name'] != col_name]
            for row in table['data']:
                row.pop(col_name, None)
            return QueryResult(success=True, message=f"Column '{col_name}' dropped.")

        if any(c['name'].casefold() == col_name.casefold() for c in table['schema']):
            raise AlreadyExistsError(f"Column '{col_name}' already exists.")
        table['schema'].append(ColumnDefinition(name=col_name, type=stmt.column_type).to_dict())
        for row in table['data']:
            row[col_name] = None
        return QueryResult(success=True, message=f"Column '{col_name}' added.")

    # Row level

    def _execute_select(self, stmt: SelectStatement, db_name: str) -> QueryResult:
        """Execute SELECT with ORDER BY / LIMIT / OFFSET"""
        if not stmt.table_name or not self.store.table_exists(db_name, stmt.table_name):
            raise TableNotFoundError(f"Table not found in database '{db_name}'")

        table = self.store.get_table(db_name, stmt.table_name)
        rows = [dict(row) for row in table['data']]
        total_rows = len(rows)

        if stmt.order_by:
            order_by = _column_key(table, stmt.order_by)
            rows = self._apply_order_by(rows, order_by, stmt.descending)

        if stmt.limit is not None:
            rows = rows[stmt.offset:stmt.offset + stmt.limit]

        return QueryResult(
            success=True,
            data=rows,
            columns=[col['name'] for col in table['schema']],
            total_rows=total_rows,
        )

    def _apply_order_by(self, rows: List[Dict], column: str, descending: bool) -> List[Dict]:
        """Stable sort; NULLs first ascending, numeric text sorts as a number"""
        def sort_key(row):
            value = row.get(column)
            if value is None:
                return (0, 0, '')
            number = _as_number(value)
            if number is not None:
                return (1, 0, number)
            return (1, 1, str(value))

        return sorted(rows, key=sort_key, reverse=descending)

    def _execute_insert(self, stmt: InsertStatement, db_name: str) -> QueryResult:
        if not self.store.table_exists(db_name, stmt.table_name):
            raise TableNotFoundError(f"Table '{stmt.table_name}' not found.")
        table = self.store.get_table(db_name, stmt.table_name)

        if stmt.columns is not None:
            columns = stmt.columns
        else:
            columns = [c['name'] for c in table['schema'] if c.get('extra') != AUTO_INCREMENT]

        row = {}
        pk = primary_key(table)
        if pk and pk.get('extra') == AUTO_INCREMENT and pk['name'] not in columns:
            row[pk['name']] = self._next_auto_increment(table['data'], pk['name'])

        for i, col in enumerate(columns):
            row[col] = stmt.values[i] if i < len(stmt.values) else None

        table['data'].append(row)
        self.store.sync_row_count(table)
        return QueryResult(success=True, message='1 row inserted.', rows_affected=1)

    @staticmethod
    def _next_auto_increment(rows: List[Dict], pk_name: str) -> int:
        max_id = 0
        for row in rows:
            value = _as_number(row.get(pk_name))
            if value is not None and value > max_id:
                max_id = value
        return int(max_id) + 1

    def _execute_update(self, stmt: UpdateStatement, db_name: str) -> QueryResult:
        """Apply the assignments to the first row matching the predicate"""
        if not self.store.table_exists(db_name, stmt.table_name):
            raise TableNotFoundError("Table not found")
        table = self.store.get_table(db_name, stmt.table_name)

        for row in table['data']:
            if stmt.where_column in row and _loose_equals(row[stmt.where_column], stmt.where_value):
                row.update(stmt.assignments)
                return QueryResult(success=True, message='1 row updated.', rows_affected=1)

        raise RowNotFoundError("Row not found")

    def _execute_delete(self, stmt: DeleteStatement, db_name: str) -> QueryResult:
        if not self.store.table_exists(db_name, stmt.table_name):
            raise TableNotFoundError(f"Table '{stmt.table_name}' not found.")
        table = self.store.get_table(db_name, stmt.table_name)

        column = _column_key(table, stmt.column)
        initial_count = len(table['data'])
        table['data'] = [
            row for row in table['data']
            if not any(_loose_equals(row.get(column), i) for i in stmt.ids)
        ]
        rows_affected = initial_count - len(table['data'])
        self.store.sync_row_count(table)

        return QueryResult(
            success=True,
            message=f"{rows_affected} row(s) deleted.",
            rows_affected=rows_affected,
        )

def _column_key(table: Dict[str, Any], name: str) -> str:
    """Schema spelling of a column name, matched case-insensitively"""
    for col in table['schema']:
        if col['name'] == name:
            return name
    for col in table['schema']:
        if col['name'].casefold() == name.casefold():
            return col['name']
    return name

def _as_number(value: Any) -> Optional[float]:
    """Numeric view of a stored value, None when it has none"""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(str(value).strip())
    except ValueError:
        return None

def _loose_equals(row_value: Any, literal: Any) -> bool:
    """Compare numerically when both sides are numeric, else by string form"""
    if row_value is None or literal is None:
        return row_value is None and literal is None
    left, right = _as_number(row_value), _as_number(literal)
    if left is not None and right is not None:
        return left == right
    return str(row_value) == str(literal)
