"""
Statement parser for demodb
Classifies a raw statement by surface pattern and extracts its payload
"""

import logging
import re
from dataclasses import dataclass, field
from re import Match, Pattern
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple

from demodb.errors import UnsupportedStatementError
from demodb.types import AUTO_INCREMENT, ColumnDefinition, ForeignKeyRef, KeyKind

logger = logging.getLogger(__name__)

# Optionally backticked identifier
_IDENT = r'`?(\w+)`?'
_END = r'\s*$'
_NUMBER_RE = re.compile(r'^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$')
_INT_RE = re.compile(r'^[+-]?\d+$')
_LEADING_INT_RE = re.compile(r'^\s*([+-]?\d+)')

@dataclass
class ParsedStatement:
    """Base class for parsed statements"""
    query_type: str
    requires_database: ClassVar[bool] = True

@dataclass
class ShowDatabasesStatement(ParsedStatement):
    requires_database: ClassVar[bool] = False

@dataclass
class CreateDatabaseStatement(ParsedStatement):
    database: str
    requires_database: ClassVar[bool] = False

@dataclass
class DropDatabaseStatement(ParsedStatement):
    database: str
    requires_database: ClassVar[bool] = False

@dataclass
class UseStatement(ParsedStatement):
    database: str
    requires_database: ClassVar[bool] = False

@dataclass
class ShowTablesStatement(ParsedStatement):
    pass

@dataclass
class CreateTableStatement(ParsedStatement):
    """Parsed CREATE TABLE statement"""
    table_name: str
    columns: List[ColumnDefinition]

@dataclass
class DropTableStatement(ParsedStatement):
    table_name: str

@dataclass
class TruncateTableStatement(ParsedStatement):
    table_name: str

@dataclass
class RenameTableStatement(ParsedStatement):
    old_name: str
    new_name: str

@dataclass
class AlterTableStatement(ParsedStatement):
    """Parsed ALTER TABLE ... DROP COLUMN / ADD COLUMN"""
    table_name: str
    action: str
    column_name: str
    column_type: Optional[str] = None

@dataclass
class SelectStatement(ParsedStatement):
    """Parsed SELECT; only the source table and ordering/paging are honoured"""
    table_name: Optional[str]
    order_by: Optional[str] = None
    descending: bool = False
    limit: Optional[int] = None
    offset: int = 0

@dataclass
class InsertStatement(ParsedStatement):
    """Parsed INSERT statement"""
    table_name: str
    columns: Optional[List[str]]
    values: List[Any]

@dataclass
class UpdateStatement(ParsedStatement):
    """Parsed UPDATE with a single equality predicate"""
    table_name: str
    assignments: Dict[str, Any]
    where_column: str
    where_value: Any

@dataclass
class DeleteStatement(ParsedStatement):
    """Parsed DELETE ... WHERE col IN (...)"""
    table_name: str
    column: str
    ids: List[int] = field(default_factory=list)

def strip_statement(query: str) -> str:
    """Trim whitespace and a single trailing semicolon"""
    text = query.strip()
    if text.endswith(';'):
        text = text[:-1].rstrip()
    return text

def normalize(query: str) -> str:
    """Lower-cased, trimmed form used for keyword matching"""
    return strip_statement(query).lower()

class SQLParser:
    """Recognizes the statement shapes supported in demo mode"""

    @staticmethod
    def parse(query: str) -> ParsedStatement:
        """Try each statement shape in priority order; first match wins"""
        text = strip_statement(query)
        for pattern, build in STATEMENT_SHAPES:
            match = pattern.match(text)
            if match:
                statement = build(match)
                if statement is not None:
                    logger.debug("Parsed %s statement", statement.query_type)
                    return statement
        raise UnsupportedStatementError(normalize(query))

    @staticmethod
    def split_values(values_text: str) -> List[str]:
        """Split on commas outside quotes and parentheses"""
        values = []
        current = ''
        quote = None
        paren_depth = 0

        for char in values_text:
            if quote:
                if char == quote:
                    quote = None
                current += char
            elif char in ("'", '"'):
                quote = char
                current += char
            elif char == '(':
                paren_depth += 1
                current += char
            elif char == ')':
                paren_depth -= 1
                current += char
            elif char == ',' and paren_depth == 0:
                values.append(current.strip())
                current = ''
            else:
                current += char

        if current.strip():
            values.append(current.strip())

        return values

    @staticmethod
    def leading_group(text: str) -> Optional[str]:
        """Body of the parenthesized group that opens text, None if unbalanced"""
        text = text.lstrip()
        if not text.startswith('('):
            return None
        quote = None
        depth = 0
        for i, char in enumerate(text):
            if quote:
                if char == quote:
                    quote = None
            elif char in ("'", '"'):
                quote = char
            elif char == '(':
                depth += 1
            elif char == ')':
                depth -= 1
                if depth == 0:
                    return text[1:i]
        return None

    @staticmethod
    def unquote(value_str: str) -> Tuple[str, bool]:
        """Remove surrounding quotes; report whether any were present"""
        value_str = value_str.strip()
        if len(value_str) >= 2 and value_str[0] == value_str[-1] and value_str[0] in ("'", '"'):
            quote = value_str[0]
            return value_str[1:-1].replace(quote * 2, quote), True
        return value_str, False

    @staticmethod
    def parse_value(value_str: str) -> Any:
        """Parse a single INSERT literal"""
        text, quoted = SQLParser.unquote(value_str)
        if quoted:
            return text
        if not text or text.upper() == 'NULL':
            return None
        return coerce_number(text)

    @staticmethod
    def parse_assignment_value(value_str: str) -> Any:
        """Parse an UPDATE literal; quoted numbers become numbers too"""
        text, quoted = SQLParser.unquote(value_str)
        if not quoted and text.upper() == 'NULL':
            return None
        return coerce_number(text)

    @staticmethod
    def parse_column_definitions(body: str) -> List[ColumnDefinition]:
        """Derive a schema from the parenthesized body of CREATE TABLE"""
        pk_match = re.search(r'primary\s+key\s*\(([^)]*)\)', body, re.IGNORECASE)
        primary_key = None
        if pk_match:
            pk_columns = [c.strip().strip('`') for c in pk_match.group(1).split(',')]
            primary_key = pk_columns[0] or None

        columns: List[ColumnDefinition] = []
        constraints: List[str] = []
        has_primary = False

        for col_def in re.split(r',\s*(?![^()]*\))', body):
            col_def = col_def.strip()
            if not col_def:
                continue
            if _TABLE_CONSTRAINT_RE.match(col_def):
                constraints.append(col_def)
                continue

            match = _COLUMN_RE.match(col_def)
            if not match:
                logger.debug("Skipping malformed column definition: %r", col_def)
                continue

            name, col_type, rest = match.group(1), match.group(2), match.group(3)
            is_unique = re.search(r'\bunique\b', rest, re.IGNORECASE) is not None

            key = KeyKind.NONE
            wants_primary = name == primary_key or \
                re.search(r'\bprimary\s+key\b', rest, re.IGNORECASE) is not None
            if wants_primary and not has_primary:
                key = KeyKind.PRIMARY
                has_primary = True
            elif is_unique:
                key = KeyKind.UNIQUE

            default = None
            default_match = re.search(r"\bdefault\s+(?:'([^']*)'|(\S+))", rest, re.IGNORECASE)
            if default_match:
                default = default_match.group(1)
                if default is None and default_match.group(2).upper() != 'NULL':
                    default = default_match.group(2)

            references = None
            ref_match = _REFERENCES_RE.search(rest)
            if ref_match:
                references = ForeignKeyRef(ref_match.group(1), ref_match.group(2))

            columns.append(ColumnDefinition(
                name=name,
                type=col_type,
                nullable=re.search(r'\bnot\s+null\b', rest, re.IGNORECASE) is None,
                key=key,
                default=default,
                extra=AUTO_INCREMENT if re.search(r'\bauto_increment\b', rest, re.IGNORECASE) else '',
                references=references,
            ))

        SQLParser._apply_table_constraints(columns, constraints)
        return columns

    @staticmethod
    def _apply_table_constraints(columns: List[ColumnDefinition], constraints: List[str]):
        """Apply UNIQUE / KEY / FOREIGN KEY clauses listed after the columns"""
        by_name = {col.name: col for col in columns}
        for clause in constraints:
            target = re.search(r'\(\s*`?(\w+)`?', clause)
            col = by_name.get(target.group(1)) if target else None
            if col is None or col.key is KeyKind.PRIMARY:
                continue
            upper = clause.upper()
            if re.search(r'\bFOREIGN\s+KEY\b', upper):
                ref_match = _REFERENCES_RE.search(clause)
                if ref_match:
                    col.references = ForeignKeyRef(ref_match.group(1), ref_match.group(2))
                if col.key is KeyKind.NONE:
                    col.key = KeyKind.MULTI
            elif re.search(r'\bUNIQUE\b', upper):
                col.key = KeyKind.UNIQUE
            elif col.key is KeyKind.NONE:
                col.key = KeyKind.MULTI

def coerce_number(text: str) -> Any:
    """Numeric-looking text becomes int/float, anything else stays a string"""
    if _INT_RE.match(text):
        return int(text)
    if _NUMBER_RE.match(text):
        return float(text)
    return text

def parse_int_prefix(text: str) -> Optional[int]:
    """Leading integer of a token, None when there is none"""
    match = _LEADING_INT_RE.match(text)
    return int(match.group(1)) if match else None

_COLUMN_RE = re.compile(r'^`?(\w+)`?\s+(\w+(?:\s*\([^)]*\))?(?:\s+unsigned)?)(.*)$',
                        re.IGNORECASE | re.DOTALL)
_TABLE_CONSTRAINT_RE = re.compile(
    r'^(?:primary\s+key|unique\s+(?:key|index)\b|unique\s*\(|key\b|index\b|'
    r'constraint\b|foreign\s+key)', re.IGNORECASE)
_REFERENCES_RE = re.compile(r'\breferences\s+`?(\w+)`?\s*\(\s*`?(\w+)`?', re.IGNORECASE)

# Statement builders, one per shape

def _show_databases(match: Match) -> ParsedStatement:
    return ShowDatabasesStatement('SHOW_DATABASES')

def _create_database(match: Match) -> ParsedStatement:
    return CreateDatabaseStatement('CREATE_DATABASE', match.group(1))

def _drop_database(match: Match) -> ParsedStatement:
    return DropDatabaseStatement('DROP_DATABASE', match.group(1))

def _use(match: Match) -> ParsedStatement:
    return UseStatement('USE', match.group(1))

def _show_tables(match: Match) -> ParsedStatement:
    return ShowTablesStatement('SHOW_TABLES')

def _create_table(match: Match) -> ParsedStatement:
    return CreateTableStatement(
        'CREATE_TABLE', match.group(1),
        SQLParser.parse_column_definitions(match.group(2)),
    )

def _drop_table(match: Match) -> ParsedStatement:
    return DropTableStatement('DROP_TABLE', match.group(1))

def _truncate_table(match: Match) -> ParsedStatement:
    return TruncateTableStatement('TRUNCATE_TABLE', match.group(1))

def _rename_table(match: Match) -> ParsedStatement:
    return RenameTableStatement('RENAME_TABLE', match.group(1), match.group(2))

def _alter_table(match: Match) -> Optional[ParsedStatement]:
    table_name, action = match.group(1), match.group(2)
    drop_match = re.search(r'\bdrop\s+column\s+' + _IDENT, action, re.IGNORECASE)
    if drop_match:
        return AlterTableStatement('ALTER_TABLE', table_name, 'DROP COLUMN', drop_match.group(1))
    add_match = re.search(r'\badd\s+column\s+' + _IDENT + r'\s+(\w+(?:\s*\([^)]*\))?)',
                          action, re.IGNORECASE)
    if add_match:
        return AlterTableStatement('ALTER_TABLE', table_name, 'ADD COLUMN',
                                   add_match.group(1), add_match.group(2))
    return None

def _select(match: Match) -> ParsedStatement:
    text = match.string
    from_match = re.search(r'\bfrom\s+' + _IDENT, text, re.IGNORECASE)
    statement = SelectStatement('SELECT', from_match.group(1) if from_match else None)

    order_match = re.search(r'\border\s+by\s+' + _IDENT + r'(?:\s+(asc|desc)\b)?', text, re.IGNORECASE)
    if order_match:
        statement.order_by = order_match.group(1)
        statement.descending = (order_match.group(2) or '').lower() == 'desc'

    limit_match = re.search(r'\blimit\s+(\d+)(?:\s*,\s*(\d+))?', text, re.IGNORECASE)
    if limit_match:
        if limit_match.group(2) is not None:
            # MySQL form: LIMIT offset, count
            statement.offset = int(limit_match.group(1))
            statement.limit = int(limit_match.group(2))
        else:
            statement.limit = int(limit_match.group(1))
            offset_match = re.search(r'\boffset\s+(\d+)', text, re.IGNORECASE)
            if offset_match:
                statement.offset = int(offset_match.group(1))
    return statement

def _insert(match: Match) -> Optional[ParsedStatement]:
    columns = None
    if match.group(2) is not None:
        columns = [c.strip().strip('`') for c in match.group(2).split(',') if c.strip()]
    # Only the first tuple of a multi-row VALUES list is inserted
    body = SQLParser.leading_group(match.group(3))
    if body is None:
        return None
    values = [SQLParser.parse_value(v) for v in SQLParser.split_values(body)]
    return InsertStatement('INSERT', match.group(1), columns, values)

def _update(match: Match) -> ParsedStatement:
    assignments = {}
    for clause in SQLParser.split_values(match.group(2)):
        if '=' not in clause:
            continue
        col, value = clause.split('=', 1)
        assignments[col.strip().strip('`')] = SQLParser.parse_assignment_value(value)
    return UpdateStatement(
        'UPDATE', match.group(1), assignments, match.group(3),
        SQLParser.parse_assignment_value(match.group(4)),
    )

def _delete(match: Match) -> ParsedStatement:
    ids = []
    for token in match.group(3).split(','):
        parsed = parse_int_prefix(SQLParser.unquote(token)[0])
        if parsed is not None:
            ids.append(parsed)
    return DeleteStatement('DELETE', match.group(1), match.group(2), ids)

def _shape(pattern: str, flags: int = 0) -> Pattern:
    return re.compile(pattern, re.IGNORECASE | flags)

# Priority order; keyword prefixes keep the shapes mutually exclusive
STATEMENT_SHAPES: List[Tuple[Pattern, Callable[[Match], Optional[ParsedStatement]]]] = [
    (_shape(r'^show\s+databases$'), _show_databases),
    (_shape(r'^create\s+database\s+' + _IDENT + _END), _create_database),
    (_shape(r'^drop\s+database\s+' + _IDENT + _END), _drop_database),
    (_shape(r'^use\s+' + _IDENT + _END), _use),
    (_shape(r'^show\s+tables' + _END), _show_tables),
    (_shape(r'^create\s+table\s+' + _IDENT + r'\s*\((.+)\)' + _END, re.DOTALL), _create_table),
    (_shape(r'^drop\s+table\s+' + _IDENT + _END), _drop_table),
    (_shape(r'^truncate\s+table\s+' + _IDENT + _END), _truncate_table),
    (_shape(r'^rename\s+table\s+' + _IDENT + r'\s+to\s+' + _IDENT + _END), _rename_table),
    (_shape(r'^alter\s+table\s+' + _IDENT + r'(.*)$', re.DOTALL), _alter_table),
    (_shape(r'^select\b'), _select),
    (_shape(r'^insert\s+into\s+' + _IDENT + r'\s*(?:\(([^)]*)\))?\s*values\s*(\(.*\))' + _END,
            re.DOTALL), _insert),
    (_shape(r'^update\s+' + _IDENT + r'\s+set\s+(.+)\s+where\s+' + _IDENT + r'\s*=\s*(.+)$',
            re.DOTALL), _update),
    (_shape(r'^delete\s+from\s+' + _IDENT + r'\s+where\s+' + _IDENT + r'\s+in\s*\(([^)]*)\)' + _END),
     _delete),
]
