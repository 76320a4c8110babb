"""Tests for statement recognition and literal parsing."""

import pytest

from demodb.errors import UnsupportedStatementError
from demodb.parser import (
    SQLParser, AlterTableStatement, CreateDatabaseStatement, CreateTableStatement,
    DeleteStatement, InsertStatement, RenameTableStatement, SelectStatement,
    ShowDatabasesStatement, UpdateStatement, UseStatement, normalize,
)
from demodb.types import KeyKind


class TestClassification:

    @pytest.mark.parametrize('query, statement_type', [
        ('show databases', ShowDatabasesStatement),
        ('CREATE DATABASE `shop`;', CreateDatabaseStatement),
        ('Use company_db', UseStatement),
        ('RENAME TABLE a TO b', RenameTableStatement),
        ('select name from users', SelectStatement),
        ("DELETE FROM users WHERE id IN (1,2)", DeleteStatement),
    ])
    def test_shapes(self, query, statement_type):
        assert isinstance(SQLParser.parse(query), statement_type)

    def test_identifier_case_is_preserved(self):
        statement = SQLParser.parse('DROP DATABASE MyData')
        assert statement.database == 'MyData'

    def test_unknown_statement(self):
        with pytest.raises(UnsupportedStatementError) as exc:
            SQLParser.parse('  VACUUM FULL;  ')
        assert exc.value.statement == 'vacuum full'

    def test_alter_without_supported_action(self):
        with pytest.raises(UnsupportedStatementError):
            SQLParser.parse('ALTER TABLE users RENAME COLUMN a TO b')

    def test_show_databases_must_be_exact(self):
        with pytest.raises(UnsupportedStatementError):
            SQLParser.parse('SHOW DATABASES LIKE x')

    @pytest.mark.parametrize('query', [
        'DROP TABLE users junk',
        'CREATE DATABASE shop extra',
        'USE demo_db now',
        'TRUNCATE TABLE users please',
        'RENAME TABLE a TO b c',
        'SHOW TABLES FROM demo_db',
        'DELETE FROM users WHERE id IN (1) OR 1',
    ])
    def test_trailing_text_is_rejected(self, query):
        with pytest.raises(UnsupportedStatementError):
            SQLParser.parse(query)

    def test_trailing_whitespace_before_semicolon(self):
        assert isinstance(SQLParser.parse('USE demo_db  ;'), UseStatement)

    def test_normalize(self):
        assert normalize('  SELECT * FROM Users;  ') == 'select * from users'


class TestSelectClauses:

    def test_defaults(self):
        statement = SQLParser.parse('SELECT * FROM users')
        assert statement.table_name == 'users'
        assert statement.order_by is None
        assert statement.limit is None
        assert statement.offset == 0

    def test_order_limit_offset(self):
        statement = SQLParser.parse('select * from `users` order by `name` desc limit 5 offset 10')
        assert statement.order_by == 'name'
        assert statement.descending is True
        assert statement.limit == 5
        assert statement.offset == 10

    def test_without_from(self):
        assert SQLParser.parse('SELECT 1').table_name is None


class TestInsertAndUpdate:

    def test_insert_literals(self):
        statement = SQLParser.parse("INSERT INTO t (a, `b`, c, d, e) VALUES ('x, y', 42, 1.5, NULL, 'it''s')")
        assert isinstance(statement, InsertStatement)
        assert statement.columns == ['a', 'b', 'c', 'd', 'e']
        assert statement.values == ['x, y', 42, 1.5, None, "it's"]

    def test_insert_without_columns(self):
        statement = SQLParser.parse("insert into t values ('a')")
        assert statement.columns is None
        assert statement.values == ['a']

    def test_insert_takes_first_tuple(self):
        statement = SQLParser.parse("INSERT INTO t (a, b) VALUES ('A', 1), ('B', 2)")
        assert statement.values == ['A', 1]

    def test_insert_tuple_with_parenthesis_in_quotes(self):
        statement = SQLParser.parse("INSERT INTO t VALUES ('f(x)', 'a)b')")
        assert statement.values == ['f(x)', 'a)b']

    def test_insert_unbalanced_values(self):
        with pytest.raises(UnsupportedStatementError):
            SQLParser.parse("INSERT INTO t VALUES ('a', (1)")

    def test_leading_group(self):
        assert SQLParser.leading_group(" (1, (2)), (3)") == '1, (2)'
        assert SQLParser.leading_group('1, 2') is None

    def test_update_assignments(self):
        statement = SQLParser.parse("UPDATE t SET a = '7', b = 'seven', c = NULL WHERE id = '3'")
        assert isinstance(statement, UpdateStatement)
        assert statement.assignments == {'a': 7, 'b': 'seven', 'c': None}
        assert statement.where_column == 'id'
        assert statement.where_value == 3

    def test_delete_ids_are_integer_parsed(self):
        statement = SQLParser.parse("DELETE FROM t WHERE id IN ('4', 5.9, x)")
        assert statement.ids == [4, 5]


class TestColumnDefinitions:

    def test_nested_commas(self):
        columns = SQLParser.parse_column_definitions('price decimal(10, 2) NOT NULL, qty int')
        assert [c.name for c in columns] == ['price', 'qty']
        assert columns[0].type == 'decimal(10, 2)'
        assert columns[0].nullable is False

    def test_single_primary_key(self):
        columns = SQLParser.parse_column_definitions(
            'a INT PRIMARY KEY, b INT PRIMARY KEY UNIQUE, c INT PRIMARY KEY')
        assert [c.key for c in columns] == [KeyKind.PRIMARY, KeyKind.UNIQUE, KeyKind.NONE]

    def test_table_level_constraints(self):
        columns = SQLParser.parse_column_definitions(
            "id INT AUTO_INCREMENT, dept INT, email VARCHAR(50), "
            "PRIMARY KEY (`id`), UNIQUE KEY uq_email (email), "
            "FOREIGN KEY (dept) REFERENCES departments(dept_id)")
        by_name = {c.name: c for c in columns}
        assert list(by_name) == ['id', 'dept', 'email']
        assert by_name['id'].key is KeyKind.PRIMARY
        assert by_name['id'].auto_increment
        assert by_name['email'].key is KeyKind.UNIQUE
        assert by_name['dept'].key is KeyKind.MULTI
        assert by_name['dept'].references.table == 'departments'
        assert by_name['dept'].references.column == 'dept_id'

    def test_defaults(self):
        columns = SQLParser.parse_column_definitions(
            "a INT DEFAULT '5', b TIMESTAMP DEFAULT CURRENT_TIMESTAMP, c INT DEFAULT NULL")
        assert [c.default for c in columns] == ['5', 'CURRENT_TIMESTAMP', None]

    def test_create_table_statement(self):
        statement = SQLParser.parse('CREATE TABLE `Logs` (id BIGINT(20), msg TEXT)')
        assert isinstance(statement, CreateTableStatement)
        assert statement.table_name == 'Logs'
        assert [str(c) for c in statement.columns] == ['id BIGINT(20)', 'msg TEXT']

    def test_alter_add_column_type(self):
        statement = SQLParser.parse('ALTER TABLE t ADD COLUMN price DECIMAL(8,2)')
        assert isinstance(statement, AlterTableStatement)
        assert statement.action == 'ADD COLUMN'
        assert statement.column_type == 'DECIMAL(8,2)'
