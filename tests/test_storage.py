"""Tests for the server state store and structural cloning."""

from datetime import date, datetime

import pytest

from demodb.clone import clone_deep
from demodb.errors import AlreadyExistsError, DatabaseNotFoundError, TableNotFoundError
from demodb.query_executor import QueryExecutor
from demodb.seed import SEED_SERVER
from demodb.storage import ServerStore


def test_seed_shape():
    assert list(SEED_SERVER) == ['demo_db', 'company_db', 'system_db']
    for tables in SEED_SERVER.values():
        for name, table in tables.items():
            assert table['name'] == name
            assert table['rows'] == len(table['data'])
            primary = [c for c in table['schema'] if c['key'] == 'PRI']
            assert len(primary) == 1

    employees = SEED_SERVER['company_db']['employees']
    department = employees['schema'][3]
    assert department['key'] == 'MUL'
    assert department['references'] == {'table': 'departments', 'column': 'dept_id'}
    assert SEED_SERVER['system_db']['logs']['engine'] == 'MyISAM'


def test_snapshot_is_detached(store):
    snapshot = store.get_snapshot()
    snapshot['demo_db']['users']['data'][0]['name'] = 'Changed'
    del snapshot['company_db']

    fresh = store.get_snapshot()
    assert fresh['demo_db']['users']['data'][0]['name'] == 'John Doe'
    assert 'company_db' in fresh


def test_reset_restores_seed(store):
    executor = QueryExecutor(store)
    untouched = QueryExecutor(ServerStore())
    query = 'SELECT * FROM users ORDER BY id ASC'

    executor.execute("INSERT INTO users (name, email) VALUES ('Eve', 'eve@example.com')", 'demo_db')
    executor.execute('DROP DATABASE company_db')
    store.reset()

    assert store.list_databases() == ['demo_db', 'company_db', 'system_db']
    after = executor.execute(query, 'demo_db')
    expected = untouched.execute(query, 'demo_db')
    assert after.data == expected.data
    assert after.columns == expected.columns
    assert after.total_rows == expected.total_rows


def test_reset_does_not_share_structure_with_seed(store):
    store.get_table('demo_db', 'users')['data'].clear()
    store.reset()
    assert len(SEED_SERVER['demo_db']['users']['data']) == 5
    assert len(store.get_table('demo_db', 'users')['data']) == 5


def test_store_errors(store):
    with pytest.raises(AlreadyExistsError):
        store.create_database('demo_db')
    with pytest.raises(DatabaseNotFoundError):
        store.list_tables('ghost_db')
    with pytest.raises(TableNotFoundError):
        store.get_table('demo_db', 'ghost')


def test_rename_table_is_a_single_move(store):
    store.rename_table('demo_db', 'users', 'people')
    assert store.list_tables('demo_db') == ['products', 'people']
    assert store.get_table('demo_db', 'people')['name'] == 'people'


def test_names_resolve_case_insensitively(store):
    assert store.resolve_database('DEMO_DB') == 'demo_db'
    assert store.resolve_table('Demo_Db', 'USERS') == 'users'
    assert store.resolve_table('ghost_db', 'users') is None
    assert store.get_table('DEMO_DB', 'Users')['name'] == 'users'
    store.drop_database('SYSTEM_DB')
    assert store.list_databases() == ['demo_db', 'company_db']


class TestCloneDeep:

    def test_nested_structures(self):
        original = {'a': [1, {'b': 'x'}], 'c': (1, [2])}
        copy = clone_deep(original)
        assert copy == original
        copy['a'][1]['b'] = 'y'
        copy['c'][1].append(3)
        assert original['a'][1]['b'] == 'x'
        assert original['c'][1] == [2]

    def test_dates(self):
        stamp = datetime(2025, 1, 15, 10, 30)
        day = date(2025, 1, 15)
        copy = clone_deep({'at': stamp, 'on': day})
        assert copy['at'] == stamp
        assert copy['on'] == day
        assert isinstance(copy['at'], datetime)

    def test_scalars(self):
        assert clone_deep(None) is None
        assert clone_deep(3.5) == 3.5
        assert clone_deep('text') == 'text'
