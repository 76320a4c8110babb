"""
Seed snapshot for the demo server

Three example databases with explicit schemas and sample rows. The store
never hands this structure out directly; it is always deep-copied first.
"""

from types import MappingProxyType
from typing import Any, Dict

def _col(name, type_, null=False, key='', default=None, extra='', references=None):
    column = {
        'name': name,
        'type': type_,
        'null': null,
        'key': key,
        'default': default,
        'extra': extra,
    }
    if references:
        column['references'] = references
    return column

def _table(name, schema, data, engine='InnoDB', collation='utf8mb4_unicode_ci'):
    return {
        'name': name,
        'rows': len(data),
        'engine': engine,
        'collation': collation,
        'schema': schema,
        'data': data,
    }

_SEED: Dict[str, Dict[str, Any]] = {
    'demo_db': {
        'users': _table('users', [
            _col('id', 'int(11)', key='PRI', extra='AUTO_INCREMENT'),
            _col('name', 'varchar(255)'),
            _col('email', 'varchar(255)', key='UNI'),
            _col('created_at', 'timestamp', null=True, default='CURRENT_TIMESTAMP'),
        ], [
            {'id': 1, 'name': 'John Doe', 'email': 'john@example.com', 'created_at': '2025-01-15 10:30:00'},
            {'id': 2, 'name': 'Jane Smith', 'email': 'jane@example.com', 'created_at': '2025-01-16 14:20:00'},
            {'id': 3, 'name': 'Bob Johnson', 'email': 'bob@example.com', 'created_at': '2025-01-17 09:15:00'},
            {'id': 4, 'name': 'Alice Brown', 'email': 'alice@example.com', 'created_at': '2025-01-18 16:45:00'},
            {'id': 5, 'name': 'Charlie Wilson', 'email': 'charlie@example.com', 'created_at': '2025-01-19 11:30:00'},
        ]),
        'products': _table('products', [
            _col('id', 'int(11)', key='PRI', extra='AUTO_INCREMENT'),
            _col('name', 'varchar(255)'),
            _col('price', 'decimal(10,2)'),
            _col('stock', 'int(11)', default='0'),
        ], [
            {'id': 1, 'name': 'Laptop', 'price': 999.99, 'stock': 15},
            {'id': 2, 'name': 'Smartphone', 'price': 699.99, 'stock': 25},
            {'id': 3, 'name': 'Headphones', 'price': 199.99, 'stock': 50},
        ]),
    },
    'company_db': {
        'employees': _table('employees', [
            _col('emp_id', 'int(11)', key='PRI', extra='AUTO_INCREMENT'),
            _col('first_name', 'varchar(50)'),
            _col('last_name', 'varchar(50)'),
            _col('department_id', 'int(11)', null=True, key='MUL',
                 references={'table': 'departments', 'column': 'dept_id'}),
        ], [
            {'emp_id': 101, 'first_name': 'Sarah', 'last_name': 'Connor', 'department_id': 1},
            {'emp_id': 102, 'first_name': 'Kyle', 'last_name': 'Reese', 'department_id': 2},
            {'emp_id': 103, 'first_name': 'Miles', 'last_name': 'Dyson', 'department_id': 1},
            {'emp_id': 104, 'first_name': 'Peter', 'last_name': 'Silberman', 'department_id': 3},
        ]),
        'departments': _table('departments', [
            _col('dept_id', 'int(11)', key='PRI', extra='AUTO_INCREMENT'),
            _col('dept_name', 'varchar(100)', key='UNI'),
        ], [
            {'dept_id': 1, 'dept_name': 'Engineering'},
            {'dept_id': 2, 'dept_name': 'Security'},
            {'dept_id': 3, 'dept_name': 'Psychology'},
        ]),
    },
    'system_db': {
        'logs': _table('logs', [
            _col('log_id', 'bigint(20)', key='PRI', extra='AUTO_INCREMENT'),
            _col('level', 'varchar(10)'),
            _col('message', 'text'),
            _col('log_time', 'datetime'),
        ], [
            {'log_id': 1, 'level': 'INFO', 'message': 'Server started', 'log_time': '2025-07-20 08:00:00'},
            {'log_id': 2, 'level': 'WARN', 'message': 'Disk space low', 'log_time': '2025-07-20 09:30:00'},
        ], engine='MyISAM', collation='utf8_general_ci'),
    },
}

# Read-only at the top level; nested structures are only ever cloned
SEED_SERVER = MappingProxyType(_SEED)
