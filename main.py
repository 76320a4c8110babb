#!/usr/bin/env python3
"""
demodb - mock SQL server for the SQL client's demo mode
Run this file to start the API server, an interactive shell, or a script
"""

import argparse
import logging
import sys
from typing import Any, Dict, List

from demodb.config import settings
from demodb.session import DemoSession
from demodb.storage import ServerStore
from demodb.types import QueryResult

def _format_table(rows: List[Dict[str, Any]], columns: List[str]) -> str:
    if not columns and rows:
        columns = list(rows[0].keys())
    if not rows:
        return "(no rows)"

    col_widths = {c: len(c) for c in columns}
    for row in rows:
        for c in columns:
            col_widths[c] = max(col_widths[c], len(_cell(row.get(c))))

    def fmt_row(cells: Dict[str, str]) -> str:
        return " | ".join(cells[c].ljust(col_widths[c]) for c in columns)

    header = fmt_row({c: c for c in columns})
    sep = "-+-".join("-" * col_widths[c] for c in columns)
    body = "\n".join(fmt_row({c: _cell(r.get(c)) for c in columns}) for r in rows)
    return f"{header}\n{sep}\n{body}"

def _cell(value: Any) -> str:
    return "NULL" if value is None else str(value)

def print_result(result: QueryResult):
    if not result.success:
        print(f"Error: {result.error}")
        return
    if result.data is not None:
        print(_format_table(result.data, result.columns or []))
        total = f" of {result.total_rows}" if result.total_rows is not None else ""
        print(f"({len(result.data)}{total} rows, {result.execution_time} ms)")
    else:
        print(f"{result.message or 'OK'} ({result.execution_time} ms)")

def shell(database: str = None):
    """Interactive demo-mode shell"""
    session = DemoSession(ServerStore(), database=database, latency=0)

    print("demodb demo shell")
    print("Type SQL statements terminated by ';'.")
    print("Meta-commands: .help  .databases  .reset  .quit")

    buffer: List[str] = []

    while True:
        prompt = f"{session.database or '(none)'}> " if not buffer else "   ...> "
        try:
            line = input(prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        line = line.rstrip()
        if not buffer and line.startswith("."):
            if line in (".quit", ".exit"):
                break
            if line == ".help":
                print(
                    "Supported statements:\n"
                    "  SHOW DATABASES, CREATE/DROP DATABASE, USE, SHOW TABLES,\n"
                    "  CREATE/DROP/TRUNCATE/RENAME/ALTER TABLE,\n"
                    "  SELECT ... [ORDER BY] [LIMIT [OFFSET]], INSERT, UPDATE, DELETE ... IN (...)\n"
                    "Meta commands:\n"
                    "  .help      - show this message\n"
                    "  .databases - list databases and tables\n"
                    "  .reset     - restore the seed data\n"
                    "  .quit      - exit"
                )
                continue
            if line == ".databases":
                for db_name, tables in session.store.get_snapshot().items():
                    print(f"{db_name}: {', '.join(tables) or '(no tables)'}")
                continue
            if line == ".reset":
                session.store.reset()
                print("Server state reset.")
                continue
            print(f"Unknown meta-command: {line}")
            continue

        buffer.append(line)
        if ";" not in line:
            continue

        script = "\n".join(buffer)
        buffer = []
        for result in session.execute_script(script):
            print_result(result)

def run_file(path: str, database: str = None, stop_on_error: bool = False) -> int:
    """Execute a script file; returns the process exit code"""
    with open(path, 'r') as f:
        script = f.read()

    session = DemoSession(ServerStore(), database=database,
                          stop_on_error=stop_on_error, latency=0)
    results = session.execute_script(script)
    for result in results:
        print_result(result)
    return 0 if all(r.success for r in results) else 1

def main(argv: List[str] = None) -> int:
    """Main entry point"""
    parser = argparse.ArgumentParser(description="demodb mock SQL server")
    parser.add_argument('--log-level', default=settings.log_level)
    commands = parser.add_subparsers(dest='command')

    serve_cmd = commands.add_parser('serve', help='run the HTTP API server')
    serve_cmd.add_argument('--host', default=settings.host)
    serve_cmd.add_argument('--port', type=int, default=settings.port)
    serve_cmd.add_argument('--debug', action='store_true', default=settings.debug)

    shell_cmd = commands.add_parser('shell', help='interactive demo shell')
    shell_cmd.add_argument('--database', '-d')

    run_cmd = commands.add_parser('run', help='execute a script file')
    run_cmd.add_argument('file')
    run_cmd.add_argument('--database', '-d')
    run_cmd.add_argument('--stop-on-error', action='store_true')

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if args.command == 'serve':
        from api.server import run
        run(host=args.host, port=args.port, debug=args.debug)
        return 0
    if args.command == 'run':
        return run_file(args.file, args.database, args.stop_on_error)
    if args.command == 'shell':
        shell(args.database)
        return 0

    parser.print_help()
    return 0

if __name__ == '__main__':
    sys.exit(main())
