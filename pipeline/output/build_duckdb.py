# pipeline/output/build_duckdb.py
#
# Schema bootstrap for the QS Score database.
#
# Design decisions:
#   - Schema is read from schema.sql at run time (not imported as a module)
#     so the SQL file remains the single source of truth for table structure.
#   - Every statement in schema.sql is CREATE ... IF NOT EXISTS, so running
#     the bootstrap on a populated database is a no-op. Existing qs_score
#     history is never touched.
from __future__ import annotations

from pathlib import Path

import duckdb

from api.infrastructure.log import log

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


def aplicar_schema(conn: duckdb.DuckDBPyConnection) -> None:
    """Create missing tables and indexes on an open connection."""
    conn.execute(SCHEMA_PATH.read_text(encoding="utf-8"))


def inicializar_duckdb(path: Path) -> duckdb.DuckDBPyConnection:
    """Open (creating if needed) the database file and apply the schema.

    Returns:
        A read-write connection. The caller owns it and must close it.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = duckdb.connect(str(path))
    aplicar_schema(conn)
    log(f"Schema aplicado em {path}", componente="recalculo")
    return conn
