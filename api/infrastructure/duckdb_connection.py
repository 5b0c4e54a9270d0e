# api/infrastructure/duckdb_connection.py
from __future__ import annotations

import duckdb

from .config import get_settings

# Conexao unica do processo. Leituras paralelas usam conn.cursor() por chamada.
_conn: duckdb.DuckDBPyConnection | None = None


def get_connection() -> duckdb.DuckDBPyConnection:
    """Abre sob demanda em leitura + escrita: o recalculo acrescenta linhas em qs_score."""
    global _conn  # noqa: PLW0603
    if _conn is None:
        _conn = duckdb.connect(get_settings().duckdb_path)
    return _conn


def set_connection(conn: duckdb.DuckDBPyConnection) -> None:
    """Injeta a conexao (testes usam DuckDB in-memory)."""
    global _conn  # noqa: PLW0603
    _conn = conn
