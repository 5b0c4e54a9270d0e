# tests/integration/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import duckdb
import pytest
from fastapi.testclient import TestClient

SCHEMA_PATH = Path(__file__).parent.parent.parent / "pipeline" / "output" / "schema.sql"

# Desabilitar rate limit em testes
os.environ["API_RATE_LIMIT_PER_MINUTE"] = "0"

AGORA = datetime.now(tz=UTC).replace(tzinfo=None)


def _dias_atras(dias: float) -> datetime:
    return AGORA - timedelta(days=dias)


def popular(conn: duckdb.DuckDBPyConnection) -> None:
    """Dados deterministicos.

    emp-1 (QS Score + mapa habilitados), setor Operacoes:
      area-prod: cenario completo -> score 615 (BOM)
        2 pendencias abertas, 8 resolvidas, 3 visitas na janela com avaliacao
        AREA nota 4, 10 colaboradores, 1 denuncia resolvida em 5 dias (6 dias atras).
      area-log: sem nenhum dado -> score 0 (CRITICO)
    emp-2: sem configuracao (funcionalidades desligadas), 1 area.
    emp-3: habilitada, sem areas.
    """
    conn.execute("""
        INSERT INTO empresa VALUES
        ('emp-1', 'Industria Alfa'),
        ('emp-2', 'Comercio Beta'),
        ('emp-3', 'Servicos Gama')
    """)
    conn.execute("""
        INSERT INTO configuracao_sistema VALUES
        ('emp-1', TRUE, TRUE),
        ('emp-3', TRUE, FALSE)
    """)
    conn.execute("""
        INSERT INTO setor VALUES
        ('set-1', 'emp-1', 'Operacoes'),
        ('set-2', 'emp-2', 'Vendas')
    """)
    conn.execute("""
        INSERT INTO area VALUES
        ('area-prod', 'set-1', 'Producao'),
        ('area-log', 'set-1', 'Logistica'),
        ('area-loja', 'set-2', 'Loja')
    """)

    pendencias = [(f"pen-a{i}", "area-prod", "PENDENTE", "Analista RH", _dias_atras(10)) for i in range(2)]
    pendencias += [(f"pen-r{i}", "area-prod", "RESOLVIDA", "Analista RH", _dias_atras(20)) for i in range(5)]
    pendencias += [(f"pen-c{i}", "area-prod", "CONCLUIDA", None, _dias_atras(30)) for i in range(3)]
    conn.executemany("INSERT INTO pendencia VALUES (?, ?, ?, ?, ?)", pendencias)

    visitas = [(f"vis-{i}", "area-prod", _dias_atras(5 + i * 10)) for i in range(3)]
    visitas.append(("vis-antiga", "area-prod", _dias_atras(120)))
    conn.executemany("INSERT INTO visita VALUES (?, ?, ?)", visitas)

    avaliacoes = [(f"ava-{i}", f"vis-{i}", "AREA", 4.0) for i in range(3)]
    avaliacoes.append(("ava-lid", "vis-0", "LIDERANCA", 1.0))
    avaliacoes.append(("ava-antiga", "vis-antiga", "AREA", 0.5))
    conn.executemany("INSERT INTO avaliacao VALUES (?, ?, ?, ?)", avaliacoes)

    colaboradores = [(f"col-{i}", "area-prod", f"Colaborador {i}") for i in range(10)]
    conn.executemany("INSERT INTO perfil_colaborador VALUES (?, ?, ?)", colaboradores)

    conn.execute(
        "INSERT INTO denuncia VALUES ('den-1', 'area-prod', 'RESOLVIDO', ?, ?)",
        [_dias_atras(6), _dias_atras(1)],
    )


@pytest.fixture()
def test_db() -> Generator[duckdb.DuckDBPyConnection, None, None]:
    """DuckDB in-memory com schema e dados deterministicos. Um banco por teste:
    o recalculo grava linhas."""
    conn = duckdb.connect(":memory:")
    conn.execute(SCHEMA_PATH.read_text(encoding="utf-8"))
    popular(conn)
    yield conn
    conn.close()


@pytest.fixture()
def client(test_db: duckdb.DuckDBPyConnection) -> Generator[TestClient, None, None]:
    """TestClient do FastAPI com DuckDB in-memory injetado."""
    from api.infrastructure import duckdb_connection
    duckdb_connection.set_connection(test_db)

    # Limpar cache de settings para pegar API_RATE_LIMIT_PER_MINUTE=0
    from api.infrastructure.config import get_settings
    get_settings.cache_clear()

    from api.interfaces.api.main import app
    with TestClient(app) as c:
        yield c
