# tests/integration/test_recalculo.py
#
# RecalculoService contra DuckDB in-memory: linhas gravadas, forma do agregado,
# historico append-only e equivalencia entre o caminho em lote e o de uma area.
from __future__ import annotations

import json
from datetime import timedelta

import duckdb
import pytest

from api.application.services.area_score_service import AreaScoreService, agora_utc
from api.application.services.qs_score_service import calcular_score
from api.application.services.recalculo_service import RecalculoService, montar_entradas
from api.domain.qs_score.entities import Avaliacao, QSScore
from api.domain.qs_score.enums import PENDENCIA_RESOLVIDA, Classificacao, Tendencia
from api.infrastructure.repositories.duckdb_area_repo import DuckDBAreaRepo
from api.infrastructure.repositories.duckdb_configuracao_repo import DuckDBConfiguracaoRepo
from api.infrastructure.repositories.duckdb_qs_score_repo import DuckDBQSScoreRepo


@pytest.fixture()
def recalculo(test_db: duckdb.DuckDBPyConnection) -> RecalculoService:
    return RecalculoService(DuckDBAreaRepo(test_db), DuckDBQSScoreRepo(test_db))


@pytest.fixture()
def area_service(test_db: duckdb.DuckDBPyConnection) -> AreaScoreService:
    return AreaScoreService(DuckDBAreaRepo(test_db), DuckDBQSScoreRepo(test_db), DuckDBConfiguracaoRepo(test_db))


def _linhas(conn: duckdb.DuckDBPyConnection, empresa_id: str) -> list[tuple]:
    return conn.execute(
        "SELECT area_id, score, classificacao, fatores, breakdown FROM qs_score WHERE empresa_id = ?",
        [empresa_id],
    ).fetchall()


def test_grava_uma_linha_por_area_mais_agregado(
    recalculo: RecalculoService, test_db: duckdb.DuckDBPyConnection
) -> None:
    agregado = recalculo.recalcular("emp-1")
    assert agregado.score == 307
    assert agregado.classificacao == Classificacao.RISCO

    linhas = {r[0]: r for r in _linhas(test_db, "emp-1")}
    assert set(linhas) == {"area-prod", "area-log", None}
    assert linhas["area-prod"][1:3] == (615, "BOM")
    assert linhas["area-log"][1:3] == (0, "CRITICO")


def test_forma_do_agregado(recalculo: RecalculoService, test_db: duckdb.DuckDBPyConnection) -> None:
    recalculo.recalcular("emp-1")
    agregado = next(r for r in _linhas(test_db, "emp-1") if r[0] is None)
    assert json.loads(agregado[3]) == {"areasAnalisadas": 2}
    assert agregado[4] is None


def test_empresa_sem_areas_grava_so_agregado(
    recalculo: RecalculoService, test_db: duckdb.DuckDBPyConnection
) -> None:
    agregado = recalculo.recalcular("emp-3")
    assert agregado.score == 0
    assert agregado.fatores == {"areasAnalisadas": 0}
    assert len(_linhas(test_db, "emp-3")) == 1


def test_historico_append_only(recalculo: RecalculoService, test_db: duckdb.DuckDBPyConnection) -> None:
    primeiro = recalculo.recalcular("emp-1")
    segundo = recalculo.recalcular("emp-1")
    assert primeiro.id != segundo.id
    assert len(_linhas(test_db, "emp-1")) == 6

    repo = DuckDBQSScoreRepo(test_db)
    ultimo = repo.ultimo_da_empresa("emp-1")
    assert ultimo is not None
    assert ultimo.id == segundo.id


def test_calcular_areas_nao_grava(recalculo: RecalculoService, test_db: duckdb.DuckDBPyConnection) -> None:
    resultados = recalculo.calcular_areas("emp-1")
    assert {a.id: r.score for a, r in resultados} == {"area-prod": 615, "area-log": 0}
    assert _linhas(test_db, "emp-1") == []


def test_lote_equivale_a_calculo_por_area(
    recalculo: RecalculoService,
    area_service: AreaScoreService,
    test_db: duckdb.DuckDBPyConnection,
) -> None:
    # Dados extras: pendencia da lideranca e denuncia antiga fora da janela
    test_db.execute(
        "INSERT INTO pendencia VALUES ('pen-lid', 'area-log', 'PENDENTE', 'Lider de Turno', ?)",
        [agora_utc() - timedelta(days=2)],
    )
    antiga = agora_utc() - timedelta(days=150)
    test_db.execute(
        "INSERT INTO denuncia VALUES ('den-antiga', 'area-log', 'RESOLVIDO', ?, ?)",
        [antiga, antiga + timedelta(days=3)],
    )

    agora = agora_utc()
    em_lote = dict((a.id, r) for a, r in recalculo.calcular_areas("emp-1", agora))
    for area_id, resultado in em_lote.items():
        individual = calcular_score(area_service.buscar_dados_area(area_id, agora), agora)
        assert individual == resultado

    fatores = em_lote["area-log"].fatores
    assert fatores["pendenciasLideranca"] == 1
    assert fatores["pendenciasAbertas"] == 1
    assert fatores["totalDenuncias"] == 0
    assert fatores["ultimaDenuncia"] == antiga.isoformat()


def test_visitas_em_lote_iguais_as_da_area(test_db: duckdb.DuckDBPyConnection) -> None:
    # area-log: uma visita sem avaliacao e outra com nota nula
    test_db.executemany(
        "INSERT INTO visita VALUES (?, 'area-log', ?)",
        [("vis-log-1", agora_utc() - timedelta(days=4)), ("vis-log-2", agora_utc() - timedelta(days=2))],
    )
    test_db.execute("INSERT INTO avaliacao VALUES ('ava-log', 'vis-log-2', 'AREA', NULL)")

    repo = DuckDBAreaRepo(test_db)
    desde = agora_utc() - timedelta(days=90)
    entradas = montar_entradas(
        ["area-prod", "area-log"],
        pendencias_abertas={},
        pendencias_resolvidas={},
        colaboradores={},
        visitas=repo.visitas_da_empresa("emp-1", desde),
        denuncias=[],
        lideranca=[],
        desde=desde,
    )

    for area_id in ("area-prod", "area-log"):
        assert entradas[area_id].visitas == tuple(repo.listar_visitas(area_id, desde))
    assert [v.avaliacoes for v in entradas["area-log"].visitas] == [(), (Avaliacao("AREA", None),)]


def test_leituras_em_lote_retornam_linhas_simples(test_db: duckdb.DuckDBPyConnection) -> None:
    repo = DuckDBAreaRepo(test_db)

    visitas = repo.visitas_da_empresa("emp-1", agora_utc() - timedelta(days=90))
    assert len(visitas) == 4  # vis-0 tem duas avaliacoes
    assert all(isinstance(linha, tuple) for linha in visitas)
    assert {linha[0] for linha in visitas} == {"area-prod"}

    (denuncia,) = repo.denuncias_da_empresa("emp-1")
    assert denuncia[:2] == ("area-prod", "RESOLVIDO")

    assert repo.pendencias_lideranca_da_empresa("emp-1") == []
    assert repo.contar_pendencias_por_area("emp-1", PENDENCIA_RESOLVIDA) == {"area-prod": 8}


def test_dados_da_area_respeitam_janela(area_service: AreaScoreService) -> None:
    dados = area_service.buscar_dados_area("area-prod")
    assert len(dados.visitas) == 3
    assert "vis-antiga" not in {v.id for v in dados.visitas}
    assert dados.pendencias_abertas == 2
    assert dados.pendencias_resolvidas == 8
    assert dados.colaboradores == 10
    assert dados.total_denuncias == 1


def test_teto_de_silencio_configurado_no_servico(test_db: duckdb.DuckDBPyConnection) -> None:
    # area-log nunca teve denuncia: 12 semanas de silencio
    visitas = [(f"vis-log-{i}", "area-log", agora_utc() - timedelta(days=3)) for i in range(10)]
    test_db.executemany("INSERT INTO visita VALUES (?, ?, ?)", visitas)

    sem_teto = RecalculoService(DuckDBAreaRepo(test_db), DuckDBQSScoreRepo(test_db))
    com_teto = RecalculoService(DuckDBAreaRepo(test_db), DuckDBQSScoreRepo(test_db), silencio_penalidade_max=200)
    area_log_sem = dict((a.id, r.score) for a, r in sem_teto.calcular_areas("emp-1"))["area-log"]
    area_log_com = dict((a.id, r.score) for a, r in com_teto.calcular_areas("emp-1"))["area-log"]
    # +50 limpa +250 visitas -1200 silencio, ou -200 com teto
    assert area_log_sem == 0
    assert area_log_com == 100


def test_insercao_em_lote_e_atomica(test_db: duckdb.DuckDBPyConnection) -> None:
    repo = DuckDBQSScoreRepo(test_db)
    valida = QSScore(
        empresa_id="emp-1",
        area_id="area-prod",
        score=500,
        classificacao=Classificacao.ATENCAO,
        fatores={},
        breakdown=None,
        tendencia=Tendencia.ESTAVEL,
        calculado_em=agora_utc(),
    )
    # Mesmo id duas vezes: viola a chave primaria no meio do lote
    with pytest.raises(duckdb.Error):
        repo.inserir([valida, valida])
    assert _linhas(test_db, "emp-1") == []

    repo.inserir([valida])
    assert len(_linhas(test_db, "emp-1")) == 1
