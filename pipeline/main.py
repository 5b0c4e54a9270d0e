# pipeline/main.py
#
# Scheduled QS Score recalculation: every company (or the configured subset)
# gets one new row per area plus one company aggregate row.
#
# Design decisions:
#   - run_recalculo is the single entry point. It accepts a RecalculoConfig so
#     tests can point it at a tmp database.
#   - Two modes. Local: open the DuckDB file and run RecalculoService directly.
#     Remote (config.api_url set): POST /api/qs-score/recalcular/{id} to the
#     running API, which owns the only writable connection to the file.
#   - Companies are processed sequentially. Each RecalculoService.recalcular
#     call already fans its reads out over a thread pool and writes its rows in
#     one transaction.
#   - Each step logs progress to stdout.
#
# Invariant: a failing company aborts the run. Companies processed before the
# failure keep their new rows (each company's batch is independent and
# append-only); re-running the job recovers.
from __future__ import annotations

import duckdb
import httpx

from api.application.services.recalculo_service import RecalculoService
from api.infrastructure.log import log
from api.infrastructure.repositories.duckdb_area_repo import DuckDBAreaRepo
from api.infrastructure.repositories.duckdb_qs_score_repo import DuckDBQSScoreRepo
from pipeline.config import RecalculoConfig, load_config
from pipeline.output.build_duckdb import inicializar_duckdb


def run_recalculo(config: RecalculoConfig, cliente: httpx.Client | None = None) -> dict[str, int]:
    """Recalculate the QS Score of every selected company.

    Args:
        config:  runner configuration.
        cliente: HTTP client for remote mode. Built from config.api_url when None.

    Returns:
        company id -> new company aggregate score.

    Raises:
        duckdb.Error:    local mode, on the first storage failure. No retries.
        httpx.HTTPError: remote mode, on the first failed request. No retries.
    """
    if config.api_url:
        return _recalcular_via_api(config, cliente)

    try:
        conn = inicializar_duckdb(config.duckdb_path)
    except duckdb.IOException:
        log(
            f"Nao foi possivel abrir {config.duckdb_path} (API rodando?). "
            "Defina QS_API_URL e QS_EMPRESAS para recalcular via API.",
            componente="recalculo",
            nivel="ERRO",
        )
        raise

    try:
        service = RecalculoService(
            area_repo=DuckDBAreaRepo(conn),
            score_repo=DuckDBQSScoreRepo(conn),
            silencio_penalidade_max=config.silencio_penalidade_max,
            consultas_paralelas=config.consultas_paralelas,
        )

        empresa_ids = list(config.empresa_ids) or _todas_as_empresas(conn)
        log(f"Recalculando {len(empresa_ids)} empresa(s)...", componente="recalculo")

        resultados: dict[str, int] = {}
        for empresa_id in empresa_ids:
            agregado = service.recalcular(empresa_id)
            resultados[empresa_id] = agregado.score
            log(
                f"  {empresa_id}: {agregado.score} ({agregado.classificacao.value}), "
                f"{agregado.fatores['areasAnalisadas']} area(s)",
                componente="recalculo",
            )
        return resultados
    finally:
        conn.close()


def _recalcular_via_api(config: RecalculoConfig, cliente: httpx.Client | None) -> dict[str, int]:
    # API key: o recalculo em lote nao deve esbarrar no rate limit
    headers = {"X-API-Key": config.api_key} if config.api_key else {}
    proprio = cliente is None
    if cliente is None:
        cliente = httpx.Client(base_url=config.api_url or "", timeout=config.api_timeout)

    log(f"Recalculando {len(config.empresa_ids)} empresa(s) via {config.api_url}...", componente="recalculo")
    try:
        resultados: dict[str, int] = {}
        for empresa_id in config.empresa_ids:
            response = cliente.post(f"/api/qs-score/recalcular/{empresa_id}", headers=headers)
            response.raise_for_status()
            resultados[empresa_id] = int(response.json()["score_empresa"])
            log(f"  {empresa_id}: {resultados[empresa_id]}", componente="recalculo")
        return resultados
    finally:
        if proprio:
            cliente.close()


def _todas_as_empresas(conn: duckdb.DuckDBPyConnection) -> list[str]:
    rows = conn.execute("SELECT id FROM empresa ORDER BY id").fetchall()
    return [str(r[0]) for r in rows]


if __name__ == "__main__":
    cfg = load_config()
    run_recalculo(cfg)
