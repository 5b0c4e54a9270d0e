# pipeline/config.py
#
# Configuration of the scheduled QS Score recalculation, loaded from
# environment variables.
#
# Design decisions:
#   - Frozen dataclass built once by load_config(); the runner never reads
#     os.environ directly.
#   - QS_EMPRESAS restricts the run to a comma-separated list of company ids.
#     Empty/unset means every company in the database.
#   - QS_SILENCIO_PENALIDADE_MAX is the same cap the API reads
#     (api/infrastructure/config.py), so scheduled and on-demand scores agree.
#   - DUCKDB_PATH defaults to the same file the API opens. DuckDB allows a
#     single writer process per file, so while the API is up the runner must
#     go through it: QS_API_URL switches the runner to POSTing
#     /api/qs-score/recalcular/{id}. In that mode the runner never opens the
#     file, so it cannot list companies and QS_EMPRESAS is mandatory.
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_PIPELINE_DIR = Path(__file__).parent
DUCKDB_PATH_PADRAO = _PIPELINE_DIR / "data" / "qs_score.duckdb"


@dataclass(frozen=True)
class RecalculoConfig:
    """Immutable runner configuration.

    Invariants:
      - duckdb_path is an absolute Path.
      - empresa_ids is empty (= all companies) or a tuple of non-empty ids.
      - consultas_paralelas is a positive integer.
      - api_url set implies a non-empty empresa_ids.
    """

    duckdb_path: Path
    empresa_ids: tuple[str, ...] = ()
    silencio_penalidade_max: int | None = None
    consultas_paralelas: int = 8
    api_url: str | None = None
    api_key: str | None = None
    api_timeout: float = 120.0


def load_config() -> RecalculoConfig:
    """Build RecalculoConfig from environment variables.

    Raises:
        ValueError: if QS_CONSULTAS_PARALELAS is not a positive integer, or
            QS_API_URL is set without QS_EMPRESAS.
    """
    duckdb_path = Path(os.environ.get("DUCKDB_PATH", str(DUCKDB_PATH_PADRAO))).resolve()

    empresas_raw = os.environ.get("QS_EMPRESAS", "")
    empresa_ids = tuple(e.strip() for e in empresas_raw.split(",") if e.strip())

    teto_raw = os.environ.get("QS_SILENCIO_PENALIDADE_MAX", "").strip()
    consultas = int(os.environ.get("QS_CONSULTAS_PARALELAS", "8"))
    if consultas < 1:
        raise ValueError("QS_CONSULTAS_PARALELAS must be a positive integer.")

    api_url = os.environ.get("QS_API_URL", "").strip().rstrip("/") or None
    if api_url and not empresa_ids:
        raise ValueError("QS_EMPRESAS is required when QS_API_URL is set.")

    return RecalculoConfig(
        duckdb_path=duckdb_path,
        empresa_ids=empresa_ids,
        silencio_penalidade_max=int(teto_raw) if teto_raw else None,
        consultas_paralelas=consultas,
        api_url=api_url,
        api_key=os.environ.get("QS_API_KEY") or None,
        api_timeout=float(os.environ.get("QS_API_TIMEOUT", "120")),
    )
