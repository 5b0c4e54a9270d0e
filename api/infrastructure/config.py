# api/infrastructure/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Mesmo arquivo gravado por pipeline/main.py.
_DUCKDB_PATH_PADRAO = Path(__file__).resolve().parents[2] / "pipeline" / "data" / "qs_score.duckdb"


@dataclass(frozen=True)
class Settings:
    duckdb_path: str
    rate_limit_per_minute: int
    silencio_penalidade_max: int | None  # None = sem teto
    consultas_paralelas: int
    cors_origins: tuple[str, ...]


def _int_opcional(valor: str | None) -> int | None:
    if valor is None or not valor.strip():
        return None
    return int(valor)


def _lista(valor: str) -> tuple[str, ...]:
    return tuple(v.strip() for v in valor.split(",") if v.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Lido uma vez por processo. Testes chamam get_settings.cache_clear() apos mudar o ambiente."""
    return Settings(
        duckdb_path=os.environ.get("DUCKDB_PATH", str(_DUCKDB_PATH_PADRAO)),
        rate_limit_per_minute=int(os.environ.get("API_RATE_LIMIT_PER_MINUTE", "60")),
        silencio_penalidade_max=_int_opcional(os.environ.get("QS_SILENCIO_PENALIDADE_MAX")),
        consultas_paralelas=int(os.environ.get("QS_CONSULTAS_PARALELAS", "8")),
        cors_origins=_lista(os.environ.get("API_CORS_ORIGINS", "http://localhost:5173")),
    )
