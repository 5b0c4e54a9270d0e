# api/infrastructure/repositories/duckdb_configuracao_repo.py
from __future__ import annotations

import duckdb

from api.domain.qs_score.entities import ConfiguracaoSistema


class DuckDBConfiguracaoRepo:
    def __init__(self, conn: duckdb.DuckDBPyConnection) -> None:
        self._conn = conn

    def obter(self, empresa_id: str) -> ConfiguracaoSistema | None:
        with self._conn.cursor() as cur:
            row = cur.execute(
                """SELECT empresa_id, qs_score_habilitado, mapa_risco_habilitado
                   FROM configuracao_sistema WHERE empresa_id = ?""",
                [empresa_id],
            ).fetchone()
        if row is None:
            return None
        return ConfiguracaoSistema(
            empresa_id=str(row[0]),
            qs_score_habilitado=bool(row[1]),
            mapa_risco_habilitado=bool(row[2]),
        )
