# api/infrastructure/repositories/duckdb_qs_score_repo.py
from __future__ import annotations

import json
import uuid
from collections.abc import Sequence
from datetime import datetime

import duckdb

from api.domain.qs_score.entities import QSScore
from api.domain.qs_score.enums import Classificacao, Tendencia

_COLUNAS = "id, empresa_id, area_id, score, classificacao, fatores, breakdown, tendencia, calculado_em"


class DuckDBQSScoreRepo:
    """Historico append-only de qs_score. Nenhum UPDATE/DELETE aqui."""

    def __init__(self, conn: duckdb.DuckDBPyConnection) -> None:
        self._conn = conn

    def inserir(self, scores: Sequence[QSScore]) -> None:
        """Grava todas as linhas numa unica transacao: ou o lote inteiro, ou nada."""
        if not scores:
            return
        with self._conn.cursor() as cur:
            cur.begin()
            try:
                cur.executemany(
                    f"INSERT INTO qs_score ({_COLUNAS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",  # noqa: S608
                    [self._desidratar(s) for s in scores],
                )
            except duckdb.Error:
                cur.rollback()
                raise
            cur.commit()

    def ultimo_da_empresa(self, empresa_id: str) -> QSScore | None:
        with self._conn.cursor() as cur:
            row = cur.execute(
                f"""SELECT {_COLUNAS} FROM qs_score
                    WHERE empresa_id = ? AND area_id IS NULL
                    ORDER BY calculado_em DESC LIMIT 1""",  # noqa: S608
                [empresa_id],
            ).fetchone()
        return self._hidratar(row) if row else None

    def historico_da_empresa(self, empresa_id: str, desde: datetime) -> list[QSScore]:
        with self._conn.cursor() as cur:
            rows = cur.execute(
                f"""SELECT {_COLUNAS} FROM qs_score
                    WHERE empresa_id = ? AND area_id IS NULL AND calculado_em >= ?
                    ORDER BY calculado_em ASC""",  # noqa: S608
                [empresa_id, desde],
            ).fetchall()
        return [self._hidratar(r) for r in rows]

    def ultimos_por_area(self, empresa_id: str) -> dict[str, QSScore]:
        """Linha mais recente de cada area numa unica query (sem N+1)."""
        with self._conn.cursor() as cur:
            rows = cur.execute(
                f"""SELECT {_COLUNAS} FROM qs_score
                    WHERE empresa_id = ? AND area_id IS NOT NULL
                    QUALIFY row_number() OVER (PARTITION BY area_id ORDER BY calculado_em DESC) = 1""",  # noqa: S608
                [empresa_id],
            ).fetchall()
        return {str(r[2]): self._hidratar(r) for r in rows}

    def _desidratar(self, s: QSScore) -> list[object]:
        return [
            str(s.id),
            s.empresa_id,
            s.area_id,
            s.score,
            s.classificacao.value,
            json.dumps(s.fatores),
            json.dumps(s.breakdown) if s.breakdown is not None else None,
            s.tendencia.value,
            s.calculado_em,
        ]

    def _hidratar(self, row: tuple) -> QSScore:  # type: ignore[type-arg]
        """Colunas: id(0), empresa_id(1), area_id(2), score(3), classificacao(4),
        fatores(5), breakdown(6), tendencia(7), calculado_em(8)"""
        return QSScore(
            id=uuid.UUID(str(row[0])),
            empresa_id=str(row[1]),
            area_id=str(row[2]) if row[2] is not None else None,
            score=int(row[3]),
            classificacao=Classificacao(str(row[4])),
            fatores=json.loads(row[5]) if row[5] else {},
            breakdown=json.loads(row[6]) if row[6] else None,
            tendencia=Tendencia(str(row[7])),
            calculado_em=row[8],
        )
