# api/infrastructure/repositories/duckdb_area_repo.py
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

import duckdb

from api.domain.qs_score.entities import Area, DenunciaResolvida, Visita
from api.domain.qs_score.enums import StatusDenuncia, StatusPendencia
from api.domain.qs_score.repository import LinhaDenuncia, LinhaVisita
from api.domain.qs_score.services import agrupar_visitas

# Pendencia "da lideranca": responsavel contem "Lider" (case-insensitive).
_FILTRO_LIDERANCA = "responsavel ILIKE '%lider%'"

_AREAS_DA_EMPRESA = """
    SELECT a.id FROM area a JOIN setor s ON s.id = a.setor_id WHERE s.empresa_id = ?
"""


class DuckDBAreaRepo:
    """Leituras do modelo de atividade das areas.

    Cada metodo abre o proprio cursor: as leituras sao disparadas em paralelo
    (ThreadPoolExecutor) e uma conexao DuckDB nao deve ser compartilhada entre threads.
    """

    def __init__(self, conn: duckdb.DuckDBPyConnection) -> None:
        self._conn = conn

    def buscar_area(self, area_id: str) -> Area | None:
        with self._conn.cursor() as cur:
            row = cur.execute(
                """SELECT a.id, a.nome, s.id, s.nome, s.empresa_id
                   FROM area a JOIN setor s ON s.id = a.setor_id
                   WHERE a.id = ?""",
                [area_id],
            ).fetchone()
        return self._hidratar_area(row) if row else None

    def listar_areas(self, empresa_id: str) -> list[Area]:
        with self._conn.cursor() as cur:
            rows = cur.execute(
                """SELECT a.id, a.nome, s.id, s.nome, s.empresa_id
                   FROM area a JOIN setor s ON s.id = a.setor_id
                   WHERE s.empresa_id = ?
                   ORDER BY s.nome, a.nome""",
                [empresa_id],
            ).fetchall()
        return [self._hidratar_area(r) for r in rows]

    # ------------------------------------------------------------------
    # Leituras por area
    # ------------------------------------------------------------------

    def contar_pendencias(self, area_id: str, status: Sequence[StatusPendencia]) -> int:
        return self._contar(
            "SELECT count(*) FROM pendencia WHERE area_id = ? AND list_contains(?, status)",
            [area_id, [s.value for s in status]],
        )

    def contar_pendencias_lideranca(self, area_id: str) -> int:
        return self._contar(
            f"SELECT count(*) FROM pendencia WHERE area_id = ? AND status = ? AND {_FILTRO_LIDERANCA}",  # noqa: S608
            [area_id, StatusPendencia.PENDENTE.value],
        )

    def listar_visitas(self, area_id: str, desde: datetime) -> list[Visita]:
        with self._conn.cursor() as cur:
            rows = cur.execute(
                """SELECT v.id, av.tipo, av.nota
                   FROM visita v LEFT JOIN avaliacao av ON av.visita_id = v.id
                   WHERE v.area_id = ? AND v.criado_em >= ?
                   ORDER BY v.criado_em, v.id""",
                [area_id, desde],
            ).fetchall()
        return agrupar_visitas(rows)

    def contar_colaboradores(self, area_id: str) -> int:
        return self._contar("SELECT count(*) FROM perfil_colaborador WHERE area_id = ?", [area_id])

    def listar_denuncias_resolvidas(self, area_id: str, desde: datetime) -> list[DenunciaResolvida]:
        with self._conn.cursor() as cur:
            rows = cur.execute(
                """SELECT criado_em, resolvido_em FROM denuncia
                   WHERE area_id = ? AND status = ? AND resolvido_em IS NOT NULL AND criado_em >= ?
                   ORDER BY criado_em""",
                [area_id, StatusDenuncia.RESOLVIDO.value, desde],
            ).fetchall()
        return [DenunciaResolvida(criado_em=r[0], resolvido_em=r[1]) for r in rows]

    def contar_denuncias(self, area_id: str, desde: datetime) -> int:
        return self._contar(
            "SELECT count(*) FROM denuncia WHERE area_id = ? AND criado_em >= ?",
            [area_id, desde],
        )

    def ultima_denuncia_em(self, area_id: str) -> datetime | None:
        with self._conn.cursor() as cur:
            row = cur.execute(
                "SELECT criado_em FROM denuncia WHERE area_id = ? ORDER BY criado_em DESC LIMIT 1",
                [area_id],
            ).fetchone()
        return row[0] if row else None

    # ------------------------------------------------------------------
    # Leituras em lote: um punhado de queries, independente do numero de areas
    # ------------------------------------------------------------------

    def contar_pendencias_por_area(self, empresa_id: str, status: Sequence[StatusPendencia]) -> dict[str, int]:
        return self._contar_por_area(
            f"""SELECT area_id, count(*) FROM pendencia
                WHERE area_id IN ({_AREAS_DA_EMPRESA}) AND list_contains(?, status)
                GROUP BY area_id""",  # noqa: S608
            [empresa_id, [s.value for s in status]],
        )

    def contar_colaboradores_por_area(self, empresa_id: str) -> dict[str, int]:
        return self._contar_por_area(
            f"""SELECT area_id, count(*) FROM perfil_colaborador
                WHERE area_id IN ({_AREAS_DA_EMPRESA})
                GROUP BY area_id""",  # noqa: S608
            [empresa_id],
        )

    def visitas_da_empresa(self, empresa_id: str, desde: datetime) -> list[LinhaVisita]:
        """Uma linha por (visita, avaliacao); visita sem avaliacao vem com tipo/nota nulos."""
        with self._conn.cursor() as cur:
            rows = cur.execute(
                f"""SELECT v.area_id, v.id, av.tipo, av.nota
                    FROM visita v LEFT JOIN avaliacao av ON av.visita_id = v.id
                    WHERE v.area_id IN ({_AREAS_DA_EMPRESA}) AND v.criado_em >= ?
                    ORDER BY v.criado_em, v.id""",  # noqa: S608
                [empresa_id, desde],
            ).fetchall()
        return [
            (str(area_id), str(visita_id), tipo, float(nota) if nota is not None else None)
            for area_id, visita_id, tipo, nota in rows
        ]

    def denuncias_da_empresa(self, empresa_id: str) -> list[LinhaDenuncia]:
        """Todas as denuncias, sem janela: a mais recente pode ser antiga."""
        with self._conn.cursor() as cur:
            rows = cur.execute(
                f"""SELECT area_id, status, criado_em, resolvido_em FROM denuncia
                    WHERE area_id IN ({_AREAS_DA_EMPRESA})""",  # noqa: S608
                [empresa_id],
            ).fetchall()
        return [(str(area_id), str(status), criado, resolvido) for area_id, status, criado, resolvido in rows]

    def pendencias_lideranca_da_empresa(self, empresa_id: str) -> list[str]:
        """Um area_id por pendencia aberta da lideranca."""
        with self._conn.cursor() as cur:
            rows = cur.execute(
                f"""SELECT area_id FROM pendencia
                    WHERE area_id IN ({_AREAS_DA_EMPRESA}) AND status = ? AND {_FILTRO_LIDERANCA}""",  # noqa: S608
                [empresa_id, StatusPendencia.PENDENTE.value],
            ).fetchall()
        return [str(r[0]) for r in rows]

    # ------------------------------------------------------------------

    def _contar(self, sql: str, params: list[object]) -> int:
        with self._conn.cursor() as cur:
            row = cur.execute(sql, params).fetchone()
        return int(row[0]) if row else 0

    def _contar_por_area(self, sql: str, params: list[object]) -> dict[str, int]:
        with self._conn.cursor() as cur:
            rows = cur.execute(sql, params).fetchall()
        return {str(area_id): int(qtd) for area_id, qtd in rows}

    def _hidratar_area(self, row: tuple) -> Area:  # type: ignore[type-arg]
        """Colunas: area.id(0), area.nome(1), setor.id(2), setor.nome(3), setor.empresa_id(4)."""
        return Area(
            id=str(row[0]),
            nome=str(row[1]),
            setor_id=str(row[2]),
            setor_nome=str(row[3]),
            empresa_id=str(row[4]),
        )
