# api/application/services/recalculo_service.py
#
# Recalculo do QS Score de todas as areas de uma empresa.
#
# Design decisions:
#   - Leituras em lote: contagens via GROUP BY area_id (mapa area -> contagem)
#     e leituras planas (visitas, denuncias, pendencias da lideranca)
#     particionadas por area em memoria com Polars. O numero de queries e fixo,
#     independente do numero de areas.
#   - As leituras sao independentes e disparadas em paralelo (ThreadPoolExecutor).
#   - montar_entradas e uma funcao pura sobre as linhas do repositorio: mesma
#     forma de DadosArea que AreaScoreService.buscar_dados_area produz para uma
#     area. As visitas de cada area passam pelo mesmo agrupar_visitas.
#   - O loop por area e so CPU (calcular_score), sem IO por iteracao.
#
# ADR: Gravacao em transacao unica.
#   As linhas de area e a linha agregada da empresa sao gravadas juntas
#   (DuckDBQSScoreRepo.inserir). Uma falha no meio nao deixa um conjunto
#   parcial de "scores mais recentes"; rodar o recalculo de novo recupera.
#
# Invariants:
#   - Cada execucao so acrescenta linhas; nada e atualizado.
#   - Linha da empresa: area_id None, score = media inteira (floor) das areas,
#     0 quando a empresa nao tem areas.
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta

import polars as pl

from api.domain.qs_score.entities import Area, DadosArea, DenunciaResolvida, QSScore, Visita
from api.domain.qs_score.enums import PENDENCIA_ABERTA, PENDENCIA_RESOLVIDA, StatusDenuncia, Tendencia
from api.domain.qs_score.repository import AreaRepository, LinhaDenuncia, LinhaVisita, QSScoreRepository
from api.domain.qs_score.score import JANELA_DIAS, SILENCIO_PENALIDADE_MAX, ResultadoScore, classificar
from api.domain.qs_score.services import agrupar_visitas
from api.infrastructure.log import log

from .area_score_service import agora_utc
from .qs_score_service import calcular_score


class RecalculoService:
    def __init__(
        self,
        area_repo: AreaRepository,
        score_repo: QSScoreRepository,
        silencio_penalidade_max: int | None = SILENCIO_PENALIDADE_MAX,
        consultas_paralelas: int = 8,
    ) -> None:
        self._area_repo = area_repo
        self._score_repo = score_repo
        self._silencio_penalidade_max = silencio_penalidade_max
        self._consultas_paralelas = consultas_paralelas

    def calcular_areas(self, empresa_id: str, agora: datetime | None = None) -> list[tuple[Area, ResultadoScore]]:
        """Score ao vivo de todas as areas da empresa. Nao grava nada."""
        agora = agora or agora_utc()
        areas = self._area_repo.listar_areas(empresa_id)
        if not areas:
            return []

        entradas = self._buscar_entradas(empresa_id, [a.id for a in areas], agora)
        return [
            (area, calcular_score(entradas[area.id], agora, self._silencio_penalidade_max))
            for area in areas
        ]

    def recalcular(self, empresa_id: str) -> QSScore:
        """Grava uma linha por area + a linha agregada da empresa. Retorna a agregada."""
        agora = agora_utc()
        resultados = self.calcular_areas(empresa_id, agora)

        linhas = [
            QSScore(
                empresa_id=empresa_id,
                area_id=area.id,
                score=r.score,
                classificacao=r.classificacao,
                fatores=r.fatores,
                breakdown=r.breakdown,
                tendencia=r.tendencia,
                calculado_em=agora,
            )
            for area, r in resultados
        ]

        media = sum(r.score for _, r in resultados) // len(resultados) if resultados else 0
        agregado = QSScore(
            empresa_id=empresa_id,
            area_id=None,
            score=media,
            classificacao=classificar(media),
            fatores={"areasAnalisadas": len(resultados)},
            breakdown=None,
            tendencia=Tendencia.ESTAVEL,
            calculado_em=agora,
        )

        self._score_repo.inserir([*linhas, agregado])
        log(f"Recalculo empresa={empresa_id}: {len(linhas)} area(s), score medio {media}")
        return agregado

    def _buscar_entradas(self, empresa_id: str, area_ids: list[str], agora: datetime) -> dict[str, DadosArea]:
        desde = agora - timedelta(days=JANELA_DIAS)
        repo = self._area_repo

        with ThreadPoolExecutor(max_workers=self._consultas_paralelas) as pool:
            abertas = pool.submit(repo.contar_pendencias_por_area, empresa_id, PENDENCIA_ABERTA)
            resolvidas = pool.submit(repo.contar_pendencias_por_area, empresa_id, PENDENCIA_RESOLVIDA)
            colaboradores = pool.submit(repo.contar_colaboradores_por_area, empresa_id)
            visitas = pool.submit(repo.visitas_da_empresa, empresa_id, desde)
            denuncias = pool.submit(repo.denuncias_da_empresa, empresa_id)
            lideranca = pool.submit(repo.pendencias_lideranca_da_empresa, empresa_id)

        return montar_entradas(
            area_ids,
            pendencias_abertas=abertas.result(),
            pendencias_resolvidas=resolvidas.result(),
            colaboradores=colaboradores.result(),
            visitas=visitas.result(),
            denuncias=denuncias.result(),
            lideranca=lideranca.result(),
            desde=desde,
        )


_VISITAS_SCHEMA = {"area_id": pl.Utf8, "visita_id": pl.Utf8, "tipo": pl.Utf8, "nota": pl.Float64}
_DENUNCIAS_SCHEMA = {
    "area_id": pl.Utf8,
    "status": pl.Utf8,
    "criado_em": pl.Datetime("us"),
    "resolvido_em": pl.Datetime("us"),
}


def montar_entradas(
    area_ids: list[str],
    *,
    pendencias_abertas: dict[str, int],
    pendencias_resolvidas: dict[str, int],
    colaboradores: dict[str, int],
    visitas: list[LinhaVisita],
    denuncias: list[LinhaDenuncia],
    lideranca: list[str],
    desde: datetime,
) -> dict[str, DadosArea]:
    """Particiona os resultados em lote por area e monta um DadosArea para cada.

    Args:
        visitas:    (area_id, visita_id, tipo, nota), ja restrito a janela.
        denuncias:  (area_id, status, criado_em, resolvido_em), sem janela.
        lideranca:  um area_id por pendencia aberta da lideranca.
        desde:      inicio da janela, aplicado em memoria as denuncias.

    Returns:
        area_id -> DadosArea, para todas as areas de area_ids (area sem dados = zeros).
    """
    visitas_por_area = _visitas_por_area(pl.DataFrame(visitas, schema=_VISITAS_SCHEMA, orient="row"))
    denuncias_df = pl.DataFrame(denuncias, schema=_DENUNCIAS_SCHEMA, orient="row")

    lideranca_por_area: dict[str, int] = {
        area_id: qtd
        for area_id, qtd in pl.DataFrame({"area_id": lideranca}, schema={"area_id": pl.Utf8})
        .group_by("area_id")
        .len()
        .iter_rows()
    }

    na_janela = denuncias_df.filter(pl.col("criado_em") >= desde)
    total_por_area: dict[str, int] = {
        area_id: qtd for area_id, qtd in na_janela.group_by("area_id").len().iter_rows()
    }
    resolvidas_por_area: dict[str, list[DenunciaResolvida]] = {}
    for area_id, criado_em, resolvido_em in (
        na_janela.filter(
            (pl.col("status") == StatusDenuncia.RESOLVIDO.value) & pl.col("resolvido_em").is_not_null()
        )
        .sort("criado_em")
        .select("area_id", "criado_em", "resolvido_em")
        .iter_rows()
    ):
        resolvidas_por_area.setdefault(area_id, []).append(
            DenunciaResolvida(criado_em=criado_em, resolvido_em=resolvido_em)
        )

    ultima_por_area: dict[str, datetime] = {
        area_id: ultima
        for area_id, ultima in denuncias_df.group_by("area_id").agg(pl.col("criado_em").max()).iter_rows()
    }

    return {
        area_id: DadosArea(
            pendencias_abertas=pendencias_abertas.get(area_id, 0),
            pendencias_resolvidas=pendencias_resolvidas.get(area_id, 0),
            visitas=tuple(visitas_por_area.get(area_id, ())),
            colaboradores=colaboradores.get(area_id, 0),
            denuncias_resolvidas=tuple(resolvidas_por_area.get(area_id, ())),
            total_denuncias=total_por_area.get(area_id, 0),
            pendencias_lideranca=lideranca_por_area.get(area_id, 0),
            ultima_denuncia_em=ultima_por_area.get(area_id),
        )
        for area_id in area_ids
    }


def _visitas_por_area(visitas_df: pl.DataFrame) -> dict[str, list[Visita]]:
    return {
        str(chave[0]): agrupar_visitas(grupo.select("visita_id", "tipo", "nota").iter_rows())
        for chave, grupo in visitas_df.group_by("area_id", maintain_order=True)
    }
