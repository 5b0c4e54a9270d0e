# api/application/services/painel_service.py
from __future__ import annotations

import calendar
from datetime import datetime

import duckdb

from api.domain.qs_score.entities import QSScore
from api.domain.qs_score.enums import Classificacao, CorRisco
from api.domain.qs_score.exceptions import FuncionalidadeDesabilitada
from api.domain.qs_score.repository import AreaRepository, ConfiguracaoRepository, QSScoreRepository
from api.domain.qs_score.score import cor_de_risco
from api.infrastructure.log import log

from ..dtos.mapa_risco_dto import AreaRiscoDTO, MapaRiscoDTO, ResumoMapaDTO
from ..dtos.painel_dto import AreaPainelDTO, PainelDTO, PontoHistoricoDTO
from .area_score_service import agora_utc
from .recalculo_service import RecalculoService

MESES_HISTORICO = 6
_MESES_ABREV = ("jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez")
_CLASSIFICACOES_CRITICAS = {Classificacao.CRITICO, Classificacao.RISCO}


def meses_atras(referencia: datetime, meses: int) -> datetime:
    """Mesmo dia N meses antes; dia ajustado ao fim do mes quando nao existe."""
    indice = referencia.year * 12 + (referencia.month - 1) - meses
    ano, mes = divmod(indice, 12)
    mes += 1
    dia = min(referencia.day, calendar.monthrange(ano, mes)[1])
    return referencia.replace(year=ano, month=mes, day=dia)


class PainelService:
    """Consumidores de leitura: painel da empresa e mapa de risco."""

    def __init__(
        self,
        area_repo: AreaRepository,
        score_repo: QSScoreRepository,
        configuracao_repo: ConfiguracaoRepository,
        recalculo: RecalculoService,
    ) -> None:
        self._area_repo = area_repo
        self._score_repo = score_repo
        self._configuracao_repo = configuracao_repo
        self._recalculo = recalculo

    def obter_painel(self, empresa_id: str) -> PainelDTO:
        configuracao = self._configuracao_repo.obter(empresa_id)
        if configuracao is None or not configuracao.qs_score_habilitado:
            raise FuncionalidadeDesabilitada(empresa_id, "QS Score")

        atual = self._score_repo.ultimo_da_empresa(empresa_id)
        if atual is None:
            # Primeiro acesso: calcula agora. Falha aqui nao derruba o painel.
            try:
                atual = self._recalculo.recalcular(empresa_id)
            except duckdb.Error as err:
                log(f"Falha no calculo inicial do QS Score empresa={empresa_id}: {err}", nivel="ERRO")

        agora = agora_utc()
        historico = self._score_repo.historico_da_empresa(empresa_id, meses_atras(agora, MESES_HISTORICO))
        ultimos = self._score_repo.ultimos_por_area(empresa_id)

        areas = [
            AreaPainelDTO(
                id=area.id,
                nome=area.nome,
                score=ultimos[area.id].score if area.id in ultimos else 0,
                classificacao=(
                    ultimos[area.id].classificacao if area.id in ultimos else Classificacao.CRITICO
                ).value,
            )
            for area in self._area_repo.listar_areas(empresa_id)
        ]

        return PainelDTO(
            score=atual.score if atual else 0,
            classificacao=(atual.classificacao if atual else Classificacao.CRITICO).value,
            calculado_em=(atual.calculado_em if atual else agora).isoformat(),
            historico=[_ponto_historico(h) for h in historico],
            areas=areas,
            areas_criticas=sum(1 for a in areas if a.classificacao in _CLASSIFICACOES_CRITICAS),
        )

    def mapa_risco(self, empresa_id: str) -> MapaRiscoDTO:
        """Score ao vivo de cada area (caminho em lote, nada gravado)."""
        configuracao = self._configuracao_repo.obter(empresa_id)
        if configuracao is None or not configuracao.mapa_risco_habilitado:
            raise FuncionalidadeDesabilitada(empresa_id, "Mapa de risco")

        agora = agora_utc()
        areas = [
            AreaRiscoDTO(
                area_id=area.id,
                area_nome=area.nome,
                setor_id=area.setor_id,
                setor_nome=area.setor_nome,
                score=resultado.score,
                classificacao=resultado.classificacao.value,
                cor=cor_de_risco(resultado.score).value,
                fatores=resultado.fatores,
            )
            for area, resultado in self._recalculo.calcular_areas(empresa_id, agora)
        ]

        return MapaRiscoDTO(
            empresa_id=empresa_id,
            calculado_em=agora.isoformat(),
            areas=areas,
            resumo=ResumoMapaDTO(
                total=len(areas),
                verde=sum(1 for a in areas if a.cor == CorRisco.VERDE),
                amarelo=sum(1 for a in areas if a.cor == CorRisco.AMARELO),
                vermelho=sum(1 for a in areas if a.cor == CorRisco.VERMELHO),
                score_medio=sum(a.score for a in areas) // max(1, len(areas)),
            ),
        )


def _ponto_historico(score: QSScore) -> PontoHistoricoDTO:
    return PontoHistoricoDTO(
        mes=f"{_MESES_ABREV[score.calculado_em.month - 1]}.",
        score=score.score,
        calculado_em=score.calculado_em.isoformat(),
    )
