# api/application/services/qs_score_service.py
"""Calculo do QS Score de uma area. Funcao pura: mesma entrada = mesma saida.

Unico efeito colateral: log de avaliacao malformada (a visita e ignorada,
o calculo nunca aborta).

ADR: Penalizacao em varios angulos (taxa de resolucao creditada, pendencias
abertas penalizadas de novo, silencio penalizado a parte) e intencional.
Nao "corrigir" sem aval de produto.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta

from api.domain.qs_score.entities import DadosArea, DenunciaResolvida, Visita
from api.domain.qs_score.enums import Tendencia, TipoAvaliacao
from api.domain.qs_score.score import (
    AVALIACAO_MINIMA,
    BONUS_ALGUMAS_DENUNCIAS,
    BONUS_AREA_LIMPA,
    BONUS_RESOLUCAO_MEDIA,
    BONUS_RESOLUCAO_RAPIDA,
    DIAS_RESOLUCAO_MEDIA,
    DIAS_RESOLUCAO_MUITO_LENTA,
    DIAS_RESOLUCAO_RAPIDA,
    LIMITE_DENUNCIAS,
    PENALIDADE_AVALIACAO_BAIXA,
    PENALIDADE_BAIXA_RESOLUCAO,
    PENALIDADE_MUITAS_DENUNCIAS,
    PENALIDADE_PENDENCIA_LIDERANCA_MAX,
    PENALIDADE_PENDENCIA_MAX,
    PENALIDADE_POR_PENDENCIA,
    PENALIDADE_POR_PENDENCIA_LIDERANCA,
    PENALIDADE_RESOLUCAO_LENTA,
    PENALIDADE_RESOLUCAO_MUITO_LENTA,
    PENALIDADE_SEM_VISITAS,
    PENALIDADE_SEMANA_SILENCIO,
    PESO_FREQUENCIA_VISITAS,
    PESO_QUALIDADE_AVALIACAO,
    PESO_TAXA_RESOLUCAO,
    PONTOS_POR_VISITA,
    SEMANAS_SILENCIO_SEM_DENUNCIA,
    SILENCIO_PENALIDADE_MAX,
    TAXA_RESOLUCAO_MINIMA,
    ResultadoScore,
    classificar,
    limitar,
)
from api.infrastructure.log import log

_SEGUNDOS_POR_DIA = 86400
_SEMANA = timedelta(days=7)


def calcular_score(
    dados: DadosArea,
    agora: datetime,
    silencio_penalidade_max: int | None = SILENCIO_PENALIDADE_MAX,
) -> ResultadoScore:
    """Aplica as contribuicoes em ordem sobre um total corrente e faz clamp em [0, 1000].

    Args:
        dados: snapshot da area (janela de 90 dias ja aplicada pelo chamador).
        agora: referencia para o silencio de denuncias. Nunca lida do relogio aqui.
        silencio_penalidade_max: teto da penalidade de silencio; None = sem teto.
    """
    media_resolucao = _media_dias_resolucao(dados.denuncias_resolvidas)
    score = 0

    # 1. Taxa de resolucao de pendencias
    total_pendencias = dados.pendencias_abertas + dados.pendencias_resolvidas
    if total_pendencias > 0:
        taxa_resolucao = dados.pendencias_resolvidas / total_pendencias
        score += math.floor(taxa_resolucao * PESO_TAXA_RESOLUCAO)
        if taxa_resolucao < TAXA_RESOLUCAO_MINIMA:
            score -= PENALIDADE_BAIXA_RESOLUCAO
    else:
        taxa_resolucao = 1.0
        score += BONUS_AREA_LIMPA

    # 2. Pendencias abertas penalizam sempre, mesmo ja contadas na taxa
    score -= min(PENALIDADE_PENDENCIA_MAX, dados.pendencias_abertas * PENALIDADE_POR_PENDENCIA)

    # 3. Pendencias da lideranca
    if dados.pendencias_lideranca > 0:
        score -= min(
            PENALIDADE_PENDENCIA_LIDERANCA_MAX,
            dados.pendencias_lideranca * PENALIDADE_POR_PENDENCIA_LIDERANCA,
        )

    # 4. Frequencia de visitas
    qtd_visitas = len(dados.visitas)
    score += min(PESO_FREQUENCIA_VISITAS, qtd_visitas * PONTOS_POR_VISITA)
    if qtd_visitas == 0:
        score -= PENALIDADE_SEM_VISITAS

    # 5. Silencio de denuncias
    penalidade_silencio = _semanas_silencio(dados.ultima_denuncia_em, agora) * PENALIDADE_SEMANA_SILENCIO
    if silencio_penalidade_max is not None:
        penalidade_silencio = min(silencio_penalidade_max, penalidade_silencio)
    score -= penalidade_silencio

    # 6. Volume de denuncias
    if dados.total_denuncias > LIMITE_DENUNCIAS:
        score -= PENALIDADE_MUITAS_DENUNCIAS
    elif dados.total_denuncias > 0:
        score += BONUS_ALGUMAS_DENUNCIAS

    # 7. Velocidade de resolucao
    if media_resolucao > 0:
        if media_resolucao <= DIAS_RESOLUCAO_RAPIDA:
            score += BONUS_RESOLUCAO_RAPIDA
        elif media_resolucao <= DIAS_RESOLUCAO_MEDIA:
            score += BONUS_RESOLUCAO_MEDIA
        else:
            score -= PENALIDADE_RESOLUCAO_LENTA
        if media_resolucao > DIAS_RESOLUCAO_MUITO_LENTA:
            score -= PENALIDADE_RESOLUCAO_MUITO_LENTA

    # 8. Qualidade das avaliacoes
    media_avaliacao = _media_avaliacoes_area(dados.visitas)
    if media_avaliacao is not None:
        normalizada = media_avaliacao / 100 if media_avaliacao > 5 else media_avaliacao / 5
        score += math.floor(normalizada * PESO_QUALIDADE_AVALIACAO)
        if normalizada < AVALIACAO_MINIMA:
            score -= PENALIDADE_AVALIACAO_BAIXA

    score = limitar(score)

    return ResultadoScore(
        score=score,
        classificacao=classificar(score),
        fatores={
            "pendenciasAbertas": dados.pendencias_abertas,
            "pendenciasLideranca": dados.pendencias_lideranca,
            "pendenciasResolvidas": dados.pendencias_resolvidas,
            "visitasRecentes": qtd_visitas,
            "colaboradores": dados.colaboradores,
            "resolucaoDenunciasDias": f"{media_resolucao:.1f}",
            "totalDenuncias": dados.total_denuncias,
            "ultimaDenuncia": dados.ultima_denuncia_em.isoformat() if dados.ultima_denuncia_em else None,
        },
        # Fatias de exibicao derivadas do score final; nao somam o total.
        breakdown={
            "inclusao": math.floor(score * 0.25),
            "acessibilidade": math.floor(score * 0.2),
            "conflitos": math.floor((1000 - dados.pendencias_abertas * 50) * 0.2),
            "gestao": math.floor(taxa_resolucao * 200),
            "educacao": math.floor(score * 0.15),
        },
        tendencia=Tendencia.ESTAVEL,
    )


def _media_dias_resolucao(denuncias: tuple[DenunciaResolvida, ...]) -> float:
    """Media em dias; 0 para lista vazia. Denuncia sem resolvido_em soma 0 mas conta."""
    if not denuncias:
        return 0.0
    total_dias = sum(
        (d.resolvido_em - d.criado_em).total_seconds() / _SEGUNDOS_POR_DIA
        for d in denuncias
        if d.resolvido_em is not None
    )
    return total_dias / len(denuncias)


def _semanas_silencio(ultima_denuncia_em: datetime | None, agora: datetime) -> int:
    if ultima_denuncia_em is None:
        return SEMANAS_SILENCIO_SEM_DENUNCIA
    return abs(agora - ultima_denuncia_em) // _SEMANA


def _media_avaliacoes_area(visitas: tuple[Visita, ...]) -> float | None:
    """Media das medias por visita (so avaliacoes AREA). None se nenhuma visita avaliada."""
    soma_medias = 0.0
    visitas_avaliadas = 0
    for visita in visitas:
        try:
            notas = [a.nota for a in visita.avaliacoes if a.tipo == TipoAvaliacao.AREA]
            if notas:
                media = sum(notas) / len(notas)  # type: ignore[arg-type]
                soma_medias += media
                visitas_avaliadas += 1
        except (TypeError, AttributeError) as err:
            log(f"Avaliacao malformada ignorada na visita {getattr(visita, 'id', '?')}: {err}", nivel="WARN")
    if visitas_avaliadas == 0:
        return None
    return soma_medias / visitas_avaliadas
