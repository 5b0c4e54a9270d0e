# api/domain/qs_score/score.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .enums import Classificacao, CorRisco, Tendencia

# ADR: Pesos como constante de modulo, nao hardcoded em funcoes.
PESO_TAXA_RESOLUCAO = 350
PESO_FREQUENCIA_VISITAS = 250
PESO_QUALIDADE_AVALIACAO = 200
BONUS_AREA_LIMPA = 50
PENALIDADE_BAIXA_RESOLUCAO = 100
PENALIDADE_SEM_VISITAS = 200
PENALIDADE_POR_PENDENCIA = 50
PENALIDADE_PENDENCIA_MAX = 500
PENALIDADE_POR_PENDENCIA_LIDERANCA = 30
PENALIDADE_PENDENCIA_LIDERANCA_MAX = 300
PONTOS_POR_VISITA = 25
PENALIDADE_SEMANA_SILENCIO = 100
PENALIDADE_MUITAS_DENUNCIAS = 100
BONUS_ALGUMAS_DENUNCIAS = 100
BONUS_RESOLUCAO_RAPIDA = 100  # <= 7 dias
BONUS_RESOLUCAO_MEDIA = 50  # <= 15 dias
PENALIDADE_RESOLUCAO_LENTA = 100  # > 15 dias
PENALIDADE_RESOLUCAO_MUITO_LENTA = 300  # > 30 dias, acumula com a anterior
PENALIDADE_AVALIACAO_BAIXA = 100

TAXA_RESOLUCAO_MINIMA = 0.4  # exclusivo: 0.4 nao penaliza
AVALIACAO_MINIMA = 0.5
LIMITE_DENUNCIAS = 5
DIAS_RESOLUCAO_RAPIDA = 7
DIAS_RESOLUCAO_MEDIA = 15
DIAS_RESOLUCAO_MUITO_LENTA = 30
SEMANAS_SILENCIO_SEM_DENUNCIA = 12

# Unica penalidade sem teto por padrao. None = sem teto.
SILENCIO_PENALIDADE_MAX: int | None = None

JANELA_DIAS = 90
SCORE_MIN = 0
SCORE_MAX = 1000

LIMIARES: tuple[tuple[int, Classificacao], ...] = (
    (800, Classificacao.EXCELENTE),
    (600, Classificacao.BOM),
    (400, Classificacao.ATENCAO),
    (200, Classificacao.RISCO),
)

LIMIAR_VERDE = 600
LIMIAR_AMARELO = 400


@dataclass(frozen=True)
class ResultadoScore:
    """Score calculado para uma area. Imutavel, derivado de DadosArea."""

    score: int
    classificacao: Classificacao
    fatores: dict[str, Any] = field(default_factory=dict)
    breakdown: dict[str, int] | None = None
    tendencia: Tendencia = Tendencia.ESTAVEL


def classificar(score: int) -> Classificacao:
    for limiar, classificacao in LIMIARES:
        if score >= limiar:
            return classificacao
    return Classificacao.CRITICO


def cor_de_risco(score: int) -> CorRisco:
    if score >= LIMIAR_VERDE:
        return CorRisco.VERDE
    if score >= LIMIAR_AMARELO:
        return CorRisco.AMARELO
    return CorRisco.VERMELHO


def limitar(score: int) -> int:
    """Clamp em [0, 1000]."""
    return max(SCORE_MIN, min(SCORE_MAX, score))
