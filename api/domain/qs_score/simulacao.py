# api/domain/qs_score/simulacao.py
"""Simulador "e se": impacto fixo por acao sobre o score atual. Funcao pura."""

from __future__ import annotations

from dataclasses import dataclass

from .enums import Classificacao, TipoAcaoSimulada
from .score import classificar, limitar

# Pontos por unidade de acao.
IMPACTO_POR_UNIDADE: dict[TipoAcaoSimulada, int] = {
    TipoAcaoSimulada.RESOLVE_PENDING: 20,
    TipoAcaoSimulada.COMPLETE_COURSE: 15,
}

# Pontos fixos, independem da quantidade.
IMPACTO_FIXO: dict[TipoAcaoSimulada, int] = {
    TipoAcaoSimulada.VISIT: 15,
    TipoAcaoSimulada.MEDIATION: 25,
}


@dataclass(frozen=True)
class AcaoSimulada:
    tipo: str
    quantidade: int = 1


@dataclass(frozen=True)
class ImpactoAcao:
    tipo: str
    quantidade: int
    impacto: int


@dataclass(frozen=True)
class ResultadoSimulacao:
    score_atual: int
    classificacao_atual: Classificacao
    score_simulado: int
    classificacao_simulada: Classificacao
    impactos: tuple[ImpactoAcao, ...]

    @property
    def melhoria(self) -> int:
        return self.score_simulado - self.score_atual


def impacto_da_acao(acao: AcaoSimulada) -> int:
    """Tipo desconhecido = impacto 0 (nao e erro)."""
    try:
        tipo = TipoAcaoSimulada(acao.tipo)
    except ValueError:
        return 0
    if tipo in IMPACTO_POR_UNIDADE:
        return IMPACTO_POR_UNIDADE[tipo] * acao.quantidade
    return IMPACTO_FIXO.get(tipo, 0)


def simular_impacto(score_atual: int, acoes: list[AcaoSimulada]) -> ResultadoSimulacao:
    simulado = score_atual
    impactos: list[ImpactoAcao] = []
    for acao in acoes:
        impacto = impacto_da_acao(acao)
        simulado += impacto
        impactos.append(ImpactoAcao(tipo=acao.tipo, quantidade=acao.quantidade, impacto=impacto))

    simulado = limitar(simulado)
    return ResultadoSimulacao(
        score_atual=score_atual,
        classificacao_atual=classificar(score_atual),
        score_simulado=simulado,
        classificacao_simulada=classificar(simulado),
        impactos=tuple(impactos),
    )
