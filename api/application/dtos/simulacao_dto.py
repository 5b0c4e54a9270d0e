# api/application/dtos/simulacao_dto.py
from __future__ import annotations

from pydantic import BaseModel, Field

from api.domain.qs_score.simulacao import AcaoSimulada, ResultadoSimulacao


class AcaoDTO(BaseModel):
    tipo: str
    quantidade: int = Field(default=1, ge=0)


class SimulacaoRequestDTO(BaseModel):
    area_id: str
    acoes: list[AcaoDTO] = []

    def to_domain(self) -> list[AcaoSimulada]:
        return [AcaoSimulada(tipo=a.tipo, quantidade=a.quantidade) for a in self.acoes]


class ImpactoDTO(BaseModel):
    acao: str
    quantidade: int
    impacto: int


class SimulacaoDTO(BaseModel):
    score_atual: int
    classificacao_atual: str
    score_simulado: int
    classificacao_simulada: str
    melhoria: int
    impactos: list[ImpactoDTO]

    @classmethod
    def from_domain(cls, resultado: ResultadoSimulacao) -> SimulacaoDTO:
        return cls(
            score_atual=resultado.score_atual,
            classificacao_atual=resultado.classificacao_atual.value,
            score_simulado=resultado.score_simulado,
            classificacao_simulada=resultado.classificacao_simulada.value,
            melhoria=resultado.melhoria,
            impactos=[
                ImpactoDTO(acao=i.tipo, quantidade=i.quantidade, impacto=i.impacto)
                for i in resultado.impactos
            ],
        )
