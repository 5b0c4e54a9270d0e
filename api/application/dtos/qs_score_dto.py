# api/application/dtos/qs_score_dto.py
from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from api.domain.qs_score.entities import QSScore


class QSScoreDTO(BaseModel):
    id: str
    empresa_id: str
    area_id: str | None
    score: int
    classificacao: str
    fatores: dict[str, Any]
    breakdown: dict[str, int] | None
    tendencia: str
    calculado_em: str

    @classmethod
    def from_domain(cls, score: QSScore) -> QSScoreDTO:
        return cls(
            id=str(score.id),
            empresa_id=score.empresa_id,
            area_id=score.area_id,
            score=score.score,
            classificacao=score.classificacao.value,
            fatores=score.fatores,
            breakdown=score.breakdown,
            tendencia=score.tendencia.value,
            calculado_em=score.calculado_em.isoformat(),
        )


class RecalculoDTO(BaseModel):
    mensagem: str
    score_empresa: int
