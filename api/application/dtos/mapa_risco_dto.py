# api/application/dtos/mapa_risco_dto.py
from typing import Any

from pydantic import BaseModel


class AreaRiscoDTO(BaseModel):
    area_id: str
    area_nome: str
    setor_id: str
    setor_nome: str
    score: int
    classificacao: str
    cor: str
    fatores: dict[str, Any]


class ResumoMapaDTO(BaseModel):
    total: int
    verde: int
    amarelo: int
    vermelho: int
    score_medio: int


class MapaRiscoDTO(BaseModel):
    empresa_id: str
    calculado_em: str
    areas: list[AreaRiscoDTO]
    resumo: ResumoMapaDTO
