# api/application/dtos/painel_dto.py
from pydantic import BaseModel


class PontoHistoricoDTO(BaseModel):
    mes: str
    score: int
    calculado_em: str


class AreaPainelDTO(BaseModel):
    id: str
    nome: str
    score: int
    classificacao: str


class PainelDTO(BaseModel):
    score: int
    classificacao: str
    calculado_em: str
    historico: list[PontoHistoricoDTO]
    areas: list[AreaPainelDTO]
    areas_criticas: int
