# api/domain/qs_score/entities.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .enums import Classificacao, Tendencia


@dataclass(frozen=True)
class Avaliacao:
    tipo: str
    nota: float | None  # None = dado malformado, a visita e ignorada no calculo


@dataclass(frozen=True)
class Visita:
    id: str
    avaliacoes: tuple[Avaliacao, ...] = ()


@dataclass(frozen=True)
class DenunciaResolvida:
    criado_em: datetime
    resolvido_em: datetime | None


@dataclass(frozen=True)
class DadosArea:
    """Snapshot de atividade de uma area. Unica entrada do calculo de score."""

    pendencias_abertas: int = 0
    pendencias_resolvidas: int = 0
    visitas: tuple[Visita, ...] = ()
    colaboradores: int = 0
    denuncias_resolvidas: tuple[DenunciaResolvida, ...] = ()
    total_denuncias: int = 0
    pendencias_lideranca: int = 0
    ultima_denuncia_em: datetime | None = None


@dataclass(frozen=True)
class Area:
    id: str
    nome: str
    setor_id: str
    setor_nome: str
    empresa_id: str


@dataclass(frozen=True)
class QSScore:
    """Linha persistida. Nunca atualizada: novo calculo = nova linha.
    area_id None = agregado da empresa."""

    empresa_id: str
    area_id: str | None
    score: int
    classificacao: Classificacao
    fatores: dict[str, Any]
    breakdown: dict[str, int] | None
    tendencia: Tendencia
    calculado_em: datetime
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass(frozen=True)
class ConfiguracaoSistema:
    empresa_id: str
    qs_score_habilitado: bool = False
    mapa_risco_habilitado: bool = False
